# src/neoimpact/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and configures CORS for the map frontend.
Route handlers live in `neoimpact.api.routes`.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from neoimpact.core.logging import configure_logging

from .routes import router

configure_logging()

app = FastAPI(title="NEO Impact API", version="0.1.0")

# CORS (dev-friendly): allow a local map frontend to call this API.
# - NEOIMPACT_CORS_ORIGINS="http://localhost:3000,http://127.0.0.1:3000"
# - NEOIMPACT_CORS_ALLOW_LOCAL=0 disables the default localhost allowance
cors_origins = [s.strip() for s in os.getenv("NEOIMPACT_CORS_ORIGINS", "").split(",") if s.strip()]
cors_allow_local = os.getenv("NEOIMPACT_CORS_ALLOW_LOCAL", "1").strip().lower() in {"1", "true", "yes", "y"}
cors_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if cors_allow_local and not cors_origins else ""
if cors_origins or cors_origin_regex:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_origin_regex=cors_origin_regex or None,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

app.include_router(router)
