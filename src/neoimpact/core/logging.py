"""
Logging configuration.

We use a YAML logging config (`src/neoimpact/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `NEOIMPACT_LOG_LEVEL`).
"""

from __future__ import annotations

import logging.config

from neoimpact.config.settings import get_logging_config, get_settings


def configure_logging() -> None:
    """Configure the Python logging system from packaged YAML config + settings."""
    level = get_settings().app.log_level.upper()
    config = dict(get_logging_config())

    config["root"] = {**config.get("root", {}), "level": level}
    handlers = {}
    for name, handler in config.get("handlers", {}).items():
        if isinstance(handler, dict) and "level" in handler:
            handler = {**handler, "level": level}
        handlers[name] = handler
    config["handlers"] = handlers

    logging.config.dictConfig(config)
