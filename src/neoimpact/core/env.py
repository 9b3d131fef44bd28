"""
Environment and project-root resolution.

`NASA_API_KEY` normally comes from a repo-local `.env`, and the snapshot/cache paths in
`defaults.yaml` are relative. uvicorn, the CLI and pytest may all start from different
working directories, so both are resolved against one project root:

- `get_project_root()`: `NEOIMPACT_PROJECT_ROOT`, else the directory of `NEOIMPACT_ENV_FILE`,
  else the first ancestor (of cwd, then of this package) carrying a root marker
- `load_dotenv_if_present()`: load `.env` once without overriding the process env
- `resolve_project_path()`: anchor relative paths at the project root
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Checked in order at each ancestor directory.
_ROOT_MARKERS = (".env", ".git", "pyproject.toml", "src/neoimpact")


def _is_project_root(candidate: Path) -> bool:
    return any((candidate / marker).exists() for marker in _ROOT_MARKERS)


def _find_root_above(start: Path) -> Path | None:
    start = start.resolve()
    return next((p for p in (start, *start.parents) if _is_project_root(p)), None)


def _env_file_override() -> Path | None:
    value = os.getenv("NEOIMPACT_ENV_FILE")
    return Path(value).expanduser().resolve() if value else None


@lru_cache
def get_project_root() -> Path:
    """Best-guess project root (cached for the process)."""
    explicit_root = os.getenv("NEOIMPACT_PROJECT_ROOT")
    if explicit_root:
        return Path(explicit_root).expanduser().resolve()

    env_file = _env_file_override()
    if env_file is not None:
        return env_file.parent

    # Installed as a wheel and run from elsewhere: fall back to the package location.
    found = _find_root_above(Path.cwd()) or _find_root_above(Path(__file__).parent)
    return found or Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project's `.env` (or `NEOIMPACT_ENV_FILE`) once; return the file used."""
    env_path = _env_file_override() or get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a possibly-relative path against the project root."""
    p = Path(path).expanduser()
    return p if p.is_absolute() else (get_project_root() / p).resolve()
