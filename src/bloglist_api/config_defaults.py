"""Layered configuration lookup for bloglist-api.

Order of precedence for every setting:
1. Process environment (`LOG_LEVEL=DEBUG gunicorn ...`)
2. `.env` in the repo root or working directory (local overrides)
3. `.env.defaults` (version-controlled catalog of every key)
4. The fallback passed by the caller
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict

TRUTHY_VALUES = ('true', '1', 'yes')


def _candidate_dirs() -> list[Path]:
    repo_root = Path(__file__).resolve().parent.parent.parent
    dirs = [repo_root]
    # cwd() raises if the working directory was removed underneath us
    try:
        cwd = Path.cwd()
        if cwd.resolve() != repo_root.resolve():
            dirs.append(cwd)
    except (OSError, FileNotFoundError):
        pass
    return dirs


@lru_cache(maxsize=1)
def load_defaults() -> Dict[str, str]:
    """Merge `.env.defaults` files, then overlay `.env` files.

    Returns an empty dict when neither file exists, which is the normal
    case in production where everything comes from the environment.
    """
    dirs = _candidate_dirs()
    merged: Dict[str, str] = {}
    for filename in ('.env.defaults', '.env'):
        for directory in dirs:
            path = directory / filename
            if path.exists():
                merged.update(_parse_env_file(path))
    return merged


def get_default(key: str, fallback: str | None = None) -> str | None:
    """Return the file-configured default for a key (or fallback)."""
    return load_defaults().get(key, fallback)


def get_setting(key: str, fallback: str | None = None) -> str | None:
    """Environment variable first, then .env/.env.defaults, then fallback."""
    value = os.environ.get(key)
    if value:
        return value
    return get_default(key, fallback)


def get_int_setting(key: str, fallback: int) -> int:
    return int(get_setting(key, str(fallback)))


def get_bool_setting(key: str, fallback: bool = False) -> bool:
    value = get_setting(key)
    if value is None:
        return fallback
    return value.lower() in TRUTHY_VALUES


def _parse_env_file(env_path: Path) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for raw in env_path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
            value = value[1:-1]
        values[key.strip()] = value
    return values
