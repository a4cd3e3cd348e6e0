"""Message catalogue for violation messages and outgoing mail copy.

Loads ``locales/en.yml`` once at startup, flattens nested sections into dotted
keys (``violations.project.locked``) and exposes ``t(key, **kwargs)``. A missing
key is returned unchanged so an untranslated message is still identifiable.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_LOCK = threading.RLock()
_KEYS: dict[str, str] = {}
_LOCALE_FILE = Path(__file__).resolve().parents[3] / 'locales' / 'en.yml'
_LAST_MTIME: float | None = None


def _flatten(prefix: str, data: dict[str, Any], out: dict[str, str]) -> None:
    for name, value in data.items():
        key = f'{prefix}.{name}' if prefix else str(name)
        if isinstance(value, dict):
            _flatten(key, value, out)
        else:
            out[key] = value if isinstance(value, str) else str(value)


def _load(force: bool = False) -> None:
    global _KEYS, _LAST_MTIME
    if not _LOCALE_FILE.exists():
        logger.warning('message catalogue missing: %s', _LOCALE_FILE)
        return
    mtime = _LOCALE_FILE.stat().st_mtime
    if not force and _LAST_MTIME == mtime:
        return
    with _LOCK:
        with _LOCALE_FILE.open('r', encoding='utf-8') as fh:
            raw = yaml.safe_load(fh) or {}
        flat: dict[str, str] = {}
        if isinstance(raw, dict):
            _flatten('', raw, flat)
        _KEYS = flat
        _LAST_MTIME = mtime


def t(key: str, **kwargs: Any) -> str:
    """Look up ``key`` and interpolate ``kwargs`` into it.

    Placeholders without a matching kwarg leave the message unformatted.
    """
    if not _KEYS:
        _load()
    msg = _KEYS.get(key, key)
    if not kwargs:
        return msg
    try:
        return msg.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return msg


def has(key: str) -> bool:
    if not _KEYS:
        _load()
    return key in _KEYS


def ready() -> None:
    """Initialize key store (call from AppConfig.ready)."""
    try:
        _load(force=True)
    except (OSError, yaml.YAMLError):
        logger.exception('failed to load message catalogue %s', _LOCALE_FILE)


__all__ = ['t', 'has', 'ready']
