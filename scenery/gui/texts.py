# scenery/gui/texts.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"
FALLBACK_LOCALE = "en"
CURRENT_LOCALE = DEFAULT_LOCALE

_LOCALES_DIR = Path(__file__).with_name("locales")
_TEXT_CACHE: dict[str, dict[str, str]] = {}


def _load_locale(locale: str) -> dict[str, str]:
    if locale not in _TEXT_CACHE:
        _TEXT_CACHE[locale] = _read_locale_file(_LOCALES_DIR / f"{locale}.json")
    return _TEXT_CACHE[locale]


def _read_locale_file(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("could not read locale file %s", path)
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(k): str(v) for k, v in data.items()}


def list_locales() -> list[str]:
    if not _LOCALES_DIR.exists():
        return [DEFAULT_LOCALE]
    return sorted(p.stem for p in _LOCALES_DIR.glob("*.json"))


def set_locale(locale: str) -> str:
    """Switch locale; unknown locales fall back to the default one."""
    global CURRENT_LOCALE
    CURRENT_LOCALE = locale if locale in list_locales() else DEFAULT_LOCALE
    return CURRENT_LOCALE


def tr(key: str, **kwargs: Any) -> str:
    template = (
        _load_locale(CURRENT_LOCALE).get(key)
        or _load_locale(FALLBACK_LOCALE).get(key)
        or key
    )
    if not kwargs:
        return template
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return template
