"""Notification texts, loaded from the bundled locales/*.json files."""

import json
from pathlib import Path
from typing import Any

SUPPORTED_LANGUAGES = {
    "pt": "Português",
    "en": "English",
}

# The storefront speaks Portuguese
DEFAULT_LANGUAGE = "pt"

LOCALES_PATH = Path(__file__).parent.parent / "locales"

# Cache for loaded translations
_translations: dict[str, dict[str, Any]] = {}


def _load_translations(lang: str) -> dict[str, Any]:
    """Load translations for a language"""
    if lang in _translations:
        return _translations[lang]

    file_path = LOCALES_PATH / f"{lang}.json"

    if not file_path.exists():
        if lang != DEFAULT_LANGUAGE:
            return _load_translations(DEFAULT_LANGUAGE)
        return {}

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        return {}
    _translations[lang] = data
    return data


def _lookup(translations: dict[str, Any], key: str) -> Any:
    current: Any = translations
    try:
        for part in key.split("."):
            current = current[part]
    except (KeyError, TypeError):
        return None
    return current


def get_text(key: str, lang: str = DEFAULT_LANGUAGE, default: str | None = None, **kwargs) -> str:
    """
    Get translated text by key.

    Args:
        key: Translation key (e.g., "cart.stock_exceeded")
        lang: Language code (e.g., "pt", "en", "pt-BR")
        default: Default value if key not found (instead of returning key)
        **kwargs: Variables to format into the string

    Returns:
        Translated string or key/default if not found
    """
    lang = detect_language(lang)

    text = _lookup(_load_translations(lang), key)

    # Fall back to the default language if key not found
    if text is None and lang != DEFAULT_LANGUAGE:
        text = _lookup(_load_translations(DEFAULT_LANGUAGE), key)

    if not isinstance(text, str):
        return default if default is not None else key

    if kwargs:
        try:
            return text.format(**kwargs)
        except (KeyError, ValueError, AttributeError):
            return text

    return text


def detect_language(language_code: str | None) -> str:
    """Normalize a language code ("pt-BR" -> "pt") to a supported one."""
    if not language_code:
        return DEFAULT_LANGUAGE

    lang = language_code.split("-")[0].lower()
    return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE

