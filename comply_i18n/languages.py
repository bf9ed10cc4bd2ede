"""Language names used when addressing providers.

Codes are ISO 639-1 (``es``) or BCP 47 language plus region (``pt-BR``).
"""

from __future__ import annotations

from typing import Dict, Optional

ISO_639_1 = {
    "ar": "Arabic",
    "bg": "Bulgarian",
    "ca": "Catalan",
    "cs": "Czech",
    "da": "Danish",
    "de": "German",
    "el": "Greek",
    "en": "English",
    "es": "Spanish",
    "et": "Estonian",
    "fa": "Persian",
    "fi": "Finnish",
    "fr": "French",
    "he": "Hebrew",
    "hi": "Hindi",
    "hr": "Croatian",
    "hu": "Hungarian",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "lt": "Lithuanian",
    "lv": "Latvian",
    "ms": "Malay",
    "nb": "Norwegian Bokmål",
    "nl": "Dutch",
    "no": "Norwegian",
    "pl": "Polish",
    "pt": "Portuguese",
    "ro": "Romanian",
    "ru": "Russian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "sr": "Serbian",
    "sv": "Swedish",
    "th": "Thai",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "zh": "Chinese",
}

BCP_47_VARIANTS = {
    "en-US": "English (United States)",
    "en-GB": "English (United Kingdom)",
    "es-ES": "Spanish (Spain)",
    "es-MX": "Spanish (Mexico)",
    "pt-BR": "Portuguese (Brazil)",
    "pt-PT": "Portuguese (Portugal)",
    "fr-FR": "French (France)",
    "fr-CA": "French (Canada)",
    "de-DE": "German (Germany)",
    "de-CH": "German (Switzerland)",
    "zh-CN": "Chinese (Simplified, China)",
    "zh-TW": "Chinese (Traditional, Taiwan)",
}

ALL_LANGUAGE_CODES = {**ISO_639_1, **BCP_47_VARIANTS}


def get_language_name(code: str) -> Optional[str]:
    """Return the English name for ``code``, or ``None`` when unknown.

    Region-qualified codes that are not listed fall back to their base
    language, so ``es-AR`` resolves to ``Spanish``.
    """

    if code in ALL_LANGUAGE_CODES:
        return ALL_LANGUAGE_CODES[code]
    return ISO_639_1.get(code.split("-")[0])


def describe_language(code: str) -> str:
    """Return "Name (code)" for prompts, or the bare code when unknown."""

    name = get_language_name(code)
    if name is None:
        return code
    return f"{name} ({code})"


def get_all_language_codes() -> Dict[str, str]:
    """Get all known language codes mapped to their names."""

    return ALL_LANGUAGE_CODES.copy()
