"""Locale names and locale-aware path helpers."""

from __future__ import annotations

import pathlib
from typing import Dict, Optional, Sequence, Tuple

LOCALE_PLACEHOLDER = "%locale%"

# Locale code -> (native name, English name).
LANGUAGE_NAMES: Dict[str, Tuple[str, str]] = {
    "af-ZA": ("Afrikaans", "Afrikaans"),
    "ar": ("العربية", "Arabic"),
    "bg-BG": ("Български", "Bulgarian"),
    "ca-AD": ("Català", "Catalan"),
    "cs-CZ": ("Čeština", "Czech"),
    "cy-GB": ("Cymraeg", "Welsh"),
    "da-DK": ("Dansk", "Danish"),
    "de-AT": ("Deutsch (Österreich)", "German (Austria)"),
    "de-CH": ("Deutsch (Schweiz)", "German (Switzerland)"),
    "de-DE": ("Deutsch (Deutschland)", "German (Germany)"),
    "el-GR": ("Ελληνικά", "Greek"),
    "en-GB": ("English (UK)", "English (UK)"),
    "en-US": ("English (US)", "English (US)"),
    "es-CL": ("Español (Chile)", "Spanish (Chile)"),
    "es-ES": ("Español (España)", "Spanish (Spain)"),
    "es-MX": ("Español (México)", "Spanish (Mexico)"),
    "et-EE": ("Eesti keel", "Estonian"),
    "eu": ("Euskara", "Basque"),
    "fa-IR": ("فارسی", "Persian"),
    "fi-FI": ("Suomi", "Finnish"),
    "fr-CA": ("Français (Canada)", "French (Canada)"),
    "fr-FR": ("Français (France)", "French (France)"),
    "gl-ES": ("Galego (Spain)", "Galician (Spain)"),
    "he-IL": ("עברית", "Hebrew"),
    "hi-IN": ("हिंदी", "Hindi"),
    "hr-HR": ("Hrvatski", "Croatian"),
    "hu-HU": ("Magyar", "Hungarian"),
    "id-ID": ("Bahasa Indonesia", "Indonesian"),
    "is-IS": ("Íslenska", "Icelandic"),
    "it-IT": ("Italiano", "Italian"),
    "ja-JP": ("日本語", "Japanese"),
    "km-KH": ("ភាសាខ្មែរ", "Khmer"),
    "ko-KR": ("한국어", "Korean"),
    "la": ("Latina", "Latin"),
    "lt-LT": ("Lietuvių kalba", "Lithuanian"),
    "lv-LV": ("Latviešu", "Latvian"),
    "mn-MN": ("Монгол", "Mongolian"),
    "nb-NO": ("Norsk bokmål", "Norwegian (Bokmål)"),
    "nl-NL": ("Nederlands", "Dutch"),
    "nn-NO": ("Norsk nynorsk", "Norwegian (Nynorsk)"),
    "pa-PK": ("پنجابی (شاہ‌مکھی)", "Punjabi (Shahmukhi)"),
    "pl-PL": ("Polski", "Polish"),
    "pt-BR": ("Português (Brasil)", "Portuguese (Brazil)"),
    "pt-PT": ("Português (Portugal)", "Portuguese (Portugal)"),
    "ro-RO": ("Română", "Romanian"),
    "ru-RU": ("Русский", "Russian"),
    "sk-SK": ("Slovenčina", "Slovak"),
    "sl-SI": ("Slovenščina", "Slovenian"),
    "sr-RS": ("Српски / Srpski", "Serbian"),
    "sv-SE": ("Svenska", "Swedish"),
    "th-TH": ("ไทย", "Thai"),
    "tr-TR": ("Türkçe", "Turkish"),
    "uk-UA": ("Українська", "Ukrainian"),
    "vi-VN": ("Tiếng Việt", "Vietnamese"),
    "zh-CN": ("中文 (中国大陆)", "Chinese (PRC)"),
    "zh-TW": ("中文 (台灣)", "Chinese (Taiwan)"),
}


def is_known_locale(locale: str) -> bool:
    return locale in LANGUAGE_NAMES


def language_display_name(locale: str) -> str:
    """Return the English display name used in provider prompts."""

    names = LANGUAGE_NAMES.get(locale)
    return names[1] if names else locale


def locale_from_path(path: str, locales: Sequence[str]) -> Optional[str]:
    """Return the first configured locale that occurs in ``path``."""

    for locale in locales:
        if locale in path:
            return locale
    return None


def detect_source_locale(source: str, locales: Sequence[str]) -> Optional[str]:
    """Guess the source catalog's own locale from its configured path."""

    return locale_from_path(source, locales)


def resolve_translation_path(
    base_path: pathlib.Path,
    template: str,
    locale: str,
) -> pathlib.Path:
    """Substitute the locale placeholder and anchor the path at ``base_path``."""

    relative = template.replace(LOCALE_PLACEHOLDER, locale)
    return base_path / relative
