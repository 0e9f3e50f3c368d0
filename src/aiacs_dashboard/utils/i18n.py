"""Two-language (Korean/English) label helpers."""

LANGUAGE_NAMES = {
    "ko": "한국어",
    "en": "English",
}


def translate(korean: str, english: str, language: str) -> str:
    return korean if language == "ko" else english


def language_display_name(language_code: str) -> str:
    return LANGUAGE_NAMES.get(language_code, language_code)
