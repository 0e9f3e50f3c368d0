"""
Persisted user settings - radar, weather and alert toggles and UI language.

Stored as JSON (default ~/.config/aiacs-dashboard/settings.json). A missing
or unreadable file yields defaults. `is_initialized` marks a completed load
and is never written to disk.
"""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import questionary
from questionary import Choice, Style

from .utils.i18n import LANGUAGE_NAMES, language_display_name

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "aiacs-dashboard" / "settings.json"

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("instruction", "fg:gray"),
    ]
)


@dataclass
class AppSettings:
    radar_enabled: bool = True
    weather_enabled: bool = True
    alert_sound_enabled: bool = True
    language: str = "ko"
    is_initialized: bool = False

    def to_dict(self) -> dict:
        """Persisted fields only."""
        data = asdict(self)
        del data["is_initialized"]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Build from stored data, ignoring unknown and non-persisted keys."""
        known = {f.name for f in fields(cls)} - {"is_initialized"}
        settings = cls(**{k: v for k, v in data.items() if k in known})
        if settings.language not in LANGUAGE_NAMES:
            logger.warning(f"Unknown language '{settings.language}', using 'ko'")
            settings.language = "ko"
        return settings


def load_settings(path: Path | str = DEFAULT_SETTINGS_PATH) -> AppSettings:
    """Load settings, falling back to defaults on a missing or corrupt file."""
    path = Path(path)
    settings = AppSettings()

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("settings file is not a JSON object")
            settings = AppSettings.from_dict(data)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Could not read settings from {path}, using defaults: {e}")
            settings = AppSettings()

    settings.is_initialized = True
    return settings


def save_settings(settings: AppSettings, path: Path | str = DEFAULT_SETTINGS_PATH) -> None:
    """Write settings atomically (temp file + rename)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".settings-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.info(f"Settings saved to {path}")


def run_settings_editor(path: Path | str = DEFAULT_SETTINGS_PATH) -> AppSettings | None:
    """
    Interactive settings editor.

    Returns the saved settings, or None if the user cancelled.
    """
    settings = load_settings(path)

    radar = questionary.confirm(
        "Show the direction radar?", default=settings.radar_enabled, style=PROMPT_STYLE
    ).ask()
    if radar is None:
        return None

    weather = questionary.confirm(
        "Show the weather panel?", default=settings.weather_enabled, style=PROMPT_STYLE
    ).ask()
    if weather is None:
        return None

    alert_sound = questionary.confirm(
        "Play alert sounds?", default=settings.alert_sound_enabled, style=PROMPT_STYLE
    ).ask()
    if alert_sound is None:
        return None

    language = questionary.select(
        "Language:",
        choices=[
            Choice(title=language_display_name(code), value=code) for code in LANGUAGE_NAMES
        ],
        default=settings.language,
        style=PROMPT_STYLE,
    ).ask()
    if language is None:
        return None

    settings.radar_enabled = radar
    settings.weather_enabled = weather
    settings.alert_sound_enabled = alert_sound
    settings.language = language

    save_settings(settings, path)
    return settings
