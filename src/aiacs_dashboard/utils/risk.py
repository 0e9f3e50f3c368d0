"""
Risk level helpers for detection events.

A detection's risk is derived from how many birds (bounding boxes) were in
the frame. Used by the recent detections list and the bird activity panel.
"""

from typing import Literal

RiskLevel = Literal["low", "medium", "high"]

RISK_COLORS: dict[str, dict[str, str]] = {
    "high": {
        "primary": "#FF5252",
        "secondary": "#FF8A80",
        "bg": "rgba(255, 82, 82, 0.08)",
    },
    "medium": {
        "primary": "#FFB74D",
        "secondary": "#FFCC80",
        "bg": "rgba(255, 183, 77, 0.08)",
    },
    "low": {
        "primary": "#69F0AE",
        "secondary": "#B9F6CA",
        "bg": "rgba(105, 240, 174, 0.08)",
    },
}

_RISK_TEXT = {
    "ko": {"low": "관찰", "medium": "주의", "high": "경고"},
    "en": {"low": "Observe", "medium": "Caution", "high": "Warning"},
}


def get_risk_level(bb_count: int) -> RiskLevel:
    """Map a bounding box count to a risk level."""
    if bb_count > 5:
        return "high"
    if bb_count > 2:
        return "medium"
    return "low"


def get_risk_text(level: RiskLevel, language: str = "ko") -> str:
    """Human label for a risk level."""
    texts = _RISK_TEXT.get(language, _RISK_TEXT["en"])
    return texts[level]


def get_risk_color(level: RiskLevel) -> str:
    return RISK_COLORS[level]["primary"]
