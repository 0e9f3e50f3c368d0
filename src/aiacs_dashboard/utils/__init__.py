"""
Shared helpers: constants, time formatting, risk levels, translations,
history statistics and generated sample data.
"""

from .analysis import DetectionStats, calculate_detection_stats, generate_page_numbers
from .i18n import language_display_name, translate
from .risk import get_risk_color, get_risk_level, get_risk_text
from .timefmt import (
    default_date_filter,
    extract_time_from_timestamp,
    format_datetime,
    validate_date_range,
)

__all__ = [
    "DetectionStats",
    "calculate_detection_stats",
    "default_date_filter",
    "extract_time_from_timestamp",
    "format_datetime",
    "generate_page_numbers",
    "get_risk_color",
    "get_risk_level",
    "get_risk_text",
    "language_display_name",
    "translate",
    "validate_date_range",
]
