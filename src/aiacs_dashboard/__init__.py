"""
AIACS Dashboard

Monitoring dashboard for the AI Anti-Collision System: bird detections
around wind turbines, plotted on a camera-sector radar and summarized in
weather, activity and statistics panels.

Package structure:
  radar/      - Polar plot engine (sectors, point placement, SVG rendering)
  api/        - REST backend client and endpoint wrappers
  dashboard/  - Panel state, refresh scheduling, HTML output
  config/     - Configuration loading and validation
  models/     - Backend and panel record types
  utils/      - Constants, risk levels, translations, time formatting
"""

__version__ = "1.0.0"

from .api import BackendClient, BackendError, TokenStore
from .config import (
    ConfigValidationError,
    ValidationResult,
    load_config,
    validate_config_full,
)
from .dashboard import Dashboard
from .models import DEFAULT_CAMERA_SECTORS, CameraSector
from .radar import (
    DirectionPlot,
    PlotLayout,
    classify_direction,
    group_by_direction,
    render_radar_svg,
)
from .settings import AppSettings, load_settings

__all__ = [
    "DEFAULT_CAMERA_SECTORS",
    "AppSettings",
    # Backend
    "BackendClient",
    "BackendError",
    "CameraSector",
    # Config
    "ConfigValidationError",
    # Dashboard
    "Dashboard",
    # Radar
    "DirectionPlot",
    "PlotLayout",
    "TokenStore",
    "ValidationResult",
    "classify_direction",
    "group_by_direction",
    "load_config",
    "load_settings",
    "render_radar_svg",
    "validate_config_full",
]
