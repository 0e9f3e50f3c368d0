"""
Configuration loading and validation.

- validate_config_full: Comprehensive validation with errors/warnings
- load_config / load_config_with_env: YAML loading with environment overrides
- parse_camera_sectors / parse_plot_layout: Config -> radar engine types

Pydantic schemas available for type-safe validation:
- Config: Complete configuration schema
- validate_config_pydantic: Validate and parse config to Pydantic model
"""

from .geometry import parse_camera_sectors, parse_plot_layout, parse_site_positions
from .loader import (
    Colors,
    # Exception
    ConfigValidationError,
    # Config loading
    find_config_file,
    load_config,
    load_config_with_env,
    # Display
    print_validation_result,
    read_config_file,
)
from .schemas import (
    BackendConfig,
    CameraConfig,
    Config,
    # Sub-schemas for type hints
    PollingConfig,
    RadarConfig,
    validate_config_pydantic,
)
from .validator import (
    ValidationResult,
    validate_config_full,
)

__all__ = [
    "BackendConfig",
    "CameraConfig",
    "Colors",
    # Pydantic validation
    "Config",
    # Exception
    "ConfigValidationError",
    "PollingConfig",
    "RadarConfig",
    "ValidationResult",
    # Config loading
    "find_config_file",
    "load_config",
    "load_config_with_env",
    # Geometry
    "parse_camera_sectors",
    "parse_plot_layout",
    "parse_site_positions",
    # Display
    "print_validation_result",
    "read_config_file",
    # Validation
    "validate_config_full",
    "validate_config_pydantic",
]
