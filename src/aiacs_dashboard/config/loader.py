"""
Configuration Loader - find, read, override and report on config files.

Provides:
- find_config_file: Locate config.yaml in the standard search paths
- load_config: Read YAML (with pointer files), apply env overrides, validate
- load_config_with_env: Apply environment variable overrides
- print_validation_result: Terraform-like validation report
"""

import logging
import os
import sys
from pathlib import Path

import yaml

from ..utils.constants import ENV_API_BASE_URL, ENV_API_TOKEN
from .validator import ValidationResult, validate_config_full

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config.yaml"


class ConfigValidationError(Exception):
    """Raised when config validation fails."""


# ANSI color codes for terminal output
class Colors:
    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    @classmethod
    def disable(cls):
        """Disable colors for non-TTY output."""
        cls.GREEN = cls.RED = cls.YELLOW = ""
        cls.CYAN = cls.GRAY = cls.BOLD = cls.RESET = ""


# Disable colors if not a TTY
if not sys.stdout.isatty():
    Colors.disable()


def default_search_paths() -> list[Path]:
    return [
        Path.cwd() / DEFAULT_CONFIG_NAME,
        Path.home() / ".config" / "aiacs-dashboard" / DEFAULT_CONFIG_NAME,
    ]


def find_config_file(
    config_path: str = DEFAULT_CONFIG_NAME, search_paths: list[Path] | None = None
) -> Path:
    """
    Find config file in standard locations.

    Search order:
    1. Specified path (if provided and not default)
    2. Current directory (config.yaml)
    3. ~/.config/aiacs-dashboard/config.yaml

    Raises:
        SystemExit: If no config file found
    """
    if config_path != DEFAULT_CONFIG_NAME:
        specified = Path(config_path)
        if specified.exists():
            return specified
        logger.error(f"Specified config file not found: {config_path}")
        sys.exit(1)

    search_paths = search_paths or default_search_paths()
    for path in search_paths:
        if path.exists():
            logger.info(f"Using config: {path}")
            return path

    logger.error("No config file found in any of these locations:")
    for path in search_paths:
        logger.error(f"  - {path}")
    logger.error("Copy config.yaml from the repository root and set backend.base_url")
    sys.exit(1)


def read_config_file(config_file: Path) -> dict:
    """
    Read a YAML config file.

    Supports pointer files: if the file only contains `use: other.yaml`,
    that file (relative to the pointer) is read instead.

    Raises:
        ConfigValidationError: Invalid YAML or not a mapping
    """
    try:
        with open(config_file, encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if config and isinstance(config, dict) and list(config.keys()) == ["use"]:
            pointer_path = Path(config_file).parent / config["use"]
            logger.info(f"Config pointer: {config_file} -> {config['use']}")
            with open(pointer_path, encoding="utf-8") as f:
                config = yaml.safe_load(f)
            config_file = pointer_path

    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in {config_file}: {e}") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigValidationError(f"Config must be a mapping: {config_file}")

    logger.info(f"Configuration loaded from {config_file}")
    return config


def load_config_with_env(config: dict) -> dict:
    """
    Apply environment variable overrides to config.

    AIACS_API_BASE_URL replaces backend.base_url, AIACS_API_TOKEN sets
    backend.token.
    """
    if not config.get("backend"):
        config["backend"] = {}
    backend = config["backend"]

    if ENV_API_BASE_URL in os.environ:
        backend["base_url"] = os.environ[ENV_API_BASE_URL]
        logger.info(f"Using backend URL from environment: {ENV_API_BASE_URL}")

    if ENV_API_TOKEN in os.environ:
        backend["token"] = os.environ[ENV_API_TOKEN]
        logger.info(f"Using backend token from environment: {ENV_API_TOKEN}")

    return config


def load_config(config_path: str = DEFAULT_CONFIG_NAME, skip_validation: bool = False) -> dict:
    """
    Load, override and optionally validate the configuration.

    Raises:
        SystemExit: If config cannot be loaded or is invalid
    """
    config_file = find_config_file(config_path)

    try:
        config = read_config_file(config_file)
    except (ConfigValidationError, OSError) as e:
        logger.error(str(e))
        sys.exit(1)

    config = load_config_with_env(config)

    if not skip_validation:
        result = validate_config_full(config)
        if not result.valid:
            print_validation_result(result)
            sys.exit(1)
        for warning in result.warnings:
            logger.warning(warning)
        logger.info("Configuration validated")

    return config


def print_validation_result(result: ValidationResult) -> None:
    """Print validation result in Terraform-like format."""
    print()
    print(f"{Colors.BOLD}Configuration Validation{Colors.RESET}")
    print("=" * 60)

    if result.valid:
        print(f"\n{Colors.GREEN}✓ Configuration is valid{Colors.RESET}")
    else:
        print(f"\n{Colors.RED}✗ Configuration has errors{Colors.RESET}")

    if result.errors:
        print(f"\n{Colors.RED}Errors:{Colors.RESET}")
        for error in result.errors:
            print(f"  {Colors.RED}✗{Colors.RESET} {error}")

    if result.warnings:
        print(f"\n{Colors.YELLOW}Warnings:{Colors.RESET}")
        for warning in result.warnings:
            print(f"  {Colors.YELLOW}!{Colors.RESET} {warning}")

    if result.valid and result.derived:
        print(f"\n{Colors.CYAN}Derived Configuration:{Colors.RESET}")

        if "base_url" in result.derived:
            print(f"  Backend: {result.derived['base_url']}")
        if "cameras" in result.derived:
            print(
                f"  Cameras: {result.derived['cameras']} "
                f"({result.derived.get('sector_coverage', 0):g} deg of radar coverage)"
            )
        polling = result.derived.get("polling")
        if polling:
            print("  Polling: " + ", ".join(f"{k} {v}s" for k, v in polling.items()))

    print()
