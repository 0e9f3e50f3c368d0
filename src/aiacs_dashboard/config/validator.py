"""
Configuration Validator - Validates config syntax and semantic correctness.

Provides comprehensive validation with detailed error messages.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..models import DEFAULT_CAMERA_SECTORS

logger = logging.getLogger(__name__)

POLLING_KEYS = (
    "clock",
    "left_panel",
    "detections",
    "right_panel",
    "direction_plot",
    "history",
)
CAMERA_REQUIRED = ("id", "name", "color", "min_angle", "max_angle", "direction")


@dataclass
class ValidationResult:
    """Result of config validation."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    derived: dict[str, Any] = field(default_factory=dict)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config_full(config: dict) -> ValidationResult:
    """
    Comprehensive config validation with detailed error messages.

    Args:
        config: Configuration dictionary to validate

    Returns:
        ValidationResult with errors, warnings, and derived values
        (camera count, sector coverage, polling intervals).
    """
    result = ValidationResult(valid=True)

    if not isinstance(config, dict):
        result.errors.append("Configuration must be a mapping")
        result.valid = False
        return result

    _validate_required_sections(config, result)
    if result.errors:
        result.valid = False
        return result

    _validate_backend(config, result)
    _validate_site(config, result)
    _validate_cameras(config, result)
    _validate_polling(config, result)
    _validate_radar(config, result)
    _validate_nvr(config, result)
    _validate_output(config, result)

    if result.errors:
        result.valid = False

    return result


def _validate_required_sections(config: dict, result: ValidationResult) -> None:
    """Validate required top-level sections exist."""
    for section in ("backend",):
        if section not in config:
            result.errors.append(f"Missing required section: '{section}'")


def _validate_backend(config: dict, result: ValidationResult) -> None:
    backend = config.get("backend") or {}

    base_url = backend.get("base_url")
    if not base_url:
        result.errors.append("backend.base_url is required")
    elif not str(base_url).startswith(("http://", "https://")):
        result.errors.append(
            f"backend.base_url must start with http:// or https://: {base_url}"
        )
    else:
        result.derived["base_url"] = str(base_url).rstrip("/")

    timeout = backend.get("timeout_seconds")
    if timeout is not None and (not _is_number(timeout) or timeout <= 0):
        result.errors.append("backend.timeout_seconds must be > 0")

    retries = backend.get("retries")
    if retries is not None and (not isinstance(retries, int) or retries < 1):
        result.errors.append("backend.retries must be an integer >= 1")

    delay = backend.get("retry_delay_seconds")
    if delay is not None and (not _is_number(delay) or delay < 0):
        result.errors.append("backend.retry_delay_seconds must be >= 0")

    if not backend.get("token"):
        result.warnings.append("No backend token set; requests are sent unauthenticated")


def _validate_position(value: Any, ref: str, result: ValidationResult) -> None:
    if value is None:
        return
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or not all(_is_number(v) for v in value)
    ):
        result.errors.append(f"{ref} must be [latitude, longitude]")
        return
    lat, lng = value
    if not -90 <= lat <= 90:
        result.errors.append(f"{ref} latitude out of range: {lat}")
    if not -180 <= lng <= 180:
        result.errors.append(f"{ref} longitude out of range: {lng}")


def _validate_site(config: dict, result: ValidationResult) -> None:
    site = config.get("site") or {}
    _validate_position(site.get("map_center"), "site.map_center", result)
    _validate_position(site.get("camera_position"), "site.camera_position", result)


def sector_intervals(min_angle: float, max_angle: float) -> list[tuple[float, float]]:
    """Split a possibly wrapping sector into non-wrapping [start, end) intervals."""
    min_angle %= 360
    max_angle = 360 if max_angle == 360 else max_angle % 360
    if min_angle < max_angle:
        return [(min_angle, max_angle)]
    return [(min_angle, 360), (0, max_angle)] if max_angle > 0 else [(min_angle, 360)]


def _overlap(a: list[tuple[float, float]], b: list[tuple[float, float]]) -> float:
    total = 0.0
    for a_start, a_end in a:
        for b_start, b_end in b:
            total += max(0.0, min(a_end, b_end) - max(a_start, b_start))
    return total


def _validate_cameras(config: dict, result: ValidationResult) -> None:
    """Validate camera sectors: required fields, angle ranges, overlaps, coverage."""
    cameras = config.get("cameras")
    if not cameras:
        result.derived["cameras"] = len(DEFAULT_CAMERA_SECTORS)
        result.derived["sector_coverage"] = 360.0
        logger.debug("No cameras configured, using default sectors")
        return

    if not isinstance(cameras, list):
        result.errors.append("'cameras' must be a list")
        return

    seen_ids = set()
    sectors: list[tuple[int, list[tuple[float, float]]]] = []

    for i, camera in enumerate(cameras):
        ref = f"cameras[{i}]"
        if not isinstance(camera, dict):
            result.errors.append(f"{ref} must be a mapping")
            continue

        missing = [key for key in CAMERA_REQUIRED if camera.get(key) is None]
        for key in missing:
            result.errors.append(f"{ref}.{key} is required")

        camera_id = camera.get("id")
        if camera_id is not None:
            if not isinstance(camera_id, int) or camera_id < 1:
                result.errors.append(f"{ref}.id must be a positive integer")
            elif camera_id in seen_ids:
                result.errors.append(f"{ref}: duplicate camera id {camera_id}")
            else:
                seen_ids.add(camera_id)
            ref = f"cameras[{i}] (id {camera_id})"

        angles_ok = True
        for key in ("min_angle", "max_angle"):
            value = camera.get(key)
            if value is not None and (not _is_number(value) or not 0 <= value <= 360):
                result.errors.append(f"{ref}.{key} must be 0-360")
                angles_ok = False

        direction = camera.get("direction")
        if direction is not None and (not _is_number(direction) or not 0 <= direction < 360):
            result.errors.append(f"{ref}.direction must be 0-359")

        view_angle = camera.get("view_angle")
        if view_angle is not None and (not _is_number(view_angle) or not 0 < view_angle <= 360):
            result.errors.append(f"{ref}.view_angle must be 1-360")

        if "min_angle" in missing or "max_angle" in missing or not angles_ok:
            continue
        if camera["min_angle"] == camera["max_angle"]:
            result.errors.append(f"{ref}: min_angle and max_angle must differ")
            continue

        sectors.append(
            (camera_id, sector_intervals(camera["min_angle"], camera["max_angle"]))
        )

    for i, (id_a, intervals_a) in enumerate(sectors):
        for id_b, intervals_b in sectors[i + 1 :]:
            overlap = _overlap(intervals_a, intervals_b)
            if overlap > 0:
                result.errors.append(
                    f"Camera sectors {id_a} and {id_b} overlap by {overlap:g} degrees"
                )

    coverage = sum(end - start for _, intervals in sectors for start, end in intervals)
    result.derived["cameras"] = len(cameras)
    result.derived["sector_coverage"] = coverage
    if sectors and coverage < 360 and not result.errors:
        result.warnings.append(
            f"Camera sectors cover {coverage:g} of 360 degrees; "
            "boxes outside every sector are attributed to camera 1"
        )


def _validate_polling(config: dict, result: ValidationResult) -> None:
    polling = config.get("polling") or {}
    intervals = {}
    for key in POLLING_KEYS:
        value = polling.get(key)
        if value is None:
            continue
        if not _is_number(value) or value <= 0:
            result.errors.append(f"polling.{key} must be > 0 seconds")
        else:
            intervals[key] = value

    unknown = set(polling) - set(POLLING_KEYS)
    for key in sorted(unknown):
        result.warnings.append(f"Unknown polling interval '{key}' (ignored)")

    if intervals:
        result.derived["polling"] = intervals


def _validate_radar(config: dict, result: ValidationResult) -> None:
    radar = config.get("radar") or {}
    for key in ("width", "height", "view_distance_m"):
        value = radar.get(key)
        if value is not None and (not _is_number(value) or value <= 0):
            result.errors.append(f"radar.{key} must be > 0")

    transition = radar.get("transition_ms")
    if transition is not None and (not _is_number(transition) or transition < 0):
        result.errors.append("radar.transition_ms must be >= 0")


def _validate_nvr(config: dict, result: ValidationResult) -> None:
    nvr = config.get("nvr")
    if not nvr:
        return

    port = nvr.get("port")
    if port is not None and (not isinstance(port, int) or not 1 <= port <= 65535):
        result.errors.append("nvr.port must be 1-65535")

    channel = nvr.get("default_channel")
    if channel is not None and (not isinstance(channel, int) or channel < 1):
        result.errors.append("nvr.default_channel must be a positive integer")

    if not nvr.get("password"):
        result.warnings.append("nvr.password is empty; playback requests may be rejected")


def _validate_output(config: dict, result: ValidationResult) -> None:
    output = config.get("output") or {}
    port = output.get("port")
    if port is not None and (not isinstance(port, int) or not 1 <= port <= 65535):
        result.errors.append("output.port must be 1-65535")
    if "dir" in output and not output["dir"]:
        result.errors.append("output.dir must not be empty")
