"""
Camera, PTZ and preset endpoints.

All calls degrade on BackendError: lists become [], lookups None, and
commands False. The error is logged with its user-facing message.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from ..models import (
    PTZ_DIRECTIONS,
    CameraRecord,
    CameraSettingsUpdate,
    DetectionRecord,
    PresetCreate,
    PresetRecord,
)
from ..utils.constants import CAMERA_DETAIL_TIMEOUT
from .client import BackendClient
from .errors import BackendError

logger = logging.getLogger(__name__)

DEFAULT_PTZ_SPEED = 0.7

T = TypeVar("T")


def _is_success(response: Any) -> bool:
    return isinstance(response, dict) and response.get("status") == "success"


def _parse_records(rows: Any, parse: Callable[[dict], T], label: str) -> list[T]:
    """Parse a list of backend records, skipping malformed ones."""
    records = []
    for row in rows if isinstance(rows, list) else []:
        try:
            records.append(parse(row))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed {label} record: {e}")
    return records


def get_cameras(client: BackendClient) -> list[CameraRecord]:
    """List all cameras."""
    try:
        response = client.get("/api/cameras/")
    except BackendError as e:
        logger.error(f"Failed to fetch cameras: {e.message}")
        return []

    if _is_success(response):
        cameras = _parse_records(response.get("cameras"), CameraRecord.from_dict, "camera")
        logger.debug(f"Fetched {len(cameras)} camera(s)")
        return cameras
    return []


def get_camera(client: BackendClient, camera_id: int) -> CameraRecord | None:
    """Camera detail. The backend can be slow here, so the timeout is long."""
    try:
        response = client.get(f"/camera/{camera_id}/", timeout=CAMERA_DETAIL_TIMEOUT)
    except BackendError as e:
        logger.error(f"Failed to fetch camera {camera_id}: {e.message}")
        return None

    if _is_success(response) and response.get("camera"):
        cameras = _parse_records([response["camera"]], CameraRecord.from_dict, "camera")
        return cameras[0] if cameras else None
    return None


def update_camera_settings(
    client: BackendClient, camera_id: int, settings: CameraSettingsUpdate
) -> bool:
    try:
        client.put(f"/api/cameras/{camera_id}/settings/", settings.to_payload())
    except BackendError as e:
        logger.error(f"Failed to update camera {camera_id} settings: {e.message}")
        return False
    logger.info(f"Camera {camera_id} settings updated")
    return True


def _check_ptz_direction(direction: str) -> None:
    if direction not in PTZ_DIRECTIONS:
        raise ValueError(
            f"Unknown PTZ direction '{direction}' (expected one of {', '.join(PTZ_DIRECTIONS)})"
        )


def control_ptz(
    client: BackendClient,
    camera_id: int,
    direction: str,
    is_continuous: bool = True,
    speed: float = DEFAULT_PTZ_SPEED,
) -> bool:
    """
    Start moving a PTZ camera.

    Continuous moves run until stop_ptz is called for the same direction.

    Raises:
        ValueError: Unknown direction or speed outside 0.0 - 1.0
    """
    _check_ptz_direction(direction)
    if not 0.0 <= speed <= 1.0:
        raise ValueError(f"PTZ speed must be between 0.0 and 1.0, got {speed}")

    try:
        response = client.post(
            "/api/ptz/control/",
            {
                "camera_id": camera_id,
                "direction": direction,
                "is_continuous": is_continuous,
                "speed": speed,
            },
        )
    except BackendError as e:
        logger.error(f"PTZ control failed for camera {camera_id}: {e.message}")
        return False

    if _is_success(response):
        logger.debug(f"PTZ {direction} started on camera {camera_id}")
        return True
    return False


def stop_ptz(client: BackendClient, camera_id: int, direction: str) -> bool:
    """Stop a PTZ move."""
    _check_ptz_direction(direction)
    try:
        response = client.post(
            "/api/ptz/stop/", {"camera_id": camera_id, "direction": direction}
        )
    except BackendError as e:
        logger.error(f"PTZ stop failed for camera {camera_id}: {e.message}")
        return False
    return _is_success(response)


def get_presets(client: BackendClient, camera_id: int) -> list[PresetRecord]:
    try:
        response = client.get(f"/api/cameras/{camera_id}/presets/")
    except BackendError as e:
        logger.error(f"Failed to fetch presets for camera {camera_id}: {e.message}")
        return []

    if _is_success(response):
        return _parse_records(response.get("presets"), PresetRecord.from_dict, "preset")
    return []


def save_preset(client: BackendClient, camera_id: int, preset: PresetCreate) -> bool:
    try:
        client.post(f"/api/cameras/{camera_id}/presets/", preset.to_payload())
    except BackendError as e:
        logger.error(f"Failed to save preset for camera {camera_id}: {e.message}")
        return False
    logger.info(f"Preset '{preset.name}' saved for camera {camera_id}")
    return True


def move_to_preset(client: BackendClient, camera_id: int, preset_id: int) -> bool:
    try:
        client.post(f"/api/cameras/{camera_id}/presets/{preset_id}/move/")
    except BackendError as e:
        logger.error(f"Failed to move camera {camera_id} to preset {preset_id}: {e.message}")
        return False
    return True


def delete_preset(client: BackendClient, camera_id: int, preset_id: int) -> bool:
    try:
        client.delete(f"/api/cameras/{camera_id}/presets/{preset_id}/")
    except BackendError as e:
        logger.error(f"Failed to delete preset {preset_id} of camera {camera_id}: {e.message}")
        return False
    logger.info(f"Preset {preset_id} deleted from camera {camera_id}")
    return True


def get_camera_detections(
    client: BackendClient,
    camera_id: int,
    date_from: str | None = None,
    date_to: str | None = None,
    species: str | None = None,
    confidence_min: float | None = None,
    page: int | None = None,
    per_page: int | None = None,
    sort_by: str | None = None,
) -> list[DetectionRecord]:
    """Detections for one camera. sort_by: timestamp_asc, timestamp_desc, confidence_desc."""
    params = {
        "date_from": date_from,
        "date_to": date_to,
        "species": species,
        "confidence_min": confidence_min,
        "page": page,
        "per_page": per_page,
        "sort_by": sort_by,
    }
    try:
        response = client.get(f"/cameras/{camera_id}/detections", params=params)
    except BackendError as e:
        logger.error(f"Failed to fetch detections for camera {camera_id}: {e.message}")
        return []

    if _is_success(response):
        return _parse_records(response.get("detections"), DetectionRecord.from_dict, "detection")
    return []
