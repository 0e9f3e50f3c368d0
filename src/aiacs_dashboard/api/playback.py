"""
NVR playback sessions and paginated detection history (video analysis).

Unlike the panel fetchers these raise BackendError: the caller is acting
on a user request and has to report the failure.
"""

import logging
from datetime import timezone
from typing import Any

from ..models import DetectionPage, DetectionRecord, NVRConfig, PlaybackSession
from ..utils.constants import (
    DEFAULT_NVR_CHANNEL,
    DEFAULT_NVR_IP,
    DEFAULT_NVR_PORT,
    DEFAULT_NVR_USERNAME,
    DEFAULT_PER_PAGE,
    DEFAULT_SORT,
)
from ..utils.timefmt import parse_timestamp
from .client import BackendClient

logger = logging.getLogger(__name__)


def start_nvr_playback(client: BackendClient, config: NVRConfig) -> PlaybackSession:
    """
    Start an NVR playback session.

    Raises:
        BackendError: Backend refused or could not be reached
    """
    response = client.post("/api/nvr/playback/start", config.to_payload())
    session = PlaybackSession.from_dict(response or {})
    logger.info(f"Playback session {session.id} started on channel {session.channel}")
    return session


def stop_nvr_playback(client: BackendClient, session_id: str) -> None:
    """
    Raises:
        BackendError: Session not found or backend failure
    """
    client.post(f"/api/nvr/playback/stop/{session_id}")
    logger.info(f"Playback session {session_id} stopped")


def _utc_iso(timestamp: str) -> str:
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        raise ValueError(f"Invalid detection time: {timestamp!r}")
    utc = parsed.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def playback_config_for_detection(
    detection: DetectionRecord, nvr: dict[str, Any] | None = None
) -> NVRConfig:
    """
    NVR request replaying a detection from its detection time.

    The NVR channel is the detection's camera id, or the default channel
    when the camera id is missing. Connection fields left out of `nvr`
    fall back to the site defaults.

    Raises:
        ValueError: detection_time is not a timestamp
    """
    nvr = nvr or {}
    return NVRConfig(
        ip=nvr.get("ip") or DEFAULT_NVR_IP,
        port=nvr.get("port") or DEFAULT_NVR_PORT,
        username=nvr.get("username") or DEFAULT_NVR_USERNAME,
        password=nvr.get("password") or "",
        channel=detection.camera_id or nvr.get("default_channel") or DEFAULT_NVR_CHANNEL,
        start_time=_utc_iso(detection.detection_time),
    )


def create_playback_session_for_detection(
    client: BackendClient,
    detection: DetectionRecord,
    nvr: dict[str, Any] | None = None,
) -> PlaybackSession:
    """
    Raises:
        ValueError: detection_time is not a timestamp
        BackendError: Backend refused or could not be reached
    """
    config = playback_config_for_detection(detection, nvr)
    logger.debug(
        f"Playback for detection {detection.detection_id}: channel {config.channel} "
        f"from {config.start_time}"
    )
    return start_nvr_playback(client, config)


def fetch_detection_page(
    client: BackendClient,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
    sort_by: str = DEFAULT_SORT,
    date_from: str | None = None,
    date_to: str | None = None,
) -> DetectionPage:
    """
    One page of detection history.

    Raises:
        BackendError: Backend refused or could not be reached
    """
    response = client.get(
        "/api/detections/filtered/",
        params={
            "page": page,
            "per_page": per_page,
            "sort_by": sort_by,
            "date_from": date_from,
            "date_to": date_to,
        },
    )
    return DetectionPage.from_dict(response or {})
