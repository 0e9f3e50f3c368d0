"""
Detection history endpoints.

fetch_detections_filtered and get_bounding_box_info retry transient failures
and raise once retries run out. fetch_detections_with_bbox_info is the
dashboard-facing call and never raises.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from ..models import BoundingBoxInfo, DetectionRecord
from ..utils.constants import (
    BBOX_FETCH_WORKERS,
    BBOX_INFO_TIMEOUT,
    DEFAULT_PER_PAGE,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_SORT,
    DEFAULT_TIMEOUT,
)
from ..utils.timefmt import extract_time_from_timestamp
from . import with_retry
from .client import BackendClient
from .errors import BackendError

logger = logging.getLogger(__name__)


def fetch_detections_filtered(
    client: BackendClient,
    per_page: int = DEFAULT_PER_PAGE,
    sort_by: str = DEFAULT_SORT,
    date_from: str | None = None,
    date_to: str | None = None,
    retries: int = DEFAULT_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> list[DetectionRecord]:
    """
    Recent detections, newest first by default.

    `timestamp` on each record is reduced to HH:MM:SS for list display;
    the raw value stays in `detection_time`.

    Raises:
        BackendError: Request still failing after retries
    """
    params = {
        "per_page": per_page,
        "sort_by": sort_by,
        "date_from": date_from,
        "date_to": date_to,
    }
    response = with_retry(
        lambda: client.get(
            "/api/detections/filtered/", params=params, timeout=DEFAULT_TIMEOUT
        ),
        attempts=retries,
        delay=retry_delay,
        label="detections",
    )

    if not isinstance(response, dict) or response.get("status") != "success":
        return []

    detections = []
    for raw in response.get("detections") or []:
        record = DetectionRecord.from_dict(raw)
        record.timestamp = extract_time_from_timestamp(
            raw.get("timestamp") or raw.get("detection_time") or ""
        )
        detections.append(record)
    return detections


def get_bounding_box_info(
    client: BackendClient,
    detection_id: int,
    retries: int = DEFAULT_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> list[BoundingBoxInfo]:
    """
    Per-box detail (species, confidence, coordinates) for one detection.

    Raises:
        BackendError: Request still failing after retries
    """
    response = with_retry(
        lambda: client.get(
            f"/api/detection/bb-info/{detection_id}/", timeout=BBOX_INFO_TIMEOUT
        ),
        attempts=retries,
        delay=retry_delay,
        label=f"bb-info {detection_id}",
    )

    if isinstance(response, dict) and response.get("status") == "success":
        if response.get("bb_info"):
            return [BoundingBoxInfo.from_dict(b) for b in response["bb_info"]]

    logger.warning(f"No bounding box info for detection {detection_id}")
    return []


def _with_bbox_info(
    client: BackendClient, detection: DetectionRecord, retries: int, retry_delay: float
) -> DetectionRecord:
    if not detection.detection_id:
        logger.error(f"Detection without id from camera {detection.camera_id}")
        return replace(detection, bbox_info=[])

    try:
        info = get_bounding_box_info(client, detection.detection_id, retries, retry_delay)
    except BackendError as e:
        logger.error(f"Bounding box info failed for detection {detection.detection_id}: {e}")
        info = []
    return replace(detection, bbox_info=info)


def fetch_detections_with_bbox_info(
    client: BackendClient,
    per_page: int = DEFAULT_PER_PAGE,
    sort_by: str = DEFAULT_SORT,
    date_from: str | None = None,
    date_to: str | None = None,
    retries: int = DEFAULT_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    max_workers: int = BBOX_FETCH_WORKERS,
) -> list[DetectionRecord]:
    """
    Recent detections with their bounding box detail attached.

    Detail lookups run in parallel. A detection whose lookup fails keeps
    an empty bbox_info. Returns [] if the list itself cannot be fetched.
    """
    try:
        detections = fetch_detections_filtered(
            client, per_page, sort_by, date_from, date_to, retries, retry_delay
        )
    except BackendError as e:
        logger.error(f"Failed to fetch detections: {e.message}")
        return []

    if not detections:
        logger.debug("No detections")
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        enriched = list(
            executor.map(
                lambda d: _with_bbox_info(client, d, retries, retry_delay), detections
            )
        )

    with_info = sum(1 for d in enriched if d.bbox_info)
    logger.info(
        f"Bounding box info: {with_info} with boxes, {len(enriched) - with_info} without"
    )
    return enriched
