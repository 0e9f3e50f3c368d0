"""
Direction Plot - live radar scatter of detected birds.

Maintains a keyed set of plot points across refreshes, the same way a data
join does: points are matched by id, and each refresh yields entering,
updated and exiting points. Every change starts a timed transition, and
`frame()` interpolates the current visual state for rendering.

Lifecycle of a point:
1. Enter  -> appears at its position, radius 0 and opacity 0
2. Settle -> grows to POINT_RADIUS at POINT_OPACITY over the transition
3. Update -> moves from its current drawn state to the new target
4. Exit   -> fades to opacity 0, then is removed once the transition ends
"""

import logging
import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..models import BoundingBox, CameraSector
from .polar import compass_to_screen, distance_bucket, distance_label

logger = logging.getLogger(__name__)

POINT_RADIUS = 3.0
POINT_OPACITY = 0.8
DEFAULT_TRANSITION_MS = 300

# (distance in meters, radius fraction, stroke opacity)
DISTANCE_RINGS = (
    (50, 0.28, 0.15),
    (100, 0.43, 0.12),
    (150, 0.58, 0.08),
    (200, 0.75, 0.05),
)
COMPASS_LABEL_RADIUS = 1.15


@dataclass(frozen=True)
class PlotLayout:
    """Drawing surface geometry. All values are in SVG user units."""

    width: float = 280
    height: float = 220
    margin_top: float = 10
    margin_right: float = 30
    margin_bottom: float = 10
    margin_left: float = 10

    @property
    def inner_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def inner_height(self) -> float:
        return self.height - self.margin_top - self.margin_bottom

    @property
    def center(self) -> tuple[float, float]:
        return self.inner_width / 2, self.inner_height / 2

    @property
    def radius(self) -> float:
        return min(self.inner_width, self.inner_height) * 0.45


@dataclass
class PlotPoint:
    """
    Target position and metadata of one plotted bounding box.

    bbox_width and bbox_height are percentages of the frame.
    """

    id: str
    x: float
    y: float
    camera_id: int
    color: str
    species: str
    bbox_width: float
    bbox_height: float
    direction: str
    angle: float
    distance: float
    sector_name: str = ""

    @property
    def area(self) -> float:
        return self.bbox_width * self.bbox_height

    @property
    def estimated_distance(self) -> str:
        return distance_label(self.area)


@dataclass
class RenderedPoint:
    """Visual state of a point at one instant."""

    id: str
    x: float
    y: float
    r: float
    opacity: float
    color: str
    exiting: bool = False


@dataclass
class PlotDiff:
    """Result of joining a new data set against the current plot."""

    entered: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    exited: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.entered or self.exited)


def ease_cubic_in_out(t: float) -> float:
    """Cubic in-out easing for t in [0, 1]."""
    t = max(0.0, min(1.0, t))
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


@dataclass
class _Transition:
    start: RenderedPoint
    end: RenderedPoint
    started_ms: float

    def at(self, now_ms: float, duration_ms: float) -> RenderedPoint:
        t = 1.0 if duration_ms <= 0 else (now_ms - self.started_ms) / duration_ms
        k = ease_cubic_in_out(t)
        return RenderedPoint(
            id=self.end.id,
            x=self.start.x + (self.end.x - self.start.x) * k,
            y=self.start.y + (self.end.y - self.start.y) * k,
            r=self.start.r + (self.end.r - self.start.r) * k,
            opacity=self.start.opacity + (self.end.opacity - self.start.opacity) * k,
            color=self.end.color,
            exiting=self.end.exiting,
        )

    def done(self, now_ms: float, duration_ms: float) -> bool:
        return now_ms - self.started_ms >= duration_ms


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class DirectionPlot:
    """
    Keyed, animated radar scatter plot.

    Angles are placed uniformly at random inside the source camera's
    sector (the frame gives no true bearing). A point keeps its angle for as
    long as it stays on the plot so refreshes do not make it jump around.

    Args:
        sectors: Camera sectors; boxes from other cameras are not plotted
        layout: Drawing surface geometry
        transition_ms: Duration of enter/update/exit transitions
        rng: Random source for angle placement (inject for determinism)
        clock: Millisecond clock (inject for tests)
    """

    def __init__(
        self,
        sectors: Sequence[CameraSector],
        layout: PlotLayout | None = None,
        transition_ms: float = DEFAULT_TRANSITION_MS,
        rng: random.Random | None = None,
        clock: Callable[[], float] = _monotonic_ms,
    ):
        self.sectors = {sector.camera_id: sector for sector in sectors}
        self.layout = layout or PlotLayout()
        self.transition_ms = transition_ms
        self._rng = rng or random.Random()
        self._clock = clock

        self._points: dict[str, PlotPoint] = {}
        self._transitions: dict[str, _Transition] = {}
        self._angles: dict[str, float] = {}

    # ------------------------------------------------------------------
    # Data conversion
    # ------------------------------------------------------------------

    def _place_angle(self, point_id: str, sector: CameraSector) -> float:
        angle = self._angles.get(point_id)
        if angle is None or not sector.contains(angle):
            angle = (sector.min_angle + self._rng.random() * sector.span) % 360
        return angle

    def build_points(
        self, direction_data: dict[str, list[BoundingBox]]
    ) -> list[PlotPoint]:
        """
        Convert direction-bucketed boxes into plot points.

        Boxes without a camera id are attributed to camera 1. Boxes whose
        camera has no sector are dropped.
        """
        cx, cy = self.layout.center
        radius = self.layout.radius
        points = []

        for direction, bboxes in direction_data.items():
            for index, bbox in enumerate(bboxes):
                camera_id = bbox.camera_id or 1
                sector = self.sectors.get(camera_id)
                if sector is None:
                    logger.debug(f"No sector for camera {camera_id}, skipping box")
                    continue

                point_id = bbox.bbox_id or f"{direction}_{index}"
                angle = self._place_angle(point_id, sector)
                distance = distance_bucket(bbox.area_pct)
                x, y = compass_to_screen(angle, radius * distance, cx, cy)

                points.append(
                    PlotPoint(
                        id=point_id,
                        x=x,
                        y=y,
                        camera_id=camera_id,
                        color=sector.color,
                        species=bbox.species or "",
                        bbox_width=bbox.width_pct,
                        bbox_height=bbox.height_pct,
                        direction=direction,
                        angle=angle,
                        distance=distance,
                        sector_name=sector.name,
                    )
                )

        return points

    # ------------------------------------------------------------------
    # Data join
    # ------------------------------------------------------------------

    def update(self, points: Sequence[PlotPoint]) -> PlotDiff:
        """
        Join a new set of points against the plot and start transitions.

        Points are keyed by id; the last point wins on duplicate ids.
        """
        now = self._clock()
        self._prune(now)
        incoming = {point.id: point for point in points}
        diff = PlotDiff()

        for point_id, point in incoming.items():
            target = RenderedPoint(
                id=point_id,
                x=point.x,
                y=point.y,
                r=POINT_RADIUS,
                opacity=POINT_OPACITY,
                color=point.color,
            )
            if point_id in self._points and not self._is_exiting(point_id):
                start = self._state_at(point_id, now)
                diff.updated.append(point_id)
            else:
                start = RenderedPoint(
                    id=point_id, x=point.x, y=point.y, r=0.0, opacity=0.0,
                    color=point.color,
                )
                diff.entered.append(point_id)

            self._points[point_id] = point
            self._angles[point_id] = point.angle
            self._transitions[point_id] = _Transition(start, target, now)

        for point_id in list(self._points):
            if point_id in incoming or self._is_exiting(point_id):
                continue
            current = self._state_at(point_id, now)
            end = RenderedPoint(
                id=point_id, x=current.x, y=current.y, r=current.r, opacity=0.0,
                color=current.color, exiting=True,
            )
            self._transitions[point_id] = _Transition(current, end, now)
            diff.exited.append(point_id)

        if diff.changed:
            logger.debug(
                f"Plot join: +{len(diff.entered)} ~{len(diff.updated)} -{len(diff.exited)}"
            )
        return diff

    def update_from_bboxes(self, direction_data: dict[str, list[BoundingBox]]) -> PlotDiff:
        return self.update(self.build_points(direction_data))

    def _is_exiting(self, point_id: str) -> bool:
        transition = self._transitions.get(point_id)
        return transition is not None and transition.end.exiting

    def _state_at(self, point_id: str, now_ms: float) -> RenderedPoint:
        return self._transitions[point_id].at(now_ms, self.transition_ms)

    def _prune(self, now_ms: float) -> None:
        """Drop exiting points whose fade-out has finished."""
        for point_id, transition in list(self._transitions.items()):
            if transition.end.exiting and transition.done(now_ms, self.transition_ms):
                del self._transitions[point_id]
                del self._points[point_id]
                self._angles.pop(point_id, None)

    # ------------------------------------------------------------------
    # Rendering state
    # ------------------------------------------------------------------

    def frame(self, now_ms: float | None = None) -> list[RenderedPoint]:
        """Interpolated visual state of every point on the plot."""
        now = self._clock() if now_ms is None else now_ms
        self._prune(now)
        return [self._state_at(point_id, now) for point_id in self._transitions]

    def targets(self) -> list[RenderedPoint]:
        """Final visual state of every point once transitions settle."""
        return [t.end for t in self._transitions.values()]

    def remaining_ms(self, now_ms: float | None = None) -> dict[str, float]:
        """Milliseconds left in each point's transition (0 when settled)."""
        now = self._clock() if now_ms is None else now_ms
        return {
            point_id: max(0.0, t.started_ms + self.transition_ms - now)
            for point_id, t in self._transitions.items()
        }

    def now(self) -> float:
        return self._clock()

    @property
    def points(self) -> list[PlotPoint]:
        """Live (non-exiting) points."""
        return [p for pid, p in self._points.items() if not self._is_exiting(pid)]

    def point(self, point_id: str) -> PlotPoint | None:
        return self._points.get(point_id)

    def is_empty(self) -> bool:
        return not self.points

    def clear(self) -> PlotDiff:
        return self.update([])
