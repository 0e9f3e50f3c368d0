"""
SVG renderer for the direction plot.

Produces a standalone <svg> element: background rings, sector spokes,
compass labels, one circle per plotted point (with a <title> tooltip), and
an empty-state message. Points still mid-transition carry <animate>
elements so the browser finishes the motion the plot started.
"""

from collections.abc import Sequence
from html import escape

from ..models import CameraSector
from ..utils.constants import DIRECTIONS
from ..utils.i18n import translate
from .plot import (
    COMPASS_LABEL_RADIUS,
    DISTANCE_RINGS,
    DirectionPlot,
    PlotPoint,
    RenderedPoint,
)
from .polar import compass_to_screen_many

GRID_STROKE = "rgba(122, 139, 160, 0.3)"
LABEL_COLOR = "#7a8ba0"


def _fmt(value: float) -> str:
    return f"{float(value):.2f}".rstrip("0").rstrip(".")


def tooltip_text(point: PlotPoint, language: str = "ko") -> str:
    """Hover text for a plotted point."""
    species = point.species or translate("미확인", "Unknown", language)
    camera = translate("카메라", "Camera", language)
    size = translate("크기", "Size", language)
    area = translate("면적", "Area", language)
    distance = translate("추정 거리", "Est. distance", language)
    return (
        f"{species}\n"
        f"{camera}: {point.camera_id} ({point.sector_name})\n"
        f"{size}: {point.bbox_width:.1f}% x {point.bbox_height:.1f}%\n"
        f"{area}: {point.area:.0f}%²\n"
        f"{distance}: {point.estimated_distance}"
    )


def _background(plot: DirectionPlot, sectors: Sequence[CameraSector]) -> list[str]:
    cx, cy = plot.layout.center
    radius = plot.layout.radius
    parts = [
        f'<circle cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(radius)}" '
        f'fill="none" stroke="{GRID_STROKE}" stroke-width="1"/>'
    ]

    spokes = compass_to_screen_many(
        [sector.min_angle for sector in sectors], [radius] * len(sectors), cx, cy
    )
    for x2, y2 in spokes:
        parts.append(
            f'<line x1="{_fmt(cx)}" y1="{_fmt(cy)}" x2="{_fmt(x2)}" y2="{_fmt(y2)}" '
            f'stroke="{GRID_STROKE}" stroke-width="1"/>'
        )

    labels = compass_to_screen_many(
        [i * 45 for i in range(len(DIRECTIONS))],
        [radius * COMPASS_LABEL_RADIUS] * len(DIRECTIONS),
        cx,
        cy,
    )
    for label, (x, y) in zip(DIRECTIONS, labels):
        parts.append(
            f'<text x="{_fmt(x)}" y="{_fmt(y)}" font-size="10" fill="{LABEL_COLOR}" '
            f'text-anchor="middle" dominant-baseline="middle">{label}</text>'
        )

    for _distance, fraction, opacity in DISTANCE_RINGS:
        parts.append(
            f'<circle cx="{_fmt(cx)}" cy="{_fmt(cy)}" r="{_fmt(radius * fraction)}" '
            f'fill="none" stroke="rgba(122, 139, 160, {opacity})" stroke-width="0.5"/>'
        )

    return parts


def _animate(attr: str, start: float, end: float, duration_ms: float) -> str:
    return (
        f'<animate attributeName="{attr}" from="{_fmt(start)}" to="{_fmt(end)}" '
        f'dur="{_fmt(duration_ms)}ms" fill="freeze"/>'
    )


def _circle(
    current: RenderedPoint,
    target: RenderedPoint,
    point: PlotPoint | None,
    remaining_ms: float,
    language: str,
) -> str:
    animations = []
    if remaining_ms > 0:
        for attr, start, end in (
            ("cx", current.x, target.x),
            ("cy", current.y, target.y),
            ("r", current.r, target.r),
            ("opacity", current.opacity, target.opacity),
        ):
            if abs(start - end) > 1e-6:
                animations.append(_animate(attr, start, end, remaining_ms))

    title = f"<title>{escape(tooltip_text(point, language))}</title>" if point else ""
    return (
        f'<circle class="bbox-point" data-id="{escape(current.id)}" '
        f'cx="{_fmt(current.x)}" cy="{_fmt(current.y)}" r="{_fmt(current.r)}" '
        f'fill="{escape(current.color)}" opacity="{_fmt(current.opacity)}">'
        f"{title}{''.join(animations)}</circle>"
    )


def render_radar_svg(
    plot: DirectionPlot,
    sectors: Sequence[CameraSector],
    language: str = "ko",
    now_ms: float | None = None,
) -> str:
    """
    Render the plot as an SVG document fragment.

    Args:
        plot: Direction plot to draw
        sectors: Sectors for the spoke lines
        language: "ko" or "en" for labels and tooltips
        now_ms: Clock value to render at (defaults to the plot's clock)
    """
    layout = plot.layout
    cx, cy = layout.center
    now = plot.now() if now_ms is None else now_ms
    current = plot.frame(now)
    targets = {t.id: t for t in plot.targets()}
    remaining = plot.remaining_ms(now)

    body = _background(plot, sectors)
    body.append('<g class="plot-group">')
    for state in current:
        body.append(
            _circle(
                state,
                targets[state.id],
                plot.point(state.id),
                remaining.get(state.id, 0.0),
                language,
            )
        )
    body.append("</g>")

    body.append('<g class="empty-state-group">')
    if plot.is_empty():
        body.append(
            f'<text x="{_fmt(cx)}" y="{_fmt(cy)}" font-size="12" fill="{LABEL_COLOR}" '
            f'text-anchor="middle" dominant-baseline="middle">'
            f'{translate("데이터 없음", "No data", language)}</text>'
        )
    body.append("</g>")

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_fmt(layout.width)}" '
        f'height="{_fmt(layout.height)}" viewBox="0 0 {_fmt(layout.width)} {_fmt(layout.height)}">'
        f'<g transform="translate({_fmt(layout.margin_left)},{_fmt(layout.margin_top)})">'
        + "".join(body)
        + "</g></svg>"
    )
