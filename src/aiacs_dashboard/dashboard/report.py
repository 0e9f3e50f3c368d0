"""
Dashboard Page Renderer
Builds the single-page HTML dashboard from a snapshot of panel data.

No external dependencies needed. The page reloads itself to pick up new
snapshots; map overlay data is embedded as JSON for a map client.
"""

import html
import json
import logging
from collections.abc import Sequence
from functools import partial
from typing import Any

from ..models import CameraSector, DetectionRecord
from ..radar.polar import direction_counts
from ..settings import AppSettings
from ..utils.constants import DIRECTIONS
from ..utils.i18n import translate
from ..utils.risk import get_risk_color, get_risk_level, get_risk_text
from ..utils.timefmt import format_datetime
from .history import HistoryView
from .output import HISTORY_FILE, INDEX_FILE, history_file_name
from .state import PanelData

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 5
HISTORY_REFRESH_SECONDS = 300

# HTML template with embedded CSS
HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="{language}">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<meta http-equiv="refresh" content="{refresh}">
<title>{title}</title>
<style>
:root {{
  --bg: #0b1622;
  --panel: #13212f;
  --border: #22384d;
  --text: #d7e3ef;
  --text-muted: #7a8ba0;
}}
* {{ box-sizing: border-box; }}
body {{
  font-family: system-ui, -apple-system, sans-serif;
  margin: 0;
  padding: 20px;
  background: var(--bg);
  color: var(--text);
  line-height: 1.4;
}}
header {{ display: flex; justify-content: space-between; align-items: baseline; }}
h1 {{ margin: 0 0 16px; font-size: 22px; }}
.clock {{ color: var(--text-muted); font-variant-numeric: tabular-nums; }}
.grid {{ display: grid; grid-template-columns: 1fr 2fr 1fr; gap: 16px; }}
.panel {{
  background: var(--panel);
  border: 1px solid var(--border);
  border-radius: 8px;
  padding: 14px;
  margin-bottom: 16px;
}}
h2 {{ font-size: 15px; margin: 0 0 10px; color: var(--text-muted); }}
table {{ width: 100%; border-collapse: collapse; font-size: 13px; }}
td, th {{ padding: 5px 6px; border-bottom: 1px solid var(--border); text-align: left; }}
td:last-child {{ text-align: right; }}
.risk {{ font-weight: bold; }}
.swatch {{ display: inline-block; width: 10px; height: 10px; border-radius: 2px; margin-right: 6px; }}
.big {{ font-size: 28px; font-weight: bold; }}
.more {{ color: var(--text-muted); font-size: 11px; }}
.no-data {{ color: var(--text-muted); font-style: italic; }}
a {{ color: #6fb3ff; }}
.pages a, .pages strong {{ margin-right: 8px; }}
</style>
</head>
<body>
{content}
<script type="application/json" id="map-data">{map_data}</script>
</body>
</html>
"""


def _escape(text: Any) -> str:
    return html.escape(str(text))


def _make_table(headers: list[str], rows: list[tuple]) -> str:
    """Generate an HTML table. Cells are escaped unless wrapped in _Raw."""
    lines = ["<table>", "<tr>"]
    for h in headers:
        lines.append(f"<th>{_escape(h)}</th>")
    lines.append("</tr>")

    for row in rows:
        lines.append("<tr>")
        for cell in row:
            text = cell.html if isinstance(cell, _Raw) else _escape(cell)
            lines.append(f"<td>{text}</td>")
        lines.append("</tr>")

    lines.append("</table>")
    return "\n".join(lines)


class _Raw:
    """Pre-rendered table cell."""

    def __init__(self, html_text: str):
        self.html = html_text


def _no_data(language: str) -> str:
    return f'<p class="no-data">{translate("데이터 없음", "No data", language)}</p>'


def _risk_cell(count: int, language: str) -> _Raw:
    level = get_risk_level(count)
    return _Raw(
        f'<span class="risk" style="color: {get_risk_color(level)}">'
        f"{_escape(get_risk_text(level, language))}</span>"
    )


def _weather_panel(data: PanelData, language: str) -> str:
    t = partial(translate, language=language)
    parts = ['<section class="panel weather">', f"<h2>{t('기상 정보', 'Weather')}</h2>"]

    weather = data.weather
    if weather is None:
        parts.append(_no_data(language))
    else:
        feels_like = f"{weather.feels_like:.1f}°C" if weather.feels_like is not None else "-"
        parts.append(f"<p>{_escape(weather.location)}</p>")
        parts.append(f'<div class="big">{weather.temperature:.1f}°C</div>')
        parts.append(
            _make_table(
                [t("항목", "Item"), t("값", "Value")],
                [
                    (t("체감 온도", "Feels like"), feels_like),
                    (t("습도", "Humidity"), f"{weather.humidity:g}%"),
                    (t("풍속", "Wind"), f"{weather.wind_speed:g} m/s ({weather.wind_direction:g}°)"),
                    (t("강수량", "Precipitation"), f"{weather.precipitation:g} mm"),
                    (t("가시거리", "Visibility"), f"{weather.visibility:g} km"),
                    (t("날씨", "Condition"), weather.weather_condition),
                ],
            )
        )
    parts.append("</section>")
    return "\n".join(parts)


def _bird_activity_panel(data: PanelData, language: str) -> str:
    t = partial(translate, language=language)
    parts = ['<section class="panel activity">', f"<h2>{t('조류 활동', 'Bird activity')}</h2>"]
    if not data.bird_activity:
        parts.append(_no_data(language))
    else:
        parts.append(
            _make_table(
                [t("터빈", "Turbine"), t("개체 수", "Count"), t("위험도", "Risk")],
                [
                    (a.turbine_id, a.count, _risk_cell(a.count, language))
                    for a in data.bird_activity
                ],
            )
        )
    parts.append("</section>")
    return "\n".join(parts)


def _species_label(detection: DetectionRecord, language: str) -> _Raw:
    species = detection.primary_species or translate("미확인", "Unknown", language)
    label = _escape(species)
    extra = detection.additional_species_count
    if extra:
        label += f' <span class="more">+{extra} {translate("종", "more", language)}</span>'
    return _Raw(label)


def _detections_panel(data: PanelData, language: str) -> str:
    t = partial(translate, language=language)
    parts = ['<section class="panel detections">', f"<h2>{t('최근 탐지', 'Recent detections')}</h2>"]
    if not data.detections:
        parts.append(_no_data(language))
    else:
        parts.append(
            _make_table(
                [t("시간", "Time"), t("카메라", "Camera"), t("종", "Species"), t("개체", "Birds"), t("위험도", "Risk")],
                [
                    (
                        d.timestamp,
                        d.camera_id,
                        _species_label(d, language),
                        d.bb_count,
                        _risk_cell(d.bb_count, language),
                    )
                    for d in data.detections
                ],
            )
        )
    parts.append("</section>")
    return "\n".join(parts)


def _radar_panel(data: PanelData, radar_svg: str, language: str) -> str:
    t = partial(translate, language=language)
    counts = direction_counts(data.direction_data)
    return "\n".join(
        [
            '<section class="panel radar">',
            f"<h2>{t('방위별 출현 현황', 'Direction of appearance')}</h2>",
            radar_svg,
            _make_table(list(DIRECTIONS), [tuple(counts[d] for d in DIRECTIONS)]),
            "</section>",
        ]
    )


def _stats_panel(
    data: PanelData, sectors: Sequence[CameraSector], language: str
) -> str:
    t = partial(translate, language=language)
    stats = data.daily_camera_stats
    parts = [
        '<section class="panel daily">',
        f"<h2>{t('일일 누적 현황', 'Today')}</h2>",
        f'<div class="big">{stats.total}</div>',
        _make_table(
            [t("카메라", "Camera"), t("개체 수", "Count")],
            [
                (
                    _Raw(
                        f'<span class="swatch" style="background: {_escape(s.color)}"></span>'
                        f"{_escape(s.label or s.camera_id)}"
                    ),
                    stats.for_camera(s.camera_id),
                )
                for s in sectors
            ],
        ),
        "</section>",
        '<section class="panel species">',
        f"<h2>{t('종별 통계', 'Species')}</h2>",
    ]
    if not data.species_stats:
        parts.append(_no_data(language))
    else:
        parts.append(
            _make_table(
                [t("종", "Species"), t("개체 수", "Count")],
                [
                    (
                        _Raw(
                            f'<span class="swatch" style="background: {_escape(s.color)}"></span>'
                            f"{_escape(s.name)}"
                        ),
                        s.count,
                    )
                    for s in data.species_stats
                ],
            )
        )
    parts.append("</section>")
    return "\n".join(parts)


def _cameras_panel(
    data: PanelData, stream_urls: dict[int, str], language: str
) -> str:
    t = partial(translate, language=language)
    parts = ['<section class="panel cameras">', f"<h2>{t('카메라', 'Cameras')}</h2>"]
    if not data.cameras:
        parts.append(_no_data(language))
    else:
        rows = []
        for camera in data.cameras:
            url = stream_urls.get(camera.id) or camera.stream_url
            link = _Raw(f'<a href="{_escape(url)}">{t("스트림", "Stream")}</a>') if url else "-"
            rows.append((camera.name, camera.status, link))
        parts.append(_make_table([t("이름", "Name"), t("상태", "Status"), ""], rows))
    parts.append("</section>")
    return "\n".join(parts)


def render_dashboard_html(
    data: PanelData,
    settings: AppSettings,
    sectors: Sequence[CameraSector],
    radar_svg: str = "",
    map_data: dict | None = None,
    stream_urls: dict[int, str] | None = None,
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS,
) -> str:
    """
    Render the dashboard page.

    Args:
        data: Panel data snapshot
        settings: User settings (language, radar and weather toggles)
        sectors: Camera sectors for the per-camera totals
        radar_svg: Pre-rendered radar plot
        map_data: View fields and ring overlay for a map client
        stream_urls: Live stream URL per camera id
        refresh_seconds: Page auto-reload period
    """
    language = settings.language
    title = "AIACS " + translate("모니터링", "Monitoring", language)

    left = []
    if settings.weather_enabled:
        left.append(_weather_panel(data, language))
    left.append(_bird_activity_panel(data, language))

    center = []
    if settings.radar_enabled:
        center.append(_radar_panel(data, radar_svg, language))
    center.append(_detections_panel(data, language))
    center.append(_cameras_panel(data, stream_urls or {}, language))

    right = [_stats_panel(data, sectors, language)]

    content = [
        f"<header><h1>{_escape(title)}</h1>"
        f'<a href="{HISTORY_FILE}">{translate("탐지 이력", "History", language)}</a>'
        f'<span class="clock">{data.now.strftime("%Y. %m. %d. %H:%M:%S")}</span></header>',
        '<div class="grid">',
        '<div class="column">' + "\n".join(left) + "</div>",
        '<div class="column">' + "\n".join(center) + "</div>",
        '<div class="column">' + "\n".join(right) + "</div>",
        "</div>",
    ]

    # "</" must not appear inside the JSON script element
    map_json = json.dumps(map_data or {}, ensure_ascii=False).replace("</", "<\\/")

    return HTML_TEMPLATE.format(
        language=_escape(language),
        refresh=int(refresh_seconds),
        title=_escape(title),
        content="\n".join(content),
        map_data=map_json,
    )


def _page_links(view: HistoryView) -> str:
    links = []
    for number in view.page_numbers:
        if number == view.page.current_page:
            links.append(f"<strong>{number}</strong>")
        else:
            links.append(f'<a href="{history_file_name(number)}">{number}</a>')
    return '<p class="pages">' + "".join(links) + "</p>"


def _history_stats_panel(view: HistoryView, language: str) -> str:
    t = partial(translate, language=language)
    stats = view.stats
    most_active = stats.most_active_camera_id
    parts = [
        '<section class="panel history-stats">',
        f"<h2>{t('탐지 통계', 'Statistics')}</h2>",
        _make_table(
            ["", ""],
            [
                (t("전체 탐지", "Detections (all pages)"), view.page.total_records),
                (t("이 페이지", "This page"), stats.total_detections),
                (t("평균 개체 수", "Average birds"), f"{stats.average_bounding_boxes:.2f}"),
                (t("최다 탐지 카메라", "Most active camera"), "-" if most_active is None else most_active),
            ],
        ),
    ]
    if stats.detections_by_hour:
        parts.append(
            _make_table(
                [t("시", "Hour"), t("탐지 수", "Detections")],
                [(f"{hour:02d}:00", count) for hour, count in stats.detections_by_hour.items()],
            )
        )
    parts.append("</section>")
    return "\n".join(parts)


def render_history_html(view: HistoryView, language: str) -> str:
    """Render one page of detection history with its stats and page links."""
    t = partial(translate, language=language)
    title = "AIACS " + t("탐지 이력", "Detection history")
    query = view.query
    period = f"{query.date_from or ''} ~ {query.date_to or ''}"

    content = [
        f"<header><h1>{_escape(title)}</h1>"
        f'<a href="{INDEX_FILE}">{t("대시보드", "Dashboard")}</a>'
        f'<span class="clock">{_escape(period)}</span></header>',
        _history_stats_panel(view, language),
        '<section class="panel history">',
        f"<h2>{t('탐지 목록', 'Detections')} "
        f"({view.page.current_page} / {max(1, view.page.total_pages)})</h2>",
    ]
    if not view.page.detections:
        content.append(_no_data(language))
    else:
        content.append(
            _make_table(
                ["ID", t("탐지 시각", "Detected at"), t("카메라", "Camera"), t("종", "Species"),
                 t("개체", "Birds"), t("위험도", "Risk")],
                [
                    (
                        d.detection_id,
                        format_datetime(d.detection_time),
                        d.camera_id,
                        _species_label(d, language),
                        d.bb_count,
                        _risk_cell(d.bb_count, language),
                    )
                    for d in view.page.detections
                ],
            )
        )
    content.append(_page_links(view))
    content.append("</section>")

    return HTML_TEMPLATE.format(
        language=_escape(language),
        refresh=HISTORY_REFRESH_SECONDS,
        title=_escape(title),
        content="\n".join(content),
        map_data="{}",
    )
