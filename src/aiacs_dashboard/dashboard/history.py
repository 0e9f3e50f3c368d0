"""
Detection history - one filtered page of past detections with its
summary statistics and page links.
"""

from dataclasses import dataclass
from datetime import date

from ..models import DetectionPage
from ..utils.analysis import DetectionStats, calculate_detection_stats, generate_page_numbers
from ..utils.constants import DEFAULT_PER_PAGE
from ..utils.timefmt import default_date_filter, validate_date_range


@dataclass(frozen=True)
class HistoryQuery:
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE
    date_from: str | None = None
    date_to: str | None = None

    @classmethod
    def build(
        cls,
        page: int = 1,
        date_from: str | None = None,
        date_to: str | None = None,
        per_page: int = DEFAULT_PER_PAGE,
        today: date | None = None,
    ) -> "HistoryQuery":
        """
        Validated history query.

        With neither bound given the filter defaults to the last month.
        A single bound is passed through as-is.

        Raises:
            ValueError: page or per_page below 1, or an invalid date range
        """
        if page < 1:
            raise ValueError(f"Page must be 1 or more, got {page}")
        if per_page < 1:
            raise ValueError(f"Page size must be 1 or more, got {per_page}")

        if not date_from and not date_to:
            defaults = default_date_filter(today)
            date_from, date_to = defaults["date_from"], defaults["date_to"]
        elif not validate_date_range(date_from, date_to, today):
            raise ValueError(
                f"Invalid date range {date_from} - {date_to}: "
                "start must not be after end and neither may be in the future"
            )

        return cls(page=page, per_page=per_page, date_from=date_from, date_to=date_to)


@dataclass
class HistoryView:
    query: HistoryQuery
    page: DetectionPage
    stats: DetectionStats
    page_numbers: list[int]


def build_history_view(query: HistoryQuery, page: DetectionPage) -> HistoryView:
    """Stats and page links for a fetched history page."""
    total_pages = max(1, page.total_pages)
    return HistoryView(
        query=query,
        page=page,
        stats=calculate_detection_stats(page.detections),
        page_numbers=generate_page_numbers(page.current_page, total_pages),
    )
