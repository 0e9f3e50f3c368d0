"""
Dashboard output - writes the rendered page, radar SVG, state JSON and
detection history pages.

Files are replaced atomically so the static server never serves a
half-written page.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"
HISTORY_FILE = "history.html"
RADAR_FILE = "radar.svg"
STATE_FILE = "state.json"


def history_file_name(page: int) -> str:
    """Output file for a history page; page 1 is the one linked from the dashboard."""
    return HISTORY_FILE if page <= 1 else f"history-{page}.html"


def write_atomic(path: Path, content: str) -> None:
    """Write text to path via a temp file in the same directory."""
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}-")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class DashboardWriter:
    """Writes dashboard snapshots into an output directory."""

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)
        self.writes = 0

    def write(self, page_html: str, radar_svg: str, state: dict[str, Any]) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)

        write_atomic(self.output_dir / RADAR_FILE, radar_svg)
        write_atomic(
            self.output_dir / STATE_FILE,
            json.dumps(state, ensure_ascii=False, indent=2, default=str),
        )
        write_atomic(self.output_dir / INDEX_FILE, page_html)

        self.writes += 1
        if self.writes == 1:
            logger.info(f"Dashboard written to {self.output_dir / INDEX_FILE}")

    def write_history(self, page_html: str, page: int = 1) -> Path:
        """Write one rendered history page and return its path."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / history_file_name(page)
        write_atomic(path, page_html)
        logger.debug(f"History page {page} written to {path}")
        return path
