"""
Tests for the live dashboard: panel state, poller, page rendering and output.
"""

import json
import random
import tempfile
import threading
import unittest
from datetime import datetime
from pathlib import Path
from unittest import mock

from aiacs_dashboard.api.errors import BackendError
from aiacs_dashboard.dashboard import (
    Dashboard,
    DashboardState,
    DashboardWriter,
    PanelData,
    PanelPoller,
    SampleSource,
    render_dashboard_html,
)
from aiacs_dashboard.dashboard.history import HistoryQuery
from aiacs_dashboard.dashboard.output import HISTORY_FILE, INDEX_FILE, RADAR_FILE, STATE_FILE
from aiacs_dashboard.dashboard.sources import BackendSource
from aiacs_dashboard.dashboard.state import to_jsonable
from aiacs_dashboard.models import (
    DEFAULT_CAMERA_SECTORS,
    BirdActivity,
    BoundingBox,
    BoundingBoxInfo,
    CameraRecord,
    DailyCameraStats,
    DetectionPage,
    DetectionRecord,
    SpeciesStat,
    WeatherData,
)
from aiacs_dashboard.settings import AppSettings
from aiacs_dashboard.utils import sample_data


def weather():
    return WeatherData(location="영광", timestamp="2025-05-01T09:00:00", temperature=18.0,
                       feels_like=15.0, humidity=60, wind_speed=4.5)


def east_box(bbox_id="e1", camera_id=2):
    return BoundingBox(0.85, 0.95, 0.45, 0.55, bbox_id=bbox_id, camera_id=camera_id)


class TestDashboardState(unittest.TestCase):
    """Test thread-safe panel state."""

    def test_defaults(self):
        data = DashboardState().data()
        self.assertIsNone(data.weather)
        self.assertEqual(len(data.direction_data), 8)

    def test_setters_bump_revision(self):
        state = DashboardState()
        state.set_left_panel(weather(), [BirdActivity("SG-01", 3)])
        state.set_detections([])
        self.assertEqual(state.revision, 2)
        self.assertIn("left_panel", state.data().updated)
        self.assertIn("detections", state.data().updated)

    def test_clock_does_not_bump_revision(self):
        state = DashboardState()
        now = datetime(2025, 5, 1, 9, 0)
        state.set_clock(now)
        self.assertEqual(state.revision, 0)
        self.assertEqual(state.data().now, now)

    def test_last_write_wins(self):
        state = DashboardState()
        state.set_right_panel(DailyCameraStats(total=1), [])
        state.set_right_panel(DailyCameraStats(total=9), [SpeciesStat("매", 2, "#fff")])
        self.assertEqual(state.data().daily_camera_stats.total, 9)
        self.assertEqual(state.data().species_stats[0].name, "매")

    def test_data_is_a_copy(self):
        state = DashboardState()
        state.set_cameras([CameraRecord(1, "A")])
        data = state.data()
        data.cameras.append(CameraRecord(2, "B"))
        self.assertEqual(len(state.data().cameras), 1)

    def test_snapshot_is_json_ready(self):
        state = DashboardState()
        state.set_left_panel(weather(), [BirdActivity("SG-01", 3, timestamp=datetime(2025, 5, 1))])
        state.set_direction_data({"E": [east_box()]})

        snapshot = state.snapshot()
        json.dumps(snapshot)
        self.assertEqual(snapshot["direction_counts"]["E"], 1)
        self.assertEqual(snapshot["bird_activity"][0]["timestamp"], "2025-05-01T00:00:00")
        self.assertEqual(snapshot["weather"]["location"], "영광")

    def test_to_jsonable_keys(self):
        self.assertEqual(to_jsonable({1: (2, 3)}), {"1": [2, 3]})

    def test_concurrent_writers(self):
        state = DashboardState()

        def write():
            for _ in range(100):
                state.set_detections([])

        threads = [threading.Thread(target=write) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(state.revision, 400)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestPanelPoller(unittest.TestCase):
    """Test interval scheduling of refresh jobs."""

    def setUp(self):
        self.clock = FakeClock()
        self.poller = PanelPoller(clock=self.clock)
        self.calls = []

    def job(self, name):
        return lambda: self.calls.append(name)

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            self.poller.add_job("x", 0, self.job("x"))

    def test_all_jobs_run_first(self):
        self.poller.add_job("fast", 1, self.job("fast"))
        self.poller.add_job("slow", 30, self.job("slow"))

        wait = self.poller.run_due()
        self.assertEqual(self.calls, ["fast", "slow"])
        self.assertEqual(wait, 1)

    def test_intervals(self):
        self.poller.add_job("fast", 1, self.job("fast"))
        self.poller.add_job("slow", 30, self.job("slow"))
        self.poller.run_due()
        self.calls.clear()

        self.clock.now = 1
        self.poller.run_due()
        self.assertEqual(self.calls, ["fast"])

        self.clock.now = 30
        self.poller.run_due()
        self.assertEqual(self.calls, ["fast", "fast", "slow"])

    def test_wait_is_capped(self):
        self.poller.add_job("slow", 300, self.job("slow"))
        self.assertEqual(self.poller.run_due(), 60)

    def test_failure_is_isolated(self):
        def boom():
            raise RuntimeError("backend down")

        self.poller.add_job("bad", 1, boom)
        self.poller.add_job("good", 1, self.job("good"))

        with self.assertLogs("aiacs_dashboard.dashboard.poller", level="ERROR"):
            self.poller.run_due()

        self.assertEqual(self.calls, ["good"])
        self.assertEqual(self.poller.jobs["bad"].failures, 1)
        self.assertEqual(self.poller.jobs["good"].runs, 1)

    def test_refresh(self):
        self.poller.add_job("slow", 300, self.job("slow"))
        self.poller.run_due()
        self.clock.now = 5
        self.poller.refresh("slow")
        self.poller.run_due()
        self.assertEqual(self.calls, ["slow", "slow"])

        with self.assertRaises(KeyError):
            self.poller.refresh("missing")

    def test_refresh_during_run_is_kept(self):
        def slow():
            self.calls.append("slow")
            if len(self.calls) == 1:
                self.poller.refresh("slow")

        self.poller.add_job("slow", 300, slow)
        self.assertEqual(self.poller.run_due(), 0.0)
        self.assertEqual(self.poller.jobs["slow"].next_run, 0.0)

        self.poller.run_due()
        self.assertEqual(self.calls, ["slow", "slow"])
        self.assertEqual(self.poller.jobs["slow"].next_run, 300)

    def test_run_once(self):
        self.poller.add_job("a", 1, self.job("a"))
        self.poller.add_job("b", 1, self.job("b"))
        self.poller.run_once()
        self.assertEqual(self.calls, ["a", "b"])

    def test_thread_start_stop(self):
        poller = PanelPoller()
        ran = threading.Event()
        poller.add_job("tick", 0.01, ran.set)
        poller.start()
        try:
            self.assertTrue(ran.wait(timeout=2))
        finally:
            poller.stop()
        self.assertIsNone(poller._thread)

    def test_start_without_jobs(self):
        poller = PanelPoller()
        poller.start()
        poller.stop()


class TestReport(unittest.TestCase):
    """Test HTML page rendering."""

    def data(self):
        return PanelData(
            now=datetime(2025, 5, 1, 9, 30, 0),
            weather=weather(),
            bird_activity=[BirdActivity("SG-01", 6), BirdActivity("SG-02", 0)],
            detections=[
                DetectionRecord(
                    detection_id=1, camera_id=2, bb_count=4, timestamp="09:29:00",
                    bbox_info=[
                        BoundingBoxInfo(1, "백로", 0, 0, 0, 0),
                        BoundingBoxInfo(1, "왜가리", 0, 0, 0, 0),
                    ],
                ),
                DetectionRecord(detection_id=2, camera_id=1, bb_count=1, timestamp="09:20:00"),
            ],
            daily_camera_stats=DailyCameraStats(total=42, per_camera={1: 30, 2: 12}),
            species_stats=[SpeciesStat("백로", 20, "#4caf50")],
            direction_data={"E": [east_box()]},
            cameras=[CameraRecord(1, "North", status="active")],
        )

    def test_korean_page(self):
        page = render_dashboard_html(self.data(), AppSettings(), DEFAULT_CAMERA_SECTORS,
                                     radar_svg="<svg id='radar'></svg>")
        self.assertIn('<html lang="ko">', page)
        self.assertIn("AIACS 모니터링", page)
        self.assertIn("2025. 05. 01. 09:30:00", page)
        self.assertIn("<svg id='radar'></svg>", page)
        self.assertIn("경고", page)
        self.assertIn("+1 종", page)
        self.assertIn("미확인", page)
        self.assertIn('<div class="big">42</div>', page)
        self.assertIn('href="history.html"', page)

    def test_english_page(self):
        settings = AppSettings(language="en")
        page = render_dashboard_html(self.data(), settings, DEFAULT_CAMERA_SECTORS)
        self.assertIn("Bird activity", page)
        self.assertIn("Warning", page)
        self.assertIn("Unknown", page)

    def test_toggles(self):
        settings = AppSettings(radar_enabled=False, weather_enabled=False)
        page = render_dashboard_html(self.data(), settings, DEFAULT_CAMERA_SECTORS,
                                     radar_svg="<svg id='radar'></svg>")
        self.assertNotIn('class="panel weather"', page)
        self.assertNotIn('class="panel radar"', page)
        self.assertIn('class="panel activity"', page)

    def test_empty_panels(self):
        page = render_dashboard_html(PanelData(), AppSettings(language="en"), DEFAULT_CAMERA_SECTORS)
        self.assertIn("No data", page)

    def test_escaping(self):
        data = self.data()
        data.cameras = [CameraRecord(1, "<script>alert(1)</script>")]
        page = render_dashboard_html(data, AppSettings(), DEFAULT_CAMERA_SECTORS)
        self.assertNotIn("<script>alert(1)", page)
        self.assertIn("&lt;script&gt;", page)

    def test_map_data_is_embedded_safely(self):
        page = render_dashboard_html(self.data(), AppSettings(), DEFAULT_CAMERA_SECTORS,
                                     map_data={"label": "</script><b>"})
        self.assertIn('"label": "<\\/script><b>"', page)
        self.assertEqual(page.count("</script>"), 1)

    def test_stream_links(self):
        page = render_dashboard_html(self.data(), AppSettings(), DEFAULT_CAMERA_SECTORS,
                                     stream_urls={1: "http://backend/camera/1/"})
        self.assertIn('href="http://backend/camera/1/"', page)


class TestDashboardWriter(unittest.TestCase):
    def test_write(self):
        with tempfile.TemporaryDirectory() as tmp:
            writer = DashboardWriter(Path(tmp) / "out")
            writer.write("<html></html>", "<svg></svg>", {"a": 1})
            writer.write("<html>2</html>", "<svg></svg>", {"a": 2})

            out = Path(tmp) / "out"
            self.assertEqual((out / INDEX_FILE).read_text(encoding="utf-8"), "<html>2</html>")
            self.assertEqual((out / RADAR_FILE).read_text(encoding="utf-8"), "<svg></svg>")
            self.assertEqual(json.loads((out / STATE_FILE).read_text(encoding="utf-8")), {"a": 2})
            self.assertEqual(writer.writes, 2)
            self.assertEqual(sorted(p.name for p in out.iterdir()),
                             [INDEX_FILE, RADAR_FILE, STATE_FILE])

    def test_write_history(self):
        with tempfile.TemporaryDirectory() as tmp:
            writer = DashboardWriter(tmp)
            first = writer.write_history("<html>1</html>")
            third = writer.write_history("<html>3</html>", page=3)

            self.assertEqual(first.name, HISTORY_FILE)
            self.assertEqual(third.name, "history-3.html")
            self.assertEqual(third.read_text(encoding="utf-8"), "<html>3</html>")
            self.assertEqual(writer.writes, 0)


class TestSampleData(unittest.TestCase):
    def test_direction_data(self):
        data = sample_data.sample_direction_data(random.Random(1), max_per_direction=3)
        self.assertEqual(len(data), 8)
        for boxes in data.values():
            self.assertLessEqual(len(boxes), 3)
            for box in boxes:
                self.assertIn(box.camera_id, sample_data.SAMPLE_CAMERAS)
                self.assertLess(box.bb_left, box.bb_right)

    def test_detections_newest_first(self):
        detections = sample_data.sample_detections(random.Random(1), datetime(2025, 5, 1, 12))
        times = [d.detection_time for d in detections]
        self.assertEqual(times, sorted(times, reverse=True))

    def test_right_panel(self):
        daily, species = sample_data.sample_right_panel(random.Random(1))
        self.assertEqual(daily.total, sum(daily.per_camera.values()))
        counts = [s.count for s in species]
        self.assertEqual(counts, sorted(counts, reverse=True))

    def test_detection_page(self):
        now = datetime(2025, 5, 1, 12)
        last = sample_data.sample_detection_page(random.Random(1), now, page=5, per_page=20)
        self.assertEqual(last.total_pages, 5)
        self.assertEqual(last.current_page, 5)
        self.assertEqual([d.detection_id for d in last.detections], list(range(15, 0, -1)))

        beyond = sample_data.sample_detection_page(random.Random(1), now, page=6, per_page=20)
        self.assertEqual(beyond.detections, [])
        self.assertEqual(beyond.total_records, sample_data.SAMPLE_HISTORY_RECORDS)


class TestSources(unittest.TestCase):
    def test_backend_source_delegates(self):
        client = mock.Mock()
        source = BackendSource(client, DEFAULT_CAMERA_SECTORS, location="Site", retries=1)
        with mock.patch("aiacs_dashboard.dashboard.sources.fetch_right_panel") as fetch:
            fetch.return_value = {
                "daily_camera_stats": DailyCameraStats(total=3),
                "species_stats": [],
                "direction_data": {"E": []},
            }
            daily, species, direction = source.right_panel()
        self.assertEqual(daily.total, 3)
        self.assertEqual(direction, {"E": []})
        self.assertIsNone(source.direction_data())

    def test_sample_source(self):
        source = SampleSource(random.Random(2))
        weather_data, activity = source.left_panel()
        self.assertEqual(len(activity), 3)
        self.assertEqual(len(source.cameras()), 3)
        self.assertEqual(len(source.direction_data()), 8)
        self.assertEqual(len(source.history(HistoryQuery(per_page=5)).detections), 5)

    def test_backend_source_history(self):
        client = mock.Mock()
        source = BackendSource(client, DEFAULT_CAMERA_SECTORS)
        query = HistoryQuery(page=2, date_from="2025-05-01", date_to="2025-05-31")
        with mock.patch("aiacs_dashboard.dashboard.sources.fetch_detection_page") as fetch:
            fetch.return_value = DetectionPage(detections=[], current_page=2)
            page = source.history(query)
        fetch.assert_called_once_with(
            client, page=2, per_page=20, date_from="2025-05-01", date_to="2025-05-31"
        )
        self.assertEqual(page.current_page, 2)


class TestDashboardApp(unittest.TestCase):
    """Test the wired-up dashboard on sample data."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.out = Path(self.tmp.name)
        self.dashboard = Dashboard(
            source=SampleSource(random.Random(5)),
            sectors=DEFAULT_CAMERA_SECTORS,
            settings=AppSettings(),
            writer=DashboardWriter(self.out),
            rng=random.Random(5),
            stream_url=lambda camera_id: f"http://backend/camera/{camera_id}/",
        )

    def tearDown(self):
        self.tmp.cleanup()

    def test_poller_jobs(self):
        poller = self.dashboard.build_poller({"left_panel": 10})
        jobs = poller.jobs
        self.assertEqual(
            list(jobs),
            [
                "cameras",
                "left_panel",
                "detections",
                "right_panel",
                "direction_plot",
                "history",
                "clock",
            ],
        )
        self.assertEqual(jobs["left_panel"].interval, 10)
        self.assertEqual(jobs["right_panel"].interval, 300)
        self.assertEqual(jobs["history"].interval, 300)

    def test_run_once_writes_everything(self):
        self.dashboard.build_poller().run_once()

        page = (self.out / INDEX_FILE).read_text(encoding="utf-8")
        self.assertIn("AIACS", page)
        self.assertIn('href="http://backend/camera/1/"', page)
        self.assertTrue((self.out / RADAR_FILE).read_text(encoding="utf-8").startswith("<svg"))

        state = json.loads((self.out / STATE_FILE).read_text(encoding="utf-8"))
        self.assertEqual(len(state["map"]["view_fields"]), 3)
        self.assertEqual(state["settings"]["language"], "ko")
        self.assertEqual(len(state["direction_counts"]), 8)
        self.assertIn("AIACS", (self.out / HISTORY_FILE).read_text(encoding="utf-8"))

    def test_write_history(self):
        view = self.dashboard.write_history(HistoryQuery(page=2, per_page=10))
        self.assertEqual(view.page.current_page, 2)
        self.assertEqual(view.stats.total_detections, 10)
        self.assertEqual(view.page_numbers, [1, 2, 3, 4, 5])

        page = (self.out / "history-2.html").read_text(encoding="utf-8")
        self.assertIn("탐지 이력", page)
        self.assertIn("<strong>2</strong>", page)

    def test_refresh_history_backend_error(self):
        self.dashboard.source = mock.Mock()
        self.dashboard.source.history.side_effect = BackendError(500, "url", "Internal server error.")
        with self.assertLogs("aiacs_dashboard.dashboard.app", level="ERROR"):
            self.dashboard.refresh_history()
        self.assertFalse((self.out / HISTORY_FILE).exists())

    def test_direction_plot_follows_data(self):
        self.dashboard.state.set_direction_data({"E": [east_box("x")]})
        self.dashboard.source = mock.Mock()
        self.dashboard.source.direction_data.return_value = None

        self.dashboard.refresh_direction_plot()
        self.assertEqual([p.id for p in self.dashboard.plot.points], ["x"])

        self.dashboard.source.direction_data.return_value = {"E": []}
        self.dashboard.refresh_direction_plot()
        self.assertTrue(self.dashboard.plot.is_empty())

    def test_map_data(self):
        data = self.dashboard.map_data()
        self.assertEqual(data["center"], [35.193097, 126.221395])
        self.assertEqual(len(data["overlay"]["rings"]), 3)
        self.assertEqual(len(data["view_fields"]["1"]), 15)


if __name__ == "__main__":
    unittest.main()
