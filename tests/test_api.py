"""
Tests for backend endpoint wrappers: cameras, detections, panels, playback.
"""

import unittest
from datetime import date, datetime
from unittest import mock

from aiacs_dashboard.api import BackendClient, BackendError
from aiacs_dashboard.api.cameras import (
    control_ptz,
    delete_preset,
    get_camera,
    get_camera_detections,
    get_cameras,
    get_presets,
    move_to_preset,
    save_preset,
    stop_ptz,
    update_camera_settings,
)
from aiacs_dashboard.api.dashboard import (
    fetch_bird_activity,
    fetch_daily_camera_stats,
    fetch_direction_bbox_data,
    fetch_right_panel,
    fetch_species_stats,
    fetch_weather,
)
from aiacs_dashboard.api.detections import (
    fetch_detections_filtered,
    fetch_detections_with_bbox_info,
    get_bounding_box_info,
)
from aiacs_dashboard.api.playback import (
    create_playback_session_for_detection,
    fetch_detection_page,
    playback_config_for_detection,
    start_nvr_playback,
    stop_nvr_playback,
)
from aiacs_dashboard.models import (
    DEFAULT_CAMERA_SECTORS,
    CameraSettingsUpdate,
    DetectionRecord,
    NVRConfig,
    PresetCreate,
)


def mock_client():
    return mock.create_autospec(BackendClient, instance=True)


def server_error(path="/api/x"):
    return BackendError(500, path, "Internal server error.")


class TestCameras(unittest.TestCase):
    """Test camera and PTZ wrappers."""

    def setUp(self):
        self.client = mock_client()

    def test_get_cameras(self):
        self.client.get.return_value = {
            "status": "success",
            "cameras": [
                {"id": 1, "name": "North", "status": "active", "ptz_enabled": True},
                {"id": "2", "name": "South", "status": "bogus"},
            ],
        }
        cameras = get_cameras(self.client)
        self.assertEqual([c.id for c in cameras], [1, 2])
        self.assertTrue(cameras[0].ptz_enabled)
        self.assertEqual(cameras[1].status, "inactive")
        self.client.get.assert_called_once_with("/api/cameras/")

    def test_get_cameras_failure_is_empty(self):
        self.client.get.side_effect = server_error()
        with self.assertLogs("aiacs_dashboard.api.cameras", level="ERROR"):
            self.assertEqual(get_cameras(self.client), [])

    def test_get_cameras_non_success(self):
        self.client.get.return_value = {"status": "error"}
        self.assertEqual(get_cameras(self.client), [])

    def test_get_cameras_skips_records_without_id(self):
        self.client.get.return_value = {
            "status": "success",
            "cameras": [{"name": "c"}, {"id": "abc"}, "junk", {"id": 5}],
        }
        with self.assertLogs("aiacs_dashboard.api.cameras", level="WARNING") as logs:
            cameras = get_cameras(self.client)

        self.assertEqual([c.id for c in cameras], [5])
        self.assertEqual(cameras[0].name, "Camera 5")
        self.assertEqual(len(logs.records), 3)

    def test_get_camera_without_id(self):
        self.client.get.return_value = {"status": "success", "camera": {"name": "C"}}
        with self.assertLogs("aiacs_dashboard.api.cameras", level="WARNING"):
            self.assertIsNone(get_camera(self.client, 3))

    def test_presets_skip_records_without_id(self):
        self.client.get.return_value = {
            "status": "success",
            "presets": [{"name": "No id"}, {"id": 2, "name": "Gate", "pan": None}],
        }
        with self.assertLogs("aiacs_dashboard.api.cameras", level="WARNING"):
            presets = get_presets(self.client, 1)
        self.assertEqual([p.id for p in presets], [2])
        self.assertEqual(presets[0].pan, 0.0)

    def test_get_camera_uses_long_timeout(self):
        self.client.get.return_value = {"status": "success", "camera": {"id": 3, "name": "C"}}
        camera = get_camera(self.client, 3)
        self.assertEqual(camera.name, "C")
        self.client.get.assert_called_once_with("/camera/3/", timeout=600)

    def test_get_camera_missing(self):
        self.client.get.return_value = {"status": "success"}
        self.assertIsNone(get_camera(self.client, 3))

    def test_update_settings_sends_only_set_fields(self):
        ok = update_camera_settings(self.client, 1, CameraSettingsUpdate(name="N", night_mode=False))
        self.assertTrue(ok)
        self.client.put.assert_called_once_with(
            "/api/cameras/1/settings/", {"name": "N", "night_mode": False}
        )

    def test_control_ptz(self):
        self.client.post.return_value = {"status": "success"}
        self.assertTrue(control_ptz(self.client, 2, "left"))
        self.client.post.assert_called_once_with(
            "/api/ptz/control/",
            {"camera_id": 2, "direction": "left", "is_continuous": True, "speed": 0.7},
        )

    def test_control_ptz_validates_input(self):
        with self.assertRaises(ValueError):
            control_ptz(self.client, 2, "sideways")
        with self.assertRaises(ValueError):
            control_ptz(self.client, 2, "up", speed=1.5)
        self.client.post.assert_not_called()

    def test_stop_ptz_failure(self):
        self.client.post.side_effect = server_error()
        with self.assertLogs("aiacs_dashboard.api.cameras", level="ERROR"):
            self.assertFalse(stop_ptz(self.client, 2, "zoom_in"))

    def test_presets(self):
        self.client.get.return_value = {
            "status": "success",
            "presets": [{"id": 4, "name": "Gate", "pan": 1.0, "tilt": 2.0, "zoom": 3.0}],
        }
        presets = get_presets(self.client, 1)
        self.assertEqual(presets[0].name, "Gate")

        self.assertTrue(save_preset(self.client, 1, PresetCreate("Gate", 1.0, 2.0, 3.0)))
        self.client.post.assert_called_with(
            "/api/cameras/1/presets/", {"name": "Gate", "pan": 1.0, "tilt": 2.0, "zoom": 3.0}
        )

        self.assertTrue(move_to_preset(self.client, 1, 4))
        self.client.post.assert_called_with("/api/cameras/1/presets/4/move/")

        self.assertTrue(delete_preset(self.client, 1, 4))
        self.client.delete.assert_called_once_with("/api/cameras/1/presets/4/")

    def test_camera_detections_params(self):
        self.client.get.return_value = {
            "status": "success",
            "detections": [{"id": 9, "camera_id": 1, "bb_count": 2}],
        }
        detections = get_camera_detections(self.client, 1, species="Egret", page=2)
        self.assertEqual(detections[0].detection_id, 9)
        path = self.client.get.call_args.args[0]
        params = self.client.get.call_args.kwargs["params"]
        self.assertEqual(path, "/cameras/1/detections")
        self.assertEqual(params["species"], "Egret")
        self.assertEqual(params["page"], 2)


class TestDetections(unittest.TestCase):
    """Test detection history and bounding box lookups."""

    def setUp(self):
        self.client = mock_client()

    def test_filtered_reduces_timestamp(self):
        self.client.get.return_value = {
            "status": "success",
            "detections": [
                {"detection_id": 1, "camera_id": 2, "bb_count": 3,
                 "timestamp": "2025-05-01T09:08:07"},
                {"id": 2, "camera_id": 1, "detection_time": "2025-05-01T10:00:00"},
            ],
        }
        detections = fetch_detections_filtered(self.client)

        self.assertEqual([d.timestamp for d in detections], ["09:08:07", "10:00:00"])
        self.assertEqual(detections[0].detection_time, "2025-05-01T09:08:07")
        self.assertEqual(detections[1].detection_id, 2)
        self.assertEqual(
            self.client.get.call_args.kwargs["params"]["sort_by"], "date_desc"
        )

    def test_filtered_non_success(self):
        self.client.get.return_value = {"status": "error"}
        self.assertEqual(fetch_detections_filtered(self.client), [])

    def test_filtered_retries_then_raises(self):
        self.client.get.side_effect = server_error()
        with self.assertLogs("aiacs_dashboard.api", level="WARNING"):
            with self.assertRaises(BackendError):
                fetch_detections_filtered(self.client, retries=2, retry_delay=0)
        self.assertEqual(self.client.get.call_count, 2)

    def test_bbox_info(self):
        self.client.get.return_value = {
            "status": "success",
            "bb_info": [{"record_id": 1, "class_name": "Egret", "confidence": 0.9}],
        }
        info = get_bounding_box_info(self.client, 1)
        self.assertEqual(info[0].class_name, "Egret")
        self.client.get.assert_called_once_with("/api/detection/bb-info/1/", timeout=20)

    def test_bbox_info_empty(self):
        self.client.get.return_value = {"status": "success", "bb_info": []}
        with self.assertLogs("aiacs_dashboard.api.detections", level="WARNING"):
            self.assertEqual(get_bounding_box_info(self.client, 1), [])

    def test_with_bbox_info(self):
        def get(path, params=None, timeout=None):
            if path == "/api/detections/filtered/":
                return {
                    "status": "success",
                    "detections": [
                        {"detection_id": 1, "camera_id": 1},
                        {"detection_id": 2, "camera_id": 2},
                        {"camera_id": 3},
                    ],
                }
            if path == "/api/detection/bb-info/1/":
                return {"status": "success",
                        "bb_info": [{"class_name": "Egret"}, {"class_name": "Heron"}]}
            raise BackendError(404, path, "Requested resource not found.")

        self.client.get.side_effect = get
        with self.assertLogs("aiacs_dashboard.api.detections", level="INFO") as logs:
            detections = fetch_detections_with_bbox_info(self.client, retries=1, retry_delay=0)

        self.assertEqual(len(detections), 3)
        self.assertEqual(detections[0].primary_species, "Egret")
        self.assertEqual(detections[0].additional_species_count, 1)
        self.assertEqual(detections[1].bbox_info, [])
        self.assertEqual(detections[2].bbox_info, [])
        self.assertTrue(any("1 with boxes, 2 without" in line for line in logs.output))

    def test_with_bbox_info_list_failure(self):
        self.client.get.side_effect = BackendError(404, "/api/detections/filtered/", "gone")
        with self.assertLogs("aiacs_dashboard.api.detections", level="ERROR"):
            self.assertEqual(fetch_detections_with_bbox_info(self.client), [])


class TestPanels(unittest.TestCase):
    """Test left and right panel fetchers."""

    def setUp(self):
        self.client = mock_client()

    def test_weather(self):
        self.client.get.return_value = {
            "timestamp": "2025-05-01T09:00:00",
            "current": {"temperature": 18.5, "humidity": 60, "wind_speed": 4.2,
                        "precipitation_type": "rain"},
        }
        weather = fetch_weather(self.client, "Site")
        self.assertEqual(weather.location, "Site")
        self.assertEqual(weather.feels_like, 15.5)
        self.assertEqual(weather.weather_condition, "rain")
        self.assertEqual(weather.visibility, 0)

    def test_weather_zero_temperature_has_no_feels_like(self):
        self.client.get.return_value = {"current": {"temperature": 0}}
        weather = fetch_weather(self.client)
        self.assertIsNone(weather.feels_like)
        self.assertEqual(weather.weather_condition, "none")

    def test_weather_failure(self):
        self.client.get.side_effect = server_error()
        with self.assertLogs("aiacs_dashboard.api.dashboard", level="ERROR"):
            self.assertIsNone(fetch_weather(self.client))

    def test_bird_activity_takes_newest_per_camera(self):
        self.client.get.return_value = {
            "status": "success",
            "detections": [
                {"camera_id": 2, "bb_count": 7},
                {"camera_id": 1, "bb_count": 3},
                {"camera_id": 2, "bb_count": 1},
                {"camera_id": None, "bb_count": 9},
            ],
        }
        now = datetime(2025, 5, 1, 12, 0)
        activity = fetch_bird_activity(self.client, today=date(2025, 5, 1), now=now)

        self.assertEqual([a.turbine_id for a in activity], ["SG-01", "SG-02", "SG-03"])
        self.assertEqual([a.count for a in activity], [3, 7, 0])
        self.assertEqual([a.risk for a in activity], ["medium", "high", "low"])
        self.assertTrue(all(a.timestamp == now for a in activity))

        params = self.client.get.call_args.kwargs["params"]
        self.assertEqual(params["date_from"], "2025-05-01")
        self.assertEqual(params["per_page"], 10)

    def test_bird_activity_failure_keeps_rows(self):
        self.client.get.side_effect = server_error()
        with self.assertLogs("aiacs_dashboard.api.dashboard", level="ERROR"):
            activity = fetch_bird_activity(self.client)
        self.assertEqual(len(activity), 3)
        self.assertTrue(all(a.count == 0 for a in activity))

    def test_stats(self):
        self.client.get.return_value = {
            "status": "success",
            "stats": {
                "total_bb_today": 42,
                "camera_stats": [{"camera_id": "1", "bb_count": 30}, {"bb_count": 1}],
                "species_stats": [{"name": f"s{i}", "count": i} for i in range(8)],
            },
        }
        with self.assertLogs("aiacs_dashboard.api.dashboard", level="WARNING"):
            daily = fetch_daily_camera_stats(self.client)
        self.assertEqual(daily.total, 42)
        self.assertEqual(daily.for_camera(1), 30)
        self.assertEqual(daily.for_camera(2), 0)

        species = fetch_species_stats(self.client)
        self.assertEqual(len(species), 6)
        self.assertEqual(species[0].color, "#4caf50")

    def test_stats_failure(self):
        self.client.get.side_effect = server_error()
        with self.assertLogs("aiacs_dashboard.api.dashboard", level="ERROR"):
            self.assertEqual(fetch_daily_camera_stats(self.client).total, 0)
            self.assertEqual(fetch_species_stats(self.client), [])

    def test_direction_data(self):
        self.client.get.return_value = {
            "bb_data": [
                {"bb_left": 0.85, "bb_right": 0.95, "bb_top": 0.5, "bb_bottom": 0.6},
                {"bb_left": 0.45, "bb_right": 0.55, "bb_top": 0.45, "bb_bottom": 0.55},
                {"bb_left": 0.0, "bb_right": 0.1, "bb_top": 0.0, "bb_bottom": 0.1,
                 "camera_id": "3", "species": "Egret"},
            ]
        }
        data = fetch_direction_bbox_data(self.client, DEFAULT_CAMERA_SECTORS,
                                         today=date(2025, 5, 1))

        self.assertEqual(len(data["E"]), 1)
        self.assertEqual(data["E"][0].bbox_id, "bbox_2025-05-01_0")
        self.assertEqual(data["E"][0].camera_id, 2)
        self.assertEqual(data["NW"][0].camera_id, 3)
        self.assertEqual(sum(len(v) for v in data.values()), 2)
        self.assertTrue(self.client.get.call_args.kwargs["params"]["get_all"])

    def test_direction_data_failure(self):
        self.client.get.side_effect = server_error()
        with self.assertLogs("aiacs_dashboard.api.dashboard", level="ERROR"):
            data = fetch_direction_bbox_data(self.client, DEFAULT_CAMERA_SECTORS)
        self.assertEqual(len(data), 8)
        self.assertTrue(all(v == [] for v in data.values()))

    def test_direction_data_malformed_rows(self):
        self.client.get.return_value = {
            "bb_data": [
                {"bb_left": None, "bb_right": 0.95, "bb_top": 0.5, "bb_bottom": 0.6},
                {"bb_left": 0.85, "bb_right": 0.95, "bb_top": 0.5, "bb_bottom": 0.6,
                 "camera_id": "cam1"},
                {"bb_left": "wide", "bb_top": 0.1},
                "not a box",
            ]
        }
        with self.assertLogs("aiacs_dashboard.api.dashboard", level="WARNING"):
            data = fetch_direction_bbox_data(self.client, DEFAULT_CAMERA_SECTORS,
                                             today=date(2025, 5, 1))

        self.assertEqual(len(data["E"]), 1)
        self.assertEqual(data["E"][0].camera_id, 2)

    def test_direction_data_not_a_list(self):
        self.client.get.return_value = {"bb_data": 5}
        data = fetch_direction_bbox_data(self.client, DEFAULT_CAMERA_SECTORS)
        self.assertTrue(all(v == [] for v in data.values()))

    def test_right_panel_keeps_stats_with_bad_boxes(self):
        def get(path, params=None, timeout=None):
            if path == "/api/dashboard/stats/":
                return {
                    "status": "success",
                    "stats": {
                        "total_bb_today": 7,
                        "species_stats": [{"name": "Egret", "count": 7}],
                    },
                }
            return {"bb_data": [{"bb_left": None, "bb_right": None, "camera_id": "x"}]}

        self.client.get.side_effect = get
        panel = fetch_right_panel(self.client, DEFAULT_CAMERA_SECTORS)

        self.assertEqual(panel["daily_camera_stats"].total, 7)
        self.assertEqual(panel["species_stats"][0].name, "Egret")
        self.assertEqual(len(panel["direction_data"]), 8)

    def test_right_panel_single_stats_request(self):
        def get(path, params=None, timeout=None):
            if path == "/api/dashboard/stats/":
                return {"status": "success", "stats": {"total_bb_today": 5}}
            return {"bb_data": []}

        self.client.get.side_effect = get
        panel = fetch_right_panel(self.client, DEFAULT_CAMERA_SECTORS)

        self.assertEqual(panel["daily_camera_stats"].total, 5)
        self.assertEqual(panel["species_stats"], [])
        self.assertEqual(len(panel["direction_data"]), 8)
        stats_calls = [c for c in self.client.get.call_args_list
                       if c.args[0] == "/api/dashboard/stats/"]
        self.assertEqual(len(stats_calls), 1)


class TestPlayback(unittest.TestCase):
    """Test NVR playback and history paging."""

    def setUp(self):
        self.client = mock_client()
        self.detection = DetectionRecord(
            detection_id=7, camera_id=2, detection_time="2025-05-01T09:00:00.250Z"
        )

    def test_config_for_detection(self):
        config = playback_config_for_detection(self.detection, {"password": "pw"})
        self.assertEqual(config.channel, 2)
        self.assertEqual(config.ip, "192.168.219.102")
        self.assertEqual(config.port, 80)
        self.assertEqual(config.username, "admin")
        self.assertEqual(config.password, "pw")
        self.assertEqual(config.start_time, "2025-05-01T09:00:00.250Z")

    def test_config_default_channel(self):
        detection = DetectionRecord(detection_id=7, camera_id=0,
                                    detection_time="2025-05-01T09:00:00Z")
        self.assertEqual(playback_config_for_detection(detection).channel, 5)
        self.assertEqual(
            playback_config_for_detection(detection, {"default_channel": 9}).channel, 9
        )

    def test_config_invalid_time(self):
        detection = DetectionRecord(detection_id=7, camera_id=1, detection_time="soon")
        with self.assertRaises(ValueError):
            playback_config_for_detection(detection)

    def test_start_playback(self):
        self.client.post.return_value = {
            "id": "abc", "url": "rtsp://nvr/abc", "channel": 2, "start_time": "t",
        }
        session = create_playback_session_for_detection(self.client, self.detection)

        self.assertEqual(session.id, "abc")
        self.assertEqual(session.status, "active")
        path, payload = self.client.post.call_args.args
        self.assertEqual(path, "/api/nvr/playback/start")
        self.assertNotIn("end_time", payload)
        self.assertEqual(payload["channel"], 2)

    def test_start_playback_propagates_errors(self):
        self.client.post.side_effect = BackendError(
            404, "/api/nvr/playback/start", "NVR playback service not found."
        )
        config = NVRConfig("ip", 80, "admin", "", 1, "2025-05-01T00:00:00.000Z")
        with self.assertRaises(BackendError):
            start_nvr_playback(self.client, config)

    def test_stop_playback(self):
        stop_nvr_playback(self.client, "abc")
        self.client.post.assert_called_once_with("/api/nvr/playback/stop/abc")

    def test_detection_page(self):
        self.client.get.return_value = {
            "detections": [{"id": 1, "camera_id": 1}],
            "total_pages": 4,
            "current_page": 2,
            "total_records": 70,
        }
        page = fetch_detection_page(self.client, page=2)
        self.assertEqual(page.total_pages, 4)
        self.assertEqual(page.current_page, 2)
        self.assertEqual(page.detections[0].detection_id, 1)
        self.assertEqual(self.client.get.call_args.kwargs["params"]["page"], 2)

    def test_detection_page_with_null_fields(self):
        self.client.get.return_value = {
            "detections": None,
            "total_pages": None,
            "page": "3",
            "total": None,
        }
        page = fetch_detection_page(self.client, page=3)
        self.assertEqual(page.detections, [])
        self.assertEqual((page.total_pages, page.current_page, page.total_records), (1, 3, 0))


if __name__ == "__main__":
    unittest.main()
