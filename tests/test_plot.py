"""
Tests for the keyed radar plot: data join, transitions and angle placement.
"""

import random
import unittest

from aiacs_dashboard.models import DEFAULT_CAMERA_SECTORS, BoundingBox
from aiacs_dashboard.radar.plot import (
    POINT_OPACITY,
    POINT_RADIUS,
    DirectionPlot,
    PlotLayout,
    ease_cubic_in_out,
)


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


def bbox(bbox_id, camera_id=2, size=0.1, species="Egret"):
    return BoundingBox(0.0, size, 0.0, size, bbox_id=bbox_id, species=species,
                       camera_id=camera_id)


class TestPlotLayout(unittest.TestCase):
    """Test drawing surface geometry."""

    def test_defaults(self):
        layout = PlotLayout()
        self.assertEqual(layout.inner_width, 240)
        self.assertEqual(layout.inner_height, 200)
        self.assertEqual(layout.center, (120, 100))
        self.assertAlmostEqual(layout.radius, 90)


class TestEasing(unittest.TestCase):
    def test_endpoints_and_midpoint(self):
        self.assertEqual(ease_cubic_in_out(0), 0)
        self.assertEqual(ease_cubic_in_out(1), 1)
        self.assertAlmostEqual(ease_cubic_in_out(0.5), 0.5)

    def test_clamped(self):
        self.assertEqual(ease_cubic_in_out(-1), 0)
        self.assertEqual(ease_cubic_in_out(2), 1)


class TestBuildPoints(unittest.TestCase):
    """Test conversion of boxes into plot points."""

    def setUp(self):
        self.plot = DirectionPlot(DEFAULT_CAMERA_SECTORS, rng=random.Random(7),
                                  clock=FakeClock())

    def test_angle_within_camera_sector(self):
        for camera_id in (1, 2, 3):
            points = self.plot.build_points({"NE": [bbox(f"b{camera_id}", camera_id)]})
            sector = next(s for s in DEFAULT_CAMERA_SECTORS if s.camera_id == camera_id)
            self.assertEqual(len(points), 1)
            self.assertTrue(sector.contains(points[0].angle))
            self.assertEqual(points[0].color, sector.color)
            self.assertEqual(points[0].sector_name, sector.name)

    def test_missing_camera_defaults_to_first(self):
        points = self.plot.build_points({"N": [bbox("x", camera_id=None)]})
        self.assertEqual(points[0].camera_id, 1)

    def test_unknown_camera_is_dropped(self):
        points = self.plot.build_points({"N": [bbox("x", camera_id=9)]})
        self.assertEqual(points, [])

    def test_missing_id_uses_direction_and_index(self):
        points = self.plot.build_points({"SW": [bbox(None), bbox(None)]})
        self.assertEqual([p.id for p in points], ["SW_0", "SW_1"])

    def test_radius_follows_box_size(self):
        near = self.plot.build_points({"N": [bbox("near", size=0.5)]})[0]
        far = self.plot.build_points({"N": [bbox("far", size=0.01)]})[0]
        self.assertEqual(near.distance, 0.2)
        self.assertEqual(far.distance, 0.7)
        self.assertEqual(near.bbox_width, 50.0)
        self.assertEqual(near.estimated_distance, "10-30m")

    def test_position_is_inside_plot_radius(self):
        layout = self.plot.layout
        cx, cy = layout.center
        point = self.plot.build_points({"N": [bbox("a", size=0.01)]})[0]
        dist = ((point.x - cx) ** 2 + (point.y - cy) ** 2) ** 0.5
        self.assertAlmostEqual(dist, layout.radius * 0.7)


class TestDataJoin(unittest.TestCase):
    """Test enter/update/exit across refreshes."""

    def setUp(self):
        self.clock = FakeClock()
        self.plot = DirectionPlot(DEFAULT_CAMERA_SECTORS, transition_ms=300,
                                  rng=random.Random(1), clock=self.clock)

    def test_enter(self):
        diff = self.plot.update_from_bboxes({"NE": [bbox("a"), bbox("b")]})
        self.assertEqual(diff.entered, ["a", "b"])
        self.assertEqual(diff.updated, [])
        self.assertTrue(diff.changed)
        self.assertEqual(len(self.plot.points), 2)

    def test_update_keeps_angle(self):
        self.plot.update_from_bboxes({"NE": [bbox("a")]})
        angle = self.plot.point("a").angle

        self.clock.advance(1000)
        diff = self.plot.update_from_bboxes({"NE": [bbox("a", size=0.3)]})

        self.assertEqual(diff.updated, ["a"])
        self.assertFalse(diff.changed)
        self.assertEqual(self.plot.point("a").angle, angle)

    def test_angle_is_replaced_when_camera_changes(self):
        self.plot.update_from_bboxes({"NE": [bbox("a", camera_id=2)]})
        self.clock.advance(1000)
        self.plot.update_from_bboxes({"NE": [bbox("a", camera_id=3)]})

        sector = next(s for s in DEFAULT_CAMERA_SECTORS if s.camera_id == 3)
        self.assertTrue(sector.contains(self.plot.point("a").angle))

    def test_exit_fades_then_removes(self):
        self.plot.update_from_bboxes({"NE": [bbox("a")]})
        self.clock.advance(1000)

        diff = self.plot.update_from_bboxes({})
        self.assertEqual(diff.exited, ["a"])
        self.assertTrue(self.plot.is_empty())

        # Still drawn while fading out
        mid = self.plot.frame(self.clock.now + 150)
        self.assertEqual(len(mid), 1)
        self.assertTrue(mid[0].exiting)
        self.assertLess(mid[0].opacity, POINT_OPACITY)

        self.assertEqual(self.plot.frame(self.clock.now + 300), [])
        self.assertIsNone(self.plot.point("a"))

    def test_exit_is_reported_once(self):
        self.plot.update_from_bboxes({"NE": [bbox("a")]})
        self.plot.update_from_bboxes({})
        diff = self.plot.update_from_bboxes({})
        self.assertEqual(diff.exited, [])

    def test_reentering_point_enters_again(self):
        self.plot.update_from_bboxes({"NE": [bbox("a")]})
        self.clock.advance(1000)
        self.plot.update_from_bboxes({})
        self.clock.advance(100)

        diff = self.plot.update_from_bboxes({"NE": [bbox("a")]})
        self.assertEqual(diff.entered, ["a"])

    def test_duplicate_ids_last_wins(self):
        diff = self.plot.update_from_bboxes({"NE": [bbox("a", size=0.01), bbox("a", size=0.5)]})
        self.assertEqual(diff.entered, ["a"])
        self.assertEqual(self.plot.point("a").distance, 0.2)

    def test_clear(self):
        self.plot.update_from_bboxes({"NE": [bbox("a"), bbox("b")]})
        diff = self.plot.clear()
        self.assertEqual(sorted(diff.exited), ["a", "b"])


class TestTransitions(unittest.TestCase):
    """Test interpolated frames."""

    def setUp(self):
        self.clock = FakeClock(1000.0)
        self.plot = DirectionPlot(DEFAULT_CAMERA_SECTORS, transition_ms=300,
                                  rng=random.Random(3), clock=self.clock)

    def test_entering_point_grows_in(self):
        self.plot.update_from_bboxes({"NE": [bbox("a")]})

        start = self.plot.frame(1000.0)[0]
        self.assertEqual(start.r, 0.0)
        self.assertEqual(start.opacity, 0.0)

        end = self.plot.frame(1300.0)[0]
        self.assertAlmostEqual(end.r, POINT_RADIUS)
        self.assertAlmostEqual(end.opacity, POINT_OPACITY)

        self.assertEqual(self.plot.remaining_ms(1100.0)["a"], 200.0)
        self.assertEqual(self.plot.remaining_ms(2000.0)["a"], 0.0)

    def test_update_moves_from_current_position(self):
        self.plot.update_from_bboxes({"NE": [bbox("a", size=0.01)]})
        self.clock.advance(500)
        before = self.plot.frame()[0]

        self.plot.update_from_bboxes({"NE": [bbox("a", size=0.5)]})
        start = self.plot.frame()[0]
        target = self.plot.targets()[0]

        self.assertAlmostEqual(start.x, before.x)
        self.assertAlmostEqual(start.y, before.y)
        self.assertGreater(abs(target.x - before.x) + abs(target.y - before.y), 1.0)

    def test_zero_duration_is_immediate(self):
        plot = DirectionPlot(DEFAULT_CAMERA_SECTORS, transition_ms=0,
                             rng=random.Random(3), clock=self.clock)
        plot.update_from_bboxes({"NE": [bbox("a")]})
        state = plot.frame()[0]
        self.assertEqual(state.r, POINT_RADIUS)


if __name__ == "__main__":
    unittest.main()
