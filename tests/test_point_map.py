"""Tests for core/point_map.py."""

from linkage_sketch.core.point_map import (
    PointKind,
    build_point_map,
    clickable_point_keys,
    nearest_point,
)


class TestPointMap:
    def test_incidence(self, point_map):
        assert point_map.structures_at("x0") == [0]
        # The crank tip only keeps its rotary.
        assert point_map.structures_at("x1") == [0]
        assert point_map.structures_at("x2") == [1, 2]
        assert point_map.structures_at("x3") == [1]
        assert point_map.structures_at("x4") == [2]

    def test_kinds(self, point_map):
        assert point_map.kind("x0") is PointKind.GROUND
        assert point_map.kind("x3") is PointKind.GROUND
        assert point_map.kind("x1") is PointKind.ACTUATOR
        assert point_map.kind("x2") is PointKind.JOINT
        assert point_map.kind("x4") is PointKind.JOINT

    def test_frame_refs_are_not_points(self, point_map):
        assert "x5" not in point_map
        assert "x6" not in point_map
        assert point_map.structures_at("x5") == []

    def test_keys(self, point_map):
        assert sorted(point_map.keys()) == [("x0", "y0"), ("x1", "y1"), ("x2", "y2"), ("x3", "y3"), ("x4", "y4")]

    def test_structures_at_returns_copy(self, point_map):
        point_map.structures_at("x2").append(9)
        assert point_map.structures_at("x2") == [1, 2]

    def test_external_hinges_map_the_same(self, four_bar, point_map):
        assert build_point_map(four_bar).incidence == point_map.incidence


class TestHitTesting:
    def test_clickable_while_running(self, point_map, four_bar_internal):
        keys = clickable_point_keys(False, point_map, four_bar_internal.initial_vars)
        assert sorted(keys) == [("x0", "y0"), ("x3", "y3")]

    def test_clickable_while_paused(self, point_map, four_bar_internal):
        keys = clickable_point_keys(True, point_map, four_bar_internal.initial_vars)
        assert len(keys) == 5

    def test_nearest_within_threshold(self, values0):
        keys = [("x0", "y0"), ("x1", "y1"), ("x3", "y3")]
        assert nearest_point((-0.4, 0.005), keys, values0, 0.02) == ("x0", "y0")
        assert nearest_point((0.0, 0.5), keys, values0, 0.02) is None

    def test_nearest_wins_over_first(self):
        values = {"x0": 0.0, "y0": 0.0, "x1": 0.01, "y1": 0.0}
        keys = [("x0", "y0"), ("x1", "y1")]
        assert nearest_point((0.009, 0.0), keys, values, 0.05) == ("x1", "y1")

    def test_missing_values_are_skipped(self):
        assert nearest_point((0.0, 0.0), [("x9", "y9")], {}, 1.0) is None
