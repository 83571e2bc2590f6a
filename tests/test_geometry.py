"""Tests for core/geometry.py."""

import math

import pytest

from linkage_sketch.core.geometry import (
    clamp_angle_rad,
    euclid,
    from_local_frame,
    rot2,
    to_local_frame,
)


class TestGeometry:
    def test_euclid(self):
        assert euclid((0.0, 0.0), (3.0, 4.0)) == pytest.approx(5.0)
        assert euclid((1.0, 1.0), (1.0, 1.0)) == 0.0

    def test_rot2_quarter_turn(self):
        x, y = rot2(1.0, 0.0, math.pi / 2)
        assert (x, y) == pytest.approx((0.0, 1.0))

    def test_clamp_angle(self):
        assert clamp_angle_rad(3 * math.pi) == pytest.approx(math.pi)
        assert clamp_angle_rad(-math.pi) == pytest.approx(math.pi)
        assert clamp_angle_rad(0.5) == pytest.approx(0.5)

    def test_local_frame(self):
        assert to_local_frame((1.0, 1.0), (3.0, 1.0), (2.0, 2.0)) == pytest.approx((1.0, 1.0, 2.0))
        # Frame rotated a quarter turn: +X points up.
        assert to_local_frame((0.0, 0.0), (0.0, 2.0), (-1.0, 1.0)) == pytest.approx((1.0, 1.0, 2.0))

    def test_local_frame_needs_distinct_anchors(self):
        assert to_local_frame((0.5, 0.5), (0.5, 0.5), (1.0, 0.0)) is None

    def test_local_frame_inverse(self):
        p0, p1, p = (0.2, -0.1), (-0.4, 0.7), (0.9, 0.3)
        xt, yt, _l2 = to_local_frame(p0, p1, p)
        assert from_local_frame(p0, p1, xt, yt) == pytest.approx(p)
