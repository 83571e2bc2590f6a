# -*- coding: utf-8 -*-
"""Geometry helpers."""

from __future__ import annotations

import math
from typing import Optional, Tuple

Point = Tuple[float, float]

# Anchors closer than this do not define a frame.
FRAME_EPS = 1e-12


def euclid(p: Point, q: Point) -> float:
    return math.hypot(p[0] - q[0], p[1] - q[1])


def clamp_angle_rad(a: float) -> float:
    """Wrap angle to (-pi, pi]."""
    while a <= -math.pi:
        a += 2 * math.pi
    while a > math.pi:
        a -= 2 * math.pi
    return a


def rot2(x: float, y: float, a: float) -> Tuple[float, float]:
    ca, sa = math.cos(a), math.sin(a)
    return ca * x - sa * y, sa * x + ca * y


def to_local_frame(p0: Point, p1: Point, p: Point) -> Optional[Tuple[float, float, float]]:
    """Express ``p`` in the frame anchored at ``p0`` with +X pointing at ``p1``.

    Returns (xt, yt, l2) where l2 is the anchor distance, or None when the two
    anchors coincide.
    """
    dx = p1[0] - p0[0]
    dy = p1[1] - p0[1]
    l2 = math.hypot(dx, dy)
    if l2 < FRAME_EPS:
        return None
    xt, yt = rot2(p[0] - p0[0], p[1] - p0[1], -math.atan2(dy, dx))
    return xt, yt, l2


def from_local_frame(p0: Point, p1: Point, xt: float, yt: float) -> Point:
    """Inverse of :func:`to_local_frame` for a non-degenerate frame."""
    a = math.atan2(p1[1] - p0[1], p1[0] - p0[0])
    x, y = rot2(xt, yt, a)
    return p0[0] + x, p0[1] + y
