# -*- coding: utf-8 -*-
"""Drag solver.

Moving one point rewrites the smallest set of ground variables that makes the
forward solve, at the unchanged driver angle, land the point where the pointer
is. The edit is checked by re-tracing the whole revolution; an edit that makes
any pose unreachable is dropped as a whole.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .geometry import FRAME_EPS, Point, clamp_angle_rad, euclid
from .kinematics import PATH_SAMPLES, check_full_turn, hinge_from_points, point_of, trace_path
from .linkage import HingeExternal, HingeInternal, Linkage, Rotary
from .point_map import PointMap
from .references import PointKey


@dataclass
class DragResult:
    initial_vars: Dict[str, float]
    path: Optional[List[Point]] = None


def _refit_frame(frame: Tuple[float, float, float], l2t: float) -> Tuple[float, float, float]:
    """Re-express a hinge frame over the stored anchor distance ``l2t``.

    The link lengths and the branch are kept. A frame whose lengths cannot span
    ``l2t`` is returned unchanged, captured at the current pose.
    """
    xt, yt, l2 = frame
    l0 = math.hypot(xt, yt)
    l1 = math.hypot(xt - l2, yt)
    if l2t < FRAME_EPS or l2t > l0 + l1 or l0 > l2t + l1 or l1 > l2t + l0:
        return frame
    xt = (l2t * l2t + l0 * l0 - l1 * l1) / (2.0 * l2t)
    h = math.sqrt(max(l0 * l0 - xt * xt, 0.0))
    return xt, (-h if yt < 0.0 else h), l2t


def _crank(anchor: Point, tip: Point, angle: float) -> Tuple[float, float]:
    """Length and phase of a crank reaching ``tip`` at driver ``angle``."""
    length = euclid(anchor, tip)
    phase = clamp_angle_rad(math.atan2(tip[1] - anchor[1], tip[0] - anchor[0]) - angle)
    return length, phase


def move_point(
    point_key: PointKey,
    new_point: Point,
    point_map: PointMap,
    linkage: Linkage,
    angle: float,
    values: Dict[str, float],
    trace_pref: Optional[str] = None,
    samples: int = PATH_SAMPLES,
) -> Optional[DragResult]:
    """Propose new ground variables that put ``point_key`` at ``new_point``.

    ``values`` is the solved variable snapshot at ``angle``. Returns None, and
    leaves ``linkage`` untouched, when the edit cannot be kept.
    """
    xr, yr = point_key
    x, y = float(new_point[0]), float(new_point[1])
    initial_vars = linkage.initial_vars
    new_vars = dict(initial_vars)
    ground = xr in initial_vars

    for i in point_map.structures_at(xr):
        s = linkage.structures[i]
        if isinstance(s, Rotary):
            anchor = point_of(values, (s.x0r, s.y0r))
            tip = point_of(values, (s.x1r, s.y1r))
            if xr == s.x0r:
                if ground:
                    new_vars[xr], new_vars[yr] = x, y
                else:
                    new_vars[s.lr], new_vars[s.fr] = _crank((x, y), tip, angle)
            elif xr == s.x1r:
                new_vars[s.lr], new_vars[s.fr] = _crank(anchor, (x, y), angle)
            continue

        p0 = point_of(values, (s.x0r, s.y0r))
        p1 = point_of(values, (s.x1r, s.y1r))
        p2 = point_of(values, (s.x2r, s.y2r))
        if xr in (s.x0r, s.x1r) and ground:
            new_vars[xr], new_vars[yr] = x, y
            continue
        if xr == s.x0r:
            p0 = (x, y)
        elif xr == s.x1r:
            p1 = (x, y)
        elif xr == s.x2r:
            p2 = (x, y)
        else:
            continue

        if isinstance(s, HingeInternal):
            frame = hinge_from_points(p0, p1, p2)
            if frame is None:
                logger.debug("Drag of {} collapses the anchors of structure {}", xr, i)
                return None
            new_vars[s.xtr], new_vars[s.ytr], new_vars[s.l2tr] = _refit_frame(frame, initial_vars[s.l2tr])
        elif isinstance(s, HingeExternal):
            new_vars[s.l0r] = euclid(p0, p2)
            new_vars[s.l1r] = euclid(p1, p2)

    candidate = Linkage(linkage.structures, new_vars)
    if trace_pref is None:
        failure = check_full_turn(candidate, samples)
        if failure is not None:
            logger.debug("Drag of {} rejected: {}", xr, failure.describe())
            return None
        return DragResult(new_vars, None)

    res = trace_path(candidate, trace_pref, samples)
    if not res.ok:
        logger.debug("Drag of {} rejected: {}", xr, res.failure.describe())
        return None
    return DragResult(new_vars, res.value)
