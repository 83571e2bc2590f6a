# -*- coding: utf-8 -*-
"""Forward kinematics.

Evaluation lowers a :class:`~.linkage.Linkage` onto a flat numpy arena: every
reference gets an integer slot, and each structure becomes an instruction over
slot handles. Slots are rows of a 2-D array so that one pass over the program
evaluates any number of driver angles at once, which is how closed paths are
sampled.

Geometric validity is reported as data. A hinge whose circles do not meet
produces a :class:`DegenerateTriangle` inside a :class:`KinematicResult`;
the same oracle drives frame skipping, drag rollback and link validation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Generic, List, Optional, Tuple, TypeVar

import numpy as np
from loguru import logger

from .geometry import FRAME_EPS, Point, to_local_frame
from .linkage import HingeExternal, HingeInternal, Linkage, LinkageDefinitionError, Rotary
from .references import PointKey, pref_to_refs

T = TypeVar("T")

PATH_SAMPLES = 125


@dataclass(frozen=True)
class DegenerateTriangle:
    """A hinge could not be closed: its two circles do not intersect."""

    structure: int
    angle: float
    l0: float
    l1: float
    l2: float

    def describe(self) -> str:
        return (
            f"structure {self.structure}: lengths {self.l0:.6g}, {self.l1:.6g} "
            f"cannot span anchor distance {self.l2:.6g} at angle {self.angle:.4f}"
        )


class DegenerateTriangleError(Exception):
    def __init__(self, failure: DegenerateTriangle):
        super().__init__(failure.describe())
        self.failure = failure


@dataclass(frozen=True)
class KinematicResult(Generic[T]):
    """Either a value or the degenerate hinge that prevented computing it."""

    value: Optional[T] = None
    failure: Optional[DegenerateTriangle] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> T:
        if self.failure is not None:
            raise DegenerateTriangleError(self.failure)
        return self.value  # type: ignore[return-value]


def point_of(values: Dict[str, float], key: PointKey) -> Point:
    return float(values[key[0]]), float(values[key[1]])


def _intersect(x0, y0, x1, y1, l0, l1, sign):
    """Vectorised two-circle intersection.

    Returns (x, y, bad, l2). ``bad`` flags columns where the lengths do not
    form a triangle over the anchor distance; their x/y are meaningless.
    """
    dx = x1 - x0
    dy = y1 - y0
    l2 = np.hypot(dx, dy)
    # Coincident anchors have no unique intersection, even when l0 == l1.
    bad =(l2 < FRAME_EPS) | (l2 > l0 + l1) | (l0 > l2 + l1) | (l1 > l2 + l0)
    with np.errstate(divide="ignore", invalid="ignore"):
        xt = (l2 * l2 + l0 * l0 - l1 * l1) / (2.0 * l2)
        yt = sign * np.sqrt(np.maximum(l0 * l0 - xt * xt, 0.0))
        c = dx / l2
        s = dy / l2
    return x0 + xt * c - yt * s, y0 + xt * s + yt * c, bad, l2


def solve_hinge(p0: Point, p1: Point, l0: float, l1: float, sign: float = 1.0) -> Optional[Point]:
    """Point at ``l0`` from ``p0`` and ``l1`` from ``p1``.

    The branch is the one with local y of the given sign in the frame running
    from ``p0`` to ``p1``. Returns None when no triangle exists.
    """
    args = [np.atleast_1d(float(v)) for v in (p0[0], p0[1], p1[0], p1[1], l0, l1)]
    x, y, bad, _l2 = _intersect(*args, 1.0 if sign >= 0 else -1.0)
    if bad[0]:
        return None
    return float(x[0]), float(y[0])


def hinge_from_points(p0: Point, p1: Point, p2: Point) -> Optional[Tuple[float, float, float]]:
    """Internal hinge parameters (xt, yt, l2t) for driven point ``p2``."""
    return to_local_frame(p0, p1, p2)


class CompiledLinkage:
    """A linkage lowered onto integer slot handles."""

    def __init__(self, linkage: Linkage):
        linkage.validate()
        names: List[str] = list(linkage.initial_vars)
        for s in linkage.structures:
            names.extend(s.outputs)
        self.names = names
        self.handles: Dict[str, int] = {n: i for i, n in enumerate(names)}
        self.base = np.array([linkage.initial_vars.get(n, 0.0) for n in names], dtype=float)
        self.program = [
            (type(s), tuple(self.handles[r] for r in (*s.inputs, *s.outputs)))
            for s in linkage.structures
        ]

    def handle(self, ref: str) -> int:
        try:
            return self.handles[ref]
        except KeyError:
            raise LinkageDefinitionError(f"Unknown reference: {ref!r}") from None

    def run(self, angles) -> Tuple[np.ndarray, Optional[DegenerateTriangle]]:
        """Evaluate every structure for each angle.

        Returns the slot array (one column per angle) and the first failure.
        On failure the slots of later structures are left unset.
        """
        angles = np.atleast_1d(np.asarray(angles, dtype=float))
        slots = np.repeat(self.base[:, None], angles.size, axis=1)
        for index, (op, h) in enumerate(self.program):
            if op is Rotary:
                lr, x0, y0, fr, x1, y1 = h
                a = angles + slots[fr]
                slots[x1] = slots[x0] + slots[lr] * np.cos(a)
                slots[y1] = slots[y0] + slots[lr] * np.sin(a)
                continue
            if op is HingeExternal:
                l0r, l1r, x0, y0, x1, y1, x2, y2 = h
                l0 = slots[l0r]
                l1 = slots[l1r]
                sign = 1.0
            else:
                xtr, ytr, l2tr, x0, y0, x1, y1, x2, y2 = h
                xt, yt, l2t = slots[xtr], slots[ytr], slots[l2tr]
                l0 = np.hypot(xt, yt)
                l1 = np.hypot(xt - l2t, yt)
                sign = np.where(yt < 0.0, -1.0, 1.0)
            px, py, bad, l2 = _intersect(slots[x0], slots[y0], slots[x1], slots[y1], l0, l1, sign)
            if bad.any():
                k = int(np.argmax(bad))
                return slots, DegenerateTriangle(
                    structure=index,
                    angle=float(angles[k]),
                    l0=float(l0[k]),
                    l1=float(l1[k]),
                    l2=float(l2[k]),
                )
            slots[x2] = px
            slots[y2] = py
        return slots, None

    def column(self, slots: np.ndarray, k: int = 0) -> Dict[str, float]:
        return {n: float(slots[i, k]) for i, n in enumerate(self.names)}


def full_turn(samples: int = PATH_SAMPLES) -> np.ndarray:
    return np.arange(int(samples), dtype=float) * (2.0 * math.pi / int(samples))


def evaluate(linkage: Linkage, angle: float) -> KinematicResult[Dict[str, float]]:
    """Solve every variable of the linkage at the given driver angle."""
    compiled = CompiledLinkage(linkage)
    slots, failure = compiled.run(angle)
    if failure is not None:
        logger.debug("Evaluation failed: {}", failure.describe())
        return KinematicResult(failure=failure)
    return KinematicResult(compiled.column(slots, 0))


def trace_path(linkage: Linkage, pref: str, samples: int = PATH_SAMPLES) -> KinematicResult[List[Point]]:
    """Closed polyline traced by point ``pref`` over one driver revolution.

    The first sample is repeated at the end. The path only exists when the
    mechanism closes at every sampled angle.
    """
    compiled = CompiledLinkage(linkage)
    xr, yr = pref_to_refs(pref)
    xi, yi = compiled.handle(xr), compiled.handle(yr)
    slots, failure = compiled.run(full_turn(samples))
    if failure is not None:
        logger.debug("Path of point {} is not closed: {}", pref, failure.describe())
        return KinematicResult(failure=failure)
    path = [(float(x), float(y)) for x, y in zip(slots[xi], slots[yi])]
    path.append(path[0])
    return KinematicResult(path)


def check_full_turn(linkage: Linkage, samples: int = PATH_SAMPLES) -> Optional[DegenerateTriangle]:
    """First failure met while driving the whole linkage through one turn."""
    _slots, failure = CompiledLinkage(linkage).run(full_turn(samples))
    return failure


def internalize(linkage: Linkage, reference_angle: float = 0.0) -> KinematicResult[Linkage]:
    """Convert every external hinge to its internal form.

    Frames are captured at the pose of ``reference_angle``; the link length
    variables the hinges no longer need are dropped.
    """
    if linkage.is_internal:
        return KinematicResult(linkage.copy())
    res = evaluate(linkage, reference_angle)
    if not res.ok:
        return KinematicResult(failure=res.failure)
    values = res.value or {}

    alloc = linkage.allocator()
    initial_vars = dict(linkage.initial_vars)
    structures = []
    retired = set()
    for s in linkage.structures:
        if not isinstance(s, HingeExternal):
            structures.append(s)
            continue
        (a0, a1), driven = s.anchors, s.driven
        xt, yt, l2t = hinge_from_points(point_of(values, a0), point_of(values, a1), point_of(values, driven))
        xtr, ytr = alloc.next_point()
        l2tr = alloc.next_l()
        initial_vars[xtr] = xt
        initial_vars[ytr] = yt
        initial_vars[l2tr] = l2t
        retired.update(s.parameters)
        structures.append(HingeInternal(xtr=xtr, ytr=ytr, l2tr=l2tr,
                                        x0r=s.x0r, y0r=s.y0r, x1r=s.x1r, y1r=s.y1r,
                                        x2r=s.x2r, y2r=s.y2r))
    still_read = {r for s in structures for r in s.inputs}
    for r in retired - still_read:
        initial_vars.pop(r, None)
    return KinematicResult(Linkage(structures, initial_vars))


def externalize(linkage: Linkage) -> Linkage:
    """Convert every internal hinge back to link lengths.

    External hinges always take the positive branch, so a hinge stored below
    its anchor line comes back mirrored.
    """
    alloc = linkage.allocator()
    initial_vars = dict(linkage.initial_vars)
    structures = []
    retired = set()
    for index, s in enumerate(linkage.structures):
        if not isinstance(s, HingeInternal):
            structures.append(s)
            continue
        xt = initial_vars[s.xtr]
        yt = initial_vars[s.ytr]
        l2t = initial_vars[s.l2tr]
        if yt < 0.0:
            logger.warning("Hinge {} sits on the negative branch; its external form is mirrored", index)
        l0r, l1r = alloc.next_l(), alloc.next_l()
        initial_vars[l0r] = math.hypot(xt, yt)
        initial_vars[l1r] = math.hypot(xt - l2t, yt)
        retired.update(s.parameters)
        structures.append(HingeExternal(l0r=l0r, l1r=l1r,
                                        x0r=s.x0r, y0r=s.y0r, x1r=s.x1r, y1r=s.y1r,
                                        x2r=s.x2r, y2r=s.y2r))
    still_read = {r for s in structures for r in s.inputs}
    for r in retired - still_read:
        initial_vars.pop(r, None)
    return Linkage(structures, initial_vars)


def link_lengths(linkage: Linkage) -> Dict[int, Tuple[float, float]]:
    """(l0, l1) of every hinge, by structure index."""
    out: Dict[int, Tuple[float, float]] = {}
    for i, s in enumerate(linkage.structures):
        if isinstance(s, HingeExternal):
            out[i] = (linkage.initial_vars[s.l0r], linkage.initial_vars[s.l1r])
        elif isinstance(s, HingeInternal):
            xt = linkage.initial_vars[s.xtr]
            yt = linkage.initial_vars[s.ytr]
            l2t = linkage.initial_vars[s.l2tr]
            out[i] = (math.hypot(xt, yt), math.hypot(xt - l2t, yt))
    return out
