# -*- coding: utf-8 -*-
"""Link-creation gestures.

A new structure is built from a short sequence of clicks. Each click either
hits an existing point (``ClickPoint``) or empty ground (``ClickGround``).
The pending clicks are held in a :class:`GestureState`; once enough clicks are
collected the gesture synthesizes a side effect, applies it to a copy of the
linkage and keeps it only if the new driven point can run a full revolution.

State kinds:

- ``none``: idle
- ``g`` / ``gg``: one / two ground clicks pending
- ``p`` / ``pp``: one / two point clicks pending
- ``pg``: one point and one ground click pending
- ``r``: armed to drop a rotary on the next ground click

If the synthesized structure fails validation the gesture goes back to the
state it was in before the last click, so only that click has to be retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from loguru import logger

from .geometry import Point, euclid
from .kinematics import PATH_SAMPLES, hinge_from_points, point_of, trace_path
from .linkage import HingeExternal, HingeInternal, Linkage, Rotary
from .references import PointKey, ReferenceAllocator, ref_to_pref

NONE = "none"
G = "g"
GG = "gg"
P = "p"
PP = "pp"
PG = "pg"
R = "r"

DEFAULT_CRANK_LENGTH = 0.1


@dataclass(frozen=True)
class GestureState:
    kind: str = NONE
    grounds: Tuple[Point, ...] = ()
    refs: Tuple[PointKey, ...] = ()
    length: float = 0.0


IDLE = GestureState()


def armed_rotary(length: float = DEFAULT_CRANK_LENGTH) -> GestureState:
    return GestureState(R, length=float(length))


# ---- actions ----

@dataclass(frozen=True)
class Esc:
    kind = "esc"


@dataclass(frozen=True)
class ClickGround:
    point: Point

    kind = "ground"


@dataclass(frozen=True)
class ClickPoint:
    key: PointKey

    kind = "point"


Action = Union[Esc, ClickGround, ClickPoint]


def action_from_click(point: Point, key: Optional[PointKey]) -> Action:
    return ClickGround(point) if key is None else ClickPoint(key)


# ---- side effects ----

@dataclass(frozen=True)
class PPGEffect:
    """Hinge between two existing points; its joint starts at ground click ``p2``."""

    p0r: PointKey
    p1r: PointKey
    p2: Point

    kind = "ppg"


@dataclass(frozen=True)
class PGGEffect:
    """Hinge between an existing point and a new ground anchor ``p1``; joint starts at ``p2``."""

    p0r: PointKey
    p1: Point
    p2: Point

    kind = "pgg"


@dataclass(frozen=True)
class RotaryEffect:
    anchor: Point
    length: float

    kind = "r"


SideEffect = Union[PPGEffect, PGGEffect, RotaryEffect]


# ---- transition table ----

@dataclass(frozen=True)
class Goto:
    kind: str


@dataclass(frozen=True)
class Synthesize:
    effect: str


@dataclass(frozen=True)
class Ignore:
    pass


IGNORE = Ignore()

Step = Union[Goto, Synthesize, Ignore]

TRANSITIONS: Dict[Tuple[str, str], Step] = {
    (NONE, "ground"): Goto(G),
    (NONE, "point"): Goto(P),
    (G, "ground"): Goto(GG),
    (G, "point"): Goto(PG),
    (P, "ground"): Goto(PG),
    (P, "point"): Goto(PP),
    (GG, "ground"): IGNORE,
    (GG, "point"): Synthesize("pgg"),
    (PP, "ground"): Synthesize("ppg"),
    (PP, "point"): IGNORE,
    (PG, "ground"): Synthesize("pgg"),
    (PG, "point"): Synthesize("ppg"),
    (R, "ground"): Synthesize("r"),
    (R, "point"): IGNORE,
}

_BUILDERS: Dict[Tuple[str, str], Callable[[GestureState, Action], SideEffect]] = {
    (GG, "point"): lambda st, a: PGGEffect(p0r=a.key, p1=st.grounds[0], p2=st.grounds[1]),
    # The second clicked point is anchor 0.
    (PP, "ground"): lambda st, a: PPGEffect(p0r=st.refs[1], p1r=st.refs[0], p2=a.point),
    (PG, "ground"): lambda st, a: PGGEffect(p0r=st.refs[0], p1=st.grounds[0], p2=a.point),
    (PG, "point"): lambda st, a: PPGEffect(p0r=st.refs[0], p1r=a.key, p2=st.grounds[0]),
    (R, "ground"): lambda st, a: RotaryEffect(anchor=a.point, length=st.length or DEFAULT_CRANK_LENGTH),
}


def step_for(state: GestureState, action: Action) -> Step:
    if isinstance(action, Esc):
        return Goto(NONE)
    return TRANSITIONS.get((state.kind, action.kind), IGNORE)


def _advance(state: GestureState, kind: str, action: Action) -> GestureState:
    if kind == NONE:
        return IDLE
    if isinstance(action, ClickGround):
        return GestureState(kind, state.grounds + (tuple(action.point),), state.refs)
    return GestureState(kind, state.grounds, state.refs + (action.key,))


# ---- effect application ----

def apply_effect(effect: SideEffect, linkage: Linkage, values: Dict[str, float]) -> Optional[Linkage]:
    """Return a copy of ``linkage`` with the effect's structure appended.

    Hinges are built in the linkage's own representation. ``values`` is the
    solved snapshot that locates the existing points. Returns None when the
    clicked points cannot define a hinge (coincident anchors).
    """
    alloc = ReferenceAllocator(set(values) | linkage.all_refs())
    initial_vars = dict(linkage.initial_vars)

    if isinstance(effect, RotaryEffect):
        x0r, y0r = alloc.next_point()
        x1r, y1r = alloc.next_point()
        lr, fr = alloc.next_l(), alloc.next_f()
        initial_vars[x0r], initial_vars[y0r] = float(effect.anchor[0]), float(effect.anchor[1])
        initial_vars[lr] = float(effect.length)
        initial_vars[fr] = 0.0
        structure = Rotary(lr=lr, x0r=x0r, y0r=y0r, fr=fr, x1r=x1r, y1r=y1r)
        return Linkage([*linkage.structures, structure], initial_vars)

    (x0r, y0r) = effect.p0r
    p0 = point_of(values, effect.p0r)
    if isinstance(effect, PPGEffect):
        (x1r, y1r) = effect.p1r
        p1 = point_of(values, effect.p1r)
    else:
        x1r, y1r = alloc.next_point()
        p1 = (float(effect.p1[0]), float(effect.p1[1]))
        initial_vars[x1r], initial_vars[y1r] = p1
    p2 = (float(effect.p2[0]), float(effect.p2[1]))
    x2r, y2r = alloc.next_point()

    if linkage.is_internal:
        frame = hinge_from_points(p0, p1, p2)
        if frame is None:
            return None
        xtr, ytr = alloc.next_point()
        l2tr = alloc.next_l()
        initial_vars[xtr], initial_vars[ytr], initial_vars[l2tr] = frame
        structure = HingeInternal(xtr=xtr, ytr=ytr, l2tr=l2tr,
                                  x0r=x0r, y0r=y0r, x1r=x1r, y1r=y1r, x2r=x2r, y2r=y2r)
    else:
        l0r, l1r = alloc.next_l(), alloc.next_l()
        initial_vars[l0r] = euclid(p0, p2)
        initial_vars[l1r] = euclid(p1, p2)
        structure = HingeExternal(l0r=l0r, l1r=l1r,
                                  x0r=x0r, y0r=y0r, x1r=x1r, y1r=y1r, x2r=x2r, y2r=y2r)
    return Linkage([*linkage.structures, structure], initial_vars)


@dataclass(frozen=True)
class GestureOutcome:
    state: GestureState
    effect: Optional[SideEffect] = None
    linkage: Optional[Linkage] = None
    path: Optional[List[Point]] = None


def reduce(
    state: GestureState,
    action: Action,
    linkage: Linkage,
    values: Dict[str, float],
    samples: int = PATH_SAMPLES,
) -> GestureOutcome:
    """Feed one action into the gesture.

    A completed gesture returns to idle carrying the effect, the validated
    linkage and the path of the new driven point; the caller commits them.
    """
    step = step_for(state, action)
    if isinstance(step, Ignore):
        return GestureOutcome(state)
    if isinstance(step, Goto):
        return GestureOutcome(_advance(state, step.kind, action))

    effect = _BUILDERS[(state.kind, action.kind)](state, action)
    candidate = apply_effect(effect, linkage, values)
    if candidate is None:
        logger.debug("Rejected {} effect: anchors coincide", effect.kind)
        return GestureOutcome(state)

    driven_pref = ref_to_pref(candidate.structures[-1].driven[0])
    res = trace_path(candidate, driven_pref, samples)
    if not res.ok:
        logger.debug("Rejected {} effect: {}", effect.kind, res.failure.describe())
        return GestureOutcome(state)
    return GestureOutcome(IDLE, effect, candidate, res.value)


def preview_lines(state: GestureState, mouse: Point, values: Dict[str, float]) -> List[Point]:
    """Rubber-band polyline from the pending clicks to the pointer."""
    if state.kind == G:
        return [state.grounds[0], mouse]
    if state.kind == GG:
        return [state.grounds[0], state.grounds[1], mouse]
    if state.kind == P:
        return [point_of(values, state.refs[0]), mouse]
    if state.kind == PP:
        return [point_of(values, state.refs[0]), mouse, point_of(values, state.refs[1])]
    if state.kind == PG:
        return [point_of(values, state.refs[0]), mouse, state.grounds[0]]
    return []
