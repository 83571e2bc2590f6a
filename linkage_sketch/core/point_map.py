# -*- coding: utf-8 -*-
"""Point adjacency map.

Maps every point (by its x reference) to the structures touching it. The map
is derived data: rebuild it whenever the structure list changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .geometry import Point, euclid
from .linkage import Linkage, Rotary
from .references import PointKey, pref_to_refs, ref_to_pref


class PointKind(str, Enum):
    GROUND = "ground"
    JOINT = "joint"
    ACTUATOR = "actuator"


@dataclass
class PointMap:
    incidence: Dict[str, List[int]] = field(default_factory=dict)
    kinds: Dict[str, PointKind] = field(default_factory=dict)

    def __contains__(self, xr: str) -> bool:
        return xr in self.incidence

    def structures_at(self, xr: str) -> List[int]:
        return list(self.incidence.get(xr, []))

    def kind(self, xr: str) -> Optional[PointKind]:
        return self.kinds.get(xr)

    def keys(self) -> List[PointKey]:
        return [pref_to_refs(ref_to_pref(xr)) for xr in self.incidence]


def build_point_map(linkage: Linkage) -> PointMap:
    """Index the structures incident on each point.

    The driven end of a rotary only keeps its rotary: dragging a crank tip
    edits the crank and nothing hanging off it.
    """
    m = PointMap()
    actuators = set()
    for i, s in enumerate(linkage.structures):
        for xr, _yr in (*s.anchors, s.driven):
            m.incidence.setdefault(xr, []).append(i)
        if isinstance(s, Rotary):
            actuators.add(s.x1r)

    structures = linkage.structures
    for xr in actuators:
        m.incidence[xr] = [i for i in m.incidence[xr] if isinstance(structures[i], Rotary)]

    for xr in m.incidence:
        if linkage.is_ground(xr):
            m.kinds[xr] = PointKind.GROUND
        elif xr in actuators:
            m.kinds[xr] = PointKind.ACTUATOR
        else:
            m.kinds[xr] = PointKind.JOINT
    return m


def clickable_point_keys(paused: bool, point_map: PointMap, initial_vars: Dict[str, float]) -> List[PointKey]:
    """Points the pointer may grab; only ground points while the mechanism runs."""
    keys = point_map.keys()
    if not paused:
        keys = [k for k in keys if k[0] in initial_vars]
    return keys


def nearest_point(p: Point, keys: Iterable[PointKey], values: Dict[str, float],
                  threshold: float) -> Optional[PointKey]:
    best: Optional[PointKey] = None
    best_d = float(threshold)
    for xr, yr in keys:
        if xr not in values or yr not in values:
            continue
        d = euclid(p, (values[xr], values[yr]))
        if d < best_d:
            best, best_d = (xr, yr), d
    return best
