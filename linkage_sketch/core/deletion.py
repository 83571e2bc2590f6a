# -*- coding: utf-8 -*-
"""Point deletion."""

from __future__ import annotations

from loguru import logger

from .linkage import Linkage, Rotary
from .point_map import PointMap
from .references import PointKey


def _drop_orphans(linkage: Linkage, refs) -> None:
    still_read = {r for s in linkage.structures for r in s.inputs}
    for r in refs:
        if r not in still_read:
            linkage.initial_vars.pop(r, None)


def try_remove_point(point_key: PointKey, point_map: PointMap, linkage: Linkage) -> bool:
    """Remove the structure owning ``point_key`` if nothing else depends on it.

    Only points referenced by exactly one structure qualify. A rotary goes
    when its driven end feeds nothing; a hinge only when its driven point was
    picked. Ground variables left unreferenced are cleaned up. Returns False
    without touching the linkage otherwise.
    """
    xr = point_key[0]
    indices = point_map.structures_at(xr)
    if len(indices) != 1:
        return False
    index = indices[0]
    s = linkage.structures[index]

    if not isinstance(s, Rotary) and xr != s.x2r:
        return False
    if any(linkage.consumers(r) for r in s.outputs):
        return False

    del linkage.structures[index]
    anchor_refs = [r for key in s.anchors for r in key if linkage.is_ground(r)]
    _drop_orphans(linkage, (*s.parameters, *anchor_refs))
    logger.info("Removed {} structure {} at point {}", s.kind, index, xr)
    return True
