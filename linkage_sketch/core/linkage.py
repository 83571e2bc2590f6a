# -*- coding: utf-8 -*-
"""Linkage data model.

A linkage is an ordered list of structures plus the ground variables needed to
seed evaluation. Structures are evaluated in list order; each one may only
read references that are ground values or outputs of an earlier structure.

Two hinge representations exist:

- :class:`HingeExternal` stores the two link lengths directly.
- :class:`HingeInternal` stores the driven point in the local frame of its two
  anchors at a reference pose (``xt``, ``yt``) together with the anchor
  distance of that pose (``l2t``). The sign of ``yt`` selects the
  circle-intersection branch, which keeps the branch stable while anchors move.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .references import PointKey, ReferenceAllocator


class LinkageDefinitionError(ValueError):
    """The linkage breaks the evaluation-order invariant or is malformed."""


@dataclass(frozen=True)
class Rotary:
    """Crank of length ``lr`` turning about ``(x0r, y0r)`` at driver angle + ``fr``."""

    lr: str
    x0r: str
    y0r: str
    fr: str
    x1r: str
    y1r: str

    kind = "rotary"

    @property
    def inputs(self) -> Tuple[str, ...]:
        return (self.lr, self.x0r, self.y0r, self.fr)

    @property
    def outputs(self) -> Tuple[str, ...]:
        return (self.x1r, self.y1r)

    @property
    def anchors(self) -> Tuple[PointKey, ...]:
        return ((self.x0r, self.y0r),)

    @property
    def driven(self) -> PointKey:
        return (self.x1r, self.y1r)

    @property
    def parameters(self) -> Tuple[str, ...]:
        return (self.lr, self.fr)


@dataclass(frozen=True)
class HingeExternal:
    """Two-bar joint: the point at ``l0r`` from anchor 0 and ``l1r`` from anchor 1."""

    l0r: str
    l1r: str
    x0r: str
    y0r: str
    x1r: str
    y1r: str
    x2r: str
    y2r: str

    kind = "hinge"

    @property
    def inputs(self) -> Tuple[str, ...]:
        return (self.l0r, self.l1r, self.x0r, self.y0r, self.x1r, self.y1r)

    @property
    def outputs(self) -> Tuple[str, ...]:
        return (self.x2r, self.y2r)

    @property
    def anchors(self) -> Tuple[PointKey, ...]:
        return ((self.x0r, self.y0r), (self.x1r, self.y1r))

    @property
    def driven(self) -> PointKey:
        return (self.x2r, self.y2r)

    @property
    def parameters(self) -> Tuple[str, ...]:
        return (self.l0r, self.l1r)


@dataclass(frozen=True)
class HingeInternal:
    """Two-bar joint stored in the local frame of its anchors."""

    xtr: str
    ytr: str
    l2tr: str
    x0r: str
    y0r: str
    x1r: str
    y1r: str
    x2r: str
    y2r: str

    kind = "hinge"

    @property
    def inputs(self) -> Tuple[str, ...]:
        return (self.xtr, self.ytr, self.l2tr, self.x0r, self.y0r, self.x1r, self.y1r)

    @property
    def outputs(self) -> Tuple[str, ...]:
        return (self.x2r, self.y2r)

    @property
    def anchors(self) -> Tuple[PointKey, ...]:
        return ((self.x0r, self.y0r), (self.x1r, self.y1r))

    @property
    def driven(self) -> PointKey:
        return (self.x2r, self.y2r)

    @property
    def parameters(self) -> Tuple[str, ...]:
        return (self.xtr, self.ytr, self.l2tr)


Hinge = Union[HingeExternal, HingeInternal]
Structure = Union[Rotary, HingeExternal, HingeInternal]


@dataclass
class Linkage:
    structures: List[Structure] = field(default_factory=list)
    initial_vars: Dict[str, float] = field(default_factory=dict)

    def copy(self) -> "Linkage":
        return Linkage(list(self.structures), dict(self.initial_vars))

    @property
    def is_internal(self) -> bool:
        return not any(isinstance(s, HingeExternal) for s in self.structures)

    def all_refs(self) -> set:
        refs = set(self.initial_vars)
        for s in self.structures:
            refs.update(s.inputs)
            refs.update(s.outputs)
        return refs

    def allocator(self) -> ReferenceAllocator:
        return ReferenceAllocator(self.all_refs())

    def point_keys(self) -> List[PointKey]:
        """Every point touched by a structure, in first-seen order."""
        seen: Dict[str, PointKey] = {}
        for s in self.structures:
            for key in (*s.anchors, s.driven):
                seen.setdefault(key[0], key)
        return list(seen.values())

    def is_ground(self, ref: str) -> bool:
        return ref in self.initial_vars

    def consumers(self, ref: str) -> List[int]:
        """Indices of structures that read ``ref``."""
        return [i for i, s in enumerate(self.structures) if ref in s.inputs]

    def producer(self, ref: str) -> Optional[int]:
        for i, s in enumerate(self.structures):
            if ref in s.outputs:
                return i
        return None

    def validate(self) -> None:
        """Check the evaluation-order invariant.

        Raises LinkageDefinitionError if a structure reads a reference before
        it is defined, or if any reference is written twice.
        """
        available = set(self.initial_vars)
        for index, s in enumerate(self.structures):
            missing = [r for r in s.inputs if r not in available]
            if missing:
                raise LinkageDefinitionError(
                    f"Structure {index} ({s.kind}) reads undefined references: {', '.join(missing)}"
                )
            for r in s.outputs:
                if r in available:
                    raise LinkageDefinitionError(f"Structure {index} ({s.kind}) rewrites {r!r}")
                available.add(r)


# ---- literal I/O ----

def _require(d: Dict[str, Any], *keys: str) -> List[str]:
    missing = [k for k in keys if k not in d]
    if missing:
        raise LinkageDefinitionError(f"Missing keys in structure literal: {', '.join(missing)}")
    return [str(d[k]) for k in keys]


def structure_from_literal(data: Dict[str, Any], phase_ref: Optional[str] = None) -> Structure:
    kind = str(data.get("type", ""))
    inp = dict(data.get("input") or {})
    out = dict(data.get("output") or {})
    if kind == "rotary":
        lr, x0r, y0r = _require(inp, "lr", "x0r", "y0r")
        x1r, y1r = _require(out, "x1r", "y1r")
        fr = str(inp.get("fr") or phase_ref or "")
        if not fr:
            raise LinkageDefinitionError("Rotary literal has no phase reference")
        return Rotary(lr=lr, x0r=x0r, y0r=y0r, fr=fr, x1r=x1r, y1r=y1r)
    if kind == "hinge":
        x0r, y0r, x1r, y1r = _require(inp, "x0r", "y0r", "x1r", "y1r")
        x2r, y2r = _require(out, "x2r", "y2r")
        if "xtr" in inp:
            xtr, ytr, l2tr = _require(inp, "xtr", "ytr", "l2tr")
            return HingeInternal(xtr=xtr, ytr=ytr, l2tr=l2tr,
                                 x0r=x0r, y0r=y0r, x1r=x1r, y1r=y1r, x2r=x2r, y2r=y2r)
        l0r, l1r = _require(inp, "l0r", "l1r")
        return HingeExternal(l0r=l0r, l1r=l1r,
                             x0r=x0r, y0r=y0r, x1r=x1r, y1r=y1r, x2r=x2r, y2r=y2r)
    raise LinkageDefinitionError(f"Unknown structure type: {kind!r}")


def structure_to_literal(s: Structure) -> Dict[str, Any]:
    if isinstance(s, Rotary):
        inp = {"lr": s.lr, "x0r": s.x0r, "y0r": s.y0r, "fr": s.fr}
        out = {"x1r": s.x1r, "y1r": s.y1r}
    elif isinstance(s, HingeInternal):
        inp = {"xtr": s.xtr, "ytr": s.ytr, "l2tr": s.l2tr,
               "x0r": s.x0r, "y0r": s.y0r, "x1r": s.x1r, "y1r": s.y1r}
        out = {"x2r": s.x2r, "y2r": s.y2r}
    else:
        inp = {"l0r": s.l0r, "l1r": s.l1r,
               "x0r": s.x0r, "y0r": s.y0r, "x1r": s.x1r, "y1r": s.y1r}
        out = {"x2r": s.x2r, "y2r": s.y2r}
    return {"type": s.kind, "input": inp, "output": out}


def linkage_from_literal(data: Dict[str, Any]) -> Linkage:
    """Build a validated linkage from its literal description.

    Rotary literals without a phase reference get a fresh one set to zero.
    """
    items = list(data.get("structures") or [])
    initial_vars = {str(k): float(v) for k, v in (data.get("initialVars") or {}).items()}

    keys = set(initial_vars)
    for it in items:
        keys.update(str(v) for v in (it.get("input") or {}).values())
        keys.update(str(v) for v in (it.get("output") or {}).values())
    alloc = ReferenceAllocator(keys)

    structures: List[Structure] = []
    for it in items:
        phase_ref = None
        if it.get("type") == "rotary" and not (it.get("input") or {}).get("fr"):
            phase_ref = alloc.next_f()
            initial_vars[phase_ref] = 0.0
        structures.append(structure_from_literal(it, phase_ref=phase_ref))

    linkage = Linkage(structures, initial_vars)
    linkage.validate()
    return linkage


def linkage_to_literal(linkage: Linkage) -> Dict[str, Any]:
    return {
        "structures": [structure_to_literal(s) for s in linkage.structures],
        "initialVars": {k: float(v) for k, v in linkage.initial_vars.items()},
    }
