# -*- coding: utf-8 -*-
"""Editor session.

The session is the one mutable record of the editor: the current linkage, the
driver angle, the link-creation gesture and the pointer state. The UI layer
feeds it pointer/key events and frame ticks and draws whatever :meth:`frame`
returns. All kinematics calls are made on explicit snapshots; results are
committed whole or not at all.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from loguru import logger

from ..config import EditorSettings
from .deletion import try_remove_point
from .drag import move_point
from .geometry import Point
from .gestures import (
    IDLE,
    NONE,
    R,
    Esc,
    GestureOutcome,
    action_from_click,
    armed_rotary,
    preview_lines,
    reduce,
)
from .kinematics import evaluate, internalize, point_of, trace_path
from .linkage import Linkage, Structure, linkage_from_literal
from .point_map import PointMap, build_point_map, clickable_point_keys, nearest_point
from .references import PointKey, pref_to_refs, ref_to_pref


@dataclass
class Frame:
    """Everything the renderer needs for one repaint."""

    values: Dict[str, float]
    structures: List[Structure]
    path: Optional[List[Point]] = None
    hover_path: Optional[List[Point]] = None
    drag_point: Optional[Point] = None
    hover_point: Optional[Point] = None
    preview: List[Point] = field(default_factory=list)


class EditorSession:
    def __init__(self, linkage: Linkage, settings: Optional[EditorSettings] = None):
        self.settings = settings or EditorSettings()
        # The editor only drags internal hinges.
        self.linkage: Linkage = internalize(linkage).unwrap()
        self.point_map: PointMap = build_point_map(self.linkage)
        self.angle = float(self.settings.initial_angle)
        self.values: Dict[str, float] = {}
        self.paused = False
        self.gesture = IDLE
        self.mouse: Optional[Point] = None
        self.hit_threshold = float(self.settings.hit_threshold)

        self.drag_target: Optional[PointKey] = None
        self.dragging = False
        self.hover: Optional[PointKey] = None
        self.hover_pref: Optional[str] = None
        self.hover_path: Optional[List[Point]] = None

        self.trace_pref: Optional[str] = None
        self.path: Optional[List[Point]] = None
        self.set_trace(self.settings.trace_point)
        self._settle()

    @classmethod
    def from_literal(cls, data: Dict[str, Any], settings: Optional[EditorSettings] = None) -> "EditorSession":
        return cls(linkage_from_literal(data), settings)

    # ---- kinematics ----

    @property
    def samples(self) -> int:
        return int(self.settings.path_samples)

    def _advance(self) -> None:
        self.angle = (self.angle + float(self.settings.angle_step)) % (2.0 * math.pi)

    def _settle(self) -> None:
        """Step forward until the mechanism closes, at most one turn."""
        for _ in range(int(2.0 * math.pi / float(self.settings.angle_step)) + 1):
            if self.refresh_values():
                return
            self._advance()
        logger.warning("Linkage has no reachable pose over a full turn")

    def refresh_values(self) -> bool:
        res = evaluate(self.linkage, self.angle)
        if res.ok:
            self.values = res.value
        return res.ok

    def _path_of(self, pref: str) -> Optional[List[Point]]:
        res = trace_path(self.linkage, pref, self.samples)
        return res.value if res.ok else None

    def set_trace(self, pref: Optional[str]) -> bool:
        if pref is None or pref_to_refs(pref)[0] not in self.point_map:
            self.trace_pref = None
            self.path = None
            return False
        self.trace_pref = pref
        self.path = self._path_of(pref)
        return True

    def tick(self) -> bool:
        """Advance one frame.

        An unreachable pose skips the frame and the angle moves on regardless
        of pause, so the mechanism jumps over the gap.
        """
        ok = self.refresh_values()
        if not ok or not self.paused:
            self._advance()
        return ok

    # ---- pointer ----

    def _hit(self, p: Point) -> Optional[PointKey]:
        keys = clickable_point_keys(self.paused, self.point_map, self.linkage.initial_vars)
        return nearest_point(p, keys, self.values, self.hit_threshold)

    def pointer_down(self, p: Point) -> Optional[PointKey]:
        if self.gesture.kind != NONE:
            return None
        self.dragging = False
        self.drag_target = self._hit(p)
        return self.drag_target

    def pointer_move(self, p: Point) -> bool:
        """Drag the held point, or update hover. Returns True if the linkage changed."""
        self.mouse = p
        if self.drag_target is None:
            self._update_hover(p)
            return False
        self.dragging = True
        result = move_point(
            self.drag_target, p, self.point_map, self.linkage,
            self.angle, self.values, self.trace_pref, self.samples,
        )
        if result is None:
            return False
        self.linkage.initial_vars = result.initial_vars
        self.path = result.path
        if self.hover_pref is not None:
            self.hover_path = self._path_of(self.hover_pref)
        self.refresh_values()
        return True

    def _update_hover(self, p: Point) -> None:
        new_hover = self._hit(p)
        if new_hover is None or self.linkage.is_ground(new_hover[0]):
            # Ground points stay hoverable for deletion but have no path.
            self.hover_pref = None
            self.hover_path = None
        elif self.hover is None or new_hover[0] != self.hover[0]:
            self.hover_pref = ref_to_pref(new_hover[0])
            if self.hover_pref == self.trace_pref:
                self.hover_path = self.path
            else:
                self.hover_path = self._path_of(self.hover_pref)
        self.hover = new_hover

    def pointer_up(self, p: Point) -> Optional[GestureOutcome]:
        was_dragging = self.dragging
        self.dragging = False
        self.drag_target = None
        if was_dragging:
            return None
        # Links are only added while paused; rotaries any time.
        if not self.paused and self.gesture.kind != R:
            return None
        action = action_from_click(p, self._hit(p))
        outcome = reduce(self.gesture, action, self.linkage, self.values, self.samples)
        self.gesture = outcome.state
        if outcome.linkage is not None:
            self._commit(outcome)
        return outcome

    def _commit(self, outcome: GestureOutcome) -> None:
        self.linkage = outcome.linkage
        self.point_map = build_point_map(self.linkage)
        self.refresh_values()
        logger.info("Added {} structure ({} structures)", outcome.effect.kind, len(self.linkage.structures))

    # ---- keys / controls ----

    def toggle_pause(self) -> None:
        self.paused = not self.paused
        self.drag_target = None
        self.hover = None
        if not self.paused:
            self.cancel()

    def cancel(self) -> None:
        self.gesture = reduce(self.gesture, Esc(), self.linkage, self.values).state

    def arm_rotary(self) -> None:
        self.gesture = armed_rotary(self.settings.default_crank_length)

    def trace_hovered(self) -> bool:
        if self.hover is None or self.hover_path is None:
            return False
        if self.hover_pref != ref_to_pref(self.hover[0]):
            return False
        self.trace_pref = ref_to_pref(self.hover[0])
        self.path = self.hover_path
        return True

    def delete_hovered(self) -> bool:
        if self.hover is None:
            return False
        if not try_remove_point(self.hover, self.point_map, self.linkage):
            return False
        self.point_map = build_point_map(self.linkage)
        if self.trace_pref is not None and pref_to_refs(self.trace_pref)[0] not in self.point_map:
            self.trace_pref = None
            self.path = None
        self.hover = None
        self.hover_pref = None
        self.hover_path = None
        self.refresh_values()
        return True

    # ---- rendering ----

    def _point(self, key: Optional[PointKey]) -> Optional[Point]:
        if key is None or key[0] not in self.values:
            return None
        return point_of(self.values, key)

    def frame(self) -> Frame:
        preview: List[Point] = []
        if self.mouse is not None:
            preview = preview_lines(self.gesture, self.mouse, self.values)
        return Frame(
            values=dict(self.values),
            structures=list(self.linkage.structures),
            path=self.path,
            hover_path=self.hover_path,
            drag_point=self._point(self.drag_target),
            hover_point=self._point(self.hover),
            preview=preview,
        )

    def status_text(self) -> str:
        mode = "Paused" if self.paused else "Running"
        gesture = self.gesture.kind if self.gesture.kind != NONE else "idle"
        trace = self.trace_pref if self.trace_pref is not None else "-"
        return f"{mode} | angle {math.degrees(self.angle):.1f}° | gesture: {gesture} | trace: {trace}"
