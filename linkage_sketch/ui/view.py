# -*- coding: utf-8 -*-
"""Linkage canvas: painting and pointer/key interaction."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from PyQt6.QtCore import QPointF, Qt, pyqtSignal
from PyQt6.QtGui import QBrush, QColor, QPainter, QPen
from PyQt6.QtWidgets import QWidget

from ..core.geometry import Point
from ..core.kinematics import point_of
from ..utils.constants import BACKGROUND, HILITE, HOVER_TRACE, LINK, PREVIEW, TRACE
from ..utils.qt_safe import safe_event

if TYPE_CHECKING:
    from ..core.session import EditorSession


class LinkageView(QWidget):
    """Canonical coordinates are y-up with the smaller widget axis spanning [-1, 1]."""

    stateChanged = pyqtSignal()

    def __init__(self, session: "EditorSession", parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.session = session
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(400, 300)

    # ---- coordinates ----

    def _small_axis(self) -> float:
        return max(1.0, min(self.width(), self.height()) / 2.0)

    def to_canonical(self, pos: QPointF) -> Point:
        s = self._small_axis()
        return (pos.x() - self.width() / 2.0) / s, -(pos.y() - self.height() / 2.0) / s

    def to_screen(self, p: Point) -> QPointF:
        s = self._small_axis()
        return QPointF(self.width() / 2.0 + p[0] * s, self.height() / 2.0 - p[1] * s)

    # ---- painting ----

    def _pen(self, color: QColor) -> QPen:
        pen = QPen(color)
        pen.setWidthF(float(self.session.settings.line_width_px))
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        return pen

    def _draw_lines(self, painter: QPainter, points: List[Point]):
        for a, b in zip(points, points[1:]):
            painter.drawLine(self.to_screen(a), self.to_screen(b))

    def _draw_dot(self, painter: QPainter, p: Optional[Point]):
        if p is None:
            return
        r = float(self.session.settings.line_width_px)
        painter.drawEllipse(self.to_screen(p), r, r)

    @safe_event
    def paintEvent(self, e):
        frame = self.session.frame()
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.fillRect(self.rect(), BACKGROUND)

            painter.setPen(self._pen(LINK))
            for s in frame.structures:
                keys = [s.anchors[0], s.driven, *s.anchors[1:]]
                if any(k[0] not in frame.values for k in keys):
                    continue
                self._draw_lines(painter, [point_of(frame.values, k) for k in keys])

            if frame.hover_path:
                painter.setPen(self._pen(HOVER_TRACE))
                self._draw_lines(painter, frame.hover_path)
            if frame.path:
                painter.setPen(self._pen(TRACE))
                self._draw_lines(painter, frame.path)
            if frame.preview:
                painter.setPen(self._pen(PREVIEW))
                self._draw_lines(painter, frame.preview)

            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(HILITE))
            self._draw_dot(painter, frame.drag_point)
            self._draw_dot(painter, frame.hover_point)
        finally:
            painter.end()

    # ---- events ----

    def resizeEvent(self, e):
        settings = self.session.settings
        self.session.hit_threshold = float(settings.hit_threshold_px) / self._small_axis()
        super().resizeEvent(e)

    @safe_event
    def mousePressEvent(self, e):
        if e.button() == Qt.MouseButton.LeftButton:
            self.session.pointer_down(self.to_canonical(e.position()))
            self.update()
            e.accept(); return
        super().mousePressEvent(e)

    @safe_event
    def mouseMoveEvent(self, e):
        if self.session.pointer_move(self.to_canonical(e.position())):
            self.stateChanged.emit()
        self.update()
        e.accept()

    @safe_event
    def mouseReleaseEvent(self, e):
        if e.button() == Qt.MouseButton.LeftButton:
            self.session.pointer_up(self.to_canonical(e.position()))
            self.stateChanged.emit()
            self.update()
            e.accept(); return
        super().mouseReleaseEvent(e)

    @safe_event
    def keyPressEvent(self, e):
        key = e.key()
        if key == Qt.Key.Key_Space:
            self.session.toggle_pause()
        elif key == Qt.Key.Key_Escape:
            self.session.cancel()
        elif key == Qt.Key.Key_T:
            self.session.trace_hovered()
        elif key == Qt.Key.Key_D:
            self.session.delete_hovered()
        else:
            super().keyPressEvent(e)
            return
        self.stateChanged.emit()
        self.update()
        e.accept()
