# -*- coding: utf-8 -*-
"""Main window: canvas, toolbar, frame timer."""

from __future__ import annotations

from typing import Optional

from loguru import logger
from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QMainWindow, QStatusBar

from ..config import EditorSettings
from ..core.presets import FOUR_BAR_COUPLER, PRESETS
from ..core.session import EditorSession
from .view import LinkageView


class MainWindow(QMainWindow):
    def __init__(self, settings: Optional[EditorSettings] = None):
        super().__init__()
        self.settings = settings or EditorSettings()
        self.setWindowTitle("Linkage Sketch")
        self.resize(1000, 800)

        preset = PRESETS.get(self.settings.preset)
        if preset is None:
            logger.warning("Unknown preset {!r}, starting from the four-bar coupler", self.settings.preset)
            preset = FOUR_BAR_COUPLER
        self.session = EditorSession.from_literal(preset, self.settings)

        self.view = LinkageView(self.session, self)
        self.setCentralWidget(self.view)
        self.setStatusBar(QStatusBar())
        self._build_toolbar()
        self.view.stateChanged.connect(self.update_status)

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_tick)
        self._timer.start(int(self.settings.frame_interval_ms))
        self.view.setFocus()
        self.update_status()

    def _build_toolbar(self):
        tb = self.addToolBar("Edit")
        self.act_add_rotary = QAction("Add rotary", self)
        self.act_add_rotary.setToolTip("Click the canvas to drop a new crank")
        self.act_add_rotary.triggered.connect(self.add_rotary)
        tb.addAction(self.act_add_rotary)

        self.act_pause = QAction("Pause", self)
        self.act_pause.setCheckable(True)
        self.act_pause.setToolTip("Pause to add links (Space)")
        self.act_pause.triggered.connect(self.toggle_pause)
        tb.addAction(self.act_pause)

    def add_rotary(self):
        self.session.arm_rotary()
        self.update_status()
        self.view.setFocus()

    def toggle_pause(self):
        self.session.toggle_pause()
        self.update_status()
        self.view.setFocus()

    def _on_tick(self):
        self.session.tick()
        self.view.update()
        self.update_status()

    def update_status(self):
        self.act_pause.setChecked(self.session.paused)
        self.statusBar().showMessage(self.session.status_text())
