# -*- coding: utf-8 -*-
"""UI constants and colors."""

from PyQt6.QtGui import QColor

BACKGROUND = QColor(255, 255, 255)
LINK = QColor(40, 40, 40)
TRACE = QColor(0, 128, 128)
HOVER_TRACE = QColor(211, 211, 211)
HILITE = QColor(220, 40, 40)
PREVIEW = QColor(255, 160, 190)
