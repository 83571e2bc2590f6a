# -*- coding: utf-8 -*-
"""Application entry point."""

from __future__ import annotations

import sys
from PyQt6.QtWidgets import QApplication

from .config import load_settings
from .ui.main_window import MainWindow


def main():
    app = QApplication(sys.argv)
    settings = load_settings(sys.argv[1] if len(sys.argv) > 1 else None)
    w = MainWindow(settings)
    w.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
