# -*- coding: utf-8 -*-
"""Literal linkages the editor can start from."""

from __future__ import annotations

from typing import Any, Dict

# Crank driving a four-bar whose coupler point is "4".
FOUR_BAR_COUPLER: Dict[str, Any] = {
    "structures": [
        {
            "type": "rotary",
            "input": {"lr": "l0", "x0r": "x0", "y0r": "y0", "fr": "f0"},
            "output": {"x1r": "x1", "y1r": "y1"},
        },
        {
            "type": "hinge",
            "input": {"l0r": "l1", "l1r": "l2", "x0r": "x1", "y0r": "y1", "x1r": "x3", "y1r": "y3"},
            "output": {"x2r": "x2", "y2r": "y2"},
        },
        {
            "type": "hinge",
            "input": {"l0r": "l3", "l1r": "l4", "x0r": "x2", "y0r": "y2", "x1r": "x1", "y1r": "y1"},
            "output": {"x2r": "x4", "y2r": "y4"},
        },
    ],
    "initialVars": {
        "l0": 0.25,
        "l1": 0.5,
        "l2": 0.5,
        "l3": 0.8,
        "l4": 0.5,
        "x0": -0.4,
        "y0": 0.0,
        "x3": 0.3,
        "y3": 0.0,
        "f0": 0.0,
    },
}

PRESETS: Dict[str, Dict[str, Any]] = {
    "four_bar_coupler": FOUR_BAR_COUPLER,
}
