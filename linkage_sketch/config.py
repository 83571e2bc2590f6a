# -*- coding: utf-8 -*-
"""Editor settings.

Settings live in a flat JSON object; missing keys fall back to the defaults
below and unknown keys are reported and ignored.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger


@dataclass
class EditorSettings:
    # Samples per traced revolution.
    path_samples: int = 125
    # Driver advance per frame (rad).
    angle_step: float = 0.05
    initial_angle: float = 3.7
    default_crank_length: float = 0.1
    # Hit radius in canonical units; the view rescales it from pixels.
    hit_threshold: float = 0.02
    hit_threshold_px: float = 8.0
    line_width_px: float = 4.0
    frame_interval_ms: int = 16
    preset: str = "four_bar_coupler"
    trace_point: Optional[str] = "4"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorSettings":
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            if key not in known:
                logger.warning("Ignoring unknown setting {!r}", key)
                continue
            kwargs[key] = value
        settings = cls(**kwargs)
        settings.path_samples = int(settings.path_samples)
        settings.frame_interval_ms = int(settings.frame_interval_ms)
        if settings.path_samples < 3:
            raise ValueError(f"path_samples must be at least 3, got {settings.path_samples}")
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(path: Optional[Union[str, Path]] = None) -> EditorSettings:
    if path is None:
        return EditorSettings()
    p = Path(path)
    if not p.exists():
        logger.info("No settings file at {}, using defaults", p)
        return EditorSettings()
    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {p} must hold a JSON object")
    logger.debug("Loaded settings from {}", p)
    return EditorSettings.from_dict(data)


def save_settings(settings: EditorSettings, path: Union[str, Path]) -> None:
    with Path(path).open("w", encoding="utf-8") as fh:
        json.dump(settings.to_dict(), fh, indent=2)
