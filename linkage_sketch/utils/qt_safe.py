# -*- coding: utf-8 -*-
"""Guard for Qt event handlers.

PyQt6 aborts the process on an exception escaping a virtual override such as
``mousePressEvent``. Handlers wrapped with :func:`safe_event` log the error and
ignore the event instead.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


def safe_event(fn: Callable[..., T]) -> Callable[..., T | None]:
    """Decorator for Qt event handlers."""

    @functools.wraps(fn)
    def wrapper(self: Any, e: Any) -> T | None:
        try:
            return fn(self, e)
        except Exception:
            logger.exception("Unhandled error in {}", fn.__qualname__)
            if hasattr(e, "ignore"):
                e.ignore()
            return None

    return wrapper
