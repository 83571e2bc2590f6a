# -*- coding: utf-8 -*-
"""Variable references.

A reference is a string key into the variable mapping of a linkage. The first
letter names the role of the value and the numeric suffix tells instances
apart:

- ``x<n>`` / ``y<n>``: coordinates of point ``<n>``
- ``l<n>``: a length
- ``f<n>``: the phase offset of a rotary

A point is addressed by its suffix (the "point ref"), or by its ``(xr, yr)``
key pair.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

PointKey = Tuple[str, str]

PREFIXES = ("x", "y", "l", "f")


def ref_to_pref(ref: str) -> str:
    return ref[1:]


def refs_to_prefs(*refs: str) -> List[str]:
    return [ref_to_pref(r) for r in refs]


def pref_to_refs(pref: str) -> PointKey:
    return f"x{pref}", f"y{pref}"


class ReferenceAllocator:
    """Mints references that do not collide with an existing key set.

    The allocator scans the keys once; build a fresh one every time structures
    are spliced into a linkage, a stale allocator will hand out keys that are
    already taken.
    """

    def __init__(self, keys: Iterable[str] = ()):
        self._next: Dict[str, int] = {p: 0 for p in PREFIXES}
        for key in keys:
            prefix, suffix = key[:1], key[1:]
            if prefix in self._next and suffix.isdigit():
                self._next[prefix] = max(self._next[prefix], int(suffix) + 1)

    def mint(self, prefix: str) -> str:
        if prefix not in self._next:
            raise ValueError(f"Unknown reference prefix: {prefix!r}")
        n = self._next[prefix]
        self._next[prefix] = n + 1
        return f"{prefix}{n}"

    def next_x(self) -> str:
        return self.mint("x")

    def next_y(self) -> str:
        return self.mint("y")

    def next_l(self) -> str:
        return self.mint("l")

    def next_f(self) -> str:
        return self.mint("f")

    def next_point(self) -> PointKey:
        """Mint an (x, y) pair sharing one suffix."""
        n = max(self._next["x"], self._next["y"])
        self._next["x"] = self._next["y"] = n + 1
        return pref_to_refs(str(n))
