"""Shared fixtures for the linkage tests."""

import pytest

from linkage_sketch.core.kinematics import evaluate, internalize
from linkage_sketch.core.linkage import linkage_from_literal
from linkage_sketch.core.point_map import build_point_map
from linkage_sketch.core.presets import FOUR_BAR_COUPLER


@pytest.fixture
def four_bar():
    """Four-bar coupler with hinges in link-length form."""
    return linkage_from_literal(FOUR_BAR_COUPLER)


@pytest.fixture
def four_bar_internal(four_bar):
    return internalize(four_bar).unwrap()


@pytest.fixture
def values0(four_bar_internal):
    """Solved variables of the internal four-bar at driver angle 0."""
    return evaluate(four_bar_internal, 0.0).unwrap()


@pytest.fixture
def point_map(four_bar_internal):
    return build_point_map(four_bar_internal)
