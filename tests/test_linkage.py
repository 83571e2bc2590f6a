"""Tests for core/linkage.py: model, invariants and literal I/O."""

import copy

import pytest

from linkage_sketch.core.linkage import (
    HingeExternal,
    HingeInternal,
    Linkage,
    LinkageDefinitionError,
    Rotary,
    linkage_from_literal,
    linkage_to_literal,
    structure_from_literal,
)
from linkage_sketch.core.presets import FOUR_BAR_COUPLER


class TestLiteralLoading:
    def test_four_bar(self, four_bar):
        kinds = [type(s) for s in four_bar.structures]
        assert kinds == [Rotary, HingeExternal, HingeExternal]
        assert four_bar.initial_vars["x3"] == pytest.approx(0.3)
        assert not four_bar.is_internal

    def test_missing_phase_gets_fresh_ref(self):
        data = copy.deepcopy(FOUR_BAR_COUPLER)
        del data["structures"][0]["input"]["fr"]
        del data["initialVars"]["f0"]
        linkage = linkage_from_literal(data)
        rotary = linkage.structures[0]
        assert rotary.fr == "f0"
        assert linkage.initial_vars["f0"] == 0.0

    def test_internal_hinge_literal(self):
        s = structure_from_literal({
            "type": "hinge",
            "input": {"xtr": "x9", "ytr": "y9", "l2tr": "l9",
                      "x0r": "x0", "y0r": "y0", "x1r": "x1", "y1r": "y1"},
            "output": {"x2r": "x2", "y2r": "y2"},
        })
        assert isinstance(s, HingeInternal)
        assert s.parameters == ("x9", "y9", "l9")

    def test_unknown_type(self):
        with pytest.raises(LinkageDefinitionError):
            structure_from_literal({"type": "slider", "input": {}, "output": {}})

    def test_missing_keys(self):
        with pytest.raises(LinkageDefinitionError):
            structure_from_literal({"type": "hinge", "input": {"x0r": "x0"}, "output": {}})

    def test_round_trip(self, four_bar):
        again = linkage_from_literal(linkage_to_literal(four_bar))
        assert again.structures == four_bar.structures
        assert again.initial_vars == four_bar.initial_vars


class TestValidation:
    def test_undefined_input(self):
        data = copy.deepcopy(FOUR_BAR_COUPLER)
        del data["initialVars"]["x3"]
        with pytest.raises(LinkageDefinitionError, match="x3"):
            linkage_from_literal(data)

    def test_forward_reference(self, four_bar):
        bad = Linkage(list(reversed(four_bar.structures)), dict(four_bar.initial_vars))
        with pytest.raises(LinkageDefinitionError):
            bad.validate()

    def test_rewritten_output(self, four_bar):
        rotary = four_bar.structures[0]
        bad = Linkage([rotary, rotary], dict(four_bar.initial_vars))
        with pytest.raises(LinkageDefinitionError, match="rewrites"):
            bad.validate()

    def test_output_may_not_shadow_ground(self, four_bar):
        bad = four_bar.copy()
        bad.initial_vars["x1"] = 0.0
        with pytest.raises(LinkageDefinitionError):
            bad.validate()


class TestQueries:
    def test_consumers_and_producer(self, four_bar):
        assert four_bar.consumers("x1") == [1, 2]
        assert four_bar.consumers("x4") == []
        assert four_bar.producer("x2") == 1
        assert four_bar.producer("x0") is None

    def test_point_keys(self, four_bar):
        assert four_bar.point_keys() == [
            ("x0", "y0"), ("x1", "y1"), ("x3", "y3"), ("x2", "y2"), ("x4", "y4"),
        ]

    def test_ground(self, four_bar):
        assert four_bar.is_ground("x0")
        assert not four_bar.is_ground("x2")

    def test_copy_is_independent(self, four_bar):
        dup = four_bar.copy()
        dup.initial_vars["x0"] = 5.0
        dup.structures.pop()
        assert four_bar.initial_vars["x0"] == pytest.approx(-0.4)
        assert len(four_bar.structures) == 3
