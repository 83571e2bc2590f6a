"""Tests for core/gestures.py: click grammar, synthesis and rollback."""

import pytest

from linkage_sketch.core import gestures as g
from linkage_sketch.core.gestures import (
    IDLE,
    ClickGround,
    ClickPoint,
    Esc,
    PGGEffect,
    PPGEffect,
    RotaryEffect,
    action_from_click,
    apply_effect,
    armed_rotary,
    preview_lines,
    reduce,
)
from linkage_sketch.core.kinematics import evaluate
from linkage_sketch.core.linkage import HingeExternal, HingeInternal, Rotary


def _run(actions, linkage, values, state=IDLE):
    outcome = None
    for a in actions:
        outcome = reduce(state, a, linkage, values)
        state = outcome.state
    return outcome


class TestTransitionTable:
    def test_table_is_complete(self):
        assert len(g.TRANSITIONS) == 14
        for state in (g.NONE, g.G, g.GG, g.P, g.PP, g.PG, g.R):
            for kind in ("ground", "point"):
                assert (state, kind) in g.TRANSITIONS

    def test_every_synthesis_has_a_builder(self):
        for key, step in g.TRANSITIONS.items():
            if isinstance(step, g.Synthesize):
                assert key in g._BUILDERS

    @pytest.mark.parametrize("clicks", [0, 1, 2])
    def test_escape_resets(self, four_bar_internal, values0, clicks):
        actions = [ClickGround((0.1 * i, 0.5)) for i in range(clicks)] + [Esc()]
        outcome = _run(actions, four_bar_internal, values0)
        assert outcome.state == IDLE
        assert outcome.linkage is None

    def test_ignored_clicks_keep_state(self, four_bar_internal, values0):
        gg = _run([ClickGround((0.0, 0.5)), ClickGround((0.1, 0.5))], four_bar_internal, values0).state
        assert gg.kind == g.GG
        assert reduce(gg, ClickGround((0.2, 0.5)), four_bar_internal, values0).state == gg

        pp = _run([ClickPoint(("x2", "y2")), ClickPoint(("x3", "y3"))], four_bar_internal, values0).state
        assert pp.kind == g.PP
        assert reduce(pp, ClickPoint(("x4", "y4")), four_bar_internal, values0).state == pp

    def test_pending_clicks_are_recorded(self, four_bar_internal, values0):
        st = _run([ClickPoint(("x2", "y2")), ClickGround((0.4, 0.4))], four_bar_internal, values0).state
        assert st.kind == g.PG
        assert st.refs == (("x2", "y2"),)
        assert st.grounds == ((0.4, 0.4),)

    def test_action_from_click(self):
        assert action_from_click((1.0, 2.0), None) == ClickGround((1.0, 2.0))
        assert action_from_click((1.0, 2.0), ("x1", "y1")) == ClickPoint(("x1", "y1"))


class TestSynthesis:
    def test_ground_ground_point(self, four_bar_internal, values0):
        outcome = _run(
            [ClickGround((0.5, 0.5)), ClickGround((0.6, 0.2)), ClickPoint(("x3", "y3"))],
            four_bar_internal, values0,
        )
        assert outcome.state == IDLE
        assert outcome.effect == PGGEffect(p0r=("x3", "y3"), p1=(0.5, 0.5), p2=(0.6, 0.2))
        new = outcome.linkage
        assert len(new.structures) == 4
        hinge = new.structures[-1]
        assert isinstance(hinge, HingeInternal)
        assert (hinge.x0r, hinge.x1r) == ("x3", "x7")
        assert new.initial_vars["x7"] == pytest.approx(0.5)
        # The joint starts where it was clicked.
        assert outcome.path[0] == pytest.approx((0.6, 0.2))
        # The input linkage is untouched.
        assert len(four_bar_internal.structures) == 3

    def test_second_point_is_first_anchor(self, four_bar_internal, values0):
        outcome = _run(
            [ClickPoint(("x2", "y2")), ClickPoint(("x3", "y3")), ClickGround((0.4, 0.4))],
            four_bar_internal, values0,
        )
        assert outcome.state == IDLE
        assert outcome.effect == PPGEffect(p0r=("x3", "y3"), p1r=("x2", "y2"), p2=(0.4, 0.4))
        hinge = outcome.linkage.structures[-1]
        assert (hinge.x0r, hinge.x1r) == ("x3", "x2")

    def test_point_ground_point(self, four_bar_internal, values0):
        outcome = _run(
            [ClickPoint(("x2", "y2")), ClickGround((0.4, 0.4)), ClickPoint(("x3", "y3"))],
            four_bar_internal, values0,
        )
        assert outcome.state == IDLE
        assert isinstance(outcome.effect, PPGEffect)
        assert outcome.effect.p0r == ("x2", "y2")
        assert outcome.effect.p1r == ("x3", "y3")
        assert outcome.effect.p2 == (0.4, 0.4)

    def test_failed_synthesis_rolls_back_one_click(self, four_bar_internal, values0):
        pp = _run([ClickPoint(("x1", "y1")), ClickPoint(("x3", "y3"))], four_bar_internal, values0).state
        outcome = reduce(pp, ClickGround((0.0, 0.0)), four_bar_internal, values0)
        assert outcome.state == pp
        assert outcome.linkage is None
        assert outcome.effect is None

    def test_coincident_anchors_rejected(self, four_bar_internal, values0):
        pp = _run([ClickPoint(("x3", "y3")), ClickPoint(("x3", "y3"))], four_bar_internal, values0).state
        outcome = reduce(pp, ClickGround((0.5, 0.5)), four_bar_internal, values0)
        assert outcome.state == pp
        assert outcome.linkage is None

    def test_rotary(self, four_bar_internal, values0):
        armed = armed_rotary(0.15)
        assert reduce(armed, ClickPoint(("x3", "y3")), four_bar_internal, values0).state == armed

        outcome = reduce(armed, ClickGround((0.5, -0.5)), four_bar_internal, values0)
        assert outcome.state == IDLE
        assert outcome.effect == RotaryEffect(anchor=(0.5, -0.5), length=0.15)
        rotary = outcome.linkage.structures[-1]
        assert isinstance(rotary, Rotary)
        assert (rotary.x0r, rotary.x1r, rotary.lr, rotary.fr) == ("x7", "x8", "l7", "f1")
        iv = outcome.linkage.initial_vars
        assert iv["l7"] == pytest.approx(0.15)
        assert iv["f1"] == 0.0
        assert len(outcome.path) == 126

    def test_external_linkage_gets_external_hinge(self, four_bar):
        values = evaluate(four_bar, 0.0).unwrap()
        new = apply_effect(PGGEffect(p0r=("x3", "y3"), p1=(0.5, 0.5), p2=(0.6, 0.2)), four_bar, values)
        hinge = new.structures[-1]
        assert isinstance(hinge, HingeExternal)
        assert new.initial_vars[hinge.l0r] == pytest.approx(((0.3 - 0.6) ** 2 + 0.2 ** 2) ** 0.5)
        assert new.initial_vars[hinge.l1r] == pytest.approx(((0.5 - 0.6) ** 2 + 0.3 ** 2) ** 0.5)


class TestPreview:
    def test_preview_lines(self, values0):
        mouse = (0.1, 0.1)
        assert preview_lines(IDLE, mouse, values0) == []
        st = g.GestureState(g.G, grounds=((0.5, 0.5),))
        assert preview_lines(st, mouse, values0) == [(0.5, 0.5), mouse]
        st = g.GestureState(g.PP, refs=(("x0", "y0"), ("x3", "y3")))
        assert preview_lines(st, mouse, values0) == [(-0.4, 0.0), mouse, (0.3, 0.0)]
        assert preview_lines(armed_rotary(), mouse, values0) == []
