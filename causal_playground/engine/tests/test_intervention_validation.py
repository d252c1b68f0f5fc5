"""Tests for intervention conflict warnings."""

import pytest

from causal_playground.engine.causal_graph import CausalGraph
from causal_playground.engine.examples import create_chain, create_simpsons_paradox
from causal_playground.engine.intervention_validation import (
    InterventionWarning,
    check_intervention_warning,
    generate_warning_message,
)
from causal_playground.engine.probability import assignment_key


@pytest.fixture
def moderate_graph():
    """Graph a -> b where a=True makes b=True 80% likely."""
    g = CausalGraph()
    g.add_node("a", "A")
    g.add_node("b", "B")
    g.add_edge("a", "b")
    g.nodes["b"].distribution.commit_table({
        assignment_key({"a": "True"}): {"True": 0.8, "False": 0.2},
        assignment_key({"a": "False"}): {"True": 0.5, "False": 0.5},
    })
    return g


class TestCheckInterventionWarning:
    """Tests for check_intervention_warning."""

    @pytest.mark.parametrize("state", ["True", "False"])
    def test_no_intervened_parents(self, state):
        """Test no warning without intervened parents."""
        g = create_chain()
        warning = check_intervention_warning("smoke", state, g)

        assert not warning.has_warning
        assert warning.intervened_parents == []
        assert not warning.strong_determination
        assert warning.probabilities is None

    def test_root_node(self):
        """Test a parentless node never warns."""
        g = create_chain()
        assert not check_intervention_warning("fire", "True", g).has_warning

    def test_unknown_node(self):
        """Test an unknown node never warns."""
        assert not check_intervention_warning("ghost", "True", create_chain()).has_warning

    @pytest.mark.parametrize("state", ["True", "False"])
    def test_strong_determination(self, state):
        """Test a parent forcing >90% warns for any proposed state."""
        g = create_chain()
        g.set_intervention("fire", "True")

        warning = check_intervention_warning("smoke", state, g)

        assert warning.has_warning
        assert warning.strong_determination
        assert warning.dominant_state == "True"
        assert warning.dominant_probability == pytest.approx(0.95)
        assert warning.probabilities == {"True": 0.95, "False": 0.05}
        assert [p.id for p in warning.intervened_parents] == ["fire"]

    def test_conflict_with_dominant_state(self, moderate_graph):
        """Test proposing against a >70% dominant state warns."""
        moderate_graph.set_intervention("a", "True")
        warning = check_intervention_warning("b", "False", moderate_graph)

        assert warning.has_warning
        assert not warning.strong_determination
        assert warning.dominant_state == "True"

    def test_agrees_with_dominant_state(self, moderate_graph):
        """Test proposing the dominant state below 90% does not warn."""
        moderate_graph.set_intervention("a", "True")
        warning = check_intervention_warning("b", "True", moderate_graph)

        assert not warning.has_warning
        assert warning.intervened_parents
        assert warning.dominant_probability == pytest.approx(0.8)

    def test_weak_influence(self, moderate_graph):
        """Test a flat row never warns."""
        moderate_graph.set_intervention("a", "False")
        for state in ("True", "False"):
            assert not check_intervention_warning("b", state, moderate_graph).has_warning

    def test_threshold_is_strict(self):
        """Test exactly 70% does not count as dominant."""
        g = create_simpsons_paradox()
        g.set_intervention("gender", "Female")

        warning = check_intervention_warning("drug", "Taken", g)
        assert warning.dominant_state == "Not Taken"
        assert warning.dominant_probability == pytest.approx(0.7)
        assert not warning.has_warning

    def test_custom_thresholds(self, moderate_graph):
        """Test thresholds can be overridden."""
        moderate_graph.set_intervention("a", "True")
        warning = check_intervention_warning(
            "b", "True", moderate_graph, strong_threshold=0.75
        )
        assert warning.strong_determination
        assert warning.has_warning

    def test_partial_intervened_parents(self):
        """Test non-intervened parents fall back to their first state."""
        g = create_simpsons_paradox()
        g.set_intervention("drug", "Not Taken")

        warning = check_intervention_warning("recovery", "Not Recovered", g)

        # gender is not intervened and resolves to "Male"
        assert warning.probabilities["Recovered"] == pytest.approx(0.87)
        assert warning.has_warning
        assert not warning.strong_determination

    def test_does_not_modify_graph(self):
        """Test the check leaves flags and tables alone."""
        g = create_chain()
        g.set_intervention("fire", "True")
        before = g.to_dict()
        check_intervention_warning("smoke", "False", g)
        assert g.to_dict() == before

    def test_to_dict(self):
        """Test warning serialization."""
        g = create_chain()
        g.set_intervention("fire", "True")
        data = check_intervention_warning("smoke", "False", g).to_dict()

        assert data["has_warning"] is True
        assert data["intervened_parents"] == [{"id": "fire", "name": "Fire", "state": "True"}]
        assert data["dominant_state"] == "True"


class TestGenerateWarningMessage:
    """Tests for generate_warning_message."""

    def test_no_warning(self):
        """Test an empty message without a warning."""
        assert generate_warning_message(InterventionWarning(has_warning=False), "Smoke", "True") == ""

    def test_strong_message(self):
        """Test the strong determination text."""
        g = create_chain()
        g.set_intervention("fire", "True")
        warning = check_intervention_warning("smoke", "False", g)

        message = generate_warning_message(warning, "Smoke", "False")

        assert message.startswith("The parent variable (Fire=True) strongly determines Smoke.")
        assert "95% probability" in message
        assert "do(Smoke=False)" in message

    def test_influence_message_plural(self):
        """Test the influence text with several intervened parents."""
        g = CausalGraph()
        g.add_node("x", "X")
        g.add_node("y", "Y")
        g.add_node("z", "Z")
        g.add_edge("x", "z")
        g.add_edge("y", "z")
        g.nodes["z"].distribution.set_row({"x": "True", "y": "True"}, {"True": 0.75, "False": 0.25})
        g.set_intervention("x", "True")
        g.set_intervention("y", "True")

        warning = check_intervention_warning("z", "False", g)
        message = generate_warning_message(warning, "Z", "False")

        assert warning.has_warning
        assert message.startswith("The parent variables (X=True, Y=True) influence Z.")
        assert "75% likely" in message
        assert "unusual scenario" in message
