"""Tests for the example graph catalog."""

import pytest

from causal_playground.engine.examples import (
    EXAMPLE_GRAPHS,
    create_example,
    create_fork,
    create_simpsons_paradox,
)
from causal_playground.engine.inference import InferenceEngine
from causal_playground.engine.probability import validate_table


class TestExampleGraphs:
    """Tests for the example factories."""

    @pytest.mark.parametrize("name", sorted(EXAMPLE_GRAPHS))
    def test_tables_complete_and_valid(self, name):
        """Test every example has a full, normalized table per node."""
        g = create_example(name)
        for node_id, node in g.nodes.items():
            dist = node.distribution
            expected_rows = 1
            for parent in dist.parents:
                expected_rows *= len(parent.states)
            assert len(dist.table) == expected_rows, node_id
            validate_table(dist.table)

    @pytest.mark.parametrize("name", sorted(EXAMPLE_GRAPHS))
    def test_fresh_graph_each_call(self, name):
        """Test factories do not share state."""
        first = create_example(name)
        second = create_example(name)
        node_id = next(iter(first.nodes))
        first.set_intervention(node_id, first.nodes[node_id].variable.states[0])
        assert not second.nodes[node_id].is_intervened

    def test_unknown_example(self):
        """Test unknown names raise."""
        with pytest.raises(ValueError, match="Unknown example"):
            create_example("pendulum")

    def test_fork_structure(self):
        """Test the fork's shared cause."""
        g = create_fork()
        assert g.get_children("switch") == ["light1", "light2"]
        assert g.get_parents("light2") == ["switch"]


class TestSimpsonsParadox:
    """Observation and intervention disagree under confounding."""

    def test_interventional_recovery(self):
        """Test P(recovery | do(drug=Taken)) averages over the gender prior."""
        g = create_simpsons_paradox()
        g.set_intervention("drug", "Taken")
        marginals = InferenceEngine(g, seed=21).compute_all_marginals()

        assert marginals["recovery"]["Recovered"] == pytest.approx(0.83, abs=0.02)
        assert marginals["gender"]["Male"] == pytest.approx(0.5, abs=0.02)

    def test_observational_recovery(self):
        """Test P(recovery | drug=Taken) is inflated by the confounder."""
        g = create_simpsons_paradox()
        g.set_observation("drug", "Taken")
        marginals = InferenceEngine(g, seed=21).compute_all_marginals()

        assert marginals["recovery"]["Recovered"] == pytest.approx(0.87, abs=0.02)
        assert marginals["gender"]["Male"] == pytest.approx(0.7, abs=0.03)
