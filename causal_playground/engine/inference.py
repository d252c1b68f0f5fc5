"""
Approximate inference by rejection sampling.

Each draw walks the graph in topological order. Intervened nodes are
fixed to their forced state (the do-operator cuts their incoming edges
for their own draw); every other node is sampled from its conditional
table given the values already drawn for its parents. Draws that
disagree with any observation are discarded whole, and the accepted
draws are tallied into per-node marginals.

Supports queries like:
- P(alarm | smoke = True)
- P(recovery | do(drug = Taken))
"""

from typing import Dict, List, Optional
import logging

import numpy as np

from ..utils.seed import get_rng
from .causal_graph import CausalGraph, CausalNode
from .probability import ProbabilityRow, State

logger = logging.getLogger(__name__)

MarginalDistribution = Dict[State, float]
AllMarginals = Dict[str, MarginalDistribution]

DEFAULT_N_SAMPLES = 20000


def is_degenerate(marginals: AllMarginals) -> bool:
    """True when no draw was accepted, i.e. every probability is zero.

    Marginals for an empty graph carry no probabilities and are never degenerate.
    """
    return bool(marginals) and all(
        probability == 0.0
        for distribution in marginals.values()
        for probability in distribution.values()
    )


class InferenceEngine:
    """
    Rejection-sampling inference over a CausalGraph.

    The topological order is computed once, at construction. Build a new
    engine after adding or removing edges; intervention, observation and
    table edits are picked up on every call.
    """

    def __init__(
        self,
        graph: CausalGraph,
        n_samples: int = DEFAULT_N_SAMPLES,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        if n_samples <= 0:
            raise ValueError(f"n_samples must be positive, got {n_samples}")
        self.graph = graph
        self.n_samples = n_samples
        self.rng = rng if rng is not None else get_rng(seed)
        self.order: List[str] = graph.get_topological_sort()
        self.accepted_samples = 0

    def compute_all_marginals(self) -> AllMarginals:
        """
        Approximate P(node = state | observations, do(interventions)) for every node.

        Returns all-zero marginals when no draw is consistent with the
        observations; check with is_degenerate().
        """
        nodes = [self.graph.nodes[node_id] for node_id in self.order if node_id in self.graph.nodes]
        counts: Dict[str, Dict[State, int]] = {
            node.id: {state: 0 for state in node.variable.states} for node in nodes
        }
        observed = [(node.id, node.observed_state) for node in nodes if node.is_observed]

        accepted = 0
        for _ in range(self.n_samples):
            sample = self._draw(nodes)
            if all(sample[node_id] == state for node_id, state in observed):
                accepted += 1
                for node_id, state in sample.items():
                    counts[node_id][state] += 1

        self.accepted_samples = accepted
        logger.debug(f"Accepted {accepted}/{self.n_samples} samples over {len(nodes)} nodes")

        if accepted == 0:
            logger.warning("No samples consistent with the observations; returning zero marginals")
            return {
                node_id: {state: 0.0 for state in tallies}
                for node_id, tallies in counts.items()
            }

        return {
            node_id: {state: count / accepted for state, count in tallies.items()}
            for node_id, tallies in counts.items()
        }

    def _draw(self, nodes: List[CausalNode]) -> Dict[str, State]:
        """One forward sample in topological order."""
        sample: Dict[str, State] = {}
        for node in nodes:
            if node.is_intervened:
                sample[node.id] = node.intervened_state
                continue

            parent_states = {
                parent_id: sample[parent_id]
                for parent_id in node.distribution.parent_ids
                if parent_id in sample
            }
            sample[node.id] = self._sample_from(node.distribution.get_row(parent_states))
        return sample

    def _sample_from(self, distribution: ProbabilityRow) -> State:
        """Inverse-CDF draw; falls back to the first state if rounding leaves a gap."""
        draw = self.rng.random()
        cumulative = 0.0
        for state, probability in distribution.items():
            cumulative += probability
            if draw < cumulative:
                return state
        return next(iter(distribution))
