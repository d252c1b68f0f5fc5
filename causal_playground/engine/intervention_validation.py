"""
Warnings for interventions stacked under already-intervened parents.

Forcing a node whose parents are themselves forced is legal, but it is
easy to misread: the parents may already all but decide the node's value,
and the new intervention silently overrides that effect. The check here
evaluates the node's table at the parents' forced states and reports when
the combination deserves an explanation. It never blocks the caller.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from .causal_graph import CausalGraph, IntervenedParent
from .probability import State

logger = logging.getLogger(__name__)

STRONG_DETERMINATION_THRESHOLD = 0.9
CONFLICT_THRESHOLD = 0.7


@dataclass
class InterventionWarning:
    """
    Result of an intervention conflict check.

    Attributes:
        has_warning: Whether the proposed intervention deserves a warning
        intervened_parents: Parents currently held at forced states
        strong_determination: Whether one state exceeds the strong threshold
        probabilities: Node's distribution at the parents' forced states
        dominant_state: Most probable state under those parents
        dominant_probability: Probability of the dominant state
    """
    has_warning: bool
    intervened_parents: List[IntervenedParent] = field(default_factory=list)
    strong_determination: bool = False
    probabilities: Optional[Dict[State, float]] = None
    dominant_state: Optional[State] = None
    dominant_probability: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "has_warning": self.has_warning,
            "intervened_parents": [p.to_dict() for p in self.intervened_parents],
            "strong_determination": self.strong_determination,
            "probabilities": self.probabilities,
            "dominant_state": self.dominant_state,
            "dominant_probability": self.dominant_probability,
        }


def check_intervention_warning(
    node_id: str,
    proposed_state: State,
    graph: CausalGraph,
    strong_threshold: float = STRONG_DETERMINATION_THRESHOLD,
    conflict_threshold: float = CONFLICT_THRESHOLD,
) -> InterventionWarning:
    """
    Check whether do(node_id = proposed_state) conflicts with intervened parents.

    A warning is raised when the intervened parents push one state above
    strong_threshold, or when the proposed state differs from a dominant
    state whose probability exceeds conflict_threshold.
    """
    node = graph.nodes.get(node_id)
    if node is None:
        return InterventionWarning(has_warning=False)

    intervened_parents = graph.get_intervened_parents(node_id)
    if not intervened_parents:
        return InterventionWarning(has_warning=False)

    parent_states = {parent.id: parent.state for parent in intervened_parents}
    probabilities = node.distribution.get_row(parent_states)

    dominant_state = None
    dominant_probability = 0.0
    for state, probability in probabilities.items():
        if probability > dominant_probability:
            dominant_state = state
            dominant_probability = probability

    strong_determination = dominant_probability > strong_threshold
    has_warning = strong_determination or (
        proposed_state != dominant_state and dominant_probability > conflict_threshold
    )

    if has_warning:
        logger.info(
            f"do({node_id}={proposed_state}) conflicts with intervened parents "
            f"{[p.id for p in intervened_parents]}: "
            f"P({dominant_state})={dominant_probability:.2f}"
        )

    return InterventionWarning(
        has_warning=has_warning,
        intervened_parents=intervened_parents,
        strong_determination=strong_determination,
        probabilities=probabilities,
        dominant_state=dominant_state,
        dominant_probability=dominant_probability,
    )


def generate_warning_message(warning: InterventionWarning, node_name: str, proposed_state: State) -> str:
    """Explanatory text for a warning; empty when there is nothing to explain."""
    if not warning.has_warning:
        return ""

    n_parents = len(warning.intervened_parents)
    plural = "s" if n_parents > 1 else ""
    verb_suffix = "s" if n_parents == 1 else ""
    parents_list = ", ".join(f"{p.name}={p.state}" for p in warning.intervened_parents)
    percent = f"{(warning.dominant_probability or 0.0) * 100:.0f}%"

    if warning.strong_determination:
        return (
            f"The parent variable{plural} ({parents_list}) strongly determine{verb_suffix} {node_name}.\n\n"
            f"Given the current interventions, {node_name} has a {percent} probability "
            f"of being \"{warning.dominant_state}\".\n\n"
            f"Your proposed intervention do({node_name}={proposed_state}) will override "
            f"this causal effect, which may not reflect realistic scenarios."
        )

    return (
        f"The parent variable{plural} ({parents_list}) influence{verb_suffix} {node_name}.\n\n"
        f"Given the current interventions, {node_name} is {percent} likely "
        f"to be \"{warning.dominant_state}\".\n\n"
        f"Intervening on {node_name} while its parents are already intervened "
        f"creates an unusual scenario."
    )
