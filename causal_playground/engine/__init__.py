"""
Causal graph inference engine.

Components:
- Variable / ConditionalDistribution: discrete variables and their tables
- CausalGraph: acyclic graph with intervention and observation flags
- InferenceEngine: rejection-sampling marginals under do() and evidence
- check_intervention_warning: flags interventions under intervened parents
"""

from .probability import (
    Variable,
    ConditionalDistribution,
    TableValidationError,
    assignment_key,
    parent_combinations,
    validate_table,
)
from .causal_graph import (
    CausalEdge,
    CausalGraph,
    CausalNode,
    IntervenedParent,
    MutationResult,
    RejectionReason,
    StructuralInvariantError,
)
from .inference import (
    AllMarginals,
    InferenceEngine,
    is_degenerate,
)
from .intervention_validation import (
    InterventionWarning,
    check_intervention_warning,
    generate_warning_message,
)
from .examples import (
    EXAMPLE_GRAPHS,
    create_chain,
    create_collider_bias,
    create_example,
    create_fork,
    create_simpsons_paradox,
)

__all__ = [
    # Data classes
    "Variable",
    "CausalEdge",
    "CausalNode",
    "IntervenedParent",
    "MutationResult",
    "InterventionWarning",
    "AllMarginals",
    # Enums
    "RejectionReason",
    # Errors
    "TableValidationError",
    "StructuralInvariantError",
    # Models and engines
    "ConditionalDistribution",
    "CausalGraph",
    "InferenceEngine",
    # Functions
    "assignment_key",
    "parent_combinations",
    "validate_table",
    "is_degenerate",
    "check_intervention_warning",
    "generate_warning_message",
    # Factory functions
    "EXAMPLE_GRAPHS",
    "create_chain",
    "create_fork",
    "create_collider_bias",
    "create_simpsons_paradox",
    "create_example",
]
