"""
Simulation pipeline.

Runs one scenario end to end:
- Load a graph from a YAML description or build a named example
- Apply interventions and observations
- Check proposed interventions against already-intervened parents
- Estimate every node's marginal distribution by rejection sampling

Example Usage:
    from causal_playground import SimulationPipeline, PipelineConfig

    config = PipelineConfig(
        example="chain",
        observations={"smoke": "True"},
        seed=7,
    )
    result = SimulationPipeline(config).run()
    print(result.summary)
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .engine import (
    AllMarginals,
    CausalGraph,
    InferenceEngine,
    InterventionWarning,
    check_intervention_warning,
    create_example,
    generate_warning_message,
)
from .engine.inference import DEFAULT_N_SAMPLES
from .engine.intervention_validation import CONFLICT_THRESHOLD, STRONG_DETERMINATION_THRESHOLD
from .utils.seed import set_global_seed

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class PipelineConfig:
    """Configuration for a simulation run."""

    # Graph source: a YAML graph description or a built-in example
    graph_path: Optional[str] = None
    example: Optional[str] = None

    # Scenario
    interventions: Dict[str, str] = field(default_factory=dict)
    observations: Dict[str, str] = field(default_factory=dict)
    proposed_interventions: Dict[str, str] = field(default_factory=dict)

    # Sampling
    n_samples: int = DEFAULT_N_SAMPLES
    seed: Optional[int] = None

    # Intervention warnings
    strong_threshold: float = STRONG_DETERMINATION_THRESHOLD
    conflict_threshold: float = CONFLICT_THRESHOLD

    # Output
    output_dir: Optional[str] = None
    verbose: bool = True

    def __post_init__(self):
        if self.graph_path is None and self.example is None:
            raise ValueError("Either graph_path or example must be specified")
        if self.n_samples <= 0:
            raise ValueError(f"n_samples must be positive, got {self.n_samples}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """Create config from dictionary, ignoring unknown keys."""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_yaml(cls, path: str) -> "PipelineConfig":
        """Load config from a YAML file. Relative graph paths resolve against it."""
        config_path = Path(path)
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        graph_path = data.get("graph_path")
        if graph_path and not Path(graph_path).is_absolute():
            data["graph_path"] = str(config_path.parent / graph_path)

        return cls.from_dict(data)


def load_graph_file(path: str) -> CausalGraph:
    """Load a CausalGraph from a YAML (or JSON) description."""
    graph_path = Path(path)
    if not graph_path.exists():
        raise FileNotFoundError(f"Graph file not found: {graph_path}")
    with open(graph_path, "r") as f:
        data = yaml.safe_load(f) or {}
    return CausalGraph.from_dict(data)


def save_graph_file(graph: CausalGraph, path: str) -> None:
    """Write a CausalGraph description as YAML."""
    with open(path, "w") as f:
        yaml.safe_dump(graph.to_dict(), f, sort_keys=False)
    logger.info(f"Graph saved to {path}")


# =============================================================================
# Result Dataclasses
# =============================================================================

@dataclass
class InterventionCheck:
    """Conflict check for one proposed intervention."""
    node_id: str
    proposed_state: str
    warning: InterventionWarning
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "node_id": self.node_id,
            "proposed_state": self.proposed_state,
            "warning": self.warning.to_dict(),
            "message": self.message,
        }


@dataclass
class SimulationResult:
    """Complete results from a simulation run."""

    marginals: AllMarginals
    accepted_samples: int
    n_samples: int
    interventions: Dict[str, str]
    observations: Dict[str, str]
    intervention_checks: List[InterventionCheck] = field(default_factory=list)
    rejected_mutations: List[str] = field(default_factory=list)

    # Metadata
    n_nodes: int = 0
    n_edges: int = 0
    runtime_seconds: float = 0.0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def degenerate(self) -> bool:
        return self.accepted_samples == 0

    @property
    def acceptance_rate(self) -> float:
        return self.accepted_samples / self.n_samples if self.n_samples else 0.0

    @property
    def warnings(self) -> List[InterventionCheck]:
        return [check for check in self.intervention_checks if check.warning.has_warning]

    @property
    def summary(self) -> str:
        """Generate a readable summary."""
        lines = [
            "=" * 70,
            "CAUSAL SIMULATION RESULTS",
            "=" * 70,
            f"Timestamp: {self.timestamp}",
            f"Runtime: {self.runtime_seconds:.2f} seconds",
            f"Graph: {self.n_nodes} nodes, {self.n_edges} edges",
            "",
            "SCENARIO:",
            f"  Interventions: {_format_assignment(self.interventions, 'do')}",
            f"  Observations: {_format_assignment(self.observations)}",
            f"  Accepted samples: {self.accepted_samples}/{self.n_samples} "
            f"({self.acceptance_rate:.1%})",
        ]

        if self.rejected_mutations:
            lines.extend(["", "REJECTED:"])
            for rejected in self.rejected_mutations:
                lines.append(f"  - {rejected}")

        lines.extend(["", "MARGINALS:"])
        if self.degenerate:
            lines.append("  No samples matched the observations; marginals are undefined (all zero).")
        for node_id, distribution in self.marginals.items():
            formatted = ", ".join(f"{state}={p:.3f}" for state, p in distribution.items())
            lines.append(f"  {node_id}: {formatted}")

        if self.warnings:
            lines.extend(["", "INTERVENTION WARNINGS:"])
            for check in self.warnings:
                lines.append(f"  do({check.node_id}={check.proposed_state}):")
                for text in check.message.split("\n"):
                    if text:
                        lines.append(f"    {text}")

        lines.extend(["", "=" * 70])
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "marginals": self.marginals,
            "accepted_samples": self.accepted_samples,
            "n_samples": self.n_samples,
            "degenerate": self.degenerate,
            "interventions": self.interventions,
            "observations": self.observations,
            "intervention_checks": [c.to_dict() for c in self.intervention_checks],
            "rejected_mutations": self.rejected_mutations,
            "n_nodes": self.n_nodes,
            "n_edges": self.n_edges,
            "runtime_seconds": self.runtime_seconds,
            "timestamp": self.timestamp,
        }


def _format_assignment(assignment: Dict[str, str], wrapper: str = "") -> str:
    if not assignment:
        return "None"
    items = ", ".join(f"{node}={state}" for node, state in assignment.items())
    return f"{wrapper}({items})" if wrapper else items


# =============================================================================
# Main Pipeline
# =============================================================================

class SimulationPipeline:
    """Builds a graph, applies a scenario, and estimates marginals."""

    def __init__(self, config: PipelineConfig):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration
        """
        self.config = config
        self._setup_logging()
        self._graph: Optional[CausalGraph] = None

    def _setup_logging(self) -> None:
        """Configure logging."""
        level = logging.INFO if self.config.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    @property
    def graph(self) -> CausalGraph:
        """Get or load the graph."""
        if self._graph is None:
            self._graph = self._load_graph()
        return self._graph

    def _load_graph(self) -> CausalGraph:
        if self.config.graph_path:
            logger.info(f"Loading graph from {self.config.graph_path}")
            return load_graph_file(self.config.graph_path)
        logger.info(f"Building example graph {self.config.example!r}")
        return create_example(self.config.example)

    def run(self) -> SimulationResult:
        """
        Execute the simulation.

        Returns:
            SimulationResult with marginals and intervention checks
        """
        start_time = datetime.now()
        if self.config.seed is not None:
            set_global_seed(self.config.seed)
        graph = self.graph

        # Scenario interventions must be in place before the conflict checks
        rejected = self._apply_scenario(graph)

        logger.info("Step 1: Checking proposed interventions")
        checks = self._check_proposed_interventions(graph)

        # Checks only inform; proposed interventions are applied regardless
        for node_id, state in self.config.proposed_interventions.items():
            result = graph.set_intervention(node_id, state)
            if not result:
                rejected.append(f"do({node_id}={state}): {result.reason.value}")

        logger.info(f"Step 2: Sampling {self.config.n_samples} draws")
        engine = InferenceEngine(graph, n_samples=self.config.n_samples, seed=self.config.seed)
        marginals = engine.compute_all_marginals()

        interventions = {
            node.id: node.intervened_state for node in graph.nodes.values() if node.is_intervened
        }
        observations = {
            node.id: node.observed_state for node in graph.nodes.values() if node.is_observed
        }

        result = SimulationResult(
            marginals=marginals,
            accepted_samples=engine.accepted_samples,
            n_samples=engine.n_samples,
            interventions=interventions,
            observations=observations,
            intervention_checks=checks,
            rejected_mutations=rejected,
            n_nodes=len(graph.nodes),
            n_edges=len(graph.edges),
            runtime_seconds=(datetime.now() - start_time).total_seconds(),
        )

        if self.config.output_dir:
            self.save_results(result, self.config.output_dir)

        logger.info(f"Simulation complete in {result.runtime_seconds:.2f}s")
        return result

    def _apply_scenario(self, graph: CausalGraph) -> List[str]:
        rejected = []
        for node_id, state in self.config.interventions.items():
            result = graph.set_intervention(node_id, state)
            if not result:
                rejected.append(f"do({node_id}={state}): {result.reason.value}")
        for node_id, state in self.config.observations.items():
            result = graph.set_observation(node_id, state)
            if not result:
                rejected.append(f"observe({node_id}={state}): {result.reason.value}")
        for entry in rejected:
            logger.warning(f"Rejected scenario entry {entry}")
        return rejected

    def _check_proposed_interventions(self, graph: CausalGraph) -> List[InterventionCheck]:
        checks = []
        for node_id, state in self.config.proposed_interventions.items():
            warning = check_intervention_warning(
                node_id,
                state,
                graph,
                strong_threshold=self.config.strong_threshold,
                conflict_threshold=self.config.conflict_threshold,
            )
            node = graph.nodes.get(node_id)
            name = node.variable.name if node is not None else node_id
            checks.append(InterventionCheck(
                node_id=node_id,
                proposed_state=state,
                warning=warning,
                message=generate_warning_message(warning, name, state),
            ))
        return checks

    def save_results(self, result: SimulationResult, output_dir: str) -> Path:
        """Write marginals.yaml to the output directory."""
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        path = out / "marginals.yaml"
        with open(path, "w") as f:
            yaml.safe_dump(result.to_dict(), f, sort_keys=False)
        logger.info(f"Results saved to {path}")
        return path
