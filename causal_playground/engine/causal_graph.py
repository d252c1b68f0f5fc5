"""
Causal graph of discrete variables.

Nodes are kept in an id-keyed dictionary and edges in an explicit
(source, target) list; parent/child relations are derived from the edge
list on demand. The edge relation is kept acyclic: any edge that would
close a cycle is rejected at insertion time.

Interventions (do-operator) and observations are per-node flags. They do
not alter the stored structure; the inference engine interprets them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple
import logging

from .probability import ConditionalDistribution, State, Variable, assignment_key

logger = logging.getLogger(__name__)

Position = Tuple[float, float]


class StructuralInvariantError(RuntimeError):
    """The graph is in a state its mutation methods should have made impossible."""


class RejectionReason(Enum):
    """Why a mutation was turned into a no-op."""
    DUPLICATE_NODE = "duplicate_node"
    DUPLICATE_EDGE = "duplicate_edge"
    SELF_LOOP = "self_loop"
    CYCLE = "cycle"
    UNKNOWN_NODE = "unknown_node"
    MISSING_EDGE = "missing_edge"
    INVALID_STATE = "invalid_state"


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a graph mutation. Truthy when the mutation was applied."""
    accepted: bool
    reason: Optional[RejectionReason] = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.accepted

    @classmethod
    def ok(cls) -> "MutationResult":
        return cls(accepted=True)

    @classmethod
    def rejected(cls, reason: RejectionReason, detail: str = "") -> "MutationResult":
        return cls(accepted=False, reason=reason, detail=detail)


@dataclass(frozen=True)
class CausalEdge:
    """A directed edge source -> target."""
    source: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target}


@dataclass(frozen=True)
class IntervenedParent:
    """A parent node currently held at a forced state."""
    id: str
    name: str
    state: State

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "state": self.state}


@dataclass
class CausalNode:
    """A node record: variable, its table, layout position and flags."""
    variable: Variable
    distribution: ConditionalDistribution
    position: Position = (0.0, 0.0)
    intervened_state: Optional[State] = None
    observed_state: Optional[State] = None

    @property
    def id(self) -> str:
        return self.variable.id

    @property
    def is_intervened(self) -> bool:
        return self.intervened_state is not None

    @property
    def is_observed(self) -> bool:
        return self.observed_state is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        data = self.variable.to_dict()
        data["position"] = list(self.position)
        data["table"] = self.distribution.to_rows()
        if self.is_intervened:
            data["intervention"] = self.intervened_state
        if self.is_observed:
            data["observation"] = self.observed_state
        return data


class CausalGraph:
    """
    Discrete causal Bayesian network.

    Mutations never raise for structurally invalid requests (duplicates,
    self-loops, cycles, unknown ids); they return a rejected MutationResult
    and leave the graph unchanged.
    """

    def __init__(self):
        self.nodes: Dict[str, CausalNode] = {}
        self.edges: List[CausalEdge] = []

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_node(
        self,
        node_id: str,
        name: Optional[str] = None,
        states: Sequence[State] = ("True", "False"),
        position: Position = (0.0, 0.0),
    ) -> MutationResult:
        """
        Add a node with a parentless uniform prior.

        Raises:
            ValueError: if the states are empty or not distinct
        """
        if node_id in self.nodes:
            logger.debug(f"Node {node_id} already exists, ignoring")
            return MutationResult.rejected(RejectionReason.DUPLICATE_NODE, node_id)

        variable = Variable(node_id, name if name is not None else node_id, tuple(states))
        self.nodes[node_id] = CausalNode(
            variable=variable,
            distribution=ConditionalDistribution(variable),
            position=(float(position[0]), float(position[1])),
        )
        return MutationResult.ok()

    def add_edge(self, source: str, target: str) -> MutationResult:
        """
        Add source -> target and rebuild the target's table.

        The target's table is reset to uniform over its new parent set.
        """
        if source not in self.nodes or target not in self.nodes:
            missing = source if source not in self.nodes else target
            logger.debug(f"Edge {source} -> {target} rejected: unknown node {missing}")
            return MutationResult.rejected(RejectionReason.UNKNOWN_NODE, missing)
        if self.has_edge(source, target):
            logger.debug(f"Edge {source} -> {target} already exists, ignoring")
            return MutationResult.rejected(RejectionReason.DUPLICATE_EDGE, f"{source}->{target}")
        if source == target:
            logger.debug(f"Self-loop on {source} rejected")
            return MutationResult.rejected(RejectionReason.SELF_LOOP, source)
        if self._is_reachable(target, source):
            logger.warning(f"Cycle detected, edge {source} -> {target} rejected")
            return MutationResult.rejected(RejectionReason.CYCLE, f"{source}->{target}")

        self.edges.append(CausalEdge(source, target))
        self._rebuild_distribution(target)
        return MutationResult.ok()

    def remove_edge(self, source: str, target: str) -> MutationResult:
        """Remove source -> target and rebuild the target's table."""
        edge = CausalEdge(source, target)
        if edge not in self.edges:
            logger.debug(f"Edge {source} -> {target} not found, ignoring")
            return MutationResult.rejected(RejectionReason.MISSING_EDGE, f"{source}->{target}")

        self.edges.remove(edge)
        self._rebuild_distribution(target)
        return MutationResult.ok()

    def set_intervention(self, node_id: str, state: Optional[State]) -> MutationResult:
        """Force a node to a state (do-operator); None clears the intervention."""
        result = self._check_flag(node_id, state)
        if result:
            self.nodes[node_id].intervened_state = state
        return result

    def set_observation(self, node_id: str, state: Optional[State]) -> MutationResult:
        """Record a node as observed at a state; None clears the observation."""
        result = self._check_flag(node_id, state)
        if result:
            self.nodes[node_id].observed_state = state
        return result

    def _check_flag(self, node_id: str, state: Optional[State]) -> MutationResult:
        node = self.nodes.get(node_id)
        if node is None:
            logger.debug(f"Node {node_id} not found, ignoring")
            return MutationResult.rejected(RejectionReason.UNKNOWN_NODE, node_id)
        if state is not None and state not in node.variable.states:
            logger.debug(f"State {state!r} is not a state of {node_id}, ignoring")
            return MutationResult.rejected(RejectionReason.INVALID_STATE, str(state))
        return MutationResult.ok()

    def _rebuild_distribution(self, node_id: str) -> None:
        node = self.nodes[node_id]
        parents = [self.nodes[parent_id].variable for parent_id in self.get_parents(node_id)]
        node.distribution = ConditionalDistribution(node.variable, parents)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> CausalNode:
        """Get a node record."""
        if node_id not in self.nodes:
            raise ValueError(f"Node {node_id} not found")
        return self.nodes[node_id]

    def has_edge(self, source: str, target: str) -> bool:
        return CausalEdge(source, target) in self.edges

    def get_parents(self, node_id: str) -> List[str]:
        """Direct parents in edge insertion order."""
        return [edge.source for edge in self.edges if edge.target == node_id]

    def get_children(self, node_id: str) -> List[str]:
        """Direct children in edge insertion order."""
        return [edge.target for edge in self.edges if edge.source == node_id]

    def get_intervened_parents(self, node_id: str) -> List[IntervenedParent]:
        """Parents of a node that currently carry an intervention."""
        intervened = []
        for parent_id in self.get_parents(node_id):
            parent = self.nodes.get(parent_id)
            if parent is not None and parent.is_intervened:
                intervened.append(IntervenedParent(
                    id=parent_id,
                    name=parent.variable.name,
                    state=parent.intervened_state,
                ))
        return intervened

    def has_intervened_parents(self, node_id: str) -> bool:
        return len(self.get_intervened_parents(node_id)) > 0

    def _is_reachable(self, start: str, goal: str) -> bool:
        """Whether goal can be reached from start along directed edges."""
        visited: Set[str] = set()
        stack = [start]

        while stack:
            current = stack.pop()
            if current == goal:
                return True
            if current in visited:
                continue
            visited.add(current)
            stack.extend(self.get_children(current))

        return False

    def get_topological_sort(self) -> List[str]:
        """
        Node ids ordered so every edge's source precedes its target.

        Depth-first post-order with an in-progress marker; the result is the
        reversed post-order.

        Raises:
            StructuralInvariantError: if a cycle is encountered
        """
        children: Dict[str, List[str]] = {node_id: [] for node_id in self.nodes}
        for edge in self.edges:
            children[edge.source].append(edge.target)

        visited: Set[str] = set()
        in_progress: Set[str] = set()
        post_order: List[str] = []

        def visit(node_id: str) -> None:
            if node_id in visited:
                return
            if node_id in in_progress:
                raise StructuralInvariantError(f"Graph has a cycle through {node_id}")

            in_progress.add(node_id)
            for child in children[node_id]:
                visit(child)
            in_progress.discard(node_id)

            visited.add(node_id)
            post_order.append(node_id)

        for node_id in self.nodes:
            visit(node_id)

        post_order.reverse()
        return post_order

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the graph to dictionary."""
        return {
            "nodes": [node.to_dict() for node in self.nodes.values()],
            "edges": [edge.to_dict() for edge in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CausalGraph":
        """
        Build a graph from a declarative description.

        Edges may be given as {"source": ..., "target": ...} mappings or as
        [source, target] pairs. Node tables are lists of
        {"given": {...}, "probabilities": {...}} records and are validated
        on commit.

        Raises:
            ValueError: if a node is malformed or an edge is rejected
            TableValidationError: if a table row does not sum to 1
        """
        graph = cls()

        for node_data in data.get("nodes", []):
            graph.add_node(
                node_data["id"],
                node_data.get("name"),
                node_data.get("states", ("True", "False")),
                tuple(node_data.get("position", (0.0, 0.0))),
            )

        for edge_data in data.get("edges", []):
            if isinstance(edge_data, dict):
                source, target = edge_data["source"], edge_data["target"]
            else:
                source, target = edge_data
            result = graph.add_edge(source, target)
            if not result:
                raise ValueError(
                    f"Edge {source} -> {target} rejected: {result.reason.value}"
                )

        for node_data in data.get("nodes", []):
            node = graph.nodes[node_data["id"]]
            rows = node_data.get("table")
            if rows:
                table = {
                    assignment_key(record.get("given") or {}): dict(record["probabilities"])
                    for record in rows
                }
                for key in table:
                    if key not in node.distribution.table:
                        raise ValueError(
                            f"Table for {node.id} has a row for unknown parent assignment {key}"
                        )
                # Rows not listed keep their uniform values
                merged = dict(node.distribution.table)
                merged.update(table)
                node.distribution.commit_table(merged)
            if node_data.get("intervention") is not None:
                result = graph.set_intervention(node.id, node_data["intervention"])
                if not result:
                    raise ValueError(
                        f"Intervention do({node.id}={node_data['intervention']}) "
                        f"rejected: {result.reason.value}"
                    )
            if node_data.get("observation") is not None:
                result = graph.set_observation(node.id, node_data["observation"])
                if not result:
                    raise ValueError(
                        f"Observation {node.id}={node_data['observation']} "
                        f"rejected: {result.reason.value}"
                    )

        return graph

    def get_statistics(self) -> Dict[str, Any]:
        """Get graph statistics."""
        return {
            "total_nodes": len(self.nodes),
            "total_edges": len(self.edges),
            "intervened_nodes": sum(1 for n in self.nodes.values() if n.is_intervened),
            "observed_nodes": sum(1 for n in self.nodes.values() if n.is_observed),
            "root_nodes": sum(1 for node_id in self.nodes if not self.get_parents(node_id)),
        }
