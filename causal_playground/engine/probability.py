"""
Discrete variables and conditional probability tables.

A table maps a canonical parent assignment key to a distribution over the
variable's own states:

    '{"drug": "Taken", "gender": "Male"}' -> {"Recovered": 0.93, "Not Recovered": 0.07}

Parentless variables hold a single row under the empty assignment '{}'.
"""

from dataclasses import dataclass, field
from itertools import product
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
import json
import logging
import math

logger = logging.getLogger(__name__)

State = str
ProbabilityRow = Dict[State, float]
ProbabilityTable = Dict[str, ProbabilityRow]

DEFAULT_ROW_TOLERANCE = 0.01


class TableValidationError(ValueError):
    """A committed table has a row that is not a probability distribution."""

    def __init__(
        self,
        row_key: str,
        total: float,
        tolerance: float = DEFAULT_ROW_TOLERANCE,
        detail: Optional[str] = None,
    ):
        self.row_key = row_key
        self.total = total
        self.tolerance = tolerance
        self.detail = detail
        if detail:
            message = f"Invalid probabilities for condition {row_key}: {detail}"
        else:
            message = (
                f"Probabilities for condition {row_key} must sum to 1.0 "
                f"(current: {total:.2f})"
            )
        super().__init__(message)


@dataclass(frozen=True)
class Variable:
    """A discrete random variable with an ordered list of states."""
    id: str
    name: str
    states: Tuple[State, ...] = field(default=("True", "False"))

    def __post_init__(self):
        if not self.id:
            raise ValueError("Variable id cannot be empty")
        states = tuple(self.states)
        if not states:
            raise ValueError(f"Variable {self.id} must have at least one state")
        if len(set(states)) != len(states):
            raise ValueError(f"Variable {self.id} has duplicate states: {list(states)}")
        object.__setattr__(self, "states", states)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {"id": self.id, "name": self.name, "states": list(self.states)}


def assignment_key(assignment: Mapping[str, State]) -> str:
    """
    Canonical table key for a parent assignment.

    Parent ids are sorted before serialization, so equal assignments built
    in a different order produce the same key.
    """
    return json.dumps(dict(sorted(assignment.items())), sort_keys=True)


def parent_combinations(parents: Sequence[Variable]) -> List[Dict[str, State]]:
    """Every assignment in the cross-product of the parents' state sets."""
    if not parents:
        return [{}]
    ids = [parent.id for parent in parents]
    return [
        dict(zip(ids, combo))
        for combo in product(*(parent.states for parent in parents))
    ]


def validate_table(
    table: Mapping[str, Mapping[State, float]],
    tolerance: float = DEFAULT_ROW_TOLERANCE,
    states: Optional[Sequence[State]] = None,
) -> None:
    """
    Check that every row of a table is a probability distribution.

    Each entry must be a finite number in [0, 1] and each row must sum to 1
    within tolerance. When states are given, rows may only name those states.

    Raises:
        TableValidationError: naming the first offending row
    """
    allowed = set(states) if states is not None else None
    for key, row in table.items():
        total = float(sum(row.values()))
        if allowed is not None:
            unknown = sorted(state for state in row if state not in allowed)
            if unknown:
                raise TableValidationError(
                    key, total, tolerance, detail=f"unknown states {unknown}"
                )
        for state, value in row.items():
            value = float(value)
            if not math.isfinite(value) or not 0.0 <= value <= 1.0:
                raise TableValidationError(
                    key, total, tolerance,
                    detail=f"P({state}) = {value} is outside [0, 1]",
                )
        if abs(total - 1.0) > tolerance:
            raise TableValidationError(key, total, tolerance)


class ConditionalDistribution:
    """
    P(variable | parents) as an explicit table.

    Construction always produces a uniform table over the cross-product of
    the parents' states; previous values are never carried over.
    """

    def __init__(self, variable: Variable, parents: Optional[Sequence[Variable]] = None):
        self.variable = variable
        self.parents: List[Variable] = list(parents or [])
        self.table: ProbabilityTable = self._initialize_table()

    def _initialize_table(self) -> ProbabilityTable:
        prob = 1.0 / len(self.variable.states)
        return {
            assignment_key(combo): {state: prob for state in self.variable.states}
            for combo in parent_combinations(self.parents)
        }

    @property
    def parent_ids(self) -> List[str]:
        return [parent.id for parent in self.parents]

    def _project(self, parent_assignment: Optional[Mapping[str, State]]) -> Dict[str, State]:
        """Restrict an assignment to this table's parents, filling gaps with first states."""
        parent_assignment = parent_assignment or {}
        projected = {}
        for parent in self.parents:
            if parent.id in parent_assignment:
                projected[parent.id] = parent_assignment[parent.id]
            else:
                projected[parent.id] = parent.states[0]
        return projected

    def get_probability(
        self,
        target_state: State,
        parent_assignment: Optional[Mapping[str, State]] = None
    ) -> float:
        """
        P(variable = target_state | parent_assignment).

        Extra keys in the assignment are ignored and missing parents fall
        back to their first declared state. Returns 0 when the row or the
        state is absent from the table.
        """
        row = self.table.get(assignment_key(self._project(parent_assignment)))
        if row is None:
            return 0.0
        return row.get(target_state, 0.0)

    def get_row(self, parent_assignment: Optional[Mapping[str, State]] = None) -> ProbabilityRow:
        """Full probability vector over the variable's states for one assignment."""
        row = self.table.get(assignment_key(self._project(parent_assignment))) or {}
        return {state: row.get(state, 0.0) for state in self.variable.states}

    def set_row(self, parent_assignment: Mapping[str, State], probabilities: Mapping[State, float]) -> None:
        """Write a single row without validation."""
        self.table[assignment_key(parent_assignment)] = dict(probabilities)

    def update_table(self, new_table: ProbabilityTable) -> None:
        """Replace the whole table. Row sums are the caller's responsibility."""
        self.table = {key: dict(row) for key, row in new_table.items()}

    def commit_table(self, new_table: ProbabilityTable, tolerance: float = DEFAULT_ROW_TOLERANCE) -> None:
        """
        Validate and then replace the table.

        The current table is left untouched if any row fails validation.

        Raises:
            TableValidationError: if a row names a state the variable does not
                have, holds a value outside [0, 1], or does not sum to 1
        """
        validate_table(new_table, tolerance, states=self.variable.states)
        self.update_table(new_table)
        logger.debug(f"Committed table for {self.variable.id} ({len(new_table)} rows)")

    def to_rows(self) -> List[Dict[str, Any]]:
        """Table as a list of {given, probabilities} records."""
        return [
            {"given": json.loads(key), "probabilities": dict(row)}
            for key, row in self.table.items()
        ]

    def __repr__(self) -> str:
        return (
            f"ConditionalDistribution({self.variable.id!r}, "
            f"parents={self.parent_ids}, rows={len(self.table)})"
        )
