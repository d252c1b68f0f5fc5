"""
Classic teaching graphs.

- Chain:     fire -> smoke -> alarm
- Fork:      light1 <- switch -> light2
- Collider:  talent -> success <- hard_work
- Simpson's: gender -> drug -> recovery, gender -> recovery
"""

from typing import Callable, Dict, List, Tuple

from .causal_graph import CausalGraph
from .probability import assignment_key


def _set_table(graph: CausalGraph, node_id: str, rows: List[Tuple[Dict[str, str], Dict[str, float]]]) -> None:
    """Commit a full table given as (parent assignment, probabilities) pairs."""
    table = {assignment_key(given): dict(probabilities) for given, probabilities in rows}
    graph.nodes[node_id].distribution.commit_table(table)


def create_chain() -> CausalGraph:
    """
    Chain: fire -> smoke -> alarm.

    Observing smoke makes fire far more likely; intervening on smoke does not.
    """
    g = CausalGraph()
    g.add_node("fire", "Fire", ["True", "False"], (100, 150))
    g.add_node("smoke", "Smoke", ["True", "False"], (250, 150))
    g.add_node("alarm", "Alarm", ["True", "False"], (400, 150))

    g.add_edge("fire", "smoke")
    g.add_edge("smoke", "alarm")

    # Fire is rare
    _set_table(g, "fire", [({}, {"True": 0.1, "False": 0.9})])
    _set_table(g, "smoke", [
        ({"fire": "True"}, {"True": 0.95, "False": 0.05}),
        ({"fire": "False"}, {"True": 0.01, "False": 0.99}),
    ])
    _set_table(g, "alarm", [
        ({"smoke": "True"}, {"True": 0.9, "False": 0.1}),
        ({"smoke": "False"}, {"True": 0.05, "False": 0.95}),
    ])
    return g


def create_fork() -> CausalGraph:
    """Fork: one switch drives two lights, which correlate without causing each other."""
    g = CausalGraph()
    g.add_node("switch", "Switch", ["On", "Off"], (250, 50))
    g.add_node("light1", "Light 1", ["On", "Off"], (150, 200))
    g.add_node("light2", "Light 2", ["On", "Off"], (350, 200))

    g.add_edge("switch", "light1")
    g.add_edge("switch", "light2")

    _set_table(g, "switch", [({}, {"On": 0.5, "Off": 0.5})])
    for light in ("light1", "light2"):
        _set_table(g, light, [
            ({"switch": "On"}, {"On": 0.98, "Off": 0.02}),
            ({"switch": "Off"}, {"On": 0.01, "Off": 0.99}),
        ])
    return g


def create_collider_bias() -> CausalGraph:
    """
    Collider: talent and hard work independently cause success.

    Conditioning on success induces a spurious negative correlation
    between its causes.
    """
    g = CausalGraph()
    g.add_node("talent", "Talent", ["High", "Low"], (100, 50))
    g.add_node("hard_work", "Hard Work", ["Yes", "No"], (400, 50))
    g.add_node("success", "Success", ["True", "False"], (250, 200))

    g.add_edge("talent", "success")
    g.add_edge("hard_work", "success")

    _set_table(g, "talent", [({}, {"High": 0.3, "Low": 0.7})])
    _set_table(g, "hard_work", [({}, {"Yes": 0.6, "No": 0.4})])
    _set_table(g, "success", [
        ({"talent": "High", "hard_work": "Yes"}, {"True": 0.95, "False": 0.05}),
        ({"talent": "High", "hard_work": "No"}, {"True": 0.7, "False": 0.3}),
        ({"talent": "Low", "hard_work": "Yes"}, {"True": 0.6, "False": 0.4}),
        ({"talent": "Low", "hard_work": "No"}, {"True": 0.1, "False": 0.9}),
    ])
    return g


def create_simpsons_paradox() -> CausalGraph:
    """
    Simpson's paradox: gender confounds drug choice and recovery.

    Males take the drug more often and recover more often regardless, so
    the observational and interventional drug effects differ.
    """
    g = CausalGraph()
    g.add_node("gender", "Gender", ["Male", "Female"], (250, 50))
    g.add_node("drug", "Drug", ["Taken", "Not Taken"], (100, 200))
    g.add_node("recovery", "Recovery", ["Recovered", "Not Recovered"], (400, 200))

    g.add_edge("gender", "drug")
    g.add_edge("gender", "recovery")
    g.add_edge("drug", "recovery")

    _set_table(g, "gender", [({}, {"Male": 0.5, "Female": 0.5})])
    _set_table(g, "drug", [
        ({"gender": "Male"}, {"Taken": 0.7, "Not Taken": 0.3}),
        ({"gender": "Female"}, {"Taken": 0.3, "Not Taken": 0.7}),
    ])
    _set_table(g, "recovery", [
        ({"gender": "Male", "drug": "Taken"}, {"Recovered": 0.93, "Not Recovered": 0.07}),
        ({"gender": "Male", "drug": "Not Taken"}, {"Recovered": 0.87, "Not Recovered": 0.13}),
        ({"gender": "Female", "drug": "Taken"}, {"Recovered": 0.73, "Not Recovered": 0.27}),
        ({"gender": "Female", "drug": "Not Taken"}, {"Recovered": 0.69, "Not Recovered": 0.31}),
    ])
    return g


EXAMPLE_GRAPHS: Dict[str, Callable[[], CausalGraph]] = {
    "chain": create_chain,
    "fork": create_fork,
    "collider": create_collider_bias,
    "simpsons_paradox": create_simpsons_paradox,
}


def create_example(name: str) -> CausalGraph:
    """Build a named example graph."""
    if name not in EXAMPLE_GRAPHS:
        raise ValueError(
            f"Unknown example {name!r}, expected one of {sorted(EXAMPLE_GRAPHS)}"
        )
    return EXAMPLE_GRAPHS[name]()
