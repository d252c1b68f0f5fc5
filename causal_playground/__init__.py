"""
Causal Playground

A discrete causal Bayesian network simulator for teaching the difference
between observing a variable and intervening on it.
"""

__version__ = "0.1.0"

from .pipeline import PipelineConfig, SimulationPipeline, SimulationResult

__all__ = [
    "PipelineConfig",
    "SimulationPipeline",
    "SimulationResult",
    "__version__",
]
