"""
Random seed management.

Samplers take an explicit numpy Generator so that engines never share
mutable random state; set_global_seed only covers code that still reaches
for the module-level generators.
"""

from typing import Optional
import logging
import random

import numpy as np

logger = logging.getLogger(__name__)


def set_global_seed(seed: int) -> None:
    """Seed Python's and numpy's global generators."""
    random.seed(seed)
    np.random.seed(seed)
    logger.debug(f"Global seed set to {seed}")


def get_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create an independent generator; unseeded when seed is None."""
    return np.random.default_rng(seed)
