"""
numba kernels for the full-cost recomputation hot loop
"""

import numpy as np
from numba import njit


@njit
def cycle_cost_jit(cycle, distances):
    """Closed tour length of one cycle, wraparound edge included."""
    n = cycle.shape[0]
    total = 0
    for i in range(n):
        total += distances[cycle[i], cycle[(i + 1) % n]]
    return total


@njit
def tour_pair_cost_jit(cycle1, cycle2, distances):
    return cycle_cost_jit(cycle1, distances) + cycle_cost_jit(cycle2, distances)


def as_node_array(cycle) -> np.ndarray:
    return np.asarray(cycle, dtype=np.int64).reshape(-1)
