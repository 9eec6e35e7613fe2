"""
Euclidean distance utilities
All-pairs matrix is built once per instance with numpy, rounded to integers
"""

import math
from typing import Sequence, Tuple

import numpy as np


def euclidean_distance(p1: Tuple[float, float], p2: Tuple[float, float]) -> int:
    """
    Rounded Euclidean distance between two points.
    Rounds half away from zero (all distances are non-negative).
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    return int(math.floor(math.sqrt(dx * dx + dy * dy) + 0.5))


def distance_matrix(coordinates: Sequence[Tuple[float, float]]) -> np.ndarray:
    """
    Build the symmetric (n, n) integer distance matrix - O(N²) memory, computed once.
    Diagonal is 0.
    """
    coords = np.asarray(coordinates, dtype=np.float64)
    if coords.size == 0:
        return np.zeros((0, 0), dtype=np.int64)

    diff = coords[:, None, :] - coords[None, :, :]
    exact = np.sqrt((diff ** 2).sum(axis=2))
    matrix = np.floor(exact + 0.5).astype(np.int64)
    np.fill_diagonal(matrix, 0)
    return matrix


def nearest_neighbor_table(matrix: np.ndarray, k: int) -> np.ndarray:
    """
    For every node, the k closest other nodes ordered by distance - (n, k) int array.
    Ties keep the lower node id first.
    """
    n = matrix.shape[0]
    keyed = matrix.astype(np.float64)
    np.fill_diagonal(keyed, np.inf)
    order = np.argsort(keyed, axis=1, kind="stable")
    return order[:, :k] if n else np.zeros((0, k), dtype=np.int64)
