"""
Instance (distance oracle) and two-cycle Solution
Distances are precomputed once; the instance is read-only after construction
apart from the one-time nearest-neighbour population step.
"""

from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from core.exceptions import (
    ConfigurationError,
    InvalidNeighborCountError,
    NeighborListNotComputedError,
)
from core.geometry import distance_matrix, nearest_neighbor_table
from operators.jit_kernels import as_node_array, cycle_cost_jit, tour_pair_cost_jit


class CycleId(Enum):
    CYCLE1 = 1
    CYCLE2 = 2

    @property
    def other(self) -> 'CycleId':
        return CycleId.CYCLE2 if self is CycleId.CYCLE1 else CycleId.CYCLE1


class Instance:
    """
    Immutable city set with an all-pairs integer distance matrix.
    Memory: O(N²) for the matrix, O(N*k) for the optional neighbour table.
    """
    __slots__ = ['name', 'dimension', 'coordinates', 'distances',
                 '_rows', '_neighbor_k', '_nearest_neighbors']

    def __init__(self, coordinates: Sequence[Tuple[float, float]], name: str = ""):
        coords = np.asarray(coordinates, dtype=np.float64)
        if coords.size == 0:
            coords = coords.reshape(0, 2)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise ConfigurationError(
                f"Coordinates must be shaped (n, 2), got {coords.shape}"
            )

        self.name: str = name
        self.dimension: int = coords.shape[0]
        self.coordinates: List[Tuple[float, float]] = [(float(x), float(y)) for x, y in coords]
        self.distances: np.ndarray = distance_matrix(coords)
        self.distances.setflags(write=False)
        # Plain lists for fast scalar access from Python loops
        self._rows: List[List[int]] = self.distances.tolist()
        self._neighbor_k: int = 0
        self._nearest_neighbors: Optional[List[List[int]]] = None

    def size(self) -> int:
        return self.dimension

    def distance(self, i: int, j: int) -> int:
        """Symmetric rounded Euclidean distance, 0 when i == j"""
        return self._rows[i][j]

    def precompute_nearest_neighbors(self, k: int) -> None:
        """
        Populate the k-nearest-neighbour list of every node.
        Re-populating with the same k is a no-op.
        """
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k <= 0 or k >= self.dimension:
            raise InvalidNeighborCountError(
                f"Invalid k value ({k}) for nearest neighbors. "
                f"Must be 0 < k < dimension ({self.dimension})."
            )
        k = int(k)
        if self._nearest_neighbors is not None and self._neighbor_k == k:
            return

        table = nearest_neighbor_table(self.distances, k)
        self._nearest_neighbors = table.tolist()
        self._neighbor_k = k

    @property
    def neighbor_k(self) -> int:
        return self._neighbor_k

    def has_nearest_neighbors(self) -> bool:
        return self._nearest_neighbors is not None

    def nearest_neighbors(self, node: int) -> List[int]:
        """k closest nodes to `node`, nearest first"""
        if self._nearest_neighbors is None:
            raise NeighborListNotComputedError(
                "Nearest neighbors requested but not precomputed. "
                "Call precompute_nearest_neighbors first."
            )
        if node < 0 or node >= self.dimension:
            raise ConfigurationError(
                f"Invalid node_id ({node}) requested for nearest neighbors."
            )
        return self._nearest_neighbors[node]

    def __repr__(self) -> str:
        return f"Instance(name={self.name!r}, dimension={self.dimension})"


class Solution:
    """
    Two disjoint closed tours. Cycle order defines the edges,
    including the wraparound last -> first.
    """
    __slots__ = ['cycle1', 'cycle2']

    def __init__(self, cycle1: Sequence[int], cycle2: Sequence[int]):
        self.cycle1: List[int] = list(cycle1)
        self.cycle2: List[int] = list(cycle2)

    def copy(self) -> 'Solution':
        return Solution(self.cycle1, self.cycle2)

    def get_cycle(self, cycle_id: CycleId) -> List[int]:
        return self.cycle1 if cycle_id is CycleId.CYCLE1 else self.cycle2

    def calculate_cost(self, instance: Instance) -> int:
        """Full O(N) recomputation of the summed tour length"""
        return int(tour_pair_cost_jit(as_node_array(self.cycle1),
                                      as_node_array(self.cycle2),
                                      instance.distances))

    @staticmethod
    def calculate_cycle_cost(cycle: Sequence[int], instance: Instance) -> int:
        if not cycle:
            return 0
        return int(cycle_cost_jit(as_node_array(cycle), instance.distances))

    def is_valid(self, instance: Instance) -> bool:
        """Every id in [0, n) appears in exactly one cycle exactly once"""
        n = instance.size()
        used = [False] * n
        count = 0
        for cycle in (self.cycle1, self.cycle2):
            for v in cycle:
                if v < 0 or v >= n or used[v]:
                    return False
                used[v] = True
                count += 1
        return count == n

    def find_node(self, node: int) -> Optional[Tuple[CycleId, int]]:
        """Locate node -> (cycle, position), None if absent - O(N)"""
        for cycle_id in (CycleId.CYCLE1, CycleId.CYCLE2):
            try:
                return cycle_id, self.get_cycle(cycle_id).index(node)
            except ValueError:
                continue
        return None

    def position_index(self) -> Dict[int, Tuple[CycleId, int]]:
        """node -> (cycle, position) for every node, built in one O(N) pass"""
        index = {}
        for cycle_id in (CycleId.CYCLE1, CycleId.CYCLE2):
            for pos, node in enumerate(self.get_cycle(cycle_id)):
                index[node] = (cycle_id, pos)
        return index

    def neighbors(self, node: int) -> Tuple[Optional[int], Optional[int]]:
        """(predecessor, successor) of node in its cycle"""
        location = self.find_node(node)
        if location is None:
            return None, None
        cycle_id, pos = location
        cycle = self.get_cycle(cycle_id)
        n = len(cycle)
        if n <= 1:
            return None, None
        return cycle[pos - 1], cycle[(pos + 1) % n]

    def has_edge(self, a: int, b: int) -> Optional[Tuple[CycleId, int]]:
        """
        Which cycle holds edge (a, b) and in which direction:
        1 when b follows a, -1 when a follows b.
        """
        for cycle_id in (CycleId.CYCLE1, CycleId.CYCLE2):
            direction = self.check_edge_in_cycle(self.get_cycle(cycle_id), a, b)
            if direction is not None:
                return cycle_id, direction
        return None

    @staticmethod
    def check_edge_in_cycle(cycle: Sequence[int], a: int, b: int) -> Optional[int]:
        n = len(cycle)
        if n < 2:
            return None
        try:
            pos_a = cycle.index(a)
        except ValueError:
            return None
        if cycle[(pos_a + 1) % n] == b:
            return 1
        if cycle[pos_a - 1] == b:
            return -1
        return None

    def __repr__(self) -> str:
        return f"Solution(cycle1={self.cycle1}, cycle2={self.cycle2})"
