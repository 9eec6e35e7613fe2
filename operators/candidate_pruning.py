"""
Distance-based candidate pruning utilities
Enumerates (node, near neighbour) pairs from the instance's k-nearest-neighbour
lists so candidate search evaluates O(N*k) moves instead of O(N²)
"""

from typing import Dict, Iterator, Optional, Tuple

from core.data_structures import CycleId, Instance, Solution


def get_candidate_pairs(solution: Solution,
                        instance: Instance,
                        position_index: Optional[Dict[int, Tuple[CycleId, int]]] = None
                        ) -> Iterator[Tuple[CycleId, int, CycleId, int]]:
    """
    Yield (cycle_a, pos_a, cycle_b, pos_b) for every node a and each of its
    nearest neighbours b. Nodes missing from the solution are skipped.

    Raises NeighborListNotComputedError if the neighbour lists were never populated.
    """
    if position_index is None:
        position_index = solution.position_index()

    for node_a in range(instance.size()):
        neighbors = instance.nearest_neighbors(node_a)
        loc_a = position_index.get(node_a)
        if loc_a is None:
            continue
        cycle_a, pos_a = loc_a

        for node_b in neighbors:
            if node_b == node_a:
                continue
            loc_b = position_index.get(node_b)
            if loc_b is None:
                continue
            yield cycle_a, pos_a, loc_b[0], loc_b[1]
