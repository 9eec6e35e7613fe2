"""
Inter-Route Exchange - swap one node of cycle 1 with one node of cycle 2
Delta: O(1), apply: O(N) node lookup + O(1) swap
"""

import logging
from typing import List, Optional

from core.data_structures import CycleId, Instance, Solution
from operators.moves import EvaluatedMove, InterRouteExchange

logger = logging.getLogger(__name__)


def _replacement_delta(cycle: List[int], pos: int, new: int, instance: Instance) -> int:
    """
    Cost change in one cycle when cycle[pos] is replaced by `new`.
    Single-node cycle: no edges, no change.
    Two-node cycle: both edges join the same pair, terms count twice.
    """
    n = len(cycle)
    if n == 1:
        return 0
    old = cycle[pos]
    prev = cycle[pos - 1]
    if n == 2:
        return 2 * instance.distance(prev, new) - 2 * instance.distance(prev, old)
    nxt = cycle[(pos + 1) % n]
    return ((instance.distance(prev, new) + instance.distance(new, nxt))
            - (instance.distance(prev, old) + instance.distance(old, nxt)))


def evaluate_inter_route_exchange(solution: Solution,
                                  instance: Instance,
                                  pos1: int,
                                  pos2: int) -> Optional[EvaluatedMove]:
    """
    Swap cycle1[pos1] with cycle2[pos2].
    Returns None for empty cycles or out-of-range positions.
    """
    cycle1 = solution.cycle1
    cycle2 = solution.cycle2
    n1 = len(cycle1)
    n2 = len(cycle2)

    if n1 == 0 or n2 == 0 or not 0 <= pos1 < n1 or not 0 <= pos2 < n2:
        return None

    u = cycle1[pos1]
    v = cycle2[pos2]

    if n1 == 1 and n2 == 1:
        delta = 0
    else:
        delta = (_replacement_delta(cycle1, pos1, v, instance)
                 + _replacement_delta(cycle2, pos2, u, instance))

    return EvaluatedMove(InterRouteExchange(v1=u, v2=v), delta)


def inter_route_exchange_inplace(solution: Solution, move: InterRouteExchange) -> bool:
    """
    Swap the two nodes by value. Both must sit in different cycles,
    otherwise the solution is left untouched and False is returned.
    """
    loc1 = solution.find_node(move.v1)
    loc2 = solution.find_node(move.v2)

    if loc1 is None or loc2 is None or loc1[0] is loc2[0]:
        logger.warning(
            "InterRouteExchange apply failed. Nodes %s or %s not found in expected cycles.",
            move.v1, move.v2,
        )
        return False

    (cycle_a, pos_a), (cycle_b, pos_b) = loc1, loc2
    solution.get_cycle(cycle_a)[pos_a] = move.v2
    solution.get_cycle(cycle_b)[pos_b] = move.v1
    return True


def locate_inter_route_positions(solution: Solution, node_a: int, node_b: int):
    """
    (pos in cycle 1, pos in cycle 2) for two nodes in different cycles, else None.
    Order of the arguments does not matter.
    """
    loc_a = solution.find_node(node_a)
    loc_b = solution.find_node(node_b)
    if loc_a is None or loc_b is None or loc_a[0] is loc_b[0]:
        return None
    if loc_a[0] is CycleId.CYCLE1:
        return loc_a[1], loc_b[1]
    return loc_b[1], loc_a[1]
