"""
Intra-Route Swap Operator - exchange two nodes inside one cycle
Memory: O(1) - swap indices in place
"""

import logging
from typing import Optional

from core.data_structures import CycleId, Instance, Solution
from operators.moves import EvaluatedMove, IntraVertexExchange

logger = logging.getLogger(__name__)


def evaluate_intra_route_vertex_exchange(solution: Solution,
                                         instance: Instance,
                                         cycle_id: CycleId,
                                         pos1: int,
                                         pos2: int) -> Optional[EvaluatedMove]:
    """
    Cost change of swapping cycle[pos1] and cycle[pos2].

    Two-node cycle: swap is a no-op on the cycle, delta 0.
    Adjacent positions (wrap-aware): three edges change.
    Otherwise: four edges change.
    """
    cycle = solution.get_cycle(cycle_id)
    n = len(cycle)

    if n < 2 or pos1 == pos2 or not 0 <= pos1 < n or not 0 <= pos2 < n:
        return None

    pos1, pos2 = min(pos1, pos2), max(pos1, pos2)
    v1 = cycle[pos1]
    v2 = cycle[pos2]
    dist = instance.distance

    if n == 2:
        delta = 0
    elif pos2 == pos1 + 1 or (pos1 == 0 and pos2 == n - 1):
        # ..., prev, x, y, next, ...  ->  ..., prev, y, x, next, ...
        if pos2 == pos1 + 1:
            x, y = v1, v2
            prev = cycle[pos1 - 1]
            nxt = cycle[(pos2 + 1) % n]
        else:
            # wrap: cycle[n-1] precedes cycle[0]
            x, y = v2, v1
            prev = cycle[n - 2]
            nxt = cycle[1]
        delta = ((dist(prev, y) + dist(y, x) + dist(x, nxt))
                 - (dist(prev, x) + dist(x, y) + dist(y, nxt)))
    else:
        prev1 = cycle[pos1 - 1]
        next1 = cycle[(pos1 + 1) % n]
        prev2 = cycle[pos2 - 1]
        next2 = cycle[(pos2 + 1) % n]
        delta = ((dist(prev1, v2) + dist(v2, next1) + dist(prev2, v1) + dist(v1, next2))
                 - (dist(prev1, v1) + dist(v1, next1) + dist(prev2, v2) + dist(v2, next2)))

    return EvaluatedMove(IntraVertexExchange(v1=v1, v2=v2, cycle=cycle_id), delta)


def vertex_exchange_inplace(solution: Solution, move: IntraVertexExchange) -> bool:
    """Swap the two nodes by position inside the named cycle"""
    cycle = solution.get_cycle(move.cycle)
    try:
        pos1 = cycle.index(move.v1)
        pos2 = cycle.index(move.v2)
    except ValueError:
        logger.warning(
            "IntraVertexExchange apply failed. Nodes %s or %s not in cycle %s.",
            move.v1, move.v2, move.cycle.name,
        )
        return False

    cycle[pos1], cycle[pos2] = cycle[pos2], cycle[pos1]
    return True
