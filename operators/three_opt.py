"""
Intra-route 3-opt operator.

Break points pos1 < pos2 < pos3 remove (a, b), (c, d), (e, f) where
a = cycle[pos1], b = cycle[pos1+1], c = cycle[pos2], d = cycle[pos2+1],
e = cycle[pos3], f = cycle[(pos3+1) % n]. The two inner segments are
S1 = b..c and S2 = d..e. Reconnection cases (all three edges replaced):

    1: a-c, b-e, d-f   a  rev(S1)  rev(S2)  f
    2: a-e, d-b, c-f   a  rev(S2)  S1       f
    3: a-d, e-b, c-f   a  S2       S1       f
    4: a-d, e-c, b-f   a  S2       rev(S1)  f
"""

import logging
from typing import List, Optional

from core.data_structures import CycleId, Instance, Solution
from operators.moves import EvaluatedMove, Intra3Opt

MIN_CYCLE_LENGTH = 6

logger = logging.getLogger(__name__)


def evaluate_intra_route_3opt(solution: Solution,
                              instance: Instance,
                              cycle_id: CycleId,
                              pos1: int,
                              pos2: int,
                              pos3: int) -> Optional[EvaluatedMove]:
    """
    Best improving reconnection of the three removed edges, or None.
    Ties keep the lower case number.
    """
    cycle = solution.get_cycle(cycle_id)
    n = len(cycle)

    if n < MIN_CYCLE_LENGTH:
        return None
    if not 0 <= pos1 < pos2 < pos3 < n:
        return None

    a = cycle[pos1]
    b = cycle[pos1 + 1]
    c = cycle[pos2]
    d = cycle[pos2 + 1]
    e = cycle[pos3]
    f = cycle[(pos3 + 1) % n]
    dist = instance.distance

    current_cost = dist(a, b) + dist(c, d) + dist(e, f)
    reconnections = (
        dist(a, c) + dist(b, e) + dist(d, f),
        dist(a, e) + dist(d, b) + dist(c, f),
        dist(a, d) + dist(e, b) + dist(c, f),
        dist(a, d) + dist(e, c) + dist(b, f),
    )

    best_delta = 0
    best_case = 0
    for case, cost in enumerate(reconnections, start=1):
        delta = cost - current_cost
        if delta < best_delta:
            best_delta = delta
            best_case = case

    if best_case == 0:
        return None

    move = Intra3Opt(pos1=pos1, pos2=pos2, pos3=pos3, cycle=cycle_id,
                     case=best_case, nodes=(a, b, c, d, e, f))
    return EvaluatedMove(move, best_delta)


def reconnect_3opt(cycle: List[int], pos1: int, pos2: int, pos3: int, case: int) -> List[int]:
    """New node order for a reconnection case - O(N)"""
    head = cycle[:pos1 + 1]
    seg1 = cycle[pos1 + 1:pos2 + 1]
    seg2 = cycle[pos2 + 1:pos3 + 1]
    tail = cycle[pos3 + 1:]

    if case == 1:
        middle = seg1[::-1] + seg2[::-1]
    elif case == 2:
        middle = seg2[::-1] + seg1
    elif case == 3:
        middle = seg2 + seg1
    elif case == 4:
        middle = seg2 + seg1[::-1]
    else:
        raise ValueError(f"Invalid 3-opt case: {case}")

    return head + middle + tail


def three_opt_inplace(solution: Solution, move: Intra3Opt) -> bool:
    """Rebuild the cycle from its three segments per the stored case"""
    cycle = solution.get_cycle(move.cycle)
    if not 0 <= move.pos1 < move.pos2 < move.pos3 < len(cycle):
        logger.warning("Intra3Opt apply failed. Positions %s, %s, %s out of range for cycle %s.",
                       move.pos1, move.pos2, move.pos3, move.cycle.name)
        return False
    cycle[:] = reconnect_3opt(cycle, move.pos1, move.pos2, move.pos3, move.case)
    return True
