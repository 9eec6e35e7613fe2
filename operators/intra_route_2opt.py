"""
Intra-route 2-opt operator (edge exchange).

Removes edges (a, b) and (c, d) from one cycle and adds (a, c) and (b, d)
by reversing the path between the two inner endpoints b and c.
Both the exhaustive form (two edge start positions) and the candidate form
(two node positions, the second node becoming a's new neighbour) emit the
same IntraEdgeExchange layout, so a single apply path serves both.
"""

import logging
from typing import List, Optional

from core.data_structures import CycleId, Instance, Solution
from operators.moves import EvaluatedMove, IntraEdgeExchange

logger = logging.getLogger(__name__)


def edge_exchange_move(instance: Instance, cycle_id: CycleId,
                       a: int, b: int, c: int, d: int) -> EvaluatedMove:
    """Evaluated move removing (a, b), (c, d) and adding (a, c), (b, d)"""
    cost_removed = instance.distance(a, b) + instance.distance(c, d)
    cost_added = instance.distance(a, c) + instance.distance(b, d)
    return EvaluatedMove(IntraEdgeExchange(a=a, b=b, c=c, d=d, cycle=cycle_id),
                         cost_added - cost_removed)


def evaluate_intra_route_edge_exchange(solution: Solution,
                                       instance: Instance,
                                       cycle_id: CycleId,
                                       pos1: int,
                                       pos2: int) -> Optional[EvaluatedMove]:
    """
    2-opt on the edges starting at pos1 and pos2:
    a = cycle[pos1], b = cycle[pos1+1], c = cycle[pos2], d = cycle[pos2+1].
    Equal, adjacent or wrap-adjacent positions return None.
    """
    cycle = solution.get_cycle(cycle_id)
    n = len(cycle)

    if (n < 3
            or not 0 <= pos1 < n
            or not 0 <= pos2 < n
            or pos1 == pos2
            or (pos1 + 1) % n == pos2
            or (pos2 + 1) % n == pos1):
        return None

    return edge_exchange_move(instance, cycle_id,
                              cycle[pos1], cycle[(pos1 + 1) % n],
                              cycle[pos2], cycle[(pos2 + 1) % n])


def evaluate_candidate_intra_route_edge_exchange(solution: Solution,
                                                 instance: Instance,
                                                 cycle_id: CycleId,
                                                 pos_a: int,
                                                 pos_b: int) -> Optional[EvaluatedMove]:
    """
    Candidate 2-opt: introduce edge (a, b) between cycle[pos_a] and cycle[pos_b]
    by removing (a, a_next) and (b, b_next) and adding (a, b), (a_next, b_next).
    """
    cycle = solution.get_cycle(cycle_id)
    n = len(cycle)

    if n < 3 or not 0 <= pos_a < n or not 0 <= pos_b < n or pos_a == pos_b:
        return None

    pos_a_next = (pos_a + 1) % n
    pos_b_next = (pos_b + 1) % n
    if pos_a_next == pos_b or pos_b_next == pos_a:
        return None

    # Same field layout as the exhaustive form: removed (a, a_next) and (b, b_next)
    return edge_exchange_move(instance, cycle_id,
                              cycle[pos_a], cycle[pos_a_next],
                              cycle[pos_b], cycle[pos_b_next])


def _reverse_circular(cycle: List[int], start: int, end: int) -> None:
    """Reverse cycle[start..end] inclusive, wrapping past the last index if start > end"""
    n = len(cycle)
    if start <= end:
        cycle[start:end + 1] = cycle[start:end + 1][::-1]
        return

    window = cycle[start:] + cycle[:end + 1]
    window.reverse()
    tail = n - start
    cycle[start:] = window[:tail]
    cycle[:end + 1] = window[tail:]


def edge_exchange_inplace(solution: Solution, move: IntraEdgeExchange) -> bool:
    """
    Reverse the path joining b and c whose outer neighbours are a and d.

    The window starts at b when a (or d, on a reversed traversal) precedes b,
    and at c otherwise. Applying the same move twice restores the array.
    """
    cycle = solution.get_cycle(move.cycle)
    n = len(cycle)
    try:
        pos_b = cycle.index(move.b)
        pos_c = cycle.index(move.c)
    except ValueError:
        logger.warning(
            "IntraEdgeExchange apply failed. Nodes %s or %s not in cycle %s.",
            move.b, move.c, move.cycle.name,
        )
        return False

    if n < 2:
        return True

    if cycle[pos_b - 1] in (move.a, move.d):
        _reverse_circular(cycle, pos_b, pos_c)
    else:
        _reverse_circular(cycle, pos_c, pos_b)
    return True
