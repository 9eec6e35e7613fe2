"""
Or-Opt - relocate a chain of 1-3 consecutive nodes inside the same cycle.

The chain is cycle[from_pos:from_pos + chain_length] (never wraps) and is
reinserted in front of the node currently at to_pos, keeping its order.
"""

import logging
from typing import Optional

from core.data_structures import CycleId, Instance, Solution
from operators.moves import EvaluatedMove, IntraOrOpt

logger = logging.getLogger(__name__)

MIN_CYCLE_LENGTH = 4
MAX_CHAIN_LENGTH = 3


def evaluate_intra_route_or_opt(solution: Solution,
                                instance: Instance,
                                cycle_id: CycleId,
                                from_pos: int,
                                chain_length: int,
                                to_pos: int,
                                improving_only: bool = False) -> Optional[EvaluatedMove]:
    """
    Delta = (p-n + ip-s1 + sk-in) - (p-s1 + sk-n + ip-in), where p/n surround
    the chain s1..sk and ip/in surround the insertion point.

    Returns None when the insertion reproduces the chain's current location
    or overlaps its span. With improving_only, non-negative deltas also
    return None.
    """
    cycle = solution.get_cycle(cycle_id)
    n = len(cycle)

    if n < MIN_CYCLE_LENGTH or not 1 <= chain_length <= MAX_CHAIN_LENGTH:
        return None
    if from_pos < 0 or from_pos + chain_length > n or not 0 <= to_pos < n:
        return None

    end = from_pos + chain_length
    if end == n:
        # chain holds the last node, so cycle[0] is its successor
        if to_pos >= from_pos or to_pos == 0:
            return None
    elif from_pos <= to_pos <= end:
        return None

    p_idx = from_pos - 1 if from_pos > 0 else n - 1
    n_idx = end % n
    ip_idx = to_pos - 1 if to_pos > 0 else n - 1
    in_idx = to_pos
    if p_idx == ip_idx and n_idx == in_idx:
        return None

    p_node = cycle[p_idx]
    s1_node = cycle[from_pos]
    sk_node = cycle[end - 1]
    n_node = cycle[n_idx]
    ip_node = cycle[ip_idx]
    in_node = cycle[in_idx]
    dist = instance.distance

    cost_removed = dist(p_node, s1_node) + dist(sk_node, n_node) + dist(ip_node, in_node)
    cost_added = dist(p_node, n_node) + dist(ip_node, s1_node) + dist(sk_node, in_node)
    delta = cost_added - cost_removed

    if improving_only and delta >= 0:
        return None

    move = IntraOrOpt(from_pos=from_pos, chain_length=chain_length, to_pos=to_pos,
                      cycle=cycle_id,
                      nodes=(p_node, s1_node, sk_node, n_node, ip_node, in_node))
    return EvaluatedMove(move, delta)


def or_opt_inplace(solution: Solution, move: IntraOrOpt) -> bool:
    """
    Remove the chain, shift the insertion index past the removed span,
    reinsert preserving chain order.
    """
    cycle = solution.get_cycle(move.cycle)
    n = len(cycle)
    start = move.from_pos
    end = start + move.chain_length

    if start < 0 or end > n or not 0 <= move.to_pos < n:
        logger.warning(
            "IntraOrOpt apply failed. Chain %s+%s or target %s out of range for cycle %s.",
            move.from_pos, move.chain_length, move.to_pos, move.cycle.name,
        )
        return False

    chain = cycle[start:end]
    del cycle[start:end]

    insert_at = move.to_pos - move.chain_length if move.to_pos > start else move.to_pos
    cycle[insert_at:insert_at] = chain
    return True
