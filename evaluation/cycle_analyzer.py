"""
Tour-pair inspection: per-cycle cost breakdown and neighbourhood audits
Audits rescan the full neighbourhood, O(N²) (O(N³) for 3-opt)
"""

from typing import Dict, List, Optional

from core.config import NeighborhoodType
from core.data_structures import CycleId, Instance, Solution
from operators.moves import EvaluatedMove
from algorithms.neighborhoods import generate_all_improving_moves


def cycle_cost_breakdown(solution: Solution, instance: Instance) -> Dict[str, int]:
    """
    Cost of each cycle, their sum and the node counts
    """
    cost1 = Solution.calculate_cycle_cost(solution.cycle1, instance)
    cost2 = Solution.calculate_cycle_cost(solution.cycle2, instance)
    return {
        'cycle1_cost': cost1,
        'cycle2_cost': cost2,
        'total_cost': cost1 + cost2,
        'cycle1_size': len(solution.cycle1),
        'cycle2_size': len(solution.cycle2),
    }


def longest_edges(solution: Solution, instance: Instance, top_n: int = 5) -> List[tuple]:
    """
    The top_n longest tour edges as (length, cycle, a, b), longest first
    """
    edges = []
    for cycle_id in (CycleId.CYCLE1, CycleId.CYCLE2):
        cycle = solution.get_cycle(cycle_id)
        n = len(cycle)
        if n < 2:
            continue
        for i in range(n):
            a = cycle[i]
            b = cycle[(i + 1) % n]
            edges.append((instance.distance(a, b), cycle_id, a, b))

    edges.sort(key=lambda e: e[0], reverse=True)
    return edges[:top_n]


def find_improving_moves(solution: Solution,
                         instance: Instance,
                         neighborhood: NeighborhoodType) -> List[EvaluatedMove]:
    """All improving moves of the full neighbourhood, best first"""
    moves = generate_all_improving_moves(solution, instance, neighborhood)
    moves.sort(key=lambda m: m.delta)
    return moves


def best_improving_move(solution: Solution,
                        instance: Instance,
                        neighborhood: NeighborhoodType) -> Optional[EvaluatedMove]:
    moves = find_improving_moves(solution, instance, neighborhood)
    return moves[0] if moves else None


def is_local_optimum(solution: Solution,
                     instance: Instance,
                     neighborhood: NeighborhoodType) -> bool:
    """
    True when neither the inter-route exchange nor the intra-route family
    has a move with negative delta
    """
    return best_improving_move(solution, instance, neighborhood) is None
