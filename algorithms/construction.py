"""
Initial tour pairs for the local search.

1. Random partition: shuffle all nodes, first half -> cycle 1, rest -> cycle 2
2. Weighted 2-regret cycle construction:
   score = regret_weight * (2nd best - best insertion cost) + greedy_weight * best insertion cost
   Cycles grow alternately, each taking the available node with the highest score.
"""

import random
from typing import Callable, List, Optional, Tuple

from core.data_structures import Instance, Solution

ProgressCallback = Callable[[str], None]


def _noop(_: str) -> None:
    pass


def generate_random_solution(instance: Instance, rng: Optional[random.Random] = None) -> Solution:
    """Uniform random split; cycle 1 gets floor(n/2) nodes"""
    if rng is None:
        rng = random.Random()
    vertices = list(range(instance.size()))
    rng.shuffle(vertices)
    half = len(vertices) // 2
    return Solution(vertices[:half], vertices[half:])


def calculate_insertion_cost(vertex: int, pos: int, cycle: List[int], instance: Instance) -> int:
    """
    Extra length from inserting vertex in front of cycle[pos % len].
    One-node cycle: the new cycle has the same edge twice.
    """
    if not cycle:
        return 0
    if len(cycle) == 1:
        return instance.distance(cycle[0], vertex) * 2

    prev = cycle[pos - 1] if pos > 0 else cycle[-1]
    nxt = cycle[pos % len(cycle)]
    return (instance.distance(prev, vertex) + instance.distance(vertex, nxt)
            - instance.distance(prev, nxt))


def weighted_regret_score(vertex: int,
                          cycle: List[int],
                          instance: Instance,
                          regret_weight: float = 1.0,
                          greedy_weight: float = -1.0,
                          k_regret: int = 2) -> Tuple[float, int]:
    """(score, best insertion position) for one candidate vertex"""
    if not cycle:
        return 0.0, 0

    costs = sorted(
        ((pos, calculate_insertion_cost(vertex, pos, cycle, instance))
         for pos in range(len(cycle) + 1)),
        key=lambda item: item[1],
    )
    best_cost = costs[0][1]
    k_best_cost = costs[k_regret - 1][1] if len(costs) >= k_regret else best_cost
    regret = k_best_cost - best_cost

    return regret_weight * regret + greedy_weight * best_cost, costs[0][0]


def _select_best_vertex(cycle: List[int], available: List[int], instance: Instance,
                        regret_weight: float, greedy_weight: float,
                        k_regret: int) -> Optional[Tuple[int, int]]:
    best = None
    best_score = -float('inf')
    for vertex in available:
        score, pos = weighted_regret_score(vertex, cycle, instance,
                                           regret_weight, greedy_weight, k_regret)
        if best is None or score > best_score:
            best_score = score
            best = (vertex, pos)
    return best


def _nearest(source: int, available: List[int], instance: Instance) -> int:
    return min(available, key=lambda v: instance.distance(source, v))


def weighted_regret_construction(instance: Instance,
                                 regret_weight: float = 1.0,
                                 greedy_weight: float = -1.0,
                                 k_regret: int = 2,
                                 rng: Optional[random.Random] = None,
                                 progress_callback: Optional[ProgressCallback] = None) -> Solution:
    """
    Weighted 2-regret construction of two cycles.

    Algorithm:
    1. Random first start node, second start = node farthest from it
    2. Each cycle takes the nearest available node to its start
    3. Alternate cycles; each inserts the best-scoring available node
       at that node's cheapest position
    """
    callback = progress_callback or _noop
    if rng is None:
        rng = random.Random()

    n = instance.size()
    callback(f"[Init] Size: {n}")

    if n == 0:
        return Solution([], [])
    if n == 1:
        return Solution([0], [])

    start1 = rng.randrange(n)
    start2 = max((j for j in range(n) if j != start1),
                 key=lambda j: instance.distance(start1, j))

    cycle1 = [start1]
    cycle2 = [start2]
    available = [v for v in range(n) if v != start1 and v != start2]
    callback(f"[Init] Start nodes: {start1}, {start2}")

    if available:
        nearest1 = _nearest(start1, available, instance)
        cycle1.append(nearest1)
        available.remove(nearest1)
        callback(f"[Init Cycle 1] Added {nearest1}")

        if available:
            nearest2 = _nearest(start2, available, instance)
            cycle2.append(nearest2)
            available.remove(nearest2)
            callback(f"[Init Cycle 2] Added {nearest2}")

    total = max(len(available), 1)
    done = 0
    cycles = (cycle1, cycle2)
    turn = 0

    while available:
        done += 1
        cycle = cycles[turn]
        callback(f"[{done * 100 // total}% C{turn + 1}] Avail: {len(available)}")

        choice = _select_best_vertex(cycle, available, instance,
                                     regret_weight, greedy_weight, k_regret)
        if choice is not None:
            vertex, pos = choice
            cycle.insert(pos, vertex)
            available.remove(vertex)
        turn = 1 - turn

    callback("[Finished]")
    return Solution(cycle1, cycle2)
