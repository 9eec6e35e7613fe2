"""
Neighbourhood generation for the two-cycle local search.

Full scans (steepest / greedy), candidate-list scans, and node-local
regeneration for the move list. Every generator returns improving moves only.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

from core.config import NeighborhoodType
from core.data_structures import CycleId, Instance, Solution
from operators.candidate_pruning import get_candidate_pairs
from operators.inter_route_exchange import evaluate_inter_route_exchange
from operators.intra_route_2opt import (
    edge_exchange_move,
    evaluate_candidate_intra_route_edge_exchange,
    evaluate_intra_route_edge_exchange,
)
from operators.move_application import apply_move
from operators.moves import EvaluatedMove
from operators.or_opt import MAX_CHAIN_LENGTH, evaluate_intra_route_or_opt
from operators.swap import evaluate_intra_route_vertex_exchange
from operators.three_opt import MIN_CYCLE_LENGTH, evaluate_intra_route_3opt

CYCLES = (CycleId.CYCLE1, CycleId.CYCLE2)


def verify_delta(solution: Solution, instance: Instance,
                 evaluated: EvaluatedMove, cost_before: int) -> EvaluatedMove:
    """
    Replace the analytic delta with the measured one: apply to a scratch copy
    and diff full costs. O(N) per call.
    """
    scratch = solution.copy()
    apply_move(scratch, evaluated.move)
    return EvaluatedMove(evaluated.move, scratch.calculate_cost(instance) - cost_before)


def generate_inter_route_moves(solution: Solution, instance: Instance) -> List[EvaluatedMove]:
    moves = []
    n1 = len(solution.cycle1)
    n2 = len(solution.cycle2)
    for pos1 in range(n1):
        for pos2 in range(n2):
            m = evaluate_inter_route_exchange(solution, instance, pos1, pos2)
            if m is not None and m.delta < 0:
                moves.append(m)
    return moves


def _edge_exchange_variants(solution: Solution, instance: Instance, cycle_id: CycleId,
                            pos1: int, pos2: int, both_orientations: bool) -> List[EvaluatedMove]:
    m = evaluate_intra_route_edge_exchange(solution, instance, cycle_id, pos1, pos2)
    if m is None:
        return []
    variants = [m]
    if both_orientations:
        # (a, b) kept, (c, d) read backwards: applicable once one of the two
        # edges has been flipped by a later reversal
        mv = m.move
        variants.append(edge_exchange_move(instance, cycle_id, mv.a, mv.b, mv.d, mv.c))
    return [v for v in variants if v.delta < 0]


def generate_intra_route_moves(solution: Solution,
                               instance: Instance,
                               neighborhood: NeighborhoodType,
                               cycle_id: CycleId,
                               verify: bool = False,
                               both_orientations: bool = False) -> List[EvaluatedMove]:
    """All improving moves of one intra-route family inside one cycle"""
    cycle = solution.get_cycle(cycle_id)
    n = len(cycle)
    moves: List[EvaluatedMove] = []

    if neighborhood is NeighborhoodType.VERTEX_EXCHANGE:
        for pos1 in range(n):
            for pos2 in range(pos1 + 1, n):
                m = evaluate_intra_route_vertex_exchange(solution, instance, cycle_id, pos1, pos2)
                if m is not None and m.delta < 0:
                    moves.append(m)

    elif neighborhood is NeighborhoodType.EDGE_EXCHANGE:
        for pos1 in range(n):
            for pos2 in range(pos1 + 2, n):
                moves.extend(_edge_exchange_variants(solution, instance, cycle_id,
                                                     pos1, pos2, both_orientations))

    elif neighborhood is NeighborhoodType.THREE_OPT:
        if n < MIN_CYCLE_LENGTH:
            return moves
        cost_before = solution.calculate_cost(instance) if verify else 0
        for pos1 in range(n - 4):
            for pos2 in range(pos1 + 2, n - 2):
                for pos3 in range(pos2 + 2, n):
                    m = evaluate_intra_route_3opt(solution, instance, cycle_id, pos1, pos2, pos3)
                    if m is None:
                        continue
                    if verify:
                        m = verify_delta(solution, instance, m, cost_before)
                    if m.delta < 0:
                        moves.append(m)

    elif neighborhood is NeighborhoodType.OR_OPT:
        if n < 4:
            return moves
        cost_before = solution.calculate_cost(instance) if verify else 0
        for chain_length in range(1, min(MAX_CHAIN_LENGTH, n - 1) + 1):
            for from_pos in range(n):
                for to_pos in range(n):
                    m = evaluate_intra_route_or_opt(solution, instance, cycle_id,
                                                    from_pos, chain_length, to_pos)
                    if m is None:
                        continue
                    if verify:
                        m = verify_delta(solution, instance, m, cost_before)
                    if m.delta < 0:
                        moves.append(m)

    else:
        raise TypeError(f"Unknown neighborhood: {neighborhood!r}")

    return moves


def generate_all_improving_moves(solution: Solution,
                                 instance: Instance,
                                 neighborhood: NeighborhoodType,
                                 verify: bool = False,
                                 both_orientations: bool = False) -> List[EvaluatedMove]:
    """Full neighbourhood: inter-route exchange plus the intra-route family on both cycles"""
    moves = generate_inter_route_moves(solution, instance)
    for cycle_id in CYCLES:
        moves.extend(generate_intra_route_moves(solution, instance, neighborhood, cycle_id,
                                                verify=verify,
                                                both_orientations=both_orientations))
    return moves


def _around(cycle: List[int], pos: int) -> Tuple[int, ...]:
    """Positions of a node's predecessor, the node itself and its successor"""
    n = len(cycle)
    if n <= 1:
        return (pos,)
    return ((pos - 1) % n, pos, (pos + 1) % n)


def generate_candidate_moves(solution: Solution,
                             instance: Instance,
                             neighborhood: NeighborhoodType) -> List[EvaluatedMove]:
    """
    Moves that bring a node next to one of its nearest neighbours.
    3-opt and or-opt have no candidate form; only the inter-route
    exchange is searched for them.
    """
    moves: List[EvaluatedMove] = []
    index = solution.position_index()

    for cycle_a, pos_a, cycle_b, pos_b in get_candidate_pairs(solution, instance, index):
        if cycle_a is not cycle_b:
            other = solution.get_cycle(cycle_b)
            for pos in _around(other, pos_b):
                if cycle_a is CycleId.CYCLE1:
                    m = evaluate_inter_route_exchange(solution, instance, pos_a, pos)
                else:
                    m = evaluate_inter_route_exchange(solution, instance, pos, pos_a)
                if m is not None and m.delta < 0:
                    moves.append(m)
            continue

        cycle = solution.get_cycle(cycle_a)
        if neighborhood is NeighborhoodType.EDGE_EXCHANGE:
            n = len(cycle)
            # new edge (a, b) with successors, then with predecessors
            for shift_a, shift_b in ((0, 0), (-1, -1)):
                m = evaluate_candidate_intra_route_edge_exchange(
                    solution, instance, cycle_a, (pos_a + shift_a) % n, (pos_b + shift_b) % n)
                if m is not None and m.delta < 0:
                    moves.append(m)
        elif neighborhood is NeighborhoodType.VERTEX_EXCHANGE:
            for pos in _around(cycle, pos_b):
                if pos == pos_a:
                    continue
                m = evaluate_intra_route_vertex_exchange(solution, instance, cycle_a, pos_a, pos)
                if m is not None and m.delta < 0:
                    moves.append(m)

    return moves


def generate_moves_around_nodes(solution: Solution,
                                instance: Instance,
                                neighborhood: NeighborhoodType,
                                nodes: Iterable[int],
                                index: Optional[Dict[int, Tuple[CycleId, int]]] = None
                                ) -> List[EvaluatedMove]:
    """
    Improving node-based moves that involve at least one of `nodes`.
    Positional families (3-opt, or-opt) are not generated here.
    """
    if index is None:
        index = solution.position_index()

    new_moves: List[EvaluatedMove] = []
    considered_inter: Set[Tuple[int, int]] = set()
    considered_vertex: Set[Tuple[int, int]] = set()
    considered_edges: Set[Tuple[CycleId, int, int]] = set()

    for node_a in nodes:
        loc = index.get(node_a)
        if loc is None:
            continue
        cycle_a, pos_a = loc

        other = solution.get_cycle(cycle_a.other)
        for pos_b, node_b in enumerate(other):
            pair = (min(node_a, node_b), max(node_a, node_b))
            if pair in considered_inter:
                continue
            considered_inter.add(pair)
            if cycle_a is CycleId.CYCLE1:
                m = evaluate_inter_route_exchange(solution, instance, pos_a, pos_b)
            else:
                m = evaluate_inter_route_exchange(solution, instance, pos_b, pos_a)
            if m is not None and m.delta < 0:
                new_moves.append(m)

        same = solution.get_cycle(cycle_a)
        n = len(same)

        if neighborhood is NeighborhoodType.VERTEX_EXCHANGE:
            for pos_b, node_b in enumerate(same):
                if node_b == node_a:
                    continue
                pair = (min(node_a, node_b), max(node_a, node_b))
                if pair in considered_vertex:
                    continue
                considered_vertex.add(pair)
                m = evaluate_intra_route_vertex_exchange(solution, instance, cycle_a, pos_a, pos_b)
                if m is not None and m.delta < 0:
                    new_moves.append(m)

        elif neighborhood is NeighborhoodType.EDGE_EXCHANGE and n >= 4:
            # both edges incident to node_a, against every other edge of the cycle
            for start in ((pos_a - 1) % n, pos_a):
                for other_start in range(n):
                    key = (cycle_a, min(start, other_start), max(start, other_start))
                    if key in considered_edges:
                        continue
                    considered_edges.add(key)
                    new_moves.extend(_edge_exchange_variants(solution, instance, cycle_a,
                                                             key[1], key[2], True))

    return new_moves
