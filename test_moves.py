"""
Move evaluators and their in-place applies.
Each evaluated delta must equal the cost change measured after applying.
"""

import pytest

from core.data_structures import CycleId, Instance, Solution
from operators.inter_route_exchange import (
    evaluate_inter_route_exchange,
    inter_route_exchange_inplace,
    locate_inter_route_positions,
)
from operators.intra_route_2opt import (
    evaluate_candidate_intra_route_edge_exchange,
    evaluate_intra_route_edge_exchange,
)
from operators.move_application import apply_move, edge_orientation, is_move_valid
from operators.moves import (
    InterRouteExchange,
    Intra3Opt,
    IntraEdgeExchange,
    IntraOrOpt,
    IntraVertexExchange,
    move_cycle,
    move_nodes,
)
from operators.or_opt import evaluate_intra_route_or_opt
from operators.swap import evaluate_intra_route_vertex_exchange
from operators.three_opt import evaluate_intra_route_3opt, reconnect_3opt

C1 = CycleId.CYCLE1
C2 = CycleId.CYCLE2


def assert_exact(solution, instance, evaluated):
    """Apply to a copy; delta, validity and returned flag must all hold"""
    before = solution.calculate_cost(instance)
    trial = solution.copy()
    assert apply_move(trial, evaluated.move)
    assert trial.is_valid(instance)
    assert trial.calculate_cost(instance) - before == evaluated.delta
    return trial


# ----------------------------------------------------------------------
# inter-route exchange
# ----------------------------------------------------------------------

@pytest.mark.parametrize("n1, n2", [(1, 1), (1, 2), (2, 2), (1, 4), (2, 3), (3, 3), (4, 6), (7, 5)])
def test_inter_route_exchange_delta(instance_factory, n1, n2):
    instance = instance_factory(n1 + n2, seed=n1 * 10 + n2)
    solution = Solution(list(range(n1)), list(range(n1, n1 + n2)))

    for pos1 in range(n1):
        for pos2 in range(n2):
            m = evaluate_inter_route_exchange(solution, instance, pos1, pos2)
            assert m is not None
            assert_exact(solution, instance, m)


def test_inter_route_exchange_singletons_zero(instance_factory):
    instance = instance_factory(2, seed=3)
    m = evaluate_inter_route_exchange(Solution([0], [1]), instance, 0, 0)
    assert m.delta == 0


def test_inter_route_exchange_rejects_bad_positions(instance_20, solution_20):
    assert evaluate_inter_route_exchange(solution_20, instance_20, 10, 0) is None
    assert evaluate_inter_route_exchange(solution_20, instance_20, 0, -1) is None
    assert evaluate_inter_route_exchange(Solution([], list(range(20))), instance_20, 0, 0) is None


def test_inter_route_exchange_wrong_cycles_is_noop():
    solution = Solution([0, 1, 2], [3, 4])
    assert not inter_route_exchange_inplace(solution, InterRouteExchange(v1=0, v2=2))
    assert not inter_route_exchange_inplace(solution, InterRouteExchange(v1=0, v2=9))
    assert solution.cycle1 == [0, 1, 2]
    assert solution.cycle2 == [3, 4]


def test_locate_inter_route_positions():
    solution = Solution([0, 1, 2], [3, 4])
    assert locate_inter_route_positions(solution, 1, 4) == (1, 1)
    assert locate_inter_route_positions(solution, 4, 1) == (1, 1)
    assert locate_inter_route_positions(solution, 0, 2) is None


# ----------------------------------------------------------------------
# intra-route vertex exchange
# ----------------------------------------------------------------------

@pytest.mark.parametrize("n", [2, 3, 4, 6, 9])
def test_vertex_exchange_delta(instance_factory, n):
    instance = instance_factory(n + 1, seed=n)
    solution = Solution(list(range(n)), [n])

    for pos1 in range(n):
        for pos2 in range(n):
            m = evaluate_intra_route_vertex_exchange(solution, instance, C1, pos1, pos2)
            if pos1 == pos2:
                assert m is None
                continue
            assert m is not None
            assert_exact(solution, instance, m)


def test_vertex_exchange_two_node_cycle_zero(instance_factory):
    instance = instance_factory(3, seed=5)
    m = evaluate_intra_route_vertex_exchange(Solution([0, 1], [2]), instance, C1, 0, 1)
    assert m.delta == 0


def test_vertex_exchange_wrap_adjacent():
    # positions 0 and n-1 share an edge through the wraparound
    instance = Instance([(0, 0), (10, 0), (20, 0), (20, 10), (0, 10), (50, 50)])
    solution = Solution([4, 1, 2, 3, 0], [5])
    m = evaluate_intra_route_vertex_exchange(solution, instance, C1, 0, 4)
    after = assert_exact(solution, instance, m)
    assert after.cycle1 == [0, 1, 2, 3, 4]
    assert m.delta < 0


# ----------------------------------------------------------------------
# intra-route edge exchange
# ----------------------------------------------------------------------

def test_edge_exchange_uncrosses_square(crossing_instance):
    """Scenario: crossing diagonals (1,2) and (3,0) of a 10x10 square"""
    solution = Solution([0, 1, 2, 3], [4, 5])
    assert solution.calculate_cost(crossing_instance) == 48 + 20

    m = evaluate_intra_route_edge_exchange(solution, crossing_instance, C1, 1, 3)
    assert m.move == IntraEdgeExchange(a=1, b=2, c=3, d=0, cycle=C1)
    assert m.delta == (10 + 10) - (14 + 14)

    after = assert_exact(solution, crossing_instance, m)
    assert after.cycle1 == [0, 1, 3, 2]
    assert after.calculate_cost(crossing_instance) == 40 + 20


@pytest.mark.parametrize("n", [3, 4, 5, 6, 10])
def test_edge_exchange_delta(instance_factory, n):
    instance = instance_factory(n + 2, seed=100 + n)
    solution = Solution(list(range(n)), [n, n + 1])

    for pos1 in range(n):
        for pos2 in range(n):
            m = evaluate_intra_route_edge_exchange(solution, instance, C1, pos1, pos2)
            adjacent = (pos1 == pos2 or (pos1 + 1) % n == pos2 or (pos2 + 1) % n == pos1)
            if adjacent:
                assert m is None
            else:
                assert_exact(solution, instance, m)


def test_edge_exchange_round_trip_restores_arrays(instance_factory):
    instance = instance_factory(9, seed=4)
    solution = Solution([0, 1, 2, 3, 4, 5], [6, 7, 8])

    for pos1, pos2 in [(0, 2), (1, 4), (4, 1), (5, 2), (0, 4)]:
        m = evaluate_intra_route_edge_exchange(solution, instance, C1, pos1, pos2)
        trial = solution.copy()
        assert apply_move(trial, m.move)
        assert trial.cycle1 != solution.cycle1
        assert apply_move(trial, m.move)
        assert trial.cycle1 == solution.cycle1
        assert trial.cycle2 == solution.cycle2


def test_edge_exchange_on_reversed_orientation(instance_factory):
    instance = instance_factory(8, seed=21)
    solution = Solution([0, 1, 2, 3, 4, 5, 6, 7], [])
    m = evaluate_intra_route_edge_exchange(solution, instance, C1, 1, 5)

    reversed_solution = Solution(list(reversed(solution.cycle1)), [])
    assert edge_orientation(reversed_solution, m.move) == (-1, -1)
    assert is_move_valid(reversed_solution, m.move)
    assert_exact(reversed_solution, instance, m)


def test_candidate_edge_exchange_layout(instance_factory):
    instance = instance_factory(8, seed=2)
    solution = Solution([0, 1, 2, 3, 4, 5], [6, 7])

    candidate = evaluate_candidate_intra_route_edge_exchange(solution, instance, C1, 1, 4)
    general = evaluate_intra_route_edge_exchange(solution, instance, C1, 1, 4)
    assert candidate.move == general.move
    assert candidate.delta == general.delta
    assert evaluate_candidate_intra_route_edge_exchange(solution, instance, C1, 2, 3) is None
    assert evaluate_candidate_intra_route_edge_exchange(solution, instance, C1, 5, 0) is None


def test_mixed_orientation_not_applicable():
    solution = Solution([0, 1, 2, 3, 4, 5], [])
    move = IntraEdgeExchange(a=0, b=1, c=4, d=3, cycle=C1)
    assert edge_orientation(solution, move) == (1, -1)
    assert not is_move_valid(solution, move)

    gone = IntraEdgeExchange(a=0, b=2, c=3, d=4, cycle=C1)
    assert edge_orientation(solution, gone) is None


# ----------------------------------------------------------------------
# 3-opt
# ----------------------------------------------------------------------

def test_3opt_requires_six_nodes(instance_factory):
    instance = instance_factory(5, seed=1)
    solution = Solution([0, 1, 2, 3, 4], [])
    assert evaluate_intra_route_3opt(solution, instance, C1, 0, 2, 4) is None


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_3opt_delta(instance_factory, solution_factory, seed):
    instance = instance_factory(16, seed=seed)
    solution = solution_factory(16, seed=seed, first=9)
    n = len(solution.cycle1)

    found = 0
    for pos1 in range(n - 4):
        for pos2 in range(pos1 + 2, n - 2):
            for pos3 in range(pos2 + 2, n):
                m = evaluate_intra_route_3opt(solution, instance, C1, pos1, pos2, pos3)
                if m is None:
                    continue
                found += 1
                assert m.delta < 0
                assert 1 <= m.move.case <= 4
                assert_exact(solution, instance, m)
    assert found > 0


def test_3opt_templates():
    cycle = [0, 1, 2, 3, 4, 5, 6, 7]
    # a=0 | S1 = 1 2 3 | S2 = 4 5 | f=6 7
    assert reconnect_3opt(cycle, 0, 3, 5, 1) == [0, 3, 2, 1, 5, 4, 6, 7]
    assert reconnect_3opt(cycle, 0, 3, 5, 2) == [0, 5, 4, 1, 2, 3, 6, 7]
    assert reconnect_3opt(cycle, 0, 3, 5, 3) == [0, 4, 5, 1, 2, 3, 6, 7]
    assert reconnect_3opt(cycle, 0, 3, 5, 4) == [0, 4, 5, 3, 2, 1, 6, 7]
    with pytest.raises(ValueError):
        reconnect_3opt(cycle, 0, 3, 5, 5)


# ----------------------------------------------------------------------
# or-opt
# ----------------------------------------------------------------------

def test_or_opt_own_slot_rejected():
    """Node 2 reinserted before itself or before its successor is no move"""
    instance = Instance([(0, 0), (10, 0), (10, 10), (0, 10), (50, 50)])
    solution = Solution([0, 1, 2, 3], [4])

    assert evaluate_intra_route_or_opt(solution, instance, C1, 2, 1, 2) is None
    assert evaluate_intra_route_or_opt(solution, instance, C1, 2, 1, 3) is None

    for to_pos in (0, 1):
        m = evaluate_intra_route_or_opt(solution, instance, C1, 2, 1, to_pos)
        assert m is not None
        assert_exact(solution, instance, m)


def test_or_opt_relocation_result():
    instance = Instance([(0, 0), (10, 0), (10, 10), (0, 10), (50, 50)])
    solution = Solution([0, 1, 2, 3], [4])

    m = evaluate_intra_route_or_opt(solution, instance, C1, 2, 1, 0)
    after = assert_exact(solution, instance, m)
    assert after.cycle1 == [2, 0, 1, 3]

    m = evaluate_intra_route_or_opt(solution, instance, C1, 2, 1, 1)
    after = assert_exact(solution, instance, m)
    assert after.cycle1 == [0, 2, 1, 3]


def test_or_opt_improving_only(instance_factory):
    instance = instance_factory(10, seed=8)
    solution = Solution(list(range(10)), [])
    for from_pos in range(10):
        for to_pos in range(10):
            m = evaluate_intra_route_or_opt(solution, instance, C1, from_pos, 2, to_pos,
                                            improving_only=True)
            assert m is None or m.delta < 0


def test_or_opt_chain_at_end_wraps():
    instance = Instance([(0, 0), (10, 0), (20, 0), (20, 10), (10, 10), (0, 10)])
    solution = Solution([0, 1, 2, 3, 4, 5], [])
    # chain [4, 5] touches the wraparound: front insertion is its current slot
    assert evaluate_intra_route_or_opt(solution, instance, C1, 4, 2, 0) is None
    m = evaluate_intra_route_or_opt(solution, instance, C1, 4, 2, 2)
    after = assert_exact(solution, instance, m)
    assert after.cycle1 == [0, 1, 4, 5, 2, 3]


@pytest.mark.parametrize("n", [4, 5, 6, 9])
def test_or_opt_delta(instance_factory, n):
    instance = instance_factory(n + 1, seed=30 + n)
    solution = Solution(list(range(n)), [n])

    for chain_length in range(1, min(3, n - 1) + 1):
        for from_pos in range(n):
            for to_pos in range(n):
                m = evaluate_intra_route_or_opt(solution, instance, C1,
                                                from_pos, chain_length, to_pos)
                if m is not None:
                    after = assert_exact(solution, instance, m)
                    assert after.cycle1 != solution.cycle1 or m.delta == 0


def test_or_opt_short_cycle_rejected(instance_factory):
    instance = instance_factory(4, seed=0)
    solution = Solution([0, 1, 2], [3])
    assert evaluate_intra_route_or_opt(solution, instance, C1, 0, 1, 2) is None


# ----------------------------------------------------------------------
# dispatch and bookkeeping
# ----------------------------------------------------------------------

def test_partition_preserved_by_every_family(instance_20, solution_20):
    c1 = solution_20.cycle1
    moves = [
        evaluate_inter_route_exchange(solution_20, instance_20, 3, 7).move,
        evaluate_intra_route_vertex_exchange(solution_20, instance_20, C2, 1, 6).move,
        evaluate_intra_route_edge_exchange(solution_20, instance_20, C1, 2, 7).move,
        Intra3Opt(pos1=0, pos2=3, pos3=6, cycle=C1, case=2,
                  nodes=(c1[0], c1[1], c1[3], c1[4], c1[6], c1[7])),
        evaluate_intra_route_or_opt(solution_20, instance_20, C2, 2, 3, 8).move,
    ]
    current = solution_20.copy()
    for move in moves:
        assert apply_move(current, move)
        assert current.is_valid(instance_20)


def test_positional_moves_revalidate_by_nodes():
    solution = Solution([0, 1, 2, 3, 4, 5, 6], [])
    move = IntraOrOpt(from_pos=1, chain_length=2, to_pos=5, cycle=C1,
                      nodes=(0, 1, 2, 3, 4, 5))
    assert is_move_valid(solution, move)

    shifted = Solution([6, 0, 1, 2, 3, 4, 5], [])
    assert not is_move_valid(shifted, move)


def test_move_nodes_and_cycle():
    assert move_nodes(InterRouteExchange(1, 2)) == (1, 2)
    assert move_nodes(IntraEdgeExchange(1, 2, 3, 4, C1)) == (1, 2, 3, 4)
    assert move_cycle(InterRouteExchange(1, 2)) is None
    assert move_cycle(IntraVertexExchange(1, 2, C2)) is C2
    with pytest.raises(TypeError):
        move_nodes("not a move")
    with pytest.raises(TypeError):
        apply_move(Solution([0], [1]), ("swap", 0, 1))
