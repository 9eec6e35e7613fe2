"""
Initial solution builders
"""

import random

from core.data_structures import Instance
from algorithms.construction import (
    calculate_insertion_cost,
    generate_random_solution,
    weighted_regret_construction,
    weighted_regret_score,
)


def test_random_solution_splits_in_half(instance_factory):
    instance = instance_factory(11, seed=1)
    solution = generate_random_solution(instance, random.Random(3))

    assert solution.is_valid(instance)
    assert len(solution.cycle1) == 5
    assert len(solution.cycle2) == 6


def test_random_solution_reproducible(instance_factory):
    instance = instance_factory(12, seed=1)
    first = generate_random_solution(instance, random.Random(42))
    second = generate_random_solution(instance, random.Random(42))
    assert first.cycle1 == second.cycle1
    assert first.cycle2 == second.cycle2


def test_insertion_cost():
    instance = Instance([(0, 0), (10, 0), (10, 10), (5, 0)])

    assert calculate_insertion_cost(3, 0, [], instance) == 0
    assert calculate_insertion_cost(3, 0, [0], instance) == 10
    # between 0 and 1 on a straight line: no extra length
    assert calculate_insertion_cost(3, 1, [0, 1, 2], instance) == 0
    # position 0 and position len both mean "between last and first"
    assert (calculate_insertion_cost(3, 0, [0, 1, 2], instance)
            == calculate_insertion_cost(3, 3, [0, 1, 2], instance))


def test_regret_score_prefers_cheapest_position():
    instance = Instance([(0, 0), (10, 0), (10, 10), (5, 0)])
    score, pos = weighted_regret_score(3, [0, 1, 2], instance)

    assert pos == 1
    costs = sorted(calculate_insertion_cost(3, p, [0, 1, 2], instance) for p in range(4))
    assert score == (costs[1] - costs[0]) - costs[0]


def test_weighted_regret_builds_balanced_cycles(instance_factory):
    instance = instance_factory(25, seed=4)
    messages = []
    solution = weighted_regret_construction(instance, rng=random.Random(0),
                                            progress_callback=messages.append)

    assert solution.is_valid(instance)
    assert abs(len(solution.cycle1) - len(solution.cycle2)) <= 1
    assert messages[0] == "[Init] Size: 25"
    assert messages[-1] == "[Finished]"


def test_weighted_regret_beats_random(instance_factory):
    instance = instance_factory(30, seed=9)
    rng = random.Random(1)
    constructed = weighted_regret_construction(instance, rng=rng)
    random_cost = generate_random_solution(instance, random.Random(1)).calculate_cost(instance)
    assert constructed.calculate_cost(instance) < random_cost


def test_weighted_regret_tiny_instances():
    assert weighted_regret_construction(Instance([])).cycle1 == []
    single = weighted_regret_construction(Instance([(1, 1)]))
    assert single.cycle1 == [0] and single.cycle2 == []

    pair = weighted_regret_construction(Instance([(0, 0), (5, 5)]), rng=random.Random(2))
    assert sorted(pair.cycle1 + pair.cycle2) == [0, 1]
    assert len(pair.cycle1) == len(pair.cycle2) == 1
