"""
Shared fixtures: small random Euclidean instances and tour pairs
Coordinates are integers on a 1000 x 1000 grid so rounding stays meaningful
"""

import random

import pytest

from core.data_structures import Instance, Solution


def create_test_instance(n: int, seed: int = 0) -> Instance:
    rng = random.Random(seed)
    coords = [(rng.randrange(1000), rng.randrange(1000)) for _ in range(n)]
    return Instance(coords, name=f"random{n}_s{seed}")


def create_split_solution(n: int, seed: int = 0, first: int = None) -> Solution:
    """Shuffled nodes; cycle 1 takes `first` of them (default half)"""
    rng = random.Random(seed)
    nodes = list(range(n))
    rng.shuffle(nodes)
    cut = n // 2 if first is None else first
    return Solution(nodes[:cut], nodes[cut:])


@pytest.fixture
def instance_factory():
    return create_test_instance


@pytest.fixture
def solution_factory():
    return create_split_solution


@pytest.fixture
def instance_20():
    return create_test_instance(20, seed=7)


@pytest.fixture
def solution_20():
    return create_split_solution(20, seed=11)


@pytest.fixture
def crossing_instance():
    """
    Two overlapping squares of side 10:
    0 (0,0)  1 (10,0)  2 (0,10)  3 (10,10)  4 (5,5)  5 (15,5)
    """
    return Instance([(0, 0), (10, 0), (0, 10), (10, 10), (5, 5), (15, 5)], name="squares")
