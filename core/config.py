from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SearchVariant(Enum):
    STEEPEST = "steepest"
    GREEDY = "greedy"
    CANDIDATE_STEEPEST = "candidate_steepest"
    MOVE_LIST_STEEPEST = "move_list_steepest"


class NeighborhoodType(Enum):
    """Intra-route family searched alongside the inter-route exchange"""
    VERTEX_EXCHANGE = "vertex_exchange"
    EDGE_EXCHANGE = "edge_exchange"
    THREE_OPT = "three_opt"
    OR_OPT = "or_opt"

    @property
    def is_positional(self) -> bool:
        return self in (NeighborhoodType.THREE_OPT, NeighborhoodType.OR_OPT)


class InitialSolutionType(Enum):
    RANDOM = "random"
    WEIGHTED_REGRET = "weighted_regret"


@dataclass
class LocalSearchConfig:
    variant: SearchVariant = SearchVariant.STEEPEST
    neighborhood: NeighborhoodType = NeighborhoodType.EDGE_EXCHANGE
    initial_solution: InitialSolutionType = InitialSolutionType.RANDOM
    candidate_k: int = 10  # only read by CANDIDATE_STEEPEST
    verify_delta: bool = False  # 3-opt / or-opt only, quadratic extra cost
    recompute_interval: int = 1  # iterations between full-cost checks
    max_iterations: Optional[int] = None
    seed: Optional[int] = None  # greedy shuffle and random starts
    strict: bool = False  # raise MoveApplicationError instead of logging a failed apply
