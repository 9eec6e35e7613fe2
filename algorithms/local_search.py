"""
Local search engine for the two-cycle TSP.

Each iteration scans for improving moves under the configured policy,
applies one, and updates the running cost by its delta:

    Steepest            full neighbourhood, best delta
    Greedy              full neighbourhood, shuffled, first improving
    Candidate steepest  k-nearest-neighbour moves only, best delta
    Move-list steepest  persistent delta-ordered list, rebuilt locally

The search stops at a local optimum, when an applied move fails to lower
the cost, or when the caller's stop condition / iteration cap triggers.
"""

import logging
import random
from typing import Callable, Dict, Optional, Tuple

from core.config import (
    InitialSolutionType,
    LocalSearchConfig,
    NeighborhoodType,
    SearchVariant,
)
from core.data_structures import Instance, Solution
from core.exceptions import (
    ConfigurationError,
    MoveApplicationError,
    NeighborListNotComputedError,
)
from operators.move_application import apply_move
from operators.moves import EvaluatedMove
from algorithms.construction import generate_random_solution, weighted_regret_construction
from algorithms.move_list import MoveList
from algorithms.neighborhoods import generate_all_improving_moves, generate_candidate_moves

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
StopCondition = Callable[[], bool]


def _noop(_: str) -> None:
    pass


class LocalSearch:
    """
    Iterate-evaluate-apply until no improving move remains.

    The caller's solution is never mutated: the engine refines its own copy.
    """

    def __init__(self, config: Optional[LocalSearchConfig] = None):
        self.config = config or LocalSearchConfig()
        self._validate_config()
        self.name = self._build_name()

    def _validate_config(self) -> None:
        cfg = self.config
        if cfg.variant is SearchVariant.CANDIDATE_STEEPEST:
            k = cfg.candidate_k
            if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
                raise ConfigurationError(f"Candidate k must be a positive int, got {k!r}")
        if cfg.recompute_interval < 1:
            raise ConfigurationError(
                f"recompute_interval must be >= 1, got {cfg.recompute_interval}"
            )
        if cfg.max_iterations is not None and cfg.max_iterations < 0:
            raise ConfigurationError(f"max_iterations must be >= 0, got {cfg.max_iterations}")

    def _check_neighbor_lists(self, instance: Instance) -> None:
        """The instance is read-only here: its lists must already hold candidate_k"""
        k = self.config.candidate_k
        if not instance.has_nearest_neighbors():
            raise NeighborListNotComputedError(
                f"Candidate search needs nearest neighbors; call "
                f"precompute_nearest_neighbors({k}) on the instance first."
            )
        if instance.neighbor_k != k:
            raise ConfigurationError(
                f"Instance neighbor lists hold k={instance.neighbor_k}, "
                f"engine is configured with candidate_k={k}."
            )

    def _build_name(self) -> str:
        cfg = self.config
        verify = ""
        if cfg.verify_delta and cfg.neighborhood.is_positional:
            verify = ", VerifyDelta"
        init = f"Init: {cfg.initial_solution.name}"
        if cfg.variant is SearchVariant.CANDIDATE_STEEPEST:
            return (f"Local Search (Candidate k={cfg.candidate_k}, "
                    f"{cfg.neighborhood.name}, {init}{verify})")
        if cfg.variant is SearchVariant.MOVE_LIST_STEEPEST:
            return f"Local Search (MoveListSteepest, {cfg.neighborhood.name}, {init}{verify})"
        return f"Local Search ({cfg.variant.name}, {cfg.neighborhood.name}, {init}{verify})"

    def __repr__(self) -> str:
        return f"LocalSearch({self.name!r})"

    # ------------------------------------------------------------------
    # entry points
    # ------------------------------------------------------------------

    def generate_initial_solution(self, instance: Instance,
                                  rng: Optional[random.Random] = None) -> Solution:
        if rng is None:
            rng = random.Random(self.config.seed)
        if self.config.initial_solution is InitialSolutionType.WEIGHTED_REGRET:
            return weighted_regret_construction(instance, rng=rng)
        return generate_random_solution(instance, rng)

    def solve(self, instance: Instance,
              progress_callback: Optional[ProgressCallback] = None,
              rng: Optional[random.Random] = None) -> Solution:
        """Build the configured initial solution, then refine it"""
        if rng is None:
            rng = random.Random(self.config.seed)
        initial = self.generate_initial_solution(instance, rng)
        return self.solve_from_solution(instance, initial, progress_callback, rng)

    def solve_from_solution(self, instance: Instance, solution: Solution,
                            progress_callback: Optional[ProgressCallback] = None,
                            rng: Optional[random.Random] = None,
                            should_stop: Optional[StopCondition] = None) -> Solution:
        refined, _ = self.solve_with_stats(instance, solution, progress_callback, rng, should_stop)
        return refined

    def solve_with_stats(self, instance: Instance, solution: Solution,
                         progress_callback: Optional[ProgressCallback] = None,
                         rng: Optional[random.Random] = None,
                         should_stop: Optional[StopCondition] = None
                         ) -> Tuple[Solution, Dict]:
        """
        Refine a copy of `solution`.

        Returns (refined solution, stats) where stats holds iterations,
        moves_applied, initial_cost, final_cost, cost_corrections,
        apply_failures and terminated_by.
        """
        cfg = self.config
        callback = progress_callback or _noop
        if rng is None:
            rng = random.Random(cfg.seed)

        if cfg.variant is SearchVariant.CANDIDATE_STEEPEST:
            self._check_neighbor_lists(instance)

        current = solution.copy()
        current_cost = current.calculate_cost(instance)
        stats = {
            'iterations': 0,
            'moves_applied': 0,
            'initial_cost': current_cost,
            'final_cost': current_cost,
            'cost_corrections': 0,
            'apply_failures': 0,
            'terminated_by': None,
        }

        move_list = None
        if cfg.variant is SearchVariant.MOVE_LIST_STEEPEST:
            move_list = MoveList(cfg.neighborhood, verify=cfg.verify_delta)
            move_list.populate(current, instance)

        iteration = 0
        while True:
            if should_stop is not None and should_stop():
                callback(f"[Stopped] Stop requested. Final Cost: {current_cost}")
                stats['terminated_by'] = 'stopped'
                break
            if cfg.max_iterations is not None and iteration >= cfg.max_iterations:
                callback(f"[Stopped] Iteration limit reached. Final Cost: {current_cost}")
                stats['terminated_by'] = 'max_iterations'
                break

            iteration += 1
            cost_before_iter = current_cost
            callback(f"[Iter: {iteration}] Cost: {current_cost}")

            chosen = self._select_move(instance, current, rng, move_list)
            if chosen is None:
                callback(f"[Finished] Local optimum found or no improving moves. "
                         f"Final Cost: {current_cost}")
                stats['terminated_by'] = 'local_optimum'
                break

            touched = MoveList.touched_nodes(current, chosen.move) if move_list is not None else None

            if apply_move(current, chosen.move):
                current_cost += chosen.delta
                stats['moves_applied'] += 1
                logger.debug("Iter %d: applied %s (delta %d)", iteration, chosen.move, chosen.delta)
            else:
                stats['apply_failures'] += 1
                if cfg.strict:
                    raise MoveApplicationError(chosen.move)

            if iteration % cfg.recompute_interval == 0:
                real_cost = current.calculate_cost(instance)
                if real_cost != current_cost:
                    logger.warning(
                        "Cost mismatch after apply! Iter: %d, Move: %s, Delta: %d, "
                        "Cost before: %d, Incremental cost: %d, Real cost: %d",
                        iteration, chosen.move, chosen.delta,
                        cost_before_iter, current_cost, real_cost,
                    )
                    stats['cost_corrections'] += 1
                    current_cost = real_cost

            if move_list is not None:
                touched |= MoveList.touched_nodes(current, chosen.move)
                move_list.update_after_apply(current, instance, chosen.move, touched)

            if current_cost >= cost_before_iter:
                callback(f"[Finished] No significant cost improvement. Final Cost: {current_cost}")
                stats['terminated_by'] = 'no_improvement'
                break

        # a skipped periodic check must not leak a drifted cost into the stats
        real_cost = current.calculate_cost(instance)
        if real_cost != current_cost:
            logger.warning("Final cost mismatch: incremental %d, real %d", current_cost, real_cost)
            stats['cost_corrections'] += 1

        stats['iterations'] = iteration
        stats['final_cost'] = real_cost
        return current, stats

    # ------------------------------------------------------------------
    # move selection
    # ------------------------------------------------------------------

    def _select_move(self, instance: Instance, solution: Solution,
                     rng: random.Random, move_list: Optional[MoveList]) -> Optional[EvaluatedMove]:
        cfg = self.config

        if cfg.variant is SearchVariant.MOVE_LIST_STEEPEST:
            return move_list.pop_best(solution, instance)

        if cfg.variant is SearchVariant.CANDIDATE_STEEPEST:
            moves = generate_candidate_moves(solution, instance, cfg.neighborhood)
        else:
            moves = generate_all_improving_moves(solution, instance, cfg.neighborhood,
                                                 verify=cfg.verify_delta)

        if not moves:
            return None

        if cfg.variant is SearchVariant.GREEDY:
            rng.shuffle(moves)
            return moves[0]

        return min(moves, key=lambda m: m.delta)


def run_local_search(instance: Instance,
                     solution: Solution,
                     variant: SearchVariant = SearchVariant.STEEPEST,
                     neighborhood: NeighborhoodType = NeighborhoodType.EDGE_EXCHANGE,
                     **config_overrides) -> Solution:
    """Convenience wrapper: one engine, one run, no callback"""
    config = LocalSearchConfig(variant=variant, neighborhood=neighborhood, **config_overrides)
    return LocalSearch(config).solve_from_solution(instance, solution)
