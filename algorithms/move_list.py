"""
Persistent list of improving moves for steepest descent with move memory.

Moves are stored by node identity and kept across iterations. Before a move
is used it is revalidated against the current tours:
  - node exchanges are re-evaluated from current positions,
  - 2-opt moves are checked for the presence and direction of both edges,
  - 3-opt / or-opt moves must still see the same nodes at the same positions.
After an application only the moves around the touched nodes are rebuilt.
Equal deltas are resolved in full-scan order, so a run follows the same
path as the exhaustive steepest search.
"""

import heapq
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from core.config import NeighborhoodType
from core.data_structures import CycleId, Instance, Solution
from operators.inter_route_exchange import (
    evaluate_inter_route_exchange,
    locate_inter_route_positions,
)
from operators.intra_route_2opt import evaluate_intra_route_edge_exchange
from operators.move_application import edge_orientation, is_move_valid
from operators.moves import (
    POSITIONAL_MOVES,
    EvaluatedMove,
    InterRouteExchange,
    Intra3Opt,
    IntraEdgeExchange,
    IntraVertexExchange,
    Move,
    move_cycle,
    move_nodes,
)
from operators.swap import evaluate_intra_route_vertex_exchange
from algorithms.neighborhoods import (
    CYCLES,
    generate_all_improving_moves,
    generate_intra_route_moves,
    generate_moves_around_nodes,
)

logger = logging.getLogger(__name__)

VALID = "valid"
DEFERRED = "deferred"
STALE = "stale"


def _edge_start(cycle: List[int], u: int, v: int) -> int:
    """Position of whichever endpoint of edge (u, v) the edge leaves forward"""
    pos_u = cycle.index(u)
    return pos_u if cycle[(pos_u + 1) % len(cycle)] == v else cycle.index(v)


def scan_order(solution: Solution, instance: Instance,
               evaluated: EvaluatedMove) -> Tuple[Tuple[int, ...], EvaluatedMove]:
    """
    Where a full scan of the current tours meets this move, and the move in
    the form that scan produces. Inter-route moves come first, then cycle 1,
    then cycle 2, each by position.
    """
    move = evaluated.move

    if isinstance(move, InterRouteExchange):
        pos1, pos2 = locate_inter_route_positions(solution, move.v1, move.v2)
        return (0, pos1, pos2), evaluated

    cycle = solution.get_cycle(move.cycle)
    if isinstance(move, IntraVertexExchange):
        pos1, pos2 = sorted((cycle.index(move.v1), cycle.index(move.v2)))
        return (move.cycle.value, pos1, pos2), evaluated

    if isinstance(move, IntraEdgeExchange):
        pos1, pos2 = sorted((_edge_start(cycle, move.a, move.b),
                             _edge_start(cycle, move.c, move.d)))
        # same two edges, same reconnection, scan's field layout
        canonical = evaluate_intra_route_edge_exchange(solution, instance, move.cycle, pos1, pos2)
        return (move.cycle.value, pos1, pos2), canonical

    if isinstance(move, Intra3Opt):
        return (move.cycle.value, move.pos1, move.pos2, move.pos3), evaluated

    return (move.cycle.value, move.chain_length, move.from_pos, move.to_pos), evaluated


class MoveList:
    """
    Improving moves ordered by delta.

    Memory: O(M) entries + O(M) index references, M = stored moves.
    """

    def __init__(self, neighborhood: NeighborhoodType, verify: bool = False):
        self.neighborhood = neighborhood
        self.verify = verify
        self._entries: Dict[int, EvaluatedMove] = {}
        self._by_move: Dict[Move, int] = {}
        self._by_node: Dict[int, Set[int]] = {}
        self._positional: Dict[CycleId, Set[int]] = {cid: set() for cid in CYCLES}
        self._heap: List[Tuple[int, int]] = []
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, move: Move) -> bool:
        return move in self._by_move

    # ------------------------------------------------------------------
    # storage
    # ------------------------------------------------------------------

    def add(self, evaluated: EvaluatedMove) -> None:
        if evaluated.delta >= 0:
            return
        existing = self._by_move.get(evaluated.move)
        if existing is not None:
            if self._entries[existing].delta == evaluated.delta:
                return
            self._remove(existing)

        entry_id = self._next_id
        self._next_id += 1
        self._entries[entry_id] = evaluated
        self._by_move[evaluated.move] = entry_id
        for node in move_nodes(evaluated.move):
            self._by_node.setdefault(node, set()).add(entry_id)
        if isinstance(evaluated.move, POSITIONAL_MOVES):
            self._positional[evaluated.move.cycle].add(entry_id)
        heapq.heappush(self._heap, (evaluated.delta, entry_id))

    def extend(self, moves: Iterable[EvaluatedMove]) -> None:
        for m in moves:
            self.add(m)

    def _remove(self, entry_id: int) -> None:
        # heap slot is left behind and skipped on pop
        evaluated = self._entries.pop(entry_id, None)
        if evaluated is None:
            return
        del self._by_move[evaluated.move]
        for node in move_nodes(evaluated.move):
            ids = self._by_node.get(node)
            if ids is not None:
                ids.discard(entry_id)
                if not ids:
                    del self._by_node[node]
        if isinstance(evaluated.move, POSITIONAL_MOVES):
            self._positional[evaluated.move.cycle].discard(entry_id)

    def invalidate_nodes(self, nodes: Iterable[int]) -> int:
        """Drop every stored move that reads one of `nodes`; returns how many"""
        doomed: Set[int] = set()
        for node in nodes:
            doomed.update(self._by_node.get(node, ()))
        for entry_id in doomed:
            self._remove(entry_id)
        return len(doomed)

    def drop_positional(self, cycle_id: CycleId) -> int:
        """Drop the 3-opt / or-opt entries of one cycle; returns how many"""
        doomed = list(self._positional[cycle_id])
        for entry_id in doomed:
            self._remove(entry_id)
        return len(doomed)

    # ------------------------------------------------------------------
    # search
    # ------------------------------------------------------------------

    def populate(self, solution: Solution, instance: Instance) -> None:
        """Full scan; 2-opt moves are stored in both reconnection orientations"""
        self.extend(generate_all_improving_moves(solution, instance, self.neighborhood,
                                                 verify=self.verify,
                                                 both_orientations=True))
        logger.debug("Move list populated with %d improving moves", len(self))

    def _revalidate(self, solution: Solution, instance: Instance,
                    evaluated: EvaluatedMove) -> Tuple[str, Optional[EvaluatedMove]]:
        move = evaluated.move

        if not is_move_valid(solution, move):
            if isinstance(move, IntraEdgeExchange) and edge_orientation(solution, move) is not None:
                # both edges present, one reversed: may line up again later
                return DEFERRED, None
            return STALE, None

        if isinstance(move, InterRouteExchange):
            positions = locate_inter_route_positions(solution, move.v1, move.v2)
            fresh = evaluate_inter_route_exchange(solution, instance, *positions)
        elif isinstance(move, IntraVertexExchange):
            cycle = solution.get_cycle(move.cycle)
            fresh = evaluate_intra_route_vertex_exchange(solution, instance, move.cycle,
                                                         cycle.index(move.v1),
                                                         cycle.index(move.v2))
        else:
            # 2-opt delta depends on the four nodes only, positional moves on
            # the six break-point nodes checked above
            return VALID, evaluated

        return (VALID, fresh) if fresh is not None and fresh.delta < 0 else (STALE, None)

    def pop_best(self, solution: Solution, instance: Instance) -> Optional[EvaluatedMove]:
        """
        Remove and return the best move that is applicable right now.
        Stale moves are discarded, deferred ones stay stored for later.
        Among equal deltas the move a full scan would reach first wins.
        """
        deferred: List[Tuple[int, int]] = []
        tied: List[Tuple[Tuple[int, int], EvaluatedMove, EvaluatedMove]] = []
        best_delta: Optional[int] = None

        while self._heap:
            if best_delta is not None and self._heap[0][0] > best_delta:
                break
            slot = heapq.heappop(self._heap)
            entry_id = slot[1]
            evaluated = self._entries.get(entry_id)
            if evaluated is None:
                continue

            status, fresh = self._revalidate(solution, instance, evaluated)
            if status == DEFERRED:
                deferred.append(slot)
                continue
            if status == STALE:
                self._remove(entry_id)
                continue
            if fresh.delta > evaluated.delta:
                # context changed without invalidation; requeue at its true delta
                logger.debug("Requeueing %s: delta %d -> %d",
                             fresh.move, evaluated.delta, fresh.delta)
                self._remove(entry_id)
                self.add(fresh)
                continue

            tied.append((slot, evaluated, fresh))
            if best_delta is None or fresh.delta < best_delta:
                best_delta = fresh.delta

        best: Optional[EvaluatedMove] = None
        best_key = None
        best_id = None
        for slot, evaluated, fresh in tied:
            if fresh.delta != best_delta:
                continue
            key, scanned = scan_order(solution, instance, fresh)
            if best_key is None or key < best_key:
                best_key, best, best_id = key, scanned, slot[1]

        for slot, evaluated, fresh in tied:
            if slot[1] == best_id:
                self._remove(best_id)
            elif fresh.move == evaluated.move and fresh.delta == evaluated.delta:
                heapq.heappush(self._heap, slot)
            else:
                self._remove(slot[1])
                self.add(fresh)
        for slot in deferred:
            heapq.heappush(self._heap, slot)
        return best

    @staticmethod
    def touched_nodes(solution: Solution, move: Move) -> Set[int]:
        """
        Nodes whose incident edges a move changes, read from the current tours:
        the move's own nodes and, for node exchanges, their cycle neighbours.
        Call before and after applying to catch both the old and new neighbours.
        """
        nodes = set(move_nodes(move))
        if isinstance(move, (InterRouteExchange, IntraVertexExchange)):
            for node in move_nodes(move):
                pred, succ = solution.neighbors(node)
                if pred is not None:
                    nodes.add(pred)
                if succ is not None:
                    nodes.add(succ)
        return nodes

    def update_after_apply(self, solution: Solution, instance: Instance,
                           move: Move, touched: Set[int]) -> None:
        """Rebuild the moves affected by an applied move"""
        dropped = self.invalidate_nodes(touched)
        logger.debug("Move list: %d entries dropped around %d nodes, %d kept",
                     dropped, len(touched), len(self))
        index = solution.position_index()
        self.extend(generate_moves_around_nodes(solution, instance, self.neighborhood,
                                                touched, index))

        if self.neighborhood.is_positional:
            cycle_id = move_cycle(move)
            cycles = CYCLES if cycle_id is None else (cycle_id,)
            for cid in cycles:
                self.drop_positional(cid)
                self.extend(generate_intra_route_moves(solution, instance, self.neighborhood,
                                                       cid, verify=self.verify))
