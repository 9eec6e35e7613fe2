"""
Dispatch of moves to their in-place apply functions, plus structural checks
of whether a previously evaluated move still describes the current tour.
"""

from core.data_structures import Solution
from operators.inter_route_exchange import inter_route_exchange_inplace
from operators.intra_route_2opt import edge_exchange_inplace
from operators.moves import (
    InterRouteExchange,
    Intra3Opt,
    IntraEdgeExchange,
    IntraOrOpt,
    IntraVertexExchange,
    Move,
)
from operators.or_opt import or_opt_inplace
from operators.swap import vertex_exchange_inplace
from operators.three_opt import three_opt_inplace


def apply_move(solution: Solution, move: Move) -> bool:
    """
    Apply IN PLACE. Returns False (solution untouched) when the move's
    nodes are not where it expects them.
    """
    if isinstance(move, InterRouteExchange):
        return inter_route_exchange_inplace(solution, move)
    if isinstance(move, IntraVertexExchange):
        return vertex_exchange_inplace(solution, move)
    if isinstance(move, IntraEdgeExchange):
        return edge_exchange_inplace(solution, move)
    if isinstance(move, Intra3Opt):
        return three_opt_inplace(solution, move)
    if isinstance(move, IntraOrOpt):
        return or_opt_inplace(solution, move)
    raise TypeError(f"Unknown move type: {type(move).__name__}")


def edge_orientation(solution: Solution, move: IntraEdgeExchange):
    """
    Directions of the two removed edges in the move's cycle:
    (1, 1) / (-1, -1) applicable, mixed signs not applicable now, None if an edge is gone.
    """
    cycle = solution.get_cycle(move.cycle)
    dir1 = Solution.check_edge_in_cycle(cycle, move.a, move.b)
    dir2 = Solution.check_edge_in_cycle(cycle, move.c, move.d)
    if dir1 is None or dir2 is None:
        return None
    return dir1, dir2


def nodes_in_place(solution: Solution, move) -> bool:
    cycle = solution.get_cycle(move.cycle)
    n = len(cycle)
    if isinstance(move, Intra3Opt):
        if not move.pos1 < move.pos2 < move.pos3 < n:
            return False
        positions = (move.pos1, move.pos1 + 1, move.pos2, move.pos2 + 1,
                     move.pos3, (move.pos3 + 1) % n)
    else:
        end = move.from_pos + move.chain_length
        if end > n or move.to_pos >= n:
            return False
        positions = (move.from_pos - 1, move.from_pos, end - 1, end % n,
                     move.to_pos - 1, move.to_pos)
    return all(cycle[pos] == node for pos, node in zip(positions, move.nodes))


def is_move_valid(solution: Solution, move: Move) -> bool:
    """Structural preconditions of the move hold on the current solution"""
    if isinstance(move, InterRouteExchange):
        loc1 = solution.find_node(move.v1)
        loc2 = solution.find_node(move.v2)
        return loc1 is not None and loc2 is not None and loc1[0] is not loc2[0]
    if isinstance(move, IntraVertexExchange):
        loc1 = solution.find_node(move.v1)
        loc2 = solution.find_node(move.v2)
        return (loc1 is not None and loc2 is not None
                and loc1[0] is move.cycle and loc2[0] is move.cycle)
    if isinstance(move, IntraEdgeExchange):
        orientation = edge_orientation(solution, move)
        return orientation is not None and orientation[0] == orientation[1]
    if isinstance(move, (Intra3Opt, IntraOrOpt)):
        return nodes_in_place(solution, move)
    raise TypeError(f"Unknown move type: {type(move).__name__}")
