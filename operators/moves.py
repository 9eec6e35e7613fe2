"""
Move types for the two-cycle local search.

The move set is closed: every dispatch over it (apply, validation,
node extraction) handles exactly these five classes and raises TypeError
on anything else.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from core.data_structures import CycleId


@dataclass(frozen=True)
class InterRouteExchange:
    """Swap node v1 (cycle 1 at evaluation time) with node v2 (cycle 2)"""
    v1: int
    v2: int


@dataclass(frozen=True)
class IntraVertexExchange:
    v1: int
    v2: int
    cycle: CycleId


@dataclass(frozen=True)
class IntraEdgeExchange:
    """2-opt: remove (a, b) and (c, d), add (a, c) and (b, d)"""
    a: int
    b: int
    c: int
    d: int
    cycle: CycleId


@dataclass(frozen=True)
class Intra3Opt:
    """
    Remove the edges leaving pos1, pos2 and pos3 and reconnect by `case` (1-4).
    `nodes` are the break-point nodes (a, b, c, d, e, f) seen at evaluation time.
    """
    pos1: int
    pos2: int
    pos3: int
    cycle: CycleId
    case: int
    nodes: Tuple[int, ...] = ()


@dataclass(frozen=True)
class IntraOrOpt:
    """
    Relocate cycle[from_pos:from_pos + chain_length] in front of the node at to_pos.
    `nodes` are (prev, first, last, next, insert_prev, insert_next) at evaluation time.
    """
    from_pos: int
    chain_length: int
    to_pos: int
    cycle: CycleId
    nodes: Tuple[int, ...] = ()


Move = Union[InterRouteExchange, IntraVertexExchange, IntraEdgeExchange, Intra3Opt, IntraOrOpt]

POSITIONAL_MOVES = (Intra3Opt, IntraOrOpt)


@dataclass
class EvaluatedMove:
    move: Move
    delta: int


def move_nodes(move: Move) -> Tuple[int, ...]:
    """Node ids whose incident edges the move reads"""
    if isinstance(move, (InterRouteExchange, IntraVertexExchange)):
        return (move.v1, move.v2)
    if isinstance(move, IntraEdgeExchange):
        return (move.a, move.b, move.c, move.d)
    if isinstance(move, (Intra3Opt, IntraOrOpt)):
        return move.nodes
    raise TypeError(f"Unknown move type: {type(move).__name__}")


def move_cycle(move: Move):
    """Cycle an intra-route move operates on, None for the inter-route exchange"""
    if isinstance(move, InterRouteExchange):
        return None
    if isinstance(move, (IntraVertexExchange, IntraEdgeExchange, Intra3Opt, IntraOrOpt)):
        return move.cycle
    raise TypeError(f"Unknown move type: {type(move).__name__}")
