"""
Error types raised by the search kernel.

Only programmer-level misconfiguration raises. Structurally invalid moves are
reported as ``None`` by the evaluators and failed applies as ``False``.
"""


class ConfigurationError(ValueError):
    """Invalid instance or engine configuration."""


class NeighborListNotComputedError(ConfigurationError):
    """Nearest-neighbour lists were queried before being populated."""


class InvalidNeighborCountError(ConfigurationError):
    """Neighbour count k outside 0 < k < dimension."""


class MoveApplicationError(RuntimeError):
    """A move could not be applied; raised only when the engine runs in strict mode."""

    def __init__(self, move, message: str = ""):
        self.move = move
        super().__init__(message or f"Move could not be applied: {move!r}")
