"""
Rules engine seam used by the move validator.

The validator only talks to the `RulesEngine` protocol; `ChessRulesEngine`
is the python-chess implementation used by default.
"""
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

import chess

import config

PROTOCOL_VERSION = 1


class RulesEngineError(Exception):
    """The rules engine itself failed (not an ordinary illegal move)."""


@dataclass(frozen=True)
class MoveResult:
    """Outcome of applying a move: either a new position or the reason it was rejected."""
    position: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class RulesEngine(Protocol):
    protocol_version: int

    def initial_position(self) -> Any: ...

    def apply_move(self, position: Any, notation: str) -> MoveResult: ...

    def legal_moves(self, position: Any) -> list[str]: ...

    def is_in_check(self, position: Any) -> bool: ...

    def snapshot(self, position: Any) -> Any: ...

    def restore(self, state: Any) -> Any: ...


class ChessRulesEngine:
    """python-chess backed rules engine. Positions are `chess.Board` objects and are never mutated."""

    protocol_version = PROTOCOL_VERSION

    def __init__(self, starting_fen: str | None = None):
        self.starting_fen = starting_fen or config.STARTING_FEN

    def initial_position(self) -> chess.Board:
        try:
            return chess.Board(self.starting_fen)
        except ValueError as e:
            raise RulesEngineError(f"Invalid starting FEN '{self.starting_fen}': {e}") from e

    def apply_move(self, position: chess.Board, notation: str) -> MoveResult:
        board = position.copy()
        try:
            move = board.parse_san(notation)
        except (chess.InvalidMoveError, chess.IllegalMoveError, chess.AmbiguousMoveError) as e:
            return MoveResult(error=str(e) or f"illegal san: {notation!r}")
        except Exception as e:
            raise RulesEngineError(f"Rules engine failed on '{notation}': {e}") from e

        # parse_san accepts null moves ("--", "Z0", ...), which never appear on a scoresheet
        if not move:
            return MoveResult(error=f"null move not allowed: {notation!r}")

        board.push(move)
        return MoveResult(position=board)

    def legal_moves(self, position: chess.Board) -> list[str]:
        try:
            return [position.san(move) for move in position.legal_moves]
        except Exception as e:
            raise RulesEngineError(f"Legal move generation failed: {e}") from e

    def is_in_check(self, position: chess.Board) -> bool:
        return position.is_check()

    def snapshot(self, position: chess.Board) -> chess.Board:
        return position.copy()

    def restore(self, state: chess.Board) -> chess.Board:
        return state.copy()
