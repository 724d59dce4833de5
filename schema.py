from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# --- Scoresheet Input Models ---

class ChessMove(BaseModel):
    move_number: int = Field(..., description="The move number (e.g., 1, 2, ...)")
    white: str | None = Field(None, description="White's move in SAN (Standard Algebraic Notation), or null if empty.")
    black: str | None = Field(None, description="Black's move in SAN, or null if empty.")

class Scoresheet(BaseModel):
    moves: list[ChessMove] = Field(..., description="List of all chess moves found on the scoresheet.")

    def split_sides(self) -> tuple[list[str], list[str]]:
        """Return (white_tokens, black_tokens) in move-number order.

        An empty cell inside the game becomes "" so it is reported at its own
        move number; empty cells after a side's last move are dropped.
        """
        rows = sorted(self.moves, key=lambda m: m.move_number)
        return _side_tokens(row.white for row in rows), _side_tokens(row.black for row in rows)


def _side_tokens(cells) -> list[str]:
    tokens = ["" if cell is None else cell for cell in cells]
    while tokens and not tokens[-1].strip():
        tokens.pop()
    return tokens

# --- Validation Models ---

class MoveStatus(str, Enum):
    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


class MoveIssue(str, Enum):
    """Why a move is not plain valid."""
    NO_MOVES = "no_moves"
    EMPTY_MOVE = "empty_move"
    SYNTAX_ERROR = "syntax_error"
    INVALID_PIECE = "invalid_piece"
    ILLEGAL_IN_CONTEXT = "illegal_in_context"
    TERMINAL_POSITION = "terminal_position"
    CORRECTION_FAILED = "correction_failed"
    ENGINE_FAILURE = "engine_failure"
    CONSECUTIVE_CHECKS = "consecutive_checks"
    CORRECTED = "corrected"


def join_message(existing: str, text: str) -> str:
    if not text:
        return existing
    return f"{existing}; {text}" if existing else text


class ValidatedMove(BaseModel):
    model_config = ConfigDict(frozen=True)

    move_number: int = Field(..., description="1-based position of the move in its side's list")
    notation: str = Field(..., description="Move as first observed (trimmed)")
    normalized_notation: str = Field("", description="Canonical form used for rule checks and replacement")
    status: MoveStatus = MoveStatus.VALID
    message: str = ""
    issue: Optional[MoveIssue] = Field(None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _default_normalized(cls, data):
        if isinstance(data, dict) and not data.get("normalized_notation"):
            data = {**data, "normalized_notation": data.get("notation", "")}
        return data

    def with_status(
        self,
        status: MoveStatus,
        text: str = "",
        issue: Optional[MoveIssue] = None,
        **updates,
    ) -> "ValidatedMove":
        """Return a copy with a new status and `text` appended to the message."""
        changes = {
            "status": status,
            "message": join_message(self.message, text),
            "issue": issue if issue is not None else self.issue,
        }
        changes.update(updates)
        return self.model_copy(update=changes)

    def with_note(self, text: str) -> "ValidatedMove":
        """Append explanatory text without touching the status."""
        return self.model_copy(update={"message": join_message(self.message, text)})


class ChessMoveValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    moves: List[ValidatedMove]

    @classmethod
    def from_moves(cls, moves: List[ValidatedMove]) -> "ChessMoveValidationResult":
        is_valid = all(m.status != MoveStatus.ERROR for m in moves)
        return cls(is_valid=is_valid, moves=list(moves))

    @property
    def normalized_moves(self) -> list[str]:
        """Normalized notation of every move that has one, in order."""
        return [m.normalized_notation for m in self.moves if m.normalized_notation.strip()]


class MovePair(BaseModel):
    move_number: int
    white: Optional[ValidatedMove] = None
    black: Optional[ValidatedMove] = None


def pair_moves(
    white: ChessMoveValidationResult,
    black: ChessMoveValidationResult,
) -> list[MovePair]:
    """Zip both sides into numbered rows; a missing half-move stays None."""
    total = max(len(white.moves), len(black.moves))
    pairs: list[MovePair] = []
    for i in range(total):
        pairs.append(
            MovePair(
                move_number=i + 1,
                white=white.moves[i] if i < len(white.moves) else None,
                black=black.moves[i] if i < len(black.moves) else None,
            )
        )
    return pairs

# --- Evaluation Models ---

class EvaluationMetrics(BaseModel):
    exact_match_score: float
    levenshtein_distance: int
    positional_accuracy: float
    longest_common_subsequence: int
    normalized_score: float


class EvaluationReport(BaseModel):
    ground_truth_moves: List[str]
    extracted_moves: List[str]
    normalized_moves: List[str]
    extracted: EvaluationMetrics
    normalized: EvaluationMetrics
