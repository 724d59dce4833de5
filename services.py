import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from langsmith import traceable

import config
from rules_engine import ChessRulesEngine, RulesEngine
from schema import ChessMoveValidationResult, MoveIssue, MoveStatus, ValidatedMove
from utils import (
    comparison_key,
    destination_square,
    is_castling,
    levenshtein_distance,
    normalize_castling,
    strip_annotations,
)

logger = logging.getLogger(__name__)

_VALID_MOVE_PATTERN = re.compile(
    r"^([KQRBN]?[a-h]?[1-8]?x?[a-h][1-8](=[QRBN])?[+#]?|O-O(-O)?[+#]?)$"
)
_VALID_PIECES = {"K", "Q", "R", "B", "N"}


# ── Syntax Validation ─────────────────────────────────────────────────────────

def validate_single_move(move: str, move_number: int, notation: str | None = None) -> ValidatedMove:
    """
    Check one normalized token against the SAN grammar, ignoring the board.
    `notation` is the token as observed; it defaults to `move`.
    """
    observed = move if notation is None else notation
    base = ValidatedMove(move_number=move_number, notation=observed, normalized_notation=move)

    if not move or not move.strip():
        return base.with_status(MoveStatus.ERROR, "Empty or whitespace move", MoveIssue.EMPTY_MOVE)

    if not _VALID_MOVE_PATTERN.match(move):
        text = f"Invalid move syntax '{move}'"
        if "=" in move and not move.rstrip("+#").endswith(config.VALID_PROMOTIONS):
            text += "; Invalid promotion piece. Valid promotions are: " + ", ".join(config.VALID_PROMOTIONS)
        return base.with_status(MoveStatus.ERROR, text, MoveIssue.SYNTAX_ERROR)

    # Castling has no piece letter to check
    if not is_castling(move) and len(move) > 1 and move[0].isupper():
        if move[0] not in _VALID_PIECES:
            return base.with_status(
                MoveStatus.ERROR, f"Invalid piece notation '{move[0]}'", MoveIssue.INVALID_PIECE
            )

    return base


@traceable(run_type="chain", name="validate_moves")
def validate_moves(moves: Sequence[str]) -> ChessMoveValidationResult:
    """
    Syntax-validate one side's tokens (no board replay).
    Castling spellings are normalized first; game-level rules run last.
    """
    if not moves:
        placeholder = ValidatedMove(
            move_number=0,
            notation="",
            status=MoveStatus.ERROR,
            message="No moves provided for validation",
            issue=MoveIssue.NO_MOVES,
        )
        return ChessMoveValidationResult.from_moves([placeholder])

    validated: list[ValidatedMove] = []
    for i, raw in enumerate(moves):
        token = (raw or "").strip()
        validated.append(validate_single_move(normalize_castling(token), i + 1, notation=token))

    result = apply_game_level_rules(ChessMoveValidationResult.from_moves(validated))
    logger.debug(
        "Syntax validation: %d moves, %d errors",
        len(result.moves),
        sum(1 for m in result.moves if m.status == MoveStatus.ERROR),
    )
    return result


# ── Game-Level Rules ──────────────────────────────────────────────────────────

def apply_game_level_rules(result: ChessMoveValidationResult) -> ChessMoveValidationResult:
    """
    Cross-move checks on one side's list. Two adjacent moves that both give
    check are flagged; only valid moves change status, others just get the note.
    """
    moves = list(result.moves)
    flagged: set[int] = set()
    for i in range(len(moves) - 1):
        if moves[i].normalized_notation.endswith("+") and moves[i + 1].normalized_notation.endswith("+"):
            flagged.update((i, i + 1))

    for i in sorted(flagged):
        move = moves[i]
        if config.CONSECUTIVE_CHECKS_MESSAGE in move.message:
            continue
        if move.status == MoveStatus.VALID:
            moves[i] = move.with_status(
                MoveStatus.WARNING, config.CONSECUTIVE_CHECKS_MESSAGE, MoveIssue.CONSECUTIVE_CHECKS
            )
        else:
            moves[i] = move.with_note(config.CONSECUTIVE_CHECKS_MESSAGE)

    return ChessMoveValidationResult.from_moves(moves)


# ── Terminal State Detection ─────────────────────────────────────────────────

def detect_terminal_state(engine: RulesEngine, position: Any) -> Optional[str]:
    """Return a checkmate/stalemate description if the side to move has no legal moves."""
    if engine.legal_moves(position):
        return None
    if engine.is_in_check(position):
        return "checkmate — no legal moves available"
    return "stalemate — no legal moves available"


# ── Candidate Ranking ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CandidateScore:
    notation: str
    distance: int
    heuristic: int = 0


def score_move_heuristic(engine: RulesEngine, position: Any, move: str) -> int:
    """Plausibility score used to break distance ties between legal moves."""
    weights = config.HEURISTIC_WEIGHTS
    score = 0
    if "x" in move:
        score += weights["capture"]
    if destination_square(move) in config.CENTER_SQUARES:
        score += weights["center"]
    if move[:1] in ("N", "B"):
        score += weights["minor_piece"]
    if is_castling(move):
        score += weights["castling"]

    # Simulate on a snapshot so the caller's position is untouched
    trial = engine.restore(engine.snapshot(position))
    result = engine.apply_move(trial, strip_annotations(move))
    if result.ok and engine.is_in_check(result.position):
        score += weights["check"]
    return score


def candidate_distance(attempted_key: str, candidate: str) -> int:
    """Edit distance with the destination-square bonus applied."""
    key = comparison_key(candidate)
    distance = levenshtein_distance(attempted_key, key)
    if len(attempted_key) >= 2 and len(key) >= 2 and attempted_key[-2:] == key[-2:]:
        distance = max(0, distance - config.DESTINATION_BONUS)
    return distance


def rank_candidates(engine: RulesEngine, position: Any, attempted: str) -> list[CandidateScore]:
    """All legal moves ordered best first: distance, then heuristic, then enumeration order."""
    attempted_key = comparison_key(attempted)
    scored = [
        CandidateScore(
            notation=move,
            distance=candidate_distance(attempted_key, move),
            heuristic=score_move_heuristic(engine, position, move),
        )
        for move in engine.legal_moves(position)
    ]
    return sorted(scored, key=lambda c: (c.distance, -c.heuristic))


def find_best_replacement(engine: RulesEngine, position: Any, attempted: str) -> Optional[str]:
    """Closest legal move to `attempted`, or None when the position has no legal moves."""
    legal = engine.legal_moves(position)
    if not legal:
        return None

    attempted_key = comparison_key(attempted)
    distances = [(move, candidate_distance(attempted_key, move)) for move in legal]
    best_distance = min(d for _, d in distances)
    tied = [move for move, d in distances if d == best_distance]
    if len(tied) == 1:
        return tied[0]

    best_move, best_score = tied[0], score_move_heuristic(engine, position, tied[0])
    for move in tied[1:]:
        score = score_move_heuristic(engine, position, move)
        if score > best_score:
            best_move, best_score = move, score
    logger.debug(
        "Replacement for '%s': %s (distance %d, %d tied)", attempted, best_move, best_distance, len(tied)
    )
    return best_move


# ── Game Context Replay ──────────────────────────────────────────────────────

def _replay_half_move(engine: RulesEngine, position: Any, move: ValidatedMove) -> tuple[ValidatedMove, Any]:
    """Apply one half-move; returns the updated move and the position to continue from."""
    result = engine.apply_move(position, strip_annotations(move.normalized_notation))
    if result.ok:
        return move, result.position

    reason = f"Illegal move '{move.normalized_notation}' in game context: {result.error}"

    terminal = detect_terminal_state(engine, position)
    if terminal:
        # No replacement is searched once the game is over; the position stays put
        return move.with_status(MoveStatus.ERROR, f"{reason}; {terminal}", MoveIssue.TERMINAL_POSITION), position

    # Only garbled notation is corrected; clean notation that is illegal is reported as-is
    if move.issue != MoveIssue.SYNTAX_ERROR:
        return move.with_status(MoveStatus.ERROR, reason, MoveIssue.ILLEGAL_IN_CONTEXT), position

    candidate = find_best_replacement(engine, position, move.normalized_notation)
    if candidate is None:
        return move.with_status(
            MoveStatus.ERROR, f"{reason}; no legal replacement found", MoveIssue.CORRECTION_FAILED
        ), position

    applied = engine.apply_move(position, strip_annotations(candidate))
    if not applied.ok:
        return move.with_status(
            MoveStatus.ERROR,
            f"{reason}; suggested replacement '{candidate}' could not be applied: {applied.error}",
            MoveIssue.CORRECTION_FAILED,
        ), position

    logger.info("Move %d: corrected '%s' to '%s'", move.move_number, move.notation, candidate)
    corrected = move.with_status(
        MoveStatus.WARNING,
        f"Corrected '{move.notation}' to '{candidate}' (closest legal move)",
        MoveIssue.CORRECTED,
        normalized_notation=candidate,
    )
    return corrected, applied.position


def _replay(engine: RulesEngine, white: list[ValidatedMove], black: list[ValidatedMove]) -> None:
    position = engine.initial_position()
    for index in range(max(len(white), len(black))):
        for moves in (white, black):
            if index >= len(moves) or moves[index].issue == MoveIssue.NO_MOVES:
                continue
            moves[index], position = _replay_half_move(engine, position, moves[index])


def _mark_context_incomplete(moves: list[ValidatedMove]) -> list[ValidatedMove]:
    return [
        m.with_status(MoveStatus.WARNING, config.CONTEXT_INCOMPLETE_MESSAGE, MoveIssue.ENGINE_FAILURE)
        if m.status == MoveStatus.VALID
        else m
        for m in moves
    ]


@traceable(run_type="chain", name="validate_moves_in_game_context")
def validate_moves_in_game_context(
    white_result: ChessMoveValidationResult,
    black_result: ChessMoveValidationResult,
    engine: RulesEngine | None = None,
) -> tuple[ChessMoveValidationResult, ChessMoveValidationResult]:
    """
    Replay both sides' moves alternately from the starting position.
    Returns new (white, black) results; the inputs are left untouched.
    Never raises: an engine fault downgrades still-valid moves to warnings.
    """
    engine = engine or ChessRulesEngine()
    white = list(white_result.moves)
    black = list(black_result.moves)

    try:
        _replay(engine, white, black)
    except Exception:
        logger.exception("Game context validation aborted; marking unverified moves as warnings")
        white = _mark_context_incomplete(white)
        black = _mark_context_incomplete(black)

    white_out = apply_game_level_rules(ChessMoveValidationResult.from_moves(white))
    black_out = apply_game_level_rules(ChessMoveValidationResult.from_moves(black))
    log_validation_results(white_out, "White")
    log_validation_results(black_out, "Black")
    return white_out, black_out


def validate_game(
    white_moves: Sequence[str],
    black_moves: Sequence[str],
    engine: RulesEngine | None = None,
) -> tuple[ChessMoveValidationResult, ChessMoveValidationResult]:
    """Syntax validation of both sides followed by the context replay."""
    return validate_moves_in_game_context(validate_moves(white_moves), validate_moves(black_moves), engine)


# ── Reporting ─────────────────────────────────────────────────────────────────

def log_validation_results(result: ChessMoveValidationResult, side: str) -> None:
    for move in result.moves:
        if move.status == MoveStatus.ERROR:
            logger.error(
                "%s move validation error: Move %d '%s': %s", side, move.move_number, move.notation, move.message
            )
        elif move.status == MoveStatus.WARNING:
            logger.warning(
                "%s move validation warning: Move %d '%s': %s", side, move.move_number, move.notation, move.message
            )
