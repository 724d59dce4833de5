"""
Scoresheet Move Validator
=========================
Takes the raw moves read from a chess scoresheet, validates their notation,
replays them on a board, corrects garbled moves to the closest legal move,
and prints a per-move report.

Usage:
    python main.py --moves "1. e4 e5 2. Nf3 Nc6 3. Bb5 a6"
    python main.py --input scoresheet.json
    python main.py --input scoresheet.json --ground-truth game.txt
"""

import argparse
import json
import logging
import re
import sys
from pathlib import Path

import chess
from pydantic import ValidationError

import config
from evaluation import evaluate_transcription
from rules_engine import ChessRulesEngine
from schema import ChessMoveValidationResult, MoveStatus, Scoresheet, pair_moves
from services import validate_moves, validate_moves_in_game_context
from utils import split_plies

_MOVE_NUMBER = re.compile(r"^\d+\.+$")
_GAME_RESULTS = {"1-0", "0-1", "1/2-1/2", "*"}
_STATUS_MARKS = {
    MoveStatus.VALID: "✓",
    MoveStatus.WARNING: "⚠",
    MoveStatus.ERROR: "✗",
}


# ── Input ─────────────────────────────────────────────────────────────────────

def parse_move_text(text: str) -> list[str]:
    """Split free text into ply-ordered tokens, dropping move numbers like '12.' or '12...'."""
    tokens = []
    for token in text.split():
        if _MOVE_NUMBER.match(token) or token in _GAME_RESULTS:
            continue
        # "1.e4" style
        token = re.sub(r"^\d+\.+", "", token)
        if token:
            tokens.append(token)
    return tokens


def load_scoresheet(path: Path) -> tuple[list[str], list[str]]:
    """Read a scoresheet JSON file (a list of rows or {"moves": [...]})."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        data = {"moves": data}
    return Scoresheet.model_validate(data).split_sides()


# ── Report ───────────────────────────────────────────────────────────────────

def print_report(white: ChessMoveValidationResult, black: ChessMoveValidationResult) -> None:
    """Print a human-readable validation report to stdout."""
    counts = {status: 0 for status in MoveStatus}
    flagged: list[str] = []

    for pair in pair_moves(white, black):
        for color, move in (("white", pair.white), ("black", pair.black)):
            if move is None:
                continue
            counts[move.status] += 1
            shown = move.notation
            if move.normalized_notation != move.notation:
                shown += f" → {move.normalized_notation}"
            line = f"  {_STATUS_MARKS[move.status]} {pair.move_number}. {color}: {shown}"
            if move.message:
                line += f"  ← {move.message}"
                flagged.append(line)
            print(line)

    print(f"\n── Summary ──")
    print(f"  Total moves:     {sum(counts.values())}")
    print(f"  Valid moves:     {counts[MoveStatus.VALID]}")
    print(f"  Warnings:        {counts[MoveStatus.WARNING]}")
    print(f"  Errors:          {counts[MoveStatus.ERROR]}")

    if flagged:
        print(f"\n── Flagged Moves ──")
        for line in flagged:
            print(line)


def write_report(white: ChessMoveValidationResult, black: ChessMoveValidationResult, output_path: Path) -> None:
    """Write the paired, validated moves to a JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "valid": white.is_valid and black.is_valid,
        "moves": [pair.model_dump(mode="json") for pair in pair_moves(white, black)],
    }
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
        f.write("\n")


def print_evaluation(report) -> None:
    print(f"\n── Evaluation ──")
    for label, metrics in (("Extracted", report.extracted), ("Validated", report.normalized)):
        print(
            f"  {label:<10} score {metrics.normalized_score:.3f} | "
            f"exact {metrics.exact_match_score:.2%} | "
            f"positional {metrics.positional_accuracy:.2%} | "
            f"edit distance {metrics.levenshtein_distance} | "
            f"LCS {metrics.longest_common_subsequence}"
        )


# ── CLI Entry Point ──────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Chess Scoresheet Move Validator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  python main.py --moves "1. e4 e5 2. Nf3 Nc6"
  python main.py --input scoresheet.json
  python main.py --input scoresheet.json --ground-truth game.txt
        """,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--moves", "-m", help="Moves in play order, e.g. \"1. e4 e5 2. Nf3\"")
    source.add_argument("--input", "-i", help="Path to a scoresheet JSON file")
    parser.add_argument("--ground-truth", "-g", default=None, help="Text file with the correct moves")
    parser.add_argument("--output", "-o", default=None, help="Write the validated moves as JSON to this path")
    parser.add_argument("--fen", default=None, help="Starting position (default: standard start)")
    parser.add_argument(
        "--no-context",
        action="store_true",
        help="Only check notation; do not replay the moves on a board",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"[ERROR] Input file not found: {input_path}")
            return 1
        try:
            white_moves, black_moves = load_scoresheet(input_path)
        except (json.JSONDecodeError, ValidationError) as e:
            print(f"[ERROR] Could not read scoresheet: {e}")
            return 1
    else:
        white_moves, black_moves = split_plies(parse_move_text(args.moves))

    if args.fen:
        try:
            chess.Board(args.fen)
        except ValueError as e:
            print(f"[ERROR] Invalid starting position: {e}")
            return 1

    engine = ChessRulesEngine(starting_fen=args.fen)
    if config.LANGCHAIN_TRACING_V2:
        print(f"[INFO] LangSmith tracing enabled (project: {config.LANGCHAIN_PROJECT})")

    # ── Run Pipeline ──
    print("=" * 60)
    print("  Chess Scoresheet Move Validator")
    print("=" * 60)

    print(f"\n[1/2] Checking notation ({len(white_moves)} white, {len(black_moves)} black)...")
    white = validate_moves(white_moves)
    black = validate_moves(black_moves)

    if not args.no_context:
        print("[2/2] Replaying moves against the board...\n")
        white, black = validate_moves_in_game_context(white, black, engine)
    else:
        print("[2/2] Skipped board replay.\n")

    print_report(white, black)

    if args.output:
        write_report(white, black, Path(args.output))
        print(f"\n[✓] Report saved to: {args.output}")

    if args.ground_truth:
        truth_path = Path(args.ground_truth)
        if not truth_path.exists():
            print(f"[ERROR] Ground truth file not found: {truth_path}")
            return 1
        ground_truth = parse_move_text(truth_path.read_text(encoding="utf-8"))
        print_evaluation(evaluate_transcription(ground_truth, white_moves, black_moves, engine))

    return 0 if white.is_valid and black.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
