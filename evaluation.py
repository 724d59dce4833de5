"""
Transcription quality metrics.

Compares a ground-truth move list with the moves read from a scoresheet,
both as extracted and after validation/correction, so the effect of the
correction engine can be measured.
"""
import logging
from typing import Sequence

from rules_engine import RulesEngine
from schema import EvaluationMetrics, EvaluationReport
from services import validate_game
from utils import interleave_moves, levenshtein_distance

logger = logging.getLogger(__name__)

EXACT_MATCH_WEIGHT = 0.4
POSITIONAL_WEIGHT = 0.3
LEVENSHTEIN_WEIGHT = 0.2
LCS_WEIGHT = 0.1


def exact_match_score(ground_truth: Sequence[str], extracted: Sequence[str]) -> float:
    """Share of indices where both lists hold the same move, over the longer list."""
    max_length = max(len(ground_truth), len(extracted))
    if max_length == 0:
        return 1.0
    matches = sum(1 for gt, ex in zip(ground_truth, extracted) if gt == ex)
    return matches / max_length


def positional_accuracy(ground_truth: Sequence[str], extracted: Sequence[str]) -> float:
    if not ground_truth:
        return 1.0 if not extracted else 0.0
    correct = sum(1 for gt, ex in zip(ground_truth, extracted) if gt == ex)
    return correct / len(ground_truth)


def longest_common_subsequence(ground_truth: Sequence[str], extracted: Sequence[str]) -> int:
    previous = [0] * (len(extracted) + 1)
    for gt in ground_truth:
        current = [0]
        for j, ex in enumerate(extracted, start=1):
            if gt == ex:
                current.append(previous[j - 1] + 1)
            else:
                current.append(max(previous[j], current[j - 1]))
        previous = current
    return previous[-1]


def normalized_score(
    ground_truth: Sequence[str],
    extracted: Sequence[str],
    exact: float,
    distance: int,
    positional: float,
    lcs: int,
) -> float:
    """Weighted blend of the four metrics; 1.0 is a perfect transcription."""
    max_distance = max(len(ground_truth), len(extracted))
    levenshtein_component = distance / max_distance if max_distance > 0 else 0.0

    max_lcs = min(len(ground_truth), len(extracted))
    lcs_component = 1.0 - (lcs / max_lcs) if max_lcs > 0 else 1.0

    raw = (
        EXACT_MATCH_WEIGHT * (1.0 - exact)
        + POSITIONAL_WEIGHT * (1.0 - positional)
        + LEVENSHTEIN_WEIGHT * levenshtein_component
        + LCS_WEIGHT * lcs_component
    )
    return 1.0 - raw


def evaluate_moves(ground_truth: Sequence[str], extracted: Sequence[str]) -> EvaluationMetrics:
    exact = exact_match_score(ground_truth, extracted)
    distance = levenshtein_distance(list(ground_truth), list(extracted))
    positional = positional_accuracy(ground_truth, extracted)
    lcs = longest_common_subsequence(ground_truth, extracted)
    return EvaluationMetrics(
        exact_match_score=exact,
        levenshtein_distance=distance,
        positional_accuracy=positional,
        longest_common_subsequence=lcs,
        normalized_score=normalized_score(ground_truth, extracted, exact, distance, positional, lcs),
    )


def evaluate_transcription(
    ground_truth: Sequence[str],
    white_moves: Sequence[str],
    black_moves: Sequence[str],
    engine: RulesEngine | None = None,
) -> EvaluationReport:
    """Score the raw tokens and the validated/corrected moves against the ground truth."""
    extracted = interleave_moves([m.strip() for m in white_moves], [m.strip() for m in black_moves])

    white_result, black_result = validate_game(white_moves, black_moves, engine)
    normalized = interleave_moves(white_result.normalized_moves, black_result.normalized_moves)

    report = EvaluationReport(
        ground_truth_moves=list(ground_truth),
        extracted_moves=extracted,
        normalized_moves=normalized,
        extracted=evaluate_moves(ground_truth, extracted),
        normalized=evaluate_moves(ground_truth, normalized),
    )
    logger.info(
        "Evaluation: score %.3f extracted, %.3f after validation",
        report.extracted.normalized_score,
        report.normalized.normalized_score,
    )
    return report
