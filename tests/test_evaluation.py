"""
Unit tests for transcription metrics.
"""
import pytest

from evaluation import (
    evaluate_moves,
    evaluate_transcription,
    exact_match_score,
    longest_common_subsequence,
    positional_accuracy,
)


class TestMetrics:

    def test_perfect_transcription(self, opening_moves):
        metrics = evaluate_moves(opening_moves, list(opening_moves))
        assert metrics.exact_match_score == 1.0
        assert metrics.levenshtein_distance == 0
        assert metrics.positional_accuracy == 1.0
        assert metrics.longest_common_subsequence == len(opening_moves)
        assert metrics.normalized_score == pytest.approx(1.0)

    def test_exact_match_uses_longer_list(self):
        assert exact_match_score(["e4", "e5"], ["e4", "d5", "Nf3", "Nc6"]) == 0.25

    def test_positional_accuracy_uses_ground_truth_length(self):
        assert positional_accuracy(["e4", "e5"], ["e4", "d5", "Nf3", "Nc6"]) == 0.5
        assert positional_accuracy([], []) == 1.0
        assert positional_accuracy([], ["e4"]) == 0.0

    def test_dropped_move_shifts_positions(self):
        truth = ["e4", "e5", "Nf3", "Nc6"]
        extracted = ["e4", "Nf3", "Nc6"]
        metrics = evaluate_moves(truth, extracted)
        assert metrics.levenshtein_distance == 1
        assert metrics.longest_common_subsequence == 3
        assert metrics.exact_match_score == 0.25
        assert 0.0 < metrics.normalized_score < 1.0

    def test_lcs(self):
        assert longest_common_subsequence(["a", "b", "c", "d"], ["b", "d"]) == 2
        assert longest_common_subsequence([], ["a"]) == 0


class TestEvaluateTranscription:

    def test_correction_improves_score(self, engine):
        truth = ["e4", "e5", "Nf3", "Nc6"]
        report = evaluate_transcription(truth, ["e4", "Zf3"], ["e5", "Nc6"], engine)

        assert report.extracted_moves == ["e4", "e5", "Zf3", "Nc6"]
        assert report.normalized_moves == truth
        assert report.extracted.exact_match_score == 0.75
        assert report.normalized.exact_match_score == 1.0
        assert report.normalized.normalized_score > report.extracted.normalized_score

    def test_castling_spelling_normalized(self, engine):
        truth = ["e4", "e5", "Nf3", "Nc6", "Bc4", "Bc5", "O-O"]
        report = evaluate_transcription(truth, ["e4", "Nf3", "Bc4", "0-0"], ["e5", "Nc6", "Bc5"], engine)
        assert report.extracted.exact_match_score < 1.0
        assert report.normalized.exact_match_score == 1.0
