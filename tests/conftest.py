"""
Shared test fixtures for the move validation test suite.
"""
import pytest

from rules_engine import ChessRulesEngine, MoveResult, RulesEngineError


# ==========================================================================
# Positions
# ==========================================================================

# White: Ke1, Rb1, Ne2 / Black: Ke8. Only the knight can reach c3.
KNIGHT_TO_C3_FEN = "4k3/8/8/8/8/8/4N3/1R2K3 w - - 0 1"
# White king h1 has no moves and is not in check.
WHITE_STALEMATED_FEN = "8/8/8/8/8/6k1/5q2/7K w - - 0 1"
# Knights on b1 and f1 can both reach d2.
AMBIGUOUS_KNIGHTS_FEN = "4k3/8/8/8/8/8/8/1N2KN2 w - - 0 1"


@pytest.fixture
def engine():
    return ChessRulesEngine()


@pytest.fixture
def opening_moves():
    return ["e4", "e5", "Nf3", "Nc6", "Bb5", "a6"]


# ==========================================================================
# Fake engines
# ==========================================================================

class StubEngine:
    """Engine with a fixed legal move list; every move 'applies' unless told otherwise."""

    protocol_version = 1

    def __init__(self, legal=None, apply_ok=True, check_after=()):
        self.legal = list(legal or [])
        self.apply_ok = apply_ok
        self.check_after = set(check_after)

    def initial_position(self):
        return "start"

    def apply_move(self, position, notation):
        if not self.apply_ok:
            return MoveResult(error=f"rejected {notation!r}")
        return MoveResult(position=notation)

    def legal_moves(self, position):
        return list(self.legal)

    def is_in_check(self, position):
        return position in self.check_after

    def snapshot(self, position):
        return position

    def restore(self, state):
        return state


class FailingEngine(ChessRulesEngine):
    """python-chess engine that faults after a number of successful applications."""

    def __init__(self, fail_after: int):
        super().__init__()
        self.calls = 0
        self.fail_after = fail_after

    def apply_move(self, position, notation):
        if self.calls >= self.fail_after:
            raise RulesEngineError("engine crashed")
        self.calls += 1
        return super().apply_move(position, notation)


@pytest.fixture
def stub_engine_factory():
    return StubEngine


@pytest.fixture
def failing_engine_factory():
    return FailingEngine


@pytest.fixture
def knight_to_c3_fen():
    return KNIGHT_TO_C3_FEN


@pytest.fixture
def white_stalemated_fen():
    return WHITE_STALEMATED_FEN


@pytest.fixture
def ambiguous_knights_fen():
    return AMBIGUOUS_KNIGHTS_FEN
