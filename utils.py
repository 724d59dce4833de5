import re
from typing import Sequence

# Latin O/o, digit zero, Greek omicron and Cyrillic O as read by OCR
CASTLING_GLYPHS = "0OoΟοОо"
# hyphen, en dash, em dash, minus sign
CASTLING_SEPARATORS = "-–—−"

_CASTLING_PATTERN = re.compile(
    rf"^[{CASTLING_GLYPHS}][{CASTLING_SEPARATORS}][{CASTLING_GLYPHS}]"
    rf"(?P<long>[{CASTLING_SEPARATORS}][{CASTLING_GLYPHS}])?(?P<suffix>[+#]?)$"
)
_SQUARE_PATTERN = re.compile(r"[a-h][1-8]")
_COMPARISON_STRIP = re.compile(r"[+#x=\s]")


def normalize_castling(move: str) -> str:
    """Canonicalize OCR castling spellings to O-O / O-O-O, keeping a +/# suffix."""
    match = _CASTLING_PATTERN.match(move)
    if not match:
        return move
    base = "O-O-O" if match.group("long") else "O-O"
    return base + match.group("suffix")


def is_castling(move: str) -> bool:
    return move.startswith("O-O")


def strip_annotations(move: str) -> str:
    """Drop trailing check/mate markers."""
    return move.rstrip("+#")


def comparison_key(move: str) -> str:
    """Form used to compare an attempted move with legal candidates."""
    return _COMPARISON_STRIP.sub("", move).upper()


def destination_square(move: str) -> str | None:
    """Return the target square of a SAN move, or None for castling."""
    squares = _SQUARE_PATTERN.findall(strip_annotations(move))
    return squares[-1] if squares else None


def levenshtein_distance(a: Sequence, b: Sequence) -> int:
    """
    Classic dynamic-programming edit distance.
    Works on strings (characters) and on move lists (whole moves).
    """
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, item_a in enumerate(a, start=1):
        current = [i]
        for j, item_b in enumerate(b, start=1):
            if item_a == item_b:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    return previous[-1]


def interleave_moves(white: Sequence[str], black: Sequence[str]) -> list[str]:
    """Merge per-side move lists back into ply order."""
    plies: list[str] = []
    for i in range(max(len(white), len(black))):
        if i < len(white):
            plies.append(white[i])
        if i < len(black):
            plies.append(black[i])
    return plies


def split_plies(moves: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split a ply-ordered list into (white, black)."""
    return list(moves[0::2]), list(moves[1::2])
