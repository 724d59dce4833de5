import os

import chess
from dotenv import load_dotenv

load_dotenv(override=True)

# Application Config
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
STARTING_FEN = os.getenv("CHESS_STARTING_FEN", chess.STARTING_FEN)

# Tracing
LANGCHAIN_TRACING_V2 = os.getenv("LANGCHAIN_TRACING_V2", "false").lower() == "true"
LANGCHAIN_PROJECT = os.getenv("LANGCHAIN_PROJECT", "ScoresheetValidator")

# Candidate ranking
DESTINATION_BONUS = 3
CENTER_SQUARES = {"e4", "e5", "d4", "d5"}
HEURISTIC_WEIGHTS = {
    "capture": 100,
    "center": 10,
    "minor_piece": 5,
    "castling": 15,
    "check": 50,
}

# Messages
CONSECUTIVE_CHECKS_MESSAGE = "Consecutive checks detected. Please verify these moves."
CONTEXT_INCOMPLETE_MESSAGE = "Game context validation could not be completed"
VALID_PROMOTIONS = ("=Q", "=R", "=B", "=N")
