"""Tic-tac-toe game logic, minimax opponent, and the web application."""

from .ai import MinimaxAI, best_move, score
from .game import Player, TicTacToeGame, evaluate, is_full, is_terminal, winner
from .ui import app

__all__ = [
    "MinimaxAI",
    "Player",
    "TicTacToeGame",
    "app",
    "best_move",
    "evaluate",
    "is_full",
    "is_terminal",
    "score",
    "winner",
]
