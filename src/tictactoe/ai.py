"""Exhaustive minimax (negamax form) search for perfect tic-tac-toe play."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

from .game import (
    EMPTY,
    Board,
    Player,
    TicTacToeGame,
    is_terminal,
    validate_board,
    winner,
)

LOGGER = logging.getLogger(__name__)

Position = Tuple[int, ...]

# Below any reachable score, marks "no candidate seen yet".
_UNSET = -2


class PreconditionViolation(ValueError):
    """Raised when the search is asked to move on a finished board."""


def score(board: Board, player: Player) -> int:
    """Value of ``board`` for ``player``, the side about to move.

    Returns 1 if ``player`` can force a win, -1 if the opponent can, and 0 if
    best play from both sides draws. ``board`` is left untouched.
    """
    cells = tuple(validate_board(board))
    return _negamax(cells, Player(player), {})


def best_move(board: Board, player: Player) -> int:
    """Return the empty cell that maximizes ``player``'s minimax value.

    Cells are tried in ascending order and only a strictly better value
    replaces the current choice, so ties go to the lowest index.
    """
    cells = tuple(validate_board(board))
    if is_terminal(cells):
        raise PreconditionViolation("Cannot search a finished board")

    player = Player(player)
    opponent = player.opponent()
    table: Dict[Tuple[Position, Player], int] = {}
    best_score, move = _UNSET, -1
    for i, c in enumerate(cells):
        if c != EMPTY:
            continue
        value = -_negamax(_place(cells, i, player), opponent, table)
        if value > best_score:
            best_score, move = value, i
    LOGGER.debug(
        "best move for %s is %d (score %d, %d positions valued)",
        player.symbol,
        move,
        best_score,
        len(table),
    )
    return move


def _place(cells: Position, index: int, player: Player) -> Position:
    return cells[:index] + (int(player),) + cells[index + 1 :]


def _negamax(
    cells: Position, player: Player, table: Dict[Tuple[Position, Player], int]
) -> int:
    won = winner(cells)
    if won is not None:
        return int(won) * int(player)

    key = (cells, player)
    cached = table.get(key)
    if cached is not None:
        return cached

    opponent = player.opponent()
    best = _UNSET
    for i, c in enumerate(cells):
        if c != EMPTY:
            continue
        value = -_negamax(_place(cells, i, player), opponent, table)
        if value > best:
            best = value
    # Full board without a line
    if best == _UNSET:
        best = 0
    table[key] = best
    return best


@dataclass
class MinimaxAI:
    """Computer opponent that always plays a minimax-optimal move."""

    player: Player = Player.O

    def choose(self, game: TicTacToeGame) -> int:
        if game.finished:
            raise PreconditionViolation("Game already finished")
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        move = best_move(game.board, self.player)
        LOGGER.info("computer (%s) plays cell %d", self.player.symbol, move)
        return move
