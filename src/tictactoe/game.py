"""Board model, win/draw detection and the turn state machine for tic-tac-toe."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

LOGGER = logging.getLogger(__name__)

EMPTY = 0

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

Board = Sequence[int]


class Player(enum.IntEnum):
    """A side of the game; the value is the mark stored in a board cell."""

    X = -1
    O = 1

    def opponent(self) -> "Player":
        return Player.O if self is Player.X else Player.X

    @property
    def symbol(self) -> str:
        return self.name

    @classmethod
    def from_symbol(cls, symbol: str) -> "Player":
        try:
            return cls[symbol.strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown player symbol {symbol!r}") from exc


class InvalidBoard(ValueError):
    """Raised for a board that cannot arise from legal play."""


class InvalidMove(ValueError):
    """Raised when a move is not allowed in the current position."""


class GameStatus(str, enum.Enum):
    AWAITING_X = "awaiting-x"
    AWAITING_O = "awaiting-o"
    WON_X = "won-x"
    WON_O = "won-o"
    DRAW = "draw"


@dataclass(frozen=True)
class Verdict:
    """Terminal status of a board: ongoing, won by one side, or drawn."""

    finished: bool
    winner: Optional[Player] = None

    @property
    def drawn(self) -> bool:
        return self.finished and self.winner is None

    @property
    def ongoing(self) -> bool:
        return not self.finished


# ---------- Board evaluation ----------


def validate_board(board: Board) -> List[int]:
    """Return a list copy of ``board`` after checking it is reachable in play.

    X always moves first, so the board holds either as many X marks as O
    marks, or exactly one more X.
    """
    cells = list(board)
    if len(cells) != 9:
        raise InvalidBoard(f"Board must have 9 cells, got {len(cells)}")
    for value in cells:
        if value not in (EMPTY, Player.X, Player.O):
            raise InvalidBoard(f"Invalid cell value {value!r}")
    lead = cells.count(Player.X) - cells.count(Player.O)
    if lead not in (0, 1):
        raise InvalidBoard("X moves first and players alternate")
    return cells


def winner(board: Board) -> Optional[Player]:
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return Player(v)
    return None


def is_full(board: Board) -> bool:
    return all(c != EMPTY for c in board)


def is_terminal(board: Board) -> bool:
    return winner(board) is not None or is_full(board)


def evaluate(board: Board) -> Verdict:
    won = winner(board)
    if won is not None:
        return Verdict(finished=True, winner=won)
    return Verdict(finished=is_full(board))


def empty_cells(board: Board) -> List[int]:
    return [i for i, c in enumerate(board) if c == EMPTY]


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    board: List[int] = field(default_factory=lambda: [EMPTY] * 9)
    current_player: Player = Player.X
    winner: Optional[Player] = None
    drawn: bool = False

    @property
    def finished(self) -> bool:
        return self.winner is not None or self.drawn

    @property
    def status(self) -> GameStatus:
        if self.winner is Player.X:
            return GameStatus.WON_X
        if self.winner is Player.O:
            return GameStatus.WON_O
        if self.drawn:
            return GameStatus.DRAW
        if self.current_player is Player.X:
            return GameStatus.AWAITING_X
        return GameStatus.AWAITING_O

    def available_moves(self) -> List[int]:
        if self.finished:
            return []
        return empty_cells(self.board)

    def play_move(self, cell: int) -> None:
        """Place the current player's mark on ``cell`` and advance the turn."""
        if self.finished:
            raise InvalidMove("Game already finished")
        if not 0 <= cell < 9:
            raise InvalidMove(f"Cell index {cell} is off the board")
        if self.board[cell] != EMPTY:
            raise InvalidMove("Cell already occupied")

        self.board[cell] = self.current_player
        verdict = evaluate(self.board)
        if verdict.winner is not None:
            self.winner = verdict.winner
            LOGGER.debug("%s completed a line with cell %d", self.winner.symbol, cell)
        elif verdict.drawn:
            self.drawn = True
        else:
            self.current_player = self.current_player.opponent()

    def reset(self) -> None:
        self.board = [EMPTY] * 9
        self.current_player = Player.X
        self.winner = None
        self.drawn = False

    def clone(self) -> "TicTacToeGame":
        return TicTacToeGame(
            board=self.board.copy(),
            current_player=self.current_player,
            winner=self.winner,
            drawn=self.drawn,
        )
