"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ai import MinimaxAI, PreconditionViolation, best_move
from .config import ai_think_delay_from_env
from .game import EMPTY, InvalidMove, Player, TicTacToeGame, evaluate, validate_board

LOGGER = logging.getLogger(__name__)

Mode = Literal["single", "multi"]

AI_THINK_DELAY: float = ai_think_delay_from_env()
SESSION_TTL_SECONDS = 60 * 30  # 30 minutes

TITLES: Dict[str, str] = {
    "single": "Single Player: You (X) vs Computer (O)",
    "multi": "Multiplayer: Player X vs Player O",
}


@dataclass
class GameSession:
    """Container for an active game and, in single mode, its computer opponent."""

    game: TicTacToeGame
    mode: str
    ai: Optional[MinimaxAI]
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    last_active: float = field(default_factory=lambda: time.time())
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe played in the browser")


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    mode: Mode = Field(
        default="single",
        description="'single' plays against the computer, 'multi' is two humans",
    )


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    model_config = ConfigDict(populate_by_name=True)

    cell_index: int = Field(alias="cellIndex", ge=0, le=8)


class BoardRequest(BaseModel):
    """A raw board: 9 cells, 0 empty, -1 for X and 1 for O."""

    board: List[int]

    @field_validator("board")
    @classmethod
    def ensure_reachable_board(cls, value: List[int]) -> List[int]:
        return validate_board(value)


class BestMoveRequest(BoardRequest):
    player: str = Field(description="'X' or 'O', case-insensitive")

    @field_validator("player")
    @classmethod
    def ensure_known_player(cls, value: str) -> str:
        return Player.from_symbol(value).symbol


def status_text(session: GameSession) -> str:
    """Human readable status line, as shown under the board."""
    game = session.game
    if game.winner is not None:
        loser = game.winner.opponent()
        return f"Player {game.winner.symbol} Wins!!! {loser.symbol} Loses!"
    if game.drawn:
        return "Draw!"
    if session.ai is None:
        return f"Player {game.current_player.symbol}'s Turn"
    if game.current_player == session.ai.player:
        return f"Computer's Turn ({session.ai.player.symbol})"
    return f"Your Turn ({game.current_player.symbol})"


def _cleanup_sessions() -> None:
    """Drop sessions nobody has touched for SESSION_TTL_SECONDS."""

    now = time.time()
    expired = [
        game_id
        for game_id, session in list(SESSIONS.items())
        if not session.ai_pending
        and now - session.last_active >= SESSION_TTL_SECONDS
    ]
    for game_id in expired:
        SESSIONS.pop(game_id, None)
    if expired:
        LOGGER.info("evicted %d idle games", len(expired))


def _create_session(mode: str) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    _cleanup_sessions()
    ai = MinimaxAI(player=Player.O) if mode == "single" else None
    session = GameSession(game=TicTacToeGame(), mode=mode, ai=ai)
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    LOGGER.info("created %s game %s", mode, session_id)
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        session = SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    session.last_active = time.time()
    return session


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, AI_THINK_DELAY))

    with session.lock:
        try:
            if not session.ai:
                return
            game = session.game
            if game.finished or game.current_player != session.ai.player:
                return
            cell_index = session.ai.choose(game)
            game.play_move(cell_index)
            session.move_log.append(
                {"player": session.ai.player.symbol, "cellIndex": cell_index}
            )
        finally:
            session.ai_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        state: Dict[str, object] = {
            "id": game_id,
            "mode": session.mode,
            "title": TITLES[session.mode],
            "board": [
                "" if c == EMPTY else Player(c).symbol for c in game.board
            ],
            "currentPlayer": game.current_player.symbol,
            "status": game.status.value,
            "statusText": status_text(session),
            "winner": game.winner.symbol if game.winner else None,
            "drawn": game.drawn,
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell_index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule_ai = False
    with session.lock:
        game = session.game
        if game.finished:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(
                status_code=400, detail="Computer is completing its move"
            )

        if session.ai and game.current_player == session.ai.player:
            raise HTTPException(status_code=400, detail="It is the computer's turn")

        player = game.current_player
        try:
            game.play_move(cell_index)
        except InvalidMove as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": player.symbol, "cellIndex": cell_index})
        LOGGER.debug("game %s: %s plays cell %d", game_id, player.symbol, cell_index)

        should_schedule_ai = bool(
            session.ai
            and not game.finished
            and game.current_player == session.ai.player
        )
        if should_schedule_ai:
            session.ai_pending = True

    if should_schedule_ai and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


@app.post("/api/game")
def create_game(request: NewGameRequest) -> Dict[str, object]:
    game_id, session = _create_session(request.mode)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell_index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    with session.lock:
        # A scheduled computer move always lands before the board is cleared.
        if session.ai_pending:
            raise HTTPException(
                status_code=400, detail="Computer is completing its move"
            )
        session.game.reset()
        session.move_log.clear()
    LOGGER.info("restarted game %s", game_id)
    return _serialize_session(game_id, session)


@app.post("/api/evaluate")
def evaluate_board(request: BoardRequest) -> Dict[str, object]:
    verdict = evaluate(request.board)
    return {
        "finished": verdict.finished,
        "winner": verdict.winner.symbol if verdict.winner else None,
        "drawn": verdict.drawn,
    }


@app.post("/api/best-move")
def compute_best_move(request: BestMoveRequest) -> Dict[str, int]:
    try:
        cell_index = best_move(request.board, Player.from_symbol(request.player))
    except PreconditionViolation as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"cellIndex": cell_index}


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(480px, 100%);
        text-align: center;
      }
      h1 {
        margin: 0 0 1rem;
        font-size: clamp(1.3rem, 2vw + 1rem, 1.9rem);
      }
      .mode-picker {
        display: flex;
        gap: 1rem;
        justify-content: center;
        margin-bottom: 1.5rem;
      }
      button {
        font-size: 1rem;
        padding: 0.55rem 0.95rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
        font-family: inherit;
      }
      button.active {
        background: #3a66ff;
        color: white;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 8px;
        margin: 0 auto 1.25rem;
        width: min(300px, 100%);
      }
      .board.thinking {
        opacity: 0.7;
      }
      .cell {
        aspect-ratio: 1;
        font-size: 2.5rem;
        font-weight: 700;
        border-radius: 12px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: #f7f9ff;
      }
      #status {
        font-weight: 600;
        min-height: 1.5rem;
        margin-bottom: 1rem;
      }
      #message {
        color: #b3261e;
        min-height: 1.2rem;
      }
    </style>
  </head>
  <body>
    <main>
      <h1 id=\"game-title\">Tic Tac Toe</h1>
      <div class=\"mode-picker\">
        <button type=\"button\" data-mode=\"single\">Single Player</button>
        <button type=\"button\" data-mode=\"multi\">Multiplayer</button>
      </div>
      <div class=\"board\" id=\"board\"></div>
      <div id=\"status\"></div>
      <button type=\"button\" id=\"restart-btn\">Restart</button>
      <p id=\"message\"></p>
    </main>
    <script>
      const titleEl = document.getElementById('game-title');
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      const boardEl = document.getElementById('board');
      const restartBtn = document.getElementById('restart-btn');
      const modeButtons = document.querySelectorAll('[data-mode]');

      let gameId = null;
      let gameState = null;
      let pollHandle = null;
      let isRequestPending = false;

      const cells = Array.from({ length: 9 }, (_, index) => {
        const cell = document.createElement('button');
        cell.type = 'button';
        cell.className = 'cell';
        cell.dataset.index = String(index);
        cell.addEventListener('click', () => sendMove(index));
        boardEl.appendChild(cell);
        return cell;
      });

      function render() {
        if (!gameState) return;
        titleEl.textContent = gameState.title;
        statusEl.textContent = gameState.statusText;
        gameState.board.forEach((mark, index) => {
          cells[index].textContent = mark;
        });
        boardEl.classList.toggle('thinking', Boolean(gameState.aiPending));
        modeButtons.forEach((button) => {
          button.classList.toggle('active', button.dataset.mode === gameState.mode);
        });
      }

      function setState(state) {
        gameState = state;
        gameId = state.id;
        render();
        if (state.aiPending) {
          ensurePolling();
        }
      }

      function ensurePolling() {
        if (pollHandle !== null) return;
        pollHandle = window.setTimeout(pollState, 300);
      }

      async function pollState() {
        pollHandle = null;
        if (!gameId) return;
        try {
          const response = await fetch(`/api/game/${gameId}`);
          if (response.ok) {
            setState(await response.json());
          }
        } catch (error) {
          console.error('Polling failed', error);
          ensurePolling();
        }
      }

      async function post(url, body) {
        const response = await fetch(url, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body || {}),
        });
        const payload = await response.json().catch(() => ({}));
        if (!response.ok) {
          throw new Error(payload?.detail || 'Request failed');
        }
        return payload;
      }

      async function startGame(mode) {
        if (isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          setState(await post('/api/game', { mode }));
          const url = new URL(window.location.href);
          url.searchParams.set('mode', mode);
          window.history.replaceState(null, '', url);
        } catch (error) {
          messageEl.textContent = error.message || 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      async function sendMove(cellIndex) {
        if (!gameState || gameState.winner || gameState.drawn) return;
        if (isRequestPending || gameState.aiPending) return;
        if (gameState.board[cellIndex]) {
          alert('Invalid Move!');
          return;
        }
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          setState(await post(`/api/game/${gameId}/move`, { cellIndex }));
        } catch (error) {
          messageEl.textContent = error.message || 'Invalid move';
        } finally {
          isRequestPending = false;
        }
      }

      async function restart() {
        if (!gameId || isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          setState(await post(`/api/game/${gameId}/restart`));
        } catch (error) {
          messageEl.textContent = error.message || 'Unable to restart';
        } finally {
          isRequestPending = false;
        }
      }

      modeButtons.forEach((button) => {
        button.addEventListener('click', () => startGame(button.dataset.mode));
      });
      restartBtn.addEventListener('click', restart);

      const params = new URLSearchParams(window.location.search);
      startGame(params.get('mode') === 'multi' ? 'multi' : 'single');
    </script>
  </body>
</html>
"""
