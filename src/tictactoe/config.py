"""Runtime settings read from ``TICTACTOE_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_AI_DELAY = 0.5


def ai_think_delay_from_env(environ: Optional[Mapping[str, str]] = None) -> float:
    """Pause before the computer's move is applied; purely cosmetic."""
    env = os.environ if environ is None else environ
    delay = float(env.get("TICTACTOE_AI_DELAY", str(DEFAULT_AI_DELAY)))
    if delay < 0:
        raise ValueError("TICTACTOE_AI_DELAY must not be negative")
    return delay


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    ai_think_delay: float = DEFAULT_AI_DELAY
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("TICTACTOE_HOST", cls.host),
            port=int(env.get("TICTACTOE_PORT", str(cls.port))),
            ai_think_delay=ai_think_delay_from_env(env),
            log_level=env.get("TICTACTOE_LOG_LEVEL", cls.log_level).upper(),
        )
