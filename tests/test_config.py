"""Tests for environment-driven settings."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from tictactoe.config import Settings, ai_think_delay_from_env


def test_defaults_without_environment():
    settings = Settings.from_env({})
    assert settings.host == "0.0.0.0"
    assert settings.port == 8000
    assert settings.ai_think_delay == 0.5
    assert settings.log_level == "INFO"


def test_reads_overrides():
    settings = Settings.from_env(
        {
            "TICTACTOE_HOST": "127.0.0.1",
            "TICTACTOE_PORT": "9000",
            "TICTACTOE_AI_DELAY": "0",
            "TICTACTOE_LOG_LEVEL": "debug",
        }
    )
    assert settings == Settings(
        host="127.0.0.1", port=9000, ai_think_delay=0.0, log_level="DEBUG"
    )


@pytest.mark.parametrize(
    "env",
    [
        {"TICTACTOE_PORT": "eighty"},
        {"TICTACTOE_AI_DELAY": "-1"},
    ],
)
def test_rejects_bad_values(env):
    with pytest.raises(ValueError):
        Settings.from_env(env)


def test_ai_delay_ignores_server_variables():
    env = {"TICTACTOE_PORT": "eighty", "TICTACTOE_AI_DELAY": "0.25"}
    assert ai_think_delay_from_env(env) == 0.25
    assert ai_think_delay_from_env({}) == 0.5


def test_core_imports_with_malformed_server_variables(tmp_path):
    src = Path(__file__).resolve().parents[1] / "src"
    env = dict(os.environ, TICTACTOE_PORT="eighty", TICTACTOE_HOST="")
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(src), env.get("PYTHONPATH", "")) if p
    )
    result = subprocess.run(
        [
            sys.executable,
            "-c",
            "from tictactoe.ai import best_move; "
            "from tictactoe.game import evaluate; "
            "print(best_move([-1, -1, 0, 1, 1, 0, 0, 0, 0], -1))",
        ],
        cwd=tmp_path,
        env=env,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == "2"
