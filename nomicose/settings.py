# nomicose/settings.py
from __future__ import annotations

from pydantic import BaseModel
import os


class Settings(BaseModel):
    APP_NAME: str = "nomicose-server"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Dev
    LOG_LEVEL: str = "INFO"

    # WebSocket origin policy (comma-separated)
    WS_ALLOWED_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000,null"
    # Dev helper: allow any private LAN IP
    WS_ALLOW_LAN_ORIGINS: bool = True

    # Game
    MAX_ROUNDS: int = 10
    MAX_PLAYERS: int = 10
    MIN_PLAYERS: int = 2
    ROUND_DURATION_SEC: float = 120.0
    # results hold before game_ended is sent after the last round
    GAME_OVER_DELAY_SEC: float = 2.0
    LETTERS: str = "ABCDEFGHILMNOPQRSTUVZ"

    # Input limits
    ANSWER_MAX_LEN: int = 50
    NAME_MIN_LEN: int = 2
    NAME_MAX_LEN: int = 20


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "nomicose-server"),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "3000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),

        WS_ALLOWED_ORIGINS=os.getenv(
            "WS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,null",
        ),
        WS_ALLOW_LAN_ORIGINS=os.getenv("WS_ALLOW_LAN_ORIGINS", "true").lower()
        in ("1", "true", "yes", "y", "on"),

        MAX_ROUNDS=int(os.getenv("MAX_ROUNDS", "10")),
        MAX_PLAYERS=int(os.getenv("MAX_PLAYERS", "10")),
        MIN_PLAYERS=int(os.getenv("MIN_PLAYERS", "2")),
        ROUND_DURATION_SEC=float(os.getenv("ROUND_DURATION_SEC", "120")),
        GAME_OVER_DELAY_SEC=float(os.getenv("GAME_OVER_DELAY_SEC", "2")),
        LETTERS=os.getenv("LETTERS", "ABCDEFGHILMNOPQRSTUVZ").upper(),

        ANSWER_MAX_LEN=int(os.getenv("ANSWER_MAX_LEN", "50")),
        NAME_MIN_LEN=int(os.getenv("NAME_MIN_LEN", "2")),
        NAME_MAX_LEN=int(os.getenv("NAME_MAX_LEN", "20")),
    )
