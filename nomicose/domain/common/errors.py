# nomicose/domain/common/errors.py
from __future__ import annotations


class GameError(Exception):
    """Base for every recoverable game-rule error."""

    code = "GAME_ERROR"


class SessionFull(GameError):
    code = "SESSION_FULL"

    def __init__(self, max_players: int, current_players: int) -> None:
        super().__init__(f"Session is full ({current_players}/{max_players})")
        self.max_players = max_players
        self.current_players = current_players


class InvalidInput(GameError, ValueError):
    code = "INVALID_INPUT"


class UnknownPlayer(GameError):
    code = "UNKNOWN_PLAYER"

    def __init__(self, pid: str) -> None:
        super().__init__(f"Unknown player {pid!r}")
        self.pid = pid


class DuplicateSubmission(GameError):
    code = "DUPLICATE_SUBMISSION"


class RoundNotActive(GameError):
    code = "ROUND_NOT_ACTIVE"
