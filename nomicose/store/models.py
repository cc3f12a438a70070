# nomicose/store/models.py
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from nomicose.domain.common.types import Phase


class PlayerStore(BaseModel):
    pid: str
    name: str
    answers: Dict[str, str] = Field(default_factory=dict)
    ready: bool = False          # lobby: ready to start / results: ready for next round
    submitted: bool = False
    joined_at: int = 0

    def public(self) -> dict:
        """Player view safe to broadcast (answers stay private until round_ended)."""
        return self.model_dump(exclude={"answers"})


class GameSession(BaseModel):
    """
    The single authoritative game aggregate.
    Only SessionStore methods mutate it.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    players: Dict[str, PlayerStore] = Field(default_factory=dict)
    scores: Dict[str, int] = Field(default_factory=dict)
    round_no: int = 0
    max_rounds: int = 10
    max_players: int = 10
    round_duration_sec: float = 120.0
    phase: Phase = "LOBBY"
    current_letter: str = ""
    used_letters: List[str] = Field(default_factory=list)
    round_started_at: int = 0
    round_ends_at: int = 0
    last_round_scores: Dict[str, int] = Field(default_factory=dict)

    round_timer: Optional[asyncio.TimerHandle] = Field(default=None, exclude=True)
    game_over_timer: Optional[asyncio.TimerHandle] = Field(default=None, exclude=True)

    @property
    def game_started(self) -> bool:
        return self.phase == "ROUND_ACTIVE"

    def public(self) -> dict:
        return {
            "phase": self.phase,
            "round_no": self.round_no,
            "max_rounds": self.max_rounds,
            "max_players": self.max_players,
            "game_started": self.game_started,
            "current_letter": self.current_letter if self.round_no else "",
            "round_ends_at": self.round_ends_at,
            "players": [p.public() for p in self.players.values()],
            "scores": dict(self.scores),
        }
