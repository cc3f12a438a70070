# nomicose/store/session_store.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from nomicose.domain.common.errors import SessionFull, UnknownPlayer
from nomicose.store.models import GameSession, PlayerStore

logger = logging.getLogger(__name__)


class SessionStore:
    """
    In-memory home of the one GameSession.
    Callers hold `lock` around every mutating sequence; the methods
    themselves never yield, so a held lock means no interleaving.
    """

    def __init__(
        self,
        *,
        max_rounds: int = 10,
        max_players: int = 10,
        round_duration_sec: float = 120.0,
    ) -> None:
        self.max_rounds = max_rounds
        self.max_players = max_players
        self.round_duration_sec = round_duration_sec
        self.lock = asyncio.Lock()
        self.session = self._fresh()

    def _fresh(self) -> GameSession:
        return GameSession(
            max_rounds=self.max_rounds,
            max_players=self.max_players,
            round_duration_sec=self.round_duration_sec,
        )

    # ----------------------------
    # Players
    # ----------------------------
    async def add_player(self, player: PlayerStore) -> None:
        s = self.session
        if len(s.players) >= s.max_players:
            raise SessionFull(max_players=s.max_players, current_players=len(s.players))
        s.players[player.pid] = player
        s.scores[player.pid] = 0

    async def remove_player(self, pid: str) -> Optional[PlayerStore]:
        self.session.scores.pop(pid, None)
        return self.session.players.pop(pid, None)

    async def get_player(self, pid: str) -> Optional[PlayerStore]:
        return self.session.players.get(pid)

    async def require_player(self, pid: str) -> PlayerStore:
        p = self.session.players.get(pid)
        if p is None:
            raise UnknownPlayer(pid)
        return p

    async def list_players(self) -> List[PlayerStore]:
        return list(self.session.players.values())

    async def player_count(self) -> int:
        return len(self.session.players)

    async def update_player_fields(self, pid: str, **fields: Any) -> None:
        p = self.session.players.get(pid)
        if p is None:
            return
        for k, v in fields.items():
            setattr(p, k, v)

    async def update_all_players(self, **fields: Any) -> None:
        for p in self.session.players.values():
            for k, v in fields.items():
                # copy mutable defaults so players never share one dict
                setattr(p, k, dict(v) if isinstance(v, dict) else v)

    # ----------------------------
    # Session header
    # ----------------------------
    async def get_session(self) -> GameSession:
        return self.session

    async def set_session_fields(self, **fields: Any) -> None:
        for k, v in fields.items():
            setattr(self.session, k, v)

    # ----------------------------
    # Scores
    # ----------------------------
    async def get_scores(self) -> Dict[str, int]:
        return dict(self.session.scores)

    async def apply_score_delta(self, pid: str, delta: int) -> int:
        """Add delta to the cumulative score, never below 0. Returns the new total."""
        if pid not in self.session.players:
            raise UnknownPlayer(pid)
        total = max(0, int(self.session.scores.get(pid, 0)) + int(delta))
        self.session.scores[pid] = total
        return total

    async def add_round_scores(self, round_scores: Dict[str, int]) -> None:
        for pid, pts in round_scores.items():
            if pid in self.session.players:
                self.session.scores[pid] = self.session.scores.get(pid, 0) + pts
        self.session.last_round_scores = dict(round_scores)

    # ----------------------------
    # Timers / reset
    # ----------------------------
    async def cancel_round_timer(self) -> None:
        t = self.session.round_timer
        if t is not None:
            t.cancel()
        self.session.round_timer = None

    async def cancel_timers(self) -> None:
        await self.cancel_round_timer()
        t = self.session.game_over_timer
        if t is not None:
            t.cancel()
        self.session.game_over_timer = None

    async def reset(self) -> None:
        await self.cancel_timers()
        self.session = self._fresh()
        logger.info("session reset")
