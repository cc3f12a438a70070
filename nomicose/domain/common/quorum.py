# nomicose/domain/common/quorum.py
from __future__ import annotations

from typing import Iterable

from nomicose.store.models import PlayerStore

# Derived on every event from the live player set; never cached.


def all_ready(players: Iterable[PlayerStore], min_players: int = 2) -> bool:
    players = list(players)
    return len(players) >= min_players and all(p.ready for p in players)


def all_submitted(players: Iterable[PlayerStore], min_players: int = 2) -> bool:
    players = list(players)
    return len(players) >= min_players and all(p.submitted for p in players)


def ready_count(players: Iterable[PlayerStore]) -> int:
    return sum(1 for p in players if p.ready)
