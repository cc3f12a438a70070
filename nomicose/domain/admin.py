# nomicose/domain/admin.py
from __future__ import annotations

import logging
from typing import Dict, Mapping

from nomicose.domain.common.errors import UnknownPlayer

logger = logging.getLogger(__name__)

ADMIN_UPDATE_MESSAGE = "Punteggi aggiornati dall'amministratore"


async def apply_score_deltas(*, repo, deltas: Mapping[str, int]) -> Dict[str, int]:
    """
    Out-of-band moderation: add signed deltas to cumulative scores (floor 0).
    Keyed by player id. Ready/submitted flags and round progression are
    left alone. Returns the applied totals keyed by player id.
    """
    applied: Dict[str, int] = {}
    for pid, delta in deltas.items():
        player = await repo.get_player(pid)
        try:
            old = (await repo.get_scores()).get(pid, 0)
            applied[pid] = await repo.apply_score_delta(pid, int(delta))
        except UnknownPlayer:
            logger.warning("admin score update for unknown player %r ignored", pid)
            continue
        logger.info("admin: %s score %d -> %d (delta %+d)", player.name, old, applied[pid], int(delta))
    return applied


async def totals_by_name(repo) -> Dict[str, int]:
    scores = await repo.get_scores()
    return {p.name: scores.get(p.pid, 0) for p in await repo.list_players()}
