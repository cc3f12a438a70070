# nomicose/domain/lobby/handlers.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from nomicose.domain.common.types import Phase
from nomicose.domain.lifecycle.handlers import build_ready_status
from nomicose.domain.rounds import maybe_start_round
from nomicose.transport.protocols import (
    InPlayerReady,
    InSetReady,
    OutError,
    OutgoingEvent,
    OutPlayerUpdated,
)

logger = logging.getLogger(__name__)

Result = Tuple[List[OutgoingEvent], List[OutgoingEvent]]


async def _mark_ready(*, app, pid: Optional[str], phase: Phase) -> Result:
    if not pid:
        return [OutError(code="NO_PID", message="Missing pid")], []

    repo = app.state.repo

    player = await repo.get_player(pid)
    if player is None:
        logger.warning("ready from unknown player %s ignored", pid)
        return [], []

    session = await repo.get_session()
    if session.phase != phase:
        return [OutError(code="BAD_STATE", message=f"Cannot get ready in phase {session.phase}")], []

    await repo.update_player_fields(pid, ready=True)
    logger.info("player %s is ready (%s)", player.name, phase)

    to_room: List[OutgoingEvent] = [
        OutPlayerUpdated(player=player.public()),
        await build_ready_status(repo),
    ]
    to_room.extend(await maybe_start_round(app=app))
    return [], to_room


async def handle_set_ready(*, app, pid: Optional[str], msg: InSetReady) -> Result:
    """Lobby: ready to start the game."""
    return await _mark_ready(app=app, pid=pid, phase="LOBBY")


async def handle_player_ready(*, app, pid: Optional[str], msg: InPlayerReady) -> Result:
    """Results screen: ready for the next round."""
    session = await app.state.repo.get_session()
    if session.phase == "GAME_OVER" or session.round_no >= session.max_rounds:
        logger.info("player_ready from %s ignored, game already over", pid)
        return [], []
    return await _mark_ready(app=app, pid=pid, phase="RESULTS")
