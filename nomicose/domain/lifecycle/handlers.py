# nomicose/domain/lifecycle/handlers.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from nomicose.domain.common.errors import InvalidInput, SessionFull
from nomicose.domain.common.quorum import ready_count
from nomicose.domain.common.types import CATEGORIES
from nomicose.domain.common.validation import clean_name
from nomicose.domain.rounds import after_player_left
from nomicose.store.models import PlayerStore
from nomicose.transport.protocols import (
    InJoin,
    InLeave,
    InSnapshot,
    OutError,
    OutgoingEvent,
    OutPlayerJoined,
    OutPlayerLeft,
    OutReadyStatus,
    OutSessionFull,
    OutSessionSnapshot,
)
from nomicose.util.timeutil import now_ts

logger = logging.getLogger(__name__)

# Returns: (to_sender, to_room)
Result = Tuple[List[OutgoingEvent], List[OutgoingEvent]]


async def build_snapshot(app, *, viewer_pid: Optional[str] = None) -> OutSessionSnapshot:
    """Public view of the session; other players' answers are never included."""
    session = await app.state.repo.get_session()
    return OutSessionSnapshot(pid=viewer_pid, categories=list(CATEGORIES), **session.public())


async def build_ready_status(repo) -> OutReadyStatus:
    players = await repo.list_players()
    return OutReadyStatus(ready_players=ready_count(players), total_players=len(players))


# -------------------------
# Handlers
# -------------------------

async def handle_join(*, app, pid: Optional[str], msg: InJoin) -> Result:
    """
    Join:
    - reject during the game-over hold (the session is about to be wiped)
    - add player or report session_full to the requester only
    - send snapshot to joiner; broadcast player list + ready tally
    """
    if not pid:
        return [OutError(code="NO_PID", message="Missing pid for this connection")], []

    repo = app.state.repo
    settings = app.state.settings

    try:
        name = clean_name(msg.name, min_len=settings.NAME_MIN_LEN, max_len=settings.NAME_MAX_LEN)
    except InvalidInput as e:
        return [OutError(code="INVALID_INPUT", message=str(e))], []

    session = await repo.get_session()
    if session.phase == "GAME_OVER":
        return [OutError(code="GAME_OVER", message="Game is ending, join again in a moment")], []

    if await repo.get_player(pid) is not None:
        return [OutError(code="ALREADY_JOINED", message="You already joined this game")], []

    try:
        await repo.add_player(PlayerStore(pid=pid, name=name, joined_at=now_ts()))
    except SessionFull as e:
        logger.info("join from %s rejected: %s", name, e)
        return [
            OutSessionFull(
                message=f"Il gioco è pieno! Massimo {e.max_players} giocatori consentiti.",
                max_players=e.max_players,
                current_players=e.current_players,
            )
        ], []

    players = await repo.list_players()
    logger.info("player %s joined (%d/%d)", name, len(players), session.max_players)

    snapshot = await build_snapshot(app, viewer_pid=pid)
    return [snapshot], [
        OutPlayerJoined(pid=pid, name=name, players=[p.public() for p in players]),
        await build_ready_status(repo),
    ]


async def handle_snapshot(*, app, pid: Optional[str], msg: InSnapshot) -> Result:
    return [await build_snapshot(app, viewer_pid=pid)], []


async def handle_leave(*, app, pid: Optional[str], msg: InLeave) -> Result:
    if not pid:
        return [OutError(code="NO_PID", message="Missing pid")], []
    return await handle_disconnect(app=app, pid=pid)


async def handle_disconnect(*, app, pid: Optional[str]) -> Result:
    """
    Called by transport when WS disconnects.
    Removes the player; may end the game (1 left mid-round), reset (0 left),
    or complete a pending quorum.
    """
    if not pid:
        return [], []

    repo = app.state.repo
    removed = await repo.remove_player(pid)
    if removed is None:
        return [], []

    players = await repo.list_players()
    logger.info("player %s left (%d remaining)", removed.name, len(players))

    to_room: List[OutgoingEvent] = [
        OutPlayerLeft(pid=pid, players=[p.public() for p in players]),
        await build_ready_status(repo),
    ]
    to_room.extend(await after_player_left(app=app))
    return [], to_room
