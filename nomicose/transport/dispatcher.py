# nomicose/transport/dispatcher.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from nomicose.transport.protocols import (
    parse_incoming,
    OutError,
    OutgoingEvent,
    InJoin,
    InLeave,
    InSnapshot,
    InSetReady,
    InPlayerReady,
    InSubmitAnswers,
    InUpdateAnswers,
    InAdminScoreUpdate,
)
from nomicose.domain.lifecycle.handlers import (
    handle_join,
    handle_leave,
    handle_snapshot,
    handle_disconnect,
)
from nomicose.domain.lobby.handlers import handle_set_ready, handle_player_ready
from nomicose.domain.round.handlers import handle_submit_answers, handle_update_answers
from nomicose.domain.moderation.handlers import handle_admin_score_update

logger = logging.getLogger(__name__)

DispatchResult = Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]
# (to_sender_events, to_all_events), each event is JSON dict


def _validation_message(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return str(e)
    msg = str(errors[0].get("msg", ""))
    # "Value error, difference or ..." -> "difference or ..."
    return msg.split(", ", 1)[1] if msg.startswith("Value error, ") else msg


async def dispatch_message(
    *,
    app,
    pid: Optional[str],
    raw: Dict[str, Any],
) -> DispatchResult:
    """
    Transport layer calls this.
    - Parses + validates raw JSON
    - Routes to the correct domain handler under the session lock
    - Returns (to_sender, to_all) events as JSON dicts

    NOTE: This file contains NO game rules.
    """
    try:
        msg = parse_incoming(raw)
    except ValidationError as e:
        err = OutError(code="BAD_MESSAGE", message=_validation_message(e)).model_dump()
        return [err], []
    except ValueError as e:
        err = OutError(code="BAD_MESSAGE", message=str(e)).model_dump()
        return [err], []

    repo = app.state.repo
    try:
        async with repo.lock:
            to_sender, to_room = await _route(app=app, pid=pid, msg=msg)
    except Exception:
        logger.exception("unhandled error in handler (type=%s pid=%s)", msg.type, pid)
        err = OutError(code="INTERNAL", message="Internal server error").model_dump()
        return [err], []

    return _dump(to_sender), _dump(to_room)


async def dispatch_disconnect(*, app, pid: Optional[str]) -> DispatchResult:
    repo = app.state.repo
    try:
        async with repo.lock:
            to_sender, to_room = await handle_disconnect(app=app, pid=pid)
    except Exception:
        logger.exception("unhandled error in disconnect (pid=%s)", pid)
        return [], []
    return _dump(to_sender), _dump(to_room)


async def _route(*, app, pid: Optional[str], msg) -> Tuple[List[OutgoingEvent], List[OutgoingEvent]]:
    # ---- Lifecycle ----
    if isinstance(msg, InJoin):
        return await handle_join(app=app, pid=pid, msg=msg)

    if isinstance(msg, InLeave):
        return await handle_leave(app=app, pid=pid, msg=msg)

    if isinstance(msg, InSnapshot):
        return await handle_snapshot(app=app, pid=pid, msg=msg)

    # ---- Lobby / results ----
    if isinstance(msg, InSetReady):
        return await handle_set_ready(app=app, pid=pid, msg=msg)

    if isinstance(msg, InPlayerReady):
        return await handle_player_ready(app=app, pid=pid, msg=msg)

    # ---- Round ----
    if isinstance(msg, InSubmitAnswers):
        return await handle_submit_answers(app=app, pid=pid, msg=msg)

    if isinstance(msg, InUpdateAnswers):
        return await handle_update_answers(app=app, pid=pid, msg=msg)

    # ---- Admin ----
    if isinstance(msg, InAdminScoreUpdate):
        return await handle_admin_score_update(app=app, pid=pid, msg=msg)

    # If protocol exists but we didn't route it yet:
    return [OutError(code="NOT_IMPLEMENTED", message=f"Handler not implemented for type={msg.type}")], []


def _dump(events: List[OutgoingEvent]) -> List[Dict[str, Any]]:
    """
    Convert pydantic events -> JSON dicts.
    """
    return [e.model_dump() for e in events]
