# nomicose/domain/round/handlers.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from nomicose.domain.common.errors import DuplicateSubmission, RoundNotActive, UnknownPlayer
from nomicose.domain.rounds import close_round
from nomicose.domain.submissions import autosave_answers, submit_answers
from nomicose.transport.protocols import (
    InSubmitAnswers,
    InUpdateAnswers,
    OutAnswersAccepted,
    OutError,
    OutgoingEvent,
    OutPlayerUpdated,
)

logger = logging.getLogger(__name__)

Result = Tuple[List[OutgoingEvent], List[OutgoingEvent]]


async def handle_submit_answers(*, app, pid: Optional[str], msg: InSubmitAnswers) -> Result:
    if not pid:
        return [OutError(code="NO_PID", message="Missing pid")], []

    repo = app.state.repo
    settings = app.state.settings

    try:
        complete = await submit_answers(
            repo=repo,
            pid=pid,
            answers=msg.answers,
            max_len=settings.ANSWER_MAX_LEN,
            min_players=settings.MIN_PLAYERS,
        )
    except UnknownPlayer as e:
        logger.warning("submit ignored: %s", e)
        return [], []
    except (RoundNotActive, DuplicateSubmission) as e:
        logger.info("submit from %s ignored: %s", pid, e)
        return [], []

    player = await repo.get_player(pid)
    session = await repo.get_session()

    to_sender: List[OutgoingEvent] = [OutAnswersAccepted(round_no=session.round_no, answers=dict(player.answers))]
    to_room: List[OutgoingEvent] = [OutPlayerUpdated(player=player.public())]

    if complete:
        logger.info("all players submitted round %d", session.round_no)
        to_room.extend(await close_round(app=app, reason="ALL_SUBMITTED"))

    return to_sender, to_room


async def handle_update_answers(*, app, pid: Optional[str], msg: InUpdateAnswers) -> Result:
    """Autosave: quiet, no broadcast, no round-close side effect."""
    if not pid:
        return [], []

    try:
        await autosave_answers(
            repo=app.state.repo,
            pid=pid,
            answers=msg.answers,
            max_len=app.state.settings.ANSWER_MAX_LEN,
        )
    except UnknownPlayer as e:
        logger.warning("autosave ignored: %s", e)
    return [], []
