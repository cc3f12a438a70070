# nomicose/domain/moderation/handlers.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from nomicose.domain.admin import ADMIN_UPDATE_MESSAGE, apply_score_deltas, totals_by_name
from nomicose.transport.protocols import (
    InAdminScoreUpdate,
    OutgoingEvent,
    OutScoresUpdated,
)

logger = logging.getLogger(__name__)

Result = Tuple[List[OutgoingEvent], List[OutgoingEvent]]


async def handle_admin_score_update(*, app, pid: Optional[str], msg: InAdminScoreUpdate) -> Result:
    repo = app.state.repo

    deltas = {target: int(change.difference or 0) for target, change in msg.changes.items()}
    logger.info("admin score update from %s: %s", pid, deltas)
    await apply_score_deltas(repo=repo, deltas=deltas)

    return [], [OutScoresUpdated(total_scores=await totals_by_name(repo), message=ADMIN_UPDATE_MESSAGE)]
