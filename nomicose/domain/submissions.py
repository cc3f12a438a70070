# nomicose/domain/submissions.py
from __future__ import annotations

import logging
from typing import Any, Dict

from nomicose.domain.common.errors import DuplicateSubmission, RoundNotActive
from nomicose.domain.common.quorum import all_submitted
from nomicose.domain.common.types import CATEGORIES
from nomicose.domain.common.validation import sanitize_answers

logger = logging.getLogger(__name__)


async def submit_answers(
    *,
    repo,
    pid: str,
    answers: Dict[str, Any],
    max_len: int = 50,
    min_players: int = 2,
) -> bool:
    """
    Lock in a player's answers for the current round.

    Raises UnknownPlayer, RoundNotActive or DuplicateSubmission; callers
    log those and carry on.
    Returns True when this submission completes the all-submitted quorum.
    """
    player = await repo.require_player(pid)
    session = await repo.get_session()
    if not session.game_started:
        raise RoundNotActive(f"No round in progress (phase={session.phase})")
    if player.submitted:
        raise DuplicateSubmission(f"{player.name} already submitted round {session.round_no}")

    clean = sanitize_answers(answers, CATEGORIES, max_len)
    await repo.update_player_fields(pid, answers=clean, submitted=True)
    logger.info("round %s: %s submitted", session.round_no, player.name)

    players = await repo.list_players()
    return all_submitted(players, min_players)


async def autosave_answers(
    *,
    repo,
    pid: str,
    answers: Dict[str, Any],
    max_len: int = 50,
) -> bool:
    """
    Best-effort background sync of in-progress answers.
    Never marks the player submitted and never ends the round.
    Returns whether the answers were stored.
    """
    player = await repo.require_player(pid)
    session = await repo.get_session()
    if not session.game_started or player.submitted:
        logger.debug("autosave from %s ignored (phase=%s submitted=%s)", pid, session.phase, player.submitted)
        return False

    clean = sanitize_answers(answers, CATEGORIES, max_len)
    await repo.update_player_fields(pid, answers=clean)
    return True


async def force_submit_pending(*, repo) -> list:
    """Timer expiry: mark every unsubmitted player submitted with what they hold."""
    forced = []
    for p in await repo.list_players():
        if not p.submitted:
            held = {cat: p.answers.get(cat, "") for cat in CATEGORIES}
            await repo.update_player_fields(p.pid, answers=held, submitted=True)
            forced.append(p.pid)
    return forced
