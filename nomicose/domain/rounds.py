# nomicose/domain/rounds.py
"""Round lifecycle: LOBBY -> ROUND_ACTIVE -> SCORING -> RESULTS | GAME_OVER -> LOBBY.

Every function here expects the caller to hold ``repo.lock``, except the
timer entry points (``on_round_timeout``, ``on_game_over``) which take it
themselves because they run outside any inbound message.
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, List, Set

from nomicose.domain.common.quorum import all_ready, all_submitted
from nomicose.domain.common.types import CATEGORIES
from nomicose.domain.scoring import final_ranking, score_breakdown
from nomicose.domain.submissions import force_submit_pending
from nomicose.transport.protocols import (
    OutgoingEvent,
    OutGameEnded,
    OutRoundEnded,
    OutRoundStarted,
)
from nomicose.util.timeutil import now_ts

logger = logging.getLogger(__name__)

# strong refs so timer-spawned tasks are not garbage collected mid-flight
_background_tasks: Set[asyncio.Task] = set()


def _spawn(fn: Callable[..., Awaitable[Any]], *args: Any) -> None:
    task = asyncio.ensure_future(fn(*args))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def publish(app, events: List[OutgoingEvent]) -> None:
    """Broadcast events produced outside a client message (timers, admin HTTP)."""
    wsman = getattr(app.state, "wsman", None)
    if wsman is None or not events:
        return
    for e in events:
        await wsman.broadcast(e.model_dump())


# -------------------------
# Start
# -------------------------

async def maybe_start_round(*, app) -> List[OutgoingEvent]:
    """Start the next round if the ready quorum holds in LOBBY or RESULTS."""
    repo = app.state.repo
    settings = app.state.settings

    session = await repo.get_session()
    if session.phase not in ("LOBBY", "RESULTS"):
        return []
    if session.round_no >= session.max_rounds:
        return []

    players = await repo.list_players()
    if not all_ready(players, settings.MIN_PLAYERS):
        return []

    return await start_round(app=app)


async def start_round(*, app) -> List[OutgoingEvent]:
    repo = app.state.repo
    letters = app.state.letters
    ts = now_ts()

    await repo.cancel_round_timer()
    session = await repo.get_session()

    round_no = session.round_no + 1
    letter = letters.draw(session.used_letters)
    duration = float(session.round_duration_sec)

    await repo.update_all_players(answers={}, submitted=False, ready=False)
    await repo.set_session_fields(
        round_no=round_no,
        current_letter=letter,
        phase="ROUND_ACTIVE",
        round_started_at=ts,
        round_ends_at=ts + int(math.ceil(duration)),
        last_round_scores={},
    )
    await _arm_round_timer(app, round_no, duration)

    logger.info("round %d/%d started with letter %s", round_no, session.max_rounds, letter)

    return [
        OutRoundStarted(
            round_no=round_no,
            letter=letter,
            categories=list(CATEGORIES),
            duration_ms=int(duration * 1000),
            ends_at=ts + int(math.ceil(duration)),
            max_rounds=session.max_rounds,
        )
    ]


async def _arm_round_timer(app, round_no: int, delay: float) -> None:
    loop = asyncio.get_running_loop()
    handle = loop.call_later(delay, _spawn, on_round_timeout, app, round_no)
    await app.state.repo.set_session_fields(round_timer=handle)


async def _arm_game_over_timer(app, delay: float) -> None:
    loop = asyncio.get_running_loop()
    handle = loop.call_later(delay, _spawn, on_game_over, app)
    await app.state.repo.set_session_fields(game_over_timer=handle)


# -------------------------
# Close
# -------------------------

async def close_round(*, app, reason: str) -> List[OutgoingEvent]:
    """
    Close-if-open. The phase is swapped away from ROUND_ACTIVE before any
    scoring work, so a second trigger (last submit vs. timer) returns [].
    """
    repo = app.state.repo
    settings = app.state.settings

    session = await repo.get_session()
    if session.phase != "ROUND_ACTIVE":
        logger.info("round %d already closed, ignoring %s", session.round_no, reason)
        return []

    await repo.set_session_fields(phase="SCORING")
    await repo.cancel_round_timer()

    players = await repo.list_players()
    all_answers = {p.pid: {cat: p.answers.get(cat, "") for cat in CATEGORIES} for p in players}
    breakdown = score_breakdown(session.current_letter, all_answers, CATEGORIES)
    round_scores = {pid: sum(per_cat.values()) for pid, per_cat in breakdown.items()}

    await repo.add_round_scores(round_scores)
    await repo.update_all_players(ready=False)

    is_last = session.round_no >= session.max_rounds
    if is_last:
        await repo.set_session_fields(phase="GAME_OVER")
        await _arm_game_over_timer(app, settings.GAME_OVER_DELAY_SEC)
    else:
        await repo.set_session_fields(phase="RESULTS")

    logger.info("round %d closed (%s): %s", session.round_no, reason, round_scores)

    players = await repo.list_players()
    return [
        OutRoundEnded(
            round_no=session.round_no,
            max_rounds=session.max_rounds,
            letter=session.current_letter,
            reason=reason,
            answers=all_answers,
            round_scores=round_scores,
            breakdown=breakdown,
            total_scores=await repo.get_scores(),
            players=[p.public() for p in players],
            is_last_round=is_last,
        )
    ]


async def on_round_timeout(app, round_no: int) -> None:
    """Round timer expiry: force-submit stragglers, then close."""
    repo = app.state.repo
    try:
        async with repo.lock:
            session = await repo.get_session()
            if not session.game_started or session.round_no != round_no:
                logger.info("stale timer for round %d ignored", round_no)
                return
            await repo.set_session_fields(round_timer=None)
            forced = await force_submit_pending(repo=repo)
            if forced:
                logger.info("round %d timed out, forced submission for %s", round_no, forced)
            events = await close_round(app=app, reason="TIMEOUT")
        await publish(app, events)
    except Exception:
        logger.exception("round timeout handler failed (round=%d)", round_no)


# -------------------------
# Game over
# -------------------------

async def finish_game(*, app, reason: str = "COMPLETED") -> List[OutgoingEvent]:
    """Compute the final ranking, then wipe the session back to an empty lobby."""
    repo = app.state.repo

    players = await repo.list_players()
    by_pid = {p.pid: p for p in players}
    scores = await repo.get_scores()
    winners, max_score, is_tie, ranking = final_ranking(scores, {p.pid: p.name for p in players})

    event = OutGameEnded(
        reason=reason,
        winners=[by_pid[pid].public() for pid in winners if pid in by_pid],
        max_score=max_score,
        final_scores=scores,
        players=[p.public() for p in players],
        ranking=ranking,
        is_tie=is_tie,
    )
    logger.info(
        "game ended (%s): winners=%s max=%d tie=%s",
        reason, [by_pid[w].name for w in winners if w in by_pid], max_score, is_tie,
    )

    await repo.reset()
    return [event]


async def on_game_over(app) -> None:
    repo = app.state.repo
    try:
        async with repo.lock:
            session = await repo.get_session()
            if session.phase != "GAME_OVER":
                return
            events = await finish_game(app=app)
        await publish(app, events)
    except Exception:
        logger.exception("game over handler failed")


# -------------------------
# Membership changes
# -------------------------

async def after_player_left(*, app) -> List[OutgoingEvent]:
    """Re-derive quorums after a player is removed."""
    repo = app.state.repo
    settings = app.state.settings

    players = await repo.list_players()
    if not players:
        await repo.reset()
        return []

    session = await repo.get_session()
    if session.phase == "ROUND_ACTIVE":
        if len(players) < settings.MIN_PLAYERS:
            logger.warning("only %d player(s) left mid-round, ending game", len(players))
            return await finish_game(app=app, reason="NOT_ENOUGH_PLAYERS")
        if all_submitted(players, settings.MIN_PLAYERS):
            return await close_round(app=app, reason="ALL_SUBMITTED")
        return []

    return await maybe_start_round(app=app)
