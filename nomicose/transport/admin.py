# nomicose/transport/admin.py
from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel

from nomicose.domain.admin import ADMIN_UPDATE_MESSAGE, apply_score_deltas, totals_by_name
from nomicose.domain.lifecycle.handlers import build_snapshot
from nomicose.domain.rounds import finish_game, publish
from nomicose.transport.protocols import OutScoresUpdated, ScoreChange

router = APIRouter(prefix="/admin", tags=["admin"])


class ScoresIn(BaseModel):
    # keyed by player id
    changes: Dict[str, ScoreChange]


@router.get("/session")
async def get_session(request: Request):
    """
    Current public session view plus last round's scores (admin reference).
    """
    repo = request.app.state.repo
    async with repo.lock:
        snap = await build_snapshot(request.app)
        session = await repo.get_session()
        last_round_scores = dict(session.last_round_scores)
    return {**snap.model_dump(), "last_round_scores": last_round_scores}


@router.post("/scores")
async def update_scores(body: ScoresIn, request: Request):
    """
    Manual score override; same semantics as the admin_score_update event.
    """
    repo = request.app.state.repo
    deltas = {pid: int(change.difference or 0) for pid, change in body.changes.items()}
    async with repo.lock:
        applied = await apply_score_deltas(repo=repo, deltas=deltas)
        totals = await totals_by_name(repo)

    await publish(request.app, [OutScoresUpdated(total_scores=totals, message=ADMIN_UPDATE_MESSAGE)])
    return {"ok": True, "applied": applied, "total_scores": totals}


@router.post("/reset")
async def reset_session(request: Request):
    """
    Force the game to end and wipe the session back to an empty lobby.
    """
    repo = request.app.state.repo
    async with repo.lock:
        events = await finish_game(app=request.app, reason="ADMIN_RESET")

    await publish(request.app, events)
    return {"ok": True}
