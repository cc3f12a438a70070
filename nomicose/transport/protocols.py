# nomicose/transport/protocols.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator

from nomicose.domain.common.types import Phase
from nomicose.domain.common.validation import sanitize_text


# =========================
# Incoming (Client -> Server)
# =========================

class InBase(BaseModel):
    type: str


# ---- Lifecycle ----

class InJoin(InBase):
    type: Literal["join"] = "join"
    name: str = Field(max_length=64)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        # length bounds come from settings and are checked in handle_join
        return sanitize_text(v, 64)


class InLeave(InBase):
    type: Literal["leave"] = "leave"


class InSnapshot(InBase):
    type: Literal["snapshot"] = "snapshot"


# ---- Lobby / results ----

class InSetReady(InBase):
    type: Literal["set_ready"] = "set_ready"


class InPlayerReady(InBase):
    type: Literal["player_ready"] = "player_ready"


# ---- Round ----

class InSubmitAnswers(InBase):
    type: Literal["submit_answers"] = "submit_answers"
    answers: Dict[str, str] = Field(default_factory=dict)


class InUpdateAnswers(InBase):
    """Autosave while typing; never ends the round."""
    type: Literal["update_answers"] = "update_answers"
    answers: Dict[str, str] = Field(default_factory=dict)


# ---- Admin ----

class ScoreChange(BaseModel):
    old: Optional[int] = None
    new: Optional[int] = None
    difference: Optional[int] = None

    @model_validator(mode="after")
    def _derive_difference(self) -> "ScoreChange":
        if self.difference is None:
            if self.old is None or self.new is None:
                raise ValueError("difference or both old and new are required")
            self.difference = self.new - self.old
        return self


class InAdminScoreUpdate(InBase):
    type: Literal["admin_score_update"] = "admin_score_update"
    # keyed by player id
    changes: Dict[str, ScoreChange]


# Union of all incoming messages you support right now
IncomingMessage = Union[
    InJoin,
    InLeave,
    InSnapshot,
    InSetReady,
    InPlayerReady,
    InSubmitAnswers,
    InUpdateAnswers,
    InAdminScoreUpdate,
]


# =========================
# Outgoing (Server -> Client)
# =========================

class OutBase(BaseModel):
    type: str


class OutHello(OutBase):
    type: Literal["hello"] = "hello"
    pid: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    message: str


class OutSessionFull(OutBase):
    type: Literal["session_full"] = "session_full"
    message: str
    max_players: int
    current_players: int


class OutSessionSnapshot(OutBase):
    type: Literal["session_snapshot"] = "session_snapshot"
    pid: Optional[str] = None
    phase: Phase
    round_no: int
    max_rounds: int
    max_players: int
    game_started: bool
    current_letter: str = ""
    round_ends_at: int = 0
    categories: List[str]
    players: List[Dict[str, Any]]
    scores: Dict[str, int]


class OutPlayerJoined(OutBase):
    type: Literal["player_joined"] = "player_joined"
    pid: str
    name: str
    players: List[Dict[str, Any]]


class OutPlayerLeft(OutBase):
    type: Literal["player_left"] = "player_left"
    pid: str
    players: List[Dict[str, Any]]


class OutPlayerUpdated(OutBase):
    type: Literal["player_updated"] = "player_updated"
    player: Dict[str, Any]


class OutReadyStatus(OutBase):
    type: Literal["ready_status"] = "ready_status"
    ready_players: int
    total_players: int


class OutAnswersAccepted(OutBase):
    type: Literal["answers_accepted"] = "answers_accepted"
    round_no: int
    answers: Dict[str, str]


class OutRoundStarted(OutBase):
    type: Literal["round_started"] = "round_started"
    round_no: int
    letter: str
    categories: List[str]
    duration_ms: int
    ends_at: int
    max_rounds: int


class OutRoundEnded(OutBase):
    type: Literal["round_ended"] = "round_ended"
    round_no: int
    max_rounds: int
    letter: str
    reason: Literal["ALL_SUBMITTED", "TIMEOUT"]
    answers: Dict[str, Dict[str, str]]
    round_scores: Dict[str, int]
    breakdown: Dict[str, Dict[str, int]]
    total_scores: Dict[str, int]
    players: List[Dict[str, Any]]
    is_last_round: bool


class OutGameEnded(OutBase):
    type: Literal["game_ended"] = "game_ended"
    reason: Literal["COMPLETED", "NOT_ENOUGH_PLAYERS", "ADMIN_RESET"]
    winners: List[Dict[str, Any]]
    max_score: int
    final_scores: Dict[str, int]
    players: List[Dict[str, Any]]
    ranking: List[Dict[str, Any]]
    is_tie: bool


class OutScoresUpdated(OutBase):
    type: Literal["scores_updated"] = "scores_updated"
    # keyed by display name
    total_scores: Dict[str, int]
    message: str


OutgoingEvent = Union[
    OutHello,
    OutError,
    OutSessionFull,
    OutSessionSnapshot,
    OutPlayerJoined,
    OutPlayerLeft,
    OutPlayerUpdated,
    OutReadyStatus,
    OutAnswersAccepted,
    OutRoundStarted,
    OutRoundEnded,
    OutGameEnded,
    OutScoresUpdated,
]


# =========================
# Parser helpers
# =========================

# A small map so we can parse by "type" quickly (simple & readable)
_INCOMING_BY_TYPE = {
    "join": InJoin,
    "leave": InLeave,
    "snapshot": InSnapshot,
    "set_ready": InSetReady,
    "player_ready": InPlayerReady,
    "submit_answers": InSubmitAnswers,
    "update_answers": InUpdateAnswers,
    "admin_score_update": InAdminScoreUpdate,
}


def parse_incoming(payload: Dict[str, Any]) -> IncomingMessage:
    """
    Convert raw dict -> validated message model.
    Raises ValidationError (a ValueError) if invalid.
    """
    if not isinstance(payload, dict):
        raise ValueError("Message must be a JSON object")

    t = payload.get("type")
    if not isinstance(t, str):
        raise ValueError("Missing/invalid type")

    cls = _INCOMING_BY_TYPE.get(t)
    if cls is None:
        raise ValueError(f"Unknown message type: {t}")

    return cls.model_validate(payload)
