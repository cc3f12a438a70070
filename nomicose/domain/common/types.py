# nomicose/domain/common/types.py
from __future__ import annotations

from typing import Dict, Literal, Tuple

Phase = Literal["LOBBY", "ROUND_ACTIVE", "SCORING", "RESULTS", "GAME_OVER"]

# Fixed for the whole session; every round asks the same categories in this order.
CATEGORIES: Tuple[str, ...] = (
    "Nome",
    "Cognome",
    "Città",
    "Animale",
    "Cosa",
    "Mestiere",
    "Personaggi Televisivi",
)

Answers = Dict[str, str]
