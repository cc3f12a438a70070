# nomicose/domain/scoring.py
"""Uniqueness scoring and end-of-game ranking.

Per category: an empty answer or one not starting with the round letter
scores 0. Eligible answers are grouped case-insensitively after trimming;
an answer held by one player scores UNIQUE_POINTS, a shared one scores
SHARED_POINTS for every holder.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from nomicose.domain.common.types import CATEGORIES

UNIQUE_POINTS = 10
SHARED_POINTS = 5


def _norm(s: Optional[str]) -> str:
    return (s or "").strip().casefold()


def _eligible(normalized: str, letter: str) -> bool:
    return bool(normalized) and normalized[0].upper() == letter.upper()


def score_breakdown(
    letter: str,
    all_answers: Mapping[str, Mapping[str, str]],
    categories: Iterable[str] = CATEGORIES,
) -> Dict[str, Dict[str, int]]:
    """pid -> category -> points."""
    categories = list(categories)
    out: Dict[str, Dict[str, int]] = {pid: {} for pid in all_answers}

    for cat in categories:
        normalized = {pid: _norm((answers or {}).get(cat)) for pid, answers in all_answers.items()}
        counts = Counter(v for v in normalized.values() if _eligible(v, letter))

        for pid, value in normalized.items():
            if not _eligible(value, letter):
                out[pid][cat] = 0
            elif counts[value] == 1:
                out[pid][cat] = UNIQUE_POINTS
            else:
                out[pid][cat] = SHARED_POINTS

    return out


def score_round(
    letter: str,
    all_answers: Mapping[str, Mapping[str, str]],
    categories: Iterable[str] = CATEGORIES,
) -> Dict[str, int]:
    """pid -> round points (sum over categories)."""
    breakdown = score_breakdown(letter, all_answers, categories)
    return {pid: sum(per_cat.values()) for pid, per_cat in breakdown.items()}


def final_ranking(
    scores: Mapping[str, int],
    names: Mapping[str, str],
) -> Tuple[List[str], int, bool, List[dict]]:
    """
    Returns (winner_pids, max_score, is_tie, ranking).
    Ranking uses competition positions: 1, 1, 3, ...
    """
    if not scores:
        return [], 0, False, []

    max_score = max(scores.values())
    winners = [pid for pid, s in scores.items() if s == max_score]

    ordered = sorted(scores.items(), key=lambda kv: -kv[1])
    ranking: List[dict] = []
    prev_score = None
    position = 0
    for idx, (pid, s) in enumerate(ordered, start=1):
        if s != prev_score:
            position = idx
            prev_score = s
        ranking.append({"pid": pid, "name": names.get(pid, ""), "score": s, "position": position})

    return winners, max_score, len(winners) > 1, ranking
