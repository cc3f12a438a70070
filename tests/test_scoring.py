import itertools

from nomicose.domain.common.types import CATEGORIES
from nomicose.domain.scoring import final_ranking, score_breakdown, score_round


def test_shared_answers_score_five_unique_scores_ten():
    answers = {
        "p1": {"Animale": "Gatto"},
        "p2": {"Animale": "  gatto "},
        "p3": {"Animale": "Giraffa"},
    }
    breakdown = score_breakdown("G", answers)
    assert breakdown["p1"]["Animale"] == 5
    assert breakdown["p2"]["Animale"] == 5
    assert breakdown["p3"]["Animale"] == 10
    assert score_round("G", answers) == {"p1": 5, "p2": 5, "p3": 10}


def test_letter_check_is_case_insensitive():
    scores = score_round("C", {"p1": {"Cosa": "casa"}, "p2": {"Cosa": "Banana"}})
    assert scores == {"p1": 10, "p2": 0}


def test_empty_and_missing_answers_score_zero():
    scores = score_round("M", {"p1": {"Nome": "", "Città": "   "}, "p2": {}})
    assert scores == {"p1": 0, "p2": 0}


def test_wrong_letter_answers_do_not_count_as_shared():
    # both wrong: neither scores, and they do not affect the eligible one
    answers = {
        "p1": {"Nome": "Banana"},
        "p2": {"Nome": "banana"},
        "p3": {"Nome": "Carlo"},
    }
    assert score_round("C", answers) == {"p1": 0, "p2": 0, "p3": 10}


def test_all_categories_unique_gives_full_round():
    answers = {
        "p1": {cat: f"R{cat}" for cat in CATEGORIES},
        "p2": {cat: "" for cat in CATEGORIES},
    }
    assert score_round("R", answers) == {"p1": 70, "p2": 0}


def test_scores_do_not_depend_on_submission_order():
    answers = {
        "a": {"Nome": "Paolo", "Città": "Parma", "Cosa": "penna"},
        "b": {"Nome": "paolo", "Città": "Pisa", "Cosa": "Penna"},
        "c": {"Nome": "Piero", "Città": "parma ", "Cosa": "pane"},
    }
    expected = score_round("P", answers)
    for order in itertools.permutations(answers):
        reordered = {pid: answers[pid] for pid in order}
        assert score_round("P", reordered) == expected


def test_final_ranking_tie_at_max():
    winners, max_score, is_tie, ranking = final_ranking(
        {"a": 30, "b": 10, "c": 30},
        {"a": "Anna", "b": "Bruno", "c": "Carla"},
    )
    assert sorted(winners) == ["a", "c"]
    assert max_score == 30
    assert is_tie is True
    assert [r["position"] for r in ranking] == [1, 1, 3]
    assert ranking[-1] == {"pid": "b", "name": "Bruno", "score": 10, "position": 3}


def test_final_ranking_single_winner_and_empty():
    winners, max_score, is_tie, _ = final_ranking({"a": 5, "b": 15}, {})
    assert winners == ["b"]
    assert max_score == 15
    assert is_tie is False

    assert final_ranking({}, {}) == ([], 0, False, [])
