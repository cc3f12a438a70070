import pytest

from nomicose.domain.common.errors import InvalidInput
from nomicose.domain.common.types import CATEGORIES
from nomicose.domain.common.validation import clean_name, sanitize_answers, sanitize_text


def test_sanitize_text_strips_markup_and_caps_length():
    assert sanitize_text('  <Anna>  ', 50) == "Anna"
    assert sanitize_text("Rock & \"Roll\"", 50) == "Rock  Roll"
    assert sanitize_text("x" * 80, 50) == "x" * 50
    assert sanitize_text(None, 50) == ""
    assert sanitize_text(42, 50) == ""


def test_sanitize_answers_keeps_known_categories_in_order():
    out = sanitize_answers({"Nome": " Anna ", "Bogus": "x"}, CATEGORIES)
    assert list(out) == list(CATEGORIES)
    assert out["Nome"] == "Anna"
    assert out["Animale"] == ""
    assert "Bogus" not in out


def test_clean_name_bounds():
    assert clean_name("  Mario  ") == "Mario"
    with pytest.raises(InvalidInput):
        clean_name(" M ")
    with pytest.raises(InvalidInput):
        clean_name("M" * 21)
    with pytest.raises(InvalidInput):
        clean_name("<>")
    # InvalidInput doubles as a ValueError for pydantic validators
    with pytest.raises(ValueError):
        clean_name(None)
