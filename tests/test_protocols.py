import pytest
from pydantic import ValidationError

from nomicose.transport.protocols import parse_incoming


def test_parse_incoming_join_cleans_name():
    msg = parse_incoming({"type": "join", "name": "  <Giulia> "})
    assert msg.type == "join"
    assert msg.name == "Giulia"


def test_parse_incoming_join_leaves_length_bounds_to_settings():
    # min/max name length is configurable, so the schema only caps raw size
    assert parse_incoming({"type": "join", "name": "G"}).name == "G"
    assert parse_incoming({"type": "join", "name": "G" * 30}).name == "G" * 30
    with pytest.raises(ValidationError):
        parse_incoming({"type": "join", "name": "G" * 65})
    with pytest.raises(ValidationError):
        parse_incoming({"type": "join", "name": 12})


def test_parse_incoming_submit_answers():
    msg = parse_incoming({"type": "submit_answers", "answers": {"Nome": "Anna"}})
    assert msg.answers == {"Nome": "Anna"}

    with pytest.raises(ValidationError):
        parse_incoming({"type": "submit_answers", "answers": {"Nome": 12}})


def test_parse_incoming_admin_change_derives_difference():
    msg = parse_incoming(
        {
            "type": "admin_score_update",
            "changes": {
                "p1": {"old": 20, "new": 15},
                "p2": {"difference": 5},
            },
        }
    )
    assert msg.changes["p1"].difference == -5
    assert msg.changes["p2"].difference == 5

    with pytest.raises(ValidationError):
        parse_incoming({"type": "admin_score_update", "changes": {"p1": {"old": 3}}})


def test_parse_incoming_unknown_type():
    with pytest.raises(ValueError):
        parse_incoming({"type": "does_not_exist"})
    with pytest.raises(ValueError):
        parse_incoming({"name": "no type"})
