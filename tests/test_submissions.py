import pytest

from nomicose.domain.common.errors import DuplicateSubmission, RoundNotActive, UnknownPlayer
from nomicose.domain.submissions import autosave_answers, force_submit_pending, submit_answers
from nomicose.store.models import PlayerStore
from nomicose.store.session_store import SessionStore


async def _repo_with_round(*pids):
    repo = SessionStore()
    for pid in pids:
        await repo.add_player(PlayerStore(pid=pid, name=pid.upper() + "x"))
    await repo.set_session_fields(phase="ROUND_ACTIVE", round_no=1, current_letter="M")
    return repo


@pytest.mark.asyncio
async def test_submit_sanitizes_and_reports_quorum():
    repo = await _repo_with_round("a", "b")

    done = await submit_answers(repo=repo, pid="a", answers={"Nome": "  <Mario> ", "Città": "M" * 80, "Bogus": "x"})
    assert done is False

    a = await repo.get_player("a")
    assert a.submitted is True
    assert a.answers["Nome"] == "Mario"
    assert a.answers["Città"] == "M" * 50
    assert a.answers["Animale"] == ""
    assert "Bogus" not in a.answers

    done = await submit_answers(repo=repo, pid="b", answers={})
    assert done is True


@pytest.mark.asyncio
async def test_submit_guards():
    repo = await _repo_with_round("a", "b")

    with pytest.raises(UnknownPlayer):
        await submit_answers(repo=repo, pid="ghost", answers={})

    await submit_answers(repo=repo, pid="a", answers={"Nome": "Marco"})
    with pytest.raises(DuplicateSubmission):
        await submit_answers(repo=repo, pid="a", answers={"Nome": "Matteo"})
    assert (await repo.get_player("a")).answers["Nome"] == "Marco"

    await repo.set_session_fields(phase="RESULTS")
    with pytest.raises(RoundNotActive):
        await submit_answers(repo=repo, pid="b", answers={})


@pytest.mark.asyncio
async def test_autosave_never_submits():
    repo = await _repo_with_round("a", "b")

    assert await autosave_answers(repo=repo, pid="a", answers={"Nome": " Mia "}) is True
    a = await repo.get_player("a")
    assert a.answers["Nome"] == "Mia"
    assert a.submitted is False

    await submit_answers(repo=repo, pid="a", answers={"Nome": "Marta"})
    assert await autosave_answers(repo=repo, pid="a", answers={"Nome": "Mirko"}) is False
    assert (await repo.get_player("a")).answers["Nome"] == "Marta"


@pytest.mark.asyncio
async def test_force_submit_keeps_in_progress_answers():
    repo = await _repo_with_round("a", "b", "c")
    await submit_answers(repo=repo, pid="a", answers={"Nome": "Marco"})
    await autosave_answers(repo=repo, pid="b", answers={"Nome": "Milo"})

    forced = await force_submit_pending(repo=repo)

    assert sorted(forced) == ["b", "c"]
    b = await repo.get_player("b")
    c = await repo.get_player("c")
    assert b.submitted and c.submitted
    assert b.answers["Nome"] == "Milo"
    assert c.answers["Nome"] == ""
