import random

import pytest

from nomicose.domain.letters import LetterPool
from nomicose.settings import Settings
from nomicose.store.session_store import SessionStore


class FakeWSManager:
    def __init__(self):
        self.sent = []

    async def broadcast(self, event):
        self.sent.append(event)

    def types(self):
        return [e.get("type") for e in self.sent]


class FakeApp:
    def __init__(self, settings=None, seed=7):
        settings = settings or Settings()
        repo = SessionStore(
            max_rounds=settings.MAX_ROUNDS,
            max_players=settings.MAX_PLAYERS,
            round_duration_sec=settings.ROUND_DURATION_SEC,
        )
        self.state = type(
            "State",
            (),
            {
                "settings": settings,
                "repo": repo,
                "letters": LetterPool(settings.LETTERS, random.Random(seed)),
                "wsman": FakeWSManager(),
            },
        )()


@pytest.fixture()
def make_app():
    def _make(**overrides):
        return FakeApp(Settings(**overrides))
    return _make


@pytest.fixture()
def app(make_app):
    return make_app()
