# nomicose/main.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nomicose.domain.letters import LetterPool
from nomicose.settings import Settings, get_settings
from nomicose.store.session_store import SessionStore
from nomicose.transport.admin import router as admin_router
from nomicose.transport.ws import router as ws_router
from nomicose.transport.ws_manager import WSManager

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME)
    allowed_origins = [o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings

    @app.on_event("startup")
    async def _startup() -> None:
        app.state.repo = SessionStore(
            max_rounds=settings.MAX_ROUNDS,
            max_players=settings.MAX_PLAYERS,
            round_duration_sec=settings.ROUND_DURATION_SEC,
        )
        app.state.letters = LetterPool(settings.LETTERS)
        app.state.wsman = WSManager()
        logger.info(
            "%s ready: %d rounds x %ss, max %d players",
            settings.APP_NAME, settings.MAX_ROUNDS, settings.ROUND_DURATION_SEC, settings.MAX_PLAYERS,
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await app.state.repo.cancel_timers()
        await app.state.wsman.close_all()

    app.include_router(ws_router)
    app.include_router(admin_router)
    return app


app = create_app()
