# nomicose/__main__.py
from __future__ import annotations

import uvicorn

from nomicose.main import create_app
from nomicose.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
