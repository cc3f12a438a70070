# nomicose/transport/ws_manager.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict

from fastapi import WebSocket

logger = logging.getLogger(__name__)


@dataclass
class Conn:
    pid: str
    ws: WebSocket


class WSManager:
    """
    In-memory connection registry: pid -> websocket.
    Transport-only: no session state, no game rules.
    """
    def __init__(self) -> None:
        self._conns: Dict[str, Conn] = {}
        self._lock = asyncio.Lock()

    async def add(self, pid: str, ws: WebSocket) -> None:
        async with self._lock:
            self._conns[pid] = Conn(pid=pid, ws=ws)

    async def remove(self, pid: str) -> None:
        async with self._lock:
            self._conns.pop(pid, None)

    async def broadcast(self, event: dict) -> None:
        # copy conns under lock, send outside lock
        async with self._lock:
            conns = list(self._conns.values())

        for c in conns:
            try:
                await c.ws.send_json(event)
            except Exception:
                # dead socket; ws.py cleans up on disconnect
                logger.debug("broadcast to %s failed", c.pid, exc_info=True)

    async def close_all(self, code: int = 1001) -> None:
        async with self._lock:
            conns = list(self._conns.values())
            self._conns.clear()
        for c in conns:
            try:
                await c.ws.close(code=code)
            except Exception:
                logger.debug("close of %s failed", c.pid, exc_info=True)
