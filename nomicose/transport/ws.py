# nomicose/transport/ws.py
from __future__ import annotations

import ipaddress
import json
import logging
import uuid
from urllib.parse import urlparse

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from nomicose.transport.dispatcher import dispatch_disconnect, dispatch_message
from nomicose.transport.protocols import OutError, OutHello

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_private_ip(host: str) -> bool:
    """Return True if host is a private IP (192.168.x.x, 10.x.x.x, 172.16-31.x.x)."""
    try:
        ip = ipaddress.ip_address(host)
        return ip.is_private
    except ValueError:
        return False


async def _check_origin_or_close(websocket: WebSocket) -> bool:
    settings = websocket.app.state.settings
    allowed = {o.strip() for o in settings.WS_ALLOWED_ORIGINS.split(",") if o.strip()}

    origin = websocket.headers.get("origin")
    if origin is None or origin in allowed:
        return True
    if settings.WS_ALLOW_LAN_ORIGINS and _is_private_ip(urlparse(origin).hostname or ""):
        return True
    logger.info("websocket from origin %s refused", origin)
    await websocket.close(code=1008)
    return False


async def _deliver(websocket: WebSocket, wsman, to_sender: list, to_all: list) -> None:
    # unicast first so the requester sees its own reply before the broadcast
    for e in to_sender:
        await websocket.send_json(e)
    for e in to_all:
        await wsman.broadcast(e)


@router.websocket("/ws")
async def ws_session(websocket: WebSocket):
    if not await _check_origin_or_close(websocket):
        return

    await websocket.accept()

    app = websocket.app
    pid = uuid.uuid4().hex[:10]
    wsman = app.state.wsman
    await wsman.add(pid, websocket)
    await websocket.send_json(OutHello(pid=pid).model_dump())
    logger.debug("connection %s opened", pid)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            text = message.get("text")
            if text is None:
                await websocket.send_json(
                    OutError(code="BAD_MESSAGE", message="Only text frames are supported").model_dump()
                )
                continue

            try:
                raw = json.loads(text)
            except json.JSONDecodeError:
                await websocket.send_json(OutError(code="BAD_MESSAGE", message="Invalid JSON").model_dump())
                continue

            to_sender, to_all = await dispatch_message(app=app, pid=pid, raw=raw)
            await _deliver(websocket, wsman, to_sender, to_all)

    except WebSocketDisconnect:
        logger.debug("connection %s closed", pid)

    finally:
        await wsman.remove(pid)
        _, to_all = await dispatch_disconnect(app=app, pid=pid)
        for e in to_all:
            await wsman.broadcast(e)
