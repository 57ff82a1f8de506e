import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from fastapi.responses import Response
from pydantic import ValidationError
from starlette.websockets import WebSocketState
from settlegraph.core.auth import CurrentUser, decode_access_token, get_current_user
from settlegraph.network.model import ViewMode
from settlegraph.network.render import Scene, render_svg
from settlegraph.network.scheduler import Close, FrameUpdate, message_adapter
from settlegraph.schemas.settlement import OptimizationResult
from settlegraph.services.network_service import NetworkService, get_network_service

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=Scene)
async def get_network(
    mode: Optional[ViewMode] = None,
    width: Optional[float] = Query(None, gt=0),
    height: Optional[float] = Query(None, gt=0),
    current_user: CurrentUser = Depends(get_current_user),
    networks: NetworkService = Depends(get_network_service)
):
    """Laid-out who-owes-whom network as drawable shapes"""
    return await networks.scene_for(current_user, width, height, mode)

@router.get("/svg")
async def get_network_svg(
    mode: Optional[ViewMode] = None,
    width: Optional[float] = Query(None, gt=0),
    height: Optional[float] = Query(None, gt=0),
    current_user: CurrentUser = Depends(get_current_user),
    networks: NetworkService = Depends(get_network_service)
):
    """The same network rendered as an SVG document"""
    scene = await networks.scene_for(current_user, width, height, mode)
    return Response(content=render_svg(scene), media_type="image/svg+xml")

@router.post("/optimize", response_model=OptimizationResult)
async def toggle_optimize(
    current_user: CurrentUser = Depends(get_current_user),
    networks: NetworkService = Depends(get_network_service)
):
    """Toggle between raw and optimized edges; returns instructions when entering optimized mode"""
    return await networks.toggle_optimize(current_user)

@router.websocket("/ws")
async def network_socket(
    websocket: WebSocket,
    token: str = Query(...),
    width: Optional[float] = Query(None, gt=0),
    height: Optional[float] = Query(None, gt=0),
    networks: NetworkService = Depends(get_network_service)
):
    """Interactive session: pointer and frame messages in, rendered frames out"""
    try:
        user = decode_access_token(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    session = await networks.open_session(user, width, height)

    async def send_frame(frame: FrameUpdate) -> None:
        await websocket.send_text(frame.model_dump_json())

    async def read_messages() -> None:
        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = message_adapter.validate_json(data)
                except ValidationError:
                    logger.debug("Ignoring malformed network message: %s", data[:200])
                    continue
                await session.submit(message)
        except WebSocketDisconnect:
            logger.debug("Network socket for %s disconnected", user.username)
        finally:
            await session.submit(Close())

    reader = asyncio.create_task(read_messages())
    try:
        await session.run(send_frame)
    finally:
        reader.cancel()
        networks.remember(user.username, session.store)
        if websocket.client_state == WebSocketState.CONNECTED:
            await websocket.close()
