import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..core.auth import AuthSession
from ..core.exceptions import AuthError, NotFoundError
from ..dependencies import get_auth_session, get_media_service, get_rating_service
from ..media.service import MediaService
from ..ratings.service import RatingService
from .connection_manager import ConnectionManager
from .session import Session, UnknownAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["websockets"])

manager = ConnectionManager()

@router.websocket("/session")
async def session_endpoint(
    websocket: WebSocket,
    token: Optional[str] = None,
    auth: AuthSession = Depends(get_auth_session),
    media_service: MediaService = Depends(get_media_service),
    rating_service: RatingService = Depends(get_rating_service)
):
    connection_id = str(uuid.uuid4())
    session = Session(auth, media_service, rating_service)
    await manager.connect(connection_id, websocket, session)

    try:
        if token:
            try:
                await session.handle("sign_in", {"token": token})
            except AuthError as e:
                await manager.send_personal_message(connection_id, {"action": "error", "detail": str(e)})
        await manager.send_state(connection_id)

        while True:
            try:
                data = await websocket.receive_json()
            except (KeyError, ValueError) as e:
                await manager.send_personal_message(connection_id, {"action": "error", "detail": f"Malformed message: {str(e)}"})
                continue
            if not isinstance(data, dict):
                await manager.send_personal_message(connection_id, {"action": "error", "detail": "Malformed message: expected a JSON object"})
                continue

            action = data.get("action")
            logger.info(f"Received {action} on connection {connection_id}")

            try:
                await session.handle(action, data)
            except AuthError as e:
                await manager.send_personal_message(connection_id, {"action": "error", "detail": str(e)})
            except NotFoundError as e:
                await manager.send_personal_message(connection_id, {"action": "error", "detail": str(e)})
            except UnknownAction:
                await manager.send_personal_message(connection_id, {"action": "error", "detail": f"Unknown action: {action}"})
                continue
            except KeyError as e:
                await manager.send_personal_message(connection_id, {"action": "error", "detail": f"Missing field: {e.args[0]}"})
                continue
            except (TypeError, ValueError) as e:
                await manager.send_personal_message(connection_id, {"action": "error", "detail": f"Malformed message: {str(e)}"})
                continue

            await manager.send_state(connection_id)

    except WebSocketDisconnect:
        logger.info(f"Connection {connection_id} disconnected by client")
    finally:
        manager.disconnect(connection_id)
