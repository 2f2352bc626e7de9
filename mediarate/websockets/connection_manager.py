import logging
from typing import Dict
from fastapi import WebSocket

from .session import Session

logger = logging.getLogger(__name__)

class ConnectionManager:
    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}
        self.sessions: Dict[str, Session] = {}

    async def connect(self, connection_id: str, websocket: WebSocket, session: Session):
        await websocket.accept()
        self.active_connections[connection_id] = websocket
        self.sessions[connection_id] = session
        logger.info(f"Connection {connection_id} opened")

    def disconnect(self, connection_id: str):
        session = self.sessions.pop(connection_id, None)
        if session:
            session.close()
        if connection_id in self.active_connections:
            del self.active_connections[connection_id]
        logger.info(f"Connection {connection_id} closed")

    async def send_state(self, connection_id: str):
        websocket = self.active_connections.get(connection_id)
        session = self.sessions.get(connection_id)
        if websocket and session:
            await websocket.send_json({
                "action": "state",
                "state": session.snapshot(),
                "notifications": [n.model_dump(mode="json") for n in session.notifier.drain()]
            })

    async def send_personal_message(self, connection_id: str, message: dict):
        if connection_id in self.active_connections:
            await self.active_connections[connection_id].send_json(message)
