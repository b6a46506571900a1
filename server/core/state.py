# server/core/state.py

import logging
from threading import Lock
from starlette.websockets import WebSocket, WebSocketState


logger = logging.getLogger(__name__)


def is_ready(connection: WebSocket) -> bool:
    return (
        connection.client_state == WebSocketState.CONNECTED
        and connection.application_state == WebSocketState.CONNECTED
    )


class ViewerRegistry:
    """
    Process-local set of live viewer connections.
    Membership changes are serialized by a lock and broadcasts iterate over a snapshot.
    """

    def __init__(self):
        self._connections = set()
        self._lock = Lock()

    def register(self, connection: WebSocket):
        with self._lock:
            self._connections.add(connection)
            count = len(self._connections)
        logger.info("Viewer connected (%s total)", count)

    def unregister(self, connection: WebSocket):
        with self._lock:
            self._connections.discard(connection)
            count = len(self._connections)
        logger.info("Viewer disconnected (%s total)", count)

    def snapshot(self) -> list:
        with self._lock:
            return list(self._connections)

    def __len__(self):
        with self._lock:
            return len(self._connections)

    def __contains__(self, connection):
        with self._lock:
            return connection in self._connections

    async def send(self, connection: WebSocket, message: dict) -> bool:
        if not is_ready(connection):
            return False
        try:
            await connection.send_json(message)
            return True
        except Exception as e:
            logger.debug("Dropping viewer after failed send: %s", e)
            self.unregister(connection)
            return False

    async def broadcast(self, message: dict) -> int:
        """
        Sends the message to every ready connection and returns how many received it.
        """
        delivered = 0
        for connection in self.snapshot():
            if await self.send(connection, message):
                delivered += 1
        return delivered
