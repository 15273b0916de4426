"""
WebSocket Base Manager Module
==============================

Thread-safe foundation for the gateway's WebSocket endpoints (`/deltas` and
`/logs`). Background threads (UDP listener, gateway poller) hand messages to
a manager with send_from_thread(), which schedules the broadcast on FastAPI's
main event loop.

Architecture:
------------
- Thread-Safe Operations: All client list modifications protected by a lock
- Lifecycle Management: Registration on connect, cleanup on disconnect
- Broadcasting: One JSON message to every connected client
- Event Loop Integration: Cross-thread scheduling via run_coroutine_threadsafe

Usage Example:
-------------
    manager = DeltaWebSocketManager()
    manager.set_main_loop(asyncio.get_running_loop())

    # From a background thread
    manager.send_from_thread({"context": "vessels.self", "updates": [...]})
"""

from fastapi import WebSocket
import asyncio
from typing import List, Optional, Dict, Any
import json
import threading


class WebSocketManager:
    """
    Base WebSocket manager for handling multiple concurrent client connections.

    Attributes:
        clients (List[WebSocket]): Currently active WebSocket connections
        main_loop (Optional[asyncio.AbstractEventLoop]): FastAPI's main event loop
        _lock (threading.Lock): Protects self.clients

    Lifecycle:
        1. Instantiate manager
        2. Call set_main_loop() during application startup
        3. Call register() when client connects
        4. Call broadcast() / send_from_thread() to send messages
        5. Call unregister() when client disconnects (automatic on error)
    """

    name = "WSBase"

    def __init__(self):
        self.clients: List[WebSocket] = []
        self.main_loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    def set_main_loop(self, loop: Optional[asyncio.AbstractEventLoop]):
        """
        Register FastAPI's main event loop. Must be called in the lifespan
        handler before background threads start sending.
        """
        self.main_loop = loop

    async def register(self, ws: WebSocket):
        """
        Accept and register a new WebSocket client connection.

        The client is added BEFORE accept() so no message is lost during
        the handshake. On handshake failure the client is removed again.
        """
        with self._lock:
            if ws not in self.clients:
                self.clients.append(ws)

        try:
            await ws.accept()
            print(f"[{self.name}] Client registered. Total clients: {len(self.clients)}")
        except Exception:
            self.unregister(ws)
            raise

    def unregister(self, ws: WebSocket):
        """Idempotent removal; does NOT close the socket."""
        with self._lock:
            if ws in self.clients:
                self.clients.remove(ws)
                print(f"[{self.name}] Client unregistered. Total clients: {len(self.clients)}")

    @property
    def has_clients(self) -> bool:
        with self._lock:
            return len(self.clients) > 0

    async def broadcast(self, message: Dict[str, Any]):
        """
        Broadcast a message to all connected clients.

        The client list is copied under the lock and the lock is released
        before any I/O. Clients that fail to receive are unregistered.
        """
        to_remove = []

        with self._lock:
            current_clients = list(self.clients)

        payload = json.dumps(message)
        for ws in current_clients:
            try:
                await ws.send_text(payload)
            except Exception:
                to_remove.append(ws)

        for ws in to_remove:
            self.unregister(ws)

    def send_from_thread(self, message: Dict[str, Any]) -> bool:
        """
        Thread-safe broadcast from non-async contexts.

        Returns:
            bool: True if the broadcast was scheduled, False if there were no
            clients to send to

        Raises:
            RuntimeError: If clients are connected but the main loop is not
            set or no longer running
        """
        if not self.has_clients:
            return False

        if self.main_loop is None or self.main_loop.is_closed():
            raise RuntimeError(f"[{self.name}] main event loop is not available")

        asyncio.run_coroutine_threadsafe(self.broadcast(message), self.main_loop)
        return True

    async def handle_message(self, ws: WebSocket, message: str):
        """
        Handle incoming messages from WebSocket clients. Subclasses override;
        the default only logs the message.
        """
        print(f"[{self.name}] Received message from client: {message}")
