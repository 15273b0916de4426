"""
Log WebSocket Management Module
================================

Real-time log streaming over the `/logs` WebSocket. Ingestion warnings,
decode/poll failures and gateway status changes are broadcast to every
connected operator client.

Message Format:
--------------
    {
        "msg_type": "log" | "error" | "warning" | "status",
        "message": "The log message content",
        "timestamp": "2026-10-19T10:30:00Z"
    }

Usage Example:
-------------
    from cyclops_gateway.Core.log_ws import log_from_thread

    log_from_thread("[UDP] Listening on 0.0.0.0:50000", "log")
    log_from_thread("[POLL] Fetch error: timed out", "error")

Thread Safety:
-------------
log_from_thread() may be called from any thread; it never raises, so a
broken log channel cannot stop the UDP listener or the poller.
"""

from typing import Dict, Any
from fastapi import WebSocket
from datetime import datetime, timezone
from .wsBase import WebSocketManager


def log_from_thread(message: str, msg_type: str = "log"):
    """
    Thread-safe entry point for broadcasting log messages.

    Args:
        message: The log message content to broadcast
        msg_type: "log" (default), "error", "warning" or "status"

    Behavior:
        - If clients are connected: Message is scheduled for broadcast
        - If no clients connected: Message is printed to console only
    """
    if not log_ws_manager.has_clients:
        print(f"[LOG-BROADCAST] No log clients connected. Message: {message}")
        return

    payload: Dict[str, Any] = {
        "msg_type": msg_type,
        "message": str(message),
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
    }
    try:
        log_ws_manager.send_from_thread(payload)
    except RuntimeError as e:
        print(f"[LOG-BROADCAST] Could not broadcast log message ({e}): {message}")


class LogWebSocketManager(WebSocketManager):
    """
    Specialized WebSocket manager for real-time log streaming.
    Incoming client messages are only logged.
    """

    name = "LOG-WS"

    async def handle_message(self, ws: WebSocket, message: str):
        print(f"[LOG-WS] Received message from client: {message}")


# ============================================================
# GLOBAL LOG WEBSOCKET MANAGER INSTANCE
# ============================================================
log_ws_manager = LogWebSocketManager()
