# cyclops_gateway/Core/delta_ws.py

"""
Delta WebSocket Manager

Telemetry bus for the gateway: every update batch produced by the UDP
listener or the poller is broadcast as a delta to the clients connected on
`/deltas`.

Usage:
    from cyclops_gateway.Core.delta_ws import publish_delta

    publish_delta({
        "context": "vessels.self",
        "updates": [{"source": {"label": "Cyclops Gateway"}, ...}]
    })
"""

from typing import Dict, Any
from .wsBase import WebSocketManager
from fastapi import WebSocket


class DeltaWebSocketManager(WebSocketManager):
    """
    Specialized WebSocket manager for delta subscribers.
    Subscribers only receive; incoming messages are logged.
    """

    name = "DELTA-WS"

    async def handle_message(self, ws: WebSocket, message: str):
        print(f"[DELTA-WS] Received message: {message}")


# ==========================================================
# Global Singleton Instance
# ==========================================================
delta_ws_manager = DeltaWebSocketManager()


def publish_delta(delta: Dict[str, Any]):
    """
    Bus entry point used by UpdateEmitter.

    Deltas are dropped when no subscriber is connected. Raises RuntimeError
    when subscribers exist but the event loop is gone, so the emitter can
    report it.
    """
    if not delta_ws_manager.send_from_thread(delta):
        print(f"[DELTA-WS] No subscribers, delta dropped ({len(delta['updates'][0]['values'])} values)")
