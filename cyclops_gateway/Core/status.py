# cyclops_gateway/Core/status.py

"""
Gateway Status Indicator

Operator-facing status of the gateway service: the last status message
("Startup", "Listening on 0.0.0.0:50000", ...) and the last error reported
by either ingestion channel. Every change is printed and streamed over the
`/logs` WebSocket; the current state is served at GET /gateway/status.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from . import log_ws


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


class GatewayStatus:
    def __init__(self):
        self._lock = threading.Lock()
        self.status: Optional[str] = None
        self.status_at: Optional[str] = None
        self.error: Optional[str] = None
        self.error_at: Optional[str] = None
        self.error_count = 0

    def set_status(self, message: str):
        with self._lock:
            self.status = message
            self.status_at = _now()
        print(f"[STATUS] {message}")
        log_ws.log_from_thread(f"[STATUS] {message}", msg_type="status")

    def set_error(self, message: str):
        with self._lock:
            self.error = message
            self.error_at = _now()
            self.error_count += 1
        print(f"[STATUS] ERROR: {message}")
        log_ws.log_from_thread(f"[STATUS] {message}", msg_type="error")

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "status": self.status,
                "status_at": self.status_at,
                "error": self.error,
                "error_at": self.error_at,
                "error_count": self.error_count,
            }
