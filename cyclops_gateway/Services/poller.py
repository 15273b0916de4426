# cyclops_gateway/Services/poller.py

"""
Gateway Polling Service

Periodically fetches http://<GATEWAY_IP>/latest/ from the Cyclops gateway
and hands each cycle to the gateway service for normalization and emission.

Key features:
- Immediate first poll, then one poll per configured interval.
- Bounded request timeout (defaults to the poll interval).
- In-flight guard: a tick is skipped while the previous poll is still running.
- No tick ever raises: failures are reported and the timer keeps going.
- Stop cancels the timer promptly (Event.wait instead of time.sleep).
"""

import threading
from typing import Any, Callable, List, Optional

import requests

from cyclops_gateway.Core import log_ws
from cyclops_gateway.Services.gateway_core import (
    HttpStatusError,
    TransportError,
    parse_sensor_array,
)


# --------------------------
# One poll request
# --------------------------
def poll_gateway(
    gateway_ip: str,
    timeout: float,
    session: Optional[requests.Session] = None,
    lenient_status: bool = False,
    on_http_error: Optional[Callable[[HttpStatusError], Any]] = None,
) -> List[Any]:
    """
    Perform one GET http://<gateway_ip>/latest/ and decode the sensor array.

    Args:
        gateway_ip: Gateway host (or host:port)
        timeout: Request timeout in seconds
        session: Optional requests.Session to reuse connections
        lenient_status: Decode the body even when the status is not 2xx
        on_http_error: Called with the HttpStatusError in lenient mode

    Returns:
        list[SensorRecord]: Valid records of the response

    Raises:
        TransportError: Timeout, refused connection, DNS failure...
        HttpStatusError: Non-2xx status (strict mode)
        PollDecodeError: Body is not a JSON array
    """
    url = f"http://{gateway_ip}/latest/"
    http = session or requests

    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(e) from e

    if not 200 <= response.status_code < 300:
        error = HttpStatusError(response.status_code, response.reason or "")
        if not lenient_status:
            raise error
        if on_http_error is not None:
            on_http_error(error)

    return parse_sensor_array(response.content)


# --------------------------
# Timer
# --------------------------
class GatewayPoller:
    """
    Runs `poll_once` on a daemon thread: once at start, then every
    `interval_s` seconds until stop() is called.
    """

    def __init__(self, poll_once: Callable[[], Any], interval_s: float, name: str = "Gateway-Poller"):
        self.poll_once = poll_once
        self.interval_s = interval_s
        self.name = name
        self._stop = threading.Event()
        self._in_flight = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> bool:
        """
        Run one poll unless another one is still in flight.

        Returns:
            bool: False if the tick was skipped
        """
        if not self._in_flight.acquire(blocking=False):
            print("[POLL] Previous poll still in flight - skipping tick")
            return False

        try:
            self.poll_once()
        except Exception as e:
            print(f"[POLL] Critical error during poll: {e}")
            log_ws.log_from_thread(f"[POLL] Critical error: {e}", msg_type="error")
        finally:
            self._in_flight.release()
        return True

    def _run(self):
        self.tick()
        while not self._stop.wait(self.interval_s):
            self.tick()

    def start(self) -> threading.Thread:
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name=self.name)
        self._thread.start()
        print(f"[POLL] Background polling thread started (every {self.interval_s}s)")
        return self._thread

    def stop(self, timeout: float = 2.0):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        print("[POLL] Polling stopped")
