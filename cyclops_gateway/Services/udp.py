# cyclops_gateway/Services/udp.py
"""
UDP Listener for the Cyclops gateway NMEA0183 broadcast.

Clean orchestrator: this module only owns the socket and the receive loop.
Every datagram is handed to a handler (GatewayService.handle_datagram),
one at a time, which does decode -> normalize -> emit.
"""

import socket
import threading
from typing import Any, Callable, Optional, Tuple

from cyclops_gateway.Core import log_ws


BUFFER_SIZE = 65535  # maximum safe UDP packet size
RECV_TIMEOUT_S = 1.0  # how often the loop checks for stop()

DatagramHandler = Callable[[bytes, Tuple[str, int]], Any]


class UdpListener:
    def __init__(self, port: int, handler: DatagramHandler, bind_address: str = "0.0.0.0"):
        self.port = port
        self.bind_address = bind_address
        self.handler = handler
        self.sock: Optional[socket.socket] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        if self.sock is None:
            return (self.bind_address, self.port)
        return self.sock.getsockname()

    def _open_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.settimeout(RECV_TIMEOUT_S)
        try:
            sock.bind((self.bind_address, self.port))
        except OSError:
            sock.close()
            raise
        return sock

    def serve(self):
        """
        Main receive loop. Runs until stop(); a failing datagram never ends it.
        """
        while not self._stop.is_set():
            sock = self.sock
            if sock is None:
                break

            try:
                data, addr = sock.recvfrom(BUFFER_SIZE)
            except socket.timeout:
                continue
            except OSError as e:
                if not self._stop.is_set():
                    print(f"[UDP] Server error: {e}")
                    log_ws.log_from_thread(f"[UDP] Server error: {e}", msg_type="error")
                break

            try:
                self.handler(data, addr)
            except Exception as e:
                print(f"[UDP] Critical error processing datagram: {e}")
                log_ws.log_from_thread(f"[UDP] Critical error: {e}", msg_type="error")

    def start(self) -> threading.Thread:
        """
        Bind the socket and start the receive loop in a daemon thread.

        Raises:
            OSError: If the port cannot be bound
        """
        self._stop.clear()
        self.sock = self._open_socket()
        host, port = self.address
        print(f"[UDP] Listening on {host}:{port}")

        self._thread = threading.Thread(target=self.serve, daemon=True, name="UDP-Listener")
        self._thread.start()
        return self._thread

    def stop(self, timeout: float = 2.0):
        self._stop.set()
        if self.sock is not None:
            self.sock.close()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self.sock = None
        print("[UDP] Server closed.")
