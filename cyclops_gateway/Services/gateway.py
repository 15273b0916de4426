# cyclops_gateway/Services/gateway.py
"""
Gateway Service
===============
Wires the two ingestion channels of the Cyclops gateway together.

Flow (HTTP):
    GatewayPoller tick -> poll_gateway() -> UpdateEmitter.build_poll_batch()
    (records units into the UnitTable) -> UpdateEmitter.emit()

Flow (UDP):
    UdpListener datagram -> decode_sentence() -> UpdateEmitter.build_sentence_batch()
    (looks units up in the UnitTable) -> UpdateEmitter.emit()

The UnitTable is owned here and shared by both channels. Every failure is
non-fatal: it ends the current poll cycle or datagram, is reported, and the
next tick / datagram is processed normally. The only fatal condition is a
missing GATEWAY_IP, checked in start() before either channel runs.
"""

import threading
from typing import Any, Dict, Optional, Tuple

import requests

from cyclops_gateway.Core import log_ws
from cyclops_gateway.Core.config import Settings
from cyclops_gateway.Core.status import GatewayStatus
from cyclops_gateway.Schemas.delta import UpdateBatch
from cyclops_gateway.Services.gateway_core import (
    DecodeError,
    EmitError,
    GatewayConfigError,
    PollError,
    UnitTable,
    UpdateEmitter,
    decode_sentence,
)
from cyclops_gateway.Services.gateway_core.emitter import Publisher
from cyclops_gateway.Services.poller import GatewayPoller, poll_gateway
from cyclops_gateway.Services.udp import UdpListener


class GatewayService:
    def __init__(
        self,
        config: Settings,
        publish: Publisher,
        status: Optional[GatewayStatus] = None,
        unit_table: Optional[UnitTable] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.status = status or GatewayStatus()
        self.unit_table = unit_table if unit_table is not None else UnitTable()
        self.session = session
        self.emitter = UpdateEmitter(publish, config.SOURCE_LABEL, config.DELTA_CONTEXT)

        self.poller = GatewayPoller(self.poll_once, config.poll_interval_s)
        self.udp: Optional[UdpListener] = None
        self.started = False

        self._counters_lock = threading.Lock()
        self.counters: Dict[str, int] = {
            "polls_ok": 0,
            "polls_failed": 0,
            "datagrams_ok": 0,
            "datagrams_dropped": 0,
        }

    # ==========================================================
    # LIFECYCLE
    # ==========================================================
    def start(self):
        """
        Start polling and, if UDP_PORT is not 0, the UDP listener.

        Raises:
            GatewayConfigError: GATEWAY_IP is not configured
        """
        if not self.config.GATEWAY_IP:
            self.status.set_error("No gateway IP defined.")
            raise GatewayConfigError("GATEWAY_IP is required to start the gateway service")

        self.status.set_status("Startup")

        if self.session is None:
            self.session = requests.Session()

        self.poller.start()
        self.started = True

        if self.config.udp_enabled:
            self.udp = UdpListener(self.config.UDP_PORT, self.handle_datagram, self.config.UDP_BIND_ADDRESS)
            try:
                self.udp.start()
            except OSError as e:
                self.status.set_error(f"UDP listener could not bind port {self.config.UDP_PORT}: {e}")
                self.udp = None
            else:
                host, port = self.udp.address
                self.status.set_status(f"Listening on {host}:{port}")
        else:
            print("[GATEWAY] ⚠️  UDP listener is disabled (UDP_PORT=0)")

    def stop(self):
        self.started = False
        self.poller.stop()
        if self.udp is not None:
            self.udp.stop()
            self.udp = None
        if self.session is not None:
            self.session.close()
            self.session = None
        self.status.set_status("Stopped")

    # ==========================================================
    # HTTP CHANNEL
    # ==========================================================
    def _report_poll_error(self, error: PollError):
        self.status.set_error(str(error))

    def poll_once(self) -> Optional[UpdateBatch]:
        """
        One poll cycle: fetch, normalize, emit one batch.

        Returns:
            UpdateBatch emitted, or None if the cycle failed (already reported)
        """
        try:
            records = poll_gateway(
                self.config.GATEWAY_IP,
                self.config.http_timeout_s,
                session=self.session,
                lenient_status=self.config.POLL_LENIENT_STATUS,
                on_http_error=self._report_poll_error,
            )
        except PollError as e:
            print(f"[POLL] {type(e).__name__}: {e}")
            self._report_poll_error(e)
            self._count("polls_failed")
            return None

        batch = self.emitter.build_poll_batch(records, self.unit_table)

        try:
            self.emitter.emit(batch)
        except EmitError as e:
            self.status.set_error(str(e))
            self._count("polls_failed")
            return None

        self._count("polls_ok")
        print(f"[POLL] Emitted {len(records)} sensors ({len(batch.values)} values)")
        return batch

    # ==========================================================
    # UDP CHANNEL
    # ==========================================================
    def handle_datagram(self, data: bytes, addr: Tuple[str, int] = ("", 0)) -> Optional[UpdateBatch]:
        """
        One datagram: decode, convert with the UnitTable, emit one batch.

        Returns:
            UpdateBatch emitted, or None if the datagram was dropped
        """
        sender_ip, sender_port = addr[0], addr[1]

        try:
            sentence = decode_sentence(data)
            batch = self.emitter.build_sentence_batch(sentence, self.unit_table)
        except DecodeError as e:
            print(f"[UDP] Dropped datagram from {sender_ip}:{sender_port}: {e}")
            log_ws.log_from_thread(
                f"[UDP] Dropped datagram from {sender_ip}:{sender_port}: {e}",
                msg_type="warning"
            )
            self._count("datagrams_dropped")
            return None

        try:
            self.emitter.emit(batch)
        except EmitError as e:
            self.status.set_error(str(e))
            self._count("datagrams_dropped")
            return None

        self._count("datagrams_ok")
        return batch

    # ==========================================================
    # INTROSPECTION
    # ==========================================================
    def _count(self, key: str):
        with self._counters_lock:
            self.counters[key] += 1

    def snapshot(self) -> Dict[str, Any]:
        with self._counters_lock:
            counters = dict(self.counters)
        return {
            **self.status.snapshot(),
            "started": self.started,
            "gateway_ip": self.config.GATEWAY_IP,
            "poll_interval_ms": self.config.POLL_INTERVAL_MS,
            "polling": self.poller.running,
            "udp_port": self.config.UDP_PORT,
            "udp_listening": self.udp is not None,
            "known_sensors": len(self.unit_table),
            "counters": counters,
        }
