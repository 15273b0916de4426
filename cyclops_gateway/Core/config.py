"""
cyclops_gateway/Core/config.py
=================================
Application Configuration Module
=================================

Centralized configuration for the Cyclops gateway ingest service using
Pydantic Settings. All parameters are loaded from environment variables
(`.env` is loaded explicitly in main.py with python-dotenv).

Configuration Categories:
------------------------
1. **Project Metadata**: Application name and version
2. **Gateway**: Address of the Cyclops gateway and polling parameters
3. **UDP**: NMEA0183 broadcast listener
4. **Deltas**: Source label and context stamped on every update batch

Environment Variables:
---------------------
Required (checked when the gateway service starts):
    - GATEWAY_IP: Host or host:port of the Cyclops gateway

Optional (with defaults):
    - POLL_INTERVAL_MS: Polling interval in milliseconds (default: 10000)
    - HTTP_TIMEOUT_S: HTTP request timeout (default: the poll interval)
    - POLL_LENIENT_STATUS: Decode the body even on non-2xx responses
    - UDP_PORT: UDP listener port, 0 disables the channel (default: 50000)
    - UDP_BIND_ADDRESS: Listener address (default: 0.0.0.0)
    - SOURCE_LABEL / DELTA_CONTEXT: Delta metadata

Usage Example:
-------------
    from cyclops_gateway.Core.config import settings

    print(f"Polling http://{settings.GATEWAY_IP}/latest/ every {settings.poll_interval_s}s")
    if settings.udp_enabled:
        start_udp_listener(port=settings.UDP_PORT)

Note:
    GATEWAY_IP is not required at import time so the API and the tests can
    load the settings without a gateway; GatewayService.start() refuses to
    start either channel when it is missing.
"""

from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_POLL_INTERVAL_MS = 10000


class Settings(BaseSettings):
    """
    Application configuration settings with environment variable support.
    """

    model_config = SettingsConfigDict(env_file=None, case_sensitive=False)

    # ============================================================
    # PROJECT METADATA
    # ============================================================
    PROJECT_NAME: str = "Cyclops Gateway"
    PROJECT_VERSION: str = "1.0.0"

    # ============================================================
    # GATEWAY (HTTP POLLING)
    # ============================================================
    GATEWAY_IP: str = ""
    """
    Address of the Cyclops gateway, e.g. 192.168.1.50 or 192.168.1.50:8080.
    Polled at http://<GATEWAY_IP>/latest/.
    """

    POLL_INTERVAL_MS: int = DEFAULT_POLL_INTERVAL_MS
    """
    Polling interval (milliseconds). Zero or negative falls back to the
    default. There is no lower bound beyond the network round trip.
    """

    HTTP_TIMEOUT_S: Optional[float] = None
    """
    Timeout for each poll request (seconds). When unset the poll interval is
    used so a slow gateway cannot pile up requests.
    """

    POLL_LENIENT_STATUS: bool = False
    """
    When True, a non-2xx response is reported but its body is still decoded
    (legacy gateway-plugin behaviour). When False the poll cycle
    stops at the status error.
    """

    # ============================================================
    # UDP (NMEA0183 BROADCAST)
    # ============================================================
    UDP_PORT: int = 50000
    """UDP port of the gateway's NMEA0183 broadcast. 0 disables the listener."""

    UDP_BIND_ADDRESS: str = "0.0.0.0"

    # ============================================================
    # DELTAS
    # ============================================================
    SOURCE_LABEL: str = "Cyclops Gateway"
    DELTA_CONTEXT: str = "vessels.self"

    @field_validator("POLL_INTERVAL_MS", mode="before")
    @classmethod
    def _default_interval(cls, v):
        if v in (None, ""):
            return DEFAULT_POLL_INTERVAL_MS
        if int(v) <= 0:
            return DEFAULT_POLL_INTERVAL_MS
        return v

    @field_validator("GATEWAY_IP", mode="before")
    @classmethod
    def _strip_gateway(cls, v):
        return (v or "").strip()

    @property
    def poll_interval_s(self) -> float:
        return self.POLL_INTERVAL_MS / 1000.0

    @property
    def http_timeout_s(self) -> float:
        return self.HTTP_TIMEOUT_S if self.HTTP_TIMEOUT_S else self.poll_interval_s

    @property
    def udp_enabled(self) -> bool:
        return bool(self.UDP_PORT)

    @property
    def poll_url(self) -> str:
        return f"http://{self.GATEWAY_IP}/latest/"


# ============================================================
# SETTINGS INSTANCE
# ============================================================
settings = Settings()  # type: ignore
"""
Global settings instance, validated on import.
"""
