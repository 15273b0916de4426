"""
cyclops_gateway/main.py
============================================
FastAPI Application for the Cyclops Gateway
============================================

Entry point of the rigging-tension ingest service. The application pulls
load-sensor readings from a Cyclops Marine gateway over two channels and
publishes them as SignalK-style deltas:

Architecture Overview:
---------------------
- HTTP Poller: GET http://<GATEWAY_IP>/latest/ every POLL_INTERVAL_MS
- UDP Listener: NMEA0183 XDR broadcast on UDP_PORT (0 disables it)
- WebSocket /deltas: Telemetry bus, every update batch is broadcast here
- WebSocket /logs: Operator log and status stream
- REST: /health, /api, /gateway/status, /gateway/units, /gateway/poll

Run:
    uvicorn cyclops_gateway.main:app --host 0.0.0.0 --port 8000
"""

# Environment Configuration
from dotenv import load_dotenv
import os
load_dotenv()

# FastAPI Core
from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import asyncio

from cyclops_gateway.Core.config import settings
from cyclops_gateway.Core import delta_ws, log_ws
from cyclops_gateway.Core.status import GatewayStatus
from cyclops_gateway.Controller.Routes import gateway as gateway_routes
from cyclops_gateway.Services.gateway import GatewayService
from cyclops_gateway.Services.gateway_core import GatewayConfigError


# ============================================================
# CORS CONFIGURATION
# ============================================================
def _parse_origins(csv_value: str):
    """
    Parse comma-separated origin values into a list for CORS configuration.

    Returns:
        Tuple of (is_wildcard: bool, origins: list)

    Examples:
        "*" → (True, ["*"])
        "https://app.com,https://admin.app.com" → (False, ["https://app.com", "https://admin.app.com"])
        "" → (False, [])
    """
    if not csv_value:
        return (False, [])

    csv_value = csv_value.strip()

    if csv_value == "*":
        return (True, ["*"])

    origins = [origin.strip() for origin in csv_value.split(",") if origin.strip()]
    return (False, origins)


_http_allow_all, _http_origins = _parse_origins(
    os.getenv("HTTP_ALLOWED_ORIGINS", "*")
)
_ws_allow_all, _ws_origins = _parse_origins(
    os.getenv("WS_ALLOWED_ORIGINS", "*")
)


# ============================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
        1. Give the WebSocket managers the main event loop
        2. Build the gateway service (bus = /deltas broadcast)
        3. Start polling and the UDP listener

    A missing GATEWAY_IP keeps both channels stopped; the API stays up so
    the error is visible at /gateway/status.

    Shutdown:
        Stop the poller timer and close the UDP socket.
    """
    loop = asyncio.get_running_loop()
    log_ws.log_ws_manager.set_main_loop(loop)
    delta_ws.delta_ws_manager.set_main_loop(loop)

    gateway = GatewayService(settings, delta_ws.publish_delta, status=GatewayStatus())
    app.state.gateway = gateway

    try:
        gateway.start()
        print("[STARTUP] ✅ Gateway service started")
    except GatewayConfigError as e:
        print(f"[STARTUP] ❌ Gateway service not started: {e}")

    yield

    print("[SHUTDOWN] 🛑 Application shutdown initiated")
    gateway.stop()
    log_ws.log_ws_manager.set_main_loop(None)
    delta_ws.delta_ws_manager.set_main_loop(None)


# ============================================================
# APPLICATION INSTANCE CREATION
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_http_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(gateway_routes.router, prefix="/gateway", tags=["gateway"])


# ============================================================
# WEBSOCKET ENDPOINTS
# ============================================================
async def socket_handler(ws: WebSocket, manager):
    """
    Generic WebSocket connection handler with origin validation.

    Registers the connection with `manager`, forwards incoming messages to
    manager.handle_message() and unregisters on disconnect.
    """
    origin = ws.headers.get("origin")

    if (not _ws_allow_all) and (origin not in _ws_origins):
        print(f"[WS] ❌ Connection rejected - unauthorized origin: {origin}")
        await ws.close(code=403)
        return

    await manager.register(ws)

    try:
        while True:
            message = await ws.receive_text()
            await manager.handle_message(ws, message)
    except Exception as e:
        print(f"[WS] Connection closed: {e}")
    finally:
        manager.unregister(ws)


@app.websocket("/deltas")
async def websocket_deltas(ws: WebSocket):
    """
    Telemetry bus. Each message is one delta:

        {
            "context": "vessels.self",
            "updates": [{
                "source": {"label": "Cyclops Gateway"},
                "timestamp": "2026-10-19T10:30:00.000000Z",
                "values": [{"path": "rigging.port.tension", "value": 443.26}],
                "meta": [{"path": "rigging.port.tension",
                          "value": {"units": "N", "description": "Newtons"}}]
            }]
        }
    """
    await socket_handler(ws, delta_ws.delta_ws_manager)


@app.websocket("/logs")
async def websocket_logs(ws: WebSocket):
    await socket_handler(ws, log_ws.log_ws_manager)


@app.get("/api")
def api_info():
    """
    API information and system status endpoint.
    """
    return {
        "status": "online",
        "version": settings.PROJECT_VERSION,
        "architecture": "HTTP polling + UDP NMEA0183 -> WebSocket deltas",
        "features": {
            "poll_url": settings.poll_url if settings.GATEWAY_IP else None,
            "poll_interval_ms": settings.POLL_INTERVAL_MS,
            "udp_enabled": settings.udp_enabled,
            "udp_port": settings.UDP_PORT,
            "websockets": ["/deltas", "/logs"],
        },
        "endpoints": {
            "gateway": "/gateway/*",
            "deltas": "/deltas (WebSocket)",
            "logs": "/logs (WebSocket)",
            "health": "/health"
        }
    }
