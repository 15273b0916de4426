# cyclops_gateway/Controller/Routes/gateway.py
import threading
from fastapi import APIRouter, Depends, HTTPException
from cyclops_gateway.Controller.deps import get_gateway
from cyclops_gateway.Services.gateway import GatewayService

router = APIRouter()


@router.get("/status", response_model=dict)
def get_status(gateway: GatewayService = Depends(get_gateway)):
    """
    Current operator status of the gateway service.

    Returns:
        {
            "status": "Listening on 0.0.0.0:50000",
            "status_at": "2026-10-19T10:30:00Z",
            "error": "Fetch error: ...",
            "error_at": "2026-10-19T10:31:00Z",
            "error_count": 1,
            "started": true,
            "gateway_ip": "192.168.1.50",
            "poll_interval_ms": 10000,
            "polling": true,
            "udp_port": 50000,
            "udp_listening": true,
            "known_sensors": 4,
            "counters": {"polls_ok": 12, "polls_failed": 1, ...}
        }

    Example:
        GET /gateway/status
    """
    return gateway.snapshot()


@router.get("/units", response_model=dict)
def get_units(gateway: GatewayService = Depends(get_gateway)):
    """
    Last unit reported by the gateway for each sensor path fragment.
    UDP readings for these sensors are converted to Newtons with this unit.

    Returns:
        {
            "units": {"port_shroud": "kg", "forestay": "tonne"},
            "count": 2
        }

    Example:
        GET /gateway/units
    """
    units = gateway.unit_table.snapshot()
    return {"units": units, "count": len(units)}


@router.post("/poll", response_model=dict, status_code=202)
def trigger_poll(gateway: GatewayService = Depends(get_gateway)):
    """
    Request an immediate poll outside the timer. Runs in the background and
    is skipped if a poll is already in flight.

    Returns 409 while the service is not running (missing GATEWAY_IP or
    after shutdown); the status error is left untouched.

    Example:
        POST /gateway/poll
    """
    if not gateway.started:
        raise HTTPException(
            status_code=409,
            detail=gateway.status.error or "Gateway service is not running",
        )

    thread = threading.Thread(target=gateway.poller.tick, daemon=True, name="Gateway-Poll-Now")
    thread.start()
    return {"status": "accepted"}
