#cyclops_gateway/Controller/deps.py

from fastapi import HTTPException, Request
from cyclops_gateway.Services.gateway import GatewayService


def get_gateway(request: Request) -> GatewayService:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=503, detail="Gateway service is not initialized")
    return gateway
