# /callscript/routes/public.py

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest
from datetime import datetime

from callscript.config.settings import settings
from callscript.services.step_store import InMemoryStepStore
from callscript.utils.dependencies import get_step_store

# Unauthenticated endpoints: root, health probes and Prometheus metrics.

router = APIRouter()

@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "callscript",
        "version": "1.0.0",
        "status": "operational",
        "environment": settings.environment
    }

@router.get("/health", summary="Basic Health Check")
async def health_check():
    """Basic health check for load balancers."""
    return {"status": "healthy", "timestamp": datetime.utcnow()}

@router.get("/health/ready", summary="Readiness Probe")
async def readiness_check(store: InMemoryStepStore = Depends(get_step_store)):
    """Ready once at least one script step is loaded."""
    return {"status": "ready" if len(store) else "empty", "steps": len(store)}

@router.get("/metrics", tags=["Monitoring"])
async def metrics():
    """Prometheus metrics endpoint."""
    return PlainTextResponse(generate_latest(), media_type="text/plain")
