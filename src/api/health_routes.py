"""
FastAPI route handlers for basic endpoints (health, ping)
"""

import time
from datetime import datetime

from fastapi import APIRouter, Request

router = APIRouter()

# Global variables for uptime tracking
startup_time = time.time()


@router.get("/ping")
def ping():
    """
    Simple ping endpoint to check if server is alive
    """
    return {
        "message": "pong",
        "timestamp": datetime.now().isoformat(),
        "status": "healthy",
    }


@router.get("/health")
async def health_check(request: Request):
    """
    Health check including the MongoDB connection
    """
    database_ok = await request.app.state.mongo.ping()

    return {
        "status": "healthy" if database_ok else "degraded",
        "timestamp": datetime.now().isoformat(),
        "uptime_seconds": round(time.time() - startup_time, 1),
        "database": {
            "status": "connected" if database_ok else "unavailable",
            "last_check": datetime.now().isoformat(),
        },
    }
