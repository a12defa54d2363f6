"""
api/routes/health.py
--------------------
GET /health

Liveness probe. Also reports which upstream providers have credentials so a
misconfigured deployment is visible without generating a trip.
"""
from __future__ import annotations

from fastapi import APIRouter

from tipi import __version__, config

router = APIRouter()


@router.get("/health", summary="Health check")
def health() -> dict:
    return {
        "status": "ok",
        "service": "tipi-backend",
        "version": __version__,
        "providers": {
            "llm": bool(config.GEMINI_API_KEY),
            "places": bool(config.GOOGLE_PLACES_API_KEY),
        },
        "store": config.STORE_BACKEND,
    }
