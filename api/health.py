"""
Health endpoint for the parenting assistant service.

A minimal liveness check at "/health". It touches no collaborator, so it keeps
answering even when every provider and the search backend are down.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter

from version import __version__

router = APIRouter()


@router.get("/health")
def health() -> Dict[str, str]:
    """
    Return a simple health status payload.

    Returns:
        Dict[str, str]: "status" (always "ok"), the service "version" and a UTC
        ISO-8601 "timestamp".
    """
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
