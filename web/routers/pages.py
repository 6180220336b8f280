"""Index and health routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from version import __version__

router = APIRouter()


@router.get("/")
async def index():
    """Entry point listing the API surface the front end talks to."""
    return JSONResponse({
        "name": "ytviewer",
        "version": __version__,
        "endpoints": [
            "/api/videos",
            "/api/videos/{video_id}",
            "/api/videos/{video_id}/export",
            "/api/search",
            "/api/filter-options",
        ],
    })


@router.get("/api/health")
async def health():
    """Liveness check. Unauthenticated."""
    return JSONResponse({"status": "ok", "version": __version__})
