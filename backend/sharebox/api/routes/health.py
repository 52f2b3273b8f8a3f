"""Health check."""

from fastapi import APIRouter

from sharebox import __version__
from sharebox.schemas.system import HealthResponse
from sharebox.services import get_sweeper

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight connectivity check."""
    try:
        sweeper_running = get_sweeper().running
    except RuntimeError:
        sweeper_running = False
    return HealthResponse(version=__version__, sweeper_running=sweeper_running)


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
