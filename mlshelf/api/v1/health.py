# mlshelf/api/v1/health.py
import time

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ... import deps
from ...core.config import Settings

router = APIRouter()
_started = time.time()


class Health(BaseModel):
    description: str
    configured: bool
    uptime_s: float


@router.get("", response_model=Health)
def health(settings: Settings = Depends(deps.app_settings)):
    """Liveness probe; also reports whether the backend settings are present."""
    return Health(
        description="Service reachable.",
        configured=settings.is_configured,
        uptime_s=time.time() - _started,
    )
