import subprocess
from functools import lru_cache

from fastapi import APIRouter

from content_service.schemas.common import HealthResponse

SERVICE_NAME = "content-service"
SERVICE_VERSION = "0.1.0"

router = APIRouter()


@lru_cache(maxsize=1)
def get_git_sha() -> str:
    """Short git SHA of the deployed checkout, resolved once per process."""
    try:
        return (
            subprocess.check_output(
                ["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL
            )
            .decode()
            .strip()[:7]
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return {
        "status": "ok",
        "name": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "git_sha": get_git_sha(),
    }
