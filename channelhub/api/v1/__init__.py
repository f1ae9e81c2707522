"""
API v1 Router

Channel and membership endpoints, all behind the session guard.
"""

from fastapi import APIRouter

from channelhub import __version__

from . import channels

router = APIRouter()

router.include_router(channels.router, prefix="/channels", tags=["Channels"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": __version__,
        "endpoints": [
            "/channels",
            "/channels/{channel_id}",
            "/channels/{channel_id}/members",
            "/channels/{channel_id}/members/{user_id}",
        ],
    }
