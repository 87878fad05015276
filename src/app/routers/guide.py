"""User guide API — the operational manual shown in the help modal."""

from fastapi import APIRouter

from cockpit.guide import USER_GUIDE

router = APIRouter(prefix="/api/guide", tags=["guide"])


@router.get("")
async def get_guide():
    """Return the user guide sections."""
    return USER_GUIDE
