"""Health check endpoint."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/api/health")
async def health() -> dict[str, bool]:
    """Liveness check.

    Returns:
        200 ``{"ok": true}`` always (application is running)
    """
    return {"ok": True}
