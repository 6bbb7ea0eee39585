"""Root greeting and health check.

The greeting sits behind authentication like every other resource; the
health check is open so load balancers can probe it.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from sqlalchemy import text

from proctor import __version__
from proctor.db.engine import engine

router = APIRouter()
health_router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def hello():
    return "Hello world!"


@health_router.get("/health")
async def health_check():
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}
