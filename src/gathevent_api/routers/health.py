"""Health check endpoint."""

from fastapi import APIRouter
from sqlalchemy import text

from gathevent_api.dependencies import DB
from gathevent_api.exceptions import ErrorCode
from gathevent_api.schemas.error import error_responses

router = APIRouter(tags=["system"])


@router.get("/health", responses=error_responses(ErrorCode.INTERNAL_SERVER_ERROR))
async def health(db: DB) -> dict[str, str]:
    """Health check endpoint — verifies database connectivity.

    Returns 200 OK only if the database responds to a ping query.
    Used by load balancers and container orchestrators to detect unhealthy instances.
    """
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}
