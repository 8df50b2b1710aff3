"""Auth endpoints."""

from fastapi import APIRouter

from gathevent_api.exceptions import ErrorCode
from gathevent_api.schemas.auth import RegisterRequest, RegisterResponse
from gathevent_api.schemas.error import error_responses

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=201,
    summary="Register a new user",
    responses=error_responses(
        ErrorCode.BAD_REQUEST,
        ErrorCode.CONFLICT,
        ErrorCode.INTERNAL_SERVER_ERROR,
    ),
)
async def register(body: RegisterRequest) -> RegisterResponse:
    """Create an account with email and password."""
    raise NotImplementedError("Not implemented")
