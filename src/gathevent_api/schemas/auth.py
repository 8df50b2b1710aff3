"""Auth request/response schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Body of POST /auth/register."""

    name: str = Field(min_length=1, max_length=100, description="The user's full name")
    email: EmailStr = Field(description="The user's email address")
    password: str = Field(min_length=8, max_length=100, description="The user's password")


class RegisterResponse(BaseModel):
    """The newly registered user."""

    model_config = {"from_attributes": True}

    id: UUID = Field(description="The user's unique identifier")
    name: str = Field(description="The user's full name")
    email: EmailStr = Field(description="The user's email address")
    created_at: datetime = Field(description="When the user was created")
