"""Shared FastAPI dependencies.

Type aliases routers import instead of repeating Depends(...) in every signature.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gathevent_api.db.session import get_db

DB = Annotated[AsyncSession, Depends(get_db)]
