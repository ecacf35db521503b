from collections.abc import AsyncGenerator

from fastapi import HTTPException, Request, status
from sentry_sdk import set_user
from sqlalchemy.ext.asyncio import AsyncSession

from .database import AsyncSessionLocal
from .logging_config import bind_plan_context


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def get_current_user_id(request: Request) -> str:
    user_id = request.headers.get("x-user-id")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-User-Id header required")
    set_user({"id": str(user_id)})
    bind_plan_context(user_id=user_id)
    return user_id
