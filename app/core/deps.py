from typing import AsyncGenerator, Optional
from uuid import UUID

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import async_session_maker
from app.core.security import decode_access_token
from app.core.exceptions import AppException
from app.models.driver import Driver
from app.models.user import User
from app.models.enums import Role


bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """Resolve the bearer token to a user row. Every request re-checks the user store."""
    if credentials is None or not credentials.credentials:
        AppException().raise_401("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        AppException().raise_401("Could not validate credentials")

    user_id: str = payload.get("sub")
    if user_id is None:
        AppException().raise_401("Could not validate credentials")
    try:
        user_uuid = UUID(user_id)
    except (ValueError, TypeError):
        AppException().raise_401("Could not validate credentials")

    user = await db.get(User, user_uuid)
    if user is None:
        AppException().raise_401("Could not validate credentials")
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        AppException().raise_401("User account is inactive")
    return current_user


async def get_current_active_admin_user(current_user: User = Depends(get_current_active_user)) -> User:
    if current_user.role != Role.ADMIN.value:
        AppException().raise_403("Admin access required")
    return current_user


async def get_current_driver(
    driver_id: Optional[UUID] = Query(None, description="Driver to act as (admins only)"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> Driver:
    """
    Driver for driver-app endpoints.
    DRIVER users act as their linked driver record; admins may pass driver_id explicitly.
    """
    if current_user.role == Role.ADMIN.value:
        if driver_id is None:
            AppException().raise_400("driver_id is required")
        target_id = driver_id
    else:
        if current_user.driver_id is None:
            AppException().raise_403("No driver profile is linked to this account")
        if driver_id is not None and driver_id != current_user.driver_id:
            AppException().raise_403("Drivers can only access their own dashboard")
        target_id = current_user.driver_id

    driver = await db.get(Driver, target_id)
    if driver is None:
        AppException().raise_not_found("Driver", target_id)
    return driver
