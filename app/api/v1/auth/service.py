from typing import Optional
from datetime import timedelta
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func, select

from app.api.v1.auth.schemas import LoginRequest, RegisterRequest
from app.core.config import settings
from app.core.exceptions import AppException
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.driver import Driver
from app.models.user import User
from app.models.enums import Role


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logging.getLogger(__name__)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).filter(func.lower(User.email) == email.lower()))
        return result.scalars().first()

    async def register(self, data: RegisterRequest) -> User:
        if await self.get_user_by_email(data.email):
            AppException().raise_400("Email already registered")

        driver_result = await self.db.execute(
            select(Driver.id).filter(func.lower(Driver.email) == data.email.lower())
        )
        user = User(
            email=data.email.lower(),
            name=data.name,
            password_hash=get_password_hash(data.password),
            role=Role.DRIVER.value,
            driver_id=driver_result.scalars().first(),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            AppException().raise_400("Email already registered")
        await self.db.refresh(user)
        self.logger.info("Registered user %s (driver linked: %s)", user.id, user.driver_id is not None)
        return user

    async def authenticate(self, data: LoginRequest) -> Optional[User]:
        user = await self.get_user_by_email(data.email)
        if not user or not verify_password(data.password, user.password_hash):
            return None
        return user

    def issue_token(self, user: User) -> str:
        return create_access_token(
            data={"sub": str(user.id), "role": user.role},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        )
