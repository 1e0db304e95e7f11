from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from app.api.v1.auth.service import AuthService
from app.core.deps import get_db, get_current_active_user
from app.core.exceptions import AppException
from app.models.user import User

router = APIRouter()


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a DRIVER account. It is linked to the driver record with the same email, if any.",
)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_db)):
    auth_service = AuthService(db)
    user = await auth_service.register(data)
    return {"access_token": auth_service.issue_token(user), "token_type": "bearer", "user": user}


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login",
    description="Exchange email and password for a bearer token.",
)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    auth_service = AuthService(db)
    user = await auth_service.authenticate(data)
    if not user:
        AppException().raise_401("Incorrect email or password")
    if not user.is_active:
        AppException().raise_401("User account is inactive")
    return {"access_token": auth_service.issue_token(user), "token_type": "bearer", "user": user}


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
)
async def me(current_user: User = Depends(get_current_active_user)):
    return current_user
