"""Authentication endpoints."""

from fastapi import APIRouter, Request, status

from teampulse.api.dependencies import AppSettings, CurrentUser, DbSession, RateLimiter
from teampulse.api.schemas import (
    AuthResponse,
    ChangePasswordRequest,
    ErrorResponse,
    LoginRequest,
    MeResponse,
    MessageResponse,
    ProfileUpdate,
    RegisterRequest,
    UserResponse,
)
from teampulse.errors import UnauthenticatedError
from teampulse.services.auth_service import AuthService
from teampulse.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def register(db: DbSession, settings: AppSettings, payload: RegisterRequest) -> AuthResponse:
    """Create an account and return a bearer token for it."""
    service = AuthService(db, settings)
    user = await service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        department=payload.department,
        role=payload.role,
    )
    token = service.issue_token(user)
    await db.commit()
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
)
async def login(
    request: Request,
    db: DbSession,
    settings: AppSettings,
    limiter: RateLimiter,
    payload: LoginRequest,
) -> AuthResponse:
    """Exchange credentials for a bearer token."""
    client_key = request.client.host if request.client else "unknown"
    limiter.check(client_key)

    service = AuthService(db, settings)
    try:
        user = await service.authenticate(payload.email, payload.password)
    except UnauthenticatedError:
        limiter.record_failure(client_key)
        raise
    limiter.reset(client_key)

    token = service.issue_token(user)
    await db.commit()
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(user: CurrentUser) -> MeResponse:
    return MeResponse(user=UserResponse.model_validate(user))


@router.put("/me", response_model=MeResponse)
async def update_me(db: DbSession, user: CurrentUser, payload: ProfileUpdate) -> MeResponse:
    updated = await UserService(db).update(
        user.id,
        user,
        name=payload.name,
        department=payload.department,
        avatar=str(payload.avatar) if payload.avatar is not None else None,
    )
    await db.commit()
    return MeResponse(user=UserResponse.model_validate(updated))


@router.put(
    "/change-password",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}},
)
async def change_password(
    db: DbSession,
    settings: AppSettings,
    user: CurrentUser,
    payload: ChangePasswordRequest,
) -> MessageResponse:
    await AuthService(db, settings).change_password(
        user.id, payload.current_password, payload.new_password
    )
    await db.commit()
    return MessageResponse(message="Password changed successfully")


@router.post("/logout", response_model=MessageResponse)
async def logout(user: CurrentUser) -> MessageResponse:
    """Tokens are stateless; the client simply discards its token."""
    return MessageResponse(message="Logged out successfully")
