"""Authentication routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...api.dependencies import (
    get_unit_of_work,
    get_settings,
    get_access_token,
    get_current_user,
    schedule_notifications,
)
from ...application.use_cases.register_user import RegisterUserUseCase
from ...application.use_cases.login_user import LoginUserUseCase
from ...application.use_cases.logout_user import LogoutUserUseCase
from ...application.use_cases.email_verification_use_case import (
    EmailVerificationUseCase,
    ResendVerificationUseCase,
)
from ...application.use_cases.forgot_password_use_case import ForgotPasswordUseCase
from ...application.use_cases.reset_password_use_case import ResetPasswordUseCase
from ...application.dtos.base import MessageResponse
from ...application.dtos.user_dtos import (
    RegisterUserDto,
    RegisterResponse,
    LoginUserDto,
    LoginResponse,
    EmailRequestDto,
    ResetPasswordDto,
)
from ...core.config import Settings
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(schedule_notifications)],
)
async def register_user(
    user_data: RegisterUserDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    """Register a new user and queue the verification email"""
    use_case = RegisterUserUseCase(unit_of_work, settings)
    return await use_case.execute(user_data)


@router.post("/login", response_model=LoginResponse)
async def login_user(
    login_data: LoginUserDto,
    response: Response,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    """Login user; the token is returned and also set as an httpOnly cookie"""
    use_case = LoginUserUseCase(unit_of_work, settings)
    result = await use_case.execute(login_data)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=result.token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )
    return result


@router.post("/logout", response_model=MessageResponse)
async def logout_user(
    response: Response,
    current_user: User = Depends(get_current_user),
    token: Optional[str] = Depends(get_access_token),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    """Revoke the current access token"""
    await LogoutUserUseCase(unit_of_work, settings).execute(token)
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return MessageResponse(message="Logged out successfully")


@router.get("/verify-email", response_model=MessageResponse)
async def verify_email(
    token: str = Query(""),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Verify user email with token"""
    await EmailVerificationUseCase(unit_of_work).execute(token)
    return MessageResponse(message="Email verified successfully. You can now log in.")


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    dependencies=[Depends(schedule_notifications)],
)
async def resend_verification(
    request: EmailRequestDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    await ResendVerificationUseCase(unit_of_work, settings).execute(request.email)
    return MessageResponse(
        message="If that account exists and is not yet verified, a new verification email has been sent."
    )


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    dependencies=[Depends(schedule_notifications)],
)
async def forgot_password(
    request: EmailRequestDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    """Handle forgot password request"""
    message = await ForgotPasswordUseCase(unit_of_work, settings).execute(request.email)
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    request: ResetPasswordDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Reset password with token"""
    await ResetPasswordUseCase(unit_of_work).execute(request)
    return MessageResponse(message="Password has been reset successfully. You can now log in.")
