"""API dependencies"""

from typing import AsyncIterator, Optional

from fastapi import BackgroundTasks, Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..core.security import decode_access_token
from ..domain.entities.user import User
from ..domain.exceptions import AuthError, ForbiddenError
from ..domain.repositories.unit_of_work import IUnitOfWork
from ..domain.value_objects.entity_ids import UserId
from ..infrastructure.repositories.unit_of_work_impl import UnitOfWorkImpl
from ..infrastructure.external_services.mpesa_service import MpesaService
from ..infrastructure.external_services.notification_dispatcher import NotificationDispatcher


security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """One session per request"""
    async with request.app.state.database.session_factory() as session:
        yield session


def get_unit_of_work(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> IUnitOfWork:
    """Get unit of work"""
    return UnitOfWorkImpl(db, settings.CURRENCY)


def get_mpesa_service(request: Request) -> MpesaService:
    return request.app.state.mpesa_service


def get_notification_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.notification_dispatcher


def schedule_notifications(
    background_tasks: BackgroundTasks,
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> None:
    """Drain the outbox once the response has been sent"""
    background_tasks.add_task(dispatcher.dispatch_safely)


def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """Bearer header first, then the httpOnly session cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


async def get_current_user(
    token: Optional[str] = Depends(get_access_token),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
) -> User:
    """Get current authenticated user"""
    if not token:
        raise AuthError("Not authenticated")

    claims = decode_access_token(token, settings)
    if not claims:
        raise AuthError("Invalid or expired token", code="invalid_token")

    try:
        user_id = UserId.from_str(claims["sub"])
    except ValueError:
        raise AuthError("Invalid or expired token", code="invalid_token")

    async with unit_of_work:
        if await unit_of_work.tokens.is_session_revoked(claims["jti"]):
            raise AuthError("Session has been logged out", code="invalid_token")
        user = await unit_of_work.users.get_by_id(user_id)

    if not user:
        raise AuthError("User not found", code="invalid_token")
    return user


async def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """Get current admin user"""
    if not current_user.is_admin:
        raise ForbiddenError("Admin access required")
    return current_user
