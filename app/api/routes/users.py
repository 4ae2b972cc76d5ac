"""User routes for profile management"""

from fastapi import APIRouter, Depends

from ...api.dependencies import get_current_user, get_unit_of_work
from ...application.dtos.user_dtos import UserDto, UpdateProfileDto
from ...application.use_cases.get_user_profile import GetUserProfileUseCase
from ...application.use_cases.update_user_profile import UpdateUserProfileUseCase
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter()


@router.get("", response_model=UserDto)
async def get_profile(
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Get current user profile"""
    return await GetUserProfileUseCase(unit_of_work).execute(current_user.id)


@router.put("", response_model=UserDto)
async def update_profile(
    profile_data: UpdateProfileDto,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Update current user profile"""
    return await UpdateUserProfileUseCase(unit_of_work).execute(current_user.id, profile_data)
