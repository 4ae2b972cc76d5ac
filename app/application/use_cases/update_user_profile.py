"""Update user profile use case"""

from ...domain.exceptions import NotFoundError, ValidationError
from ...domain.value_objects.entity_ids import UserId
from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.user_dtos import UpdateProfileDto, UserDto


class UpdateUserProfileUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, user_id: UserId, request: UpdateProfileDto) -> UserDto:
        async with self.unit_of_work:
            user = await self.unit_of_work.users.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")

            try:
                user.update_profile(name=request.name, phone=request.phone, location=request.location)
            except ValueError as e:
                raise ValidationError(str(e))

            await self.unit_of_work.users.update(user)
            await self.unit_of_work.commit()

        return UserDto.from_entity(user)
