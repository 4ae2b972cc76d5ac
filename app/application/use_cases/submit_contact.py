"""Contact form use case"""

import logging

from ...domain.repositories.unit_of_work import IUnitOfWork
from ..dtos.contact_dtos import ContactDto, ContactResponse

logger = logging.getLogger(__name__)


class SubmitContactUseCase:

    def __init__(self, unit_of_work: IUnitOfWork):
        self.unit_of_work = unit_of_work

    async def execute(self, request: ContactDto) -> ContactResponse:
        async with self.unit_of_work:
            message_id = await self.unit_of_work.contacts.add(
                request.name.strip(), str(request.email).lower(), request.message.strip()
            )
            await self.unit_of_work.commit()
        logger.info("Contact message %s received", message_id)
        return ContactResponse(id=message_id)
