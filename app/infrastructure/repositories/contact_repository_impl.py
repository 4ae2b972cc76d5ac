"""Contact message repository implementation"""

from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.repositories.contact_repository import IContactRepository
from ..orm.contact_model import ContactMessageModel


class ContactRepositoryImpl(IContactRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, name: str, email: str, message: str) -> int:
        model = ContactMessageModel(name=name, email=email, message=message)
        self.session.add(model)
        await self.session.flush()
        return model.id
