"""Contact form route"""

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_unit_of_work
from ...application.dtos.contact_dtos import ContactDto, ContactResponse
from ...application.use_cases.submit_contact import SubmitContactUseCase
from ...domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter()


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact(
    contact_data: ContactDto,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await SubmitContactUseCase(unit_of_work).execute(contact_data)
