"""Admin routes"""

from fastapi import APIRouter, Depends, Path

from ...api.dependencies import get_current_admin_user, get_unit_of_work
from ...application.dtos.order_dtos import OrderDto, UpdateOrderStatusDto
from ...application.use_cases.order_use_cases import UpdateOrderStatusUseCase
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter()


@router.put("/orders/{order_id}/status", response_model=OrderDto)
async def update_order_status(
    status_data: UpdateOrderStatusDto,
    order_id: int = Path(..., gt=0),
    admin_user: User = Depends(get_current_admin_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Advance an order through the fulfillment workflow"""
    order = await UpdateOrderStatusUseCase(unit_of_work).execute(order_id, status_data.status)
    return OrderDto.from_entity(order)
