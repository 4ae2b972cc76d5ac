"""Order routes"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Path, Response, status

from ...api.dependencies import get_current_user, get_unit_of_work, get_settings, schedule_notifications
from ...application.dtos.order_dtos import CreateOrderDto, OrderCreatedResponse, OrderDto
from ...application.use_cases.create_order import CreateOrderUseCase
from ...application.use_cases.order_use_cases import ListOrdersUseCase, GetOrderUseCase, CancelOrderUseCase
from ...core.config import Settings
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter()


@router.post(
    "",
    response_model=OrderCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(schedule_notifications)],
)
async def create_order(
    order_data: CreateOrderDto,
    response: Response,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key", max_length=128),
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    """Check out the current cart"""
    use_case = CreateOrderUseCase(unit_of_work, settings.CURRENCY)
    order, created = await use_case.execute(current_user.id, order_data, idempotency_key)
    if not created:
        response.status_code = status.HTTP_200_OK
    return OrderCreatedResponse(
        message="Order created successfully" if created else "Order already created",
        order_id=order.id.value,
        order_number=order.order_number,
        total_amount=float(order.total_amount.amount),
        status=order.status.value,
        payment_status=order.payment_status.value,
    )


@router.get("", response_model=List[OrderDto])
async def list_orders(
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Current user's orders, newest first"""
    orders = await ListOrdersUseCase(unit_of_work).execute(current_user.id)
    return [OrderDto.from_entity(order) for order in orders]


@router.get("/{order_id}", response_model=OrderDto)
async def get_order(
    order_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    order = await GetOrderUseCase(unit_of_work).execute(current_user, order_id)
    return OrderDto.from_entity(order)


@router.post("/{order_id}/cancel", response_model=OrderDto)
async def cancel_order(
    order_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    order = await CancelOrderUseCase(unit_of_work).execute(current_user.id, order_id)
    return OrderDto.from_entity(order)
