"""Cart routes"""

from typing import List

from fastapi import APIRouter, Depends, Path

from ...api.dependencies import get_current_user, get_unit_of_work
from ...application.dtos.base import MessageResponse
from ...application.dtos.cart_dtos import AddToCartDto, AddMultipleToCartDto, CartLineDto
from ...application.use_cases.cart_use_cases import AddToCartUseCase, GetCartUseCase, RemoveFromCartUseCase
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter()


@router.post("/add", response_model=MessageResponse)
async def add_to_cart(
    item: AddToCartDto,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    await AddToCartUseCase(unit_of_work).execute(current_user.id, [item])
    return MessageResponse(message="Item added to cart")


@router.post("/add-multiple", response_model=MessageResponse)
async def add_multiple_to_cart(
    request: AddMultipleToCartDto,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    added = await AddToCartUseCase(unit_of_work).execute(current_user.id, request.items)
    return MessageResponse(message=f"{added} item(s) added to cart")


@router.get("", response_model=List[CartLineDto])
async def get_cart(
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await GetCartUseCase(unit_of_work).execute(current_user.id)


@router.delete("/{item_id}", response_model=MessageResponse)
async def remove_from_cart(
    item_id: int = Path(..., gt=0),
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    await RemoveFromCartUseCase(unit_of_work).execute(current_user.id, item_id)
    return MessageResponse(message="Item removed from cart")
