"""Catalog routes"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ...api.dependencies import get_unit_of_work, get_current_admin_user, get_settings
from ...application.dtos.product_dtos import (
    ProductDto,
    ProductSearchResponse,
    FilterOptionsDto,
    ProductCreateDto,
    ProductUpdateDto,
)
from ...application.use_cases.product_use_cases import (
    ListProductsUseCase,
    SearchProductsUseCase,
    GetFilterOptionsUseCase,
    GetProductUseCase,
    CreateProductUseCase,
    UpdateProductUseCase,
)
from ...core.config import Settings
from ...domain.entities.user import User
from ...domain.repositories.product_repository import ProductFilter
from ...domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter()

SORT_FIELDS = "^(name|price|created_at|newest)$"


@router.get("", response_model=List[ProductDto])
async def list_products(
    category: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    sort_by: str = Query("name", alias="sortBy", pattern=SORT_FIELDS),
    sort_order: str = Query("asc", alias="sortOrder", pattern="^(asc|desc)$"),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Available products"""
    criteria = ProductFilter(
        category=category,
        location=location,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=500,
    )
    return await ListProductsUseCase(unit_of_work).execute(criteria)


@router.get("/search", response_model=ProductSearchResponse)
async def search_products(
    q: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    sort_by: str = Query("name", alias="sortBy", pattern=SORT_FIELDS),
    sort_order: str = Query("asc", alias="sortOrder", pattern="^(asc|desc)$"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    """Free-text search with filters and paging"""
    criteria = ProductFilter(
        query=q,
        category=category,
        location=location,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return await SearchProductsUseCase(unit_of_work).execute(criteria)


@router.get("/filters", response_model=FilterOptionsDto)
async def get_filter_options(unit_of_work: IUnitOfWork = Depends(get_unit_of_work)):
    return await GetFilterOptionsUseCase(unit_of_work).execute()


@router.get("/category/{category}", response_model=List[ProductDto])
async def get_products_by_category(
    category: str,
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    criteria = ProductFilter(category=category, limit=500)
    return await ListProductsUseCase(unit_of_work).execute(criteria)


@router.get("/{product_id}", response_model=ProductDto)
async def get_product(
    product_id: int = Path(..., gt=0),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    return await GetProductUseCase(unit_of_work).execute(product_id)


@router.post("", response_model=ProductDto, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreateDto,
    admin_user: User = Depends(get_current_admin_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    """Create a catalog product (admin only)"""
    return await CreateProductUseCase(unit_of_work, settings.CURRENCY).execute(product_data)


@router.put("/{product_id}", response_model=ProductDto)
async def update_product(
    product_data: ProductUpdateDto,
    product_id: int = Path(..., gt=0),
    admin_user: User = Depends(get_current_admin_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    """Update a catalog product (admin only)"""
    return await UpdateProductUseCase(unit_of_work, settings.CURRENCY).execute(product_id, product_data)
