"""Search suggestion routes"""

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_unit_of_work
from ...application.dtos.product_dtos import SuggestionsResponse
from ...application.use_cases.product_use_cases import SearchSuggestionsUseCase
from ...domain.repositories.unit_of_work import IUnitOfWork

router = APIRouter()


@router.get("/suggestions", response_model=SuggestionsResponse)
async def get_suggestions(
    q: str = Query("", max_length=100),
    limit: int = Query(8, ge=1, le=20),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
):
    suggestions = await SearchSuggestionsUseCase(unit_of_work).execute(q, limit)
    return SuggestionsResponse(suggestions=suggestions)
