"""M-Pesa routes: STK push, provider callback and status query"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...api.dependencies import (
    get_current_user,
    get_unit_of_work,
    get_settings,
    get_mpesa_service,
    schedule_notifications,
)
from ...application.dtos.payment_dtos import (
    StkPushRequestDto,
    StkPushResponse,
    StkQueryRequestDto,
    StkQueryResponse,
)
from ...application.use_cases.payment_use_cases import InitiatePaymentUseCase, QueryPaymentStatusUseCase
from ...application.use_cases.process_payment_callback import ProcessPaymentCallbackUseCase
from ...core.config import Settings
from ...domain.entities.user import User
from ...domain.repositories.unit_of_work import IUnitOfWork
from ...infrastructure.external_services.mpesa_service import MpesaService

logger = logging.getLogger(__name__)

router = APIRouter()

CALLBACK_ACK = {"ResultCode": 0, "ResultDesc": "Accepted"}


@router.post("/stkpush", response_model=StkPushResponse)
async def initiate_stk_push(
    payment_data: StkPushRequestDto,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    mpesa_service: MpesaService = Depends(get_mpesa_service),
    settings: Settings = Depends(get_settings),
):
    """Prompt the customer's phone to pay for an order"""
    use_case = InitiatePaymentUseCase(unit_of_work, mpesa_service, settings)
    return await use_case.execute(current_user.id, payment_data)


@router.post("/callback", dependencies=[Depends(schedule_notifications)])
async def mpesa_callback(
    request: Request,
    token: Optional[str] = Query(None),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    settings: Settings = Depends(get_settings),
):
    """Daraja result callback; always acknowledged so the provider never retries"""
    try:
        body = await request.json()
    except ValueError:
        logger.warning("M-Pesa callback with non-JSON body")
        return CALLBACK_ACK

    try:
        await ProcessPaymentCallbackUseCase(unit_of_work, settings).execute(body, token)
    except Exception:
        logger.exception("Error processing M-Pesa callback")
    return CALLBACK_ACK


@router.post(
    "/query",
    response_model=StkQueryResponse,
    dependencies=[Depends(schedule_notifications)],
)
async def query_stk_status(
    query_data: StkQueryRequestDto,
    current_user: User = Depends(get_current_user),
    unit_of_work: IUnitOfWork = Depends(get_unit_of_work),
    mpesa_service: MpesaService = Depends(get_mpesa_service),
):
    """Poll the provider for a payment the caller started"""
    use_case = QueryPaymentStatusUseCase(unit_of_work, mpesa_service)
    return await use_case.execute(current_user.id, query_data)
