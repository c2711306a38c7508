from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from src.application.repositories import AbstractUnitOfWork
from src.application.services.payment_service import PaymentService
from src.application.services.report_service import ReportService
from src.domain.entities import Identity
from src.infrastructure.api.dependencies import get_current_identity, require_admin, get_unit_of_work
from src.infrastructure.api.schemas.payments import (
    PaymentCreate, PaymentVoid, PaymentResponse, VoidResponse, DailyReportResponse
)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    identity: Identity = Depends(require_admin),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    return await PaymentService(uow).list_payments(start_date, end_date)


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_data: PaymentCreate,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    return await PaymentService(uow).create_payment(
        parking_record_id=payment_data.parking_record_id,
        amount=payment_data.amount,
        payment_method=payment_data.payment_method,
        processed_by=identity,
        transaction_id=payment_data.transaction_id,
        notes=payment_data.notes,
    )


@router.get("/reports/daily", response_model=DailyReportResponse)
async def get_daily_report(
    day: Optional[date] = Query(default=None, alias="date"),
    identity: Identity = Depends(require_admin),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    return await ReportService(uow).get_daily_report(day)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: int,
    identity: Identity = Depends(get_current_identity),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    return await PaymentService(uow).get_payment(payment_id)


@router.post("/{payment_id}/void", response_model=VoidResponse)
async def void_payment(
    payment_id: int,
    void_data: PaymentVoid,
    identity: Identity = Depends(require_admin),
    uow: AbstractUnitOfWork = Depends(get_unit_of_work),
):
    payment = await PaymentService(uow).void_payment(payment_id, void_data.reason, identity)
    return VoidResponse(payment=PaymentResponse.model_validate(payment))
