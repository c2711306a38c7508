"""Billing ledger: payments against closed sessions, and their voids.

A session carries at most one active payment. Creating a payment and marking
the session paid happen in one transaction; so do voiding a payment and
reopening the session's payment status.
"""
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, List

from loguru import logger as default_logger

from src.application.repositories import AbstractUnitOfWork, DuplicateKeyError
from src.application.services.parking_service import parse_tender_method
from src.config.settings_env import settings
from src.domain.billing import round2
from src.domain.common import PaymentStatus
from src.domain.entities import Payment, Identity
from src.domain.exceptions import NotFoundError, ConflictError, InvalidError
from src.shared.utils import utcnow, generate_receipt_number

RECEIPT_ATTEMPTS = 3


def _as_datetime(value, end_of_day: bool = False) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    raise InvalidError(f"Invalid date: {value}")


class PaymentService:
    def __init__(self, uow: AbstractUnitOfWork, logger=None):
        self.uow = uow
        self.logger = logger or default_logger.bind(component="billing_ledger")

    async def create_payment(
        self,
        parking_record_id: int,
        amount,
        payment_method,
        processed_by: Identity,
        transaction_id: Optional[str] = None,
        notes: str = "",
    ) -> Payment:
        method = parse_tender_method(payment_method)
        try:
            amount = Decimal(str(amount))
        except InvalidOperation:
            raise InvalidError(f"Invalid payment amount: {amount}") from None

        async with self.uow:
            record = await self.uow.records.get_by_id(parking_record_id)
            if record is None:
                raise NotFoundError(f"Parking record {parking_record_id} not found")
            if record.payment_status != PaymentStatus.PENDING:
                raise ConflictError(f"Parking record {parking_record_id} is already {record.payment_status.value}")
            if record.exit_time is None:
                raise ConflictError(f"Parking record {parking_record_id} is still open")
            if amount != round2(amount) or amount != record.amount:
                raise InvalidError(
                    f"Payment amount {amount} does not match the calculated amount {record.amount}"
                )

            receipt_number = generate_receipt_number(settings.PAYMENT_RECEIPT_PREFIX)
            # Conditional update keeps a single active payment per session
            if not await self.uow.records.mark_paid_if_pending(record.id, method, receipt_number):
                raise ConflictError(f"Parking record {parking_record_id} has already been paid")

            payment = None
            for attempt in range(1, RECEIPT_ATTEMPTS + 1):
                try:
                    payment = await self.uow.payments.add(Payment(
                        parking_record_id=record.id,
                        amount=record.amount,
                        payment_method=method,
                        payment_date=utcnow(),
                        receipt_number=receipt_number,
                        processed_by=processed_by.user_id,
                        transaction_id=transaction_id,
                        notes=notes or "",
                    ))
                    break
                except DuplicateKeyError:
                    if attempt == RECEIPT_ATTEMPTS:
                        raise ConflictError("Could not allocate a unique receipt number") from None
                    self.logger.warning(f"Receipt {receipt_number} already taken, minting another")
                    receipt_number = generate_receipt_number(settings.PAYMENT_RECEIPT_PREFIX)
                    await self.uow.records.set_receipt_number(record.id, receipt_number)

        self.logger.info(
            f"Payment {payment.receipt_number} of {payment.amount} by {method.value} "
            f"for record {parking_record_id} processed by {processed_by.user_id}"
        )
        return payment

    async def void_payment(self, payment_id: int, reason: str, voided_by: Identity) -> Payment:
        reason = (reason or "").strip()
        if not reason:
            raise InvalidError("A reason is required to void a payment")

        async with self.uow:
            payment = await self.uow.payments.get_by_id(payment_id)
            if payment is None:
                raise NotFoundError(f"Payment {payment_id} not found")
            if payment.void_status:
                raise ConflictError(f"Payment {payment_id} has already been voided")

            void_date = utcnow()
            if not await self.uow.payments.void_if_active(payment_id, void_date, reason, voided_by.user_id):
                raise ConflictError(f"Payment {payment_id} has already been voided")

            if not await self.uow.records.reset_payment(payment.parking_record_id):
                self.logger.warning(
                    f"Payment {payment_id} voided but parking record {payment.parking_record_id} no longer exists"
                )

            payment = await self.uow.payments.get_by_id(payment_id)

        self.logger.info(f"Payment {payment.receipt_number} voided by {voided_by.user_id}: {reason}")
        return payment

    async def get_payment(self, payment_id: int) -> Payment:
        payment = await self.uow.run_read(lambda: self.uow.payments.get_by_id(payment_id))
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")
        return payment

    async def list_payments(self, start_date=None, end_date=None) -> List[Payment]:
        start = _as_datetime(start_date)
        end = _as_datetime(end_date, end_of_day=True)
        return await self.uow.run_read(lambda: self.uow.payments.list(start=start, end=end))
