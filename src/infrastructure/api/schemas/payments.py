from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Dict

from pydantic import BaseModel, Field, field_validator, ConfigDict

from src.domain.common import PaymentMethod
from src.infrastructure.api.schemas.parking import RecordSummary


class PaymentCreate(BaseModel):
    parking_record_id: int
    amount: Decimal = Field(..., ge=0)
    payment_method: PaymentMethod
    transaction_id: Optional[str] = Field(default=None, max_length=100)
    notes: str = Field(default="", max_length=500)

    @field_validator('payment_method')
    def validate_payment_method(cls, v):  # pylint: disable=no-self-argument
        if v == PaymentMethod.NONE:
            raise ValueError("payment method must be cash, card or app")
        return v


class PaymentVoid(BaseModel):
    reason: str = Field(default="", max_length=500)


class PaymentResponse(BaseModel):
    id: int
    parking_record_id: int
    amount: Decimal
    payment_method: PaymentMethod
    payment_date: datetime
    transaction_id: Optional[str] = None
    receipt_number: str
    processed_by: str
    notes: str = ""
    void_status: bool
    void_date: Optional[datetime] = None
    void_reason: Optional[str] = None
    void_by: Optional[str] = None
    status: str
    parking_record: Optional[RecordSummary] = None

    model_config = ConfigDict(from_attributes=True)


class VoidResponse(BaseModel):
    message: str = "Payment voided"
    payment: PaymentResponse


class MethodTotalResponse(BaseModel):
    count: int
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class DailyReportResponse(BaseModel):
    date: date
    total_transactions: int
    total_amount: Decimal
    payment_methods: Dict[str, MethodTotalResponse]
    payments: List[PaymentResponse]

    model_config = ConfigDict(from_attributes=True)
