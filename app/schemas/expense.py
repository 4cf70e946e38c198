from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from app.core.splits import SplitType


class PaymentInput(BaseModel):
    member_id: str
    amount: Decimal = Field(gt=0)


class SplitInput(BaseModel):
    member_id: str
    amount: Optional[Decimal] = Field(default=None, ge=0)
    shares: Optional[int] = Field(default=None, ge=0)
    percent: Optional[Decimal] = Field(default=None, ge=0, le=1)


class ExpenseUpdate(BaseModel):
    description: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    date: Optional[datetime] = None
    split_type: SplitType
    category_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    notes: Optional[str] = None
    payments: List[PaymentInput] = Field(min_length=1)
    splits: List[SplitInput] = Field(min_length=1)


class ExpenseCreate(ExpenseUpdate):
    project_id: str


class PaymentOut(BaseModel):
    id: str
    member_id: str
    amount: float

    class Config:
        from_attributes = True


class SplitOut(BaseModel):
    id: str
    member_id: str
    amount: Optional[float] = None
    shares: Optional[int] = None
    percent: Optional[float] = None
    owed_amount: float

    class Config:
        from_attributes = True


class ExpenseOut(BaseModel):
    id: str
    project_id: str
    description: str
    amount: float
    date: datetime
    split_type: str
    category_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    notes: Optional[str] = None
    payments: List[PaymentOut]
    splits: List[SplitOut]

    class Config:
        from_attributes = True
