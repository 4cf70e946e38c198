"""
Project export document.

The same camelCase shape is produced by the export endpoint and accepted
by the import endpoint, so a project can be moved between instances.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class TransferModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ParticipantDoc(TransferModel):
    id: str
    project_id: Optional[str] = None
    name: str


class CategoryDoc(TransferModel):
    id: str
    project_id: Optional[str] = None
    name: str
    color: Optional[str] = None


class PaymentMethodDoc(TransferModel):
    id: str
    project_id: Optional[str] = None
    name: str
    icon: Optional[str] = None


class SplitDoc(TransferModel):
    member_id: str
    amount: Optional[Money] = None
    shares: Optional[int] = None
    percent: Optional[Money] = None
    # informational only, recomputed on import
    owed_amount: Optional[Money] = None


class ExpenseDoc(TransferModel):
    id: Optional[str] = None
    expense_date: Optional[datetime] = None
    title: str
    category_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    amount: Money
    paid_by_id: Optional[str] = None
    split_type: str
    paid_for: List[SplitDoc] = []


class ProjectDocument(TransferModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    currency: str = Field(min_length=1)
    participants: List[ParticipantDoc]
    categories: List[CategoryDoc]
    payment_methods: List[PaymentMethodDoc]
    expenses: List[ExpenseDoc]
