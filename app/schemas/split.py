from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional


class AllocationInput(BaseModel):
    member_id: str
    amount: Optional[Decimal] = Field(default=None, ge=0)
    shares: Optional[int] = Field(default=None, ge=0)
    percent: Optional[Decimal] = Field(default=None, ge=0, le=1)


class SplitPreviewRequest(BaseModel):
    total: Decimal = Field(gt=0)
    # free text on purpose: unknown types give zeros instead of a 422
    split_type: str
    allocations: List[AllocationInput]


class OwedShare(BaseModel):
    member_id: str
    owed_amount: float
