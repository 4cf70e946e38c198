from fastapi import APIRouter
from app.core.splits import SplitAllocation, compute_split
from app.core.utils import qround
from app.schemas.split import SplitPreviewRequest, OwedShare

router = APIRouter()


@router.post("/preview", response_model=list[OwedShare], description="preview how a total is split")
async def preview_split(data: SplitPreviewRequest):
    allocations = [
        SplitAllocation(a.member_id, amount=a.amount, shares=a.shares, percent=a.percent)
        for a in data.allocations
    ]
    return [
        {"member_id": member_id, "owed_amount": qround(owed)}
        for member_id, owed in compute_split(data.total, data.split_type, allocations)
    ]
