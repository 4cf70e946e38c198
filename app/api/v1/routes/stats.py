from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.services.stats_services import get_project_stats

router = APIRouter()


@router.get("/{project_id}/stats")
async def project_stats(
    project_id: str,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    memberId: Optional[str] = None,
    categoryId: Optional[str] = None,
    paymentMethodId: Optional[str] = None,
    drillCategoryId: Optional[str] = None,
    drillPaymentMethodId: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    return await get_project_stats(
        db,
        project_id,
        start_date=startDate,
        end_date=endDate,
        member_id=memberId,
        category_id=categoryId,
        payment_method_id=paymentMethodId,
        drill_category_id=drillCategoryId,
        drill_payment_method_id=drillPaymentMethodId,
    )
