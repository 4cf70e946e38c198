from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.services.balance_services import get_project_balances

router = APIRouter()


@router.get("/{project_id}/balances")
async def project_balances(
    project_id: str,
    db: AsyncSession = Depends(get_db)
):
    return await get_project_balances(db, project_id)
