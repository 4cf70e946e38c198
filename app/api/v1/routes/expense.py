from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.core.dependencies import get_id_generator
from app.schemas.expense import ExpenseCreate, ExpenseUpdate, ExpenseOut
from app.services.expense_services import create_expense, delete_expense, edit_expense, get_expense_or_404, list_expenses
from app.services.project_services import get_project_or_404
from app.services.stats_services import parse_window

router = APIRouter()


@router.get("/projects/{project_id}/expenses", response_model=list[ExpenseOut])
async def project_expenses(
    project_id: str,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    categoryId: Optional[str] = None,
    paymentMethodId: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    start, end = parse_window(startDate, endDate)
    await get_project_or_404(db, project_id)
    return await list_expenses(
        db,
        project_id,
        start_date=start,
        end_date=end,
        category_id=categoryId,
        payment_method_id=paymentMethodId,
    )


@router.post("/expenses", response_model=ExpenseOut, status_code=201)
async def add_expense(
    data: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    new_id = Depends(get_id_generator),
):
    return await create_expense(db, data, new_id=new_id)


@router.get("/expenses/{expense_id}", response_model=ExpenseOut)
async def fetch(expense_id: str, db: AsyncSession = Depends(get_db)):
    return await get_expense_or_404(db, expense_id)


@router.put("/expenses/{expense_id}", response_model=ExpenseOut)
async def edit(
    expense_id: str,
    data: ExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    new_id = Depends(get_id_generator),
):
    return await edit_expense(db, expense_id, data, new_id=new_id)


@router.delete("/expenses/{expense_id}")
async def del_expense(expense_id: str, db: AsyncSession = Depends(get_db)):
    return await delete_expense(db, expense_id)
