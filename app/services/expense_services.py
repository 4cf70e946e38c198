from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from fastapi import HTTPException
import structlog

from app.core.ids import IdGenerator, uuid_id
from app.core.splits import SplitAllocation, compute_split
from app.core.utils import commit_or_500, naive_utc, now_naive_utc, qround, within_tolerance, ZERO
from app.models.expense import Expense
from app.models.payment import Payment
from app.models.split import Split
from app.models.member import Member
from app.models.category import Category
from app.models.payment_method import PaymentMethod
from app.services.project_services import get_project_or_404

logger = structlog.get_logger(__name__)


def _with_children(q):
    return q.options(selectinload(Expense.payments), selectinload(Expense.splits))


async def list_expenses(
    db: AsyncSession,
    project_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    category_id: Optional[str] = None,
    payment_method_id: Optional[str] = None,
):
    """Expenses of a project, newest first, with payments and splits loaded."""
    q = _with_children(select(Expense)).where(Expense.project_id == project_id)

    if start_date:
        q = q.where(Expense.date >= start_date)

    if end_date:
        q = q.where(Expense.date <= end_date)

    if category_id:
        q = q.where(Expense.category_id == category_id)

    if payment_method_id:
        q = q.where(Expense.payment_method_id == payment_method_id)

    q = q.order_by(Expense.date.desc(), Expense.created_at.desc())

    res = await db.execute(q)
    return res.scalars().all()


async def get_expense_or_404(db: AsyncSession, expense_id: str) -> Expense:
    res = await db.execute(_with_children(select(Expense)).where(Expense.id == expense_id))
    expense = res.scalar_one_or_none()

    if not expense:
        raise HTTPException(404, "Expense not found")

    return expense


async def _check_tags(db: AsyncSession, project_id: str, category_id, payment_method_id):
    if category_id:
        q = select(Category.id).where(Category.id == category_id, Category.project_id == project_id)
        if not (await db.execute(q)).scalar_one_or_none():
            raise HTTPException(400, "Category does not belong to this project")

    if payment_method_id:
        q = select(PaymentMethod.id).where(
            PaymentMethod.id == payment_method_id,
            PaymentMethod.project_id == project_id
        )
        if not (await db.execute(q)).scalar_one_or_none():
            raise HTTPException(400, "Payment method does not belong to this project")


async def _build_children(db: AsyncSession, project_id: str, data, new_id: IdGenerator):
    # 1. No member twice on the same side
    payer_ids = [p.member_id for p in data.payments]
    if len(payer_ids) != len(set(payer_ids)):
        raise HTTPException(400, "Duplicate members found in payments")

    split_ids = [s.member_id for s in data.splits]
    if len(split_ids) != len(set(split_ids)):
        raise HTTPException(400, "Duplicate members found in splits")

    # 2. Everyone involved belongs to the project
    res = await db.execute(select(Member.id).where(Member.project_id == project_id))
    project_members = set(res.scalars().all())

    if not set(payer_ids) | set(split_ids) <= project_members:
        raise HTTPException(400, "Some members are not part of this project")

    # 3. Payments cover the expense exactly
    paid = sum((p.amount for p in data.payments), ZERO)
    if qround(paid) != qround(data.amount):
        raise HTTPException(400, "Sum of payments must equal the expense amount")

    # 4. Owed amounts always come from the split calculator
    allocations = [
        SplitAllocation(s.member_id, amount=s.amount, shares=s.shares, percent=s.percent)
        for s in data.splits
    ]
    owed = compute_split(data.amount, data.split_type, allocations)

    splits = [
        Split(
            id=new_id(),
            member_id=member_id,
            amount=raw.amount,
            shares=raw.shares,
            percent=raw.percent,
            owed_amount=qround(amount),
        )
        for (member_id, amount), raw in zip(owed, data.splits)
    ]

    owed_total = sum((s.owed_amount for s in splits), ZERO)
    if not within_tolerance(owed_total, data.amount, len(splits)):
        raise HTTPException(400, "Split amounts must add up to the expense amount")

    payments = [
        Payment(id=new_id(), member_id=p.member_id, amount=qround(p.amount))
        for p in data.payments
    ]

    return payments, splits


async def create_expense(db: AsyncSession, data, new_id: IdGenerator = uuid_id):
    await get_project_or_404(db, data.project_id)
    await _check_tags(db, data.project_id, data.category_id, data.payment_method_id)

    payments, splits = await _build_children(db, data.project_id, data, new_id)

    expense = Expense(
        id=new_id(),
        project_id=data.project_id,
        description=data.description,
        amount=qround(data.amount),
        date=naive_utc(data.date) or now_naive_utc(),
        split_type=data.split_type.value,
        category_id=data.category_id or None,
        payment_method_id=data.payment_method_id or None,
        notes=data.notes or None,
        payments=payments,
        splits=splits,
    )
    db.add(expense)

    await commit_or_500(db, "Failed to create expense", project_id=data.project_id)
    logger.info(
        "expense_created",
        project_id=data.project_id,
        expense_id=expense.id,
        split_type=expense.split_type,
    )

    return expense


async def edit_expense(db: AsyncSession, expense_id: str, data, new_id: IdGenerator = uuid_id):
    expense = await get_expense_or_404(db, expense_id)

    await _check_tags(db, expense.project_id, data.category_id, data.payment_method_id)
    payments, splits = await _build_children(db, expense.project_id, data, new_id)

    expense.description = data.description
    expense.amount = qround(data.amount)
    expense.date = naive_utc(data.date) or now_naive_utc()
    expense.split_type = data.split_type.value
    expense.category_id = data.category_id or None
    expense.payment_method_id = data.payment_method_id or None
    expense.notes = data.notes or None

    # old children are orphaned and deleted in the same commit
    expense.payments = payments
    expense.splits = splits

    await commit_or_500(db, "Failed to update expense", expense_id=expense_id)
    logger.info("expense_updated", expense_id=expense_id, split_type=expense.split_type)

    return expense


async def delete_expense(db: AsyncSession, expense_id: str):
    expense = await get_expense_or_404(db, expense_id)

    # payments and splits cascade
    await db.delete(expense)
    await commit_or_500(db, "Failed to delete expense", expense_id=expense_id)
    logger.info("expense_deleted", expense_id=expense_id)

    return {"status": "deleted", "id": expense_id}
