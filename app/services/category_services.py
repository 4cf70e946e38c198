from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from fastapi import HTTPException

from app.core.ids import IdGenerator, uuid_id
from app.core.utils import commit_or_500
from app.models.category import Category, DEFAULT_CATEGORY_COLOR
from app.models.payment_method import PaymentMethod, DEFAULT_PAYMENT_METHOD_ICON
from app.models.expense import Expense
from app.services.project_services import get_project_or_404


async def create_category(db: AsyncSession, project_id: str, data, new_id: IdGenerator = uuid_id):
    await get_project_or_404(db, project_id)

    category = Category(
        id=new_id(),
        project_id=project_id,
        name=data.name,
        color=data.color or DEFAULT_CATEGORY_COLOR
    )
    db.add(category)

    await commit_or_500(db, "Failed to create category", project_id=project_id)
    await db.refresh(category)
    return category


async def get_category_or_404(db: AsyncSession, category_id: str) -> Category:
    res = await db.execute(select(Category).where(Category.id == category_id))
    category = res.scalar_one_or_none()

    if not category:
        raise HTTPException(404, "Category not found")

    return category


async def update_category(db: AsyncSession, category_id: str, data):
    if not data.name and not data.color:
        raise HTTPException(400, "Name or color is required for update")

    category = await get_category_or_404(db, category_id)

    if data.name:
        category.name = data.name

    if data.color:
        category.color = data.color

    await commit_or_500(db, "Failed to update category", category_id=category_id)
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: str):
    category = await get_category_or_404(db, category_id)

    # expenses keep existing, just uncategorized
    await db.execute(
        update(Expense)
        .where(Expense.category_id == category_id)
        .values(category_id=None)
    )
    await db.delete(category)

    await commit_or_500(db, "Failed to delete category", category_id=category_id)
    return {"status": "deleted", "id": category_id}


async def create_payment_method(db: AsyncSession, project_id: str, data, new_id: IdGenerator = uuid_id):
    await get_project_or_404(db, project_id)

    method = PaymentMethod(
        id=new_id(),
        project_id=project_id,
        name=data.name,
        icon=data.icon or DEFAULT_PAYMENT_METHOD_ICON
    )
    db.add(method)

    await commit_or_500(db, "Failed to create payment method", project_id=project_id)
    await db.refresh(method)
    return method


async def delete_payment_method(db: AsyncSession, payment_method_id: str):
    res = await db.execute(select(PaymentMethod).where(PaymentMethod.id == payment_method_id))
    method = res.scalar_one_or_none()

    if not method:
        raise HTTPException(404, "Payment method not found")

    await db.execute(
        update(Expense)
        .where(Expense.payment_method_id == payment_method_id)
        .values(payment_method_id=None)
    )
    await db.delete(method)

    await commit_or_500(db, "Failed to delete payment method", payment_method_id=payment_method_id)
    return {"status": "deleted", "id": payment_method_id}
