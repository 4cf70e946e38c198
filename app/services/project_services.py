from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fastapi import HTTPException
import structlog

from app.core.config import settings
from app.core.currency import find_currency
from app.core.ids import IdGenerator, uuid_id
from app.core.utils import commit_or_500
from app.models.project import Project
from app.models.member import Member
from app.models.category import Category
from app.models.payment_method import PaymentMethod

logger = structlog.get_logger(__name__)

DEFAULT_CATEGORIES = [
    ("🛒 Groceries", "#84cc16"),
    ("🍽️ Eating Out", "#ef4444"),
    ("⛽ Fuel", "#f59e0b"),
    ("🚗 Transportation", "#f97316"),
    ("🛋️ Furniture", "#a855f7"),
    ("📱 Electronics", "#06b6d4"),
    ("🏠 Rent", "#3b82f6"),
    ("💡 Utilities", "#6366f1"),
    ("🏥 Healthcare", "#ec4899"),
    ("✈️ Travel", "#14b8a6"),
    ("🛍️ Shopping", "#10b981"),
    ("🎮 Entertainment", "#8b5cf6"),
    ("📦 Other", "#64748b"),
]

DEFAULT_PAYMENT_METHODS = [
    ("Card", "💳"),
    ("Cash", "💵"),
    ("Bank Transfer", "🏦"),
    ("Gift Card", "🎁"),
]


def _currency_code(value) -> str:
    if not value:
        return settings.DEFAULT_CURRENCY
    currency = find_currency(value)
    if not currency:
        raise HTTPException(400, f"Unsupported currency '{value}'")
    return currency.code


async def get_project_or_404(db: AsyncSession, project_id: str) -> Project:
    res = await db.execute(select(Project).where(Project.id == project_id))
    project = res.scalar_one_or_none()

    if not project:
        raise HTTPException(404, "Project not found")

    return project


async def list_projects(db: AsyncSession):
    res = await db.execute(select(Project).order_by(Project.created_at, Project.id))
    return res.scalars().all()


async def list_members(db: AsyncSession, project_id: str):
    q = (
        select(Member)
        .where(Member.project_id == project_id)
        .order_by(Member.created_at, Member.id)
    )
    res = await db.execute(q)
    return res.scalars().all()


async def list_categories(db: AsyncSession, project_id: str):
    q = (
        select(Category)
        .where(Category.project_id == project_id)
        .order_by(Category.created_at, Category.id)
    )
    res = await db.execute(q)
    return res.scalars().all()


async def list_payment_methods(db: AsyncSession, project_id: str):
    q = (
        select(PaymentMethod)
        .where(PaymentMethod.project_id == project_id)
        .order_by(PaymentMethod.created_at, PaymentMethod.id)
    )
    res = await db.execute(q)
    return res.scalars().all()


async def create_project(db: AsyncSession, data, new_id: IdGenerator = uuid_id):
    project = Project(
        id=new_id(),
        name=data.name,
        description=data.description or None,
        emoji=data.emoji or "📊",
        currency=_currency_code(data.currency),
    )
    db.add(project)

    for name in data.members:
        db.add(Member(id=new_id(), project_id=project.id, name=name))

    for name, color in DEFAULT_CATEGORIES:
        db.add(Category(id=new_id(), project_id=project.id, name=name, color=color))

    for name, icon in DEFAULT_PAYMENT_METHODS:
        db.add(PaymentMethod(id=new_id(), project_id=project.id, name=name, icon=icon))

    await commit_or_500(db, "Failed to create project", project_id=project.id)
    logger.info("project_created", project_id=project.id, members=len(data.members))

    return await get_project_detail(db, project.id)


async def get_project_detail(db: AsyncSession, project_id: str):
    project = await get_project_or_404(db, project_id)

    return {
        "id": project.id,
        "name": project.name,
        "description": project.description,
        "emoji": project.emoji,
        "currency": project.currency,
        "members": await list_members(db, project_id),
        "categories": await list_categories(db, project_id),
        "payment_methods": await list_payment_methods(db, project_id),
    }


async def update_project(db: AsyncSession, project_id: str, data):
    project = await get_project_or_404(db, project_id)

    if data.name:
        project.name = data.name

    if data.description is not None:
        project.description = data.description or None

    if data.emoji:
        project.emoji = data.emoji

    if data.currency:
        project.currency = _currency_code(data.currency)

    await commit_or_500(db, "Failed to update project", project_id=project_id)
    await db.refresh(project)
    return project
