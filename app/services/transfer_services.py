"""
Project export and import.

Import never trusts the owed amounts of the incoming document: every split
is recomputed with the split calculator from its raw allocation, so the
imported project satisfies the owed == amount invariant whatever the
source looked like.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.currency import resolve_currency
from app.core.ids import IdGenerator, uuid_id
from app.core.splits import SplitAllocation, compute_split
from app.core.utils import commit_or_500, naive_utc, now_naive_utc, qround, within_tolerance, ZERO
from app.models.project import Project
from app.models.member import Member
from app.models.category import Category
from app.models.payment_method import PaymentMethod
from app.models.expense import Expense
from app.models.payment import Payment
from app.models.split import Split
from app.schemas.transfer import (
    CategoryDoc,
    ExpenseDoc,
    ParticipantDoc,
    PaymentMethodDoc,
    ProjectDocument,
    SplitDoc,
)
from app.services.expense_services import list_expenses
from app.services.project_services import (
    get_project_or_404,
    list_members,
    list_categories,
    list_payment_methods,
)

logger = structlog.get_logger(__name__)

IMPORTED_CATEGORY_COLOR = "#808080"
IMPORTED_PAYMENT_METHOD_ICON = ""


@dataclass
class ImportPlan:
    project: Project
    members: List[Member] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    payment_methods: List[PaymentMethod] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def rows(self):
        return [
            self.project,
            *self.members,
            *self.categories,
            *self.payment_methods,
            *self.expenses,
        ]


def _warn(plan: ImportPlan, message: str, **context):
    logger.warning("import_warning", message=message, **context)
    plan.warnings.append(message)


def _build_expense(
    plan: ImportPlan,
    doc: ExpenseDoc,
    member_ids: Dict[str, str],
    category_ids: Dict[str, str],
    payment_method_ids: Dict[str, str],
    new_id: IdGenerator,
) -> Expense:
    expense = Expense(
        id=new_id(),
        project_id=plan.project.id,
        description=doc.title,
        amount=qround(doc.amount),
        date=naive_utc(doc.expense_date) or now_naive_utc(),
        split_type=doc.split_type,
        category_id=category_ids.get(doc.category_id) if doc.category_id else None,
        payment_method_id=payment_method_ids.get(doc.payment_method_id) if doc.payment_method_id else None,
        payments=[],
        splits=[],
    )

    # single payer, who covered the full amount
    payer_id = member_ids.get(doc.paid_by_id) if doc.paid_by_id else None
    if payer_id:
        expense.payments.append(Payment(id=new_id(), member_id=payer_id, amount=expense.amount))
    else:
        _warn(
            plan,
            f"No payer could be mapped for expense '{doc.title}'",
            expense=doc.id,
            paid_by=doc.paid_by_id,
        )

    mapped: List[SplitDoc] = []
    for entry in doc.paid_for:
        if entry.member_id not in member_ids:
            _warn(
                plan,
                f"Skipping split for expense '{doc.title}' - could not find mapping "
                f"for original member ID {entry.member_id}",
                expense=doc.id,
                member=entry.member_id,
            )
            continue
        mapped.append(entry)

    allocations = [
        SplitAllocation(member_ids[e.member_id], amount=e.amount, shares=e.shares, percent=e.percent)
        for e in mapped
    ]
    owed = compute_split(expense.amount, doc.split_type, allocations)

    for (member_id, amount), entry in zip(owed, mapped):
        expense.splits.append(Split(
            id=new_id(),
            member_id=member_id,
            amount=entry.amount,
            shares=entry.shares,
            percent=entry.percent,
            owed_amount=qround(amount),
        ))

    owed_total = sum((s.owed_amount for s in expense.splits), ZERO)
    if expense.splits and not within_tolerance(owed_total, expense.amount, len(expense.splits)):
        _warn(
            plan,
            f"Split allocation of expense '{doc.title}' does not add up to its amount",
            expense=doc.id,
            owed=str(owed_total),
            amount=str(expense.amount),
        )

    return expense


def build_import(document: ProjectDocument, new_id: IdGenerator = uuid_id) -> ImportPlan:
    """
    Turn a foreign export document into fresh, unsaved rows.

    Foreign ids are remapped to new ones; references that cannot be
    mapped become None (category, payment method, payer) or are skipped
    with a warning (split entries).
    """
    currency, warning = resolve_currency(document.currency)

    plan = ImportPlan(project=Project(
        id=new_id(),
        name=document.name,
        currency=currency,
        emoji="📊",
    ))
    if warning:
        plan.warnings.append(warning)

    member_ids: Dict[str, str] = {}
    category_ids: Dict[str, str] = {}
    payment_method_ids: Dict[str, str] = {}

    for participant in document.participants:
        member = Member(id=new_id(), project_id=plan.project.id, name=participant.name)
        member_ids[participant.id] = member.id
        plan.members.append(member)

    for doc in document.categories:
        category = Category(
            id=new_id(),
            project_id=plan.project.id,
            name=doc.name,
            color=doc.color or IMPORTED_CATEGORY_COLOR,
        )
        category_ids[doc.id] = category.id
        plan.categories.append(category)

    for doc in document.payment_methods:
        method = PaymentMethod(
            id=new_id(),
            project_id=plan.project.id,
            name=doc.name,
            icon=doc.icon if doc.icon is not None else IMPORTED_PAYMENT_METHOD_ICON,
        )
        payment_method_ids[doc.id] = method.id
        plan.payment_methods.append(method)

    for doc in document.expenses:
        plan.expenses.append(
            _build_expense(plan, doc, member_ids, category_ids, payment_method_ids, new_id)
        )

    return plan


async def import_project(db: AsyncSession, payload, new_id: IdGenerator = uuid_id):
    try:
        document = ProjectDocument.model_validate(payload)
    except ValidationError as e:
        logger.info("import_rejected", errors=e.error_count())
        raise HTTPException(400, "Invalid import data format")

    plan = build_import(document, new_id)

    db.add_all(plan.rows())
    await commit_or_500(db, "Import failed", project_id=plan.project.id)

    logger.info(
        "project_imported",
        project_id=plan.project.id,
        members=len(plan.members),
        expenses=len(plan.expenses),
        warnings=len(plan.warnings),
    )

    return {"project_id": plan.project.id, "warnings": plan.warnings}


def export_filename(project_name: str) -> str:
    safe = re.sub(r"[^A-Za-z0-9._-]+", "_", project_name).strip("_") or "project"
    return f"{safe}-KostosExport.json"


async def export_project(db: AsyncSession, project_id: str) -> ProjectDocument:
    project = await get_project_or_404(db, project_id)

    members = await list_members(db, project_id)
    categories = await list_categories(db, project_id)
    payment_methods = await list_payment_methods(db, project_id)
    expenses = await list_expenses(db, project_id)

    return ProjectDocument(
        id=project.id,
        name=project.name,
        currency=project.currency,
        participants=[
            ParticipantDoc(id=m.id, project_id=m.project_id, name=m.name)
            for m in members
        ],
        categories=[
            CategoryDoc(id=c.id, project_id=c.project_id, name=c.name, color=c.color)
            for c in categories
        ],
        payment_methods=[
            PaymentMethodDoc(id=m.id, project_id=m.project_id, name=m.name, icon=m.icon)
            for m in payment_methods
        ],
        expenses=[
            ExpenseDoc(
                id=e.id,
                expense_date=e.date,
                title=e.description,
                category_id=e.category_id,
                payment_method_id=e.payment_method_id,
                amount=e.amount,
                paid_by_id=e.payments[0].member_id if e.payments else None,
                split_type=e.split_type,
                paid_for=[
                    SplitDoc(
                        member_id=s.member_id,
                        amount=s.amount,
                        shares=s.shares,
                        percent=s.percent,
                        owed_amount=s.owed_amount,
                    )
                    for s in e.splits
                ],
            )
            for e in expenses
        ],
    )
