from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.core.config import settings
from app.core.stats import aggregate_stats, narrow_report
from app.core.utils import end_of_day, naive_utc
from app.services.expense_services import list_expenses
from app.services.project_services import (
    get_project_or_404,
    list_members,
    list_categories,
    list_payment_methods,
)

logger = structlog.get_logger(__name__)

_datetime = TypeAdapter(datetime)


def parse_date_param(value: Optional[str], label: str) -> Optional[datetime]:
    """Parsed as given; aware values keep their offset."""
    if not value:
        return None
    try:
        return _datetime.validate_python(value)
    except ValidationError:
        raise HTTPException(400, f"Invalid {label} date format")


def parse_window(start_date: Optional[str], end_date: Optional[str]):
    """
    Inclusive naive-UTC bounds.

    The end date is stretched to the end of its own day before it is
    converted to UTC, so an offset like +05:00 keeps the caller's day.
    """
    start = parse_date_param(start_date, "start")
    end = parse_date_param(end_date, "end")
    if end is not None:
        end = end_of_day(end)
    return naive_utc(start), naive_utc(end)


async def get_project_stats(
    db: AsyncSession,
    project_id: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    member_id: Optional[str] = None,
    category_id: Optional[str] = None,
    payment_method_id: Optional[str] = None,
    drill_category_id: Optional[str] = None,
    drill_payment_method_id: Optional[str] = None,
):
    start, end = parse_window(start_date, end_date)

    project = await get_project_or_404(db, project_id)

    members = await list_members(db, project_id)
    categories = await list_categories(db, project_id)
    payment_methods = await list_payment_methods(db, project_id)

    expenses = await list_expenses(
        db,
        project_id,
        start_date=start,
        end_date=end,
        category_id=category_id,
        payment_method_id=payment_method_id,
    )

    report = aggregate_stats(
        expenses,
        members,
        categories,
        payment_methods,
        focus_member_id=member_id,
        top_n=settings.TOP_N,
    )

    if drill_category_id:
        report = narrow_report(report, "category", drill_category_id)

    if drill_payment_method_id:
        report = narrow_report(report, "payment_method", drill_payment_method_id)

    logger.debug("stats_computed", project_id=project_id, expenses=len(expenses))

    return {
        "project_id": project.id,
        "currency": project.currency,
        "time_frame": {"start_date": start, "end_date": end},
        **report,
    }
