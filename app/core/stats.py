"""
Project statistics.

Everything here is a pure function of already-fetched rows: the caller
restricts the expense set (date window, category, payment method) before
calling ``aggregate_stats``. The same inputs always give an equal report.
"""
import copy
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from app.core.ledger import (
    DEFAULT_TOP_N,
    aggregate_balances,
    expense_brief,
    involves,
    member_owed,
    member_paid,
)
from app.core.splits import SPLIT_TYPES
from app.core.utils import ZERO, qround, to_decimal

HUNDRED = Decimal("100")

DAY_OF_WEEK_LABELS = [
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"
]

NO_PAYMENT_METHOD_ID = "none"
NO_PAYMENT_METHOD_NAME = "No Payment Method"
NO_PAYMENT_METHOD_ICON = "❓"

NARROWABLE = {
    "category": "expenses_by_category",
    "payment_method": "expenses_by_payment_method",
}


def month_key(d) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def day_of_week(d) -> int:
    # Sunday=0 .. Saturday=6
    return (d.weekday() + 1) % 7


def _total(expenses) -> Decimal:
    return sum((to_decimal(e.amount) for e in expenses), ZERO)


def _largest(expenses):
    largest = None
    for expense in expenses:
        if largest is None or to_decimal(expense.amount) > to_decimal(largest.amount):
            largest = expense
    return largest


def _percent_of(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return qround(ZERO)
    return qround(part / whole * HUNDRED)


def _change_percent(current: Decimal, previous: Decimal) -> Decimal:
    if previous == 0:
        return qround(HUNDRED)
    return qround((current - previous) / previous * HUNDRED)


def _summary(expenses) -> dict:
    total = _total(expenses)
    count = len(expenses)
    return {
        "total_amount": qround(total),
        "expense_count": count,
        "average_amount": qround(total / count) if count else qround(ZERO),
        "largest_expense": expense_brief(_largest(expenses)),
    }


def _dimension_entry(tag_fields: dict, tagged, members, grand_total: Decimal) -> dict:
    total = _total(tagged)
    summary = _summary(tagged)
    return {
        **tag_fields,
        "total_amount": summary["total_amount"],
        "percentage": _percent_of(total, grand_total),
        "expense_count": summary["expense_count"],
        "average_amount": summary["average_amount"],
        "largest_expense": summary["largest_expense"],
        "member_spending": aggregate_balances(tagged, members),
    }


def _sorted_by_total(rows: List[dict]) -> List[dict]:
    return sorted(rows, key=lambda r: r["total_amount"], reverse=True)


def by_category(expenses, members, categories, grand_total) -> List[dict]:
    rows = [
        _dimension_entry(
            {"id": c.id, "name": c.name, "color": c.color},
            [e for e in expenses if e.category_id == c.id],
            members,
            grand_total,
        )
        for c in categories
    ]
    return _sorted_by_total(rows)


def by_payment_method(expenses, members, payment_methods, grand_total) -> List[dict]:
    rows = _sorted_by_total([
        _dimension_entry(
            {"id": m.id, "name": m.name, "icon": m.icon},
            [e for e in expenses if e.payment_method_id == m.id],
            members,
            grand_total,
        )
        for m in payment_methods
    ])

    untagged = [e for e in expenses if not e.payment_method_id]
    if untagged:
        rows.append(_dimension_entry(
            {"id": NO_PAYMENT_METHOD_ID, "name": NO_PAYMENT_METHOD_NAME, "icon": NO_PAYMENT_METHOD_ICON},
            untagged,
            members,
            grand_total,
        ))
    return rows


def by_month(expenses) -> List[dict]:
    months: Dict[str, Decimal] = {}
    for expense in expenses:
        key = month_key(expense.date)
        months[key] = months.get(key, ZERO) + to_decimal(expense.amount)

    # "YYYY-MM" sorts chronologically as a string
    return [{"month": k, "amount": qround(months[k])} for k in sorted(months)]


def monthly_trends(months: List[dict]) -> List[dict]:
    trends = []
    for i, row in enumerate(months):
        change = qround(ZERO) if i == 0 else _change_percent(row["amount"], months[i - 1]["amount"])
        trends.append({**row, "change_percent": change})
    return trends


def by_day_of_week(expenses) -> List[dict]:
    counts = [0] * 7
    amounts = [ZERO] * 7
    for expense in expenses:
        i = day_of_week(expense.date)
        counts[i] += 1
        amounts[i] += to_decimal(expense.amount)

    return [
        {"day": DAY_OF_WEEK_LABELS[i], "index": i, "count": counts[i], "amount": qround(amounts[i])}
        for i in range(7)
    ]


def by_day_of_month(expenses) -> List[dict]:
    counts = [0] * 31
    amounts = [ZERO] * 31
    for expense in expenses:
        i = expense.date.day - 1
        counts[i] += 1
        amounts[i] += to_decimal(expense.amount)

    return [
        {"day": i + 1, "count": counts[i], "amount": qround(amounts[i])}
        for i in range(31)
    ]


def by_split_type(expenses) -> Dict[str, dict]:
    buckets = {t: {"count": 0, "amount": ZERO} for t in SPLIT_TYPES}
    for expense in expenses:
        bucket = buckets.get(expense.split_type)
        if bucket is None:
            continue
        bucket["count"] += 1
        bucket["amount"] += to_decimal(expense.amount)

    return {t: {"count": b["count"], "amount": qround(b["amount"])} for t, b in buckets.items()}


def personal_stats(expenses, member, spending_row: dict) -> dict:
    monthly: Dict[str, List[Decimal]] = {}
    for expense in expenses:
        if not involves(expense, member.id):
            continue
        paid_owed = monthly.setdefault(month_key(expense.date), [ZERO, ZERO])
        paid_owed[0] += member_paid(expense, member.id)
        paid_owed[1] += member_owed(expense, member.id)

    months = [
        {"month": k, "paid_amount": qround(monthly[k][0]), "owed_amount": qround(monthly[k][1])}
        for k in sorted(monthly)
    ]

    trend = qround(ZERO)
    if len(months) >= 2:
        previous = months[-2]["owed_amount"]
        if previous != 0:
            trend = qround((months[-1]["owed_amount"] - previous) / previous * HUNDRED)

    return {
        "member": {"id": member.id, "name": member.name},
        "summary": {
            "paid_amount": spending_row["paid_amount"],
            "owed_amount": spending_row["owed_amount"],
            "balance": spending_row["balance"],
            "expense_count": spending_row["expense_count"],
            "largest_expense": spending_row["largest_expense"],
        },
        "top_categories": spending_row["top_categories"],
        "top_payment_methods": spending_row["top_payment_methods"],
        "monthly_spending": months,
        "spending_trend": trend,
    }


def aggregate_stats(
    expenses: Sequence,
    members: Sequence,
    categories: Sequence,
    payment_methods: Sequence,
    focus_member_id: Optional[str] = None,
    top_n: int = DEFAULT_TOP_N,
) -> dict:
    """
    Build the statistics report for an already-filtered expense set.

    ``expenses`` must carry their ``payments`` and ``splits``. When
    ``focus_member_id`` names one of ``members`` the report also holds
    that member's personal stats, otherwise ``personal_stats`` is None.
    """
    expenses = list(expenses)
    grand_total = _total(expenses)

    spending = aggregate_balances(expenses, members, categories, payment_methods, top_n)
    spending_by_id = {row["id"]: row for row in spending}
    spending = sorted(spending, key=lambda r: r["paid_amount"], reverse=True)

    months = by_month(expenses)

    personal = None
    focus = next((m for m in members if m.id == focus_member_id), None) if focus_member_id else None
    if focus is not None:
        personal = personal_stats(expenses, focus, spending_by_id[focus.id])

    return {
        "summary": _summary(expenses),
        "expenses_by_category": by_category(expenses, members, categories, grand_total),
        "expenses_by_payment_method": by_payment_method(expenses, members, payment_methods, grand_total),
        "expenses_by_month": months,
        "monthly_trends": monthly_trends(months),
        "expenses_by_day_of_week": by_day_of_week(expenses),
        "expenses_by_day_of_month": by_day_of_month(expenses),
        "expenses_by_split_type": by_split_type(expenses),
        "member_spending": spending,
        "personal_stats": personal,
    }


def narrow_report(report: dict, dimension: str, key: str) -> dict:
    """
    Drill a report down to one category or payment method.

    Returns a new report: the summary comes from the selected entry, the
    breakdown for ``dimension`` keeps only that entry and member spending
    is scoped to it. Month and day-of-week breakdowns are not kept per
    dimension, so they become None. The result never shares nested data
    with ``report``; an unknown ``key`` returns an unchanged copy.
    """
    if dimension not in NARROWABLE:
        raise ValueError(f"Cannot narrow a report by '{dimension}'")

    narrowed = copy.deepcopy(report)

    field = NARROWABLE[dimension]
    entry = next((row for row in narrowed.get(field) or [] if row["id"] == key), None)
    if entry is None:
        return narrowed

    narrowed.update({
        "summary": {
            "total_amount": entry["total_amount"],
            "expense_count": entry["expense_count"],
            "average_amount": entry["average_amount"],
            "largest_expense": entry["largest_expense"],
        },
        field: [entry],
        "member_spending": entry["member_spending"],
        "expenses_by_month": None,
        "expenses_by_day_of_week": None,
    })
    return narrowed
