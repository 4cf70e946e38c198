from decimal import Decimal
from typing import Dict, List, Sequence

from app.core.utils import ZERO, qround, to_decimal

DEFAULT_TOP_N = 5


def expense_brief(expense) -> dict | None:
    if expense is None:
        return None
    return {
        "id": expense.id,
        "description": expense.description,
        "amount": qround(to_decimal(expense.amount)),
        "date": expense.date,
        "split_type": expense.split_type,
        "category_id": expense.category_id,
        "payment_method_id": expense.payment_method_id,
    }


def member_paid(expense, member_id) -> Decimal:
    return sum(
        (to_decimal(p.amount) for p in expense.payments if p.member_id == member_id),
        ZERO,
    )


def member_owed(expense, member_id) -> Decimal:
    return sum(
        (to_decimal(s.owed_amount) for s in expense.splits if s.member_id == member_id),
        ZERO,
    )


def involves(expense, member_id) -> bool:
    return any(p.member_id == member_id for p in expense.payments) or any(
        s.member_id == member_id for s in expense.splits
    )


def _top_tags(expenses, member_id, tags, attr: str, label: str, top_n: int) -> List[dict]:
    rows = []
    for tag in tags:
        tagged = [e for e in expenses if getattr(e, attr) == tag.id]
        paid = sum((member_paid(e, member_id) for e in tagged), ZERO)
        owed = sum((member_owed(e, member_id) for e in tagged), ZERO)
        if paid > 0 or owed > 0:
            rows.append((paid + owed, tag, paid, owed))

    # list.sort is stable, so equal totals keep the tag order
    rows.sort(key=lambda r: r[0], reverse=True)

    return [
        {
            "id": tag.id,
            "name": tag.name,
            label: getattr(tag, label),
            "paid_amount": qround(paid),
            "owed_amount": qround(owed),
            "total_amount": qround(total),
        }
        for total, tag, paid, owed in rows[:top_n]
    ]


def member_balance(
    expenses: Sequence,
    member,
    categories: Sequence = (),
    payment_methods: Sequence = (),
    top_n: int = DEFAULT_TOP_N,
) -> dict:
    paid = ZERO
    owed = ZERO
    count = 0
    largest = None
    largest_total = None

    for expense in expenses:
        p = member_paid(expense, member.id)
        o = member_owed(expense, member.id)
        paid += p
        owed += o

        if not involves(expense, member.id):
            continue
        count += 1
        if largest is None or p + o > largest_total:
            largest, largest_total = expense, p + o

    return {
        "id": member.id,
        "name": member.name,
        "paid_amount": qround(paid),
        "owed_amount": qround(owed),
        "balance": qround(paid - owed),
        "expense_count": count,
        "largest_expense": expense_brief(largest),
        "top_categories": _top_tags(expenses, member.id, categories, "category_id", "color", top_n),
        "top_payment_methods": _top_tags(
            expenses, member.id, payment_methods, "payment_method_id", "icon", top_n
        ),
    }


def aggregate_balances(
    expenses: Sequence,
    members: Sequence,
    categories: Sequence = (),
    payment_methods: Sequence = (),
    top_n: int = DEFAULT_TOP_N,
) -> List[dict]:
    """
    Fold the payments and splits of ``expenses`` into one row per member.

    balance = paid_amount - owed_amount, so the balances of a consistent
    expense set sum to zero. Rows follow the order of ``members``.
    """
    return [
        member_balance(expenses, member, categories, payment_methods, top_n)
        for member in members
    ]


def net_balances(balances: Sequence[dict]) -> Dict[str, Decimal]:
    return {row["id"]: row["balance"] for row in balances}
