from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Dict, List, Optional, Tuple
from collections import deque
from collections.abc import Hashable

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)

getcontext().prec = 28
CENTS = Decimal("0.01")
ZERO = Decimal("0")


def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    # floats go through str() so 0.1 stays 0.1
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def within_tolerance(actual: Decimal, expected: Decimal, rows: int = 1) -> bool:
    """One cent of slack per rounded row."""
    return abs(to_decimal(actual) - to_decimal(expected)) <= CENTS * max(rows, 1)


def naive_utc(d: Optional[datetime]) -> Optional[datetime]:
    if d is None or d.tzinfo is None:
        return d
    return d.astimezone(timezone.utc).replace(tzinfo=None)


def now_naive_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def end_of_day(d: datetime) -> datetime:
    return d.replace(hour=23, minute=59, second=59, microsecond=999000)


async def commit_or_500(db: AsyncSession, failure_message: str, **context):
    """Commit the unit of work, or roll all of it back and answer 500."""
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("commit_failed", reason=failure_message, **context)
        raise HTTPException(500, failure_message)


def simplify_debts(net_map: Dict[Hashable, Decimal]):
    creditors = []
    debtors = []

    for uid, bal in net_map.items():
        if bal > 0:
            creditors.append([uid, bal])
        elif bal < 0:
            debtors.append([uid, -bal])

    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1], reverse=True)

    creditors = deque(creditors)
    debtors = deque(debtors)

    transfers: List[Tuple[Hashable, Hashable, Decimal]] = []

    while creditors and debtors:
        cred_id, cred_amt = creditors[0]
        debt_id, debt_amt = debtors[0]

        pay_amt = qround(min(cred_amt, debt_amt))

        transfers.append((debt_id, cred_id, pay_amt))

        new_cred = qround(cred_amt - pay_amt)
        new_debt = qround(debt_amt - pay_amt)

        creditors.popleft()
        debtors.popleft()

        if new_cred > ZERO:
            creditors.appendleft([cred_id, new_cred])
        if new_debt > ZERO:
            debtors.appendleft([debt_id, new_debt])
    return transfers
