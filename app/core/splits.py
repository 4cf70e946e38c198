from collections.abc import Hashable
from decimal import Decimal
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple

import structlog

from app.core.utils import ZERO, to_decimal

logger = structlog.get_logger(__name__)


class SplitType(str, Enum):
    EVEN = "even"
    AMOUNT = "amount"
    SHARES = "shares"
    PERCENT = "percent"


SPLIT_TYPES = [t.value for t in SplitType]


class SplitAllocation(NamedTuple):
    member_id: Hashable
    amount: Optional[Decimal] = None
    shares: Optional[int] = None
    percent: Optional[Decimal] = None


def compute_split(
    total,
    split_type: str,
    allocations: Sequence[SplitAllocation],
) -> List[Tuple[Hashable, Decimal]]:
    """
    Allocate ``total`` across ``allocations`` under ``split_type``.

    Returns ``(member_id, owed_amount)`` pairs in input order. Amounts are
    not rounded; the caller quantizes them before storing.

    - even: total / n for everyone, no remainder redistribution
    - amount: the raw amount as given, not checked against total
    - shares: total * shares_i / sum(shares), all zero if sum is zero
    - percent: total * percent_i with percent as a 0-1 fraction, not normalized

    An unknown split type gives every participant zero and logs a warning.
    """
    total = to_decimal(total)
    split_type = split_type.value if isinstance(split_type, SplitType) else split_type

    if not allocations:
        return []

    if split_type == SplitType.EVEN.value:
        each = total / len(allocations)
        return [(a.member_id, each) for a in allocations]

    if split_type == SplitType.AMOUNT.value:
        return [(a.member_id, to_decimal(a.amount)) for a in allocations]

    if split_type == SplitType.SHARES.value:
        total_shares = sum(int(a.shares or 0) for a in allocations)
        if total_shares <= 0:
            return [(a.member_id, ZERO) for a in allocations]
        return [
            (a.member_id, total * Decimal(int(a.shares or 0)) / Decimal(total_shares))
            for a in allocations
        ]

    if split_type == SplitType.PERCENT.value:
        return [(a.member_id, total * to_decimal(a.percent)) for a in allocations]

    logger.warning("unknown_split_type", split_type=split_type, participants=len(allocations))
    return [(a.member_id, ZERO) for a in allocations]
