from decimal import Decimal

import pytest

from app.core.splits import SplitAllocation, SplitType, compute_split
from app.core.utils import qround


def owed_of(result):
    return [amount for _, amount in result]


class TestComputeSplit:

    def test_even_split_divides_total(self):
        result = compute_split(Decimal("90"), "even", [SplitAllocation(m) for m in "abc"])
        assert result == [("a", Decimal("30")), ("b", Decimal("30")), ("c", Decimal("30"))]

    def test_even_split_keeps_remainder_undistributed(self):
        result = compute_split(Decimal("100"), SplitType.EVEN, [SplitAllocation(m) for m in "abc"])
        rounded = [qround(a) for a in owed_of(result)]
        assert rounded == [Decimal("33.33")] * 3
        assert sum(rounded) == Decimal("99.99")

    def test_shares_split(self):
        allocations = [
            SplitAllocation("a", shares=1),
            SplitAllocation("b", shares=2),
            SplitAllocation("c", shares=2),
        ]
        assert owed_of(compute_split(Decimal("100"), "shares", allocations)) == [
            Decimal("20"), Decimal("40"), Decimal("40")
        ]

    def test_shares_keep_their_ratio(self):
        allocations = [SplitAllocation("a", shares=3), SplitAllocation("b", shares=1)]
        a, b = owed_of(compute_split(Decimal("80"), "shares", allocations))
        assert a / b == 3
        assert a + b == Decimal("80")

    def test_all_zero_shares_owe_nothing(self):
        allocations = [SplitAllocation("a", shares=0), SplitAllocation("b")]
        assert owed_of(compute_split(Decimal("50"), "shares", allocations)) == [0, 0]

    def test_percent_split(self):
        allocations = [
            SplitAllocation("a", percent=Decimal("0.5")),
            SplitAllocation("b", percent=Decimal("0.3")),
            SplitAllocation("c", percent=Decimal("0.2")),
        ]
        assert owed_of(compute_split(Decimal("50"), "percent", allocations)) == [
            Decimal("25"), Decimal("15"), Decimal("10")
        ]

    def test_percent_is_not_normalized(self):
        allocations = [
            SplitAllocation("a", percent=Decimal("0.5")),
            SplitAllocation("b", percent=Decimal("0.2")),
        ]
        assert owed_of(compute_split(Decimal("100"), "percent", allocations)) == [
            Decimal("50"), Decimal("20")
        ]

    def test_amount_split_is_taken_verbatim(self):
        allocations = [
            SplitAllocation("a", amount=Decimal("12.5")),
            SplitAllocation("b", amount=Decimal("1")),
        ]
        assert owed_of(compute_split(Decimal("99"), "amount", allocations)) == [
            Decimal("12.5"), Decimal("1")
        ]

    def test_missing_amount_counts_as_zero(self):
        assert owed_of(compute_split(Decimal("10"), "amount", [SplitAllocation("a")])) == [0]

    def test_unknown_type_gives_zeros(self):
        result = compute_split(Decimal("10"), "lottery", [SplitAllocation("a"), SplitAllocation("b")])
        assert result == [("a", 0), ("b", 0)]

    def test_no_participants(self):
        assert compute_split(Decimal("10"), "even", []) == []

    def test_accepts_floats(self):
        result = compute_split(10.1, "even", [SplitAllocation("a")])
        assert result == [("a", Decimal("10.1"))]

    @pytest.mark.parametrize("split_type", ["even", "shares", "percent", "amount"])
    def test_consistent_inputs_cover_the_total(self, split_type):
        allocations = [
            SplitAllocation("a", amount=Decimal("30"), shares=1, percent=Decimal("0.25")),
            SplitAllocation("b", amount=Decimal("90"), shares=3, percent=Decimal("0.75")),
        ]
        owed = owed_of(compute_split(Decimal("120"), split_type, allocations))
        assert abs(sum(owed) - Decimal("120")) <= Decimal("0.01")


class TestPreviewEndpoint:

    async def test_preview_rounds_to_cents(self, client):
        res = await client.post("/api/v1/splits/preview", json={
            "total": 100,
            "split_type": "even",
            "allocations": [{"member_id": "a"}, {"member_id": "b"}, {"member_id": "c"}],
        })
        assert res.status_code == 200
        assert res.json() == [
            {"member_id": "a", "owed_amount": 33.33},
            {"member_id": "b", "owed_amount": 33.33},
            {"member_id": "c", "owed_amount": 33.33},
        ]

    async def test_preview_unknown_type(self, client):
        res = await client.post("/api/v1/splits/preview", json={
            "total": 10,
            "split_type": "weird",
            "allocations": [{"member_id": "a"}],
        })
        assert res.status_code == 200
        assert res.json() == [{"member_id": "a", "owed_amount": 0.0}]

    async def test_preview_rejects_non_positive_total(self, client):
        res = await client.post("/api/v1/splits/preview", json={
            "total": 0, "split_type": "even", "allocations": [],
        })
        assert res.status_code == 422
