from datetime import datetime
from decimal import Decimal

import pytest

from app.core.ids import sequential_ids
from app.schemas.transfer import ProjectDocument
from app.services.transfer_services import build_import, export_filename


def document(**overrides):
    data = {
        "name": "Road trip",
        "currency": "€",
        "participants": [
            {"id": "p-ann", "projectId": "old", "name": "Ann"},
            {"id": "p-ben", "projectId": "old", "name": "Ben"},
        ],
        "categories": [{"id": "c-food", "name": "Food", "color": None}],
        "paymentMethods": [{"id": "m-card", "name": "Card"}],
        "expenses": [
            {
                "id": "x1",
                "expenseDate": "2024-05-01T10:00:00Z",
                "title": "Dinner",
                "categoryId": "c-food",
                "paymentMethodId": "m-card",
                "amount": 40,
                "paidById": "p-ann",
                "splitType": "even",
                "paidFor": [
                    {"memberId": "p-ann", "owedAmount": 38},
                    {"memberId": "p-ben", "owedAmount": 2},
                ],
            }
        ],
    }
    data.update(overrides)
    return ProjectDocument.model_validate(data)


def expense_doc(**overrides):
    data = {
        "title": "Fuel",
        "amount": 40,
        "paidById": "p-ann",
        "splitType": "even",
        "paidFor": [{"memberId": "p-ann"}, {"memberId": "p-ben"}],
    }
    data.update(overrides)
    return data


class TestBuildImport:

    def test_owed_amounts_are_recomputed(self):
        plan = build_import(document(), sequential_ids("t"))

        (expense,) = plan.expenses
        assert [s.owed_amount for s in expense.splits] == [Decimal("20.00"), Decimal("20.00")]
        assert plan.warnings == []

    def test_ids_are_remapped(self):
        plan = build_import(document(), sequential_ids("t"))

        ann, ben = plan.members
        (expense,) = plan.expenses
        assert plan.project.id == "t-1"
        assert (ann.id, ben.id) == ("t-2", "t-3")
        assert ann.project_id == plan.project.id
        assert expense.category_id == plan.categories[0].id
        assert expense.payment_method_id == plan.payment_methods[0].id
        assert [s.member_id for s in expense.splits] == [ann.id, ben.id]

    def test_single_payer_covers_full_amount(self):
        plan = build_import(document(), sequential_ids("t"))

        (payment,) = plan.expenses[0].payments
        assert payment.member_id == plan.members[0].id
        assert payment.amount == Decimal("40.00")

    def test_aware_dates_are_stored_as_naive_utc(self):
        plan = build_import(document(), sequential_ids("t"))
        assert plan.expenses[0].date == datetime(2024, 5, 1, 10, 0)

    def test_tag_defaults(self):
        plan = build_import(document(), sequential_ids("t"))

        assert plan.categories[0].color == "#808080"
        assert plan.payment_methods[0].icon == ""

    def test_currency_symbol_is_resolved(self):
        plan = build_import(document(currency="€"), sequential_ids("t"))
        assert plan.project.currency == "EUR"

    def test_currency_code_is_case_insensitive(self):
        plan = build_import(document(currency="gbp"), sequential_ids("t"))
        assert plan.project.currency == "GBP"

    def test_unknown_currency_falls_back(self):
        plan = build_import(document(currency="doubloons"), sequential_ids("t"))

        assert plan.project.currency == "USD"
        assert plan.warnings == ["Unrecognized currency 'doubloons', defaulting to USD"]

    def test_unmapped_split_entry_is_skipped(self):
        doc = document(expenses=[expense_doc(paidFor=[
            {"memberId": "p-ann"},
            {"memberId": "ghost"},
        ])])
        plan = build_import(doc, sequential_ids("t"))

        (expense,) = plan.expenses
        assert [s.owed_amount for s in expense.splits] == [Decimal("40.00")]
        assert plan.warnings == [
            "Skipping split for expense 'Fuel' - could not find mapping for original member ID ghost"
        ]

    def test_unmapped_tags_become_none(self):
        doc = document(expenses=[expense_doc(categoryId="gone", paymentMethodId="gone")])
        (expense,) = build_import(doc, sequential_ids("t")).expenses

        assert expense.category_id is None
        assert expense.payment_method_id is None

    def test_unmapped_payer(self):
        plan = build_import(document(expenses=[expense_doc(paidById="ghost")]), sequential_ids("t"))

        assert plan.expenses[0].payments == []
        assert plan.warnings == ["No payer could be mapped for expense 'Fuel'"]

    def test_shares_split(self):
        doc = document(expenses=[expense_doc(splitType="shares", paidFor=[
            {"memberId": "p-ann", "shares": 1},
            {"memberId": "p-ben", "shares": 3},
        ])])
        (expense,) = build_import(doc, sequential_ids("t")).expenses

        assert [s.owed_amount for s in expense.splits] == [Decimal("10.00"), Decimal("30.00")]
        assert [s.shares for s in expense.splits] == [1, 3]

    def test_inconsistent_percentages_are_reported(self):
        doc = document(expenses=[expense_doc(amount=100, splitType="percent", paidFor=[
            {"memberId": "p-ann", "percent": 0.5},
            {"memberId": "p-ben", "percent": 0.3},
        ])])
        plan = build_import(doc, sequential_ids("t"))

        assert [s.owed_amount for s in plan.expenses[0].splits] == [Decimal("50.00"), Decimal("30.00")]
        assert plan.warnings == ["Split allocation of expense 'Fuel' does not add up to its amount"]

    def test_missing_date_uses_now(self):
        plan = build_import(document(expenses=[expense_doc()]), sequential_ids("t"))
        assert plan.expenses[0].date is not None


@pytest.mark.parametrize("name, expected", [
    ("Flat share", "Flat_share-KostosExport.json"),
    ("Trip: Rome/Paris", "Trip_Rome_Paris-KostosExport.json"),
    ("???", "project-KostosExport.json"),
])
def test_export_filename(name, expected):
    assert export_filename(name) == expected


class TestTransferEndpoints:

    async def test_import_document(self, client):
        payload = document().model_dump(mode="json", by_alias=True)

        res = await client.post("/api/v1/projects/import", json=payload)
        assert res.status_code == 201
        body = res.json()
        assert body["warnings"] == []

        expenses = (await client.get(f"/api/v1/projects/{body['project_id']}/expenses")).json()
        assert [s["owed_amount"] for s in expenses[0]["splits"]] == [20.0, 20.0]

        project = (await client.get(f"/api/v1/projects/{body['project_id']}")).json()
        assert project["currency"] == "EUR"
        assert [m["name"] for m in project["members"]] == ["Ann", "Ben"]

    async def test_malformed_document(self, client):
        res = await client.post("/api/v1/projects/import", json={"name": "Broken"})

        assert res.status_code == 400
        assert res.json() == {"detail": "Invalid import data format"}

    async def test_export_headers(self, client, project):
        res = await client.get(f"/api/v1/projects/{project['id']}/export")

        assert res.status_code == 200
        assert res.headers["content-disposition"] == 'attachment; filename="Flat_share-KostosExport.json"'
        body = res.json()
        assert body["name"] == "Flat share"
        assert body["currency"] == "EUR"
        assert len(body["participants"]) == 3
        assert len(body["paymentMethods"]) == 4

    async def test_export_unknown_project(self, client):
        res = await client.get("/api/v1/projects/missing/export")
        assert res.status_code == 404

    async def test_export_then_import_keeps_balances(self, client, project):
        alice, bob, carol = (m["id"] for m in project["members"])
        res = await client.post("/api/v1/expenses", json={
            "project_id": project["id"],
            "description": "Groceries",
            "amount": 90,
            "date": "2024-01-15T12:00:00",
            "split_type": "shares",
            "payments": [{"member_id": alice, "amount": 90}],
            "splits": [
                {"member_id": alice, "shares": 1},
                {"member_id": bob, "shares": 1},
                {"member_id": carol, "shares": 1},
            ],
        })
        assert res.status_code == 201

        exported = (await client.get(f"/api/v1/projects/{project['id']}/export")).json()
        imported = await client.post("/api/v1/projects/import", json=exported)
        assert imported.status_code == 201
        assert imported.json()["warnings"] == []

        before = (await client.get(f"/api/v1/projects/{project['id']}/balances")).json()
        after = (await client.get(f"/api/v1/projects/{imported.json()['project_id']}/balances")).json()

        def summary(balances):
            return [(m["name"], m["balance"]) for m in balances["members"]]

        assert summary(after) == summary(before)
        assert summary(after) == [("Alice", 60.0), ("Bob", -30.0), ("Carol", -30.0)]
        assert after["currency"] == "EUR"
