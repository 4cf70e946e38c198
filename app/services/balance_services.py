from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.ledger import aggregate_balances, net_balances
from app.core.utils import CENTS, simplify_debts
from app.services.expense_services import list_expenses
from app.services.project_services import (
    get_project_or_404,
    list_members,
    list_categories,
    list_payment_methods,
)


async def get_project_balances(db: AsyncSession, project_id: str):
    project = await get_project_or_404(db, project_id)

    members = await list_members(db, project_id)
    expenses = await list_expenses(db, project_id)

    rows = aggregate_balances(
        expenses,
        members,
        await list_categories(db, project_id),
        await list_payment_methods(db, project_id),
        top_n=settings.TOP_N,
    )

    # Drop near-zero balances
    net = {
        uid: amt
        for uid, amt in net_balances(rows).items()
        if abs(amt) >= CENTS
    }

    transfers = simplify_debts(net)
    names = {m.id: m.name for m in members}

    return {
        "project_id": project.id,
        "currency": project.currency,
        "members": rows,
        "settlements": [
            {
                "from_id": f,
                "from_name": names.get(f),
                "to_id": t,
                "to_name": names.get(t),
                "amount": a
            }
            for f, t, a in transfers
        ]
    }
