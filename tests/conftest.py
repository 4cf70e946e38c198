"""
Shared fixtures.

Every test gets its own in-memory SQLite database; the API client talks
to the app in-process and the app's ``get_db`` is pointed at that
database.
"""
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.dependencies import get_id_generator
from app.core.ids import sequential_ids
from app.db.session import get_db, init_models
from app.main import create_app
from app.models.expense import Expense
from app.models.payment import Payment
from app.models.split import Split


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@asynccontextmanager
async def _no_lifespan(app):
    yield


@pytest.fixture
async def client(session_factory):
    app = create_app(lifespan=_no_lifespan)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    ids = sequential_ids("row")
    app.dependency_overrides[get_id_generator] = lambda: ids

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _d(value):
    return None if value is None else Decimal(str(value))


def build_expense(
    id,
    amount,
    paid=None,
    owed=None,
    date=datetime(2024, 1, 15, 12, 0),
    split_type="even",
    category_id=None,
    payment_method_id=None,
):
    """Transient expense with payments ``paid`` and splits ``owed`` ({member: amount})."""
    paid = paid or {}
    owed = owed or {}
    return Expense(
        id=id,
        project_id="p1",
        description=f"Expense {id}",
        amount=_d(amount),
        date=date,
        split_type=split_type,
        category_id=category_id,
        payment_method_id=payment_method_id,
        payments=[
            Payment(id=f"{id}-pay-{m}", member_id=m, amount=_d(a)) for m, a in paid.items()
        ],
        splits=[
            Split(id=f"{id}-split-{m}", member_id=m, owed_amount=_d(a)) for m, a in owed.items()
        ],
    )


@pytest.fixture
def make_expense():
    return build_expense


@pytest.fixture
def members():
    return [
        SimpleNamespace(id="alice", name="Alice"),
        SimpleNamespace(id="bob", name="Bob"),
        SimpleNamespace(id="carol", name="Carol"),
    ]


@pytest.fixture
def categories():
    return [
        SimpleNamespace(id="food", name="Food", color="#ef4444"),
        SimpleNamespace(id="rent", name="Rent", color="#3b82f6"),
        SimpleNamespace(id="fun", name="Fun", color="#8b5cf6"),
    ]


@pytest.fixture
def payment_methods():
    return [
        SimpleNamespace(id="card", name="Card", icon="💳"),
        SimpleNamespace(id="cash", name="Cash", icon="💵"),
    ]


@pytest.fixture
async def project(client):
    """A project with Alice, Bob and Carol and the default categories."""
    res = await client.post(
        "/api/v1/projects/",
        json={"name": "Flat share", "currency": "EUR", "members": ["Alice", "Bob", "Carol"]},
    )
    assert res.status_code == 201
    return res.json()
