from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings

engine = create_async_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with async_session() as session:
        yield session


async def init_models(bind=engine):
    # import every model so Base.metadata knows the tables
    import app.models.project  # noqa: F401
    import app.models.member  # noqa: F401
    import app.models.category  # noqa: F401
    import app.models.payment_method  # noqa: F401
    import app.models.expense  # noqa: F401
    import app.models.payment  # noqa: F401
    import app.models.split  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
