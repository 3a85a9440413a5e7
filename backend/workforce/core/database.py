from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from workforce.core.config import settings


def engine_options(url: str) -> dict:
    """SQLite (the default) is shared across threads; server databases get liveness checks."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG, **engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db():
    """Request-scoped session; anything left uncommitted after an error is rolled back."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables():
    """Create all tables (local development without Alembic)."""
    import workforce.models  # noqa – register every model
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
