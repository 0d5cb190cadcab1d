# technurture/utils/database.py

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base

# ────────────── Base for the relational models ──────────────
Base = declarative_base()


def normalize_database_url(url: str) -> str:
    """
    Hosting providers hand out postgres:// URLs; SQLAlchemy's async engine
    needs the driver spelled out.
    """
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://"):]
    elif url.startswith("sqlite://"):
        url = "sqlite+aiosqlite://" + url[len("sqlite://"):]
    return url


# ────────────── Async engine ──────────────
def make_engine(database_url: str) -> AsyncEngine:
    url = normalize_database_url(database_url)
    options = {"echo": False}
    if not url.startswith("sqlite"):
        options.update(pool_pre_ping=True, pool_recycle=1800)
    return create_async_engine(url, **options)


# ────────────── Async session factory ──────────────
def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create every table that does not exist yet."""
    # models register themselves on Base when imported
    import technurture.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
