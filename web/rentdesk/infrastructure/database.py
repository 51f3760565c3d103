from typing import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from rentdesk.core import get_settings


settings = get_settings()

_engine_kwargs = {
    "echo": settings.DB_ECHO,
    "pool_pre_ping": True,  # Enable connection health checks
}
# SQLite (used by the test-suite) does not accept a sized pool
if not settings.DB_DSN.startswith("sqlite"):
    _engine_kwargs["pool_size"] = settings.DB_POOL_SIZE

# Create async engine
engine = create_async_engine(settings.DB_DSN, **_engine_kwargs)

if settings.DB_DSN.startswith("sqlite"):
    # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs behave as on Postgres

    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _sqlite_begin(conn):
        conn.exec_driver_sql("BEGIN")

# Create async session factory
AsyncSessionFactory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
