from collections.abc import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from core.config import settings


class Base(DeclarativeBase):
    pass


def configure_sqlite(engine: AsyncEngine, foreign_keys: bool = True) -> None:
    """Make SQLite behave like the production database for transactions.

    pysqlite starts transactions lazily and never around SAVEPOINT, so
    SQLAlchemy is told to emit BEGIN itself. Foreign keys are off by default
    in SQLite and have to be switched on per connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        if foreign_keys:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(url: str, **kwargs) -> AsyncEngine:
    new_engine = create_async_engine(url, echo=settings.database_echo, **kwargs)
    if make_url(url).get_backend_name() == "sqlite":
        configure_sqlite(new_engine)
    return new_engine


engine = build_engine(settings.database_url)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables():
    import db.models  # noqa: F401  registers every table on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session

