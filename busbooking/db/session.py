from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from busbooking.config import Settings
from busbooking.db.base import Base


class Database:
    """Engine and session factory built once from the process settings."""

    def __init__(self, settings: Settings):
        self.url = str(settings.DATABASE_URL)
        # create async engine
        if self.url.startswith("sqlite"):
            self.engine = create_async_engine(self.url, echo=settings.DEBUG, connect_args={"timeout": 30})
            _serialize_sqlite_writers(self.engine)
        else:
            self.engine = create_async_engine(self.url, echo=settings.DEBUG, pool_pre_ping=True)
        # session factory
        self.session = async_sessionmaker(bind=self.engine, class_=AsyncSession, expire_on_commit=False)

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    async def create_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self):
        await self.engine.dispose()


def _serialize_sqlite_writers(engine):
    # SQLite only has database-level locking; take the write lock when the
    # transaction opens so concurrent conditional updates queue up instead
    # of failing on lock upgrade.
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
