from loguru import logger
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from AppSettings import settings


def engine_options(database_url: str) -> dict:
    options = {"echo": settings.DB_ECHO}
    if database_url.startswith("postgresql+asyncpg"):
        options["connect_args"] = {"command_timeout": settings.DB_COMMAND_TIMEOUT}
    return options


class SqlAlchemySetup:
    #region SQLAlchemy setup
    DATABASE_URL = settings.DATABASE_URL
    async_engine = create_async_engine(DATABASE_URL, **engine_options(DATABASE_URL))
    async_session_maker = async_sessionmaker(autoflush=False, bind=async_engine, expire_on_commit=False)
    Base = declarative_base()

    @classmethod
    def configure(cls, database_url: str, **options):
        """Points the engine and session factory at another database.

        Extra keyword arguments are passed to ``create_async_engine``.
        """
        merged = engine_options(database_url)
        merged.update(options)
        cls.DATABASE_URL = database_url
        cls.async_engine = create_async_engine(database_url, **merged)
        cls.async_session_maker = async_sessionmaker(autoflush=False, bind=cls.async_engine, expire_on_commit=False)
        logger.info("Database engine configured for {url}", url=cls.async_engine.url.render_as_string(hide_password=True))

    async def create_async_tables(self):
        async with self.async_engine.begin() as conn:
            await conn.run_sync(self.Base.metadata.create_all)
        logger.info("Database tables ensured: {tables}", tables=list(self.Base.metadata.tables))

    async def drop_async_tables(self):
        async with self.async_engine.begin() as conn:
            await conn.run_sync(self.Base.metadata.drop_all)

    async def dispose(self):
        await self.async_engine.dispose()
        logger.info("Database engine disposed")
    #endregion SQLAlchemy setup
