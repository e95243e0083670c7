from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from core.settings import settings


def build_engine(database_uri: str):
    if database_uri.startswith("sqlite"):
        return create_async_engine(database_uri, connect_args={"check_same_thread": False})

    return create_async_engine(
        database_uri,
        pool_pre_ping=True,
        pool_size=settings.POSTGRES_POOL_SIZE,
        max_overflow=settings.POSTGRES_MAX_OVERFLOW,
        pool_recycle=600,
        pool_use_lifo=True,
    )


async_engine = build_engine(settings.SQLALCHEMY_DATABASE_URI)
AsyncSessionLocal = async_sessionmaker(async_engine, autocommit=False, expire_on_commit=False)
