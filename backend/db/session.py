from sqlalchemy.orm import declarative_base
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy import event
from core.config import settings
import logging
from typing import Any, Dict

Base = declarative_base()
logger = logging.getLogger("aztech_coworks")

def _to_async_database_url(url: str) -> str:
    if not url:
        return url
    # Prefer aiomysql for MySQL and aiosqlite for local SQLite files
    if url.startswith("mysql+pymysql://"):
        return url.replace("mysql+pymysql://", "mysql+aiomysql://", 1)
    if url.startswith("mysql://"):
        return url.replace("mysql://", "mysql+aiomysql://", 1)
    if url.startswith("mysql+asyncmy://"):
        return url.replace("mysql+asyncmy://", "mysql+aiomysql://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url

def _engine_kwargs(url: str) -> Dict[str, Any]:
    """Pool tuning only applies to networked databases; SQLite uses its own pool."""
    kwargs: Dict[str, Any] = {"future": True, "echo": False}
    if url.startswith("sqlite"):
        return kwargs
    # - pool_recycle < DB wait_timeout (often 600s)
    # - pool_timeout short-ish (10-30s)
    kwargs.update(
        pool_pre_ping=bool(settings.DB_PRE_PING),
        pool_recycle=int(settings.DB_POOL_RECYCLE),
        pool_size=int(settings.DB_POOL_SIZE),
        max_overflow=int(settings.DB_MAX_OVERFLOW),
        pool_timeout=int(settings.DB_POOL_TIMEOUT),
        connect_args={"connect_timeout": int(settings.DB_CONNECT_TIMEOUT)},
    )
    return kwargs

def build_engine(url: str):
    async_url = _to_async_database_url(url)
    return create_async_engine(async_url, **_engine_kwargs(async_url))

def build_session_factory(bind) -> async_sessionmaker:
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)

if not settings.USE_MONGO:
    engine = build_engine(settings.DATABASE_URL)
    SessionLocal = build_session_factory(engine)
else:
    # Mongo mode: no SQL engine is created
    engine = None  # type: ignore
    SessionLocal = None  # type: ignore

# Lightweight pool logging
if engine is not None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        logger.debug("DB connect: id=%s", id(connection_record))

    @event.listens_for(engine.sync_engine, "close")
    def _on_close(dbapi_connection, connection_record):
        logger.debug("DB close: id=%s", id(connection_record))
