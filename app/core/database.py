"""
Engine, session factory and the request-scoped session dependency.

Nothing here is created at import time: ``create_app`` builds the engine
from its settings and keeps the session factory on ``app.state``.
"""
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings

Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    url = settings.DATABASE_URL
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # In-memory SQLite must share one connection across threads
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.DATABASE_ECHO, **kwargs)
    return create_engine(url, echo=settings.DATABASE_ECHO, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    # Importing the models registers every table on Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
