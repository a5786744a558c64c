from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config.loader import get_database_url
from .schema import create_all


def get_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine and make sure the schema exists.

    In-memory SQLite shares one connection across threads so that FastAPI's
    threadpool sees the same database.
    """
    kwargs: Dict[str, Any] = {"echo": echo, "future": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, **kwargs)
    create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    # Objects stay readable after commit; repositories hand them to transformers.
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_session(config: Optional[Dict[str, Any]] = None) -> Session:
    """Get a SQLAlchemy session (caller must close it)."""
    engine = get_engine(get_database_url(config))
    return get_session_factory(engine)()


@contextmanager
def session_context(session_factory: Callable[[], Session]) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Rolls back on error and always closes. Repositories commit their own
    mutations, so nothing is committed here.
    """
    session = session_factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def session_dependency(session_factory: Callable[[], Session]) -> Callable[[], Generator[Session, None, None]]:
    """Build a request-scoped FastAPI dependency yielding one session per request."""

    def get_db() -> Generator[Session, None, None]:
        with session_context(session_factory) as session:
            yield session

    return get_db
