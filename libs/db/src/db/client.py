"""Engine and session management for the workspace database.

One engine is kept per database URL for the life of the process (or until
:func:`dispose_engine`). Callers work inside :func:`session_scope`:

    from db.client import init_schema, session_scope

    init_schema(database_url=url)
    with session_scope(database_url=url) as s:
        s.execute(...)

``database_url`` defaults to the ``DATABASE_URL`` environment variable.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NamedTuple

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.kv import Base


class _Binding(NamedTuple):
    engine: Engine
    sessions: sessionmaker[Session]


_BINDINGS: dict[str, _Binding] = {}


def _resolve_url(database_url: str | None) -> str:
    url = database_url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("no database URL given and DATABASE_URL is not set")
    return url


def _binding(database_url: str | None) -> _Binding:
    url = _resolve_url(database_url)
    binding = _BINDINGS.get(url)
    if binding is None:
        engine = create_engine(url, pool_pre_ping=True)
        binding = _Binding(engine, sessionmaker(bind=engine, expire_on_commit=False))
        _BINDINGS[url] = binding
    return binding


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the engine for ``database_url``, creating it on first use."""

    return _binding(database_url).engine


def dispose_engine(*, database_url: str | None = None) -> None:
    """Close pooled connections; all engines when no URL is given."""

    urls = [database_url] if database_url else list(_BINDINGS)
    for url in urls:
        binding = _BINDINGS.pop(url, None)
        if binding is not None:
            binding.engine.dispose()


def init_schema(*, database_url: str | None = None) -> None:
    """Create missing tables; existing tables are left alone."""

    Base.metadata.create_all(bind=get_engine(database_url=database_url))


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Commit on success, roll back on any error, always close."""

    session = _binding(database_url).sessions()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["dispose_engine", "get_engine", "init_schema", "session_scope"]
