"""Unit-of-work helpers for portal repositories.

Every ledger, subject and access-log operation runs inside one
``transactional_session`` so that a guarded upsert and its follow-up read
commit or roll back together.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a factory for repository sessions on ``engine``.

    Objects stay readable after commit; repositories return plain domain
    models built from rows, never ORM instances.
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def transactional_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Run one unit of work: commit on success, roll back and re-raise on error."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
