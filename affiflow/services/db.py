"""Transaction helpers shared by the services."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from flask import current_app
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from affiflow.errors import ConflictError, TransientStoreError


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Commit everything done in the block, or nothing.

    Integrity violations surface as ``ConflictError`` and connectivity
    failures as ``TransientStoreError``; any other exception is re-raised
    after the rollback.
    """
    try:
        yield session
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise ConflictError(_integrity_message(exc)) from exc
    except OperationalError as exc:
        session.rollback()
        current_app.logger.error(f"Store operation failed: {exc}")
        raise TransientStoreError() from exc
    except Exception:
        session.rollback()
        raise


def enable_sqlite_foreign_keys(engine) -> None:
    """SQLite ignores ON DELETE rules unless asked to enforce foreign keys."""
    if engine.dialect.name != 'sqlite':
        return

    @event.listens_for(engine, 'connect')
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def _integrity_message(error: IntegrityError) -> str:
    """Convert database integrity errors to user-friendly messages."""
    error_msg = str(error.orig).lower()
    if 'unique' in error_msg or 'duplicate' in error_msg:
        return "A record with these values already exists"
    if 'foreign' in error_msg:
        return "Referenced record does not exist"
    return "Database constraint violation"


__all__ = ["atomic", "enable_sqlite_foreign_keys"]
