# stockpos/core/transaction.py
"""
Unidad atómica sobre una transacción de SQLAlchemy.

Todas las mutaciones de stock y de ventas de una operación ocurren dentro de
una única ``AtomicUnit``: o se confirma todo, o se descarta todo. Los errores
del driver se traducen aquí a la taxonomía del dominio.
"""
import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from stockpos.core.exceptions import (
    ConflictRetryable, DeadlineExceeded, StockPOSError, StorageFailure
)

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = {"40001", "40P01", "55P03"}
# query_canceled (statement_timeout)
TIMEOUT_SQLSTATES = {"57014"}
# unique_violation
UNIQUE_SQLSTATES = {"23505"}
RETRYABLE_MESSAGES = ("database is locked", "database table is locked", "deadlock", "could not serialize")


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = exc.orig
    # psycopg2 expone pgcode, psycopg 3 expone sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def translate_storage_error(exc: SQLAlchemyError, operation: str) -> StockPOSError:
    """Mapear un error de SQLAlchemy a la taxonomía del dominio"""
    if isinstance(exc, IntegrityError):
        # Solo la clave duplicada es transitoria; CHECK, NOT NULL y FK no
        if _sqlstate(exc) in UNIQUE_SQLSTATES or str(exc.orig).startswith("UNIQUE constraint failed"):
            return ConflictRetryable(
                f"Conflicto de escritura concurrente en '{operation}'; reintente la operación completa"
            )
        return StorageFailure(f"Restricción de integridad violada en '{operation}': {exc.orig}")

    if isinstance(exc, DBAPIError):
        state = _sqlstate(exc)
        message = str(exc.orig).lower()
        if state in TIMEOUT_SQLSTATES:
            return DeadlineExceeded(f"Plazo agotado en la base de datos durante '{operation}'")
        if state in RETRYABLE_SQLSTATES or any(m in message for m in RETRYABLE_MESSAGES):
            return ConflictRetryable(
                f"Conflicto transitorio en '{operation}'; reintente la operación completa"
            )

    return StorageFailure(f"Error de almacenamiento en '{operation}': {exc}")


class AtomicUnit:
    """Una transacción abierta con plazo opcional"""

    def __init__(self, session: Session, operation: str, deadline: Optional[float] = None):
        self.session = session
        self.operation = operation
        self.deadline = deadline

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check_deadline(self, stage: str) -> None:
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise DeadlineExceeded(f"Plazo agotado en '{self.operation}' (etapa: {stage})")

    def commit(self) -> None:
        self.check_deadline("commit")
        self.session.commit()

    def abort(self) -> None:
        self.session.rollback()

    def close(self) -> None:
        self.session.close()


class TransactionManager:
    """
    Fábrica de unidades atómicas.

    Se construye una vez por aplicación con la session factory y se inyecta
    en los servicios; no hay estado global.
    """

    def __init__(self, session_factory: sessionmaker, default_timeout: Optional[float] = None):
        self.session_factory = session_factory
        self.default_timeout = default_timeout

    def begin(self, operation: str, timeout: Optional[float] = None) -> AtomicUnit:
        timeout = self.default_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout if timeout is not None else None

        session = self.session_factory()
        try:
            session.begin()
            if deadline is not None and session.get_bind().dialect.name == "postgresql":
                budget_ms = max(1, int(timeout * 1000))
                session.execute(text(f"SET LOCAL statement_timeout = {budget_ms}"))
        except BaseException:
            session.close()
            raise

        return AtomicUnit(session, operation, deadline)

    @contextmanager
    def atomic(self, operation: str, timeout: Optional[float] = None) -> Iterator[AtomicUnit]:
        """
        begin → yield → commit; cualquier error aborta la unidad completa.
        """
        try:
            unit = self.begin(operation, timeout)
        except SQLAlchemyError as exc:
            raise translate_storage_error(exc, operation) from exc

        try:
            yield unit
            unit.commit()
        except StockPOSError as exc:
            unit.abort()
            logger.info(f"Unidad '{operation}' abortada: {exc.code} - {exc.message}")
            raise
        except SQLAlchemyError as exc:
            unit.abort()
            translated = translate_storage_error(exc, operation)
            logger.warning(f"Unidad '{operation}' abortada por error de almacenamiento: {translated.code}")
            raise translated from exc
        except BaseException:
            unit.abort()
            raise
        finally:
            unit.close()
