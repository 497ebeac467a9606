# tests/test_transaction.py
import pytest
from sqlalchemy.exc import IntegrityError, InternalError, OperationalError, ProgrammingError

from stockpos.core.exceptions import (
    ConflictRetryable, DeadlineExceeded, StorageFailure, ValidationError
)
from stockpos.core.transaction import TransactionManager, translate_storage_error
from stockpos.shared.database.models import Product


class FakePgError(Exception):
    def __init__(self, message, pgcode):
        super().__init__(message)
        self.pgcode = pgcode


def test_sqlite_lock_is_retryable():
    exc = OperationalError("UPDATE products", {}, Exception("database is locked"))
    assert isinstance(translate_storage_error(exc, "test"), ConflictRetryable)


def test_integrity_error_is_retryable():
    exc = IntegrityError("INSERT INTO sales", {}, Exception("UNIQUE constraint failed: sales.id"))
    assert isinstance(translate_storage_error(exc, "test"), ConflictRetryable)


@pytest.mark.parametrize("pgcode", ["40001", "40P01", "55P03"])
def test_postgres_serialization_codes_are_retryable(pgcode):
    exc = InternalError("UPDATE products", {}, FakePgError("conflict", pgcode))
    assert isinstance(translate_storage_error(exc, "test"), ConflictRetryable)


@pytest.mark.parametrize("orig", [
    Exception("CHECK constraint failed: stock_non_negative"),
    Exception("NOT NULL constraint failed: products.name"),
    Exception("FOREIGN KEY constraint failed"),
    FakePgError("violates check constraint", "23514"),
    FakePgError("violates foreign key constraint", "23503"),
])
def test_deterministic_integrity_errors_are_storage_failures(orig):
    exc = IntegrityError("INSERT INTO products", {}, orig)
    translated = translate_storage_error(exc, "test")
    assert type(translated) is StorageFailure


def test_postgres_unique_violation_is_retryable():
    exc = IntegrityError("INSERT INTO sales", {}, FakePgError("duplicate key value", "23505"))
    assert isinstance(translate_storage_error(exc, "test"), ConflictRetryable)


def test_statement_timeout_is_deadline():
    exc = OperationalError("UPDATE products", {}, FakePgError("canceling statement", "57014"))
    assert isinstance(translate_storage_error(exc, "test"), DeadlineExceeded)


def test_other_errors_are_storage_failures():
    exc = ProgrammingError("SELECT", {}, Exception("no such table: products"))
    translated = translate_storage_error(exc, "test")
    assert type(translated) is StorageFailure
    assert "test" in translated.message


def test_atomic_commits_on_success(transactions, session_factory):
    with transactions.atomic("insert") as unit:
        unit.session.add(Product(id="P001", name="Kopi", unit_price=1, stock=1))

    with session_factory() as session:
        assert session.get(Product, "P001") is not None


def test_atomic_aborts_on_domain_error(transactions, session_factory):
    with pytest.raises(ValidationError):
        with transactions.atomic("insert") as unit:
            unit.session.add(Product(id="P001", name="Kopi", unit_price=1, stock=1))
            unit.session.flush()
            raise ValidationError("stop")

    with session_factory() as session:
        assert session.get(Product, "P001") is None


def test_check_violation_is_not_retryable(transactions, session_factory):
    with pytest.raises(StorageFailure) as excinfo:
        with transactions.atomic("insert") as unit:
            unit.session.add(Product(id="P001", name="Kopi", unit_price=1, stock=-5))

    assert not isinstance(excinfo.value, ConflictRetryable)

    with session_factory() as session:
        assert session.get(Product, "P001") is None


def test_deadline_check(transactions):
    unit = transactions.begin("slow", timeout=0)
    try:
        with pytest.raises(DeadlineExceeded):
            unit.check_deadline("anything")
    finally:
        unit.abort()
        unit.close()

    unit = transactions.begin("fast", timeout=60)
    try:
        unit.check_deadline("anything")
        assert unit.remaining() > 0
    finally:
        unit.abort()
        unit.close()


def test_atomic_duplicate_key_is_retryable(transactions, seed_products):
    seed_products(Product(id="P001", name="Kopi", unit_price=1, stock=1))

    with pytest.raises(ConflictRetryable):
        with transactions.atomic("insert") as unit:
            unit.session.add(Product(id="P001", name="Otro", unit_price=1, stock=1))


class FailingBeginSession:
    def __init__(self):
        self.closed = False

    def begin(self):
        raise OperationalError("BEGIN", {}, Exception("server closed the connection unexpectedly"))

    def close(self):
        self.closed = True


def test_session_closed_when_begin_fails():
    sessions = []

    def factory():
        sessions.append(FailingBeginSession())
        return sessions[-1]

    with pytest.raises(StorageFailure):
        with TransactionManager(factory).atomic("broken"):
            pass

    assert sessions[0].closed
