# tests/conftest.py
import pytest

from stockpos.config.settings import Settings
from stockpos.config.database import build_engine, build_session_factory, init_db
from stockpos.core.transaction import TransactionManager
from stockpos.modules.products import ProductService
from stockpos.modules.sales import SalesService
from stockpos.shared.database.models import Product, Sale


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a file-backed SQLite database per test"""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'stockpos_test.db'}",
        sqlite_busy_timeout_seconds=10.0,
        transaction_timeout_seconds=None,
        allowed_origins=["http://testserver"],
    )


@pytest.fixture
def engine(settings):
    engine = build_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def transactions(session_factory):
    return TransactionManager(session_factory)


@pytest.fixture
def sales_service(transactions):
    return SalesService(transactions)


@pytest.fixture
def product_service(transactions):
    return ProductService(transactions)


@pytest.fixture
def seed_products(session_factory):
    """Insert products directly, bypassing the services"""
    def _seed(*products):
        with session_factory() as session, session.begin():
            session.add_all(products)
    return _seed


@pytest.fixture
def catalog(seed_products):
    seed_products(
        Product(id="P001", name="Kopi Susu", category="Minuman", subcategory="Kopi",
                barcode="8990001", unit_price=500, stock=10),
        Product(id="P002", name="Roti Bakar", category="Makanan", subcategory="Roti",
                barcode="8990002", unit_price=1200, stock=5),
        Product(id="P003", name="Teh Manis", category="Minuman", subcategory="Teh",
                barcode="8990003", unit_price=300, stock=20),
    )


@pytest.fixture
def read_stock(session_factory):
    def _read(product_id):
        with session_factory() as session:
            return session.get(Product, product_id).stock
    return _read


@pytest.fixture
def count_sales(session_factory):
    def _count():
        with session_factory() as session:
            return session.query(Sale).count()
    return _count
