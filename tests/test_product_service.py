# tests/test_product_service.py
import pytest

from stockpos.core.exceptions import ProductNotFound, ValidationError
from stockpos.modules.products.schemas import ProductCreate, ProductImportRecord, ProductUpdate
from stockpos.shared.database.models import Product, utcnow


def test_create_assigns_next_id(product_service, catalog):
    created = product_service.create_product(ProductCreate(name="Es Jeruk", unit_price=400, stock=12))

    assert created.id == "P004"
    assert created.stock == 12
    assert product_service.get_product("P004").name == "Es Jeruk"


def test_create_keeps_explicit_id(product_service):
    created = product_service.create_product(ProductCreate(id=" P042 ", name="Manual"))
    assert created.id == "P042"


def test_create_rejects_id_of_deleted_product(product_service, seed_products):
    seed_products(Product(id="P001", name="Lama", unit_price=1, stock=0, deleted_at=utcnow()))

    with pytest.raises(ValidationError):
        product_service.create_product(ProductCreate(id="P001", name="Nuevo"))


def test_update_changes_only_sent_fields(product_service, catalog):
    updated = product_service.update_product("P002", ProductUpdate(stock=9))

    assert updated.stock == 9
    assert updated.unit_price == 1200
    assert updated.name == "Roti Bakar"


@pytest.mark.parametrize("changes", [ProductUpdate(), ProductUpdate(name=None), ProductUpdate(stock=None)])
def test_update_rejects_empty_or_null_changes(product_service, catalog, changes):
    with pytest.raises(ValidationError):
        product_service.update_product("P001", changes)


def test_deleted_product_is_hidden(product_service, catalog):
    product_service.delete_product("P003")

    assert [product.id for product in product_service.list_products()] == ["P001", "P002"]
    with pytest.raises(ProductNotFound):
        product_service.get_product("P003")
    with pytest.raises(ProductNotFound):
        product_service.update_product("P003", ProductUpdate(stock=1))
    with pytest.raises(ProductNotFound):
        product_service.delete_product("P003")


def test_import_skips_blank_and_duplicate_barcodes(product_service, catalog):
    result = product_service.import_products([
        ProductImportRecord(name="Es Jeruk", barcode="8990004", unit_price=400, stock=3),
        ProductImportRecord(name="Kopi Lagi", barcode="8990001"),
        ProductImportRecord(name="Es Jeruk 2", barcode="8990004"),
        ProductImportRecord(name="   ", barcode="8990005"),
        ProductImportRecord(name="Air Mineral", barcode=" 8990006 ", stock=30),
    ])

    assert result.imported == 2
    assert result.skipped == 3
    assert [(product.id, product.barcode) for product in result.products] == [
        ("P004", "8990004"), ("P005", "8990006")
    ]


def test_import_with_nothing_usable_fails(product_service, catalog):
    with pytest.raises(ValidationError):
        product_service.import_products([ProductImportRecord(name="Dup", barcode="8990002")])

    assert len(product_service.list_products()) == 3


def test_import_requires_records(product_service):
    with pytest.raises(ValidationError):
        product_service.import_products([])


@pytest.mark.parametrize("product_id", ["PROMO", "P0002", "P01", "P000", "S001", "X-1"])
def test_create_rejects_non_canonical_id(product_service, catalog, product_id):
    with pytest.raises(ValidationError):
        product_service.create_product(ProductCreate(id=product_id, name="Manual"))

    assert product_service.create_product(ProductCreate(name="Auto")).id == "P004"
