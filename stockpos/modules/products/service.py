# stockpos/modules/products/service.py
import logging
from typing import List, Optional, Sequence

from stockpos.core.exceptions import ValidationError
from stockpos.core.transaction import TransactionManager
from stockpos.shared.database.models import Product
from stockpos.shared.sequencer import IdKind, IdSequencer, check_caller_id
from .repository import ProductRepository
from .schemas import (
    ProductCreate, ProductUpdate, ProductImportRecord,
    ProductResponse, ProductImportResponse
)

logger = logging.getLogger(__name__)


class ProductService:
    """
    Operaciones de catálogo sobre el libro de productos
    """

    def __init__(self, transactions: TransactionManager):
        self.transactions = transactions

    # ==================== CRUD ====================

    def create_product(self, data: ProductCreate, timeout: Optional[float] = None) -> ProductResponse:
        with self.transactions.atomic("create_product", timeout) as unit:
            repository = ProductRepository(unit.session)

            product_id = data.id.strip() if data.id else None
            if product_id:
                check_caller_id(IdKind.PRODUCT, product_id)
                if repository.exists(product_id):
                    raise ValidationError(f"Ya existe un producto con ID {product_id}")
            else:
                product_id = IdSequencer(unit.session).next(IdKind.PRODUCT)

            product = repository.add(Product(
                id=product_id,
                name=data.name,
                category=data.category,
                subcategory=data.subcategory,
                barcode=data.barcode,
                unit_price=data.unit_price,
                stock=data.stock
            ))
            created = ProductResponse.model_validate(product)

        logger.info(f"Producto {created.id} creado (stock: {created.stock})")
        return created

    def list_products(self, timeout: Optional[float] = None) -> List[ProductResponse]:
        with self.transactions.atomic("list_products", timeout) as unit:
            return [
                ProductResponse.model_validate(product)
                for product in ProductRepository(unit.session).list_active()
            ]

    def get_product(self, product_id: str, timeout: Optional[float] = None) -> ProductResponse:
        with self.transactions.atomic("get_product", timeout) as unit:
            return ProductResponse.model_validate(ProductRepository(unit.session).lookup(product_id))

    def update_product(
        self,
        product_id: str,
        changes: ProductUpdate,
        timeout: Optional[float] = None
    ) -> ProductResponse:
        values = changes.model_dump(exclude_unset=True)
        if not values:
            raise ValidationError("No se enviaron campos para actualizar")
        for field in ("name", "unit_price", "stock"):
            if field in values and values[field] is None:
                raise ValidationError(f"El campo {field} no puede ser nulo")

        with self.transactions.atomic("update_product", timeout) as unit:
            repository = ProductRepository(unit.session)
            product = repository.apply_changes(repository.lookup(product_id, lock=True), values)
            updated = ProductResponse.model_validate(product)

        logger.info(f"Producto {product_id} actualizado: {', '.join(sorted(values))}")
        return updated

    def delete_product(self, product_id: str, timeout: Optional[float] = None) -> None:
        """Eliminación lógica: el producto deja de aparecer pero las ventas conservan su snapshot"""
        with self.transactions.atomic("delete_product", timeout) as unit:
            repository = ProductRepository(unit.session)
            repository.soft_delete(repository.lookup(product_id, lock=True))

        logger.info(f"Producto {product_id} eliminado")

    # ==================== IMPORTACIÓN ====================

    def import_products(
        self,
        records: Sequence[ProductImportRecord],
        timeout: Optional[float] = None
    ) -> ProductImportResponse:
        """
        Importar productos ya parseados en una sola unidad.

        Se omiten registros sin nombre o sin código de barras y los códigos de
        barras que ya existen (en la base o antes dentro del mismo lote).
        """
        if not records:
            raise ValidationError("No hay datos para importar")

        with self.transactions.atomic("import_products", timeout) as unit:
            repository = ProductRepository(unit.session)
            used_barcodes = repository.find_barcodes(record.barcode.strip() for record in records)

            accepted = []
            skipped = 0
            for number, record in enumerate(records, start=1):
                name = record.name.strip()
                barcode = record.barcode.strip()
                if not name or not barcode:
                    logger.info(f"Producto #{number} omitido: campos obligatorios vacíos")
                    skipped += 1
                    continue
                if barcode in used_barcodes:
                    logger.info(f"Producto #{number} omitido: código de barras {barcode} ya existe")
                    skipped += 1
                    continue

                used_barcodes.add(barcode)
                accepted.append((name, barcode, record))

            if not accepted:
                raise ValidationError(
                    f"Todos los productos ({skipped}) fueron omitidos por duplicados o datos inválidos"
                )

            identifiers = IdSequencer(unit.session).next_block(IdKind.PRODUCT, len(accepted))
            products = repository.add_all([
                Product(
                    id=product_id,
                    name=name,
                    category=record.category,
                    subcategory=record.subcategory,
                    barcode=barcode,
                    unit_price=record.unit_price,
                    stock=record.stock
                )
                for product_id, (name, barcode, record) in zip(identifiers, accepted)
            ])
            result = ProductImportResponse(
                imported=len(products),
                skipped=skipped,
                products=[ProductResponse.model_validate(product) for product in products]
            )

        logger.info(f"Importación: {result.imported} productos importados, {result.skipped} omitidos")
        return result
