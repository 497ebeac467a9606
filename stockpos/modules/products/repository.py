# stockpos/modules/products/repository.py
import logging
from typing import Any, Dict, Iterable, List, Set

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from stockpos.core.exceptions import InsufficientStock, ProductNotFound, ValidationError
from stockpos.shared.database.models import Product, utcnow

logger = logging.getLogger(__name__)


class ProductRepository:
    """
    Libro de productos: dueño de los registros de producto y de su stock.

    Trabaja sobre la sesión de una unidad atómica; nunca hace commit por su
    cuenta, así varias llamadas se componen en una transacción mayor.
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== CONSULTAS ====================

    def lookup(self, product_id: str, lock: bool = False) -> Product:
        """
        Obtener producto activo por ID
        """
        stmt = select(Product).where(
            Product.id == product_id,
            Product.deleted_at.is_(None)
        ).execution_options(populate_existing=True)
        if lock:
            stmt = stmt.with_for_update()

        product = self.db.execute(stmt).scalar_one_or_none()
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def list_active(self) -> List[Product]:
        stmt = select(Product).where(Product.deleted_at.is_(None)).order_by(Product.id)
        return list(self.db.execute(stmt).scalars())

    def exists(self, product_id: str) -> bool:
        """True si el ID está ocupado, incluso por un producto eliminado"""
        stmt = select(Product.id).where(Product.id == product_id)
        return self.db.execute(stmt).first() is not None

    def find_barcodes(self, barcodes: Iterable[str]) -> Set[str]:
        """Códigos de barras ya usados por productos activos"""
        barcodes = [code for code in barcodes if code]
        if not barcodes:
            return set()

        stmt = select(Product.barcode).where(
            Product.barcode.in_(barcodes),
            Product.deleted_at.is_(None)
        )
        return set(self.db.execute(stmt).scalars())

    # ==================== STOCK ====================

    def decrease_stock(self, product_id: str, quantity: int) -> Product:
        """
        Decrementar stock con verificación previa.

        El UPDATE es condicional (``stock >= quantity``): si otra unidad
        consumió el stock entre la lectura y la escritura, no se afecta
        ninguna fila y se reporta stock insuficiente.
        """
        if quantity <= 0:
            raise ValidationError("La cantidad a descontar debe ser mayor a 0")

        product = self.lookup(product_id, lock=True)
        if product.stock < quantity:
            raise InsufficientStock(product.id, product.stock, quantity, product.name)

        result = self.db.execute(
            update(Product)
            .where(
                Product.id == product_id,
                Product.deleted_at.is_(None),
                Product.stock >= quantity
            )
            .values(stock=Product.stock - quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            self.db.refresh(product)
            if product.deleted_at is not None:
                raise ProductNotFound(product_id)
            raise InsufficientStock(product.id, product.stock, quantity, product.name)

        self.db.refresh(product)
        return product

    def increase_stock(self, product_id: str, quantity: int) -> Product:
        """
        Devolver stock de una venta revertida
        """
        if quantity <= 0:
            raise ValidationError("La cantidad a devolver debe ser mayor a 0")

        product = self.lookup(product_id, lock=True)

        self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.deleted_at.is_(None))
            .values(stock=Product.stock + quantity, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.refresh(product)

        logger.info(f"Stock devuelto al producto {product_id}: +{quantity} (actual: {product.stock})")
        return product

    # ==================== CATÁLOGO ====================

    def add(self, product: Product) -> Product:
        product.updated_at = utcnow()
        self.db.add(product)
        self.db.flush()
        return product

    def add_all(self, products: List[Product]) -> List[Product]:
        now = utcnow()
        for product in products:
            product.updated_at = now
        self.db.add_all(products)
        self.db.flush()
        return products

    def apply_changes(self, product: Product, changes: Dict[str, Any]) -> Product:
        for field, value in changes.items():
            setattr(product, field, value)
        product.updated_at = utcnow()
        self.db.flush()
        return product

    def soft_delete(self, product: Product) -> Product:
        product.deleted_at = utcnow()
        product.updated_at = product.deleted_at
        self.db.flush()
        return product
