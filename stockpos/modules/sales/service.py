# stockpos/modules/sales/service.py
import logging
from typing import List, Optional, Sequence, Tuple

from stockpos.core.exceptions import ValidationError
from stockpos.core.transaction import AtomicUnit, TransactionManager
from stockpos.modules.products.repository import ProductRepository
from stockpos.shared.database.models import Sale, SaleItem, utcnow
from stockpos.shared.sequencer import IdKind, IdSequencer, check_caller_id
from .repository import SalesRepository
from .schemas import SaleCreate, SaleItemCreate, SaleResponse, SaleUpdate

logger = logging.getLogger(__name__)


class SalesService:
    """
    Coordinador de transacciones de venta.

    Cada lote recorre Validando -> Reservando -> Confirmando dentro de una sola
    unidad atómica: el descuento de stock y la escritura de las ventas se
    confirman juntos o se descartan juntos.
    """

    def __init__(self, transactions: TransactionManager):
        self.transactions = transactions

    # ==================== CREACIÓN EN LOTE ====================

    def create_sales_batch(
        self,
        sales: Sequence[SaleCreate],
        timeout: Optional[float] = None
    ) -> List[SaleResponse]:
        """
        Registrar un lote de ventas descontando stock (todo o nada)
        """
        # 1. Validando: sin tocar la base de datos
        logger.info(f"Lote de {len(sales)} ventas: validando")
        if not sales:
            raise ValidationError("No se recibieron datos de ventas")

        for number, sale in enumerate(sales, start=1):
            self._validate_sale(sale.seller_name, sale.items, f"venta {number}")
            if sale.id:
                check_caller_id(IdKind.SALE, sale.id)

        explicit_ids = [sale.id for sale in sales if sale.id]
        if len(explicit_ids) != len(set(explicit_ids)):
            raise ValidationError("El lote contiene IDs de venta repetidos")

        with self.transactions.atomic("create_sales_batch", timeout) as unit:
            products = ProductRepository(unit.session)
            store = SalesRepository(unit.session)

            taken = store.exists_ids(explicit_ids)
            if taken:
                raise ValidationError(f"Ya existen ventas con ID: {', '.join(sorted(taken))}")

            # 2. Reservando: descuento de stock en el orden recibido
            logger.info(f"Lote de {len(sales)} ventas: reservando stock")
            reserved = []
            for number, sale in enumerate(sales, start=1):
                items, total = self._reserve_items(unit, products, sale.items, f"venta {number}")
                reserved.append((sale, items, total))

            # 3. Confirmando: IDs, timestamps e inserción masiva
            unit.check_deadline("confirmando")
            logger.info(f"Lote de {len(sales)} ventas: confirmando")

            missing = sum(1 for sale in sales if not sale.id)
            generated = iter(
                IdSequencer(unit.session).next_block(IdKind.SALE, missing, exclude=explicit_ids)
                if missing else []
            )

            now = utcnow()
            records = [
                Sale(
                    id=sale.id or next(generated),
                    seller_name=sale.seller_name.strip(),
                    sale_date=sale.sale_date or now,
                    items=items,
                    total=total,
                    updated_at=now
                )
                for sale, items, total in reserved
            ]
            store.add_all(records)
            created = [SaleResponse.model_validate(record) for record in records]

        logger.info(f"Lote confirmado: {', '.join(sale.id for sale in created)}")
        return created

    # ==================== ACTUALIZACIÓN ====================

    def update_sale(
        self,
        sale_id: str,
        sale: SaleUpdate,
        timeout: Optional[float] = None
    ) -> SaleResponse:
        """
        Reemplazar los items de una venta: primero se devuelve el stock de la
        versión guardada y luego se reserva el de la nueva, en la misma unidad.
        """
        self._validate_sale(sale.seller_name, sale.items, f"venta {sale_id}")

        with self.transactions.atomic("update_sale", timeout) as unit:
            products = ProductRepository(unit.session)
            store = SalesRepository(unit.session)

            stored = store.get(sale_id, lock=True)

            self._restore_items(unit, products, stored.items)
            items, total = self._reserve_items(unit, products, sale.items, f"venta {sale_id}")

            unit.check_deadline("confirmando")
            store.replace_items(stored, items)
            stored.seller_name = sale.seller_name.strip()
            if sale.sale_date is not None:
                stored.sale_date = sale.sale_date
            stored.total = total
            stored.updated_at = utcnow()
            unit.session.flush()

            updated = SaleResponse.model_validate(stored)

        logger.info(f"Venta {sale_id} actualizada (total: {updated.total})")
        return updated

    # ==================== ELIMINACIÓN ====================

    def delete_sale(self, sale_id: str, timeout: Optional[float] = None) -> None:
        """
        Eliminar una venta devolviendo su stock
        """
        with self.transactions.atomic("delete_sale", timeout) as unit:
            products = ProductRepository(unit.session)
            store = SalesRepository(unit.session)

            stored = store.get(sale_id, lock=True)
            self._restore_items(unit, products, stored.items)

            unit.check_deadline("confirmando")
            store.delete(stored)

        logger.info(f"Venta {sale_id} eliminada")

    # ==================== CONSULTAS ====================

    def get_sale(self, sale_id: str, timeout: Optional[float] = None) -> SaleResponse:
        with self.transactions.atomic("get_sale", timeout) as unit:
            return SaleResponse.model_validate(SalesRepository(unit.session).get(sale_id))

    def list_sales(self, timeout: Optional[float] = None) -> List[SaleResponse]:
        with self.transactions.atomic("list_sales", timeout) as unit:
            return [
                SaleResponse.model_validate(sale)
                for sale in SalesRepository(unit.session).list_all()
            ]

    # ==================== HELPERS ====================

    def _validate_sale(self, seller_name: str, items: Sequence[SaleItemCreate], label: str) -> None:
        """
        Validación previa a cualquier mutación
        """
        if not seller_name or not seller_name.strip():
            raise ValidationError(f"Nombre del vendedor no puede estar vacío en la {label}")

        if not items:
            raise ValidationError(f"Debe haber al menos un producto en la {label}")

        for position, item in enumerate(items, start=1):
            if not item.product_id or not item.product_id.strip():
                raise ValidationError(f"ID de producto vacío en el producto {position} de la {label}")
            if item.quantity <= 0:
                raise ValidationError(
                    f"La cantidad debe ser mayor a 0 en el producto {position} de la {label}"
                )

    def _reserve_items(
        self,
        unit: AtomicUnit,
        products: ProductRepository,
        items: Sequence[SaleItemCreate],
        label: str
    ) -> Tuple[List[SaleItem], int]:
        """
        Descontar stock item por item y congelar precio y subtotal
        """
        sale_items = []
        total = 0

        for position, item in enumerate(items, start=1):
            unit.check_deadline(f"reservando {label}, producto {position}")

            product = products.decrease_stock(item.product_id, item.quantity)
            subtotal = product.unit_price * item.quantity

            sale_items.append(SaleItem(
                position=position,
                product_id=product.id,
                product_name=product.name,
                quantity=item.quantity,
                unit_price=product.unit_price,
                subtotal=subtotal
            ))
            total += subtotal

        return sale_items, total

    def _restore_items(
        self,
        unit: AtomicUnit,
        products: ProductRepository,
        items: Sequence[SaleItem]
    ) -> None:
        for item in list(items):
            unit.check_deadline(f"devolviendo stock de {item.product_id}")
            products.increase_stock(item.product_id, item.quantity)
