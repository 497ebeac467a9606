# stockpos/modules/sales/repository.py
from typing import Iterable, List, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from stockpos.core.exceptions import SaleNotFound
from stockpos.shared.database.models import Sale, SaleItem


class SalesRepository:
    """
    Almacén de ventas ya finalizadas. Sin validación de negocio: el
    coordinador garantiza que los documentos llegan bien formados.
    """

    def __init__(self, db: Session):
        self.db = db

    def add_all(self, sales: List[Sale]) -> List[Sale]:
        """Inserción masiva dentro de la unidad actual"""
        self.db.add_all(sales)
        self.db.flush()
        return sales

    def list_all(self) -> List[Sale]:
        return list(self.db.execute(select(Sale).order_by(Sale.id)).scalars())

    def get(self, sale_id: str, lock: bool = False) -> Sale:
        stmt = select(Sale).where(Sale.id == sale_id)
        if lock:
            stmt = stmt.with_for_update()

        sale = self.db.execute(stmt).scalar_one_or_none()
        if sale is None:
            raise SaleNotFound(sale_id)
        return sale

    def exists_ids(self, sale_ids: Iterable[str]) -> Set[str]:
        sale_ids = list(sale_ids)
        if not sale_ids:
            return set()
        return set(self.db.execute(select(Sale.id).where(Sale.id.in_(sale_ids))).scalars())

    def replace_items(self, sale: Sale, items: List[SaleItem]) -> Sale:
        # delete-orphan elimina los items anteriores
        sale.items.clear()
        self.db.flush()
        sale.items.extend(items)
        self.db.flush()
        return sale

    def delete(self, sale: Sale) -> None:
        self.db.delete(sale)
        self.db.flush()
