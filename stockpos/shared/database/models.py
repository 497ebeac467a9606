from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from stockpos.config.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Active:
    """Producto vigente"""


@dataclass(frozen=True)
class DeletedAt:
    """Producto eliminado lógicamente en ``at``"""
    at: datetime


ProductLifecycle = Union[Active, DeletedAt]

# ===== PRODUCTOS =====

class Product(Base):
    """Modelo de Producto"""
    __tablename__ = "products"

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False, default="")
    subcategory = Column(String(255), nullable=False, default="")
    barcode = Column(String(255), index=True)
    unit_price = Column(Integer, nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    __table_args__ = (
        CheckConstraint("stock >= 0", name="products_stock_non_negative"),
        CheckConstraint("unit_price >= 0", name="products_price_non_negative"),
    )

    @property
    def lifecycle(self) -> ProductLifecycle:
        if self.deleted_at is None:
            return Active()
        return DeletedAt(self.deleted_at)

    @property
    def is_active(self) -> bool:
        return isinstance(self.lifecycle, Active)

# ===== VENTAS =====

class Sale(Base):
    """Modelo de Venta"""
    __tablename__ = "sales"

    id = Column(String(32), primary_key=True)
    seller_name = Column(String(255), nullable=False)
    sale_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    total = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("total >= 0", name="sales_total_non_negative"),
    )

    # Relationships
    items = relationship(
        "SaleItem",
        back_populates="sale",
        order_by="SaleItem.position",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

class SaleItem(Base):
    """Modelo de Item de Venta (precio congelado al momento de la venta)"""
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(String(32), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    product_id = Column(String(32), ForeignKey("products.id"), nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    subtotal = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="sale_items_quantity_positive"),
    )

    # Relationships
    sale = relationship("Sale", back_populates="items")
