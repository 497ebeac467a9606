"""Taxonomía de errores del núcleo transaccional.

Cada error lleva un ``code`` estable que la capa HTTP expone tal cual, de modo
que el cliente distingue el tipo de fallo sin interpretar mensajes.
"""

from typing import Optional


class StockPOSError(Exception):
    """Base de todos los errores del dominio."""

    code = "stockpos_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StockPOSError):
    """Datos incompletos o mal formados; se rechazan antes de mutar nada."""

    code = "validation_error"


class NotFound(StockPOSError):
    """Un identificador de producto o venta no resuelve."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} con ID {entity_id} no encontrado")
        self.entity = entity
        self.entity_id = entity_id


class ProductNotFound(NotFound):
    def __init__(self, product_id: str):
        super().__init__("Producto", product_id)


class SaleNotFound(NotFound):
    def __init__(self, sale_id: str):
        super().__init__("Venta", sale_id)


class InsufficientStock(StockPOSError):
    """La cantidad pedida supera el stock disponible."""

    code = "insufficient_stock"

    def __init__(self, product_id: str, available: int, requested: int,
                 product_name: Optional[str] = None):
        label = product_name or product_id
        super().__init__(
            f"Stock insuficiente para el producto {label} "
            f"(disponible: {available}, solicitado: {requested})"
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class ConflictRetryable(StockPOSError):
    """Conflicto transitorio de serialización; se puede reintentar la operación completa."""

    code = "conflict_retryable"


class StorageFailure(StockPOSError):
    """Fallo de infraestructura no recuperable."""

    code = "storage_failure"


class IdentifierFormatError(StorageFailure):
    """El identificador más alto almacenado no sigue el patrón esperado."""


class DeadlineExceeded(StockPOSError):
    """Se agotó el plazo de la operación; la unidad atómica fue abortada."""

    code = "deadline_exceeded"
