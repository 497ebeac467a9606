# stockpos/modules/sales/__init__.py
"""
Módulo de Ventas - Transacciones de venta con control de stock

- Registro de ventas en lote (todo o nada)
- Actualización de ventas con devolución y nueva reserva de stock
- Eliminación de ventas con devolución de stock
- Consulta de ventas

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Coordinador transaccional
- repository.py: Almacén de ventas
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as sales_router
from .service import SalesService
from .repository import SalesRepository

__all__ = [
    "sales_router",
    "SalesService",
    "SalesRepository"
]
