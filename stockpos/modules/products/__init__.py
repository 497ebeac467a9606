# stockpos/modules/products/__init__.py
"""
Módulo de Productos - Libro de productos y stock

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Operaciones de catálogo e importación
- repository.py: Libro de productos (lectura y mutación atómica de stock)
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as products_router
from .service import ProductService
from .repository import ProductRepository

__all__ = [
    "products_router",
    "ProductService",
    "ProductRepository"
]
