# stockpos/modules/products/router.py
from fastapi import APIRouter, Depends, status
from typing import List

from stockpos.core.dependencies import get_product_service
from .service import ProductService
from .schemas import (
    ProductCreate, ProductUpdate, ProductImportRecord,
    ProductResponse, ProductImportResponse, ProductDeletedResponse
)

router = APIRouter(prefix="/products", tags=["Products"])

@router.get("/", response_model=List[ProductResponse])
def list_products(service: ProductService = Depends(get_product_service)):
    """
    Obtener todos los productos activos
    """
    return service.list_products()

@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(data: ProductCreate, service: ProductService = Depends(get_product_service)):
    """
    Crear producto (ID asignado si se omite)
    """
    return service.create_product(data)

@router.post("/import", response_model=ProductImportResponse, status_code=status.HTTP_201_CREATED)
def import_products(
    records: List[ProductImportRecord],
    service: ProductService = Depends(get_product_service)
):
    """
    Importar productos ya parseados, omitiendo duplicados por código de barras
    """
    return service.import_products(records)

@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return service.get_product(product_id)

@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    changes: ProductUpdate,
    service: ProductService = Depends(get_product_service)
):
    return service.update_product(product_id, changes)

@router.delete("/{product_id}", response_model=ProductDeletedResponse)
def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """
    Eliminación lógica del producto
    """
    service.delete_product(product_id)
    return ProductDeletedResponse(id=product_id)
