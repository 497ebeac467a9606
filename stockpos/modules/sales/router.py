# stockpos/modules/sales/router.py
from fastapi import APIRouter, Depends, status
from typing import List

from stockpos.core.dependencies import get_sales_service
from .service import SalesService
from .schemas import SaleCreate, SaleUpdate, SaleResponse, SaleDeletedResponse

router = APIRouter(prefix="/sales", tags=["Sales"])

# Endpoints síncronos: FastAPI los ejecuta en su pool de hilos (un hilo por
# request) y cada uno bloquea sobre su propia unidad atómica.

@router.get("/", response_model=List[SaleResponse])
def list_sales(service: SalesService = Depends(get_sales_service)):
    """
    Obtener todas las ventas registradas
    """
    return service.list_sales()

@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(sale_id: str, service: SalesService = Depends(get_sales_service)):
    """
    Obtener una venta por ID
    """
    return service.get_sale(sale_id)

@router.post("/", response_model=List[SaleResponse], status_code=status.HTTP_201_CREATED)
def create_sales_batch(
    sales: List[SaleCreate],
    service: SalesService = Depends(get_sales_service)
):
    """
    Registrar un lote de ventas

    - Descuenta stock de cada producto en el orden recibido
    - Congela precio unitario y subtotal de cada item
    - Todo o nada: si un item falla, ninguna venta queda registrada
    """
    return service.create_sales_batch(sales)

@router.put("/{sale_id}", response_model=SaleResponse)
def update_sale(
    sale_id: str,
    sale: SaleUpdate,
    service: SalesService = Depends(get_sales_service)
):
    """
    Reemplazar los items de una venta recalculando stock y total
    """
    return service.update_sale(sale_id, sale)

@router.delete("/{sale_id}", response_model=SaleDeletedResponse)
def delete_sale(sale_id: str, service: SalesService = Depends(get_sales_service)):
    """
    Eliminar una venta devolviendo el stock de sus items
    """
    service.delete_sale(sale_id)
    return SaleDeletedResponse(id=sale_id)
