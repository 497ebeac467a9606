from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime

# ==================== CLASE BASE PARA RESPUESTAS (Pydantic v2) ====================

class SalesBaseModel(BaseModel):
    """
    Clase base para los esquemas de respuesta, leídos desde modelos ORM.
    """
    model_config = ConfigDict(from_attributes=True)

# ==================== REQUEST SCHEMAS ====================
# Las reglas de negocio (vendedor no vacío, cantidad > 0, ...) las valida
# SalesService para que fallen con ValidationError antes de tocar el stock.

class SaleItemCreate(BaseModel):
    product_id: str = Field(..., description="ID del producto vendido")
    quantity: int = Field(..., description="Cantidad")

class SaleCreate(BaseModel):
    id: Optional[str] = Field(None, description="ID de la venta; se asigna si se omite")
    seller_name: str = Field("", description="Nombre del vendedor")
    sale_date: Optional[datetime] = Field(None, description="Fecha de venta; ahora si se omite")
    items: List[SaleItemCreate] = Field(default_factory=list, description="Items de la venta")

class SaleUpdate(BaseModel):
    seller_name: str = Field("", description="Nombre del vendedor")
    sale_date: Optional[datetime] = Field(None, description="Nueva fecha; se conserva si se omite")
    items: List[SaleItemCreate] = Field(default_factory=list, description="Items que reemplazan a los actuales")

# ==================== RESPONSE SCHEMAS ====================

class SaleItemResponse(SalesBaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: int
    subtotal: int

class SaleResponse(SalesBaseModel):
    id: str
    seller_name: str
    sale_date: datetime
    items: List[SaleItemResponse]
    total: int
    updated_at: datetime

class SaleDeletedResponse(BaseModel):
    success: bool = True
    id: str
    message: str = "Venta eliminada y stock restaurado"
