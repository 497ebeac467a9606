from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime

class ProductsBaseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

# ==================== REQUEST SCHEMAS ====================

class ProductCreate(BaseModel):
    id: Optional[str] = Field(None, description="ID del producto; se asigna si se omite")
    name: str = Field(..., min_length=1, description="Nombre del producto")
    category: str = Field("", description="Categoría")
    subcategory: str = Field("", description="Subcategoría")
    barcode: Optional[str] = Field(None, description="Código de barras")
    unit_price: int = Field(0, ge=0, description="Precio unitario en la unidad mínima de la moneda")
    stock: int = Field(0, ge=0, description="Stock inicial")

class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    barcode: Optional[str] = None
    unit_price: Optional[int] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)

class ProductImportRecord(BaseModel):
    """Registro ya parseado de un archivo de importación"""
    name: str = ""
    category: str = ""
    subcategory: str = ""
    barcode: str = ""
    unit_price: int = Field(0, ge=0)
    stock: int = Field(0, ge=0)

# ==================== RESPONSE SCHEMAS ====================

class ProductResponse(ProductsBaseModel):
    id: str
    name: str
    category: str
    subcategory: str
    barcode: Optional[str]
    unit_price: int
    stock: int
    updated_at: datetime

class ProductImportResponse(BaseModel):
    success: bool = True
    imported: int
    skipped: int
    products: List[ProductResponse]

class ProductDeletedResponse(BaseModel):
    success: bool = True
    id: str
    message: str = "Producto eliminado"
