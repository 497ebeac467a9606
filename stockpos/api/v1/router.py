# stockpos/api/v1/router.py
from fastapi import APIRouter

from stockpos.modules.products import products_router
from stockpos.modules.sales import sales_router

# Crear router principal de la API v1
api_router = APIRouter()

# ==================== MÓDULOS ====================

api_router.include_router(products_router)
api_router.include_router(sales_router)

# ==================== ENDPOINTS RAÍZ ====================

@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": "StockPOS API v1",
        "status": "active",
        "available_endpoints": {
            "products": "/api/v1/products",
            "sales": "/api/v1/sales"
        }
    }

@api_router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "StockPOS API"
    }
