import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from stockpos.config.settings import Settings, settings as default_settings
from stockpos.config.database import build_engine, build_session_factory, init_db
from stockpos.core.logging import setup_logging
from stockpos.core.middleware import setup_middleware, setup_exception_handlers
from stockpos.core.transaction import TransactionManager
from stockpos.api.v1.router import api_router
from stockpos.modules.products import ProductService
from stockpos.modules.sales import SalesService

logger = logging.getLogger(__name__)

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Construir la aplicación con sus dependencias explícitas"""
    settings = settings or default_settings

    engine = build_engine(settings)
    transactions = TransactionManager(
        build_session_factory(engine),
        default_timeout=settings.transaction_timeout_seconds
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(settings.log_level)
        init_db(engine)
        logger.info(f"{settings.app_name} v{settings.version} iniciando")
        logger.info(f"Entorno: {'Development' if settings.debug else 'Production'}")
        logger.info(f"Plazo por transacción: {settings.transaction_timeout_seconds}s")

        yield

        # Shutdown
        logger.info(f"{settings.app_name} deteniéndose")
        engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Inventario y punto de venta con control transaccional de stock",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.transactions = transactions
    app.state.sales_service = SalesService(transactions)
    app.state.product_service = ProductService(transactions)

    # Setup middleware
    setup_middleware(app, settings)
    setup_exception_handlers(app)

    # Include routers
    app.include_router(api_router, prefix="/api/v1")

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "message": "StockPOS API - Inventario y Punto de Venta",
            "version": settings.version,
            "status": "running",
            "api": "/api/v1"
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "stockpos.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug
    )
