from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # App Info
    app_name: str = "StockPOS API"
    version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./stockpos.db"
    sqlite_busy_timeout_seconds: float = Field(
        default=5.0,
        description="Espera máxima por un bloqueo de escritura en SQLite"
    )

    # Transacciones
    transaction_timeout_seconds: Optional[float] = Field(
        default=10.0,
        description="Plazo por defecto de cada operación transaccional (None = sin plazo)"
    )

    # Logging
    log_level: str = "INFO"

    # CORS
    allowed_origins: List[str] = ["http://localhost:3000"]

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
