from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .settings import Settings

# Base class for models
Base = declarative_base()

def build_engine(settings: Settings) -> Engine:
    """Crear el engine a partir de la configuración"""
    if settings.database_url.startswith("sqlite"):
        engine = create_engine(
            settings.database_url,
            echo=settings.debug,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.sqlite_busy_timeout_seconds
            }
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        echo=settings.debug
    )

def build_session_factory(engine: Engine) -> sessionmaker:
    """Session factory ligada al engine"""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False
    )

def init_db(engine: Engine) -> None:
    """Crear las tablas que aún no existan"""
    # Registrar los modelos en Base.metadata
    from stockpos.shared.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
