# nupci/db.py
# =================================================================================
# 🗄️ CONFIGURACIÓN Y CONEXIÓN A LA BASE DE DATOS
# ---------------------------------------------------------------------------------
# Engine + fábrica de sesiones compartidos por la API, los scripts y Alembic.
# SQLite en desarrollo, PostgreSQL en producción (FORCE_DB decide si el
# fallback a SQLite está permitido).
# =================================================================================

import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from loguru import logger

load_dotenv()

# --- URL de la base de datos ---
DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
FORCE_DB = os.getenv("FORCE_DB", "postgres").strip().lower()

# Placeholders sin resolver del proveedor de hosting (p. ej. "${{Postgres.DATABASE_URL}}").
if DATABASE_URL.startswith("${{") and DATABASE_URL.endswith("}}"):
    logger.warning("DATABASE_URL parece un placeholder sin resolver: {}", DATABASE_URL)
    DATABASE_URL = ""

if not DATABASE_URL:
    if FORCE_DB == "postgres":
        raise RuntimeError(
            "FATAL: DATABASE_URL no está disponible y FORCE_DB=postgres. "
            "Se aborta para evitar un fallback accidental a SQLite en producción."
        )
    logger.warning("DATABASE_URL está vacía. Usando fallback a SQLite local.")
    project_root = os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".."))
    DATABASE_URL = f"sqlite:///{os.path.join(project_root, 'nupci.db')}"

# Algunos proveedores siguen entregando el esquema antiguo "postgres://".
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = "postgresql://" + DATABASE_URL[len("postgres://"):]


def build_engine(url: str):
    """Crea el engine con los argumentos adecuados a cada motor."""
    if url.startswith("sqlite"):
        # SQLite: hilo de FastAPI != hilo que abrió la conexión.
        return create_engine(url, connect_args={"check_same_thread": False}, pool_pre_ping=True)
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(DATABASE_URL)
logger.info("DB in use → {}", engine.url.drivername)

# --- Fábrica de sesiones y base declarativa ---
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependencia de FastAPI para inyectar una sesión de BD por petición."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =================================================================================
# 🔎 UTILIDAD: LOGUEAR EL MOTOR REAL EN STARTUP
# =================================================================================
def log_db_path_on_startup() -> None:
    """Escribe en los logs qué motor (y fichero, si es SQLite) se está usando."""
    try:
        url = engine.url
        logger.info("DB driver in use → {}", url.drivername)
        if url.drivername.startswith("sqlite"):
            db_file = url.database
            logger.info("DB path → {} (abs={})", db_file, os.path.abspath(db_file) if db_file else "<memory>")
    except Exception as e:
        logger.warning("No se pudo resolver la información de la BD: {}", e)
