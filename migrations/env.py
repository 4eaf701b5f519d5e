# migrations/env.py
from logging.config import fileConfig
import os
import sys

from alembic import context

# ---- Raíz del proyecto en sys.path para importar "nupci" al lanzar alembic sin instalar ----
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from nupci.db import engine, Base  # engine real (DATABASE_URL/FORCE_DB) y metadata declarativa
import nupci.models  # noqa: F401  registra las tablas en Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Modo 'offline': emite el SQL usando la URL del engine real."""
    context.configure(
        url=str(engine.url),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=engine.url.drivername.startswith("sqlite"),  # ALTER TABLE limitado en SQLite
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Modo 'online': ejecuta contra la BD con el engine del proyecto."""
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
