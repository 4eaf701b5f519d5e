# create_db.py

# =================================================================================
# 🏗️ SCRIPT DE CREACIÓN DE LA BASE DE DATOS
# ---------------------------------------------------------------------------------
# Crea todas las tablas de `nupci.models` directamente (sin Alembic). Útil en
# desarrollo local con SQLite. Con --seed inserta una boda de demostración con
# tres familias para probar los recordatorios en DRY_RUN.
# En producción usar `alembic upgrade head`.
# =================================================================================

import argparse
import secrets
from datetime import date, timedelta

from loguru import logger

from nupci.db import engine, Base, SessionLocal
# Importar los modelos los registra en Base.metadata.
from nupci import models
from nupci.utils.dates import utcnow


def create_database_tables():
    """
    Crea todas las tablas en la base de datos que están asociadas con `Base`.
    """
    print("Creando tablas en la base de datos...")
    Base.metadata.create_all(bind=engine)
    print("✔️ Base de datos y tablas creadas correctamente.")


def seed_demo_wedding() -> str:
    """Inserta una boda de ejemplo y devuelve su id."""
    db = SessionLocal()
    try:
        wedding = models.Wedding(
            couple_names="Lucía & Martín",
            wedding_date=date.today() + timedelta(days=90),
            wedding_time="17:30",
            location="Finca El Olivar, Sevilla",
            rsvp_cutoff_date=utcnow() + timedelta(days=60),
            default_language=models.Language.ES,
        )
        db.add(wedding)
        db.flush()

        families = [
            models.Family(
                wedding_id=wedding.id, name="Familia García", email="garcia@example.com",
                channel_preference=models.Channel.EMAIL,
            ),
            models.Family(
                wedding_id=wedding.id, name="The Smiths", phone="+447700900123",
                channel_preference=models.Channel.SMS, preferred_language=models.Language.EN,
            ),
            models.Family(
                wedding_id=wedding.id, name="Famiglia Rossi", whatsapp_number="+393331234567",
                channel_preference=models.Channel.WHATSAPP, preferred_language=models.Language.IT,
            ),
        ]
        for family in families:
            family.magic_token = secrets.token_urlsafe(24)
            family.members = [models.FamilyMember(name=f"{family.name} (titular)")]
            db.add(family)
        db.commit()
        logger.info("Boda demo creada: {} ({} familias)", wedding.id, len(families))
        return wedding.id
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Crea las tablas de la base de datos.")
    parser.add_argument("--seed", action="store_true", help="Inserta una boda de demostración")
    args = parser.parse_args()

    create_database_tables()
    if args.seed:
        print(f"💒 Boda demo: {seed_demo_wedding()}")
