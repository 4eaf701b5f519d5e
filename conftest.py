# conftest.py
# -------------------------------------------------------------------------------------
# Archivo: conftest.py (raíz del proyecto)
# Propósito: Fixtures compartidas por tests/unit y tests/api.
#            - BD SQLite en memoria (StaticPool) creada desde los modelos.
#            - Settings explícitos en DRY_RUN, sin pausas entre reintentos.
#            - FakeTransports: doble de los transportes que registra cada envío.
#            - Factoría de bodas/familias/miembros/eventos con orden de listado fijo.
#            - TestClient con dependencias sustituidas y token de wedding_admin.
# Las variables de entorno se fijan ANTES de importar nupci (nupci.db crea el engine
# al importarse y aborta si no hay DATABASE_URL con FORCE_DB=postgres).
# -------------------------------------------------------------------------------------

import os

os.environ.setdefault("FORCE_DB", "sqlite")                       # Permite el fallback a SQLite.
os.environ.setdefault("DATABASE_URL", "sqlite://")                # Engine global en memoria (no se usa en tests).
os.environ.setdefault("DRY_RUN", "1")                             # Nunca tocar proveedores reales.

import uuid                                                       # Tokens mágicos únicos.
from dataclasses import dataclass                                 # Registro de llamadas del doble.
from datetime import date, datetime, timedelta                    # Fechas de las bodas de prueba.

import pytest                                                     # Framework de testing.
from fastapi.testclient import TestClient                         # Cliente HTTP en proceso.
from sqlalchemy import create_engine                              # Engine de pruebas.
from sqlalchemy.orm import sessionmaker                           # Fábrica de sesiones.
from sqlalchemy.pool import StaticPool                            # Una sola conexión para la BD en memoria.

from nupci import models                                          # Modelos ORM.
from nupci.auth import ROLE_WEDDING_ADMIN, create_access_token    # Tokens de sesión.
from nupci.config import Settings, get_settings                   # Configuración explícita.
from nupci.core.delivery import SendResult                        # Resultado de transporte.
from nupci.db import Base, get_db                                 # Metadata y dependencia de BD.
from nupci.services.dispatcher import ReminderDispatcher          # Orquestador real con transportes falsos.


# =======================
# Base de datos
# =======================
@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},                # TestClient usa otro hilo.
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


# =======================
# Configuración
# =======================
@pytest.fixture
def settings():
    return Settings(app_url="https://nupci.test", dry_run=True, retry_delay_seconds=0)


# =======================
# Transportes falsos
# =======================
@dataclass
class SentMessage:
    kind: str                                                     # "EMAIL" | "SMS" | "WHATSAPP"
    to: str
    body: str
    subject: str | None = None
    lang: models.Language | None = None
    media_url: str | None = None


class FakeTransports:
    """Registra cada envío; `fail_for` contiene destinatarios que deben fallar."""

    def __init__(self):
        self.sent: list[SentMessage] = []
        self.fail_for: dict[str, str] = {}

    def _result(self, to: str) -> SendResult:
        if to in self.fail_for:
            return SendResult.fail(self.fail_for[to])
        return SendResult.ok(f"fake-{len(self.sent)}")

    def send_email(self, to, subject, body, lang, image_url=None) -> SendResult:
        self.sent.append(SentMessage("EMAIL", to, body, subject=subject, lang=lang, media_url=image_url))
        return self._result(to)

    def send_message(self, to, body, kind, media_url=None) -> SendResult:
        self.sent.append(SentMessage(kind.value, to, body, media_url=media_url))
        return self._result(to)


@pytest.fixture
def transports():
    return FakeTransports()


@pytest.fixture
def dispatcher(settings, transports):
    return ReminderDispatcher(settings, transports=transports)


# =======================
# Factoría de datos
# =======================
class Factory:
    """Crea filas con created_at creciente para que el orden de listado sea el de creación."""

    def __init__(self, session):
        self.db = session
        self._clock = datetime(2030, 1, 1, 9, 0, 0)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def wedding(self, **overrides) -> models.Wedding:
        data = dict(
            couple_names="Ana & Luis",
            wedding_date=date(2030, 6, 20),
            wedding_time="17:30",
            location="Finca El Olivar",
            rsvp_cutoff_date=datetime(2030, 5, 20, 23, 59),
            default_language=models.Language.ES,
        )
        data.update(overrides)
        wedding = models.Wedding(**data)
        self.db.add(wedding)
        self.db.commit()
        return wedding

    def family(self, wedding, name="García", *, attending=(None,), **overrides) -> models.Family:
        data = dict(
            wedding_id=wedding.id,
            name=name,
            magic_token=uuid.uuid4().hex,
            created_at=self._tick(),
        )
        data.update(overrides)
        family = models.Family(**data)
        family.members = [models.FamilyMember(name=f"{name} {i + 1}", attending=a) for i, a in enumerate(attending)]
        self.db.add(family)
        self.db.commit()
        return family

    def event(self, family, event_type=models.EventType.INVITATION_SENT, channel=models.Channel.EMAIL):
        event = models.TrackingEvent(
            family_id=family.id,
            wedding_id=family.wedding_id,
            event_type=event_type,
            channel=channel,
            event_metadata={},
            timestamp=self._tick(),
        )
        self.db.add(event)
        self.db.commit()
        return event

    def template(self, wedding, **overrides) -> models.MessageTemplate:
        data = dict(
            wedding_id=wedding.id,
            type=models.TemplateType.REMINDER,
            language=models.Language.ES,
            channel=models.Channel.EMAIL,
            subject="Asunto {{coupleNames}}",
            body="Hola {{familyName}}, entra en {{magicLink}}",
        )
        data.update(overrides)
        template = models.MessageTemplate(**data)
        self.db.add(template)
        self.db.commit()
        return template


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def wedding(factory):
    return factory.wedding()


# =======================
# API
# =======================
@pytest.fixture
def app(db, settings, dispatcher):
    from nupci.main import app as fastapi_app                     # Import tardío: el entorno ya está fijado.
    from nupci.routers.reminders import get_dispatcher

    def _get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = _get_db
    fastapi_app.dependency_overrides[get_settings] = lambda: settings
    fastapi_app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_token(settings):
    def _make(wedding_id=None, role=ROLE_WEDDING_ADMIN, subject="admin-1"):
        return create_access_token(settings, subject=subject, role=role, wedding_id=wedding_id)
    return _make


@pytest.fixture
def auth_headers(make_token, wedding):
    return {"Authorization": f"Bearer {make_token(wedding.id)}"}
