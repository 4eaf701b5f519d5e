# nupci/schemas.py  # Ruta y nombre del archivo de esquemas (Pydantic).

# =================================================================================
# 📦 Schemas (MODELOS DE DATOS Pydantic)
# ---------------------------------------------------------------------------------
# Entradas y salidas de la API de administración:
# - Recordatorios (envío, previsualización, validación de contactos).
# - Plantillas de mensaje (CRUD + preview).
# - Pagos/regalos (alta manual y conciliación por referencia).
# Todas las respuestas correctas van envueltas en {"success": true, "data": ...}.
# =================================================================================

from datetime import datetime                                                         # Fechas de transacción y auditoría.
from decimal import Decimal                                                           # Importes exactos.
from typing import Generic, List, Literal, Optional, TypeVar                          # Tipado.

from pydantic import BaseModel, ConfigDict, Field, field_validator                    # Pydantic v2.

from nupci.models import Channel, GiftStatus, Language, RequestChannel, TemplateType  # Enums del ORM.

T = TypeVar("T")

MAX_FAMILY_IDS = 1000                                                                 # Tope de familias por petición.


class ApiResponse(BaseModel, Generic[T]):                                             # Sobre común de éxito.
    success: Literal[True] = True
    data: T


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    v = (v or "").strip()
    return v or None


# =================================================================================
# 📣 Recordatorios
# =================================================================================
class SendRemindersRequest(BaseModel):
    channel: RequestChannel                                                           # EMAIL | SMS | WHATSAPP | PREFERRED
    message_template: Optional[str] = Field(default=None, max_length=5000)            # Cuerpo personalizado (opcional).
    family_ids: Optional[List[str]] = Field(default=None, max_length=MAX_FAMILY_IDS)  # Filtro explícito (opcional).

    @field_validator("message_template")
    @classmethod
    def _clean_template(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)                                                      # "" equivale a no enviar nada.

    @field_validator("family_ids")
    @classmethod
    def _clean_ids(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        cleaned = [fid.strip() for fid in v]
        if any(not fid or len(fid) > 64 for fid in cleaned):                          # Ids vacíos o absurdos.
            raise ValueError("family_ids must contain non-empty ids")
        return cleaned or None                                                        # Lista vacía = sin filtro.


class ReminderResultData(BaseModel):
    sent_count: int
    failed_count: int
    recipient_families: List[str]


class PreviewFamily(BaseModel):
    id: str
    name: str
    preferred_language: Optional[Language] = None
    channel_preference: Optional[Channel] = None

    model_config = ConfigDict(from_attributes=True)


class ReminderPreviewData(BaseModel):
    eligible_families: int
    families: List[PreviewFamily]


class ValidateRemindersRequest(BaseModel):
    channel: RequestChannel
    family_ids: List[str] = Field(min_length=1, max_length=MAX_FAMILY_IDS)


class ValidFamily(BaseModel):
    id: str
    name: str
    channel: Channel


class InvalidFamily(BaseModel):
    id: str
    name: str
    missing_info: Literal["email", "phone", "whatsapp_number"]
    expected_channel: Channel


class ValidationSummary(BaseModel):
    total: int
    valid: int
    invalid: int


class ValidateRemindersData(BaseModel):
    valid_families: List[ValidFamily]
    invalid_families: List[InvalidFamily]
    summary: ValidationSummary


class ConfirmationResultData(BaseModel):
    family_id: str
    success: bool
    channel: Channel
    message_id: Optional[str] = None
    error: Optional[str] = None


# =================================================================================
# ✉️ Plantillas
# =================================================================================
def _check_image_url(v: Optional[str]) -> Optional[str]:
    v = _strip_or_none(v)
    if v is not None and not v.startswith(("http://", "https://", "/")):             # Absoluta o subida (relativa).
        raise ValueError("image_url must be an absolute URL or an uploaded path")
    return v


class TemplateCreate(BaseModel):
    type: TemplateType
    language: Language
    channel: Channel
    subject: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=10, max_length=5000)
    image_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("image_url")
    @classmethod
    def _clean_image(cls, v: Optional[str]) -> Optional[str]:
        return _check_image_url(v)


class TemplateUpdate(BaseModel):
    subject: Optional[str] = Field(default=None, min_length=1, max_length=200)
    body: Optional[str] = Field(default=None, min_length=10, max_length=5000)
    image_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("image_url")
    @classmethod
    def _clean_image(cls, v: Optional[str]) -> Optional[str]:
        return _check_image_url(v)


class TemplateOut(BaseModel):
    id: str
    wedding_id: str
    type: TemplateType
    language: Language
    channel: Channel
    subject: str
    body: str
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TemplateListData(BaseModel):
    items: List[TemplateOut]
    pagination: Pagination


class SampleData(BaseModel):                                                          # Valores de ejemplo del preview.
    familyName: str = "Smith"
    coupleNames: str = "John & Jane"
    weddingDate: str = "June 20, 2026"
    weddingTime: str = "17:00"
    location: str = "Villa Rosa"
    magicLink: str = "https://example.com/rsvp/sample-token"
    rsvpCutoffDate: str = "May 20, 2026"
    referenceCode: str = "K7PX2M"


class TemplatePreviewRequest(BaseModel):
    template_id: Optional[str] = None                                                 # Previsualiza una guardada...
    subject: Optional[str] = Field(default=None, max_length=200)                      # ...o texto libre.
    body: Optional[str] = Field(default=None, max_length=5000)
    sample_data: SampleData = Field(default_factory=SampleData)


class TemplatePreviewData(BaseModel):
    subject: str
    body: str
    placeholders: List[str]
    unknown_placeholders: List[str]


# =================================================================================
# 💶 Pagos
# =================================================================================
class PaymentCreate(BaseModel):
    family_id: str = Field(min_length=1)
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    transaction_date: datetime
    reference_code_used: Optional[str] = Field(default=None, max_length=64)


class PaymentMatchRequest(BaseModel):
    reference_code: str = Field(min_length=1, max_length=64)
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    transaction_date: datetime


class GiftOut(BaseModel):
    id: str
    family_id: str
    amount: Decimal
    reference_code_used: Optional[str] = None
    auto_matched: bool
    status: GiftStatus
    transaction_date: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentMatchData(BaseModel):
    matched: bool
    gift: Optional[GiftOut] = None
