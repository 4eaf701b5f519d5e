# tests/unit/test_payments.py
# Códigos de referencia, conciliación automática y alta manual de pagos.

from datetime import timedelta
from decimal import Decimal

import pytest

from nupci.crud import tracking_crud
from nupci.errors import NotFoundError, ValidationError
from nupci.models import EventType, GiftStatus, PaymentTrackingMode
from nupci.services import payments
from nupci.utils.dates import utcnow


@pytest.fixture
def automated_wedding(factory):
    return factory.wedding(payment_tracking_mode=PaymentTrackingMode.AUTOMATED)


def test_reference_code_shape():
    code = payments.generate_reference_code()
    assert len(code) == payments.REFERENCE_LENGTH
    assert set(code) <= set(payments.REFERENCE_ALPHABET)


def test_normalize_reference():
    assert payments.normalize_reference(" k7px-2m ") == "K7PX2M"
    assert payments.normalize_reference(None) == ""


def test_assign_codes_only_in_automated_mode(db, factory, wedding, automated_wedding):
    factory.family(wedding, "Manual")
    keep = factory.family(automated_wedding, "Con código", reference_code="AAAAAA")
    factory.family(automated_wedding, "Sin código 1")
    factory.family(automated_wedding, "Sin código 2")

    assert payments.assign_reference_codes(db, wedding) == 0
    assert payments.assign_reference_codes(db, automated_wedding) == 2

    codes = [f.reference_code for f in automated_wedding.families]
    assert all(codes) and len(set(codes)) == 3
    assert keep.reference_code == "AAAAAA"


def test_match_payment_by_reference(db, factory, automated_wedding):
    family = factory.family(automated_wedding, "Smith", reference_code="K7PX2M")
    when = utcnow() - timedelta(days=3)

    gift = payments.match_payment(db, automated_wedding.id, "k7px 2m", Decimal("150.00"), when, admin_id="admin-1")

    assert gift is not None
    assert gift.family_id == family.id
    assert gift.auto_matched is True
    assert gift.status is GiftStatus.RECEIVED
    assert gift.reference_code_used == "K7PX2M"
    events = tracking_crud.list_events(db, family.id, EventType.PAYMENT_RECEIVED)
    assert len(events) == 1
    assert events[0].event_metadata["amount"] == "150.00"


def test_match_payment_without_match(db, factory, automated_wedding):
    factory.family(automated_wedding, "Smith", reference_code="K7PX2M")
    assert payments.match_payment(db, automated_wedding.id, "ZZZZZZ", Decimal("10"), utcnow()) is None
    assert payments.match_payment(db, automated_wedding.id, "  ", Decimal("10"), utcnow()) is None


def test_match_payment_is_scoped_to_wedding(db, factory, automated_wedding):
    other = factory.wedding(payment_tracking_mode=PaymentTrackingMode.AUTOMATED)
    factory.family(other, "Ajena", reference_code="K7PX2M")
    assert payments.match_payment(db, automated_wedding.id, "K7PX2M", Decimal("10"), utcnow()) is None


def test_manual_payment(db, factory, wedding):
    family = factory.family(wedding, "García")
    gift = payments.record_manual_payment(db, wedding.id, family.id, Decimal("80"), utcnow() - timedelta(days=1))
    assert gift.auto_matched is False
    assert payments.list_gifts(db, wedding.id) == [gift]
    assert payments.list_gifts(db, wedding.id, GiftStatus.PENDING) == []


def test_manual_payment_unknown_family(db, wedding):
    with pytest.raises(NotFoundError):
        payments.record_manual_payment(db, wedding.id, "missing", Decimal("80"), utcnow())


@pytest.mark.parametrize("delta", [timedelta(days=1), timedelta(days=-366)])
def test_transaction_date_window(delta):
    with pytest.raises(ValidationError):
        payments.validate_transaction_date(utcnow() + delta)


def test_non_positive_amount(db, factory, wedding):
    family = factory.family(wedding, "García")
    with pytest.raises(ValidationError):
        payments.record_manual_payment(db, wedding.id, family.id, Decimal("0"), utcnow())
