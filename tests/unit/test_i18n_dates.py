# tests/unit/test_i18n_dates.py
# Idioma efectivo, fechas localizadas, helpers de UTC y enmascarado de PII.

from datetime import date, datetime, timedelta, timezone

import pytest

from nupci.core.delivery import mask_email, mask_phone
from nupci.models import Language
from nupci.utils.dates import to_naive_utc
from nupci.utils.i18n import format_date, resolve_language


def test_resolve_language_precedence():
    assert resolve_language(Language.EN, Language.FR) is Language.EN
    assert resolve_language(None, Language.FR) is Language.FR
    assert resolve_language(None, None) is Language.ES
    assert resolve_language("fr-CA;q=0.8", None) is Language.FR
    assert resolve_language("pt", "de") is Language.DE


@pytest.mark.parametrize(
    "language, expected",
    [
        (Language.ES, "1 de diciembre de 2025"),
        (Language.EN, "December 1, 2025"),
        (Language.FR, "1 décembre 2025"),
        (Language.IT, "1 dicembre 2025"),
        (Language.DE, "1. Dezember 2025"),
    ],
)
def test_format_date(language, expected):
    assert format_date(date(2025, 12, 1), language) == expected
    assert format_date(datetime(2025, 12, 1, 18, 30), language) == expected


def test_format_date_none():
    assert format_date(None, Language.EN) == ""


def test_to_naive_utc():
    aware = datetime(2025, 6, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_naive_utc(aware) == datetime(2025, 6, 1, 10, 0)
    assert to_naive_utc(date(2025, 6, 1)) == datetime(2025, 6, 1)
    naive = datetime(2025, 6, 1, 8, 0)
    assert to_naive_utc(naive) is naive


def test_masking():
    assert mask_email("test@example.com") == "te**@example.com"
    assert mask_email(None) == "<empty>"
    assert mask_phone("+34600111222") == "+34*****1222"
    assert mask_phone("whatsapp:+34600111222") == "+34*****1222"
