# tests/unit/test_builtin_templates.py
# Plantillas integradas, resolución guardada → integrada y composición del mensaje final.

import itertools

import pytest

from nupci.models import Channel, Language, TemplateType
from nupci.templates.compose import (
    absolute_image_url,
    build_magic_link,
    build_variables,
    compose_message,
)
from nupci.templates.defaults import BUILTIN_TEMPLATES, get_builtin
from nupci.templates.renderer import render, unknown_placeholders
from nupci.templates.resolver import SOURCE_BUILTIN, SOURCE_STORED, resolve_template


@pytest.mark.parametrize("language", list(Language))
@pytest.mark.parametrize("template_type", list(TemplateType))
def test_every_language_and_type_has_builtin(language, template_type):
    builtin = get_builtin(language, template_type)
    assert builtin.subject and builtin.body and builtin.greeting and builtin.cta
    assert "{{coupleNames}}" in builtin.body
    assert not unknown_placeholders(builtin.subject + builtin.greeting + builtin.body + builtin.cta)


def test_builtin_mapping_is_exhaustive():
    assert set(BUILTIN_TEMPLATES) == set(Language)
    assert all(set(by_type) == set(TemplateType) for by_type in BUILTIN_TEMPLATES.values())


def test_english_reminder_subject():
    assert get_builtin(Language.EN, TemplateType.REMINDER).subject == "Reminder: Please confirm your attendance"


def test_resolver_prefers_stored_template(db, factory, wedding):
    stored = factory.template(wedding, image_url="/uploads/banner.png")
    resolved = resolve_template(db, wedding.id, TemplateType.REMINDER, Language.ES, Channel.EMAIL)
    assert resolved.source == SOURCE_STORED
    assert resolved.template_id == stored.id
    assert resolved.body == stored.body
    assert resolved.greeting == "" and resolved.cta == ""


def test_resolver_requires_full_key_match(db, factory, wedding):
    factory.template(wedding, channel=Channel.SMS)
    resolved = resolve_template(db, wedding.id, TemplateType.REMINDER, Language.ES, Channel.EMAIL)
    assert resolved.source == SOURCE_BUILTIN
    assert resolved.subject == get_builtin(Language.ES, TemplateType.REMINDER).subject


def test_resolver_ignores_other_weddings(db, factory, wedding):
    other = factory.wedding(couple_names="Otra boda")
    factory.template(other)
    resolved = resolve_template(db, wedding.id, TemplateType.REMINDER, Language.ES, Channel.EMAIL)
    assert resolved.source == SOURCE_BUILTIN


def test_magic_link_and_image_helpers():
    assert build_magic_link("https://nupci.test/", "abc") == "https://nupci.test/rsvp/abc"
    assert absolute_image_url("https://nupci.test", "/uploads/a.png") == "https://nupci.test/uploads/a.png"
    assert absolute_image_url("https://nupci.test", "https://cdn.x/a.png") == "https://cdn.x/a.png"
    assert absolute_image_url("https://nupci.test", None) is None


def test_variables_include_reference_code_only_when_set(factory, wedding):
    family = factory.family(wedding, "Smith")
    variables = build_variables(wedding, family, Language.EN, "https://x/rsvp/t")
    assert "referenceCode" not in variables
    assert variables["weddingDate"] == "June 20, 2030"
    assert variables["rsvpCutoffDate"] == "May 20, 2030"

    family.reference_code = "K7PX2M"
    assert build_variables(wedding, family, Language.EN, "https://x/rsvp/t")["referenceCode"] == "K7PX2M"


def test_compose_builtin_reminder_in_wedding_language(db, settings, factory, wedding):
    family = factory.family(wedding, "García", email="garcia@example.com")
    message = compose_message(db, settings, wedding, family, TemplateType.REMINDER, Channel.EMAIL)

    assert message.language is Language.ES
    assert message.subject == "Recordatorio: Confirma tu asistencia"
    assert message.greeting == "Hola, Familia García!"
    assert "20 de junio de 2030" in message.body
    assert "20 de mayo de 2030" in message.body
    assert message.magic_link == f"https://nupci.test/rsvp/{family.magic_token}"
    assert message.as_text().endswith(f"Confirmar asistencia: {message.magic_link}")
    assert message.template_source == SOURCE_BUILTIN


def test_compose_uses_family_language(db, settings, factory, wedding):
    family = factory.family(wedding, "Rossi", preferred_language=Language.IT)
    message = compose_message(db, settings, wedding, family, TemplateType.INVITATION, Channel.WHATSAPP)
    assert message.language is Language.IT
    assert message.subject == get_builtin(Language.IT, TemplateType.INVITATION).subject


def test_compose_stored_template_with_body_override(db, settings, factory, wedding):
    factory.template(wedding, image_url="/uploads/banner.png")
    family = factory.family(wedding, "García")
    message = compose_message(
        db, settings, wedding, family, TemplateType.REMINDER, Channel.EMAIL,
        body_override="Última llamada, {{familyName}}",
    )
    assert message.subject == "Asunto Ana & Luis"
    assert message.body == "Última llamada, García"
    assert message.image_url == "https://nupci.test/uploads/banner.png"
    assert message.as_text() == "Última llamada, García"                # Sin saludo ni CTA en las guardadas.
    snapshot = message.snapshot()
    assert snapshot["template_source"] == SOURCE_STORED
    assert snapshot["body"] == "Última llamada, García"


def test_builtin_reminders_differ_across_languages():
    variables = {
        "familyName": "García",
        "coupleNames": "Ana & Luis",
        "weddingDate": "20/06/2030",
        "weddingTime": "17:30",
        "location": "Finca El Olivar",
        "magicLink": "https://nupci.test/rsvp/abc",
        "rsvpCutoffDate": "20/05/2030",
    }
    rendered = {}
    for language in Language:
        builtin = get_builtin(language, TemplateType.REMINDER)
        rendered[language] = tuple(
            render(part, variables) for part in (builtin.subject, builtin.greeting, builtin.body, builtin.cta)
        )

    for a, b in itertools.combinations(Language, 2):
        for field, left, right in zip(("subject", "greeting", "body", "cta"), rendered[a], rendered[b]):
            assert left != right, f"{field} de {a.value} y {b.value} coincide"
