# tests/unit/test_renderer.py
# Sustitución de {{placeholders}} y utilidades de inspección de plantillas.

from nupci.templates.renderer import (
    AVAILABLE_PLACEHOLDERS,
    get_placeholders,
    has_all_placeholders,
    render,
    unknown_placeholders,
)


def test_render_replaces_known_variables():
    out = render("Hola {{familyName}}, boda de {{coupleNames}}", {"familyName": "García", "coupleNames": "Ana & Luis"})
    assert out == "Hola García, boda de Ana & Luis"


def test_render_repeated_placeholder():
    assert render("{{x}}-{{x}}", {"x": "1"}) == "1-1"


def test_render_leaves_unknown_and_missing_tokens_verbatim():
    out = render("{{familyName}} {{referenceCode}} {{foo}}", {"familyName": "Smith", "referenceCode": None})
    assert out == "Smith {{referenceCode}} {{foo}}"


def test_render_is_single_pass():
    # Un valor que contiene un token no se vuelve a expandir.
    out = render("{{familyName}}", {"familyName": "{{coupleNames}}", "coupleNames": "X"})
    assert out == "{{coupleNames}}"


def test_render_empty_template():
    assert render("", {"familyName": "x"}) == ""
    assert render(None, {}) == ""


def test_render_without_tokens_is_identity():
    assert render("Sin variables", {"familyName": "x"}) == "Sin variables"


def test_get_placeholders_unique_in_order():
    assert get_placeholders("{{b}} {{a}} {{b}} {{ c }}") == ["b", "a"]


def test_has_all_placeholders():
    assert has_all_placeholders("{{familyName}} {{magicLink}}", ["magicLink"])
    assert not has_all_placeholders("{{familyName}}", ["familyName", "magicLink"])


def test_unknown_placeholders():
    assert unknown_placeholders("{{familyName}} {{guestCount}}") == ["guestCount"]
    assert all(not unknown_placeholders("{{%s}}" % name) for name in AVAILABLE_PLACEHOLDERS)


def test_render_is_idempotent_when_all_tokens_are_covered():
    template = "Hola {{familyName}}! " + " | ".join(f"{{{{{name}}}}}" for name in AVAILABLE_PLACEHOLDERS)
    variables = {name: f"valor-{name}" for name in AVAILABLE_PLACEHOLDERS}

    once = render(template, variables)

    assert get_placeholders(once) == []
    assert render(once, variables) == once
