import pytest

from mystar.email_templates import (
    TemplateError,
    nl2br,
    render_contact_form,
    render_stored_template,
    translate_request_type,
)


@pytest.mark.parametrize("request_type, label", [
    ("birthday", "יום הולדת"),
    ("anniversary", "יום נישואין"),
    ("motivation", "מוטיבציה"),
    ("bar-mitzvah", "bar-mitzvah"),
    (None, "לא צוין"),
    ("", "לא צוין"),
])
def test_translate_request_type(request_type, label):
    assert translate_request_type(request_type) == label


def test_nl2br_escapes_before_breaking_lines():
    assert str(nl2br("<script>\nhi")) == "&lt;script&gt;<br>hi"


def test_stored_template_placeholders():
    html = render_stored_template(
        "<p>{{name}} - {{siteUrl}}</p><img src=\"https://xyzabc.supabase.co/storage/logo.png\">",
        {"name": "<Dana>", "siteUrl": "https://mystar.co.il"},
        "https://mystar.co.il",
    )

    assert "&lt;Dana&gt;" in html
    assert "https://mystar.co.il/storage/logo.png" in html


def test_stored_template_keeps_unknown_placeholders():
    assert "missing" in render_stored_template("<p>{{missing}}</p>", {}, "https://mystar.co.il")


def test_invalid_stored_template():
    with pytest.raises(TemplateError):
        render_stored_template("{% for %}", {}, "https://mystar.co.il")


def test_contact_form_without_ticket():
    html = render_contact_form("Yossi", "yossi@example.com", "Refund", "line1\nline2", None)

    assert "line1<br>line2" in html
    assert "מזהה פנייה" not in html
