import pytest

from gate.core.sanitize import FieldKind, field_kind, sanitize, sanitize_value


def test_display_text_is_trimmed_and_escaped():
    out = sanitize({"nama": "  <script>alert('x')</script>  "})
    assert out["nama"] == "&lt;script&gt;alert(&#39;x&#39;)&lt;/script&gt;"


def test_double_quote_and_ampersand_escaped():
    out = sanitize({"note": 'a & "b"'})
    assert "&amp;" in out["note"]
    assert '"' not in out["note"]


@pytest.mark.parametrize(
    "value",
    ["plain", "  padded  ", "<b>bold</b>", "Tom & Jerry", "it's \"quoted\"", "&amp; already", "&lt;x&gt;"],
)
def test_sanitize_is_idempotent_for_display_text(value):
    once = sanitize({"field": value})
    twice = sanitize(once)
    assert twice == once


@pytest.mark.parametrize("key", ["password", "confirmPassword"])
def test_password_fields_are_only_trimmed(key):
    raw = "  p<a>&'\" ss w0rd!  "
    out = sanitize({key: raw})
    assert out[key] == raw.strip()


def test_password_interior_whitespace_is_kept():
    assert sanitize({"password": " a b\tc "})["password"] == "a b\tc"


def test_non_strings_pass_through_unchanged():
    marker = object()
    raw = {"age": 42, "flag": False, "missing": None, "obj": marker}
    out = sanitize(raw)
    assert out == raw
    assert out["obj"] is marker


def test_keys_are_preserved_and_input_not_mutated():
    raw = {"email": " a@b.com ", "password": " x "}
    out = sanitize(raw)
    assert set(out) == set(raw)
    assert raw["email"] == " a@b.com "


def test_empty_and_none_input():
    assert sanitize({}) == {}
    assert sanitize(None) == {}


def test_field_kind_table_can_be_overridden():
    kinds = {"pin": FieldKind.PASSWORD_BEARING}
    assert field_kind("pin", kinds) is FieldKind.PASSWORD_BEARING
    assert field_kind("password", kinds) is FieldKind.DISPLAY_TEXT
    assert sanitize({"pin": " <12> "}, kinds) == {"pin": "<12>"}


def test_sanitize_value_by_kind():
    assert sanitize_value(" <a> ", FieldKind.DISPLAY_TEXT) == "&lt;a&gt;"
    assert sanitize_value(" <a> ", FieldKind.PASSWORD_BEARING) == "<a>"
