from crosscheck.extraction.fields import (
    CanonicalField as F,
    field_key,
    fill_missing,
    parse_field,
    with_field,
)


def test_display_keys_round_trip():
    for field in F:
        assert parse_field(field_key(field)) is field
    assert parse_field("Dzz") is None
    assert field_key("Dzz") == "Dzz"


def test_fill_missing_never_overwrites():
    primary = {"Date of Birth": "01/13/1976"}
    merged = fill_missing(primary, {"Date of Birth": "12/31/2000", "Sex": "Male"})
    assert merged == {"Date of Birth": "01/13/1976", "Sex": "Male"}
    assert primary == {"Date of Birth": "01/13/1976"}


def test_with_field_returns_new_map():
    fields = {"Sex": "Male"}
    updated = with_field(fields, F.SEX, "Female")
    assert updated == {"Sex": "Female"}
    assert fields == {"Sex": "Male"}
    assert with_field(fields, F.CLASS, None) == fields
    assert with_field(fields, F.CLASS, "") == fields
