import pytest

from crosscheck.extraction.normalizers import (
    feet_inches_from_total_inches,
    format_date,
    format_height,
    format_weight,
    normalize_for_comparison,
    sex_from_code,
    to_proper_case,
)


@pytest.mark.parametrize("raw,expected", [
    ("JOHN DOE", "John Doe"),
    ("123 MAIN ST", "123 Main St"),
    ("DOE, JOHN", "Doe, John"),
    ("John McDonald", "John McDonald"),
    ("", ""),
    (None, ""),
])
def test_to_proper_case(raw, expected):
    assert to_proper_case(raw) == expected


@pytest.mark.parametrize("raw", ["JOHN DOE", "mixed Case TEXT", "123 MAIN ST", "A B", "x"])
def test_to_proper_case_is_idempotent(raw):
    once = to_proper_case(raw)
    assert to_proper_case(once) == once


def test_format_date_reformats_eight_digits_only():
    assert format_date("01131976") == "01/13/1976"
    assert format_date("01/13/1976") == "01/13/1976"
    assert format_date("1976") == "1976"
    assert format_date("0113197") == "0113197"
    assert format_date(None) == ""
    assert format_date(format_date("12312029")) == "12/31/2029"


@pytest.mark.parametrize("raw,expected", [
    ("069", "5'9\" (69\")"),
    ("69 in", "5'9\" (69\")"),
    ("069 IN", "5'9\" (69\")"),
    ("5-9", "5'9\" (69\")"),
    ("5'9\"", "5'9\" (69\")"),
    ("5'-09\"", "5'9\" (69\")"),
    ("5'. -09\"", "5'9\" (69\")"),
    ("72", "6' (72\")"),
    ("6'", "6' (72\")"),
    ("10", "10\""),
    ("tall", "tall"),
    ("", ""),
])
def test_format_height(raw, expected):
    assert format_height(raw) == expected


@pytest.mark.parametrize("raw", ["069", "5-9", "72", "6'", "10", "5'. -09\"", "tall"])
def test_format_height_is_idempotent(raw):
    once = format_height(raw)
    assert format_height(once) == once


def test_feet_inches_drops_zero_inches():
    assert feet_inches_from_total_inches(69) == "5'9\""
    assert feet_inches_from_total_inches(60) == "5'"


@pytest.mark.parametrize("raw,expected", [
    ("185", "185 lbs"),
    ("185lb", "185 lbs"),
    ("185 LBS", "185 lbs"),
    ("185 lbs", "185 lbs"),
    ("84 kg", "84 kg"),
])
def test_format_weight(raw, expected):
    assert format_weight(raw) == expected


def test_binary_sex_policy_collapses_unknown_codes():
    assert sex_from_code("1", policy="binary") == "Male"
    assert sex_from_code("m", policy="binary") == "Male"
    assert sex_from_code("2", policy="binary") == "Female"
    assert sex_from_code("X", policy="binary") == "Female"
    assert sex_from_code("9", policy="binary") == "Female"


def test_strict_sex_policy_omits_unknown_codes():
    assert sex_from_code("Male", policy="strict") == "Male"
    assert sex_from_code("f", policy="strict") == "Female"
    assert sex_from_code("X", policy="strict") is None
    assert sex_from_code(None, policy="strict") is None


def test_normalize_for_comparison():
    assert normalize_for_comparison("5'9\" (69\")") == "5969"
    assert normalize_for_comparison("C-549 417") == "c549417"
    assert normalize_for_comparison(None) == ""


def test_unknown_sex_policy_is_rejected():
    with pytest.raises(ValueError, match="sex code policy"):
        sex_from_code("M", policy="nonbinary")
