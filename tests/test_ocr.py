import logging

import pytest

from crosscheck.extraction import ocr
from crosscheck.extraction.ocr import extract, extract_with_trace


def test_physical_description_line():
    fields = extract("SEX M 5'-09\" 185 lb BLU")
    assert fields["Sex"] == "Male"
    assert fields["Height"] == "5'9\" (69\")"
    assert fields["Weight"] == "185 lbs"
    assert fields["Eye Color"] == "Blu"


def test_full_front_text(front_text):
    fields, ambiguous = extract_with_trace(front_text)
    assert fields == {
        "Name": "John Allen Doe",
        "Date of Birth": "01/13/1976",
        "Driver License Number": "C549417",
        "Address": "123 Main St",
        "City": "Sacramento",
        "State": "Ca",
        "ZIP Code": "95822",
        "Issue Date": "01/13/2022",
        "Expiration Date": "01/13/2030",
        "Sex": "Male",
        "Height": "5'9\" (69\")",
        "Weight": "185 lbs",
        "Eye Color": "Blu",
        "Hair Color": "Brn",
        "Class": "C",
        "Veteran Status": "Yes",
        "Organ Donor": "Yes",
    }
    assert ambiguous == []


def test_state_header_beats_city_line(front_text):
    fields = extract("CALIFORNIA " + front_text)
    assert fields["State"] == "California"
    assert fields["City"] == "Sacramento"


def test_first_rule_wins_and_disagreement_is_reported():
    fields, ambiguous = extract_with_trace("SEX M\nF12")
    assert fields["Sex"] == "Female"
    assert ambiguous == ["Sex"]


def test_labeled_license_number_beats_bare_token():
    fields, ambiguous = extract_with_trace("NO. D1234\nX7654321")
    assert fields["Driver License Number"] == "D1234"
    assert "Driver License Number" in ambiguous


def test_numbered_name_beats_bare_run():
    fields, ambiguous = extract_with_trace("JOHNSON CITY BANK\n1 DOE JOHN ALLEN")
    assert fields["Name"] == "John Allen Doe"
    assert "Name" in ambiguous


def test_name_run_skips_label_words():
    fields = extract("DRIVER LICENSE CLASS\nSMITH JANE MARIE")
    assert fields["Name"] == "Jane Marie Smith"


def test_none_restrictions_and_endorsements_are_omitted():
    fields = extract("RSTR NONE END NONE")
    assert "Restrictions" not in fields
    assert "Endorsements" not in fields

    fields = extract("RSTR B END NONE")
    assert fields["Restrictions"] == "B"
    assert "Endorsements" not in fields


def test_city_without_comma_sets_city_state_zip_once():
    fields = extract("42 OAK AVE\nAUSTIN TX 78701")
    assert fields["Address"] == "42 Oak Ave"
    assert fields["City"] == "Austin"
    assert fields["State"] == "Tx"
    assert fields["ZIP Code"] == "78701"


def test_height_label_digits_fallback():
    assert extract("HGT 069")["Height"] == "5'9\" (69\")"


def test_indicators_and_document_numbers():
    fields = extract("REAL ID\nTYPE CDL\nDD 0123456789\nAUDIT 9876543210")
    assert fields["REAL ID"] == "Yes"
    assert fields["License Type"] == "CDL"
    assert fields["Document Discriminator"] == "0123456789"
    assert fields["Audit Number"] == "9876543210"


def test_empty_text_yields_nothing():
    assert extract("") == {}
    assert extract(None) == {}
    assert extract_with_trace("  \n ") == ({}, [])


def test_extraction_is_deterministic(front_text):
    assert extract_with_trace(front_text) == extract_with_trace(front_text)


def test_rule_names_are_unique():
    names = [r.name for r in ocr.OCR_RULES]
    assert len(names) == len(set(names))


@pytest.mark.parametrize("text,key,expected", [
    # sex: 'M SEX' form, and it outranks 'SEX F'
    ("M SEX", "Sex", "Male"),
    ("M SEX\nSEX F", "Sex", "Male"),
    # eye color outside the vocabulary, label-adjacent forms
    ("EYES ONYX", "Eye Color", "Onyx"),
    ("ONYX EYES", "Eye Color", "Onyx"),
    ("EYES. ONYX", "Eye Color", "Onyx"),
    ("ONYX EYES JADE", "Eye Color", "Jade"),
    ("EYES ONYX BLU", "Eye Color", "Blu"),
    # weight: label only, and 'lb' suffix outranks the label
    ("WGT 185", "Weight", "185 lbs"),
    ("WGT 190 185 LB", "Weight", "185 lbs"),
    # height forms run through the cascade
    ("5'. -09\"", "Height", "5'9\" (69\")"),
    ("HGT 5'9\"", "Height", "5'9\" (69\")"),
    ("HGT 5-09", "Height", "5'9\" (69\")"),
    ("5'. -09\" HGT 5'11\"", "Height", "5'9\" (69\")"),
    # comma city line outranks the plain one
    ("SACRAMENTO, CA 95822\nFRESNO CA 93650", "City", "Sacramento"),
    ("SACRAMENTO, CA 95822\nFRESNO CA 93650", "ZIP Code", "95822"),
])
def test_surface_form_priority(text, key, expected):
    assert extract(text)[key] == expected


def test_lower_priority_height_and_city_are_reported():
    _, ambiguous = extract_with_trace("5'. -09\" HGT 5'11\"")
    assert ambiguous == ["Height"]
    _, ambiguous = extract_with_trace("SACRAMENTO, CA 95822\nFRESNO CA 93650")
    assert ambiguous == ["City", "ZIP Code"]


def test_trace_names_only_rules_that_wrote_a_field(caplog):
    caplog.set_level(logging.DEBUG, logger="crosscheck.ocr")
    extract("RSTR NONE")
    extract("RSTR B")
    messages = [r.getMessage() for r in caplog.records]
    assert "ocr_extracted fields=0 rules={} ambiguous=[]" in messages
    assert "ocr_extracted fields=1 rules={'Restrictions': 'restrictions'} ambiguous=[]" in messages
