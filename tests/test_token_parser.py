import pytest

from order_converter.extractors.token_parser import LineParser, clean


@pytest.fixture
def parser():
    return LineParser(max_qty=10000)


def test_clean_collapses_whitespace():
    assert clean("  DOLO\t650   TAB ") == "DOLO 650 TAB"
    assert clean(None) == ""


def test_pdf_line_with_eight_digit_code(parser):
    record = parser.parse_line("30049079 MICR DIAPRIDE 1 MG TAB 30 S 120")

    assert record["internal_code"] == "30049079"
    assert record["description"] == "MICR DIAPRIDE 1 MG TAB"
    assert record["ordered_qty"] == 120
    assert record["raw_description"] == "MICR DIAPRIDE 1 MG TAB 30 S"


def test_free_annotation_is_not_the_quantity(parser):
    record = parser.parse_line("DOLO 1000 10'S *5 50 +10FREE")

    assert record["internal_code"] == ""
    assert record["description"] == "DOLO 1000"
    assert record["ordered_qty"] == 50


def test_spaced_free_annotation_is_not_the_quantity(parser):
    record = parser.parse_line("A12345 DOLO 650 TAB 50 + 10 FREE")

    assert record["ordered_qty"] == 50
    assert record["description"] == "DOLO 650 TAB"


def test_trailing_free_count_is_not_the_quantity(parser):
    record = parser.parse_line("A12345 DOLO 650 TAB 50 10 FREE")

    assert record["ordered_qty"] == 50


@pytest.mark.parametrize("line,description", [
    ("A12345 ARNICA SCHWABE 20", "ARNICA SCHWABE"),
    ("A12345 COCAVIT SUGARFREE 20", "COCAVIT SUGARFREE"),
    ("A12345 BONUSAN SYRUP 20", "BONUSAN SYRUP"),
])
def test_words_containing_qualifier_letters_keep_their_quantity(parser, line, description):
    record = parser.parse_line(line)

    assert record is not None
    assert record["ordered_qty"] == 20
    assert record["description"] == description


def test_banned_keyword_line_is_dropped(parser):
    assert parser.parse_line("GST Breakup 12% 100") is None


def test_letter_code_with_dosage_quantity(parser):
    record = parser.parse_line("A1002 PARACETAMOL 500MG 1000")

    assert record["internal_code"] == "A1002"
    assert record["description"] == "PARACETAMOL 500MG"
    assert record["ordered_qty"] == 1000


def test_leading_serial_is_skipped(parser):
    record = parser.parse_line("12 B45678 AMLOKIND 5 TAB 40")

    assert record["internal_code"] == "B45678"
    assert record["description"] == "AMLOKIND 5 TAB"
    assert record["ordered_qty"] == 40


def test_price_token_ends_the_description(parser):
    record = parser.parse_line("A12345 CALPOL 500 45.50 10")

    assert record["description"] == "CALPOL 500"
    assert record["ordered_qty"] == 10


def test_quantity_after_free_word_is_skipped(parser):
    record = parser.parse_line("A12345 CALPOL 500 20 FREE 5")

    assert record["ordered_qty"] == 20
    assert record["description"] == "CALPOL 500"


def test_trailing_code_shaped_token_is_read_as_quantity(parser):
    record = parser.parse_line("PARA 500 TAB 1200")

    assert record["internal_code"] == ""
    assert record["description"] == "PARA 500 TAB"
    assert record["ordered_qty"] == 1200


@pytest.mark.parametrize("line", [
    "PUNE 20",
    "CROCIN 20000",
    "12345 99",
    "TOTAL AMOUNT 500",
    "CROCIN",
])
def test_invalid_lines_are_discarded(parser, line):
    assert parser.parse_line(line) is None


@pytest.mark.parametrize("token,expected", [
    ("30049079", True),
    ("1234567", True),
    ("ABCD1234", True),
    ("A12345", True),
    ("1000", False),
    ("2024", False),
    ("500", False),
    ("A123", False),
    ("123456789", False),
])
def test_internal_code_shapes(parser, token, expected):
    assert parser.is_internal_code(token) is expected


def test_quantity_bound_is_configurable():
    assert LineParser(max_qty=100).validate_qty("150") == 0
    assert LineParser(max_qty=100).validate_qty("99") == 99
    assert LineParser().validate_qty("0") == 0
    assert LineParser().validate_qty("12.5") == 0


def test_code_only_line(parser):
    assert parser.is_code_only(" a12345 ") == "A12345"
    assert parser.is_code_only("A12345 CROCIN") is None
    assert parser.is_code_only("500") is None


def test_clean_description_strips_annotations(parser):
    cleaned = parser.clean_description("Crocin Advance [Approx Value: 200] STRIP +5 FREE")
    assert cleaned == "CROCIN ADVANCE"

    assert parser.clean_description("AZITHRAL 500 TAB (5'S)") == "AZITHRAL 500 TAB"
    assert parser.clean_description("ORS SACHET *10") == "ORS SACHET"


def test_description_validity_gate(parser):
    assert parser.is_valid_description("DOLO 650")
    assert not parser.is_valid_description("AB")
    assert not parser.is_valid_description("12345")
    assert not parser.is_valid_description("MUMBAI")
    assert not parser.is_valid_description("CGST 6%")
