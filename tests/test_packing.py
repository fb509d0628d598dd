import pytest

from order_converter.extractors.token_parser import LineParser
from order_converter.packing import (
    extract_pack_size, strip_pack_annotations, calc_box_pack, to_int,
    reconcile_pack, row_warnings, enrich_candidate
)


@pytest.mark.parametrize("description,expected", [
    ("MICR DIAPRIDE 1 MG TAB 30 S", 30),
    ("DOLO 1000 10'S *5", 10),
    ("AZITHRAL 500 TAB (5'S)", 5),
    ("CALPOL 15 TABLETS", 15),
    ("BECOSULES 20 CAPS", 20),
    ("ORS 1/20", 20),
    ("ASCORIL SYRUP 100 ML", 100),
    ("BETADINE OINTMENT 15 GM", 15),
    ("DOLO 650 TAB", 0),
    ("GIANT 5000'S", 0),
    ("", 0),
])
def test_extract_pack_size(description, expected):
    assert extract_pack_size(description) == expected


def test_most_frequent_pack_wins():
    assert extract_pack_size("XYZ 10'S 10 TABS 15 ML") == 10


def test_tie_goes_to_higher_priority_pattern():
    assert extract_pack_size("ABC 30 ML 15'S") == 15


def test_pack_bound_is_configurable():
    assert extract_pack_size("SYRUP 1500 ML") == 0
    assert extract_pack_size("SYRUP 1500 ML", max_pack=2000) == 1500


def test_strip_pack_annotations():
    assert strip_pack_annotations("CROCIN (15'S) 10 TABS") == "CROCIN"
    assert strip_pack_annotations("DOLO 650") == "DOLO 650"


@pytest.mark.parametrize("qty,pack,expected", [
    (120, 30, 4),
    (50, 10, 5),
    (7, 10, 0),
    (100, 0, 0),
    (0, 10, 0),
])
def test_calc_box_pack(qty, pack, expected):
    assert calc_box_pack(qty, pack) == expected


@pytest.mark.parametrize("value,expected", [
    (120, 120),
    (120.0, 120),
    (12.5, 0),
    ("120", 120),
    ("120.0", 120),
    ("1,200", 1200),
    ("15 TABS", 15),
    ("abc", 0),
    (None, 0),
    (True, 0),
    (float("nan"), 0),
])
def test_to_int(value, expected):
    assert to_int(value) == expected


def test_reconcile_infers_pack_and_calculates_box():
    pack, box, warnings = reconcile_pack(120, 0, 0, "MICR DIAPRIDE 1 MG TAB 30 S")

    assert (pack, box) == (30, 4)
    assert warnings == [("PACK", "Auto-extracted: 30"), ("BOX PACK", "Calculated: 4")]


def test_reconcile_corrects_wrong_box_pack():
    pack, box, warnings = reconcile_pack(120, 30, 3, "")

    assert (pack, box) == (30, 4)
    assert warnings == [("BOX PACK", "Corrected: 4 (was 3)")]


def test_reconcile_is_idempotent():
    pack, box, _ = reconcile_pack(50, 0, 0, "DOLO 1000 10'S *5")
    again = reconcile_pack(50, pack, box, "DOLO 1000 10'S *5")

    assert again == (pack, box, [])


def test_unknown_pack_zeroes_box():
    assert reconcile_pack(100, 0, 7, "NO PACK HERE") == (0, 0, [])


def test_out_of_range_pack_is_discarded():
    pack, box, warnings = reconcile_pack(100, 5000, 0, "AMOXY 10'S")

    assert (pack, box) == (10, 10)
    assert warnings[0] == ("PACK", "Auto-extracted: 10")


def test_row_warnings_carry_row_number():
    assert row_warnings(3, [("PACK", "Auto-extracted: 10")]) == [
        {"row": 3, "field": "PACK", "message": "Auto-extracted: 10"}
    ]


def test_enrich_candidate_prefers_raw_span():
    candidate = {
        "description": "DOLO 1000",
        "raw_description": "DOLO 1000 10'S *5",
        "ordered_qty": 50,
        "pack": 0,
        "box_pack": 0
    }
    enrich_candidate(candidate)

    assert candidate["pack"] == 10
    assert candidate["box_pack"] == 5


@pytest.mark.parametrize("raw", [
    "MICR DIAPRIDE 1 MG TAB 30 S",
    "DOLO 1000 10'S *5",
    "AZITHRAL 500 TAB (5'S)",
    "CALPOL 15 TABLETS STRIP",
    "ASCORIL SYRUP 100 ML BOTTLE",
])
def test_cleaned_description_keeps_dominant_pack(raw):
    assigned = extract_pack_size(raw)
    again = extract_pack_size(LineParser().clean_description(raw))

    assert again in (0, assigned)
