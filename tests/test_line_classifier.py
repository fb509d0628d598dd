import pytest

from order_converter.extractors.line_classifier import (
    LineClassifier, ParseState, METADATA, DIVISION, HEADER, STOP, NOISE, DATA, PENDING, IGNORED
)


@pytest.fixture
def classifier():
    return LineClassifier()


def run(classifier, lines, state=None):
    """Feed lines through the state machine, collecting (tag, state, record)"""
    state = state or ParseState()
    trace = []
    for line in lines:
        state, tag, record = classifier.step(state, line)
        trace.append((tag, state, record))
    return trace


def test_parse_state_is_a_value():
    state = ParseState()
    moved = state.replace(mode=ParseState.INSIDE_TABLE, pending_code="A12345")

    assert state == ParseState(ParseState.OUTSIDE_TABLE, "", None)
    assert not state.inside
    assert moved.inside
    assert moved.pending_code == "A12345"
    assert moved != state


def test_header_starts_table(classifier):
    trace = run(classifier, [
        "SHREE SAI DISTRIBUTORS",
        "GSTIN: 27AAACS1234F1Z5",
        "Sr Item Description Qty",
        "1 DOLO 1000 10'S *5 50 +10FREE",
    ])

    assert [t[0] for t in trace] == [IGNORED, METADATA, HEADER, DATA]
    assert trace[-1][2]["description"] == "DOLO 1000"


def test_no_data_outside_table(classifier):
    trace = run(classifier, ["DOLO 650 TAB 30", "CROCIN ADVANCE 20"])

    assert all(tag == IGNORED for tag, _, _ in trace)
    assert not trace[-1][1].inside


def test_leading_numeric_code_starts_table_and_is_data(classifier):
    (tag, state, record), = run(classifier, ["1234567 DOLO 650 TAB 30"])

    assert tag == DATA
    assert state.inside
    assert record["internal_code"] == "1234567"
    assert record["ordered_qty"] == 30


def test_header_line_carrying_data_is_reprocessed(classifier):
    (tag, state, record), = run(classifier, ["ITEM A12345 CROCIN QTY 20"])

    assert tag == DATA
    assert state.inside
    assert record["internal_code"] == "A12345"
    assert record["ordered_qty"] == 20


def test_stop_line_leaves_table(classifier):
    trace = run(classifier, [
        "Item Description Qty",
        "A12345 TELMA 40 TAB 30",
        "Grand Total 30",
        "B23456 PAN 40 TAB 10",
    ])

    assert [t[0] for t in trace] == [HEADER, DATA, STOP, IGNORED]
    assert trace[2][1].mode == ParseState.OUTSIDE_TABLE


def test_stop_mode_can_be_chosen(classifier):
    state = ParseState(mode=ParseState.INSIDE_TABLE)
    state, tag, _ = classifier.step(state, "Net Total 1200", stop_mode=ParseState.INSIDE_TABLE)

    assert tag == STOP
    assert state.inside


def test_division_scopes_following_rows(classifier):
    trace = run(classifier, [
        "Item Description Qty",
        "CARDIAC CARE",
        "A12345 TELMA 40 TAB 30",
        "B23456 ECOSPRIN 75 TAB 60",
        "NEURO",
        "C34567 PREGABA 75 CAP 20",
    ])

    data = [record for tag, _, record in trace if tag == DATA]
    assert [r["division"] for r in data] == ["CARDIAC CARE", "CARDIAC CARE", "NEURO"]
    assert trace[1][0] == DIVISION


def test_division_banner_promotes_to_inside(classifier):
    (tag, state, _), = run(classifier, ["CVD"])

    assert tag == DIVISION
    assert state.inside
    assert state.current_division == "CVD"


@pytest.mark.parametrize("line,expected", [
    ("Division: Gastro Care", "GASTRO CARE"),
    ("COMPANY - ALKEM [Approx Value: 5000]", "ALKEM"),
    ("GENX2", "GENX2"),
    ("RAJ DISTRIBUTORS", None),
    ("PUNE", None),
    ("ORDER SUMMARY", None),
    ("GRAND TOTAL", None),
    ("ITEM DESCRIPTION QTY", None),
    ("ONE TWO THREE FOUR FIVE SIX", None),
    ("Dolo 650", None),
])
def test_detect_division(classifier, line, expected):
    assert classifier.detect_division(line) == expected


def test_pending_code_attaches_to_next_row(classifier):
    trace = run(classifier, [
        "Item Description Qty",
        "A12345",
        "CROCIN ADVANCE 20",
    ])

    assert trace[1][0] == PENDING
    assert trace[1][1].pending_code == "A12345"
    record = trace[2][2]
    assert record["internal_code"] == "A12345"
    assert trace[2][1].pending_code is None


def test_pending_code_cleared_by_division(classifier):
    trace = run(classifier, [
        "Item Description Qty",
        "A12345",
        "NEURO",
        "CROCIN ADVANCE 20",
    ])

    assert trace[2][1].pending_code is None
    assert trace[3][2]["internal_code"] == ""


def test_noise_and_banned_lines_inside_table(classifier):
    trace = run(classifier, [
        "Item Description Qty",
        "Remarks: urgent supply",
        "GST Breakup 12% 100",
        "A12345 TELMA 40 TAB 30",
    ])

    assert [t[0] for t in trace] == [HEADER, NOISE, IGNORED, DATA]


def test_metadata_never_changes_state(classifier):
    state = ParseState(mode=ParseState.INSIDE_TABLE, current_division="CVD")
    new_state, tag, record = classifier.step(state, "Mobile: 9876543210")

    assert tag == METADATA
    assert new_state == state
    assert record is None
