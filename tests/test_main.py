import json

import pytest

from order_converter.main import main

ORDER_TEXT = """KRISHNA ENTERPRISES
Item Description Qty
A12345 TELMA 40 TAB 15'S 30
B23456 DOLO 650 TAB 10'S 20
"""


@pytest.fixture
def inbox(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    folder = tmp_path / "attachments"
    folder.mkdir()
    (folder / "indent.txt").write_text(ORDER_TEXT, encoding="utf-8")
    return folder


def run(tmp_path, *extra):
    main(["-i", "attachments", "-o", "out", "-c", str(tmp_path / "missing.json"), *extra])
    return json.loads((tmp_path / "out" / "indent_extracted.json").read_text(encoding="utf-8"))


def test_cli_writes_extraction_result(tmp_path, inbox):
    result = run(tmp_path)

    assert [r["ORDERQTY"] for r in result["dataRows"]] == [30, 20]
    assert (tmp_path / "Output" / "ProcessingLog.json").exists()


def test_cli_quantity_override(tmp_path, inbox):
    result = run(tmp_path, "--max-qty", "25")

    assert [r["ORDERQTY"] for r in result["dataRows"]] == [20]


def test_cli_missing_input_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit):
        main(["-i", "nowhere", "-c", str(tmp_path / "missing.json")])
