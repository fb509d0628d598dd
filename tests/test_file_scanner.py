from order_converter.file_scanner import FileScanner


def test_scan_supported_files(tmp_path):
    (tmp_path / "order.txt").write_text("DOLO 650 10")
    (tmp_path / "order.xlsx").write_bytes(b"PK")
    (tmp_path / "scan.pdf").write_bytes(b"not really a pdf")
    (tmp_path / "photo.jpg").write_bytes(b"\xff\xd8")
    nested = tmp_path / "inbox"
    nested.mkdir()
    (nested / "old.xls").write_bytes(b"\xd0\xcf")

    scanner = FileScanner(tmp_path)
    files = scanner.scan_files()

    assert sorted(f["filename"] for f in files) == ["old.xls", "order.txt", "order.xlsx", "scan.pdf"]
    assert [f["filename"] for f in scanner.filter_scanned(files)] == ["scan.pdf"]

    flat = FileScanner(tmp_path).scan_files(recursive=False)
    assert "old.xls" not in [f["filename"] for f in flat]


def test_scan_single_file(tmp_path):
    path = tmp_path / "order.txt"
    path.write_text("DOLO 650 10")

    files = FileScanner(path).scan_files()

    assert len(files) == 1
    assert files[0]["file_type"] == "text"
    assert files[0]["is_scanned"] is False


def test_missing_input(tmp_path):
    assert FileScanner(tmp_path / "nope").scan_files() == []
