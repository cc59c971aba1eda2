"""Tests for the command-line interface and CSV export."""

import csv
import json
from pathlib import Path

import pytest

from receipt_parser.cli import (
    _find_receipts,
    _print_summary,
    _read_qr_sidecar,
    _write_csv,
    main,
    parse_file,
    process_folder,
    run_benchmark,
)
from receipt_parser.extraction.parser import ReceiptParser


def _write_receipt(folder: Path, name: str, text: str, qr: str | None = None) -> Path:
    path = folder / f"{name}.txt"
    path.write_text(text, encoding="utf-8")
    if qr is not None:
        (folder / f"{name}.qr").write_text(qr + "\n", encoding="utf-8")
    return path


class TestFindReceipts:
    """Tests for text file discovery."""

    def test_finds_text_files(self, tmp_path: Path) -> None:
        _write_receipt(tmp_path, "b", "x")
        _write_receipt(tmp_path, "a", "x")
        (tmp_path / "image.png").write_bytes(b"")
        names = [p.name for p in _find_receipts(tmp_path)]
        assert names == ["a.txt", "b.txt"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert _find_receipts(tmp_path) == []


class TestParseFile:
    """Tests for single-file parsing."""

    def test_reads_qr_sidecar(self, tmp_path: Path, fiscal_qr_payload: str) -> None:
        path = _write_receipt(
            tmp_path, "r1", "Simba Supermarket\nTOTAL 100", fiscal_qr_payload
        )
        receipt = parse_file(path, ReceiptParser())
        assert receipt.total == 100.0
        assert receipt.date.hour == 18

    def test_explicit_qr_wins_over_sidecar(self, tmp_path: Path) -> None:
        path = _write_receipt(tmp_path, "r1", "Shop Name", "08022026#185412#SDC1")
        receipt = parse_file(path, ReceiptParser(), "01012026#000000#SDC2")
        assert receipt.date.month == 1

    def test_blank_sidecar_is_ignored(self, tmp_path: Path) -> None:
        path = _write_receipt(tmp_path, "r1", "Shop", "   ")
        assert _read_qr_sidecar(path) is None

    def test_missing_sidecar(self, tmp_path: Path) -> None:
        path = _write_receipt(tmp_path, "r1", "Shop")
        assert _read_qr_sidecar(path) is None


class TestProcessFolder:
    """Tests for batch parsing to CSV."""

    def test_batch_writes_csv(
        self, tmp_path: Path, same_line_receipt: str, two_column_receipt: str
    ) -> None:
        input_dir = tmp_path / "in"
        input_dir.mkdir()
        _write_receipt(input_dir, "a", same_line_receipt)
        _write_receipt(input_dir, "b", two_column_receipt)
        output = tmp_path / "out" / "results.csv"

        summary = process_folder(input_dir, output)

        assert summary == {"total": 2, "successful": 2, "failed": 0}
        with open(output) as f:
            rows = list(csv.DictReader(f))
        assert [r["filename"] for r in rows] == ["a.txt", "b.txt"]
        assert rows[0]["store_name"] == "SIMBA SUPERMARKET"
        assert rows[0]["total"] == "5400.00"
        assert rows[1]["total"] == "12000.00"
        assert rows[1]["currency"] == "RWF"

    def test_undecodable_file_is_recorded(self, tmp_path: Path) -> None:
        (tmp_path / "bad.txt").write_bytes(b"\xff\xfe\xfa")
        _write_receipt(tmp_path, "good", "TOTAL 10")
        output = tmp_path / "results.csv"

        summary = process_folder(tmp_path, output)

        assert summary == {"total": 2, "successful": 1, "failed": 1}
        with open(output) as f:
            rows = {r["filename"]: r for r in csv.DictReader(f)}
        assert rows["bad.txt"]["status"] == "failed"
        assert rows["bad.txt"]["error"]

    def test_empty_folder(self, tmp_path: Path) -> None:
        output = tmp_path / "results.csv"
        summary = process_folder(tmp_path, output)
        assert summary == {"total": 0, "successful": 0, "failed": 0}
        assert not output.exists()


class TestWriteCsv:
    """Tests for the CSV writer."""

    def test_no_rows_writes_nothing(self, tmp_path: Path) -> None:
        output = tmp_path / "results.csv"
        _write_csv([], output)
        assert not output.exists()

    def test_column_order(self, tmp_path: Path) -> None:
        output = tmp_path / "results.csv"
        _write_csv([{"filename": "a.txt", "status": "success", "extra": 1}], output)
        header = output.read_text().splitlines()[0]
        assert header == "filename,status,store_name,date,total,currency,error"


class TestPrintSummary:
    """Tests for the summary printer."""

    def test_prints_counts(self, capsys: pytest.CaptureFixture[str]) -> None:
        _print_summary({"total": 3, "successful": 2, "failed": 1}, Path("r.csv"))
        out = capsys.readouterr().out
        assert "Total:      3" in out
        assert "Failed:     1" in out


class TestRunBenchmark:
    """Tests for corpus benchmarking."""

    def test_report_lists_mismatches(
        self, tmp_path: Path, same_line_receipt: str
    ) -> None:
        _write_receipt(tmp_path, "r1", same_line_receipt)
        labels = {
            "r1": {
                "store_name": "SIMBA SUPERMARKET",
                "date": "2026-02-08",
                "total": "5400",
                "currency": "KES",
            }
        }
        gt_path = tmp_path / "labels.json"
        gt_path.write_text(json.dumps(labels))

        report = run_benchmark(tmp_path, gt_path)

        assert "RECEIPT EXTRACTION BENCHMARK" in report
        assert "r1 [currency] expected 'KES', got 'RWF'" in report

    def test_unreadable_file_is_skipped(
        self, tmp_path: Path, same_line_receipt: str
    ) -> None:
        _write_receipt(tmp_path, "a", same_line_receipt)
        (tmp_path / "b.txt").write_bytes(b"\xff\xfe\xfa TOTAL 9")
        labels = {"a": {"total": "5400"}, "b": {"total": "9"}}
        gt_path = tmp_path / "labels.json"
        gt_path.write_text(json.dumps(labels))

        report = run_benchmark(tmp_path, gt_path)

        assert "Parsed:               1" in report
        assert "Missing prediction for b" in report


class TestMain:
    """Tests for argument parsing and dispatch."""

    def test_parse_prints_json(
        self,
        tmp_path: Path,
        same_line_receipt: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = _write_receipt(tmp_path, "r1", same_line_receipt)
        main(["parse", str(path), "--qr", "08022026#185412#SDC011000805"])
        data = json.loads(capsys.readouterr().out)
        assert data["store_name"] == "SIMBA SUPERMARKET"
        assert data["total"] == 5400.0
        assert data["date"] == "2026-02-08T18:54:12"

    def test_parse_writes_output_file(
        self, tmp_path: Path, same_line_receipt: str
    ) -> None:
        path = _write_receipt(tmp_path, "r1", same_line_receipt)
        output = tmp_path / "out" / "r1.json"
        main(["parse", str(path), "-o", str(output)])
        assert json.loads(output.read_text())["currency"] == "RWF"

    def test_parse_missing_file_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["parse", str(tmp_path / "missing.txt")])
        assert exc_info.value.code == 1

    def test_batch_requires_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["batch", str(tmp_path / "nope")])
        assert exc_info.value.code == 1

    def test_batch_runs(self, tmp_path: Path) -> None:
        _write_receipt(tmp_path, "a", "TOTAL 10")
        output = tmp_path / "results.csv"
        main(["batch", str(tmp_path), "-o", str(output)])
        assert output.exists()

    def test_benchmark_missing_labels_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["benchmark", str(tmp_path), str(tmp_path / "labels.json")])
        assert exc_info.value.code == 1

    def test_no_command_prints_help(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
