"""Tests for the receipt accuracy benchmark."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from receipt_parser.benchmark.evaluator import (
    BenchmarkResult,
    Evaluator,
    FieldMetrics,
    load_ground_truth,
    receipt_to_fields,
)
from receipt_parser.models import Currency, ParsedReceipt


class TestFieldMetrics:
    """Tests for the FieldMetrics data class."""

    def test_precision_partial(self) -> None:
        m = FieldMetrics("total", correct=3, wrong=2)
        assert m.precision == 0.6

    def test_precision_zero_denom(self) -> None:
        assert FieldMetrics("total").precision == 0.0

    def test_recall_partial(self) -> None:
        m = FieldMetrics("total", correct=3, missed=2)
        assert m.recall == 0.6

    def test_recall_zero_denom(self) -> None:
        assert FieldMetrics("total").recall == 0.0

    def test_f1_perfect(self) -> None:
        m = FieldMetrics("total", correct=5)
        assert m.f1 == 1.0

    def test_f1_zero(self) -> None:
        assert FieldMetrics("total").f1 == 0.0

    def test_accuracy(self) -> None:
        assert FieldMetrics("total", correct=4, wrong=1, exact=3).accuracy == 0.6
        assert FieldMetrics("total").accuracy == 0.0

    def test_labeled_counts_every_outcome(self) -> None:
        assert FieldMetrics("total", correct=2, wrong=1, missed=3).labeled == 6


class TestReceiptToFields:
    """Tests for converting parsed receipts into comparable fields."""

    def test_all_fields(self) -> None:
        receipt = ParsedReceipt(
            store_name="Simba",
            date=datetime(2026, 2, 8, 18, 54, 12),
            total=5400.0,
            currency=Currency.RWF,
            raw_text="",
        )
        assert receipt_to_fields(receipt) == {
            "store_name": "Simba",
            "date": "2026-02-08",
            "total": "5400.00",
            "currency": "RWF",
        }

    def test_defaults_are_omitted(self) -> None:
        receipt = ParsedReceipt(
            store_name="Unknown Store",
            date=datetime(2026, 2, 8),
            total=0.0,
            currency=Currency.RWF,
            raw_text="",
        )
        fields = receipt_to_fields(receipt)
        assert "store_name" not in fields
        assert "total" not in fields


class TestEvaluator:
    """Tests for the Evaluator class."""

    def test_perfect_predictions(self) -> None:
        gt = {"r1": {"total": "5400.00", "currency": "RWF"}}
        result = Evaluator().evaluate(gt, gt)
        assert isinstance(result, BenchmarkResult)
        assert result.overall_accuracy == 1.0
        assert result.overall_f1 == 1.0
        assert result.mismatches == []

    def test_fuzzy_amount_match(self) -> None:
        predictions = {"r1": {"total": "5400.00"}}
        gt = {"r1": {"total": "5,400"}}
        result = Evaluator().evaluate(predictions, gt)
        metrics = result.field_metrics["total"]
        assert metrics.correct == 1
        assert metrics.exact == 0

    def test_case_insensitive_match(self) -> None:
        result = Evaluator().evaluate(
            {"r1": {"store_name": "SIMBA"}}, {"r1": {"store_name": "Simba"}}
        )
        assert result.field_metrics["store_name"].exact == 1

    def test_wrong_and_missing_fields(self) -> None:
        predictions = {"r1": {"currency": "RWF"}}
        gt = {"r1": {"currency": "KES", "total": "100"}}
        result = Evaluator().evaluate(predictions, gt)
        assert result.field_metrics["currency"].wrong == 1
        assert result.field_metrics["total"].missed == 1
        assert {(m.field_name, m.predicted) for m in result.mismatches} == {
            ("currency", "RWF"),
            ("total", None),
        }

    def test_missing_prediction(self) -> None:
        result = Evaluator().evaluate({}, {"r1": {"total": "100"}})
        assert result.parsed_receipts == 0
        assert result.errors == ["Missing prediction for r1"]
        assert result.field_metrics["total"].missed == 1

    def test_generate_report(self, tmp_path: Path) -> None:
        evaluator = Evaluator()
        result = evaluator.evaluate(
            {"r1": {"total": "10.00"}}, {"r1": {"total": "12.00"}}
        )
        output = tmp_path / "reports" / "report.txt"
        report = evaluator.generate_report(result, output)
        assert "Field-Level Metrics:" in report
        assert "r1 [total] expected '12.00', got '10.00'" in report
        assert output.read_text() == report

    def test_report_counts_defaulted_fields(self) -> None:
        evaluator = Evaluator()
        receipt = ParsedReceipt(
            store_name="Unknown Store",
            date=datetime(2026, 2, 8),
            total=0.0,
            currency=Currency.RWF,
            raw_text="",
        )
        result = evaluator.evaluate(
            {"r1": receipt_to_fields(receipt)},
            {"r1": {"store_name": "Simba", "currency": "RWF"}},
        )
        report = evaluator.generate_report(result)
        metrics = result.field_metrics["store_name"]
        assert (metrics.correct, metrics.wrong, metrics.missed) == (0, 0, 1)
        assert "Missed" in report
        assert "r1 [store_name] expected 'Simba', got '<default>'" in report

    def test_text_values_never_match_as_amounts(self) -> None:
        result = Evaluator().evaluate(
            {"r1": {"store_name": "Simba"}}, {"r1": {"store_name": "Nakumatt"}}
        )
        assert result.field_metrics["store_name"].wrong == 1


class TestLoadGroundTruth:
    """Tests for ground truth loading."""

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "gt.json"
        path.write_text(json.dumps({"r1": {"total": "100"}}))
        assert load_ground_truth(path) == {"r1": {"total": "100"}}

    def test_csv_skips_empty_cells(self, tmp_path: Path) -> None:
        path = tmp_path / "gt.csv"
        path.write_text("receipt,store_name,total\nr1,Simba,5400\nr2,,100\n")
        assert load_ground_truth(path) == {
            "r1": {"store_name": "Simba", "total": "5400"},
            "r2": {"total": "100"},
        }

    def test_unsupported_format(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            load_ground_truth(tmp_path / "gt.xml")
