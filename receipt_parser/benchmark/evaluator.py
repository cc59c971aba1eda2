"""Accuracy benchmarking for receipt extraction.

Compares parsed receipts against a labeled corpus and computes precision,
recall, F1, and accuracy per field, so heuristics changes (for example new
two-column labels) can be checked against real receipts.

Each labeled field lands in one of three buckets: correct, wrong (the
parser found a different value), or missed (the parser fell back to its
default, such as ``Unknown Store`` or a zero total, or the file could not
be parsed at all). The split tells a bad heuristic apart from one that
never fired.
"""

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path

from receipt_parser.extraction.store_name import UNKNOWN_STORE
from receipt_parser.models import ParsedReceipt
from receipt_parser.utils.logger import get_logger

logger = get_logger(__name__)

_RULE = "-" * 72


@dataclass
class FieldMetrics:
    """Outcome counts for one receipt field across the corpus.

    Args:
        field_name: Name of the receipt field being measured.
    """

    field_name: str
    correct: int = 0
    wrong: int = 0
    missed: int = 0
    exact: int = 0

    @property
    def labeled(self) -> int:
        """Number of receipts that carry a label for this field."""
        return self.correct + self.wrong + self.missed

    @property
    def precision(self) -> float:
        """Share of values the parser produced that were right."""
        found = self.correct + self.wrong
        return self.correct / found if found else 0.0

    @property
    def recall(self) -> float:
        """Share of labeled values the parser got right."""
        expected = self.correct + self.missed
        return self.correct / expected if expected else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if p + r else 0.0

    @property
    def accuracy(self) -> float:
        """Share of labeled values matched character for character."""
        return self.exact / self.labeled if self.labeled else 0.0


@dataclass
class Mismatch:
    """A field whose predicted value disagrees with the label."""

    receipt: str
    field_name: str
    expected: str
    predicted: str | None


@dataclass
class BenchmarkResult:
    """Aggregated benchmark results across all receipts and fields."""

    total_receipts: int
    parsed_receipts: int
    overall_accuracy: float
    overall_f1: float
    field_metrics: dict[str, FieldMetrics]
    mismatches: list[Mismatch] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def receipt_to_fields(
    receipt: ParsedReceipt, unknown_store_name: str = UNKNOWN_STORE
) -> dict[str, str]:
    """Convert a parsed receipt into comparable field strings.

    Fields holding their "not found" defaults (placeholder store name,
    zero total) are left out so they count as missed rather than wrong.

    Args:
        receipt: Parsed receipt.
        unknown_store_name: Placeholder used by the parser for missing names.

    Returns:
        Mapping of field name to string value.
    """
    fields = {
        "date": receipt.date.strftime("%Y-%m-%d"),
        "currency": str(receipt.currency),
    }
    if receipt.store_name != unknown_store_name:
        fields["store_name"] = receipt.store_name
    if receipt.total > 0:
        fields["total"] = f"{receipt.total:.2f}"
    return fields


def _as_amount(value: str) -> float | None:
    try:
        return float(value.replace(",", "").replace(" ", ""))
    except ValueError:
        return None


class Evaluator:
    """Evaluates parsed receipts against ground truth labels.

    Text fields match case-insensitively. Amounts also match when they are
    within ``amount_tolerance`` of each other, so ``5,400`` and ``5400.00``
    agree.

    Args:
        amount_tolerance: Largest difference at which two amounts agree.
    """

    def __init__(self, amount_tolerance: float = 0.01) -> None:
        self.amount_tolerance = amount_tolerance

    def _same_amount(self, predicted: str, expected: str) -> bool:
        pred_amount = _as_amount(predicted)
        exp_amount = _as_amount(expected)
        if pred_amount is None or exp_amount is None:
            return False
        return abs(pred_amount - exp_amount) < self.amount_tolerance

    def evaluate(
        self,
        predictions: dict[str, dict[str, str]],
        ground_truth: dict[str, dict[str, str]],
    ) -> BenchmarkResult:
        """Compare predictions against ground truth and compute metrics.

        Args:
            predictions: Mapping of receipt name to predicted field values.
            ground_truth: Mapping of receipt name to expected field values.

        Returns:
            Aggregated benchmark results with per-field metrics.
        """
        metrics_by_field: dict[str, FieldMetrics] = {}
        mismatches: list[Mismatch] = []
        errors: list[str] = []

        for name, labels in ground_truth.items():
            fields = predictions.get(name)
            if fields is None:
                errors.append(f"Missing prediction for {name}")
                fields = {}

            for field_name, expected in labels.items():
                metrics = metrics_by_field.setdefault(
                    field_name, FieldMetrics(field_name)
                )
                predicted = fields.get(field_name)
                if predicted is None:
                    metrics.missed += 1
                    mismatches.append(Mismatch(name, field_name, expected, None))
                    continue

                pred_norm = str(predicted).strip().lower()
                exp_norm = str(expected).strip().lower()
                if pred_norm == exp_norm:
                    metrics.correct += 1
                    metrics.exact += 1
                elif self._same_amount(pred_norm, exp_norm):
                    metrics.correct += 1
                else:
                    metrics.wrong += 1
                    mismatches.append(Mismatch(name, field_name, expected, predicted))

        scored = [m for m in metrics_by_field.values() if m.labeled]
        return BenchmarkResult(
            total_receipts=len(ground_truth),
            parsed_receipts=len(ground_truth) - len(errors),
            overall_accuracy=(
                sum(m.accuracy for m in scored) / len(scored) if scored else 0.0
            ),
            overall_f1=sum(m.f1 for m in scored) / len(scored) if scored else 0.0,
            field_metrics=metrics_by_field,
            mismatches=mismatches,
            errors=errors,
        )

    def generate_report(
        self, result: BenchmarkResult, output_path: Path | None = None
    ) -> str:
        """Generate a human-readable benchmark report.

        Args:
            result: Benchmark results to format.
            output_path: Optional path to write the report file.

        Returns:
            Formatted report string.
        """
        header = (
            f"{'Field':<12} {'Correct':>8} {'Wrong':>8} {'Missed':>8} "
            f"{'Precision':>10} {'Recall':>8} {'F1':>6} {'Exact':>8}"
        )
        lines = [
            "=" * 72,
            "RECEIPT EXTRACTION BENCHMARK",
            "=" * 72,
            f"Total Receipts:       {result.total_receipts}",
            f"Parsed:               {result.parsed_receipts}",
            f"Overall Accuracy:     {result.overall_accuracy:.2%}",
            f"Overall F1 Score:     {result.overall_f1:.3f}",
            "",
            "Field-Level Metrics:",
            _RULE,
            header,
            _RULE,
        ]
        for name, m in sorted(result.field_metrics.items()):
            lines.append(
                f"{name:<12} {m.correct:>8} {m.wrong:>8} {m.missed:>8} "
                f"{m.precision:>10.2%} {m.recall:>8.2%} {m.f1:>6.3f} "
                f"{m.accuracy:>8.2%}"
            )
        lines.append(_RULE)
        lines.append("Missed = parser default (Unknown Store, total 0) or no file.")

        if result.mismatches:
            lines += ["", "Mismatches:"]
            for m in result.mismatches:
                predicted = "<default>" if m.predicted is None else m.predicted
                lines.append(
                    f"  - {m.receipt} [{m.field_name}] expected {m.expected!r}, "
                    f"got {predicted!r}"
                )

        if result.errors:
            lines += ["", "Errors:"]
            lines.extend(f"  - {error}" for error in result.errors)

        report = "\n".join(lines)

        if output_path:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(report)
            logger.info("Report written to %s", output_path)

        return report


def load_ground_truth(path: Path) -> dict[str, dict[str, str]]:
    """Load ground truth labels from a JSON or CSV file.

    JSON format: ``{"receipt_01": {"total": "5400.00", ...}, ...}``
    CSV format: rows with a ``receipt`` column and field value columns.
    Empty CSV cells mean the field is unlabeled.

    Args:
        path: Path to the ground truth file.

    Returns:
        Mapping of receipt name to field-value pairs.

    Raises:
        ValueError: If the file format is not supported.
    """
    if path.suffix == ".json":
        with open(path) as f:
            return json.load(f)

    if path.suffix == ".csv":
        gt: dict[str, dict[str, str]] = {}
        with open(path, newline="") as f:
            for row in csv.DictReader(f):
                name = row.pop("receipt")
                gt[name] = {k: v for k, v in row.items() if v}
        return gt

    raise ValueError(f"Unsupported ground truth format: {path.suffix}")
