"""Command-line interface for parsing OCR text files and exporting results.

Provides subcommands to parse a single receipt, batch-parse a folder of
OCR text files into CSV, and benchmark the parser on a labeled corpus.
A receipt's fiscal QR payload can be stored next to its text file with
the same stem and a ``.qr`` suffix.
"""

import argparse
import csv
import json
import sys
from pathlib import Path

from receipt_parser.benchmark.evaluator import (
    Evaluator,
    load_ground_truth,
    receipt_to_fields,
)
from receipt_parser.extraction.parser import ReceiptParser
from receipt_parser.models import ParsedReceipt
from receipt_parser.utils.config import load_config
from receipt_parser.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

QR_SUFFIX = ".qr"
_CSV_COLUMNS = [
    "filename",
    "status",
    "store_name",
    "date",
    "total",
    "currency",
    "error",
]


def _find_receipts(input_dir: Path) -> list[Path]:
    """Find all OCR text files in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of ``.txt`` file paths.
    """
    return sorted(set(input_dir.glob("*.txt")) | set(input_dir.glob("*.TXT")))


def _read_qr_sidecar(text_path: Path) -> str | None:
    """Return the QR payload stored beside a text file, if any."""
    qr_path = text_path.with_suffix(QR_SUFFIX)
    if qr_path.exists():
        payload = qr_path.read_text(encoding="utf-8").strip()
        return payload or None
    return None


def parse_file(
    file_path: Path, parser: ReceiptParser, qr_payload: str | None = None
) -> ParsedReceipt:
    """Parse one OCR text file.

    Args:
        file_path: Path to the OCR text.
        parser: Parser instance.
        qr_payload: QR payload; read from the ``.qr`` sidecar when ``None``.

    Returns:
        The parsed receipt.
    """
    raw_text = file_path.read_text(encoding="utf-8")
    if qr_payload is None:
        qr_payload = _read_qr_sidecar(file_path)
    return parser.parse(raw_text, qr_payload)


def process_folder(
    input_dir: Path,
    output_csv: Path,
    verbose: bool = False,
) -> dict[str, int]:
    """Parse every OCR text file in a folder and export results to CSV.

    Args:
        input_dir: Directory containing ``.txt`` files.
        output_csv: Path for the output CSV file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    config = load_config()
    parser = ReceiptParser(config.parser)

    files = _find_receipts(input_dir)
    if not files:
        logger.warning("No receipts found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d receipts to parse", len(files))

    rows: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Parsing [{i}/{len(files)}]: {file_path.name}")

        try:
            receipt = parse_file(file_path, parser)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to parse %s: %s", file_path.name, exc)
            rows.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            failed += 1
            continue

        rows.append(
            {
                "filename": file_path.name,
                "status": "success",
                "store_name": receipt.store_name,
                "date": receipt.date.isoformat(),
                "total": f"{receipt.total:.2f}",
                "currency": str(receipt.currency),
                "error": None,
            }
        )
        successful += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    """Write parse results to a CSV file.

    Args:
        rows: One dictionary per receipt.
        output_path: Path for the output CSV file.
    """
    if not rows:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch summary to stdout.

    Args:
        summary: Counts of total, successful, and failed receipts.
        output_csv: Path to the output CSV.
    """
    print(f"\n{'=' * 50}")
    print("Batch Parsing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def run_benchmark(
    input_dir: Path, ground_truth_path: Path, output_path: Path | None = None
) -> str:
    """Parse a labeled corpus and report per-field accuracy.

    Receipts are keyed by file stem, e.g. ``receipt_01.txt`` is matched
    against the ``receipt_01`` entry of the ground truth. Unreadable files
    are skipped and reported as missing predictions.

    Args:
        input_dir: Directory containing ``.txt`` files and ``.qr`` sidecars.
        ground_truth_path: JSON or CSV labels.
        output_path: Optional path to write the report.

    Returns:
        The formatted report.
    """
    config = load_config()
    parser = ReceiptParser(config.parser)
    ground_truth = load_ground_truth(ground_truth_path)

    predictions: dict[str, dict[str, str]] = {}
    for file_path in _find_receipts(input_dir):
        try:
            receipt = parse_file(file_path, parser)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Skipping %s: %s", file_path.name, exc)
            continue
        predictions[file_path.stem] = receipt_to_fields(
            receipt, config.parser.unknown_store_name
        )

    evaluator = Evaluator()
    result = evaluator.evaluate(predictions, ground_truth)
    return evaluator.generate_report(result, output_path)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Receipt OCR text parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="Override the log level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse a single OCR text file")
    parse_parser.add_argument("file", type=Path, help="OCR text file to parse")
    parse_parser.add_argument("--qr", help="Fiscal QR payload decoded from the image")
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Parse a folder of OCR text")
    batch_parser.add_argument("input_dir", type=Path, help="Directory of .txt files")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    bench_parser = subparsers.add_parser(
        "benchmark", help="Measure accuracy on a labeled corpus"
    )
    bench_parser.add_argument("input_dir", type=Path, help="Directory of .txt files")
    bench_parser.add_argument(
        "ground_truth", type=Path, help="Ground truth labels (.json or .csv)"
    )
    bench_parser.add_argument("-o", "--output", type=Path, help="Report output file")

    args = parser.parse_args(argv)

    setup_logging(args.log_level or load_config().log_level)

    if args.command == "parse":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        receipt_parser = ReceiptParser(load_config().parser)
        receipt = parse_file(args.file, receipt_parser, args.qr)
        output_str = json.dumps(receipt.to_dict(), indent=2, ensure_ascii=False)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str, encoding="utf-8")
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.verbose)
    elif args.command == "benchmark":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        if not args.ground_truth.exists():
            print(f"Error: {args.ground_truth} does not exist", file=sys.stderr)
            sys.exit(1)
        print(run_benchmark(args.input_dir, args.ground_truth, args.output))
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
