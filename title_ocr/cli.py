"""Command-line interface for title extraction.

``extract`` prints the fields of one title document as JSON; ``batch``
processes a folder of titles into a CSV with one row per document.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

from title_ocr.extraction.fields import FIELD_NAMES, ExtractionResult
from title_ocr.ocr.document_processor import DocumentProcessor, DocumentResult
from title_ocr.utils.config import load_config
from title_ocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.bmp", "*.pdf")
_META_COLUMNS = [
    "filename",
    "status",
    "page_count",
    "processing_time_s",
    "fields_found",
    "error",
]
_FIELD_COLUMNS = [c for name in FIELD_NAMES for c in (name, f"{name}_confidence")]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported title documents in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of document file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _result_row(result: ExtractionResult) -> dict[str, object]:
    row: dict[str, object] = {}
    for name, field in result.fields().items():
        row[name] = field.value
        row[f"{name}_confidence"] = field.confidence
    row["fields_found"] = result.found_count()
    return row


def _document_payload(doc: DocumentResult) -> dict[str, object]:
    return {
        "filename": doc.source_file,
        "page_count": doc.page_count,
        "result": doc.best_result().to_dict(),
        "pages": [
            {
                "page_number": page.page_number,
                "passes": [p.config_id for p in page.passes],
                "result": page.extraction.to_dict(),
            }
            for page in doc.pages
        ],
    }


def process_folder(
    input_dir: Path,
    output_csv: Path,
    config_path: Path | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Process every title document in a folder and write a CSV.

    Args:
        input_dir: Directory containing title images or PDFs.
        output_csv: Path for the output CSV file.
        config_path: Optional YAML configuration file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    processor = DocumentProcessor(load_config(config_path))
    logger.info("Found %d documents to process", len(files))

    rows: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            doc = processor.process(file_path, file_path.name)
        except (OSError, ValueError, RuntimeError) as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            rows.append({"filename": file_path.name, "status": "failed", "error": str(exc)})
            failed += 1
            continue

        row: dict[str, object] = {
            "filename": file_path.name,
            "status": "success",
            "page_count": doc.page_count,
            "processing_time_s": round(time.time() - start_time, 2),
            "error": None,
        }
        row.update(_result_row(doc.best_result()))
        rows.append(row)
        successful += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    """Write result rows with a fixed column order."""
    if not rows:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_META_COLUMNS + _FIELD_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Title Extraction Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def extract_single(file_path: Path, config_path: Path | None = None) -> dict[str, object]:
    """Process one title document and return a JSON-ready payload.

    Args:
        file_path: Path to the image or PDF.
        config_path: Optional YAML configuration file.

    Returns:
        Dictionary with the merged result and per-page results.
    """
    processor = DocumentProcessor(load_config(config_path))
    doc = processor.process(file_path, file_path.name)
    return _document_payload(doc)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Vehicle title field extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, default=None, help="YAML config file")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of titles")
    batch_parser.add_argument("input_dir", type=Path, help="Input directory with documents")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    single_parser = subparsers.add_parser("extract", help="Process a single title")
    single_parser.add_argument("file", type=Path, help="Title image or PDF")
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.config, args.verbose)
    elif args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = extract_single(args.file, args.config)
        except (ValueError, RuntimeError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
