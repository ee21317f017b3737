"""Command-line entry point.

``docfields extract FILE -t CLASS`` prints one document's fields as JSON;
``docfields batch DIR -t CLASS`` writes one CSV row per document found in
a folder.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path
from typing import Any

from docfields.ocr.loader import SUPPORTED_EXTENSIONS
from docfields.processor import DocumentProcessor
from docfields.profiles import DocumentClass
from docfields.utils.config import load_config
from docfields.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_META_COLUMNS = [
    "filename",
    "status",
    "document_class",
    "page_count",
    "skipped_pages",
    "processing_time_s",
    "error",
]
_LIST_SEPARATOR = "; "


def _join(values: list[Any]) -> str:
    return _LIST_SEPARATOR.join(str(v) for v in values)


def _find_documents(input_dir: Path) -> list[Path]:
    """List the PDF and image files directly inside ``input_dir``, sorted."""
    return sorted(
        p
        for p in input_dir.iterdir()
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def _flatten_fields(result: dict[str, Any]) -> dict[str, str]:
    """Turn multi-valued fields and validity flags into single CSV cells.

    Validity flags go to a ``<FIELD>_valid`` column next to their field.
    """
    row: dict[str, str] = {}
    for name, value in result["fields"].items():
        row[name] = _join(value) if isinstance(value, list) else value
    for name, flags in result["identity_validity"].items():
        row[f"{name}_valid"] = _join(flags)
    return row


def _result_row(
    filename: str, result: dict[str, Any], elapsed: float
) -> dict[str, Any]:
    row: dict[str, Any] = {
        "filename": filename,
        "status": "failed" if result["error"] else "success",
        "document_class": result["document_class"],
        "page_count": result["page_count"],
        "skipped_pages": _join(result["skipped_pages"]),
        "processing_time_s": round(elapsed, 2),
        "error": result["error"],
    }
    row.update(_flatten_fields(result))
    return row


def process_folder(
    input_dir: Path,
    output_csv: Path,
    document_class: DocumentClass,
    config_path: Path | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Extract fields from every document in a folder into one CSV file.

    Args:
        input_dir: Folder holding the documents.
        output_csv: Destination CSV path; parent folders are created.
        document_class: Class applied to every document in the folder.
        config_path: Optional YAML configuration file.
        verbose: Print a progress line per document.

    Returns:
        Counts of ``total``, ``successful`` and ``failed`` documents.
    """
    documents = _find_documents(input_dir)
    if not documents:
        logger.warning("No supported documents in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    processor = DocumentProcessor(load_config(config_path))
    logger.info("Processing %d documents from %s", len(documents), input_dir)

    rows = []
    for position, path in enumerate(documents, 1):
        if verbose:
            print(f"[{position}/{len(documents)}] {path.name}")
        started = time.perf_counter()
        try:
            result = processor.process(path, document_class).to_dict()
        except Exception as exc:
            logger.error("Failed to process %s: %s", path.name, exc)
            rows.append({"filename": path.name, "status": "failed", "error": str(exc)})
            continue
        rows.append(_result_row(path.name, result, time.perf_counter() - started))

    _write_csv(rows, output_csv)
    logger.info("Wrote %d rows to %s", len(rows), output_csv)

    failed = sum(1 for row in rows if row["status"] == "failed")
    summary = {
        "total": len(rows),
        "successful": len(rows) - failed,
        "failed": failed,
    }
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, Any]], output_path: Path) -> None:
    """Write rows with the meta columns first and field columns sorted."""
    if not rows:
        return

    present = {key for row in rows for key in row}
    columns = [c for c in _META_COLUMNS if c in present]
    columns += sorted(present.difference(_META_COLUMNS))

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    rule = "-" * 40
    print(rule)
    print(
        f"{summary['total']} documents: {summary['successful']} ok, "
        f"{summary['failed']} failed"
    )
    print(f"CSV: {output_csv}")
    print(rule)


def extract_single(
    file_path: Path,
    document_class: DocumentClass,
    config_path: Path | None = None,
) -> dict[str, Any]:
    """Extract one document and return its result with the raw OCR text.

    Args:
        file_path: PDF or image to read.
        document_class: Class of the document.
        config_path: Optional YAML configuration file.
    """
    processor = DocumentProcessor(load_config(config_path))
    result = processor.process(file_path, document_class)
    output = result.to_dict()
    output["raw_text"] = result.combined_text
    return output


def _add_class_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-t",
        "--type",
        dest="doc_class",
        required=True,
        choices=[c.value for c in DocumentClass],
        help="document class",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docfields",
        description="Extract labelled fields and identifiers from scanned documents",
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="YAML configuration file"
    )
    commands = parser.add_subparsers(dest="command")

    batch = commands.add_parser("batch", help="extract every document in a folder")
    batch.add_argument("input_dir", type=Path, help="folder of PDF/image documents")
    batch.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="CSV destination (default: results.csv)",
    )
    _add_class_option(batch)
    batch.add_argument("-v", "--verbose", action="store_true", help="show progress")

    extract = commands.add_parser("extract", help="extract a single document")
    extract.add_argument("file", type=Path, help="PDF or image file")
    _add_class_option(extract)
    extract.add_argument("-o", "--output", type=Path, help="write JSON here")
    return parser


def _fail(message: str) -> None:
    print(f"docfields: {message}", file=sys.stderr)
    sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    """Run the ``docfields`` command.

    Args:
        argv: Arguments without the program name; ``sys.argv`` when omitted.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    setup_logging(load_config(args.config).log_level)
    document_class = DocumentClass(args.doc_class)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            _fail(f"{args.input_dir} is not a directory")
        process_folder(
            args.input_dir, args.output, document_class, args.config, args.verbose
        )
        return

    if not args.file.exists():
        _fail(f"{args.file} does not exist")
    payload = json.dumps(
        extract_single(args.file, document_class, args.config),
        indent=2,
        ensure_ascii=False,
    )
    if args.output is None:
        print(payload)
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload, encoding="utf-8")
        print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
