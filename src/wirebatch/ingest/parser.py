"""Export file ingest: format detection and dispatch to the record parsers."""

from __future__ import annotations

import hashlib
import logging

from wirebatch.core.exceptions import LineParseError
from wirebatch.ingest.nacha import looks_like_nacha, parse_nacha_lines
from wirebatch.ingest.tabular import detect_columns, parse_csv_rows
from wirebatch.models.payout import FileType, ParseError, ParsedPayoutItem, ParseResult

logger = logging.getLogger(__name__)

CSV_HEADER_HINTS = ("payee", "amount", "routing", "account", "reference", "name")


def split_lines(content: str) -> list[str]:
    return content.strip().replace("\r\n", "\n").split("\n")


def detect_file_type(lines: list[str], file_name: str) -> FileType:
    first_line = lines[0] if lines else ""
    if looks_like_nacha(first_line):
        return FileType.NACHA
    if file_name.lower().endswith(".csv"):
        return FileType.CSV
    lowered = first_line.lower()
    if any(hint in lowered for hint in CSV_HEADER_HINTS):
        return FileType.CSV
    return FileType.UNKNOWN


def parse_export(content: str | bytes, file_name: str) -> ParseResult:
    """Parse an uploaded export buffer into payout items.

    Never raises for bad input: line problems come back in ``errors`` next to
    the items that did parse, and an unusable document comes back with no
    items and a single error.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8-sig")
    digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    lines = split_lines(content)

    file_type = detect_file_type(lines, file_name)
    if file_type == FileType.NACHA:
        result = _parse_nacha(lines, file_name, digest)
    elif file_type == FileType.CSV:
        result = _parse_csv(lines, file_name, digest)
    else:
        result = _document_failure(
            FileType.UNKNOWN, file_name, digest, 0,
            "Unable to determine file format. Expected NACHA or CSV.",
        )

    logger.info(
        "parsed export",
        extra={
            "file_name": file_name,
            "file_type": str(result.file_type),
            "item_count": result.total_items,
            "error_count": len(result.errors),
        },
    )
    return result


def _parse_nacha(lines: list[str], file_name: str, digest: str) -> ParseResult:
    items, failures = parse_nacha_lines(lines)
    return _build(FileType.NACHA, file_name, digest, items, failures, [])


def _parse_csv(lines: list[str], file_name: str, digest: str) -> ParseResult:
    if len(lines) < 2:
        return _document_failure(
            FileType.CSV, file_name, digest, 0,
            "CSV file appears to be empty or missing data rows",
        )

    column_map = detect_columns(lines[0])
    if column_map.missing_required:
        return _document_failure(
            FileType.CSV, file_name, digest, 1,
            "Required columns not found. Expected: Payee Name, Routing, Account, Amount, Reference",
        )

    items, failures, row_warnings = parse_csv_rows(lines, column_map)
    return _build(
        FileType.CSV, file_name, digest, items, failures,
        [*column_map.warnings, *row_warnings],
    )


def _build(
    file_type: FileType,
    file_name: str,
    digest: str,
    items: list[ParsedPayoutItem],
    failures: list[LineParseError],
    warnings: list[str],
) -> ParseResult:
    errors = [
        ParseError(line_number=f.line_number, message=str(f), raw_line=f.raw_line)
        for f in failures
    ]
    return ParseResult(
        success=not errors,
        file_type=file_type,
        file_name=file_name,
        items=items,
        errors=errors,
        warnings=warnings,
        content_sha256=digest,
    )


def _document_failure(
    file_type: FileType, file_name: str, digest: str, line_number: int, message: str
) -> ParseResult:
    return ParseResult(
        success=False,
        file_type=file_type,
        file_name=file_name,
        errors=[ParseError(line_number=line_number, message=message)],
        content_sha256=digest,
    )
