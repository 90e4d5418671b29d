"""
CSV bulk import.

The whole file is validated before anything is written: a single bad row means
nothing is imported, but every bad row is reported (row numbers are 1-based
data rows, header excluded).
"""
from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.db import DatabaseError, transaction

from core.leads.outcomes import ImportRejected, ImportSucceeded, RowError, RowErrors, StorageFailure
from core.leads.services import check_rate, insert_lead
from core.leads.validation import LEAD_FIELDS, validate_lead

logger = logging.getLogger(__name__)

EXPECTED_HEADERS = tuple(public for public, _ in LEAD_FIELDS)


@dataclass
class ParsedImport:
    rows: list[dict] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)


def _decode(content: bytes) -> str | None:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return None


def _is_blank_line(cells: list[str]) -> bool:
    # [] for an empty line, [" "] for whitespace only; a row of bare commas is data
    return not cells or (len(cells) == 1 and not cells[0].strip())


def _format_field_errors(errors: dict[str, list[str]]) -> str:
    return "; ".join(f"{name}: {', '.join(messages)}" for name, messages in errors.items())


def parse_leads_csv(text: str) -> ParsedImport | ImportRejected:
    """
    Header check first (all EXPECTED_HEADERS present, any order, extras ignored),
    then each data row independently through validate_lead().
    """
    reader = csv.reader(io.StringIO(text))

    headers = None
    for cells in reader:
        if not _is_blank_line(cells):
            headers = [c.strip() for c in cells]
            break

    if headers is None:
        return ImportRejected(reason=ImportRejected.EMPTY_IMPORT, detail="No valid data to import")

    missing = [h for h in EXPECTED_HEADERS if h not in headers]
    if missing:
        return ImportRejected(
            reason=ImportRejected.MISSING_HEADERS,
            detail=f"Missing headers: {', '.join(missing)}",
            missing_headers=missing,
        )

    parsed = ParsedImport()
    row_number = 0
    for cells in reader:
        row_number += 1
        if _is_blank_line(cells):
            continue

        if len(cells) != len(headers):
            parsed.errors.append(
                RowError(row=row_number, message=f"Expected {len(headers)} columns, got {len(cells)}")
            )
            continue

        raw = {h: v.strip() for h, v in zip(headers, cells) if h in EXPECTED_HEADERS}
        result = validate_lead(raw, creating=True)
        if not result.ok:
            parsed.errors.append(RowError(row=row_number, message=_format_field_errors(result.errors)))
            continue

        parsed.rows.append(result.data)

    return parsed


def import_leads(*, content: bytes, owner_id: str, client_key: str | None = None, limiter=None):
    """
    Import a CSV payload for `owner_id`.

    `client_key` enables the per-client rate limit (HTTP uploads); the management
    command passes None.
    """
    if client_key is not None:
        limited = check_rate(client_key=client_key, action="import-csv", limiter=limiter)
        if limited:
            return limited

    max_bytes = settings.LEADS_IMPORT_MAX_BYTES
    if len(content) > max_bytes:
        return ImportRejected(
            reason=ImportRejected.FILE_TOO_LARGE,
            detail=f"File too large (max {max_bytes // 1024} KB)",
        )

    text = _decode(content)
    if text is None:
        return ImportRejected(reason=ImportRejected.INVALID_ENCODING, detail="File must be UTF-8 encoded CSV")

    parsed = parse_leads_csv(text)
    if isinstance(parsed, ImportRejected):
        return parsed

    if parsed.errors:
        logger.info("lead import rejected owner=%s bad_rows=%d", owner_id, len(parsed.errors))
        return RowErrors(errors=parsed.errors)

    max_rows = settings.LEADS_IMPORT_MAX_ROWS
    if len(parsed.rows) > max_rows:
        return ImportRejected(reason=ImportRejected.TOO_MANY_ROWS, detail=f"Too many rows (max {max_rows})")

    if not parsed.rows:
        return ImportRejected(reason=ImportRejected.EMPTY_IMPORT, detail="No valid data to import")

    try:
        with transaction.atomic():
            lead_ids = [insert_lead(owner_id=owner_id, data=row).id for row in parsed.rows]
    except DatabaseError as exc:
        logger.exception("lead import failed owner=%s rows=%d", owner_id, len(parsed.rows))
        return StorageFailure(error=str(exc))

    logger.info("lead import done owner=%s imported=%d", owner_id, len(lead_ids))
    return ImportSucceeded(imported=len(lead_ids), lead_ids=lead_ids)
