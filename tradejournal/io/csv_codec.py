"""CSV import/export for journal data.

The file is a flat, self-describing table: every row repeats the account
name and initial balance, columns are matched by header name on import,
and older column names are still understood.
"""

import logging
import math
import re
from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError

from tradejournal.models import EntryKind, JournalData, JournalEntry, new_entry_id

logger = logging.getLogger(__name__)


ROW_NUMBER_COLUMN = "rowNumber"

# Header name -> JournalEntry attribute, in export order.
CSV_COLUMNS: list[tuple[str, Optional[str]]] = [
    ("accountName", None),
    ("initialBalance", None),
    ("id", "id"),
    ("date", "date"),
    ("time", "time"),
    ("kind", "kind"),
    ("market", "market"),
    ("entryPrice", "entry_price"),
    ("balanceAtEntry", "balance_at_entry"),
    ("positionSize", "position_size"),
    ("stopLossPrice", "stop_loss_price"),
    ("takeProfitPrice", "take_profit_price"),
    ("exitPrice", "exit_price"),
    ("riskRewardRatio", "risk_reward_ratio"),
    ("profitOrLoss", "profit_or_loss"),
    ("screenshot", "screenshot"),
    ("notes", "notes"),
    ("disciplineRating", "discipline_rating"),
    ("emotionalState", "emotional_state"),
    ("session", "session"),
    ("reasonForEntry", "reason_for_entry"),
    ("reasonForExit", "reason_for_exit"),
]

CSV_HEADERS = [header for header, _ in CSV_COLUMNS]

# Column names written by earlier revisions of the format.
LEGACY_HEADERS = {
    "direction": "kind",
    "slPrice": "stopLossPrice",
    "tpPrice": "takeProfitPrice",
    "actualExitPrice": "exitPrice",
    "rrr": "riskRewardRatio",
    "pl": "profitOrLoss",
    "accountBalanceAtEntry": "balanceAtEntry",
}

NUMERIC_FIELDS = {
    "entry_price",
    "stop_loss_price",
    "take_profit_price",
    "exit_price",
    "position_size",
    "profit_or_loss",
    "balance_at_entry",
}

REQUIRED_FIELDS = ("date", "time", "kind", "market", "balance_at_entry", "discipline_rating")

DEFAULT_ACCOUNT_NAME = "Imported Account"
DEFAULT_DISCIPLINE_RATING = 3

# Earlier revisions replaced embedded images with this token on export.
LEGACY_SCREENSHOT_TOKEN = "has_screenshot_base64"
SCREENSHOT_PLACEHOLDER = "Screenshot was present (re-upload if needed from original source)"

_SPECIAL_CHARS = re.compile(r'[",\r\n]')
_TIME = re.compile(r"([0-9]{1,2}):([0-9]{2})(?::[0-9]{2})?")


class JournalImportError(ValueError):
    """Raised when a CSV blob cannot be parsed at all."""


class ImportResult(BaseModel):
    """Outcome of a CSV import: best-effort data plus row-level diagnostics."""

    data: JournalData = Field(..., description="Imported account and entries")
    warnings: list[str] = Field(default_factory=list, description="Row-level diagnostics")
    skipped_rows: int = Field(default=0, ge=0, description="Data rows that were dropped")

    model_config = {"frozen": True}

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


# ==================== Export ====================


def _format_value(value) -> str:
    if value is None:
        return ""
    if isinstance(value, EntryKind):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        return repr(value)
    return str(value)


def escape_csv_value(value) -> str:
    """Render one cell, quoting it only if it holds a comma, newline or quote."""
    text = _format_value(value)
    if _SPECIAL_CHARS.search(text):
        return '"' + text.replace('"', '""') + '"'
    return text


def serialize_journal(data: JournalData, include_row_numbers: bool = False) -> str:
    """Serialize journal data to CSV text.

    Args:
        data: Account settings and entries to export.
        include_row_numbers: Prefix each row with a 1-based rowNumber column.

    Returns:
        The complete CSV document, header first, rows joined by newlines.
    """
    headers = ([ROW_NUMBER_COLUMN] if include_row_numbers else []) + CSV_HEADERS
    lines = [",".join(headers)]

    for row_number, entry in enumerate(data.entries, start=1):
        cells = [row_number] if include_row_numbers else []
        for header, attr in CSV_COLUMNS:
            if header == "accountName":
                cells.append(data.account_name)
            elif header == "initialBalance":
                cells.append(data.initial_balance)
            else:
                cells.append(getattr(entry, attr))
        lines.append(",".join(escape_csv_value(cell) for cell in cells))

    return "\n".join(lines)


# ==================== Import ====================


def tokenize_csv(text: str) -> list[list[str]]:
    """Split CSV text into records of raw cell strings.

    Commas and line breaks inside double quotes are data, and a doubled
    quote inside a quoted cell is a literal quote. Accepts \\n, \\r\\n and
    \\r line endings.

    Raises:
        JournalImportError: If a quoted cell is never closed.
    """
    records: list[list[str]] = []
    row: list[str] = []
    field: list[str] = []
    in_quotes = False
    i, n = 0, len(text)

    while i < n:
        if in_quotes:
            j = text.find('"', i)
            if j == -1:
                raise JournalImportError("Unterminated quoted field")
            field.append(text[i:j])
            if j + 1 < n and text[j + 1] == '"':
                field.append('"')
                i = j + 2
            else:
                in_quotes = False
                i = j + 1
            continue

        match = _SPECIAL_CHARS.search(text, i)
        if match is None:
            field.append(text[i:])
            break

        field.append(text[i:match.start()])
        char = match.group()
        i = match.end()

        if char == '"':
            in_quotes = True
        elif char == ",":
            row.append("".join(field))
            field = []
        else:
            if char == "\r" and i < n and text[i] == "\n":
                i += 1
            row.append("".join(field))
            records.append(row)
            row, field = [], []

    if in_quotes:
        raise JournalImportError("Unterminated quoted field")
    if row or field:
        row.append("".join(field))
        records.append(row)

    return records


def _is_blank(record: list[str]) -> bool:
    return all(not cell.strip() for cell in record)


def _parse_float(value: str) -> Optional[float]:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_rating(value: str) -> int:
    number = _parse_float(value)
    if number is None or not number.is_integer() or not 1 <= number <= 5:
        return DEFAULT_DISCIPLINE_RATING
    return int(number)


def _parse_time(value: str) -> Optional[str]:
    """Normalize H:MM or HH:MM[:SS] to HH:MM; None if not a clock time."""
    match = _TIME.fullmatch(value)
    if match is None:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def _decode_row(
    values: list[str], columns: dict[str, int], line_no: int, warnings: list[str]
) -> Optional[dict]:
    """Decode one data row into JournalEntry keyword arguments.

    Returns None (after recording a warning) if the row must be skipped.
    """
    fields: dict = {}

    for header, attr in CSV_COLUMNS:
        if attr is None or header not in columns:
            continue
        raw = values[columns[header]]
        if attr == "risk_reward_ratio" and raw.strip() == "N/A":
            fields[attr] = "N/A"
            continue
        if raw.strip() in ("", "N/A"):
            continue

        if attr == "time":
            time = _parse_time(raw.strip())
            if time is None:
                _warn(warnings, f"Row {line_no}: invalid time {raw!r}, skipping row")
                return None
            fields["time"] = time
        elif attr == "date":
            try:
                fields["date"] = date.fromisoformat(raw.strip())
            except ValueError:
                fields["date"] = date.today()
                _warn(warnings, f"Row {line_no}: invalid date {raw!r}, using current date")
        elif attr == "kind":
            kind = EntryKind.parse(raw.strip())
            if kind is None:
                _warn(warnings, f"Row {line_no}: unknown kind {raw!r}, skipping row")
                return None
            fields["kind"] = kind
        elif attr == "discipline_rating":
            fields["discipline_rating"] = _parse_rating(raw.strip())
        elif attr in NUMERIC_FIELDS:
            number = _parse_float(raw.strip())
            if number is not None:
                fields[attr] = number
        elif attr == "screenshot":
            fields["screenshot"] = (
                SCREENSHOT_PLACEHOLDER if raw.strip() == LEGACY_SCREENSHOT_TOKEN else raw
            )
        elif attr == "id":
            fields["id"] = raw.strip()
        else:
            fields[attr] = raw

    missing = [name for name in REQUIRED_FIELDS if name not in fields]
    if missing:
        _warn(
            warnings,
            f"Row {line_no}: missing required fields ({', '.join(missing)}), skipping row",
        )
        return None

    fields.setdefault("id", new_entry_id())
    return fields


def _warn(warnings: list[str], message: str) -> None:
    logger.warning(message)
    warnings.append(message)


def parse_journal(text: Union[str, bytes]) -> ImportResult:
    """Parse CSV text into journal data.

    Row-level problems never raise: the row is skipped and a warning is
    recorded on the result.

    Args:
        text: CSV document as text or UTF-8 bytes.

    Returns:
        ImportResult with the parsed account, entries and warnings.

    Raises:
        JournalImportError: If the input cannot be decoded or tokenized,
            or contains no lines at all.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise JournalImportError(f"CSV file is not valid UTF-8: {e}") from e
    text = text.lstrip("\ufeff")

    records = [record for record in tokenize_csv(text) if not _is_blank(record)]
    if not records:
        raise JournalImportError("CSV file is empty")

    headers = [LEGACY_HEADERS.get(h.strip(), h.strip()) for h in records[0]]
    columns: dict[str, int] = {}
    for index, header in enumerate(headers):
        if header in CSV_HEADERS and header not in columns:
            columns[header] = index

    data_rows = records[1:]
    warnings: list[str] = []

    account_name = DEFAULT_ACCOUNT_NAME
    initial_balance = 0.0
    if data_rows:
        first = data_rows[0]
        name_index = columns.get("accountName")
        if name_index is not None and name_index < len(first) and first[name_index].strip():
            account_name = first[name_index].strip()
        balance_index = columns.get("initialBalance")
        if balance_index is not None and balance_index < len(first):
            parsed = _parse_float(first[balance_index].strip())
            if parsed is not None:
                initial_balance = parsed

    entries: list[JournalEntry] = []
    for line_no, values in enumerate(data_rows, start=2):
        if len(values) != len(headers):
            _warn(
                warnings,
                f"Row {line_no}: expected {len(headers)} values, got {len(values)}, skipping row",
            )
            continue

        fields = _decode_row(values, columns, line_no, warnings)
        if fields is None:
            continue

        try:
            entries.append(JournalEntry(**fields))
        except ValidationError as e:
            _warn(warnings, f"Row {line_no}: {e.error_count()} invalid field(s), skipping row")

    if data_rows and not entries:
        _warn(warnings, "CSV imported, but no valid journal entries were parsed")

    logger.debug("Parsed %d of %d CSV rows", len(entries), len(data_rows))

    return ImportResult(
        data=JournalData(
            account_name=account_name,
            initial_balance=initial_balance,
            entries=entries,
        ),
        warnings=warnings,
        skipped_rows=len(data_rows) - len(entries),
    )
