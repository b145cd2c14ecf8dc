"""Rendering of record lists into downloadable files.

The pipeline neither filters nor sorts; callers hand it the records in the
order they should appear. Every entity type has a fixed column set so the
layout of a file never depends on which fields happen to be populated.
"""

from __future__ import annotations

import asyncio
import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

from openpyxl import Workbook
from openpyxl.cell import WriteOnlyCell
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from regdesk.core.errors import ValidationError
from regdesk.core.timeutils import utcnow

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

CONTENT_TYPES = {
    "xlsx": XLSX_CONTENT_TYPE,
    "csv": "text/csv",
    "json": "application/json",
}

SUPPORTED_FORMATS = tuple(CONTENT_TYPES)

FILENAME_TIMESTAMP = "%Y%m%dT%H%M%S"
MONEY_FORMAT = "0.00"


@dataclass(frozen=True, slots=True)
class ExportArtifact:
    content_type: str
    filename: str
    payload: bytes

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


@dataclass(frozen=True, slots=True)
class ExportColumn:
    header: str
    getter: Callable[[Any], Any]
    width: int = 18
    number_format: Optional[str] = None


def _field(name: str) -> Callable[[Any], Any]:
    def getter(record: Any) -> Any:
        if isinstance(record, dict):
            return record.get(name)
        return getattr(record, name, None)

    return getter


def _cents(name: str) -> Callable[[Any], Any]:
    read = _field(name)

    def getter(record: Any) -> Any:
        value = read(record)
        return None if value is None else Decimal(int(value)).scaleb(-2)

    return getter


def _member_count(record: Any) -> int:
    return len(_field("members")(record) or [])


REGISTRATION_COLUMNS: tuple[ExportColumn, ...] = (
    ExportColumn("Team Name", _field("team_name"), 24),
    ExportColumn("Leader Name", _field("leader_name")),
    ExportColumn("Leader Phone", _field("leader_phone")),
    ExportColumn("Leader Email", _field("leader_email"), 28),
    ExportColumn("Leader Organization", _field("leader_organization"), 28),
    ExportColumn("Members", _member_count, 10),
    ExportColumn("Status", _field("status"), 12),
    ExportColumn("Payment Status", _field("payment_status"), 14),
    ExportColumn("Total Amount", _cents("total_amount_cents"), 14, MONEY_FORMAT),
    ExportColumn("Paid Amount", _cents("paid_amount_cents"), 14, MONEY_FORMAT),
    ExportColumn("Paid At", _field("paid_at"), 20),
    ExportColumn("Created At", _field("created_at"), 20),
    ExportColumn("Reviewed At", _field("reviewed_at"), 20),
    ExportColumn("Remarks", _field("remarks"), 30),
    ExportColumn("Reject Reason", _field("reject_reason"), 30),
)

PAYMENT_COLUMNS: tuple[ExportColumn, ...] = (
    ExportColumn("Order Number", _field("order_number"), 22),
    ExportColumn("Registration ID", _field("registration_id"), 38),
    ExportColumn("Team Name", _field("team_name"), 24),
    ExportColumn("Payer", _field("payer_name")),
    ExportColumn("Payment Method", _field("payment_method"), 14),
    ExportColumn("Amount", _cents("amount_cents"), 12, MONEY_FORMAT),
    ExportColumn("Status", _field("status"), 12),
    ExportColumn("Created At", _field("created_at"), 20),
    ExportColumn("Paid At", _field("paid_at"), 20),
    ExportColumn("Transaction ID", _field("transaction_id"), 30),
    ExportColumn("Remarks", _field("remarks"), 30),
)

ENTITY_COLUMNS: dict[str, tuple[ExportColumn, ...]] = {
    "registrations": REGISTRATION_COLUMNS,
    "payments": PAYMENT_COLUMNS,
}

SHEET_TITLES = {
    "registrations": "Registrations",
    "payments": "Payments",
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _xlsx_cell(sheet: Any, value: Any, number_format: Optional[str]) -> Any:
    if number_format is None or value is None:
        return value
    cell = WriteOnlyCell(sheet, value=value)
    cell.number_format = number_format
    return cell


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class ExportPipeline:
    """Turns a homogeneous record list into an :class:`ExportArtifact`.

    Rows are produced lazily from ``records`` and written straight into one
    output buffer, so only the encoded file is ever held in full.
    """

    def export(
        self,
        entity: str,
        records: Iterable[Any],
        format: str,
        *,
        generated_at: Optional[datetime] = None,
    ) -> ExportArtifact:
        columns = self.columns_for(entity)
        fmt = (format or "").lower()
        if fmt not in CONTENT_TYPES:
            raise ValidationError(f"Unsupported export format: {format}")

        writer = getattr(self, f"_write_{fmt}")
        payload = writer(entity, columns, self._rows(columns, records))
        artifact = ExportArtifact(
            content_type=CONTENT_TYPES[fmt],
            filename=self.filename_for(entity, fmt, generated_at or utcnow()),
            payload=payload,
        )
        logger.info("Exported %s as %s (%d bytes)", entity, artifact.filename, len(payload))
        return artifact

    async def export_async(
        self,
        entity: str,
        records: Sequence[Any],
        format: str,
        *,
        generated_at: Optional[datetime] = None,
    ) -> ExportArtifact:
        """Run :meth:`export` in a worker thread so encoding never blocks the loop."""
        return await asyncio.to_thread(self.export, entity, records, format, generated_at=generated_at)

    @staticmethod
    def columns_for(entity: str) -> tuple[ExportColumn, ...]:
        try:
            return ENTITY_COLUMNS[entity]
        except KeyError:
            raise ValidationError(f"Unsupported export entity: {entity}") from None

    @staticmethod
    def filename_for(entity: str, fmt: str, generated_at: datetime) -> str:
        return f"{entity}-{generated_at.strftime(FILENAME_TIMESTAMP)}.{fmt}"

    @staticmethod
    def _rows(columns: Sequence[ExportColumn], records: Iterable[Any]) -> Iterator[list[Any]]:
        for record in records:
            yield [column.getter(record) for column in columns]

    def _write_xlsx(self, entity: str, columns: Sequence[ExportColumn], rows: Iterator[list[Any]]) -> bytes:
        workbook = Workbook(write_only=True)
        sheet = workbook.create_sheet(SHEET_TITLES.get(entity, entity))
        for index, column in enumerate(columns):
            sheet.column_dimensions[get_column_letter(index + 1)].width = column.width

        header_font = Font(bold=True)
        header_alignment = Alignment(horizontal="center", vertical="center")
        header = []
        for column in columns:
            cell = WriteOnlyCell(sheet, value=column.header)
            cell.font = header_font
            cell.alignment = header_alignment
            header.append(cell)
        sheet.append(header)

        formats = [column.number_format for column in columns]
        for row in rows:
            sheet.append([_xlsx_cell(sheet, value, fmt) for value, fmt in zip(row, formats)])

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    def _write_csv(self, entity: str, columns: Sequence[ExportColumn], rows: Iterator[list[Any]]) -> bytes:
        buffer = io.BytesIO()
        # utf-8-sig so spreadsheet applications detect the encoding
        stream = io.TextIOWrapper(buffer, encoding="utf-8-sig", newline="")
        writer = csv.writer(stream)
        writer.writerow([column.header for column in columns])
        for row in rows:
            writer.writerow([_text(value) for value in row])
        stream.flush()
        payload = buffer.getvalue()
        stream.detach()
        return payload

    def _write_json(self, entity: str, columns: Sequence[ExportColumn], rows: Iterator[list[Any]]) -> bytes:
        headers = [column.header for column in columns]
        buffer = io.StringIO()
        buffer.write("[")
        for index, row in enumerate(rows):
            if index:
                buffer.write(",")
            json.dump(dict(zip(headers, row)), buffer, ensure_ascii=False, default=_json_default)
        buffer.write("]")
        return buffer.getvalue().encode("utf-8")


__all__ = [
    "CONTENT_TYPES",
    "ENTITY_COLUMNS",
    "ExportArtifact",
    "ExportColumn",
    "ExportPipeline",
    "PAYMENT_COLUMNS",
    "REGISTRATION_COLUMNS",
    "SUPPORTED_FORMATS",
]
