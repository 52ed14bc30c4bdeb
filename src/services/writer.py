"""
Two-step write: primary store first, then the spreadsheet mirror.

The store is authoritative. A store failure skips the mirror; a mirror
failure leaves the stored rows in place.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from src.services.sheets import SheetsError
from src.services.store import StoreError
from src.utils.logger import logger


class WriteError(Exception):
    """A sink write failed."""

    def __init__(self, details: str):
        self.details = details
        super().__init__(details)


class PrimaryStoreFailed(WriteError):
    pass


class MirrorFailed(WriteError):
    pass


class WriteOutcome(str, Enum):
    FULL_SUCCESS = "full_success"
    PARTIAL_SUCCESS = "partial_success"
    FATAL = "fatal"


@dataclass
class WriteReport:
    outcome: WriteOutcome
    record_count: int
    stored: List[Dict[str, Any]] = field(default_factory=list)
    updated_range: Optional[str] = None
    error: Optional[WriteError] = None

    @property
    def ok(self) -> bool:
        return self.outcome is WriteOutcome.FULL_SUCCESS


class RecordStore(Protocol):
    def insert(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]: ...


class RowSink(Protocol):
    def append(self, spreadsheet_id: str, range_name: str, rows: List[List[Any]]) -> Optional[str]: ...


class SinkRecord(Protocol):
    def to_row(self) -> Dict[str, Any]: ...

    def to_sheet_row(self) -> List[Any]: ...


class DualSinkWriter:
    def __init__(self, store: RecordStore, sheets: RowSink, spreadsheet_id: str):
        self.store = store
        self.sheets = sheets
        self.spreadsheet_id = spreadsheet_id

    def write(
        self,
        table: str,
        records: Sequence[SinkRecord],
        sheet_range: str,
        to_sheet_row: Optional[Callable[[SinkRecord], List[Any]]] = None,
    ) -> WriteReport:
        """
        Insert records into the store, then mirror them to the sheet.

        Args:
            table: Store table name
            records: Fully expanded records, written in order to both sinks
            sheet_range: Target range in the spreadsheet
            to_sheet_row: Row mapping for the sheet, defaults to record.to_sheet_row

        Returns:
            WriteReport with FULL_SUCCESS, PARTIAL_SUCCESS (stored, mirror failed)
            or FATAL (store failed, mirror not attempted)
        """
        count = len(records)
        if not records:
            logger.info("write_skipped_no_records", table=table)
            return WriteReport(WriteOutcome.FULL_SUCCESS, 0)

        try:
            stored = self.store.insert(table, [r.to_row() for r in records])
        except StoreError as e:
            return WriteReport(WriteOutcome.FATAL, count, error=PrimaryStoreFailed(str(e)))

        mapper = to_sheet_row or (lambda r: r.to_sheet_row())
        try:
            updated_range = self.sheets.append(
                self.spreadsheet_id, sheet_range, [mapper(r) for r in records]
            )
        except SheetsError as e:
            logger.warning("mirror_failed_after_store", table=table, records=count)
            return WriteReport(
                WriteOutcome.PARTIAL_SUCCESS,
                count,
                stored=stored,
                error=MirrorFailed(str(e)),
            )

        return WriteReport(
            WriteOutcome.FULL_SUCCESS,
            count,
            stored=stored,
            updated_range=updated_range,
        )
