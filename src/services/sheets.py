import threading
from typing import Any, Callable, Dict, List, Optional

import gspread

from src.services.credentials import SHEETS_SCOPES, get_google_credentials
from src.utils.config import get_settings
from src.utils.logger import logger


class SheetsError(Exception):
    """Appending to the spreadsheet failed."""


class SheetsService:
    def __init__(
        self,
        credentials_provider: Callable[[], Dict[str, Any]] = get_google_credentials,
        timeout: Optional[float] = None,
    ):
        self.credentials_provider = credentials_provider
        self.timeout = timeout
        self.gc: Optional[gspread.Client] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "SheetsService":
        return cls(timeout=get_settings().sink_timeout_seconds)

    def _connect(self) -> gspread.Client:
        """Connect to Google Sheets using service account, once."""
        with self._lock:
            if self.gc is None:
                gc = gspread.service_account_from_dict(
                    self.credentials_provider(), scopes=SHEETS_SCOPES
                )
                if self.timeout:
                    gc.http_client.set_timeout(self.timeout)
                self.gc = gc
                logger.info("connected_to_google_sheets")
        return self.gc

    def append(self, spreadsheet_id: str, range_name: str, rows: List[List[Any]]) -> Optional[str]:
        """
        Append rows after the last row of a range.

        Args:
            spreadsheet_id: Google Sheets document ID
            range_name: A1 range or sheet name, e.g. "Sheet1"
            rows: One list of cell values per row

        Returns:
            The A1 range that was written, if the API reports one
        """
        try:
            sh = self._connect().open_by_key(spreadsheet_id)
            response = sh.values_append(
                range_name,
                params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
                body={"values": rows},
            )
        except Exception as e:
            logger.error(
                "sheet_append_failed",
                spreadsheet_id=spreadsheet_id,
                range=range_name,
                error=str(e),
            )
            raise SheetsError(str(e)) from e

        updated_range = (response or {}).get("updates", {}).get("updatedRange")
        logger.info("rows_appended", range=updated_range, rows=len(rows))
        return updated_range
