"""
Google service account credentials.

The material comes from configuration as raw JSON, base64 encoded JSON,
or a path to a credentials file.
"""

import base64
import binascii
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from src.utils.config import get_settings
from src.utils.logger import logger

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class CredentialError(Exception):
    """Service account material is missing or cannot be decoded."""


def _decode_blob(blob: str) -> Dict[str, Any]:
    text = blob.strip()
    if not text.startswith("{"):
        try:
            text = base64.b64decode(text, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise CredentialError("Invalid Google credentials") from e

    try:
        info = json.loads(text)
    except json.JSONDecodeError as e:
        raise CredentialError("Invalid Google credentials") from e

    if not isinstance(info, dict):
        raise CredentialError("Invalid Google credentials")
    return info


def load_google_credentials(
    blob: Optional[str] = None,
    filename: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a service account info dict.

    Args:
        blob: Raw or base64 encoded service account JSON
        filename: Path to a service account JSON file, used when blob is empty

    Returns:
        The decoded service account info

    Raises:
        CredentialError: if nothing is configured or decoding fails
    """
    if blob:
        return _decode_blob(blob)

    if filename:
        path = Path(filename)
        if not path.is_file():
            raise CredentialError(f"Google credentials file not found: {filename}")
        return _decode_blob(path.read_text(encoding="utf-8"))

    raise CredentialError("Google credentials are not configured")


@lru_cache
def get_google_credentials() -> Dict[str, Any]:
    """Credentials from settings, decoded on first use and kept for the process."""
    settings = get_settings()
    try:
        return load_google_credentials(
            settings.google_service_account_credentials,
            settings.google_credentials_file,
        )
    except CredentialError as e:
        logger.error("google_credentials_invalid", error=str(e))
        raise
