"""
Webhook variants.

Each endpoint is the same handler bound to a different field set, target
table and response wording.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence, Type

from src.services.normalizer import (
    MalformedProducts,
    PayloadValidationError,
    ProductsNotAList,
    normalize_lead,
    normalize_order,
)
from src.services.writer import SinkRecord
from src.utils.config import Settings


@dataclass(frozen=True)
class Variant:
    name: str
    path: str
    normalize: Callable[[Dict[str, Any]], Sequence[SinkRecord]]
    table_setting: str
    success_message: str
    store_error_message: str
    mirror_error_message: str
    # Answer bare OPTIONS and add CORS headers to responses
    preflight: bool = False
    # Lead style bodies: {"success": bool, ...} and no data echo
    success_flag: bool = False
    # Wording for validation errors, replacing the error's own message
    error_messages: Dict[Type[PayloadValidationError], str] = field(default_factory=dict)

    def table(self, settings: Settings) -> str:
        return getattr(settings, self.table_setting)

    def error_message(self, error: PayloadValidationError) -> str:
        return self.error_messages.get(type(error), error.message)


def _lead_records(raw: Dict[str, Any]) -> List[SinkRecord]:
    return [normalize_lead(raw)]


EMAIL = Variant(
    name="email",
    path="/email",
    normalize=normalize_order,
    table_setting="orders_table",
    success_message="Data saved successfully",
    store_error_message="Failed to save to Supabase",
    mirror_error_message="Failed to save to Google Sheets",
    preflight=True,
)

ZMAIL = Variant(
    name="zmail",
    path="/Zmail",
    normalize=normalize_order,
    table_setting="orders_table",
    success_message="Data added successfully",
    store_error_message="Error saving data",
    mirror_error_message="Error saving to Google Sheets",
    error_messages={
        MalformedProducts: "Invalid 'products' format",
        ProductsNotAList: "Invalid data: 'products' must be an array",
    },
)

SALESIQ = Variant(
    name="salesiq",
    path="/salesiq",
    normalize=_lead_records,
    table_setting="leads_table",
    success_message="Data successfully saved to Supabase and Google Sheets",
    store_error_message="Failed to save to Supabase",
    mirror_error_message="Failed to save to Google Sheets",
    success_flag=True,
)

VARIANTS = [EMAIL, ZMAIL, SALESIQ]
