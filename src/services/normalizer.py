"""
Submission normalization.

Turns an inbound order submission into one record per ordered unit, and a
chat-widget lead into a single trimmed record.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.utils.config import get_settings
from src.utils.logger import logger


# ============== Errors ==============

class PayloadValidationError(ValueError):
    """Inbound payload is malformed or incomplete."""

    default_message = "Invalid payload"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MalformedBody(PayloadValidationError):
    default_message = "Request body must be a JSON object"


class MalformedProducts(PayloadValidationError):
    default_message = "Invalid 'products' JSON format"


class ProductsNotAList(PayloadValidationError):
    default_message = "'products' must be an array"


class InvalidQuantity(PayloadValidationError):
    default_message = "'Quantity' must be a non-negative integer"


class MissingField(PayloadValidationError):
    default_message = "Missing required fields"


# ============== Records ==============

class ExpandedRecord(BaseModel):
    """A single ordered unit. Field aliases are the store column names."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    order_received: Any = Field(default=None, alias="OrderReceived")
    email: Any = None
    company: Any = None
    contact_name: Any = Field(default=None, alias="ContactName")
    contract_number: Any = Field(default=None, alias="ContractNumber")
    start_date: Any = Field(default=None, alias="StartDate")
    end_date: Any = Field(default=None, alias="EndDate")
    product_description: str = Field(alias="ProductDescription")
    new_renewal: Any = Field(default=None, alias="NewRenewal")
    term: Any = Field(default=None, alias="Term")
    quantity: int = Field(default=1, alias="Quantity")

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_sheet_row(self) -> List[Any]:
        return [
            self.order_received,
            self.email,
            self.company,
            self.contact_name,
            self.contract_number,
            self.start_date,
            self.end_date,
            self.product_description,
            self.new_renewal,
            self.term,
            self.quantity,
        ]


class LeadRecord(BaseModel):
    """Visitor captured by the chat widget."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    phone: str

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()

    def to_sheet_row(self) -> List[Any]:
        return [self.name, self.email, self.phone]


SUBMISSION_FIELDS = (
    "OrderReceived",
    "email",
    "company",
    "ContactName",
    "ContractNumber",
    "StartDate",
    "EndDate",
)


# ============== Order submissions ==============

def _decode_products(products: Any) -> List[Any]:
    """Accept either a JSON array or the same array serialized as a string."""
    if isinstance(products, str):
        try:
            products = json.loads(products)
        except json.JSONDecodeError as e:
            raise MalformedProducts() from e

    if not isinstance(products, list):
        raise ProductsNotAList()
    return products


def _parse_quantity(value: Any, index: int, max_quantity: int) -> int:
    message = f"Invalid Quantity for product {index + 1}: {value!r}"

    # bool is an int subclass
    if isinstance(value, bool):
        raise InvalidQuantity(message)
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float) and value.is_integer():
        quantity = int(value)
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        quantity = int(value.strip())
    else:
        raise InvalidQuantity(message)

    if quantity < 0 or quantity > max_quantity:
        raise InvalidQuantity(message)
    return quantity


def normalize_order(raw: Dict[str, Any], max_quantity: Optional[int] = None) -> List[ExpandedRecord]:
    """
    Expand an order submission into one record per unit.

    Lines with an empty description are skipped whatever their quantity.
    Every other line yields `Quantity` records with Quantity set to 1,
    keeping product order and then repetition order. A quantity above
    max_quantity (default: the max_quantity setting) is rejected.

    Raises:
        PayloadValidationError: the body or its products are malformed.
            Nothing is returned on failure.
    """
    if not isinstance(raw, dict):
        raise MalformedBody()

    if max_quantity is None:
        max_quantity = get_settings().max_quantity

    products = _decode_products(raw.get("products"))
    scalars = {field: raw.get(field) for field in SUBMISSION_FIELDS}

    records: List[ExpandedRecord] = []
    for index, product in enumerate(products):
        if not isinstance(product, dict):
            raise MalformedProducts(f"Product {index + 1} must be an object")

        description = product.get("ProductDescription")
        if not description:
            continue

        quantity = _parse_quantity(product.get("Quantity"), index, max_quantity)
        record = ExpandedRecord(
            **scalars,
            ProductDescription=str(description),
            NewRenewal=product.get("NewRenewal"),
            Term=product.get("Term"),
            Quantity=1,
        )
        # Frozen, so the same instance can be repeated
        records.extend([record] * quantity)

    logger.info("records_expanded", products=len(products), records=len(records))
    return records


# ============== Lead capture ==============

def normalize_lead(raw: Dict[str, Any]) -> LeadRecord:
    """
    Extract name, email and phone from a chat-widget visitor payload.

    Every field is trimmed and must be non-empty afterwards.
    """
    if not isinstance(raw, dict):
        raise MalformedBody()

    entity = raw.get("entity")
    visitor = entity.get("visitor") if isinstance(entity, dict) else None
    if not isinstance(visitor, dict):
        raise MissingField("Visitor data is missing")

    values = {}
    for field in ("name", "email", "phone"):
        value = visitor.get(field)
        value = value.strip() if isinstance(value, str) else ""
        if not value:
            raise MissingField()
        values[field] = value

    return LeadRecord(**values)
