"""
Line item model and evaluator.

A line item's custom values are kept by column name. The ordered
``customFields`` list that clients see is produced from the column order at
serialization time, so it always mirrors the invoice's custom columns.
"""
import re
from dataclasses import dataclass, field
from decimal import Context, Decimal, DivisionByZero, InvalidOperation, Overflow, localcontext
from typing import Any, Dict, Iterable, List, Optional, Union

from invoicer.engine.columns import Column, ColumnBehavior, ColumnRegistry

ZERO = Decimal("0")

# Largest accepted magnitude is below 10 ** (MAX_EXPONENT + 1)
MAX_EXPONENT = 100

# Products and sums of in-range values stay exact and can never overflow
WORKING_CONTEXT = Context(prec=4 * MAX_EXPONENT, traps=[InvalidOperation, DivisionByZero, Overflow])

# Leading numeric prefix, e.g. "12.5kg" -> "12.5"
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def in_range(number: Decimal) -> bool:
    return number.is_finite() and (number.is_zero() or number.adjusted() <= MAX_EXPONENT)


def parse_number(value: Any) -> Decimal:
    """
    Read a custom field value as a number.

    Only the leading numeric part of the text counts. Empty, unparseable,
    non-finite or out-of-range input yields zero instead of failing the
    computation.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if in_range(value) else ZERO
    if isinstance(value, (int, float)):
        value = str(value)
    match = _NUMBER_PREFIX.match(str(value))
    if not match:
        return ZERO
    try:
        number = Decimal(match.group(1))
    except InvalidOperation:
        return ZERO
    return number if in_range(number) else ZERO


def to_decimal(value: Any) -> Decimal:
    """Coerce quantity / price input to Decimal (floats go through str)"""
    if value is None or value == "":
        return ZERO
    if isinstance(value, float):
        value = str(value)
    try:
        number = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not a number: {value!r}")
    if not number.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    if not in_range(number):
        raise ValueError(f"Number out of range: {value!r}")
    return number


@dataclass
class LineItem:
    description: str = ""
    quantity: Decimal = ZERO
    unit_price: Decimal = ZERO
    custom_fields: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.quantity = to_decimal(self.quantity)
        self.unit_price = to_decimal(self.unit_price)
        if self.quantity < 0:
            raise ValueError("Quantity must be positive.")
        if self.unit_price < 0:
            raise ValueError("Unit price must be non-negative.")
        self.custom_fields = {name: "" if value is None else str(value) for name, value in self.custom_fields.items()}

    @property
    def base_amount(self) -> Decimal:
        return self.quantity * self.unit_price

    def value_of(self, column_name: str) -> str:
        return self.custom_fields.get(column_name, "")

    def ordered_fields(self, columns: Union[ColumnRegistry, Iterable[Column]]) -> List[dict]:
        """Custom fields in column order, one entry per column"""
        return [{"name": column.name, "value": self.value_of(column.name)} for column in columns]

    def to_dict(self, columns: Union[ColumnRegistry, Iterable[Column]]) -> dict:
        return {
            "description": self.description,
            "quantity": str(self.quantity),
            "unitPrice": str(self.unit_price),
            "customFields": self.ordered_fields(columns),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        raw_fields = data.get("customFields") or data.get("custom_fields") or []
        if isinstance(raw_fields, dict):
            custom_fields = dict(raw_fields)
        else:
            # First occurrence wins if a stored document carries duplicates
            custom_fields = {}
            for item in raw_fields:
                custom_fields.setdefault(item["name"], item.get("value", ""))
        return cls(
            description=data.get("description", ""),
            quantity=data.get("quantity", ZERO),
            unit_price=data.get("unitPrice", data.get("unit_price", ZERO)),
            custom_fields=custom_fields,
        )


def evaluate(item: LineItem, columns: Optional[Union[ColumnRegistry, Iterable[Column]]]) -> Decimal:
    """
    Monetary contribution of one line item.

    quantity * unit price, plus every additive column value, minus every
    subtractive column value. Neutral columns and values for columns that no
    longer exist do not count.
    """
    with localcontext(WORKING_CONTEXT):
        total = item.base_amount
        for column in columns or []:
            if column.behavior == ColumnBehavior.NEUTRAL or column.name not in item.custom_fields:
                continue
            value = parse_number(item.custom_fields[column.name])
            if column.behavior == ColumnBehavior.ADDITIVE:
                total += value
            elif column.behavior == ColumnBehavior.SUBTRACTIVE:
                total -= value
    return total
