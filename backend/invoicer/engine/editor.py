"""
Editable invoice draft.

The draft is the single mutable copy of an invoice's computational state
(line items, custom columns, discount and payments). Column edits keep every
line item in step with the column list, and totals are derived from the
current state each time they are read.
"""
import logging
from decimal import Decimal, localcontext
from typing import Any, Dict, Iterable, List, Optional

from invoicer.engine.columns import ColumnBehavior, ColumnRegistry, InsertPosition
from invoicer.engine.line_items import WORKING_CONTEXT, ZERO, LineItem, in_range, to_decimal
from invoicer.engine.totals import InvoiceTotals, aggregate
from invoicer.exceptions import ColumnNotFoundError

logger = logging.getLogger(__name__)


class InvoiceDraft:

    def __init__(
        self,
        items: Optional[Iterable[LineItem]] = None,
        columns: Optional[ColumnRegistry] = None,
        discount: Any = ZERO,
        total_paid: Any = ZERO,
        currency: str = "USD",
    ):
        self.columns = columns if columns is not None else ColumnRegistry()
        self.items: List[LineItem] = list(items or [])
        self.discount = ZERO
        self.total_paid = ZERO
        self.currency = currency
        self.set_discount(discount)
        self._set_total_paid(total_paid)
        self.repair_items()

    def repair_items(self):
        """Give every line item a value slot for every custom column"""
        for item in self.items:
            for name in self.columns.names:
                item.custom_fields.setdefault(name, "")

    @property
    def totals(self) -> InvoiceTotals:
        return aggregate(self.items, self.columns, self.discount, self.total_paid)

    # --- Column edits -------------------------------------------------------

    def add_column(
        self,
        name: str,
        behavior: ColumnBehavior = ColumnBehavior.NEUTRAL,
        reference_column_name: Optional[str] = None,
        position: InsertPosition = InsertPosition.AFTER,
    ) -> int:
        """
        Insert a custom column and an empty value for it on every line item.

        Returns the column's index among custom columns. Nothing changes when
        the registry rejects the insert.
        """
        index = self.columns.insert_column(name, behavior, reference_column_name, position)
        for item in self.items:
            item.custom_fields[name] = ""
        logger.debug(f"Added column '{name}' at index {index}")
        return index

    def remove_column(self, name: str) -> int:
        """Remove a custom column and its value from every line item"""
        index = self.columns.remove_column(name)
        for item in self.items:
            item.custom_fields.pop(name, None)
        logger.debug(f"Removed column '{name}' from index {index}")
        return index

    # --- Line items ---------------------------------------------------------

    def add_item(
        self,
        description: str = "",
        quantity: Any = 1,
        unit_price: Any = ZERO,
        custom_fields: Optional[Dict[str, str]] = None,
    ) -> int:
        fields = {name: "" for name in self.columns.names}
        fields.update(custom_fields or {})
        self.items.append(LineItem(description, quantity, unit_price, fields))
        return len(self.items) - 1

    def update_item(self, index: int, **changes) -> LineItem:
        """Replace fields of one line item; the item is rebuilt so bad input leaves it untouched"""
        current = self.items[index]
        fields = dict(current.custom_fields)
        fields.update(changes.pop("custom_fields", None) or {})
        updated = LineItem(
            description=changes.get("description", current.description),
            quantity=changes.get("quantity", current.quantity),
            unit_price=changes.get("unit_price", current.unit_price),
            custom_fields=fields,
        )
        self.items[index] = updated
        return updated

    def set_custom_value(self, index: int, column_name: str, value: str):
        if self.columns.index_of(column_name) is None:
            raise ColumnNotFoundError(column_name)
        self.items[index].custom_fields[column_name] = "" if value is None else str(value)

    def remove_item(self, index: int) -> LineItem:
        return self.items.pop(index)

    # --- Money --------------------------------------------------------------

    def set_discount(self, amount: Any):
        amount = to_decimal(amount)
        if amount < 0:
            raise ValueError("Discount must be non-negative.")
        self.discount = amount

    def _set_total_paid(self, amount: Any):
        amount = to_decimal(amount)
        if amount < 0:
            raise ValueError("Total paid must be non-negative.")
        self.total_paid = amount

    def add_payment(self, amount: Any) -> Decimal:
        """Record a payment and return the new total paid"""
        amount = to_decimal(amount)
        if amount <= 0:
            raise ValueError("Payment amount must be a positive number.")
        with localcontext(WORKING_CONTEXT):
            total_paid = self.total_paid + amount
        if not in_range(total_paid):
            raise ValueError("Total paid is out of range.")
        self.total_paid = total_paid
        return self.total_paid

    # --- Serialization ------------------------------------------------------

    def items_to_list(self) -> List[dict]:
        return [item.to_dict(self.columns) for item in self.items]

    def to_dict(self) -> dict:
        return {
            "items": self.items_to_list(),
            "customColumns": self.columns.to_list(),
            "discount": str(self.discount),
            "totalPaid": str(self.total_paid),
            "currency": self.currency,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InvoiceDraft":
        return cls(
            items=[LineItem.from_dict(item) for item in data.get("items") or []],
            columns=ColumnRegistry.from_list(data.get("customColumns")),
            discount=data.get("discount") or ZERO,
            total_paid=data.get("totalPaid") or ZERO,
            currency=data.get("currency") or "USD",
        )
