from dataclasses import dataclass, field
from decimal import Decimal, localcontext
from typing import Iterable, List, Optional, Union

from invoicer.engine.columns import Column, ColumnRegistry
from invoicer.engine.line_items import WORKING_CONTEXT, ZERO, LineItem, evaluate, to_decimal


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    discount: Decimal
    total_amount: Decimal
    total_paid: Decimal
    amount_due: Decimal
    line_totals: List[Decimal] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "total_amount": self.total_amount,
            "total_paid": self.total_paid,
            "amount_due": self.amount_due,
            "line_totals": list(self.line_totals),
        }


def aggregate(
    items: Iterable[LineItem],
    columns: Optional[Union[ColumnRegistry, Iterable[Column]]] = None,
    discount=ZERO,
    total_paid=ZERO,
) -> InvoiceTotals:
    """
    Compute invoice totals.

    subtotal is the sum of the line totals in item order, total is subtotal
    minus the flat discount and amount due is total minus payments. Negative
    results are kept: they represent a credit or an overpayment.
    """
    columns = list(columns or [])
    line_totals = [evaluate(item, columns) for item in items]

    discount = to_decimal(discount)
    total_paid = to_decimal(total_paid)
    with localcontext(WORKING_CONTEXT):
        subtotal = ZERO
        for line_total in line_totals:
            subtotal += line_total
        total_amount = subtotal - discount
        amount_due = total_amount - total_paid
    return InvoiceTotals(
        subtotal=subtotal,
        discount=discount,
        total_amount=total_amount,
        total_paid=total_paid,
        amount_due=amount_due,
        line_totals=line_totals,
    )
