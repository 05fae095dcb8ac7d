from decimal import Decimal
from typing import List

from invoicer.engine.formatting import format_currency
from invoicer.models.invoice import Invoice
from invoicer.services.invoice_service import draft_from_record


def build_dashboard(invoices: List[Invoice], recent_limit: int = 5, currency: str = "USD") -> dict:
    """
    Revenue, collected and outstanding figures across all invoices.

    Invoice totals are recomputed from their line items instead of trusting
    the stored figure. ``invoices`` is expected newest first.
    """
    total_revenue = Decimal("0")
    total_collected = Decimal("0")
    invoice_totals = []

    for invoice in invoices:
        totals = draft_from_record(invoice).totals
        invoice_totals.append(totals.total_amount)
        total_revenue += totals.total_amount
        total_collected += totals.total_paid

    recent = list(zip(invoices, invoice_totals))[:recent_limit]
    # Oldest first for the chart
    chart_data = [{"name": invoice.invoice_number, "total": total} for invoice, total in reversed(recent)]

    total_outstanding = total_revenue - total_collected
    return {
        "total_revenue": total_revenue,
        "total_collected": total_collected,
        "total_outstanding": total_outstanding,
        "formatted_revenue": format_currency(total_revenue, currency),
        "formatted_collected": format_currency(total_collected, currency),
        "formatted_outstanding": format_currency(total_outstanding, currency),
        "chart_data": chart_data,
        "recent_invoices": [invoice for invoice, _ in recent],
    }
