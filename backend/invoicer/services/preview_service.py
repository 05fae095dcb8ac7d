"""
Presentation projection for the editor preview, the invoice detail page and
HTML output.

Nothing here computes money: every figure comes from the draft's totals and
is only formatted.
"""
import logging
import re
from typing import Any, Dict, Optional

from invoicer.engine import FIXED_COLUMNS, InvoiceDraft, format_currency

logger = logging.getLogger(__name__)

TOTAL_COLUMN = "Total"

_PLACEHOLDER = re.compile(r"\{\{(invoice_table|totals|invoice_number|client_name|issue_date|due_date)\}\}")


def build_invoice_view(draft: InvoiceDraft) -> Dict[str, Any]:
    """Ordered table (fixed, custom, Total) plus the totals block"""
    totals = draft.totals
    currency = draft.currency

    rows = []
    for item, line_total in zip(draft.items, totals.line_totals):
        cells = [
            item.description,
            f"{item.quantity.normalize():f}",
            format_currency(item.unit_price, currency),
        ]
        cells.extend(item.value_of(column.name) for column in draft.columns)
        rows.append({"cells": cells, "total": format_currency(line_total, currency)})

    totals_block = [{"label": "Subtotal", "amount": format_currency(totals.subtotal, currency)}]
    if totals.discount:
        totals_block.append({"label": "Discount", "amount": format_currency(totals.discount.copy_negate(), currency)})
    totals_block.append({"label": "Total", "amount": format_currency(totals.total_amount, currency)})
    if totals.total_paid:
        totals_block.append({"label": "Paid", "amount": format_currency(totals.total_paid, currency)})
        totals_block.append({"label": "Amount Due", "amount": format_currency(totals.amount_due, currency)})

    return {
        "header": list(FIXED_COLUMNS) + draft.columns.names + [TOTAL_COLUMN],
        "rows": rows,
        "totals": totals_block,
    }


def _escape_html(text: Any) -> str:
    """Escape HTML special characters"""
    if text is None or text == "":
        return ''
    return (str(text)
            .replace('&', '&amp;')
            .replace('<', '&lt;')
            .replace('>', '&gt;')
            .replace('"', '&quot;')
            .replace("'", '&#39;'))


def _table_html(view: Dict[str, Any]) -> str:
    header_cells = ''.join(
        f'<th style="border-bottom: 2px solid #A0BFE0; padding: 8px; text-align: {"left" if i == 0 else "right"};">{_escape_html(name)}</th>'
        for i, name in enumerate(view["header"])
    )
    body_rows = []
    for row in view["rows"]:
        cells = row["cells"] + [row["total"]]
        body_rows.append('<tr>' + ''.join(
            f'<td style="border-bottom: 1px solid #e5e7eb; padding: 8px; text-align: {"left" if i == 0 else "right"};">{_escape_html(cell)}</td>'
            for i, cell in enumerate(cells)
        ) + '</tr>')

    return f"""
        <table class="invoice-items" style="border-collapse: collapse; width: 100%; margin: 20px 0; font-family: Inter, Arial, sans-serif;">
          <thead><tr>{header_cells}</tr></thead>
          <tbody>{''.join(body_rows)}</tbody>
        </table>
        """


def _totals_html(view: Dict[str, Any]) -> str:
    lines = ''.join(
        f'<tr><td style="padding: 4px 12px;">{_escape_html(line["label"])}</td>'
        f'<td style="padding: 4px 12px; text-align: right;"><strong>{_escape_html(line["amount"])}</strong></td></tr>'
        for line in view["totals"]
    )
    return f'<table class="invoice-totals" style="margin-left: auto; border-collapse: collapse;">{lines}</table>'


def render_invoice_html(
    draft: InvoiceDraft,
    meta: Dict[str, Any],
    company: Optional[Dict[str, Any]] = None,
    template: Optional[str] = None,
) -> str:
    """
    Render an invoice as HTML.

    With a saved AI template the placeholders {{invoice_table}}, {{totals}},
    {{invoice_number}}, {{client_name}}, {{issue_date}} and {{due_date}} are
    filled in; a template without {{invoice_table}} gets the table inserted
    before </body>. Without a template a plain page is produced.
    """
    view = build_invoice_view(draft)
    table_html = _table_html(view)
    totals_html = _totals_html(view)
    company = company or {}

    if template:
        replacements = {
            "invoice_table": table_html,
            "totals": totals_html,
            "invoice_number": _escape_html(meta.get("invoice_number")),
            "client_name": _escape_html(meta.get("client_name")),
            "issue_date": _escape_html(meta.get("issue_date")),
            "due_date": _escape_html(meta.get("due_date")),
        }
        # One pass, so placeholder text inside substituted values stays literal
        html = _PLACEHOLDER.sub(lambda match: replacements[match.group(1)], template)
        if "{{invoice_table}}" not in template:
            block = table_html + totals_html
            if "</body>" in html:
                html = html.replace("</body>", block + "</body>", 1)
            else:
                html += block
        logger.debug(f"Rendered invoice {meta.get('invoice_number')} into saved template")
        return html

    notes = meta.get("notes")
    notes_html = f'<h3>Notes</h3><p>{_escape_html(notes)}</p>' if notes else ''
    return f"""
        <html>
          <body style="font-family: Inter, Arial, sans-serif; line-height: 1.6; color: #374151; background: #F0F4F8; padding: 20px;">
            <h1 style="color: #1f2937;">{_escape_html(company.get("company_name")) or 'Invoice'}</h1>
            <p>{_escape_html(company.get("address"))}<br>{_escape_html(company.get("email"))}</p>
            <h2>Invoice #{_escape_html(meta.get("invoice_number"))}</h2>
            <p>
              <strong>Bill to:</strong> {_escape_html(meta.get("client_name"))}<br>
              {_escape_html(meta.get("client_address"))}
            </p>
            <p>Issued: {_escape_html(meta.get("issue_date"))}<br>Due: {_escape_html(meta.get("due_date"))}</p>
            {table_html}
            {totals_html}
            {notes_html}
          </body>
        </html>
        """
