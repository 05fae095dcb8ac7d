from invoicer.engine.columns import (
    FIXED_COLUMNS,
    Column,
    ColumnBehavior,
    ColumnRegistry,
    InsertPosition,
)
from invoicer.engine.line_items import LineItem, evaluate, parse_number
from invoicer.engine.totals import InvoiceTotals, aggregate
from invoicer.engine.editor import InvoiceDraft
from invoicer.engine.formatting import format_currency

__all__ = [
    "FIXED_COLUMNS",
    "Column",
    "ColumnBehavior",
    "ColumnRegistry",
    "InsertPosition",
    "LineItem",
    "evaluate",
    "parse_number",
    "InvoiceTotals",
    "aggregate",
    "InvoiceDraft",
    "format_currency",
]
