from pydantic import BaseModel
from typing import List


class InvoiceViewRow(BaseModel):
    cells: List[str]
    total: str


class TotalsLine(BaseModel):
    label: str
    amount: str


class InvoiceViewResponse(BaseModel):
    """Table (fixed + custom columns + Total) and totals block, pre-formatted"""
    header: List[str]
    rows: List[InvoiceViewRow] = []
    totals: List[TotalsLine] = []
