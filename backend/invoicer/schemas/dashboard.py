from pydantic import BaseModel
from typing import List
from decimal import Decimal
from invoicer.schemas.invoice import InvoiceListResponse


class ChartPoint(BaseModel):
    name: str
    total: Decimal


class DashboardResponse(BaseModel):
    total_revenue: Decimal
    total_collected: Decimal
    total_outstanding: Decimal
    formatted_revenue: str
    formatted_collected: str
    formatted_outstanding: str
    chart_data: List[ChartPoint] = []
    recent_invoices: List[InvoiceListResponse] = []
