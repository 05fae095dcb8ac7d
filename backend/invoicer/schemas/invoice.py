from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from invoicer.engine.columns import ColumnBehavior, InsertPosition
from invoicer.schemas.preview import InvoiceViewResponse


class CustomColumnSchema(BaseModel):
    name: str = Field(..., min_length=1)
    type: ColumnBehavior = ColumnBehavior.NEUTRAL

    class Config:
        use_enum_values = True


class CustomFieldSchema(BaseModel):
    name: str
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, value):
        # Numeric values typed into a custom column arrive as numbers
        return "" if value is None else str(value)


class LineItemSchema(BaseModel):
    description: str = ""
    quantity: Decimal = Field(Decimal("1"), ge=0)
    unit_price: Decimal = Field(Decimal("0"), ge=0)
    custom_fields: List[CustomFieldSchema] = []


class InvoiceDraftRequest(BaseModel):
    """Unsaved invoice state sent by the editor for the live preview"""
    currency: Optional[str] = None
    items: List[LineItemSchema] = []
    custom_columns: List[CustomColumnSchema] = []
    discount: Decimal = Field(Decimal("0"), ge=0)
    total_paid: Decimal = Field(Decimal("0"), ge=0)


class InvoiceCreate(BaseModel):
    client_id: int
    invoice_number: str = Field(..., min_length=1)
    issue_date: date
    due_date: date
    currency: Optional[str] = None
    items: List[LineItemSchema] = Field(..., min_length=1)
    custom_columns: List[CustomColumnSchema] = []
    discount: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None

    @field_validator("items")
    @classmethod
    def require_descriptions(cls, items: List[LineItemSchema]) -> List[LineItemSchema]:
        for item in items:
            if not item.description.strip():
                raise ValueError("Item description is required.")
        return items


class InvoiceUpdate(BaseModel):
    client_id: Optional[int] = None
    invoice_number: Optional[str] = Field(None, min_length=1)
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: Optional[str] = None
    items: Optional[List[LineItemSchema]] = None
    custom_columns: Optional[List[CustomColumnSchema]] = None
    discount: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class TotalsResponse(BaseModel):
    subtotal: Decimal
    discount: Decimal
    total_amount: Decimal
    total_paid: Decimal
    amount_due: Decimal
    line_totals: List[Decimal] = []


class InvoiceListResponse(BaseModel):
    id: int
    invoice_number: str
    client_id: Optional[int]
    client_name: str
    issue_date: date
    due_date: date
    currency: str
    total_amount: Decimal
    total_paid: Decimal
    amount_due: Decimal
    formatted_total: str
    status: str
    created_at: Optional[datetime] = None


class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    client_id: Optional[int]
    client_name: str
    client_email: Optional[str] = None
    client_phone_number: Optional[str] = None
    client_address: Optional[str] = None
    issue_date: date
    due_date: date
    currency: str
    items: List[LineItemSchema] = []
    custom_columns: List[CustomColumnSchema] = []
    discount: Decimal
    total_paid: Decimal
    total_amount: Decimal
    notes: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InvoiceDetailResponse(InvoiceResponse):
    totals: TotalsResponse
    view: InvoiceViewResponse


class InvoicePreviewResponse(BaseModel):
    totals: TotalsResponse
    view: InvoiceViewResponse


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)


class PaymentResponse(BaseModel):
    invoice_id: int
    amount: Decimal
    total_paid: Decimal
    amount_due: Decimal
    message: str


class ColumnCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: ColumnBehavior = ColumnBehavior.NEUTRAL
    reference_column: Optional[str] = None
    position: InsertPosition = InsertPosition.AFTER


class ColumnEditResponse(BaseModel):
    index: int
    columns: List[str]
    custom_columns: List[CustomColumnSchema]
    items: List[LineItemSchema]
    totals: TotalsResponse
