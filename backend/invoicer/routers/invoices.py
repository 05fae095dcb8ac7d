from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from typing import List
import logging

from invoicer.config import Settings
from invoicer.database import get_db
from invoicer.dependencies import get_current_user, get_settings
from invoicer.engine import InvoiceDraft, format_currency
from invoicer.models.invoice import Invoice
from invoicer.schemas.invoice import (
    ColumnCreate,
    ColumnEditResponse,
    InvoiceCreate,
    InvoiceDetailResponse,
    InvoiceDraftRequest,
    InvoiceListResponse,
    InvoicePreviewResponse,
    InvoiceUpdate,
    PaymentCreate,
    PaymentResponse,
)
from invoicer.services import company_profile_service, invoice_service
from invoicer.services.preview_service import build_invoice_view, render_invoice_html

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _items_payload(draft: InvoiceDraft) -> list:
    return [
        {
            "description": item.description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "custom_fields": item.ordered_fields(draft.columns),
        }
        for item in draft.items
    ]


def invoice_list_item(invoice: Invoice) -> InvoiceListResponse:
    totals = invoice_service.draft_from_record(invoice).totals
    return InvoiceListResponse(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        client_id=invoice.client_id,
        client_name=invoice.client_name,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        currency=invoice.currency,
        total_amount=totals.total_amount,
        total_paid=totals.total_paid,
        amount_due=totals.amount_due,
        formatted_total=format_currency(totals.total_amount, invoice.currency),
        status=invoice_service.invoice_status(invoice),
        created_at=invoice.created_at
    )


def _detail_response(invoice: Invoice) -> InvoiceDetailResponse:
    draft = invoice_service.draft_from_record(invoice)
    return InvoiceDetailResponse(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        client_id=invoice.client_id,
        client_name=invoice.client_name,
        client_email=invoice.client_email,
        client_phone_number=invoice.client_phone_number,
        client_address=invoice.client_address,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        currency=invoice.currency,
        items=_items_payload(draft),
        custom_columns=draft.columns.to_list(),
        discount=draft.discount,
        total_paid=draft.total_paid,
        total_amount=invoice.total_amount,
        notes=invoice.notes,
        status=invoice_service.invoice_status(invoice),
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
        totals=draft.totals.to_dict(),
        view=build_invoice_view(draft)
    )


def _column_edit_response(index: int, draft: InvoiceDraft) -> ColumnEditResponse:
    return ColumnEditResponse(
        index=index,
        columns=draft.columns.all_columns(),
        custom_columns=draft.columns.to_list(),
        items=_items_payload(draft),
        totals=draft.totals.to_dict()
    )


@router.get("", response_model=List[InvoiceListResponse])
def list_invoices(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """List invoices, newest first, with recomputed amounts and status"""
    invoices = invoice_service.list_invoices(db, user_id, skip=skip, limit=limit)
    return [invoice_list_item(invoice) for invoice in invoices]


@router.post("", response_model=InvoiceDetailResponse, status_code=201)
def create_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
    settings: Settings = Depends(get_settings)
):
    """Create an invoice; its total is computed from the submitted items"""
    try:
        invoice = invoice_service.create_invoice(db, user_id, payload, default_currency=settings.default_currency)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _detail_response(invoice)


@router.post("/preview", response_model=InvoicePreviewResponse)
def preview_invoice(
    payload: InvoiceDraftRequest,
    user_id: str = Depends(get_current_user),
    settings: Settings = Depends(get_settings)
):
    """
    Live preview for the invoice editor.

    Computes totals and the formatted table for an unsaved draft. Nothing is
    stored.
    """
    try:
        draft = invoice_service.draft_from_request(payload, default_currency=settings.default_currency)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return InvoicePreviewResponse(totals=draft.totals.to_dict(), view=build_invoice_view(draft))


@router.get("/{invoice_id}", response_model=InvoiceDetailResponse)
def get_invoice(invoice_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    """Get invoice detail with totals and the rendered table"""
    invoice = invoice_service.get_invoice(db, user_id, invoice_id)
    return _detail_response(invoice)


@router.put("/{invoice_id}", response_model=InvoiceDetailResponse)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Update an invoice; the stored total is recomputed"""
    try:
        invoice = invoice_service.update_invoice(db, user_id, invoice_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _detail_response(invoice)


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    invoice_service.delete_invoice(db, user_id, invoice_id)
    return {"message": "Invoice deleted", "id": invoice_id}


@router.post("/{invoice_id}/payments", response_model=PaymentResponse)
def add_payment(
    invoice_id: int,
    payload: PaymentCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Record a payment against an invoice"""
    try:
        invoice = invoice_service.add_payment(db, user_id, invoice_id, payload.amount)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    totals = invoice_service.draft_from_record(invoice).totals
    return PaymentResponse(
        invoice_id=invoice.id,
        amount=payload.amount,
        total_paid=totals.total_paid,
        amount_due=totals.amount_due,
        message=f"{format_currency(payload.amount, invoice.currency)} has been added to invoice {invoice.invoice_number}."
    )


@router.post("/{invoice_id}/columns", response_model=ColumnEditResponse, status_code=201)
def add_column(
    invoice_id: int,
    payload: ColumnCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Insert a custom column relative to an existing column"""
    index, invoice, draft = invoice_service.add_column(db, user_id, invoice_id, payload)
    logger.info(f"Invoice {invoice_id}: added column '{payload.name}' ({payload.type.value}) at {index}")
    return _column_edit_response(index, draft)


@router.delete("/{invoice_id}/columns/{column_name}", response_model=ColumnEditResponse)
def remove_column(
    invoice_id: int,
    column_name: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Remove a custom column and its values from every line item"""
    index, invoice, draft = invoice_service.remove_column(db, user_id, invoice_id, column_name)
    logger.info(f"Invoice {invoice_id}: removed column '{column_name}' from {index}")
    return _column_edit_response(index, draft)


@router.get("/{invoice_id}/html", response_class=HTMLResponse)
def render_invoice(invoice_id: int, db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    """Render the invoice as HTML, using the saved AI template when there is one"""
    invoice = invoice_service.get_invoice(db, user_id, invoice_id)
    profile = company_profile_service.get_profile(db, user_id)

    company = None
    template = None
    if profile:
        company = {"company_name": profile.company_name, "address": profile.address, "email": profile.email}
        template = profile.invoice_template

    meta = {
        "invoice_number": invoice.invoice_number,
        "client_name": invoice.client_name,
        "client_address": invoice.client_address,
        "issue_date": invoice.issue_date.isoformat() if invoice.issue_date else None,
        "due_date": invoice.due_date.isoformat() if invoice.due_date else None,
        "notes": invoice.notes,
    }
    draft = invoice_service.draft_from_record(invoice)
    return HTMLResponse(content=render_invoice_html(draft, meta, company=company, template=template))
