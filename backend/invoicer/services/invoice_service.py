"""
Invoice persistence and editing workflows.

Each workflow loads the stored invoice into an InvoiceDraft, applies the
change through the engine, and writes the draft back with a freshly computed
total. The stored total is never taken from the caller.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicer.engine import ColumnRegistry, InvoiceDraft, LineItem
from invoicer.engine.columns import Column
from invoicer.exceptions import PersistenceError
from invoicer.models.client import Client
from invoicer.models.invoice import Invoice
from invoicer.schemas.invoice import (
    ColumnCreate,
    InvoiceCreate,
    InvoiceDraftRequest,
    InvoiceUpdate,
    LineItemSchema,
    CustomColumnSchema,
)
from invoicer.services.store import commit, fetch_owned

logger = logging.getLogger(__name__)

STATUS_OVERDUE = "Overdue"
STATUS_PENDING = "Pending"


def _item_from_schema(item: LineItemSchema) -> LineItem:
    return LineItem(
        description=item.description,
        quantity=item.quantity,
        unit_price=item.unit_price,
        custom_fields={field.name: field.value for field in item.custom_fields},
    )


def _columns_from_schema(columns: List[CustomColumnSchema]) -> ColumnRegistry:
    return ColumnRegistry(Column(name=column.name, behavior=column.type) for column in columns)


def draft_from_request(payload: InvoiceDraftRequest, default_currency: str = "USD") -> InvoiceDraft:
    return InvoiceDraft(
        items=[_item_from_schema(item) for item in payload.items],
        columns=_columns_from_schema(payload.custom_columns),
        discount=payload.discount,
        total_paid=payload.total_paid,
        currency=payload.currency or default_currency,
    )


def draft_from_record(invoice: Invoice) -> InvoiceDraft:
    return InvoiceDraft(
        items=[LineItem.from_dict(item) for item in invoice.items or []],
        columns=ColumnRegistry.from_list(invoice.custom_columns),
        discount=invoice.discount or 0,
        total_paid=invoice.total_paid or 0,
        currency=invoice.currency or "USD",
    )


def apply_draft(invoice: Invoice, draft: InvoiceDraft):
    """Write the draft's state and its recomputed total onto the record"""
    invoice.items = draft.items_to_list()
    invoice.custom_columns = draft.columns.to_list()
    invoice.discount = str(draft.discount)
    invoice.total_paid = str(draft.total_paid)
    invoice.currency = draft.currency
    invoice.total_amount = str(draft.totals.total_amount)


def invoice_status(invoice: Invoice, today: Optional[date] = None) -> str:
    today = today or date.today()
    if invoice.due_date and invoice.due_date < today:
        return STATUS_OVERDUE
    return STATUS_PENDING


def _snapshot_client(invoice: Invoice, client: Client):
    invoice.client_id = client.id
    invoice.client_name = client.name
    invoice.client_email = client.email
    invoice.client_phone_number = client.phone_number
    invoice.client_address = client.address


def list_invoices(db: Session, owner_id: str, skip: int = 0, limit: int = 100) -> List[Invoice]:
    try:
        return (
            db.query(Invoice)
            .filter(Invoice.owner_id == owner_id)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to list invoices: {e}")
        raise PersistenceError("Failed to load invoices.", operation="list", path="invoices") from e


def get_invoice(db: Session, owner_id: str, invoice_id: int) -> Invoice:
    return fetch_owned(db, Invoice, invoice_id, owner_id, path=f"invoices/{invoice_id}")


def create_invoice(db: Session, owner_id: str, payload: InvoiceCreate, default_currency: str = "USD") -> Invoice:
    client = fetch_owned(db, Client, payload.client_id, owner_id, path=f"clients/{payload.client_id}")

    draft = InvoiceDraft(
        items=[_item_from_schema(item) for item in payload.items],
        columns=_columns_from_schema(payload.custom_columns),
        discount=payload.discount,
        currency=payload.currency or default_currency,
    )

    invoice = Invoice(
        owner_id=owner_id,
        invoice_number=payload.invoice_number,
        issue_date=payload.issue_date,
        due_date=payload.due_date,
        notes=payload.notes,
    )
    _snapshot_client(invoice, client)
    apply_draft(invoice, draft)

    db.add(invoice)
    commit(db, "create", "invoices", "Failed to save invoice.")
    db.refresh(invoice)
    logger.info(f"Created invoice {invoice.invoice_number} (id={invoice.id}) total={invoice.total_amount}")
    return invoice


def update_invoice(db: Session, owner_id: str, invoice_id: int, payload: InvoiceUpdate) -> Invoice:
    invoice = get_invoice(db, owner_id, invoice_id)
    changes = payload.model_dump(exclude_unset=True)

    # Build the new draft first so a rejected column list leaves the record untouched
    draft = draft_from_record(invoice)
    if payload.custom_columns is not None:
        draft.columns = _columns_from_schema(payload.custom_columns)
    if payload.items is not None:
        draft.items = [_item_from_schema(item) for item in payload.items]
    draft.repair_items()
    if payload.discount is not None:
        draft.set_discount(payload.discount)
    if payload.currency:
        draft.currency = payload.currency

    if changes.get("client_id") is not None and changes["client_id"] != invoice.client_id:
        client = fetch_owned(db, Client, changes["client_id"], owner_id, path=f"clients/{changes['client_id']}")
        _snapshot_client(invoice, client)

    for key in ("invoice_number", "issue_date", "due_date", "notes"):
        if key in changes and changes[key] is not None:
            setattr(invoice, key, changes[key])

    apply_draft(invoice, draft)
    commit(db, "update", f"invoices/{invoice_id}", "Failed to save invoice.")
    db.refresh(invoice)
    logger.info(f"Updated invoice {invoice_id}, total recomputed to {invoice.total_amount}")
    return invoice


def delete_invoice(db: Session, owner_id: str, invoice_id: int):
    invoice = get_invoice(db, owner_id, invoice_id)
    db.delete(invoice)
    commit(db, "delete", f"invoices/{invoice_id}", "Failed to delete invoice.")
    logger.info(f"Deleted invoice {invoice_id}")


def add_payment(db: Session, owner_id: str, invoice_id: int, amount) -> Invoice:
    invoice = get_invoice(db, owner_id, invoice_id)
    draft = draft_from_record(invoice)
    draft.add_payment(amount)
    apply_draft(invoice, draft)
    commit(db, "update", f"invoices/{invoice_id}", "Failed to record payment.")
    db.refresh(invoice)
    logger.info(f"Recorded payment of {amount} on invoice {invoice_id}; total paid {invoice.total_paid}")
    return invoice


def add_column(db: Session, owner_id: str, invoice_id: int, payload: ColumnCreate):
    """Insert a custom column on a stored invoice. Returns (index, invoice, draft)."""
    invoice = get_invoice(db, owner_id, invoice_id)
    draft = draft_from_record(invoice)
    index = draft.add_column(payload.name, payload.type, payload.reference_column, payload.position)
    apply_draft(invoice, draft)
    commit(db, "update", f"invoices/{invoice_id}", "Failed to save invoice.")
    db.refresh(invoice)
    return index, invoice, draft


def remove_column(db: Session, owner_id: str, invoice_id: int, name: str):
    """Remove a custom column from a stored invoice. Returns (index, invoice, draft)."""
    invoice = get_invoice(db, owner_id, invoice_id)
    draft = draft_from_record(invoice)
    index = draft.remove_column(name)
    apply_draft(invoice, draft)
    commit(db, "update", f"invoices/{invoice_id}", "Failed to save invoice.")
    db.refresh(invoice)
    return index, invoice, draft
