from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from invoicer.config import Settings
from invoicer.database import get_db
from invoicer.dependencies import get_current_user, get_settings
from invoicer.routers.invoices import invoice_list_item
from invoicer.schemas.dashboard import DashboardResponse
from invoicer.services import invoice_service
from invoicer.services.dashboard_service import build_dashboard

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
    settings: Settings = Depends(get_settings)
):
    """Revenue, collected and outstanding totals plus the most recent invoices"""
    invoices = invoice_service.list_invoices(db, user_id, limit=10000)
    data = build_dashboard(invoices, recent_limit=settings.recent_invoice_limit, currency=settings.default_currency)
    data["recent_invoices"] = [invoice_list_item(invoice) for invoice in data["recent_invoices"]]
    return DashboardResponse(**data)
