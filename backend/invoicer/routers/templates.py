from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from invoicer.database import get_db
from invoicer.dependencies import get_current_user, get_template_service
from invoicer.exceptions import TemplateGenerationError
from invoicer.schemas.template import (
    CustomizationRequest,
    GeneratedTemplate,
    SavedTemplateRequest,
    TemplateResponse,
)
from invoicer.services import company_profile_service
from invoicer.services.template_service import TemplateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.post("/generate", response_model=TemplateResponse)
async def generate_template(
    payload: CustomizationRequest,
    user_id: str = Depends(get_current_user),
    template_service: TemplateService = Depends(get_template_service)
):
    """Generate a branded HTML invoice template with AI"""
    try:
        template = await template_service.generate(payload)
    except TemplateGenerationError as e:
        logger.error(f"Template generation failed for user {user_id}: {e}")
        return TemplateResponse(success=False, error="Failed to generate invoice template.")
    return TemplateResponse(success=True, data=GeneratedTemplate(invoice_template=template))


@router.get("/current", response_model=GeneratedTemplate)
def get_current_template(db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    profile = company_profile_service.require_profile(db, user_id)
    return GeneratedTemplate(invoice_template=profile.invoice_template or "")


@router.put("/current", response_model=GeneratedTemplate)
def save_current_template(
    payload: SavedTemplateRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    """Use a generated template for rendering this user's invoices"""
    profile = company_profile_service.set_invoice_template(db, user_id, payload.invoice_template)
    return GeneratedTemplate(invoice_template=profile.invoice_template)


@router.delete("/current")
def clear_current_template(db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    company_profile_service.set_invoice_template(db, user_id, None)
    return {"message": "Invoice template cleared"}
