from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.orm import Session
import logging

from invoicer.database import get_db
from invoicer.dependencies import get_current_user, get_storage_service
from invoicer.models.company_profile import CompanyProfile
from invoicer.schemas.company_profile import CompanyProfileResponse, CompanyProfileUpdate
from invoicer.services import company_profile_service
from invoicer.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/company-profile", tags=["company profile"])


def _profile_response(profile: CompanyProfile) -> CompanyProfileResponse:
    return CompanyProfileResponse(
        company_name=profile.company_name,
        email=profile.email,
        phone=profile.phone,
        address=profile.address,
        logo_url=profile.logo_url,
        has_template=bool(profile.invoice_template),
        updated_at=profile.updated_at
    )


@router.get("", response_model=CompanyProfileResponse)
def get_company_profile(db: Session = Depends(get_db), user_id: str = Depends(get_current_user)):
    profile = company_profile_service.require_profile(db, user_id)
    return _profile_response(profile)


@router.put("", response_model=CompanyProfileResponse)
def save_company_profile(
    payload: CompanyProfileUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user)
):
    profile = company_profile_service.save_profile(db, user_id, payload)
    return _profile_response(profile)


@router.post("/logo", response_model=CompanyProfileResponse)
async def upload_logo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service)
):
    """Upload a company logo and link it from the profile"""
    # Profile must exist before a logo can be attached
    company_profile_service.require_profile(db, user_id)

    file_content = await file.read()
    try:
        storage_key = storage.upload_logo(file_content, file.filename or "logo", user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    profile = company_profile_service.set_logo_url(db, user_id, f"/api/company-profile/logo/{storage_key}")
    logger.info(f"Stored logo for user {user_id} at {storage_key}")
    return _profile_response(profile)


@router.get("/logo/{storage_key:path}")
def get_logo(
    storage_key: str,
    user_id: str = Depends(get_current_user),
    storage: StorageService = Depends(get_storage_service)
):
    if not storage_key.startswith(f"logos/{user_id}/"):
        raise HTTPException(status_code=404, detail="File not found")
    try:
        content = storage.download(storage_key)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="File not found")
    return Response(content=content, media_type=storage.get_content_type(storage_key))
