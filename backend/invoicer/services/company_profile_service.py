import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoicer.exceptions import PersistenceError, RecordNotFoundError
from invoicer.models.company_profile import CompanyProfile
from invoicer.schemas.company_profile import CompanyProfileUpdate
from invoicer.services.store import commit

logger = logging.getLogger(__name__)

PROFILE_PATH = "companyProfile/profile"


def get_profile(db: Session, owner_id: str) -> Optional[CompanyProfile]:
    try:
        return db.query(CompanyProfile).filter(CompanyProfile.owner_id == owner_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Failed to read company profile: {e}")
        raise PersistenceError("Failed to load company profile.", operation="get", path=PROFILE_PATH) from e


def require_profile(db: Session, owner_id: str) -> CompanyProfile:
    profile = get_profile(db, owner_id)
    if profile is None:
        raise RecordNotFoundError("Company profile not found", operation="get", path=PROFILE_PATH)
    return profile


def save_profile(db: Session, owner_id: str, payload: CompanyProfileUpdate) -> CompanyProfile:
    """Create or replace the user's company profile"""
    profile = get_profile(db, owner_id)
    if profile is None:
        profile = CompanyProfile(owner_id=owner_id)
        db.add(profile)

    data = payload.model_dump()
    if data.get("logo_url") is None:
        # Keep an uploaded logo when the form does not send one
        data.pop("logo_url")
    for key, value in data.items():
        setattr(profile, key, value)

    commit(db, "write", PROFILE_PATH, "Failed to save company profile.")
    db.refresh(profile)
    logger.info(f"Saved company profile for user {owner_id}")
    return profile


def set_logo_url(db: Session, owner_id: str, logo_url: str) -> CompanyProfile:
    profile = require_profile(db, owner_id)
    profile.logo_url = logo_url
    commit(db, "update", PROFILE_PATH, "Failed to save company logo.")
    db.refresh(profile)
    return profile


def set_invoice_template(db: Session, owner_id: str, template: Optional[str]) -> CompanyProfile:
    profile = require_profile(db, owner_id)
    profile.invoice_template = template
    commit(db, "update", PROFILE_PATH, "Failed to save invoice template.")
    db.refresh(profile)
    return profile
