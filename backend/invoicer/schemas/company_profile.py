from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class CompanyProfileUpdate(BaseModel):
    company_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None


class CompanyProfileResponse(BaseModel):
    company_name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    logo_url: Optional[str]
    has_template: bool = False
    updated_at: Optional[datetime] = None
