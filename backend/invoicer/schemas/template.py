from pydantic import BaseModel, Field
from typing import Optional


class CustomizationRequest(BaseModel):
    company_name: str = Field(..., min_length=1)
    company_branding: str = Field(..., min_length=1)
    late_fee_conditions: str = Field(..., min_length=1)
    # data:<mimetype>;base64,<encoded_data>
    company_logo: Optional[str] = Field(None, pattern=r"^data:[\w/+.-]+;base64,")


class GeneratedTemplate(BaseModel):
    invoice_template: str


class TemplateResponse(BaseModel):
    success: bool
    data: Optional[GeneratedTemplate] = None
    error: Optional[str] = None


class SavedTemplateRequest(BaseModel):
    invoice_template: str = Field(..., min_length=1)
