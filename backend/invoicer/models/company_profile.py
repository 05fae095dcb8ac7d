from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.sql import func
from invoicer.database import Base


class CompanyProfile(Base):
    __tablename__ = "company_profiles"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, unique=True, index=True)  # One profile per user
    company_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    invoice_template = Column(Text, nullable=True)  # Chosen AI-generated HTML template
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
