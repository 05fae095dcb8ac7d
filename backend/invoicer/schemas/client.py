from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone_number: Optional[str] = None
    address: str = Field(..., min_length=1)


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    address: Optional[str] = Field(None, min_length=1)


class ClientResponse(BaseModel):
    id: int
    name: str
    email: str
    phone_number: Optional[str]
    address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
