from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class EnquiryCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(min_length=5, max_length=32)
    company: Optional[str] = None
    number_of_employees: Optional[str] = None
    city: Optional[str] = None
    seats: Optional[str] = None
    workspace_name: Optional[str] = None
    workspace_type: Optional[str] = None
    message: Optional[str] = None


class RequirementCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(min_length=5, max_length=32)
    city: str = Field(min_length=1, max_length=128)
    seats: Optional[str] = None
    workspace_type: Optional[str] = None
    message: Optional[str] = None


class LeadCreated(BaseModel):
    success: bool = True
    id: str
