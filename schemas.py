"""
Database Schemas for the Marketing Site Backend

Collections in MongoDB and the models describing them:
- Inquiry -> "contact"
- PortfolioEntry -> "client" (caller-supplied fields, stored as-is)
- AdminAccount -> "admin"

Request models keep every field optional so handlers can report missing
fields with the API's own error shape. Numbers sent for text fields are
stored as their string form.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

InquiryStatus = Literal["new", "contacted", "completed"]


class Inquiry(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    phone: Optional[str] = None
    service: Optional[str] = None
    message: str = Field(..., min_length=1)
    submittedAt: datetime
    status: InquiryStatus = Field("new", description="new, contacted or completed")


class AdminAccount(BaseModel):
    username: str = Field(..., description="Unique username")
    passwordHash: str = Field(..., description="Salted one-way password hash")


# ------------------------------
# Request bodies
# ------------------------------

class InquiryCreate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    message: Optional[str] = None


class InquiryStatusUpdate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    # Not restricted to InquiryStatus; any value is stored as given.
    status: Optional[str] = None


class AdminCredentials(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    username: Optional[str] = None
    password: Optional[str] = None
