"""Company profile schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BankDetails(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_holder_name: Optional[str] = None
    ifsc_code: Optional[str] = None
    branch_name: Optional[str] = None
    branch_code: Optional[str] = None


class CompanyInfoRead(BaseModel):
    id: int
    user_id: int
    company_name: str
    company_address: str
    company_logo_url: Optional[str] = None
    bank_details: BankDetails
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanyInfoUpdate(BaseModel):
    company_name: Optional[str] = None
    company_address: Optional[str] = None
    company_logo_url: Optional[str] = None
    bank_details: Optional[BankDetails] = None
