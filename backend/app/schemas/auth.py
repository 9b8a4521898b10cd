"""Request and response payloads for the auth endpoints."""

from typing import Optional

from pydantic import BaseModel

from backend.app.schemas.company_info import CompanyInfoRead


class LoginRequest(BaseModel):
    """Payload for login attempts."""

    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    email: str


class SignupResponse(LoginResponse):
    company_info: Optional[CompanyInfoRead] = None


class TokenValidationRequest(BaseModel):
    token: Optional[str] = None


class TokenValidationResponse(BaseModel):
    valid: bool


class SignupRequest(BaseModel):
    """Signup form fields; required-field checks happen in the auth service."""

    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    company_name: Optional[str] = None
    company_address: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_holder_name: Optional[str] = None
    ifsc_code: Optional[str] = None
    branch_name: Optional[str] = None
    branch_code: Optional[str] = None
