"""Signup, login, token validation and company-profile routes."""

import time
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from backend.app.core.errors import unwrap
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.services import get_file_storage
from backend.app.models.user import User
from backend.app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    SignupResponse,
    TokenValidationRequest,
    TokenValidationResponse,
)
from backend.app.schemas.company_info import CompanyInfoRead, CompanyInfoUpdate
from backend.app.services import auth as auth_service
from backend.app.services.file_storage import FileStorage

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    return unwrap(auth_service.login(db, credentials.email, credentials.password))


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    email: Optional[str] = Form(default=None),
    password: Optional[str] = Form(default=None),
    name: Optional[str] = Form(default=None),
    company_name: Optional[str] = Form(default=None),
    company_address: Optional[str] = Form(default=None),
    bank_name: Optional[str] = Form(default=None),
    account_number: Optional[str] = Form(default=None),
    account_holder_name: Optional[str] = Form(default=None),
    ifsc_code: Optional[str] = Form(default=None),
    branch_name: Optional[str] = Form(default=None),
    branch_code: Optional[str] = Form(default=None),
    company_logo: Optional[UploadFile] = File(default=None),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
):
    request = SignupRequest(
        email=email,
        password=password,
        name=name,
        company_name=company_name,
        company_address=company_address,
        bank_name=bank_name,
        account_number=account_number,
        account_holder_name=account_holder_name,
        ifsc_code=ifsc_code,
        branch_name=branch_name,
        branch_code=branch_code,
    )
    logo_filename = None
    logo_content = None
    if company_logo is not None:
        logo_filename = company_logo.filename
        logo_content = await company_logo.read()
    result = auth_service.signup(db, request, storage, logo_filename=logo_filename, logo_content=logo_content)
    return unwrap(result)


@router.get("/health")
def health():
    return {"status": "UP", "service": "Auth Service", "timestamp": int(time.time() * 1000)}


@router.get("/company-info", response_model=CompanyInfoRead)
def get_company_info(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return unwrap(auth_service.get_company_info(db, current_user.id))


@router.put("/company-info", response_model=CompanyInfoRead)
def update_company_info(
    payload: CompanyInfoUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(auth_service.update_company_info(db, current_user.id, payload))


@router.post("/validate", response_model=TokenValidationResponse)
def validate_token(payload: TokenValidationRequest):
    return TokenValidationResponse(valid=auth_service.validate_token(payload.token))
