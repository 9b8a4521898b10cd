"""Signup, login and company-profile operations."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from backend.app.core.errors import ErrorKind, ServiceResult
from backend.app.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from backend.app.models.company_info import CompanyInfo
from backend.app.models.user import User
from backend.app.schemas.auth import LoginResponse, SignupRequest, SignupResponse
from backend.app.schemas.company_info import BankDetails, CompanyInfoRead, CompanyInfoUpdate
from backend.app.services.file_storage import FileStorage

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
INVALID_CREDENTIALS = "Invalid email or password"

REQUIRED_SIGNUP_FIELDS = [
    ("email", "Email is required"),
    ("password", "Password is required"),
    ("name", "Name is required"),
    ("company_name", "Company name is required"),
    ("company_address", "Company address is required"),
    ("bank_name", "Bank name is required"),
    ("account_number", "Account number is required"),
    ("account_holder_name", "Account holder name is required"),
    ("ifsc_code", "IFSC code is required"),
]

REQUIRED_BANK_FIELDS = [
    ("bank_name", "Bank name"),
    ("account_number", "Account number"),
    ("account_holder_name", "Account holder name"),
    ("ifsc_code", "IFSC code"),
]

BANK_FIELDS = ("bank_name", "account_number", "account_holder_name", "ifsc_code", "branch_name", "branch_code")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def serialize_company_info(company: CompanyInfo) -> CompanyInfoRead:
    return CompanyInfoRead(
        id=company.id,
        user_id=company.user_id,
        company_name=company.company_name,
        company_address=company.company_address,
        company_logo_url=company.company_logo_url,
        bank_details=BankDetails.model_validate(company),
        created_at=company.created_at,
        updated_at=company.updated_at,
    )


def login(db: Session, email: Optional[str], password: Optional[str]) -> ServiceResult[LoginResponse]:
    if not email or not email.strip():
        return ServiceResult.failure(ErrorKind.VALIDATION, "Email is required")
    if not password or not password.strip():
        return ServiceResult.failure(ErrorKind.VALIDATION, "Password is required")

    user = db.query(User).filter(User.email == normalize_email(email)).first()
    # Same message for unknown email and wrong password
    if user is None or not user.hashed_password or not verify_password(password, user.hashed_password):
        return ServiceResult.failure(ErrorKind.AUTH, INVALID_CREDENTIALS)

    token = create_access_token(user_id=user.id, email=user.email)
    return ServiceResult.success(LoginResponse(access_token=token, user_id=user.id, email=user.email))


def signup(
    db: Session,
    request: SignupRequest,
    storage: FileStorage,
    logo_filename: Optional[str] = None,
    logo_content: Optional[bytes] = None,
) -> ServiceResult[SignupResponse]:
    errors = [message for field, message in REQUIRED_SIGNUP_FIELDS if not _clean(getattr(request, field))]
    if errors:
        return ServiceResult.failure(ErrorKind.VALIDATION, ", ".join(errors))
    if len(request.password) < MIN_PASSWORD_LENGTH:
        return ServiceResult.failure(
            ErrorKind.VALIDATION, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    email = normalize_email(request.email)
    if db.query(User).filter(User.email == email).first() is not None:
        return ServiceResult.failure(ErrorKind.VALIDATION, "Email already registered")

    user = User(email=email, name=request.name.strip(), hashed_password=get_password_hash(request.password))
    db.add(user)
    db.flush()

    logo_url = None
    if logo_content:
        try:
            logo_url = storage.store_upload(logo_filename, logo_content, user.id)
        except OSError:
            logger.warning("Failed to store company logo for user %s; continuing without logo", user.id, exc_info=True)

    company = CompanyInfo(
        user_id=user.id,
        company_name=request.company_name.strip(),
        company_address=request.company_address.strip(),
        company_logo_url=logo_url,
        **{field: _clean(getattr(request, field)) for field in BANK_FIELDS},
    )
    db.add(company)
    db.commit()
    db.refresh(user)
    db.refresh(company)
    logger.info("Registered user %s with company %s", user.id, company.id)

    token = create_access_token(user_id=user.id, email=user.email)
    return ServiceResult.success(
        SignupResponse(
            access_token=token,
            user_id=user.id,
            email=user.email,
            company_info=serialize_company_info(company),
        )
    )


def validate_token(token: Optional[str]) -> bool:
    if not token:
        return False
    try:
        payload = decode_access_token(token)
    except ValueError:
        return False
    return payload.get("sub") is not None


def get_company_info(db: Session, user_id: int) -> ServiceResult[CompanyInfoRead]:
    company = db.query(CompanyInfo).filter(CompanyInfo.user_id == user_id).first()
    if company is None:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Company information not found for this user")
    return ServiceResult.success(serialize_company_info(company))


def update_company_info(db: Session, user_id: int, payload: CompanyInfoUpdate) -> ServiceResult[CompanyInfoRead]:
    company = db.query(CompanyInfo).filter(CompanyInfo.user_id == user_id).first()
    if company is None:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Company information not found for this user")

    for field in ("company_name", "company_address"):
        value = getattr(payload, field)
        if value is not None:
            if not value.strip():
                return ServiceResult.failure(ErrorKind.VALIDATION, f"{field.replace('_', ' ').capitalize()} cannot be blank")
            setattr(company, field, value.strip())
    if payload.company_logo_url is not None:
        company.company_logo_url = _clean(payload.company_logo_url)
    if payload.bank_details is not None:
        changes = payload.bank_details.model_dump(exclude_unset=True)
        for field, label in REQUIRED_BANK_FIELDS:
            if field in changes and not _clean(changes[field]):
                return ServiceResult.failure(ErrorKind.VALIDATION, f"{label} cannot be blank")
        for field, value in changes.items():
            setattr(company, field, _clean(value))

    db.commit()
    db.refresh(company)
    return ServiceResult.success(serialize_company_info(company))
