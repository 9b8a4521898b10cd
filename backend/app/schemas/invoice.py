"""Invoice schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class ServiceItemBase(BaseModel):
    description: str = ""
    hours: float = Field(default=0.0, ge=0)
    rate: float = Field(default=0.0, ge=0)


class ServiceItemCreate(ServiceItemBase):
    pass


class ServiceItemRead(ServiceItemBase):
    model_config = ConfigDict(from_attributes=True)

    total: float


class InvoiceBase(BaseModel):
    invoice_number: str = Field(min_length=1)
    date: str = Field(min_length=1)
    employee_name: str = Field(min_length=1)
    employee_id: str = Field(min_length=1)
    employee_email: EmailStr
    employee_address: str = Field(min_length=1)
    employee_mobile: str = Field(min_length=1)
    services: List[ServiceItemCreate]
    tax_rate: float = Field(ge=0)

    @field_validator("invoice_number", "date", "employee_name", "employee_id", "employee_address", "employee_mobile")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class InvoiceCreate(InvoiceBase):
    pass


class InvoiceUpdate(InvoiceBase):
    pass


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    invoice_number: str
    date: str
    employee_name: str
    employee_id: str
    employee_email: str
    employee_address: str
    employee_mobile: str
    services: List[ServiceItemRead]
    tax_rate: float

    subtotal: float
    tax_amount: float
    grand_total: float

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
