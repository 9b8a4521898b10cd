"""Invoice persistence and derived totals."""

from dataclasses import dataclass
from typing import Iterable, List

from sqlalchemy.orm import Session

from backend.app.core.errors import ErrorKind, ServiceResult
from backend.app.models.invoice import Invoice
from backend.app.models.service_item import ServiceItem
from backend.app.schemas.invoice import InvoiceCreate, InvoiceRead, InvoiceUpdate, ServiceItemRead


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax_amount: float
    grand_total: float


def calculate_totals(items: Iterable, tax_rate: float | None) -> InvoiceTotals:
    """Subtotal is the sum of hours x rate; tax is a percentage of the subtotal."""
    subtotal = sum((item.hours or 0.0) * (item.rate or 0.0) for item in items)
    tax_amount = subtotal * (tax_rate or 0.0) / 100
    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, grand_total=subtotal + tax_amount)


def serialize_invoice(invoice: Invoice) -> InvoiceRead:
    totals = calculate_totals(invoice.services, invoice.tax_rate)
    return InvoiceRead(
        id=invoice.id,
        owner_id=invoice.owner_id,
        invoice_number=invoice.invoice_number,
        date=invoice.date,
        employee_name=invoice.employee_name,
        employee_id=invoice.employee_id,
        employee_email=invoice.employee_email,
        employee_address=invoice.employee_address,
        employee_mobile=invoice.employee_mobile,
        services=[ServiceItemRead.model_validate(item) for item in invoice.services],
        tax_rate=invoice.tax_rate,
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        grand_total=totals.grand_total,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )


def _not_found(invoice_id: int) -> ServiceResult:
    return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Invoice not found with id: {invoice_id}")


def _apply_payload(invoice: Invoice, payload: InvoiceCreate | InvoiceUpdate) -> None:
    invoice.invoice_number = payload.invoice_number
    invoice.date = payload.date
    invoice.employee_name = payload.employee_name
    invoice.employee_id = payload.employee_id
    invoice.employee_email = str(payload.employee_email)
    invoice.employee_address = payload.employee_address
    invoice.employee_mobile = payload.employee_mobile
    invoice.tax_rate = payload.tax_rate
    invoice.services = [
        ServiceItem(position=index, description=item.description, hours=item.hours, rate=item.rate)
        for index, item in enumerate(payload.services)
    ]


def _owned_invoice(db: Session, invoice_id: int, owner_id: int) -> Invoice | None:
    return db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.owner_id == owner_id).first()


def create_invoice(db: Session, owner_id: int, payload: InvoiceCreate) -> ServiceResult[InvoiceRead]:
    invoice = Invoice(owner_id=owner_id)
    _apply_payload(invoice, payload)
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return ServiceResult.success(serialize_invoice(invoice))


def update_invoice(db: Session, owner_id: int, invoice_id: int, payload: InvoiceUpdate) -> ServiceResult[InvoiceRead]:
    invoice = _owned_invoice(db, invoice_id, owner_id)
    if invoice is None:
        return _not_found(invoice_id)
    _apply_payload(invoice, payload)
    db.commit()
    db.refresh(invoice)
    return ServiceResult.success(serialize_invoice(invoice))


def delete_invoice(db: Session, owner_id: int, invoice_id: int) -> ServiceResult[int]:
    invoice = _owned_invoice(db, invoice_id, owner_id)
    if invoice is None:
        return _not_found(invoice_id)
    db.delete(invoice)
    db.commit()
    return ServiceResult.success(invoice_id)


def get_invoice(db: Session, owner_id: int, invoice_id: int) -> ServiceResult[InvoiceRead]:
    invoice = _owned_invoice(db, invoice_id, owner_id)
    if invoice is None:
        return _not_found(invoice_id)
    return ServiceResult.success(serialize_invoice(invoice))


def list_invoices(db: Session, owner_id: int, employee_id: str | None = None) -> List[InvoiceRead]:
    query = db.query(Invoice).filter(Invoice.owner_id == owner_id)
    if employee_id is not None:
        query = query.filter(Invoice.employee_id == employee_id)
    invoices = query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()
    return [serialize_invoice(invoice) for invoice in invoices]
