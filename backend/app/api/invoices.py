"""Invoice CRUD, PDF download and email dispatch routes."""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from backend.app.core.errors import unwrap
from backend.app.db.session import get_db
from backend.app.dependencies.auth import get_current_user
from backend.app.dependencies.services import get_email_dispatcher, get_file_storage
from backend.app.models.user import User
from backend.app.schemas.invoice import InvoiceCreate, InvoiceRead, InvoiceUpdate
from backend.app.services import auth as auth_service
from backend.app.services import invoices as invoice_service
from backend.app.services.email_dispatch import (
    InvoiceEmailDispatcher,
    deliver_invoice_email,
    is_valid_email,
    safe_filename_part,
)
from backend.app.services.file_storage import FileStorage
from backend.app.services.invoice_pdf import PdfRenderError, render_invoice_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _company_for(db: Session, user: User):
    result = auth_service.get_company_info(db, user.id)
    return result.value if result.ok else None


@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice(payload: InvoiceCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    invoice = unwrap(invoice_service.create_invoice(db, current_user.id, payload))
    logger.info("Created invoice %s (#%s)", invoice.id, invoice.invoice_number)
    return invoice


@router.get("", response_model=List[InvoiceRead])
def list_invoices(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return invoice_service.list_invoices(db, current_user.id)


@router.get("/employee/{employee_id}", response_model=List[InvoiceRead])
def list_invoices_for_employee(
    employee_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return invoice_service.list_invoices(db, current_user.id, employee_id=employee_id)


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return unwrap(invoice_service.get_invoice(db, current_user.id, invoice_id))


@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return unwrap(invoice_service.update_invoice(db, current_user.id, invoice_id, payload))


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    unwrap(invoice_service.delete_invoice(db, current_user.id, invoice_id))
    logger.info("Deleted invoice %s", invoice_id)
    return {"deleted": True}


@router.get("/{invoice_id}/download")
def download_invoice_pdf(
    invoice_id: int,
    invoice_number: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_file_storage),
):
    invoice = unwrap(invoice_service.get_invoice(db, current_user.id, invoice_id))
    try:
        pdf_bytes = render_invoice_pdf(invoice, company=_company_for(db, current_user), upload_dir=storage.upload_dir)
    except PdfRenderError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    filename = f"Invoice_{safe_filename_part(invoice_number or invoice.invoice_number)}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{invoice_id}/send-email", status_code=status.HTTP_202_ACCEPTED)
async def send_invoice_email(
    invoice_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    dispatcher: InvoiceEmailDispatcher = Depends(get_email_dispatcher),
):
    invoice = unwrap(invoice_service.get_invoice(db, current_user.id, invoice_id))
    if not is_valid_email(invoice.employee_email):
        raise HTTPException(status_code=400, detail=f"Invalid recipient email: {invoice.employee_email}")

    # A client-rendered PDF may be posted as the raw body; otherwise render it here
    pdf_bytes = await request.body()
    company = _company_for(db, current_user)
    background_tasks.add_task(deliver_invoice_email, dispatcher, invoice, company, pdf_bytes or None)
    source = "client" if pdf_bytes else "server"
    logger.info("Queued email for invoice #%s (%s-rendered PDF)", invoice.invoice_number, source)
    return {"status": "queued", "invoice_id": invoice.id, "recipient": invoice.employee_email, "pdf_source": source}
