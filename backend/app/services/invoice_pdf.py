"""Render a single invoice as an A4 PDF with reportlab."""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from backend.app.schemas.company_info import CompanyInfoRead
from backend.app.schemas.invoice import InvoiceRead

logger = logging.getLogger(__name__)

W, H = A4
MARGIN = 14 * mm
CONTENT_W = W - 2 * MARGIN
ROW_H = 7 * mm
BOTTOM_LIMIT = 30 * mm

HEADER_FILL = HexColor("#F8F9FA")
RULE = HexColor("#DDDDDD")
TEXT = HexColor("#2C3E50")

# x offsets of the right edge of the numeric columns
COL_HOURS = MARGIN + CONTENT_W * 0.62
COL_RATE = MARGIN + CONTENT_W * 0.80
COL_TOTAL = MARGIN + CONTENT_W


class PdfRenderError(Exception):
    pass


def format_invoice_date(value: str) -> str:
    """``2024-03-05`` -> ``March 05, 2024``; anything unparseable is returned as is."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").strftime("%B %d, %Y")
    except (TypeError, ValueError):
        return value


def format_amount(value: float) -> str:
    return f"{value:,.2f}"


class InvoicePdf:
    def __init__(self, invoice: InvoiceRead, company: Optional[CompanyInfoRead] = None, upload_dir=None):
        self.invoice = invoice
        self.company = company
        self.upload_dir = Path(upload_dir) if upload_dir else None
        self.buffer = io.BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=A4, pageCompression=1)
        self.c.setTitle(f"Invoice {invoice.invoice_number}")
        self.y = H - 18 * mm

    def _text(self, x, y, value, size=10, bold=False, align="left"):
        self.c.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.c.setFillColor(TEXT)
        if align == "right":
            self.c.drawRightString(x, y, value)
        else:
            self.c.drawString(x, y, value)

    def _logo_path(self) -> Optional[Path]:
        if not self.company or not self.company.company_logo_url or self.upload_dir is None:
            return None
        path = self.upload_dir / Path(self.company.company_logo_url).name
        return path if path.is_file() else None

    def _draw_logo(self, logo: Path, top: float) -> None:
        try:
            reader = ImageReader(str(logo))
            img_w, img_h = reader.getSize()
            logo_w = 50 * mm
            logo_h = logo_w * img_h / img_w
            self.c.drawImage(reader, MARGIN, top - logo_h, width=logo_w, height=logo_h, mask="auto")
        except (OSError, ValueError, ZeroDivisionError):
            logger.warning("Could not draw company logo %s; rendering without it", logo.name, exc_info=True)
            return
        self.y = top - logo_h - 4 * mm

    def draw_header(self):
        top = self.y
        logo = self._logo_path()
        if logo is not None:
            self._draw_logo(logo, top)

        name = self.company.company_name if self.company else ""
        if name:
            self._text(MARGIN, self.y, name, size=12, bold=True)
            self.y -= 5 * mm
        if self.company and self.company.company_address:
            for line in self.company.company_address.splitlines():
                self._text(MARGIN, self.y, line.strip(), size=9)
                self.y -= 4.5 * mm

        self._text(COL_TOTAL, top, f"Invoice #: {self.invoice.invoice_number}", size=11, bold=True, align="right")
        self._text(COL_TOTAL, top - 7 * mm, f"Date: {format_invoice_date(self.invoice.date)}", size=11, bold=True, align="right")
        self.y = min(self.y, top - 14 * mm) - 6 * mm

    def draw_bill_to(self):
        inv = self.invoice
        self._text(MARGIN, self.y, "Bill To", size=10, bold=True)
        self.y -= 5 * mm
        for line in (
            inv.employee_name,
            f"Employee ID: {inv.employee_id}",
            inv.employee_address,
            inv.employee_email,
            inv.employee_mobile,
        ):
            self._text(MARGIN, self.y, line, size=9)
            self.y -= 4.5 * mm
        self.y -= 4 * mm

    def draw_table_header(self):
        self.c.setFillColor(HEADER_FILL)
        self.c.setStrokeColor(RULE)
        self.c.rect(MARGIN, self.y - 2 * mm, CONTENT_W, ROW_H, fill=1, stroke=1)
        self._text(MARGIN + 2 * mm, self.y, "Description", bold=True)
        self._text(COL_HOURS, self.y, "Hours", bold=True, align="right")
        self._text(COL_RATE, self.y, "Rate", bold=True, align="right")
        self._text(COL_TOTAL - 2 * mm, self.y, "Total", bold=True, align="right")
        self.y -= ROW_H

    def _ensure_room(self, needed: float, repeat_header: bool = False):
        if self.y - needed < BOTTOM_LIMIT:
            self.c.showPage()
            self.y = H - 18 * mm
            if repeat_header:
                self.draw_table_header()

    def draw_items(self):
        self.draw_table_header()
        if not self.invoice.services:
            self._text(MARGIN + 2 * mm, self.y, "No services found", size=9)
            self.y -= ROW_H
        for item in self.invoice.services:
            self._ensure_room(ROW_H, repeat_header=True)
            self._text(MARGIN + 2 * mm, self.y, item.description[:70], size=9)
            self._text(COL_HOURS, self.y, f"{item.hours:g}", size=9, align="right")
            self._text(COL_RATE, self.y, format_amount(item.rate), size=9, align="right")
            self._text(COL_TOTAL - 2 * mm, self.y, format_amount(item.total), size=9, align="right")
            self.c.setStrokeColor(RULE)
            self.c.line(MARGIN, self.y - 2 * mm, MARGIN + CONTENT_W, self.y - 2 * mm)
            self.y -= ROW_H
        self.y -= 2 * mm

    def draw_totals(self):
        inv = self.invoice
        half_rate = inv.tax_rate / 2.0
        half_tax = inv.tax_amount / 2.0
        rows = [
            ("Subtotal", inv.subtotal, False),
            (f"CGST ({half_rate:g}%)", half_tax, False),
            (f"SGST ({half_rate:g}%)", half_tax, False),
            ("Grand Total", inv.grand_total, True),
        ]
        self._ensure_room(ROW_H * len(rows))
        for label, amount, bold in rows:
            self._text(COL_RATE, self.y, label, size=10, bold=bold, align="right")
            self._text(COL_TOTAL - 2 * mm, self.y, format_amount(amount), size=10, bold=bold, align="right")
            self.y -= ROW_H
        self.y -= 4 * mm

    def draw_bank_details(self):
        if not self.company:
            return
        bank = self.company.bank_details
        lines = [
            ("Bank", bank.bank_name),
            ("Account Name", bank.account_holder_name),
            ("Account Number", bank.account_number),
            ("IFSC Code", bank.ifsc_code),
            ("Branch", bank.branch_name),
            ("Branch Code", bank.branch_code),
        ]
        lines = [(label, value) for label, value in lines if value]
        if not lines:
            return
        self._ensure_room(5 * mm * (len(lines) + 1))
        self._text(MARGIN, self.y, "Payment Details", size=10, bold=True)
        self.y -= 5 * mm
        for label, value in lines:
            self._text(MARGIN, self.y, f"{label}: {value}", size=9)
            self.y -= 4.5 * mm

    def render(self) -> bytes:
        self.draw_header()
        self.draw_bill_to()
        self.draw_items()
        self.draw_totals()
        self.draw_bank_details()
        self.c.showPage()
        self.c.save()
        return self.buffer.getvalue()


def render_invoice_pdf(invoice: InvoiceRead, company: Optional[CompanyInfoRead] = None, upload_dir=None) -> bytes:
    try:
        return InvoicePdf(invoice, company=company, upload_dir=upload_dir).render()
    except Exception as exc:
        logger.exception("Failed to render PDF for invoice #%s", invoice.invoice_number)
        raise PdfRenderError(f"Failed to generate PDF for invoice #{invoice.invoice_number}") from exc
