"""HTML bodies for invoice emails."""

from html import escape
from typing import Optional

from backend.app.schemas.company_info import CompanyInfoRead
from backend.app.schemas.invoice import InvoiceRead

DEFAULT_RECIPIENT_NAME = "Valued Customer"

CELL = "padding: 10px; border: 1px solid #ddd;"
CELL_RIGHT = CELL + " text-align: right;"
TOTAL_CELL = "padding: 12px; border: 1px solid #ddd; text-align: right;"


def recipient_name(invoice: InvoiceRead) -> str:
    name = (invoice.employee_name or "").strip()
    return name or DEFAULT_RECIPIENT_NAME


def _money(value: float) -> str:
    return f"{value:,.2f}"


def _service_rows(invoice: InvoiceRead) -> str:
    if not invoice.services:
        return "<tr><td colspan='4' style='padding: 10px; text-align: center;'>No services found</td></tr>"
    rows = []
    for item in invoice.services:
        rows.append(
            "<tr>"
            f"<td style='{CELL}'>{escape(item.description or '')}</td>"
            f"<td style='{CELL_RIGHT}'>{item.hours:g}</td>"
            f"<td style='{CELL_RIGHT}'>{_money(item.rate)}</td>"
            f"<td style='{CELL_RIGHT}'>{_money(item.total)}</td>"
            "</tr>"
        )
    return "".join(rows)


def _total_row(label: str, amount: float, background: str = "#f8f9fa") -> str:
    return (
        f"<tr style='font-weight: bold; background-color: {background};'>"
        f"<td colspan='3' style='{TOTAL_CELL}'>{escape(label)}</td>"
        f"<td style='{TOTAL_CELL}'>{_money(amount)}</td>"
        "</tr>"
    )


def _payment_instructions(invoice: InvoiceRead, company: Optional[CompanyInfoRead]) -> str:
    bank = company.bank_details if company else None
    lines = [
        ("Bank", bank.bank_name if bank else None),
        ("Account Name", bank.account_holder_name if bank else None),
        ("Account Number", bank.account_number if bank else None),
        ("IFSC Code", bank.ifsc_code if bank else None),
    ]
    details = "<br>".join(f"{label}: {escape(value)}" for label, value in lines if value)
    if details:
        details += "<br>"
    return (
        "<div style='margin-top: 20px; padding: 15px; background-color: #f8f9fa; border-left: 4px solid #3498db;'>"
        "<h3 style='margin-top: 0; color: #2c3e50;'>Payment Instructions</h3>"
        "<p>Please make the payment to the following account details:</p>"
        f"<p>{details}Reference: Invoice #{escape(invoice.invoice_number)}</p>"
        "</div>"
    )


def build_invoice_body(invoice: InvoiceRead, company: Optional[CompanyInfoRead] = None) -> str:
    totals = _total_row("Subtotal:", invoice.subtotal)
    if invoice.tax_rate and invoice.tax_rate > 0:
        totals += _total_row(f"Tax ({invoice.tax_rate:g}%):", invoice.tax_amount)
        totals += _total_row("Grand Total:", invoice.grand_total, background="#f0f0f0")
    sign_off = escape(company.company_name) if company else "Thank you for your business!"
    return (
        "<html><head><meta charset=\"UTF-8\"></head><body>"
        "<div style='max-width: 600px; margin: 0 auto; padding: 20px; font-family: Arial, sans-serif;'>"
        "<h2 style='color: #2c3e50;'>Invoice Details</h2>"
        f"<p>Dear {escape(recipient_name(invoice))},</p>"
        "<p>Please find your invoice attached. A summary is included below:</p>"
        "<table style='width: 100%; border-collapse: collapse; margin: 15px 0;'>"
        "<tr style='background-color: #f8f9fa;'>"
        "<th style='padding: 12px; border: 1px solid #ddd; text-align: left;'>Description</th>"
        "<th style='padding: 12px; border: 1px solid #ddd; text-align: right;'>Hours</th>"
        "<th style='padding: 12px; border: 1px solid #ddd; text-align: right;'>Rate</th>"
        "<th style='padding: 12px; border: 1px solid #ddd; text-align: right;'>Total</th>"
        "</tr>"
        f"{_service_rows(invoice)}{totals}"
        "</table>"
        f"{_payment_instructions(invoice, company)}"
        "<div style='margin-top: 30px; padding-top: 20px; border-top: 1px solid #eee; font-size: 0.9em; color: #7f8c8d;'>"
        "<p>If you have any questions about this invoice, please reply to this email.</p>"
        f"<p>{sign_off}</p>"
        "</div>"
        "</div>"
        "</body></html>"
    )


def build_download_link_body(invoice: InvoiceRead, download_url: str, sender_name: str) -> str:
    return (
        "<html><body>"
        "<div style='max-width: 600px; margin: 0 auto; padding: 20px; font-family: Arial, sans-serif;'>"
        "<h2 style='color: #2c3e50;'>Your Invoice is Ready</h2>"
        f"<p>Dear {escape(recipient_name(invoice))},</p>"
        f"<p>Your invoice #{escape(invoice.invoice_number)} is ready for download. "
        "The file is too large to attach directly to this email.</p>"
        f"<p><a href='{escape(download_url, quote=True)}' style='display: inline-block; padding: 10px 20px; "
        "background-color: #3498db; color: white; text-decoration: none; border-radius: 4px;'>Download Invoice</a></p>"
        "<p>If you have any questions, please contact our support team.</p>"
        f"<p>Best regards,<br>{escape(sender_name)}</p>"
        "</div>"
        "</body></html>"
    )
