"""Invoice email delivery through the Brevo transactional email API.

A dispatch call moves through ``PENDING -> ATTEMPTING(n) -> SENT | FAILED``.
Attachments larger than the provider limit are stored locally and the
recipient gets a download link instead. Nothing about a dispatch is persisted.

Retries do not carry an idempotency key: if the provider accepted a message
but the response was lost, the next attempt can deliver a duplicate.
"""

import base64
import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

import httpx

from backend.app.core.time import epoch_millis
from backend.app.schemas.company_info import CompanyInfoRead
from backend.app.schemas.invoice import InvoiceRead
from backend.app.services.email_templates import build_download_link_body, build_invoice_body, recipient_name
from backend.app.services.file_storage import FileStorage
from backend.app.services.invoice_pdf import PdfRenderError, render_invoice_pdf

logger = logging.getLogger(__name__)

T = TypeVar("T")

BREVO_API_PATH = "/smtp/email"
MAX_PDF_SIZE_BYTES = 9 * 1024 * 1024
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


class EmailValidationError(ValueError):
    """Raised before any delivery work when the request cannot be sent."""


class EmailProviderError(Exception):
    """A single failed call to the provider."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class EmailAuthenticationError(EmailProviderError):
    pass


class EmailRateLimitError(EmailProviderError):
    pass


class EmailDispatchError(Exception):
    """Terminal failure of a dispatch; wraps the last provider error."""

    def __init__(self, message: str, outcome: Optional["DispatchOutcome"] = None):
        super().__init__(message)
        self.outcome = outcome


class EmailConfigurationError(EmailDispatchError):
    pass


def is_valid_email(value: Optional[str]) -> bool:
    if not value or not value.strip():
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def safe_filename_part(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", value)


def linear_backoff(base_delay: float, attempt: int) -> float:
    return base_delay * attempt


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry schedule. The policy computes delays; callers supply ``sleep``."""

    max_attempts: int = 3
    base_delay: float = 1.0
    backoff: Callable[[float, int], float] = linear_backoff

    def delay_for(self, attempt: int) -> float:
        return self.backoff(self.base_delay, attempt)

    def run(
        self,
        operation: Callable[[int], T],
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        sleep: Callable[[float], None] = time.sleep,
        on_retry: Optional[Callable[[int, BaseException, float], None]] = None,
    ) -> T:
        """Call ``operation(attempt)`` until it returns; re-raise the last error when attempts run out."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation(attempt)
            except retry_on as exc:
                if attempt >= self.max_attempts:
                    raise
                delay = self.delay_for(attempt)
                if on_retry is not None:
                    on_retry(attempt, exc, delay)
                sleep(delay)
        raise ValueError("RetryPolicy.max_attempts must be at least 1")


class DispatchState(str, Enum):
    PENDING = "pending"
    ATTEMPTING = "attempting"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class DispatchOutcome:
    state: DispatchState = DispatchState.PENDING
    attempts: int = 0
    message_id: Optional[str] = None
    download_url: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def sent_as_link(self) -> bool:
        return self.download_url is not None


def classify_error(response: httpx.Response) -> EmailProviderError:
    body = response.text or "No error details provided"
    message = f"Brevo API request failed with status {response.status_code}: {body}"
    if response.status_code == 401:
        return EmailAuthenticationError(
            "Invalid Brevo API key. Please check your configuration.", response.status_code, body
        )
    if response.status_code == 429:
        return EmailRateLimitError("Rate limit exceeded. Please try again later.", response.status_code, body)
    return EmailProviderError(message, response.status_code, body)


class BrevoClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.brevo.com/v3",
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        if not api_key or not api_key.strip():
            raise EmailConfigurationError("Brevo API key is not configured")
        self.api_key = api_key
        self.base_url = base_url
        self.transport = transport
        self.timeout = timeout

    def send(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        with httpx.Client(base_url=self.base_url, transport=self.transport, timeout=self.timeout) as client:
            response = client.post(
                BREVO_API_PATH,
                json=payload,
                headers={"api-key": self.api_key, "accept": "application/json"},
            )
        if not response.is_success:
            error = classify_error(response)
            logger.error("Brevo API error (%s): %s", response.status_code, error.body)
            raise error
        try:
            return response.json()
        except ValueError:
            return {}


def passthrough_compressor(pdf_bytes: bytes) -> bytes:
    logger.warning("PDF compression is not implemented; keeping original %d bytes", len(pdf_bytes))
    return pdf_bytes


class InvoiceEmailDispatcher:
    def __init__(
        self,
        client: BrevoClient,
        storage: FileStorage,
        sender_email: str,
        sender_name: str,
        base_url: str,
        retry_policy: Optional[RetryPolicy] = None,
        max_attachment_bytes: int = MAX_PDF_SIZE_BYTES,
        compressor: Callable[[bytes], bytes] = passthrough_compressor,
        sleep: Callable[[float], None] = time.sleep,
        pdf_renderer: Callable[..., bytes] = render_invoice_pdf,
    ):
        self.client = client
        self.storage = storage
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy()
        self.max_attachment_bytes = max_attachment_bytes
        self.compressor = compressor
        self.sleep = sleep
        self.pdf_renderer = pdf_renderer

    def _envelope(self, invoice: InvoiceRead, subject: str, html: str) -> Dict[str, Any]:
        return {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": invoice.employee_email, "name": recipient_name(invoice)}],
            "subject": subject,
            "htmlContent": html,
        }

    def build_attachment_request(
        self, invoice: InvoiceRead, pdf_bytes: bytes, company: Optional[CompanyInfoRead] = None
    ) -> Dict[str, Any]:
        company_name = company.company_name if company and company.company_name else "Your Invoice"
        request = self._envelope(
            invoice,
            f"Invoice #{invoice.invoice_number} - {company_name}",
            build_invoice_body(invoice, company),
        )
        request["attachment"] = [
            {
                "name": f"Invoice_{safe_filename_part(invoice.invoice_number)}.pdf",
                "content": base64.b64encode(pdf_bytes).decode("ascii"),
            }
        ]
        return request

    def _validate(self, invoice: Optional[InvoiceRead], pdf_bytes: Optional[bytes]) -> None:
        if invoice is None:
            raise EmailValidationError("Invoice cannot be null")
        if not pdf_bytes:
            raise EmailValidationError("PDF content cannot be null or empty")
        if not is_valid_email(invoice.employee_email):
            raise EmailValidationError(f"Invalid recipient email: {invoice.employee_email}")

    def send_invoice(self, invoice: InvoiceRead, company: Optional[CompanyInfoRead] = None) -> DispatchOutcome:
        """Render the invoice PDF and deliver it."""
        pdf_bytes = self.pdf_renderer(invoice, company=company, upload_dir=self.storage.upload_dir)
        return self.send_with_pdf(invoice, pdf_bytes, company=company)

    def send_with_pdf(
        self, invoice: InvoiceRead, pdf_bytes: bytes, company: Optional[CompanyInfoRead] = None
    ) -> DispatchOutcome:
        self._validate(invoice, pdf_bytes)
        outcome = DispatchOutcome()

        final_bytes = pdf_bytes
        if len(pdf_bytes) > self.max_attachment_bytes:
            logger.warning(
                "PDF size (%.2f MB) exceeds maximum allowed size (%.2f MB). Attempting to compress...",
                len(pdf_bytes) / (1024 * 1024.0),
                self.max_attachment_bytes / (1024 * 1024.0),
            )
            try:
                final_bytes = self.compressor(pdf_bytes)
            except Exception:
                logger.exception("Error compressing PDF, sending download link instead")
                return self._send_download_link(invoice, pdf_bytes, outcome)
            if len(final_bytes) > self.max_attachment_bytes:
                logger.warning(
                    "Compressed PDF still too large (%.2f MB). Sending download link instead.",
                    len(final_bytes) / (1024 * 1024.0),
                )
                return self._send_download_link(invoice, final_bytes, outcome)

        request = self.build_attachment_request(invoice, final_bytes, company)

        def attempt(number: int) -> Dict[str, Any]:
            outcome.state = DispatchState.ATTEMPTING
            outcome.attempts = number
            logger.info(
                "Sending invoice #%s to %s (attempt %d/%d)",
                invoice.invoice_number,
                invoice.employee_email,
                number,
                self.retry_policy.max_attempts,
            )
            return self.client.send(request)

        def on_retry(number: int, exc: BaseException, delay: float) -> None:
            outcome.errors.append(str(exc))
            logger.warning(
                "Attempt %d for invoice #%s failed: %s. Retrying in %.1fs",
                number,
                invoice.invoice_number,
                exc,
                delay,
            )

        try:
            response = self.retry_policy.run(
                attempt,
                retry_on=(EmailProviderError, httpx.HTTPError),
                sleep=self.sleep,
                on_retry=on_retry,
            )
        except (EmailProviderError, httpx.HTTPError) as exc:
            outcome.errors.append(str(exc))
            outcome.state = DispatchState.FAILED
            message = f"Failed to send invoice #{invoice.invoice_number} after {outcome.attempts} attempts: {exc}"
            logger.error(message)
            raise EmailDispatchError(message, outcome=outcome) from exc

        outcome.state = DispatchState.SENT
        outcome.message_id = str(response.get("messageId") or "unknown")
        logger.info(
            "Successfully sent invoice #%s to %s. Message ID: %s",
            invoice.invoice_number,
            invoice.employee_email,
            outcome.message_id,
        )
        return outcome

    def _send_download_link(self, invoice: InvoiceRead, pdf_bytes: bytes, outcome: DispatchOutcome) -> DispatchOutcome:
        filename = f"Invoice_{safe_filename_part(invoice.invoice_number)}_{epoch_millis()}.pdf"
        outcome.state = DispatchState.ATTEMPTING
        outcome.attempts = 1
        try:
            file_url = self.storage.store_bytes(pdf_bytes, filename)
            download_url = f"{self.base_url}{file_url}"
            request = self._envelope(
                invoice,
                f"Invoice #{invoice.invoice_number} - Download Link",
                build_download_link_body(invoice, download_url, self.sender_name),
            )
            response = self.client.send(request)
        except (OSError, EmailProviderError, httpx.HTTPError) as exc:
            outcome.errors.append(str(exc))
            outcome.state = DispatchState.FAILED
            logger.error("Failed to send email with download link for invoice #%s: %s", invoice.invoice_number, exc)
            raise EmailDispatchError(
                f"Failed to send email with download link for invoice #{invoice.invoice_number}: {exc}",
                outcome=outcome,
            ) from exc

        outcome.state = DispatchState.SENT
        outcome.download_url = download_url
        outcome.message_id = str(response.get("messageId") or "unknown")
        logger.info("Sent email with download link for invoice #%s", invoice.invoice_number)
        return outcome


def deliver_invoice_email(
    dispatcher: InvoiceEmailDispatcher,
    invoice: InvoiceRead,
    company: Optional[CompanyInfoRead] = None,
    pdf_bytes: Optional[bytes] = None,
) -> Optional[DispatchOutcome]:
    """Background-task entry point; failures are logged since no caller is waiting."""
    try:
        if pdf_bytes:
            return dispatcher.send_with_pdf(invoice, pdf_bytes, company=company)
        return dispatcher.send_invoice(invoice, company=company)
    except (EmailDispatchError, EmailValidationError, PdfRenderError):
        logger.exception("Email delivery for invoice #%s failed", invoice.invoice_number)
        return None
