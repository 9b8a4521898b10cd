"""Providers for the collaborators routes depend on.

Tests swap these out with ``app.dependency_overrides``.
"""

import logging

from fastapi import Depends, HTTPException, status

from backend.app.core.settings import get_settings
from backend.app.services.email_dispatch import BrevoClient, EmailConfigurationError, InvoiceEmailDispatcher
from backend.app.services.file_storage import FileStorage

logger = logging.getLogger(__name__)


def get_file_storage() -> FileStorage:
    return FileStorage(get_settings().upload_dir)


def get_email_dispatcher(storage: FileStorage = Depends(get_file_storage)) -> InvoiceEmailDispatcher:
    settings = get_settings()
    try:
        client = BrevoClient(api_key=settings.brevo_api_key, base_url=settings.brevo_base_url)
    except EmailConfigurationError:
        logger.error("Brevo API key is not configured; cannot send invoice emails")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Email service is not configured",
        )
    return InvoiceEmailDispatcher(
        client=client,
        storage=storage,
        sender_email=settings.sender_email,
        sender_name=settings.sender_name,
        base_url=settings.app_base_url,
    )
