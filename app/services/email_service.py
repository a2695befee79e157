"""
Outbound email via the SendGrid v3 HTTP API
"""
import logging
from typing import Iterable, List, Optional, Union

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when the email provider rejects or cannot be reached"""


def _recipients(to: Union[str, Iterable[str]]) -> List[str]:
    if isinstance(to, str):
        to = [to]
    seen: List[str] = []
    for address in to:
        address = (address or "").strip().lower()
        if address and address not in seen:
            seen.append(address)
    return seen


def send_email(
    to: Union[str, Iterable[str]],
    subject: str,
    html: str,
    text: Optional[str] = None,
) -> bool:
    """
    Send one message to one or more recipients.

    Returns:
        True when handed to the provider, False when email is not configured

    Raises:
        EmailError: On timeouts, transport errors or a non-2xx response
    """
    recipients = _recipients(to)
    if not recipients:
        return False

    if not settings.is_email_configured():
        logger.info(f"Email not configured; skipping {subject!r} to {len(recipients)} recipient(s)")
        return False

    content = []
    if text:
        content.append({"type": "text/plain", "value": text})
    content.append({"type": "text/html", "value": html})

    payload = {
        "personalizations": [{"to": [{"email": address} for address in recipients]}],
        "from": {"email": settings.MAIL_FROM},
        "subject": subject,
        "content": content,
    }
    if settings.MAIL_REPLY_TO:
        payload["reply_to"] = {"email": settings.MAIL_REPLY_TO}

    headers = {"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"}
    try:
        with httpx.Client(timeout=settings.EMAIL_TIMEOUT_SECONDS) as client:
            response = client.post(settings.SENDGRID_API_URL, json=payload, headers=headers)
    except httpx.HTTPError as e:
        raise EmailError(f"Email transport failed: {e}") from e

    if response.status_code >= 400:
        raise EmailError(f"Email provider returned {response.status_code}: {response.text[:500]}")

    logger.info(f"Sent email {subject!r} to {len(recipients)} recipient(s)")
    return True


def send_email_safely(
    to: Union[str, Iterable[str]],
    subject: str,
    html: str,
    text: Optional[str] = None,
) -> bool:
    """send_email for notification flows: failures are logged, never raised"""
    try:
        return send_email(to, subject, html, text)
    except EmailError as e:
        logger.error(f"Failed to send email {subject!r}: {e}")
        return False
