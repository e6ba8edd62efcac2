"""Client-side sender: checks a send locally, then posts it to the proxy."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

import httpx

from htmlemailer.core.errors import ProviderError, SendError
from htmlemailer.core.models import EmailValidation, SendResult, SenderConfig
from htmlemailer.safety.classifier import classify

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

SEND_PATH = "/api/send-email"


def validate_emails(emails: Iterable[str]) -> EmailValidation:
    """Split addresses into valid and invalid, skipping blank entries."""
    result = EmailValidation()
    for email in emails:
        email = email.strip()
        if not email:
            continue
        if _EMAIL_RE.match(email):
            result.valid.append(email)
        else:
            result.invalid.append(email)
    return result


def describe_provider_error(status_code: int, data: dict) -> str:
    """Map a non-2xx proxy/provider response to the message shown to the user."""
    message = data.get("message") or data.get("error")
    if status_code == 401:
        return "Invalid API key"
    if status_code == 403:
        return "API key does not have required permissions"
    if status_code == 422:
        return f"Validation error: {message or 'Validation error'}"
    if status_code == 429:
        return "Rate limit exceeded. Please try again later."
    return message or f"API error: {status_code}"


class EmailSender:
    """Sends a template through the local proxy.

    The API key is passed per call and never kept on the instance.
    """

    def __init__(
        self,
        sender: Optional[SenderConfig],
        proxy_url: str = "http://127.0.0.1:3000",
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ) -> None:
        self.sender = sender
        self._client = client or httpx.Client(base_url=proxy_url, timeout=timeout)

    def _check(self, api_key: Optional[str], to_emails: list[str], subject: str, html: str) -> None:
        if not api_key:
            raise SendError("API key is required")
        if not self.sender or not self.sender.from_email:
            raise SendError("From email is not configured")
        if not to_emails:
            raise SendError("At least one recipient is required")
        if not subject or not subject.strip():
            raise SendError("Email subject is required")
        if not html or not html.strip():
            raise SendError("Email content is required")
        verdict = classify(html)
        if not verdict.safe:
            raise SendError(
                f"Email content contains JavaScript which is not allowed for security reasons: {verdict.reason}"
            )

    def build_payload(self, to_emails: list[str], subject: str, html: str, template_name: Optional[str] = None) -> dict:
        email_data: dict = {
            "from": self.sender.from_field,
            "to": to_emails,
            "subject": subject,
            "html": html,
        }
        if template_name:
            email_data["headers"] = {"X-Template-Name": template_name}
        return email_data

    def send(
        self,
        to_emails: list[str],
        subject: str,
        html: str,
        template_name: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> SendResult:
        """Send one email.

        Raises:
            SendError: with a caller-facing message for every failure.
        """
        self._check(api_key, to_emails, subject, html)
        payload = {
            "apiKey": api_key,
            "emailData": self.build_payload(to_emails, subject, html, template_name),
        }

        try:
            resp = self._client.post(SEND_PATH, json=payload)
        except httpx.RequestError as exc:
            logger.warning("Proxy unreachable: %s", type(exc).__name__)
            raise SendError("Network error: Unable to connect to the email proxy") from exc

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if resp.is_error:
            raise ProviderError(resp.status_code, describe_provider_error(resp.status_code, data))

        return SendResult(
            email_id=data.get("id"),
            message=f"Email sent successfully to {len(to_emails)} recipient(s)",
            recipients=to_emails,
        )

    def close(self) -> None:
        self._client.close()
