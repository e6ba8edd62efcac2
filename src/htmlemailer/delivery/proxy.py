"""Server-side gate in front of the email provider.

This is the authoritative safety check. The client runs the same classifier
before sending, but the client is under the sender's control; this copy is
not.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from htmlemailer.core.errors import (
    InvalidInputError,
    MissingFieldError,
    ProviderUnavailableError,
    UnsafeContentError,
)
from htmlemailer.core.models import ProviderConfig
from htmlemailer.delivery.resend import ProviderResponse, ResendClient
from htmlemailer.safety.classifier import classify

logger = logging.getLogger(__name__)


def _recipient_count(email_data: dict) -> int:
    to = email_data.get("to")
    if isinstance(to, list):
        return len(to)
    return 1 if to else 0


class ProxyGate:
    """Re-validates a send request and relays it to the provider."""

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        strict: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or ProviderConfig()
        self.strict = strict
        self._transport = transport

    def check(self, api_key: Optional[str], email_data: Optional[dict]) -> None:
        """Input-shape and content-safety checks; nothing leaves the process before these pass.

        Raises:
            MissingFieldError: no API key or no email data.
            InvalidInputError: ``html`` is present but not a string.
            UnsafeContentError: ``html`` fails the classifier.
        """
        if not api_key:
            raise MissingFieldError("API key is required")
        if not isinstance(email_data, dict) or not email_data:
            raise MissingFieldError("Email data is required")

        html = email_data.get("html")
        if html is None or html == "":
            return
        verdict = classify(html, strict=self.strict)
        if not verdict.safe:
            raise UnsafeContentError(verdict.reason or "HTML content is not allowed", rule=verdict.rule)

    async def forward(self, api_key: Optional[str], email_data: Optional[dict]) -> ProviderResponse:
        """Check the request, then POST it to the provider's ``/emails`` endpoint.

        Raises:
            MissingFieldError, InvalidInputError, UnsafeContentError: see ``check``.
            ProviderUnavailableError: the provider could not be reached.
        """
        subject = email_data.get("subject", "") if isinstance(email_data, dict) else ""
        try:
            self.check(api_key, email_data)
        except (InvalidInputError, UnsafeContentError) as exc:
            logger.warning("Send rejected before forwarding: subject=%r reason=%s", subject, exc)
            raise

        recipients = _recipient_count(email_data)
        async with ResendClient(api_key, self.config, transport=self._transport) as client:
            try:
                resp = await client.send_email(email_data)
            except ProviderUnavailableError:
                logger.error("Send failed: recipients=%d subject=%r outcome=unreachable", recipients, subject)
                raise

        if resp.ok:
            logger.info(
                "Send succeeded: recipients=%d subject=%r id=%s",
                recipients, subject, resp.data.get("id", ""),
            )
        else:
            logger.warning(
                "Send failed: recipients=%d subject=%r status=%d message=%s",
                recipients, subject, resp.status_code, resp.data.get("message", ""),
            )
        return resp
