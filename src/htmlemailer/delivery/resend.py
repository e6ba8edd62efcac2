"""Resend API client for transactional sends."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import httpx

from htmlemailer.core.errors import ProviderUnavailableError
from htmlemailer.core.models import ProviderConfig


@dataclass
class ProviderResponse:
    status_code: int
    data: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _decode_body(resp: httpx.Response) -> dict:
    try:
        data = resp.json()
    except ValueError:
        return {"message": resp.text} if resp.text else {}
    return data if isinstance(data, dict) else {"data": data}


class ResendClient:
    """Async client for the Resend ``/emails`` endpoint.

    The API key is supplied per send and lives only as long as this client.
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[ProviderConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or ProviderConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.config.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ResendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def send_email(self, email_data: dict) -> ProviderResponse:
        """POST one email. Any HTTP status is returned; only transport failures raise.

        Raises:
            ProviderUnavailableError: if the provider cannot be reached.
        """
        try:
            resp = await self._client.post("/emails", json=email_data)
        except httpx.RequestError as exc:
            raise ProviderUnavailableError(f"Unable to reach {self.base_url}: {type(exc).__name__}") from exc
        return ProviderResponse(status_code=resp.status_code, data=_decode_body(resp))

    async def close(self) -> None:
        await self._client.aclose()
