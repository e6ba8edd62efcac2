"""Send and validation endpoints of the proxy."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from htmlemailer.core.errors import InvalidInputError, ProviderUnavailableError, UnsafeContentError
from htmlemailer.delivery.proxy import ProxyGate
from htmlemailer.safety.classifier import classify

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def _json_body(request: Request):
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


@router.post("/send-email")
async def send_email(request: Request):
    """Validate a send request and relay it to the provider."""
    body = await _json_body(request)
    if body is None:
        return _error(400, "Invalid JSON")

    gate: ProxyGate = request.app.state.proxy_gate
    try:
        resp = await gate.forward(body.get("apiKey"), body.get("emailData"))
    except UnsafeContentError as exc:
        return _error(400, exc.reason, rule=exc.rule)
    except InvalidInputError as exc:
        return _error(400, str(exc))
    except ProviderUnavailableError:
        return _error(502, "Network error: Unable to connect to email provider")

    return JSONResponse(status_code=resp.status_code, content=resp.data)


@router.post("/validate-html")
async def validate_html(request: Request):
    """Classify HTML without sending anything."""
    body = await _json_body(request)
    if body is None:
        return _error(400, "Invalid JSON")

    html = body.get("htmlContent")
    if not html:
        return _error(400, "HTML content is required")

    gate: ProxyGate = request.app.state.proxy_gate
    try:
        verdict = classify(html, strict=gate.strict)
    except InvalidInputError as exc:
        return _error(400, str(exc), isValid=False)

    if not verdict.safe:
        return _error(400, verdict.reason, isValid=False, rule=verdict.rule)
    return {"isValid": True, "message": "HTML content is valid"}
