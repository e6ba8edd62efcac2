"""FastAPI proxy that relays validated sends to the email provider."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from htmlemailer.core.config import load_config
from htmlemailer.core.models import AppConfig
from htmlemailer.delivery.proxy import ProxyGate
from htmlemailer.web.security import BodySizeLimitMiddleware, SecurityHeadersMiddleware

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the proxy app.

    ``transport`` replaces the outbound HTTP transport to the provider.
    """
    cfg = config or load_config()
    app = FastAPI(title="HTML Emailer Proxy", docs_url=None, redoc_url=None)
    app.state.config = cfg
    app.state.proxy_gate = ProxyGate(cfg.provider, strict=cfg.safety.strict_proxy, transport=transport)

    # Security middleware (order matters: outermost runs first)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=cfg.limits.max_request_bytes)
    app.add_middleware(SecurityHeadersMiddleware)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled server error on %s", request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    from htmlemailer.web.routes import email

    app.include_router(email.router)

    logger.info(
        "Proxy ready: provider=%s strict=%s", cfg.provider.base_url, cfg.safety.strict_proxy,
    )
    return app
