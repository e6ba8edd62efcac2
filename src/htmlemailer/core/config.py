"""Configuration loader: YAML files + environment variables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from htmlemailer.core.models import (
    AppConfig,
    LimitsConfig,
    ProviderConfig,
    SafetyConfig,
    ServerConfig,
)


def _find_project_root() -> Path:
    """Walk up from cwd to find a directory containing pyproject.toml."""
    cwd = Path.cwd()
    for p in [cwd, *cwd.parents]:
        if (p / "pyproject.toml").exists():
            return p
    return cwd


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load configuration from YAML + environment variables.

    Priority: env vars > .env file > YAML defaults.
    """
    root = _find_project_root()
    load_dotenv(root / ".env")

    yaml_path = Path(config_path) if config_path else root / "config" / "default.yaml"
    yaml_data: dict = {}
    if yaml_path.exists():
        with open(yaml_path) as f:
            yaml_data = yaml.safe_load(f) or {}

    # Provider config with env overrides
    prov_data = yaml_data.get("provider", {})
    provider = ProviderConfig(
        base_url=os.getenv("HTMLEMAILER_PROVIDER_URL", prov_data.get("base_url", "https://api.resend.com")),
        timeout=float(prov_data.get("timeout", 30.0)),
    )

    # Proxy server config
    srv_data = yaml_data.get("server", {})
    server = ServerConfig(
        host=srv_data.get("host", "127.0.0.1"),
        port=int(os.getenv("PORT", srv_data.get("port", 3000))),
        proxy_url=os.getenv("HTMLEMAILER_PROXY_URL", srv_data.get("proxy_url", "http://127.0.0.1:3000")),
    )

    limits = LimitsConfig(**yaml_data.get("limits", {}))
    safety = SafetyConfig(**yaml_data.get("safety", {}))

    db_path = os.getenv("HTMLEMAILER_DB_PATH", yaml_data.get("db_path", "data/htmlemailer.db"))
    log_level = os.getenv("HTMLEMAILER_LOG_LEVEL", yaml_data.get("log_level", "INFO"))

    return AppConfig(
        provider=provider,
        server=server,
        limits=limits,
        safety=safety,
        db_path=db_path,
        log_level=log_level.upper(),
    )
