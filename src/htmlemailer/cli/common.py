"""Helpers shared by CLI command groups."""

from __future__ import annotations

from typing import Optional

from rich.console import Console

from htmlemailer.core.config import load_config
from htmlemailer.core.database import init_database
from htmlemailer.core.models import AppConfig
from htmlemailer.db.repository import Repository
from htmlemailer.library.intake import TemplateLibrary
from htmlemailer.library.validator import TemplateValidator

console = Console()


def get_repo(cfg: AppConfig) -> Repository:
    init_database(cfg.db_path)
    return Repository(cfg.db_path, history_limit=cfg.limits.history_limit)


def get_library(cfg: Optional[AppConfig] = None) -> TemplateLibrary:
    """Library with every saved template loaded into state."""
    cfg = cfg or load_config()
    library = TemplateLibrary(
        get_repo(cfg),
        validator=TemplateValidator(
            max_bytes=cfg.limits.max_template_bytes,
            allowed_extensions=cfg.safety.allowed_extensions,
        ),
        max_files=cfg.limits.max_files_per_batch,
    )
    library.load_saved()
    return library
