"""Pydantic models for the HTML Emailer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Config ---

class ProviderConfig(BaseModel):
    base_url: str = "https://api.resend.com"
    timeout: float = 30.0


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3000
    proxy_url: str = "http://127.0.0.1:3000"


class LimitsConfig(BaseModel):
    max_template_bytes: int = 1024 * 1024
    max_request_bytes: int = 1024 * 1024
    max_files_per_batch: int = 10
    history_limit: int = 100


class SafetyConfig(BaseModel):
    strict_proxy: bool = False
    allowed_extensions: list[str] = Field(default_factory=lambda: [".html"])


class AppConfig(BaseModel):
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    safety: SafetyConfig = Field(default_factory=SafetyConfig)
    db_path: str = "data/htmlemailer.db"
    log_level: str = "INFO"


# --- Safety ---

class ClassificationVerdict(BaseModel):
    safe: bool
    reason: Optional[str] = None
    rule: Optional[str] = None


class TemplatePreview(BaseModel):
    title: str = "Email Template"
    content: str = ""


class ValidationResult(BaseModel):
    accepted: bool
    reason: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


# --- Templates ---

class Template(BaseModel):
    id: str
    name: str
    content: str
    size: int
    date_added: datetime = Field(default_factory=utcnow)
    preview: TemplatePreview = Field(default_factory=TemplatePreview)
    warnings: list[str] = Field(default_factory=list)


class UploadedFile(BaseModel):
    """A file handed over by whatever picked it (CLI argument, drop zone, upload form)."""

    name: str
    data: bytes
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


class IntakeReport(BaseModel):
    added: list[Template] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.added)


# --- Sending ---

class SenderConfig(BaseModel):
    from_email: str
    from_name: str = ""
    saved_at: datetime = Field(default_factory=utcnow)

    @property
    def from_field(self) -> str:
        return f"{self.from_name} <{self.from_email}>" if self.from_name else self.from_email


class EmailValidation(BaseModel):
    valid: list[str] = Field(default_factory=list)
    invalid: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.invalid


class SendResult(BaseModel):
    success: bool = True
    email_id: Optional[str] = None
    message: str = ""
    recipients: list[str] = Field(default_factory=list)
    sent_at: datetime = Field(default_factory=utcnow)


class SendRecord(BaseModel):
    template_name: str
    subject: str
    recipients: list[str]
    sent_at: datetime = Field(default_factory=utcnow)
    email_id: Optional[str] = None
