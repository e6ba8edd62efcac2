"""Accept/reject checks for uploaded HTML templates."""

from __future__ import annotations

import re
from typing import Optional, Sequence

from htmlemailer.core.errors import InvalidInputError
from htmlemailer.core.models import ValidationResult
from htmlemailer.safety.classifier import classify

MAX_TEMPLATE_BYTES = 1024 * 1024
MAX_FILENAME_LENGTH = 255

_DANGEROUS_FILENAME = re.compile(
    r"<script|javascript:|vbscript:|data:|[\x00-\x1f\x7f-\x9f]",
    re.IGNORECASE,
)

_DOCTYPE = re.compile(r"<!doctype", re.IGNORECASE)
_HTML_TAG = re.compile(r"<html", re.IGNORECASE)
_BODY_TAG = re.compile(r"<body", re.IGNORECASE)


def structure_warnings(content: str) -> list[str]:
    """Advisory warnings for templates missing the usual document skeleton."""
    warnings = []
    if not _DOCTYPE.search(content):
        warnings.append("Missing DOCTYPE declaration")
    if not _HTML_TAG.search(content):
        warnings.append("Missing HTML tag")
    if not _BODY_TAG.search(content):
        warnings.append("Missing BODY tag")
    return warnings


class TemplateValidator:
    """Size, filename and content checks, in that order, stopping at the first failure."""

    def __init__(
        self,
        max_bytes: int = MAX_TEMPLATE_BYTES,
        allowed_extensions: Sequence[str] = (".html",),
    ) -> None:
        self.max_bytes = max_bytes
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)

    def check_size(self, size_bytes: int) -> Optional[str]:
        if size_bytes > self.max_bytes:
            return f"File too large (maximum {self.max_bytes // (1024 * 1024) or 1}MB allowed)"
        return None

    def validate_filename(self, file_name: str) -> Optional[str]:
        """Return the rejection reason for ``file_name``, or None if it is acceptable."""
        if not isinstance(file_name, str):
            return "Filename length must be between 1-255 characters"
        if _DANGEROUS_FILENAME.search(file_name):
            return "Filename contains potentially dangerous content"
        if not 0 < len(file_name) <= MAX_FILENAME_LENGTH:
            return "Filename length must be between 1-255 characters"
        if not file_name.lower().endswith(self.allowed_extensions):
            allowed = ", ".join(self.allowed_extensions)
            return f"Only {allowed} files are allowed"
        return None

    def check_content(self, content: str) -> ValidationResult:
        try:
            verdict = classify(content)
        except InvalidInputError as exc:
            return ValidationResult(accepted=False, reason=str(exc))
        if not verdict.safe:
            return ValidationResult(accepted=False, reason=verdict.reason)
        return ValidationResult(accepted=True, warnings=structure_warnings(content))

    def validate(self, file_name: str, content: str, size_bytes: int) -> ValidationResult:
        reason = self.check_size(size_bytes) or self.validate_filename(file_name)
        if reason:
            return ValidationResult(accepted=False, reason=reason)
        return self.check_content(content)
