"""Template intake: validate picked files and keep them in state and the store."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Iterable, Literal, Optional

from htmlemailer.core.errors import InvalidInputError
from htmlemailer.core.models import IntakeReport, Template, UploadedFile
from htmlemailer.core.state import AppState
from htmlemailer.db.repository import Repository
from htmlemailer.library.validator import TemplateValidator
from htmlemailer.safety.transformer import preview

logger = logging.getLogger(__name__)

DuplicatePolicy = Literal["rename", "replace"]

_HTML_MIME_TYPES = ("text/html", "")


def generate_id() -> str:
    return uuid.uuid4().hex


def _display_name(name: str) -> str:
    """Strip markup characters before a filename goes into a message."""
    return "".join(ch for ch in name if ch not in "<>&\"'")


class TemplateLibrary:
    """The client's template collection: intake, selection and removal."""

    def __init__(
        self,
        repo: Repository,
        validator: Optional[TemplateValidator] = None,
        state: Optional[AppState] = None,
        max_files: int = 10,
    ) -> None:
        self.repo = repo
        self.validator = validator or TemplateValidator()
        self.state = state or AppState()
        self.max_files = max_files

    def load_saved(self) -> int:
        """Load persisted templates into state. Returns how many were loaded."""
        for template in self.repo.get_templates():
            self.state.add(template)
        return len(self.state)

    # ---- Intake ----

    def add_files(
        self,
        files: Iterable[UploadedFile],
        on_duplicate: DuplicatePolicy = "rename",
    ) -> IntakeReport:
        files = list(files)
        report = IntakeReport()

        candidates = []
        for f in files:
            is_html_name = f.name.lower().endswith(self.validator.allowed_extensions)
            if is_html_name and f.content_type in _HTML_MIME_TYPES:
                candidates.append(f)
            else:
                report.skipped.append(f.name)

        if not candidates:
            report.errors.append("Please select HTML files only (.html extension required)")
            return report
        if len(candidates) > self.max_files:
            report.errors.append(f"Maximum {self.max_files} files can be processed at once")
            return report

        self.state.is_loading = True
        try:
            for f in candidates:
                try:
                    report.added.append(self.add_file(f, on_duplicate=on_duplicate))
                except InvalidInputError as exc:
                    logger.warning("Rejected template %s: %s", _display_name(f.name), exc)
                    report.errors.append(f"{_display_name(f.name)}: {exc}")
        finally:
            self.state.is_loading = False
        return report

    def add_file(self, upload: UploadedFile, on_duplicate: DuplicatePolicy = "rename") -> Template:
        """Validate and store one file.

        Size and filename are checked before the bytes are decoded.

        Raises:
            InvalidInputError: with the user-facing rejection reason.
        """
        reason = self.validator.check_size(upload.size) or self.validator.validate_filename(upload.name)
        if reason:
            raise InvalidInputError(reason)

        try:
            content = upload.data.decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidInputError("File is not valid UTF-8 text")

        result = self.validator.check_content(content)
        if not result.accepted:
            raise InvalidInputError(result.reason or "Invalid HTML template structure")

        template = Template(
            id=generate_id(),
            name=upload.name,
            content=content,
            size=upload.size,
            preview=preview(content),
            warnings=result.warnings,
        )

        existing = self.state.find_by_name(template.name)
        if existing:
            if on_duplicate == "replace":
                self.remove(existing.id)
            else:
                template.name = f"{upload.name} ({int(time.time() * 1000)})"

        self.state.add(template)
        self.repo.save_template(template)
        logger.info("Added template %s (%d bytes)", _display_name(template.name), template.size)
        return template

    # ---- Collection ----

    def list(self) -> list[Template]:
        return list(self.state)

    def get(self, template_id: str) -> Optional[Template]:
        return self.state.get(template_id)

    def select(self, template_id: str) -> Optional[Template]:
        """Make ``template_id`` the selected template. Raises KeyError if unknown."""
        return self.state.select(template_id)

    def remove(self, template_id: str) -> bool:
        removed = self.state.remove(template_id)
        deleted = self.repo.delete_template(template_id)
        return removed is not None or deleted

    def clear(self) -> int:
        self.state.clear()
        return self.repo.clear_templates()
