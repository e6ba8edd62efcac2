"""Display-only sanitization of HTML templates for previews.

The output is a best-effort copy with dangerous fragments cut out. It is not
a security boundary: templates are accepted or refused by the classifier,
and previews of refused templates are never rendered.
"""

from __future__ import annotations

import html as html_lib
import re
import uuid

from htmlemailer.core.errors import InvalidInputError
from htmlemailer.core.models import TemplatePreview
from htmlemailer.safety.rules import CARVE_OUTS, DANGEROUS_RULES, PREVIEW_ONLY_RULES

DEFAULT_TITLE = "Email Template"

_TITLE = re.compile(r"<title\b[^<>]*>([^<]+)</title>", re.IGNORECASE)
_PLACEHOLDER = re.compile(r"__HTMLEMAILER_CARVE_OUT_[0-9a-f]{16}_\d+__")
_STRIP_RULES = DANGEROUS_RULES + PREVIEW_ONLY_RULES


def _protect(html: str) -> tuple[str, dict[str, str]]:
    """Swap carve-out blocks for placeholders that no rule can match."""
    nonce = uuid.uuid4().hex[:16]
    saved: dict[str, str] = {}

    def _stash(text: str) -> str:
        key = f"__HTMLEMAILER_CARVE_OUT_{nonce}_{len(saved)}__"
        saved[key] = text
        return key

    for pattern in CARVE_OUTS:
        html = pattern.sub(_stash, html)
    return html, saved


def _restore(html: str, saved: dict[str, str]) -> str:
    # Restored blocks can hold placeholders stashed by an earlier carve-out.
    while True:
        restored = _PLACEHOLDER.sub(lambda m: saved.get(m.group(0), m.group(0)), html)
        if restored == html:
            return restored
        html = restored


def _sanitize_once(html: str) -> str:
    protected, saved = _protect(html)

    def _keep_placeholders(text: str) -> str:
        # A cut that swallows a carve-out keeps its placeholder for _restore.
        return "".join(key for key in _PLACEHOLDER.findall(text) if key in saved)

    for rule in _STRIP_RULES:
        protected = rule.strip_pattern.sub(_keep_placeholders, protected)
    return _restore(protected, saved)


def sanitize(html: str) -> str:
    """Return ``html`` with dangerous fragments removed and carve-outs kept verbatim.

    Passes repeat until the text stops changing, so removing one fragment
    cannot splice together a new one.
    """
    if not isinstance(html, str):
        raise InvalidInputError("Invalid HTML content")
    while True:
        cleaned = _sanitize_once(html)
        if cleaned == html:
            return cleaned
        html = cleaned


def extract_title(html: str) -> str:
    match = _TITLE.search(html)
    if not match:
        return DEFAULT_TITLE
    return html_lib.escape(match.group(1).strip()) or DEFAULT_TITLE


def preview(html: str) -> TemplatePreview:
    """Build the title + sanitized content pair shown for a template."""
    return TemplatePreview(title=extract_title(html), content=sanitize(html))
