"""Jinja2 renderer for standalone template preview pages."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from markupsafe import Markup

from htmlemailer.core.errors import UnsafeContentError
from htmlemailer.core.models import Template
from htmlemailer.safety.classifier import classify
from htmlemailer.safety.transformer import preview

_TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

_env = Environment(loader=FileSystemLoader(str(_TEMPLATES_DIR)), autoescape=True)


def render_preview_page(template: Template) -> str:
    """Render ``template`` as a locked-down HTML page.

    The stored content is classified again first, since rules may have changed
    since the template was added.

    Raises:
        UnsafeContentError: if the content no longer passes the classifier.
    """
    verdict = classify(template.content)
    if not verdict.safe:
        raise UnsafeContentError(
            "Template contains JavaScript and cannot be previewed for security reasons.",
            rule=verdict.rule,
        )

    # Recomputed so previews follow the current rule set.
    current = preview(template.content)
    tpl = _env.get_template("preview.html.j2")
    return tpl.render(
        # Title is escaped by extract_title already.
        title=Markup(current.title),
        warnings=template.warnings,
        content=Markup(current.content),
    )
