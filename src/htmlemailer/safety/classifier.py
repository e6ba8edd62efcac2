"""Safe/unsafe verdicts for raw HTML."""

from __future__ import annotations

import logging

from htmlemailer.core.errors import InvalidInputError
from htmlemailer.core.models import ClassificationVerdict
from htmlemailer.safety.rules import DANGEROUS_RULES, strip_carve_outs

logger = logging.getLogger(__name__)

_SAFE = ClassificationVerdict(safe=True)


def classify(html: str, *, strict: bool = False) -> ClassificationVerdict:
    """Classify ``html`` against the dangerous-construct rules.

    Conditional comments and VML are removed from the scanned copy first so
    Outlook markup does not trip the rules. With ``strict=True`` they are
    scanned like everything else.

    Raises:
        InvalidInputError: if ``html`` is not a string.
    """
    if not isinstance(html, str):
        raise InvalidInputError("Invalid HTML content")

    scanned = html if strict else strip_carve_outs(html)
    for rule in DANGEROUS_RULES:
        if rule.search(scanned):
            logger.debug("HTML rejected by rule %s", rule.name)
            return ClassificationVerdict(safe=False, reason=rule.reason, rule=rule.name)
    return _SAFE


def has_javascript(html: str, *, strict: bool = False) -> bool:
    return not classify(html, strict=strict).safe
