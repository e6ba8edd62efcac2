"""Pattern rules for detecting script-capable constructs in HTML email templates.

This is a blocklist tuned for email markup, not a general HTML sanitizer.
Every checkpoint (template intake, preview, proxy) imports its rules from
here so their verdicts cannot drift apart.

Rules that span from an opening construct to a closing one are written as
token sequences rather than single ``.*?`` regexes, so every search runs in
time linear in the input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

_FLAGS = re.IGNORECASE | re.DOTALL

EVENT_HANDLERS = (
    "onclick",
    "onload",
    "onmouseover",
    "onmouseout",
    "onfocus",
    "onblur",
    "onchange",
    "onsubmit",
    "onreset",
    "onselect",
    "onkeydown",
    "onkeypress",
    "onkeyup",
)

_HANDLER_ALT = "|".join(EVENT_HANDLERS)

Span = tuple[int, int]


@dataclass(frozen=True)
class TokenSequence:
    """Tokens that must appear in order.

    A match runs from the start of the first token to the end of the last,
    taking the earliest occurrence of each token after the previous one. That
    is what joining the tokens with lazy ``.*?`` would match, but a failed
    search stops after one pass: if the earliest opening token has no
    continuation, no later one can have one either.
    """

    tokens: tuple[re.Pattern, ...]

    def search(self, html: str, pos: int = 0) -> Optional[Span]:
        start = None
        for token in self.tokens:
            match = token.search(html, pos)
            if match is None:
                return None
            if start is None:
                start = match.start()
            pos = match.end()
        return start, pos

    def spans(self, html: str) -> Iterator[Span]:
        """Non-overlapping matches, left to right."""
        pos = 0
        while True:
            span = self.search(html, pos)
            if span is None:
                return
            yield span
            pos = span[1]

    def sub(self, repl: Union[str, Callable[[str], str]], html: str) -> str:
        """Like ``re.sub``; a callable ``repl`` receives the matched text."""
        parts = []
        last = 0
        for start, end in self.spans(html):
            parts.append(html[last:start])
            parts.append(repl(html[start:end]) if callable(repl) else repl)
            last = end
        parts.append(html[last:])
        return "".join(parts)


def _seq(*tokens: str) -> TokenSequence:
    return TokenSequence(tuple(re.compile(t, _FLAGS) for t in tokens))


@dataclass(frozen=True)
class Rule:
    """One dangerous-construct detector.

    ``pattern`` decides the verdict; ``strip`` is what the preview
    transformer cuts out. Most rules use the same pattern for both.
    """

    name: str
    reason: str
    pattern: TokenSequence
    strip: Optional[TokenSequence] = None

    @property
    def strip_pattern(self) -> TokenSequence:
        return self.strip if self.strip is not None else self.pattern

    def search(self, html: str) -> Optional[Span]:
        return self.pattern.search(html)


def _rule(name: str, reason: str, *tokens: str, strip: Optional[str] = None) -> Rule:
    return Rule(
        name=name,
        reason=reason,
        pattern=_seq(*tokens),
        strip=_seq(strip) if strip else None,
    )


# Evaluated in this order; the first hit decides the reason.
DANGEROUS_RULES: tuple[Rule, ...] = (
    _rule(
        "script_tag",
        "HTML contains a <script> tag, which is not allowed",
        r"<script\b",
        r"</script>",
    ),
    _rule(
        "event_handler",
        "HTML contains an inline event handler attribute (e.g. onclick), which is not allowed",
        rf"\s(?:{_HANDLER_ALT})\s*=\s*[\"'][^\"']*[\"']",
    ),
    _rule(
        "script_url",
        "HTML contains a javascript: or vbscript: URL in an href or src attribute",
        r"(?:href|src)\s*=\s*[\"']?\s*(?:javascript|vbscript):",
        # Drop the whole attribute so no half-quoted value is left behind.
        strip=(
            r"\s?(?:href|src)\s*=\s*(?:\"\s*(?:javascript|vbscript):[^\"]*\"?"
            r"|'\s*(?:javascript|vbscript):[^']*'?"
            r"|\s*(?:javascript|vbscript):[^\s>]*)"
        ),
    ),
    _rule(
        "svg_script",
        "HTML contains an <svg> block with an embedded script",
        r"<svg",
        r">",
        r"<script",
        r"</svg>",
    ),
    _rule(
        "css_expression",
        "HTML contains a CSS expression(), which can run script",
        r"expression\s*\(",
    ),
    _rule(
        "css_script_url",
        "HTML contains a javascript: URL inside CSS url()",
        r"url\s*\(\s*[\"']?\s*javascript:",
        strip=r"url\s*\(\s*[\"']?\s*javascript:[^)]*\)?",
    ),
    _rule(
        "eval_call",
        "HTML contains a call to eval()",
        r"\beval\s*\(",
    ),
    _rule(
        "set_timeout_call",
        "HTML contains a call to setTimeout()",
        r"\bsetTimeout\s*\(",
    ),
    _rule(
        "set_interval_call",
        "HTML contains a call to setInterval()",
        r"\bsetInterval\s*\(",
    ),
    _rule(
        "function_constructor",
        "HTML contains a new Function() constructor",
        r"\bnew\s+Function\s*\(",
    ),
)

# Stripped from previews only; these never make a template unsafe.
# An unclosed opening tag is cut up to the next "<".
PREVIEW_ONLY_RULES: tuple[Rule, ...] = (
    _rule(
        "iframe_srcdoc_script",
        "HTML contains an iframe srcdoc with a script",
        r"<iframe\b[^<>]*?srcdoc\s*=\s*[\"'][^\"']*<script[^\"']*[\"'][^<>]*>?",
    ),
    _rule("form_tag", "HTML contains a form", r"<form\b[^<>]*>?"),
    _rule("input_tag", "HTML contains an input", r"<input\b[^<>]*>?"),
    _rule("textarea_tag", "HTML contains a textarea", r"<textarea\b[^<>]*>?"),
    _rule("select_tag", "HTML contains a select", r"<select\b[^<>]*>?"),
    _rule("button_tag", "HTML contains a button", r"<button\b[^<>]*>?"),
)

# Outlook/Word markup exempt from detection and preserved verbatim in previews.
CONDITIONAL_COMMENT = _seq(r"<!--\[if", r">", r"<!\[endif\]-->")
VML_NAMESPACE = _seq(r"xmlns:v\s*=\s*[\"']urn:schemas-microsoft-com:vml[\"']")
VML_ELEMENT = _seq(r"<v:", r">", r"</v:", r">")
WORD_ELEMENT = _seq(r"<w:", r">")

CARVE_OUTS: tuple[TokenSequence, ...] = (
    CONDITIONAL_COMMENT,
    VML_NAMESPACE,
    VML_ELEMENT,
    WORD_ELEMENT,
)


def strip_carve_outs(html: str) -> str:
    """Return the detection copy of ``html`` with all carve-out markup removed."""
    for pattern in CARVE_OUTS:
        html = pattern.sub("", html)
    return html
