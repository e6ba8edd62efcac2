"""
Tests for template acceptance: size, filename and content checks.
"""

from unittest.mock import patch

import pytest

from htmlemailer.library.validator import MAX_TEMPLATE_BYTES, TemplateValidator, structure_warnings
from htmlemailer.safety.classifier import classify


@pytest.fixture
def validator() -> TemplateValidator:
    return TemplateValidator()


class TestSizeLimit:
    def test_exactly_one_mebibyte_is_accepted(self, validator):
        result = validator.validate("big.html", "<p>x</p>", MAX_TEMPLATE_BYTES)
        assert result.accepted is True

    def test_one_byte_over_is_rejected(self, validator):
        result = validator.validate("big.html", "<p>x</p>", MAX_TEMPLATE_BYTES + 1)
        assert result.accepted is False
        assert result.reason == "File too large (maximum 1MB allowed)"

    def test_size_is_checked_before_filename(self, validator):
        result = validator.validate("evil<script>.html", "<p>x</p>", MAX_TEMPLATE_BYTES + 1)
        assert result.reason.startswith("File too large")


class TestFilename:
    def test_script_in_filename_is_rejected_before_content(self, validator):
        """evil<script>.html is refused without the content ever being classified."""
        with patch("htmlemailer.library.validator.classify") as mock_classify:
            result = validator.validate("evil<script>.html", "<p>fine</p>", 11)
        assert result.accepted is False
        assert result.reason == "Filename contains potentially dangerous content"
        mock_classify.assert_not_called()

    @pytest.mark.parametrize(
        "name",
        ["javascript:x.html", "VBScript:x.html", "data:text.html", "bad\x07name.html", "nul\x00.html"],
    )
    def test_dangerous_names(self, validator, name):
        assert validator.validate_filename(name) == "Filename contains potentially dangerous content"

    @pytest.mark.parametrize("name", ["", "a" * 252 + ".html"])
    def test_length_bounds(self, validator, name):
        assert validator.validate_filename(name) == "Filename length must be between 1-255 characters"

    def test_longest_allowed_name(self, validator):
        assert validator.validate_filename("a" * 250 + ".html") is None

    @pytest.mark.parametrize("name", ["notes.txt", "script.js", "page.php", "page.htm"])
    def test_only_html_extension(self, validator, name):
        assert validator.validate_filename(name) == "Only .html files are allowed"

    def test_extension_is_case_insensitive(self, validator):
        assert validator.validate_filename("Welcome.HTML") is None

    def test_configured_extensions(self):
        validator = TemplateValidator(allowed_extensions=[".html", ".htm"])
        assert validator.validate_filename("page.htm") is None


class TestContent:
    def test_complete_document_has_no_warnings(self, validator):
        html = "<!DOCTYPE html><html><body><p>Hello</p></body></html>"
        result = validator.validate("hello.html", html, len(html))
        assert result.accepted is True
        assert result.warnings == []
        assert result.reason is None

    def test_missing_doctype_is_a_warning_only(self, validator):
        html = "<html><body><p>Hello</p></body>"
        result = validator.validate("hello.html", html, len(html))
        assert result.accepted is True
        assert result.warnings == ["Missing DOCTYPE declaration"]

    def test_fragment_gets_all_warnings(self):
        assert structure_warnings("<p>Hi</p>") == [
            "Missing DOCTYPE declaration",
            "Missing HTML tag",
            "Missing BODY tag",
        ]

    def test_unsafe_content_uses_classifier_reason(self, validator):
        html = '<p onclick="steal()">hi</p>'
        result = validator.validate("hello.html", html, len(html))
        assert result.accepted is False
        assert result.reason == classify(html).reason
        assert result.warnings == []

    def test_non_string_content_is_rejected(self, validator):
        result = validator.validate("hello.html", None, 0)
        assert result.accepted is False
        assert result.reason == "Invalid HTML content"
