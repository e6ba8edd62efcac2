"""
Tests for template intake, application state and the SQLite store.
"""

from unittest.mock import patch

import pytest

from htmlemailer.core.errors import InvalidInputError
from htmlemailer.core.models import SendRecord, SenderConfig, UploadedFile
from htmlemailer.core.state import AppState
from htmlemailer.db.repository import Repository
from htmlemailer.library.intake import TemplateLibrary

from tests.conftest import SAFE_HTML


def _upload(name: str = "welcome.html", html: str = SAFE_HTML, content_type: str = "text/html") -> UploadedFile:
    return UploadedFile(name=name, data=html.encode("utf-8"), content_type=content_type)


@pytest.fixture
def library(repo) -> TemplateLibrary:
    return TemplateLibrary(repo)


class TestAddFiles:
    def test_valid_file_is_added_and_persisted(self, library, repo):
        report = library.add_files([_upload()])

        assert report.success_count == 1
        assert report.errors == []
        tpl = report.added[0]
        assert tpl.name == "welcome.html"
        assert tpl.size == len(SAFE_HTML)
        assert tpl.preview.title == "Welcome"
        assert tpl.warnings == []
        assert library.get(tpl.id) == tpl
        assert repo.get_template(tpl.id).content == SAFE_HTML

    def test_unsafe_file_is_reported_and_batch_continues(self, library):
        report = library.add_files([
            _upload("bad.html", "<p>x</p><script>alert(1)</script>"),
            _upload("good.html"),
        ])

        assert [t.name for t in report.added] == ["good.html"]
        assert len(report.errors) == 1
        assert report.errors[0].startswith("bad.html: HTML contains a <script> tag")

    def test_non_html_files_are_skipped(self, library):
        report = library.add_files([_upload("notes.txt", content_type="text/plain"), _upload()])
        assert report.skipped == ["notes.txt"]
        assert report.success_count == 1

    def test_html_name_with_wrong_mime_type_is_skipped(self, library):
        report = library.add_files([_upload(content_type="application/octet-stream")])
        assert report.skipped == ["welcome.html"]
        assert report.errors == ["Please select HTML files only (.html extension required)"]

    def test_batch_limit(self, repo):
        library = TemplateLibrary(repo, max_files=2)
        report = library.add_files([_upload(f"t{i}.html") for i in range(3)])
        assert report.added == []
        assert report.errors == ["Maximum 2 files can be processed at once"]
        assert len(library.state) == 0

    def test_loading_flag_is_reset(self, library):
        library.add_files([_upload("bad.html", "<script>x</script>")])
        assert library.state.is_loading is False

    def test_warnings_are_kept(self, library):
        report = library.add_files([_upload(html="<p>fragment</p>")])
        assert "Missing DOCTYPE declaration" in report.added[0].warnings

    def test_error_names_are_stripped_of_markup(self, library):
        report = library.add_files([_upload('x"<b>.html', "<script>x</script>")])
        assert report.errors[0].startswith("xb.html: ")


class TestAddFile:
    def test_filename_rejected_before_content_is_decoded(self, library):
        upload = _upload("evil<script>.html")
        with patch("htmlemailer.library.validator.classify") as mock_classify:
            with pytest.raises(InvalidInputError, match="potentially dangerous"):
                library.add_file(upload)
        mock_classify.assert_not_called()

    def test_invalid_utf8_is_rejected(self, library):
        upload = UploadedFile(name="bin.html", data=b"\xff\xfe\x00<p>", content_type="text/html")
        with pytest.raises(InvalidInputError, match="UTF-8"):
            library.add_file(upload)

    def test_duplicate_name_is_renamed_by_default(self, library):
        first = library.add_file(_upload())
        second = library.add_file(_upload())
        assert first.name == "welcome.html"
        assert second.name.startswith("welcome.html (")
        assert len(library.list()) == 2

    def test_duplicate_name_can_replace(self, library, repo):
        first = library.add_file(_upload())
        second = library.add_file(_upload(), on_duplicate="replace")
        assert second.name == "welcome.html"
        assert library.get(first.id) is None
        assert repo.get_template(first.id) is None
        assert [t.id for t in library.list()] == [second.id]


class TestCollection:
    def test_saved_templates_load_into_new_library(self, library, repo):
        tpl = library.add_file(_upload())
        fresh = TemplateLibrary(repo)
        assert fresh.load_saved() == 1
        assert fresh.get(tpl.id).content == SAFE_HTML

    def test_select_and_remove(self, library):
        tpl = library.add_file(_upload())
        assert library.select(tpl.id) == tpl
        assert library.state.selected == tpl
        assert library.remove(tpl.id) is True
        assert library.state.selected is None
        assert library.remove(tpl.id) is False

    def test_select_unknown_raises(self, library):
        with pytest.raises(KeyError):
            library.select("missing")

    def test_clear(self, library, repo):
        library.add_files([_upload("a.html"), _upload("b.html")])
        assert library.clear() == 2
        assert library.list() == []
        assert repo.get_templates() == []


class TestAppState:
    def test_mutation_goes_through_methods(self):
        state = AppState()
        assert len(state) == 0
        assert state.selected is None
        with pytest.raises(KeyError):
            state.select("nope")
        state.select(None)
        assert state.selected is None


class TestRepository:
    def test_sender_config_round_trip(self, repo):
        repo.save_sender_config(SenderConfig(from_email="me@example.com", from_name="Me"))
        cfg = repo.get_sender_config()
        assert cfg.from_field == "Me <me@example.com>"
        repo.clear_sender_config()
        assert repo.get_sender_config() is None

    def test_sender_without_name_uses_bare_address(self):
        assert SenderConfig(from_email="me@example.com").from_field == "me@example.com"

    def test_history_is_newest_first_and_capped(self, db_path):
        repo = Repository(db_path, history_limit=3)
        for i in range(5):
            repo.save_send_record(
                SendRecord(template_name="t.html", subject=f"s{i}", recipients=["a@b.com"], email_id=f"id{i}")
            )
        history = repo.get_send_history()
        assert [r.subject for r in history] == ["s4", "s3", "s2"]
        assert history[0].recipients == ["a@b.com"]

    def test_default_history_cap_is_100(self, repo):
        for i in range(105):
            repo.save_send_record(SendRecord(template_name="t.html", subject=f"s{i}", recipients=[]))
        history = repo.get_send_history()
        assert len(history) == 100
        assert history[-1].subject == "s5"

    def test_clear_history(self, repo):
        repo.save_send_record(SendRecord(template_name="t.html", subject="s", recipients=[]))
        repo.clear_send_history()
        assert repo.get_send_history() == []
