"""In-memory application state for the template client."""

from __future__ import annotations

from typing import Iterator, Optional

from htmlemailer.core.models import Template


class AppState:
    """Templates currently loaded, the selected one, and the loading flag.

    All mutation goes through the methods below; callers never touch the
    underlying dict.
    """

    def __init__(self) -> None:
        self._templates: dict[str, Template] = {}
        self._selected_id: Optional[str] = None
        self.is_loading = False

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[Template]:
        return iter(list(self._templates.values()))

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def get(self, template_id: str) -> Optional[Template]:
        return self._templates.get(template_id)

    def find_by_name(self, name: str) -> Optional[Template]:
        return next((t for t in self._templates.values() if t.name == name), None)

    def add(self, template: Template) -> None:
        self._templates[template.id] = template

    def remove(self, template_id: str) -> Optional[Template]:
        if self._selected_id == template_id:
            self._selected_id = None
        return self._templates.pop(template_id, None)

    def clear(self) -> None:
        self._templates.clear()
        self._selected_id = None

    def select(self, template_id: Optional[str]) -> Optional[Template]:
        if template_id is not None and template_id not in self._templates:
            raise KeyError(template_id)
        self._selected_id = template_id
        return self.selected

    @property
    def selected(self) -> Optional[Template]:
        if self._selected_id is None:
            return None
        return self._templates.get(self._selected_id)
