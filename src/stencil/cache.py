"""Template cache - compiled templates keyed by template id."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterator, Optional

if TYPE_CHECKING:
    from stencil.engine import Template


class TemplateCache:
    """Stores compiled templates by id. Storing an id again replaces it."""

    def __init__(self) -> None:
        self._templates: Dict[str, "Template"] = {}

    def get(self, template_id: str) -> Optional["Template"]:
        return self._templates.get(template_id)

    def set(self, template_id: str, template: "Template") -> None:
        self._templates[template_id] = template

    def clear(self) -> None:
        self._templates.clear()

    def ids(self) -> list[str]:
        return list(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)
