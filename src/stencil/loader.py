"""Loader - finds template source on disk when an id is not cached."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

log = logging.getLogger(__name__)


class FileSystemLoader:
    """Looks template ids up as files under a list of search directories.

    For each directory in order, each suffix in ``extensions`` is appended
    to the id and the first existing file wins. Ids may contain ``/`` but
    must stay inside the search directory.
    """

    def __init__(
        self,
        search_paths: Iterable[Path] = (),
        extensions: Sequence[str] = ("", ".html", ".tpl"),
        encoding: str = "utf-8",
    ):
        self.search_paths = [Path(p) for p in search_paths]
        self.extensions = list(extensions)
        self.encoding = encoding

    def add_path(self, path: Path) -> None:
        path = Path(path)
        if path not in self.search_paths:
            self.search_paths.append(path)

    def remove_path(self, path: Path) -> None:
        path = Path(path)
        if path in self.search_paths:
            self.search_paths.remove(path)

    def find(self, template_id: str) -> Optional[Path]:
        for root in self.search_paths:
            base = root.resolve()
            for ext in self.extensions:
                candidate = (base / f"{template_id}{ext}").resolve()
                if not candidate.is_relative_to(base):
                    log.warning("template id %r escapes %s", template_id, base)
                    break
                if candidate.is_file():
                    return candidate
        return None

    def load(self, template_id: str) -> Optional[str]:
        """Return the source for ``template_id``, or None when not found."""
        path = self.find(template_id)
        if path is None:
            return None
        log.debug("loading template %r from %s", template_id, path)
        return path.read_text(encoding=self.encoding)
