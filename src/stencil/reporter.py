"""Reporter - turns a diagnostic into a readable block and a sentinel string.

A failing template never raises at the public boundary. The engine hands
the diagnostic to the reporter, which logs the block and returns the error
marker that takes the place of the rendered output.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Optional

from jinja2 import BaseLoader, Environment

from stencil.diagnostics import Diagnostic, SyntaxDiagnostic

log = logging.getLogger("stencil")

DEFAULT_MARKER = "{Template Error}"

REPORT_TEMPLATE = """\
[template]:
{{ id }}

[name]:
{{ phase }}
{%- if message %}

[message]:
{{ message }}
{%- endif %}
{%- if line %}

[line]:
{{ line }}
{%- endif %}
{%- if source_line is not none %}

[source]:
{{ source_line }}
{%- endif %}
{%- if temp %}

[temp]:
{{ temp }}
{%- endif %}"""


class Reporter:
    """Formats, logs and remembers diagnostics."""

    def __init__(self, marker: str = DEFAULT_MARKER, history_size: int = 100):
        self.marker = marker
        self.history: Deque[Diagnostic] = deque(maxlen=history_size)
        self.env = Environment(loader=BaseLoader(), autoescape=False)
        self._template = self.env.from_string(REPORT_TEMPLATE)

    @property
    def last(self) -> Optional[Diagnostic]:
        return self.history[-1] if self.history else None

    def format(self, diagnostic: Diagnostic) -> str:
        temp = None
        if isinstance(diagnostic, SyntaxDiagnostic):
            temp = diagnostic.generated_code
        return self._template.render(
            id=diagnostic.id,
            phase=diagnostic.phase,
            message=diagnostic.message,
            line=diagnostic.line,
            source_line=diagnostic.source_line,
            temp=temp,
        )

    def report(self, diagnostic: Diagnostic) -> str:
        """Log the diagnostic and return the error marker."""
        self.history.append(diagnostic)
        log.error("%s", self.format(diagnostic))
        return self.marker
