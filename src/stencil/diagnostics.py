"""Diagnostics - what the reporter receives when a template fails.

A diagnostic is a tagged struct: the ``phase`` tag tells a syntax failure
(no renderer was produced) apart from a render failure.
"""

from __future__ import annotations

from typing import Any, Union

import msgspec


class Diagnostic(msgspec.Struct, tag_field="phase", kw_only=True, frozen=True):
    """Base diagnostic."""

    id: str | None = None
    message: str
    line: int | None = None

    @property
    def phase(self) -> str:
        return type(self).__struct_config__.tag  # type: ignore[return-value]

    @property
    def source_line(self) -> str | None:
        return None

    def to_dict(self) -> dict[str, Any]:
        """Builtin representation, tag included."""
        return msgspec.to_builtins(self)


class SyntaxDiagnostic(Diagnostic, tag="Syntax Error", frozen=True):
    """Compilation failed; carries the generated code when there is one."""

    generated_code: str | None = None

    @classmethod
    def from_error(
        cls, template_id: str | None, error: Exception
    ) -> "SyntaxDiagnostic":
        """Build from a compile-time exception."""
        message = getattr(error, "message", None) or f"{type(error).__name__}: {error}"
        return cls(
            id=template_id,
            message=message,
            line=getattr(error, "line", None),
            generated_code=getattr(error, "generated_code", None),
        )


class RenderDiagnostic(Diagnostic, tag="Render Error", frozen=True):
    """Rendering failed, or the template id could not be found."""

    source: str | None = None

    @property
    def source_line(self) -> str | None:
        if self.line is None or self.source is None:
            return None
        lines = self.source.split("\n")
        if 0 < self.line <= len(lines):
            return lines[self.line - 1]
        return None


def decode(payload: bytes | str) -> Diagnostic:
    """Decode a JSON-encoded diagnostic back into its variant."""
    return msgspec.json.decode(payload, type=Union[SyntaxDiagnostic, RenderDiagnostic])


def encode(diagnostic: Diagnostic) -> bytes:
    return msgspec.json.encode(diagnostic)
