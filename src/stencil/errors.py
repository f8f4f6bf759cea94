"""Stencil Exceptions

Raised inside the compiler and converted into diagnostics by the engine.
"""

from __future__ import annotations


class StencilError(Exception):
    """Base exception for all stencil errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(StencilError):
    """Raised when a stencil.yaml file cannot be loaded."""

    pass


class SandboxViolation(StencilError):
    """Raised when a logic fragment references a forbidden identifier."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Prohibit the use of the "{name}"')


class TemplateSyntaxError(StencilError):
    """Raised when the generated code cannot be built."""

    def __init__(
        self,
        message: str,
        generated_code: str | None = None,
        line: int | None = None,
    ):
        self.generated_code = generated_code
        self.line = line
        super().__init__(message)


class LineFault(StencilError):
    """Raised by debug-mode units; the original fault is the ``__cause__``."""

    def __init__(self, line: int):
        self.line = line
        super().__init__(f"Render fault at template line {line}")
