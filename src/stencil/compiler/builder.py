"""Builder - turns assembled code text into a callable unit.

The code is parsed first and walked by SafetyChecker, so a unit can only
reach its two parameters, its own locals and the safe builtins.
"""

from __future__ import annotations

import ast
import builtins
import logging
from typing import Any, Callable, Dict

from stencil.compiler.spec import BUILTINS_VAR, FAULT_CLASS, SAFE_BUILTINS, UNIT_NAME
from stencil.errors import LineFault, SandboxViolation, TemplateSyntaxError

log = logging.getLogger(__name__)

FILENAME = "<stencil>"

# Format strings can traverse attributes ("{0.__class__}") at call time.
# Generator, coroutine, frame and traceback attributes lead to the caller's
# frames and from there to unrestricted globals.
BLOCKED_ATTRIBUTES = frozenset(
    {
        "format",
        "format_map",
        "gi_frame",
        "gi_code",
        "gi_yieldfrom",
        "cr_frame",
        "cr_code",
        "cr_await",
        "ag_frame",
        "ag_code",
        "ag_await",
        "f_back",
        "f_builtins",
        "f_code",
        "f_globals",
        "f_locals",
        "tb_frame",
        "tb_next",
    }
)


def safe_builtins() -> Dict[str, Any]:
    return {name: getattr(builtins, name) for name in SAFE_BUILTINS}


class SafetyChecker(ast.NodeVisitor):
    """Rejects constructs that would let a template leave its sandbox."""

    def visit_Import(self, node: ast.Import) -> None:
        raise SandboxViolation("import")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        raise SandboxViolation("import")

    def visit_Global(self, node: ast.Global) -> None:
        raise SandboxViolation("global")

    def visit_Nonlocal(self, node: ast.Nonlocal) -> None:
        raise SandboxViolation("nonlocal")

    def visit_Yield(self, node: ast.Yield) -> None:
        raise SandboxViolation("yield")

    def visit_YieldFrom(self, node: ast.YieldFrom) -> None:
        raise SandboxViolation("yield")

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if node.attr.startswith("_") or node.attr in BLOCKED_ATTRIBUTES:
            raise SandboxViolation(node.attr)
        self.generic_visit(node)

    def visit_Subscript(self, node: ast.Subscript) -> None:
        key = node.slice
        if (
            isinstance(key, ast.Constant)
            and isinstance(key.value, str)
            and key.value.startswith("__")
        ):
            raise SandboxViolation(key.value)
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if node.id.startswith("__"):
            raise SandboxViolation(node.id)


def build(code: str) -> Callable[..., str]:
    """Build the unit function defined by ``code``.

    Raises:
        TemplateSyntaxError: If the code does not parse.
        SandboxViolation: If the code uses a forbidden construct.
    """
    try:
        tree = ast.parse(code, filename=FILENAME)
    except (SyntaxError, ValueError) as e:
        message = getattr(e, "msg", None) or str(e)
        lineno = getattr(e, "lineno", None)
        if lineno:
            message = f"{message} (generated code line {lineno})"
        raise TemplateSyntaxError(message, generated_code=code) from e

    SafetyChecker().visit(tree)

    builtin_names = safe_builtins()
    namespace: Dict[str, Any] = {
        "__builtins__": builtin_names,
        BUILTINS_VAR: dict(builtin_names),
        FAULT_CLASS: LineFault,
    }
    exec(compile(tree, FILENAME, "exec"), namespace)
    log.debug("built unit from %d lines of generated code", code.count("\n"))

    return namespace[UNIT_NAME]
