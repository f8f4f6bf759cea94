"""Translator - turns template segments into body instructions.

Literal text becomes an append of an escaped string literal. Logic text is
passed through as Python statements, or, for output expressions, becomes an
append of the coerced value.

Python blocks are indentation based while template blocks span segments, so
block structure is tracked here:

    <% for item in items: %>...<% end %>
    <% if ok: %>yes<% else: %>no<% end %>

A segment whose last logical line ends with ``:`` opens a block, ``end``
closes it, and a leading ``else`` / ``elif`` / ``except`` / ``finally``
closes the current block before its own line reopens one.
"""

from __future__ import annotations

import re
import textwrap
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from stencil.ast.spec import Literal, Logic, Segment
from stencil.compiler.resolver import Resolver, strip_code
from stencil.compiler.spec import LINE_VAR, OUT_VAR, Instruction
from stencil.errors import TemplateSyntaxError

_END = re.compile(r"^end(?:for|if|while|with|try|def)?$")
_CLAUSE = re.compile(r"^(?:else|elif|except|finally)\b")


def escape_literal(text: str) -> str:
    """Escape text for use inside a single-quoted Python string literal."""
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace('"', '\\"')
        .replace("\r", "\\r")
        .replace("\n", "\\n")
        .replace("\x00", "\\x00")
    )


def output_expression(code: str) -> str:
    """Strip the ``=`` marker, leading whitespace and trailing semicolons."""
    expr = code.strip()[1:].strip()
    while expr.endswith(";"):
        expr = expr[:-1].rstrip()
    return expr


def normalize_logic(code: str) -> str:
    """Move a logic segment's statements to column 0.

    Code that starts on the tag line has its first line stripped; the lines
    after it are dedented among themselves unless the first line opens a
    block, in which case they keep their indentation as the block body.
    """
    first, sep, rest = code.partition("\n")
    if not first.strip():
        return textwrap.dedent(code)

    first = first.lstrip()
    if rest and not strip_code(first).rstrip().endswith(":"):
        rest = textwrap.dedent(rest)
    return first + sep + rest


def logical_lines(lines: List[str]) -> Iterator[Tuple[int, List[str]]]:
    """Group physical lines into logical lines.

    Lines inside open brackets or after a trailing backslash continue the
    current logical line. Yields (offset of the first line, physical lines).
    """
    group: List[str] = []
    start = 0
    depth = 0

    for i, line in enumerate(lines):
        if not group:
            start = i
        group.append(line)

        code = strip_code(line)
        depth += sum(code.count(c) for c in "([{")
        depth -= sum(code.count(c) for c in ")]}")
        if depth > 0 or code.rstrip().endswith("\\"):
            continue

        depth = 0
        yield start, group
        group = []

    if group:
        yield start, group


class LineTracker:
    """Running source line counter, starting at line 1."""

    def __init__(self) -> None:
        self.line = 1

    def advance(self, text: str) -> None:
        self.line += text.count("\n")

    @staticmethod
    def marker(line: int) -> str:
        return f"{LINE_VAR} = {line}"


class Translator:
    """Translates one template's segments into body instructions."""

    def __init__(
        self,
        resolver: Resolver,
        debug: bool = False,
        statement: Optional[Callable[[str], str]] = None,
    ):
        self.resolver = resolver
        self.debug = debug
        self.statement = statement
        self.tracker = LineTracker()
        self.body: List[Instruction] = []
        # (source line of the opening segment, body length when opened)
        self._blocks: List[Tuple[int, int]] = []

    @property
    def depth(self) -> int:
        return len(self._blocks)

    def translate(self, segments: Iterable[Segment]) -> List[Instruction]:
        for segment in segments:
            if isinstance(segment, Literal):
                self.literal(segment.text)
            else:
                self.logic(segment.text)

        if self._blocks:
            line, _ = self._blocks[-1]
            raise TemplateSyntaxError(
                f"Block opened at line {line} is never closed (missing 'end')",
                line=line,
            )
        return self.body

    def literal(self, text: str) -> None:
        self.tracker.advance(text)
        if text:
            self._emit(f"{OUT_VAR}.append('{escape_literal(text)}')")

    def logic(self, text: str) -> None:
        this_line = self.tracker.line
        code = self.statement(text) if self.statement else text

        if Logic(code).is_output:
            expr = output_expression(code)
            if not expr:
                raise TemplateSyntaxError(
                    f"Empty output expression at line {this_line}", line=this_line
                )
            if self.debug:
                self._emit(self.tracker.marker(this_line))
            self._emit(f"{OUT_VAR}.append(_value({expr}))", scan=True)
        else:
            self._statements(code, this_line)

        self.tracker.advance(text)

    def _statements(self, code: str, this_line: int) -> None:
        lines = normalize_logic(code).split("\n")
        groups = [(o, g) for o, g in logical_lines(lines) if "".join(g).strip()]
        per_line = self.debug and self.statement is None

        if not groups and self.debug:
            self._emit(self.tracker.marker(this_line))

        for index, (offset, group) in enumerate(groups):
            head = group[0]
            stripped = head.strip()
            at_base = not head[:1].isspace()
            line = this_line + offset

            if at_base and len(group) == 1 and _END.match(stripped):
                self._close(stripped, line)
                continue

            clause = bool(_CLAUSE.match(stripped))
            if at_base and clause and index == 0:
                self._close(stripped.split(":")[0], line)

            if self.debug and not clause and (per_line or index == 0):
                indent = head[: len(head) - len(head.lstrip())]
                marked = line if per_line else this_line
                self._emit(indent + self.tracker.marker(marked))

            for physical in group:
                self._emit(physical.rstrip())
            self.resolver.scan("\n".join(group))

            opens = strip_code("\n".join(group)).rstrip().endswith(":")
            if at_base and opens and index == len(groups) - 1:
                self._blocks.append((line, len(self.body)))

    def _close(self, word: str, line: int) -> None:
        if not self._blocks:
            raise TemplateSyntaxError(
                f"'{word}' at line {line} has no open block to close", line=line
            )

        _, start = self._blocks[-1]
        if not any(strip_code(i.text).strip() for i in self.body[start:]):
            self._emit("pass")
        self._blocks.pop()

    def _emit(self, text: str, scan: bool = False) -> None:
        if scan:
            self.resolver.scan(text)
        self.body.append(Instruction(text=text, depth=self.depth))
