"""Resolver - finds the free variables of logic fragments and binds them.

Every identifier a logic fragment reads must be declared before the unit
body runs. Binding priority, highest first:
1. ``include`` - renders another template through the registry's ``_render``
2. a name registered in the method registry at compile time
3. a field of the data context (missing fields read as None, or as the
   builtin of the same name for the safe builtins)
"""

from __future__ import annotations

import keyword
import re
from typing import Dict, Iterator, List, Mapping

from stencil.compiler.spec import (
    BUILTINS_VAR,
    DATA_PARAM,
    LINE_VAR,
    METHODS_PARAM,
    OUT_VAR,
    SAFE_BUILTINS,
    Binding,
)
from stencil.errors import SandboxViolation

RESERVED = frozenset(keyword.kwlist)

INCLUDE = "include"

# Comments, string literals (with an optional prefix) and member-access
# suffixes. Only what is left can name a free variable.
_STRIP = re.compile(
    r"#[^\n]*"
    r"|(?:\b(?P<prefix>[rRbBuUfF]{1,2}))?(?P<body>'[^'\n]*'|\"[^\"\n]*\")"
    r"|\.\s*[^\W\d]\w*"
)
_FSTRING_FIELD = re.compile(r"\{([^{}]*)\}")
_TOKEN_SPLIT = re.compile(r"\W+")


def strip_code(code: str) -> str:
    """Remove everything from ``code`` that cannot reference a variable.

    f-strings keep their replacement fields, which are stripped in turn.
    """

    def replace(match: re.Match[str]) -> str:
        body = match.group("body")
        prefix = match.group("prefix") or ""
        if body is not None and "f" in prefix.lower():
            fields = [
                strip_code(f.split("!")[0].split(":")[0])
                for f in _FSTRING_FIELD.findall(body)
            ]
            return " " + " ".join(fields) + " "
        return " "

    return _STRIP.sub(replace, code)


class Resolver:
    """Extracts free variables and accumulates their bindings.

    One resolver serves one compilation. Names seen once are never bound
    again. The accumulator, the data parameter, the builtins table and (in
    debug mode) the line counter are seeded so templates can never
    re-declare them.
    """

    def __init__(
        self,
        methods: Mapping[str, object],
        sandbox: str,
        debug: bool = False,
    ):
        self.methods = methods
        self.sandbox = re.compile(rf"^(?:{re.escape(METHODS_PARAM)}|{sandbox})$")
        self._seen: Dict[str, bool] = {
            OUT_VAR: True,
            DATA_PARAM: True,
            BUILTINS_VAR: True,
        }
        if debug:
            self._seen[LINE_VAR] = True
        self.bindings: List[Binding] = []

    @property
    def variables(self) -> List[str]:
        return [b.name for b in self.bindings]

    def scan(self, code: str) -> None:
        """Record and bind every new free variable referenced by ``code``.

        Raises:
            SandboxViolation: If ``code`` names a sandboxed identifier.
        """
        for name in self.free_names(code):
            if name not in self._seen:
                self._seen[name] = True
                self.bindings.append(self.bind(name))

    def free_names(self, code: str) -> Iterator[str]:
        for name in _TOKEN_SPLIT.split(strip_code(code)):
            if self.sandbox.match(name):
                raise SandboxViolation(name)

            if not name or name in RESERVED or name[0].isdigit():
                continue

            yield name

    def bind(self, name: str) -> Binding:
        if name == INCLUDE:
            value = (
                f"lambda id, data=None: {METHODS_PARAM}['_render']"
                f"(id, {DATA_PARAM} if data is None else data)"
            )
        elif name in self.methods:
            value = f"{METHODS_PARAM}[{name!r}]"
        elif name in SAFE_BUILTINS:
            value = f"{DATA_PARAM}.get({name!r}, {BUILTINS_VAR}[{name!r}])"
        else:
            value = f"{DATA_PARAM}.get({name!r})"

        return Binding(name=name, expression=value)
