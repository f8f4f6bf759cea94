"""Compiler - transforms template source into a callable unit."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from stencil.ast.parser import split_segments
from stencil.compiler.assembler import Assembler
from stencil.compiler.builder import build
from stencil.compiler.resolver import Resolver
from stencil.compiler.spec import CompiledUnit, UnitSource
from stencil.compiler.translator import Translator
from stencil.config import EngineConfig

log = logging.getLogger(__name__)


class Compiler:
    """Compiles template source to a CompiledUnit.

    Compilation is a pure function of (source, debug flag, config): the
    only state it reads is the set of names registered in ``methods``,
    which decides whether a free variable binds to the registry or to the
    data context.
    """

    def __init__(
        self,
        methods: Mapping[str, object],
        config: Optional[EngineConfig] = None,
    ):
        self.methods = methods
        self.config = config or EngineConfig()
        self.assembler = Assembler()

    def compile(
        self,
        source: str,
        debug: bool = False,
        config: Optional[EngineConfig] = None,
    ) -> CompiledUnit:
        """Compile template source.

        Algorithm:
        1. Split the source into literal and logic segments
        2. Translate segments into body instructions, resolving free
           variables as a side effect of each logic segment
        3. Assemble declarations and body into one function definition
        4. Build the function

        Args:
            source: Template text.
            debug: Track source lines and capture faults with their line.
            config: Overrides the compiler's own config for this call.

        Returns:
            CompiledUnit with the unit function and its generated code.

        Raises:
            SandboxViolation: If a logic fragment names a forbidden identifier.
            TemplateSyntaxError: If block structure or generated code is invalid.
        """
        config = config or self.config

        resolver = Resolver(self.methods, config.sandbox, debug=debug)
        translator = Translator(resolver, debug=debug, statement=config.statement)

        segments = split_segments(source, config.open_tag, config.close_tag)
        body = translator.translate(segments)

        unit = UnitSource(bindings=resolver.bindings, body=body, debug=debug)
        code = self.assembler.assemble(unit)
        func = build(code)

        log.debug(
            "compiled template (%d chars, debug=%s, %d free variables)",
            len(source),
            debug,
            len(resolver.bindings),
        )
        return CompiledUnit(
            func=func,
            code=code,
            debug=debug,
            variables=resolver.variables,
            config=config,
        )
