"""Stencil Compiler - transforms templates into callable Python units."""

from stencil.compiler.assembler import Assembler
from stencil.compiler.compiler import Compiler
from stencil.compiler.spec import Binding, CompiledUnit, Instruction, UnitSource

__all__ = [
    "Assembler",
    "Compiler",
    "Binding",
    "CompiledUnit",
    "Instruction",
    "UnitSource",
]
