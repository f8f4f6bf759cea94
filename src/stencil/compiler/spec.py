"""Compiler IR - the pieces a template is assembled from."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from stencil.config import EngineConfig

# Names used by generated code. The registry parameter is always sandboxed.
DATA_PARAM = "_data"
METHODS_PARAM = "_methods"
OUT_VAR = "_out"
LINE_VAR = "_line"
FAULT_VAR = "_fault"
FAULT_CLASS = "_LineFault"
UNIT_NAME = "_stencil_unit"
BUILTINS_VAR = "_builtins"

INDENT = "    "

# Builtins reachable from logic fragments. A data field with the same name
# takes precedence; the builtin is the fallback.
SAFE_BUILTINS = (
    "abs",
    "all",
    "any",
    "bool",
    "dict",
    "divmod",
    "enumerate",
    "float",
    "int",
    "isinstance",
    "len",
    "list",
    "max",
    "min",
    "range",
    "repr",
    "reversed",
    "round",
    "sorted",
    "str",
    "sum",
    "tuple",
    "zip",
    "Exception",
    "AttributeError",
    "KeyError",
    "IndexError",
    "TypeError",
    "ValueError",
    "ZeroDivisionError",
)


@dataclass
class Instruction:
    """One line of generated code at a block depth relative to the body."""

    text: str
    depth: int = 0


@dataclass
class Binding:
    """Declaration of one free variable: ``name = expression``."""

    name: str
    expression: str


@dataclass
class UnitSource:
    """Everything the assembler needs to produce one unit."""

    bindings: List[Binding] = field(default_factory=list)
    body: List[Instruction] = field(default_factory=list)
    debug: bool = False


@dataclass
class CompiledUnit:
    """A built unit together with the code it was built from."""

    func: Callable[..., str]
    code: str
    debug: bool = False
    variables: List[str] = field(default_factory=list)
    config: Optional[EngineConfig] = None
