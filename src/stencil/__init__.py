"""stencil - compiles <% logic %> templates into Python renderers.

    >>> import stencil
    >>> greet = stencil.define("greet", "Hi, <%=name%>!")
    >>> greet({"name": "Ann"})
    'Hi, Ann!'
    >>> stencil.render("greet", {"name": "Bo"})
    'Hi, Bo!'
"""

from stencil._version import __version__
from stencil.cache import TemplateCache
from stencil.config import EngineConfig, find_config_file, load_config
from stencil.diagnostics import Diagnostic, RenderDiagnostic, SyntaxDiagnostic
from stencil.engine import (
    Engine,
    Template,
    default_engine,
    define,
    method,
    render,
    template,
)
from stencil.errors import (
    ConfigError,
    LineFault,
    SandboxViolation,
    StencilError,
    TemplateSyntaxError,
)
from stencil.loader import FileSystemLoader
from stencil.methods import MethodRegistry
from stencil.reporter import Reporter

__all__ = [
    "__version__",
    # engine
    "Engine",
    "Template",
    "default_engine",
    "define",
    "render",
    "method",
    "template",
    # collaborators
    "EngineConfig",
    "MethodRegistry",
    "TemplateCache",
    "FileSystemLoader",
    "Reporter",
    "find_config_file",
    "load_config",
    # diagnostics and errors
    "Diagnostic",
    "SyntaxDiagnostic",
    "RenderDiagnostic",
    "StencilError",
    "ConfigError",
    "SandboxViolation",
    "TemplateSyntaxError",
    "LineFault",
]
