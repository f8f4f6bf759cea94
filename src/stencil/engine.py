"""Engine - define, cache and render templates.

An engine owns one config, one method registry, one cache and one
reporter. ``default_engine`` is the process-wide instance behind the
module-level ``define``, ``render``, ``method`` and ``template`` functions.

Failures never cross this boundary: they are reported and the caller gets
the error marker (``{Template Error}`` by default) instead of output.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Union

from stencil.cache import TemplateCache
from stencil.compiler import CompiledUnit, Compiler
from stencil.config import EngineConfig
from stencil.diagnostics import RenderDiagnostic, SyntaxDiagnostic
from stencil.errors import LineFault
from stencil.loader import FileSystemLoader
from stencil.methods import MethodRegistry
from stencil.reporter import Reporter

log = logging.getLogger(__name__)

_MISSING: Any = object()


class Template:
    """A compiled renderer: ``template(data) -> str``.

    Calling a non-debug template that faults rebuilds it in debug mode and
    retries once with the same data. A fault in a debug template is
    reported with its template line and the error marker is returned.
    """

    def __init__(
        self,
        engine: "Engine",
        template_id: Optional[str],
        source: str,
        unit: CompiledUnit,
    ):
        self.engine = engine
        self.id = template_id
        self.source = source
        self.unit = unit

    @property
    def debug(self) -> bool:
        return self.unit.debug

    @property
    def code(self) -> str:
        """Generated Python source of the unit."""
        return self.unit.code

    def __call__(self, data: Optional[Mapping[str, Any]] = None) -> str:
        context = {} if data is None else data
        try:
            return self.unit.func(context, self.engine.methods)
        except Exception as e:
            if not self.debug:
                log.debug("render of %s failed, retrying in debug mode", self.name)
                retry = self.engine.define(
                    self.id, self.source, debug=True, config=self.unit.config
                )
                if isinstance(retry, str):
                    return retry
                return retry(data)
            return self.engine.reporter.report(self._diagnose(e))

    @property
    def name(self) -> str:
        return self.id or "<anonymous>"

    def _diagnose(self, error: Exception) -> RenderDiagnostic:
        line = None
        cause: BaseException = error
        if isinstance(error, LineFault):
            line = error.line
            cause = error.__cause__ or error

        return RenderDiagnostic(
            id=self.id or self.source,
            message=f"{type(cause).__name__}: {cause}",
            line=line,
            source=self.source,
        )

    def __repr__(self) -> str:
        return f"Template({self.name!r}, debug={self.debug})"


class Engine:
    """Compiles, caches and renders templates.

    The engine registers its own ``_render`` in the method registry, so a
    registry serves exactly one engine.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        methods: Optional[MethodRegistry] = None,
        cache: Optional[TemplateCache] = None,
        loader: Optional[FileSystemLoader] = None,
        reporter: Optional[Reporter] = None,
    ):
        self.config = config or EngineConfig()
        if methods is not None and "_render" in methods:
            raise ValueError("method registry already belongs to another engine")
        self.methods = methods if methods is not None else MethodRegistry()
        self.methods.register("_render", self.render)
        self.cache = cache if cache is not None else TemplateCache()
        self.loader = loader or FileSystemLoader(
            self.config.template_dirs, self.config.extensions
        )
        self.reporter = reporter or Reporter(self.config.error_marker)
        self.compiler = Compiler(self.methods, self.config)

    def configure(self, **options: Any) -> EngineConfig:
        """Replace the config with a validated copy that has ``options`` applied.

        Only compilations started afterwards see the new settings.
        """
        previous = self.config
        self.config = self.config.with_options(**options)
        self.compiler.config = self.config
        self.reporter.marker = self.config.error_marker
        for path in previous.template_dirs:
            if path not in self.config.template_dirs:
                self.loader.remove_path(path)
        for path in self.config.template_dirs:
            self.loader.add_path(path)
        return self.config

    def compile(
        self,
        source: str,
        debug: Optional[bool] = None,
        config: Optional[EngineConfig] = None,
    ) -> CompiledUnit:
        """Compile without reporting: errors are raised as StencilError.

        ``config`` defaults to the engine's current config.
        """
        config = config or self.config
        if debug is None:
            debug = config.debug
        return self.compiler.compile(source, debug=debug, config=config)

    def define(
        self,
        template_id: Optional[str],
        source: str,
        debug: Optional[bool] = None,
        config: Optional[EngineConfig] = None,
    ) -> Union[Template, str]:
        """Compile source into a Template, cached under template_id if given.

        Returns:
            The Template, or the error marker when compilation fails.
        """
        try:
            unit = self.compile(source, debug=debug, config=config)
        except Exception as e:  # noqa: BLE001
            # StencilError, or anything a custom statement hook raises
            return self.reporter.report(SyntaxDiagnostic.from_error(template_id, e))

        template = Template(self, template_id, source, unit)
        if template_id:
            self.cache.set(template_id, template)
        return template

    def get_template(self, template_id: str) -> Optional[Template]:
        """Cached template, or one found by the loader and defined now."""
        template = self.cache.get(template_id)
        if template is None:
            source = self.loader.load(template_id)
            if source is not None:
                self.define(template_id, source)
                template = self.cache.get(template_id)
        return template

    def render(
        self, template_id: str, data: Optional[Mapping[str, Any]] = None
    ) -> str:
        template = self.get_template(template_id)
        if template is None:
            return self.reporter.report(
                RenderDiagnostic(id=template_id, message="Not Cache")
            )
        return template(data)

    def method(
        self, name: str, fn: Optional[Callable[..., Any]] = None
    ) -> Optional[Callable[..., Any]]:
        """Read a shared method, or register one when ``fn`` is given."""
        if fn is None:
            return self.methods.get(name)
        self.methods.register(name, fn)
        return None

    def template(self, template_id: str, content: Any = _MISSING) -> Union[Template, str]:
        """Dispatch on argument shape.

        ``template(id, "source")`` defines, ``template(id, data)`` renders,
        and ``template("source")`` defines an anonymous template.
        """
        if content is _MISSING:
            return self.define(None, template_id)
        if isinstance(content, str):
            return self.define(template_id, content)
        return self.render(template_id, content)


default_engine = Engine()


def define(
    template_id: Optional[str], source: str, debug: Optional[bool] = None
) -> Union[Template, str]:
    return default_engine.define(template_id, source, debug)


def render(template_id: str, data: Optional[Mapping[str, Any]] = None) -> str:
    return default_engine.render(template_id, data)


def method(
    name: str, fn: Optional[Callable[..., Any]] = None
) -> Optional[Callable[..., Any]]:
    return default_engine.method(name, fn)


def template(template_id: str, content: Any = _MISSING) -> Union[Template, str]:
    return default_engine.template(template_id, content)
