"""Tests for free-variable extraction, the sandbox and binding priority."""

import pytest

from stencil.compiler.resolver import Resolver, strip_code
from stencil.config import DEFAULT_SANDBOX
from stencil.errors import SandboxViolation
from stencil.methods import MethodRegistry


def make_resolver(debug=False, **methods):
    return Resolver(MethodRegistry(methods), DEFAULT_SANDBOX, debug=debug)


# =============================================================================
# Stripping
# =============================================================================


class TestStripCode:
    def test_strips_comments(self):
        assert "hidden" not in strip_code("x = 1  # hidden")

    def test_strips_string_literals(self):
        code = strip_code("title = 'secret' + \"other\"")
        assert "secret" not in code
        assert "other" not in code
        assert "title" in code

    def test_hash_inside_string_is_not_a_comment(self):
        code = strip_code("x = '#' + y")
        assert "y" in code

    def test_strips_member_access(self):
        """foo.bar contributes only foo."""
        code = strip_code("foo.bar.baz(qux)")
        assert "bar" not in code
        assert "baz" not in code
        assert "foo" in code
        assert "qux" in code

    def test_fstring_fields_are_kept(self):
        code = strip_code("f'{user.name} has {count!r:>3} items'")
        assert "user" in code
        assert "count" in code
        assert "name" not in code
        assert "items" not in code


# =============================================================================
# Extraction
# =============================================================================


class TestFreeVariables:
    def test_records_each_name_once(self):
        resolver = make_resolver()
        resolver.scan("total = total + price")
        resolver.scan("price")
        assert resolver.variables == ["total", "price"]

    def test_keywords_are_skipped(self):
        resolver = make_resolver()
        resolver.scan("for i in items: pass")
        assert resolver.variables == ["i", "items"]

    def test_safe_builtins_are_free_variables(self):
        resolver = make_resolver()
        resolver.scan("range(len(items))")
        assert resolver.variables == ["range", "len", "items"]

    def test_numbers_are_skipped(self):
        resolver = make_resolver()
        resolver.scan("x = 10 + 2.5")
        assert resolver.variables == ["x"]

    def test_seeded_names_are_never_bound(self):
        resolver = make_resolver(debug=True)
        resolver.scan("_out.append(_data); _line = _builtins")
        assert resolver.variables == []

    def test_line_counter_is_only_seeded_in_debug_mode(self):
        resolver = make_resolver(debug=False)
        resolver.scan("_line")
        assert resolver.variables == ["_line"]


class TestSandbox:
    @pytest.mark.parametrize(
        "code",
        [
            "_methods",
            "x = _methods['upper']",
            "__builtins__",
            "__import__('os')",
            "globals()",
            "locals()",
        ],
    )
    def test_sandboxed_names_raise(self, code):
        with pytest.raises(SandboxViolation):
            make_resolver().scan(code)

    def test_violation_names_the_identifier(self):
        with pytest.raises(SandboxViolation) as exc_info:
            make_resolver().scan("a + globals")
        assert exc_info.value.name == "globals"
        assert "globals" in exc_info.value.message

    def test_registry_param_is_always_sandboxed(self):
        resolver = Resolver(MethodRegistry(), sandbox="nothing", debug=False)
        with pytest.raises(SandboxViolation):
            resolver.scan("_methods")

    def test_sandboxed_name_inside_string_is_allowed(self):
        resolver = make_resolver()
        resolver.scan("label = '_methods'")
        assert resolver.variables == ["label"]


# =============================================================================
# Binding
# =============================================================================


class TestBinding:
    def test_data_binding(self):
        binding = make_resolver().bind("name")
        assert binding.expression == "_data.get('name')"

    def test_registered_method_beats_data(self):
        binding = make_resolver(upper=str.upper).bind("upper")
        assert binding.expression == "_methods['upper']"

    def test_include_beats_registered_method(self):
        binding = make_resolver(include=lambda *a: "").bind("include")
        assert binding.expression.startswith("lambda id, data=None:")
        assert "_methods['_render']" in binding.expression

    def test_safe_builtin_binds_data_with_fallback(self):
        binding = make_resolver().bind("max")
        assert binding.expression == "_data.get('max', _builtins['max'])"

    def test_registered_method_beats_safe_builtin(self):
        binding = make_resolver(len=lambda x: 0).bind("len")
        assert binding.expression == "_methods['len']"

    def test_builtin_helpers_bind_to_registry(self):
        resolver = make_resolver()
        resolver.scan("_value(x)")
        assert resolver.bindings[0].expression == "_methods['_value']"
