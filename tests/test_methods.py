"""Tests for the method registry, its helpers and the template cache."""

import pytest

from stencil.cache import TemplateCache
from stencil.methods import MethodRegistry, each, value


class TestHelpers:
    def test_value(self):
        assert value(None) == ""
        assert value(0) == "0"
        assert value("x") == "x"

    def test_each_sequence(self):
        seen = []
        each(["a", "b"], lambda item, index: seen.append((index, item)))
        assert seen == [(0, "a"), (1, "b")]

    def test_each_mapping(self):
        seen = []
        each({"k": 1}, lambda item, key: seen.append((key, item)))
        assert seen == [("k", 1)]

    def test_each_none(self):
        each(None, lambda item, index: pytest.fail("called"))


class TestMethodRegistry:
    def test_seeded_helpers(self):
        registry = MethodRegistry()
        assert registry["_each"] is each
        assert registry["_value"] is value

    def test_register_replaces(self):
        registry = MethodRegistry({"f": str.upper})
        registry.register("f", str.lower)
        assert registry["f"] is str.lower
        assert len(registry) == 3

    def test_no_deletion(self):
        registry = MethodRegistry()
        with pytest.raises(TypeError):
            del registry["_each"]


class TestTemplateCache:
    def test_set_get_replace(self):
        cache = TemplateCache()
        cache.set("t", "first")
        cache.set("t", "second")
        assert cache.get("t") == "second"
        assert cache.ids() == ["t"]

    def test_clear(self):
        cache = TemplateCache()
        cache.set("t", "x")
        cache.clear()
        assert "t" not in cache
        assert cache.get("t") is None
