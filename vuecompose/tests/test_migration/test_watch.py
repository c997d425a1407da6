"""Tests for watcher migration."""

import pytest

from vuecompose.core.ast_parser import parse_source
from vuecompose.core.config import MigrationConfig
from vuecompose.core.migration.categories import CategoryRegistry, TransformContext
from vuecompose.core.migration.classifier import SymbolClassifier
from vuecompose.core.migration.component import find_component
from vuecompose.core.migration.models import DiagnosticCode, RewriteContext, Severity
from vuecompose.core.migration.rewriter import ReferenceRewriter


WATCHERS = '''export default {
  props: ['title'],
  emits: ['changed'],
  data() {
    return { account: null, query: '' };
  },
  methods: {
    search() {},
  },
  watch: {
    'account.id'(id) {
      this.$emit('changed', id);
      this.search();
    },
    query: {
      handler: 'search',
      immediate: true,
    },
    '$route.params': debounce(function () { this.search(); }, 300),
    title(value) {},
    account: { handler: onUser, sync: true },
    '$user.name'() {},
    missing: 'nope',
    empty: { deep: true },
  },
};
'''

SHADOWED_ACCESSOR = '''export default {
  data() {
    return { user: null };
  },
  watch: {
    '$user.name'(name) {},
  },
};
'''


def _watchers(source, bindings=frozenset({"props", "emit"})):
    component = find_component(parse_source(source, "Search.js", "javascript"))
    symbols = SymbolClassifier().classify(component).symbols
    config = MigrationConfig()
    rewriter = ReferenceRewriter(RewriteContext(
        symbols=symbols,
        reserved_accessors=config.reserved_accessors,
        file_path="Search.js",
        bindings=bindings,
    ))
    ctx = TransformContext(component, symbols, rewriter, config)
    spec = CategoryRegistry.lookup("watch")
    return {r.symbol: r for r in spec.transformer.transform(component.get("watch"), ctx, 0)}


@pytest.fixture(scope="module")
def watchers():
    return _watchers(WATCHERS)


class TestWatchSources:
    def test_nested_path(self, watchers):
        result = watchers["account.id"]
        assert result.declaration.text == (
            "watch(() => account.value.id, (id) => {\n"
            "  emit('changed', id);\n"
            "  search();\n"
            "});"
        )
        assert result.diagnostics == []
        assert result.declaration.helpers == {"watch"}

    def test_prop_path(self, watchers):
        assert watchers["title"].declaration.text == "watch(() => props.title, (value) => {});"

    def test_marker_stripped_from_path(self, watchers):
        result = watchers["$route.params"]
        assert result.declaration.text == (
            "watch(() => route.params, debounce(function () { search(); }, 300));"
        )
        assert [d.code for d in result.diagnostics] == [DiagnosticCode.PENDING_ACCESSOR]
        assert '"route"' in result.diagnostics[0].message

    def test_reserved_accessor_path(self, watchers):
        declaration = watchers["$user.name"].declaration
        assert declaration.text == "watch(() => user.name, () => {});"
        assert declaration.accessors == frozenset({"$user"})

    def test_accessor_path_shadowed_by_state(self):
        result = _watchers(SHADOWED_ACCESSOR)["$user.name"]
        assert result.declaration.accessors == frozenset()
        assert result.declaration.text.startswith("watch(() => $user.name,")
        assert [d.code for d in result.diagnostics] == [DiagnosticCode.NAME_COLLISION]
        assert result.diagnostics[0].severity == Severity.ERROR

    def test_unknown_root_reported(self, watchers):
        result = watchers["missing"]
        codes = [d.code for d in result.diagnostics]
        assert codes == [DiagnosticCode.UNRESOLVED_REFERENCE, DiagnosticCode.UNRESOLVED_REFERENCE]
        assert result.declaration.text == "watch(() => missing, nope);"


class TestWatchHandlers:
    def test_named_handler_with_flags(self, watchers):
        result = watchers["query"]
        assert result.declaration.text == "watch(() => query.value, search, { immediate: true });"
        assert result.diagnostics == []

    def test_unknown_option_ignored(self, watchers):
        result = watchers["account"]
        assert result.declaration.text == "watch(() => account.value, onUser);"
        assert [d.code for d in result.diagnostics] == [DiagnosticCode.IGNORED_OPTION]

    def test_emit_without_declared_emits(self):
        result = _watchers(WATCHERS, bindings=frozenset({"props"}))["account.id"]
        assert "  emit('changed', id);\n" in result.declaration.text
        assert [d.code for d in result.diagnostics] == [DiagnosticCode.PENDING_ACCESSOR]

    def test_unknown_method_name(self, watchers):
        messages = [d.message for d in watchers["missing"].diagnostics]
        assert 'Watch handler "nope" of "missing" is not a known method' in messages

    def test_object_without_handler(self, watchers):
        result = watchers["empty"]
        assert result.declaration is None
        assert result.diagnostics[-1].code == DiagnosticCode.UNSUPPORTED_SHAPE

    def test_failure_keeps_original_handler(self, monkeypatch):
        original = ReferenceRewriter.rewrite

        def flaky(rewriter, node, source, **kwargs):
            if kwargs.get("owner") in ("account.id", "$route.params"):
                raise RuntimeError("boom")
            return original(rewriter, node, source, **kwargs)

        monkeypatch.setattr(ReferenceRewriter, "rewrite", flaky)
        results = _watchers(WATCHERS)

        nested = results["account.id"]
        assert nested.declaration.text == (
            "watch(() => account.value.id, (id) => {\n"
            "  this.$emit('changed', id);\n"
            "  this.search();\n"
            "});"
        )
        assert nested.diagnostics[0].code == DiagnosticCode.REWRITE_FAILED
        assert "boom" in nested.diagnostics[0].message
        assert results["$route.params"].declaration.text == (
            "watch(() => route.params, debounce(function () { this.search(); }, 300));"
        )
        # Other watchers are unaffected
        assert results["query"].diagnostics == []
