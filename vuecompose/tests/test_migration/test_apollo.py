"""Tests for apollo smart-query migration."""

from vuecompose.core.ast_parser import parse_source
from vuecompose.core.config import MigrationConfig
from vuecompose.core.migration.categories import CategoryRegistry, TransformContext
from vuecompose.core.migration.categories.apollo import escape_template
from vuecompose.core.migration.classifier import SymbolClassifier
from vuecompose.core.migration.component import find_component
from vuecompose.core.migration.models import DiagnosticCode, RewriteContext
from vuecompose.core.migration.rewriter import ReferenceRewriter


def _apollo(source, language="javascript"):
    component = find_component(parse_source(source, "Items.js", language))
    symbols = SymbolClassifier().classify(component).symbols
    config = MigrationConfig()
    rewriter = ReferenceRewriter(RewriteContext(
        symbols=symbols,
        reserved_accessors=config.reserved_accessors,
        file_path="Items.js",
    ))
    ctx = TransformContext(component, symbols, rewriter, config, language)
    spec = CategoryRegistry.lookup("apollo")
    return {r.symbol: r for r in spec.transformer.transform(component.get("apollo"), ctx, 0)}


# =========================================================================
# Sample components
# =========================================================================

WITH_SKIP = '''export default {
  props: ['itemId'],
  apollo: {
    item: {
      query: gql`query Item($id: ID!) { item(id: $id) { name } }`,
      variables() {
        return { id: this.itemId };
      },
      skip() {
        return !this.itemId;
      },
      fetchPolicy: 'cache-and-network',
    },
  },
};
'''

WITHOUT_SKIP = '''export default {
  apollo: {
    items: {
      query: gql`{ items { id } }`,
    },
  },
};
'''

QUERY_SOURCES = '''export default {
  apollo: {
    fromFile: {
      query: require('./items.graphql'),
    },
    users: 'query { users { id } }',
    dynamic: {
      query: buildQuery(),
    },
    broken: {
      variables: {},
    },
    $skipAll: true,
  },
};
'''

RESULT_AND_UPDATE = '''export default {
  data() {
    return { loaded: false };
  },
  apollo: {
    items: {
      query: gql`{ allItems { id } }`,
      update: (data) => data.allItems,
      result({ data: { allItems } }) {},
      loadingKey: 'loading',
    },
    tags: {
      query: gql`{ tags }`,
      result() {
        this.loaded = true;
      },
    },
  },
};
'''

TYPED_RESULT = '''export default defineComponent({
  apollo: {
    items: {
      query: gql`{ allItems { id } }`,
      result({ data: { allItems } }: ApolloQueryResult<Data>) {},
    },
  },
});
'''


# =========================================================================
# Tests: Query options
# =========================================================================

class TestQueryOptions:
    def test_skip_present_replaces_enabled(self):
        text = _apollo(WITH_SKIP)["item"].declaration.text
        assert text == (
            "const item_gql = gql`query Item($id: ID!) { item(id: $id) { name } }`;\n"
            "const item_variables = computed(() => ({ id: props.itemId }));\n"
            "const q_item = useQuery(item_gql, item_variables, {\n"
            "  skip: () => {\n"
            "    return !props.itemId;\n"
            "  },\n"
            "  fetchPolicy: 'cache-and-network',\n"
            "});"
        )
        assert "enabled" not in text

    def test_skip_absent_enables_query(self):
        text = _apollo(WITHOUT_SKIP)["items"].declaration.text
        assert text == (
            "const items_gql = gql`{ items { id } }`;\n"
            "const q_items = useQuery(items_gql, {}, { enabled: true });"
        )
        assert "skip" not in text

    def test_helpers(self):
        assert _apollo(WITH_SKIP)["item"].declaration.helpers == {"gql", "useQuery", "computed"}
        assert _apollo(WITHOUT_SKIP)["items"].declaration.helpers == {"gql", "useQuery"}

    def test_update_becomes_transform_result(self):
        result = _apollo(RESULT_AND_UPDATE)["items"]
        assert "transformResult: (data) => data.allItems" in result.declaration.text

    def test_unknown_option_reported_but_binding_kept(self):
        result = _apollo(RESULT_AND_UPDATE)["items"]
        assert result.declaration is not None
        ignored = [d for d in result.diagnostics if d.code == DiagnosticCode.IGNORED_OPTION]
        assert len(ignored) == 1
        assert '"loadingKey"' in ignored[0].message

    def test_failure_keeps_binding_unrewritten(self, monkeypatch):
        def failing(rewriter, node, source, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(ReferenceRewriter, "rewrite", failing)
        result = _apollo(WITH_SKIP)["item"]
        assert result.diagnostics[0].code == DiagnosticCode.REWRITE_FAILED
        assert "boom" in result.diagnostics[0].message
        text = result.declaration.text
        assert "const item_variables = computed(() => ({ id: this.itemId }));" in text
        assert "    return !this.itemId;\n" in text
        assert "const q_item = useQuery(item_gql, item_variables, {" in text
        assert result.declaration.helpers == {"gql", "useQuery", "computed"}


# =========================================================================
# Tests: Query sources
# =========================================================================

class TestQuerySources:
    def test_require_path(self):
        text = _apollo(QUERY_SOURCES)["fromFile"].declaration.text
        assert text.startswith("const fromFile_gql = gql`./items.graphql`;")

    def test_string_shorthand(self):
        text = _apollo(QUERY_SOURCES)["users"].declaration.text
        assert text == (
            "const users_gql = gql`query { users { id } }`;\n"
            "const q_users = useQuery(users_gql, {}, { enabled: true });"
        )

    def test_missing_and_dynamic_queries_skipped(self):
        results = _apollo(QUERY_SOURCES)
        for key in ("dynamic", "broken"):
            assert results[key].declaration is None
            assert [d.code for d in results[key].diagnostics] == [DiagnosticCode.MISSING_QUERY]

    def test_dollar_options_ignored(self):
        result = _apollo(QUERY_SOURCES)["$skipAll"]
        assert result.declaration is None
        assert result.diagnostics[0].code == DiagnosticCode.IGNORED_OPTION

    def test_escape_template(self):
        assert escape_template("a`b${c}") == "a\\`b\\${c}"


# =========================================================================
# Tests: Result accessor
# =========================================================================

class TestResultAccessor:
    def test_payload_key_from_destructuring(self):
        text = _apollo(RESULT_AND_UPDATE)["items"].declaration.text
        assert text.endswith(
            "const allItems_result = computed(() => q_items.result.value?.allItems ?? null);"
        )

    def test_payload_key_defaults_to_binding(self):
        result = _apollo(RESULT_AND_UPDATE)["tags"]
        assert result.declaration.text.endswith(
            "const tags_result = computed(() => q_tags.result.value?.tags ?? null);"
        )

    def test_result_body_reported(self):
        tags = _apollo(RESULT_AND_UPDATE)["tags"]
        assert [d.code for d in tags.diagnostics] == [DiagnosticCode.DROPPED_CODE]
        items = _apollo(RESULT_AND_UPDATE)["items"]
        assert DiagnosticCode.DROPPED_CODE not in [d.code for d in items.diagnostics]

    def test_typed_parameter(self):
        text = _apollo(TYPED_RESULT, "typescript")["items"].declaration.text
        assert "const allItems_result = computed(" in text

    def test_no_result_no_accessor(self):
        assert "_result" not in _apollo(WITHOUT_SKIP)["items"].declaration.text
