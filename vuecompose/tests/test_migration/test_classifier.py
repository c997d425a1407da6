"""Tests for component discovery, symbol classification and the category registry."""

from vuecompose.core.ast_parser import parse_source
from vuecompose.core.constants import EMISSION_ORDER, LIFECYCLE_HOOKS
from vuecompose.core.migration.categories import CategoryRegistry, emission_priority
from vuecompose.core.migration.classifier import SymbolClassifier
from vuecompose.core.migration.component import find_component
from vuecompose.core.migration.models import Category, DiagnosticCode, Severity, SymbolRole


# =========================================================================
# Sample components
# =========================================================================

FULL_COMPONENT = '''export default {
  name: 'Cart',
  props: ['title', 'size'],
  data() {
    return { count: 0, items: [] };
  },
  computed: {
    total() {
      return this.count;
    },
  },
  methods: {
    add() {},
    remove: function () {},
  },
  mounted() {},
};
'''

PROPS_OBJECT = '''export default {
  props: {
    title: String,
    'max-size': { type: Number, default: 3 },
  },
};
'''

COLLISION = '''export default {
  data() {
    return { total: 0 };
  },
  computed: {
    total() {
      return 1;
    },
  },
};
'''

OPAQUE_DATA = '''export default {
  data() {
    return makeState();
  },
};
'''

DATA_WITH_LOCALS = '''export default {
  data() {
    const start = Date.now();
    return { start, elapsed: 0 };
  },
};
'''

DEFINE_COMPONENT = '''import { defineComponent } from "vue";

export default defineComponent({
  data: () => ({ open: false }),
});
'''

TS_SATISFIES = '''export default {
  data() {
    return { open: false };
  },
} as Component;
'''

NO_EXPORT = '''const options = { data() { return {}; } };
'''


def _component(source, language="javascript"):
    return find_component(parse_source(source, "Comp.js", language))


# =========================================================================
# Tests: Component discovery
# =========================================================================

class TestFindComponent:
    def test_plain_object(self):
        component = _component(FULL_COMPONENT)
        assert [e.name for e in component.entries] == [
            "name", "props", "data", "computed", "methods", "mounted",
        ]

    def test_define_component_call(self):
        component = _component(DEFINE_COMPONENT)
        assert component.get("data") is not None

    def test_typescript_wrapper(self):
        component = _component(TS_SATISFIES, "typescript")
        assert component is not None
        assert component.get("data") is not None

    def test_no_export(self):
        assert _component(NO_EXPORT) is None

    def test_entry_indent(self):
        component = _component(FULL_COMPONENT)
        assert component.get("data").indent == 2


# =========================================================================
# Tests: Classification
# =========================================================================

class TestSymbolClassifier:
    def test_partitions_by_role(self):
        result = SymbolClassifier().classify(_component(FULL_COMPONENT))
        symbols = result.symbols
        assert symbols.input_names == {"title", "size"}
        assert symbols.state_names == {"count", "items"}
        assert symbols.derived_names == {"total"}
        assert symbols.action_names == {"add", "remove"}
        assert result.diagnostics == []

    def test_role_lookup(self):
        symbols = SymbolClassifier().classify(_component(FULL_COMPONENT)).symbols
        assert symbols.role_of("size") == SymbolRole.INPUT
        assert symbols.role_of("remove") == SymbolRole.ACTION
        assert symbols.role_of("mounted") is None
        assert symbols.names(SymbolRole.STATE) == {"count", "items"}

    def test_props_object_keys(self):
        symbols = SymbolClassifier().classify(_component(PROPS_OBJECT)).symbols
        assert symbols.input_names == {"title", "max-size"}

    def test_arrow_data(self):
        symbols = SymbolClassifier().classify(_component(DEFINE_COMPONENT)).symbols
        assert symbols.state_names == {"open"}

    def test_collision_is_an_error_and_first_wins(self):
        result = SymbolClassifier().classify(_component(COLLISION))
        assert result.symbols.state_names == {"total"}
        assert result.symbols.derived_names == frozenset()
        assert len(result.diagnostics) == 1
        diagnostic = result.diagnostics[0]
        assert diagnostic.code == DiagnosticCode.NAME_COLLISION
        assert diagnostic.severity == Severity.ERROR
        assert diagnostic.symbol == "total"
        assert result.shadowed == {(Category.DERIVED, "total")}

    def test_opaque_data_declares_nothing(self):
        result = SymbolClassifier().classify(_component(OPAQUE_DATA))
        assert result.symbols.state_names == frozenset()
        assert result.diagnostics == []

    def test_data_with_locals_declares_nothing(self):
        result = SymbolClassifier().classify(_component(DATA_WITH_LOCALS))
        assert result.symbols.state_names == frozenset()


# =========================================================================
# Tests: Registry
# =========================================================================

class TestCategoryRegistry:
    def test_lookup_known(self):
        spec = CategoryRegistry.lookup("computed")
        assert spec.category == Category.DERIVED
        assert spec.declares == SymbolRole.DERIVED
        assert spec.consumes_names

    def test_lookup_unknown(self):
        assert CategoryRegistry.lookup("mixins") is None

    def test_every_hook_registered(self):
        for hook in LIFECYCLE_HOOKS:
            assert CategoryRegistry.lookup(hook).category == Category.LIFECYCLE

    def test_emission_priority_is_fixed(self):
        priorities = [emission_priority(option) for option in EMISSION_ORDER]
        assert priorities == sorted(priorities)
        assert emission_priority("mounted") > emission_priority("watch")
        assert emission_priority("created") < emission_priority("mounted")

    def test_list_categories(self):
        listed = {c["option"]: c for c in CategoryRegistry.list_categories()}
        assert listed["data"]["declares"] == "state"
        assert listed["watch"]["declares"] is None
        assert len(listed) == len(EMISSION_ORDER) + len(LIFECYCLE_HOOKS)
