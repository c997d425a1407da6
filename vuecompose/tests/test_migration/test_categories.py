"""Tests for the state, props, emits, setup, computed, methods and lifecycle transformers."""

from vuecompose.core.ast_parser import parse_source
from vuecompose.core.config import MigrationConfig
from vuecompose.core.migration.categories import CategoryRegistry, TransformContext
from vuecompose.core.migration.classifier import SymbolClassifier
from vuecompose.core.migration.component import find_component
from vuecompose.core.migration.models import DiagnosticCode, RewriteContext, Severity
from vuecompose.core.migration.rewriter import ReferenceRewriter


# ── Fixtures ──────────────────────────────────────────────────────────────


def _context(source, language="javascript"):
    parsed = parse_source(source, "Comp.js", language)
    component = find_component(parsed)
    symbols = SymbolClassifier().classify(component).symbols
    config = MigrationConfig()
    rewriter = ReferenceRewriter(RewriteContext(
        symbols=symbols,
        reserved_accessors=config.reserved_accessors,
        file_path="Comp.js",
    ))
    return TransformContext(component, symbols, rewriter, config, language)


def _run(source, option, language="javascript"):
    ctx = _context(source, language)
    entry = ctx.component.get(option)
    return CategoryRegistry.lookup(option).transformer.transform(entry, ctx, 0)


def _texts(results):
    return [r.declaration.text for r in results if r.declaration is not None]


def _codes(results):
    return [d.code for r in results for d in r.diagnostics]


DATA_FUNCTION = '''export default {
  props: ['start'],
  data() {
    return {
      count: this.start,
      items: [
        1,
        2,
      ],
      reset() {
        return 0;
      },
    };
  },
};
'''

DATA_WITH_STATEMENTS = '''export default {
  data() {
    const seed = 3;
    return { count: seed };
  },
};
'''

DATA_NOT_OBJECT = '''export default {
  data() {
    return buildState();
  },
};
'''

DATA_OBJECT = '''export default {
  data: { open: false },
};
'''

PROPS_AND_EMITS = '''export default {
  props: {
    title: String,
  },
  emits: ['save', 'close'],
};
'''

SETUP = '''export default {
  setup() {
    const store = useStore();
    const double = (n) => n * 2;
    return { store, double, total: computed(() => store.total) };
  },
};
'''

SETUP_WITH_PARAMS = '''export default {
  setup(props, { emit }) {
    return () => h('div');
  },
};
'''

COMPUTED = '''export default {
  data() {
    return { first: 'Ada' };
  },
  computed: {
    upper() {
      return this.first.toUpperCase();
    },
    short: () => 'A',
    name: {
      get() {
        return this.first;
      },
      set(value) {
        this.first = value;
      },
    },
    scaled(factor) {
      return factor;
    },
    constant: 42,
  },
};
'''

METHODS = '''export default {
  data() {
    return { count: 0, items: [] };
  },
  methods: {
    increment(step = this.count) {
      this.count += step;
    },
    async load() {
      this.items = await fetchItems();
    },
    *ids() {
      yield this.count;
    },
    search: debounce(function () { this.load(); }, 300),
    alias: existingHandler,
    helper,
  },
};
'''

LIFECYCLE = '''export default {
  mounted() {
    this.load();
  },
  async created() {
    await this.load();
  },
  beforeUnmount: stopPolling,
  updated: 'refresh',
};
'''


# =========================================================================
# Tests: State
# =========================================================================

class TestDataTransformer:
    def test_function_form(self):
        results = _run(DATA_FUNCTION, "data")
        assert _texts(results) == [
            "const count = ref(this.start);",
            "const items = ref([\n  1,\n  2,\n]);",
            "const reset = ref(() => {\n  return 0;\n});",
        ]
        assert all(r.declaration.helpers == {"ref"} for r in results)

    def test_left_for_global_pass(self):
        results = _run(DATA_FUNCTION, "data")
        assert all(not r.declaration.resolved for r in results)

    def test_object_form(self):
        assert _texts(_run(DATA_OBJECT, "data")) == ["const open = ref(false);"]

    def test_statements_before_return_block_migration(self):
        results = _run(DATA_WITH_STATEMENTS, "data")
        assert _texts(results) == []
        assert _codes(results) == [DiagnosticCode.UNSUPPORTED_SHAPE]
        assert "const seed = 3;" in results[0].diagnostics[0].message

    def test_non_object_return_produces_nothing(self):
        results = _run(DATA_NOT_OBJECT, "data")
        assert _texts(results) == []
        assert _codes(results) == [DiagnosticCode.UNSUPPORTED_SHAPE]


# =========================================================================
# Tests: Props, emits and setup
# =========================================================================

class TestPropsAndEmits:
    def test_props_declaration_kept_verbatim(self):
        results = _run(PROPS_AND_EMITS, "props")
        assert _texts(results) == ["const props = defineProps({\n  title: String,\n});"]

    def test_emits(self):
        results = _run(PROPS_AND_EMITS, "emits")
        assert _texts(results) == ["const emit = defineEmits(['save', 'close']);"]


class TestSetupTransformer:
    def test_inlines_body_and_returned_entries(self):
        results = _run(SETUP, "setup")
        assert _texts(results) == [
            "const store = useStore();\nconst double = (n) => n * 2;",
            "const total = computed(() => store.total);",
        ]
        assert _codes(results) == []

    def test_parameters_and_render_function(self):
        results = _run(SETUP_WITH_PARAMS, "setup")
        assert _texts(results) == []
        codes = _codes(results)
        assert DiagnosticCode.DROPPED_CODE in codes
        assert DiagnosticCode.UNSUPPORTED_SHAPE in codes


# =========================================================================
# Tests: Derived values
# =========================================================================

class TestComputedTransformer:
    def test_getter(self):
        results = _run(COMPUTED, "computed")
        texts = _texts(results)
        assert "const upper = computed(() => {\n  return first.value.toUpperCase();\n});" in texts
        assert "const short = computed(() => 'A');" in texts

    def test_get_set_object(self):
        texts = _texts(_run(COMPUTED, "computed"))
        assert (
            "const name = computed({\n"
            "  get: () => {\n"
            "    return first.value;\n"
            "  },\n"
            "  set: (value) => {\n"
            "    first.value = value;\n"
            "  },\n"
            "});"
        ) in texts

    def test_parameters_and_non_functions_skipped(self):
        results = _run(COMPUTED, "computed")
        skipped = {r.symbol for r in results if r.declaration is None}
        assert skipped == {"scaled", "constant"}
        assert _codes(results).count(DiagnosticCode.UNSUPPORTED_SHAPE) == 2

    def test_rewritten_locally(self):
        results = _run(COMPUTED, "computed")
        assert all(r.declaration.resolved for r in results if r.declaration)
        assert all(r.declaration.helpers == {"computed"} for r in results if r.declaration)


# =========================================================================
# Tests: Actions
# =========================================================================

class TestMethodsTransformer:
    def test_arrow_with_rewritten_params_and_body(self):
        texts = _texts(_run(METHODS, "methods"))
        assert "const increment = (step = count.value) => {\n  count.value += step;\n};" in texts

    def test_async_kept(self):
        texts = _texts(_run(METHODS, "methods"))
        assert "const load = async () => {\n  items.value = await fetchItems();\n};" in texts

    def test_generator_stays_function(self):
        texts = _texts(_run(METHODS, "methods"))
        assert "const ids = function* () {\n  yield count.value;\n};" in texts

    def test_wrapped_and_aliased(self):
        texts = _texts(_run(METHODS, "methods"))
        assert "const search = debounce(function () { load(); }, 300);" in texts
        assert "const alias = existingHandler;" in texts

    def test_shorthand_not_redeclared(self):
        results = _run(METHODS, "methods")
        assert "helper" not in {r.symbol for r in results}

    def test_failure_falls_back_to_original_body(self):
        ctx = _context(METHODS)
        original = ctx.rewriter.rewrite

        def flaky(node, source, **kwargs):
            if kwargs.get("owner") == "load":
                raise RuntimeError("boom")
            return original(node, source, **kwargs)

        ctx.rewriter.rewrite = flaky
        entry = ctx.component.get("methods")
        results = CategoryRegistry.lookup("methods").transformer.transform(entry, ctx, 0)

        load = next(r for r in results if r.symbol == "load")
        assert load.declaration.text == "const load = async () => {\n  this.items = await fetchItems();\n};"
        assert load.diagnostics[0].code == DiagnosticCode.REWRITE_FAILED
        assert "boom" in load.diagnostics[0].message
        # Other methods are unaffected
        assert "const ids = function* () {\n  yield count.value;\n};" in _texts(results)


# =========================================================================
# Tests: Lifecycle hooks
# =========================================================================

class TestLifecycleTransformer:
    def test_function_wrapped_verbatim(self):
        results = _run(LIFECYCLE, "mounted")
        assert _texts(results) == ["onMounted(() => {\n  this.load();\n});"]
        declaration = results[0].declaration
        assert declaration.helpers == {"onMounted"}
        assert not declaration.resolved

    def test_async_hook(self):
        assert _texts(_run(LIFECYCLE, "created")) == ["onCreated(async () => {\n  await this.load();\n});"]

    def test_identifier_passed_through(self):
        assert _texts(_run(LIFECYCLE, "beforeUnmount")) == ["onBeforeUnmount(stopPolling);"]

    def test_other_shapes_reported(self):
        results = _run(LIFECYCLE, "updated")
        assert _texts(results) == []
        assert results[0].diagnostics[0].code == DiagnosticCode.UNSUPPORTED_SHAPE
        assert results[0].diagnostics[0].severity == Severity.WARNING
