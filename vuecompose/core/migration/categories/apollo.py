"""Data-fetching category: ``apollo`` smart queries → ``useQuery`` bindings.

Per binding ``key`` the emitted block is, in order::

    const key_gql = gql`...`;
    const key_variables = computed(() => ({ ... }));        # only with variables
    const q_key = useQuery(key_gql, key_variables, { ... });
    const payload_result = computed(() => q_key.result.value?.payload ?? null);  # only with result

Every piece except the query source is optional; a missing or malformed
piece drops its option (with a diagnostic), never the binding.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ...ast_parser.toolkit import Node, named_children, node_text, property_name, string_value
from ...constants import APOLLO_PASSTHROUGH_OPTIONS, RESERVED_MARKER
from ..emit import arrow, call, const_decl, expression_body, member, object_literal
from ..models import Category, DeclarationResult, Diagnostic, DiagnosticCode, ObjectMember
from ..rewriter import ReferenceRewriter, RewriteOutcome
from ..shapes import FunctionShape, ShapeKind, as_function, object_members, returned_object, shape_of
from .base import CategoryTransformer, TransformContext

logger = logging.getLogger(__name__)

_HANDLED_KEYS = frozenset({"query", "variables", "skip", "update", "result"}) | frozenset(APOLLO_PASSTHROUGH_OPTIONS)


def escape_template(text: str) -> str:
    """Make raw string-literal content safe inside a template literal."""
    return text.replace("\\`", "`").replace("`", "\\`").replace("${", "\\${")


def query_payload(node: Node, source: bytes) -> Optional[str]:
    """Static query text of a ``query:`` value, or None when it is not static.

    ``require('<path>')`` yields the path, ``gql`...``` its template body,
    a plain string or substitution-free template its content.
    """
    kind = shape_of(node)
    if kind == ShapeKind.STRING:
        value = string_value(node, source)
        if value is None:
            return None
        return value if node.type == "template_string" else escape_template(value)

    if kind == ShapeKind.TAGGED_TEMPLATE:
        callee = node.child_by_field_name("function")
        template = node.child_by_field_name("arguments")
        if callee is None or node_text(callee, source) != "gql":
            return None
        return string_value(template, source)

    if kind == ShapeKind.CALL:
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        if callee is None or node_text(callee, source) != "require" or arguments is None:
            return None
        args = named_children(arguments)
        if len(args) != 1 or args[0].type != "string":
            return None
        return escape_template(string_value(args[0], source))

    return None


def payload_key(result: Optional[FunctionShape], source: bytes, default: str) -> str:
    """Field read from the response, taken from ``result({ data: { key } })``."""
    if result is None or not result.parameters:
        return default
    pattern = result.parameters[0]
    if pattern.type == "required_parameter":
        pattern = pattern.child_by_field_name("pattern") or pattern
    if pattern.type != "object_pattern":
        return default
    for prop in named_children(pattern):
        if prop.type != "pair_pattern":
            continue
        if property_name(prop.child_by_field_name("key"), source) != "data":
            continue
        inner = prop.child_by_field_name("value")
        if inner is None or inner.type != "object_pattern":
            return default
        for candidate in named_children(inner):
            if candidate.type == "shorthand_property_identifier_pattern":
                return node_text(candidate, source)
            if candidate.type == "pair_pattern":
                key = property_name(candidate.child_by_field_name("key"), source)
                if key:
                    return key
        return default
    return default


@dataclass
class _Binding:
    """Generated statements for one binding plus what they pulled in."""
    statements: List[str] = field(default_factory=list)
    helpers: List[str] = field(default_factory=list)
    outcomes: List[RewriteOutcome] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    # None: option values are copied without rewriting
    rewriter: Optional[ReferenceRewriter] = None


class ApolloTransformer(CategoryTransformer):
    category = Category.DATA_FETCHING
    consumes_names = True

    def transform(self, entry: ObjectMember, ctx: TransformContext, priority: int) -> List[DeclarationResult]:
        if shape_of(entry.value) != ShapeKind.OBJECT:
            return [self.failure("apollo", self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f"apollo must be an object, got {entry.value.type}",
                node=entry.value,
            ))]

        results = []
        for binding in object_members(entry.value, ctx.source):
            if binding.name is None:
                results.append(self.failure("apollo", self.diagnostic(
                    ctx,
                    DiagnosticCode.UNSUPPORTED_SHAPE,
                    f"Unsupported apollo entry: {node_text(binding.node, ctx.source)}",
                    node=binding.node,
                )))
                continue
            if binding.name.startswith(RESERVED_MARKER):
                results.append(self.failure(binding.name, self.diagnostic(
                    ctx,
                    DiagnosticCode.IGNORED_OPTION,
                    f'Apollo option "{binding.name}" is not migrated',
                    symbol=binding.name,
                    node=binding.node,
                )))
                continue
            results.append(self.guarded(
                binding.name,
                ctx,
                lambda b=binding: self._binding(b, ctx, priority, rewrite=True),
                fallback=lambda b=binding: self._binding(b, ctx, priority, rewrite=False),
            ))
        return results

    # ── One binding ──────────────────────────────────────────────

    def _binding(
        self, binding: ObjectMember, ctx: TransformContext, priority: int, rewrite: bool
    ) -> DeclarationResult:
        key = binding.name
        kind = shape_of(binding.value)

        if kind == ShapeKind.OBJECT:
            config: Dict[str, ObjectMember] = {}
            for sub in object_members(binding.value, ctx.source):
                if sub.name is not None:
                    config[sub.name] = sub
            query_node = config["query"].value if "query" in config else None
        elif kind in (ShapeKind.TAGGED_TEMPLATE, ShapeKind.STRING, ShapeKind.CALL):
            # `key: gql`...`` shorthand: a query with default options
            config = {}
            query_node = binding.value
        else:
            return self._missing_query(binding, ctx, f"expected an object, got {binding.value.type}")

        payload = query_payload(query_node, ctx.source) if query_node is not None else None
        if payload is None:
            reason = "no query" if query_node is None else "query is not a static string, gql tag or require()"
            return self._missing_query(binding, ctx, reason)

        out = _Binding(helpers=["gql", "useQuery"], rewriter=ctx.rewriter if rewrite else None)
        for name, sub in config.items():
            if name not in _HANDLED_KEYS:
                out.diagnostics.append(self.diagnostic(
                    ctx,
                    DiagnosticCode.IGNORED_OPTION,
                    f'Apollo option "{name}" of "{key}" is not migrated',
                    symbol=key,
                    node=sub.node,
                ))

        gql_name = f"{key}_gql"
        out.statements.append(const_decl(gql_name, f"gql`{payload}`"))

        variables_name = self._variables(key, config.get("variables"), ctx, out)
        options = self._options(key, config, ctx, out)

        handle = f"q_{key}"
        out.statements.append(const_decl(handle, call("useQuery", gql_name, variables_name or "{}", options)))

        self._result(key, handle, config.get("result"), ctx, out)

        return self.declaration(
            key,
            "\n".join(out.statements),
            priority,
            helpers=out.helpers,
            outcomes=out.outcomes,
            diagnostics=out.diagnostics,
        )

    def _missing_query(self, binding: ObjectMember, ctx: TransformContext, reason: str) -> DeclarationResult:
        return self.failure(binding.name, self.diagnostic(
            ctx,
            DiagnosticCode.MISSING_QUERY,
            f'Skipped apollo binding "{binding.name}": {reason}',
            symbol=binding.name,
            node=binding.value,
        ))

    # ── Variables ────────────────────────────────────────────────

    def _variables(
        self, key: str, sub: Optional[ObjectMember], ctx: TransformContext, out: _Binding
    ) -> Optional[str]:
        if sub is None:
            return None

        kind = shape_of(sub.value)
        if kind == ShapeKind.OBJECT:
            body = expression_body(self._rewrite(sub.value, key, sub.indent, ctx, out))
        elif kind == ShapeKind.FUNCTION:
            shape = as_function(sub.value)
            found = returned_object(shape)
            if found.obj is not None and not found.other_statements:
                body = expression_body(self._rewrite(found.obj, key, sub.indent, ctx, out))
            else:
                # Anything more involved is kept whole inside the computation
                body = self._rewrite(shape.body, key, sub.indent, ctx, out)
                if not shape.has_block_body:
                    body = expression_body(body)
        else:
            out.diagnostics.append(self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f'Variables of "{key}" must be an object or a function, got {sub.value.type}; none passed',
                symbol=key,
                node=sub.value,
            ))
            return None

        name = f"{key}_variables"
        out.statements.append(const_decl(name, call("computed", arrow("()", body))))
        if "computed" not in out.helpers:
            out.helpers.append("computed")
        return name

    # ── Options ──────────────────────────────────────────────────

    def _options(self, key: str, config: Dict[str, ObjectMember], ctx: TransformContext, out: _Binding) -> str:
        entries: List[Tuple[str, str]] = []

        skip = config.get("skip")
        if skip is not None:
            entries.append(("skip", self._value(skip, key, ctx, out)))
        else:
            entries.append(("enabled", "true"))

        for name, sub in config.items():
            if name in APOLLO_PASSTHROUGH_OPTIONS:
                entries.append((name, self._value(sub, key, ctx, out)))

        update = config.get("update")
        if update is not None:
            if shape_of(update.value) in (ShapeKind.FUNCTION, ShapeKind.IDENTIFIER):
                entries.append(("transformResult", self._value(update, key, ctx, out)))
            else:
                out.diagnostics.append(self.diagnostic(
                    ctx,
                    DiagnosticCode.UNSUPPORTED_SHAPE,
                    f'update of "{key}" must be a function, got {update.value.type}',
                    symbol=key,
                    node=update.value,
                ))

        return object_literal(entries)

    def _value(self, sub: ObjectMember, key: str, ctx: TransformContext, out: _Binding) -> str:
        """Option value with self-references rewritten; functions become arrows."""
        if shape_of(sub.value) == ShapeKind.FUNCTION:
            text, outcomes = self.function_text(
                as_function(sub.value), ctx, owner=key, dedent=sub.indent, rewriter=out.rewriter,
            )
            out.outcomes.extend(outcomes)
            return text
        return self._rewrite(sub.value, key, sub.indent, ctx, out)

    # ── Result accessor ──────────────────────────────────────────

    def _result(
        self, key: str, handle: str, sub: Optional[ObjectMember], ctx: TransformContext, out: _Binding
    ) -> None:
        if sub is None:
            return
        shape = as_function(sub.value)
        if shape is None:
            out.diagnostics.append(self.diagnostic(
                ctx,
                DiagnosticCode.UNSUPPORTED_SHAPE,
                f'result of "{key}" must be a function, got {sub.value.type}',
                symbol=key,
                node=sub.value,
            ))
            return

        if not shape.has_block_body or named_children(shape.body):
            out.diagnostics.append(self.diagnostic(
                ctx,
                DiagnosticCode.DROPPED_CODE,
                f'Body of result() in "{key}" was not migrated; only its payload key is used',
                symbol=key,
                node=shape.body,
            ))

        field_name = payload_key(shape, ctx.source, key)
        read = member(member(handle, "result"), "value") + f"?.{field_name} ?? null"
        out.statements.append(const_decl(f"{field_name}_result", call("computed", arrow("()", read))))
        if "computed" not in out.helpers:
            out.helpers.append("computed")

    def _rewrite(self, node: Node, key: str, dedent: int, ctx: TransformContext, out: _Binding) -> str:
        if out.rewriter is None:
            return self.raw(node, ctx, dedent=dedent)
        outcome = out.rewriter.rewrite(node, ctx.source, owner=key, category=self.category.value, dedent=dedent)
        out.outcomes.append(outcome)
        return outcome.text
