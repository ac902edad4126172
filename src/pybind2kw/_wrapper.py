"""Expression wrapper: lowers transformable expressions to algebra calls."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, NamedTuple

from pybind2kw._cases import validate_case_list, wrap_case_list
from pybind2kw._classifier import is_transformable
from pybind2kw._constants import DEFAULT_MAX_RECURSION_DEPTH
from pybind2kw._errors import (
    ERR_MSG_DEPTH_EXCEEDED,
    ERR_MSG_UNSUPPORTED_NODE,
    MaxDepthExceededError,
    UnsupportedExpressionError,
)
from pybind2kw._utils import FreshNames, is_stable, prepend_statements
from pybind2kw.algebra._base import KeywordAlgebra
from pybind2kw.nodes import (
    UNIT,
    Apply,
    Bind,
    Block,
    Cases,
    DoWhile,
    Expr,
    Function,
    Generator,
    Guard,
    Identifier,
    IfElse,
    Match,
    NodeVisitor,
    Pattern,
    Select,
    Statement,
    TryCatchFinally,
    ValueDef,
    While,
    Wildcard,
    pattern_value,
)

logger = logging.getLogger(__name__)

# Kinds of step in a bind chain
_BIND = "bind"
_NESTED_BIND = "nested_bind"
_PLAIN = "plain"


class _Step(NamedTuple):
    kind: str
    value: Any
    pattern: Pattern | None = None
    inner: str = ""


class Wrapper(NodeVisitor):
    """Lowers an expression into an equivalent tree of keyword-algebra calls.

    ``wrap`` is total: opaque input becomes ``pure(input)`` without looking
    inside it, and every transformable node kind has exactly one rule.
    """

    def __init__(
        self,
        algebra: KeywordAlgebra,
        names: FreshNames | None = None,
        max_depth: int = DEFAULT_MAX_RECURSION_DEPTH,
        fuse_map: bool = False,
    ) -> None:
        self._algebra = algebra
        self._names = names or FreshNames()
        self._max_depth = max_depth
        self._fuse_map = fuse_map
        self._depth = 0

    @property
    def algebra(self) -> KeywordAlgebra:
        return self._algebra

    @property
    def names(self) -> FreshNames:
        return self._names

    def _check_limits(self, expr: Expr) -> None:
        if self._depth > self._max_depth:
            raise MaxDepthExceededError(
                ERR_MSG_DEPTH_EXCEEDED,
                f"depth {self._depth} exceeds limit {self._max_depth}",
                pos=getattr(expr, "pos", None),
            )

    # ---- Entry ----

    def wrap(self, expr: Expr) -> Expr:
        self._depth += 1
        try:
            self._check_limits(expr)
            if not is_transformable(expr):
                return self._algebra.pure(expr)
            logger.debug("lowering %s at %s", expr.tag, expr.pos)
            return self.visit(expr)
        finally:
            self._depth -= 1

    # ---- Bind chains ----

    def _chain(self, stats: Sequence[Statement], result: Expr) -> Expr:
        """Lower ``{ stats; result }`` as a comprehension over ``stats`` yielding ``result``.

        Sources are lowered first, in statement order; the chain is then
        assembled from the last statement outwards.
        """
        steps: list[_Step] = []
        for stat in stats:
            if isinstance(stat, Generator):
                if is_transformable(stat.source):
                    inner = self._names.for_pattern(stat.pattern)
                    steps.append(_Step(_NESTED_BIND, self.wrap(stat.source), stat.pattern, inner))
                else:
                    steps.append(_Step(_BIND, stat.source, stat.pattern))
            elif isinstance(stat, ValueDef) and is_transformable(stat.rhs):
                steps.append(_Step(_BIND, self.wrap(stat.rhs), stat.pattern))
            elif not isinstance(stat, ValueDef) and is_transformable(stat):
                steps.append(_Step(_BIND, self.wrap(stat), Wildcard()))
            else:
                steps.append(_Step(_PLAIN, stat))

        if is_transformable(result):
            rest = self.wrap(result)
            pure_value: Expr | None = None
        else:
            rest = self._algebra.pure(result)
            pure_value = result

        pending: list[Statement] = []
        for step in reversed(steps):
            if step.kind == _PLAIN:
                pending.insert(0, step.value)
                continue
            rest = prepend_statements(pending, rest)
            if pure_value is not None:
                pure_value = prepend_statements(pending, pure_value)
            pending = []
            if step.kind == _NESTED_BIND:
                rest = self._bind(Identifier(step.inner), step.pattern, rest, pure_value)
                rest = self._algebra.flat_map(step.value, Function(Bind(step.inner), rest))
            else:
                rest = self._bind(step.value, step.pattern, rest, pure_value)
            pure_value = None
        return prepend_statements(pending, rest)

    def _bind(
        self, source: Expr, pattern: Pattern, rest: Expr, pure_value: Expr | None
    ) -> Expr:
        if self._fuse_map and pure_value is not None:
            return self._algebra.map(source, Function(pattern, pure_value))
        return self._algebra.flat_map(source, Function(pattern, rest))

    def block(self, node: Block) -> Expr:
        return self._chain(node.stats, node.result)

    def generator(self, node: Generator) -> Expr:
        # A bind standing alone is the block ``{ p <- src; p }``.
        return self._chain((node,), pattern_value(node.pattern))

    def value_def(self, node: ValueDef) -> Expr:
        return self._chain((node,), UNIT)

    def guard(self, node: Guard) -> Expr:
        raise UnsupportedExpressionError(
            ERR_MSG_UNSUPPORTED_NODE,
            "guard outside of a comprehension clause list",
            pos=node.pos,
        )

    # ---- Calls ----

    def _bind_parts(self, parts: Sequence[Expr]) -> tuple[list[Statement], list[Expr]]:
        """Alias call parts to fresh names so binds run in left-to-right order.

        Transformable parts are bound; effectful opaque parts that precede the
        last transformable part are aliased so they still run first.
        """
        last = max(i for i, part in enumerate(parts) if is_transformable(part))
        stats: list[Statement] = []
        values: list[Expr] = []
        for i, part in enumerate(parts):
            if i > last or is_stable(part):
                values.append(part)
                continue
            name = self._names.fresh("arg")
            stats.append(ValueDef(Bind(name), part, pos=part.pos))
            values.append(Identifier(name))
        return stats, values

    def apply(self, node: Apply) -> Expr:
        callee = node.callee
        if isinstance(callee, Select):
            # Method call: only the receiver is aliased, the selection stays applied.
            stats, values = self._bind_parts((callee.qualifier, *node.args))
            method = Select(values[0], callee.name, pos=callee.pos)
            return self._chain(stats, Apply(method, tuple(values[1:]), pos=node.pos))
        stats, values = self._bind_parts((callee, *node.args))
        return self._chain(stats, Apply(values[0], tuple(values[1:]), pos=node.pos))

    def select(self, node: Select) -> Expr:
        stats, values = self._bind_parts((node.qualifier,))
        return self._chain(stats, Select(values[0], node.name, pos=node.pos))

    # ---- Control flow ----

    def if_else(self, node: IfElse) -> Expr:
        return self._algebra.if_then_else(
            self.wrap(node.cond),
            self.wrap(node.then_branch),
            self.wrap(node.else_branch),
        )

    def while_loop(self, node: While) -> Expr:
        return self._algebra.while_do(self.wrap(node.cond), self.wrap(node.body))

    def do_while(self, node: DoWhile) -> Expr:
        return self._algebra.do_while(self.wrap(node.body), self.wrap(node.cond))

    def match(self, node: Match) -> Expr:
        validate_case_list(node.arms, node.pos)
        scrutinee = self.wrap(node.scrutinee)
        arms = wrap_case_list(node.arms, self.wrap, self._algebra, node.pos)
        return self._algebra.match_case(scrutinee, Cases(arms, pos=node.pos))

    def try_catch_finally(self, node: TryCatchFinally) -> Expr:
        if node.arms is not None:
            validate_case_list(node.arms, node.pos)
        body = self.wrap(node.body)
        if node.arms is None and node.finalizer is None:
            return body
        if node.arms is None:
            return self._algebra.try_finally(body, self.wrap(node.finalizer))
        cases = Cases(wrap_case_list(node.arms, self.wrap, self._algebra, node.pos), pos=node.pos)
        if node.finalizer is None:
            return self._algebra.try_catch(body, cases)
        return self._algebra.try_catch_finally(body, cases, self.wrap(node.finalizer))
