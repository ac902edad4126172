"""Node classifier: decides whether an expression contains a bind."""

from __future__ import annotations

from typing import Any

from pybind2kw._constants import DEFAULT_MAX_RECURSION_DEPTH
from pybind2kw._errors import ERR_MSG_DEPTH_EXCEEDED, MaxDepthExceededError
from pybind2kw.nodes import (
    Apply,
    Arm,
    Block,
    Cases,
    Comprehension,
    DoWhile,
    Function,
    Generator,
    Guard,
    Identifier,
    IfElse,
    KeywordCall,
    Literal,
    Match,
    NodeVisitor,
    Select,
    TransformTag,
    TryCatchFinally,
    ValueDef,
    While,
)

OPAQUE = TransformTag.OPAQUE
TRANSFORMABLE = TransformTag.TRANSFORMABLE


def _tag(flag: bool) -> TransformTag:
    return TRANSFORMABLE if flag else OPAQUE


class Classifier(NodeVisitor):
    """Structural classification; looks only at a node and its direct children.

    Comprehensions are boundaries: whatever their clauses contain, they are
    opaque to the expression around them. Nesting deeper than ``max_depth``
    raises instead of exhausting the interpreter stack.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_RECURSION_DEPTH) -> None:
        self._max_depth = max_depth
        self._depth = 0

    def visit(self, node: Any) -> TransformTag:
        self._depth += 1
        try:
            if self._depth > self._max_depth:
                raise MaxDepthExceededError(
                    ERR_MSG_DEPTH_EXCEEDED,
                    f"classification depth {self._depth} exceeds limit {self._max_depth}",
                    pos=getattr(node, "pos", None),
                )
            method = getattr(self, node.tag, None)
            if method is None:
                return self.__default__(node)
            return method(node)
        finally:
            self._depth -= 1

    def _any(self, nodes: Any) -> bool:
        for n in nodes:
            if n is not None and self.visit(n) is TRANSFORMABLE:
                return True
        return False

    def _arm(self, arm: Arm) -> bool:
        return self._any((arm.guard, arm.body))

    # ---- Leaves and boundaries ----

    def literal(self, node: Literal) -> TransformTag:
        return OPAQUE

    def identifier(self, node: Identifier) -> TransformTag:
        return OPAQUE

    def comprehension(self, node: Comprehension) -> TransformTag:
        return OPAQUE

    def keyword_call(self, node: KeywordCall) -> TransformTag:
        return OPAQUE

    def function(self, node: Function) -> TransformTag:
        return OPAQUE

    def cases(self, node: Cases) -> TransformTag:
        return OPAQUE

    # ---- Binds and aliases ----

    def generator(self, node: Generator) -> TransformTag:
        return TRANSFORMABLE

    def value_def(self, node: ValueDef) -> TransformTag:
        return self.visit(node.rhs)

    def guard(self, node: Guard) -> TransformTag:
        return self.visit(node.cond)

    # ---- Composite expressions ----

    def select(self, node: Select) -> TransformTag:
        return self.visit(node.qualifier)

    def apply(self, node: Apply) -> TransformTag:
        return _tag(self._any((node.callee, *node.args)))

    def block(self, node: Block) -> TransformTag:
        return _tag(self._any((*node.stats, node.result)))

    # ---- Control flow ----

    def if_else(self, node: IfElse) -> TransformTag:
        return _tag(self._any((node.cond, node.then_branch, node.else_branch)))

    def while_loop(self, node: While) -> TransformTag:
        return _tag(self._any((node.cond, node.body)))

    def do_while(self, node: DoWhile) -> TransformTag:
        return _tag(self._any((node.body, node.cond)))

    def match(self, node: Match) -> TransformTag:
        if self.visit(node.scrutinee) is TRANSFORMABLE:
            return TRANSFORMABLE
        return _tag(any(self._arm(arm) for arm in node.arms))

    def try_catch_finally(self, node: TryCatchFinally) -> TransformTag:
        if self._any((node.body, node.finalizer)):
            return TRANSFORMABLE
        return _tag(any(self._arm(arm) for arm in node.arms or ()))


def classify(node: Any) -> TransformTag:
    """Classify an expression (or an arm) as opaque or transformable."""
    classifier = Classifier()
    if isinstance(node, Arm):
        return _tag(classifier._arm(node))
    return classifier.visit(node)


def is_transformable(node: Any) -> bool:
    return classify(node) is TRANSFORMABLE
