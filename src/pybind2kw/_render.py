"""Renderer: writes node trees back to the compact surface notation."""

from __future__ import annotations

from io import StringIO
from typing import Any

from pybind2kw._errors import ERR_MSG_DEPTH_EXCEEDED, MaxDepthExceededError
from pybind2kw.nodes import (
    Apply,
    Arm,
    Bind,
    Block,
    Cases,
    Comprehension,
    Constructor,
    DoWhile,
    Function,
    Generator,
    Guard,
    Identifier,
    IfElse,
    KeywordCall,
    Literal,
    LiteralPattern,
    Match,
    NodeVisitor,
    Select,
    TryCatchFinally,
    TuplePattern,
    Typed,
    ValueDef,
    While,
    Wildcard,
)

BINARY_OPERATORS = frozenset({"||", "&&", "==", "!=", "<", "<=", ">", ">=", "+", "-", "*", "/", "%"})
UNARY_OPERATORS = frozenset({"!", "-"})


def _is_operator_call(node: Any) -> bool:
    if not isinstance(node, Apply) or not isinstance(node.callee, Identifier):
        return False
    name = node.callee.name
    if len(node.args) == 2:
        return name in BINARY_OPERATORS
    if len(node.args) == 1:
        return name in UNARY_OPERATORS
    return False


def _is_atomic(node: Any) -> bool:
    """True if ``node`` renders as a single postfix-safe term."""
    if isinstance(node, Apply):
        return not _is_operator_call(node)
    if isinstance(node, Literal):
        # A leading minus would bind looser than a postfix select.
        return not format_literal(node.value).startswith("-")
    return isinstance(node, (Literal, Identifier, Select, KeywordCall, Block, Cases))


def format_literal(value: Any) -> str:
    if value is None:
        return "()"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return repr(value)


class Renderer(NodeVisitor):
    """Writes one tree into an internal buffer."""

    def __init__(self) -> None:
        self._w = StringIO()

    @property
    def result(self) -> str:
        return self._w.getvalue()

    def _operand(self, node: Any) -> None:
        if _is_atomic(node):
            self.visit(node)
        else:
            self._w.write("(")
            self.visit(node)
            self._w.write(")")

    def _comma_separated(self, nodes: Any) -> None:
        for i, node in enumerate(nodes):
            if i:
                self._w.write(", ")
            self.visit(node)

    # ---- Patterns ----

    def wildcard(self, node: Wildcard) -> None:
        self._w.write("_")

    def bind(self, node: Bind) -> None:
        self._w.write(node.name)

    def constructor(self, node: Constructor) -> None:
        self._w.write(f"{node.name}(")
        self._comma_separated(node.args)
        self._w.write(")")

    def tuple_pattern(self, node: TuplePattern) -> None:
        self._w.write("(")
        self._comma_separated(node.items)
        self._w.write(")")

    def literal_pattern(self, node: LiteralPattern) -> None:
        self._w.write(format_literal(node.value))

    def typed(self, node: Typed) -> None:
        self.visit(node.pattern)
        self._w.write(f": {node.type_name}")

    # ---- Leaves and calls ----

    def literal(self, node: Literal) -> None:
        self._w.write(format_literal(node.value))

    def identifier(self, node: Identifier) -> None:
        self._w.write(node.name)

    def select(self, node: Select) -> None:
        self._operand(node.qualifier)
        self._w.write(f".{node.name}")

    def apply(self, node: Apply) -> None:
        if _is_operator_call(node):
            op = node.callee.name
            if len(node.args) == 1:
                self._w.write(op)
                self._operand(node.args[0])
            else:
                lhs, rhs = node.args
                self._operand(lhs)
                self._w.write(f" {op} ")
                self._operand(rhs)
            return
        self._operand(node.callee)
        self._w.write("(")
        self._comma_separated(node.args)
        self._w.write(")")

    def keyword_call(self, node: KeywordCall) -> None:
        self._w.write(f"{node.name}(")
        self._comma_separated(node.args)
        self._w.write(")")

    def function(self, node: Function) -> None:
        self.visit(node.param)
        self._w.write(" => ")
        self.visit(node.body)

    # ---- Statements ----

    def block(self, node: Block) -> None:
        self._w.write("{ ")
        for stat in node.stats:
            self.visit(stat)
            self._w.write("; ")
        self.visit(node.result)
        self._w.write(" }")

    def generator(self, node: Generator) -> None:
        self.visit(node.pattern)
        self._w.write(" <- ")
        self.visit(node.source)

    def value_def(self, node: ValueDef) -> None:
        self._w.write("val ")
        self._alias(node)

    def _alias(self, node: ValueDef) -> None:
        self.visit(node.pattern)
        self._w.write(" = ")
        self.visit(node.rhs)

    def guard(self, node: Guard) -> None:
        self._w.write("if ")
        self.visit(node.cond)

    # ---- Control flow ----

    def if_else(self, node: IfElse) -> None:
        self._w.write("if (")
        self.visit(node.cond)
        self._w.write(") ")
        self.visit(node.then_branch)
        self._w.write(" else ")
        self.visit(node.else_branch)

    def while_loop(self, node: While) -> None:
        self._w.write("while (")
        self.visit(node.cond)
        self._w.write(") ")
        self.visit(node.body)

    def do_while(self, node: DoWhile) -> None:
        self._w.write("do ")
        self.visit(node.body)
        self._w.write(" while (")
        self.visit(node.cond)
        self._w.write(")")

    def _arms(self, arms: tuple[Arm, ...]) -> None:
        self._w.write("{ ")
        for i, arm in enumerate(arms):
            if i:
                self._w.write("; ")
            self._w.write("case ")
            self.visit(arm.pattern)
            if arm.guard is not None:
                self._w.write(" if ")
                self.visit(arm.guard)
            self._w.write(" => ")
            self.visit(arm.body)
        self._w.write(" }")

    def match(self, node: Match) -> None:
        self._operand(node.scrutinee)
        self._w.write(" match ")
        self._arms(node.arms)

    def cases(self, node: Cases) -> None:
        self._arms(node.arms)

    def try_catch_finally(self, node: TryCatchFinally) -> None:
        self._w.write("try ")
        self.visit(node.body)
        if node.arms is not None:
            self._w.write(" catch ")
            self._arms(node.arms)
        if node.finalizer is not None:
            self._w.write(" finally ")
            self.visit(node.finalizer)

    def comprehension(self, node: Comprehension) -> None:
        self._w.write("for { ")
        for i, clause in enumerate(node.clauses):
            if i:
                self._w.write("; ")
            if isinstance(clause, ValueDef):
                self._alias(clause)
            else:
                self.visit(clause)
        self._w.write(" } yield " if node.is_yield else " } ")
        self.visit(node.body)


def render(node: Any) -> str:
    """Render an input or lowered tree as surface text.

    Raises:
        MaxDepthExceededError: If the tree is nested too deeply to render.
    """
    renderer = Renderer()
    try:
        renderer.visit(node)
    except RecursionError as e:
        raise MaxDepthExceededError(
            ERR_MSG_DEPTH_EXCEEDED, "interpreter recursion limit reached while rendering", wrapped=e
        ) from e
    return renderer.result
