"""Tree nodes for bind lowering.

Every node is an immutable dataclass with a class-level ``tag`` used for
visitor dispatch. Sequence children are stored as tuples. Source positions
are carried along for error reporting but never take part in equality.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Union

from pybind2kw._errors import ERR_MSG_UNSUPPORTED_NODE, UnsupportedExpressionError


@dataclass(frozen=True)
class Position:
    """Line/column of a node in its source text (1-based)."""

    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class TransformTag(enum.Enum):
    """Classification of an expression."""

    OPAQUE = "opaque"
    TRANSFORMABLE = "transformable"


def _pos() -> Any:
    return field(default=None, compare=False, repr=False, kw_only=True)


def _freeze(node: Any, *names: str) -> None:
    for name in names:
        value = getattr(node, name)
        if value is not None and not isinstance(value, tuple):
            object.__setattr__(node, name, tuple(value))


class Node:
    tag: ClassVar[str] = ""
    pos: Position | None


# ---- Patterns ----


@dataclass(frozen=True)
class Wildcard(Node):
    tag: ClassVar[str] = "wildcard"
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Bind(Node):
    tag: ClassVar[str] = "bind"
    name: str
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Constructor(Node):
    tag: ClassVar[str] = "constructor"
    name: str
    args: tuple[Pattern, ...] = ()
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "args")


@dataclass(frozen=True)
class TuplePattern(Node):
    tag: ClassVar[str] = "tuple_pattern"
    items: tuple[Pattern, ...]
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "items")


@dataclass(frozen=True)
class LiteralPattern(Node):
    tag: ClassVar[str] = "literal_pattern"
    value: Any
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Typed(Node):
    """Type-test pattern, e.g. ``e: IOException`` in a catch arm."""

    tag: ClassVar[str] = "typed"
    pattern: Pattern
    type_name: str
    pos: Position | None = _pos()


Pattern = Union[Wildcard, Bind, Constructor, TuplePattern, LiteralPattern, Typed]


# ---- Expressions ----


@dataclass(frozen=True)
class Literal(Node):
    """A constant. ``None`` stands for the unit value ``()``."""

    tag: ClassVar[str] = "literal"
    value: Any
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Identifier(Node):
    tag: ClassVar[str] = "identifier"
    name: str
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Select(Node):
    tag: ClassVar[str] = "select"
    qualifier: Expr
    name: str
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Apply(Node):
    """A call. Operators are calls of an ``Identifier`` named by the operator."""

    tag: ClassVar[str] = "apply"
    callee: Expr
    args: tuple[Expr, ...] = ()
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "args")


@dataclass(frozen=True)
class Generator(Node):
    """Bind ``pattern <- source``."""

    tag: ClassVar[str] = "generator"
    pattern: Pattern
    source: Expr
    pos: Position | None = _pos()


@dataclass(frozen=True)
class ValueDef(Node):
    """Alias ``pattern = rhs``."""

    tag: ClassVar[str] = "value_def"
    pattern: Pattern
    rhs: Expr
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Guard(Node):
    """Comprehension filter ``if cond``."""

    tag: ClassVar[str] = "guard"
    cond: Expr
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Block(Node):
    tag: ClassVar[str] = "block"
    stats: tuple[Statement, ...]
    result: Expr
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "stats")


@dataclass(frozen=True)
class IfElse(Node):
    tag: ClassVar[str] = "if_else"
    cond: Expr
    then_branch: Expr
    else_branch: Expr
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Arm:
    """One ``case pattern if guard => body`` branch."""

    pattern: Pattern
    guard: Expr | None
    body: Expr
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Match(Node):
    tag: ClassVar[str] = "match"
    scrutinee: Expr
    arms: tuple[Arm, ...]
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "arms")


@dataclass(frozen=True)
class While(Node):
    tag: ClassVar[str] = "while_loop"
    cond: Expr
    body: Expr
    pos: Position | None = _pos()


@dataclass(frozen=True)
class DoWhile(Node):
    tag: ClassVar[str] = "do_while"
    body: Expr
    cond: Expr
    pos: Position | None = _pos()


@dataclass(frozen=True)
class TryCatchFinally(Node):
    tag: ClassVar[str] = "try_catch_finally"
    body: Expr
    arms: tuple[Arm, ...] | None = None
    finalizer: Expr | None = None
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "arms")


@dataclass(frozen=True)
class Comprehension(Node):
    """``for { clauses } yield body`` (or ``for { clauses } body``)."""

    tag: ClassVar[str] = "comprehension"
    clauses: tuple[Clause, ...]
    body: Expr
    is_yield: bool = True
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "clauses")


# ---- Output-only expressions ----


@dataclass(frozen=True)
class KeywordCall(Node):
    """Invocation of one keyword-algebra operation."""

    tag: ClassVar[str] = "keyword_call"
    name: str
    args: tuple[Any, ...] = ()
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "args")


@dataclass(frozen=True)
class Function(Node):
    """Continuation ``param => body``."""

    tag: ClassVar[str] = "function"
    param: Pattern
    body: Expr
    pos: Position | None = _pos()


@dataclass(frozen=True)
class Cases(Node):
    """An arm list passed as an argument."""

    tag: ClassVar[str] = "cases"
    arms: tuple[Arm, ...]
    pos: Position | None = _pos()

    def __post_init__(self) -> None:
        _freeze(self, "arms")


Expr = Union[
    Literal,
    Identifier,
    Select,
    Apply,
    Block,
    Generator,
    ValueDef,
    Guard,
    IfElse,
    Match,
    While,
    DoWhile,
    TryCatchFinally,
    Comprehension,
    KeywordCall,
    Function,
    Cases,
]
Statement = Union[Generator, ValueDef, Expr]
Clause = Union[Generator, ValueDef, Guard]

UNIT = Literal(None)


class NodeVisitor:
    """Dispatches on ``node.tag`` to a method of the same name."""

    def visit(self, node: Any) -> Any:
        method = getattr(self, node.tag, None)
        if method is None:
            return self.__default__(node)
        return method(node)

    def __default__(self, node: Any) -> Any:
        raise UnsupportedExpressionError(
            ERR_MSG_UNSUPPORTED_NODE,
            f"{type(self).__name__} has no handler for {type(node).__name__}",
            pos=getattr(node, "pos", None),
        )


def pattern_binders(pattern: Pattern) -> list[str]:
    """Names bound by a pattern, left to right, duplicates kept."""
    if isinstance(pattern, Bind):
        return [pattern.name]
    if isinstance(pattern, Typed):
        return pattern_binders(pattern.pattern)
    if isinstance(pattern, Constructor):
        return [name for arg in pattern.args for name in pattern_binders(arg)]
    if isinstance(pattern, TuplePattern):
        return [name for item in pattern.items for name in pattern_binders(item)]
    return []


def pattern_value(pattern: Pattern) -> Expr:
    """The value a block ending in ``pattern <- source`` evaluates to."""
    if isinstance(pattern, Bind):
        return Identifier(pattern.name, pos=pattern.pos)
    if isinstance(pattern, Typed):
        return pattern_value(pattern.pattern)
    return UNIT


def iter_children(node: Any) -> Iterator[Any]:
    """Direct expression children of a node, in evaluation order."""
    if isinstance(node, Select):
        yield node.qualifier
    elif isinstance(node, (Apply, KeywordCall)):
        if isinstance(node, Apply):
            yield node.callee
        yield from node.args
    elif isinstance(node, Block):
        yield from node.stats
        yield node.result
    elif isinstance(node, Generator):
        yield node.source
    elif isinstance(node, ValueDef):
        yield node.rhs
    elif isinstance(node, Guard):
        yield node.cond
    elif isinstance(node, IfElse):
        yield node.cond
        yield node.then_branch
        yield node.else_branch
    elif isinstance(node, Match):
        yield node.scrutinee
        yield from _arm_children(node.arms)
    elif isinstance(node, While):
        yield node.cond
        yield node.body
    elif isinstance(node, DoWhile):
        yield node.body
        yield node.cond
    elif isinstance(node, TryCatchFinally):
        yield node.body
        yield from _arm_children(node.arms or ())
        if node.finalizer is not None:
            yield node.finalizer
    elif isinstance(node, Comprehension):
        yield from node.clauses
        yield node.body
    elif isinstance(node, Function):
        yield node.body
    elif isinstance(node, Cases):
        yield from _arm_children(node.arms)


def _arm_children(arms: tuple[Arm, ...]) -> Iterator[Expr]:
    for arm in arms:
        if arm.guard is not None:
            yield arm.guard
        yield arm.body


def map_children(node: Any, fn: Callable[[Any], Any]) -> Any:
    """Rebuild ``node`` with ``fn`` applied to each direct expression child.

    Patterns are left untouched. Children are visited in evaluation order.
    """
    if isinstance(node, Select):
        return replace(node, qualifier=fn(node.qualifier))
    if isinstance(node, Apply):
        callee = fn(node.callee)
        return replace(node, callee=callee, args=tuple(fn(a) for a in node.args))
    if isinstance(node, KeywordCall):
        return replace(node, args=tuple(fn(a) for a in node.args))
    if isinstance(node, Block):
        stats = tuple(map_children(s, fn) if isinstance(s, (Generator, ValueDef)) else fn(s)
                      for s in node.stats)
        return replace(node, stats=stats, result=fn(node.result))
    if isinstance(node, Generator):
        return replace(node, source=fn(node.source))
    if isinstance(node, ValueDef):
        return replace(node, rhs=fn(node.rhs))
    if isinstance(node, Guard):
        return replace(node, cond=fn(node.cond))
    if isinstance(node, IfElse):
        cond = fn(node.cond)
        then_branch = fn(node.then_branch)
        return replace(node, cond=cond, then_branch=then_branch, else_branch=fn(node.else_branch))
    if isinstance(node, Match):
        scrutinee = fn(node.scrutinee)
        return replace(node, scrutinee=scrutinee, arms=_map_arms(node.arms, fn))
    if isinstance(node, While):
        cond = fn(node.cond)
        return replace(node, cond=cond, body=fn(node.body))
    if isinstance(node, DoWhile):
        body = fn(node.body)
        return replace(node, body=body, cond=fn(node.cond))
    if isinstance(node, TryCatchFinally):
        body = fn(node.body)
        arms = _map_arms(node.arms, fn) if node.arms is not None else None
        finalizer = fn(node.finalizer) if node.finalizer is not None else None
        return replace(node, body=body, arms=arms, finalizer=finalizer)
    if isinstance(node, Comprehension):
        clauses = tuple(map_children(c, fn) for c in node.clauses)
        return replace(node, clauses=clauses, body=fn(node.body))
    if isinstance(node, Function):
        return replace(node, body=fn(node.body))
    if isinstance(node, Cases):
        return replace(node, arms=_map_arms(node.arms, fn))
    return node


def _map_arms(arms: tuple[Arm, ...], fn: Callable[[Any], Any]) -> tuple[Arm, ...]:
    mapped = []
    for arm in arms:
        guard = fn(arm.guard) if arm.guard is not None else None
        mapped.append(replace(arm, guard=guard, body=fn(arm.body)))
    return tuple(mapped)
