"""Fresh-name supply and small node helpers."""

from __future__ import annotations

from pybind2kw._constants import FRESH_NAME_FALLBACK, FRESH_NAME_SEPARATOR
from pybind2kw.nodes import Bind, Block, Expr, Identifier, Literal, Pattern, Statement, Typed


class FreshNames:
    """Counter-based supply of names that cannot clash with surface names.

    One instance is shared by everything lowered within a single call, so
    numbering follows the order in which binds are introduced.
    """

    def __init__(self, separator: str = FRESH_NAME_SEPARATOR) -> None:
        self._separator = separator
        self._counter = 0

    def fresh(self, base: str) -> str:
        self._counter += 1
        root = base.split(self._separator, 1)[0] or FRESH_NAME_FALLBACK
        return f"{root}{self._separator}{self._counter}"

    def for_pattern(self, pattern: Pattern) -> str:
        """A fresh name derived from the name a pattern binds, if any."""
        if isinstance(pattern, Typed):
            return self.for_pattern(pattern.pattern)
        if isinstance(pattern, Bind):
            return self.fresh(pattern.name)
        return self.fresh(FRESH_NAME_FALLBACK)


def is_stable(expr: Expr) -> bool:
    """True for leaves whose evaluation has no effect, so their order is free."""
    return isinstance(expr, (Identifier, Literal))


def prepend_statements(stats: list[Statement], rest: Expr) -> Expr:
    if not stats:
        return rest
    return Block(tuple(stats), rest)
