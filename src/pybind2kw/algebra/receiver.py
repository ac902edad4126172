"""Algebra emitting method calls on a named algebra instance."""

from __future__ import annotations

from pybind2kw.algebra.keyword import KeywordCallAlgebra
from pybind2kw.algebra._base import Keyword
from pybind2kw.nodes import Apply, Expr, Identifier, Select


class ObjectAlgebra(KeywordCallAlgebra):
    """Emits ``receiver.op(args)`` calls instead of bare keyword calls.

    Useful when the consuming backend provides the algebra as an object in
    scope, e.g. ``Keyword.flatMap(src, x => ...)``.
    """

    def __init__(self, receiver: str = "Keyword") -> None:
        if not receiver:
            raise ValueError("receiver name cannot be empty")
        self._receiver = receiver

    @property
    def receiver(self) -> str:
        return self._receiver

    def _emit(self, keyword: Keyword, *args: Expr) -> Expr:
        return Apply(Select(Identifier(self._receiver), str(keyword)), args)
