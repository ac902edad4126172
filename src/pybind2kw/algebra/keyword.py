"""Algebra emitting ``KeywordCall`` nodes."""

from __future__ import annotations

from pybind2kw.algebra._base import Keyword, KeywordAlgebra
from pybind2kw.nodes import Cases, Expr, Function, KeywordCall


class KeywordCallAlgebra(KeywordAlgebra):
    """Emits one ``KeywordCall`` per operation, named by :class:`Keyword`."""

    def _emit(self, keyword: Keyword, *args: Expr) -> Expr:
        return KeywordCall(str(keyword), args)

    # --- Monad ---

    def pure(self, value: Expr) -> Expr:
        return self._emit(Keyword.PURE, value)

    def flat_map(self, source: Expr, continuation: Function) -> Expr:
        return self._emit(Keyword.FLAT_MAP, source, continuation)

    def map(self, source: Expr, continuation: Function) -> Expr:
        return self._emit(Keyword.MAP, source, continuation)

    # --- Control flow ---

    def if_then_else(self, cond: Expr, then_branch: Expr, else_branch: Expr) -> Expr:
        return self._emit(Keyword.IF_THEN_ELSE, cond, then_branch, else_branch)

    def while_do(self, cond: Expr, body: Expr) -> Expr:
        return self._emit(Keyword.WHILE_DO, cond, body)

    def do_while(self, body: Expr, cond: Expr) -> Expr:
        return self._emit(Keyword.DO_WHILE, body, cond)

    def match_case(self, scrutinee: Expr, cases: Cases) -> Expr:
        return self._emit(Keyword.MATCH_CASE, scrutinee, cases)

    # --- Exceptions ---

    def try_catch(self, body: Expr, cases: Cases) -> Expr:
        return self._emit(Keyword.TRY_CATCH, body, cases)

    def try_finally(self, body: Expr, finalizer: Expr) -> Expr:
        return self._emit(Keyword.TRY_FINALLY, body, finalizer)

    def try_catch_finally(self, body: Expr, cases: Cases, finalizer: Expr) -> Expr:
        return self._emit(Keyword.TRY_CATCH_FINALLY, body, cases, finalizer)

    # --- Arm tags ---

    def left(self, value: Expr) -> Expr:
        return self._emit(Keyword.LEFT, value)

    def right(self, value: Expr) -> Expr:
        return self._emit(Keyword.RIGHT, value)
