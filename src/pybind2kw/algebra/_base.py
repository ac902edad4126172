"""Abstract base class for keyword algebras."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod

from pybind2kw.nodes import Cases, Expr, Function


class AlgebraName(enum.StrEnum):
    KEYWORD = "keyword"
    OBJECT = "object"


class Keyword(enum.StrEnum):
    """Names of the keyword-algebra operations, as they appear in output."""

    PURE = "pure"
    FLAT_MAP = "flatMap"
    MAP = "map"
    IF_THEN_ELSE = "ifThenElse"
    WHILE_DO = "whileDo"
    DO_WHILE = "doWhile"
    MATCH_CASE = "matchCase"
    TRY_CATCH = "tryCatch"
    TRY_FINALLY = "tryFinally"
    TRY_CATCH_FINALLY = "tryCatchFinally"
    LEFT = "left"
    RIGHT = "right"


class KeywordAlgebra(ABC):
    """Abstract base class defining the keyword algebra interface.

    The wrapper never builds algebra calls itself; every lowered construct
    goes through exactly one of these methods, so a backend decides how the
    calls are spelled in the output tree. Arguments are already lowered.
    """

    # --- Monad ---

    @abstractmethod
    def pure(self, value: Expr) -> Expr: ...

    @abstractmethod
    def flat_map(self, source: Expr, continuation: Function) -> Expr: ...

    @abstractmethod
    def map(self, source: Expr, continuation: Function) -> Expr: ...

    # --- Control flow ---

    @abstractmethod
    def if_then_else(self, cond: Expr, then_branch: Expr, else_branch: Expr) -> Expr: ...

    @abstractmethod
    def while_do(self, cond: Expr, body: Expr) -> Expr: ...

    @abstractmethod
    def do_while(self, body: Expr, cond: Expr) -> Expr: ...

    @abstractmethod
    def match_case(self, scrutinee: Expr, cases: Cases) -> Expr: ...

    # --- Exceptions ---

    @abstractmethod
    def try_catch(self, body: Expr, cases: Cases) -> Expr: ...

    @abstractmethod
    def try_finally(self, body: Expr, finalizer: Expr) -> Expr: ...

    @abstractmethod
    def try_catch_finally(self, body: Expr, cases: Cases, finalizer: Expr) -> Expr: ...

    # --- Arm tags ---

    @abstractmethod
    def left(self, value: Expr) -> Expr: ...

    @abstractmethod
    def right(self, value: Expr) -> Expr: ...
