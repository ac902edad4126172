"""Lowering driver: walks a compilation unit and lowers every comprehension."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from pybind2kw._classifier import is_transformable
from pybind2kw._constants import DEFAULT_MAX_RECURSION_DEPTH
from pybind2kw._errors import (
    ERR_MSG_DEPTH_EXCEEDED,
    ERR_MSG_ORPHAN_BIND,
    MaxDepthExceededError,
    OrphanTransformableExpressionError,
)
from pybind2kw._integrator import Integrator
from pybind2kw._utils import FreshNames
from pybind2kw._wrapper import Wrapper
from pybind2kw.algebra._base import KeywordAlgebra
from pybind2kw.nodes import Comprehension, Expr, Function, map_children

logger = logging.getLogger(__name__)


class Lowerer:
    """Lowers one compilation unit.

    The nearest enclosing comprehension is passed down explicitly. Nested
    comprehensions are lowered before the one around them; since a
    comprehension is always opaque to its parent, this never changes how the
    outer clauses classify.
    """

    def __init__(
        self,
        algebra: KeywordAlgebra,
        max_depth: int = DEFAULT_MAX_RECURSION_DEPTH,
        fuse_map: bool = False,
    ) -> None:
        self._wrapper = Wrapper(algebra, FreshNames(), max_depth=max_depth, fuse_map=fuse_map)
        self._integrator = Integrator(self._wrapper)
        self._max_depth = max_depth
        self._depth = 0

    def lower(self, node: Expr) -> Expr:
        try:
            return self._lower(node, None)
        except RecursionError as e:
            raise MaxDepthExceededError(
                ERR_MSG_DEPTH_EXCEEDED,
                "interpreter recursion limit reached while lowering",
                wrapped=e,
            ) from e

    def _check_limits(self, node: Any) -> None:
        if self._depth > self._max_depth:
            raise MaxDepthExceededError(
                ERR_MSG_DEPTH_EXCEEDED,
                f"depth {self._depth} exceeds limit {self._max_depth}",
                pos=getattr(node, "pos", None),
            )

    def _lower(self, node: Any, enclosing: Comprehension | None) -> Any:
        self._depth += 1
        try:
            self._check_limits(node)
            if isinstance(node, Comprehension):
                return self._lower_comprehension(node)
            if isinstance(node, Function):
                # A function body is evaluated later, outside the enclosing bind chain.
                return replace(node, body=self._lower(node.body, None))
            if enclosing is None and is_transformable(node):
                raise OrphanTransformableExpressionError(
                    ERR_MSG_ORPHAN_BIND,
                    f"transformable {type(node).__name__} at "
                    f"{node.pos or 'unknown position'} has no enclosing comprehension",
                    pos=node.pos,
                )
            return map_children(node, lambda child: self._lower(child, enclosing))
        finally:
            self._depth -= 1

    def _lower_comprehension(self, node: Comprehension) -> Comprehension:
        walked = map_children(node, lambda child: self._lower(child, node))
        lowered = self._integrator.integrate(walked)
        logger.debug(
            "comprehension at %s: %d clauses lowered to %d",
            node.pos, len(node.clauses), len(lowered.clauses),
        )
        return lowered


def lower(
    node: Expr,
    algebra: KeywordAlgebra,
    max_depth: int = DEFAULT_MAX_RECURSION_DEPTH,
    fuse_map: bool = False,
) -> Expr:
    """Lower every comprehension in ``node``; all-or-nothing."""
    return Lowerer(algebra, max_depth=max_depth, fuse_map=fuse_map).lower(node)
