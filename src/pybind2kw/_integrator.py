"""Comprehension integrator: splices lowered clause sources into a comprehension."""

from __future__ import annotations

import logging
from dataclasses import replace

from pybind2kw._classifier import is_transformable
from pybind2kw._errors import (
    ERR_MSG_TRANSFORMABLE_BODY,
    ERR_MSG_UNSUPPORTED_NODE,
    UnsupportedEnclosingTransformError,
    UnsupportedExpressionError,
)
from pybind2kw._wrapper import Wrapper
from pybind2kw.nodes import (
    Bind,
    Clause,
    Comprehension,
    Generator,
    Guard,
    Identifier,
    ValueDef,
)

logger = logging.getLogger(__name__)


class Integrator:
    """Rewrites the top-level clauses of one comprehension.

    A clause whose source is transformable is split in two: a fresh bind of
    the lowered source, then the original clause reading the fresh name.
    Clauses with opaque sources are kept as they are.
    """

    def __init__(self, wrapper: Wrapper) -> None:
        self._wrapper = wrapper

    def integrate(self, node: Comprehension) -> Comprehension:
        """Return ``node`` with every transformable clause source lowered.

        Raises:
            UnsupportedEnclosingTransformError: If the yield/do body itself
                contains a bind.
        """
        if is_transformable(node.body):
            raise UnsupportedEnclosingTransformError(
                ERR_MSG_TRANSFORMABLE_BODY,
                f"{'yield' if node.is_yield else 'do'} body of comprehension is a "
                f"transformable {type(node.body).__name__}",
                pos=getattr(node.body, "pos", None) or node.pos,
            )

        clauses: list[Clause] = []
        changed = False
        for clause in node.clauses:
            rewritten = self._clause(clause)
            changed = changed or len(rewritten) > 1
            clauses.extend(rewritten)
        if not changed:
            return node
        return replace(node, clauses=tuple(clauses))

    def _clause(self, clause: Clause) -> list[Clause]:
        if isinstance(clause, Generator):
            source = clause.source
        elif isinstance(clause, ValueDef):
            source = clause.rhs
        elif isinstance(clause, Guard):
            source = clause.cond
        elif is_transformable(clause):
            # A bare expression in clause position has no pattern to bind its value to.
            raise UnsupportedExpressionError(
                ERR_MSG_UNSUPPORTED_NODE,
                f"transformable {type(clause).__name__} in comprehension clause list",
                pos=getattr(clause, "pos", None),
            )
        else:
            return [clause]
        if not is_transformable(source):
            return [clause]

        names = self._wrapper.names
        if isinstance(clause, Guard):
            fresh = names.fresh("cond")
        else:
            fresh = names.for_pattern(clause.pattern)
        logger.debug("splitting %s clause at %s into fresh bind %s", clause.tag, clause.pos, fresh)

        lowered = self._wrapper.wrap(source)
        bound = Generator(Bind(fresh), lowered, pos=clause.pos)
        if isinstance(clause, Generator):
            return [bound, replace(clause, source=Identifier(fresh))]
        if isinstance(clause, ValueDef):
            return [bound, replace(clause, rhs=Identifier(fresh))]
        return [bound, replace(clause, cond=Identifier(fresh))]
