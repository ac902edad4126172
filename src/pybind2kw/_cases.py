"""Case-list rewriter: tags each arm's lowered body with its position.

Arm ``i`` of ``n`` produces ``right(...right(left(wrap(body)))...)`` with
exactly ``i`` applications of ``right``. The nesting depth identifies the arm
that ran, so arm bodies of unrelated shapes still share one result type.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace

from pybind2kw._classifier import is_transformable
from pybind2kw._errors import (
    ERR_MSG_DUPLICATE_BINDER,
    ERR_MSG_EMPTY_CASE_LIST,
    ERR_MSG_TRANSFORMABLE_GUARD,
    MalformedCaseListError,
)
from pybind2kw.algebra._base import KeywordAlgebra
from pybind2kw.nodes import Arm, Expr, Position, pattern_binders


def tag_arm_value(value: Expr, index: int, algebra: KeywordAlgebra) -> Expr:
    """Inject ``value`` as the ``index``-th case of a right-nested coproduct."""
    tagged = algebra.left(value)
    for _ in range(index):
        tagged = algebra.right(tagged)
    return tagged


def validate_case_list(arms: Sequence[Arm], pos: Position | None = None) -> None:
    if not arms:
        raise MalformedCaseListError(
            ERR_MSG_EMPTY_CASE_LIST,
            "arm list passed to the case-list rewriter has no arms",
            pos=pos,
        )
    for index, arm in enumerate(arms):
        if arm.guard is not None and is_transformable(arm.guard):
            raise MalformedCaseListError(
                ERR_MSG_TRANSFORMABLE_GUARD,
                f"guard of arm {index} contains a bind",
                pos=arm.pos or pos,
            )
        names = pattern_binders(arm.pattern)
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise MalformedCaseListError(
                ERR_MSG_DUPLICATE_BINDER,
                f"pattern of arm {index} binds {', '.join(duplicates)} more than once",
                pos=arm.pos or pos,
            )


def wrap_case_list(
    arms: Sequence[Arm],
    wrap: Callable[[Expr], Expr],
    algebra: KeywordAlgebra,
    pos: Position | None = None,
) -> tuple[Arm, ...]:
    """Rewrite arm bodies into position-tagged lowered values.

    Args:
        arms: The arms of a match or catch, in source order.
        wrap: Lowers one arm body.
        algebra: Supplies ``left``/``right``.
        pos: Position of the owning node, for error reporting.

    Returns:
        New arms with the same patterns and guards.

    Raises:
        MalformedCaseListError: If the list is empty, a guard contains a
            bind, or a pattern binds a name twice.
    """
    validate_case_list(arms, pos)
    return tuple(
        replace(arm, body=tag_arm_value(wrap(arm.body), index, algebra))
        for index, arm in enumerate(arms)
    )
