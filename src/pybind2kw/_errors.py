"""Exception hierarchy for bind lowering."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pybind2kw.nodes import Position


class LoweringError(Exception):
    """Base exception for lowering errors.

    Provides dual messaging: a short user-facing message and
    internal details (node shapes, names) for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        pos: Position | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped
        self.pos = pos

    def internal(self) -> str:
        return self.internal_details


class OrphanTransformableExpressionError(LoweringError):
    """Raised when a bind occurs outside of any enclosing comprehension."""


class UnsupportedEnclosingTransformError(LoweringError):
    """Raised when the yield/do body of a comprehension contains a bind."""


class MalformedCaseListError(LoweringError):
    """Raised when a match or catch arm list cannot be tagged."""


class MaxDepthExceededError(LoweringError):
    """Raised when the wrap recursion depth limit is exceeded."""


class UnsupportedExpressionError(LoweringError):
    """Raised when a node kind is not supported in its position."""


class InvalidSyntaxError(LoweringError):
    """Raised when surface text cannot be read."""


# Sanitized user-facing error message constants
ERR_MSG_ORPHAN_BIND = "bind used outside of a comprehension"
ERR_MSG_TRANSFORMABLE_BODY = "bind in comprehension body is not supported"
ERR_MSG_EMPTY_CASE_LIST = "case list is empty"
ERR_MSG_TRANSFORMABLE_GUARD = "bind in case guard is not supported"
ERR_MSG_DUPLICATE_BINDER = "pattern binds the same name twice"
ERR_MSG_DEPTH_EXCEEDED = "maximum recursion depth exceeded"
ERR_MSG_UNSUPPORTED_NODE = "unsupported expression"
ERR_MSG_INVALID_SYNTAX = "invalid syntax"
