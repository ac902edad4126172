"""Domain types for transform-site analysis."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class SiteRole(enum.StrEnum):
    """Which clause slot a transformable expression fills."""

    BIND = "bind"
    ALIAS = "alias"
    GUARD = "guard"


@dataclass(frozen=True)
class TransformSite:
    """A clause source that the lowering will rewrite.

    ``kind`` is the node tag of the source (``if_else``, ``block``, ...).
    Line and column are 0 when the tree carries no positions.
    """

    kind: str
    role: SiteRole
    line: int = 0
    column: int = 0
