"""Transform-site analysis.

Walks an input tree and records every comprehension clause whose source
contains a bind, without lowering anything.
"""

from __future__ import annotations

from typing import Any

from pybind2kw._analysis_types import SiteRole, TransformSite
from pybind2kw._classifier import is_transformable
from pybind2kw.nodes import Clause, Comprehension, Generator, Guard, ValueDef, iter_children


class SiteCollector:
    """Collects transform sites in source order, outer comprehensions first."""

    def __init__(self) -> None:
        self._sites: list[TransformSite] = []

    @property
    def sites(self) -> list[TransformSite]:
        return list(self._sites)

    def visit(self, node: Any) -> None:
        if isinstance(node, Comprehension):
            for clause in node.clauses:
                self._clause(clause)
        for child in iter_children(node):
            self.visit(child)

    def _clause(self, clause: Clause) -> None:
        if isinstance(clause, Generator):
            role, source = SiteRole.BIND, clause.source
        elif isinstance(clause, ValueDef):
            role, source = SiteRole.ALIAS, clause.rhs
        elif isinstance(clause, Guard):
            role, source = SiteRole.GUARD, clause.cond
        else:
            return
        if not is_transformable(source):
            return
        pos = source.pos or clause.pos
        self._sites.append(
            TransformSite(
                kind=source.tag,
                role=role,
                line=pos.line if pos else 0,
                column=pos.column if pos else 0,
            )
        )


def collect_sites(node: Any) -> list[TransformSite]:
    collector = SiteCollector()
    collector.visit(node)
    return collector.sites
