"""pybind2kw - Lower binds nested in control flow to keyword-algebra calls."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybind2kw")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0.dev0"

from dataclasses import dataclass, field
from typing import Any

from pybind2kw._analysis import collect_sites
from pybind2kw._analysis_types import SiteRole, TransformSite
from pybind2kw._classifier import classify, is_transformable
from pybind2kw._constants import DEFAULT_ALGEBRA, DEFAULT_MAX_RECURSION_DEPTH
from pybind2kw._errors import (
    InvalidSyntaxError,
    LoweringError,
    MalformedCaseListError,
    MaxDepthExceededError,
    OrphanTransformableExpressionError,
    UnsupportedEnclosingTransformError,
    UnsupportedExpressionError,
)
from pybind2kw._lowering import lower as _lower
from pybind2kw._parser import parse
from pybind2kw._render import render
from pybind2kw.algebra import (
    AlgebraName,
    Keyword,
    KeywordAlgebra,
    KeywordCallAlgebra,
    ObjectAlgebra,
    get_algebra,
)
from pybind2kw.nodes import Expr, TransformTag

__all__ = [
    "analyze",
    "classify",
    "desugar",
    "desugar_tree",
    "is_transformable",
    "lower",
    "parse",
    "render",
    "AnalysisResult",
    "Result",
    "SiteRole",
    "TransformSite",
    "TransformTag",
    "LoweringError",
    "InvalidSyntaxError",
    "MalformedCaseListError",
    "MaxDepthExceededError",
    "OrphanTransformableExpressionError",
    "UnsupportedEnclosingTransformError",
    "UnsupportedExpressionError",
    "AlgebraName",
    "Keyword",
    "KeywordAlgebra",
    "KeywordCallAlgebra",
    "ObjectAlgebra",
    "get_algebra",
]


@dataclass(frozen=True)
class Result:
    """Result of a lowering: rendered code plus the lowered tree."""

    code: str
    tree: Any = None


@dataclass(frozen=True)
class AnalysisResult:
    """Result of transform-site analysis."""

    code: str
    sites: list[TransformSite] = field(default_factory=list)


def _resolve_algebra(algebra: KeywordAlgebra | str | None) -> KeywordAlgebra:
    if algebra is None:
        return get_algebra(DEFAULT_ALGEBRA)
    if isinstance(algebra, str):
        return get_algebra(algebra)
    return algebra


def lower(
    node: Expr,
    *,
    algebra: KeywordAlgebra | str | None = None,
    max_depth: int | None = None,
    fuse_map: bool = False,
) -> Expr:
    """Lower every comprehension in a tree.

    Args:
        node: Root of the compilation unit.
        algebra: Backend instance or registry name. Defaults to "keyword".
        max_depth: Maximum wrap nesting. Defaults to 200.
        fuse_map: If True, emit ``map`` for a final bind whose continuation
            only wraps a value in ``pure``.

    Returns:
        The lowered tree. The input is not modified.

    Raises:
        LoweringError: If any part of the unit cannot be lowered. Nothing is
            returned in that case.
    """
    return _lower(
        node,
        _resolve_algebra(algebra),
        max_depth=DEFAULT_MAX_RECURSION_DEPTH if max_depth is None else max_depth,
        fuse_map=fuse_map,
    )


def desugar_tree(
    source: str,
    *,
    algebra: KeywordAlgebra | str | None = None,
    max_depth: int | None = None,
    fuse_map: bool = False,
) -> Result:
    """Read surface text, lower it and render the result.

    Args:
        source: Expression in the surface notation.
        algebra: Backend instance or registry name. Defaults to "keyword".
        max_depth: Maximum wrap nesting. Defaults to 200.
        fuse_map: Emit ``map`` for trivial final binds.

    Returns:
        Result with the rendered code and the lowered tree.

    Raises:
        InvalidSyntaxError: If the text cannot be read.
        LoweringError: If lowering fails.
    """
    tree = lower(parse(source), algebra=algebra, max_depth=max_depth, fuse_map=fuse_map)
    return Result(code=render(tree), tree=tree)


def desugar(
    source: str,
    *,
    algebra: KeywordAlgebra | str | None = None,
    max_depth: int | None = None,
    fuse_map: bool = False,
) -> str:
    """Read surface text, lower it and return the rendered code."""
    return desugar_tree(source, algebra=algebra, max_depth=max_depth, fuse_map=fuse_map).code


def analyze(
    source: str,
    *,
    algebra: KeywordAlgebra | str | None = None,
    max_depth: int | None = None,
    fuse_map: bool = False,
) -> AnalysisResult:
    """Report the clause sources that lowering rewrites, with the lowered code.

    Returns:
        AnalysisResult with the rendered code and one TransformSite per
        rewritten clause source.

    Raises:
        InvalidSyntaxError: If the text cannot be read.
        LoweringError: If lowering fails.
    """
    tree = parse(source)

    # Pass 1: lower
    lowered = lower(tree, algebra=algebra, max_depth=max_depth, fuse_map=fuse_map)

    # Pass 2: collect sites from the input tree
    sites = collect_sites(tree)

    return AnalysisResult(code=render(lowered), sites=sites)
