"""Keyword algebra backends for bind lowering."""

from pybind2kw.algebra._base import AlgebraName, Keyword, KeywordAlgebra
from pybind2kw.algebra.keyword import KeywordCallAlgebra
from pybind2kw.algebra.receiver import ObjectAlgebra

__all__ = [
    "AlgebraName",
    "Keyword",
    "KeywordAlgebra",
    "KeywordCallAlgebra",
    "ObjectAlgebra",
    "get_algebra",
]

_REGISTRY: dict[str, type[KeywordAlgebra]] = {
    AlgebraName.KEYWORD: KeywordCallAlgebra,
    AlgebraName.OBJECT: ObjectAlgebra,
}


def get_algebra(name: str) -> KeywordAlgebra:
    """Get an algebra instance by name.

    Args:
        name: Algebra name ("keyword" or "object").

    Returns:
        A KeywordAlgebra instance with default settings.

    Raises:
        ValueError: If the algebra name is unknown.
    """
    cls = _REGISTRY.get(name)
    if cls is None:
        raise ValueError(
            f"unknown algebra: {name!r}. "
            f"Available: {', '.join(sorted(_REGISTRY))}"
        )
    return cls()
