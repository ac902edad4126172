"""Defaults for bind lowering."""

DEFAULT_MAX_RECURSION_DEPTH = 200
"""Maximum nesting of wrap calls within one clause."""

FRESH_NAME_SEPARATOR = "$"
"""Separator between base name and counter; never valid in surface names."""

FRESH_NAME_FALLBACK = "bind"
"""Base for fresh names when the pattern is not a plain name."""

DEFAULT_ALGEBRA = "keyword"
"""Registry name of the algebra used when none is given."""
