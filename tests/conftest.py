"""Shared test fixtures."""

import pytest

from pybind2kw._utils import FreshNames
from pybind2kw._wrapper import Wrapper
from pybind2kw.algebra.keyword import KeywordCallAlgebra
from pybind2kw.algebra.receiver import ObjectAlgebra


@pytest.fixture
def keyword_algebra():
    return KeywordCallAlgebra()


@pytest.fixture
def object_algebra():
    return ObjectAlgebra()


@pytest.fixture
def wrapper(keyword_algebra):
    return Wrapper(keyword_algebra, FreshNames())


