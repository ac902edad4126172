"""Expression wrapper tests."""

import pytest

from pybind2kw import parse, render
from pybind2kw._errors import UnsupportedExpressionError
from pybind2kw._utils import FreshNames
from pybind2kw._wrapper import Wrapper
from pybind2kw.algebra import KeywordCallAlgebra, ObjectAlgebra
from pybind2kw.nodes import (
    Apply,
    Bind,
    Block,
    Generator,
    Guard,
    Identifier,
    LiteralPattern,
    Select,
    TuplePattern,
    ValueDef,
    Wildcard,
)

ALL_ALGEBRAS = [
    pytest.param(KeywordCallAlgebra(), id="keyword"),
    pytest.param(ObjectAlgebra(), id="object"),
]


def _wrap(wrapper, source):
    return render(wrapper.wrap(parse(source)))


class TestOpaquePassThrough:
    @pytest.mark.parametrize("source", ["x", "1", "f(x, y)", "a + b", "if (c) a else b"])
    def test_pure(self, wrapper, source):
        assert _wrap(wrapper, source) == f"pure({render(parse(source))})"

    def test_no_recursion_into_opaque(self, wrapper):
        node = parse("for { x <- { y <- m; y } } yield x")
        lowered = wrapper.wrap(node)
        assert lowered.args == (node,)

    @pytest.mark.parametrize("algebra", ALL_ALGEBRAS)
    def test_pure_per_algebra(self, algebra):
        wrapper = Wrapper(algebra)
        expected = "Keyword.pure(x)" if isinstance(algebra, ObjectAlgebra) else "pure(x)"
        assert render(wrapper.wrap(Identifier("x"))) == expected


class TestBlocks:
    def test_order_is_preserved(self, wrapper):
        assert _wrap(wrapper, "{ x <- s1; y <- s2; f(x, y) }") == (
            "flatMap(s1, x => flatMap(s2, y => pure(f(x, y))))"
        )

    def test_plain_statements_stay_in_place(self, wrapper):
        assert _wrap(wrapper, "{ log(1); x <- s1; val y = x + 1; y }") == (
            "{ log(1); flatMap(s1, x => { val y = x + 1; pure(y) }) }"
        )

    def test_val_with_transformable_rhs(self, wrapper):
        assert _wrap(wrapper, "{ val y = { x <- s; x }; g(y) }") == (
            "flatMap(flatMap(s, x => pure(x)), y => pure(g(y)))"
        )

    def test_transformable_statement_binds_wildcard(self, wrapper):
        assert _wrap(wrapper, "{ if (c) { x <- s } else t; done }") == (
            "flatMap(ifThenElse(pure(c), flatMap(s, x => pure(x)), pure(t)), _ => pure(done))"
        )

    def test_transformable_result(self, wrapper):
        assert _wrap(wrapper, "{ x <- s; if (x) { y <- t } else u }") == (
            "flatMap(s, x => ifThenElse(pure(x), flatMap(t, y => pure(y)), pure(u)))"
        )

    def test_nested_transformable_source(self, wrapper):
        assert _wrap(wrapper, "{ x <- if (c) { y <- m } else n; x }") == (
            "flatMap(ifThenElse(pure(c), flatMap(m, y => pure(y)), pure(n)), "
            "x$1 => flatMap(x$1, x => pure(x)))"
        )

    def test_tuple_pattern(self, wrapper):
        node = Block(
            (Generator(TuplePattern((Bind("a"), Wildcard())), Identifier("pairs")),),
            Identifier("a"),
        )
        assert render(wrapper.wrap(node)) == "flatMap(pairs, (a, _) => pure(a))"


class TestStandaloneClauses:
    def test_generator(self, wrapper):
        assert render(wrapper.wrap(Generator(Bind("x"), Identifier("m")))) == (
            "flatMap(m, x => pure(x))"
        )

    def test_value_def(self, wrapper):
        node = ValueDef(Bind("v"), Generator(Bind("x"), Identifier("m")))
        assert render(wrapper.wrap(node)) == (
            "flatMap(flatMap(m, x => pure(x)), v => pure(()))"
        )

    def test_guard(self, wrapper):
        with pytest.raises(UnsupportedExpressionError):
            wrapper.wrap(Guard(Generator(Bind("ok"), Identifier("m"))))


class TestMapFusion:
    def test_last_bind_becomes_map(self, keyword_algebra):
        wrapper = Wrapper(keyword_algebra, fuse_map=True)
        assert _wrap(wrapper, "{ x <- s1; y <- s2; f(x, y) }") == (
            "flatMap(s1, x => map(s2, y => f(x, y)))"
        )

    def test_plain_statements_move_into_map(self, keyword_algebra):
        wrapper = Wrapper(keyword_algebra, fuse_map=True)
        assert _wrap(wrapper, "{ x <- s; val y = x + 1; y }") == (
            "map(s, x => { val y = x + 1; y })"
        )

    def test_transformable_result_is_not_fused(self, keyword_algebra):
        wrapper = Wrapper(keyword_algebra, fuse_map=True)
        assert _wrap(wrapper, "{ x <- s; if (x) { y <- t } else u }") == (
            "flatMap(s, x => ifThenElse(pure(x), map(t, y => y), pure(u)))"
        )


class TestCalls:
    def test_effectful_callee_runs_first(self, wrapper):
        node = Apply(Apply(Identifier("pick"), ()), (Generator(Bind("x"), Identifier("m")),))
        assert render(wrapper.wrap(node)) == (
            "{ val arg$1 = pick(); flatMap(flatMap(m, x => pure(x)), arg$2 => pure(arg$1(arg$2))) }"
        )

    def test_trailing_effectful_argument_stays_inline(self, wrapper):
        assert _wrap(wrapper, "f({ x <- m; x }, g())") == (
            "flatMap(flatMap(m, x => pure(x)), arg$1 => pure(f(arg$1, g())))"
        )

    def test_two_transformable_arguments(self, wrapper):
        assert _wrap(wrapper, "{ a <- p } + { b <- q }") == (
            "flatMap(flatMap(p, a => pure(a)), arg$1 => "
            "flatMap(flatMap(q, b => pure(b)), arg$2 => pure(arg$1 + arg$2)))"
        )

    def test_method_call_keeps_receiver(self, wrapper):
        assert _wrap(wrapper, "obj.m({ y <- n; y })") == (
            "flatMap(flatMap(n, y => pure(y)), arg$1 => pure(obj.m(arg$1)))"
        )

    def test_method_call_on_effectful_receiver(self, wrapper):
        assert _wrap(wrapper, "obj.get().m({ y <- n; y })") == (
            "{ val arg$1 = obj.get(); "
            "flatMap(flatMap(n, y => pure(y)), arg$2 => pure(arg$1.m(arg$2))) }"
        )

    def test_method_call_on_transformable_receiver(self, wrapper):
        assert _wrap(wrapper, "{ y <- n; y }.m(1)") == (
            "flatMap(flatMap(n, y => pure(y)), arg$1 => pure(arg$1.m(1)))"
        )

    def test_select(self, wrapper):
        node = Select(Generator(Bind("x"), Identifier("m")), "size")
        assert render(wrapper.wrap(node)) == (
            "flatMap(flatMap(m, x => pure(x)), arg$1 => pure(arg$1.size))"
        )


class TestFreshNames:
    def test_names_continue_across_calls(self, keyword_algebra):
        names = FreshNames()
        wrapper = Wrapper(keyword_algebra, names)
        wrapper.wrap(parse("f({ x <- m; x })"))
        assert names.fresh("z") == "z$2"

    def test_fresh_name_of_fresh_name(self):
        names = FreshNames()
        first = names.fresh("x")
        assert names.fresh(first) == "x$2"

    def test_non_name_pattern(self):
        names = FreshNames()
        assert names.for_pattern(TuplePattern((Bind("a"), Bind("b")))) == "bind$1"
        assert names.for_pattern(Wildcard()) == "bind$2"
        assert names.for_pattern(LiteralPattern(0)) == "bind$3"
