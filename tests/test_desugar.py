"""End-to-end lowering tests: surface text in, rendered keyword calls out."""

import pytest

from pybind2kw import desugar, desugar_tree, parse, render
from pybind2kw.nodes import Bind, Comprehension, Identifier, KeywordCall


class TestAliasOfBlock:
    def test_block_alias(self):
        result = desugar("for { a <- xs; x = { b <- a; c <- b; f(c) } } yield x")
        assert result == (
            "for { a <- xs; x$1 <- flatMap(a, b => flatMap(b, c => pure(f(c)))); x = x$1 } yield x"
        )

    def test_block_alias_fused(self):
        result = desugar(
            "for { a <- xs; x = { b <- a; c <- b; f(c) } } yield x", fuse_map=True
        )
        assert result == (
            "for { a <- xs; x$1 <- flatMap(a, b => map(b, c => f(c))); x = x$1 } yield x"
        )


class TestConditional:
    def test_if_else_with_bind_in_then(self):
        result = desugar("for { x <- xs; y <- if (cond) { g <- h } else { k } } yield y")
        assert result == (
            "for { x <- xs; "
            "y$1 <- ifThenElse(pure(cond), flatMap(h, g => pure(g)), pure(k)); "
            "y <- y$1 } yield y"
        )

    def test_if_without_else_yields_unit(self):
        result = desugar("for { y <- if (c) { g <- h } } yield y")
        assert result == (
            "for { y$1 <- ifThenElse(pure(c), flatMap(h, g => pure(g)), pure(())); "
            "y <- y$1 } yield y"
        )


    def test_dangling_else_belongs_to_inner_if(self):
        result = desugar("for { r <- if (a) if (b) { g <- h } else y } yield r")
        assert result == (
            "for { r$1 <- ifThenElse(pure(a), "
            "ifThenElse(pure(b), flatMap(h, g => pure(g)), pure(y)), pure(())); "
            "r <- r$1 } yield r"
        )


class TestMatch:
    def test_arms_are_tagged_by_position(self):
        result = desugar(
            "for { r <- s match { case 1 => { y <- m; y }; case _ => 0 } } yield r"
        )
        assert result == (
            "for { r$1 <- matchCase(pure(s), "
            "{ case 1 => left(flatMap(m, y => pure(y))); case _ => right(left(pure(0))) }); "
            "r <- r$1 } yield r"
        )

    def test_arm_guard_is_kept(self):
        result = desugar(
            "for { r <- s match { case Some(v) if v > 0 => { y <- v; y }; case None => 0 } } yield r"
        )
        assert result == (
            "for { r$1 <- matchCase(pure(s), "
            "{ case Some(v) if v > 0 => left(flatMap(v, y => pure(y))); "
            "case None => right(left(pure(0))) }); "
            "r <- r$1 } yield r"
        )


    def test_transformable_scrutinee(self):
        result = desugar(
            "for { r <- { s <- m; s } match { case 1 => a; case _ => b } } yield r"
        )
        assert result == (
            "for { r$1 <- matchCase(flatMap(m, s => pure(s)), "
            "{ case 1 => left(pure(a)); case _ => right(left(pure(b))) }); "
            "r <- r$1 } yield r"
        )


class TestLoops:
    def test_while(self):
        result = desugar("for { _ <- while (i < 3) { x <- step(i); x } } yield ()")
        assert result == (
            "for { bind$1 <- whileDo(pure(i < 3), flatMap(step(i), x => pure(x))); "
            "_ <- bind$1 } yield ()"
        )

    def test_do_while(self):
        result = desugar("for { _ <- do { x <- step(); x } while (more) } yield ()")
        assert result == (
            "for { bind$1 <- doWhile(flatMap(step(), x => pure(x)), pure(more)); "
            "_ <- bind$1 } yield ()"
        )


class TestTry:
    def test_try_catch_finally(self):
        result = desugar(
            "for { r <- try { v <- load(); v } catch { case e: IOException => 0 } "
            "finally close() } yield r"
        )
        assert result == (
            "for { r$1 <- tryCatchFinally(flatMap(load(), v => pure(v)), "
            "{ case e: IOException => left(pure(0)) }, pure(close())); "
            "r <- r$1 } yield r"
        )

    def test_try_catch(self):
        result = desugar(
            "for { r <- try { v <- load(); v } catch { case _ => fallback } } yield r"
        )
        assert result == (
            "for { r$1 <- tryCatch(flatMap(load(), v => pure(v)), "
            "{ case _ => left(pure(fallback)) }); r <- r$1 } yield r"
        )

    def test_try_finally(self):
        result = desugar("for { r <- try { v <- load(); v } finally close() } yield r")
        assert result == (
            "for { r$1 <- tryFinally(flatMap(load(), v => pure(v)), pure(close())); "
            "r <- r$1 } yield r"
        )

    def test_bind_only_in_finally(self):
        result = desugar("for { r <- try load() finally { c <- close(); c } } yield r")
        assert result == (
            "for { r$1 <- tryFinally(pure(load()), flatMap(close(), c => pure(c))); "
            "r <- r$1 } yield r"
        )

    def test_bare_try(self):
        result = desugar("for { r <- try { v <- load(); v } } yield r")
        assert result == "for { r$1 <- flatMap(load(), v => pure(v)); r <- r$1 } yield r"


class TestGuardClause:
    def test_guard_with_bind(self):
        result = desugar("for { x <- xs; if { ok <- check(x); ok } } yield x")
        assert result == (
            "for { x <- xs; cond$1 <- flatMap(check(x), ok => pure(ok)); if cond$1 } yield x"
        )


class TestCalls:
    def test_effectful_argument_before_bind_is_aliased(self):
        result = desugar("for { r <- f(a(), { y <- m; y }) } yield r")
        assert result == (
            "for { r$1 <- { val arg$2 = a(); "
            "flatMap(flatMap(m, y => pure(y)), arg$3 => pure(f(arg$2, arg$3))) }; "
            "r <- r$1 } yield r"
        )

    def test_stable_argument_stays_inline(self):
        result = desugar("for { r <- f(x, { y <- m; y }) } yield r")
        assert result == (
            "for { r$1 <- flatMap(flatMap(m, y => pure(y)), arg$2 => pure(f(x, arg$2))); "
            "r <- r$1 } yield r"
        )


    def test_method_call_keeps_receiver(self):
        result = desugar("for { r <- obj.m({ y <- n; y }) } yield r")
        assert result == (
            "for { r$1 <- flatMap(flatMap(n, y => pure(y)), arg$2 => pure(obj.m(arg$2))); "
            "r <- r$1 } yield r"
        )


class TestOpaqueInput:
    @pytest.mark.parametrize(
        "source",
        [
            "for { x <- xs; y = x + 1; if y > 2 } yield y",
            "for (x <- xs) print(x)",
            "f(x, 1)",
            "if (c) a else b",
        ],
    )
    def test_unchanged(self, source):
        assert desugar(source) == render(parse(source))


class TestAlgebraSelection:
    def test_object_algebra_by_name(self):
        result = desugar("for { y <- if (c) { g <- h } else k } yield y", algebra="object")
        assert result == (
            "for { y$1 <- Keyword.ifThenElse(Keyword.pure(c), "
            "Keyword.flatMap(h, g => Keyword.pure(g)), Keyword.pure(k)); "
            "y <- y$1 } yield y"
        )

    def test_unknown_algebra_name(self):
        with pytest.raises(ValueError, match="unknown algebra"):
            desugar("for { x <- xs } yield x", algebra="eager")


class TestDesugarTree:
    def test_returns_tree_and_code(self):
        result = desugar_tree("for { y <- if (c) { g <- h } else k } yield y")
        assert isinstance(result.tree, Comprehension)
        first, second = result.tree.clauses
        assert first.pattern == Bind("y$1")
        assert isinstance(first.source, KeywordCall)
        assert first.source.name == "ifThenElse"
        assert second.source == Identifier("y$1")
        assert result.code.startswith("for { y$1 <- ifThenElse(")
