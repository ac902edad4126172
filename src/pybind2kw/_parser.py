"""Surface reader: compact brace-and-semicolon notation to node trees.

This is a convenience front end for examples, tests and tooling. Real host
languages hand their own trees to :func:`pybind2kw.lower` instead.
"""

from __future__ import annotations

import ast
from typing import Any

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from pybind2kw._errors import (
    ERR_MSG_DEPTH_EXCEEDED,
    ERR_MSG_INVALID_SYNTAX,
    InvalidSyntaxError,
    LoweringError,
    MaxDepthExceededError,
)
from pybind2kw.nodes import (
    Apply,
    Arm,
    Bind,
    Block,
    Comprehension,
    Constructor,
    DoWhile,
    Expr,
    Generator,
    Guard,
    Identifier,
    IfElse,
    Literal,
    LiteralPattern,
    Match,
    Position,
    Select,
    TryCatchFinally,
    TuplePattern,
    Typed,
    ValueDef,
    While,
    Wildcard,
    pattern_value,
)

_GRAMMAR = r"""
start: expr

?expr: if_expr
     | while_expr
     | do_while_expr
     | try_expr
     | for_expr
     | match_expr

if_expr: _IF "(" expr ")" expr
       | _IF "(" expr ")" expr _ELSE expr
while_expr: _WHILE "(" expr ")" expr
do_while_expr: _DO expr _WHILE "(" expr ")"
try_expr: _TRY expr [catch_clause] [finally_clause]
catch_clause: _CATCH "{" arm+ "}"
finally_clause: _FINALLY expr

for_expr: _FOR "{" enumerators "}" [YIELD] expr
        | _FOR "(" enumerators ")" [YIELD] expr
enumerators: enumerator (";" enumerator)* ";"?
?enumerator: generator
           | alias
           | guard
generator: pattern "<-" expr
alias: pattern "=" expr
guard: _IF expr

?match_expr: or_expr
           | or_expr _MATCH "{" arm+ "}"
arm: _CASE pattern [arm_guard] "=>" expr ";"?
arm_guard: _IF expr

?or_expr: and_expr
        | or_expr OR_OP and_expr -> binop
?and_expr: cmp_expr
         | and_expr AND_OP cmp_expr -> binop
?cmp_expr: add_expr
         | add_expr CMP_OP add_expr -> binop
?add_expr: mul_expr
         | add_expr ADD_OP mul_expr -> binop
?mul_expr: unary_expr
         | mul_expr MUL_OP unary_expr -> binop
?unary_expr: postfix_expr
           | NOT_OP unary_expr -> unop
           | NEG_OP unary_expr -> unop

?postfix_expr: atom
             | postfix_expr "(" [args] ")" -> apply
             | postfix_expr "." NAME -> select
args: expr ("," expr)*

?atom: literal
     | NAME -> identifier
     | "(" expr ")"
     | block

block: "{" [stats] "}"
stats: stat (";" stat)* ";"?
?stat: generator
     | valdef
     | expr
valdef: _VAL pattern "=" expr

?literal: number
        | ESCAPED_STRING -> string_lit
        | _TRUE -> true_lit
        | _FALSE -> false_lit
        | "(" ")" -> unit_lit
?number: INT -> int_lit
       | FLOAT -> float_lit

?pattern: simple_pattern
        | simple_pattern ":" dotted_name -> typed_pattern
?simple_pattern: "_" -> wildcard
               | NAME -> bind_pattern
               | dotted_name "(" [pattern_args] ")" -> constructor_pattern
               | "(" pattern "," pattern_args ")" -> tuple_pattern
               | literal -> literal_pattern
               | NEG_OP number -> negative_literal_pattern
pattern_args: pattern ("," pattern)*
dotted_name: NAME ("." NAME)*

_IF: /if\b/
_ELSE: /else\b/
_WHILE: /while\b/
_DO: /do\b/
_TRY: /try\b/
_CATCH: /catch\b/
_FINALLY: /finally\b/
_FOR: /for\b/
_MATCH: /match\b/
_CASE: /case\b/
_VAL: /val\b/
_TRUE: /true\b/
_FALSE: /false\b/
YIELD: /yield\b/

NAME: /(?!(?:if|else|while|do|try|catch|finally|for|yield|match|case|val|true|false|_)\b)[a-zA-Z_][a-zA-Z0-9_]*/
INT: /\d+/
FLOAT: /\d+\.\d+(?:[eE][+-]?\d+)?|\d+[eE][+-]?\d+/
OR_OP: "||"
AND_OP: "&&"
CMP_OP: /==|!=|<=|>=|<(?!-)|>/
ADD_OP: /[+-]/
MUL_OP: /[*\/%]/
NOT_OP: /!(?!=)/
NEG_OP: "-"
COMMENT: /\/\/[^\n]*/

%import common.ESCAPED_STRING
%import common.WS
%ignore WS
%ignore COMMENT
"""


def _position(meta: Any) -> Position | None:
    if getattr(meta, "empty", True):
        return None
    return Position(meta.line, meta.column)


@v_args(meta=True)
class TreeBuilder(Transformer):
    """Turns the lark parse tree into :mod:`pybind2kw.nodes` objects."""

    def start(self, meta, children):
        return children[0]

    # ---- Literals and names ----

    def int_lit(self, meta, children):
        return Literal(int(children[0]), pos=_position(meta))

    def float_lit(self, meta, children):
        return Literal(float(children[0]), pos=_position(meta))

    def string_lit(self, meta, children):
        return Literal(ast.literal_eval(str(children[0])), pos=_position(meta))

    def true_lit(self, meta, children):
        return Literal(True, pos=_position(meta))

    def false_lit(self, meta, children):
        return Literal(False, pos=_position(meta))

    def unit_lit(self, meta, children):
        return Literal(None, pos=_position(meta))

    def identifier(self, meta, children):
        return Identifier(str(children[0]), pos=_position(meta))

    # ---- Calls and operators ----

    def select(self, meta, children):
        return Select(children[0], str(children[1]), pos=_position(meta))

    def apply(self, meta, children):
        callee, args = children
        return Apply(callee, args or (), pos=_position(meta))

    def args(self, meta, children):
        return tuple(children)

    def binop(self, meta, children):
        lhs, op, rhs = children
        return Apply(Identifier(str(op)), (lhs, rhs), pos=_position(meta))

    def unop(self, meta, children):
        op, operand = children
        return Apply(Identifier(str(op)), (operand,), pos=_position(meta))

    # ---- Blocks and clauses ----

    def block(self, meta, children):
        pos = _position(meta)
        stats = list(children[0] or ())
        if not stats:
            return Literal(None, pos=pos)
        last = stats[-1]
        if isinstance(last, Generator):
            result = pattern_value(last.pattern)
        elif isinstance(last, ValueDef):
            result = Literal(None)
        else:
            result = stats.pop()
        if not stats:
            return result
        return Block(tuple(stats), result, pos=pos)

    def stats(self, meta, children):
        return tuple(children)

    def enumerators(self, meta, children):
        return tuple(children)

    def generator(self, meta, children):
        pattern, source = children
        return Generator(pattern, source, pos=_position(meta))

    def alias(self, meta, children):
        pattern, rhs = children
        return ValueDef(pattern, rhs, pos=_position(meta))

    valdef = alias

    def guard(self, meta, children):
        return Guard(children[0], pos=_position(meta))

    # ---- Control flow ----

    def if_expr(self, meta, children):
        cond, then_branch, *rest = children
        else_branch = rest[0] if rest else Literal(None)
        return IfElse(cond, then_branch, else_branch, pos=_position(meta))

    def while_expr(self, meta, children):
        cond, body = children
        return While(cond, body, pos=_position(meta))

    def do_while_expr(self, meta, children):
        body, cond = children
        return DoWhile(body, cond, pos=_position(meta))

    def try_expr(self, meta, children):
        body, arms, finalizer = children
        return TryCatchFinally(body, arms, finalizer, pos=_position(meta))

    def catch_clause(self, meta, children):
        return tuple(children)

    def finally_clause(self, meta, children):
        return children[0]

    def for_expr(self, meta, children):
        clauses, yield_token, body = children
        return Comprehension(clauses, body, is_yield=yield_token is not None, pos=_position(meta))

    def match_expr(self, meta, children):
        scrutinee, *arms = children
        return Match(scrutinee, tuple(arms), pos=_position(meta))

    def arm(self, meta, children):
        pattern, guard, body = children
        return Arm(pattern, guard, body, pos=_position(meta))

    def arm_guard(self, meta, children):
        return children[0]

    # ---- Patterns ----

    def wildcard(self, meta, children):
        return Wildcard(pos=_position(meta))

    def bind_pattern(self, meta, children):
        return Bind(str(children[0]), pos=_position(meta))

    def constructor_pattern(self, meta, children):
        name, args = children
        return Constructor(name, args or (), pos=_position(meta))

    def tuple_pattern(self, meta, children):
        first, rest = children
        return TuplePattern((first, *rest), pos=_position(meta))

    def literal_pattern(self, meta, children):
        return LiteralPattern(children[0].value, pos=_position(meta))

    def negative_literal_pattern(self, meta, children):
        return LiteralPattern(-children[1].value, pos=_position(meta))

    def typed_pattern(self, meta, children):
        pattern, type_name = children
        return Typed(pattern, type_name, pos=_position(meta))

    def pattern_args(self, meta, children):
        return tuple(children)

    def dotted_name(self, meta, children):
        return ".".join(str(c) for c in children if isinstance(c, Token))


_lark = Lark(_GRAMMAR, parser="earley", propagate_positions=True, maybe_placeholders=True)
_builder = TreeBuilder()


def _too_deep(e: RecursionError) -> MaxDepthExceededError:
    return MaxDepthExceededError(
        ERR_MSG_DEPTH_EXCEEDED, "interpreter recursion limit reached while reading input", wrapped=e
    )


def parse(source: str) -> Expr:
    """Read one expression written in the surface notation.

    Raises:
        InvalidSyntaxError: If the text is not a well-formed expression.
        MaxDepthExceededError: If the text nests too deeply to be read.
    """
    try:
        tree = _lark.parse(source)
    except UnexpectedInput as e:
        line = getattr(e, "line", -1)
        column = getattr(e, "column", -1)
        pos = Position(line, column) if line > 0 else None
        raise InvalidSyntaxError(
            ERR_MSG_INVALID_SYNTAX,
            f"cannot read input at {pos or 'end of input'}: {e}",
            wrapped=e,
            pos=pos,
        ) from e
    except RecursionError as e:
        raise _too_deep(e) from e
    try:
        return _builder.transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, LoweringError):
            raise e.orig_exc from e
        if isinstance(e.orig_exc, RecursionError):
            raise _too_deep(e.orig_exc) from e
        raise
    except RecursionError as e:
        raise _too_deep(e) from e
