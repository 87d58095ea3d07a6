from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..tree import Node, RawNode, Symbol, s
from .helpers import take
from .patterns import handle_pattern
from .strings import static_regexp_source

if TYPE_CHECKING:
    from ..rewriter import Rewriter

BOOLEAN_OPERATORS = {
    "&&": "and",
    "||": "or",
    "and": "and",
    "or": "or",
}

UNARY_OPERATORS = {
    "not": "!",
}

NAMED_GROUP = re.compile(r"(?<!\\)\(\?<([A-Za-z_]\w*)>")


def process_binary(exp: RawNode, rw: Rewriter) -> Node:
    _, left, operator, right = take(exp, 4)

    if operator == "=~":
        return _match_operator(rw, rw.process(left), rw.process(right))
    mapped = BOOLEAN_OPERATORS.get(operator)
    if mapped is not None:
        return s(mapped, rw.process(left), rw.process(right))
    if operator == "=>":
        return s("match_as", handle_pattern(rw, left), handle_pattern(rw, right))
    return s("send", rw.process(left), Symbol(operator), rw.process(right))


def _match_operator(rw: Rewriter, left: Node, right: Node) -> Node:
    source = static_regexp_source(left)
    if source is None:
        return s("send", left, Symbol("=~"), right)
    # named captures of a literal regexp on the left become locals
    rw.local_variables.update(Symbol(name) for name in NAMED_GROUP.findall(source))
    return s("match_with_lvasgn", left, right)


def process_unary(exp: RawNode, rw: Rewriter) -> Node:
    _, operator, value = take(exp, 3)
    value = rw.process(value)
    return s("send", value, Symbol(UNARY_OPERATORS.get(operator, operator)))


def process_dot2(exp: RawNode, rw: Rewriter) -> Node:
    _, left, right = take(exp, 3)
    return s("irange", rw.process(left), rw.process(right))


def process_dot3(exp: RawNode, rw: Rewriter) -> Node:
    _, left, right = take(exp, 3)
    return s("erange", rw.process(left), rw.process(right))


def process_ifop(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, truepart, falsepart = take(exp, 4)
    return s("if", rw.process(cond), rw.process(truepart), rw.process(falsepart))
