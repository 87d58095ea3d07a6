from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from ..tree import Node, RawNode, Symbol, s
from .calls import call_type
from .helpers import argument_list, generic_add_star, process_all, symbol_of, take, with_line

if TYPE_CHECKING:
    from ..rewriter import Rewriter

ASSIGNMENT_TYPES = {
    "ivar": "ivasgn",
    "const": "casgn",
    "lvar": "lvasgn",
    "gvar": "gasgn",
}

OPERATOR_ASSIGNMENT_TYPES = {
    "||": "or_asgn",
    "&&": "and_asgn",
}


def process_assign(exp: RawNode, rw: Rewriter) -> Node:
    _, lvalue, value = take(exp, 3)
    lvalue = rw.process(lvalue)
    value = _rhs(rw.process(value))
    return with_line(lvalue.line, create_assignment(lvalue, value, rw))


def process_massign(exp: RawNode, rw: Rewriter) -> Node:
    _, left, right = take(exp, 3)
    left = rw.process(left)
    right = _rhs(rw.process(right))
    return s("masgn", left, right)


def _rhs(value: Optional[Node]) -> Optional[Node]:
    if value is not None and value.tag == "mrhs":
        value.tag = "array"
    return value


def process_mrhs(exp: RawNode, rw: Rewriter) -> Node:
    return Node("mrhs", process_all(rw, exp[1:]))


def process_mrhs_new_from_args(exp: RawNode, rw: Rewriter) -> Node:
    _, inner, *rest = exp
    items = argument_list(rw, inner)
    items.extend(rw.process(item) for item in rest)
    return Node("mrhs", items)


def process_mrhs_add_star(exp: RawNode, rw: Rewriter) -> Node:
    items = generic_add_star(exp, rw)
    items.tag = "mrhs"
    return items


def process_mlhs(exp: RawNode, rw: Rewriter) -> Node:
    items = process_all(rw, exp[1:])
    return s("mlhs", *(valueless_target(item, rw) for item in items))


def process_mlhs_add_star(exp: RawNode, rw: Rewriter) -> Node:
    _, args, splatted = take(exp, 3)
    items = rw.process(args)
    target = rw.process(splatted)
    if target is None:
        items.children.append(s("splat"))
    else:
        items.children.append(s("splat", valueless_target(target, rw)))
    return items


def process_mlhs_add_post(exp: RawNode, rw: Rewriter) -> Node:
    _, base, rest = take(exp, 3)
    items = rw.process(base)
    rest = rw.process(rest)
    if rest.tag == "mlhs":
        items.children.extend(rest.children)
    else:
        items.children.append(valueless_target(rest, rw))
    return items


def process_mlhs_paren(exp: RawNode, rw: Rewriter) -> Node:
    _, contents = take(exp, 2)
    return rw.process(contents)


def process_aref_field(exp: RawNode, rw: Rewriter) -> Node:
    _, receiver, args = take(exp, 3)
    return Node("aref_field", [rw.process(receiver), *argument_list(rw, args)])


def process_field(exp: RawNode, rw: Rewriter) -> Node:
    _, receiver, operator, name = take(exp, 4)
    return Node("field", [rw.process(receiver), call_type(operator), symbol_of(name)])


def process_opassign(exp: RawNode, rw: Rewriter) -> Node:
    _, lvalue, operator, value = take(exp, 4)
    lvalue = rw.process(lvalue)
    value = rw.process(value)
    op = Symbol(operator[1][:-1])

    mapped = OPERATOR_ASSIGNMENT_TYPES.get(op)

    target = None
    if lvalue.tag == "aref_field":
        receiver, *indexes = lvalue.children
        target = s("indexasgn", receiver, *indexes)
    elif lvalue.tag == "field":
        # the reader, not the setter: a.b ||= 1 targets send(a, :b)
        receiver, kind, name = lvalue.children
        target = s(kind, receiver, name)

    if target is not None:
        if mapped is not None:
            return s(mapped, target, value)
        return s("op_asgn", target, op, value)
    if mapped is not None:
        return s(mapped, valueless_target(lvalue, rw), value)

    # foo += bar is foo = foo + bar
    return with_line(lvalue.line, create_assignment(lvalue, s("send", lvalue, op, value), rw))


def _assignment_type(tag: str, rw: Rewriter) -> str:
    if tag == "cvar":
        return "cvasgn" if rw.in_method else "cvdecl"
    return ASSIGNMENT_TYPES.get(tag, tag)


def create_assignment(lvalue: Node, value: Any, rw: Rewriter) -> Node:
    """Assignment of ``value`` to ``lvalue``; a value of None leaves the target bare."""
    tail = [] if value is None else [value]

    if lvalue.tag == "aref_field":
        receiver, *indexes = lvalue.children
        return s("indexasgn", receiver, *indexes, *tail)
    if lvalue.tag == "field":
        receiver, kind, name = lvalue.children
        return s(kind, receiver, Symbol(f"{name}="), *tail)
    if lvalue.tag == "mlhs":
        return lvalue
    return s(_assignment_type(lvalue.tag, rw), *lvalue.children, *tail)


def valueless_target(item: Node, rw: Rewriter) -> Node:
    """Target of a multiple assignment, rescue variable or for loop."""
    return with_line(item.line, create_assignment(item, None, rw))
