from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

from ..tree import Node, RawNode, Symbol, raw_tag, s
from .blocks import kwrest_name
from .helpers import argument_list, position_line, take, unwrap_begin, unwrap_void

if TYPE_CHECKING:
    from ..rewriter import Rewriter


def process_def(exp: RawNode, rw: Rewriter) -> Node:
    _, name, params, body, pos = take(exp, 5)
    with rw.method_body():
        args = _method_params(rw, params)
        with rw.kwrest_scope(kwrest_name(args)):
            statements = method_body(rw, body)
    return s("def", Symbol(name[1]), args, *statements, line=position_line(pos))


def process_defs(exp: RawNode, rw: Rewriter) -> Node:
    _, receiver, _operator, name, params, body, pos = take(exp, 7)
    receiver = unwrap_begin(rw.process(receiver))
    with rw.method_body():
        args = _method_params(rw, params)
        with rw.kwrest_scope(kwrest_name(args)):
            statements = method_body(rw, body)
    return s("defs", receiver, Symbol(name[1]), args, *statements, line=position_line(pos))


def _method_params(rw: Rewriter, params: Any) -> Node:
    if not params:
        return s("args")
    args = rw.process(params)
    if args is None or args.tag == "nil":
        return s("args")
    return args


def method_body(rw: Rewriter, body: Any) -> List[Node]:
    """Statements of a method body: ``begin`` is flattened, nothing becomes ``nil``."""
    if raw_tag(body) == "bodystmt":
        node = rw.process(body)
    else:
        # def foo = expr
        node = unwrap_void(rw.process(body))

    if node is None:
        return [s("nil")]
    if node.tag == "begin":
        return list(node.children)
    return [node]


def process_return(exp: RawNode, rw: Rewriter) -> Node:
    _, args = take(exp, 2)
    return s("return", *argument_list(rw, args))


def process_return0(exp: RawNode, rw: Rewriter) -> Node:
    return s("return")


def process_yield(exp: RawNode, rw: Rewriter) -> Node:
    _, args = take(exp, 2)
    return s("yield", *argument_list(rw, args))


def process_yield0(exp: RawNode, rw: Rewriter) -> Node:
    return s("yield")
