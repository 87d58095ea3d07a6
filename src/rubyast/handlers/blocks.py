"""Blocks, parameter lists, ``begin``/``rescue``/``ensure`` and jumps.

A block is built in two steps: ``brace_block``/``do_block`` produce an
intermediate ``block_body`` node holding the parameters and body, and
``method_add_block`` combines it with the call. Blocks without declared
parameters whose body reads ``_1``..``_9`` become ``numblock`` nodes.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, List, Optional

from ..tree import Node, RawNode, Symbol, is_raw, raw_tag, s, walk
from .assignment import valueless_target
from .helpers import (
    argument_list,
    leaf_line,
    position_line,
    process_all,
    statement_list,
    symbol_of,
    take,
    unwrap_void,
    with_line,
    wrap_in_begin,
)

if TYPE_CHECKING:
    from ..rewriter import Rewriter

NUMBERED_PARAMETER = re.compile(r"_([1-9])")

# Scopes of their own; numbered parameters inside them are not ours.
SCOPE_TAGS = frozenset({"block", "numblock", "def", "defs", "class", "module", "sclass"})

SPECIAL_ARGUMENTS = {
    "splat": "restarg",
    "kwsplat": "kwrestarg",
    "forwarded_args": "forward_arg",
}


# ----------------------------------------------------------------------
# Blocks
# ----------------------------------------------------------------------

def process_method_add_block(exp: RawNode, rw: Rewriter) -> Node:
    _, call, block = take(exp, 3)
    call = rw.process(call)
    args, body = rw.process(block).children
    return make_iter(rw, call, args, body)


def _generic_block(exp: RawNode, rw: Rewriter) -> Node:
    _, params, stmts = take(exp, 3)
    args = rw.process(params)
    with rw.kwrest_scope(kwrest_name(args)):
        body = unwrap_void(rw.process(stmts))
    return Node("block_body", [args, body])


process_brace_block = _generic_block
process_do_block = _generic_block


def process_lambda(exp: RawNode, rw: Rewriter) -> Node:
    _, params, stmts = take(exp, 3)
    args = rw.process(params)
    with rw.kwrest_scope(kwrest_name(args)):
        body = unwrap_void(rw.process(stmts))
    return make_iter(rw, s("lambda"), args, body)


def make_iter(rw: Rewriter, call: Node, args: Optional[Node], body: Optional[Node]) -> Node:
    if args is None:
        args = s("args")
    if rw.numbered_params and not args.children:
        count = numbered_parameter_count(body)
        if count:
            return s("numblock", call, count, body)
    return s("block", call, args, body)


def numbered_parameter_count(body: Optional[Node]) -> int:
    """Highest ``_N`` read in ``body``, ignoring nested scopes; 0 if none."""
    highest = 0
    for node in walk(body, skip=SCOPE_TAGS):
        if node.tag != "lvar":
            continue
        match = NUMBERED_PARAMETER.fullmatch(node.children[0])
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def process_block_var(exp: RawNode, rw: Rewriter) -> Node:
    _, params, shadows = take(exp, 3)
    args = rw.process(params)
    children = args.children

    # |a,| and |a| differ only in the trailing comma
    trailing_comma = raw_tag(params) == "params" and _is_excessed_comma(params[3])
    if len(children) == 1 and not trailing_comma:
        only = children[0]
        if only.tag == "arg":
            args.children = [with_line(only.line, s("procarg0", only))]
        elif only.tag == "mlhs":
            args.children = [with_line(only.line, s("procarg0", *only.children))]

    for shadow in shadows or []:
        args.children.append(s("shadowarg", symbol_of(shadow), line=leaf_line(shadow)))
    return args


def _is_excessed_comma(rest: Any) -> bool:
    return rest == 0 or raw_tag(rest) == "excessed_comma"


# ----------------------------------------------------------------------
# Parameters
# ----------------------------------------------------------------------

def process_params(exp: RawNode, rw: Rewriter) -> Node:
    _, required, optional, rest, post, keywords, kwrest, block = take(exp, 8)

    args: List[Node] = []
    args.extend(_positional(rw, required))
    for name, value in optional or []:
        args.append(s("optarg", symbol_of(name), rw.process(value), line=leaf_line(name)))
    if rest and not _is_excessed_comma(rest):
        args.append(_special(rw, rest))
    args.extend(_positional(rw, post))
    for label, value in keywords or []:
        name = Symbol(label[1][:-1])
        if value:
            args.append(s("kwoptarg", name, rw.process(value), line=leaf_line(label)))
        else:
            args.append(s("kwarg", name, line=leaf_line(label)))
    if kwrest:
        args.append(_special(rw, kwrest))
    if block:
        args.append(_special(rw, block))

    return s("args", *args)


def _positional(rw: Rewriter, items: Optional[List[Any]]) -> List[Node]:
    return [convert_argument(rw.process(item)) for item in items or []]


def _special(rw: Rewriter, raw: Any) -> Node:
    # def foo(**nil) passes the bare symbol :nil
    if isinstance(raw, Symbol) and raw == "nil":
        return s("kwnilarg")
    return convert_argument(rw.process(raw))


def convert_argument(node: Node) -> Node:
    """Turn a parameter read back from the raw tree into its ``args`` form."""
    match node.tag:
        case "lvar" | "lvasgn":
            return with_line(node.line, s("arg", node.children[0]))
        case "mlhs":
            return with_line(node.line, s("mlhs", *(convert_argument(ch) for ch in node.children)))
        case "splat" | "kwsplat":
            inner = node.children[0] if node.children else None
            tag = SPECIAL_ARGUMENTS[node.tag]
            if inner is None:
                return s(tag)
            return with_line(inner.line, s(tag, inner.children[0]))
        case "forwarded_args":
            return s("forward_arg")
    return node


def process_rest_param(exp: RawNode, rw: Rewriter) -> Node:
    _, name = take(exp, 2)
    if name is None:
        return s("restarg")
    return s("restarg", symbol_of(name), line=leaf_line(name))


def process_kwrest_param(exp: RawNode, rw: Rewriter) -> Node:
    _, name = take(exp, 2)
    if name is None:
        return s("kwrestarg")
    return s("kwrestarg", symbol_of(name), line=leaf_line(name))


def process_blockarg(exp: RawNode, rw: Rewriter) -> Node:
    _, name = take(exp, 2)
    if name is None:
        return s("blockarg")
    return s("blockarg", symbol_of(name), line=leaf_line(name))


def process_nokw_param(exp: RawNode, rw: Rewriter) -> Node:
    return s("kwnilarg")


def kwrest_name(args: Optional[Node]) -> Optional[Symbol]:
    if args is None:
        return None
    for param in args.children:
        if isinstance(param, Node) and param.tag == "kwrestarg" and param.children:
            return param.children[0]
    return None


# ----------------------------------------------------------------------
# begin / rescue / ensure
# ----------------------------------------------------------------------

def process_begin(exp: RawNode, rw: Rewriter) -> Node:
    _, body, pos = take(exp, 3)
    if raw_tag(body) != "bodystmt":
        # ^(expr) in a pattern
        return s("begin", rw.process(body))

    result = rw.process(body)
    if result is None:
        node = s("kwbegin")
    elif result.tag == "begin":
        node = s("kwbegin", *result.children)
    else:
        node = s("kwbegin", result)
    return with_line(position_line(pos), node)


def process_bodystmt(exp: RawNode, rw: Rewriter) -> Optional[Node]:
    _, main, rescue, else_body, ensure = take(exp, 5)

    body = wrap_in_begin(statement_list(rw, main))
    if rescue:
        clauses = rescue_clauses(rw, rescue)
        body = s("rescue", body, *clauses, unwrap_void(rw.process(else_body)))
    elif else_body:
        else_node = unwrap_void(rw.process(else_body))
        body = wrap_in_begin([node for node in (body, s("begin", else_node)) if node is not None])

    if ensure:
        body = s("ensure", body, rw.process(ensure))
    return body


def rescue_clauses(rw: Rewriter, clause: Any) -> List[Node]:
    """Follow the chain of ``rescue`` raw nodes, one ``resbody`` per clause."""
    clauses = []
    while clause:
        _, exceptions, variable, stmts, clause = take(clause, 5)
        capture = _exception_list(rw, exceptions)
        target = valueless_target(rw.process(variable), rw) if variable else None
        body = unwrap_void(rw.process(stmts))
        clauses.append(s("resbody", capture, target, body))
    return clauses


def _exception_list(rw: Rewriter, exceptions: Any) -> Optional[Node]:
    if not exceptions:
        return None
    if is_raw(exceptions):
        return s("array", *argument_list(rw, exceptions))
    return s("array", *process_all(rw, exceptions))


def process_rescue_mod(exp: RawNode, rw: Rewriter) -> Node:
    _, expression, fallback = take(exp, 3)
    return s("rescue", rw.process(expression), s("resbody", None, None, rw.process(fallback)), None)


def process_ensure(exp: RawNode, rw: Rewriter) -> Optional[Node]:
    _, stmts = take(exp, 2)
    return unwrap_void(rw.process(stmts))


# ----------------------------------------------------------------------
# Jumps
# ----------------------------------------------------------------------

def process_next(exp: RawNode, rw: Rewriter) -> Node:
    _, args = take(exp, 2)
    return s("next", *argument_list(rw, args))


def process_break(exp: RawNode, rw: Rewriter) -> Node:
    _, args = take(exp, 2)
    return s("break", *argument_list(rw, args))


def process_redo(exp: RawNode, rw: Rewriter) -> Node:
    return s("redo")


def process_retry(exp: RawNode, rw: Rewriter) -> Node:
    return s("retry")
