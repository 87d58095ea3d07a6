"""Method calls, argument lists and indexing."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import InternalError
from ..tree import Node, RawNode, Symbol, is_raw, s
from .helpers import argument_list, generic_add_star, leaf_line, process_all, symbol_of, take, with_line

if TYPE_CHECKING:
    from ..rewriter import Rewriter

CALL_TYPES = {
    ".": "send",
    "::": "send",
    "&.": "safe_call",
}


def call_type(operator: Any) -> str:
    """Node tag for a call operator, given as a scanner leaf or a bare symbol."""
    text = operator[1] if is_raw(operator) else operator
    try:
        return CALL_TYPES[text]
    except KeyError:
        raise InternalError(f"unknown call operator {text!r}") from None


def _method_name(name: Any) -> Symbol:
    return name if isinstance(name, Symbol) else symbol_of(name)


def process_call(exp: RawNode, rw: Rewriter) -> Node:
    _, receiver, operator, name = take(exp, 4)
    kind = call_type(operator)
    # foo.() arrives with the bare symbol :call as its name
    return with_line(leaf_line(name), s(kind, rw.process(receiver), _method_name(name)))


def process_command(exp: RawNode, rw: Rewriter) -> Node:
    _, name, args = take(exp, 3)
    return with_line(leaf_line(name), s("send", None, symbol_of(name), *argument_list(rw, args)))


def process_command_call(exp: RawNode, rw: Rewriter) -> Node:
    _, receiver, operator, name, args = take(exp, 5)
    kind = call_type(operator)
    receiver = rw.process(receiver)
    return with_line(leaf_line(name), s(kind, receiver, _method_name(name), *argument_list(rw, args)))


def process_vcall(exp: RawNode, rw: Rewriter) -> Node:
    _, ident = take(exp, 2)
    name = symbol_of(ident)
    if rw.is_local(name):
        return s("lvar", name, line=leaf_line(ident))
    return s("send", None, name, line=leaf_line(ident))


def process_fcall(exp: RawNode, rw: Rewriter) -> Node:
    _, ident = take(exp, 2)
    return s("send", None, symbol_of(ident), line=leaf_line(ident))


def process_method_add_arg(exp: RawNode, rw: Rewriter) -> Node:
    _, call, parens = take(exp, 3)
    call = rw.process(call)
    call.children.extend(argument_list(rw, parens))
    return call


def process_arg_paren(exp: RawNode, rw: Rewriter) -> Node:
    _, args = take(exp, 2)
    if args is None:
        return Node("arglist")
    return Node("arglist", argument_list(rw, args))


def process_args(exp: RawNode, rw: Rewriter) -> Node:
    return Node("arglist", process_all(rw, exp[1:]))


def process_args_add_block(exp: RawNode, rw: Rewriter) -> Node:
    _, regular, block = take(exp, 3)
    items = argument_list(rw, regular)
    if len(exp) < 3 or block is False:
        return Node("arglist", items)
    if block is None or block is True:
        # anonymous block forwarding, foo(&)
        items.append(s("block_pass", None))
    else:
        items.append(s("block_pass", rw.process(block)))
    return Node("arglist", items)


def process_args_add_star(exp: RawNode, rw: Rewriter) -> Node:
    return generic_add_star(exp, rw)


def process_args_forward(exp: RawNode, rw: Rewriter) -> Node:
    return s("forwarded_args")


def process_bare_assoc_hash(exp: RawNode, rw: Rewriter) -> Node:
    _, assocs = take(exp, 2)
    return s("kwargs", *process_all(rw, assocs))


def process_super(exp: RawNode, rw: Rewriter) -> Node:
    _, args = take(exp, 2)
    return s("super", *argument_list(rw, args))


def process_zsuper(exp: RawNode, rw: Rewriter) -> Node:
    return s("zsuper")


def process_aref(exp: RawNode, rw: Rewriter) -> Node:
    _, collection, indexes = take(exp, 3)
    collection = rw.process(collection)
    return s("index", collection, *argument_list(rw, indexes))
