"""Program structure: statement lists, namespaces, parentheses and variables."""
from __future__ import annotations

from typing import TYPE_CHECKING

from ..tree import Node, RawNode, Symbol, raw_tag, s
from .helpers import (
    leaf_line,
    position_line,
    process_all,
    reject_void,
    symbol_of,
    take,
    unwrap_void,
    with_line,
)

if TYPE_CHECKING:
    from ..rewriter import Rewriter

COMMENTABLE_TAGS = frozenset({"class", "module", "sclass", "def", "defs", "preexe", "postexe"})


def process_program(exp: RawNode, rw: Rewriter) -> Node:
    _, content = take(exp, 2)
    return rw.process(content)


def process_stmts(exp: RawNode, rw: Rewriter) -> Node:
    statements = process_all(rw, exp[1:])
    line = statements[0].line if statements and statements[0] is not None else None
    statements = reject_void(statements)

    match len(statements):
        case 0:
            return Node("void_stmt", line=line)
        case 1:
            return statements[0]
        case _:
            return s("begin", *statements)


def process_void_stmt(exp: RawNode, rw: Rewriter) -> Node:
    _, pos = take(exp, 2)
    return Node("void_stmt", line=position_line(pos))


def _namespace_body(rw: Rewriter, body: object) -> Node | None:
    # class and module bodies are never inside a method
    with rw.method_body(False):
        return unwrap_void(rw.process(body))


def process_module(exp: RawNode, rw: Rewriter) -> Node:
    _, const_ref, body, pos = take(exp, 4)
    const = rw.process(const_ref)
    return s("module", const, _namespace_body(rw, body), line=position_line(pos))


def process_class(exp: RawNode, rw: Rewriter) -> Node:
    _, const_ref, parent, body, pos = take(exp, 5)
    const = rw.process(const_ref)
    parent = rw.process(parent)
    return s("class", const, parent, _namespace_body(rw, body), line=position_line(pos))


def process_sclass(exp: RawNode, rw: Rewriter) -> Node:
    _, target, body, pos = take(exp, 4)
    return s("sclass", rw.process(target), _namespace_body(rw, body), line=position_line(pos))


def process_const_ref(exp: RawNode, rw: Rewriter) -> Node:
    _, ref = take(exp, 2)
    return rw.process(ref)


def process_const_path_ref(exp: RawNode, rw: Rewriter) -> Node:
    _, left, right = take(exp, 3)
    return s("const", rw.process(left), symbol_of(right))


def process_top_const_ref(exp: RawNode, rw: Rewriter) -> Node:
    _, ref = take(exp, 2)
    return s("const", s("cbase"), symbol_of(ref), line=leaf_line(ref))


def process_var_ref(exp: RawNode, rw: Rewriter) -> Node:
    _, contents = take(exp, 2)
    return rw.process(contents)


def process_var_alias(exp: RawNode, rw: Rewriter) -> Node:
    _, left, right = take(exp, 3)
    return s("valias", symbol_of(left), symbol_of(right))


def process_paren(exp: RawNode, rw: Rewriter) -> Node:
    _, body = take(exp, 2)
    if not body:
        return s("nil")

    has_nested_paren = raw_tag(body) == "stmts" and len(body) > 1 and raw_tag(body[1]) == "paren"
    result = rw.process(body)
    if result is None or result.tag == "void_stmt":
        return s("nil")
    if result.tag in ("args", "arglist"):
        return result
    if result.tag == "begin" and not has_nested_paren:
        return result
    return s("begin", result)


def process_comment(exp: RawNode, rw: Rewriter) -> Node:
    _, comment, inner = take(exp, 3)
    node = rw.process(inner)
    if comment and node.tag in COMMENTABLE_TAGS:
        node.comments = comment
    return node


def _process_hook(tag: str, exp: RawNode, rw: Rewriter) -> Node:
    _, body, pos = take(exp, 3)
    return s(tag, unwrap_void(rw.process(body)), line=position_line(pos))


def process_BEGIN(exp: RawNode, rw: Rewriter) -> Node:
    return _process_hook("preexe", exp, rw)


def process_END(exp: RawNode, rw: Rewriter) -> Node:
    return _process_hook("postexe", exp, rw)


def process_defined(exp: RawNode, rw: Rewriter) -> Node:
    _, arg = take(exp, 2)
    return s("defined?", rw.process(arg))


def process_alias(exp: RawNode, rw: Rewriter) -> Node:
    _, left, right = take(exp, 3)
    return s("alias", rw.process(left), rw.process(right))


def process_undef(exp: RawNode, rw: Rewriter) -> Node:
    _, names = take(exp, 2)
    return s("undef", *process_all(rw, names))


# ----------------------------------------------------------------------
# Scanner leaves
# ----------------------------------------------------------------------

def _identifier(tag: str):
    def process(exp: RawNode, rw: Rewriter) -> Node:
        return s(tag, symbol_of(exp), line=leaf_line(exp))
    return process


process_at_ident = _identifier("lvar")
process_at_ivar = _identifier("ivar")
process_at_gvar = _identifier("gvar")
process_at_cvar = _identifier("cvar")
process_at_op = _identifier("op")


def process_at_const(exp: RawNode, rw: Rewriter) -> Node:
    return s("const", None, symbol_of(exp), line=leaf_line(exp))


def process_at_label(exp: RawNode, rw: Rewriter) -> Node:
    _, text, pos = take(exp, 3)
    return s("sym", Symbol(text[:-1]), line=position_line(pos))


def process_at_kw(exp: RawNode, rw: Rewriter) -> Node:
    _, keyword, pos = take(exp, 3)
    line = position_line(pos)
    if keyword == "__FILE__":
        return s("str", rw.filename, line=line)
    if keyword == "__LINE__":
        return s("int", line, line=line)
    return Node(keyword, line=line)


def process_at_backref(exp: RawNode, rw: Rewriter) -> Node:
    _, text, pos = take(exp, 3)
    name = text[1:]
    if name.isdigit():
        node = s("nth_ref", int(name))
    else:
        node = s("back_ref", Symbol(name))
    return with_line(position_line(pos), node)
