"""String, symbol, regexp and word-list literals.

String content arrives as ``@tstring_content`` leaves tagged with the
delimiter that was open when they were scanned. Adjacent leaves are merged,
then split on newlines so multi-line literals become ``dstr`` nodes with
one ``str`` per line, the way the parser gem builds them.
"""
from __future__ import annotations

import re
from itertools import groupby
from typing import TYPE_CHECKING, Any, List, Optional

from ..tree import Node, RawNode, Symbol, raw_tag, s
from ..unescape import decode_content, is_word_list, removes_continuations, unescape_continuations
from .helpers import leaf_line, position_line, process_all, symbol_of, take, unwrap_void, with_line

if TYPE_CHECKING:
    from ..rewriter import Rewriter

LINES = re.compile(r"[^\n]*\n|[^\n]+")


def process_string_literal(exp: RawNode, rw: Rewriter) -> Node:
    _, content = take(exp, 2)
    return rw.process(content)


def process_string_content(exp: RawNode, rw: Rewriter) -> Node:
    parts = extract_string_parts(exp[1:], rw)

    if not parts:
        return s("str", "")
    if len(parts) == 1 and parts[0].tag == "str":
        return parts[0]
    return s("dstr", *parts)


process_word = process_string_content


def process_string_embexpr(exp: RawNode, rw: Rewriter) -> Node:
    _, stmts = take(exp, 2)
    body = unwrap_void(rw.process(stmts))
    if body is None:
        return s("dstr", s("begin"))
    if body.tag == "begin" and raw_tag(stmts) == "stmts" and len(stmts) > 2:
        return s("dstr", s("begin", *body.children))
    return s("dstr", s("begin", body))


def process_string_dvar(exp: RawNode, rw: Rewriter) -> Node:
    _, variable = take(exp, 2)
    return s("dstr", s("begin", rw.process(variable)))


def process_string_concat(exp: RawNode, rw: Rewriter) -> Node:
    _, left, right = take(exp, 3)
    return s("dstr", rw.process(left), rw.process(right))


def process_xstring_literal(exp: RawNode, rw: Rewriter) -> Node:
    _, content = take(exp, 2)
    return rw.process(content)


def process_xstring(exp: RawNode, rw: Rewriter) -> Node:
    return s("xstr", *extract_string_parts(exp[1:], rw))


def process_regexp_literal(exp: RawNode, rw: Rewriter) -> Node:
    _, content, ending = take(exp, 3)
    regexp = rw.process(content)
    flags = sorted({ch for ch in ending[1] if "a" <= ch <= "z"})
    regexp.children.append(s("regopt", *(Symbol(flag) for flag in flags)))
    return regexp


def process_regexp(exp: RawNode, rw: Rewriter) -> Node:
    return s("regexp", *extract_string_parts(exp[1:], rw))


def process_symbol_literal(exp: RawNode, rw: Rewriter) -> Node:
    _, symbol = take(exp, 2)
    if raw_tag(symbol) == "symbol":
        return rw.process(symbol)
    return handle_symbol_content(symbol, rw)


def process_symbol(exp: RawNode, rw: Rewriter) -> Node:
    _, content = take(exp, 2)
    return handle_symbol_content(content, rw)


def process_dyna_symbol(exp: RawNode, rw: Rewriter) -> Node:
    _, content = take(exp, 2)
    return handle_dyna_symbol_content(content, rw)


def process_words(exp: RawNode, rw: Rewriter) -> Node:
    return Node("words", process_all(rw, exp[1:]))


process_qwords = process_words


def process_qsymbols(exp: RawNode, rw: Rewriter) -> Node:
    return Node("words", [handle_symbol_content(item, rw) for item in exp[1:]])


def process_symbols(exp: RawNode, rw: Rewriter) -> Node:
    return Node("words", [handle_dyna_symbol_content(item, rw) for item in exp[1:]])


def process_at_tstring_content(exp: RawNode, rw: Rewriter) -> Node:
    _, content, pos, delimiter = take(exp, 4)
    if removes_continuations(delimiter):
        content = unescape_continuations(content)

    if is_word_list(delimiter) or "\n" not in content:
        pieces = [content]
    else:
        pieces = LINES.findall(content)

    line = position_line(pos)
    parts = []
    for index, piece in enumerate(pieces):
        part = s("str", decode_content(piece, delimiter))
        # every piece but the last ends in a newline
        parts.append(with_line(None if line is None else line + index, part))
    if len(parts) == 1:
        return parts[0]
    return with_line(line, s("dstr", *parts))


def extract_string_parts(items: List[Any], rw: Rewriter) -> List[Node]:
    parts: List[Node] = []
    for node in process_all(rw, merge_raw_string_literals(items)):
        if node.tag == "dstr":
            parts.extend(node.children)
        elif node.tag == "str":
            parts.append(node)
    return parts


def merge_raw_string_literals(items: List[Any]) -> List[Any]:
    """Join runs of adjacent content leaves, dropping the empty ones."""
    merged: List[Any] = []
    for is_content, group in groupby(items, key=lambda item: raw_tag(item) == "@tstring_content"):
        if not is_content:
            merged.extend(group)
            continue
        # heredoc dedent can leave a line that held only indentation empty
        run = [item for item in group if item[1] != ""]
        if len(run) == 1:
            merged.append(run[0])
        elif run:
            head = run[0]
            merged.append(["@tstring_content", "".join(item[1] for item in run), *head[2:]])
    return merged


def handle_dyna_symbol_content(content: Any, rw: Rewriter) -> Node:
    node = rw.process(content)
    if node.tag == "str":
        value = node.children[0]
        if value == "":
            return s("dsym")
        return with_line(node.line, s("sym", Symbol(value)))
    return s("dsym", *node.children)


def handle_symbol_content(content: Any, rw: Rewriter) -> Node:
    if raw_tag(content) == "@tstring_content":
        processed = rw.process(content)
        return with_line(processed.line, s("sym", Symbol(processed.children[0])))
    return with_line(leaf_line(content), s("sym", symbol_of(content)))


def static_regexp_source(node: Optional[Node]) -> Optional[str]:
    """Source of a regexp literal without interpolation, else None."""
    if node is None or node.tag != "regexp":
        return None
    pieces = []
    for part in node.children[:-1]:
        if part.tag == "str":
            pieces.append(part.children[0])
        elif part.tag == "begin" and all(ch.tag == "str" for ch in part.children):
            pieces.extend(ch.children[0] for ch in part.children)
        else:
            return None
    return "".join(pieces)
