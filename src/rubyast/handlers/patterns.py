"""Pattern matching: ``case ... in``, ``expr in pat`` and ``expr => pat``.

Pattern positions reuse ordinary raw nodes with different meanings: a bare
identifier binds a variable, ``^x`` pins one, and ``|``/``=>`` are
alternation and capture rather than method calls. Every name bound by a
pattern becomes a known local for the rest of the parse.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from ..tree import Node, RawNode, Symbol, raw_tag, s
from .helpers import leaf_line, take

if TYPE_CHECKING:
    from ..rewriter import Rewriter

PINNABLE_TAGS = frozenset({"lvar", "ivar", "gvar", "cvar"})

GUARDS = {
    "if_mod": "if_guard",
    "unless_mod": "unless_guard",
}


def handle_guarded_pattern(rw: Rewriter, exp: Any) -> Tuple[Node, Optional[Node]]:
    """Split ``pat if cond`` into the pattern and its guard node."""
    guard_tag = GUARDS.get(raw_tag(exp))
    if guard_tag is None:
        return handle_pattern(rw, exp), None
    _, cond, pattern = take(exp, 3)
    pattern = handle_pattern(rw, pattern)
    return pattern, s(guard_tag, rw.process(cond))


def handle_pattern(rw: Rewriter, exp: Any) -> Node:
    match raw_tag(exp):
        case "var_field":
            return _match_var(rw, exp)
        case "var_ref":
            value = rw.process(exp)
            if value.tag in PINNABLE_TAGS:
                return s("pin", value)
            return value
        case "begin":
            return s("pin", rw.process(exp))
        case "binary" if exp[2] == "|":
            return s("match_alt", handle_pattern(rw, exp[1]), handle_pattern(rw, exp[3]))
        case "binary" if exp[2] == "=>":
            return s("match_as", handle_pattern(rw, exp[1]), handle_pattern(rw, exp[3]))
    return rw.process(exp)


def _bind(rw: Rewriter, name: Symbol, line: Optional[int]) -> Node:
    rw.local_variables.add(name)
    return s("match_var", name, line=line)


def _match_var(rw: Rewriter, exp: RawNode) -> Node:
    _, ident = take(exp, 2)
    if ident is None:
        return s("match_rest")
    return _bind(rw, Symbol(ident[1]), leaf_line(ident))


def _match_rest(rw: Rewriter, exp: Any) -> Node:
    if raw_tag(exp) == "var_field" and exp[1] is not None:
        return s("match_rest", _match_var(rw, exp))
    return s("match_rest")


def _is_nil_rest(rest: Any) -> bool:
    """``**nil`` arrives as ``[:var_field, :nil]``, a bare ``:nil`` or a nokw_param."""
    if isinstance(rest, Symbol):
        return rest == "nil"
    if raw_tag(rest) == "var_field":
        return len(rest) > 1 and isinstance(rest[1], str) and rest[1] == "nil"
    return raw_tag(rest) == "nokw_param"


def _const_pattern(rw: Rewriter, const: Any, pattern: Node) -> Node:
    if const is None:
        return pattern
    return s("const_pattern", rw.process(const), pattern)


def process_aryptn(exp: RawNode, rw: Rewriter) -> Node:
    _, const, pre, rest, post = take(exp, 5)
    elements: List[Node] = [handle_pattern(rw, item) for item in pre or []]
    if rest is not None:
        elements.append(_match_rest(rw, rest))
    elements.extend(handle_pattern(rw, item) for item in post or [])
    return _const_pattern(rw, const, s("array_pattern", *elements))


def process_fndptn(exp: RawNode, rw: Rewriter) -> Node:
    _, const, pre_rest, items, post_rest = take(exp, 5)
    elements = [_match_rest(rw, pre_rest)]
    elements.extend(handle_pattern(rw, item) for item in items or [])
    elements.append(_match_rest(rw, post_rest))
    return _const_pattern(rw, const, s("find_pattern", *elements))


def process_hshptn(exp: RawNode, rw: Rewriter) -> Node:
    _, const, pairs, rest = take(exp, 4)
    elements: List[Node] = []
    for key, value in pairs or []:
        key_node = rw.process(key)
        if value is None:
            elements.append(_bind(rw, Symbol(key_node.children[0]), key_node.line))
        else:
            elements.append(s("pair", key_node, handle_pattern(rw, value)))

    if _is_nil_rest(rest):
        elements.append(s("match_nil_pattern"))
    elif rest is not None:
        elements.append(_match_rest(rw, rest))

    return _const_pattern(rw, const, s("hash_pattern", *elements))
