from __future__ import annotations

from typing import TYPE_CHECKING, Any, Tuple

from ..tree import Node, RawNode, Symbol, raw_tag, s
from .assignment import valueless_target
from .conditionals import condition_form
from .helpers import take, unwrap_void

if TYPE_CHECKING:
    from ..rewriter import Rewriter

NEGATED = {
    "while": "until",
    "until": "while",
}


def _negated_loop(keyword: str, cond: Node) -> Tuple[str, Node]:
    """``while !x`` is ``until x``; ``while a !~ b`` is ``until a =~ b``."""
    if cond.tag == "send" and len(cond.children) == 2 and cond.children[1] == "!":
        return NEGATED[keyword], cond.children[0]
    if cond.tag == "send" and len(cond.children) == 3 and cond.children[1] == "!~":
        receiver, _, argument = cond.children
        return NEGATED[keyword], s("send", receiver, Symbol("=~"), argument, line=cond.line)
    return keyword, cond


def _loop(keyword: str, cond: Any, body: Any, check_first: bool, rw: Rewriter) -> Node:
    keyword, cond = _negated_loop(keyword, rw.process(cond))
    if not check_first:
        keyword = f"{keyword}_post"
    return s(keyword, condition_form(cond), body, check_first)


def process_while(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, body = take(exp, 3)
    return _loop("while", cond, unwrap_void(rw.process(body)), True, rw)


def process_until(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, body = take(exp, 3)
    return _loop("until", cond, unwrap_void(rw.process(body)), True, rw)


def _runs_body_first(body: Any) -> bool:
    # begin ... end while cond; the begin may be wrapped with its comments
    if raw_tag(body) == "comment":
        body = body[2]
    return raw_tag(body) == "begin"


def process_while_mod(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, body = take(exp, 3)
    check_first = not _runs_body_first(body)
    return _loop("while", cond, rw.process(body), check_first, rw)


def process_until_mod(exp: RawNode, rw: Rewriter) -> Node:
    _, cond, body = take(exp, 3)
    check_first = not _runs_body_first(body)
    return _loop("until", cond, rw.process(body), check_first, rw)


def process_for(exp: RawNode, rw: Rewriter) -> Node:
    _, target, collection, body = take(exp, 4)
    collection = rw.process(collection)
    target = valueless_target(rw.process(target), rw)
    return s("for", target, collection, unwrap_void(rw.process(body)))
