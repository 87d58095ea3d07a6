"""Numeric, character, array and hash literals."""
from __future__ import annotations

from fractions import Fraction
from typing import TYPE_CHECKING, Union

from ..tree import Node, RawNode, Symbol, raw_tag, s
from ..unescape import unescape_char
from .helpers import position_line, process_all, take

if TYPE_CHECKING:
    from ..rewriter import Rewriter

RADIX_PREFIXES = {"0x": 16, "0b": 2, "0o": 8, "0d": 10}


def ruby_integer(text: str) -> int:
    """Integer value of a Ruby integer literal, prefixes and underscores included."""
    digits = text.replace("_", "").lower()
    sign = 1
    if digits[:1] in ("-", "+"):
        if digits[0] == "-":
            sign = -1
        digits = digits[1:]

    base = RADIX_PREFIXES.get(digits[:2])
    if base is not None:
        return sign * int(digits[2:], base)
    if len(digits) > 1 and digits.startswith("0"):
        return sign * int(digits[1:], 8)
    return sign * int(digits, 10)


def _rational(text: str) -> Fraction:
    body = text.replace("_", "")
    if "." in body:
        return Fraction(body)
    return Fraction(ruby_integer(body))


def _real(text: str) -> Union[int, float, Fraction]:
    if text.endswith("r"):
        return _rational(text[:-1])
    body = text.replace("_", "").lower().lstrip("+-")
    if body[:2] not in RADIX_PREFIXES and any(ch in body for ch in ".e"):
        return float(text.replace("_", ""))
    return ruby_integer(text)


def process_at_int(exp: RawNode, rw: Rewriter) -> Node:
    _, text, pos = take(exp, 3)
    return s("int", ruby_integer(text), line=position_line(pos))


def process_at_float(exp: RawNode, rw: Rewriter) -> Node:
    _, text, pos = take(exp, 3)
    return s("float", float(text.replace("_", "")), line=position_line(pos))


def process_at_rational(exp: RawNode, rw: Rewriter) -> Node:
    _, text, pos = take(exp, 3)
    return s("rational", _rational(text[:-1]), line=position_line(pos))


def process_at_imaginary(exp: RawNode, rw: Rewriter) -> Node:
    _, text, pos = take(exp, 3)
    return s("complex", complex(0, _real(text[:-1])), line=position_line(pos))


def process_at_CHAR(exp: RawNode, rw: Rewriter) -> Node:
    _, text, pos = take(exp, 3)
    return s("str", unescape_char(text[1:]), line=position_line(pos))


def process_array(exp: RawNode, rw: Rewriter) -> Node:
    _, elements = take(exp, 2)
    if not elements:
        return s("array")
    return s("array", *rw.process(elements).children)


def process_hash(exp: RawNode, rw: Rewriter) -> Node:
    _, body = take(exp, 2)
    if not body:
        return s("hash")
    return s("hash", *rw.process(body).children)


def process_assoclist_from_args(exp: RawNode, rw: Rewriter) -> Node:
    _, assocs = take(exp, 2)
    return Node("assocs", process_all(rw, assocs))


def process_assoc_new(exp: RawNode, rw: Rewriter) -> Node:
    _, key, value = take(exp, 3)
    key_node = rw.process(key)
    if value is None:
        return s("pair", key_node, _shorthand_value(key, key_node, rw))
    return s("pair", key_node, rw.process(value))


def _shorthand_value(key: RawNode, key_node: Node, rw: Rewriter) -> Node:
    """Value of ``{foo:}``, which reads the local or calls the method ``foo``."""
    name = key_node.children[0]
    line = key_node.line
    if raw_tag(key) == "@label" and name[:1].isupper():
        return s("const", None, Symbol(name), line=line)
    if rw.is_local(name):
        return s("lvar", Symbol(name), line=line)
    return s("send", None, Symbol(name), line=line)


def process_assoc_splat(exp: RawNode, rw: Rewriter) -> Node:
    _, value = take(exp, 2)
    return s("kwsplat", rw.process(value))
