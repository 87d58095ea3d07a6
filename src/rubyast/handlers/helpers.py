from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Sequence

from ..tree import Node, RawNode, Symbol, raw_line, raw_tag, s

if TYPE_CHECKING:
    from ..rewriter import Rewriter

ARGUMENT_LIST_TAGS = frozenset({"arglist", "mrhs"})


def take(exp: RawNode, count: int) -> List[Any]:
    """The first ``count`` fields of a raw node, tag included, padded with None."""
    fields = list(exp[:count])
    fields.extend([None] * (count - len(fields)))
    return fields


def symbol_of(leaf: Any) -> Symbol:
    """Name carried by a scanner leaf such as ``["@ident", "foo", [1, 0]]``."""
    if isinstance(leaf, str):
        return Symbol(leaf)
    return Symbol(leaf[1])


def position_line(pos: Any) -> Optional[int]:
    if isinstance(pos, list) and pos:
        return pos[0]
    return None


def leaf_line(leaf: Any) -> Optional[int]:
    return raw_line(leaf)


def with_line(line: Optional[int], node: Node) -> Node:
    if line is not None:
        node.line = line
    return node


def process_all(rw: Rewriter, items: Optional[Sequence[Any]]) -> List[Optional[Node]]:
    return [rw.process(item) for item in items or []]


def is_void(node: Any) -> bool:
    return node is None or (isinstance(node, Node) and node.tag == "void_stmt")


def unwrap_void(node: Optional[Node]) -> Optional[Node]:
    return None if is_void(node) else node


def reject_void(nodes: Sequence[Optional[Node]]) -> List[Node]:
    return [node for node in nodes if not is_void(node)]


def wrap_in_begin(nodes: Sequence[Node]) -> Optional[Node]:
    if not nodes:
        return None
    if len(nodes) == 1:
        return nodes[0]
    return s("begin", *nodes)


def unwrap_begin(node: Optional[Node]) -> Optional[Node]:
    if node is not None and node.tag == "begin" and len(node.children) == 1:
        return node.children[0]
    return node


def statement_list(rw: Rewriter, stmts: Any) -> List[Node]:
    """Process the children of a ``stmts`` raw node, dropping empty statements."""
    if raw_tag(stmts) != "stmts":
        return reject_void([rw.process(stmts)])
    return reject_void(process_all(rw, stmts[1:]))


def argument_list(rw: Rewriter, raw: Any) -> List[Any]:
    """Children of a processed argument list, or ``[result]`` for a lone value."""
    result = rw.process(raw)
    if result is None:
        return []
    if result.tag in ARGUMENT_LIST_TAGS:
        return list(result.children)
    return [result]


def generic_add_star(exp: RawNode, rw: Rewriter) -> Node:
    """``args_add_star``/``mrhs_add_star``: items, then a splat, then the rest."""
    _, args, splatted, *rest = exp
    items = rw.process(args)
    if items is None:
        items = Node("arglist")
    items.children.append(s("splat", rw.process(splatted)))
    items.children.extend(rw.process(item) for item in rest)
    return items
