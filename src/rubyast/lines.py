"""Line number propagation over a finished tree.

Handlers only set lines where Ripper reported a position. ``trickle_up``
gives a node without a line the line of its first child that has one, and
``trickle_down`` then gives whatever is still unset its parent's line.
Neither pass overwrites a line that is already set.
"""
from __future__ import annotations

from typing import Any, Optional

from .tree import Node, is_node


def trickle_up(node: Any) -> Optional[int]:
    """Fill lines bottom-up and return the line of ``node``."""
    if not is_node(node):
        return None

    first: Optional[int] = None
    for child in node.children:
        line = trickle_up(child)
        if first is None and line is not None:
            first = line

    if node.line is None:
        node.line = first
    return node.line


def trickle_down(node: Any, parent_line: Optional[int] = None) -> None:
    if not is_node(node):
        return

    if node.line is None:
        node.line = parent_line
    for child in node.children:
        trickle_down(child, node.line)


def propagate_lines(tree: Node) -> Node:
    trickle_up(tree)
    trickle_down(tree)
    return tree
