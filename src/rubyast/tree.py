"""AST node classes and the helpers shared by every rewriting stage.

``Node`` mirrors the s-expression nodes of the whitequark parser gem: a tag,
ordered children and a mutable line number that the line pass fills in.
Raw trees coming out of the preprocessor are plain lists; the ``raw_*``
helpers below are the only code that knows their layout.
"""
from __future__ import annotations
from typing import Any, Iterable, Iterator, List, Optional, Set, TypeGuard
from typing_extensions import TypeAlias


class Symbol(str):
    """A Ruby symbol. Subclasses str so symbols compare and hash like their names."""
    __slots__ = ()

    def __repr__(self) -> str:
        return f':{str(self)}'


class Node:
    """Canonical AST node."""
    __slots__ = ('tag', 'children', 'line', 'comments')

    def __init__(self, tag: str, children: Optional[List[Any]] = None,
                 line: Optional[int] = None, comments: Optional[str] = None):
        self.tag = tag
        self.children = children if children is not None else []
        self.line = line
        self.comments = comments

    def __repr__(self) -> str:
        parts = [f':{self.tag}'] + [_repr_child(ch) for ch in self.children]
        return f's({", ".join(parts)})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return False
        return self.tag == other.tag and self.children == other.children

    def __hash__(self) -> int:
        return hash((self.tag, tuple(self.children)))

    def pretty(self, indent: str = '  ') -> str:
        """Return an indented, one-node-per-line rendering of the tree."""
        def _pretty(node: Any, level: int = 0) -> str:
            if not isinstance(node, Node):
                return f'{indent * level}{_repr_child(node)}\n'
            head = f'{indent * level}:{node.tag}'
            if node.line is not None:
                head += f'  @{node.line}'
            lines = [head + '\n']
            for child in node.children:
                lines.append(_pretty(child, level + 1))
            return ''.join(lines)
        return _pretty(self)


def _repr_child(child: Any) -> str:
    if child is None:
        return 'nil'
    if child is True:
        return 'true'
    if child is False:
        return 'false'
    if isinstance(child, (Node, Symbol)):
        return repr(child)
    if isinstance(child, str):
        escaped = child.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')
        return f'"{escaped}"'
    return repr(child)


RawNode: TypeAlias = List[Any]


def s(tag: str, *children: Any, line: Optional[int] = None) -> Node:
    """Build a node the way the reference tools spell it: ``s(:send, nil, :foo)``."""
    return Node(tag, list(children), line)


def is_node(value: Any) -> TypeGuard[Node]:
    return isinstance(value, Node)

def walk(node: Any, skip: Iterable[str] = ()) -> Iterator[Node]:
    """Yield ``node`` and every descendant node, not entering tags in ``skip``."""
    lookup: Set[str] = set(skip)
    stack = [node]

    while stack:
        current = stack.pop()
        if not is_node(current):
            continue
        yield current
        if current is not node and current.tag in lookup:
            continue
        stack.extend(reversed(current.children))


def is_raw(value: Any) -> TypeGuard[RawNode]:
    """A raw node is a list whose head is its tag string."""
    return isinstance(value, list) and bool(value) and isinstance(value[0], str) \
        and not isinstance(value[0], Symbol)

def raw_tag(value: Any) -> Optional[str]:
    return value[0] if is_raw(value) else None

def raw_line(value: Any) -> Optional[int]:
    """Line of a scanner leaf ``["@ident", "foo", [line, column]]``."""
    if is_raw(value) and len(value) > 2 and isinstance(value[2], list) and value[2]:
        return value[2][0]
    return None
