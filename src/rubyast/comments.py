from __future__ import annotations

from typing import Any, List, Tuple

from .errors import InternalError

COMMENTABLE_KEYWORDS = frozenset({"class", "def", "module", "BEGIN", "begin", "END"})


class CommentCollector:
    """Buffers comment text until the construct it documents is built.

    Opening keywords stash the current buffer on a stack; the matching
    construct takes it back with ``close``. Anything left in the buffer when
    a construct closes belonged to its body and is discarded.
    """

    def __init__(self) -> None:
        self.buffer = ""
        self._stack: List[Tuple[Any, str]] = []

    def add(self, text: str) -> None:
        self.buffer += text

    def discard(self) -> None:
        self.buffer = ""

    def open(self, keyword: Any) -> None:
        self._stack.append((keyword, self.buffer))
        self.buffer = ""

    def close(self) -> Tuple[Any, str]:
        if not self._stack:
            raise InternalError("comment stack is empty")
        keyword, text = self._stack.pop()
        self.buffer = ""
        return keyword, text

    @property
    def depth(self) -> int:
        return len(self._stack)
