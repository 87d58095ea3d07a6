"""Builds the raw tree from replayed Ripper callbacks.

Parser events default to ``[name, *args]`` and scanner events to
``["@kind", token, [line, column]]``. The overrides below keep the side
tables that the rewriter later relies on: string delimiters, comment text,
the ``in``/``=>`` operator stack and sign folding for numeric literals.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .comments import COMMENTABLE_KEYWORDS, CommentCollector
from .errors import InternalError, RubySyntaxError
from .events import Event, resolve
from .tree import RawNode, raw_tag

logger = logging.getLogger(__name__)

NUMERIC_LITERALS = frozenset({"@int", "@float", "@rational", "@imaginary"})
SIGN_TOKENS = frozenset({("@op", "-"), ("@op", "+")})

# Scanner events that do not change which token counts as "previous".
LAYOUT_TOKENS = frozenset({
    "@sp", "@ignored_sp", "@nl", "@ignored_nl", "@words_sep",
    "@comment", "@embdoc_beg", "@embdoc", "@embdoc_end",
})

# After these a keyword is a method name, not the start of a construct.
METHOD_NAME_CONTEXT = frozenset({
    ("@kw", "def"), ("@kw", "alias"), ("@kw", "undef"),
    ("@period", "."), ("@op", "&."), ("@op", "::"),
})

TAB_WIDTH = 8


def _list_starter(tag: str):
    def build(self) -> RawNode:
        return [tag]
    return build


def _commentized(tag: str):
    def build(self, *args: Any) -> RawNode:
        return self.commentize([tag, *args])
    return build


def dedent_string(text: str, width: int) -> str:
    """Strip up to ``width`` columns of leading blanks, as Ripper does."""
    col = 0
    i = 0
    while i < len(text) and col < width:
        ch = text[i]
        if ch == " ":
            col += 1
        elif ch == "\t":
            stop = TAB_WIDTH * (col // TAB_WIDTH + 1)
            if stop > width:
                break
            col = stop
        else:
            break
        i += 1
    return text[i:]


class RawTreeBuilder:
    def __init__(self, filename: str = "(string)", lineno: int = 1):
        self.filename = filename
        self.lineno = lineno
        self.column = 0
        self.comments = CommentCollector()
        self.delimiters: List[str] = []
        self.operators: List[str] = []
        self.in_symbol = False
        self._last_token: Optional[Tuple[str, str]] = None
        self._last_significant: Optional[Tuple[str, str]] = None
        self._signed_literals: Set[int] = set()

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    def replay(self, events: Iterable[Event]) -> RawNode:
        """Feed recorded events through the callbacks and return the program."""
        values: Dict[int, Any] = {}
        result = None
        count = 0

        for event in events:
            self.lineno, self.column = event.line, event.column
            args = [resolve(arg, values) for arg in event.args]
            if event.is_scanner:
                value = self.scan(event.name, *args)
            else:
                value = self.build(event.name, args)
            values[event.ref] = value
            if event.name == "program":
                result = value
            count += 1

        logger.debug("replayed %d events for %s", count, self.filename)
        if result is None:
            raise InternalError("Ripper parse failed.")
        return result

    def scan(self, name: str, token: str) -> Any:
        node = [name, token, [self.lineno, self.column]]
        if name in NUMERIC_LITERALS and self._last_token in SIGN_TOKENS:
            self._signed_literals.add(id(node))

        handler = getattr(self, f"on_{name[1:]}", None)
        value = handler(node) if handler is not None else node

        self._last_token = (name, token)
        if name not in LAYOUT_TOKENS:
            # comments only document the construct that follows them directly
            self.comments.discard()
            self._last_significant = (name, token)
        return value

    def build(self, name: str, args: List[Any]) -> Any:
        handler = getattr(self, f"on_{name}", None)
        if handler is None:
            return [name, *args]
        return handler(*args)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def commentize(self, exp: RawNode) -> RawNode:
        keyword, text = self.comments.close()
        exp.append(keyword[2])
        return ["comment", text, exp]

    def on_comment(self, node: RawNode) -> RawNode:
        self.comments.add(node[1])
        return node

    on_embdoc_beg = on_embdoc = on_embdoc_end = on_comment

    def on_kw(self, node: RawNode) -> RawNode:
        if self.in_symbol or self._last_significant in METHOD_NAME_CONTEXT:
            return node
        keyword = node[1]
        if keyword in COMMENTABLE_KEYWORDS:
            self.comments.open(node)
        elif keyword == "in":
            self.operators.append("in")
        return node

    on_module = _commentized("module")
    on_class = _commentized("class")
    on_sclass = _commentized("sclass")
    on_def = _commentized("def")
    on_defs = _commentized("defs")
    on_BEGIN = _commentized("BEGIN")
    on_END = _commentized("END")

    def on_begin(self, body: Any) -> RawNode:
        # ^(expr) pins in patterns arrive as begin without a keyword
        if raw_tag(body) != "bodystmt":
            return ["begin", body]
        return self.commentize(["begin", body])

    # ------------------------------------------------------------------
    # Delimiters
    # ------------------------------------------------------------------

    def _push_delimiter(self, node: RawNode) -> RawNode:
        self.delimiters.append(node[1])
        return node

    def _push_stripped_delimiter(self, node: RawNode) -> RawNode:
        self.delimiters.append(node[1].strip())
        return node

    def _pop_delimiter(self, node: RawNode) -> RawNode:
        if not self.delimiters:
            raise InternalError(f"unbalanced delimiter {node[1]!r} at line {self.lineno}")
        self.delimiters.pop()
        return node

    on_heredoc_beg = on_regexp_beg = on_tstring_beg = _push_delimiter
    on_qsymbols_beg = on_qwords_beg = on_symbols_beg = on_words_beg = _push_stripped_delimiter
    on_heredoc_end = on_regexp_end = on_tstring_end = on_label_end = _pop_delimiter

    def on_backtick(self, node: RawNode) -> RawNode:
        if self.in_symbol or self._last_significant in METHOD_NAME_CONTEXT:
            return node
        return self._push_delimiter(node)

    def on_symbeg(self, node: RawNode) -> RawNode:
        self.in_symbol = True
        return self._push_delimiter(node)

    def on_symbol(self, *args: Any) -> RawNode:
        self.in_symbol = False
        if self.delimiters:
            self.delimiters.pop()
        return ["symbol", *args]

    def on_dyna_symbol(self, *args: Any) -> RawNode:
        self.in_symbol = False
        return ["dyna_symbol", *args]

    def on_embexpr_beg(self, node: RawNode) -> RawNode:
        self.in_symbol = False
        return node

    def on_tstring_content(self, node: RawNode) -> RawNode:
        node.append(self.delimiters[-1] if self.delimiters else None)
        return node

    def on_heredoc_dedent(self, content: RawNode, width: int) -> RawNode:
        next_dedent = True
        for index, item in enumerate(content):
            if raw_tag(item) != "@tstring_content":
                continue
            text = item[1]
            if next_dedent:
                content[index] = [item[0], dedent_string(text, width), *item[2:]]
            next_dedent = text.endswith("\n")
        return content

    # ------------------------------------------------------------------
    # in / => disambiguation
    # ------------------------------------------------------------------

    def on_op(self, node: RawNode) -> RawNode:
        if node[1] == "=>":
            self.operators.append("=>")
        return node

    def on_in(self, *args: Any) -> RawNode:
        if not self.operators:
            raise InternalError("Expected 'in' or '=>' on the operator stack, found nothing")
        operator = self.operators.pop()
        if operator == "in":
            return ["in", *args]
        if operator == "=>":
            return ["right_assign", *args]
        raise InternalError(f"Expected 'in' or '=>', got {operator!r}")

    def on_binary(self, left: Any, operator: Any, right: Any) -> RawNode:
        if operator == "=>":
            if not self.operators or self.operators[-1] != "=>":
                found = self.operators[-1] if self.operators else "nothing"
                raise InternalError(f"Expected '=>' on the operator stack, found {found!r}")
            self.operators.pop()
        return ["binary", left, operator, right]

    def _pop_operator(self, operator: str) -> None:
        if self.operators and self.operators[-1] == operator:
            self.operators.pop()

    def on_assoc_new(self, key: Any, value: Any) -> RawNode:
        if not self._is_label_key(key):
            self._pop_operator("=>")
        return ["assoc_new", key, value]

    def on_rescue(self, exceptions: Any, variable: Any, *rest: Any) -> RawNode:
        if variable:
            self._pop_operator("=>")
        return ["rescue", exceptions, variable, *rest]

    def on_for(self, *args: Any) -> RawNode:
        self._pop_operator("in")
        return ["for", *args]

    @staticmethod
    def _is_label_key(key: Any) -> bool:
        tag = raw_tag(key)
        if tag == "@label":
            return True
        if tag != "dyna_symbol":
            return False
        # "foo": keys are quoted with a plain string delimiter, :"foo" keys are not
        for part in key[1][1:] if raw_tag(key[1]) else []:
            if raw_tag(part) == "@tstring_content":
                delimiter = part[3] or ""
                return not delimiter.startswith((":", "%s"))
        return True

    # ------------------------------------------------------------------
    # Literals and flat lists
    # ------------------------------------------------------------------

    def on_unary(self, operator: Any, value: Any) -> RawNode:
        if operator in ("-@", "+@") and raw_tag(value) in NUMERIC_LITERALS \
                and id(value) in self._signed_literals:
            sign = operator[0]
            text = value[1]
            if not text.startswith(sign):
                folded = sign + text if sign == "-" else text
                return [value[0], folded, value[2]]
        return ["unary", operator, value]

    def on_void_stmt(self) -> RawNode:
        return ["void_stmt", [self.lineno, self.column]]

    def on_excessed_comma(self, *args: Any) -> RawNode:
        return ["excessed_comma"]

    def _append(self, items: RawNode, item: Any) -> RawNode:
        items.append(item)
        return items

    on_args_new = _list_starter("args")
    on_mlhs_new = _list_starter("mlhs")
    on_mrhs_new = _list_starter("mrhs")
    on_qsymbols_new = _list_starter("qsymbols")
    on_qwords_new = _list_starter("qwords")
    on_regexp_new = _list_starter("regexp")
    on_stmts_new = _list_starter("stmts")
    on_symbols_new = _list_starter("symbols")
    on_word_new = _list_starter("word")
    on_words_new = _list_starter("words")
    on_xstring_new = _list_starter("xstring")

    on_args_add = on_mrhs_add = on_qsymbols_add = on_qwords_add = _append
    on_regexp_add = on_stmts_add = on_string_add = on_symbols_add = _append
    on_word_add = on_words_add = on_xstring_add = _append

    def on_mlhs_add(self, items: RawNode, item: Any) -> RawNode:
        if raw_tag(items) == "mlhs":
            items.append(item)
            return items
        return ["mlhs_add_post", items, item]

    # ------------------------------------------------------------------
    # Errors and diagnostics
    # ------------------------------------------------------------------

    def _syntax_error(self, message: Any) -> RubySyntaxError:
        return RubySyntaxError(str(message), self.lineno, self.filename)

    def on_parse_error(self, message: str) -> RawNode:
        if message.startswith("syntax error,"):
            raise self._syntax_error(message)
        return ["parse_error", message]

    def on_class_name_error(self, message: Any, *args: Any) -> RawNode:
        raise self._syntax_error(message)

    on_alias_error = on_assign_error = on_param_error = on_class_name_error

    def on_compile_error(self, message: str) -> None:
        raise self._syntax_error(message)

    def on_warning(self, message: str) -> None:
        logger.debug("%s:%s: ruby warning: %s", self.filename, self.lineno, message.rstrip())
