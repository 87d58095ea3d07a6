"""Backslash escape decoding for Ruby literal content.

Which rules apply depends on the literal's opening delimiter; see
``decode_content`` for the decision table.
"""
from __future__ import annotations

import re
from typing import Optional, Union

from .errors import RubySyntaxError

ESCAPE_SEQUENCE = re.compile(r"""
    \\(
        [0-7]{1,3}            |
        x[0-9a-fA-F]{1,2}     |
        u[0-9a-fA-F]{4}       |
        u\{[ \t]*[0-9a-fA-F]{1,6}(?:[ \t]+[0-9a-fA-F]{1,6})*[ \t]*\} |
        M-\\C-.               |
        C-\\M-.               |
        M-\\c.                |
        c\\M-.                |
        C-.                   |
        c.                    |
        M-.                   |
        \n                    |
        .
    )
""", re.VERBOSE)

SINGLE_LETTER_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "e": 0x1B,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "s": 0x20,
    "t": 0x09,
    "v": 0x0B,
}

DELIMITER_PAIRS = {
    "(": "()",
    ")": "()",
    "[": "[]",
    "]": "[]",
    "{": "{}",
    "}": "{}",
    "<": "<>",
    ">": "<>",
}

LINE_CONTINUATION = re.compile(r"\\(\n|.)")

NON_INTERPOLATING_HEREDOC = re.compile(r"<<[-~]?'")
INTERPOLATING_HEREDOC = re.compile(r"<<[-~]?[^']")
INTERPOLATING_STRING = re.compile(r'"|`|:"|%Q.|%.')
NON_INTERPOLATING_STRING = re.compile(r"'|:'|%q.|%s.")
INTERPOLATING_WORD_LIST = re.compile(r"%[WI].")
NON_INTERPOLATING_WORD_LIST = re.compile(r"%[wi].")
REGEXP_LITERAL = re.compile(r"/|%r.")


def _control(byte: int) -> int:
    return 127 if byte == ord("?") else byte & 0b1001_1111

def _meta(byte: int) -> int:
    return byte | 0b1000_0000


def _escape_bytes(bare: str) -> bytes:
    """Bytes for one escape sequence, given the text after the backslash."""
    if bare in SINGLE_LETTER_ESCAPES:
        return bytes([SINGLE_LETTER_ESCAPES[bare]])

    head = bare[0]
    if head in "01234567":
        return bytes([int(bare, 8) & 0xFF])
    if head == "x" and len(bare) > 1:
        return bytes([int(bare[1:], 16)])
    if head == "u" and len(bare) > 1:
        codepoints = bare[1:].strip("{}").split()
        return "".join(chr(int(point, 16)) for point in codepoints).encode("utf-8")

    last = ord(bare[-1]) & 0xFF
    if bare.startswith(("M-\\C-", "C-\\M-", "M-\\c", "c\\M-")):
        return bytes([_meta(_control(last))])
    if bare.startswith(("C-", "c")) and len(bare) > 1:
        return bytes([_control(last)])
    if bare.startswith("M-") and len(bare) > 2:
        return bytes([_meta(last)])

    return bare.encode("utf-8")


def unescape_bytes(string: str) -> bytes:
    """Decode every escape sequence in ``string`` into raw bytes."""
    out = bytearray()
    pos = 0

    for match in ESCAPE_SEQUENCE.finditer(string):
        out += string[pos:match.start()].encode("utf-8")
        out += _escape_bytes(match.group(1))
        pos = match.end()

    out += string[pos:].encode("utf-8")
    return bytes(out)


def unescape(string: str) -> str:
    """Full escape decoding, as for double-quoted strings."""
    return _decode(unescape_bytes(string))


def unescape_char(string: str) -> Union[str, bytes]:
    """Decode a character literal; binary results come back as bytes."""
    raw = unescape_bytes(string)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RubySyntaxError(f"invalid byte sequence in string literal: {raw!r}") from exc


def _simple_pattern(delimiter: str, extra: str = "") -> re.Pattern[str]:
    last = delimiter[-1]
    chars = DELIMITER_PAIRS.get(last, last) + extra
    return re.compile(r"\\([" + re.escape(chars) + r"]|\\)")


def simple_unescape(string: str, delimiter: str) -> str:
    """Unescape only the delimiter characters and backslash."""
    return _simple_pattern(delimiter).sub(lambda m: m.group(1), string)


def simple_unescape_wordlist_word(string: str, delimiter: str) -> str:
    """Like ``simple_unescape`` but also escaped spaces and newlines."""
    return _simple_pattern(delimiter, " \n").sub(lambda m: m.group(1), string)


def unescape_continuations(string: str) -> str:
    """Remove backslash-newline pairs, keeping every other escape as written."""
    return LINE_CONTINUATION.sub(
        lambda m: "" if m.group(1) == "\n" else m.group(0), string)


def unescape_regexp(string: str) -> str:
    # the regexp engine interprets its own escapes
    return string


def is_word_list(delimiter: Optional[str]) -> bool:
    if delimiter is None:
        return False
    return bool(INTERPOLATING_WORD_LIST.fullmatch(delimiter)
                or NON_INTERPOLATING_WORD_LIST.fullmatch(delimiter))


def removes_continuations(delimiter: Optional[str]) -> bool:
    """Whether backslash-newline is a line continuation for this literal."""
    if delimiter is None:
        return False
    if NON_INTERPOLATING_HEREDOC.match(delimiter):
        return False
    return bool(INTERPOLATING_HEREDOC.match(delimiter)
                or INTERPOLATING_STRING.fullmatch(delimiter)
                or REGEXP_LITERAL.fullmatch(delimiter))


def decode_content(string: str, delimiter: Optional[str]) -> str:
    """Decode one chunk of literal content according to its delimiter."""
    if delimiter is None:
        return string
    if NON_INTERPOLATING_HEREDOC.match(delimiter):
        return string
    if (INTERPOLATING_HEREDOC.match(delimiter)
            or INTERPOLATING_STRING.fullmatch(delimiter)
            or INTERPOLATING_WORD_LIST.fullmatch(delimiter)):
        return unescape(string)
    if NON_INTERPOLATING_STRING.fullmatch(delimiter):
        return simple_unescape(string, delimiter)
    if REGEXP_LITERAL.fullmatch(delimiter):
        return unescape_regexp(string)
    if NON_INTERPOLATING_WORD_LIST.fullmatch(delimiter):
        return simple_unescape_wordlist_word(string, delimiter)
    return string
