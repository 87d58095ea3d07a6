from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pytest

from rubyast.errors import RubySyntaxError
from rubyast.unescape import (
    decode_content,
    is_word_list,
    removes_continuations,
    simple_unescape,
    simple_unescape_wordlist_word,
    unescape,
    unescape_char,
    unescape_continuations,
)


@dataclass(frozen=True)
class Case:
    name: str
    source: str
    expected: str
    delimiter: Optional[str] = None


UNESCAPE_CASES = [
    Case("hex", "\\x41", "A"),
    Case("octal", "\\101", "A"),
    Case("octal-nul", "a\\0b", "a\x00b"),
    Case("unicode", "\\u0041", "A"),
    Case("unicode-braces", "\\u{1F600}", "\U0001F600"),
    Case("unicode-braces-short", "\\u{41}", "A"),
    Case("unicode-codepoint-list", "\\u{41 42\t43}", "ABC"),
    Case("newline", "a\\nb", "a\nb"),
    Case("space-escape", "\\s", " "),
    Case("escape-char", "\\e", "\x1b"),
    Case("control", "\\C-a", "\x01"),
    Case("control-short", "\\ca", "\x01"),
    Case("control-del", "\\c?", "\x7f"),
    Case("unknown-letter", "\\q", "q"),
    Case("backslash", "\\\\", "\\"),
    Case("bare-x", "\\xg", "xg"),
    Case("plain-utf8", "héllo", "héllo"),
]


@pytest.mark.parametrize("case", UNESCAPE_CASES, ids=lambda case: case.name)
def test_unescape(case: Case) -> None:
    assert unescape(case.source) == case.expected


def test_unescape_rejects_invalid_utf8() -> None:
    with pytest.raises(RubySyntaxError) as exc_info:
        unescape("\\M-a")
    assert "invalid byte sequence" in str(exc_info.value)


def test_unescape_char_falls_back_to_bytes() -> None:
    assert unescape_char("\\M-a") == b"\xe1"
    assert unescape_char("a") == "a"
    assert unescape_char("\\n") == "\n"


SIMPLE_CASES = [
    Case("single-quote", "it\\'s \\\\ \\n", "it's \\ \\n", "'"),
    Case("percent-q-parens", "a\\(b\\)", "a(b)", "%q("),
    Case("percent-q-bang", "a\\!b", "a!b", "%q!"),
    Case("keeps-other-escapes", "\\t", "\\t", "'"),
]


@pytest.mark.parametrize("case", SIMPLE_CASES, ids=lambda case: case.name)
def test_simple_unescape(case: Case) -> None:
    assert simple_unescape(case.source, case.delimiter) == case.expected


def test_wordlist_unescape_keeps_words_together() -> None:
    assert simple_unescape_wordlist_word("a\\ b", "%w[") == "a b"
    assert simple_unescape_wordlist_word("a\\\nb", "%w[") == "a\nb"
    assert simple_unescape_wordlist_word("a\\]", "%w[") == "a]"


def test_continuations_are_removed() -> None:
    assert unescape_continuations("foo\\\nbar\\n") == "foobar\\n"


DECODE_CASES = [
    Case("raw-heredoc", "a\\nb", "a\\nb", "<<'EOS'"),
    Case("squiggly-raw-heredoc", "a\\nb", "a\\nb", "<<~'EOS'"),
    Case("heredoc", "a\\tb", "a\tb", "<<~EOS"),
    Case("double-quote", "\\t", "\t", '"'),
    Case("percent-upper-q", "\\t", "\t", "%Q("),
    Case("percent-bare", "\\t", "\t", "%("),
    Case("backtick", "\\t", "\t", "`"),
    Case("single-quote", "\\t", "\\t", "'"),
    Case("percent-s", "\\)", ")", "%s("),
    Case("regexp", "\\d+\\\\", "\\d+\\\\", "/"),
    Case("regexp-percent", "\\d", "\\d", "%r{"),
    Case("word-list", "a\\ b", "a b", "%w["),
    Case("interpolating-word-list", "\\t", "\t", "%W["),
    Case("unknown", "\\t", "\\t", None),
]


@pytest.mark.parametrize("case", DECODE_CASES, ids=lambda case: case.name)
def test_decode_content(case: Case) -> None:
    assert decode_content(case.source, case.delimiter) == case.expected


@pytest.mark.parametrize(
    "delimiter, expected",
    [
        pytest.param("%w[", True, id="w"),
        pytest.param("%I(", True, id="I"),
        pytest.param('"', False, id="double-quote"),
        pytest.param(None, False, id="none"),
    ],
)
def test_is_word_list(delimiter: Optional[str], expected: bool) -> None:
    assert is_word_list(delimiter) is expected


@pytest.mark.parametrize(
    "delimiter, expected",
    [
        pytest.param('"', True, id="double-quote"),
        pytest.param("<<-EOS", True, id="heredoc"),
        pytest.param("<<-'EOS'", False, id="raw-heredoc"),
        pytest.param("'", False, id="single-quote"),
        pytest.param("/", True, id="regexp"),
        pytest.param("%w[", False, id="word-list"),
    ],
)
def test_removes_continuations(delimiter: str, expected: bool) -> None:
    assert removes_continuations(delimiter) is expected
