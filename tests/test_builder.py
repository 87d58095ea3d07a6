from __future__ import annotations

import logging

import pytest

from rubyast.builder import RawTreeBuilder, dedent_string
from rubyast.errors import InternalError, RubySyntaxError
from rubyast.tree import Symbol

from tests.support.harness import event_log, replay


@pytest.fixture
def builder() -> RawTreeBuilder:
    return RawTreeBuilder("sample.rb")


def test_replay_builds_program(builder: RawTreeBuilder) -> None:
    log = event_log(
        '#1 @tstring_beg 1:0("\\"")',
        '#2 @tstring_content 1:1("a\\\\n")',
        '#3 @tstring_end 1:4("\\"")',
        '#4 string_content 1:5()',
        '#5 string_add 1:5(#4,#2)',
        '#6 string_literal 1:5(#5)',
        '#7 stmts_new 1:5()',
        '#8 stmts_add 1:5(#7,#6)',
        '#9 program 1:5(#8)',
    )
    assert replay(log) == [
        "program",
        ["stmts", ["string_literal", ["string_content", ["@tstring_content", "a\\n", [1, 1], '"']]]],
    ]


def test_replay_without_program_fails() -> None:
    with pytest.raises(InternalError) as exc_info:
        replay(event_log('#1 @int 1:0("1")'))
    assert "Ripper parse failed." in str(exc_info.value)


# ----------------------------------------------------------------------
# Delimiters
# ----------------------------------------------------------------------

def test_content_is_tagged_with_open_delimiter(builder: RawTreeBuilder) -> None:
    builder.scan("@tstring_beg", "%q(")
    node = builder.scan("@tstring_content", "x")
    builder.scan("@tstring_end", ")")

    assert node[3] == "%q("
    assert builder.delimiters == []


def test_word_list_delimiters_are_stripped(builder: RawTreeBuilder) -> None:
    builder.scan("@qwords_beg", "%w[ ")
    assert builder.delimiters == ["%w["]


def test_symbol_delimiter_is_popped_by_symbol(builder: RawTreeBuilder) -> None:
    builder.scan("@symbeg", ":")
    assert builder.in_symbol
    name = builder.scan("@ident", "foo")
    assert builder.build("symbol", [name]) == ["symbol", name]
    assert not builder.in_symbol
    assert builder.delimiters == []


def test_backtick_after_def_is_a_method_name(builder: RawTreeBuilder) -> None:
    builder.scan("@kw", "def")
    builder.scan("@sp", " ")
    builder.scan("@backtick", "`")
    assert builder.delimiters == []


def test_unbalanced_end_delimiter(builder: RawTreeBuilder) -> None:
    with pytest.raises(InternalError):
        builder.scan("@tstring_end", '"')


@pytest.mark.parametrize(
    "text, width, expected",
    [
        pytest.param("    foo", 2, "  foo", id="spaces"),
        pytest.param("  foo", 4, "foo", id="short-indent"),
        pytest.param("\tfoo", 8, "foo", id="tab"),
        pytest.param("\tfoo", 4, "\tfoo", id="tab-past-width"),
        pytest.param("  \tfoo", 8, "foo", id="spaces-then-tab"),
    ],
)
def test_dedent_string(text: str, width: int, expected: str) -> None:
    assert dedent_string(text, width) == expected


def test_heredoc_dedent_only_at_line_starts(builder: RawTreeBuilder) -> None:
    content = [
        "string_content",
        ["@tstring_content", "    a\n", [2, 0], "<<~EOS"],
        ["@tstring_content", "    b ", [3, 0], "<<~EOS"],
        ["string_embexpr", ["stmts"]],
        ["@tstring_content", "  c\n", [3, 9], "<<~EOS"],
        ["@tstring_content", "    d\n", [4, 0], "<<~EOS"],
    ]
    result = builder.build("heredoc_dedent", [content, 2])

    assert result is content
    assert [item[1] for item in content if item[0] == "@tstring_content"] == [
        "  a\n", "  b ", "  c\n", "  d\n",
    ]


# ----------------------------------------------------------------------
# Signed literals
# ----------------------------------------------------------------------

def test_minus_folds_into_adjacent_literal(builder: RawTreeBuilder) -> None:
    builder.scan("@op", "-")
    literal = builder.scan("@int", "1")
    assert builder.build("unary", [Symbol("-@"), literal]) == ["@int", "-1", [1, 0]]


def test_plus_is_dropped_from_adjacent_literal(builder: RawTreeBuilder) -> None:
    builder.scan("@op", "+")
    literal = builder.scan("@float", "1.5")
    assert builder.build("unary", [Symbol("+@"), literal]) == ["@float", "1.5", [1, 0]]


def test_spaced_sign_stays_a_call(builder: RawTreeBuilder) -> None:
    builder.scan("@op", "-")
    builder.scan("@sp", " ")
    literal = builder.scan("@int", "1")
    assert builder.build("unary", [Symbol("-@"), literal]) == ["unary", Symbol("-@"), literal]


def test_sign_on_non_literal_stays_a_call(builder: RawTreeBuilder) -> None:
    builder.scan("@op", "-")
    name = builder.scan("@ident", "x")
    assert builder.build("unary", [Symbol("-@"), name])[0] == "unary"


# ----------------------------------------------------------------------
# in / =>
# ----------------------------------------------------------------------

def test_in_keyword_resolves_to_in(builder: RawTreeBuilder) -> None:
    builder.scan("@kw", "in")
    assert builder.build("in", ["pattern", ["stmts"], None]) == ["in", "pattern", ["stmts"], None]
    assert builder.operators == []


def test_rocket_resolves_to_right_assign(builder: RawTreeBuilder) -> None:
    builder.scan("@op", "=>")
    assert builder.build("in", ["pattern", None, None])[0] == "right_assign"


def test_in_without_operator_is_internal_error(builder: RawTreeBuilder) -> None:
    with pytest.raises(InternalError) as exc_info:
        builder.build("in", ["pattern", None, None])
    assert "found nothing" in str(exc_info.value)


def test_binary_rocket_needs_pending_rocket(builder: RawTreeBuilder) -> None:
    builder.scan("@kw", "in")
    with pytest.raises(InternalError):
        builder.build("binary", ["a", Symbol("=>"), "b"])


def test_binary_rocket_pops_operator(builder: RawTreeBuilder) -> None:
    builder.scan("@kw", "in")
    builder.scan("@op", "=>")
    builder.build("binary", ["a", Symbol("=>"), "b"])
    assert builder.operators == ["in"]


def test_hash_rocket_is_popped_by_assoc(builder: RawTreeBuilder) -> None:
    key = builder.scan("@int", "1")
    builder.scan("@op", "=>")
    builder.build("assoc_new", [key, ["@int", "2", [1, 5]]])
    assert builder.operators == []


def test_label_assoc_leaves_operators_alone(builder: RawTreeBuilder) -> None:
    builder.scan("@kw", "in")
    key = builder.scan("@label", "a:")
    builder.build("assoc_new", [key, None])
    assert builder.operators == ["in"]


def test_quoted_label_key_is_a_label(builder: RawTreeBuilder) -> None:
    key = ["dyna_symbol", ["string_content", ["@tstring_content", "a", [1, 1], '"']]]
    symbol_key = ["dyna_symbol", ["string_content", ["@tstring_content", "a", [1, 2], ':"']]]
    assert builder._is_label_key(key)
    assert not builder._is_label_key(symbol_key)


def test_rescue_variable_pops_rocket(builder: RawTreeBuilder) -> None:
    builder.scan("@op", "=>")
    builder.build("rescue", [None, ["var_field", ["@ident", "e", [1, 10]]], ["stmts"], None])
    assert builder.operators == []


def test_for_pops_in(builder: RawTreeBuilder) -> None:
    builder.scan("@kw", "in")
    builder.build("for", ["var", "coll", ["stmts"]])
    assert builder.operators == []


# ----------------------------------------------------------------------
# Comments
# ----------------------------------------------------------------------

def test_comment_attaches_to_def(builder: RawTreeBuilder) -> None:
    builder.scan("@comment", "# one\n")
    builder.scan("@comment", "# two\n")
    builder.lineno = 3
    builder.scan("@kw", "def")
    result = builder.build("def", [["@ident", "foo", [3, 4]], ["params"], ["bodystmt"]])

    assert result[0] == "comment"
    assert result[1] == "# one\n# two\n"
    assert result[2][-1] == [3, 0]
    assert builder.comments.buffer == ""


def test_comment_inside_body_is_dropped(builder: RawTreeBuilder) -> None:
    builder.scan("@kw", "def")
    builder.scan("@comment", "# inside\n")
    result = builder.build("def", [["@ident", "foo", [1, 4]], ["params"], ["bodystmt"]])
    assert result[1] == ""
    assert builder.comments.buffer == ""


def test_comment_before_statement_is_dropped(builder: RawTreeBuilder) -> None:
    builder.scan("@comment", "# about x\n")
    builder.scan("@ident", "x")
    builder.scan("@nl", "\n")
    builder.scan("@comment", "# doc\n")
    builder.scan("@sp", "  ")
    builder.scan("@kw", "class")
    result = builder.build("sclass", [["var_ref", ["@kw", "self", [2, 9]]], ["bodystmt"]])

    assert result[0] == "comment"
    assert result[1] == "# doc\n"


@pytest.mark.parametrize(
    "before",
    [
        pytest.param(("@period", "."), id="after-period"),
        pytest.param(("@op", "&."), id="after-safe-nav"),
        pytest.param(("@kw", "def"), id="after-def"),
        pytest.param(("@symbeg", ":"), id="in-symbol"),
    ],
)
def test_keyword_as_name_does_not_open_comment(builder: RawTreeBuilder, before) -> None:
    builder.scan(*before)
    depth = builder.comments.depth
    builder.scan("@kw", "class")
    assert builder.comments.depth == depth


def test_pin_begin_is_not_commentized(builder: RawTreeBuilder) -> None:
    expr = ["var_ref", ["@ident", "a", [1, 2]]]
    assert builder.build("begin", [expr]) == ["begin", expr]


# ----------------------------------------------------------------------
# Lists and markers
# ----------------------------------------------------------------------

def test_flat_lists(builder: RawTreeBuilder) -> None:
    items = builder.build("args_new", [])
    items = builder.build("args_add", [items, "a"])
    items = builder.build("args_add", [items, "b"])
    assert items == ["args", "a", "b"]


def test_mlhs_add_after_star_is_post(builder: RawTreeBuilder) -> None:
    star = ["mlhs_add_star", ["mlhs"], "rest"]
    assert builder.build("mlhs_add", [star, "c"]) == ["mlhs_add_post", star, "c"]


def test_void_stmt_records_position(builder: RawTreeBuilder) -> None:
    builder.lineno, builder.column = 4, 2
    assert builder.build("void_stmt", []) == ["void_stmt", [4, 2]]


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

def test_syntax_error_raises(builder: RawTreeBuilder) -> None:
    builder.lineno = 7
    with pytest.raises(RubySyntaxError) as exc_info:
        builder.build("parse_error", ["syntax error, unexpected end-of-input"])
    err = exc_info.value
    assert err.lineno == 7
    assert err.filename == "sample.rb"
    assert err.message == "syntax error, unexpected end-of-input"
    assert err.msg == "syntax error, unexpected end-of-input at line 7"


def test_other_parse_errors_pass_through(builder: RawTreeBuilder) -> None:
    assert builder.build("parse_error", ["Invalid next"]) == ["parse_error", "Invalid next"]


@pytest.mark.parametrize(
    "event",
    ["class_name_error", "alias_error", "assign_error", "param_error", "compile_error"],
)
def test_diagnostics_always_raise(builder: RawTreeBuilder, event: str) -> None:
    with pytest.raises(RubySyntaxError) as exc_info:
        builder.build(event, ["Can't change the value of self"])
    assert "Can't change the value of self" in str(exc_info.value)


def test_warnings_are_logged(builder: RawTreeBuilder, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="rubyast.builder"):
        assert builder.build("warning", ["mismatched indentations\n"]) is None
    assert "mismatched indentations" in caplog.text
