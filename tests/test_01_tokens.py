"""Tokenizer tests: token kinds, positions and semicolon insertion."""

import pytest

from goreduce.golite.tokens import (
    TK_CHAR,
    TK_EOF,
    TK_FLOAT,
    TK_IDENT,
    TK_IMAG,
    TK_INT,
    TK_OP,
    TK_STRING,
    TokenizeError,
    tokenize,
)


def _values(source: str) -> list[str]:
    return [t.value for t in tokenize(source) if t.type != TK_EOF]


def test_package_clause_gets_semicolon():
    toks = tokenize("package main\n")
    assert [(t.type, t.value) for t in toks] == [
        ("package", "package"),
        (TK_IDENT, "main"),
        (TK_OP, ";"),
        (TK_EOF, ""),
    ]


def test_semicolon_at_eof_without_newline():
    assert _values("x") == ["x", ";"]


def test_positions_are_one_indexed():
    toks = tokenize("a :=\n  b")
    assert (toks[0].line, toks[0].col) == (1, 1)
    assert (toks[1].line, toks[1].col) == (1, 3)
    assert (toks[2].line, toks[2].col) == (2, 3)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("x++\n", ["x", "++", ";"]),
        ("return\n", ["return", ";"]),
        ("break\n", ["break", ";"]),
        ("f()\n", ["f", "(", ")", ";"]),
        ("a[0]\n", ["a", "[", "0", "]", ";"]),
        ("}\n", ["}", ";"]),
        ('"s"\n', ['"s"', ";"]),
    ],
)
def test_newline_ends_statement(source: str, expected: list[str]):
    assert _values(source) == expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("f(\n", ["f", "("]),
        ("a,\n", ["a", ","]),
        ("a +\n", ["a", "+"]),
        ("{\n", ["{"]),
        ("if\n", ["if"]),
    ],
)
def test_newline_continues_statement(source: str, expected: list[str]):
    assert _values(source) == expected


def test_comments_are_dropped():
    assert _values("a // note\nb /* inline */ c\n") == ["a", ";", "b", "c", ";"]


def test_multiline_block_comment_acts_as_newline():
    assert _values("a /* one\ntwo */ b") == ["a", ";", "b", ";"]


def test_multiline_block_comment_keeps_line_numbers():
    toks = tokenize("/* one\ntwo */ b")
    assert toks[0].value == "b"
    assert toks[0].line == 2


@pytest.mark.parametrize(
    "source,kind",
    [
        ("42", TK_INT),
        ("0x1F", TK_INT),
        ("0b101", TK_INT),
        ("1_000", TK_INT),
        ("1.5", TK_FLOAT),
        (".5", TK_FLOAT),
        ("1e3", TK_FLOAT),
        ("2.5e-3", TK_FLOAT),
        ("2i", TK_IMAG),
        ("'a'", TK_CHAR),
        ("'\\n'", TK_CHAR),
        ('"hi"', TK_STRING),
        ('"a\\"b"', TK_STRING),
        ("`raw`", TK_STRING),
    ],
)
def test_literal_kinds(source: str, kind: str):
    toks = tokenize(source)
    assert toks[0].type == kind
    assert toks[0].value == source


def test_raw_string_spans_lines():
    toks = tokenize("s := `a\nb`\nt")
    assert toks[2].value == "`a\nb`"
    assert toks[3].value == ";"
    assert toks[4].line == 3


@pytest.mark.parametrize("op", ["<<=", ">>=", "&^=", "&^", ":=", "...", "&&", "<-"])
def test_multi_char_operators(op: str):
    assert _values("a " + op + " b") == ["a", op, "b", ";"]


def test_keywords_have_their_own_type():
    toks = tokenize("func range x")
    assert toks[0].type == "func"
    assert toks[1].type == "range"
    assert toks[2].type == TK_IDENT


@pytest.mark.parametrize(
    "source,msg",
    [
        ('"open', "string literal not terminated"),
        ('"a\nb"', "string literal not terminated"),
        ("`open", "raw string literal not terminated"),
        ("''", "empty rune literal"),
        ("/* open", "comment not terminated"),
        ("a @ b", "unexpected character"),
    ],
)
def test_tokenize_errors(source: str, msg: str):
    with pytest.raises(TokenizeError) as info:
        tokenize(source)
    assert msg in info.value.msg


def test_error_location_in_message():
    with pytest.raises(TokenizeError) as info:
        tokenize('x := 1\ny := "oops')
    assert info.value.line == 2
    assert info.value.col == 6
    assert str(info.value).endswith("at line 2 col 6")
