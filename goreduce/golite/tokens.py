"""Go tokenizer: lexes source into a flat token list.

Implements Go's automatic semicolon insertion: a newline (or the end of the
input) after a token that can end a statement produces a ";" token.
"""

from __future__ import annotations


# Token type constants
TK_INT = "INT"
TK_FLOAT = "FLOAT"
TK_IMAG = "IMAG"
TK_CHAR = "CHAR"
TK_STRING = "STRING"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

LITERAL_TYPES: set[str] = {TK_INT, TK_FLOAT, TK_IMAG, TK_CHAR, TK_STRING}

KEYWORDS: set[str] = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    "<<=",
    ">>=",
    "&^=",
    "...",
    "&&",
    "||",
    "<-",
    "++",
    "--",
    "==",
    "!=",
    "<=",
    ">=",
    ":=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<",
    ">>",
    "&^",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "~",
    "!",
    "<",
    ">",
    "=",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    ",",
    ";",
    ".",
    ":",
}

# Tokens after which a newline ends the statement
_SEMI_KEYWORDS: set[str] = {"break", "continue", "fallthrough", "return"}
_SEMI_OPS: set[str] = {"++", "--", ")", "]", "}"}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_hex(c: str) -> bool:
    return (c >= "0" and c <= "9") or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def _ends_statement(tok: Token) -> bool:
    if tok.type == TK_IDENT or tok.type in LITERAL_TYPES:
        return True
    if tok.type in _SEMI_KEYWORDS:
        return True
    return tok.type == TK_OP and tok.value in _SEMI_OPS


def _scan_number(src: str, pos: int) -> tuple[str, int]:
    """Scan a numeric literal starting at pos. Returns (token_type, end)."""
    length = len(src)
    start = pos
    is_float = False
    if (
        src[pos] == "0"
        and pos + 1 < length
        and src[pos + 1] in "xXbBoO"
    ):
        pos += 2
        while pos < length and (_is_hex(src[pos]) or src[pos] == "_"):
            pos += 1
    else:
        while pos < length and (_is_digit(src[pos]) or src[pos] == "_"):
            pos += 1
        if pos < length and src[pos] == ".":
            is_float = True
            pos += 1
            while pos < length and (_is_digit(src[pos]) or src[pos] == "_"):
                pos += 1
        if pos < length and (src[pos] == "e" or src[pos] == "E"):
            is_float = True
            pos += 1
            if pos < length and (src[pos] == "+" or src[pos] == "-"):
                pos += 1
            while pos < length and _is_digit(src[pos]):
                pos += 1
    if pos < length and src[pos] == "i":
        return TK_IMAG, pos + 1
    if pos == start:
        return TK_INT, pos
    if is_float:
        return TK_FLOAT, pos
    return TK_INT, pos


def tokenize(source: str) -> list[Token]:
    """Tokenize Go source into a flat list ending with TK_EOF."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    col = 1
    length = len(source)

    def newline(at_line: int, at_col: int) -> None:
        if tokens and _ends_statement(tokens[-1]):
            tokens.append(Token(TK_OP, ";", at_line, at_col))

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            newline(line, col)
            pos += 1
            line += 1
            col = 1
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            col += 1
            continue

        # Line comment
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        # Block comment: acts as a newline if it spans lines
        if c == "/" and pos + 1 < length and source[pos + 1] == "*":
            end = source.find("*/", pos + 2)
            if end < 0:
                raise TokenizeError("comment not terminated", line, col)
            text = source[pos : end + 2]
            if "\n" in text:
                newline(line, col)
                line += text.count("\n")
                col = len(text) - text.rfind("\n")
            else:
                col += len(text)
            pos = end + 2
            continue

        start_pos = pos
        start_line = line
        start_col = col

        # Number (including .5 style floats)
        if _is_digit(c) or (
            c == "." and pos + 1 < length and _is_digit(source[pos + 1])
        ):
            type_, pos = _scan_number(source, pos)
            raw = source[start_pos:pos]
            col += pos - start_pos
            tokens.append(Token(type_, raw, start_line, start_col))
            continue

        # Interpreted string literal
        if c == '"':
            pos += 1
            while pos < length and source[pos] != '"':
                if source[pos] == "\n":
                    raise TokenizeError(
                        "string literal not terminated", start_line, start_col
                    )
                if source[pos] == "\\":
                    pos += 1
                pos += 1
            if pos >= length:
                raise TokenizeError(
                    "string literal not terminated", start_line, start_col
                )
            pos += 1
            col += pos - start_pos
            tokens.append(Token(TK_STRING, source[start_pos:pos], start_line, start_col))
            continue

        # Raw string literal, may span lines
        if c == "`":
            end = source.find("`", pos + 1)
            if end < 0:
                raise TokenizeError(
                    "raw string literal not terminated", start_line, start_col
                )
            raw = source[pos : end + 1]
            pos = end + 1
            if "\n" in raw:
                line += raw.count("\n")
                col = len(raw) - raw.rfind("\n")
            else:
                col += len(raw)
            tokens.append(Token(TK_STRING, raw, start_line, start_col))
            continue

        # Rune literal
        if c == "'":
            pos += 1
            while pos < length and source[pos] != "'":
                if source[pos] == "\n":
                    raise TokenizeError(
                        "rune literal not terminated", start_line, start_col
                    )
                if source[pos] == "\\":
                    pos += 1
                pos += 1
            if pos >= length:
                raise TokenizeError("rune literal not terminated", start_line, start_col)
            if pos == start_pos + 1:
                raise TokenizeError("empty rune literal", start_line, start_col)
            pos += 1
            col += pos - start_pos
            tokens.append(Token(TK_CHAR, source[start_pos:pos], start_line, start_col))
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
                col += 1
            word = source[start_pos:pos]
            if word in KEYWORDS:
                tokens.append(Token(word, word, start_line, start_col))
            else:
                tokens.append(Token(TK_IDENT, word, start_line, start_col))
            continue

        # Multi-character operators
        matched = False
        for op in MULTI_OPS:
            op_len = len(op)
            if pos + op_len <= length and source[pos : pos + op_len] == op:
                tokens.append(Token(TK_OP, op, start_line, start_col))
                pos += op_len
                col += op_len
                matched = True
                break
        if matched:
            continue

        # Single-character operators
        if c in SINGLE_OPS:
            tokens.append(Token(TK_OP, c, start_line, start_col))
            pos += 1
            col += 1
            continue

        raise TokenizeError("unexpected character: " + repr(c), line, col)

    newline(line, col)
    tokens.append(Token(TK_EOF, "", line, col))
    return tokens
