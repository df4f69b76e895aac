"""Printer tests: canonical layout and precedence-driven parentheses."""

from pathlib import Path

import pytest

from casefiles import detab, discover
from goreduce.golite import emit, parse
from goreduce.golite.ast import (
    BasicLit,
    BinaryExpr,
    BlockStmt,
    CallExpr,
    CompositeLit,
    ExprStmt,
    File,
    FuncDecl,
    FuncType,
    Ident,
    IfStmt,
    Pos,
    SelectorExpr,
    SliceExpr,
    StarExpr,
    UnaryExpr,
    to_dict,
)

EMIT_DIR = Path(__file__).parent / "03_emit"

P = Pos(1, 1)


def pytest_generate_tests(metafunc):
    if "emit_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover(EMIT_DIR)
        ]
        metafunc.parametrize("emit_input,emit_expected", params)


def test_emit(emit_input: str, emit_expected: str):
    assert detab(emit(parse(emit_input))).strip() == emit_expected


def _id(name: str) -> Ident:
    return Ident(P, name)


def _file_with(stmt) -> File:
    body = BlockStmt(P, [stmt])
    fn = FuncDecl(P, None, _id("main"), FuncType(P, [], []), body)
    return File(P, _id("main"), [fn])


def _render_stmt(stmt) -> str:
    lines = emit(_file_with(stmt)).split("\n")
    # package main, blank, func main() {, <stmt...>, }
    return "\n".join(line[1:] for line in lines[3:-2])


def _render(expr) -> str:
    return _render_stmt(ExprStmt(P, expr))


def test_output_ends_with_newline():
    assert emit(parse("package main")) == "package main\n"


def test_parenthesizes_lower_precedence_operand():
    expr = BinaryExpr(P, "*", BinaryExpr(P, "+", _id("a"), _id("b")), _id("c"))
    assert _render(expr) == "(a + b) * c"


def test_parenthesizes_right_operand_of_same_precedence():
    expr = BinaryExpr(P, "-", _id("a"), BinaryExpr(P, "-", _id("b"), _id("c")))
    assert _render(expr) == "a - (b - c)"


def test_left_operand_of_same_precedence_is_bare():
    expr = BinaryExpr(P, "-", BinaryExpr(P, "-", _id("a"), _id("b")), _id("c"))
    assert _render(expr) == "a - b - c"


def test_unary_over_binary():
    expr = UnaryExpr(P, "-", BinaryExpr(P, "+", _id("a"), _id("b")))
    assert _render(expr) == "-(a + b)"


def test_glued_prefix_operators_are_separated():
    assert _render(UnaryExpr(P, "-", UnaryExpr(P, "-", _id("x")))) == "-(-x)"
    assert _render(UnaryExpr(P, "&", UnaryExpr(P, "^", _id("x")))) == "&(^x)"
    assert _render(UnaryExpr(P, "!", UnaryExpr(P, "!", _id("x")))) == "!!x"


def test_star_under_selector():
    expr = SelectorExpr(P, StarExpr(P, _id("p")), _id("f"))
    assert _render(expr) == "(*p).f"


def test_binary_as_call_target():
    expr = CallExpr(P, BinaryExpr(P, "+", _id("f"), _id("g")), [], False)
    assert _render(expr) == "(f + g)()"


def test_variadic_call():
    expr = CallExpr(P, _id("f"), [_id("xs")], True)
    assert _render(expr) == "f(xs...)"


def test_slice_bounds():
    lo = BasicLit(P, "INT", "1")
    hi = BasicLit(P, "INT", "2")
    mx = BasicLit(P, "INT", "3")
    assert _render(SliceExpr(P, _id("s"), lo, hi, mx, True)) == "s[1:2:3]"
    assert _render(SliceExpr(P, _id("s"), lo, hi, None, False)) == "s[1:2]"
    assert _render(SliceExpr(P, _id("s"), None, hi, None, False)) == "s[:2]"
    assert _render(SliceExpr(P, _id("s"), lo, None, None, False)) == "s[1:]"


def test_composite_in_if_header_is_parenthesized():
    cond = BinaryExpr(P, "==", _id("x"), CompositeLit(P, _id("T"), []))
    stmt = IfStmt(P, None, cond, BlockStmt(P, []), None)
    assert _render_stmt(stmt) == "if x == (T{}) {\n}"


def test_composite_outside_header_is_bare():
    assert _render(CallExpr(P, _id("f"), [CompositeLit(P, _id("T"), [])], False)) == "f(T{})"


def test_empty_else_block_printed():
    stmt = IfStmt(P, None, _id("ok"), BlockStmt(P, []), BlockStmt(P, []))
    assert _render_stmt(stmt) == "if ok {\n} else {\n}"


def test_reduced_tree_round_trips():
    # A tree with no ParenExpr nodes still prints as equivalent source
    expr = BinaryExpr(
        P,
        "*",
        BinaryExpr(P, "+", _id("a"), _id("b")),
        UnaryExpr(P, "-", BinaryExpr(P, "-", _id("c"), _id("d"))),
    )
    file = _file_with(ExprStmt(P, CallExpr(P, _id("f"), [expr], False)))
    again = parse(emit(file))
    call = again.decls[0].body.stmts[0].x
    reparsed = call.args[0]
    assert isinstance(reparsed, BinaryExpr) and reparsed.op == "*"
    # Parentheses come back as ParenExpr nodes around the same operands
    assert to_dict(reparsed.x)["x"] == to_dict(expr.x)
    assert to_dict(reparsed.y)["x"]["x"] == to_dict(expr.y.x)
