"""Child slots and traversal over the syntax tree."""

from __future__ import annotations

import copy
from collections.abc import Iterator
from dataclasses import dataclass

from ..golite.ast import (
    ArrayType,
    AssignStmt,
    BasicLit,
    BinaryExpr,
    BlockStmt,
    BranchStmt,
    CallExpr,
    CaseClause,
    CompositeLit,
    DeclStmt,
    DeferStmt,
    Ellipsis,
    Expr,
    ExprStmt,
    Field,
    File,
    ForStmt,
    FuncDecl,
    FuncLit,
    FuncType,
    GenDecl,
    GoStmt,
    Ident,
    IfStmt,
    ImportSpec,
    IncDecStmt,
    IndexExpr,
    InterfaceType,
    KeyValueExpr,
    MapType,
    Node,
    ParenExpr,
    RangeStmt,
    ReturnStmt,
    SelectorExpr,
    SliceExpr,
    StarExpr,
    StructType,
    SwitchStmt,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
)
from .undo import Undo

# Child-bearing attributes of every node type, in source order
CHILD_FIELDS: dict[type, tuple[str, ...]] = {
    File: ("package", "decls"),
    GenDecl: ("specs",),
    ImportSpec: ("name", "path"),
    ValueSpec: ("names", "typ", "values"),
    TypeSpec: ("name", "typ"),
    FuncDecl: ("recv", "name", "typ", "body"),
    Field: ("names", "typ"),
    BlockStmt: ("stmts",),
    DeclStmt: ("decl",),
    ExprStmt: ("x",),
    IncDecStmt: ("x",),
    AssignStmt: ("lhs", "rhs"),
    GoStmt: ("call",),
    DeferStmt: ("call",),
    ReturnStmt: ("results",),
    BranchStmt: (),
    IfStmt: ("init", "cond", "body", "else_"),
    ForStmt: ("init", "cond", "post", "body"),
    RangeStmt: ("key", "value", "x", "body"),
    SwitchStmt: ("init", "tag", "clauses"),
    CaseClause: ("exprs", "body"),
    Ident: (),
    BasicLit: (),
    CompositeLit: ("typ", "elts"),
    KeyValueExpr: ("key", "value"),
    FuncLit: ("typ", "body"),
    ParenExpr: ("x",),
    SelectorExpr: ("x", "sel"),
    IndexExpr: ("x", "index"),
    SliceExpr: ("x", "low", "high", "max"),
    StarExpr: ("x",),
    UnaryExpr: ("x",),
    BinaryExpr: ("x", "y"),
    CallExpr: ("fun", "args"),
    ArrayType: ("length", "elt"),
    MapType: ("key", "value"),
    Ellipsis: ("elt",),
    FuncType: ("params", "results"),
    StructType: ("fields",),
    InterfaceType: (),
}


@dataclass
class Slot:
    """The place holding one child: owner.attr, or owner.attr[index]."""

    owner: Node
    attr: str
    index: int | None = None

    def set(self, value: Node, undo: Undo) -> None:
        if self.index is None:
            undo.set(self.owner, self.attr, value)
            return
        items = list(getattr(self.owner, self.attr))
        items[self.index] = value
        undo.set(self.owner, self.attr, items)


def child_slots(node: Node) -> list[tuple[Slot, Node]]:
    """Direct children of node with the slots that hold them."""
    result: list[tuple[Slot, Node]] = []
    for attr in CHILD_FIELDS[type(node)]:
        value = getattr(node, attr)
        if isinstance(value, list):
            for i, child in enumerate(value):
                result.append((Slot(node, attr, i), child))
        elif value is not None:
            result.append((Slot(node, attr), value))
    return result


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal of node and everything below it."""
    yield node
    for _, child in child_slots(node):
        yield from walk(child)


def idents(node: Node) -> Iterator[Ident]:
    for n in walk(node):
        if isinstance(n, Ident):
            yield n


def node_kind(node: Node) -> str:
    return type(node).__name__


def copy_expr(expr: Expr) -> Expr:
    """A fresh copy of expr sharing no nodes with the tree."""
    return copy.deepcopy(expr)
