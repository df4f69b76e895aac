"""Go subset AST: parse-time node definitions.

Nodes compare by identity (``eq=False``) so they can key the symbol index.
Type expressions are ordinary expressions, as in Go's own syntax tree.
"""

from __future__ import annotations

from dataclasses import dataclass, fields


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int

    def __str__(self) -> str:
        return str(self.line) + ":" + str(self.col)


@dataclass(eq=False)
class Node:
    """Base for every syntax tree node."""

    pos: Pos


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(eq=False)
class Expr(Node):
    """Base for all expressions, type expressions included."""


@dataclass(eq=False)
class Ident(Expr):
    """Identifier occurrence. The blank identifier is spelled "_"."""

    name: str


@dataclass(eq=False)
class BasicLit(Expr):
    """Literal with its raw source text. kind: INT, FLOAT, IMAG, CHAR, STRING."""

    kind: str
    value: str


@dataclass(eq=False)
class CompositeLit(Expr):
    """T{elts}. typ is None for elided element types."""

    typ: Expr | None
    elts: list[Expr]


@dataclass(eq=False)
class KeyValueExpr(Expr):
    """key: value inside a composite literal."""

    key: Expr
    value: Expr


@dataclass(eq=False)
class FuncLit(Expr):
    """func(params) results { body }."""

    typ: FuncType
    body: BlockStmt


@dataclass(eq=False)
class ParenExpr(Expr):
    """(x)."""

    x: Expr


@dataclass(eq=False)
class SelectorExpr(Expr):
    """x.sel."""

    x: Expr
    sel: Ident


@dataclass(eq=False)
class IndexExpr(Expr):
    """x[index]."""

    x: Expr
    index: Expr


@dataclass(eq=False)
class SliceExpr(Expr):
    """x[low:high] or x[low:high:max]."""

    x: Expr
    low: Expr | None
    high: Expr | None
    max: Expr | None
    slice3: bool


@dataclass(eq=False)
class StarExpr(Expr):
    """*x, a dereference or a pointer type."""

    x: Expr


@dataclass(eq=False)
class UnaryExpr(Expr):
    """op x for -, +, !, ^, &."""

    op: str
    x: Expr


@dataclass(eq=False)
class BinaryExpr(Expr):
    """x op y."""

    op: str
    x: Expr
    y: Expr


@dataclass(eq=False)
class CallExpr(Expr):
    """fun(args) or fun(args...)."""

    fun: Expr
    args: list[Expr]
    ellipsis: bool


# ── Types ────────────────────────────────────────────────


@dataclass(eq=False)
class ArrayType(Expr):
    """[len]elt, or []elt when length is None."""

    length: Expr | None
    elt: Expr


@dataclass(eq=False)
class MapType(Expr):
    """map[key]value."""

    key: Expr
    value: Expr


@dataclass(eq=False)
class Ellipsis(Expr):
    """...elt in a variadic parameter."""

    elt: Expr


@dataclass(eq=False)
class Field(Node):
    """Parameter, result or struct field group: names typ."""

    names: list[Ident]
    typ: Expr


@dataclass(eq=False)
class FuncType(Expr):
    """func(params) results."""

    params: list[Field]
    results: list[Field]


@dataclass(eq=False)
class StructType(Expr):
    """struct{ fields }."""

    fields: list[Field]


@dataclass(eq=False)
class InterfaceType(Expr):
    """interface{}: only the empty interface is supported."""


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(eq=False)
class Stmt(Node):
    """Base for all statements."""


@dataclass(eq=False)
class BlockStmt(Stmt):
    """{ stmts }."""

    stmts: list[Stmt]


@dataclass(eq=False)
class DeclStmt(Stmt):
    """const, var or type declaration inside a function."""

    decl: GenDecl


@dataclass(eq=False)
class ExprStmt(Stmt):
    """Bare expression as statement."""

    x: Expr


@dataclass(eq=False)
class IncDecStmt(Stmt):
    """x++ or x--."""

    x: Expr
    tok: str


@dataclass(eq=False)
class AssignStmt(Stmt):
    """lhs tok rhs. tok ":=" marks a definition."""

    lhs: list[Expr]
    tok: str
    rhs: list[Expr]

    @property
    def is_define(self) -> bool:
        return self.tok == ":="


@dataclass(eq=False)
class GoStmt(Stmt):
    """go call."""

    call: CallExpr


@dataclass(eq=False)
class DeferStmt(Stmt):
    """defer call."""

    call: CallExpr


@dataclass(eq=False)
class ReturnStmt(Stmt):
    """return results."""

    results: list[Expr]


@dataclass(eq=False)
class BranchStmt(Stmt):
    """break or continue."""

    tok: str


@dataclass(eq=False)
class IfStmt(Stmt):
    """if init; cond { body } else else_. else_ is a BlockStmt or IfStmt."""

    init: Stmt | None
    cond: Expr
    body: BlockStmt
    else_: Stmt | None


@dataclass(eq=False)
class ForStmt(Stmt):
    """for init; cond; post { body }."""

    init: Stmt | None
    cond: Expr | None
    post: Stmt | None
    body: BlockStmt


@dataclass(eq=False)
class RangeStmt(Stmt):
    """for key, value tok range x { body }. tok is "" when there is no key."""

    key: Expr | None
    value: Expr | None
    tok: str
    x: Expr
    body: BlockStmt


@dataclass(eq=False)
class CaseClause(Node):
    """case exprs: body, or default: body when exprs is None."""

    exprs: list[Expr] | None
    body: list[Stmt]


@dataclass(eq=False)
class SwitchStmt(Stmt):
    """switch init; tag { clauses }."""

    init: Stmt | None
    tag: Expr | None
    clauses: list[CaseClause]


# ============================================================
# DECLARATIONS
# ============================================================


@dataclass(eq=False)
class Spec(Node):
    """Base for the specs of a GenDecl."""


@dataclass(eq=False)
class ImportSpec(Spec):
    """name "path". name is None for an unnamed import."""

    name: Ident | None
    path: BasicLit


@dataclass(eq=False)
class ValueSpec(Spec):
    """names typ = values, for const and var."""

    names: list[Ident]
    typ: Expr | None
    values: list[Expr]


@dataclass(eq=False)
class TypeSpec(Spec):
    """name typ."""

    name: Ident
    typ: Expr


@dataclass(eq=False)
class Decl(Node):
    """Base for top-level declarations."""


@dataclass(eq=False)
class GenDecl(Decl):
    """import, const, var or type, with or without parentheses."""

    tok: str
    specs: list[Spec]
    grouped: bool


@dataclass(eq=False)
class FuncDecl(Decl):
    """func (recv) name(params) results { body }."""

    recv: Field | None
    name: Ident
    typ: FuncType
    body: BlockStmt


@dataclass(eq=False)
class File(Node):
    """A whole source file."""

    package: Ident
    decls: list[Decl]


# ============================================================
# STRUCTURAL DUMP
# ============================================================


def to_dict(obj: object) -> object:
    """Dump a node (or list of nodes) into plain data, positions excluded."""
    if isinstance(obj, list):
        return [to_dict(x) for x in obj]
    if isinstance(obj, Node):
        d: dict[str, object] = {"_type": type(obj).__name__}
        for f in fields(obj):
            if f.name == "pos":
                continue
            d[f.name] = to_dict(getattr(obj, f.name))
        return d
    return obj
