"""Go emitter: renders the syntax tree back into Go source text.

Layout is canonical: tab indentation, one blank line between top-level
declarations, comments and original spacing dropped. Parentheses are
inserted wherever operator precedence demands them, so any tree produced
by a reduction prints as source that parses back to the same structure.
"""

from __future__ import annotations

from .ast import (
    ArrayType,
    AssignStmt,
    BasicLit,
    BinaryExpr,
    BlockStmt,
    BranchStmt,
    CallExpr,
    CaseClause,
    CompositeLit,
    Decl,
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
    ParenExpr,
    RangeStmt,
    ReturnStmt,
    SelectorExpr,
    SliceExpr,
    Spec,
    StarExpr,
    Stmt,
    StructType,
    SwitchStmt,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
)


def to_source(file: File) -> str:
    """Render a `File` back into Go source text."""
    return _Emitter().emit_file(file)


# Prefix operator followed by operand text that would lex as one token
_GLUED: set[str] = {"--", "++", "&&", "&^"}


class _Emitter:
    _INDENT: str = "\t"

    _PREC_LOWEST: int = 0
    _PREC_UNARY: int = 6
    _PREC_PRIMARY: int = 7

    _BIN_PREC: dict[str, int] = {
        "||": 1,
        "&&": 2,
        "==": 3,
        "!=": 3,
        "<": 3,
        "<=": 3,
        ">": 3,
        ">=": 3,
        "+": 4,
        "-": 4,
        "|": 4,
        "^": 4,
        "*": 5,
        "/": 5,
        "%": 5,
        "<<": 5,
        ">>": 5,
        "&": 5,
        "&^": 5,
    }

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._indent_level: int = 0
        # Rendering an if/for/switch header, where T{} needs parentheses
        self._in_header: bool = False

    # ── Public ──────────────────────────────────────────────

    def emit_file(self, file: File) -> str:
        self._lines = []
        self._indent_level = 0
        self._emit_line("package " + file.package.name)
        for decl in file.decls:
            self._lines.append("")
            self._emit_decl(decl)
        return "\n".join(self._lines) + "\n"

    # ── Lines / Blocks ──────────────────────────────────────

    def _emit_line(self, line: str) -> None:
        self._lines.append(self._INDENT * self._indent_level + line)

    def _emit_stmt_block(self, stmts: list[Stmt]) -> None:
        self._indent_level += 1
        for stmt in stmts:
            self._emit_stmt(stmt)
        self._indent_level -= 1

    # ── Decls ───────────────────────────────────────────────

    def _emit_decl(self, decl: Decl) -> None:
        if isinstance(decl, GenDecl):
            self._emit_gen_decl(decl)
            return
        if isinstance(decl, FuncDecl):
            head = "func "
            if decl.recv is not None:
                head += "(" + self._render_field(decl.recv) + ") "
            head += decl.name.name + self._render_signature(decl.typ)
            self._emit_line(head + " {")
            self._emit_stmt_block(decl.body.stmts)
            self._emit_line("}")
            return
        raise TypeError("unhandled decl type")

    def _emit_gen_decl(self, decl: GenDecl) -> None:
        if not decl.grouped and len(decl.specs) == 1:
            self._emit_line(decl.tok + " " + self._render_spec(decl.specs[0]))
            return
        self._emit_line(decl.tok + " (")
        self._indent_level += 1
        for spec in decl.specs:
            self._emit_line(self._render_spec(spec))
        self._indent_level -= 1
        self._emit_line(")")

    def _render_spec(self, spec: Spec) -> str:
        if isinstance(spec, ImportSpec):
            if spec.name is not None:
                return spec.name.name + " " + spec.path.value
            return spec.path.value
        if isinstance(spec, ValueSpec):
            text = ", ".join(n.name for n in spec.names)
            if spec.typ is not None:
                text += " " + self._render_type(spec.typ)
            if len(spec.values) > 0:
                text += " = " + self._render_list(spec.values)
            return text
        if isinstance(spec, TypeSpec):
            return spec.name.name + " " + self._render_type(spec.typ)
        raise TypeError("unhandled spec type")

    # ── Stmts ───────────────────────────────────────────────

    def _emit_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, BlockStmt):
            self._emit_line("{")
            self._emit_stmt_block(stmt.stmts)
            self._emit_line("}")
            return
        if isinstance(stmt, DeclStmt):
            self._emit_gen_decl(stmt.decl)
            return
        if isinstance(stmt, IfStmt):
            self._emit_if_chain(stmt)
            return
        if isinstance(stmt, ForStmt):
            self._emit_line(self._render_for_header(stmt) + " {")
            self._emit_stmt_block(stmt.body.stmts)
            self._emit_line("}")
            return
        if isinstance(stmt, RangeStmt):
            head = "for "
            if stmt.key is not None:
                self._in_header = True
                head += self._render_expr(stmt.key, self._PREC_LOWEST)
                if stmt.value is not None:
                    head += ", " + self._render_expr(stmt.value, self._PREC_LOWEST)
                self._in_header = False
                head += " " + stmt.tok + " "
            head += "range " + self._render_header_expr(stmt.x)
            self._emit_line(head + " {")
            self._emit_stmt_block(stmt.body.stmts)
            self._emit_line("}")
            return
        if isinstance(stmt, SwitchStmt):
            self._emit_switch(stmt)
            return
        self._emit_line(self._render_simple(stmt))

    def _render_simple(self, stmt: Stmt) -> str:
        if isinstance(stmt, ExprStmt):
            return self._render_expr(stmt.x, self._PREC_LOWEST)
        if isinstance(stmt, IncDecStmt):
            return self._render_expr(stmt.x, self._PREC_LOWEST) + stmt.tok
        if isinstance(stmt, AssignStmt):
            return (
                self._render_list(stmt.lhs)
                + " "
                + stmt.tok
                + " "
                + self._render_list(stmt.rhs)
            )
        if isinstance(stmt, GoStmt):
            return "go " + self._render_expr(stmt.call, self._PREC_LOWEST)
        if isinstance(stmt, DeferStmt):
            return "defer " + self._render_expr(stmt.call, self._PREC_LOWEST)
        if isinstance(stmt, ReturnStmt):
            if len(stmt.results) == 0:
                return "return"
            return "return " + self._render_list(stmt.results)
        if isinstance(stmt, BranchStmt):
            return stmt.tok
        raise TypeError("unhandled stmt type")

    def _render_header_stmt(self, stmt: Stmt) -> str:
        self._in_header = True
        text = self._render_simple(stmt)
        self._in_header = False
        return text

    def _render_header_expr(self, expr: Expr) -> str:
        self._in_header = True
        text = self._render_expr(expr, self._PREC_LOWEST)
        self._in_header = False
        return text

    def _render_if_header(self, stmt: IfStmt) -> str:
        head = "if "
        if stmt.init is not None:
            head += self._render_header_stmt(stmt.init) + "; "
        return head + self._render_header_expr(stmt.cond) + " {"

    def _emit_if_chain(self, stmt: IfStmt) -> None:
        self._emit_line(self._render_if_header(stmt))
        self._emit_stmt_block(stmt.body.stmts)
        current = stmt.else_
        while isinstance(current, IfStmt):
            self._emit_line("} else " + self._render_if_header(current))
            self._emit_stmt_block(current.body.stmts)
            current = current.else_
        if isinstance(current, BlockStmt):
            self._emit_line("} else {")
            self._emit_stmt_block(current.stmts)
        self._emit_line("}")

    def _render_for_header(self, stmt: ForStmt) -> str:
        if stmt.init is None and stmt.post is None:
            if stmt.cond is None:
                return "for"
            return "for " + self._render_header_expr(stmt.cond)
        init = ""
        if stmt.init is not None:
            init = self._render_header_stmt(stmt.init)
        cond = ""
        if stmt.cond is not None:
            cond = self._render_header_expr(stmt.cond)
        post = ""
        if stmt.post is not None:
            post = self._render_header_stmt(stmt.post)
        return "for " + init + "; " + cond + "; " + post

    def _emit_switch(self, stmt: SwitchStmt) -> None:
        head = "switch"
        if stmt.init is not None:
            head += " " + self._render_header_stmt(stmt.init) + ";"
        if stmt.tag is not None:
            head += " " + self._render_header_expr(stmt.tag)
        self._emit_line(head + " {")
        for clause in stmt.clauses:
            self._emit_case_clause(clause)
        self._emit_line("}")

    def _emit_case_clause(self, clause: CaseClause) -> None:
        if clause.exprs is None:
            self._emit_line("default:")
        else:
            self._emit_line("case " + self._render_list(clause.exprs) + ":")
        self._emit_stmt_block(clause.body)

    # ── Types ───────────────────────────────────────────────

    def _render_type(self, typ: Expr) -> str:
        return self._render_expr(typ, self._PREC_LOWEST)

    def _render_field(self, field: Field) -> str:
        typ = self._render_type(field.typ)
        if len(field.names) == 0:
            return typ
        return ", ".join(n.name for n in field.names) + " " + typ

    def _render_signature(self, typ: FuncType) -> str:
        text = "(" + ", ".join(self._render_field(f) for f in typ.params) + ")"
        if len(typ.results) == 1 and len(typ.results[0].names) == 0:
            return text + " " + self._render_type(typ.results[0].typ)
        if len(typ.results) > 0:
            text += " (" + ", ".join(self._render_field(f) for f in typ.results) + ")"
        return text

    # ── Exprs ───────────────────────────────────────────────

    def _render_list(self, exprs: list[Expr]) -> str:
        return ", ".join(self._render_expr(e, self._PREC_LOWEST) for e in exprs)

    def _expr_prec(self, expr: Expr) -> int:
        if isinstance(expr, BinaryExpr):
            return self._BIN_PREC[expr.op]
        if isinstance(expr, (UnaryExpr, StarExpr)):
            return self._PREC_UNARY
        return self._PREC_PRIMARY

    def _render_expr(self, expr: Expr, parent_prec: int, side: str = "") -> str:
        prec = self._expr_prec(expr)
        text = self._render_expr_inner(expr)
        if prec < parent_prec or (
            prec == parent_prec and side == "right" and isinstance(expr, BinaryExpr)
        ):
            return "(" + text + ")"
        return text

    def _render_expr_inner(self, expr: Expr) -> str:
        if isinstance(expr, Ident):
            return expr.name
        if isinstance(expr, BasicLit):
            return expr.value
        if isinstance(expr, BinaryExpr):
            prec = self._BIN_PREC[expr.op]
            return (
                self._render_expr(expr.x, prec, "left")
                + " "
                + expr.op
                + " "
                + self._render_expr(expr.y, prec, "right")
            )
        if isinstance(expr, UnaryExpr):
            return self._render_prefix(expr.op, expr.x)
        if isinstance(expr, StarExpr):
            return self._render_prefix("*", expr.x)
        if isinstance(expr, ParenExpr):
            saved = self._in_header
            self._in_header = False
            inner = self._render_expr(expr.x, self._PREC_LOWEST)
            self._in_header = saved
            return "(" + inner + ")"
        if isinstance(expr, SelectorExpr):
            return self._render_expr(expr.x, self._PREC_PRIMARY) + "." + expr.sel.name
        if isinstance(expr, IndexExpr):
            return (
                self._render_expr(expr.x, self._PREC_PRIMARY)
                + "["
                + self._render_expr(expr.index, self._PREC_LOWEST)
                + "]"
            )
        if isinstance(expr, SliceExpr):
            return self._render_slice(expr)
        if isinstance(expr, CallExpr):
            text = self._render_expr(expr.fun, self._PREC_PRIMARY) + "(" + self._render_list(expr.args)
            if expr.ellipsis:
                text += "..."
            return text + ")"
        if isinstance(expr, CompositeLit):
            return self._render_composite(expr)
        if isinstance(expr, KeyValueExpr):
            return (
                self._render_expr(expr.key, self._PREC_LOWEST)
                + ": "
                + self._render_expr(expr.value, self._PREC_LOWEST)
            )
        if isinstance(expr, FuncLit):
            return self._render_func_lit(expr)
        if isinstance(expr, ArrayType):
            length = ""
            if expr.length is not None:
                length = self._render_expr(expr.length, self._PREC_LOWEST)
            return "[" + length + "]" + self._render_type(expr.elt)
        if isinstance(expr, MapType):
            return "map[" + self._render_type(expr.key) + "]" + self._render_type(expr.value)
        if isinstance(expr, Ellipsis):
            return "..." + self._render_type(expr.elt)
        if isinstance(expr, FuncType):
            return "func" + self._render_signature(expr)
        if isinstance(expr, StructType):
            if len(expr.fields) == 0:
                return "struct{}"
            return "struct{ " + "; ".join(self._render_field(f) for f in expr.fields) + " }"
        if isinstance(expr, InterfaceType):
            return "interface{}"
        raise TypeError("unhandled expr type")

    def _render_prefix(self, op: str, operand: Expr) -> str:
        text = self._render_expr(operand, self._PREC_UNARY)
        if (op + text)[:2] in _GLUED:
            text = "(" + text + ")"
        return op + text

    def _render_slice(self, expr: SliceExpr) -> str:
        parts: list[str] = []
        for bound in (expr.low, expr.high, expr.max):
            if bound is None:
                parts.append("")
            else:
                parts.append(self._render_expr(bound, self._PREC_LOWEST))
        if not expr.slice3:
            parts = parts[:2]
        return self._render_expr(expr.x, self._PREC_PRIMARY) + "[" + ":".join(parts) + "]"

    def _render_composite(self, expr: CompositeLit) -> str:
        saved = self._in_header
        self._in_header = False
        typ = ""
        if expr.typ is not None:
            typ = self._render_type(expr.typ)
        text = typ + "{" + self._render_list(expr.elts) + "}"
        self._in_header = saved
        if saved and isinstance(expr.typ, (Ident, SelectorExpr)):
            return "(" + text + ")"
        return text

    def _render_func_lit(self, expr: FuncLit) -> str:
        head = "func" + self._render_signature(expr.typ)
        if len(expr.body.stmts) == 0:
            return head + " {}"
        inner = _Emitter()
        inner._indent_level = self._indent_level
        inner._emit_stmt_block(expr.body.stmts)
        return (
            head
            + " {\n"
            + "\n".join(inner._lines)
            + "\n"
            + self._INDENT * self._indent_level
            + "}"
        )
