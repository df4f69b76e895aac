"""Go subset parser: recursive descent, one method per grammar production."""

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
    Pos,
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
from .tokens import (
    LITERAL_TYPES,
    TK_EOF,
    TK_IDENT,
    TK_OP,
    TK_STRING,
    Token,
)


ASSIGN_OPS: set[str] = {
    "=",
    ":=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<=",
    ">>=",
    "&^=",
}

BINARY_PREC: dict[str, int] = {
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

UNARY_OPS: set[str] = {"-", "+", "!", "^", "&"}

# Keywords that name constructs outside the supported subset
UNSUPPORTED: set[str] = {"chan", "goto", "fallthrough", "select"}


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


def _is_type_name(x: Expr) -> bool:
    if isinstance(x, Ident):
        return True
    return isinstance(x, SelectorExpr) and isinstance(x.x, Ident)


def _is_literal_type(x: Expr) -> bool:
    if _is_type_name(x):
        return True
    return isinstance(x, (ArrayType, MapType, StructType))


class Parser:
    """Recursive descent parser for the Go subset."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0
        # < 0 inside control clause headers, where T{ is not a composite literal
        self.expr_lev: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.value == value and tok.type != TK_STRING

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def at_ident(self) -> bool:
        return self.current().type == TK_IDENT

    def expect(self, value: str) -> Token:
        tok = self.current()
        if tok.value != value or tok.type == TK_STRING:
            raise self.error("expected '" + value + "', got " + self._describe(tok))
        return self.advance()

    def expect_ident(self) -> Ident:
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, got " + self._describe(tok))
        self.advance()
        return Ident(self._tok_pos(tok), tok.value)

    def expect_semi(self) -> None:
        """Statement and spec terminator; optional before a closing ) or }."""
        if self.at(")") or self.at("}"):
            return
        if self.at_type(TK_EOF):
            return
        self.expect(";")

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def _describe(self, tok: Token) -> str:
        if tok.type == TK_EOF:
            return "end of file"
        if tok.type == TK_OP and tok.value == ";":
            return "newline"
        return "'" + tok.value + "'"

    def _pos(self) -> Pos:
        tok = self.current()
        return Pos(tok.line, tok.col)

    def _tok_pos(self, tok: Token) -> Pos:
        return Pos(tok.line, tok.col)

    # ── Top Level ────────────────────────────────────────────

    def parse_file(self) -> File:
        pos = self._pos()
        self.expect("package")
        name = self.expect_ident()
        self.expect_semi()
        decls: list[Decl] = []
        while self.at("import"):
            decls.append(self.parse_gen_decl())
            self.expect_semi()
        while not self.at_type(TK_EOF):
            decls.append(self.parse_decl())
            self.expect_semi()
        return File(pos, name, decls)

    def parse_decl(self) -> Decl:
        if self.at("func"):
            return self.parse_func_decl()
        if self.at("var") or self.at("const") or self.at("type"):
            return self.parse_gen_decl()
        if self.at("import"):
            raise self.error("imports must appear before other declarations")
        raise self.error("expected declaration, got " + self._describe(self.current()))

    def parse_gen_decl(self) -> GenDecl:
        pos = self._pos()
        tok = self.advance().value
        specs: list[Spec] = []
        if self.at("("):
            self.advance()
            while not self.at(")"):
                specs.append(self.parse_spec(tok))
                self.expect_semi()
            self.expect(")")
            return GenDecl(pos, tok, specs, True)
        specs.append(self.parse_spec(tok))
        return GenDecl(pos, tok, specs, False)

    def parse_spec(self, tok: str) -> Spec:
        if tok == "import":
            return self.parse_import_spec()
        if tok == "type":
            return self.parse_type_spec()
        return self.parse_value_spec(tok)

    def parse_import_spec(self) -> ImportSpec:
        pos = self._pos()
        name: Ident | None = None
        if self.at_ident():
            name = self.expect_ident()
        elif self.at("."):
            name = Ident(self._pos(), ".")
            self.advance()
        tok = self.current()
        if tok.type != TK_STRING:
            raise self.error("expected import path, got " + self._describe(tok))
        self.advance()
        return ImportSpec(pos, name, BasicLit(self._tok_pos(tok), "STRING", tok.value))

    def parse_value_spec(self, tok: str) -> ValueSpec:
        pos = self._pos()
        names = self.parse_ident_list()
        typ: Expr | None = None
        if not self.at("=") and not self.at(";") and not self.at(")"):
            typ = self.parse_type()
        values: list[Expr] = []
        if self.at("="):
            self.advance()
            values = self.parse_expr_list()
        if tok == "var" and typ is None and len(values) == 0:
            raise self.error("missing variable type or initialization")
        return ValueSpec(pos, names, typ, values)

    def parse_type_spec(self) -> TypeSpec:
        pos = self._pos()
        name = self.expect_ident()
        if self.at("="):
            raise self.error("type aliases are not supported")
        typ = self.parse_type()
        return TypeSpec(pos, name, typ)

    def parse_ident_list(self) -> list[Ident]:
        names: list[Ident] = [self.expect_ident()]
        while self.at(","):
            self.advance()
            names.append(self.expect_ident())
        return names

    def parse_func_decl(self) -> FuncDecl:
        pos = self._pos()
        self.expect("func")
        recv: Field | None = None
        if self.at("("):
            recv_fields = self.parse_params()
            if len(recv_fields) != 1 or len(recv_fields[0].names) > 1:
                raise ParseError("method has multiple receivers", pos.line, pos.col)
            recv = recv_fields[0]
        name = self.expect_ident()
        if self.at("["):
            raise self.error("type parameters are not supported")
        typ = self.parse_signature(pos)
        if not self.at("{"):
            raise self.error("missing function body")
        body = self.parse_block()
        return FuncDecl(pos, recv, name, typ, body)

    # ── Types ────────────────────────────────────────────────

    def parse_signature(self, pos: Pos) -> FuncType:
        params = self.parse_params()
        results = self.parse_results()
        return FuncType(pos, params, results)

    def parse_results(self) -> list[Field]:
        if self.at("("):
            return self.parse_params()
        if self._at_type_start():
            typ = self.parse_type()
            return [Field(typ.pos, [], typ)]
        return []

    def _at_type_start(self) -> bool:
        tok = self.current()
        if tok.type == TK_IDENT:
            return True
        return tok.type != TK_STRING and tok.value in (
            "*",
            "[",
            "map",
            "func",
            "struct",
            "interface",
        )

    def parse_params(self) -> list[Field]:
        """Params = '(' ( Entry ( ',' Entry )* ','? )? ')' with Go's name grouping."""
        self.expect("(")
        entries: list[tuple[Expr, Expr | None]] = []
        while not self.at(")"):
            first = self.parse_param_type()
            if not self.at(",") and not self.at(")"):
                entries.append((first, self.parse_param_type()))
            else:
                entries.append((first, None))
            if not self.at(","):
                break
            self.advance()
        self.expect(")")
        named = False
        for _, typ in entries:
            if typ is not None:
                named = True
        if not named:
            return [Field(x.pos, [], x) for x, _ in entries]
        fields: list[Field] = []
        pending: list[Ident] = []
        for x, typ in entries:
            if not isinstance(x, Ident):
                raise ParseError("mixed named and unnamed parameters", x.pos.line, x.pos.col)
            pending.append(x)
            if typ is not None:
                fields.append(Field(pending[0].pos, pending, typ))
                pending = []
        if len(pending) > 0:
            raise ParseError(
                "mixed named and unnamed parameters", pending[0].pos.line, pending[0].pos.col
            )
        return fields

    def parse_param_type(self) -> Expr:
        if self.at("..."):
            pos = self._pos()
            self.advance()
            return Ellipsis(pos, self.parse_type())
        return self.parse_type()

    def parse_type(self) -> Expr:
        pos = self._pos()
        tok = self.current()
        if tok.type == TK_IDENT:
            ident = self.expect_ident()
            if self.at("."):
                self.advance()
                return SelectorExpr(pos, ident, self.expect_ident())
            return ident
        if tok.type == TK_STRING:
            raise self.error("expected type, got " + self._describe(tok))
        if tok.value == "*":
            self.advance()
            return StarExpr(pos, self.parse_type())
        if tok.value == "[":
            self.advance()
            if self.at("]"):
                self.advance()
                return ArrayType(pos, None, self.parse_type())
            if self.at("..."):
                raise self.error("[...] array types are not supported")
            self.expr_lev += 1
            length = self.parse_expr()
            self.expr_lev -= 1
            self.expect("]")
            return ArrayType(pos, length, self.parse_type())
        if tok.value == "map":
            self.advance()
            self.expect("[")
            key = self.parse_type()
            self.expect("]")
            return MapType(pos, key, self.parse_type())
        if tok.value == "func":
            self.advance()
            return self.parse_signature(pos)
        if tok.value == "struct":
            return self.parse_struct_type()
        if tok.value == "interface":
            self.advance()
            self.expect("{")
            if not self.at("}"):
                raise self.error("only the empty interface is supported")
            self.expect("}")
            return InterfaceType(pos)
        if tok.value == "(":
            self.advance()
            inner = self.parse_type()
            self.expect(")")
            return ParenExpr(pos, inner)
        if tok.value in UNSUPPORTED:
            raise self.error("'" + tok.value + "' is not supported")
        raise self.error("expected type, got " + self._describe(tok))

    def parse_struct_type(self) -> StructType:
        pos = self._pos()
        self.expect("struct")
        self.expect("{")
        fields: list[Field] = []
        while not self.at("}"):
            fpos = self._pos()
            if self.at("*"):
                fields.append(Field(fpos, [], self.parse_type()))
            else:
                first = self.expect_ident()
                if self.at(";") or self.at("}"):
                    fields.append(Field(fpos, [], first))
                elif self.at("."):
                    self.advance()
                    fields.append(Field(fpos, [], SelectorExpr(fpos, first, self.expect_ident())))
                else:
                    names: list[Ident] = [first]
                    while self.at(","):
                        self.advance()
                        names.append(self.expect_ident())
                    fields.append(Field(fpos, names, self.parse_type()))
            if self.at_type(TK_STRING):
                raise self.error("struct tags are not supported")
            self.expect_semi()
        self.expect("}")
        return StructType(pos, fields)

    # ── Statements ───────────────────────────────────────────

    def parse_block(self) -> BlockStmt:
        pos = self._pos()
        self.expect("{")
        saved = self.expr_lev
        self.expr_lev = 0
        stmts = self.parse_stmt_list()
        self.expr_lev = saved
        self.expect("}")
        return BlockStmt(pos, stmts)

    def parse_stmt_list(self) -> list[Stmt]:
        stmts: list[Stmt] = []
        while (
            not self.at("}")
            and not self.at("case")
            and not self.at("default")
            and not self.at_type(TK_EOF)
        ):
            if self.at(";"):
                self.advance()
                continue
            stmts.append(self.parse_stmt())
            if self.at("case") or self.at("default"):
                continue
            self.expect_semi()
        return stmts

    def parse_stmt(self) -> Stmt:
        tok = self.current()
        pos = self._pos()
        if tok.type == TK_STRING or tok.type in LITERAL_TYPES:
            return self.parse_simple_stmt(False)
        if tok.value == "var" or tok.value == "const" or tok.value == "type":
            return DeclStmt(pos, self.parse_gen_decl())
        if tok.value == "{":
            return self.parse_block()
        if tok.value == "if":
            return self.parse_if_stmt()
        if tok.value == "for":
            return self.parse_for_stmt()
        if tok.value == "switch":
            return self.parse_switch_stmt()
        if tok.value == "return":
            self.advance()
            results: list[Expr] = []
            if not self.at(";") and not self.at("}"):
                results = self.parse_expr_list()
            return ReturnStmt(pos, results)
        if tok.value == "break" or tok.value == "continue":
            self.advance()
            if self.at_ident():
                raise self.error("labels are not supported")
            return BranchStmt(pos, tok.value)
        if tok.value == "go" or tok.value == "defer":
            self.advance()
            call = self.parse_expr()
            if not isinstance(call, CallExpr):
                raise ParseError(
                    "expression in " + tok.value + " must be function call",
                    pos.line,
                    pos.col,
                )
            if tok.value == "go":
                return GoStmt(pos, call)
            return DeferStmt(pos, call)
        if tok.value in UNSUPPORTED:
            raise self.error("'" + tok.value + "' is not supported")
        return self.parse_simple_stmt(False)

    def parse_simple_stmt(self, range_ok: bool) -> Stmt:
        """SimpleStmt = ExprStmt | IncDecStmt | Assignment | ShortVarDecl (| RangeClause)."""
        pos = self._pos()
        if range_ok and self.at("range"):
            self.advance()
            x = self.parse_expr()
            return RangeStmt(pos, None, None, "", x, BlockStmt(pos, []))
        lhs = self.parse_expr_list()
        tok = self.current()
        if tok.type == TK_OP and tok.value in ASSIGN_OPS:
            self.advance()
            if range_ok and self.at("range") and (tok.value == "=" or tok.value == ":="):
                self.advance()
                if len(lhs) > 2:
                    raise ParseError("range clause permits at most two iteration variables", pos.line, pos.col)
                x = self.parse_expr()
                value = lhs[1] if len(lhs) == 2 else None
                return RangeStmt(pos, lhs[0], value, tok.value, x, BlockStmt(pos, []))
            if tok.value == ":=":
                for target in lhs:
                    if not isinstance(target, Ident):
                        raise ParseError("non-name on left side of :=", target.pos.line, target.pos.col)
            rhs = self.parse_expr_list()
            return AssignStmt(pos, lhs, tok.value, rhs)
        if len(lhs) > 1:
            raise self.error("expected assignment, got " + self._describe(tok))
        if tok.type == TK_OP and (tok.value == "++" or tok.value == "--"):
            self.advance()
            return IncDecStmt(pos, lhs[0], tok.value)
        if tok.type == TK_OP and (tok.value == "<-" or tok.value == ":"):
            raise self.error("'" + tok.value + "' is not supported")
        return ExprStmt(pos, lhs[0])

    def _header_expr(self, stmt: Stmt | None, what: str) -> Expr:
        if not isinstance(stmt, ExprStmt):
            raise self.error("expected " + what + " expression")
        return stmt.x

    def parse_if_stmt(self) -> IfStmt:
        pos = self._pos()
        self.expect("if")
        if self.at("{"):
            raise self.error("missing condition in if statement")
        saved = self.expr_lev
        self.expr_lev = -1
        init: Stmt | None = None
        first: Stmt | None = None
        if not self.at(";"):
            first = self.parse_simple_stmt(False)
        if self.at(";"):
            self.advance()
            init = first
            cond = self.parse_expr()
        else:
            cond = self._header_expr(first, "condition")
        self.expr_lev = saved
        body = self.parse_block()
        else_: Stmt | None = None
        if self.at("else"):
            self.advance()
            if self.at("if"):
                else_ = self.parse_if_stmt()
            elif self.at("{"):
                else_ = self.parse_block()
            else:
                raise self.error("else must be followed by if or statement block")
        return IfStmt(pos, init, cond, body, else_)

    def parse_for_stmt(self) -> Stmt:
        pos = self._pos()
        self.expect("for")
        saved = self.expr_lev
        self.expr_lev = -1
        init: Stmt | None = None
        cond: Expr | None = None
        post: Stmt | None = None
        range_stmt: RangeStmt | None = None
        if not self.at("{"):
            first: Stmt | None = None
            if not self.at(";"):
                first = self.parse_simple_stmt(True)
            if isinstance(first, RangeStmt):
                range_stmt = first
            elif self.at(";"):
                self.advance()
                init = first
                if not self.at(";"):
                    cond = self.parse_expr()
                self.expect(";")
                if not self.at("{"):
                    post = self.parse_simple_stmt(False)
            else:
                cond = self._header_expr(first, "for loop condition")
        self.expr_lev = saved
        body = self.parse_block()
        if range_stmt is not None:
            range_stmt.pos = pos
            range_stmt.body = body
            return range_stmt
        return ForStmt(pos, init, cond, post, body)

    def parse_switch_stmt(self) -> SwitchStmt:
        pos = self._pos()
        self.expect("switch")
        saved = self.expr_lev
        self.expr_lev = -1
        init: Stmt | None = None
        tag: Expr | None = None
        if not self.at("{"):
            first: Stmt | None = None
            if not self.at(";"):
                first = self.parse_simple_stmt(False)
            if self.at(";"):
                self.advance()
                init = first
                if not self.at("{"):
                    tag = self._header_expr(self.parse_simple_stmt(False), "switch")
            else:
                tag = self._header_expr(first, "switch")
        self.expr_lev = saved
        self.expect("{")
        clauses: list[CaseClause] = []
        while self.at("case") or self.at("default"):
            clauses.append(self.parse_case_clause())
        self.expect("}")
        return SwitchStmt(pos, init, tag, clauses)

    def parse_case_clause(self) -> CaseClause:
        pos = self._pos()
        exprs: list[Expr] | None = None
        if self.at("case"):
            self.advance()
            exprs = self.parse_expr_list()
        else:
            self.expect("default")
        self.expect(":")
        return CaseClause(pos, exprs, self.parse_stmt_list())

    # ── Expressions ──────────────────────────────────────────

    def parse_expr_list(self) -> list[Expr]:
        exprs: list[Expr] = [self.parse_expr()]
        while self.at(","):
            self.advance()
            exprs.append(self.parse_expr())
        return exprs

    def parse_expr(self) -> Expr:
        return self.parse_binary(1)

    def parse_binary(self, min_prec: int) -> Expr:
        """Precedence climbing over Go's five binary precedence levels."""
        x = self.parse_unary()
        while True:
            tok = self.current()
            if tok.type != TK_OP or tok.value not in BINARY_PREC:
                return x
            prec = BINARY_PREC[tok.value]
            if prec < min_prec:
                return x
            self.advance()
            y = self.parse_binary(prec + 1)
            x = BinaryExpr(x.pos, tok.value, x, y)

    def parse_unary(self) -> Expr:
        tok = self.current()
        if tok.type == TK_OP and tok.value in UNARY_OPS:
            pos = self._pos()
            self.advance()
            return UnaryExpr(pos, tok.value, self.parse_unary())
        if tok.type == TK_OP and tok.value == "*":
            pos = self._pos()
            self.advance()
            return StarExpr(pos, self.parse_unary())
        if tok.type == TK_OP and tok.value == "<-":
            raise self.error("channel receive is not supported")
        return self.parse_primary_expr()

    def parse_primary_expr(self) -> Expr:
        x = self.parse_operand()
        while True:
            if self.at("."):
                self.advance()
                if not self.at_ident():
                    raise self.error("type assertions are not supported")
                x = SelectorExpr(x.pos, x, self.expect_ident())
            elif self.at("["):
                x = self.parse_index_or_slice(x)
            elif self.at("("):
                x = self.parse_call(x)
            elif self.at("{"):
                if _is_literal_type(x) and (self.expr_lev >= 0 or not _is_type_name(x)):
                    x = self.parse_composite_lit(x)
                else:
                    return x
            else:
                return x

    def parse_operand(self) -> Expr:
        tok = self.current()
        pos = self._pos()
        if tok.type in LITERAL_TYPES:
            self.advance()
            return BasicLit(pos, tok.type, tok.value)
        if tok.type == TK_IDENT:
            return self.expect_ident()
        if tok.value == "(":
            self.advance()
            self.expr_lev += 1
            x = self.parse_expr()
            self.expr_lev -= 1
            self.expect(")")
            return ParenExpr(pos, x)
        if tok.value == "func":
            self.advance()
            typ = self.parse_signature(pos)
            if self.at("{"):
                self.expr_lev += 1
                body = self.parse_block()
                self.expr_lev -= 1
                return FuncLit(pos, typ, body)
            return typ
        if tok.value in ("[", "map", "struct", "interface"):
            return self.parse_type()
        raise self.error("expected expression, got " + self._describe(tok))

    def parse_index_or_slice(self, x: Expr) -> Expr:
        self.expect("[")
        self.expr_lev += 1
        index: list[Expr | None] = [None, None, None]
        ncolons = 0
        if not self.at(":"):
            index[0] = self.parse_expr()
        while self.at(":") and ncolons < 2:
            self.advance()
            ncolons += 1
            if not self.at(":") and not self.at("]"):
                index[ncolons] = self.parse_expr()
        self.expr_lev -= 1
        self.expect("]")
        if ncolons == 0:
            if index[0] is None:
                raise self.error("expected operand")
            return IndexExpr(x.pos, x, index[0])
        slice3 = ncolons == 2
        if slice3 and (index[1] is None or index[2] is None):
            raise ParseError(
                "middle and final index required in 3-index slice", x.pos.line, x.pos.col
            )
        return SliceExpr(x.pos, x, index[0], index[1], index[2], slice3)

    def parse_call(self, fun: Expr) -> CallExpr:
        self.expect("(")
        self.expr_lev += 1
        args: list[Expr] = []
        ellipsis = False
        while not self.at(")"):
            args.append(self.parse_expr())
            if self.at("..."):
                self.advance()
                ellipsis = True
            if not self.at(","):
                break
            self.advance()
        self.expr_lev -= 1
        self.expect(")")
        return CallExpr(fun.pos, fun, args, ellipsis)

    def parse_composite_lit(self, typ: Expr | None) -> CompositeLit:
        pos = typ.pos if typ is not None else self._pos()
        self.expect("{")
        self.expr_lev += 1
        elts: list[Expr] = []
        while not self.at("}"):
            elts.append(self.parse_element())
            if not self.at(","):
                break
            self.advance()
        self.expr_lev -= 1
        if self.at(";"):
            raise self.error("missing ',' before newline in composite literal")
        self.expect("}")
        return CompositeLit(pos, typ, elts)

    def parse_element(self) -> Expr:
        x = self._parse_element_value()
        if self.at(":"):
            self.advance()
            return KeyValueExpr(x.pos, x, self._parse_element_value())
        return x

    def _parse_element_value(self) -> Expr:
        if self.at("{"):
            return self.parse_composite_lit(None)
        return self.parse_expr()
