"""Name resolution: builds the SymbolIndex for a parsed file.

Walks the tree once, opening a scope for the file, every function body,
block, if/for/range/switch statement and case clause. A local name becomes
visible only after its declaration has been walked, so uses that precede it
resolve outward. Identifiers that name nothing declared in the file
(builtins, predeclared types, fields, methods) are left unresolved.
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
    Stmt,
    StructType,
    SwitchStmt,
    TypeSpec,
    UnaryExpr,
    ValueSpec,
)
from .symbols import (
    KIND_CONST,
    KIND_FUNC,
    KIND_PKG,
    KIND_TYPE,
    KIND_VAR,
    Scope,
    StaleIndexError,
    Symbol,
    SymbolIndex,
)

# Predeclared names an untyped constant expression may be built from
_UNTYPED_NAMES: set[str] = {"true", "false", "iota"}


def resolve(file: File) -> SymbolIndex:
    """Resolve every identifier in file and return the index."""
    return _Resolver().resolve_file(file)


def import_name(spec: ImportSpec) -> str:
    """The name an import binds: its alias, or the name assumed from the path.

    Without type information the package clause of the imported package is
    unknown, so the name is guessed the way goimports does: a trailing /vN
    major-version element is skipped, a "go-" prefix is stripped, and the
    name ends at the first character that cannot appear in an identifier.
    """
    if spec.name is not None:
        return spec.name.name
    parts = spec.path.value[1:-1].split("/")
    base = parts[-1]
    if len(parts) > 1 and base[:1] == "v" and base[1:].isdigit():
        base = parts[-2]
    if base.startswith("go-"):
        base = base[3:]
    for i, ch in enumerate(base):
        if not (ch.isalnum() or ch == "_"):
            return base[:i]
    return base


class _Resolver:
    def __init__(self) -> None:
        self.index: SymbolIndex = SymbolIndex()
        self.scope: Scope | None = None

    # ── Scopes ──────────────────────────────────────────────

    def open_scope(self, node: Node) -> Scope:
        scope = Scope(self.scope, node)
        self.index.scopes[node] = scope
        self.scope = scope
        return scope

    def close_scope(self) -> None:
        assert self.scope is not None
        self.scope = self.scope.parent

    def declare(
        self,
        ident: Ident,
        kind: str,
        spec: ValueSpec | TypeSpec | None = None,
        index: int = 0,
    ) -> Symbol | None:
        if ident.name == "_":
            return None
        assert self.scope is not None
        sym = Symbol(ident.name, kind, self.scope, ident, spec, index)
        self.scope.insert(sym)
        self.index.add_symbol(sym, ident)
        return sym

    def use(self, ident: Ident) -> None:
        assert self.scope is not None
        sym = self.scope.lookup_parent(ident.name)
        if sym is not None:
            self.index.add_reference(ident, sym, self.scope)

    # ── Top Level ───────────────────────────────────────────

    def resolve_file(self, file: File) -> SymbolIndex:
        self.open_scope(file)
        for decl in file.decls:
            if isinstance(decl, GenDecl) and decl.tok == "import":
                for spec in decl.specs:
                    assert isinstance(spec, ImportSpec)
                    self.declare_import(spec)
        for decl in file.decls:
            if isinstance(decl, FuncDecl):
                if decl.recv is None and decl.name.name != "init":
                    self.declare(decl.name, KIND_FUNC)
            elif decl.tok != "import":
                self.declare_specs(decl)
        for decl in file.decls:
            if isinstance(decl, FuncDecl):
                self.resolve_func(decl.recv, decl.typ, decl.body)
            elif decl.tok != "import":
                for spec in decl.specs:
                    self.resolve_spec_types(spec)
        self.close_scope()
        _mark_untyped(self.index)
        return self.index

    def declare_import(self, spec: ImportSpec) -> None:
        name = import_name(spec)
        if name == "_" or name == ".":
            return
        assert self.scope is not None
        sym = Symbol(name, KIND_PKG, self.scope, spec)
        self.scope.insert(sym)
        self.index.add_symbol(sym, spec.name)

    def declare_specs(self, decl: GenDecl) -> None:
        for spec in decl.specs:
            if isinstance(spec, ValueSpec):
                kind = KIND_CONST if decl.tok == "const" else KIND_VAR
                for i, name in enumerate(spec.names):
                    self.declare(name, kind, spec, i)
            elif isinstance(spec, TypeSpec):
                self.declare(spec.name, KIND_TYPE, spec)

    def resolve_spec_types(self, spec: object) -> None:
        if isinstance(spec, ValueSpec):
            self.resolve_expr(spec.typ)
            for value in spec.values:
                self.resolve_expr(value)
        elif isinstance(spec, TypeSpec):
            self.resolve_expr(spec.typ)

    def resolve_func(self, recv: Field | None, typ: FuncType, body: BlockStmt) -> None:
        fields: list[Field] = []
        if recv is not None:
            fields.append(recv)
        fields.extend(typ.params)
        fields.extend(typ.results)
        for f in fields:
            self.resolve_expr(f.typ)
        # The body's top level shares the function scope with the parameters
        self.open_scope(body)
        for f in fields:
            for name in f.names:
                self.declare(name, KIND_VAR)
        for stmt in body.stmts:
            self.resolve_stmt(stmt)
        self.close_scope()

    # ── Statements ──────────────────────────────────────────

    def resolve_block(self, block: BlockStmt) -> None:
        self.open_scope(block)
        for stmt in block.stmts:
            self.resolve_stmt(stmt)
        self.close_scope()

    def resolve_stmt(self, stmt: Stmt | None) -> None:
        if stmt is None:
            return
        if isinstance(stmt, BlockStmt):
            self.resolve_block(stmt)
        elif isinstance(stmt, DeclStmt):
            self.resolve_local_decl(stmt.decl)
        elif isinstance(stmt, ExprStmt):
            self.resolve_expr(stmt.x)
        elif isinstance(stmt, IncDecStmt):
            self.resolve_expr(stmt.x)
        elif isinstance(stmt, AssignStmt):
            self.resolve_assign(stmt)
        elif isinstance(stmt, (GoStmt, DeferStmt)):
            self.resolve_expr(stmt.call)
        elif isinstance(stmt, ReturnStmt):
            for result in stmt.results:
                self.resolve_expr(result)
        elif isinstance(stmt, BranchStmt):
            pass
        elif isinstance(stmt, IfStmt):
            self.open_scope(stmt)
            self.resolve_stmt(stmt.init)
            self.resolve_expr(stmt.cond)
            self.resolve_block(stmt.body)
            self.resolve_stmt(stmt.else_)
            self.close_scope()
        elif isinstance(stmt, ForStmt):
            self.open_scope(stmt)
            self.resolve_stmt(stmt.init)
            self.resolve_expr(stmt.cond)
            self.resolve_stmt(stmt.post)
            self.resolve_block(stmt.body)
            self.close_scope()
        elif isinstance(stmt, RangeStmt):
            self.resolve_expr(stmt.x)
            self.open_scope(stmt)
            for target in (stmt.key, stmt.value):
                if target is None:
                    continue
                if stmt.tok == ":=" and isinstance(target, Ident):
                    self.declare(target, KIND_VAR)
                else:
                    self.resolve_expr(target)
            self.resolve_block(stmt.body)
            self.close_scope()
        elif isinstance(stmt, SwitchStmt):
            self.open_scope(stmt)
            self.resolve_stmt(stmt.init)
            self.resolve_expr(stmt.tag)
            for clause in stmt.clauses:
                for expr in clause.exprs or []:
                    self.resolve_expr(expr)
                self.open_scope(clause)
                for s in clause.body:
                    self.resolve_stmt(s)
                self.close_scope()
            self.close_scope()
        else:
            raise TypeError("unhandled stmt type")

    def resolve_assign(self, stmt: AssignStmt) -> None:
        if not stmt.is_define:
            for target in stmt.lhs:
                self.resolve_expr(target)
            for value in stmt.rhs:
                self.resolve_expr(value)
            return
        for value in stmt.rhs:
            self.resolve_expr(value)
        assert self.scope is not None
        for target in stmt.lhs:
            assert isinstance(target, Ident)
            if target.name == "_":
                continue
            # Names already declared in this scope are reassigned, not redeclared
            if self.scope.lookup(target.name) is not None:
                self.use(target)
            else:
                self.declare(target, KIND_VAR)

    def resolve_local_decl(self, decl: GenDecl) -> None:
        for spec in decl.specs:
            if isinstance(spec, ValueSpec):
                self.resolve_expr(spec.typ)
                for value in spec.values:
                    self.resolve_expr(value)
                kind = KIND_CONST if decl.tok == "const" else KIND_VAR
                for i, name in enumerate(spec.names):
                    self.declare(name, kind, spec, i)
            elif isinstance(spec, TypeSpec):
                self.declare(spec.name, KIND_TYPE, spec)
                self.resolve_expr(spec.typ)

    # ── Expressions ─────────────────────────────────────────

    def resolve_expr(self, expr: Expr | None) -> None:
        if expr is None:
            return
        if isinstance(expr, Ident):
            self.use(expr)
        elif isinstance(expr, BasicLit):
            pass
        elif isinstance(expr, CompositeLit):
            self.resolve_composite(expr, expr.typ)
        elif isinstance(expr, FuncLit):
            self.resolve_func(None, expr.typ, expr.body)
        elif isinstance(expr, (ParenExpr, StarExpr, UnaryExpr)):
            self.resolve_expr(expr.x)
        elif isinstance(expr, SelectorExpr):
            # The selector names a field, method or package member
            self.resolve_expr(expr.x)
        elif isinstance(expr, IndexExpr):
            self.resolve_expr(expr.x)
            self.resolve_expr(expr.index)
        elif isinstance(expr, SliceExpr):
            self.resolve_expr(expr.x)
            self.resolve_expr(expr.low)
            self.resolve_expr(expr.high)
            self.resolve_expr(expr.max)
        elif isinstance(expr, BinaryExpr):
            self.resolve_expr(expr.x)
            self.resolve_expr(expr.y)
        elif isinstance(expr, CallExpr):
            self.resolve_expr(expr.fun)
            for arg in expr.args:
                self.resolve_expr(arg)
        elif isinstance(expr, KeyValueExpr):
            self.resolve_expr(expr.key)
            self.resolve_expr(expr.value)
        elif isinstance(expr, ArrayType):
            self.resolve_expr(expr.length)
            self.resolve_expr(expr.elt)
        elif isinstance(expr, MapType):
            self.resolve_expr(expr.key)
            self.resolve_expr(expr.value)
        elif isinstance(expr, Ellipsis):
            self.resolve_expr(expr.elt)
        elif isinstance(expr, FuncType):
            for f in expr.params + expr.results:
                self.resolve_expr(f.typ)
        elif isinstance(expr, StructType):
            for f in expr.fields:
                self.resolve_expr(f.typ)
        elif isinstance(expr, InterfaceType):
            pass
        else:
            raise TypeError("unhandled expr type")

    def resolve_composite(self, lit: CompositeLit, typ: Expr | None) -> None:
        """Resolve a composite literal whose type is typ (given or inherited)."""
        self.resolve_expr(lit.typ)
        underlying = self.underlying(typ)
        elem: Expr | None = None
        if isinstance(underlying, ArrayType):
            elem = underlying.elt
        elif isinstance(underlying, MapType):
            elem = underlying.value
        for elt in lit.elts:
            value = elt
            if isinstance(elt, KeyValueExpr):
                # Keys of a literal whose type is a known struct are field names
                if not isinstance(underlying, StructType) or not isinstance(elt.key, Ident):
                    self.resolve_element(elt.key, None)
                value = elt.value
            self.resolve_element(value, elem)

    def resolve_element(self, expr: Expr, elem: Expr | None) -> None:
        if isinstance(expr, CompositeLit) and expr.typ is None:
            self.resolve_composite(expr, elem)
            return
        self.resolve_expr(expr)

    def underlying(self, typ: Expr | None) -> Expr | None:
        """Follow named types declared in this file to their definition."""
        seen: set[Symbol] = set()
        while isinstance(typ, Ident):
            assert self.scope is not None
            sym = self.scope.lookup_parent(typ.name)
            if sym is None or sym.kind != KIND_TYPE or sym in seen:
                return typ
            seen.add(sym)
            typ = sym.type_expr()
        while isinstance(typ, StarExpr):
            typ = typ.x
        return typ


# ============================================================
# UNTYPED CONSTANTS
# ============================================================


def _mark_untyped(index: SymbolIndex) -> None:
    """Flag consts declared without a type whose own initializer is untyped."""
    memo: dict[Symbol, bool] = {}
    for sym in index.symbols:
        if sym.kind == KIND_CONST:
            sym.untyped = _is_untyped_const(index, sym, memo)


def _is_untyped_const(index: SymbolIndex, sym: Symbol, memo: dict[Symbol, bool]) -> bool:
    if sym in memo:
        return memo[sym]
    # Cycles resolve to typed
    memo[sym] = False
    spec = sym.spec
    result = False
    if isinstance(spec, ValueSpec) and spec.typ is None:
        value = sym.value()
        if value is not None:
            result = _is_untyped_expr(index, value, memo)
    memo[sym] = result
    return result


def _is_untyped_expr(index: SymbolIndex, expr: Expr, memo: dict[Symbol, bool]) -> bool:
    if isinstance(expr, BasicLit):
        return True
    if isinstance(expr, Ident):
        sym = index.references.get(expr)
        if sym is None:
            return expr.name in _UNTYPED_NAMES
        return sym.kind == KIND_CONST and _is_untyped_const(index, sym, memo)
    if isinstance(expr, (ParenExpr, UnaryExpr)):
        return _is_untyped_expr(index, expr.x, memo)
    if isinstance(expr, BinaryExpr):
        return _is_untyped_expr(index, expr.x, memo) and _is_untyped_expr(index, expr.y, memo)
    return False


# ============================================================
# VERIFICATION
# ============================================================


def verify(index: SymbolIndex, file: File) -> None:
    """Check index against a fresh resolution of file.

    Raises StaleIndexError if any identifier declares or refers to a
    different declaration than it did when the index was built.
    """
    fresh = resolve(file)
    _compare(index.declares, fresh.declares, "declaration")
    _compare(index.references, fresh.references, "reference")
    for sym, uses in index.occurrences.items():
        for ident in uses:
            if index.references.get(ident) is not sym:
                raise StaleIndexError(
                    "occurrence of " + repr(sym.name) + " at " + str(ident.pos) + " is not a reference to it"
                )


def _compare(old: dict[Ident, Symbol], new: dict[Ident, Symbol], what: str) -> None:
    for ident, sym in new.items():
        prev = old.get(ident)
        if prev is None:
            raise StaleIndexError("unindexed " + what + " " + repr(ident.name) + " at " + str(ident.pos))
        if prev.decl is not sym.decl:
            raise StaleIndexError(
                what + " " + repr(ident.name) + " at " + str(ident.pos) + " resolves to a different declaration"
            )
    if len(old) != len(new):
        for ident in old:
            if ident not in new:
                raise StaleIndexError("stale " + what + " " + repr(ident.name) + " at " + str(ident.pos))
