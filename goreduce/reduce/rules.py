"""Rewrite rules, dispatched on the type of the node being visited.

Each candidate rewrite is one trial: record the edits in an Undo, then let
the gate decide. The first kept rewrite ends the visit.
"""

from __future__ import annotations

from ..golite.ast import (
    ArrayType,
    AssignStmt,
    BasicLit,
    BinaryExpr,
    BlockStmt,
    CaseClause,
    CompositeLit,
    DeclStmt,
    DeferStmt,
    ExprStmt,
    File,
    GenDecl,
    GoStmt,
    Ident,
    IfStmt,
    IndexExpr,
    Node,
    ParenExpr,
    Pos,
    SliceExpr,
    StarExpr,
    Stmt,
    UnaryExpr,
    ValueSpec,
)
from ..golite.symbols import KIND_CONST, SymbolIndex
from .deadrefs import after_delete
from .gate import Change, OracleGate
from .inline import BlockInliner
from .undo import Undo
from .walk import Slot, copy_expr, idents, node_kind

# Shown literals longer than this are cut to their first 7 characters
_MAX_SHOWN = 10


class Rules:
    """The rule catalogue for one pass over file."""

    def __init__(self, file: File, gate: OracleGate):
        self.file: File = file
        self.gate: OracleGate = gate
        self.change: Change | None = None
        self.inliner: BlockInliner = BlockInliner(gate, self.log)

    @property
    def index(self) -> SymbolIndex:
        return self.gate.index

    def log(self, node: Node, description: str, pos: Pos | None = None) -> None:
        if pos is None:
            pos = node.pos
        self.change = Change(pos, node_kind(node), description)

    # ── Dispatch ────────────────────────────────────────────

    def reduce_node(self, node: Node, slot: Slot | None) -> bool:
        """Try the rewrites for node's type in order. True if one was kept."""
        if isinstance(node, BlockStmt):
            return self.reduce_stmt_list(node, "stmts")
        if isinstance(node, CaseClause):
            return self.reduce_stmt_list(node, "body")
        if slot is None:
            return False
        if isinstance(node, IfStmt):
            return self.reduce_if(node, slot)
        if isinstance(node, Ident):
            return self.inline_const(node, slot)
        if isinstance(node, BasicLit):
            return self.reduce_lit(node)
        if isinstance(node, SliceExpr):
            return self.reduce_slice(node, slot)
        if isinstance(node, CompositeLit):
            return self.reduce_composite(node)
        if isinstance(node, BinaryExpr):
            return self.reduce_binary(node, slot)
        if isinstance(node, ParenExpr):
            return self.replace(node, slot, node.x, Undo(), "(a) -> a")
        if isinstance(node, StarExpr):
            return self.replace(node, slot, node.x, Undo(), "*a -> a")
        if isinstance(node, UnaryExpr):
            return self.replace(node, slot, node.x, Undo(), node.op + "a -> a")
        if isinstance(node, IndexExpr):
            undo = after_delete(self.file, self.index, [node.index])
            return self.replace(node, slot, node.x, undo, "a[b] -> a")
        if isinstance(node, GoStmt):
            return self.replace(node, slot, ExprStmt(node.pos, node.call), Undo(), "go a() -> a()")
        if isinstance(node, DeferStmt):
            return self.replace(
                node, slot, ExprStmt(node.pos, node.call), Undo(), "defer a() -> a()"
            )
        return False

    def replace(self, node: Node, slot: Slot, new: Node, undo: Undo, description: str) -> bool:
        """Put new where node was, on top of the edits already in undo."""
        slot.set(new, undo)
        if not self.gate.decide(undo):
            return False
        self.log(node, description)
        return True

    # ── Statement Lists ─────────────────────────────────────

    def reduce_stmt_list(self, owner: Node, attr: str) -> bool:
        if self.remove_stmt(owner, attr):
            return True
        return self.inliner.inline_block(owner, attr)

    def remove_stmt(self, owner: Node, attr: str) -> bool:
        """Try deleting each statement of owner.attr in turn."""
        orig: list[Stmt] = getattr(owner, attr)
        for i, stmt in enumerate(orig):
            if isinstance(stmt, DeclStmt) and not self.all_unused(stmt.decl):
                continue
            # Dropping a definition leaves its later uses undeclared
            if isinstance(stmt, AssignStmt) and stmt.is_define:
                continue
            undo = after_delete(self.file, self.index, [stmt])
            undo.set(owner, attr, orig[:i] + orig[i + 1 :])
            if self.gate.decide(undo):
                self.log(stmt, node_kind(stmt) + " removed")
                return True
        return False

    def all_unused(self, decl: GenDecl) -> bool:
        """True if decl only declares consts or vars nobody refers to."""
        for spec in decl.specs:
            if not isinstance(spec, ValueSpec):
                return False
            for name in spec.names:
                sym = self.index.declares.get(name)
                if sym is not None and self.index.ref_count(sym) > 0:
                    return False
        return True

    # ── Statements ──────────────────────────────────────────

    def reduce_if(self, stmt: IfStmt, slot: Slot) -> bool:
        undo = after_delete(self.file, self.index, [stmt.init, stmt.cond, stmt.else_])
        if self.replace(stmt, slot, stmt.body, undo, "if a { b } -> { b }"):
            return True
        if stmt.else_ is None:
            return False
        undo = after_delete(self.file, self.index, [stmt.init, stmt.cond, stmt.body])
        return self.replace(stmt, slot, stmt.else_, undo, "if a {...} else c -> c")

    # ── Expressions ─────────────────────────────────────────

    def inline_const(self, ident: Ident, slot: Slot) -> bool:
        sym = self.index.references.get(ident)
        if sym is None or sym.kind != KIND_CONST or not sym.untyped:
            return False
        value = sym.value()
        if value is None or not self.means_same_at(value, ident):
            return False
        undo = after_delete(self.file, self.index, [ident])
        return self.replace(ident, slot, copy_expr(value), undo, "const inlined")

    def means_same_at(self, value: Node, use: Ident) -> bool:
        """True if every name in value resolves the same way from use's scope."""
        scope = self.index.use_scopes.get(use)
        if scope is None:
            return False
        for ident in idents(value):
            sym = self.index.references.get(ident)
            if sym is None:
                # iota only has a value inside its own const declaration
                if ident.name == "iota" or scope.lookup_parent(ident.name) is not None:
                    return False
            elif scope.lookup_parent(ident.name) is not sym:
                return False
        return True

    def reduce_lit(self, lit: BasicLit) -> bool:
        if lit.kind == "STRING":
            target = '""'
        elif lit.kind == "INT":
            target = "0"
        else:
            return False
        orig = lit.value
        if orig == target:
            return False
        undo = Undo()
        undo.set(lit, "value", target)
        if not self.gate.decide(undo):
            return False
        shown = orig
        if len(shown) > _MAX_SHOWN:
            shown = shown[:7] + ('..."' if lit.kind == "STRING" else "...")
        self.log(lit, shown + " -> " + target)
        return True

    def reduce_slice(self, expr: SliceExpr, slot: Slot) -> bool:
        undo = after_delete(self.file, self.index, [expr.low, expr.high, expr.max])
        if self.replace(expr, slot, expr.x, undo, "a[b:] -> a"):
            return True
        for attr, description in (
            ("max", "a[b:c:d] -> a[b:c]"),
            ("high", "a[b:c] -> a[b:]"),
            ("low", "a[b:c] -> a[:c]"),
        ):
            bound = getattr(expr, attr)
            if bound is None:
                continue
            # A 3-index slice needs both of its upper bounds
            if attr == "high" and expr.slice3:
                continue
            undo = after_delete(self.file, self.index, [bound])
            if attr == "max":
                undo.set(expr, "slice3", False)
            undo.set(expr, attr, None)
            if self.gate.decide(undo):
                self.log(expr, description, bound.pos)
                return True
        return False

    def reduce_composite(self, lit: CompositeLit) -> bool:
        if len(lit.elts) == 0:
            return False
        undo = after_delete(self.file, self.index, list(lit.elts))
        undo.set(lit, "elts", [])
        if not self.gate.decide(undo):
            return False
        typ = "T"
        if isinstance(lit.typ, ArrayType):
            typ = "[]T"
        self.log(lit, typ + "{a, b} -> " + typ + "{}")
        return True

    def reduce_binary(self, expr: BinaryExpr, slot: Slot) -> bool:
        undo = after_delete(self.file, self.index, [expr.y])
        if self.replace(expr, slot, expr.x, undo, "a " + expr.op + " b -> a"):
            return True
        undo = after_delete(self.file, self.index, [expr.x])
        return self.replace(expr, slot, expr.y, undo, "a " + expr.op + " b -> b")
