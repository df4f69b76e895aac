"""Block inlining that keeps every name resolving where it did.

Splicing a nested block into its parent moves the block's declarations out
one scope. A name that already resolved to something in the enclosing chain
would then shadow or collide with it, so such names are first renamed by
appending underscores.
"""

from __future__ import annotations

from collections.abc import Callable

from ..golite.ast import AssignStmt, BlockStmt, DeclStmt, Ident, Node, Stmt, TypeSpec, ValueSpec
from ..golite.symbols import Scope, StaleIndexError
from .gate import OracleGate
from .undo import Undo


def declared_names(stmts: list[Stmt]) -> list[Ident]:
    """Identifiers declared directly by a statement list, not in nested blocks."""
    names: list[Ident] = []
    for stmt in stmts:
        if isinstance(stmt, AssignStmt) and stmt.is_define:
            for target in stmt.lhs:
                if isinstance(target, Ident):
                    names.append(target)
        elif isinstance(stmt, DeclStmt):
            for spec in stmt.decl.specs:
                if isinstance(spec, ValueSpec):
                    names.extend(spec.names)
                elif isinstance(spec, TypeSpec):
                    names.append(spec.name)
    return names


def fresh_name(scope: Scope, name: str, taken: set[str]) -> str:
    """name with underscores appended until nothing visible, nested or taken uses it."""
    candidate = name + "_"
    while (
        candidate in taken
        or scope.lookup_parent(candidate) is not None
        or scope.declares_below(candidate)
    ):
        candidate += "_"
    return candidate


class BlockInliner:
    def __init__(self, gate: OracleGate, log: Callable[[Node, str], None]):
        self.gate: OracleGate = gate
        self.log: Callable[[Node, str], None] = log

    def inline_block(self, owner: Node, attr: str) -> bool:
        """Try splicing each nested block of owner.attr; True once one is kept."""
        orig: list[Stmt] = getattr(owner, attr)
        for i, stmt in enumerate(orig):
            if not isinstance(stmt, BlockStmt):
                continue
            undo = Undo()
            self.rename_collisions(stmt, undo)
            undo.set(owner, attr, orig[:i] + stmt.stmts + orig[i + 1 :])
            if self.gate.decide(undo):
                self.log(stmt, "block inlined")
                return True
        return False

    def rename_collisions(self, block: BlockStmt, undo: Undo) -> None:
        index = self.gate.index
        scope = index.scopes.get(block)
        if scope is None or scope.parent is None:
            raise StaleIndexError("block at " + str(block.pos) + " has no scope")
        taken: set[str] = set()
        for ident in declared_names(block.stmts):
            sym = index.declares.get(ident)
            if sym is None:
                continue
            if scope.parent.lookup_parent(ident.name) is None:
                continue
            name = fresh_name(scope, ident.name, taken)
            taken.add(name)
            undo.set(ident, "name", name)
            for use in index.occurrences_of(sym):
                undo.set(use, "name", name)
