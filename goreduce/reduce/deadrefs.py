"""Dead-reference resolution.

When a rule drops part of the tree, the references inside it disappear.
A variable or import whose last reference went with them would leave the
program uncompilable ("declared and not used", "imported and not used"), so
the same trial neutralises those declarations too. Unused constants compile
and are left as they are.
"""

from __future__ import annotations

from ..golite.ast import AssignStmt, File, GenDecl, Ident, ImportSpec, Node, RangeStmt
from ..golite.symbols import KIND_PKG, KIND_VAR, Symbol, SymbolIndex
from .undo import InvariantError, Undo
from .walk import idents, walk


def unused_after_delete(index: SymbolIndex, nodes: list[Node | None]) -> list[Symbol]:
    """Symbols left with no references once every node in nodes is gone.

    The group shares one remaining-reference counter per symbol, and an
    identifier reached twice through overlapping nodes counts once.
    """
    remaining: dict[Symbol, int] = {}
    seen: set[Ident] = set()
    orphans: list[Symbol] = []
    for node in nodes:
        if node is None:
            continue
        for ident in idents(node):
            if ident in seen:
                continue
            seen.add(ident)
            sym = index.references.get(ident)
            if sym is None:
                continue
            if sym not in remaining:
                remaining[sym] = index.ref_count(sym)
            remaining[sym] -= 1
            if remaining[sym] == 0:
                orphans.append(sym)
    return orphans


def after_delete(file: File, index: SymbolIndex, nodes: list[Node | None]) -> Undo:
    """Neutralise the declarations orphaned by deleting nodes."""
    undo = Undo()
    dead: set[Symbol] = set()
    for sym in unused_after_delete(index, nodes):
        if sym.kind == KIND_PKG:
            _delete_import(file, sym, undo)
        elif sym.kind == KIND_VAR:
            dead.add(sym)
    if len(dead) > 0:
        _blank_declarations(file, index, dead, undo)
    return undo


def _delete_import(file: File, sym: Symbol, undo: Undo) -> None:
    spec = sym.import_spec
    for decl in file.decls:
        if not isinstance(decl, GenDecl) or decl.tok != "import":
            continue
        if spec not in decl.specs:
            continue
        specs = [s for s in decl.specs if s is not spec]
        if len(specs) == 0:
            undo.set(file, "decls", [d for d in file.decls if d is not decl])
        else:
            undo.set(decl, "specs", specs)
        return
    raise InvariantError("import of " + repr(sym.name) + " is not in the file")


def _blank_declarations(file: File, index: SymbolIndex, dead: set[Symbol], undo: Undo) -> None:
    blanked: set[Ident] = set()
    defines: list[AssignStmt | RangeStmt] = []
    for node in walk(file):
        if isinstance(node, Ident) and index.declares.get(node) in dead:
            undo.set(node, "name", "_")
            blanked.add(node)
        elif isinstance(node, AssignStmt) and node.is_define:
            defines.append(node)
        elif isinstance(node, RangeStmt) and node.tok == ":=":
            defines.append(node)
    for stmt in defines:
        if isinstance(stmt, AssignStmt):
            targets = stmt.lhs
        else:
            targets = [t for t in (stmt.key, stmt.value) if t is not None]
        touched = False
        live = False
        for target in targets:
            if target in blanked:
                touched = True
            elif isinstance(target, Ident) and target.name != "_" and target in index.declares:
                live = True
        # := with nothing new on the left does not compile
        if touched and not live:
            undo.set(stmt, "tok", "=")
