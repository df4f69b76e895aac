"""Symbols, scopes and the identifier index built by the resolver."""

from __future__ import annotations

from dataclasses import dataclass, field

from .ast import Expr, Ident, ImportSpec, Node, Spec, TypeSpec, ValueSpec


# Symbol kinds
KIND_VAR = "var"
KIND_CONST = "const"
KIND_PKG = "pkg"
KIND_FUNC = "func"
KIND_TYPE = "type"


class StaleIndexError(Exception):
    """The symbol index no longer describes the tree it was built from."""


# ============================================================
# SYMBOLS
# ============================================================


@dataclass(eq=False)
class Symbol:
    """One declared name.

    decl is the declaring identifier, or the ImportSpec for an import. For
    consts and vars spec/index locate the name inside its ValueSpec; for
    types spec is the TypeSpec.
    """

    name: str
    kind: str
    scope: Scope
    decl: Node
    spec: Spec | None = None
    index: int = 0
    untyped: bool = False

    def value(self) -> Expr | None:
        """The initializer written for this name, if it has one of its own."""
        if not isinstance(self.spec, ValueSpec):
            return None
        if self.index >= len(self.spec.values):
            return None
        return self.spec.values[self.index]

    def type_expr(self) -> Expr | None:
        if isinstance(self.spec, TypeSpec):
            return self.spec.typ
        return None

    @property
    def import_spec(self) -> ImportSpec | None:
        if isinstance(self.decl, ImportSpec):
            return self.decl
        return None


# ============================================================
# SCOPES
# ============================================================


class Scope:
    """A lexical scope. node is the syntax node that opens it."""

    def __init__(self, parent: Scope | None, node: Node):
        self.parent: Scope | None = parent
        self.node: Node = node
        self.symbols: dict[str, Symbol] = {}
        self.children: list[Scope] = []
        if parent is not None:
            parent.children.append(self)

    def insert(self, sym: Symbol) -> None:
        self.symbols[sym.name] = sym

    def lookup(self, name: str) -> Symbol | None:
        return self.symbols.get(name)

    def lookup_parent(self, name: str) -> Symbol | None:
        """Find name in this scope or the nearest enclosing one."""
        scope: Scope | None = self
        while scope is not None:
            sym = scope.symbols.get(name)
            if sym is not None:
                return sym
            scope = scope.parent
        return None

    def declares_below(self, name: str) -> bool:
        """True if this scope or any scope nested inside it declares name."""
        if name in self.symbols:
            return True
        for child in self.children:
            if child.declares_below(name):
                return True
        return False


# ============================================================
# INDEX
# ============================================================


@dataclass
class SymbolIndex:
    """Declaration and reference tables for one file.

    declares maps declaring identifiers to their symbol, references maps
    every other resolved identifier to the symbol it names, and
    occurrences keeps each symbol's references in source order.
    """

    declares: dict[Ident, Symbol] = field(default_factory=dict)
    references: dict[Ident, Symbol] = field(default_factory=dict)
    occurrences: dict[Symbol, list[Ident]] = field(default_factory=dict)
    scopes: dict[Node, Scope] = field(default_factory=dict)
    use_scopes: dict[Ident, Scope] = field(default_factory=dict)
    symbols: list[Symbol] = field(default_factory=list)

    def add_symbol(self, sym: Symbol, ident: Ident | None) -> None:
        self.symbols.append(sym)
        self.occurrences[sym] = []
        if ident is not None:
            self.declares[ident] = sym

    def add_reference(self, ident: Ident, sym: Symbol, scope: Scope) -> None:
        self.references[ident] = sym
        self.use_scopes[ident] = scope
        self.occurrences[sym].append(ident)

    def occurrences_of(self, sym: Symbol) -> list[Ident]:
        return self.occurrences.get(sym, [])

    def ref_count(self, sym: Symbol) -> int:
        return len(self.occurrences.get(sym, []))
