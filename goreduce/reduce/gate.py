"""The oracle gate: one oracle call decides each trial."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..golite.ast import File, Pos
from ..golite.resolve import resolve, verify
from ..golite.symbols import SymbolIndex
from .undo import Undo

Oracle = Callable[[File], bool]


@dataclass
class Change:
    """One accepted rewrite: where, on which kind of node, and what it did."""

    pos: Pos
    tag: str
    description: str

    def __str__(self) -> str:
        return str(self.pos) + ": " + self.description


class OracleGate:
    """Commits or reverts a trial's edits on the oracle's verdict.

    Owns the symbol index: it is rebuilt after every commit, and with
    check_invariants set it is verified against the tree after every revert.
    """

    def __init__(self, file: File, oracle: Oracle, check_invariants: bool = False):
        self.file: File = file
        self.oracle: Oracle = oracle
        self.check_invariants: bool = check_invariants
        self.index: SymbolIndex = resolve(file)
        self.trials: int = 0

    def refresh(self) -> None:
        self.index = resolve(self.file)

    def decide(self, undo: Undo) -> bool:
        """Ask the oracle about the tree as undo left it. True means kept."""
        self.trials += 1
        try:
            interesting = self.oracle(self.file)
        except BaseException:
            undo()
            raise
        if interesting:
            undo.discard()
            self.refresh()
            return True
        undo()
        if self.check_invariants:
            verify(self.index, self.file)
        return False
