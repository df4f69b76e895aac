"""Reduction driver: passes over the tree until nothing more is accepted."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from ..golite.ast import File, GenDecl, Node
from .gate import Change, Oracle, OracleGate
from .rules import Rules
from .walk import Slot, child_slots


@dataclass
class ReduceConfig:
    """Limits for a reduction run. None means unlimited."""

    max_passes: int | None = None
    time_budget: float | None = None
    check_invariants: bool = False


@dataclass
class ReduceResult:
    passes: int = 0
    trials: int = 0
    changes: list[Change] = field(default_factory=list)


class Reducer:
    """Shrinks file in place while oracle keeps accepting it."""

    def __init__(
        self,
        file: File,
        oracle: Oracle,
        config: ReduceConfig | None = None,
        report: Callable[[Change], None] | None = None,
    ):
        self.file: File = file
        self.config: ReduceConfig = config if config is not None else ReduceConfig()
        self.report: Callable[[Change], None] | None = report
        self.gate: OracleGate = OracleGate(file, oracle, self.config.check_invariants)
        self.result: ReduceResult = ReduceResult()

    def reduce_pass(self) -> Change | None:
        """Walk the tree once, stopping at the first accepted rewrite."""
        self.gate.refresh()
        self.result.passes += 1
        rules = Rules(self.file, self.gate)
        if not self._visit(self.file, None, rules):
            return None
        change = rules.change
        assert change is not None
        self.result.changes.append(change)
        if self.report is not None:
            self.report(change)
        return change

    def _visit(self, node: Node, slot: Slot | None, rules: Rules) -> bool:
        # Imports only change when their last use goes away
        if isinstance(node, GenDecl) and node.tok == "import":
            return False
        if rules.reduce_node(node, slot):
            return True
        for child_slot, child in child_slots(node):
            if self._visit(child, child_slot, rules):
                return True
        return False

    def reduce(self) -> ReduceResult:
        """Run passes until one changes nothing or a limit is reached."""
        start = time.monotonic()
        while True:
            if self.config.max_passes is not None and self.result.passes >= self.config.max_passes:
                break
            if (
                self.config.time_budget is not None
                and time.monotonic() - start >= self.config.time_budget
            ):
                break
            if self.reduce_pass() is None:
                break
        self.result.trials = self.gate.trials
        return self.result
