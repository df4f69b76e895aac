"""Rule engine: rewrites, undo protocol and the reduction driver."""

from __future__ import annotations

from .gate import Change as Change, Oracle as Oracle, OracleGate as OracleGate
from .reducer import (
    ReduceConfig as ReduceConfig,
    ReduceResult as ReduceResult,
    Reducer as Reducer,
)
from .undo import Edit as Edit, InvariantError as InvariantError, Undo as Undo
