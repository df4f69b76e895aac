"""goreduce: reduce Go programs while they stay interesting."""

from __future__ import annotations

from collections.abc import Callable

from .golite import emit, parse
from .oracle import text_oracle
from .reduce import ReduceConfig, Reducer

__version__ = "0.1.0"


def reduce_source(
    source: str,
    is_interesting: Callable[[str], bool],
    config: ReduceConfig | None = None,
) -> str:
    """Reduce Go source text while is_interesting keeps returning True."""
    file = parse(source)
    Reducer(file, text_oracle(is_interesting), config).reduce()
    return emit(file)
