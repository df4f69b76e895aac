"""Oracles: decide whether a candidate program is still interesting."""

from __future__ import annotations

import os
import re
import shlex
import subprocess
import tempfile
from collections.abc import Callable

from .golite import emit
from .golite.ast import File

DEFAULT_COMMAND = "go run {file}"
DEFAULT_TIMEOUT = 30.0


class OracleError(Exception):
    """The oracle command could not be run at all."""


def text_oracle(predicate: Callable[[str], bool]) -> Callable[[File], bool]:
    """Adapt a predicate over source text into an oracle over the tree."""

    def oracle(file: File) -> bool:
        return predicate(emit(file))

    return oracle


class CommandOracle:
    """Runs a command on the candidate and searches its output for a pattern.

    The candidate is written as filename inside a fresh temporary directory;
    {file} and {dir} in the command are replaced by its path and directory.
    A run that exceeds timeout is not interesting.
    """

    def __init__(
        self,
        pattern: str,
        command: str = DEFAULT_COMMAND,
        timeout: float = DEFAULT_TIMEOUT,
        filename: str = "main.go",
    ):
        self.regex: re.Pattern[str] = re.compile(pattern)
        self.command: list[str] = shlex.split(command)
        if len(self.command) == 0:
            raise OracleError("empty command")
        self.timeout: float = timeout
        self.filename: str = filename
        self.runs: int = 0

    def __call__(self, file: File) -> bool:
        return self.check_source(emit(file))

    def check_source(self, source: str) -> bool:
        self.runs += 1
        with tempfile.TemporaryDirectory(prefix="goreduce-") as tmp:
            path = os.path.join(tmp, self.filename)
            with open(path, "w") as f:
                f.write(source)
            args = [arg.format(file=path, dir=tmp) for arg in self.command]
            try:
                result = subprocess.run(
                    args,
                    capture_output=True,
                    text=True,
                    errors="replace",
                    timeout=self.timeout,
                    cwd=tmp,
                )
            except subprocess.TimeoutExpired:
                return False
            except FileNotFoundError:
                raise OracleError("command not found: " + args[0]) from None
        output = result.stdout + result.stderr
        return self.regex.search(output) is not None
