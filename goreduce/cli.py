"""goreduce CLI: shrink a Go program while a command keeps matching."""

from __future__ import annotations

import re
import sys

from .golite import ParseError, StaleIndexError, TokenizeError, emit, parse
from .oracle import DEFAULT_COMMAND, DEFAULT_TIMEOUT, CommandOracle, OracleError
from .reduce import Change, InvariantError, ReduceConfig, Reducer


USAGE: str = """\
goreduce [OPTIONS] -match REGEX FILE

Reduce a Go program while the output of a command run on it keeps matching
REGEX.

Options:
  -match REGEX       Output regex that makes a candidate interesting (required)
  -cmd CMD           Command to run, {file} and {dir} are substituted
                     (default: go run {file})
  -o, --output FILE  Write the reduced program to FILE (default: stdout)
  -w                 Overwrite FILE in place
  -v                 Report every accepted change on stderr
  --max-passes N     Stop after N passes
  --timeout SECS     Per-run command timeout (default: 30)
  --budget SECS      Wall-clock budget for the whole reduction
  --check            Verify symbol index invariants after rejected trials
  -h, --help         Show this help message
"""

# Flags followed by a value
_VALUE_FLAGS: set[str] = {
    "-match",
    "-cmd",
    "-o",
    "--output",
    "--max-passes",
    "--timeout",
    "--budget",
}


def _positive(text: str, convert: type) -> int | float | None:
    try:
        value = convert(text)
    except ValueError:
        return None
    if value <= 0:
        return None
    return value


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    values: dict[str, str] = {}
    overwrite = False
    verbose = False
    check = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg in _VALUE_FLAGS:
            if i + 1 >= len(args):
                print("goreduce: flag '" + arg + "' needs a value", file=sys.stderr)
                return 2
            values[arg] = args[i + 1]
            i += 2
        elif arg == "-w":
            overwrite = True
            i += 1
        elif arg == "-v":
            verbose = True
            i += 1
        elif arg == "--check":
            check = True
            i += 1
        elif arg.startswith("-"):
            print("goreduce: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("goreduce: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
    if filepath == "":
        print("goreduce: missing file argument", file=sys.stderr)
        return 2
    if "-match" not in values:
        print("goreduce: missing -match REGEX", file=sys.stderr)
        return 2
    output_path = values.get("-o", values.get("--output", ""))
    if overwrite and output_path != "":
        print("goreduce: -w and -o are mutually exclusive", file=sys.stderr)
        return 2

    config = ReduceConfig(check_invariants=check)
    timeout = DEFAULT_TIMEOUT
    if "--max-passes" in values:
        max_passes = _positive(values["--max-passes"], int)
        if max_passes is None:
            print("goreduce: --max-passes needs a positive integer", file=sys.stderr)
            return 2
        config.max_passes = int(max_passes)
    if "--budget" in values:
        budget = _positive(values["--budget"], float)
        if budget is None:
            print("goreduce: --budget needs a positive number of seconds", file=sys.stderr)
            return 2
        config.time_budget = float(budget)
    if "--timeout" in values:
        run_timeout = _positive(values["--timeout"], float)
        if run_timeout is None:
            print("goreduce: --timeout needs a positive number of seconds", file=sys.stderr)
            return 2
        timeout = float(run_timeout)

    try:
        oracle = CommandOracle(
            values["-match"], values.get("-cmd", DEFAULT_COMMAND), timeout
        )
    except OracleError as e:
        print("goreduce: " + str(e), file=sys.stderr)
        return 2
    except re.error as e:
        print("goreduce: bad -match regex: " + str(e), file=sys.stderr)
        return 2
    except ValueError as e:
        print("goreduce: bad -cmd: " + str(e), file=sys.stderr)
        return 2

    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("goreduce: " + filepath + ": No such file or directory", file=sys.stderr)
        return 1
    except OSError as e:
        print("goreduce: " + filepath + ": " + str(e), file=sys.stderr)
        return 1
    try:
        source = raw.decode("utf-8")
    except ValueError:
        print("goreduce: " + filepath + ": invalid utf-8", file=sys.stderr)
        return 1

    try:
        file = parse(source)
    except (TokenizeError, ParseError) as e:
        print(
            "goreduce: " + filepath + ":" + str(e.line) + ":" + str(e.col) + ": " + e.msg,
            file=sys.stderr,
        )
        return 1

    try:
        if not oracle(file):
            print(
                "goreduce: " + filepath + ": output does not match '" + values["-match"] + "' to begin with",
                file=sys.stderr,
            )
            return 1
    except OracleError as e:
        print("goreduce: " + str(e), file=sys.stderr)
        return 1

    def report(change: Change) -> None:
        print(filepath + ":" + str(change), file=sys.stderr)

    reducer = Reducer(file, oracle, config, report if verbose else None)
    try:
        result = reducer.reduce()
    except OracleError as e:
        print("goreduce: " + str(e), file=sys.stderr)
        return 1
    except (InvariantError, StaleIndexError) as e:
        print("goreduce: internal error: " + str(e), file=sys.stderr)
        return 1

    reduced = emit(file)
    if overwrite:
        output_path = filepath
    if output_path != "":
        try:
            with open(output_path, "w") as f:
                f.write(reduced)
        except OSError as e:
            print("goreduce: " + output_path + ": " + str(e), file=sys.stderr)
            return 1
    else:
        sys.stdout.write(reduced)
    if verbose:
        print(
            "goreduce: "
            + str(result.passes)
            + " passes, "
            + str(result.trials)
            + " trials, "
            + str(len(result.changes))
            + " changes",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
