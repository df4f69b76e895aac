"""Reader for .tests case files shared by the data-driven suites.

A case file holds any number of cases:

    === name
    input lines
    ---
    expected lines
    ---

Expected text is stripped. Go sources in case files are indented with four
spaces; compare against printer output through detab().
"""

from pathlib import Path


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover(directory: Path) -> list[tuple[str, str, str]]:
    """All cases under directory as (test_id, input, expected)."""
    results = []
    for test_file in sorted(directory.glob("*.tests")):
        for name, input_code, expected in parse_test_file(test_file):
            results.append((test_file.stem + "/" + name, input_code, expected))
    return results


def detab(source: str) -> str:
    return source.replace("\t", "    ")
