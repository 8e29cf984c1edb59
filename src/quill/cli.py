"""Command-line entry point: build a program from a producer and print it."""

from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path

from .backend.pytree import UnsupportedValueError, unparse
from .backend.text import to_source
from .dsl import program
from .nodes import Node
from .sequence import SequenceError
from .splice import SpliceError, splice

FORMATS: list[str] = ["source", "python"]

USAGE: str = """\
quill [OPTIONS] TARGET

Arguments:
  TARGET              module:attribute naming a producer or a node

Options:
  --emit FORMAT       Output format: source (default), python
  --into FILE         Splice the generated statements into FILE (implies python)
  --function NAME     Function in FILE that receives them (required with --into)
  -o, --output FILE   Write output to FILE instead of stdout
  -h, --help          Show this help message
"""


class UsageError(Exception):
    """Bad command line; reported with exit code 2."""


def parse_args(argv: list[str]) -> tuple[str, str, str | None, str | None, str | None]:
    """Parse command-line arguments. Returns (target, fmt, into, function, output_file)."""
    target: str | None = None
    fmt = "source"
    into: str | None = None
    function: str | None = None
    output_file: str | None = None
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in ("--emit", "--into", "--function", "-o", "--output"):
            if i + 1 >= len(argv):
                raise UsageError(arg + " requires an argument")
            value = argv[i + 1]
            if arg == "--emit":
                fmt = value
            elif arg == "--into":
                into = value
            elif arg == "--function":
                function = value
            else:
                output_file = value
            i += 2
        elif arg.startswith("-"):
            raise UsageError("unknown flag '" + arg + "'")
        else:
            if target is not None:
                raise UsageError("unexpected argument '" + arg + "'")
            target = arg
            i += 1
    if target is None:
        raise UsageError("no target provided")
    if ":" not in target:
        raise UsageError("target must be module:attribute, got '" + target + "'")
    if fmt not in FORMATS:
        raise UsageError("unknown format '" + fmt + "'")
    if into is not None and function is None:
        raise UsageError("--into requires --function")
    if function is not None and into is None:
        raise UsageError("--function requires --into")
    return (target, fmt, into, function, output_file)


def load_target(target: str) -> Node:
    """Import module:attribute and turn it into a node.

    A node is used as is; a callable is driven as a top-level producer.
    """
    module_name, _, attr = target.partition(":")
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    value: object = importlib.import_module(module_name)
    for part in attr.split("."):
        value = getattr(value, part)
    if isinstance(value, Node):
        return value
    if callable(value):
        return program(value)
    raise TypeError("'" + target + "' is neither a node nor a producer")


def run(target: str, fmt: str, into: str | None, function: str | None) -> tuple[int, str]:
    """Build and render target. Returns (exit_code, output)."""
    try:
        node = load_target(target)
    except ImportError as e:
        print("error: cannot import '" + target + "': " + str(e), file=sys.stderr)
        return (1, "")
    except (AttributeError, TypeError, ValueError, SequenceError) as e:
        print("error: " + str(e), file=sys.stderr)
        return (1, "")
    if into is not None and function is not None:
        try:
            source = Path(into).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            print("error: cannot open '" + into + "'", file=sys.stderr)
            return (1, "")
        try:
            return (0, splice(source, function, node))
        except SyntaxError as e:
            print("error: cannot parse '" + into + "': " + str(e.msg), file=sys.stderr)
        except (SpliceError, UnsupportedValueError) as e:
            print("error: " + str(e), file=sys.stderr)
        return (1, "")
    if fmt == "python":
        try:
            return (0, unparse(node))
        except UnsupportedValueError as e:
            print("error: " + str(e), file=sys.stderr)
            return (1, "")
    return (0, to_source(node))


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]
    if "-h" in argv or "--help" in argv:
        print(USAGE, end="")
        return 0
    try:
        target, fmt, into, function, output_file = parse_args(argv)
    except UsageError as e:
        print("error: " + str(e), file=sys.stderr)
        return 2
    exit_code, output = run(target, fmt, into, function)
    if exit_code != 0:
        return exit_code
    if output_file is None:
        print(output)
        return 0
    try:
        Path(output_file).write_text(output + "\n", encoding="utf-8")
    except OSError:
        print("error: cannot write '" + output_file + "'", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
