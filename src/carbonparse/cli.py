"""Command-line interface for the Carbon parser.

Usage:
    carbon-parser parse <file.carbon>            # Check a file parses
    carbon-parser parse <file.carbon> --verbose  # Also show the parse tree
    carbon-parser parse <file.carbon> --ast      # Also show the AST
    carbon-parser authors
    carbon-parser help
    carbon-parser --version
"""

import argparse
import logging
import sys
from pathlib import Path

import carbonparse

AUTHOR = "Daniil Cherniavskyi"


def build_argparser():
    parser = argparse.ArgumentParser(
        prog="carbon-parser",
        description="A parser for the Carbon language",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {carbonparse.__version__}"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    parse_cmd = commands.add_parser("parse", help="Parse a Carbon source file")
    parse_cmd.add_argument("file", type=Path, metavar="FILE", help="Source file to parse")
    parse_cmd.add_argument(
        "-v", "--verbose", action="store_true", help="Print the parse tree"
    )
    parse_cmd.add_argument("--ast", action="store_true", help="Print the AST")
    parse_cmd.add_argument(
        "--positions", action="store_true", help="Show offsets in the parse tree"
    )

    commands.add_parser("authors", help="Show author information")
    commands.add_parser("help", help="Show this help message")
    return parser


def parse_file(path, verbose=False, show_ast=False, positions=False):
    """Parse one file and report the outcome.

    Returns:
        int: Process exit status
    """
    try:
        source = path.read_bytes()
    except OSError as e:
        print(f"Error: Failed to read file '{path}': {e.strerror or e}", file=sys.stderr)
        return 1

    print(f"Parsing file: {path}")
    print(f"Size: {len(source)} bytes")
    print()

    try:
        tree = carbonparse.parse(source, str(path))
    except carbonparse.ParseError as e:
        print("Parse error:\n")
        print(carbonparse.format_error(e), file=sys.stderr)
        return 1

    print("Parsing successful!")
    if verbose:
        print("\nParse tree:")
        print("=" * 60)
        print(tree.pretty(show_positions=positions))
    if show_ast:
        print("\nAST:")
        print("=" * 60)
        print(carbonparse.build_ast(tree).pretty())
    return 0


def show_authors():
    print(f"Carbon Parser v{carbonparse.__version__}")
    print(f"Author: {AUTHOR}")
    print("\nParser for Google's Carbon programming language")
    print("Built with Python, a packrat parsing engine and Lark")


def main(argv=None):
    parser = build_argparser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    match args.command:
        case "parse":
            return parse_file(args.file, args.verbose, args.ast, args.positions)
        case "authors":
            show_authors()
            return 0
        case "help":
            parser.print_help()
            return 0
        case _:
            parser.print_usage(sys.stderr)
            print("Error: a command is required", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
