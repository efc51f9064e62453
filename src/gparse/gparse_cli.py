"""
gparse CLI Entrypoint.

This module provides a command-line front end for the demo SELECT grammar. It reads a
query, parses it and prints every accepted result (or only the first N).

Features:
    - Read the query from a `.sql` file or an inline string.
    - Print the token stream instead of parsing (`--tokens`).
    - Stop after N results (`--limit`).
    - Turn on the parser's debug trace (`--debug`).

Example usage:
    gparse -s "SELECT a, b FROM t WHERE a > 1"
    gparse query.sql --limit 1
    gparse -s "select x from t" --debug

Functions:
    run_gparse(source: str, is_string: bool = False, limit: int | None = None,
               tokens: bool = False, debug: bool = False) -> int:
        Parses the query and prints results; returns how many were printed.

    main(argv: list[str] | None = None) -> None:
        Parses CLI arguments and invokes `run_gparse`. Exits with status 1 if the
        query has no parse.
"""

import argparse
import itertools
import logging
import sys

from gparse.gparse_lexer import TokenizeError
from gparse.gparse_sql import build_sql_parser


def run_gparse(
    source: str,
    is_string: bool = False,
    limit: int | None = None,
    tokens: bool = False,
    debug: bool = False,
) -> int:
    """
    Run the demo grammar over a query and print the results.

    Args:
        source (str): The query text or path to a `.sql` file.
        is_string (bool): If True, treats `source` as the query itself. Defaults to False.
        limit (int | None): Print at most this many results. Defaults to all of them.
        tokens (bool): Print the token stream instead of parsing. Defaults to False.
        debug (bool): Emit the parser's debug trace through `logging`. Defaults to False.

    Returns:
        int: Number of results (or tokens) printed.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.sql'.
    """
    if not is_string and not source.endswith(".sql"):
        raise ValueError("Only .sql files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    parser = build_sql_parser(debug=debug)

    if tokens:
        try:
            stream = parser.tokenize(source)
        except TokenizeError as e:
            print(e.msg, file=sys.stderr)
            return 0
        for tok in stream:
            print(repr(tok))
        return len(stream)

    count = 0
    for result in itertools.islice(parser.parse(source), limit):
        count += 1
        print(f"#{count}")
        print(result)
    if count == 0:
        print("No parse.", file=sys.stderr)
    return count


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the gparse CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as the query text instead of a file path.
        - `-n`, `--limit`: Print at most N results.
        - `-k`, `--tokens`: Print the token stream and exit.
        - `--debug`: Log the parser trace at DEBUG level to stderr.
    """
    parser = argparse.ArgumentParser(prog="gparse")
    parser.add_argument("source", help="Filename or raw query (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        metavar="N",
        help="Stop after N results (default: all)",
    )
    parser.add_argument(
        "-k", "--tokens", action="store_true", help="Print tokens instead of parsing"
    )
    parser.add_argument("--debug", action="store_true", help="Log the parse trace")

    args = parser.parse_args(argv)
    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be a positive integer")

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    count = run_gparse(
        source=args.source,
        is_string=args.string,
        limit=args.limit,
        tokens=args.tokens,
        debug=args.debug,
    )
    if count == 0:
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
