"""
Grammar parser engine.

`GrammarParser` ties the pieces together: it keeps the ordered registry of token
types, the root grammar node, the case-sensitivity switch and the logger. Calling
`parse()` tokenizes the input, runs the root node over a fresh TokenStream and keeps
only the results that consumed every token.

Parsing is lazy. `parse()` returns an iterator; each accepted result is computed only
when requested, so callers can stop after the first one (or the first N) without
exploring the rest of an ambiguous grammar.

Example:
    >>> p = GrammarParser()
    >>> num = p.new_token("NUM", r"\\d+", builder=int)
    >>> plus = p.new_token("PLUS", r"\\+")
    >>> p.root = Sequence(num, plus, num, builder=lambda r: r[0] + r[2])
    >>> list(p.parse("2+3"))
    [5]

Raises:
    GrammarConfigError: If `parse()` is called without a root node, or a token
        name is registered twice.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from gparse.gparse_lexer import Token, TokenizeError, Tokenizer, TokenType
from gparse.gparse_nodes import GrammarNode, Terminal
from gparse.gparse_stream import TokenStream

default_logger = logging.getLogger("gparse")


class GrammarConfigError(RuntimeError):
    """Raised when a grammar is not set up well enough to parse."""


class GrammarParser:
    """Tokenizes input and enumerates every full parse of the root grammar node.

    Attributes:
        root (GrammarNode | None): Start rule of the grammar.
        ignore_case (bool): Match token patterns case-insensitively.
        logger (logging.Logger): Destination of the debug trace.
        debug (bool): Emit trace lines for tokens, node calls and results.
    """

    def __init__(
        self,
        root: GrammarNode | None = None,
        ignore_case: bool = False,
        logger: logging.Logger | None = None,
        debug: bool = False,
    ) -> None:
        self.root = root
        self.ignore_case = ignore_case
        self.logger = logger if logger is not None else default_logger
        self.debug = debug
        self._token_types: list[TokenType] = []

    @property
    def token_types(self) -> tuple[TokenType, ...]:
        """Registered token types, in priority order."""
        return tuple(self._token_types)

    def add_token_type(self, token_type: TokenType) -> TokenType:
        """Registers a token type after all previously registered ones.

        Raises:
            GrammarConfigError: If a token type with the same name exists.
        """
        if any(t.name == token_type.name for t in self._token_types):
            raise GrammarConfigError(f"Duplicate token type: {token_type.name}")
        self._token_types.append(token_type)
        return token_type

    def new_token(
        self,
        name: str,
        pattern: str,
        builder: Callable[[str], Any] | None = None,
        ignore: bool = False,
    ) -> Terminal:
        """Registers a token type and returns a Terminal that matches it.

        Args:
            name (str): Token type name.
            pattern (str): Regular expression, anchored at the current input position.
            builder (Callable[[str], Any] | None, optional): Maps the matched text to
                the terminal's value. Without it the Token is the value.
            ignore (bool, optional): Consume matches without emitting tokens.

        Returns:
            Terminal: A grammar node accepting one token of the new type.
        """
        token_type = self.add_token_type(TokenType(name, pattern, ignore))
        token_builder: Callable[[Token], Any] | None = None
        if builder is not None:

            def token_builder(token: Token) -> Any:
                return builder(token.value)

        return Terminal(token_type, token_builder, name=name)

    def _log(self) -> logging.Logger | None:
        return self.logger if self.debug else None

    def tokenize(self, text: str) -> TokenStream:
        """Tokenizes ``text`` with the registered token types.

        Raises:
            TokenizeError: If part of the input matches no token type.
        """
        tokenizer = Tokenizer(self._token_types, self.ignore_case, self._log())
        return TokenStream(tokenizer.tokenize(text))

    def parse(self, text: str) -> Iterator[Any]:
        """Parses ``text`` and lazily yields every accepted result.

        A result is accepted only if the root node consumed all tokens to produce
        it. Input that cannot be tokenized, or that has no full parse, gives an
        empty iterator.

        Args:
            text (str): The input to parse.

        Returns:
            Iterator[Any]: Accepted results, in the order the root node produces them.

        Raises:
            GrammarConfigError: Immediately, if no root node is set.
        """
        if self.root is None:
            raise GrammarConfigError("No root grammar node set")
        return self._parse(self.root, text)

    def _parse(self, root: GrammarNode, text: str) -> Iterator[Any]:
        log = self._log()
        try:
            stream = self.tokenize(text)
        except TokenizeError as e:
            if log is not None:
                log.debug("Failed to tokenize the input string: %s", e.msg)
            return
        if log is not None:
            log.debug("Start to parse the tokens")
        for result in root.parse(stream, log):
            if not stream.at_end:
                if log is not None:
                    log.debug(
                        "Parser discards result `%r` for unparsed tokens: %s",
                        result,
                        ", ".join(repr(t) for t in stream.remaining()),
                    )
                continue
            if log is not None:
                log.debug("Parser accepts result `%r`", result)
            yield result


__all__ = ["GrammarConfigError", "GrammarParser"]
