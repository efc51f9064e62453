"""
Lexical analyzer for gparse grammars.

This module turns raw input text into the flat token list consumed by the grammar nodes:

Classes:
    TokenType: A named regular-expression pattern with an "ignore" flag.
    Token: A single lexeme, tagged with the TokenType that produced it.
    Tokenizer: Applies an ordered list of token types to the front of the input.

Features:
    - First-match-wins: token types are tried in registration order, and the first
      one that matches at the current position is taken (no longest-match scan)
    - After every match the scan restarts from the first token type
    - Ignored token types (e.g. whitespace) consume input without producing tokens
    - Case-insensitive matching is a single switch on the tokenizer

Raises:
    TokenizeError: If input remains that no token type can match.

Example:
    >>> num = TokenType("NUM", r"\\d+")
    >>> plus = TokenType("PLUS", r"\\+")
    >>> Tokenizer([num, plus]).tokenize("2+3")
    [NUM("2"), PLUS("+"), NUM("3")]

Exports:
    - TokenType
    - Token
    - Tokenizer
    - TokenizeError
"""

from __future__ import annotations

import logging
import re
from typing import Any, Sequence


class TokenizeError(SyntaxError):
    """Raised when the tokenizer cannot match the remaining input.

    Attributes:
        remaining (str): The input left over when no token type matched.
    """

    def __init__(self, remaining: str) -> None:
        super().__init__(f"No token type matches input at: {remaining[:32]!r}")
        self.remaining = remaining


class TokenType:
    """A named lexical category.

    The pattern is always anchored at the start of the remaining input; callers
    write it without a leading ``^``.

    Attributes:
        name (str): Identity of the token type, used in diagnostics.
        pattern (str): The regular expression source.
        ignore (bool): If True, matched text is consumed but no token is emitted.
    """

    def __init__(self, name: str, pattern: str, ignore: bool = False) -> None:
        """Initializes a TokenType and compiles its pattern in both case modes.

        Args:
            name (str): The token type's name.
            pattern (str): Regular expression matched against the input prefix.
            ignore (bool, optional): Drop matches from the token list. Defaults to False.

        Raises:
            re.error: If the pattern is not a valid regular expression.
        """
        self.name = name
        self.pattern = pattern
        self.ignore = ignore
        self._regex = re.compile(pattern)
        self._regex_nocase = re.compile(pattern, re.IGNORECASE)

    def match(self, text: str, pos: int = 0, ignore_case: bool = False) -> str | None:
        """Matches this token type at ``pos`` of ``text``.

        Args:
            text (str): The full input text.
            pos (int, optional): Index at which the match must start. Defaults to 0.
            ignore_case (bool, optional): Match case-insensitively. Defaults to False.

        Returns:
            str | None: The matched text, or None if there is no non-empty match.
        """
        regex = self._regex_nocase if ignore_case else self._regex
        m = regex.match(text, pos)
        if m is None or m.end() == pos:
            return None
        return m.group(0)

    def __repr__(self) -> str:
        return f'{self.name}("{self.pattern}")'


class Token:
    """A concrete lexeme produced by the tokenizer.

    Attributes:
        type (TokenType): The token type that matched.
        value (str): The matched literal text.
    """

    __slots__ = ("type", "value")

    def __init__(self, type_: TokenType, value: str) -> None:
        self.type = type_
        self.value = value

    def __repr__(self) -> str:
        return f'{self.type.name}("{self.value}")'

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type is other.type
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((id(self.type), self.value))


class Tokenizer:
    """Splits input text into tokens using an ordered list of token types.

    Attributes:
        token_types (list[TokenType]): Token types in priority order.
        ignore_case (bool): Whether patterns match case-insensitively.
        logger (logging.Logger | None): Receives a debug line per emitted token.
    """

    def __init__(
        self,
        token_types: Sequence[TokenType],
        ignore_case: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.token_types: list[TokenType] = list(token_types)
        self.ignore_case = ignore_case
        self.logger = logger

    def match_one(self, text: str, pos: int) -> tuple[TokenType, str] | None:
        """Returns the first token type, in priority order, that matches at ``pos``."""
        for token_type in self.token_types:
            value = token_type.match(text, pos, self.ignore_case)
            if value is not None:
                return token_type, value
        return None

    def tokenize(self, text: str) -> list[Token]:
        """Tokenizes the whole input.

        Args:
            text (str): The input to split.

        Returns:
            list[Token]: Tokens in input order, without ignored matches.

        Raises:
            TokenizeError: If any input is left that no token type matches.
        """
        tokens: list[Token] = []
        pos = 0
        while pos < len(text):
            found = self.match_one(text, pos)
            if found is None:
                raise TokenizeError(text[pos:])
            token_type, value = found
            pos += len(value)
            if token_type.ignore:
                continue
            token = Token(token_type, value)
            if self.logger is not None:
                self.logger.debug("Got token: %r", token)
            tokens.append(token)
        return tokens


__all__ = ["Token", "TokenType", "TokenizeError", "Tokenizer"]
