"""
Token stream with a backtracking cursor.

The stream owns a fixed tuple of tokens and a single integer cursor. The cursor
starts at -1 ("before the first token") and points at the last consumed token.
Grammar nodes backtrack by saving the cursor with `checkpoint()` and resetting
it with `restore()`; neither copies any token data.

Classes:
    TokenStream: Indexable token sequence plus cursor.

Example:
    >>> stream = TokenStream(tokens)
    >>> mark = stream.checkpoint()
    >>> stream.advance()
    NUM("2")
    >>> stream.restore(mark)
    >>> stream.at_begin
    True
"""

from __future__ import annotations

from typing import Iterable, Iterator, overload

from gparse.gparse_lexer import Token


class TokenStream:
    """
    An immutable sequence of tokens with a mutable cursor.

    Invariant: ``-1 <= index <= len(tokens) - 1``. A cursor outside that range is
    a programming error and makes `at_begin` / `at_end` raise `IndexError`.

    Attributes:
        index (int): Position of the last consumed token, -1 before the first.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: tuple[Token, ...] = tuple(tokens)
        self.index: int = -1

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    @overload
    def __getitem__(self, item: int) -> Token: ...

    @overload
    def __getitem__(self, item: slice) -> tuple[Token, ...]: ...

    def __getitem__(self, item: int | slice) -> Token | tuple[Token, ...]:
        return self._tokens[item]

    def __repr__(self) -> str:
        return f"TokenStream({list(self._tokens)!r}, index={self.index})"

    @property
    def at_begin(self) -> bool:
        """True iff nothing has been consumed yet.

        Raises:
            IndexError: If the cursor is below -1.
        """
        if self.index < -1:
            raise IndexError(f"Token stream cursor out of range: {self.index}")
        return self.index == -1

    @property
    def at_end(self) -> bool:
        """True iff every token has been consumed.

        Raises:
            IndexError: If the cursor is past the last token.
        """
        last = len(self._tokens) - 1
        if self.index > last:
            raise IndexError(f"Token stream cursor out of range: {self.index}")
        return self.index == last

    def current(self) -> Token | None:
        """Returns the last consumed token, or None at the beginning."""
        return None if self.at_begin else self._tokens[self.index]

    def advance(self) -> Token | None:
        """Consumes and returns the next token.

        Returns:
            Token | None: The next token, or None (cursor unchanged) at the end.
        """
        if self.at_end:
            return None
        self.index += 1
        return self._tokens[self.index]

    def checkpoint(self) -> int:
        """Returns the cursor so it can be handed back to `restore`."""
        return self.index

    def restore(self, mark: int) -> None:
        """Resets the cursor to a value obtained from `checkpoint`.

        Raises:
            IndexError: If ``mark`` is not a valid cursor for this stream.
        """
        if not -1 <= mark <= len(self._tokens) - 1:
            raise IndexError(f"Invalid token stream checkpoint: {mark}")
        self.index = mark

    def remaining(self) -> tuple[Token, ...]:
        """Returns the tokens that have not been consumed yet."""
        return self._tokens[self.index + 1 :]


__all__ = ["TokenStream"]
