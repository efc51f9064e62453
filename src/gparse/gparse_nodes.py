"""
Grammar nodes for the gparse backtracking parser.

A grammar is a graph of nodes. Every node implements one contract:

    parse(stream, log=None) -> Iterator[Any]

Each value yielded is one way the node can consume a prefix of the token stream,
starting at the stream's cursor. While a value is "current" (between the yield and
the next request) the stream cursor sits just past the tokens consumed for it. The
caller may move the cursor in the meantime; every node puts the cursor back where
it needs it before producing its next value.

Variants:
    Empty: Consumes nothing and yields exactly one value.
    Terminal: Consumes one token of a given TokenType.
    Sequence: Depth-first cross product over its children, left to right.
    Alternation: All values of each child, in declaration order.

The set of variants is closed: the parse algorithm is defined per variant, so
subclassing GrammarNode outside this module raises TypeError.

Recursive rules are built by creating a Sequence or Alternation first and attaching
children that refer back to it with `set_children()` / `add_child()`. Rules that
can reach themselves without consuming a token (left recursion) recurse forever.

Node names are diagnostic only and show up in the debug trace.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from gparse.gparse_lexer import Token, TokenType
from gparse.gparse_stream import TokenStream


class GrammarNode:
    """Base class of the four grammar node variants.

    Attributes:
        name (str | None): Optional name used in diagnostics.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError(
                f"{cls.__name__}: grammar node variants are fixed "
                "(Empty, Terminal, Sequence, Alternation)"
            )

    def __init__(self, name: str | None = None) -> None:
        self.name = name

    @property
    def label(self) -> str:
        return self.name or type(self).__name__

    def __str__(self) -> str:
        return self.label

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"

    def parse(
        self, stream: TokenStream, log: logging.Logger | None = None
    ) -> Iterator[Any]:
        """Lazily yields every value this node can produce at the stream cursor.

        Args:
            stream (TokenStream): The stream to consume from.
            log (logging.Logger | None, optional): Receives trace lines if given.

        Returns:
            Iterator[Any]: One value per way of consuming a prefix of the stream.
        """
        raise NotImplementedError  # pragma: no cover

    def _trace(
        self, log: logging.Logger | None, stream: TokenStream, msg: str, *args: Any
    ) -> None:
        if log is None:
            return
        token = stream.current()
        log.debug(
            '@"%s"\t`%s.parse` ' + msg,
            "" if token is None else token.value,
            self,
            *args,
        )


class Empty(GrammarNode):
    """Matches the empty input.

    Yields the builder's result, or None when there is no builder.
    """

    def __init__(
        self, builder: Callable[[], Any] | None = None, name: str | None = None
    ) -> None:
        super().__init__(name)
        self.builder = builder

    def parse(
        self, stream: TokenStream, log: logging.Logger | None = None
    ) -> Iterator[Any]:
        value = self.builder() if self.builder is not None else None
        self._trace(log, stream, "yields `%r`", value)
        yield value


class Terminal(GrammarNode):
    """Matches a single token of one TokenType.

    On a mismatch the cursor is left advanced; the enclosing node restores it.

    Attributes:
        token_type (TokenType): The token type to accept.
        builder (Callable[[Token], Any] | None): Maps the token to a value. Without
            a builder the Token itself is yielded.
    """

    def __init__(
        self,
        token_type: TokenType,
        builder: Callable[[Token], Any] | None = None,
        name: str | None = None,
    ) -> None:
        if not isinstance(token_type, TokenType):
            raise TypeError(f"Terminal needs a TokenType, got {token_type!r}")
        super().__init__(name)
        self.token_type = token_type
        self.builder = builder

    @property
    def label(self) -> str:
        return self.name or self.token_type.name

    def parse(
        self, stream: TokenStream, log: logging.Logger | None = None
    ) -> Iterator[Any]:
        token = stream.advance()
        if token is None or token.type is not self.token_type:
            self._trace(log, stream, "yields nothing")
            return
        value = self.builder(token) if self.builder is not None else token
        self._trace(log, stream, "yields `%r`", value)
        yield value


class _Composite(GrammarNode):
    """Shared child handling for Sequence and Alternation."""

    def __init__(self, *children: GrammarNode, name: str | None = None) -> None:
        super().__init__(name)
        self.children: list[GrammarNode] = []
        self.set_children(*children)

    def set_children(self, *children: GrammarNode) -> None:
        """Replaces all children."""
        for child in children:
            _check_node(child)
        self.children = list(children)

    def add_child(self, child: GrammarNode) -> GrammarNode:
        """Appends a child and returns it, so it can be built inline."""
        _check_node(child)
        self.children.append(child)
        return child


class Sequence(_Composite):
    """Matches its children one after another.

    Values are produced depth-first: for each value of the first child, every
    combination of the remaining children's values is tried before the first
    child's next value. Each complete combination is passed to the builder as a
    tuple (one entry per child); without a builder the tuple itself is yielded.
    A sequence with no children yields nothing.

    The child generators are kept on a list rather than nested, so a long
    sequence or a deeply right-recursive grammar costs one Python frame per
    nesting level instead of one per child.
    """

    def __init__(
        self,
        *children: GrammarNode,
        builder: Callable[[tuple[Any, ...]], Any] | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(*children, name=name)
        self.builder = builder

    def __str__(self) -> str:
        return f"{self.label}({', '.join(ch.label for ch in self.children)})"

    def parse(
        self, stream: TokenStream, log: logging.Logger | None = None
    ) -> Iterator[Any]:
        if not self.children:
            return
        count = len(self.children)
        # One iterator per child currently being explored, plus, for each child
        # holding a value, that value and the cursor it left.
        iterators = [self._start(0, stream, log)]
        results: list[Any] = []
        marks: list[int] = []
        while iterators:
            if len(results) == len(iterators):
                # resuming the top child: put the cursor back where it left it
                stream.restore(marks.pop())
                results.pop()
            try:
                result = next(iterators[-1])
            except StopIteration:
                iterators.pop()
                continue
            results.append(result)
            marks.append(stream.checkpoint())
            if len(results) < count:
                iterators.append(self._start(len(results), stream, log))
                continue
            values = tuple(results)
            value = self.builder(values) if self.builder is not None else values
            self._trace(log, stream, "yields `%r`", value)
            yield value

    def _start(
        self, index: int, stream: TokenStream, log: logging.Logger | None
    ) -> Iterator[Any]:
        child = self.children[index]
        self._trace(log, stream, "calls `%s.parse` at child %d", child, index)
        return child.parse(stream, log)


class Alternation(_Composite):
    """Matches any of its children.

    Every child is tried from the same starting position, in declaration order,
    and all of its values are yielded before the next child is tried. A child's
    value is passed through unchanged.
    """

    def __str__(self) -> str:
        return f"{self.label}[{' | '.join(ch.label for ch in self.children)}]"

    def parse(
        self, stream: TokenStream, log: logging.Logger | None = None
    ) -> Iterator[Any]:
        mark = stream.checkpoint()
        for child in self.children:
            stream.restore(mark)
            self._trace(log, stream, "calls `%s.parse`", child)
            for result in child.parse(stream, log):
                self._trace(log, stream, "yields `%r`", result)
                yield result


def _check_node(child: Any) -> None:
    if not isinstance(child, GrammarNode):
        raise TypeError(f"Expected a GrammarNode child, got {child!r}")


__all__ = ["Alternation", "Empty", "GrammarNode", "Sequence", "Terminal"]
