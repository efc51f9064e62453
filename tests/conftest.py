import pytest

from gparse.gparse_engine import GrammarParser
from gparse.gparse_lexer import TokenType
from gparse.gparse_nodes import Terminal


@pytest.fixture  # type: ignore[misc]
def arith() -> GrammarParser:
    """NUM / PLUS tokens with whitespace ignored and no root set."""
    p = GrammarParser()
    p.new_token("WS", r"\s+", ignore=True)
    p.new_token("NUM", r"\d+", builder=int)
    p.new_token("PLUS", r"\+")
    return p


@pytest.fixture  # type: ignore[misc]
def x_type() -> TokenType:
    return TokenType("X", r"x")


@pytest.fixture  # type: ignore[misc]
def x(x_type: TokenType) -> Terminal:
    return Terminal(x_type, builder=lambda tok: tok.value)
