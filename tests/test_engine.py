import logging
from itertools import islice

import pytest
from hypothesis import given
from hypothesis import strategies as st

from gparse.gparse_engine import GrammarConfigError, GrammarParser
from gparse.gparse_lexer import TokenizeError, TokenType
from gparse.gparse_nodes import Alternation, Empty, Sequence, Terminal


def terminals(p: GrammarParser) -> tuple[Terminal, Terminal]:
    num = Terminal(p.token_types[1], builder=lambda tok: int(tok.value))
    plus = Terminal(p.token_types[2])
    return num, plus


def test_sum_of_two_numbers(arith: GrammarParser) -> None:
    num, plus = terminals(arith)
    arith.root = Sequence(num, plus, num, builder=lambda r: r[0] + r[2])
    assert list(arith.parse("2+3")) == [5]
    assert list(arith.parse(" 2 + 3 ")) == [5]


def test_full_consumption_picks_matching_branch(arith: GrammarParser) -> None:
    num, plus = terminals(arith)
    arith.root = Alternation(
        Sequence(num, builder=lambda r: ("num", r[0])),
        Sequence(num, plus, num, builder=lambda r: ("sum", r[0] + r[2])),
    )
    assert list(arith.parse("2")) == [("num", 2)]
    assert list(arith.parse("2+3")) == [("sum", 5)]


def test_prefix_match_is_not_accepted(arith: GrammarParser) -> None:
    num, plus = terminals(arith)
    arith.root = num
    assert list(arith.root.parse(arith.tokenize("2+3"))) == [2]
    assert list(arith.parse("2+3")) == []


def test_unmatched_input_gives_no_results(arith: GrammarParser) -> None:
    num, _ = terminals(arith)
    arith.root = num
    assert list(arith.parse("2*3")) == []
    with pytest.raises(TokenizeError):
        arith.tokenize("2*3")


def test_empty_input(arith: GrammarParser) -> None:
    num, _ = terminals(arith)
    arith.root = Alternation(num, Empty(lambda: "nothing"))
    assert list(arith.parse("")) == ["nothing"]
    assert list(arith.parse("   ")) == ["nothing"]


def test_missing_root_fails_before_iteration() -> None:
    p = GrammarParser()
    with pytest.raises(GrammarConfigError, match="No root grammar node"):
        p.parse("anything")


def test_duplicate_token_name_rejected(arith: GrammarParser) -> None:
    with pytest.raises(GrammarConfigError, match="Duplicate token type: NUM"):
        arith.new_token("NUM", r"[0-9]+")
    with pytest.raises(GrammarConfigError):
        arith.add_token_type(TokenType("PLUS", r"\+"))


def test_new_token_returns_terminal() -> None:
    p = GrammarParser()
    word = p.new_token("WORD", r"[a-z]+", builder=str.upper)
    raw = p.new_token("NUM", r"\d+")
    assert isinstance(word, Terminal)
    assert word.token_type is p.token_types[0]
    assert str(word) == "WORD"
    p.root = Sequence(word, raw)
    ((upper, token),) = list(p.parse("ab12"))
    assert upper == "AB"
    assert token.value == "12"
    assert token.type is raw.token_type


def test_ambiguous_grammar_enumerates_every_parse() -> None:
    p = GrammarParser()
    x = p.new_token("X", r"x")
    one_or_two = Alternation(
        Sequence(x, builder=lambda r: 1),
        Sequence(x, x, builder=lambda r: 2),
    )
    p.root = Sequence(one_or_two, one_or_two)
    assert list(p.parse("xxx")) == [(1, 2), (2, 1)]
    assert list(p.parse("xx")) == [(1, 1)]
    assert list(p.parse("xxxx")) == [(2, 2)]


def test_results_are_lazy() -> None:
    p = GrammarParser()
    x = p.new_token("X", r"x")
    built: list[int] = []

    def count(r: tuple[object, ...]) -> int:
        built.append(len(r))
        return len(built)

    p.root = Alternation(*(Sequence(x, builder=count) for _ in range(5)))
    assert list(islice(p.parse("x"), 2)) == [1, 2]
    assert built == [1, 1]


def test_parse_is_repeatable(arith: GrammarParser) -> None:
    num, plus = terminals(arith)
    expr = Alternation(name="expr")
    expr.set_children(Sequence(num, plus, expr, builder=lambda r: r[0] + r[2]), num)
    arith.root = expr
    first = list(arith.parse("1+2+3"))
    assert first == [6]
    assert list(arith.parse("1+2+3")) == first


@pytest.mark.parametrize("terms", [200, 300])  # type: ignore[misc]
def test_deep_right_recursion(arith: GrammarParser, terms: int) -> None:
    num, plus = terminals(arith)
    expr = Alternation(name="expr")
    expr.set_children(Sequence(num, plus, expr, builder=lambda r: r[0] + r[2]), num)
    arith.root = expr
    assert list(arith.parse("+".join(["1"] * terms))) == [terms]


def test_interleaved_parses_do_not_share_state(arith: GrammarParser) -> None:
    num, plus = terminals(arith)
    expr = Alternation(name="expr")
    expr.set_children(Sequence(num, plus, expr, builder=lambda r: r[0] + r[2]), num)
    arith.root = expr
    a = arith.parse("1+1")
    b = arith.parse("5+5+5")
    assert next(b) == 15
    assert next(a) == 2


def test_ignore_case_flag() -> None:
    p = GrammarParser()
    p.root = p.new_token("KW", r"SELECT")
    assert list(p.parse("select")) == []
    p.ignore_case = True
    assert len(list(p.parse("select"))) == 1


def test_builder_errors_propagate(arith: GrammarParser) -> None:
    num, _ = terminals(arith)
    arith.root = Sequence(num, builder=lambda r: 1 // 0)
    with pytest.raises(ZeroDivisionError):
        list(arith.parse("1"))


def test_debug_trace(caplog: pytest.LogCaptureFixture, arith: GrammarParser) -> None:
    caplog.set_level(logging.DEBUG, logger="gparse")
    num, plus = terminals(arith)
    arith.root = Alternation(num, Sequence(num, plus, num, builder=lambda r: r[0] + r[2]))
    arith.debug = True
    assert list(arith.parse("2+3")) == [5]
    messages = caplog.messages
    assert 'Got token: NUM("2")' in messages
    assert "Start to parse the tokens" in messages
    assert 'Parser discards result `2` for unparsed tokens: PLUS("+"), NUM("3")' in messages
    assert "Parser accepts result `5`" in messages

    caplog.clear()
    assert list(arith.parse("2*3")) == []
    assert any(m.startswith("Failed to tokenize") for m in caplog.messages)


def test_injected_logger(caplog: pytest.LogCaptureFixture) -> None:
    log = logging.getLogger("gparse.injected")
    caplog.set_level(logging.DEBUG, logger="gparse.injected")
    p = GrammarParser(logger=log, debug=True)
    p.root = p.new_token("X", r"x")
    list(p.parse("x"))
    assert caplog.records
    assert {r.name for r in caplog.records} == {"gparse.injected"}


def test_no_trace_unless_debug(
    caplog: pytest.LogCaptureFixture, arith: GrammarParser
) -> None:
    caplog.set_level(logging.DEBUG)
    num, _ = terminals(arith)
    arith.root = num
    assert list(arith.parse("7")) == [7]
    assert caplog.records == []


@given(st.lists(st.integers(min_value=0, max_value=10**6), min_size=1, max_size=15))  # type: ignore[misc]
def test_right_recursive_sum(numbers: list[int]) -> None:
    p = GrammarParser()
    p.new_token("WS", r"\s+", ignore=True)
    num = p.new_token("NUM", r"\d+", builder=int)
    plus = p.new_token("PLUS", r"\+")
    expr = Alternation(name="expr")
    expr.set_children(Sequence(num, plus, expr, builder=lambda r: r[0] + r[2]), num)
    p.root = expr
    assert list(p.parse(" + ".join(map(str, numbers)))) == [sum(numbers)]


@given(st.integers(min_value=1, max_value=7))  # type: ignore[misc]
def test_ambiguous_split_count(length: int) -> None:
    # every way to split `length` x's into runs of 1 or 2
    p = GrammarParser()
    x = p.new_token("X", r"x")
    runs = Alternation(name="runs")
    run = Alternation(Sequence(x, builder=lambda r: 1), Sequence(x, x, builder=lambda r: 2))
    runs.set_children(Sequence(run, runs, builder=lambda r: (r[0],) + r[1]), Sequence(run))
    p.root = runs
    results = list(p.parse("x" * length))
    fib = [1, 1]
    for _ in range(length):
        fib.append(fib[-1] + fib[-2])
    assert len(results) == fib[length]
    assert all(sum(r) == length for r in results)
    assert len(set(results)) == len(results)
