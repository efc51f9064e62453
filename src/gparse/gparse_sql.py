"""
A SQL-like SELECT grammar built with gparse.

This module is a client of the engine: it only uses the public grammar-authoring
surface (`GrammarParser.new_token`, `Empty`, `Sequence`, `Alternation`) and maps
every derivation to small dataclass values.

Supported syntax:
    SELECT expr [AS alias], ...
    FROM relation [[AS] alias], ...
    [WHERE expr]

Expressions, loosest binding first:
    - OR, AND, NOT
    - Comparisons: = <> < <= > >=
    - Arithmetic: + - then * /, unary minus
    - Parenthesized expressions
    - Numbers, 'strings' ('' escapes a quote), attributes (`field` or `relation.field`)

Keywords are case-insensitive.

Binary operator chains are collected into one `OperatorExpr` per precedence level,
so ``a + b - c`` is a single expression with three operands.

Example:
    >>> parser = build_sql_parser()
    >>> print(next(parser.parse("select a from t where a > 1")))
    Select {
        expressions: [
            a
        ],
        relations: [
            t
        ],
        condition: a > 1
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from gparse.gparse_engine import GrammarParser
from gparse.gparse_nodes import Alternation, Empty, GrammarNode, Sequence

# Display form of each operator, keyed by its normalized token text.
OPERATOR_TEXT: dict[str, str] = {
    "=": " = ",
    "<>": " <> ",
    "<": " < ",
    "<=": " <= ",
    ">": " > ",
    ">=": " >= ",
    "+": " + ",
    "-": " - ",
    "*": " * ",
    "/": " / ",
    "AND": " AND ",
    "OR": " OR ",
    "NEG": "-",
    "NOT": "NOT ",
}


@dataclass
class Value:
    value: Any

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return "'" + self.value.replace("'", "''") + "'"
        return str(self.value)


@dataclass
class Attr:
    relation: str | None
    field: str

    def __str__(self) -> str:
        return self.field if self.relation is None else f"{self.relation}.{self.field}"


@dataclass
class ParensExpr:
    """A parenthesized expression.

    Renders as its bare child; brackets are added where it appears as an operand.
    """

    child: Expr

    def __str__(self) -> str:
        return str(self.child)


@dataclass
class OperatorExpr:
    """An operator chain at one precedence level.

    ``units`` is a list of ``(operator, operand)`` pairs. The first operator is None
    for a binary chain; a unary expression has a single unit with its operator set.
    """

    units: list[tuple[str | None, Expr]]

    @property
    def is_unary(self) -> bool:
        return len(self.units) == 1 and self.units[0][0] is not None

    def __str__(self) -> str:
        parts = []
        for op, operand in self.units:
            text = str(operand)
            if _needs_brackets(operand):
                text = f"({text})"
            parts.append(("" if op is None else OPERATOR_TEXT[op]) + text)
        return "".join(parts)


Expr = Union[Value, Attr, ParensExpr, OperatorExpr]


def _needs_brackets(operand: Expr) -> bool:
    if isinstance(operand, Value):
        return isinstance(operand.value, (int, float)) and operand.value < 0
    return not isinstance(operand, Attr)


@dataclass
class SelectItem:
    expr: Expr
    alias: str | None = None

    def __str__(self) -> str:
        return str(self.expr) if self.alias is None else f"{self.expr} (alias: {self.alias})"


@dataclass
class Relation:
    name: str
    alias: str | None = None

    def __str__(self) -> str:
        return self.name if self.alias is None else f"{self.name} (alias: {self.alias})"


@dataclass
class Select:
    items: list[SelectItem] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)
    condition: Expr | None = None

    def __str__(self) -> str:
        items = ",\n\t\t".join(str(i) for i in self.items)
        relations = ",\n\t\t".join(str(r) for r in self.relations)
        condition = "null" if self.condition is None else str(self.condition)
        return (
            f"Select {{\n\texpressions: [\n\t\t{items}\n\t],\n"
            f"\trelations: [\n\t\t{relations}\n\t],\n"
            f"\tcondition: {condition}\n}}"
        ).expandtabs(4)


def _number(text: str) -> Value:
    return Value(float(text) if "." in text else int(text))


def _string(text: str) -> Value:
    return Value(text[1:-1].replace("''", "'"))


def _chain(results: tuple[Any, ...]) -> Any:
    first, rest = results
    if not rest:
        return first
    return OperatorExpr([(None, first)] + rest)


def _unary(results: tuple[Any, ...]) -> OperatorExpr:
    op, operand = results
    return OperatorExpr([(op, operand)])


def _rest_of(separator: GrammarNode, item: GrammarNode, name: str) -> Alternation:
    """Builds ``rest := separator item rest | <empty>`` yielding ``[(sep, item), ...]``."""
    rest = Alternation(name=name)
    rest.set_children(
        Sequence(separator, item, rest, builder=lambda r: [(r[0], r[1])] + r[2]),
        Empty(builder=list),
    )
    return rest


def _chain_of(item: GrammarNode, operator: GrammarNode, name: str) -> Sequence:
    """Builds ``item (operator item)*`` as one left-to-right `OperatorExpr`."""
    return Sequence(item, _rest_of(operator, item, f"{name}_rest"), builder=_chain, name=name)


def _list_of(item: GrammarNode, comma: GrammarNode, name: str) -> Sequence:
    rest = _rest_of(comma, item, f"{name}_rest")
    return Sequence(item, rest, builder=lambda r: [r[0]] + [x for _, x in r[1]], name=name)


def build_sql_parser(**kwargs: Any) -> GrammarParser:
    """Returns a GrammarParser for the SELECT grammar.

    Args:
        **kwargs: Passed to `GrammarParser` (e.g. ``logger``, ``debug``).
            ``ignore_case`` defaults to True.

    Returns:
        GrammarParser: A parser whose results are `Select` values.
    """
    kwargs.setdefault("ignore_case", True)
    p = GrammarParser(**kwargs)
    upper = str.upper

    # Keywords before IDENT: the first matching token type wins.
    p.new_token("WS", r"\s+", ignore=True)
    SELECT = p.new_token("SELECT", r"SELECT\b")
    FROM = p.new_token("FROM", r"FROM\b")
    WHERE = p.new_token("WHERE", r"WHERE\b")
    AS = p.new_token("AS", r"AS\b")
    AND = p.new_token("AND", r"AND\b", upper)
    OR = p.new_token("OR", r"OR\b", upper)
    NOT = p.new_token("NOT", r"NOT\b", upper)
    COMP = p.new_token("COMP", r"<>|<=|>=|=|<|>", str)
    PLUS = p.new_token("PLUS", r"\+", str)
    MINUS = p.new_token("MINUS", r"-", str)
    STAR = p.new_token("STAR", r"\*", str)
    SLASH = p.new_token("SLASH", r"/", str)
    LPAREN = p.new_token("LPAREN", r"\(")
    RPAREN = p.new_token("RPAREN", r"\)")
    COMMA = p.new_token("COMMA", r",")
    DOT = p.new_token("DOT", r"\.")
    NUMBER = p.new_token("NUMBER", r"\d+(?:\.\d+)?", _number)
    STRING = p.new_token("STRING", r"'(?:[^']|'')*'", _string)
    IDENT = p.new_token("IDENT", r"[A-Za-z_][A-Za-z0-9_]*", str)

    # Closed at the end; parenthesized atoms refer back to it.
    expr = Sequence(builder=_chain, name="expr")

    attr = Alternation(
        Sequence(IDENT, DOT, IDENT, builder=lambda r: Attr(r[0], r[2])),
        Sequence(IDENT, builder=lambda r: Attr(None, r[0])),
        name="attr",
    )
    atom = Alternation(
        NUMBER,
        STRING,
        attr,
        Sequence(LPAREN, expr, RPAREN, builder=lambda r: ParensExpr(r[1])),
        name="atom",
    )
    unary = Alternation(name="unary")
    unary.set_children(
        Sequence(MINUS, unary, builder=lambda r: OperatorExpr([("NEG", r[1])])),
        atom,
    )
    product = _chain_of(unary, Alternation(STAR, SLASH), "product")
    sum_ = _chain_of(product, Alternation(PLUS, MINUS), "sum")
    comparison = _chain_of(sum_, COMP, "comparison")
    not_expr = Alternation(name="not_expr")
    not_expr.set_children(Sequence(NOT, not_expr, builder=_unary), comparison)
    and_expr = _chain_of(not_expr, AND, "and_expr")
    expr.set_children(and_expr, _rest_of(OR, and_expr, "or_rest"))

    select_item = Alternation(
        Sequence(expr, AS, IDENT, builder=lambda r: SelectItem(r[0], r[2])),
        Sequence(expr, builder=lambda r: SelectItem(r[0])),
        name="select_item",
    )
    relation = Sequence(
        IDENT,
        Alternation(
            Sequence(AS, IDENT, builder=lambda r: r[1]),
            IDENT,
            Empty(),
            name="relation_alias",
        ),
        builder=lambda r: Relation(r[0], r[1]),
        name="relation",
    )
    where = Alternation(
        Sequence(WHERE, expr, builder=lambda r: r[1]),
        Empty(),
        name="where",
    )
    p.root = Sequence(
        SELECT,
        _list_of(select_item, COMMA, "select_list"),
        FROM,
        _list_of(relation, COMMA, "relation_list"),
        where,
        builder=lambda r: Select(r[1], r[3], r[4]),
        name="select",
    )
    return p


__all__ = [
    "Attr",
    "OperatorExpr",
    "ParensExpr",
    "Relation",
    "Select",
    "SelectItem",
    "Value",
    "build_sql_parser",
]
