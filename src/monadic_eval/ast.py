"""AST nodes for embedded expressions and the statement units built from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Literal:
    value: object


@dataclass(frozen=True)
class Name:
    value: str


@dataclass(frozen=True)
class ListExpr:
    items: tuple["Expr", ...]


@dataclass(frozen=True)
class Template:
    parts: tuple[Union[str, "Expr"], ...]


@dataclass(frozen=True)
class Prefix:
    op: str
    right: "Expr"


@dataclass(frozen=True)
class Infix:
    op: str
    left: "Expr"
    right: "Expr"


@dataclass(frozen=True)
class Call:
    func: "Expr"
    args: tuple["Expr", ...]


@dataclass(frozen=True)
class Member:
    value: "Expr"
    attr: str


@dataclass(frozen=True)
class Index:
    value: "Expr"
    index: "Expr"


Expr = Union[Literal, Name, ListExpr, Template, Prefix, Infix, Call, Member, Index]


# Statement units. Each one yields at most one marker when evaluated.


@dataclass(frozen=True)
class ExprStatement:
    expr: Expr
    pos: int


@dataclass(frozen=True)
class LetForm:
    name: str
    value: Expr
    pos: int


@dataclass(frozen=True)
class UnitForm:
    value: Expr
    pos: int


@dataclass(frozen=True)
class Unit2Form:
    value: Expr
    pos: int


@dataclass(frozen=True)
class BindForm:
    name: str
    value: Expr
    pos: int


@dataclass(frozen=True)
class DoForm:
    value: Expr
    pos: int


@dataclass(frozen=True)
class Branch:
    predicate: Expr
    body: tuple["StatementUnit", ...]


@dataclass(frozen=True)
class ConditionalGroup:
    """An ``if`` / ``else if`` chain with an optional unconditional ``else`` body."""

    branches: tuple[Branch, ...]
    otherwise: tuple["StatementUnit", ...] | None
    pos: int


@dataclass(frozen=True)
class Program:
    units: tuple["StatementUnit", ...]


StatementUnit = Union[ExprStatement, LetForm, UnitForm, Unit2Form, BindForm, DoForm, ConditionalGroup]
CombinatorForm = (UnitForm, Unit2Form, BindForm, DoForm)
