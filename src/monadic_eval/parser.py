"""Statement splitter and expression parser for the embedded language."""

from __future__ import annotations

from dataclasses import dataclass

from .ast import (
    BindForm,
    Branch,
    Call,
    CombinatorForm,
    ConditionalGroup,
    DoForm,
    Expr,
    ExprStatement,
    Index,
    Infix,
    LetForm,
    ListExpr,
    Literal,
    Member,
    Name,
    Prefix,
    Program,
    StatementUnit,
    Template,
    Unit2Form,
    UnitForm,
)
from .errors import ParseError
from .lexer import Token, tokenize

_MARKER_ARITY = {
    "let": 2,
    "unit": 1,
    "unit2": 1,
    "bind": 2,
    "do": 1,
}

# Loosest binding first; every level is left-associative.
_BINARY_LEVELS = (
    ("||",),
    ("&&",),
    ("==", "!=", "===", "!=="),
    ("<", "<=", ">", ">="),
    ("+", "-"),
    ("*", "/", "%"),
)
_PREFIX_OPS = {"-", "+", "!"}
_CLOSERS = {"RPAREN": ")", "RBRACK": "]", "RBRACE": "}"}
_ATOM_EXPECTED = ("NUMBER", "STRING", "TEMPLATE", "NAME", "TRUE", "FALSE", "NULL", "LPAREN", "LBRACK")


@dataclass
class _Parser:
    tokens: list[Token]
    index: int = 0

    def parse_program(self) -> Program:
        units = self._parse_units("EOF")
        self._expect("EOF")
        return Program(units=units)

    def parse_expression_only(self) -> Expr:
        expr = self._parse_expression()
        self._expect("EOF")
        return expr

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _peek_next(self) -> Token:
        return self.tokens[min(self.index + 1, len(self.tokens) - 1)]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._peek()
        if tok.kind != kind:
            self._error(tok, expected=(kind,))
        return self._advance()

    def _error(self, tok: Token | None = None, *, message: str | None = None, expected: tuple[str, ...] = ()) -> None:
        token = tok if tok is not None else self._peek()
        detail = message if message is not None else "Unexpected token"
        normalized_expected = tuple(dict.fromkeys(expected))
        if token.kind == "EOF":
            found = "EOF"
        elif token.text:
            found = f"{token.kind}({token.text})"
        else:
            found = token.kind
        raise ParseError(detail, token.pos, token.end, expected=normalized_expected, found=found)

    def _match(self, kind: str) -> bool:
        if self._peek().kind == kind:
            self._advance()
            return True
        return False

    # Statement level

    def _parse_units(self, closing: str) -> tuple[StatementUnit, ...]:
        units: list[StatementUnit] = []
        while True:
            while self._match("SEMI"):
                pass
            tok = self._peek()
            if tok.kind in {closing, "EOF"}:
                return tuple(units)
            if tok.kind in _CLOSERS:
                self._error(tok, message=f"Unbalanced {_CLOSERS[tok.kind]!r}")

            unit = self._parse_unit()
            units.append(unit)
            if isinstance(unit, ConditionalGroup):
                continue
            if self._peek().kind not in {"SEMI", closing, "EOF"}:
                self._error(expected=("SEMI", closing))

    def _parse_unit(self) -> StatementUnit:
        tok = self._peek()
        if tok.kind == "IF":
            return self._parse_conditional()
        if tok.kind == "ELSE":
            self._error(tok, message="'else' without a matching 'if'")
        if tok.kind == "NAME" and tok.text in _MARKER_ARITY and self._peek_next().kind == "LPAREN":
            return self._parse_marker_form()
        return ExprStatement(expr=self._parse_expression(), pos=tok.pos)

    def _parse_marker_form(self) -> StatementUnit:
        head = self._advance()
        self._expect("LPAREN")
        arity = _MARKER_ARITY[head.text]

        name: str | None = None
        args: list[Expr] = []
        if head.text in {"let", "bind"} and self._peek().kind != "RPAREN":
            name = self._parse_binding_name()
            if self._peek().kind != "RPAREN":
                self._expect("COMMA")
        if self._peek().kind != "RPAREN":
            args = list(self._parse_arguments("RPAREN"))
        else:
            self._advance()

        given = len(args) + (1 if name is not None else 0)
        if given != arity:
            plural = "argument" if arity == 1 else "arguments"
            self._error(head, message=f"{head.text}() takes exactly {arity} {plural} ({given} given)")

        if head.text == "let":
            assert name is not None
            return LetForm(name=name, value=args[0], pos=head.pos)
        if head.text == "bind":
            assert name is not None
            return BindForm(name=name, value=args[0], pos=head.pos)
        if head.text == "unit":
            return UnitForm(value=args[0], pos=head.pos)
        if head.text == "unit2":
            return Unit2Form(value=args[0], pos=head.pos)
        return DoForm(value=args[0], pos=head.pos)

    def _parse_binding_name(self) -> str:
        tok = self._peek()
        if tok.kind == "NAME":
            self._advance()
            return tok.text
        if tok.kind == "STRING":
            if not (tok.text.isidentifier() and tok.text.isascii()):
                self._error(tok, message=f"Binding name {tok.text!r} is not an identifier")
            self._advance()
            return tok.text
        self._error(tok, message="Expected a binding name", expected=("NAME", "STRING"))
        raise AssertionError("unreachable")

    def _parse_conditional(self) -> ConditionalGroup:
        if_tok = self._expect("IF")
        branches = [self._parse_branch()]
        otherwise: tuple[StatementUnit, ...] | None = None
        while self._peek().kind == "ELSE":
            self._advance()
            if self._match("IF"):
                branches.append(self._parse_branch())
                continue
            if self._peek().kind != "LBRACE":
                self._error(message="Incomplete conditional chain: 'else' needs 'if' or a block", expected=("IF", "LBRACE"))
            otherwise = self._parse_body()
            break
        return ConditionalGroup(branches=tuple(branches), otherwise=otherwise, pos=if_tok.pos)

    def _parse_branch(self) -> Branch:
        if self._peek().kind != "LPAREN":
            self._error(message="Incomplete conditional chain: missing predicate", expected=("LPAREN",))
        self._advance()
        predicate = self._parse_expression()
        self._expect("RPAREN")
        if self._peek().kind != "LBRACE":
            self._error(message="Incomplete conditional chain: missing branch body", expected=("LBRACE",))
        return Branch(predicate=predicate, body=self._parse_body())

    def _parse_body(self) -> tuple[StatementUnit, ...]:
        open_tok = self._expect("LBRACE")
        units = self._parse_units("RBRACE")
        if self._peek().kind != "RBRACE":
            self._error(message=f"Unclosed '{{' opened at index {open_tok.pos}", expected=("RBRACE",))
        self._advance()
        for unit in units[:-1]:
            if _may_emit_combinator(unit):
                raise ParseError(
                    "Only the last statement of a branch body may use unit, unit2, bind or do",
                    unit.pos,
                    unit.pos,
                )
        return units

    # Expression level

    def _parse_expression(self) -> Expr:
        return self._parse_binary(0)

    def _parse_binary(self, level: int) -> Expr:
        if level == len(_BINARY_LEVELS):
            return self._parse_prefix()
        left = self._parse_binary(level + 1)
        ops = _BINARY_LEVELS[level]
        while self._peek().kind == "OP" and self._peek().text in ops:
            op = self._advance().text
            right = self._parse_binary(level + 1)
            left = Infix(op=op, left=left, right=right)
        return left

    def _parse_prefix(self) -> Expr:
        tok = self._peek()
        if tok.kind == "OP" and tok.text in _PREFIX_OPS:
            self._advance()
            return Prefix(op=tok.text, right=self._parse_prefix())
        return self._parse_postfix()

    def _parse_postfix(self) -> Expr:
        expr = self._parse_atom()
        while True:
            if self._match("LPAREN"):
                expr = Call(func=expr, args=self._parse_arguments("RPAREN"))
                continue
            if self._match("DOT"):
                name_tok = self._peek()
                if name_tok.kind != "NAME":
                    self._error(name_tok, expected=("NAME",))
                self._advance()
                expr = Member(value=expr, attr=name_tok.text)
                continue
            if self._match("LBRACK"):
                index = self._parse_expression()
                self._expect("RBRACK")
                expr = Index(value=expr, index=index)
                continue
            return expr

    def _parse_arguments(self, closing: str) -> tuple[Expr, ...]:
        items: list[Expr] = []
        if self._match(closing):
            return tuple(items)
        while True:
            items.append(self._parse_expression())
            if self._match(closing):
                return tuple(items)
            if not self._match("COMMA"):
                self._error(expected=("COMMA", closing))
            if self._match(closing):
                return tuple(items)

    def _parse_atom(self) -> Expr:
        tok = self._peek()

        if tok.kind == "NUMBER":
            self._advance()
            if any(ch in tok.text for ch in ".eE"):
                return Literal(value=float(tok.text))
            return Literal(value=int(tok.text))

        if tok.kind == "STRING":
            self._advance()
            return Literal(value=tok.text)

        if tok.kind == "TEMPLATE":
            self._advance()
            return self._parse_template(tok)

        if tok.kind in {"TRUE", "FALSE", "NULL"}:
            self._advance()
            return Literal(value={"TRUE": True, "FALSE": False, "NULL": None}[tok.kind])

        if tok.kind == "NAME":
            self._advance()
            return Name(value=tok.text)

        if self._match("LPAREN"):
            expr = self._parse_expression()
            self._expect("RPAREN")
            return expr

        if self._match("LBRACK"):
            return ListExpr(items=self._parse_arguments("RBRACK"))

        self._error(tok, expected=_ATOM_EXPECTED)
        raise AssertionError("unreachable")

    def _parse_template(self, tok: Token) -> Template:
        parts: list[str | Expr] = []
        for chunk in tok.parts:
            if not chunk.is_expr:
                parts.append(chunk.text)
                continue
            sub = _Parser(tokens=tokenize(chunk.text, offset=chunk.pos))
            if sub._peek().kind == "EOF":
                raise ParseError("Empty template interpolation", chunk.pos - 2, chunk.pos + 1)
            parts.append(sub.parse_expression_only())
        return Template(parts=tuple(parts))


def _may_emit_combinator(unit: StatementUnit) -> bool:
    if isinstance(unit, CombinatorForm):
        return True
    if isinstance(unit, ConditionalGroup):
        bodies = [branch.body for branch in unit.branches]
        if unit.otherwise is not None:
            bodies.append(unit.otherwise)
        return any(body and _may_emit_combinator(body[-1]) for body in bodies)
    return False


def parse_program(source: str) -> Program:
    tokens = tokenize(source)
    parser = _Parser(tokens=tokens)
    return parser.parse_program()


def parse(source: str) -> tuple[StatementUnit, ...]:
    """Split ``source`` into its ordered statement units."""
    return parse_program(source).units


def parse_expression(source: str) -> Expr:
    tokens = tokenize(source)
    parser = _Parser(tokens=tokens)
    return parser.parse_expression_only()
