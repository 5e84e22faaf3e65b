from __future__ import annotations

import unittest

from monadic_eval.errors import ParseError
from monadic_eval.lexer import TemplateChunk, tokenize


class LexerTests(unittest.TestCase):
    def _tokens(self, source: str, *, with_spans: bool = False):
        if with_spans:
            return [(tok.kind, tok.text, tok.pos, tok.end) for tok in tokenize(source) if tok.kind != "EOF"]
        return [(tok.kind, tok.text) for tok in tokenize(source) if tok.kind != "EOF"]

    def test_token_golden_marker_statement_spans(self) -> None:
        self.assertEqual(
            self._tokens("let(x, 1);", with_spans=True),
            [
                ("NAME", "let", 0, 3),
                ("LPAREN", "(", 3, 4),
                ("NAME", "x", 4, 5),
                ("COMMA", ",", 5, 6),
                ("NUMBER", "1", 7, 8),
                ("RPAREN", ")", 8, 9),
                ("SEMI", ";", 9, 10),
            ],
        )

    def test_eof_token_closes_the_stream(self) -> None:
        tokens = tokenize("ab")
        self.assertEqual((tokens[-1].kind, tokens[-1].pos, tokens[-1].end), ("EOF", 2, 2))

    def test_operators_lex_longest_first(self) -> None:
        self.assertEqual(
            self._tokens("a===b!==c<=d&&!e"),
            [
                ("NAME", "a"),
                ("OP", "==="),
                ("NAME", "b"),
                ("OP", "!=="),
                ("NAME", "c"),
                ("OP", "<="),
                ("NAME", "d"),
                ("OP", "&&"),
                ("OP", "!"),
                ("NAME", "e"),
            ],
        )

    def test_keywords_and_names(self) -> None:
        self.assertEqual(
            self._tokens("if else true false null iffy _x1"),
            [
                ("IF", "if"),
                ("ELSE", "else"),
                ("TRUE", "true"),
                ("FALSE", "false"),
                ("NULL", "null"),
                ("NAME", "iffy"),
                ("NAME", "_x1"),
            ],
        )

    def test_number_forms(self) -> None:
        self.assertEqual(
            self._tokens("0 42 3.5 1e3 2.5E-2"),
            [("NUMBER", "0"), ("NUMBER", "42"), ("NUMBER", "3.5"), ("NUMBER", "1e3"), ("NUMBER", "2.5E-2")],
        )

    def test_string_escapes_are_decoded(self) -> None:
        cases = {
            r'"a\nb"': "a\nb",
            r"'it\'s'": "it's",
            r'"tab\there"': "tab\there",
            r'"\x41é"': "Aé",
            '"semi;colon"': "semi;colon",
        }
        for source, expected in cases.items():
            with self.subTest(source=source):
                self.assertEqual(self._tokens(source), [("STRING", expected)])

    def test_comments_are_skipped(self) -> None:
        self.assertEqual(self._tokens("1 // line ; comment\n/* block ; } */ 2"), [("NUMBER", "1"), ("NUMBER", "2")])

    def test_template_parts_and_positions(self) -> None:
        (token,) = [tok for tok in tokenize("`a${x + 1}b`") if tok.kind != "EOF"]
        self.assertEqual(token.kind, "TEMPLATE")
        self.assertEqual((token.pos, token.end), (0, 12))
        self.assertEqual(
            token.parts,
            (
                TemplateChunk("a", 1),
                TemplateChunk("x + 1", 4, is_expr=True),
                TemplateChunk("b", 10),
            ),
        )

    def test_template_interpolation_may_contain_braces_and_strings(self) -> None:
        (token,) = [tok for tok in tokenize('`${f("}")}`') if tok.kind != "EOF"]
        self.assertEqual(token.parts, (TemplateChunk('f("}")', 3, is_expr=True),))

    def test_offset_shifts_every_position(self) -> None:
        tokens = tokenize("x `${y}`", offset=5)
        self.assertEqual([(tok.pos, tok.end) for tok in tokens], [(5, 6), (7, 13), (13, 13)])
        self.assertEqual(tokens[1].parts, (TemplateChunk("y", 10, is_expr=True),))

    def test_lexer_errors_report_spans(self) -> None:
        cases = [
            ('"abc', "Unterminated string literal", 0),
            ('"ab\ncd"', "Unterminated string literal", 0),
            ("1 /* open", "Unterminated block comment", 2),
            ("`abc", "Unterminated template literal", 0),
            (r'"\q"', "Unknown escape sequence", 1),
            ("x # y", "Unexpected character", 2),
        ]
        for source, message, start in cases:
            with self.subTest(source=source):
                with self.assertRaises(ParseError) as ctx:
                    tokenize(source)
                self.assertIn(message, ctx.exception.message)
                self.assertEqual(ctx.exception.start, start)

    def test_bare_assignment_points_at_let(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            tokenize("x = 1")
        self.assertEqual((ctx.exception.start, ctx.exception.end), (2, 3))
        self.assertIn("let(name, value)", str(ctx.exception))

    def test_offset_applies_to_errors(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            tokenize("a # b", offset=10)
        self.assertEqual(ctx.exception.start, 12)


if __name__ == "__main__":
    unittest.main()
