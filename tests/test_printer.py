"""
Test suite for the Quill printers.

Tests cover:
- Structural tree dumps
- Source re-rendering and its round trip through the parser
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from quill.config import ParserConfiguration, ScopeMode
from quill.parser.parser import parse_string
from quill.printer import dump, format_source, quote


ROUND_TRIP_PROGRAMS = [
    "var x = 1; print(x + 1);",
    "final var ?a = null, b; b = a ?? 2 * 3 - 1;",
    "var i = 0; while (i < 10 && i != 5) { i++; if (i % 2 == 0) print(i); else print(); }",
    "var i = 0; do i--; while (i > -3);",
    'var m = {"k": [1, 2], "e": {}}; m["k"][0] = length(keys(m));',
    "var l = [1, ...[2, 3], if (true) 4 else 5, for (n in [6]) n * 2]; for (v in l) print(v);",
    'assert(tobool(toint("1")), "conversion"); assert(!false);',
    "var x = 1; print(-(-x)); print(-x++); print(--x); print((x + 1) * x);",
    "({1: 2}); ({}++);",
    'print("tab\\t quote\\" backslash\\\\ newline\\n");',
    "var a = 1, b = 2; if (a <= b) if (b >= a) print(a); else print(b);",
    "var r = random(10) / 2 / 3;",
]


class TestTreeDumper(unittest.TestCase):
    """Test cases for the structural dump."""

    def test_expression_dump(self):
        program = parse_string("print(1 + 2 * 3);")
        self.assertEqual(dump(program.commands[0].expr),
                         "Binary(+, Const(1), Binary(*, Const(2), Const(3)))")

    def test_command_dump(self):
        program = parse_string("var ?l = [1]; for (n in l) { print(); assert(n == 1, \"one\"); }")
        self.assertEqual(dump(program.commands[0]),
                         "Block[var ?l](Assign(VariableRef(l), List(Single(Const(1)))))")
        self.assertEqual(
            dump(program.commands[1]),
            'For(n, VariableRef(l), Block[Print(), '
            'Assert(Binary(==, VariableRef(n), Const(1)), Const("one"))])')

    def test_statement_dump(self):
        program = parse_string("var i = 0; do i++; while (i < 2); if (i > 0) print(i); else print();")
        self.assertEqual(dump(program.commands[1]),
                         "DoWhile(Assign(Unary(post_inc, VariableRef(i))), "
                         "Binary(<, VariableRef(i), Const(2)))")
        self.assertEqual(dump(program.commands[2]),
                         "If(Binary(>, VariableRef(i), Const(0)), "
                         "Print(VariableRef(i)), Print())")


class TestSourcePrinter(unittest.TestCase):
    """Test cases for re-rendering source."""

    def _format(self, source: str, config=None) -> str:
        return format_source(parse_string(source, config=config))

    def test_declaration(self):
        self.assertEqual(self._format("var x = 1 + 2 * 3;"), "var x = 1 + (2 * 3);\n")
        self.assertEqual(self._format("final var ?a = null, b;"), "final var ?a = null, b;\n")

    def test_nested_bodies_are_indented(self):
        source = "var i = 0; while (i < 3) { i++; if (i == 2) { print(i); } }"
        expected = (
            "var i = 0;\n"
            "while (i < 3) {\n"
            "    i++;\n"
            "    if (i == 2) {\n"
            "        print(i);\n"
            "    }\n"
            "}\n"
        )
        self.assertEqual(self._format(source), expected)

    def test_indent_width(self):
        program = parse_string("if (true) { print(); }")
        self.assertEqual(format_source(program, indent=2), "if (true) {\n  print();\n}\n")

    def test_single_statement_body_stays_inline(self):
        self.assertEqual(self._format("var x; if (x) x = 1; else x = 2;"),
                         "var x;\nif (x) x = 1; else x = 2;\n")

    def test_nested_negation_keeps_parentheses(self):
        self.assertEqual(self._format("var x; print(-(-x));"), "var x;\nprint(-(-x));\n")

    def test_map_statement_is_parenthesized(self):
        self.assertEqual(self._format("({1: 2});"), "({1: 2});\n")

    def test_text_is_escaped(self):
        self.assertEqual(quote('a"b\n'), '"a\\"b\\n"')
        self.assertEqual(self._format('print("a\\"b");'), 'print("a\\"b");\n')

    def test_empty_program(self):
        self.assertEqual(self._format(""), "")

    def test_round_trip(self):
        """Formatting then re-parsing yields the same tree."""
        for source in ROUND_TRIP_PROGRAMS:
            with self.subTest(source=source):
                parsed = parse_string(source)
                reparsed = parse_string(format_source(parsed))
                self.assertEqual(dump(reparsed), dump(parsed))

    def test_round_trip_with_lexical_scoping(self):
        config = ParserConfiguration(scope_mode=ScopeMode.LEXICAL)
        source = "var x = 1; for (x2 in [x]) { var x = x2; print(x); } var l = [for (x in [1]) x];"

        parsed = parse_string(source, config=config)
        reparsed = parse_string(format_source(parsed), config=config)
        self.assertEqual(dump(reparsed), dump(parsed))


if __name__ == '__main__':
    unittest.main()
