"""
Test suite for Quill statement parsing.

Tests cover:
- Declarations, print, assert and assignment
- Conditionals and loops
- Name resolution while parsing (flat and lexical scoping)
- Fail-fast diagnostics with line numbers
"""

import unittest
import dataclasses
import os
import sys
import tempfile

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from quill.config import ParserConfiguration, ScopeMode
from quill.parser.parser import parse_string, parse_file
from quill.parser.ast_nodes import (
    Block, Assign, Print, Assert, If, While, DoWhile, For,
    VariableRef, Indexed, Binary, MapLiteral, UnaryOperator,
)
from quill.parser.errors import (
    ParseError, UnexpectedTokenError, UnexpectedEndOfInputError,
    LexicalError, InvalidAssignmentTargetError, NestingTooDeepError,
)
from quill.lexer.errors import LexerError
from quill.analyzer.errors import DuplicateDeclarationError, UndeclaredNameError
from quill.printer import dump


LEXICAL = ParserConfiguration(scope_mode=ScopeMode.LEXICAL)


class TestStatementParsing(unittest.TestCase):
    """Test cases for individual statements."""

    def test_declaration_then_print(self):
        """Both references to x share the declared Variable."""
        program = parse_string("var x = 1; print(x + 1);")

        self.assertEqual(
            dump(program),
            "Block[Block[var x](Assign(VariableRef(x), Const(1))), "
            "Print(Binary(+, VariableRef(x), Const(1)))]")

        declaration, print_command = program.commands
        self.assertTrue(declaration.is_declaration)
        assign = declaration.commands[0]
        self.assertIs(assign.target.variable, print_command.expr.left.variable)
        self.assertIs(assign.target.variable, declaration.declarations[0])

    def test_empty_print(self):
        program = parse_string("print();")
        command = program.commands[0]
        self.assertIsInstance(command, Print)
        self.assertIsNone(command.expr)

    def test_declaration_flags_apply_to_every_name(self):
        block = parse_string("final var ?a, b = 2;").commands[0]

        self.assertEqual([v.name for v in block.declarations], ["a", "b"])
        for variable in block.declarations:
            self.assertTrue(variable.constant)
            self.assertTrue(variable.nullable)

        self.assertEqual(len(block.commands), 1)
        self.assertIs(block.commands[0].target.variable, block.declarations[1])

    def test_declaration_without_initializer(self):
        block = parse_string("var x;").commands[0]
        self.assertEqual(block.commands, ())
        self.assertFalse(block.declarations[0].nullable)

    def test_initializer_sees_new_variable(self):
        block = parse_string("var x = x;").commands[0]
        assign = block.commands[0]
        self.assertIs(assign.value.variable, block.declarations[0])

    def test_assignment_targets(self):
        program = parse_string("var l = [1]; l[0] = 2; l = [];")
        indexed_assign = program.commands[1]
        self.assertIsInstance(indexed_assign.target, Indexed)
        self.assertIsInstance(program.commands[2].target, VariableRef)

    def test_expression_statement(self):
        command = parse_string("var i = 0; i++;").commands[1]
        self.assertIsInstance(command, Assign)
        self.assertIsNone(command.target)
        self.assertEqual(command.value.op, UnaryOperator.POST_INC)

    def test_map_at_statement_level(self):
        """A '{' starting a statement is a map literal, not a block."""
        command = parse_string("{1: 2};").commands[0]
        self.assertIsInstance(command.value, MapLiteral)

    def test_assert(self):
        program = parse_string('assert(true); assert(1 < 2, "order");')
        self.assertIsInstance(program.commands[0], Assert)
        self.assertIsNone(program.commands[0].message)
        self.assertEqual(program.commands[1].message.value, "order")

    def test_if_else(self):
        program = parse_string("var x = 1; if (x > 0) print(x); else { print(); print(x); }")
        command = program.commands[1]

        self.assertIsInstance(command, If)
        self.assertIsInstance(command.condition, Binary)
        self.assertIsInstance(command.then_branch, Print)
        self.assertIsInstance(command.else_branch, Block)
        self.assertEqual(len(command.else_branch.commands), 2)

    def test_dangling_else_binds_to_nearest_if(self):
        program = parse_string("var a, b; if (a) if (b) print(1); else print(2);")
        outer = program.commands[1]
        self.assertIsNone(outer.else_branch)
        self.assertIsNotNone(outer.then_branch.else_branch)

    def test_while(self):
        command = parse_string("var i = 0; while (i < 3) i++;").commands[1]
        self.assertIsInstance(command, While)
        self.assertIsInstance(command.body, Assign)

    def test_do_while(self):
        command = parse_string("var i = 0; do { i++; } while (i < 3);").commands[1]
        self.assertIsInstance(command, DoWhile)
        self.assertIsInstance(command.body, Block)
        self.assertEqual(dump(command.condition), "Binary(<, VariableRef(i), Const(3))")

    def test_for_each(self):
        command = parse_string("var l = [1, 2]; for (n in l) print(n);").commands[1]

        self.assertIsInstance(command, For)
        self.assertEqual(command.variable.name, "n")
        self.assertTrue(command.variable.nullable)
        self.assertFalse(command.variable.constant)
        self.assertIs(command.body.expr.variable, command.variable)

    def test_empty_body(self):
        command = parse_string("if (true) {}").commands[0]
        self.assertEqual(command.then_branch.commands, ())

    def test_empty_program(self):
        program = parse_string("// nothing here\n")
        self.assertEqual(program.commands, ())

    def test_statement_lines(self):
        program = parse_string("var x = 0;\nwhile (x < 3)\n  x++;")
        loop = program.commands[1]
        self.assertEqual(loop.line, 2)
        self.assertEqual(loop.condition.line, 2)
        self.assertEqual(loop.body.value.line, 3)

    def test_nodes_are_frozen(self):
        command = parse_string("print();").commands[0]
        with self.assertRaises(dataclasses.FrozenInstanceError):
            command.expr = None

    def test_walk_visits_every_node(self):
        program = parse_string("var x = 1; print(x + 1);")
        names = [type(node).__name__ for node in program.walk()]
        self.assertEqual(names, ["Block", "Block", "Assign", "VariableRef", "Const",
                                 "Print", "Binary", "VariableRef", "Const"])


class TestParseErrors(unittest.TestCase):
    """Test cases for fail-fast diagnostics."""

    def _error(self, source: str, error_type, config=None):
        """Helper asserting that parsing raises the given error type."""
        with self.assertRaises(error_type) as ctx:
            parse_string(source, config=config)
        return ctx.exception

    def test_undeclared_assignment_target(self):
        error = self._error("\n\nx = 1;", UndeclaredNameError)
        self.assertEqual(error.line, 3)
        self.assertEqual(error.summary(), "03: Undeclared name [x]")

    def test_duplicate_declaration(self):
        error = self._error("var x;\nvar x;", DuplicateDeclarationError)
        self.assertEqual(error.summary(), "02: Duplicate declaration [x]")

    def test_duplicate_within_one_declaration(self):
        self._error("var a, a;", DuplicateDeclarationError)

    def test_invalid_assignment_target(self):
        error = self._error("1 = 2;", InvalidAssignmentTargetError)
        self.assertIsInstance(error, ParseError)
        self.assertEqual(error.summary(), "01: Invalid assignment target")
        self._error("var x; x + 1 = 2;", InvalidAssignmentTargetError)

    def test_missing_semicolon(self):
        error = self._error("var x = 1", UnexpectedEndOfInputError)
        self.assertEqual(error.summary(), "01: Unexpected end of file")

    def test_unexpected_closing_brace(self):
        error = self._error("print();\n}", UnexpectedTokenError)
        self.assertEqual(error.summary(), "02: Unexpected lexeme [}]")

    def test_unterminated_text(self):
        self._error('print("abc', UnexpectedEndOfInputError)

    def test_invalid_lexeme(self):
        error = self._error("print(#);", LexicalError)
        self.assertEqual(error.summary(), "01: Invalid lexeme [#]")

    def test_keyword_is_not_a_name(self):
        self._error("var while;", UnexpectedTokenError)

    def test_missing_in(self):
        self._error("var l; for (n l) print(n);", UnexpectedTokenError)

    def test_error_location_uses_filename(self):
        with self.assertRaises(UnexpectedTokenError) as ctx:
            parse_string("print(;", filename="prog.ql")
        self.assertEqual(ctx.exception.diagnostic.location.filename, "prog.ql")

    def test_diagnostic_details(self):
        error = self._error("print(;", UnexpectedTokenError)
        self.assertEqual(error.code, "P001")
        self.assertEqual(error.token.lexeme, ";")
        self.assertEqual(error.diagnostic.help_text, "Expected ')' here.")
        self.assertIn("ERROR: [P001] Unexpected lexeme [;]", str(error))

    def test_deep_nesting(self):
        source = "print(" + "(" * 5000 + "1" + ")" * 5000 + ");"
        error = self._error(source, NestingTooDeepError)
        self.assertEqual(error.code, "P005")
        self.assertEqual(error.summary(), "01: Expression nested too deeply")

    def test_deep_statement_nesting_with_lexical_scoping(self):
        error = self._error("if (true) " * 3000 + "print();", NestingTooDeepError, config=LEXICAL)
        self.assertEqual(error.line, 1)

    def test_moderate_nesting_parses(self):
        program = parse_string("print(" + "(" * 50 + "1" + ")" * 50 + ");")
        self.assertEqual(dump(program), "Block[Print(Const(1))]")


class TestScoping(unittest.TestCase):
    """Test cases for flat and lexical name scoping."""

    def test_flat_loop_variable_outlives_loop(self):
        program = parse_string("for (n in [1]) print(n); print(n);")
        loop, after = program.commands
        self.assertIs(after.expr.variable, loop.variable)

    def test_flat_loop_variable_blocks_redeclaration(self):
        with self.assertRaises(DuplicateDeclarationError):
            parse_string("for (n in [1]) print(n); var n;")

    def test_flat_block_declaration_is_program_wide(self):
        with self.assertRaises(DuplicateDeclarationError) as ctx:
            parse_string("var x = 1;\nif (true) { var x = 2; }")
        self.assertEqual(ctx.exception.line, 2)

    def test_loop_variable_declared_after_iterable(self):
        with self.assertRaises(UndeclaredNameError):
            parse_string("for (n in n) print(n);")

    def test_lexical_shadowing(self):
        program = parse_string(
            "var x = 1; if (true) { var x = 2; print(x); } print(x);", config=LEXICAL)

        outer_decl, conditional, outer_print = program.commands
        outer_x = outer_decl.declarations[0]
        inner_decl, inner_print = conditional.then_branch.commands
        inner_x = inner_decl.declarations[0]

        self.assertIsNot(inner_x, outer_x)
        self.assertIs(inner_print.expr.variable, inner_x)
        self.assertIs(outer_print.expr.variable, outer_x)

    def test_lexical_loop_variable_is_local(self):
        with self.assertRaises(UndeclaredNameError):
            parse_string("for (n in [1]) print(n); print(n);", config=LEXICAL)

    def test_lexical_comprehension_variable_is_local(self):
        parse_string("var l = [for (i in [1]) i]; var i = 0;", config=LEXICAL)
        with self.assertRaises(UndeclaredNameError):
            parse_string("var l = [for (i in [1]) i]; print(i);", config=LEXICAL)

    def test_lexical_single_statement_body_scope(self):
        parse_string("var y; while (false) var y = 1;", config=LEXICAL)

    def test_lexical_duplicate_in_same_block(self):
        with self.assertRaises(DuplicateDeclarationError):
            parse_string("if (true) { var z; var z; }", config=LEXICAL)

    def test_lexical_loop_variable_shares_body_frame(self):
        with self.assertRaises(DuplicateDeclarationError) as ctx:
            parse_string("for (i in [1]) {\n    var i;\n}", config=LEXICAL)
        self.assertEqual(ctx.exception.summary(), "02: Duplicate declaration [i]")

        with self.assertRaises(DuplicateDeclarationError):
            parse_string("for (i in [1]) var i;", config=LEXICAL)

    def test_lexical_loop_body_may_shadow_outer_names(self):
        program = parse_string("var i; for (n in [1]) { var i = n; }", config=LEXICAL)
        outer_i = program.commands[0].declarations[0]
        inner_i = program.commands[1].body.commands[0].declarations[0]
        self.assertIsNot(inner_i, outer_i)

    def test_scope_mode_from_string(self):
        config = ParserConfiguration(scope_mode="lexical")
        self.assertIs(config.scope_mode, ScopeMode.LEXICAL)


class TestParseFile(unittest.TestCase):
    """Test cases for parsing from disk."""

    def test_parse_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "prog.ql")
            with open(path, "w", encoding="utf-8") as f:
                f.write("var x = 1;\nx = x + 1;\n")

            program = parse_file(path)

        self.assertEqual(len(program.commands), 2)

    def test_parse_file_error_location(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "bad.ql")
            with open(path, "w", encoding="utf-8") as f:
                f.write("print(y);\n")

            with self.assertRaises(UndeclaredNameError) as ctx:
                parse_file(path)

        self.assertEqual(ctx.exception.diagnostic.location.filename, path)

    def test_parse_file_invalid_utf8(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "latin1.ql")
            with open(path, "wb") as f:
                f.write(b'var x;\nprint("\xff");\n')

            with self.assertRaises(LexerError) as ctx:
                parse_file(path)

        error = ctx.exception
        self.assertEqual(error.code, "L003")
        self.assertEqual(error.summary(), "02: Invalid lexeme [\\xff]")
        self.assertEqual(error.diagnostic.location.column, 8)

    def test_parse_file_windows_newlines(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "crlf.ql")
            with open(path, "wb") as f:
                f.write(b'var x = 1;\r\nprint("a\r\nb");\r\n')

            program = parse_file(path)

        self.assertEqual(program.commands[1].line, 2)
        self.assertEqual(program.commands[1].expr.value, "a\nb")


if __name__ == '__main__':
    unittest.main()
