"""
Quill Parser Package

Recursive descent parser producing the command tree for Quill programs.

Key Features:
- Seven expression precedence layers with FIRST-set dispatch
- Declarations and name uses resolved against the symbol table while parsing
- Typed syntax errors carrying the offending token's line
"""

from .parser import Parser, parse_string, parse_file
from .ast_nodes import *
from .errors import (
    ParseError, UnexpectedTokenError, UnexpectedEndOfInputError,
    LexicalError, InvalidAssignmentTargetError, NestingTooDeepError,
)

__all__ = [
    "Parser", "parse_string", "parse_file",
    "ParseError", "UnexpectedTokenError", "UnexpectedEndOfInputError",
    "LexicalError", "InvalidAssignmentTargetError", "NestingTooDeepError",

    # AST nodes
    "ASTNode", "ASTNodeType", "ASTVisitor",
    "BinaryOperator", "UnaryOperator", "FunctionOperator",
    "Expr", "SetExpr", "Const", "Binary", "Unary", "Function", "VariableRef", "Indexed",
    "ListElement", "SingleElement", "SpreadElement", "IfElement", "ForElement",
    "ListLiteral", "MapEntry", "MapLiteral",
    "Command", "Block", "Assign", "Print", "Assert", "If", "While", "DoWhile", "For",
]
