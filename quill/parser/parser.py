"""
Quill Recursive Descent Parser

Consumes tokens one at a time from a lexer and builds the command tree in a
single left-to-right pass. Name resolution happens during the same pass:
declarations are entered in the symbol table as they are parsed and every name
use is bound to its Variable on the spot.

Grammar (one function per rule):

    code      ::= { cmd }
    cmd       ::= decl | print | assert | if | while | dowhile | for | assign
    decl      ::= [ final ] var [ '?' ] name [ '=' expr ] { ',' name [ '=' expr ] } ';'
    print     ::= print '(' [ expr ] ')' ';'
    assert    ::= assert '(' expr [ ',' expr ] ')' ';'
    if        ::= if '(' expr ')' body [ else body ]
    while     ::= while '(' expr ')' body
    dowhile   ::= do body while '(' expr ')' ';'
    for       ::= for '(' name in expr ')' body
    body      ::= cmd | '{' code '}'
    assign    ::= [ expr '=' ] expr ';'
    expr      ::= cond [ '??' cond ]
    cond      ::= rel { ( '&&' | '||' ) rel }
    rel       ::= arith [ ( '<' | '>' | '<=' | '>=' | '==' | '!=' ) arith ]
    arith     ::= term { ( '+' | '-' ) term }
    term      ::= prefix { ( '*' | '/' | '%' ) prefix }
    prefix    ::= [ '!' | '-' | '++' | '--' ] factor
    factor    ::= ( '(' expr ')' | rvalue ) [ '++' | '--' ]
    rvalue    ::= const | function | lvalue | list | map
    lvalue    ::= name { '[' expr ']' }
    list      ::= '[' [ l-elem { ',' l-elem } ] ']'
    l-elem    ::= expr | '...' expr | if '(' expr ')' l-elem [ else l-elem ]
                | for '(' name in expr ')' l-elem
    map       ::= '{' [ expr ':' expr { ',' expr ':' expr } ] '}'

Binary and Unary nodes take the line of their operator token, so an operator
that ends a line reports that line rather than the line of the next operand.
Input nested past the interpreter recursion limit fails with
NestingTooDeepError instead of escaping as RecursionError.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from ..config import ParserConfiguration
from ..lexer.tokens import Token, TokenType
from ..lexer.lexer import Lexer, read_source
from ..analyzer.symbol_table import SymbolTable, Variable, ScopeKind
from .ast_nodes import (
    Expr, SetExpr, Const, Binary, Unary, Function, VariableRef, Indexed,
    ListLiteral, ListElement, SingleElement, SpreadElement, IfElement, ForElement,
    MapLiteral, MapEntry, Command, Block, Assign, Print, Assert, If, While, DoWhile, For,
    BinaryOperator, UnaryOperator, FunctionOperator,
)
from .errors import (
    create_unexpected_token_error, create_unexpected_eof_error,
    create_lexical_error, create_invalid_assignment_target_error,
    create_nesting_too_deep_error,
)

logger = logging.getLogger(__name__)


# ============================================================================
# FIRST sets and operator tables
# ============================================================================

CONSTANT_FIRST = frozenset({
    TokenType.NULL, TokenType.FALSE, TokenType.TRUE, TokenType.NUMBER, TokenType.TEXT,
})

FUNCTION_OPERATORS = {
    TokenType.READ: FunctionOperator.READ,
    TokenType.RANDOM: FunctionOperator.RANDOM,
    TokenType.LENGTH: FunctionOperator.LENGTH,
    TokenType.KEYS: FunctionOperator.KEYS,
    TokenType.VALUES: FunctionOperator.VALUES,
    TokenType.TOBOOL: FunctionOperator.TOBOOL,
    TokenType.TOINT: FunctionOperator.TOINT,
    TokenType.TOSTR: FunctionOperator.TOSTR,
}

PREFIX_OPERATORS = {
    TokenType.NOT: UnaryOperator.NOT,
    TokenType.SUB: UnaryOperator.NEG,
    TokenType.INC: UnaryOperator.PRE_INC,
    TokenType.DEC: UnaryOperator.PRE_DEC,
}

POSTFIX_OPERATORS = {
    TokenType.INC: UnaryOperator.POST_INC,
    TokenType.DEC: UnaryOperator.POST_DEC,
}

LOGICAL_OPERATORS = {
    TokenType.AND: BinaryOperator.AND,
    TokenType.OR: BinaryOperator.OR,
}

RELATIONAL_OPERATORS = {
    TokenType.LOWER_THAN: BinaryOperator.LOWER_THAN,
    TokenType.GREATER_THAN: BinaryOperator.GREATER_THAN,
    TokenType.LOWER_EQUAL: BinaryOperator.LOWER_EQUAL,
    TokenType.GREATER_EQUAL: BinaryOperator.GREATER_EQUAL,
    TokenType.EQUAL: BinaryOperator.EQUAL,
    TokenType.NOT_EQUAL: BinaryOperator.NOT_EQUAL,
}

ADDITIVE_OPERATORS = {
    TokenType.ADD: BinaryOperator.ADD,
    TokenType.SUB: BinaryOperator.SUB,
}

MULTIPLICATIVE_OPERATORS = {
    TokenType.MUL: BinaryOperator.MUL,
    TokenType.DIV: BinaryOperator.DIV,
    TokenType.MOD: BinaryOperator.MOD,
}

RVALUE_FIRST = (CONSTANT_FIRST | frozenset(FUNCTION_OPERATORS)
                | frozenset({TokenType.NAME, TokenType.OPEN_BRA, TokenType.OPEN_CUR}))

EXPRESSION_FIRST = RVALUE_FIRST | frozenset(PREFIX_OPERATORS) | frozenset({TokenType.OPEN_PAR})

STATEMENT_KEYWORDS = frozenset({
    TokenType.FINAL, TokenType.VAR, TokenType.PRINT, TokenType.ASSERT,
    TokenType.IF, TokenType.WHILE, TokenType.DO, TokenType.FOR,
})

STATEMENT_FIRST = STATEMENT_KEYWORDS | EXPRESSION_FIRST


class Parser:
    """
    Quill recursive descent parser.

    Holds exactly one token of lookahead, pulled from the lexer at
    construction and after every consumption. Fails fast: the first grammar
    or name-resolution violation is raised and nothing is returned.
    """

    def __init__(self, lexer, config: Optional[ParserConfiguration] = None,
                 symbols: Optional[SymbolTable] = None):
        """
        Initialize parser with a token source.

        Args:
            lexer: Object providing ``next_token()`` and ``line`` (a Lexer or TokenStream)
            config: Parser configuration; defaults to flat scoping
            symbols: Symbol table to declare into; a fresh one by default
        """
        self.lexer = lexer
        self.config = config or ParserConfiguration(filename=getattr(lexer, "filename", "<string>"))
        if symbols is None:
            symbols = SymbolTable(self.config.scope_mode, self.config.filename)
        self.symbols = symbols
        self.current: Token = self.lexer.next_token()

        self._init_parsing_tables()

    def _init_parsing_tables(self):
        """Initialize the FIRST-set dispatch tables."""

        self.statement_parsers: Dict[TokenType, Callable[[], Command]] = {
            TokenType.FINAL: self._parse_declaration,
            TokenType.VAR: self._parse_declaration,
            TokenType.PRINT: self._parse_print,
            TokenType.ASSERT: self._parse_assert,
            TokenType.IF: self._parse_if,
            TokenType.WHILE: self._parse_while,
            TokenType.DO: self._parse_do_while,
            TokenType.FOR: self._parse_for,
        }
        for token_type in EXPRESSION_FIRST:
            self.statement_parsers[token_type] = self._parse_assign

        self.rvalue_parsers: Dict[TokenType, Callable[[], Expr]] = {
            TokenType.NAME: self._parse_lvalue,
            TokenType.OPEN_BRA: self._parse_list,
            TokenType.OPEN_CUR: self._parse_map,
        }
        for token_type in CONSTANT_FIRST:
            self.rvalue_parsers[token_type] = self._parse_const
        for token_type in FUNCTION_OPERATORS:
            self.rvalue_parsers[token_type] = self._parse_function

        self.element_parsers: Dict[TokenType, Callable[[], ListElement]] = {
            TokenType.SPREAD: self._parse_spread_element,
            TokenType.IF: self._parse_if_element,
            TokenType.FOR: self._parse_for_element,
        }

    def parse(self) -> Block:
        """
        Parse a whole program.

        Returns:
            The top-level Block

        Raises:
            QuillError: the first lexical, syntax or name-resolution error
        """
        logger.debug("parsing %s with %s scoping", self.config.filename, self.config.scope_mode.value)
        try:
            program = self._parse_code()
            self._consume(TokenType.END_OF_FILE)
        except RecursionError:
            raise create_nesting_too_deep_error(self.current) from None
        logger.debug("parsed %d top-level commands, %d variables declared",
                     len(program.commands), len(self.symbols))
        return program

    def parse_expression(self) -> Expr:
        """Parse a single expression that must span the whole input."""
        try:
            expr = self._parse_expr()
            self._consume(TokenType.END_OF_FILE)
        except RecursionError:
            raise create_nesting_too_deep_error(self.current) from None
        return expr

    # ========================================================================
    # Commands
    # ========================================================================

    def _parse_code(self) -> Block:
        """code ::= { cmd }"""
        line = self.current.line
        commands: List[Command] = []
        while self.current.type in STATEMENT_FIRST:
            commands.append(self._parse_command())

        return Block(line, tuple(commands))

    def _parse_command(self) -> Command:
        """cmd ::= decl | print | assert | if | while | dowhile | for | assign"""
        parser = self.statement_parsers.get(self.current.type)
        if parser is None:
            self._error()
        return parser()

    def _parse_declaration(self) -> Block:
        """decl ::= [ final ] var [ '?' ] name [ '=' expr ] { ',' name [ '=' expr ] } ';'"""
        line = self.current.line
        constant = self._match(TokenType.FINAL) is not None
        self._consume(TokenType.VAR)
        nullable = self._match(TokenType.NULLABLE) is not None

        declared: List[Variable] = []
        commands: List[Command] = []
        while True:
            name_token = self._consume(TokenType.NAME)
            # Declared before the initializer is parsed: 'var x = x;' refers to the new x
            variable = self.symbols.declare(name_token.lexeme, constant, nullable,
                                            name_token.line, name_token.location)
            declared.append(variable)

            assign_token = self._match(TokenType.ASSIGN)
            if assign_token is not None:
                value = self._parse_expr()
                target = VariableRef(name_token.line, variable)
                commands.append(Assign(assign_token.line, value, target))

            if self._match(TokenType.COMMA) is None:
                break

        self._consume(TokenType.SEMICOLON)
        return Block(line, tuple(commands), tuple(declared))

    def _parse_print(self) -> Print:
        """print ::= print '(' [ expr ] ')' ';'"""
        print_token = self._consume(TokenType.PRINT)
        self._consume(TokenType.OPEN_PAR)

        expr = None
        if self.current.type in EXPRESSION_FIRST:
            expr = self._parse_expr()

        self._consume(TokenType.CLOSE_PAR)
        self._consume(TokenType.SEMICOLON)
        return Print(print_token.line, expr)

    def _parse_assert(self) -> Assert:
        """assert ::= assert '(' expr [ ',' expr ] ')' ';'"""
        assert_token = self._consume(TokenType.ASSERT)
        self._consume(TokenType.OPEN_PAR)
        condition = self._parse_expr()

        message = None
        if self._match(TokenType.COMMA) is not None:
            message = self._parse_expr()

        self._consume(TokenType.CLOSE_PAR)
        self._consume(TokenType.SEMICOLON)
        return Assert(assert_token.line, condition, message)

    def _parse_if(self) -> If:
        """if ::= if '(' expr ')' body [ else body ]"""
        if_token = self._consume(TokenType.IF)
        condition = self._parse_condition()
        then_branch = self._parse_body()

        else_branch = None
        if self._match(TokenType.ELSE) is not None:
            else_branch = self._parse_body()

        return If(if_token.line, condition, then_branch, else_branch)

    def _parse_while(self) -> While:
        """while ::= while '(' expr ')' body"""
        while_token = self._consume(TokenType.WHILE)
        condition = self._parse_condition()
        body = self._parse_body()
        return While(while_token.line, condition, body)

    def _parse_do_while(self) -> DoWhile:
        """dowhile ::= do body while '(' expr ')' ';'"""
        do_token = self._consume(TokenType.DO)
        body = self._parse_body()
        self._consume(TokenType.WHILE)
        condition = self._parse_condition()
        self._consume(TokenType.SEMICOLON)
        return DoWhile(do_token.line, body, condition)

    def _parse_for(self) -> For:
        """for ::= for '(' name in expr ')' body"""
        for_token = self._consume(TokenType.FOR)
        self._consume(TokenType.OPEN_PAR)
        name_token = self._consume(TokenType.NAME)
        self._consume(TokenType.IN)
        iterable = self._parse_expr()
        self._consume(TokenType.CLOSE_PAR)

        # The loop variable lives in the same frame as the body's own declarations
        with self.symbols.scope(ScopeKind.LOOP):
            variable = self._declare_loop_variable(name_token)
            body = self._parse_body_in_current_scope()

        return For(for_token.line, variable, iterable, body)

    def _parse_body(self) -> Command:
        """body ::= cmd | '{' code '}'"""
        with self.symbols.scope(ScopeKind.BLOCK):
            return self._parse_body_in_current_scope()

    def _parse_body_in_current_scope(self) -> Command:
        if self._match(TokenType.OPEN_CUR) is not None:
            block = self._parse_code()
            self._consume(TokenType.CLOSE_CUR)
            return block

        return self._parse_command()

    def _parse_assign(self) -> Assign:
        """assign ::= [ expr '=' ] expr ';'"""
        value = self._parse_expr()
        target: Optional[SetExpr] = None
        line = self.current.line

        assign_token = self._match(TokenType.ASSIGN)
        if assign_token is not None:
            if not isinstance(value, SetExpr):
                raise create_invalid_assignment_target_error(assign_token.location, assign_token)
            target = value
            value = self._parse_expr()

        self._consume(TokenType.SEMICOLON)
        return Assign(line, value, target)

    def _parse_condition(self) -> Expr:
        """'(' expr ')' as used by if, while and do-while."""
        self._consume(TokenType.OPEN_PAR)
        condition = self._parse_expr()
        self._consume(TokenType.CLOSE_PAR)
        return condition

    # ========================================================================
    # Expressions, loosest binding first
    # ========================================================================

    def _parse_expr(self) -> Expr:
        """expr ::= cond [ '??' cond ]"""
        left = self._parse_cond()

        op_token = self._match(TokenType.IF_NULL)
        if op_token is not None:
            right = self._parse_cond()
            left = Binary(op_token.line, left, BinaryOperator.IF_NULL, right)

        return left

    def _parse_cond(self) -> Expr:
        """cond ::= rel { ( '&&' | '||' ) rel }"""
        left = self._parse_rel()

        while self.current.type in LOGICAL_OPERATORS:
            op_token = self._advance()
            right = self._parse_rel()
            left = Binary(op_token.line, left, LOGICAL_OPERATORS[op_token.type], right)

        return left

    def _parse_rel(self) -> Expr:
        """rel ::= arith [ ( '<' | '>' | '<=' | '>=' | '==' | '!=' ) arith ]"""
        left = self._parse_arith()

        if self.current.type in RELATIONAL_OPERATORS:
            op_token = self._advance()
            right = self._parse_arith()
            left = Binary(op_token.line, left, RELATIONAL_OPERATORS[op_token.type], right)

        return left

    def _parse_arith(self) -> Expr:
        """arith ::= term { ( '+' | '-' ) term }"""
        left = self._parse_term()

        while self.current.type in ADDITIVE_OPERATORS:
            op_token = self._advance()
            right = self._parse_term()
            left = Binary(op_token.line, left, ADDITIVE_OPERATORS[op_token.type], right)

        return left

    def _parse_term(self) -> Expr:
        """term ::= prefix { ( '*' | '/' | '%' ) prefix }"""
        left = self._parse_prefix()

        while self.current.type in MULTIPLICATIVE_OPERATORS:
            op_token = self._advance()
            right = self._parse_prefix()
            left = Binary(op_token.line, left, MULTIPLICATIVE_OPERATORS[op_token.type], right)

        return left

    def _parse_prefix(self) -> Expr:
        """prefix ::= [ '!' | '-' | '++' | '--' ] factor"""
        if self.current.type in PREFIX_OPERATORS:
            op_token = self._advance()
            operand = self._parse_factor()
            return Unary(op_token.line, operand, PREFIX_OPERATORS[op_token.type])

        return self._parse_factor()

    def _parse_factor(self) -> Expr:
        """factor ::= ( '(' expr ')' | rvalue ) [ '++' | '--' ]"""
        if self._match(TokenType.OPEN_PAR) is not None:
            expr = self._parse_expr()
            self._consume(TokenType.CLOSE_PAR)
        else:
            expr = self._parse_rvalue()

        if self.current.type in POSTFIX_OPERATORS:
            op_token = self._advance()
            expr = Unary(op_token.line, expr, POSTFIX_OPERATORS[op_token.type])

        return expr

    def _parse_rvalue(self) -> Expr:
        """rvalue ::= const | function | lvalue | list | map"""
        parser = self.rvalue_parsers.get(self.current.type)
        if parser is None:
            self._error("an expression")
        return parser()

    def _parse_const(self) -> Const:
        """const ::= null | false | true | number | text"""
        token = self._advance()
        if token.type == TokenType.NULL:
            value = None
        elif token.type == TokenType.FALSE:
            value = False
        elif token.type == TokenType.TRUE:
            value = True
        else:
            value = token.value

        return Const(token.line, value)

    def _parse_function(self) -> Function:
        """function ::= ( read | random | length | keys | values | tobool | toint | tostr ) '(' expr ')'"""
        token = self._advance()
        self._consume(TokenType.OPEN_PAR)
        arg = self._parse_expr()
        self._consume(TokenType.CLOSE_PAR)
        return Function(token.line, FUNCTION_OPERATORS[token.type], arg)

    def _parse_lvalue(self) -> SetExpr:
        """lvalue ::= name { '[' expr ']' }"""
        name_token = self._consume(TokenType.NAME)
        variable = self.symbols.resolve(name_token.lexeme, name_token.line, name_token.location)
        expr: SetExpr = VariableRef(name_token.line, variable)

        while self.current.type == TokenType.OPEN_BRA:
            bracket = self._advance()
            index = self._parse_expr()
            self._consume(TokenType.CLOSE_BRA)
            expr = Indexed(bracket.line, expr, index)

        return expr

    def _parse_list(self) -> ListLiteral:
        """list ::= '[' [ l-elem { ',' l-elem } ] ']'"""
        open_token = self._consume(TokenType.OPEN_BRA)
        elements: List[ListElement] = []

        if self.current.type != TokenType.CLOSE_BRA:
            elements.append(self._parse_list_element())
            while self._match(TokenType.COMMA) is not None:
                elements.append(self._parse_list_element())

        self._consume(TokenType.CLOSE_BRA)
        return ListLiteral(open_token.line, tuple(elements))

    def _parse_list_element(self) -> ListElement:
        """l-elem ::= l-single | l-spread | l-if | l-for"""
        parser = self.element_parsers.get(self.current.type)
        if parser is not None:
            return parser()

        expr = self._parse_expr()
        return SingleElement(expr.line, expr)

    def _parse_spread_element(self) -> SpreadElement:
        """l-spread ::= '...' expr"""
        spread_token = self._consume(TokenType.SPREAD)
        return SpreadElement(spread_token.line, self._parse_expr())

    def _parse_if_element(self) -> IfElement:
        """l-if ::= if '(' expr ')' l-elem [ else l-elem ]"""
        if_token = self._consume(TokenType.IF)
        condition = self._parse_condition()
        then_element = self._parse_list_element()

        else_element = None
        if self._match(TokenType.ELSE) is not None:
            else_element = self._parse_list_element()

        return IfElement(if_token.line, condition, then_element, else_element)

    def _parse_for_element(self) -> ForElement:
        """l-for ::= for '(' name in expr ')' l-elem"""
        for_token = self._consume(TokenType.FOR)
        self._consume(TokenType.OPEN_PAR)
        name_token = self._consume(TokenType.NAME)
        self._consume(TokenType.IN)
        iterable = self._parse_expr()
        self._consume(TokenType.CLOSE_PAR)

        with self.symbols.scope(ScopeKind.COMPREHENSION):
            variable = self._declare_loop_variable(name_token)
            element = self._parse_list_element()

        return ForElement(for_token.line, variable, iterable, element)

    def _parse_map(self) -> MapLiteral:
        """map ::= '{' [ m-elem { ',' m-elem } ] '}'"""
        open_token = self._consume(TokenType.OPEN_CUR)
        entries: List[MapEntry] = []

        if self.current.type != TokenType.CLOSE_CUR:
            entries.append(self._parse_map_entry())
            while self._match(TokenType.COMMA) is not None:
                entries.append(self._parse_map_entry())

        self._consume(TokenType.CLOSE_CUR)
        return MapLiteral(open_token.line, tuple(entries))

    def _parse_map_entry(self) -> MapEntry:
        """m-elem ::= expr ':' expr"""
        key = self._parse_expr()
        self._consume(TokenType.COLON)
        value = self._parse_expr()
        return MapEntry(key.line, key, value)

    def _declare_loop_variable(self, name_token: Token) -> Variable:
        """Loop and comprehension variables are mutable and may hold null."""
        return self.symbols.declare(name_token.lexeme, False, True,
                                    name_token.line, name_token.location)

    # ========================================================================
    # Token cursor
    # ========================================================================

    def _advance(self) -> Token:
        """Consume and return the current token, pulling the next one."""
        token = self.current
        self.current = self.lexer.next_token()
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self.current.type == token_type

    def _match(self, token_type: TokenType) -> Optional[Token]:
        """Consume the current token if it has the given type."""
        if self._check(token_type):
            return self._advance()
        return None

    def _consume(self, token_type: TokenType) -> Token:
        """Consume a token of the expected type or fail."""
        if self._check(token_type):
            return self._advance()
        self._error(token_type)

    def _error(self, expected=None):
        """Raise the error matching the current token's category."""
        token = self.current
        if token.type == TokenType.INVALID_TOKEN:
            raise create_lexical_error(token)
        if token.type in (TokenType.UNEXPECTED_EOF, TokenType.END_OF_FILE):
            raise create_unexpected_eof_error(token, expected)
        raise create_unexpected_token_error(token, expected)


def parse_string(source: str, filename: Optional[str] = None,
                 config: Optional[ParserConfiguration] = None) -> Block:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting (defaults to the config's)
        config: Parser configuration

    Returns:
        The top-level Block

    Raises:
        QuillError: If parsing fails
    """
    config = config or ParserConfiguration()
    if filename is not None:
        config = replace(config, filename=filename)

    parser = Parser(Lexer(source, config.filename), config)
    return parser.parse()


def parse_file(filepath: str, config: Optional[ParserConfiguration] = None) -> Block:
    """
    Convenience function to parse a source file.

    Raises:
        QuillError: If parsing fails or the file is not valid UTF-8
        IOError: If file cannot be read
    """
    return parse_string(read_source(filepath), filepath, config)
