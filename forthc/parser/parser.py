"""
Forth Parser - Builds an Abstract Syntax Tree from tokens.

Maps symbolic aliases and literals to canonical word names, splits out
word definitions, and recognizes the . and return directives.
"""

from typing import Dict, List, Optional, Set
from ..errors import UsageError
from ..lexer.lexer import Token, TokenType
from .ast_nodes import *


# Surface syntax -> canonical word name
ALIASES: Dict[str, str] = {
    '+': 'plus',
    '-': 'minus',
    '*': 'mult',
    '%': 'modulo',
    '=': 'eq',
    '<': 'less',
    'if': 'iff',
    'else': 'elsef',
    'true': 'truef',
    'false': 'falsef',
    '0': 'zero',
    '1': 'one',
    '2': 'two',
    '3': 'three',
    '4': 'four',
    '5': 'five',
    '6': 'six',
    '7': 'seven',
    '8': 'eight',
    '9': 'nine',
    '10': 'ten',
}

RETURN = 'return'
TYPE = 'type'
AS = 'as'
TOP = 'top'

# Words that are part of the directive syntax and can never name a word
RESERVED: Set[str] = {RETURN, TYPE, AS}


def canonical(text: str) -> str:
    """Map a surface token to the name the compiler dispatches on."""
    return ALIASES.get(text, text)


class Parser:
    """Parses Forth tokens into an Abstract Syntax Tree."""

    def __init__(self, tokens: List[Token], filename: str = "<input>"):
        self.tokens = tokens
        self.filename = filename
        self.pos = 0
        self.current_token = self.tokens[0] if tokens else Token(TokenType.EOF, None, 1, 1)

    def error(self, message: str, token: Optional[Token] = None):
        """Raise a usage error with location information."""
        token = token or self.current_token
        raise UsageError(message, self.filename, token.line, token.column)

    def peek(self, offset: int = 0) -> Optional[Token]:
        """Peek at token at current position + offset."""
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return None

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
            self.current_token = self.tokens[self.pos]
        return token

    def at_word(self, value: Optional[str] = None) -> bool:
        """Is the current token a WORD (optionally with the given text)?"""
        token = self.current_token
        return token.type == TokenType.WORD and (value is None or token.value == value)

    def parse(self) -> Program:
        """Parse the entire program."""
        program = Program()

        while self.current_token.type != TokenType.EOF:
            token = self.current_token

            if token.type == TokenType.COLON:
                program.words.append(self.parse_definition())
            elif token.type == TokenType.SEMICOLON:
                self.error("';' outside a word definition")
            elif token.type == TokenType.DOT:
                self.advance()
                program.statements.append(PrintNode(token.line, token.column))
            elif self.at_word(TOP):
                program.statements.append(self.parse_probe())
            elif self.at_word(RETURN):
                program.statements.append(self.parse_return(None))
            elif token.value in (TYPE, AS):
                self.error(f"'{token.value}' is only valid after 'return'")
            else:
                self.advance()
                program.statements.append(self.make_op(token))

        self.validate_directives(program)
        return program

    def make_op(self, token: Token) -> OpNode:
        return OpNode(canonical(token.value), token.value, token.line, token.column)

    def parse_definition(self) -> WordDefNode:
        """Parse ': name body ;'."""
        colon = self.advance()
        name_token = self.current_token
        if name_token.type != TokenType.WORD:
            self.error("expected a word name after ':'", colon)
        if name_token.value in RESERVED:
            self.error(f"'{name_token.value}' is reserved and cannot name a word")
        self.advance()

        body: List[OpNode] = []
        while True:
            token = self.current_token
            if token.type == TokenType.SEMICOLON:
                self.advance()
                break
            if token.type == TokenType.EOF:
                self.error(f"definition of '{name_token.value}' is missing ';'", colon)
            if token.type == TokenType.COLON:
                self.error("word definitions cannot be nested")
            if token.type == TokenType.DOT:
                self.error("'.' is not allowed inside a word definition")
            if token.value in RESERVED or token.value == TOP:
                self.error(f"'{token.value}' is not allowed inside a word definition")
            body.append(self.make_op(self.advance()))

        return WordDefNode(canonical(name_token.value), body, name_token.line, name_token.column)

    def parse_probe(self) -> ASTNode:
        """Parse 'top return ...'; top is only meaningful as a probe."""
        top_token = self.advance()
        if not self.at_word(RETURN):
            self.error("'top' must be followed by 'return'", top_token)
        return self.parse_return(self.make_op(top_token))

    def parse_return(self, probe: Optional[OpNode]) -> ASTNode:
        """Parse 'return', 'return type NAME' or 'return type NAME as OP'."""
        return_token = self.advance()
        if not self.at_word(TYPE):
            return ReturnNode(probe, return_token.line, return_token.column)

        self.advance()
        name_token = self.current_token
        if name_token.type != TokenType.WORD or name_token.value in RESERVED:
            self.error("expected a checkpoint name after 'return type'", return_token)
        self.advance()

        if self.at_word(AS):
            as_token = self.advance()
            if probe is not None:
                self.error("a checkpoint takes either a leading 'top' or 'as OP', not both", as_token)
            op_token = self.current_token
            if op_token.type != TokenType.WORD or op_token.value in RESERVED:
                self.error("expected an operation after 'as'", as_token)
            self.advance()
            probe = self.make_op(op_token)

        return CheckpointNode(name_token.value, probe, return_token.line, return_token.column)

    def validate_directives(self, program: Program):
        """Enforce how return, checkpoints and . may be combined."""
        returns = [n for n in program.statements if isinstance(n, ReturnNode)]
        prints = [n for n in program.statements if isinstance(n, PrintNode)]

        seen: Set[str] = set()
        for node in program.checkpoints:
            if node.name in seen:
                raise UsageError(f"checkpoint '{node.name}' is captured twice",
                                 self.filename, node.line, node.column)
            seen.add(node.name)

        if not returns:
            return
        if len(returns) > 1:
            node = returns[1]
            raise UsageError("'return' may appear only once", self.filename, node.line, node.column)
        node = returns[0]
        if program.statements[-1] is not node:
            raise UsageError("'return' must be the last statement of the program",
                             self.filename, node.line, node.column)
        if prints or seen:
            raise UsageError("'return' cannot be combined with '.' or checkpoints",
                             self.filename, node.line, node.column)
