"""
Expression trees and the precedence-climbing parser that builds them.

Binding, loosest to tightest: IMP, EQV, XOR, OR, AND, NOT, relational,
+ -, MOD, \\, * /, unary minus, ^. Everything is left-associative except
^, and relational operators do not chain.
"""

from collections import namedtuple

from errors import ArgumentError, BasicSyntaxError
from functions import BUILTINS, PRINT_FUNCTIONS
from values import SIGILS, STRING, Value

Literal = namedtuple('Literal', 'value')
Variable = namedtuple('Variable', 'name sigil')
ArrayRef = namedtuple('ArrayRef', 'name sigil subscripts')
UnaryOp = namedtuple('UnaryOp', 'op operand')
BinaryOp = namedtuple('BinaryOp', 'op left right')
FunctionCall = namedtuple('FunctionCall', 'name args')
UserFunctionCall = namedtuple('UserFunctionCall', 'name sigil args')

RELATIONAL = {'=', '<>', '<', '>', '<=', '>='}

BINARY_PRECEDENCE = {
    'IMP': 1,
    'EQV': 2,
    'XOR': 3,
    'OR': 4,
    'AND': 5,
    '=': 7, '<>': 7, '<': 7, '>': 7, '<=': 7, '>=': 7,
    '+': 8, '-': 8,
    'MOD': 9,
    '\\': 10,
    '*': 11, '/': 11,
    '^': 13,
}
NOT_PRECEDENCE = 6
RELATIONAL_PRECEDENCE = 7
NEGATE_PRECEDENCE = 12


def split_name(word):
    """'A$' -> ('A', '$'); 'COUNT' -> ('COUNT', None)."""
    if word[-1] in SIGILS:
        return word[:-1], word[-1]
    return word, None


def describe(token):
    if token.type == 'EOL':
        return "end of line"
    if token.value is None or token.type == 'NUMBER':
        return token.kind
    return repr(str(token.value))


class ExpressionParser:
    """Recursive parser over a token list with a single cursor."""

    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.pos = 0

    # Token cursor

    def peek(self, offset=0):
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self):
        token = self.peek()
        if token.type != 'EOL':
            self.pos += 1
        return token

    def at(self, type_, value=None):
        token = self.peek()
        return token.type == type_ and (value is None or token.value == value)

    def accept(self, type_, value=None):
        if self.at(type_, value):
            return self.advance()
        return None

    def expect(self, type_, value=None):
        token = self.accept(type_, value)
        if token is None:
            expected = value or type_
            raise self.error(f"Expected {expected}")
        return token

    def error(self, message=None, token=None, cls=BasicSyntaxError):
        token = token or self.peek()
        if message is None:
            message = f"Unexpected {describe(token)}"
        return cls(message, column=token.column)

    # Expressions

    def parse_expression(self, min_prec=1):
        left = self._parse_unary()
        relational_seen = False
        while True:
            op = self._binary_operator()
            if op is None:
                break
            prec = BINARY_PRECEDENCE[op]
            if prec < min_prec:
                break
            if prec == RELATIONAL_PRECEDENCE:
                if relational_seen:
                    raise self.error("Relational operators do not chain")
                relational_seen = True
            self.advance()
            # ^ is right-associative
            next_min = prec if op == '^' else prec + 1
            right = self.parse_expression(next_min)
            left = BinaryOp(op, left, right)
        return left

    def _binary_operator(self):
        token = self.peek()
        if token.type == 'OP' and token.value in BINARY_PRECEDENCE:
            return token.value
        if token.type in BINARY_PRECEDENCE:
            return token.type
        return None

    def _parse_unary(self):
        if self.accept('NOT'):
            return UnaryOp('NOT', self.parse_expression(NOT_PRECEDENCE))
        if self.accept('OP', '-'):
            return UnaryOp('-', self.parse_expression(NEGATE_PRECEDENCE))
        if self.accept('OP', '+'):
            return self.parse_expression(NEGATE_PRECEDENCE)
        return self._parse_primary()

    def _parse_primary(self):
        token = self.peek()
        if token.type == 'NUMBER':
            self.advance()
            return Literal(token.value)
        if token.type == 'STRING':
            self.advance()
            return Literal(Value(STRING, token.value))
        if token.type == 'LPAREN':
            self.advance()
            node = self.parse_expression()
            self.expect('RPAREN')
            return node
        if token.type == 'ID':
            return self.parse_reference()
        if token.type == 'FN':
            return self._parse_user_function()
        if token.type in BUILTINS:
            return self._parse_function()
        if token.type in PRINT_FUNCTIONS:
            raise self.error(f"{token.type} is only allowed in PRINT")
        raise self.error()

    def parse_reference(self):
        """A variable or array element; also used for assignment targets."""
        token = self.expect('ID')
        name, sigil = split_name(token.value)
        if self.accept('LPAREN'):
            subscripts = self.parse_arguments()
            self.expect('RPAREN')
            return ArrayRef(name, sigil, tuple(subscripts))
        return Variable(name, sigil)

    def parse_arguments(self):
        args = [self.parse_expression()]
        while self.accept('COMMA'):
            args.append(self.parse_expression())
        return args

    def _parse_function(self):
        token = self.advance()
        entry = BUILTINS[token.type]
        args = []
        if entry.parens != 'none' and self.accept('LPAREN'):
            args = self.parse_arguments()
            self.expect('RPAREN')
        elif entry.parens == 'required':
            raise self.error(f"{entry.name} needs an argument list", token, ArgumentError)
        if not entry.min_args <= len(args) <= entry.max_args:
            raise self.error(f"Wrong number of arguments to {entry.name}", token, ArgumentError)
        return FunctionCall(entry.name, tuple(args))

    def _parse_user_function(self):
        self.expect('FN')
        name, sigil = split_name(self.expect('ID').value)
        args = ()
        if self.accept('LPAREN'):
            args = tuple(self.parse_arguments())
            self.expect('RPAREN')
        return UserFunctionCall(name, sigil, args)


def parse_expression(tokens):
    """Parses a complete token list (ending in EOL) as one expression."""
    parser = ExpressionParser(tokens)
    node = parser.parse_expression()
    if not parser.at('EOL'):
        raise parser.error()
    return node
