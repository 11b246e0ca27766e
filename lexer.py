import re
from collections import namedtuple

from errors import LexicalError
from values import NUMBER_PATTERN, parse_number

STATEMENT_KEYWORDS = {
    'AS', 'BASE', 'BEEP', 'CIRCLE', 'CLEAR', 'CLOSE', 'CLS', 'COLOR', 'DATA',
    'DEF', 'DEFDBL', 'DEFINT', 'DEFSNG', 'DEFSTR', 'DIM', 'ELSE', 'END',
    'ERASE', 'ERROR', 'FIELD', 'FN', 'FOR', 'GET', 'GOSUB', 'GOTO', 'IF',
    'INPUT', 'LET', 'LINE', 'LOCATE', 'LSET', 'NEW', 'NEXT', 'ON', 'OPEN',
    'OPTION', 'PRESET', 'PRINT', 'PSET', 'PUT', 'RANDOMIZE', 'READ', 'REM',
    'RESTORE', 'RESUME', 'RETURN', 'RSET', 'RUN', 'SCREEN', 'SOUND', 'STEP',
    'STOP', 'SWAP', 'SYSTEM', 'THEN', 'TO', 'TROFF', 'TRON', 'WEND', 'WHILE',
    'WRITE',
}

OPERATOR_KEYWORDS = {'AND', 'OR', 'XOR', 'EQV', 'IMP', 'NOT', 'MOD'}

FUNCTION_KEYWORDS = {
    'ABS', 'ASC', 'ATN', 'CDBL', 'CHR$', 'CINT', 'COS', 'CSNG', 'CSRLIN',
    'DATE$', 'EOF', 'ERL', 'ERR', 'EXP', 'FIX', 'FRE', 'HEX$', 'INKEY$',
    'INPUT$', 'INSTR', 'INT', 'LEFT$', 'LEN', 'LOC', 'LOF', 'LOG', 'MID$',
    'OCT$', 'POINT', 'POS', 'RIGHT$', 'RND', 'SGN', 'SIN', 'SPACE$', 'SPC',
    'SQR', 'STR$', 'STRING$', 'TAB', 'TAN', 'TIME$', 'TIMER', 'VAL',
}

KEYWORDS = STATEMENT_KEYWORDS | OPERATOR_KEYWORDS | FUNCTION_KEYWORDS

_PUNCTUATION = {'LPAREN', 'RPAREN', 'COMMA', 'SEMICOLON', 'COLON', 'HASH'}


class Token(namedtuple('Token', 'type value column')):
    """
    One lexical unit. Keywords carry their own name as type (PRINT, GOTO,
    MOD, LEFT$ ...), everything else one of NUMBER, STRING, ID, OP, the
    punctuation types, REM, DATA or EOL.
    """
    __slots__ = ()

    @property
    def kind(self):
        if self.type == 'NUMBER':
            return 'number'
        if self.type == 'STRING':
            return 'string'
        if self.type == 'ID':
            return 'identifier'
        if self.type == 'OP' or self.type in OPERATOR_KEYWORDS:
            return 'operator'
        if self.type in _PUNCTUATION:
            return 'punctuation'
        if self.type == 'EOL':
            return 'end-of-line'
        return 'keyword'

    def __repr__(self):
        return f"Token({self.type}, {self.value!r})"


class Lexer:
    def __init__(self):
        # Token specification
        self.token_specification = [
            ('NUMBER',       NUMBER_PATTERN),
            ('STRING',       r'"[^"]*"'),
            ('UNTERMINATED', r'"[^"]*$'),
            ('WORD',         r'[A-Za-z][A-Za-z0-9.]*[$%!#]?'),
            ('OP',           r'<>|><|<=|=<|>=|=>|[-+*/\\^=<>]'),
            ('LPAREN',       r'\('),
            ('RPAREN',       r'\)'),
            ('COMMA',        r','),
            ('SEMICOLON',    r';'),
            ('COLON',        r':'),
            ('HASH',         r'#'),
            ('QUESTION',     r'\?'),        # PRINT shorthand
            ('APOSTROPHE',   r"'"),         # REM shorthand
            ('SKIP',         r'[ \t]+'),
            ('MISMATCH',     r'.'),
        ]
        self.regex = re.compile('|'.join('(?P<%s>%s)' % pair for pair in self.token_specification))

    _ALIASES = {'><': '<>', '=<': '<=', '=>': '>='}

    def tokenize(self, text):
        """Yields the tokens of one physical line, ending with an EOL token."""
        text = text.rstrip('\r\n')
        pos = 0
        while pos < len(text):
            mo = self.regex.match(text, pos)
            kind = mo.lastgroup
            value = mo.group()
            column = pos + 1
            pos = mo.end()
            if kind == 'SKIP':
                continue
            elif kind == 'NUMBER':
                yield Token('NUMBER', parse_number(value), column)
            elif kind == 'STRING':
                yield Token('STRING', value[1:-1], column)
            elif kind == 'UNTERMINATED':
                raise LexicalError("Unterminated string literal", column=column)
            elif kind == 'OP':
                yield Token('OP', self._ALIASES.get(value, value), column)
            elif kind == 'QUESTION':
                yield Token('PRINT', 'PRINT', column)
            elif kind == 'APOSTROPHE':
                yield Token('REM', text[pos:], column)
                pos = len(text)
            elif kind == 'WORD':
                word = value.upper()
                if word not in KEYWORDS and word[-1] in '$%!#' and word[:-1] in KEYWORDS:
                    # PRINT#1, INPUT#2: the sigil is really punctuation
                    word = word[:-1]
                    pos -= 1
                if word == 'REM':
                    yield Token('REM', text[pos:], column)
                    pos = len(text)
                elif word == 'DATA':
                    end = self._data_end(text, pos)
                    yield Token('DATA', text[pos:end], column)
                    pos = end
                elif word in KEYWORDS:
                    yield Token(word, word, column)
                elif word.startswith('FN') and len(word) > 2 and word[2].isalpha():
                    yield Token('FN', 'FN', column)
                    yield Token('ID', word[2:], column + 2)
                else:
                    yield Token('ID', word, column)
            elif kind == 'MISMATCH':
                raise LexicalError(f"{value!r} unexpected", column=column)
            else:
                yield Token(kind, value, column)
        yield Token('EOL', None, len(text) + 1)

    @staticmethod
    def _data_end(text, pos):
        """DATA runs to the next colon that is not inside quotes."""
        quoted = False
        for i in range(pos, len(text)):
            ch = text[i]
            if ch == '"':
                quoted = not quoted
            elif ch == ':' and not quoted:
                return i
        return len(text)
