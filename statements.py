"""
Statement nodes and the parser that turns one program line into them.

Every statement keyword has a fixed grammar; the parser is a single
cursor over the line's tokens, shared with the expression parser so
statements can pull expressions out of the stream directly.
"""

from collections import namedtuple

from expressions import ExpressionParser, Literal, Variable, split_name
from lexer import Lexer
from values import DOUBLE, INTEGER, SINGLE, STRING, Value

MAX_LINE_NUMBER = 65529

Let = namedtuple('Let', 'target expr')
Print = namedtuple('Print', 'file items newline')
Write = namedtuple('Write', 'file exprs')
Input = namedtuple('Input', 'file prompt question targets')
LineInput = namedtuple('LineInput', 'file prompt target')
If = namedtuple('If', 'condition then_body else_body')
For = namedtuple('For', 'var start limit step')
Next = namedtuple('Next', 'vars')
While = namedtuple('While', 'condition')
Wend = namedtuple('Wend', '')
Goto = namedtuple('Goto', 'line')
Gosub = namedtuple('Gosub', 'line')
Return = namedtuple('Return', 'line')
OnJump = namedtuple('OnJump', 'selector lines gosub')
OnErrorGoto = namedtuple('OnErrorGoto', 'line')
Resume = namedtuple('Resume', 'target')
Error = namedtuple('Error', 'code')
End = namedtuple('End', '')
Stop = namedtuple('Stop', '')
System = namedtuple('System', '')
Dim = namedtuple('Dim', 'arrays')
Erase = namedtuple('Erase', 'names')
OptionBase = namedtuple('OptionBase', 'base')
DefType = namedtuple('DefType', 'type letters')
DefFn = namedtuple('DefFn', 'name sigil params body')
Clear = namedtuple('Clear', '')
Run = namedtuple('Run', 'line')
New = namedtuple('New', '')
Swap = namedtuple('Swap', 'first second')
Randomize = namedtuple('Randomize', 'seed')
Read = namedtuple('Read', 'targets')
Data = namedtuple('Data', 'items')
Restore = namedtuple('Restore', 'line')
Rem = namedtuple('Rem', 'text')
Tron = namedtuple('Tron', '')
Troff = namedtuple('Troff', '')
Cls = namedtuple('Cls', '')
Locate = namedtuple('Locate', 'row col')
Color = namedtuple('Color', 'foreground background')
Screen = namedtuple('Screen', 'mode')
Pset = namedtuple('Pset', 'x y color')
Preset = namedtuple('Preset', 'x y color')
Line = namedtuple('Line', 'start end color box')
Circle = namedtuple('Circle', 'x y radius color')
Beep = namedtuple('Beep', '')
Sound = namedtuple('Sound', 'frequency duration')
Open = namedtuple('Open', 'path mode number record_length')
Close = namedtuple('Close', 'numbers')
Field = namedtuple('Field', 'number fields')
Lset = namedtuple('Lset', 'target expr')
Rset = namedtuple('Rset', 'target expr')
Get = namedtuple('Get', 'number record')
Put = namedtuple('Put', 'number record')

DEFTYPES = {'DEFINT': INTEGER, 'DEFSNG': SINGLE, 'DEFDBL': DOUBLE, 'DEFSTR': STRING}

# OPEN ... FOR <mode>
OPEN_MODES = {'INPUT': 'I', 'OUTPUT': 'O', 'APPEND': 'A', 'RANDOM': 'R'}

_TERMINATORS = ('COLON', 'EOL', 'ELSE', 'REM')

# keywords whose statement takes no operands
_BARE = {
    'WEND': Wend, 'END': End, 'STOP': Stop, 'SYSTEM': System, 'CLS': Cls,
    'BEEP': Beep, 'TRON': Tron, 'TROFF': Troff, 'NEW': New,
}


def split_data(text):
    """Splits the raw text of a DATA statement into stripped items."""
    items = []
    current = []
    quoted = False
    for ch in text:
        if ch == '"':
            quoted = not quoted
        if ch == ',' and not quoted:
            items.append(''.join(current).strip())
            current = []
        else:
            current.append(ch)
    items.append(''.join(current).strip())
    return items


class StatementParser(ExpressionParser):

    def at_terminator(self):
        return self.peek().type in _TERMINATORS

    def parse_line(self):
        """Returns (line number or None, statements)."""
        number = None
        if self.at('NUMBER'):
            number = self.line_number()
        statements = self.parse_statements()
        if not self.at('EOL'):
            raise self.error()
        return number, statements

    def line_number(self):
        token = self.expect('NUMBER')
        value = token.value
        if value.type == STRING or value.data != int(value.data) or not 0 <= value.data <= MAX_LINE_NUMBER:
            raise self.error("Bad line number", token)
        return int(value.data)

    def parse_statements(self):
        """Colon-separated statements up to the end of line or an ELSE."""
        statements = []
        while True:
            if self.at('EOL') or self.at('ELSE'):
                return statements
            if self.accept('COLON'):
                continue
            statements.append(self.parse_statement())
            if not self.at_terminator():
                raise self.error()

    def parse_statement(self):
        token = self.peek()
        kind = token.type
        if kind == 'ID':
            return self._parse_let()
        if kind in _BARE:
            self.advance()
            return _BARE[kind]()
        handler = getattr(self, "_parse_" + kind.lower(), None)
        if handler is None:
            raise self.error()
        return handler()

    # Helpers

    def _optional_line(self):
        if self.at('NUMBER'):
            return self.line_number()
        return None

    def _file_number(self, required_hash=True):
        if required_hash:
            self.expect('HASH')
        else:
            self.accept('HASH')
        return self.parse_expression()

    def _target(self):
        if not self.at('ID'):
            raise self.error("Expected variable")
        return self.parse_reference()

    def _targets(self):
        targets = [self._target()]
        while self.accept('COMMA'):
            targets.append(self._target())
        return tuple(targets)

    def _scalar(self):
        name, sigil = split_name(self.expect('ID').value)
        return Variable(name, sigil)

    def _point(self):
        self.expect('LPAREN')
        x = self.parse_expression()
        self.expect('COMMA')
        y = self.parse_expression()
        self.expect('RPAREN')
        return x, y

    def _optional_args(self, count):
        """Comma-separated arguments any of which may be omitted."""
        args = []
        while len(args) < count:
            if self.at('COMMA') or self.at_terminator():
                args.append(None)
            else:
                args.append(self.parse_expression())
            if not self.accept('COMMA'):
                break
        if not self.at_terminator():
            raise self.error()
        return args + [None] * (count - len(args))

    def _body(self):
        """A THEN or ELSE clause: a bare line number or statements."""
        if self.at('NUMBER'):
            return [Goto(self.line_number())]
        return self.parse_statements()

    # Statements

    def _parse_let(self):
        self.accept('LET')
        target = self._target()
        self.expect('OP', '=')
        return Let(target, self.parse_expression())

    def _parse_print(self):
        self.expect('PRINT')
        file = None
        if self.accept('HASH'):
            file = self.parse_expression()
            self.expect('COMMA')
        items = []
        newline = True
        while not self.at_terminator():
            token = self.peek()
            if token.type in ('SEMICOLON', 'COMMA'):
                self.advance()
                items.append(('SEP', ';' if token.type == 'SEMICOLON' else ','))
                newline = False
                continue
            if token.type in ('TAB', 'SPC'):
                self.advance()
                self.expect('LPAREN')
                items.append((token.type, self.parse_expression()))
                self.expect('RPAREN')
                newline = False
                continue
            items.append(('EXPR', self.parse_expression()))
            newline = True
        return Print(file, tuple(items), newline)

    def _parse_write(self):
        self.expect('WRITE')
        file = None
        if self.accept('HASH'):
            file = self.parse_expression()
            self.expect('COMMA')
        exprs = ()
        if not self.at_terminator():
            exprs = tuple(self.parse_arguments())
        return Write(file, exprs)

    def _prompt(self):
        """INPUT ["prompt"(;|,)] returns (prompt, question mark wanted)."""
        self.accept('SEMICOLON')
        if self.at('STRING') and self.peek(1).type in ('SEMICOLON', 'COMMA'):
            prompt = self.advance().value
            question = self.advance().type == 'SEMICOLON'
            return prompt, question
        return '', True

    def _parse_input(self):
        self.expect('INPUT')
        if self.accept('HASH'):
            file = self.parse_expression()
            self.expect('COMMA')
            return Input(file, '', False, self._targets())
        prompt, question = self._prompt()
        return Input(None, prompt, question, self._targets())

    def _parse_line(self):
        self.expect('LINE')
        if self.accept('INPUT'):
            if self.accept('HASH'):
                file = self.parse_expression()
                self.expect('COMMA')
                return LineInput(file, '', self._target())
            prompt, _ = self._prompt()
            return LineInput(None, prompt, self._target())
        start = None
        if self.at('LPAREN'):
            start = self._point()
        self.expect('OP', '-')
        end = self._point()
        color = box = None
        if self.accept('COMMA'):
            if not self.at('COMMA') and not self.at_terminator():
                color = self.parse_expression()
            if self.accept('COMMA'):
                word = self.expect('ID')
                if word.value not in ('B', 'BF'):
                    raise self.error("Expected B or BF", word)
                box = word.value
        return Line(start, end, color, box)

    def _parse_if(self):
        self.expect('IF')
        condition = self.parse_expression()
        if self.accept('THEN'):
            then_body = self._body()
        elif self.at('GOTO'):
            self.advance()
            then_body = [Goto(self.line_number())]
        else:
            raise self.error("Expected THEN or GOTO")
        else_body = []
        if self.accept('ELSE'):
            else_body = self._body()
        return If(condition, then_body, else_body)

    def _parse_for(self):
        self.expect('FOR')
        var = self._scalar()
        self.expect('OP', '=')
        start = self.parse_expression()
        self.expect('TO')
        limit = self.parse_expression()
        step = None
        if self.accept('STEP'):
            step = self.parse_expression()
        return For(var, start, limit, step)

    def _parse_next(self):
        self.expect('NEXT')
        names = []
        if self.at('ID'):
            names.append(self._scalar())
            while self.accept('COMMA'):
                names.append(self._scalar())
        return Next(tuple(names))

    def _parse_while(self):
        self.expect('WHILE')
        return While(self.parse_expression())

    def _parse_goto(self):
        self.expect('GOTO')
        return Goto(self.line_number())

    def _parse_gosub(self):
        self.expect('GOSUB')
        return Gosub(self.line_number())

    def _parse_return(self):
        self.expect('RETURN')
        return Return(self._optional_line())

    def _parse_on(self):
        self.expect('ON')
        if self.accept('ERROR'):
            self.expect('GOTO')
            return OnErrorGoto(self.line_number())
        selector = self.parse_expression()
        if self.accept('GOSUB'):
            gosub = True
        else:
            self.expect('GOTO')
            gosub = False
        lines = [self.line_number()]
        while self.accept('COMMA'):
            lines.append(self.line_number())
        return OnJump(selector, tuple(lines), gosub)

    def _parse_resume(self):
        self.expect('RESUME')
        if self.accept('NEXT'):
            return Resume('NEXT')
        line = self._optional_line()
        # RESUME 0 is the same as a bare RESUME
        return Resume(line or None)

    def _parse_error(self):
        self.expect('ERROR')
        return Error(self.parse_expression())

    def _parse_dim(self):
        self.expect('DIM')
        arrays = []
        while True:
            name, sigil = split_name(self.expect('ID').value)
            self.expect('LPAREN')
            dims = tuple(self.parse_arguments())
            self.expect('RPAREN')
            arrays.append((name, sigil, dims))
            if not self.accept('COMMA'):
                return Dim(tuple(arrays))

    def _parse_erase(self):
        self.expect('ERASE')
        names = [split_name(self.expect('ID').value)]
        while self.accept('COMMA'):
            names.append(split_name(self.expect('ID').value))
        return Erase(tuple(names))

    def _parse_option(self):
        self.expect('OPTION')
        self.expect('BASE')
        token = self.expect('NUMBER')
        if token.value.data not in (0, 1):
            raise self.error("OPTION BASE must be 0 or 1", token)
        return OptionBase(int(token.value.data))

    def _letter(self):
        token = self.expect('ID')
        if len(token.value) != 1 or not token.value.isalpha():
            raise self.error("Expected a letter", token)
        return token.value

    def _parse_deftype(self):
        type_ = DEFTYPES[self.advance().type]
        letters = []
        while True:
            first = last = self._letter()
            if self.accept('OP', '-'):
                last = self._letter()
            if last < first:
                raise self.error("Bad letter range")
            letters.append((first, last))
            if not self.accept('COMMA'):
                return DefType(type_, tuple(letters))

    _parse_defint = _parse_defsng = _parse_defdbl = _parse_defstr = _parse_deftype

    def _parse_def(self):
        self.expect('DEF')
        self.expect('FN')
        name, sigil = split_name(self.expect('ID').value)
        params = ()
        if self.accept('LPAREN'):
            params = [self._scalar()]
            while self.accept('COMMA'):
                params.append(self._scalar())
            self.expect('RPAREN')
            params = tuple(params)
        self.expect('OP', '=')
        return DefFn(name, sigil, params, self.parse_expression())

    def _parse_clear(self):
        self.expect('CLEAR')
        # memory size arguments have no meaning here
        self._optional_args(3)
        return Clear()

    def _parse_run(self):
        self.expect('RUN')
        return Run(self._optional_line())

    def _parse_swap(self):
        self.expect('SWAP')
        first = self._target()
        self.expect('COMMA')
        return Swap(first, self._target())

    def _parse_randomize(self):
        self.expect('RANDOMIZE')
        if self.at_terminator():
            return Randomize(None)
        return Randomize(self.parse_expression())

    def _parse_read(self):
        self.expect('READ')
        return Read(self._targets())

    def _parse_data(self):
        token = self.expect('DATA')
        return Data(tuple(split_data(token.value)))

    def _parse_restore(self):
        self.expect('RESTORE')
        return Restore(self._optional_line())

    def _parse_rem(self):
        return Rem(self.expect('REM').value)

    def _parse_locate(self):
        self.expect('LOCATE')
        row, col = self._optional_args(5)[:2]
        return Locate(row, col)

    def _parse_color(self):
        self.expect('COLOR')
        foreground, background = self._optional_args(2)
        return Color(foreground, background)

    def _parse_screen(self):
        self.expect('SCREEN')
        return Screen(self.parse_expression())

    def _pixel(self):
        x, y = self._point()
        color = None
        if self.accept('COMMA'):
            color = self.parse_expression()
        return x, y, color

    def _parse_pset(self):
        self.expect('PSET')
        return Pset(*self._pixel())

    def _parse_preset(self):
        self.expect('PRESET')
        return Preset(*self._pixel())

    def _parse_circle(self):
        self.expect('CIRCLE')
        x, y = self._point()
        self.expect('COMMA')
        radius = self.parse_expression()
        color = None
        if self.accept('COMMA'):
            color = self.parse_expression()
        return Circle(x, y, radius, color)

    def _parse_sound(self):
        self.expect('SOUND')
        frequency = self.parse_expression()
        self.expect('COMMA')
        return Sound(frequency, self.parse_expression())

    def _parse_open(self):
        self.expect('OPEN')
        first = self.parse_expression()
        record_length = None
        if self.at('FOR') or self.at('AS'):
            mode = 'R'
            if self.accept('FOR'):
                token = self.advance()
                word = token.value if token.type in ('ID', 'INPUT') else None
                if word not in OPEN_MODES:
                    raise self.error("Bad file mode", token)
                mode = OPEN_MODES[word]
            self.expect('AS')
            number = self._file_number(required_hash=False)
            if self.accept('LEN'):
                self.expect('OP', '=')
                record_length = self.parse_expression()
            return Open(first, Literal(Value(STRING, mode)), number, record_length)
        self.expect('COMMA')
        number = self._file_number(required_hash=False)
        self.expect('COMMA')
        path = self.parse_expression()
        if self.accept('COMMA'):
            record_length = self.parse_expression()
        return Open(path, first, number, record_length)

    def _parse_close(self):
        self.expect('CLOSE')
        numbers = []
        while not self.at_terminator():
            numbers.append(self._file_number(required_hash=False))
            if not self.accept('COMMA'):
                break
        return Close(tuple(numbers))

    def _parse_field(self):
        self.expect('FIELD')
        number = self._file_number(required_hash=False)
        fields = []
        while self.accept('COMMA'):
            width = self.parse_expression()
            self.expect('AS')
            fields.append((width, self._target()))
        return Field(number, tuple(fields))

    def _parse_lset(self):
        cls = Lset if self.advance().type == 'LSET' else Rset
        target = self._target()
        self.expect('OP', '=')
        return cls(target, self.parse_expression())

    _parse_rset = _parse_lset

    def _parse_get(self):
        cls = Get if self.advance().type == 'GET' else Put
        number = self._file_number(required_hash=False)
        record = None
        if self.accept('COMMA'):
            record = self.parse_expression()
        return cls(number, record)

    _parse_put = _parse_get


def parse_line(text, lexer=None):
    """
    Tokenizes and parses one physical line.

    Returns (line number or None, statements, source text after the number).
    """
    lexer = lexer or Lexer()
    tokens = list(lexer.tokenize(text))
    parser = StatementParser(tokens)
    number, statements = parser.parse_line()
    body = text.strip()
    if number is not None:
        body = text[tokens[1].column - 1:].rstrip() if tokens[1].type != 'EOL' else ''
    return number, statements, body
