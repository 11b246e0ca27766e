"""
The fixed table of built-in functions.

Each entry names its arity, the type each argument must have ('N' numeric,
'S' string, '?' checked by the function itself) and whether the call is
written with parentheses. Implementations receive the evaluator followed
by the argument Values.
"""

import math
from collections import namedtuple
from datetime import datetime

import values
from errors import IllegalFunctionCallError, NumericOverflowError
from values import DOUBLE, INTEGER, SINGLE, STRING, Value

# parens: 'required', 'optional' or 'none'
Builtin = namedtuple('Builtin', 'name min_args max_args arg_types parens impl')


def _machine(ev):
    if ev.machine is None:
        raise IllegalFunctionCallError("Function needs a running interpreter")
    return ev.machine


def _byte_count(value):
    n = values.to_int(value)
    if not 0 <= n <= 255:
        raise IllegalFunctionCallError()
    return n


def _float_like(arg, x):
    """Transcendental results are Single unless the argument was Double."""
    if isinstance(x, complex) or math.isnan(x) or math.isinf(x):
        raise IllegalFunctionCallError()
    if arg.type == DOUBLE:
        return values.double(x)
    return values.single(x)


def _transcendental(fn):
    def call(ev, x):
        try:
            result = fn(x.data)
        except ValueError:
            raise IllegalFunctionCallError() from None
        except OverflowError:
            raise NumericOverflowError() from None
        return _float_like(x, result)
    return call


def _log(x):
    if x <= 0:
        raise ValueError("log of non-positive number")
    return math.log(x)


def _sqr(x):
    if x < 0:
        raise ValueError("square root of negative number")
    return math.sqrt(x)


def fn_abs(ev, x):
    if x.data >= 0:
        return x
    return values.negate(x)


def fn_sgn(ev, x):
    return Value(INTEGER, (x.data > 0) - (x.data < 0))


def fn_int(ev, x):
    if x.type == INTEGER:
        return x
    return Value(x.type, float(math.floor(x.data)))


def fn_fix(ev, x):
    if x.type == INTEGER:
        return x
    return Value(x.type, float(math.trunc(x.data)))


def fn_cint(ev, x):
    return values.convert(x, INTEGER)


def fn_csng(ev, x):
    return values.convert(x, SINGLE)


def fn_cdbl(ev, x):
    return values.convert(x, DOUBLE)


def fn_asc(ev, s):
    if not s.data:
        raise IllegalFunctionCallError()
    return Value(INTEGER, ord(s.data[0]))


def fn_chr(ev, x):
    return Value(STRING, chr(_byte_count(x)))


def fn_len(ev, s):
    return Value(INTEGER, len(s.data))


def fn_left(ev, s, n):
    return Value(STRING, s.data[:_byte_count(n)])


def fn_right(ev, s, n):
    count = _byte_count(n)
    return Value(STRING, s.data[len(s.data) - count:] if count else '')


def fn_mid(ev, s, start, length=None):
    begin = values.to_int(start)
    if not 1 <= begin <= 255:
        raise IllegalFunctionCallError()
    text = s.data[begin - 1:]
    if length is not None:
        text = text[:_byte_count(length)]
    return Value(STRING, text)


def fn_instr(ev, *args):
    if len(args) == 3:
        start = values.to_int(args[0])
        if not 1 <= start <= 255:
            raise IllegalFunctionCallError()
        args = args[1:]
    else:
        start = 1
    haystack, needle = (values.to_str(a) for a in args)
    if start > len(haystack):
        return Value(INTEGER, 0)
    return Value(INTEGER, haystack.find(needle, start - 1) + 1)


def fn_space(ev, n):
    return Value(STRING, ' ' * _byte_count(n))


def fn_string(ev, n, fill):
    count = _byte_count(n)
    if fill.is_string:
        if not fill.data:
            raise IllegalFunctionCallError()
        ch = fill.data[0]
    else:
        ch = chr(_byte_count(fill))
    return Value(STRING, ch * count)


def fn_str(ev, x):
    return Value(STRING, values.str_number(x))


def fn_val(ev, s):
    return values.val(s.data)


def fn_hex(ev, x):
    return Value(STRING, '%X' % (values.to_int(x) & 0xFFFF))


def fn_oct(ev, x):
    return Value(STRING, '%o' % (values.to_int(x) & 0xFFFF))


def fn_rnd(ev, x=None):
    if x is not None and x.data < 0:
        ev.rng.seed(x.data)
    elif x is not None and x.data == 0:
        return values.single(ev.last_random)
    ev.last_random = ev.rng.random()
    return values.single(ev.last_random)


def fn_timer(ev):
    now = datetime.now()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return values.single((now - midnight).total_seconds())


def fn_date(ev):
    return Value(STRING, datetime.now().strftime('%m-%d-%Y'))


def fn_time(ev):
    return Value(STRING, datetime.now().strftime('%H:%M:%S'))


def fn_fre(ev, x):
    return values.single(60000)


def fn_err(ev):
    return Value(INTEGER, _machine(ev).error_code)


def fn_erl(ev):
    return values.single(_machine(ev).error_line)


def fn_csrlin(ev):
    return Value(INTEGER, _machine(ev).io_handler.get_cursor()[0])


def fn_pos(ev, x):
    return Value(INTEGER, _machine(ev).io_handler.get_cursor()[1])


def fn_inkey(ev):
    return Value(STRING, _machine(ev).io_handler.read_char(True))


def fn_input(ev, n, file_number=None):
    count = _byte_count(n)
    machine = _machine(ev)
    if file_number is None:
        text = ''.join(machine.io_handler.read_char(False) for _ in range(count))
    else:
        text = machine.file_manager.read_chars(values.to_int(file_number), count)
    return Value(STRING, text)


def fn_eof(ev, n):
    return values.boolean(_machine(ev).file_manager.eof(values.to_int(n)))


def fn_loc(ev, n):
    return values.single(_machine(ev).file_manager.position(values.to_int(n)))


def fn_lof(ev, n):
    return values.single(_machine(ev).file_manager.length(values.to_int(n)))


def fn_point(ev, x, y):
    color = _machine(ev).graphics.get_pixel(values.to_int(x), values.to_int(y))
    return Value(INTEGER, color)


def _table(*entries):
    return {entry.name: entry for entry in entries}


BUILTINS = _table(
    Builtin('ABS', 1, 1, 'N', 'required', fn_abs),
    Builtin('ASC', 1, 1, 'S', 'required', fn_asc),
    Builtin('ATN', 1, 1, 'N', 'required', _transcendental(math.atan)),
    Builtin('CDBL', 1, 1, 'N', 'required', fn_cdbl),
    Builtin('CHR$', 1, 1, 'N', 'required', fn_chr),
    Builtin('CINT', 1, 1, 'N', 'required', fn_cint),
    Builtin('COS', 1, 1, 'N', 'required', _transcendental(math.cos)),
    Builtin('CSNG', 1, 1, 'N', 'required', fn_csng),
    Builtin('CSRLIN', 0, 0, '', 'none', fn_csrlin),
    Builtin('DATE$', 0, 0, '', 'none', fn_date),
    Builtin('EOF', 1, 1, 'N', 'required', fn_eof),
    Builtin('ERL', 0, 0, '', 'none', fn_erl),
    Builtin('ERR', 0, 0, '', 'none', fn_err),
    Builtin('EXP', 1, 1, 'N', 'required', _transcendental(math.exp)),
    Builtin('FIX', 1, 1, 'N', 'required', fn_fix),
    Builtin('FRE', 1, 1, '?', 'required', fn_fre),
    Builtin('HEX$', 1, 1, 'N', 'required', fn_hex),
    Builtin('INKEY$', 0, 0, '', 'none', fn_inkey),
    Builtin('INPUT$', 1, 2, 'NN', 'required', fn_input),
    Builtin('INSTR', 2, 3, '???', 'required', fn_instr),
    Builtin('INT', 1, 1, 'N', 'required', fn_int),
    Builtin('LEFT$', 2, 2, 'SN', 'required', fn_left),
    Builtin('LEN', 1, 1, 'S', 'required', fn_len),
    Builtin('LOC', 1, 1, 'N', 'required', fn_loc),
    Builtin('LOF', 1, 1, 'N', 'required', fn_lof),
    Builtin('LOG', 1, 1, 'N', 'required', _transcendental(_log)),
    Builtin('MID$', 2, 3, 'SNN', 'required', fn_mid),
    Builtin('OCT$', 1, 1, 'N', 'required', fn_oct),
    Builtin('POINT', 2, 2, 'NN', 'required', fn_point),
    Builtin('POS', 1, 1, '?', 'required', fn_pos),
    Builtin('RIGHT$', 2, 2, 'SN', 'required', fn_right),
    Builtin('RND', 0, 1, 'N', 'optional', fn_rnd),
    Builtin('SGN', 1, 1, 'N', 'required', fn_sgn),
    Builtin('SIN', 1, 1, 'N', 'required', _transcendental(math.sin)),
    Builtin('SPACE$', 1, 1, 'N', 'required', fn_space),
    Builtin('SQR', 1, 1, 'N', 'required', _transcendental(_sqr)),
    Builtin('STR$', 1, 1, 'N', 'required', fn_str),
    Builtin('STRING$', 2, 2, 'N?', 'required', fn_string),
    Builtin('TAN', 1, 1, 'N', 'required', _transcendental(math.tan)),
    Builtin('TIME$', 0, 0, '', 'none', fn_time),
    Builtin('TIMER', 0, 0, '', 'none', fn_timer),
    Builtin('VAL', 1, 1, 'S', 'required', fn_val),
)

# only meaningful inside a PRINT list
PRINT_FUNCTIONS = {'TAB', 'SPC'}
