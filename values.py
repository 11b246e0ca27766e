"""
Typed values and the fixed coercion rules between them.

A Value is a (type, data) pair where type is one of the four sigils.
Integer data is a Python int in 16-bit range, Single data is a float
already rounded to 32-bit precision, Double data is a float, String data
is a str of code points 0-255.
"""

import math
import operator
import re
import struct
from collections import namedtuple

from errors import (DivisionByZeroError, IllegalFunctionCallError,
                    NumericOverflowError, StringTooLongError, TypeMismatchError)

INTEGER = '%'
SINGLE = '!'
DOUBLE = '#'
STRING = '$'

SIGILS = (INTEGER, SINGLE, DOUBLE, STRING)
NUMERIC_TYPES = (INTEGER, SINGLE, DOUBLE)
TYPE_NAMES = {INTEGER: 'Integer', SINGLE: 'Single', DOUBLE: 'Double', STRING: 'String'}

INT_MIN = -32768
INT_MAX = 32767
MAX_STRING = 255

# widening order for mixed arithmetic
_RANK = {INTEGER: 0, SINGLE: 1, DOUBLE: 2}

NUMBER_PATTERN = r'&[Hh][0-9A-Fa-f]+|&[Oo]?[0-7]+|(?:\d+\.?\d*|\.\d+)(?:[EeDd][+-]?\d+)?[%!#]?'
_number_re = re.compile(NUMBER_PATTERN)


class Value(namedtuple('Value', 'type data')):
    __slots__ = ()

    @property
    def is_string(self):
        return self.type == STRING

    @property
    def is_numeric(self):
        return self.type != STRING

    def __repr__(self):
        return f"{TYPE_NAMES[self.type]}({self.data!r})"


def integer(n):
    n = int(n)
    if not INT_MIN <= n <= INT_MAX:
        raise NumericOverflowError()
    return Value(INTEGER, n)


def single(x):
    x = float(x)
    if math.isnan(x) or math.isinf(x):
        raise NumericOverflowError()
    try:
        x = struct.unpack('<f', struct.pack('<f', x))[0]
    except OverflowError:
        raise NumericOverflowError() from None
    return Value(SINGLE, x)


def double(x):
    x = float(x)
    if math.isnan(x) or math.isinf(x):
        raise NumericOverflowError()
    return Value(DOUBLE, x)


def string(s):
    if len(s) > MAX_STRING:
        raise StringTooLongError()
    return Value(STRING, s)


EMPTY = Value(STRING, '')
TRUE = Value(INTEGER, -1)
FALSE = Value(INTEGER, 0)


def zero(type_):
    if type_ == STRING:
        return EMPTY
    if type_ == INTEGER:
        return Value(INTEGER, 0)
    return Value(type_, 0.0)


def boolean(flag):
    return TRUE if flag else FALSE


def round_half_away(x):
    """Rounds to the nearest integer, ties away from zero."""
    if x >= 0:
        return int(math.floor(x + 0.5))
    return -int(math.floor(-x + 0.5))


def _to_integer(x):
    return integer(round_half_away(x))


# narrowing and widening between numeric types; strings never convert implicitly
CONVERTERS = {
    INTEGER: _to_integer,
    SINGLE: single,
    DOUBLE: double,
}


def convert(value, target):
    if value.type == target:
        return value
    if value.type == STRING or target == STRING:
        raise TypeMismatchError()
    return CONVERTERS[target](value.data)


def wider(a, b):
    return a if _RANK[a] >= _RANK[b] else b


def to_int(value):
    """CINT semantics: round, then range-check against 16 bits."""
    return convert(value, INTEGER).data


def to_number(value):
    if value.type == STRING:
        raise TypeMismatchError()
    return value.data


def to_str(value):
    if value.type != STRING:
        raise TypeMismatchError()
    return value.data


def truth(value):
    return to_number(value) != 0


def _float_result(type_, x):
    if type_ == DOUBLE:
        return double(x)
    return single(x)


def _numeric_pair(a, b):
    if a.type == STRING or b.type == STRING:
        raise TypeMismatchError()


def _arithmetic(op, a, b):
    _numeric_pair(a, b)
    type_ = wider(a.type, b.type)
    result = op(a.data, b.data)
    if type_ == INTEGER:
        if INT_MIN <= result <= INT_MAX:
            return Value(INTEGER, result)
        return single(result)
    return _float_result(type_, result)


def add(a, b):
    if a.type == STRING and b.type == STRING:
        return string(a.data + b.data)
    return _arithmetic(operator.add, a, b)


def subtract(a, b):
    return _arithmetic(operator.sub, a, b)


def multiply(a, b):
    return _arithmetic(operator.mul, a, b)


def divide(a, b):
    _numeric_pair(a, b)
    if b.data == 0:
        raise DivisionByZeroError()
    type_ = DOUBLE if DOUBLE in (a.type, b.type) else SINGLE
    return _float_result(type_, a.data / b.data)


def integer_divide(a, b):
    x, y = to_int(a), to_int(b)
    if y == 0:
        raise DivisionByZeroError()
    q = abs(x) // abs(y)
    if (x < 0) != (y < 0):
        q = -q
    return integer(q)


def modulo(a, b):
    x, y = to_int(a), to_int(b)
    if y == 0:
        raise DivisionByZeroError()
    r = abs(x) % abs(y)
    return integer(-r if x < 0 else r)


def power(a, b):
    _numeric_pair(a, b)
    x, y = a.data, b.data
    if x == 0 and y < 0:
        raise DivisionByZeroError()
    if x < 0 and y != int(y):
        raise IllegalFunctionCallError()
    try:
        result = math.pow(x, y)
    except OverflowError:
        raise NumericOverflowError() from None
    type_ = DOUBLE if DOUBLE in (a.type, b.type) else SINGLE
    return _float_result(type_, result)


def negate(a):
    if a.type == STRING:
        raise TypeMismatchError()
    if a.type == INTEGER:
        if a.data == INT_MIN:
            return single(-a.data)
        return Value(INTEGER, -a.data)
    return Value(a.type, -a.data)


_RELATIONS = {
    '=': operator.eq,
    '<>': operator.ne,
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
}


def compare(op, a, b):
    if a.is_string != b.is_string:
        raise TypeMismatchError()
    # strings compare in byte order, which is code point order for 0-255
    return boolean(_RELATIONS[op](a.data, b.data))


_LOGICAL = {
    'AND': lambda x, y: x & y,
    'OR': lambda x, y: x | y,
    'XOR': lambda x, y: x ^ y,
    'EQV': lambda x, y: ~(x ^ y),
    'IMP': lambda x, y: ~x | y,
}


def logical(op, a, b):
    return integer(_LOGICAL[op](to_int(a), to_int(b)))


def logical_not(a):
    return integer(~to_int(a))


BINARY_OPERATORS = {
    '+': add,
    '-': subtract,
    '*': multiply,
    '/': divide,
    '\\': integer_divide,
    'MOD': modulo,
    '^': power,
}


def binary(op, a, b):
    if op in _RELATIONS:
        return compare(op, a, b)
    if op in _LOGICAL:
        return logical(op, a, b)
    return BINARY_OPERATORS[op](a, b)


def _significant_digits(text):
    mantissa = re.split('[EeDd]', text)[0]
    return len(mantissa.replace('.', '').lstrip('0'))


def parse_number(text):
    """Classifies and converts a numeric literal in its source spelling."""
    upper = text.upper()
    if upper.startswith('&'):
        if upper.startswith('&H'):
            n = int(upper[2:], 16)
        else:
            n = int(upper[2:] if upper.startswith('&O') else upper[1:], 8)
        if n > 0xFFFF:
            raise NumericOverflowError()
        if n > INT_MAX:
            n -= 0x10000
        return Value(INTEGER, n)
    suffix = upper[-1] if upper[-1] in '%!#' else ''
    body = upper[:-1] if suffix else upper
    x = float(body.replace('D', 'E'))
    if suffix == '%':
        return _to_integer(x)
    if suffix == '#' or 'D' in body:
        return double(x)
    if suffix == '!':
        return single(x)
    if _significant_digits(body) > 7:
        return double(x)
    if '.' in body or 'E' in body:
        return single(x)
    if x <= INT_MAX:
        return Value(INTEGER, int(x))
    return single(x)


def val(text):
    """VAL semantics: the longest numeric prefix, blanks ignored, else zero."""
    text = text.replace(' ', '').replace('\t', '')
    sign = 1
    if text[:1] in ('+', '-'):
        sign = -1 if text[0] == '-' else 1
        text = text[1:]
    match = _number_re.match(text)
    if not match:
        return Value(INTEGER, 0)
    value = parse_number(match.group())
    return negate(value) if sign < 0 else value


def parse_input_number(text):
    """Strict form used by INPUT and READ: the whole field must be numeric."""
    stripped = text.strip()
    if not stripped:
        return Value(INTEGER, 0)
    body = stripped.lstrip('+-')
    if len(stripped) - len(body) > 1:
        return None
    match = _number_re.fullmatch(body)
    if not match:
        return None
    value = parse_number(body)
    return negate(value) if stripped.startswith('-') else value


def _float_text(x, digits, exponent_char):
    if x == 0:
        return '0'
    sign = '-' if x < 0 else ''
    mantissa, exponent = ('%.*e' % (digits - 1, abs(x))).split('e')
    exponent = int(exponent)
    sig = mantissa.replace('.', '').rstrip('0') or '0'
    leading_zeros = max(-exponent - 1, 0)
    fraction_len = max(len(sig) - exponent - 1, 0) + leading_zeros
    if -2 <= exponent < digits and fraction_len <= digits:
        if exponent >= 0:
            whole = sig[:exponent + 1].ljust(exponent + 1, '0')
            fraction = sig[exponent + 1:]
            text = whole + ('.' + fraction if fraction else '')
        else:
            text = '.' + '0' * leading_zeros + sig
    else:
        text = sig[0] + ('.' + sig[1:] if len(sig) > 1 else '')
        text += exponent_char + ('-' if exponent < 0 else '+') + '%02d' % abs(exponent)
    return sign + text


def number_text(value):
    """Canonical decimal spelling of a number, without the sign position."""
    if value.type == INTEGER:
        return str(value.data)
    if value.type == SINGLE:
        return _float_text(value.data, 7, 'E')
    if value.type == DOUBLE:
        return _float_text(value.data, 16, 'D')
    raise TypeMismatchError()


def str_number(value):
    """STR$ form: non-negative numbers get a leading blank for the sign."""
    text = number_text(value)
    return text if text.startswith('-') else ' ' + text
