"""
The variable and type environment.

Variables are keyed by (name, type). A name without a sigil takes its
type from the DEFtype table the first time it is referenced and keeps it
until the environment is cleared. Scalars and arrays share the key space.
"""

import logging
from functools import reduce
from operator import mul

import values
from errors import (BasicSyntaxError, DuplicateDeclarationError,
                    IllegalFunctionCallError, OutOfMemoryError, SubscriptError,
                    TypeMismatchError, UndefinedFunctionError)
from values import SINGLE, STRING

log = logging.getLogger(__name__)

MAX_DIMENSIONS = 255
MAX_ELEMENTS = 1 << 20
IMPLICIT_BOUND = 10


class Array:
    """Fixed-shape array with row-major flat storage."""

    def __init__(self, type_, base, bounds):
        self.type = type_
        self.base = base
        self.bounds = tuple(bounds)
        size = reduce(mul, (upper - base + 1 for upper in self.bounds), 1)
        if size > MAX_ELEMENTS:
            raise OutOfMemoryError()
        self.data = [values.zero(type_)] * size

    def offset(self, subscripts):
        if len(subscripts) != len(self.bounds):
            raise IllegalFunctionCallError("Wrong number of subscripts")
        offset = 0
        for index, upper in zip(subscripts, self.bounds):
            if not self.base <= index <= upper:
                raise SubscriptError()
            offset = offset * (upper - self.base + 1) + (index - self.base)
        return offset

    def get(self, subscripts):
        return self.data[self.offset(subscripts)]

    def set(self, subscripts, value):
        self.data[self.offset(subscripts)] = value


def _coerce(value, type_):
    if (type_ == STRING) != value.is_string:
        raise TypeMismatchError()
    return values.convert(value, type_)


class Environment:
    def __init__(self):
        self.clear_all()

    def clear_all(self):
        """Unbinds every variable, array and user function."""
        self.scalars = {}
        self.arrays = {}
        self.functions = {}
        self.implicit = {}
        self.deftypes = {}
        self.base = 0
        self.base_fixed = False

    # Types

    def type_of(self, name, sigil=None):
        if sigil is not None:
            return sigil
        type_ = self.implicit.get(name)
        if type_ is None:
            type_ = self.deftypes.get(name[0], SINGLE)
            self.implicit[name] = type_
        return type_

    def set_deftype(self, type_, letters):
        for first, last in letters:
            for code in range(ord(first), ord(last) + 1):
                self.deftypes[chr(code)] = type_

    # Scalars

    def _scalar_key(self, name, sigil):
        key = (name, self.type_of(name, sigil))
        if key in self.arrays:
            raise DuplicateDeclarationError()
        return key

    def get(self, name, sigil=None):
        key = self._scalar_key(name, sigil)
        value = self.scalars.get(key)
        if value is None:
            value = self.scalars[key] = values.zero(key[1])
        return value

    def set(self, name, value, sigil=None):
        key = self._scalar_key(name, sigil)
        self.scalars[key] = _coerce(value, key[1])

    def bind(self, pairs):
        """Temporarily binds (Variable, Value) pairs; returns what to restore."""
        saved = []
        for var, value in pairs:
            key = self._scalar_key(var.name, var.sigil)
            saved.append((key, self.scalars.get(key)))
            self.scalars[key] = _coerce(value, key[1])
        return saved

    def unbind(self, saved):
        for key, old in reversed(saved):
            if old is None:
                self.scalars.pop(key, None)
            else:
                self.scalars[key] = old

    # Arrays

    def set_option_base(self, base):
        if base not in (0, 1):
            raise BasicSyntaxError()
        if self.base_fixed or self.arrays:
            raise DuplicateDeclarationError()
        self.base = base
        self.base_fixed = True

    def declare_array(self, name, sigil, bounds):
        type_ = self.type_of(name, sigil)
        key = (name, type_)
        if key in self.arrays or key in self.scalars:
            raise DuplicateDeclarationError()
        if not 1 <= len(bounds) <= MAX_DIMENSIONS:
            raise BasicSyntaxError("Bad number of dimensions")
        for upper in bounds:
            if upper < self.base:
                raise SubscriptError()
        self.base_fixed = True
        self.arrays[key] = Array(type_, self.base, bounds)
        log.debug("Dimensioned %s%s%s", name, type_, list(bounds))
        return self.arrays[key]

    def array(self, name, sigil, rank):
        """Looks up an array, dimensioning it to 10 on first reference."""
        key = (name, self.type_of(name, sigil))
        found = self.arrays.get(key)
        if found is None:
            found = self.declare_array(name, sigil, [IMPLICIT_BOUND] * rank)
        return found

    def get_element(self, name, sigil, subscripts):
        return self.array(name, sigil, len(subscripts)).get(subscripts)

    def set_element(self, name, sigil, subscripts, value):
        found = self.array(name, sigil, len(subscripts))
        found.set(subscripts, _coerce(value, found.type))

    def erase_array(self, name, sigil):
        key = (name, self.type_of(name, sigil))
        if key not in self.arrays:
            raise IllegalFunctionCallError()
        del self.arrays[key]

    # User functions

    def define_function(self, definition):
        self.functions[(definition.name, self.type_of(definition.name, definition.sigil))] = definition

    def function(self, name, sigil):
        key = (name, self.type_of(name, sigil))
        try:
            return key[1], self.functions[key]
        except KeyError:
            raise UndefinedFunctionError() from None
