"""
Evaluates expression trees against a variable environment.

Operands are evaluated left to right and nothing is cached, so evaluating
the same tree twice observes any change in variable state.
"""

import random

import values
from errors import BasicSyntaxError, OutOfMemoryError, TypeMismatchError
from expressions import (ArrayRef, BinaryOp, FunctionCall, Literal, UnaryOp,
                         UserFunctionCall, Variable)
from functions import BUILTINS

MAX_FN_DEPTH = 100


class Evaluator:
    def __init__(self, env, machine=None, rng=None):
        self.env = env
        # the interpreter, for functions that reach devices, files or ERR/ERL
        self.machine = machine
        self.rng = rng or random.Random(0)
        self.last_random = self.rng.random()
        self._fn_depth = 0
        self._handlers = {
            Literal: self._literal,
            Variable: self._variable,
            ArrayRef: self._array_ref,
            UnaryOp: self._unary,
            BinaryOp: self._binary,
            FunctionCall: self._function,
            UserFunctionCall: self._user_function,
        }

    def evaluate(self, node):
        return self._handlers[type(node)](node)

    def evaluate_int(self, node):
        return values.to_int(self.evaluate(node))

    def evaluate_str(self, node):
        return values.to_str(self.evaluate(node))

    def subscripts(self, node):
        return [self.evaluate_int(expr) for expr in node.subscripts]

    def assign(self, target, value):
        """Stores into a Variable or ArrayRef target."""
        if isinstance(target, ArrayRef):
            self.env.set_element(target.name, target.sigil, self.subscripts(target), value)
        else:
            self.env.set(target.name, value, target.sigil)

    def target_type(self, target):
        if isinstance(target, ArrayRef):
            return self.env.array(target.name, target.sigil, len(target.subscripts)).type
        return self.env.type_of(target.name, target.sigil)

    # Node handlers

    def _literal(self, node):
        return node.value

    def _variable(self, node):
        return self.env.get(node.name, node.sigil)

    def _array_ref(self, node):
        return self.env.get_element(node.name, node.sigil, self.subscripts(node))

    def _unary(self, node):
        operand = self.evaluate(node.operand)
        if node.op == 'NOT':
            return values.logical_not(operand)
        return values.negate(operand)

    def _binary(self, node):
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)
        return values.binary(node.op, left, right)

    def _function(self, node):
        entry = BUILTINS[node.name]
        args = [self.evaluate(arg) for arg in node.args]
        for kind, arg in zip(entry.arg_types, args):
            if (kind == 'N' and arg.is_string) or (kind == 'S' and not arg.is_string):
                raise TypeMismatchError()
        return entry.impl(self, *args)

    def _user_function(self, node):
        type_, definition = self.env.function(node.name, node.sigil)
        if len(node.args) != len(definition.params):
            raise BasicSyntaxError("Wrong number of arguments to FN" + node.name)
        args = [self.evaluate(arg) for arg in node.args]
        if self._fn_depth >= MAX_FN_DEPTH:
            raise OutOfMemoryError()
        saved = self.env.bind(zip(definition.params, args))
        self._fn_depth += 1
        try:
            result = self.evaluate(definition.body)
        finally:
            self._fn_depth -= 1
            self.env.unbind(saved)
        if (type_ == values.STRING) != result.is_string:
            raise TypeMismatchError()
        return values.convert(result, type_)
