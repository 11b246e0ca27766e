import pytest

from errors import ArgumentError, BasicSyntaxError
from expressions import (ArrayRef, BinaryOp, FunctionCall, Literal, UnaryOp,
                         UserFunctionCall, Variable, parse_expression)
from lexer import Lexer
from values import INTEGER, STRING, Value


def parse(text):
    return parse_expression(Lexer().tokenize(text))


def lit(n):
    return Literal(Value(INTEGER, n))


class TestPrecedence:
    def test_multiplication_binds_tighter(self):
        assert parse('1 + 2 * 3') == BinaryOp('+', lit(1), BinaryOp('*', lit(2), lit(3)))

    def test_left_associative(self):
        assert parse('8 - 2 - 1') == BinaryOp('-', BinaryOp('-', lit(8), lit(2)), lit(1))

    def test_power_is_right_associative(self):
        assert parse('2 ^ 3 ^ 2') == BinaryOp('^', lit(2), BinaryOp('^', lit(3), lit(2)))

    def test_negation_is_looser_than_power(self):
        assert parse('-2 ^ 2') == UnaryOp('-', BinaryOp('^', lit(2), lit(2)))

    def test_mod_is_looser_than_integer_division(self):
        assert parse('7 MOD 3 \\ 2') == BinaryOp('MOD', lit(7), BinaryOp('\\', lit(3), lit(2)))

    def test_mod_is_tighter_than_addition(self):
        assert parse('7 MOD 3 + 1') == BinaryOp('+', BinaryOp('MOD', lit(7), lit(3)), lit(1))
        assert parse('2 + 3 * 4') == BinaryOp('+', lit(2), BinaryOp('*', lit(3), lit(4)))

    def test_relational_below_arithmetic(self):
        assert parse('A + 1 = B') == BinaryOp('=', BinaryOp('+', Variable('A', None), lit(1)),
                                              Variable('B', None))

    def test_logical_below_relational(self):
        expected = BinaryOp('AND', BinaryOp('=', Variable('A', None), lit(1)), Variable('B', None))
        assert parse('A = 1 AND B') == expected

    def test_not_covers_comparison(self):
        expected = UnaryOp('NOT', BinaryOp('=', Variable('A', None), Variable('B', None)))
        assert parse('NOT A = B') == expected

    def test_parentheses(self):
        assert parse('(1 + 2) * 3') == BinaryOp('*', BinaryOp('+', lit(1), lit(2)), lit(3))

    def test_relational_operators_do_not_chain(self):
        with pytest.raises(BasicSyntaxError):
            parse('1 < 2 < 3')


class TestPrimaries:
    def test_string_literal(self):
        assert parse('"hi"') == Literal(Value(STRING, 'hi'))

    def test_array_reference(self):
        assert parse('A$(1, 2)') == ArrayRef('A', '$', (lit(1), lit(2)))

    def test_builtin_call(self):
        assert parse('LEFT$(A$, 2)') == FunctionCall('LEFT$', (Variable('A', '$'), lit(2)))

    def test_optional_parentheses(self):
        assert parse('RND') == FunctionCall('RND', ())
        assert parse('RND(1)') == FunctionCall('RND', (lit(1),))

    def test_user_function(self):
        assert parse('FNF(2)') == UserFunctionCall('F', None, (lit(2),))


class TestErrors:
    def test_wrong_arity(self):
        with pytest.raises(ArgumentError):
            parse('LEFT$(A$)')

    def test_missing_argument_list(self):
        with pytest.raises(ArgumentError):
            parse('LEN')

    def test_unbalanced_parenthesis(self):
        with pytest.raises(BasicSyntaxError):
            parse('(1 + 2')

    def test_error_names_offending_column(self):
        with pytest.raises(BasicSyntaxError) as info:
            parse('1 + * 2')
        assert info.value.column == 5

    def test_trailing_tokens(self):
        with pytest.raises(BasicSyntaxError):
            parse('1 2')
