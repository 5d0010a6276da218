import pytest

from bbcbasic.ast import BinaryOp, Call, FnCall, Literal, UnaryOp, Variable
from bbcbasic.errors import SyntaxFault
from bbcbasic.expressions import parse_expression_text


def lit(value):
    return Literal(value, 'Integer')


def test_multiplication_binds_tighter_than_addition():
    assert parse_expression_text('1+2*3') == BinaryOp('+', lit(1), BinaryOp('*', lit(2), lit(3)))


def test_parentheses_reset_precedence():
    assert parse_expression_text('(1+2)*3') == BinaryOp('*', BinaryOp('+', lit(1), lit(2)), lit(3))


def test_unary_minus_binds_looser_than_power():
    assert parse_expression_text('-2^2') == UnaryOp('-', BinaryOp('^', lit(2), lit(2)))


def test_power_is_right_associative():
    assert parse_expression_text('2^3^2') == BinaryOp('^', lit(2), BinaryOp('^', lit(3), lit(2)))


def test_subtraction_is_left_associative():
    assert parse_expression_text('5-2-1') == BinaryOp('-', BinaryOp('-', lit(5), lit(2)), lit(1))


def test_keyword_operators_share_the_table():
    a, b, c = Variable('A'), Variable('B'), Variable('C')
    assert parse_expression_text('A AND B OR C') == BinaryOp('OR', BinaryOp('AND', a, b), c)
    assert parse_expression_text('X MOD 3 = 2') == BinaryOp(
        '=', BinaryOp('MOD', Variable('X'), lit(3)), lit(2))
    assert parse_expression_text('7 DIV 2 * 3') == BinaryOp(
        '*', BinaryOp('DIV', lit(7), lit(2)), lit(3))


def test_not_applies_to_its_operand_only():
    assert parse_expression_text('NOT A = B') == BinaryOp(
        '=', UnaryOp('NOT', Variable('A')), Variable('B'))


def test_split_comparison_is_combined():
    assert parse_expression_text('A < = B') == BinaryOp('<=', Variable('A'), Variable('B'))
    assert parse_expression_text('A < > B') == BinaryOp('<>', Variable('A'), Variable('B'))


def test_calls_and_fn_calls():
    assert parse_expression_text('LEFT$(A$,2)') == Call('LEFT$', (Variable('A$'), lit(2)))
    assert parse_expression_text('FNf(1,2)') == FnCall('f', (lit(1), lit(2)))
    assert parse_expression_text('FNpi') == FnCall('pi', ())


def test_true_and_false():
    assert parse_expression_text('TRUE') == Literal(-1, 'Integer')
    assert parse_expression_text('FALSE') == Literal(0, 'Integer')


def test_literals_keep_their_type():
    assert parse_expression_text('1.5') == Literal(1.5, 'Real')
    assert parse_expression_text('"hi"') == Literal('hi', 'String')


@pytest.mark.parametrize('source', ['1 +', '(1', '*2', '1 2', 'A(1,'])
def test_malformed_expressions(source):
    with pytest.raises(SyntaxFault):
        parse_expression_text(source)
