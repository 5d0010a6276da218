import pytest

from bbcbasic.errors import SyntaxFault
from bbcbasic.lexer import (
    IDENT, INT, KEYWORD, LINENO, OPERATOR, REAL, SEPARATOR, STRING,
    Token, detokenize, tokenize,
)


def test_print_statement_tokens():
    assert tokenize('PRINT "A";B%') == [
        Token(KEYWORD, 'PRINT'),
        Token(STRING, 'A'),
        Token(SEPARATOR, ';'),
        Token(IDENT, 'B%'),
    ]


def test_keywords_are_case_insensitive():
    tokens = tokenize('print x')
    assert tokens[0] == Token(KEYWORD, 'PRINT')
    assert tokens[1] == Token(IDENT, 'x')


def test_two_character_operators():
    assert tokenize('x<=3') == [Token(IDENT, 'x'), Token(OPERATOR, '<='), Token(INT, 3)]
    assert [t.value for t in tokenize('A<>B>=C')] == ['A', '<>', 'B', '>=', 'C']


def test_line_numbers_after_goto_and_on():
    assert tokenize('GOTO 100') == [Token(KEYWORD, 'GOTO'), Token(LINENO, 100)]
    tokens = tokenize('ON X GOTO 10,20,30')
    assert [t.type for t in tokens if t.type == LINENO] == [LINENO] * 3


def test_line_number_after_then_and_else():
    tokens = tokenize('IF A THEN 100 ELSE 200')
    assert tokens[3] == Token(LINENO, 100)
    assert tokens[5] == Token(LINENO, 200)


def test_number_after_then_statement_is_not_a_line_number():
    tokens = tokenize('IF A THEN PRINT 5')
    assert tokens[-1] == Token(INT, 5)


def test_proc_and_fn_prefixes_split():
    assert tokenize('PROCdraw(1)')[:2] == [Token(KEYWORD, 'PROC'), Token(IDENT, 'draw')]
    assert tokenize('X=FNsq(2)')[2:4] == [Token(KEYWORD, 'FN'), Token(IDENT, 'sq')]


def test_rem_and_apostrophe_end_the_line():
    assert tokenize('A=1 REM anything : PRINT') == [
        Token(IDENT, 'A'), Token(OPERATOR, '='), Token(INT, 1),
    ]
    assert tokenize("A=1 ' comment") == [
        Token(IDENT, 'A'), Token(OPERATOR, '='), Token(INT, 1),
    ]


def test_doubled_quote_inside_string():
    assert tokenize('"a""b"') == [Token(STRING, 'a"b')]


def test_numbers():
    assert tokenize('12') == [Token(INT, 12)]
    assert tokenize('1.5') == [Token(REAL, 1.5)]
    assert tokenize('2E3') == [Token(REAL, 2000.0)]
    assert tokenize('.5') == [Token(REAL, 0.5)]
    assert tokenize('3000000000') == [Token(REAL, 3000000000.0)]


def test_hex_literals_are_signed_32_bit():
    assert tokenize('&FF') == [Token(INT, 255)]
    assert tokenize('&FFFFFFFF') == [Token(INT, -1)]


def test_data_items_are_split_on_commas():
    tokens = tokenize('DATA 1, "x,y", abc , -2.5')
    assert tokens == [
        Token(KEYWORD, 'DATA'),
        Token(INT, 1), Token(SEPARATOR, ','),
        Token(STRING, 'x,y'), Token(SEPARATOR, ','),
        Token(STRING, 'abc'), Token(SEPARATOR, ','),
        Token(REAL, -2.5),
    ]
    assert tokens[-1].text == '-2.5'


def test_unterminated_string_reports_column():
    with pytest.raises(SyntaxFault) as info:
        tokenize('PRINT "abc')
    assert info.value.column == 7


def test_unknown_character_reports_column():
    with pytest.raises(SyntaxFault) as info:
        tokenize('A = @')
    assert info.value.column == 5


@pytest.mark.parametrize('source', [
    'PRINT "Hello, ""world""";A$,TAB(10);B%',
    'IF A<>B THEN 100 ELSE PRINT X*2',
    'ON K% GOSUB 10,20,30',
    'FOR I=1 TO 10 STEP -0.5:NEXT I',
    'X=&FF AND NOT Y%',
    'DEF PROCdraw(X,Y$):LOCAL Z',
    'DATA 1, "x,y", abc, -2.5E3',
    'x=1e10+.25',
])
def test_detokenize_round_trip(source):
    tokens = tokenize(source)
    assert tokenize(detokenize(tokens)) == tokens
