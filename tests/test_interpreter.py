import builtins
import math
import sys

import pytest

from bbcbasic.interpreter import Interpreter
from bbcbasic.program import load_program


def run(*lines, **options):
    interp = Interpreter(**options)
    interp.run(load_program('\n'.join(lines) + '\n'))
    return interp


def output(capsys):
    return capsys.readouterr().out


def test_mod_assignment():
    interp = run('10 X%=5 MOD 3')
    assert interp.state.env.get_scalar('X%') == 2


def test_power_prints_integer(capsys):
    run('10 PRINT 2^10')
    assert output(capsys) == '1024\n'


def test_for_loop_prints_in_order(capsys):
    run('10 FOR I%=1 TO 3:PRINT I%:NEXT I%')
    assert output(capsys) == '1\n2\n3\n'


ON_PROGRAM = [
    '20 PRINT "fell"',
    '30 END',
    '100 PRINT "100" : END',
    '200 PRINT "200" : END',
    '300 PRINT "300" : END',
]


def test_on_goto_selects_target(capsys):
    run('10 ON 2 GOTO 100,200,300', *ON_PROGRAM)
    assert output(capsys) == '200\n'


@pytest.mark.parametrize('selector', ['0', '4', '9', '-1'])
def test_on_goto_out_of_range_falls_through(capsys, selector):
    run(f'10 ON {selector} GOTO 100,200,300', *ON_PROGRAM)
    assert output(capsys) == 'fell\n'


def test_on_gosub_returns(capsys):
    run(
        '10 FOR K% = 1 TO 3',
        '20 ON K% GOSUB 100, 200',
        '30 NEXT K%',
        '40 END',
        '100 PRINT "a" : RETURN',
        '200 PRINT "b" : RETURN',
    )
    assert output(capsys) == 'a\nb\n'


@pytest.mark.parametrize('start,limit,step', [
    (1, 10, 1),
    (1, 10, 3),
    (10, 1, -1),
    (10, 1, -4),
    (5, 1, 1),
    (1, 5, -1),
    (1, 1, 1),
    (0, 1, 0.25),
])
def test_for_trip_count(start, limit, step):
    interp = run(
        '10 C% = 0',
        f'20 FOR I = {start} TO {limit} STEP {step}',
        '30 C% = C% + 1',
        '40 NEXT I',
    )
    expected = max(0, math.floor((limit - start) / step) + 1)
    assert interp.state.env.get_scalar('C%') == expected
    assert interp.state.stacks.fors == []


def test_integer_counter_steps_in_whole_numbers(capsys):
    run('10 FOR I% = 1 TO 7 STEP 2.9', '20 PRINT I%', '30 NEXT')
    assert output(capsys) == '1\n3\n5\n7\n'


def test_recursion_limit_is_restored_after_run():
    before = sys.getrecursionlimit()
    interp = Interpreter(max_depth=1000)
    assert sys.getrecursionlimit() == before
    interp.run(load_program('10 DEF FNf(N) = N\n20 X = FNf(1)\n'))
    assert sys.getrecursionlimit() == before


def test_for_counter_without_sigil_stays_integer(capsys):
    interp = run('10 FOR I = 1 TO 3 : NEXT', '20 PRINT I')
    assert output(capsys) == '4\n'
    assert isinstance(interp.state.env.get_scalar('I'), int)


def test_nested_for_with_combined_next(capsys):
    run(
        '10 FOR I% = 1 TO 2 : FOR J% = 1 TO 2',
        '20 PRINT I% * 10 + J%',
        '30 NEXT J%, I%',
    )
    assert output(capsys) == '11\n12\n21\n22\n'


def test_goto_out_of_a_loop_leaves_its_frame(capsys):
    interp = run(
        '10 FOR I% = 1 TO 10',
        '20 IF I% = 3 THEN GOTO 40',
        '30 NEXT I%',
        '40 PRINT I%',
    )
    assert output(capsys) == '3\n'
    assert [f.var for f in interp.state.stacks.fors] == ['I%']


def test_restarting_a_for_discards_the_old_frame():
    interp = run(
        '10 N% = 0',
        '20 FOR I% = 1 TO 5',
        '30 N% = N% + 1',
        '40 IF N% < 3 THEN GOTO 20',
        '50 NEXT I%',
    )
    assert interp.state.stacks.fors == []
    assert interp.state.env.get_scalar('N%') == 7


def test_repeat_until(capsys):
    run('10 N% = 0', '20 REPEAT : N% = N% + 1 : UNTIL N% = 4', '30 PRINT N%')
    assert output(capsys) == '4\n'


def test_while_false_skips_body(capsys):
    run(
        '10 I% = 5',
        '20 WHILE I% < 3',
        '30 PRINT "inside"',
        '40 ENDWHILE',
        '50 PRINT "after"',
    )
    assert output(capsys) == 'after\n'


def test_while_skip_tracks_nesting(capsys):
    run(
        '10 WHILE FALSE',
        '20 WHILE TRUE',
        '30 ENDWHILE',
        '40 PRINT "no"',
        '50 ENDWHILE',
        '60 PRINT "yes"',
    )
    assert output(capsys) == 'yes\n'


def test_while_loop_reevaluates_condition(capsys):
    interp = run('10 I% = 0', '20 WHILE I% < 3 : I% = I% + 1 : ENDWHILE', '30 PRINT I%')
    assert output(capsys) == '3\n'
    assert interp.state.stacks.whiles == []


def test_gosub_and_return(capsys):
    run(
        '10 GOSUB 100 : PRINT "back"',
        '20 END',
        '100 PRINT "sub" : GOSUB 200 : RETURN',
        '200 PRINT "deeper" : RETURN',
    )
    assert output(capsys) == 'sub\ndeeper\nback\n'


def test_if_else_on_one_line(capsys):
    run('10 IF 0 THEN PRINT "a" ELSE PRINT "b" : PRINT "c"')
    assert output(capsys) == 'b\nc\n'
    run('10 IF 1 THEN PRINT "a" ELSE PRINT "b" : PRINT "c"', '20 PRINT "z"')
    assert output(capsys) == 'a\nz\n'
    run('10 IF 1 THEN PRINT "a" : PRINT "b"', '20 PRINT "z"')
    assert output(capsys) == 'a\nb\nz\n'
    run('10 IF 0 THEN PRINT "a" : PRINT "b"', '20 PRINT "z"')
    assert output(capsys) == 'z\n'


def test_nested_if(capsys):
    run('10 IF 1 THEN IF 0 THEN PRINT "x" ELSE PRINT "y"')
    assert output(capsys) == 'y\n'


def test_if_line_number_branch(capsys):
    run('10 IF 2 > 1 THEN 30', '20 PRINT "skipped"', '30 PRINT "target"')
    assert output(capsys) == 'target\n'


def test_procedures_and_local(capsys):
    interp = run(
        '10 X = 1',
        '20 PROCp(5)',
        '30 PRINT X',
        '40 END',
        '100 DEF PROCp(N)',
        '110 LOCAL X',
        '120 X = N * 2',
        '130 PRINT X',
        '140 ENDPROC',
    )
    assert output(capsys) == '10\n1\n'
    assert interp.state.env.scope_depth == 0
    assert interp.state.stacks.returns == []
    assert not interp.state.env.has_scalar('N')


def test_recursive_procedure(capsys):
    run(
        '10 PROCcount(3)',
        '20 END',
        '100 DEF PROCcount(N%)',
        '110 IF N% = 0 THEN ENDPROC',
        '120 PROCcount(N% - 1)',
        '130 PRINT N%',
        '140 ENDPROC',
    )
    assert output(capsys) == '1\n2\n3\n'


def test_functions(capsys):
    run(
        '10 PRINT FNsq(7); " "; FNjoin$("a", "b")',
        '20 END',
        '100 DEF FNsq(X) = X * X',
        '110 DEF FNjoin$(A$, B$) = A$ + "-" + B$',
    )
    assert output(capsys) == '49 a-b\n'


def test_fn_restores_scope_when_body_faults(capsys):
    run(
        '10 ON ERROR GOTO 100',
        '20 X = 7',
        '30 Y = FNbad(1)',
        '40 END',
        '100 PRINT X',
        '200 DEF FNbad(X) = X / 0',
    )
    assert output(capsys) == '7\n'


def test_definitions_are_skipped_in_normal_flow(capsys):
    run('10 DEF PROCx : PRINT "in"', '20 PRINT "main"')
    assert output(capsys) == 'main\n'


def test_integer_overflow_promotes_to_real(capsys):
    run('10 A% = 2147483647', '20 B = A% + 1', '30 PRINT B')
    assert output(capsys) == '2147483648\n'


def test_div_and_mod_truncate_toward_zero(capsys):
    run('10 PRINT -7 DIV 2; " "; -7 MOD 2; " "; 7 DIV -2; " "; 7 MOD -2')
    assert output(capsys) == '-3 -1 -3 1\n'


def test_comparisons_and_bitwise_operators(capsys):
    run('10 PRINT 3 > 2; " "; "a" < "b"; " "; 1 = 2')
    assert output(capsys) == '-1 -1 0\n'
    run('10 PRINT 6 AND 3; " "; 6 OR 3; " "; 6 EOR 3; " "; NOT 0')
    assert output(capsys) == '2 7 5 -1\n'


def test_real_arithmetic_output(capsys):
    run('10 PRINT 10 / 4; " "; 0.1 + 0.2; " "; 1E10; " "; 2^0.5')
    assert output(capsys) == '2.5 0.3 1E10 1.41421356\n'


def test_string_functions_in_program(capsys):
    run('10 A$ = "Hello"', '20 PRINT LEFT$(A$, 2); MID$(A$, 2, 3); RIGHT$(A$, 1); LEN(A$)')
    assert output(capsys) == 'Heello5\n'


def test_print_zones_tab_and_spc(capsys):
    run('10 PRINT "A","B"')
    assert output(capsys) == 'A' + ' ' * 9 + 'B\n'
    run('10 PRINT TAB(5);"x"')
    assert output(capsys) == '     x\n'
    run('10 PRINT "ab";SPC(3);"c"')
    assert output(capsys) == 'ab   c\n'
    run('10 PRINT "no newline";', '20 PRINT "!"')
    assert output(capsys) == 'no newline!\n'


def test_pos_reports_column(capsys):
    run('10 PRINT "abc"; POS')
    assert output(capsys) == 'abc3\n'


def test_input_number(capsys, monkeypatch):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': '42')
    run('10 INPUT A%', '20 PRINT A% * 2')
    assert output(capsys) == '84\n'


def test_input_several_targets(monkeypatch):
    answers = iter(['  Bob  ', '3.5'])
    prompts = []

    def fake_input(prompt=''):
        prompts.append(prompt)
        return next(answers)

    monkeypatch.setattr(builtins, 'input', fake_input)
    interp = run('10 INPUT "Name";N$, X')
    assert interp.state.env.get_scalar('N$') == 'Bob'
    assert interp.state.env.get_scalar('X') == 3.5
    assert prompts == ['Name', '? ']


def test_input_prompt_with_question_mark(monkeypatch):
    prompts = []
    monkeypatch.setattr(builtins, 'input', lambda prompt='': prompts.append(prompt) or '1')
    run('10 INPUT "Age", A%')
    assert prompts == ['Age? ']


def test_read_data_and_restore(capsys):
    run(
        '10 READ A, B$, C$',
        '20 PRINT A; B$; C$',
        '30 RESTORE',
        '40 READ D',
        '50 PRINT D',
        '60 DATA 1.5, hello, 42',
    )
    assert output(capsys) == '1.5hello42\n1.5\n'


def test_eval(capsys):
    run('10 X = 4', '20 PRINT EVAL("X*2+1")')
    assert output(capsys) == '9\n'


def test_end_stops_the_run(capsys):
    run('10 PRINT 1', '20 END', '30 PRINT 2')
    assert output(capsys) == '1\n'
    run('10 PRINT 1', '20 STOP', '30 PRINT 2')
    assert output(capsys) == '1\n'


def test_request_stop_halts_at_next_statement(capsys, monkeypatch):
    interp = Interpreter()

    def fake_input(prompt=''):
        interp.request_stop()
        return '1'

    monkeypatch.setattr(builtins, 'input', fake_input)
    interp.run(load_program('10 INPUT A\n20 PRINT "after"\n'))
    assert output(capsys) == ''
    assert interp.state.env.get_scalar('A') == 1


def test_rnd_is_repeatable_with_a_seed(capsys):
    run('10 PRINT RND(1000); " "; RND(1000)', seed=42)
    first = output(capsys)
    run('10 PRINT RND(1000); " "; RND(1000)', seed=42)
    assert output(capsys) == first


def test_debug_trace_is_written(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    interp = run('10 A = 1 : PRINT A', debug_level=2, debug_file=str(debug_file))
    interp.close()
    text = debug_file.read_text()
    assert 'run: 1 lines' in text
    assert '10:0 Assign' in text
    assert '10:1 Print' in text
