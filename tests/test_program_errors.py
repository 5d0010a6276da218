from bbcbasic.interpreter import Interpreter
from bbcbasic.program import load_program


def test_program_errors(capsys):
    with open('examples/errors.bas', 'r', encoding='utf-8') as f:
        source = f.read()
    program = load_program(source)
    interp = Interpreter()
    interp.run(program)
    out = capsys.readouterr().out.strip()
    assert out.splitlines() == [
        'Start',
        'Error 18 at line 50: Division by zero',
    ]
    assert interp.state.last_error.line == 50
