from bbcbasic.interpreter import Interpreter
from bbcbasic.program import load_program


def test_program_menu(capsys):
    with open('examples/menu.bas', 'r', encoding='utf-8') as f:
        source = f.read()
    program = load_program(source)
    interp = Interpreter()
    interp.run(program)
    out = capsys.readouterr().out.strip()
    # K% = 4 is past the end of the ON GOSUB list and falls through
    assert out.splitlines() == ['one', 'two', 'three']
    assert interp.state.stacks.returns == []
