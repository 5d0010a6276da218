from bbcbasic.interpreter import Interpreter
from bbcbasic.program import load_program


def test_program_hello(capsys):
    with open('examples/hello.bas', 'r', encoding='utf-8') as f:
        source = f.read()
    program = load_program(source)
    interp = Interpreter()
    interp.run(program)
    out = capsys.readouterr().out.strip()
    assert out == 'Hello World!!'
