import json
import shutil

import pytest

from bbcbasic.__main__ import main


def test_runs_a_program_file(capsys):
    main(['examples/hello.bas'])
    assert capsys.readouterr().out.strip() == 'Hello World!!'


def test_emit_ast_then_run_it(tmp_path, capsys):
    source = tmp_path / 'procs.bas'
    shutil.copy('examples/procs.bas', source)
    main(['--emit-ast', str(source)])
    out_path = tmp_path / 'procs.bas.ast.json'
    assert capsys.readouterr().out.strip() == str(out_path)
    with open(out_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    assert data['type'] == 'Program'
    main(['--ast', str(out_path)])
    assert capsys.readouterr().out.splitlines()[0] == 'Moves: 7'


def test_list_prints_normalised_listing(tmp_path, capsys):
    source = tmp_path / 'short.bas'
    source.write_text('20 print "b";\n10 let x=1:PRINT x\n5 REM hello\n')
    main(['--list', str(source)])
    assert capsys.readouterr().out == '5 REM\n10 x = 1 : PRINT x\n20 PRINT "b" ;\n'


def test_runtime_error_exits_with_status_1(tmp_path, capsys):
    source = tmp_path / 'bad.bas'
    source.write_text('10 PRINT "ok"\n20 PRINT 1/0\n')
    with pytest.raises(SystemExit) as info:
        main([str(source)])
    assert info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == 'ok\n'
    assert captured.err.strip() == 'Runtime error: Division by zero at line 20'


def test_syntax_error_exits_with_status_1(tmp_path, capsys):
    source = tmp_path / 'bad.bas'
    source.write_text('10 PRINT "ok"\n20 PRINT (\n')
    with pytest.raises(SystemExit) as info:
        main([str(source)])
    assert info.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err.startswith('Syntax error:')
    assert 'at line 20' in captured.err


def test_missing_file(capsys):
    with pytest.raises(SystemExit) as info:
        main(['examples/does_not_exist.bas'])
    assert info.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_seed_and_max_depth_options(tmp_path, capsys):
    source = tmp_path / 'deep.bas'
    source.write_text('10 GOSUB 10\n')
    with pytest.raises(SystemExit):
        main(['--max-depth', '5', '--seed', '1', str(source)])
    assert 'Too many GOSUBs' in capsys.readouterr().err
