"""CLI entry point for the BBC BASIC interpreter.

Usage:
    python -m bbcbasic [-v|-vv|-vvv] <program_file>
    python -m bbcbasic [-v...] --emit-ast <program_file>
    python -m bbcbasic [-v...] --ast <ast_json_file>
    python -m bbcbasic --list <program_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .bas file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --list        Print the program as a normalised listing
  --max-depth   Limit for GOSUB/PROC, FOR, REPEAT, WHILE and FN nesting
  --seed        Seed for RND, for repeatable runs

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from .ast_json import ast_to_obj, ast_from_obj
from .errors import BasicError, SyntaxFault
from .interpreter import Interpreter
from .listing import format_program
from .program import ProgramStore, load_program


def read_source(path_text: str) -> str:
    program_file = Path(path_text)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def load_or_exit(source: str) -> ProgramStore:
    try:
        store = load_program(source)
        # parse every line up front so syntax errors are reported before output
        store.to_program()
    except SyntaxFault as e:
        print(f"Syntax error: {e}", file=sys.stderr)
        sys.exit(1)
    return store


def execute(store: ProgramStore, args) -> None:
    interpreter = Interpreter(debug_level=args.v, max_depth=args.max_depth, seed=args.seed)
    try:
        interpreter.run(store)
    except KeyboardInterrupt:
        print("\nEscape", file=sys.stderr)
        sys.exit(1)
    except BasicError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="BBC BASIC interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='BAS_FILE', help='emit AST JSON for the given .bas file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--list', metavar='BAS_FILE', help='print the normalised listing of a .bas file')
    parser.add_argument('--max-depth', type=int, default=256, help='nesting limit for calls and loops')
    parser.add_argument('--seed', type=int, default=None, help='seed for RND')
    parser.add_argument('program', nargs='?', help='BBC BASIC program file (.bas) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        store = load_or_exit(read_source(args.emit_ast))
        obj = ast_to_obj(store.to_program())
        program_file = Path(args.emit_ast)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Listing mode
    if args.list:
        store = load_or_exit(read_source(args.list))
        print(format_program(store.to_program()), end='')
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        try:
            store = ProgramStore.from_program(ast_from_obj(data))
        except (ValueError, TypeError, KeyError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        execute(store, args)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast/--list')
    execute(load_or_exit(read_source(args.program)), args)

if __name__ == '__main__':
    main()
