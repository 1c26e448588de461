"""CLI entry point for the CSP pseudocode interpreter.

Usage:
    python -m cspseudo [-v|-vv|-vvv] <program_file>
    python -m cspseudo [-v...] --emit-ast <program_file>
    python -m cspseudo [-v...] --ast <ast_json_file>
    python -m cspseudo --suggest <caret> <program_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .csp file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file
  --suggest     Print completions for the word ending at a caret offset

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. Diagnostics are printed to stderr with the
offending line underlined, and the exit status is 1.
"""

import argparse
import json
import sys
from pathlib import Path
from .interpreter import parse_program, Interpreter, evaluate_source
from .ast_json import ast_to_obj, ast_from_obj
from .errors import CSPError
from .suggest import suggest


def _read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="CSP pseudocode interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='CSP_FILE', help='emit AST JSON for the given .csp file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    group.add_argument('--suggest', nargs=2, metavar=('CARET', 'CSP_FILE'),
                       help='print completions for the word before CARET in CSP_FILE')
    parser.add_argument('program', nargs='?', help='CSP pseudocode file (.csp) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = _read_source(program_file)
        try:
            ast_program = parse_program(source)
        except CSPError as e:
            print(e.render(source), file=sys.stderr)
            sys.exit(1)
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        ast_program = ast_from_obj(data)
        interpreter = Interpreter(debug_level=args.v)
        try:
            interpreter.run(ast_program)
        except CSPError as e:
            # no source text to underline; report the character range instead
            print(f"Runtime error at {e.start}-{e.end}: {e.message}", file=sys.stderr)
            sys.exit(1)
        return

    # Completion mode
    if args.suggest:
        caret_text, file_name = args.suggest
        try:
            caret = int(caret_text)
        except ValueError:
            parser.error(f'CARET must be an integer offset, not {caret_text!r}')
        source = _read_source(Path(file_name))
        for s in suggest(source, max(0, min(caret, len(source)))):
            print(f"{s.key}\t{s.display}\t{s.score:.3f}")
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast/--suggest')
    source = _read_source(Path(args.program))
    result = evaluate_source(source, debug_level=args.v)
    if not result.ok:
        print(result.error.render(source), file=sys.stderr)
        sys.exit(1)

if __name__ == '__main__':
    main()
