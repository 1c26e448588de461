import json
from pathlib import Path

import pytest

from cspseudo.ast_json import ast_from_obj, ast_to_obj, token_to_obj
from cspseudo.interpreter import Interpreter
from cspseudo.parser import parse_program
from cspseudo.tokens import Token, TokenType

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_token_object():
    assert token_to_obj(Token('←', TokenType.ASSIGN, 3)) == {'text': '←', 'kind': 'ASSIGN', 'offset': 3}


def test_assignment_shape():
    obj = ast_to_obj(parse_program('x ← 1'))
    assert obj == {
        'type': 'Program',
        'body': [{
            'type': 'Assign',
            'target': {'text': 'x', 'kind': 'ID', 'offset': 1},
            'expression': {'type': 'Literal', 'token': {'text': '1', 'kind': 'NUMBER', 'offset': 5}},
        }],
    }


@pytest.mark.parametrize('name', sorted(p.name for p in EXAMPLES.glob('*.csp')))
def test_examples_survive_json(name):
    source = (EXAMPLES / name).read_text(encoding='utf-8')
    program = parse_program(source)
    text = json.dumps(ast_to_obj(program), ensure_ascii=False)
    assert ast_from_obj(json.loads(text)) == program


def test_loaded_tree_runs():
    program = parse_program('PROCEDURE f(a) { RETURN a + 1 }\nDISPLAY(f(1))')
    loaded = ast_from_obj(json.loads(json.dumps(ast_to_obj(program))))
    lines = []
    Interpreter(output=lines.append).run(loaded)
    assert lines == ['2']


def test_unknown_node_type():
    with pytest.raises(ValueError):
        ast_from_obj({'type': 'Goto'})
    with pytest.raises(TypeError):
        ast_to_obj(object())
