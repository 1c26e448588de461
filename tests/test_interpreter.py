import pytest

from cspseudo.errors import CSPError, UnsupportedOperation
from cspseudo.interpreter import Interpreter, compile_module, evaluate_source, run_program
from cspseudo.parser import parse_program
from cspseudo.types import NULL, BooleanValue, ListValue, NumberValue, TextValue


def run(source):
    lines = []
    result = run_program(source, output=lines.append)
    return result, lines


def value_of(expression):
    result, _ = run(f'RETURN {expression}')
    return result


# Operators


@pytest.mark.parametrize('expression, expected', [
    ('1 + 2', NumberValue(3.0)),
    ('10 - 4 - 3', NumberValue(9.0)),
    ('2 * 3 + 4', NumberValue(14.0)),
    ('7 / 2', NumberValue(3.5)),
    ('7 MOD 3', NumberValue(1.0)),
    ('-7 MOD 3', NumberValue(-1.0)),
    ('"ab" + "cd"', TextValue('abcd')),
    ('3 < 4', BooleanValue(True)),
    ('3 ≥ 4', BooleanValue(False)),
    ('3 <= 3', BooleanValue(True)),
    ('"a" = "a"', BooleanValue(True)),
    ('"a" ≠ "b"', BooleanValue(True)),
    ('true AND false', BooleanValue(False)),
    ('true OR false', BooleanValue(True)),
    ('NOT true', BooleanValue(False)),
    ('-(2 + 3)', NumberValue(-5.0)),
    ('false = false', BooleanValue(True)),
])
def test_operators(expression, expected):
    assert value_of(expression) == expected


def test_mixed_types_are_rejected():
    with pytest.raises(CSPError) as excinfo:
        run('x ← 5 + "a"')
    assert excinfo.value.message == (
        'Left and right hand sides of "+" are of different types; '
        'left is of type Number, and right is of type Text.'
    )
    assert excinfo.value.loc_range() == (4, 11)


def test_undefined_operator_for_type():
    with pytest.raises(CSPError) as excinfo:
        run('x ← "a" - "b"')
    assert excinfo.value.message == '"-" is not defined for Text values.'
    with pytest.raises(CSPError):
        run('x ← [1] + [2]')
    with pytest.raises(CSPError):
        run('x ← true < false')


def test_division_by_zero_follows_floating_point():
    _, lines = run('DISPLAY(1 / 0)\nDISPLAY(-1 / 0)\nDISPLAY(0 / 0)\nDISPLAY(5 MOD 0)')
    assert lines == ['Infinity', '-Infinity', 'NaN', 'NaN']


def test_nan_is_not_equal_to_itself():
    assert value_of('(0 / 0) = (0 / 0)') == BooleanValue(False)


def test_unary_type_errors():
    with pytest.raises(CSPError) as excinfo:
        run('x ← -"a"')
    assert excinfo.value.message == '"-" cannot be applied to a value of type Text.'
    with pytest.raises(CSPError):
        run('x ← NOT 1')


def test_null_has_no_operators():
    source = 'PROCEDURE nothing() { }\nx ← nothing() = nothing()'
    with pytest.raises(UnsupportedOperation):
        run(source)


def test_null_against_other_type_is_a_mismatch():
    with pytest.raises(CSPError) as excinfo:
        run('PROCEDURE nothing() { }\nx ← nothing() = 1')
    assert not isinstance(excinfo.value, UnsupportedOperation)
    assert 'left is of type Null, and right is of type Number' in excinfo.value.message


# Statements and scope


def test_top_level_return_value():
    result, _ = run('x ← 2\nRETURN x * 3\nDISPLAY("unreached")')
    assert result == NumberValue(6.0)


def test_program_without_return():
    result, _ = run('x ← 1')
    assert result is None


def test_return_inside_for_stops_the_loop():
    source = '''
PROCEDURE first(items)
{
    FOR EACH item IN items
    {
        DISPLAY(item)
        RETURN item
    }
    RETURN "empty"
}
DISPLAY(first([7, 8, 9]))
DISPLAY(first([]))
'''
    _, lines = run(source)
    assert lines == ['7', '7', 'empty']


def test_return_inside_repeat_stops_the_loop():
    source = '''
PROCEDURE firstOver(limit)
{
    n ← 0
    REPEAT 100 TIMES
    {
        n ← n + 1
        IF (n > limit)
        {
            RETURN n
        }
    }
    RETURN -1
}
RETURN firstOver(4)
'''
    result, _ = run(source)
    assert result == NumberValue(5.0)


def test_branch_variables_do_not_leak():
    source = '''
PROCEDURE check()
{
    IF (true)
    {
        inner ← 1
    }
    RETURN inner
}
check()
'''
    with pytest.raises(CSPError) as excinfo:
        run(source)
    assert excinfo.value.message == '"inner" has not been defined.'


def test_branch_updates_enclosing_procedure_variable():
    source = '''
PROCEDURE check(flag)
{
    result ← "before"
    IF (flag)
    {
        result ← "after"
    }
    ELSE
    {
        result ← "other"
    }
    RETURN result
}
DISPLAY(check(true))
DISPLAY(check(false))
'''
    _, lines = run(source)
    assert lines == ['after', 'other']


def test_top_level_loop_cannot_change_globals():
    source = '''
total ← 0
FOR EACH n IN [1, 2, 3]
{
    total ← total + n
}
RETURN total
'''
    result, _ = run(source)
    assert result == NumberValue(0.0)


def test_for_each_variable_is_per_iteration():
    source = '''
PROCEDURE collect(items)
{
    FOR EACH item IN items
    {
        DISPLAY(item)
    }
    RETURN item
}
collect(["a", "b"])
'''
    with pytest.raises(CSPError, match='"item" has not been defined.'):
        run(source)


def test_repeat_count_is_truncated():
    source = '''
PROCEDURE count(n)
{
    c ← 0
    REPEAT n TIMES
    {
        c ← c + 1
    }
    RETURN c
}
RETURN count(2.9)
'''
    result, _ = run(source)
    assert result == NumberValue(2.0)


def test_repeat_count_must_be_a_number():
    with pytest.raises(CSPError) as excinfo:
        run('REPEAT "3" TIMES { }')
    assert excinfo.value.message == 'REPEAT needs a finite Number of times, not Text.'
    assert excinfo.value.loc_range() == (7, 10)


def test_repeat_until_checks_before_first_iteration():
    _, lines = run('REPEAT UNTIL (true) { DISPLAY("never") }')
    assert lines == []


def test_conditions_must_be_boolean():
    with pytest.raises(CSPError) as excinfo:
        run('IF (1) { }')
    assert excinfo.value.message == 'The condition must be a Boolean, but it is of type Number.'
    with pytest.raises(CSPError):
        run('REPEAT UNTIL ("no") { }')


def test_for_each_needs_a_list():
    with pytest.raises(CSPError, match='FOR EACH needs a List to loop over, not Text.'):
        run('FOR EACH c IN "abc" { }')


# Procedures


def test_procedures_see_globals_not_callers():
    source = '''
limit ← 10
PROCEDURE inner()
{
    RETURN local
}
PROCEDURE outer()
{
    local ← 1
    DISPLAY(limit)
    RETURN inner()
}
outer()
'''
    with pytest.raises(CSPError) as excinfo:
        run(source)
    assert excinfo.value.message == '"local" has not been defined.'


def test_recursion():
    source = '''
PROCEDURE fib(n)
{
    IF (n < 2)
    {
        RETURN n
    }
    RETURN fib(n - 1) + fib(n - 2)
}
RETURN fib(10)
'''
    result, _ = run(source)
    assert result == NumberValue(55.0)


def test_arguments_are_evaluated_in_caller_scope():
    source = '''
PROCEDURE double(n)
{
    RETURN n * 2
}
PROCEDURE go()
{
    x ← 21
    RETURN double(x)
}
RETURN go()
'''
    result, _ = run(source)
    assert result == NumberValue(42.0)


def test_arity_mismatch():
    source = 'PROCEDURE f() { }\nf(1)'
    with pytest.raises(CSPError) as excinfo:
        run(source)
    assert excinfo.value.message == '"f" expects 0 arguments but was given 1.'
    assert excinfo.value.loc_range() == (18, 22)


def test_procedure_without_return_gives_null():
    result, _ = run('PROCEDURE f() { }\nRETURN [f()]')
    assert result == ListValue((NULL,))


def test_procedure_name_outside_call():
    with pytest.raises(CSPError) as excinfo:
        run('PROCEDURE f() { }\nx ← f')
    assert excinfo.value.message == '"f" is a procedure; you may not reference it outside of a call.'


def test_calling_a_value():
    with pytest.raises(CSPError) as excinfo:
        run('x ← 3\ny ← x()')
    assert excinfo.value.message == '"x" is a Number value and cannot be called.'


def test_calling_an_unknown_name():
    with pytest.raises(CSPError, match='"nope" has not been defined.'):
        run('nope()')


def test_procedures_can_be_redefined():
    source = '''
PROCEDURE f() { RETURN 1 }
a ← f()
PROCEDURE f() { RETURN 2 }
RETURN [a, f()]
'''
    result, _ = run(source)
    assert result == ListValue((NumberValue(1.0), NumberValue(2.0)))


# Public boundary and tracing


def test_evaluate_source_returns_value():
    result = evaluate_source('RETURN "done"')
    assert result.ok
    assert result.value == TextValue('done')
    assert result.error is None


def test_evaluate_source_returns_first_diagnostic():
    lines = []
    result = evaluate_source('DISPLAY(1)\nDISPLAY(1 + true)\nDISPLAY(2)', output=lines.append)
    assert not result.ok
    assert result.value is None
    assert result.error.loc_range() == (19, 27)
    assert lines == ['1']


def test_evaluate_source_reports_syntax_errors():
    result = evaluate_source('IF')
    assert isinstance(result.error, CSPError)


def test_each_run_gets_a_fresh_global_environment():
    interp = Interpreter(output=lambda text: None)
    interp.run(parse_program('x ← 1'))
    with pytest.raises(CSPError):
        interp.run(parse_program('RETURN x'))


def test_debug_trace_is_written(tmp_path):
    trace = tmp_path / 'trace.txt'
    interp = Interpreter(debug_level=3, debug_file=str(trace), output=lambda text: None)
    interp.run(parse_program('PROCEDURE f(a) { RETURN a }\nx ← f(2)\nIF (x = 2) { }'))
    text = trace.read_text(encoding='utf-8')
    assert 'run: 3 top-level statements' in text
    assert 'define procedure f(a)' in text
    assert 'call f(a=2)' in text
    assert 'assign x = 2' in text
    assert 'if condition -> True' in text


def test_debug_level_limits_detail(tmp_path):
    trace = tmp_path / 'trace.txt'
    interp = Interpreter(debug_level=1, debug_file=str(trace), output=lambda text: None)
    interp.run(parse_program('x ← 1'))
    text = trace.read_text(encoding='utf-8')
    assert 'run:' in text
    assert 'assign' not in text


def test_compile_module_runs_a_file(tmp_path, capsys):
    path = tmp_path / 'prog.csp'
    path.write_text('answer ← 6 * 7\nDISPLAY(answer)\n', encoding='utf-8')
    interp = compile_module(str(path))
    assert capsys.readouterr().out.strip() == '42'
    assert interp.global_env.get('answer') == NumberValue(42.0)


def test_deep_recursion_runs():
    source = '''
PROCEDURE total(n)
{
    IF (n = 0)
    {
        RETURN 0
    }
    RETURN n + total(n - 1)
}
RETURN total(500)
'''
    result, _ = run(source)
    assert result == NumberValue(125250.0)


def test_runaway_recursion_is_a_diagnostic():
    source = 'PROCEDURE loop(n)\n{\n    RETURN loop(n + 1)\n}\nloop(0)'
    result = evaluate_source(source)
    assert not result.ok
    assert isinstance(result.error, CSPError)
    assert result.error.message == 'Too many nested procedure calls.'
    # reported at the innermost call inside the body
    assert result.error.loc_range() == (31, 42)


def test_call_depth_resets_after_a_diagnostic():
    interp = Interpreter(output=lambda text: None)
    with pytest.raises(CSPError):
        interp.run(parse_program('PROCEDURE f() { RETURN f() }\nf()'))
    assert interp.call_depth == 0
    assert interp.run(parse_program('PROCEDURE g() { RETURN 1 }\nRETURN g()')) == NumberValue(1.0)
