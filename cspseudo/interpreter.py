"""Tree-walking interpreter for CSP pseudocode.

The interpreter runs a parsed ``Program`` directly. Every run gets one
global environment seeded with the builtin procedures. Blocks, loop
iterations and procedure calls each get a child environment that lives
only as long as the construct that created it.

Two scoping rules differ from most languages:

* Procedures are not closures. A call runs in a fresh child of the
  global environment, so the body sees only globals and its parameters,
  even when the call is made from inside another procedure.
* Assignment writes through to every enclosing non-global scope that
  already has the name, and always binds it in the current scope too
  (see ``Environment.declare_or_assign``).
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from pathlib import Path

from .std.io import BasicIO, populate_io_environment
from .types import (
    NULL, BooleanValue, ListValue, NullValue, NumberValue, TextValue, Value,
    to_display, type_name,
)
from .ast import (
    Action, Assign, Binary, Block, Call, Conditional, Container, Expression,
    ExpressionStatement, For, Identifier, ListLiteral, Literal, MakeProc,
    Program, RepeatN, RepeatUntil, Return, Unary,
)
from .errors import CSPError, UnsupportedOperation
from .environment import Environment
from .builtin_function import BuiltinFunction, Procedure
from .parser import parse_program
from .tokens import TokenType

# Each procedure call costs a handful of Python frames.
sys.setrecursionlimit(max(sys.getrecursionlimit(), 20000))

MAX_CALL_DEPTH = 1000

BinaryOps = Dict[TokenType, Callable[[Any, Any], Value]]


def divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def modulo(a: float, b: float) -> float:
    # remainder takes the sign of the dividend
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


NUMBER_OPS: BinaryOps = {
    TokenType.ADD: lambda a, b: NumberValue(a + b),
    TokenType.SUBTRACT: lambda a, b: NumberValue(a - b),
    TokenType.DIVIDE: lambda a, b: NumberValue(divide(a, b)),
    TokenType.MULTIPLY: lambda a, b: NumberValue(a * b),
    TokenType.MOD: lambda a, b: NumberValue(modulo(a, b)),
    TokenType.GREATER_THAN: lambda a, b: BooleanValue(a > b),
    TokenType.LESS_THAN: lambda a, b: BooleanValue(a < b),
    TokenType.GREATER_THAN_OR_EQUAL: lambda a, b: BooleanValue(a >= b),
    TokenType.LESS_THAN_OR_EQUAL: lambda a, b: BooleanValue(a <= b),
    TokenType.EQUAL: lambda a, b: BooleanValue(a == b),
    TokenType.NOT_EQUAL: lambda a, b: BooleanValue(a != b),
}

TEXT_OPS: BinaryOps = {
    TokenType.ADD: lambda a, b: TextValue(a + b),
    TokenType.EQUAL: lambda a, b: BooleanValue(a == b),
    TokenType.NOT_EQUAL: lambda a, b: BooleanValue(a != b),
}

BOOLEAN_OPS: BinaryOps = {
    TokenType.AND: lambda a, b: BooleanValue(a and b),
    TokenType.OR: lambda a, b: BooleanValue(a or b),
    TokenType.EQUAL: lambda a, b: BooleanValue(a == b),
    TokenType.NOT_EQUAL: lambda a, b: BooleanValue(a != b),
}


class Interpreter:
    """Core interpreter that executes a CSP pseudocode AST."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 output: Optional[Callable[[str], None]] = None,
                 input_fn: Optional[Callable[[str], str]] = None):
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = None
        self.io = BasicIO(output, input_fn)
        self.global_env: Optional[Environment] = None
        self.call_depth = 0
        self.std_env = self.load_standard_module()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Standard module loading
    def load_standard_module(self) -> Environment:
        std_env = Environment()

        def std_length(args, call: Call) -> Any:
            value = args[0]
            if isinstance(value, TextValue):
                return NumberValue(float(len(value.value)))
            if isinstance(value, ListValue):
                return NumberValue(float(len(value.items)))
            start, end = call.args[0].loc_range()
            raise CSPError(start, end, f'LENGTH expects Text or a List, not {type_name(value)}.')

        std_env.define('LENGTH', BuiltinFunction('LENGTH', 1, std_length))
        std_env.values.update(populate_io_environment(self.io).values)
        return std_env

    def make_global_environment(self) -> Environment:
        env = Environment()
        for name, binding in self.std_env.values.items():
            env.define(name, binding)
        return env

    # Public API
    def run(self, program: Program) -> Optional[Value]:
        """Execute a whole program and return its top-level RETURN value, if any."""
        self.global_env = self.make_global_environment()
        self.call_depth = 0
        if self.debug_level > 0:
            self.debug_fp = open(self.debug_file, 'w', encoding='utf-8')
        try:
            self.debug(f"run: {len(program.body)} top-level statements")
            result = self.execute_block(program.body, self.global_env, self.global_env)
            self.debug(f"run: finished -> {result!r}")
            return result
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    def execute_block(self, block: Block, env: Environment, global_env: Environment) -> Optional[Value]:
        for action in block:
            result = self.execute(action, env, global_env)
            # a produced value means a RETURN fired somewhere inside
            if result is not None:
                return result
        return None

    def execute(self, node: Action, env: Environment, global_env: Environment) -> Optional[Value]:
        if isinstance(node, MakeProc):
            env.define(node.name.text, Procedure(node.name, node.params, node.body))
            if self.debug_level >= 2:
                self.debug(f"define procedure {node.name.text}({', '.join(p.text for p in node.params)})")
            return None
        if isinstance(node, Assign):
            value = self.evaluate(node.expression, env, global_env)
            env.declare_or_assign(node.target.text, value)
            if self.debug_level >= 2:
                self.debug(f"assign {node.target.text} = {to_display(value)}")
            return None
        if isinstance(node, Conditional):
            cond = self.expect_boolean(node.condition, env, global_env)
            if self.debug_level >= 3:
                self.debug(f"if condition -> {cond}")
            if cond:
                return self.execute_block(node.block, env.child(), global_env)
            if node.else_block is not None:
                return self.execute_block(node.else_block, env.child(), global_env)
            return None
        if isinstance(node, RepeatN):
            count = self.evaluate(node.count, env, global_env)
            if not isinstance(count, NumberValue) or not math.isfinite(count.value):
                start, end = node.count.loc_range()
                raise CSPError(start, end, f'REPEAT needs a finite Number of times, not {_describe(count)}.')
            for i in range(int(count.value)):
                if self.debug_level >= 3:
                    self.debug(f"repeat iteration {i + 1}")
                res = self.execute_block(node.block, env.child(), global_env)
                if res is not None:
                    return res
            return None
        if isinstance(node, RepeatUntil):
            while not self.expect_boolean(node.condition, env, global_env):
                if self.debug_level >= 3:
                    self.debug("repeat until: condition false, iterating")
                res = self.execute_block(node.block, env.child(), global_env)
                if res is not None:
                    return res
            return None
        if isinstance(node, For):
            source = self.evaluate(node.list_expression, env, global_env)
            if not isinstance(source, ListValue):
                start, end = node.list_expression.loc_range()
                raise CSPError(start, end, f'FOR EACH needs a List to loop over, not {type_name(source)}.')
            for item in source.items:
                iteration_env = env.child()
                iteration_env.define(node.item.text, item)
                if self.debug_level >= 3:
                    self.debug(f"for each {node.item.text} = {to_display(item)}")
                res = self.execute_block(node.block, iteration_env, global_env)
                if res is not None:
                    return res
            return None
        if isinstance(node, Return):
            return self.evaluate(node.value, env, global_env)
        if isinstance(node, ExpressionStatement):
            self.evaluate(node.expression, env, global_env)
            return None
        raise NotImplementedError(f"execute: unexpected node type {type(node).__name__}")

    def expect_boolean(self, node: Expression, env: Environment, global_env: Environment) -> bool:
        value = self.evaluate(node, env, global_env)
        if not isinstance(value, BooleanValue):
            start, end = node.loc_range()
            raise CSPError(start, end, f'The condition must be a Boolean, but it is of type {type_name(value)}.')
        return value.value

    def evaluate(self, node: Expression, env: Environment, global_env: Environment) -> Value:
        if isinstance(node, Literal):
            token = node.token
            if token.kind == TokenType.NUMBER:
                return NumberValue(float(token.text))
            if token.kind == TokenType.BOOL:
                return BooleanValue(token.text == 'true')
            return TextValue(token.text[1:-1])
        if isinstance(node, Identifier):
            value = env.lookup(node.token)
            if not isinstance(value, Value):
                raise CSPError.procedure_reference(node.token)
            return value
        if isinstance(node, Container):
            return self.evaluate(node.inner, env, global_env)
        if isinstance(node, ListLiteral):
            return ListValue(tuple(self.evaluate(item, env, global_env) for item in node.items))
        if isinstance(node, Unary):
            operand = self.evaluate(node.operand, env, global_env)
            return self.apply_unary_op(node, operand)
        if isinstance(node, Binary):
            left = self.evaluate(node.left, env, global_env)
            right = self.evaluate(node.right, env, global_env)
            return self.apply_binary_op(node, left, right)
        if isinstance(node, Call):
            result = self.call_function(node, env, global_env)
            return NULL if result is None else result
        raise NotImplementedError(f"evaluate: unexpected node type {type(node).__name__}")

    def call_function(self, node: Call, env: Environment, global_env: Environment) -> Optional[Value]:
        func = env.lookup(node.callee)
        if isinstance(func, Value):
            raise CSPError.not_callable(node, type_name(func))
        if isinstance(func, BuiltinFunction):
            # Check arity; None means variadic
            if func.arity is not None and len(node.args) != func.arity:
                raise CSPError.arity(node, func.name, func.arity, len(node.args))
            args = [self.evaluate(arg, env, global_env) for arg in node.args]
            if self.debug_level >= 2:
                self.debug(f"call builtin {func.name}({', '.join(to_display(a) for a in args)})")
            return func.fn(args, node)
        if isinstance(func, Procedure):
            return self.call_procedure(func, node, env, global_env)
        raise NotImplementedError(f"call: unexpected binding {func!r}")

    def call_procedure(self, proc: Procedure, node: Call, env: Environment,
                       global_env: Environment) -> Optional[Value]:
        frame = global_env.child()
        if len(node.args) != len(proc.params):
            raise CSPError.arity(node, proc.name.text, len(proc.params), len(node.args))
        for param, arg in zip(proc.params, node.args):
            frame.define(param.text, self.evaluate(arg, env, global_env))
        if self.debug_level >= 2:
            bound = ', '.join(f"{p.text}={to_display(frame.get(p.text))}" for p in proc.params)
            self.debug(f"call {proc.name.text}({bound})")
        if self.call_depth >= MAX_CALL_DEPTH:
            start, end = node.loc_range()
            raise CSPError(start, end, 'Too many nested procedure calls.')
        self.call_depth += 1
        try:
            return self.execute_block(proc.body, frame, global_env)
        finally:
            self.call_depth -= 1

    def apply_unary_op(self, node: Unary, operand: Value) -> Value:
        kind = node.token.kind
        if kind == TokenType.SUBTRACT and isinstance(operand, NumberValue):
            return NumberValue(-operand.value)
        if kind == TokenType.NOT and isinstance(operand, BooleanValue):
            return BooleanValue(not operand.value)
        start, end = node.loc_range()
        raise CSPError(start, end, f'"{kind.value}" cannot be applied to a value of type {type_name(operand)}.')

    def apply_binary_op(self, node: Binary, left: Value, right: Value) -> Value:
        kind = node.token.kind
        if type(left) is not type(right):
            raise CSPError.type_mismatch(node, kind.value, type_name(left), type_name(right))

        start, end = node.loc_range()
        if isinstance(left, NullValue):
            raise UnsupportedOperation(start, end, f'"{kind.value}" is not supported on Null values.')
        if isinstance(left, NumberValue):
            ops = NUMBER_OPS
        elif isinstance(left, TextValue):
            ops = TEXT_OPS
        elif isinstance(left, BooleanValue):
            ops = BOOLEAN_OPS
        else:
            ops = {}

        op = ops.get(kind)
        if op is None:
            raise CSPError(start, end, f'"{kind.value}" is not defined for {type_name(left)} values.')
        return op(left.value, right.value)


def _describe(value: Value) -> str:
    if isinstance(value, NumberValue):
        return to_display(value)
    return type_name(value)


@dataclass
class RunResult:
    """Outcome of ``evaluate_source``: a return value or a diagnostic, never both."""
    value: Optional[Value] = None
    error: Optional[CSPError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_program(source: str, debug_level: int = 0, output: Optional[Callable[[str], None]] = None) -> Any:
    """Convenience function to parse and run a program from source string."""
    ast_program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level, output=output)
    return interpreter.run(ast_program)


def evaluate_source(source: str, debug_level: int = 0,
                    output: Optional[Callable[[str], None]] = None,
                    input_fn: Optional[Callable[[str], str]] = None) -> RunResult:
    """Parse and run ``source``, returning the first diagnostic instead of raising it."""
    try:
        ast_program = parse_program(source)
        interpreter = Interpreter(debug_level=debug_level, output=output, input_fn=input_fn)
        return RunResult(value=interpreter.run(ast_program))
    except CSPError as e:
        return RunResult(error=e)
    except RecursionError:
        # expressions nested past what the parser or evaluator can follow
        return RunResult(error=CSPError(0, len(source), 'Program is nested too deeply.'))


def compile_module(file_path: str, debug_level: int = 0) -> Interpreter:
    """Parse and execute a program file, returning the interpreter instance."""
    source = Path(file_path).read_text(encoding='utf-8')
    ast_program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    interpreter.run(ast_program)
    return interpreter
