# CSP pseudocode package
# This package provides a lexer, parser and interpreter for AP CSP style pseudocode.
from .errors import CSPError, UnsupportedOperation
from .tokens import Token, TokenStream, TokenType
from .lexer import lex
from .parser import parse_program
from .environment import Environment
from .interpreter import run_program, evaluate_source, compile_module, Interpreter, RunResult

__all__ = [
    'CSPError',
    'UnsupportedOperation',
    'Token',
    'TokenStream',
    'TokenType',
    'lex',
    'parse_program',
    'Environment',
    'run_program',
    'evaluate_source',
    'compile_module',
    'Interpreter',
    'RunResult',
]
