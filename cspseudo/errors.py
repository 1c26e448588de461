"""Diagnostics raised by the lexer, parser and interpreter.

Every problem is reported as a ``CSPError`` carrying a half-open character
range ``[start, end)`` into the source text along with a message.
There is no recovery: the first diagnostic aborts the run.
"""

from typing import Any, Tuple


class CSPError(Exception):
    """A diagnostic anchored to a source range."""

    def __init__(self, start: int, end: int, message: str):
        super().__init__(message)
        if end < start:
            start, end = end, start
        self.start = start
        self.end = end
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.start}, {self.end}, {self.message!r})"

    def loc_range(self) -> Tuple[int, int]:
        return (self.start, self.end)

    # Presentation

    def render(self, source: str) -> str:
        """Format the diagnostic with the offending line underlined.

        The range is clamped to the source text and to the line on which
        it starts; a zero-width range (such as end of input) still gets a
        single caret.
        """
        start = max(0, min(self.start, len(source)))
        end = max(start, min(self.end, len(source)))
        line_start = source.rfind('\n', 0, start) + 1
        line_end = source.find('\n', start)
        if line_end == -1:
            line_end = len(source)
        line_no = source.count('\n', 0, start) + 1
        column = start - line_start + 1
        line = source[line_start:line_end]
        width = max(1, min(end, line_end) - start)
        marker = ' ' * (start - line_start) + '^' + '~' * (width - 1)
        return f"{line_no}:{column}: {self.message}\n    {line}\n    {marker}"

    # Lexical

    @classmethod
    def unrecognized_character(cls, offset: int, text: str) -> 'CSPError':
        return cls(offset, offset + len(text), f'Unrecognized character(s) "{text}".')

    @classmethod
    def unterminated_string(cls, start: int, end: int) -> 'CSPError':
        return cls(start, end, 'String literal is missing its closing quote.')

    # Syntactic

    @classmethod
    def invalid_token(cls, expected: Any, found: Any) -> 'CSPError':
        return cls(
            found.start,
            found.end,
            f'Expected {expected.describe()} but found {_found(found)}.',
        )

    @classmethod
    def invalid_line(cls, found: Any) -> 'CSPError':
        return cls(found.start, found.end, f'A line cannot begin with {_found(found)}.')

    @classmethod
    def expected_expression(cls, found: Any) -> 'CSPError':
        return cls(found.start, found.end, f'Expected an expression but found {_found(found)}.')

    # Semantic

    @classmethod
    def unresolved_name(cls, token: Any) -> 'CSPError':
        return cls(token.start, token.end, f'"{token.text}" has not been defined.')

    @classmethod
    def procedure_reference(cls, token: Any) -> 'CSPError':
        return cls(
            token.start,
            token.end,
            f'"{token.text}" is a procedure; you may not reference it outside of a call.',
        )

    @classmethod
    def not_callable(cls, call: Any, type_name: str) -> 'CSPError':
        start, end = call.loc_range()
        return cls(start, end, f'"{call.callee.text}" is a {type_name} value and cannot be called.')

    @classmethod
    def arity(cls, call: Any, name: str, expected: int, found: int) -> 'CSPError':
        start, end = call.loc_range()
        return cls(
            start,
            end,
            f'"{name}" expects {expected} {_plural(expected, "argument")} '
            f'but was given {found}.',
        )

    @classmethod
    def type_mismatch(cls, node: Any, op: str, left: str, right: str) -> 'CSPError':
        start, end = node.loc_range()
        return cls(
            start,
            end,
            f'Left and right hand sides of "{op}" are of different types; '
            f'left is of type {left}, and right is of type {right}.',
        )


class UnsupportedOperation(CSPError):
    """Raised for operations on values that define no operators at all (Null)."""


def _found(token: Any) -> str:
    description = token.kind.describe()
    if token.text and description != f'"{token.text}"':
        return f'{description} "{token.text}"'
    return description


def _plural(n: int, word: str) -> str:
    return word if n == 1 else word + 's'
