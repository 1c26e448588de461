from .basic_io import BasicIO
from cspseudo.builtin_function import BuiltinFunction
from cspseudo.errors import CSPError
from cspseudo.environment import Environment
from cspseudo.types import (
    ListValue, NullValue, NumberValue, TextValue, Value, is_number_literal, to_display,
)
from typing import Any, List


def populate_io_environment(basic_io: BasicIO) -> Environment:
        io_env = Environment()

        def std_display(args: List[Value], call: Any) -> Any:
            value = args[0]
            if isinstance(value, ListValue):
                start, end = call.args[0].loc_range()
                raise CSPError(start, end, 'Cannot display a list directly; display its items one at a time.')
            if isinstance(value, NullValue):
                start, end = call.args[0].loc_range()
                raise CSPError(start, end, 'Cannot display a null value.')
            basic_io.display(to_display(value))

        def std_input(args: List[Value], call: Any) -> Any:
            line = basic_io.read_line()
            if is_number_literal(line.strip()):
                return NumberValue(float(line.strip()))
            return TextValue(line)

        io_env.define('DISPLAY', BuiltinFunction('DISPLAY', 1, std_display))
        io_env.define('INPUT', BuiltinFunction('INPUT', 0, std_input))

        return io_env
