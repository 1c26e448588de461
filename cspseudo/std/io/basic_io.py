import builtins
from typing import Callable, Optional


class BasicIO:
    """Console plumbing behind DISPLAY and INPUT.

    ``output`` receives each rendered line; ``input_fn`` supplies lines of
    input. Both default to the console.
    """
    def __init__(self, output: Optional[Callable[[str], None]] = None,
                 input_fn: Optional[Callable[[str], str]] = None):
        self.output = output
        self.input_fn = input_fn

    def display(self, text: str) -> None:
        if self.output is None:
            print(text)
        else:
            self.output(text)

    def read_line(self) -> str:
        read = self.input_fn if self.input_fn is not None else builtins.input
        try:
            return read('')
        except EOFError:
            return ''
