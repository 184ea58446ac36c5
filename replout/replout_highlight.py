"""
Syntax highlighting for function source shown in the REPL output.
"""
from typing import Callable

from rich.syntax import Syntax
from rich.text import Text

Highlighter = Callable[[str], Text]


class RichHighlighter:
    """Highlights code with rich's Pygments-backed ``Syntax``."""

    def __init__(self, lexer: str = "python", theme: str = "monokai"):
        self.lexer = lexer
        self.theme = theme

    def __call__(self, code: str) -> Text:
        text = Syntax(code, self.lexer, theme=self.theme).highlight(code)
        # Pygments always terminates the last line; the caller's text may not.
        text.rstrip()
        return text
