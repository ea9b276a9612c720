"""
Diagnostics raised by the Forth compiler and evaluator.

Every error carries a diagnostic code (FTHnnnn) and, when known, the source
location of the offending token. Compile errors are raised before any
evaluation begins; evaluation errors abort the running program.
"""

from typing import Optional


class ForthError(Exception):
    """Base class for all compiler and evaluator diagnostics."""

    code = "FTH0000"

    def __init__(self, message: str, filename: Optional[str] = None,
                 line: int = 0, column: int = 0):
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column
        super().__init__(self.format())

    def format(self) -> str:
        """Render as 'file:line:col: CODE: message'."""
        if self.filename is None:
            return f"{self.code}: {self.message}"
        if self.line:
            return f"{self.filename}:{self.line}:{self.column}: {self.code}: {self.message}"
        return f"{self.filename}: {self.code}: {self.message}"

    def at(self, filename: Optional[str], line: int, column: int) -> 'ForthError':
        """Attach a source location if none was recorded yet."""
        if self.filename is None:
            self.filename = filename
            self.line = line
            self.column = column
            self.args = (self.format(),)
        return self


class CompileError(ForthError):
    """Structural problem detected before evaluation."""


class LexError(CompileError):
    """Malformed source text (unbalanced comment parentheses)."""
    code = "FTH0001"


class UsageError(CompileError):
    """Misplaced directive, malformed definition or checkpoint misuse."""
    code = "FTH0002"


class UnknownWord(CompileError):
    """A token is neither a primitive nor a defined word."""
    code = "FTH0101"


class DuplicateWord(CompileError):
    """A word name is defined twice or shadows a built-in."""
    code = "FTH0102"


class UnmatchedConditional(CompileError):
    """Stray else/then, or an if that is never closed."""
    code = "FTH0103"


class EvaluationError(ForthError):
    """Failure while running a compiled program."""


class StackUnderflow(EvaluationError):
    """An operation needs more values than the stack holds."""
    code = "FTH0201"


class DomainError(EvaluationError):
    """Wrong value tag, or an operand outside the operation's domain."""
    code = "FTH0202"


class RecursionLimitExceeded(EvaluationError):
    """Word call depth or conditional nesting exceeded max_depth."""
    code = "FTH0203"
