"""
Test fixtures and helpers for the Forth compiler tests.

The key abstractions are:

- run_program(): compile and evaluate source, capturing errors and codes
- AssertProgram(): fluent assertions about compiling and running a program
- AssertWord(): fluent assertions about calling one word on a given stack
"""

import pytest
import re
import sys
from dataclasses import dataclass, field
from typing import Any, List, Optional
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from forthc.compiler import ForthCompiler
from forthc.errors import CompileError, EvaluationError
from forthc.runtime.evaluator import ProgramResult
from forthc.runtime.values import Active, stack, to_value


@dataclass
class RunOutcome:
    """Result of compiling and running Forth source code."""
    compiled: bool
    success: bool
    result: Optional[ProgramResult] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    error_codes: List[str] = field(default_factory=list)


def run_program(source: str, **options) -> RunOutcome:
    """Compile and evaluate, turning diagnostics into an outcome."""
    compiler = ForthCompiler(**options)
    try:
        program = compiler.compile_string(source, "<test>")
    except CompileError as e:
        return RunOutcome(compiled=False, success=False, errors=[str(e)],
                          error_codes=re.findall(r'(FTH[0-9]{4})', str(e)))

    try:
        result = compiler.evaluator(program).run()
    except EvaluationError as e:
        return RunOutcome(compiled=True, success=False, errors=[str(e)],
                          warnings=compiler.get_warnings(),
                          error_codes=re.findall(r'(FTH[0-9]{4})', str(e)))

    return RunOutcome(compiled=True, success=True, result=result,
                      warnings=compiler.get_warnings())


class ProgramAssertion:
    """
    Fluent assertion helper for testing Forth programs.

    Usage:
        AssertProgram("9 3 2 + +").gives(14)
        AssertProgram("1 2 swap").leaves(2, 1)
        AssertProgram("drop").fails_with("FTH0201")
    """

    def __init__(self, source: str):
        self.source = source
        self.words: List[str] = []
        self.options = {}
        self.expected_warnings: Optional[List[str]] = None
        self.expect_no_warnings = False

    def with_word(self, definition: str) -> 'ProgramAssertion':
        """Prepend a word definition."""
        self.words.append(definition)
        return self

    def with_max_depth(self, depth: int) -> 'ProgramAssertion':
        self.options['max_depth'] = depth
        return self

    def memoized(self) -> 'ProgramAssertion':
        self.options['memoize'] = True
        return self

    def with_warnings(self, *codes: str) -> 'ProgramAssertion':
        self.expected_warnings = list(codes)
        return self

    def without_warnings(self) -> 'ProgramAssertion':
        self.expect_no_warnings = True
        return self

    def _full_source(self, suffix: str = "") -> str:
        return "\n".join(self.words + [self.source + suffix])

    def _run(self, suffix: str = "") -> RunOutcome:
        outcome = run_program(self._full_source(suffix), **self.options)
        if outcome.compiled:
            self._check_warnings(outcome)
        return outcome

    def compiles(self) -> None:
        """Assert that the program compiles successfully."""
        outcome = self._run()
        assert outcome.compiled, f"Expected compilation to succeed, but got errors: {outcome.errors}"

    def does_not_compile(self, *error_codes: str) -> None:
        """Assert that compilation fails (and nothing is evaluated)."""
        outcome = self._run()
        assert not outcome.compiled, "Expected compilation to fail, but it succeeded"
        for code in error_codes:
            assert code in outcome.error_codes, f"Expected error code {code}, got {outcome.error_codes}"

    def fails_with(self, *error_codes: str) -> None:
        """Assert that the program compiles but evaluation fails."""
        outcome = self._run()
        assert outcome.compiled, f"Compilation failed: {outcome.errors}"
        assert not outcome.success, "Expected evaluation to fail, but it succeeded"
        for code in error_codes:
            assert code in outcome.error_codes, f"Expected error code {code}, got {outcome.error_codes}"

    def gives(self, expected: Any) -> None:
        """Assert the top value after running the program."""
        outcome = self._run(" top return")
        assert outcome.success, f"Program failed: {outcome.errors}"
        actual = outcome.result.result
        assert actual == to_value(expected), f"Expected {expected}, got {actual}"

    def leaves(self, *expected: Any) -> None:
        """Assert the whole stack (bottom first) after running the program."""
        outcome = self._run(" return")
        assert outcome.success, f"Program failed: {outcome.errors}"
        actual = outcome.result.result
        assert actual == stack(*expected), f"Expected {stack(*expected)}, got {actual}"

    def outputs(self, *expected: str) -> None:
        """Assert the values printed by '.'."""
        outcome = self._run()
        assert outcome.success, f"Program failed: {outcome.errors}"
        actual = [str(v) for v in outcome.result.output]
        assert actual == list(expected), f"Expected output {list(expected)}, got {actual}"

    def _check_warnings(self, outcome: RunOutcome) -> None:
        """Check warning expectations."""
        if self.expect_no_warnings:
            assert not outcome.warnings, f"Expected no warnings, got: {outcome.warnings}"
        elif self.expected_warnings is not None:
            for code in self.expected_warnings:
                assert any(code in w for w in outcome.warnings), \
                    f"Expected warning {code}, got {outcome.warnings}"


def AssertProgram(source: str) -> ProgramAssertion:
    """Create a program assertion."""
    return ProgramAssertion(source)


class WordAssertion:
    """
    Fluent assertion helper for calling a single word on a chosen stack.

    Usage:
        AssertWord(": sq dup * ;", "sq").on(4).leaves(16)
    """

    def __init__(self, definitions: str, name: str):
        self.definitions = definitions
        self.name = name
        self.input = Active()
        self.options = {}

    def on(self, *values: Any) -> 'WordAssertion':
        self.input = stack(*values)
        return self

    def memoized(self) -> 'WordAssertion':
        self.options['memoize'] = True
        return self

    def call(self) -> Active:
        compiler = ForthCompiler(prune_unused=False, **self.options)
        program = compiler.compile_string(self.definitions, "<test>")
        return compiler.evaluator(program).call(self.name, self.input)

    def leaves(self, *expected: Any) -> None:
        actual = self.call()
        assert actual == stack(*expected), f"Expected {stack(*expected)}, got {actual}"


def AssertWord(definitions: str, name: str) -> WordAssertion:
    """Create a word assertion."""
    return WordAssertion(definitions, name)


# Pytest fixtures
@pytest.fixture
def compiler():
    """Fixture for a default compiler."""
    return ForthCompiler()
