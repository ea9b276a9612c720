"""
Program evaluator.

Runs a CompiledProgram left to right, threading an immutable StackState
through primitives and word calls. Word calls use an explicit frame stack
rather than Python recursion, so deep (but bounded) recursion in the
program never touches the interpreter's own recursion limit.
"""

import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..codegen.words import CompiledProgram, Instruction, InstrKind
from ..errors import EvaluationError, RecursionLimitExceeded, UnknownWord
from .control_flow import IF
from .primitives import PRIMITIVES
from .values import EMPTY, Active, StackState, Suppressed, Value, pop

DEFAULT_MAX_DEPTH = 1000


@dataclass
class ProgramResult:
    """Everything a program produced."""
    checkpoints: Dict[str, Any] = field(default_factory=dict)
    output: List[Value] = field(default_factory=list)
    result: Optional[Any] = None
    final_state: StackState = EMPTY

    def __getitem__(self, name: str):
        return self.checkpoints[name]


class _Frame:
    """An instruction sequence being executed."""
    __slots__ = ('code', 'pc', 'memo_key', 'height')

    def __init__(self, code: Tuple[Instruction, ...], memo_key=None):
        self.code = code
        self.pc = 0
        self.memo_key = memo_key
        # Frames this one needed at its deepest, itself included
        self.height = 1


class Evaluator:
    """Executes compiled programs.

    Args:
        program: Output of the word compiler.
        max_depth: Bound on both word call depth and conditional
            suppression depth.
        memoize: Cache word results by (word name, input state).
        sink: Called with each value popped by '.'.
        verbose: Log progress to stderr.
    """

    def __init__(self, program: CompiledProgram, max_depth: int = DEFAULT_MAX_DEPTH,
                 memoize: bool = False, sink: Optional[Callable[[Value], None]] = None,
                 verbose: bool = False):
        if max_depth < 1:
            raise ValueError(f"max_depth must be positive (got {max_depth})")
        self.program = program
        self.max_depth = max_depth
        self.memoize = memoize
        self.sink = sink
        self.verbose = verbose
        # (word, input state) -> (output state, frames the call needed)
        self.cache: Dict[Tuple[str, StackState], Tuple[StackState, int]] = {}
        self.cache_hits = 0
        self.calls = 0

    def log(self, message: str):
        """Print log message if verbose mode is enabled."""
        if self.verbose:
            print(f"[eval] {message}", file=sys.stderr)

    def run(self, state: StackState = EMPTY) -> ProgramResult:
        """Evaluate the top-level program starting from `state`."""
        result = ProgramResult()
        result.final_state = self._execute(self.program.main, state, result)
        self.log(f"{self.calls} word calls, {self.cache_hits} cache hits")
        return result

    def call(self, name: str, state: StackState = EMPTY) -> StackState:
        """Invoke a single word on a given state."""
        if name not in self.program.words:
            raise UnknownWord(f"unknown word '{name}'", self.program.filename)
        instr = Instruction(InstrKind.CALL, name)
        return self._execute((instr,), state, None)

    def _execute(self, code: Tuple[Instruction, ...], state: StackState,
                 result: Optional[ProgramResult]) -> StackState:
        frames = [_Frame(code)]

        while frames:
            frame = frames[-1]
            if frame.pc >= len(frame.code):
                frames.pop()
                if frames:
                    frames[-1].height = max(frames[-1].height, frame.height + 1)
                if frame.memo_key is not None:
                    self.cache[frame.memo_key] = (state, frame.height)
                continue

            instr = frame.code[frame.pc]
            frame.pc += 1

            try:
                if instr.kind is InstrKind.PRIMITIVE:
                    state = PRIMITIVES[instr.name].apply(state)
                    if instr.name == IF and isinstance(state, Suppressed) \
                            and state.depth > self.max_depth:
                        raise RecursionLimitExceeded(
                            f"conditional nesting exceeds {self.max_depth}")

                elif instr.kind is InstrKind.CALL:
                    # A skipped call is a no-op; its body is never expanded
                    if isinstance(state, Suppressed):
                        continue
                    if len(frames) > self.max_depth:
                        raise RecursionLimitExceeded(
                            f"call depth exceeds {self.max_depth} in '{instr.name}'")
                    self.calls += 1
                    memo_key = None
                    if self.memoize:
                        memo_key = (instr.name, state)
                        cached = self.cache.get(memo_key)
                        # A hit stands in for the whole call, so it must fit the bound too
                        if cached is not None and len(frames) + cached[1] <= self.max_depth + 1:
                            self.cache_hits += 1
                            state, height = cached
                            frame.height = max(frame.height, height + 1)
                            continue
                    frames.append(_Frame(self.program.words[instr.name].body, memo_key))

                elif instr.kind is InstrKind.PRINT:
                    if isinstance(state, Active):
                        value, state = pop(state)
                        self._emit(value, result)

                elif instr.kind is InstrKind.CHECKPOINT:
                    captured = self._probe(instr.probe, state)
                    self.log(f"checkpoint {instr.name} = {captured}")
                    if result is not None:
                        result.checkpoints[instr.name] = captured

                elif instr.kind is InstrKind.RETURN:
                    if result is not None:
                        result.result = self._probe(instr.probe, state)

            except EvaluationError as e:
                e.at(self.program.filename, instr.line, instr.column)
                raise

        return state

    def _probe(self, probe: Optional[Instruction], state: StackState):
        """Apply a probe to a copy of the state; states are immutable, so
        the running program never sees the probe's effect."""
        if probe is None:
            return state
        if probe.kind is InstrKind.PRIMITIVE:
            return PRIMITIVES[probe.name].apply(state)
        return self._execute((probe,), state, None)

    def _emit(self, value: Value, result: Optional[ProgramResult]):
        if result is not None:
            result.output.append(value)
        if self.sink is not None:
            self.sink(value)
