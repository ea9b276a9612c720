"""
Word compiler - lowers a parsed Program into executable instructions.

Word definitions are handled in two passes. The first collects every name
into the word table, so a body may refer to itself or to a word defined
later in the program. The second elaborates each body in order: every
token is resolved to a primitive or a table entry and its conditionals are
block-matched. Calls are dispatched through the table by name at run time.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import DuplicateWord, UnknownWord, UsageError
from ..parser.ast_nodes import (
    ASTNode, CheckpointNode, OpNode, PrintNode, Program, ReturnNode, WordDefNode,
)
from ..parser.parser import RESERVED
from ..runtime.control_flow import match_conditionals
from ..runtime.primitives import PRIMITIVES, PrimitiveKind


class InstrKind(Enum):
    """Instruction kinds."""
    PRIMITIVE = auto()   # apply a built-in
    CALL = auto()        # invoke a word through the table
    PRINT = auto()       # pop and emit
    CHECKPOINT = auto()  # record a named snapshot
    RETURN = auto()      # record the final result


@dataclass(frozen=True)
class Instruction:
    """One lowered operation with its source location."""
    kind: InstrKind
    name: Optional[str] = None
    probe: Optional['Instruction'] = None
    line: int = 0
    column: int = 0

    def __repr__(self):
        if self.probe is not None:
            return f"{self.kind.name}({self.name} as {self.probe.name})"
        if self.name is not None:
            return f"{self.kind.name}({self.name})"
        return self.kind.name


@dataclass(frozen=True)
class Word:
    """A compiled user word."""
    name: str
    body: Tuple[Instruction, ...]
    line: int = 0
    column: int = 0

    def references(self) -> List[str]:
        """Names of the words this body calls."""
        return [instr.name for instr in self.body if instr.kind is InstrKind.CALL]


@dataclass
class CompiledProgram:
    """Output of compilation, ready for the evaluator."""
    words: Dict[str, Word] = field(default_factory=dict)
    main: Tuple[Instruction, ...] = ()
    filename: str = "<input>"

    def entry_references(self) -> List[str]:
        """Words called directly from the top-level program, probes included."""
        names = []
        for instr in self.main:
            if instr.kind is InstrKind.CALL:
                names.append(instr.name)
            elif instr.probe is not None and instr.probe.kind is InstrKind.CALL:
                names.append(instr.probe.name)
        return names


class WordCompiler:
    """Builds the word table and lowers the top-level program."""

    def __init__(self, filename: str = "<input>", log: Optional[Callable[[str], None]] = None):
        self.filename = filename
        self.log = log or (lambda message: None)
        self.definitions: Dict[str, WordDefNode] = {}
        self.words: Dict[str, Word] = {}

    def compile(self, program: Program) -> CompiledProgram:
        """Run both passes and lower the top-level statements."""
        self.collect(program.words)
        for definition in program.words:
            self.words[definition.name] = self.elaborate(definition)
        self.log(f"  {len(self.words)} words elaborated")

        main = self.lower_statements(program.statements)
        return CompiledProgram(dict(self.words), main, self.filename)

    def collect(self, definitions: List[WordDefNode]):
        """Pass one: register every word name."""
        for definition in definitions:
            name = definition.name
            if name in PRIMITIVES:
                raise DuplicateWord(f"'{name}' is a built-in word and cannot be redefined",
                                    self.filename, definition.line, definition.column)
            if name in self.definitions:
                first = self.definitions[name]
                raise DuplicateWord(
                    f"word '{name}' is already defined at line {first.line}",
                    self.filename, definition.line, definition.column)
            self.definitions[name] = definition

    def elaborate(self, definition: WordDefNode) -> Word:
        """Pass two: resolve and block-match one body."""
        self.check_conditionals(definition.body)
        body = tuple(self.resolve(op) for op in definition.body)
        return Word(definition.name, body, definition.line, definition.column)

    def check_conditionals(self, ops: List[OpNode]):
        match_conditionals([op.name for op in ops],
                           [(op.line, op.column) for op in ops],
                           self.filename)

    def resolve(self, op: OpNode, probe: bool = False) -> Instruction:
        """Turn an operation reference into an instruction."""
        primitive = PRIMITIVES.get(op.name)
        if primitive is not None:
            if primitive.kind is PrimitiveKind.PROBE and not probe:
                raise UsageError(f"'{op.text}' can only be used before 'return'",
                                 self.filename, op.line, op.column)
            if primitive.kind is PrimitiveKind.CONTROL and probe:
                raise UsageError(f"'{op.text}' cannot be used as a checkpoint operation",
                                 self.filename, op.line, op.column)
            return Instruction(InstrKind.PRIMITIVE, op.name, line=op.line, column=op.column)
        if op.name in self.definitions:
            return Instruction(InstrKind.CALL, op.name, line=op.line, column=op.column)
        if op.name in RESERVED:
            raise UsageError(f"'{op.text}' is misplaced", self.filename, op.line, op.column)
        raise UnknownWord(f"unknown word '{op.text}'", self.filename, op.line, op.column)

    def lower_statements(self, statements: List[ASTNode]) -> Tuple[Instruction, ...]:
        """Resolve the top-level program, directives included."""
        self.check_conditionals([node for node in statements if isinstance(node, OpNode)])

        main: List[Instruction] = []
        for node in statements:
            if isinstance(node, OpNode):
                main.append(self.resolve(node))
            elif isinstance(node, PrintNode):
                main.append(Instruction(InstrKind.PRINT, line=node.line, column=node.column))
            elif isinstance(node, CheckpointNode):
                main.append(Instruction(InstrKind.CHECKPOINT, node.name, self.resolve_probe(node.probe),
                                        node.line, node.column))
            elif isinstance(node, ReturnNode):
                main.append(Instruction(InstrKind.RETURN, None, self.resolve_probe(node.probe),
                                        node.line, node.column))
        return tuple(main)

    def resolve_probe(self, op: Optional[OpNode]) -> Optional[Instruction]:
        if op is None:
            return None
        return self.resolve(op, probe=True)
