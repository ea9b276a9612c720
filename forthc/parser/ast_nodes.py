"""
Abstract Syntax Tree node definitions for Forth programs.

A program is a list of word definitions plus the top-level statements
(operation references and the . / return directives) in source order.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum, auto


class NodeType(Enum):
    """AST node types."""
    OP = auto()            # reference to a primitive or word
    WORD_DEF = auto()      # : name body ;
    PRINT = auto()         # .
    RETURN = auto()        # [top] return
    CHECKPOINT = auto()    # [top] return type NAME [as OP]


@dataclass
class ASTNode:
    """Base class for all AST nodes."""
    node_type: NodeType
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"{self.__class__.__name__}(...)"


class OpNode(ASTNode):
    """Operation reference, already mapped to its canonical name."""
    def __init__(self, name: str, text: Optional[str] = None, line: int = 0, column: int = 0):
        super().__init__(NodeType.OP, line, column)
        self.name = name
        self.text = text if text is not None else name

    def __repr__(self):
        if self.text != self.name:
            return f"Op({self.name} <- {self.text!r})"
        return f"Op({self.name})"


class WordDefNode(ASTNode):
    """User word definition."""
    def __init__(self, name: str, body: List[OpNode], line: int = 0, column: int = 0):
        super().__init__(NodeType.WORD_DEF, line, column)
        self.name = name
        self.body = body

    def __repr__(self):
        return f"WordDef({self.name}, {len(self.body)} ops)"


class PrintNode(ASTNode):
    """Pop the top value and emit it."""
    def __init__(self, line: int = 0, column: int = 0):
        super().__init__(NodeType.PRINT, line, column)

    def __repr__(self):
        return "Print()"


class ReturnNode(ASTNode):
    """Terminal return of the whole state, or of a probe applied to it."""
    def __init__(self, probe: Optional[OpNode] = None, line: int = 0, column: int = 0):
        super().__init__(NodeType.RETURN, line, column)
        self.probe = probe

    def __repr__(self):
        return f"Return({self.probe.name if self.probe else ''})"


class CheckpointNode(ASTNode):
    """Named snapshot taken without disturbing the running program."""
    def __init__(self, name: str, probe: Optional[OpNode] = None, line: int = 0, column: int = 0):
        super().__init__(NodeType.CHECKPOINT, line, column)
        self.name = name
        self.probe = probe

    def __repr__(self):
        if self.probe:
            return f"Checkpoint({self.name} as {self.probe.name})"
        return f"Checkpoint({self.name})"


@dataclass
class Program:
    """Root node: every definition and top-level statement."""
    words: List[WordDefNode] = field(default_factory=list)
    statements: List[ASTNode] = field(default_factory=list)

    @property
    def ops(self) -> List[OpNode]:
        """Top-level operation references, without directives."""
        return [node for node in self.statements if isinstance(node, OpNode)]

    @property
    def checkpoints(self) -> List[CheckpointNode]:
        return [node for node in self.statements if isinstance(node, CheckpointNode)]
