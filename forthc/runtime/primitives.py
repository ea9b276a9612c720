"""
Built-in word definitions.

Every primitive is a pure function StackState -> StackState, registered in
PRIMITIVES under its canonical name. Binary operators take the
second-from-top value as the left operand and the top as the right one, so
[... a b] under minus gives [... a-b]. On a Suppressed state everything
except the control words is the identity.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Optional

from . import control_flow
from .values import (
    Boolean, Natural, StackState, Suppressed, Value, ValueTag,
    EMPTY, FALSE, TRUE, pop, push, require, top as top_value,
)


class PrimitiveKind(Enum):
    """How a primitive uses the stack."""
    CONSTANT = auto()   # push a fixed value
    STACK = auto()      # rearrange values of any tag
    UNARY = auto()      # pop one, push one
    BINARY = auto()     # pop two, push one
    CONTROL = auto()    # if / else / then
    PROBE = auto()      # terminal: yields a Value, not a state


@dataclass(frozen=True)
class Primitive:
    """A built-in word."""
    name: str
    kind: PrimitiveKind
    arity: int
    tag: Optional[ValueTag]
    func: Callable

    def apply(self, state: StackState):
        """Run the primitive; non-control primitives skip Suppressed states."""
        if isinstance(state, Suppressed) and self.kind is not PrimitiveKind.CONTROL:
            return state
        return self.func(state)

    def __repr__(self):
        return f"Primitive({self.name}, {self.kind.name})"


PRIMITIVES: Dict[str, Primitive] = {}


def _register(name: str, kind: PrimitiveKind, arity: int, tag: Optional[ValueTag],
              func: Callable) -> Primitive:
    primitive = Primitive(name, kind, arity, tag, func)
    PRIMITIVES[name] = primitive
    return primitive


def _constant(name: str, value: Value):
    _register(name, PrimitiveKind.CONSTANT, 0, None, lambda s: push(s, value))


def _unary(name: str, tag: ValueTag, op: Callable[[Value], Value]):
    def run(state: StackState) -> StackState:
        a, rest = pop(state)
        return push(rest, op(require(a, tag, name)))
    _register(name, PrimitiveKind.UNARY, 1, tag, run)


def _binary(name: str, tag: ValueTag, op: Callable[[Value, Value], Value]):
    def run(state: StackState) -> StackState:
        b, rest = pop(state)
        a, rest = pop(rest)
        return push(rest, op(require(a, tag, name), require(b, tag, name)))
    _register(name, PrimitiveKind.BINARY, 2, tag, run)


# Constants

for _index, _name in enumerate(('zero', 'one', 'two', 'three', 'four', 'five',
                                'six', 'seven', 'eight', 'nine', 'ten')):
    _constant(_name, Natural(_index))
del _index, _name

_constant('truef', TRUE)
_constant('falsef', FALSE)


# Stack manipulation

def drop(state: StackState) -> StackState:
    _, rest = pop(state)
    return rest


def dup(state: StackState) -> StackState:
    return push(state, top_value(state))


def swap(state: StackState) -> StackState:
    b, rest = pop(state)
    a, rest = pop(rest)
    return push(push(rest, b), a)


def rot(state: StackState) -> StackState:
    """[a b c] -> [b c a]: the third value moves to the top."""
    c, rest = pop(state)
    b, rest = pop(rest)
    a, rest = pop(rest)
    return push(push(push(rest, b), c), a)


_register('drop', PrimitiveKind.STACK, 1, None, drop)
_register('dup', PrimitiveKind.STACK, 1, None, dup)
_register('swap', PrimitiveKind.STACK, 2, None, swap)
_register('rot', PrimitiveKind.STACK, 3, None, rot)

# top is terminal: it turns the state into its top value
_register('top', PrimitiveKind.PROBE, 1, None, top_value)


# Arithmetic and logic

_unary('not', ValueTag.BOOLEAN, Boolean.negate)
_unary('pred', ValueTag.NATURAL, Natural.pred)
_unary('fib', ValueTag.NATURAL, Natural.fib)
_unary('fact', ValueTag.NATURAL, Natural.fact)

_binary('plus', ValueTag.NATURAL, Natural.plus)
_binary('minus', ValueTag.NATURAL, Natural.minus)
_binary('modulo', ValueTag.NATURAL, Natural.modulo)
_binary('mult', ValueTag.NATURAL, Natural.mult)
_binary('eq', ValueTag.NATURAL, Natural.eq)
_binary('less', ValueTag.NATURAL, Natural.less)
_binary('and', ValueTag.BOOLEAN, Boolean.conj)
_binary('or', ValueTag.BOOLEAN, Boolean.disj)


# Control flow

_register(control_flow.IF, PrimitiveKind.CONTROL, 1, ValueTag.BOOLEAN, control_flow.iff)
_register(control_flow.ELSE, PrimitiveKind.CONTROL, 0, None, control_flow.elsef)
_register(control_flow.THEN, PrimitiveKind.CONTROL, 0, None, control_flow.then)


def lookup(name: str) -> Optional[Primitive]:
    """Find a primitive by canonical name."""
    return PRIMITIVES.get(name)


def apply(name: str, state: StackState) -> StackState:
    """Apply the named primitive to a state."""
    return PRIMITIVES[name].apply(state)


def run_sequence(names, state: StackState = EMPTY) -> StackState:
    """Apply primitives left to right (words are not resolved here)."""
    for name in names:
        state = apply(name, state)
    return state
