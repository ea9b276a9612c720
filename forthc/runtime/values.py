"""
Value and stack model.

Values are naturals and booleans. A stack state is either Active (a tuple of
values, bottom first, top last) or Suppressed, which wraps the state to
resume with once the skipped conditional branch closes. All of these are
frozen dataclasses: operations return new states and never mutate old ones,
so states can be shared, compared and used as cache keys.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Tuple, Union

from ..errors import DomainError, StackUnderflow


class ValueTag(Enum):
    """Discriminant of a stack value."""
    NATURAL = auto()
    BOOLEAN = auto()


@dataclass(frozen=True)
class Natural:
    """Unbounded non-negative integer."""
    value: int

    tag = ValueTag.NATURAL

    def __post_init__(self):
        if self.value < 0:
            raise DomainError(f"naturals cannot be negative (got {self.value})")

    def succ(self) -> 'Natural':
        return Natural(self.value + 1)

    def pred(self) -> 'Natural':
        if self.value == 0:
            raise DomainError("pred of zero is undefined")
        return Natural(self.value - 1)

    def plus(self, other: 'Natural') -> 'Natural':
        return Natural(self.value + other.value)

    def minus(self, other: 'Natural') -> 'Natural':
        if other.value > self.value:
            raise DomainError(f"{self.value} - {other.value} is not a natural")
        return Natural(self.value - other.value)

    def mult(self, other: 'Natural') -> 'Natural':
        return Natural(self.value * other.value)

    def modulo(self, other: 'Natural') -> 'Natural':
        if other.value == 0:
            raise DomainError(f"{self.value} % 0 is undefined")
        return Natural(self.value % other.value)

    def eq(self, other: 'Natural') -> 'Boolean':
        return Boolean(self.value == other.value)

    def less(self, other: 'Natural') -> 'Boolean':
        return Boolean(self.value < other.value)

    def fib(self) -> 'Natural':
        """0-indexed Fibonacci number: fib(0) = 0, fib(1) = 1."""
        a, b = 0, 1
        for _ in range(self.value):
            a, b = b, a + b
        return Natural(a)

    def fact(self) -> 'Natural':
        return Natural(math.factorial(self.value))

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Boolean:
    """Truth value."""
    value: bool

    tag = ValueTag.BOOLEAN

    def negate(self) -> 'Boolean':
        return Boolean(not self.value)

    def conj(self, other: 'Boolean') -> 'Boolean':
        return Boolean(self.value and other.value)

    def disj(self, other: 'Boolean') -> 'Boolean':
        return Boolean(self.value or other.value)

    def __str__(self):
        return "true" if self.value else "false"


Value = Union[Natural, Boolean]

TRUE = Boolean(True)
FALSE = Boolean(False)


@dataclass(frozen=True)
class Active:
    """Normal evaluation mode; values[-1] is the top of the stack."""
    values: Tuple[Value, ...] = ()

    def __len__(self):
        return len(self.values)

    def __str__(self):
        return "[" + " ".join(str(v) for v in self.values) + "]"


@dataclass(frozen=True)
class Suppressed:
    """Inside `depth` skipped conditional branches; resume with `inner`."""
    inner: 'StackState'
    depth: int = 1

    def __post_init__(self):
        if self.depth < 1:
            raise ValueError(f"suppression depth must be positive (got {self.depth})")

    def __str__(self):
        return f"<suppressed {self.depth}: {self.inner}>"


StackState = Union[Active, Suppressed]

EMPTY = Active()


def stack(*values) -> Active:
    """Build an Active state from Python ints/bools, bottom first."""
    return Active(tuple(to_value(v) for v in values))


def to_value(obj) -> Value:
    """Wrap a Python int or bool as a stack value."""
    if isinstance(obj, (Natural, Boolean)):
        return obj
    # bool is a subclass of int, so test it first
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, int):
        return Natural(obj)
    raise TypeError(f"cannot convert {obj!r} to a stack value")


def push(state: StackState, value: Value) -> Active:
    """Push a value; only legal on an Active state."""
    if isinstance(state, Suppressed):
        raise DomainError("cannot push onto a suppressed stack")
    return Active(state.values + (value,))


def top(state: StackState) -> Value:
    """Return the top value of an Active, non-empty state."""
    if isinstance(state, Suppressed) or not state.values:
        raise StackUnderflow("stack is empty")
    return state.values[-1]


def pop(state: StackState) -> Tuple[Value, Active]:
    """Return (top value, remaining state)."""
    value = top(state)
    return value, Active(state.values[:-1])


def require(value: Value, tag: ValueTag, op_name: str) -> Value:
    """Check a value's tag, raising DomainError on mismatch."""
    if value.tag is not tag:
        raise DomainError(
            f"'{op_name}' expects a {tag.name.lower()}, got {value.tag.name.lower()} {value}"
        )
    return value
