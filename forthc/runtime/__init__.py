"""Stack machine runtime: values, built-in words and conditionals."""

from .values import (
    ValueTag, Natural, Boolean, Active, Suppressed, EMPTY, TRUE, FALSE,
    stack, to_value, push, pop, top,
)
from .primitives import PRIMITIVES, Primitive, PrimitiveKind
from .control_flow import iff, elsef, then, match_conditionals

__all__ = [
    'ValueTag', 'Natural', 'Boolean', 'Active', 'Suppressed', 'EMPTY', 'TRUE', 'FALSE',
    'stack', 'to_value', 'push', 'pop', 'top',
    'PRIMITIVES', 'Primitive', 'PrimitiveKind',
    'iff', 'elsef', 'then', 'match_conditionals',
]
