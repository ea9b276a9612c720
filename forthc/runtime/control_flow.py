"""
Structured conditionals: if / else / then.

Two halves:

- The state transitions. A false guard wraps the remaining stack in
  Suppressed(depth=1); every non-control operation passes a Suppressed state
  through untouched, so the skipped branch has no effect. Conditionals met
  while suppressed only bump the depth so that their own else/then are
  matched and discarded with them.

- The compile-time block matcher, which pairs every if with its optional
  else and its then (like balanced-parenthesis matching) and rejects stray
  or unclosed conditionals before anything runs.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import UnmatchedConditional
from .values import Active, StackState, Suppressed, ValueTag, pop, require

IF = 'iff'
ELSE = 'elsef'
THEN = 'then'


def iff(state: StackState) -> StackState:
    """Pop a boolean guard; suppress the if-branch when it is false."""
    if isinstance(state, Suppressed):
        return Suppressed(state.inner, state.depth + 1)
    guard, rest = pop(state)
    require(guard, ValueTag.BOOLEAN, 'if')
    if guard.value:
        return rest
    return Suppressed(rest, 1)


def elsef(state: StackState) -> StackState:
    """Switch branches.

    After an executed if-branch the else-branch is suppressed; after a
    suppressed if-branch the else-branch runs. Inside an outer suppressed
    region (depth > 1) this else belongs to a skipped conditional and does
    nothing.
    """
    if isinstance(state, Active):
        return Suppressed(state, 1)
    if state.depth == 1:
        return state.inner
    return state


def then(state: StackState) -> StackState:
    """Close one conditional."""
    if isinstance(state, Active):
        return state
    if state.depth == 1:
        return state.inner
    return Suppressed(state.inner, state.depth - 1)


def suppression_depth(state: StackState) -> int:
    """Number of skip-causing conditionals still open."""
    depth = 0
    while isinstance(state, Suppressed):
        depth += state.depth
        state = state.inner
    return depth


@dataclass(frozen=True)
class Block:
    """Positions of one matched conditional within a token sequence."""
    if_index: int
    else_index: Optional[int]
    then_index: int


def match_conditionals(words: Sequence[str],
                       locations: Optional[Sequence[Tuple[int, int]]] = None,
                       filename: Optional[str] = None) -> Dict[int, Block]:
    """Pair up if/else/then in a sequence of canonical word names.

    Returns a mapping from each if position to its Block. `locations` gives
    (line, column) per word and is only used for error messages.

    Raises:
        UnmatchedConditional: stray else/then, a second else for the same if,
            or an if left open at the end of the sequence.
    """
    def fail(message: str, index: int):
        line, column = locations[index] if locations else (0, 0)
        raise UnmatchedConditional(message, filename, line, column)

    blocks: Dict[int, Block] = {}
    # Each open entry is [if_index, else_index]
    open_blocks: List[List[Optional[int]]] = []

    for index, word in enumerate(words):
        if word == IF:
            open_blocks.append([index, None])
        elif word == ELSE:
            if not open_blocks:
                fail("'else' without a matching 'if'", index)
            if open_blocks[-1][1] is not None:
                fail("second 'else' for the same 'if'", index)
            open_blocks[-1][1] = index
        elif word == THEN:
            if not open_blocks:
                fail("'then' without a matching 'if'", index)
            if_index, else_index = open_blocks.pop()
            blocks[if_index] = Block(if_index, else_index, index)

    if open_blocks:
        fail("'if' is never closed by 'then'", open_blocks[-1][0])

    return blocks
