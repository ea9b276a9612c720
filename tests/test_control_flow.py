"""
Tests for if / else / then.

These tests verify that the control-flow resolver correctly handles:
- The state transitions for each control word
- Compile-time block matching
- Branch selection and nesting in running programs
"""

import pytest

from forthc.errors import DomainError, StackUnderflow, UnmatchedConditional
from forthc.runtime.control_flow import (
    Block, elsef, iff, match_conditionals, suppression_depth, then,
)
from forthc.runtime.values import EMPTY, Suppressed, stack
from .conftest import AssertProgram, run_program


class TestTransitions:
    """Tests for the if/else/then state machine."""

    def test_if_true_continues(self):
        assert iff(stack(1, True)) == stack(1)

    def test_if_false_suppresses(self):
        assert iff(stack(1, False)) == Suppressed(stack(1), 1)

    def test_if_inside_suppressed_nests(self):
        assert iff(Suppressed(stack(1), 1)) == Suppressed(stack(1), 2)

    def test_if_needs_boolean(self):
        with pytest.raises(DomainError):
            iff(stack(1))

    def test_if_on_empty(self):
        with pytest.raises(StackUnderflow):
            iff(EMPTY)

    def test_else_after_executed_branch(self):
        assert elsef(stack(4)) == Suppressed(stack(4), 1)

    def test_else_matching_suppression(self):
        assert elsef(Suppressed(stack(4), 1)) == stack(4)

    def test_else_inside_outer_suppression(self):
        state = Suppressed(stack(4), 2)
        assert elsef(state) == state

    def test_then_on_active(self):
        assert then(stack(4)) == stack(4)

    def test_then_closes_one_level(self):
        assert then(Suppressed(stack(4), 1)) == stack(4)
        assert then(Suppressed(stack(4), 3)) == Suppressed(stack(4), 2)

    def test_suppression_depth(self):
        assert suppression_depth(stack(1)) == 0
        assert suppression_depth(Suppressed(stack(1), 3)) == 3


class TestBlockMatching:
    """Tests for compile-time matching of conditionals."""

    def test_if_else_then(self):
        blocks = match_conditionals(['iff', 'one', 'elsef', 'two', 'then'])
        assert blocks == {0: Block(0, 2, 4)}

    def test_if_then(self):
        assert match_conditionals(['iff', 'then']) == {0: Block(0, None, 1)}

    def test_nested(self):
        words = ['iff', 'iff', 'then', 'elsef', 'iff', 'elsef', 'then', 'then']
        blocks = match_conditionals(words)
        assert blocks[0] == Block(0, 3, 7)
        assert blocks[1] == Block(1, None, 2)
        assert blocks[4] == Block(4, 5, 6)

    def test_no_conditionals(self):
        assert match_conditionals(['one', 'two', 'plus']) == {}

    @pytest.mark.parametrize("words", [
        ['elsef'],
        ['then'],
        ['iff'],
        ['iff', 'elsef'],
        ['iff', 'then', 'then'],
        ['iff', 'elsef', 'elsef', 'then'],
    ])
    def test_unmatched(self, words):
        with pytest.raises(UnmatchedConditional):
            match_conditionals(words)

    def test_error_location(self):
        with pytest.raises(UnmatchedConditional) as exc:
            match_conditionals(['one', 'then'], [(1, 1), (3, 7)], "prog.fth")
        assert "prog.fth:3:7: FTH0103" in str(exc.value)


class TestConditionalPrograms:
    """Tests for conditionals in running programs."""

    def test_true_branch(self):
        AssertProgram("true if 1 else 2 then").gives(1)

    def test_false_branch(self):
        AssertProgram("false if 1 else 2 then").gives(2)

    def test_without_else(self):
        AssertProgram("5 true if drop 6 then").gives(6)
        AssertProgram("5 false if drop 6 then").gives(5)

    def test_guard_is_consumed(self):
        AssertProgram("7 true if then").leaves(7)

    def test_nested_inside_skipped_branch(self):
        AssertProgram("false if true if 1 else 2 then else 3 then").gives(3)

    def test_nested_inside_executed_branch(self):
        AssertProgram("true if false if 1 else 2 then else 3 then").gives(2)

    def test_skipped_else_branch_with_nested_conditional(self):
        AssertProgram("true if 1 else true if 2 else 3 then then").leaves(1)

    def test_deep_nesting(self):
        AssertProgram(
            "false if false if false if 1 then then else true if true if 4 then then then"
        ).gives(4)

    def test_computed_guard(self):
        AssertProgram("3 4 < if 10 else 0 then").gives(10)

    def test_print_skipped_in_suppressed_branch(self):
        AssertProgram("1 false if . then .").outputs("1")

    def test_checkpoint_in_suppressed_branch(self):
        outcome = run_program("1 false if return type X then")
        assert outcome.success
        assert outcome.result["X"] == Suppressed(stack(1), 1)

    def test_non_boolean_guard(self):
        AssertProgram("1 if then").fails_with("FTH0202")

    def test_unclosed_if(self):
        AssertProgram("true if 1").does_not_compile("FTH0103")

    def test_stray_then(self):
        AssertProgram("1 then").does_not_compile("FTH0103")

    def test_stray_else(self):
        AssertProgram("1 else 2").does_not_compile("FTH0103")

    def test_reported_before_evaluation(self):
        """drop on an empty stack would fail, but the unmatched if wins."""
        AssertProgram("drop true if").does_not_compile("FTH0103")
