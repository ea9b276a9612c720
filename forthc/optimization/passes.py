"""
Passes over the compiled program.

Passes run between word compilation and evaluation. Each pass takes the
compilation data dictionary and returns it, possibly with a rewritten
program and extra warnings.
"""

import sys
from typing import Dict, List, Set

from ..codegen.words import CompiledProgram


class OptimizationPass:
    """Base class for optimization passes."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.stats = {}

    def log(self, message: str):
        """Log message if verbose mode enabled."""
        if self.verbose:
            print(f"[opt] {message}", file=sys.stderr)

    def run(self, compilation_data: Dict) -> Dict:
        """
        Run the optimization pass.

        Args:
            compilation_data: Dictionary containing:
                - program: CompiledProgram
                - warnings: list of warning strings to append to

        Returns:
            Modified compilation_data dictionary
        """
        raise NotImplementedError


class UnusedWordPass(OptimizationPass):
    """
    Warn about words that the program can never call, and drop them.

    A word is used when it is reachable from the top-level program
    (directly, through a checkpoint operation, or through other words).
    """

    WARNING_CODE = "FTH0301"

    def __init__(self, verbose: bool = False, prune: bool = True):
        super().__init__(verbose)
        self.prune = prune

    def run(self, compilation_data: Dict) -> Dict:
        self.log("Unused Word Pass")

        program: CompiledProgram = compilation_data['program']
        used = self._reachable(program)
        unused = [name for name in program.words if name not in used]

        warnings: List[str] = compilation_data.setdefault('warnings', [])
        for name in unused:
            word = program.words[name]
            warnings.append(f"{self.WARNING_CODE}: word '{name}' (line {word.line}) is never used")

        if self.prune and unused:
            kept = {name: word for name, word in program.words.items() if name in used}
            compilation_data['program'] = CompiledProgram(kept, program.main, program.filename)
            self.log(f"  Pruned {len(unused)} unused words")

        self.stats = {
            'total_words': len(program.words),
            'used_words': len(used),
            'unused_words': len(unused),
        }
        return compilation_data

    def _reachable(self, program: CompiledProgram) -> Set[str]:
        used: Set[str] = set()
        pending = list(program.entry_references())
        while pending:
            name = pending.pop()
            if name in used:
                continue
            used.add(name)
            pending.extend(program.words[name].references())
        return used


class OptimizationPipeline:
    """
    Run multiple optimization passes in sequence.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.passes: List[OptimizationPass] = []

    def add_pass(self, pass_class: type, **kwargs):
        """Add an optimization pass to the pipeline."""
        pass_instance = pass_class(verbose=self.verbose, **kwargs)
        self.passes.append(pass_instance)

    def run(self, compilation_data: Dict) -> Dict:
        """Run all optimization passes in sequence."""
        if self.verbose:
            print(f"[opt] Running {len(self.passes)} optimization passes", file=sys.stderr)

        for pass_instance in self.passes:
            compilation_data = pass_instance.run(compilation_data)

        # Collect statistics from all passes
        all_stats = {}
        for pass_instance in self.passes:
            pass_name = pass_instance.__class__.__name__
            all_stats[pass_name] = pass_instance.stats

        compilation_data['optimization_stats'] = all_stats

        return compilation_data
