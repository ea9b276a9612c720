"""
Main Forth Compiler.

Coordinates lexing, parsing, word compilation, passes and evaluation.
"""

import sys
from typing import Callable, List, Optional

from .errors import CompileError, EvaluationError
from .lexer.lexer import Lexer
from .parser import Parser
from .codegen.words import CompiledProgram, WordCompiler
from .optimization.passes import OptimizationPipeline, UnusedWordPass
from .runtime.evaluator import DEFAULT_MAX_DEPTH, Evaluator, ProgramResult
from .runtime.values import Value


class ForthCompiler:
    """Main Forth compiler class."""

    def __init__(self, verbose: bool = False, max_depth: int = DEFAULT_MAX_DEPTH,
                 memoize: bool = False, sink: Optional[Callable[[Value], None]] = None,
                 prune_unused: bool = True):
        self.verbose = verbose
        self.max_depth = max_depth
        self.memoize = memoize
        self.sink = sink  # Receives values popped by '.'
        self.prune_unused = prune_unused
        self.warnings: List[str] = []  # Compilation warnings

    def log(self, message: str):
        """Print log message if verbose mode is enabled."""
        if self.verbose:
            print(f"[forthc] {message}", file=sys.stderr)

    def warn(self, message: str):
        """Add a compilation warning (message starts with its code)."""
        self.warnings.append(message)
        if self.verbose:
            print(f"[forthc] Warning: {message}", file=sys.stderr)

    def get_warnings(self) -> List[str]:
        """Get all warnings generated during compilation."""
        return self.warnings.copy()

    def compile_string(self, source: str, filename: str = "<input>") -> CompiledProgram:
        """
        Compile Forth source code.

        Args:
            source: Forth source code as string
            filename: Filename for error messages

        Returns:
            CompiledProgram ready for evaluation

        Raises:
            CompileError: on any structural problem; nothing is evaluated
        """
        # Clear warnings from any previous compilation
        self.warnings = []

        # Lexical analysis
        self.log("Lexing...")
        tokens = Lexer(source, filename).tokenize()
        self.log(f"  {len(tokens)} tokens")

        # Parsing
        self.log("Parsing...")
        program = Parser(tokens, filename).parse()
        self.log(f"  {len(program.words)} word definitions")
        self.log(f"  {len(program.statements)} top-level statements")

        # Word table, resolution and block matching
        self.log("Compiling words...")
        compiled = WordCompiler(filename, log=self.log).compile(program)

        pipeline = OptimizationPipeline(verbose=self.verbose)
        pipeline.add_pass(UnusedWordPass, prune=self.prune_unused)
        compilation_data = pipeline.run({'program': compiled, 'warnings': []})

        for warning in compilation_data['warnings']:
            self.warn(warning)

        # Log optimization statistics
        for pass_name, stats in compilation_data['optimization_stats'].items():
            if stats:
                self.log(f"  {pass_name}:")
                for key, value in stats.items():
                    self.log(f"    {key}: {value}")

        return compilation_data['program']

    def evaluator(self, program: CompiledProgram) -> Evaluator:
        """Build an evaluator configured like this compiler."""
        return Evaluator(program, max_depth=self.max_depth, memoize=self.memoize,
                         sink=self.sink, verbose=self.verbose)

    def run_string(self, source: str, filename: str = "<input>") -> ProgramResult:
        """Compile and evaluate Forth source code."""
        program = self.compile_string(source, filename)
        self.log("Evaluating...")
        return self.evaluator(program).run()

    def _read(self, input_path: str) -> str:
        self.log(f"Reading {input_path}...")
        with open(input_path, 'r', encoding='utf-8') as f:
            return f.read()

    def compile_file(self, input_path: str) -> bool:
        """
        Check that a Forth source file compiles.

        Returns:
            True if compilation succeeded, False otherwise
        """
        try:
            program = self.compile_string(self._read(input_path), str(input_path))
            self.log(f"Compilation successful: {len(program.words)} words, "
                     f"{len(program.main)} instructions")
            return True
        except FileNotFoundError:
            print(f"Error: File not found: {input_path}", file=sys.stderr)
            return False
        except CompileError as e:
            print(f"Compilation error: {e}", file=sys.stderr)
            return False

    def run_file(self, input_path: str) -> Optional[ProgramResult]:
        """
        Compile and evaluate a Forth source file.

        Returns:
            ProgramResult, or None if compilation or evaluation failed
        """
        try:
            return self.run_string(self._read(input_path), str(input_path))
        except FileNotFoundError:
            print(f"Error: File not found: {input_path}", file=sys.stderr)
        except CompileError as e:
            print(f"Compilation error: {e}", file=sys.stderr)
        except EvaluationError as e:
            print(f"Evaluation error: {e}", file=sys.stderr)
        return None


def report(result: ProgramResult, out=None):
    """Print checkpoints and the final result, one per line."""
    out = out or sys.stdout
    for name, captured in result.checkpoints.items():
        print(f"{name} = {captured}", file=out)
    if result.result is not None:
        print(f"return = {result.result}", file=out)


def main(argv: Optional[List[str]] = None):
    """Command-line interface for the compiler."""
    import argparse

    parser = argparse.ArgumentParser(
        description='Forth Compiler - Compile and evaluate stack-language programs'
    )
    parser.add_argument('input', help='Input .fth source file')
    parser.add_argument('--check', action='store_true',
                        help='Only compile; do not evaluate')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH,
                        metavar='N',
                        help=f'Maximum call and conditional nesting depth (default: {DEFAULT_MAX_DEPTH})')
    parser.add_argument('--memoize', action='store_true',
                        help='Cache word results by input stack')
    parser.add_argument('--keep-unused', action='store_true',
                        help='Do not prune words that are never called')
    parser.add_argument('--verbose', action='store_true',
                        help='Verbose output')

    args = parser.parse_args(argv)
    if args.max_depth < 1:
        parser.error("--max-depth must be at least 1")

    compiler = ForthCompiler(verbose=args.verbose, max_depth=args.max_depth,
                             memoize=args.memoize, sink=print,
                             prune_unused=not args.keep_unused)

    if args.check:
        success = compiler.compile_file(args.input)
    else:
        result = compiler.run_file(args.input)
        success = result is not None
        if success:
            report(result)

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
