"""
Forth Compiler (forthc) - Compiles and evaluates a minimal Forth-like stack language.

This package provides the lexer, parser, word compiler and evaluator for a
postfix language of naturals, booleans, stack manipulators, structured
if/else/then conditionals and user-defined (possibly recursive) words.
"""

__version__ = "0.1.0"
__author__ = "Forth Compiler Project"
