#!/usr/bin/env python3
"""
Forth Compiler entry point.

Usage: python forthc.py program.fth [--check] [--max-depth N] [--memoize] [--verbose]
"""

from forthc.compiler import main

if __name__ == '__main__':
    main()
