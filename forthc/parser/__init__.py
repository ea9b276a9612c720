"""Forth Parser - Builds Abstract Syntax Tree from tokens."""

from .parser import Parser, ALIASES, canonical
from .ast_nodes import *

__all__ = ['Parser', 'ALIASES', 'canonical']
