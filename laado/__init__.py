"""Syntax tree, debug printer, tree-walking interpreter and JVM class-file back end for a small compiled language."""

__version__ = "0.1.0"