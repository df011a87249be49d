"""
subc Command-Line Interface
===========================

This package provides the command-line driver for the compiler:

- **subcc**: compile preprocessed C to x86-64 assembly

The tool is a Click-based CLI application with help text and uniform
error reporting.
"""

__all__ = ["subcc"]
