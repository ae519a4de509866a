"""
nativedep CLI module.

This module provides the command-line interface for nativedep.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
