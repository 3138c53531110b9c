"""
DataDAO Wizard CLI Module

Contains the command-line interface:
- main: CLI entry point with typer
- Commands: init, status, next, validate, complete, fail, recover,
  restore, reset, render, placeholders
- output: Rich terminal output
- context: Shared project and settings context
"""

from .main import app, main

__all__ = [
    "app",
    "main",
]
