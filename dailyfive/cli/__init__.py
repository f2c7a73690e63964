"""Command line entry points for the Daily Five generator."""

from .main import main

__all__ = ["main"]
