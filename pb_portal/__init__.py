"""Calculation core for the Communities' Choice participatory-budgeting portal."""

__version__ = "1.0.0"
