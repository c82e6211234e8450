"""Aymur — retail management backend for jewelry shops."""

__version__ = "1.0.0"
