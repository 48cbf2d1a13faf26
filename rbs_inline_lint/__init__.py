"""Lint rules for RBS::Inline annotation comments in Ruby code."""

__version__ = "0.3.0"
