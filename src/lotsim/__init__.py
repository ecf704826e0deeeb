# File: src/lotsim/__init__.py
"""Command-line parking lot simulator."""

__version__ = "1.0.0"
