from __future__ import annotations

from .registry import deduce_format, deduce_reader, get_reader

# Register the built-in readers
from . import hepmc3  # noqa: F401

__all__ = ["deduce_format", "deduce_reader", "get_reader"]
