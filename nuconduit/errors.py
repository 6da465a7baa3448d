"""Exception types raised by nuconduit.

Every library error derives from :class:`NuconduitError`. End of stream is
never an exception: readers return ``None`` instead.
"""

from __future__ import annotations

from typing import Iterable, Optional


class NuconduitError(Exception):
    """Base class for all nuconduit errors."""


class FatalConfigError(NuconduitError):
    """An input cannot be used at all (bad path, unknown format, no run info)."""


class OpenError(FatalConfigError):
    """Raised when a file cannot be opened or its format cannot be deduced."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open {path}: {reason}")


class MissingAttributeError(NuconduitError):
    """A required run/event attribute is absent.

    Attributes:
        name: The attribute that was demanded.
        available: Names of the attributes actually present.
    """

    def __init__(self, name: str, available: Iterable[str], owner: Optional[str] = None) -> None:
        self.name = name
        self.available = list(available)
        self.owner = owner
        where = f" on {owner}" if owner else ""
        known = ", ".join(self.available) if self.available else "<none>"
        super().__init__(f"Failed to find attribute '{name}'{where}. Known attributes: {known}")


class AttributeValueError(MissingAttributeError):
    """A required attribute is present but does not parse as the demanded type."""

    def __init__(self, name: str, raw: str, expected: str, available: Iterable[str], owner: Optional[str] = None) -> None:
        super().__init__(name, available, owner)
        self.raw = raw
        self.expected = expected
        self.args = (f"Attribute '{name}' = {raw!r} is not a valid {expected}",)


class StackOverflowError(NuconduitError):
    """More particles were appended than the internal stack can hold."""
