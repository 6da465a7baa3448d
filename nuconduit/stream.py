"""Seekable-by-skip cursor over a forward-only event reader.

The underlying decoder can only move forward. Moving backwards means
closing it, opening the file again, and skipping from the start; moving
forwards skips from the current position.
"""

from __future__ import annotations

import logging
from typing import Optional

from .io.reader_base import EventReader
from .io.registry import deduce_reader
from .models import GeneratorEvent

logger = logging.getLogger(__name__)


class EventStream:
    """Single-owner event cursor for one input file.

    Attributes:
        path: The file being read.
        position: Logical index of the next event ``read_next`` returns.
        reopen_count: Number of reopens caused by backward seeks.
    """

    def __init__(self, path: str) -> None:
        self.path = str(path)
        self.position = 0
        self.reopen_count = 0
        self._reader: Optional[EventReader] = None

    @property
    def reader(self) -> Optional[EventReader]:
        return self._reader

    def open(self) -> None:
        """(Re)acquire a fresh reader at position 0."""
        self.close()
        self._reader = deduce_reader(self.path)
        self.position = 0

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def _require_open(self) -> EventReader:
        if self._reader is None:
            self.open()
        return self._reader

    def read_next(self) -> Optional[GeneratorEvent]:
        """Decode the next event, or return None at end of stream."""
        ev = self._require_open().read_event()
        if ev is not None:
            self.position += 1
        return ev

    def skip_to(self, target: int) -> None:
        """Position the cursor so that the next read returns event *target*."""
        if target < 0:
            raise ValueError(f"Negative event index: {target}")
        reader = self._require_open()
        if target < self.position:
            self.open()
            self.reopen_count += 1
            logger.debug("Reopened %s to seek back to %d (reopen #%d)", self.path, target, self.reopen_count)
            reader = self._reader
        n = target - self.position
        if n:
            # Past the end the reader fails and the next read returns None
            self.position += reader.skip(n)

    def __enter__(self) -> "EventStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
