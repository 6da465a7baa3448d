from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..models import GeneratorEvent, RunInfo


class EventReader(ABC):
    """Forward-only event decoder over one open file.

    ``read_event`` returns ``None`` once the stream is exhausted and sets
    ``failed``; there is no way back except opening a new reader.
    """

    path: str

    @abstractmethod
    def read_event(self) -> Optional[GeneratorEvent]:
        ...

    @abstractmethod
    def skip(self, n: int) -> int:
        """Advance *n* events without decoding them; returns how many were skipped."""

    @property
    @abstractmethod
    def run_info(self) -> Optional[RunInfo]:
        """Run header, available only after the first event has been read."""

    @property
    @abstractmethod
    def failed(self) -> bool:
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self) -> "EventReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
