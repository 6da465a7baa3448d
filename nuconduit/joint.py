"""Joint inputs: several files served as one logical event stream."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .errors import FatalConfigError

logger = logging.getLogger(__name__)


def parse_input_list(raw: str) -> list[str]:
    """Split ``"(a.hepmc3,b.hepmc3)"`` or ``"a,b"`` into paths.

    One pair of wrapping parentheses is removed before splitting.
    """
    inputs = [s.strip() for s in raw.split(",")]
    if inputs and inputs[0].startswith("("):
        inputs[0] = inputs[0][1:].strip()
    if inputs and inputs[-1].endswith(")"):
        inputs[-1] = inputs[-1][:-1].strip()
    inputs = [s for s in inputs if s]
    if not inputs:
        raise FatalConfigError(f"No input files in {raw!r}")
    return inputs


def joint_scales(counts: Sequence[int], fatxs: Sequence[float]) -> list[float]:
    """Per-file scale so that each file contributes in proportion to its cross section.

    ``scale_i = N_total / sum(fatx) * fatx_i / N_i``
    """
    total_events = sum(counts)
    total_xsec = sum(fatxs)
    if total_xsec <= 0:
        raise FatalConfigError("Joint inputs need a positive summed cross section")
    scales = []
    for n, xs in zip(counts, fatxs):
        if n <= 0:
            raise FatalConfigError("Joint input file contains no events")
        scales.append(total_events / total_xsec * xs / n)
    return scales


@dataclass
class JointIndexTable:
    """Contiguous ``[low, high)`` index ranges, one per sub-file, with scales.

    Lookups start from the last matched sub-file, since entries are mostly
    requested in increasing order. The table does not check the upper bound
    of the whole index space.
    """

    low: list[int] = field(default_factory=list)
    high: list[int] = field(default_factory=list)
    scale: list[float] = field(default_factory=list)
    _cursor: int = field(default=0, repr=False, compare=False)

    @classmethod
    def from_counts(cls, counts: Sequence[int], scales: Sequence[float]) -> "JointIndexTable":
        if len(counts) != len(scales):
            raise ValueError("counts and scales must have the same length")
        table = cls()
        start = 0
        for n, s in zip(counts, scales):
            table.low.append(start)
            table.high.append(start + n)
            table.scale.append(float(s))
            start += n
        return table

    def __len__(self) -> int:
        return len(self.low)

    @property
    def total(self) -> int:
        return self.high[-1] if self.high else 0

    def locate(self, index: int) -> int:
        """Sub-file position holding global *index*."""
        if not self.low:
            raise FatalConfigError("Joint index table is empty")
        n = len(self.low)
        start = self._cursor
        while not (self.low[self._cursor] <= index < self.high[self._cursor]):
            self._cursor += 1
            if self._cursor == n:
                self._cursor = 0
            if self._cursor == start:
                raise IndexError(f"Event index {index} outside the joint input range")
        return self._cursor

    def resolve_weight(self, index: int) -> float:
        return self.scale[self.locate(index)]
