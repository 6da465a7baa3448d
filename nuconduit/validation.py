"""
Consistency checks on internal events.

Per event:
- PDG codes known to the particle table (nuclei excepted)
- No negative energies
- An incoming neutrino is present
- The final state is not empty
- The stack is grouped initial, FSI, final, other
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional

from . import pdg as pdg_module
from .event import InternalEvent, order_key

ERROR = "error"
WARNING = "warning"

_MAX_LISTED = 50


@dataclass(frozen=True)
class ValidationIssue:
    level: str
    entry: int
    message: str
    particle_index: Optional[int] = None

    def __str__(self) -> str:
        where = f"entry {self.entry}" if self.particle_index is None else f"entry {self.entry}/{self.particle_index}"
        return f"{self.level.upper():<7s} {where}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "entry": self.entry,
            "particle": self.particle_index,
            "message": self.message,
        }


@dataclass
class ValidationReport:
    """Issues collected over ``n_events`` checked events."""

    issues: list[ValidationIssue] = field(default_factory=list)
    n_events: int = 0

    def _levels(self) -> Counter:
        return Counter(issue.level for issue in self.issues)

    @property
    def n_errors(self) -> int:
        return self._levels()[ERROR]

    @property
    def n_warnings(self) -> int:
        return self._levels()[WARNING]

    @property
    def is_valid(self) -> bool:
        return self.n_errors == 0

    def summary(self) -> str:
        return f"{self.n_errors} errors, {self.n_warnings} warnings across {self.n_events} events"

    def __str__(self) -> str:
        out = [f"Checked {self.summary()}"]
        out += [f"  {issue}" for issue in self.issues[:_MAX_LISTED]]
        hidden = len(self.issues) - _MAX_LISTED
        if hidden > 0:
            out.append(f"  ({hidden} more not shown)")
        return "\n".join(out)

    def to_dict(self) -> dict:
        levels = self._levels()
        return {
            "n_events": self.n_events,
            "n_errors": levels[ERROR],
            "n_warnings": levels[WARNING],
            "is_valid": self.is_valid,
            "issues": [issue.to_dict() for issue in self.issues],
        }


def validate_event(event: InternalEvent, entry: int, *, check_pdg: bool = True) -> list[ValidationIssue]:
    if event.n_particles == 0:
        return [ValidationIssue(WARNING, entry, "Event has no particles")]

    found: list[ValidationIssue] = []
    highest_group = -1
    for idx, p in enumerate(event.particles):
        if check_pdg and not pdg_module.is_nucleus(p.pdg) and not pdg_module.is_valid_pdg_id(p.pdg):
            found.append(ValidationIssue(WARNING, entry, f"Unknown PDG code {p.pdg}", idx))
        if p.energy < 0:
            found.append(ValidationIssue(ERROR, entry, f"Negative energy {p.energy:.6e}", idx))
        group = order_key(p.state)
        if group < highest_group:
            found.append(ValidationIssue(ERROR, entry, f"Stack not grouped by state: {p.state.name} out of place", idx))
        highest_group = max(highest_group, group)

    if event.neutrino_in is None:
        found.append(ValidationIssue(WARNING, entry, "No incoming neutrino"))
    if not event.final_particles:
        found.append(ValidationIssue(WARNING, entry, "Empty final state"))
    return found


def validate(events: Iterable[InternalEvent], *, max_events: int = -1, check_pdg: bool = True) -> ValidationReport:
    """Check events as they are produced, so a handler can be passed directly.

    Args:
        events: Events to check.
        max_events: Stop after this many events; -1 checks all.
        check_pdg: Warn about PDG codes unknown to the particle table.
    """
    report = ValidationReport()
    for entry, event in enumerate(events):
        if 0 <= max_events <= entry:
            break
        report.issues.extend(validate_event(event, entry, check_pdg=check_pdg))
        report.n_events += 1
    return report
