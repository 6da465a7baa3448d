from __future__ import annotations

import gzip
import io
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..errors import OpenError
from ..models import GeneratorEvent, GeneratorParticle, GeneratorVertex, RunInfo, ToolInfo
from .reader_base import EventReader
from .registry import is_gzip, register

logger = logging.getLogger(__name__)


def _open_text(path: str):
    p = Path(path)
    if is_gzip(p):
        return io.TextIOWrapper(gzip.open(p, "rb"), encoding="utf-8", errors="replace")
    return open(p, "r", encoding="utf-8", errors="replace")


# --- HepMC3 Asciiv3 -------------------------------------------------------------------
#
# Run header (before the first event):
#   HepMC::Version <v> / HepMC::Asciiv3-START_EVENT_LISTING
#   W <name1> <name2> ...                       (weight names)
#   T <name>\|<version>\|<description>          (tool)
#   A <name> <value...>                         (run attribute)
# Event body:
#   E <evtno> <nvertices> <nparticles> [@ x y z t]
#   U <mom_unit> <len_unit>
#   W <w1> <w2> ...
#   A <id> <name> <value...>     id 0 = event, >0 = particle, <0 = vertex
#   V <id> <status> [<in1>,<in2>,...] [@ x y z t]
#   P <id> <parent> <pid> <px> <py> <pz> <e> <m> <status>
#       parent > 0: a particle id (its end vertex), < 0: a vertex id, 0: none
# HepMC::Asciiv3-END_EVENT_LISTING terminates the stream.

_END_LISTING = "HepMC::Asciiv3-END_EVENT_LISTING"


def _unescape(s: str) -> str:
    return s.replace("\\|", "|").replace('\\"', '"').strip('"')


def _parse_tool(line: str) -> ToolInfo:
    fields = [f.strip() for f in line[1:].strip().split("\\|")]
    fields += [""] * (3 - len(fields))
    return ToolInfo(name=fields[0], version=fields[1], description=fields[2])


class _EventBuilder:
    """Collects the records of one event and resolves the vertex graph."""

    def __init__(self, event_number: int) -> None:
        self.event = GeneratorEvent(event_number=event_number)
        self._by_id: Dict[int, GeneratorParticle] = {}
        self._pending_attrs: Dict[int, Dict[str, str]] = {}

    def _vertex(self, vid: int) -> GeneratorVertex:
        v = self.event.vertices.get(vid)
        if v is None:
            v = GeneratorVertex(id=vid)
            self.event.vertices[vid] = v
        return v

    def _implicit_vertex(self, parent_id: int) -> GeneratorVertex:
        parent = self._by_id.get(parent_id)
        if parent is not None and parent.end_vertex:
            return self._vertex(parent.end_vertex)
        vid = min(self.event.vertices, default=0) - 1
        v = self._vertex(vid)
        v.incoming.append(parent_id)
        if parent is not None:
            parent.end_vertex = vid
        return v

    def add(self, tag: str, parts: List[str], line: str) -> None:
        ev = self.event
        if tag == "U":
            if len(parts) >= 3:
                ev.momentum_unit, ev.length_unit = parts[1], parts[2]
        elif tag == "W":
            ev.weights = [float(tok) for tok in parts[1:]]
        elif tag == "A":
            fields = line.split(maxsplit=3)
            oid = int(fields[1])
            name = fields[2]
            value = _unescape(fields[3]) if len(fields) > 3 else ""
            if oid == 0:
                ev.attributes[name] = value
            else:
                self._pending_attrs.setdefault(oid, {})[name] = value
        elif tag == "V":
            self._add_vertex(line)
        elif tag == "P":
            self._add_particle(parts)
        else:
            logger.debug("Ignoring unknown record in event %d: %s", ev.event_number, line)

    def _add_vertex(self, line: str) -> None:
        body, _, pos = line.partition("@")
        toks = body.split(maxsplit=2)
        vid = int(toks[1])
        status = 0
        rest = toks[2] if len(toks) > 2 else ""
        if rest and not rest.startswith("["):
            head, _, rest = rest.partition(" ")
            status = int(head)
        v = self._vertex(vid)
        v.status = status
        inner = rest.strip().strip("[]")
        for tok in inner.replace(",", " ").split():
            pid = int(tok)
            v.incoming.append(pid)
            if pid in self._by_id:
                self._by_id[pid].end_vertex = vid
        coords = pos.split()
        if len(coords) >= 4:
            v.x, v.y, v.z, v.t = (float(c) for c in coords[:4])

    def _add_particle(self, parts: List[str]) -> None:
        if len(parts) < 10:
            raise ValueError("particle record needs 10 fields")
        p = GeneratorParticle(
            id=int(parts[1]),
            pid=int(parts[3]),
            status=int(parts[9]),
            px=float(parts[4]),
            py=float(parts[5]),
            pz=float(parts[6]),
            energy=float(parts[7]),
            mass=float(parts[8]),
        )
        parent = int(parts[2])
        if parent < 0:
            v = self._vertex(parent)
        elif parent > 0:
            v = self._implicit_vertex(parent)
        else:
            v = None
        if v is not None:
            p.production_vertex = v.id
            v.outgoing.append(p.id)
        for v in self.event.vertices.values():
            if p.id in v.incoming:
                p.end_vertex = v.id
        self._by_id[p.id] = p
        self.event.particles.append(p)

    def finish(self) -> GeneratorEvent:
        for oid, attrs in self._pending_attrs.items():
            if oid > 0 and oid in self._by_id:
                self._by_id[oid].attributes.update(attrs)
            elif oid < 0 and oid in self.event.vertices:
                self.event.vertices[oid].attributes.update(attrs)
        return self.event


class Asciiv3Reader(EventReader):
    """Streaming reader for HepMC3 Asciiv3 files (plain or gzip).

    Malformed records are skipped with a warning; a missing or unreadable
    file raises OpenError.
    """

    def __init__(self, path: str) -> None:
        self.path = str(path)
        try:
            self._f = _open_text(self.path)
        except OSError as e:
            raise OpenError(self.path, str(e)) from e
        self._header = RunInfo()
        self._run_info: Optional[RunInfo] = None
        self._header_done = False
        self._pending: Optional[str] = None
        self._eof = False
        self._failed = False

    # -- raw record access --------------------------------------------------------------

    def _records(self) -> Iterator[str]:
        if self._pending is not None:
            line, self._pending = self._pending, None
            yield line
        if self._eof:
            return
        while True:
            try:
                raw = self._f.readline()
            except (OSError, EOFError) as e:
                raise OpenError(self.path, f"unreadable ({e})") from e
            if not raw:
                break
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith(_END_LISTING):
                break
            yield line
        self._eof = True

    def _read_header(self) -> None:
        self._header_done = True
        for line in self._records():
            if line.startswith("HepMC::"):
                self._header.headers.append(line)
                continue
            tag = line[0]
            if tag == "E":
                self._pending = line
                return
            if tag == "W":
                self._header.weight_names = [_unescape(n) for n in line[1:].replace("\\n", " ").split()]
            elif tag == "T":
                self._header.tools.append(_parse_tool(line))
            elif tag == "A":
                fields = line.split(maxsplit=2)
                if len(fields) >= 2:
                    self._header.attributes[fields[1]] = _unescape(fields[2]) if len(fields) > 2 else ""
            else:
                logger.debug("Ignoring unknown run record in %s: %s", self.path, line)

    def _next_event_line(self) -> Optional[str]:
        if not self._header_done:
            self._read_header()
        for line in self._records():
            if line.startswith("E"):
                return line
            logger.warning("Stray record outside an event in %s: %s", self.path, line)
        return None

    # -- EventReader --------------------------------------------------------------------

    def read_event(self) -> Optional[GeneratorEvent]:
        if self._failed:
            return None
        head = self._next_event_line()
        if head is None:
            self._failed = True
            return None

        try:
            evtno = int(head.split()[1])
        except (IndexError, ValueError):
            logger.warning("Malformed event header in %s: %s", self.path, head)
            evtno = 0
        builder = _EventBuilder(evtno)

        for line in self._records():
            parts = line.split()
            tag = parts[0]
            if tag == "E":
                self._pending = line
                break
            try:
                builder.add(tag, parts, line)
            except (IndexError, ValueError) as e:
                logger.warning("Skipping malformed record in event %d of %s: %s (%s)", evtno, self.path, line, e)

        if self._run_info is None:
            self._run_info = self._header
        return builder.finish()

    def skip(self, n: int) -> int:
        skipped = 0
        while skipped < n and not self._failed:
            if self._next_event_line() is None:
                self._failed = True
                break
            skipped += 1
            for line in self._records():
                if line.startswith("E"):
                    self._pending = line
                    break
        if skipped and self._run_info is None:
            self._run_info = self._header
        return skipped

    @property
    def run_info(self) -> Optional[RunInfo]:
        return self._run_info

    @property
    def failed(self) -> bool:
        return self._failed

    def close(self) -> None:
        if not self._f.closed:
            self._f.close()


register("hepmc3", Asciiv3Reader)
