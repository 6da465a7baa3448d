from __future__ import annotations

import gzip
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..errors import OpenError
from .reader_base import EventReader

_GZIP_MAGIC = b"\x1f\x8b"
_ROOT_MAGIC = b"root"
_SNIFF_LINES = 8


@dataclass(frozen=True)
class FormatHandlers:
    reader: Callable[[str], EventReader]


_REGISTRY: dict[str, FormatHandlers] = {}


def register(fmt: str, reader: Callable[[str], EventReader]) -> None:
    _REGISTRY[fmt] = FormatHandlers(reader=reader)


def is_gzip(path: str | Path) -> bool:
    with open(path, "rb") as f:
        return f.read(2) == _GZIP_MAGIC


def _head_lines(path: Path, compressed: bool) -> list[str]:
    opener = gzip.open if compressed else open
    lines: list[str] = []
    with opener(path, "rt", encoding="utf-8", errors="replace") as f:
        for raw in f:
            line = raw.strip()
            if line:
                lines.append(line)
            if len(lines) >= _SNIFF_LINES:
                break
    return lines


def deduce_format(filepath: str | Path) -> str:
    """Work out the container format from the file contents.

    The extension is not trusted: generator output is routinely renamed.
    """
    p = Path(filepath)
    if not p.is_file():
        raise OpenError(str(p), "no such file")
    try:
        with open(p, "rb") as f:
            magic = f.read(4)
        if magic.startswith(_ROOT_MAGIC):
            return "root"
        lines = _head_lines(p, magic[:2] == _GZIP_MAGIC)
    except (OSError, EOFError) as e:
        raise OpenError(str(p), f"unreadable ({e})") from e

    for line in lines:
        if line.startswith("HepMC::Asciiv3"):
            return "hepmc3"
        if line.startswith("HepMC::IO_GenEvent"):
            return "hepmc2"
        if line.startswith("<LesHouchesEvents"):
            return "lhef"
    raise OpenError(str(p), "could not deduce the event format")


def get_reader(fmt: str, path: str) -> EventReader:
    if fmt not in _REGISTRY:
        raise OpenError(path, f"no reader registered for format: {fmt}")
    return _REGISTRY[fmt].reader(path)


def deduce_reader(filepath: str | Path) -> EventReader:
    path = str(filepath)
    return get_reader(deduce_format(path), path)
