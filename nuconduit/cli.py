"""
Command-line interface for nuconduit.

Usage:
    nuconduit info events.hepmc3
    nuconduit dump "(a.hepmc3,b.hepmc3)" --first 0 --count 5
    nuconduit validate events.hepmc3
    nuconduit export events.hepmc3 events.parquet
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import nuconduit

from . import config
from .errors import NuconduitError

logger = logging.getLogger("nuconduit.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nuconduit",
        description="Read NuHepMC generator output into the internal event format.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {nuconduit.__version__}"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--max-events", type=int, default=None,
        help="Cap on the number of events served (sets MAXEVENTS; -1 for all)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- info ---
    info_parser = subparsers.add_parser(
        "info",
        help="Show event count, conventions and normalization",
    )
    info_parser.add_argument("input", help="Input file, or (a,b,...) for a joint input")
    info_parser.add_argument(
        "--json", dest="as_json", action="store_true",
        help="Output as JSON",
    )

    # --- dump ---
    dump_parser = subparsers.add_parser(
        "dump",
        help="Print internal events",
    )
    dump_parser.add_argument("input", help="Input file, or (a,b,...) for a joint input")
    dump_parser.add_argument("--first", type=int, default=0, help="First entry to print")
    dump_parser.add_argument("--count", type=int, default=1, help="Number of entries to print")

    # --- validate ---
    validate_parser = subparsers.add_parser(
        "validate",
        help="Check internal events for consistency",
    )
    validate_parser.add_argument("input", help="Input file, or (a,b,...) for a joint input")
    validate_parser.add_argument(
        "--no-pdg", dest="check_pdg", action="store_false",
        help="Skip PDG code checks",
    )
    validate_parser.add_argument(
        "--json", dest="as_json", action="store_true",
        help="Output report as JSON",
    )

    # --- export ---
    export_parser = subparsers.add_parser(
        "export",
        help="Write internal events to Parquet",
    )
    export_parser.add_argument("input", help="Input file, or (a,b,...) for a joint input")
    export_parser.add_argument("output", help="Output Parquet file")
    export_parser.add_argument(
        "--columnar", action="store_true",
        help="One row per event with a list column of particles",
    )

    return parser


def _open(args: argparse.Namespace):
    from .handler import NuHepMCInputHandler

    return NuHepMCInputHandler(args.command, args.input)


def _cmd_info(args: argparse.Namespace) -> int:
    from .api import info

    result = info(args.input)

    if args.as_json:
        print(json.dumps(result, indent=2))
        return 0

    print(f"Events:              {result['n_events']}")
    print(f"Normalization:       {result['normalization']:.6g} x 1e-38 cm^2")
    for f in result["files"]:
        print(f"File:                {f['path']}")
        print(f"  Events:            {f['n_events']}")
        print(f"  FATX source:       {f['source']} ({f['fatx']:.6g})")
        print(f"  Conventions:       {' '.join(f['conventions'])}")
        if f["weight_names"]:
            print(f"  Weight names:      {f['weight_names'][:5]}")
        if f["tools"]:
            print(f"  Generator:         {f['tools'][0]}")
        if f["scale"] != 1.0:
            print(f"  Joint scale:       {f['scale']:.6g}")
    if result["top_particles"]:
        print("Top particles:")
        for name, count in result["top_particles"][:10]:
            print(f"  {name:>20s}: {count}")
    return 0


def _cmd_dump(args: argparse.Namespace) -> int:
    from .pdg import name as pdg_name

    with _open(args) as handler:
        for entry in range(args.first, args.first + args.count):
            ev = handler.get_entry(entry)
            if ev is None:
                print(f"Entry {entry}: <no event>")
                break
            print(
                f"Entry {entry}: event {ev.event_number}, mode {ev.mode}, "
                f"target A={ev.target_a} Z={ev.target_z}, weight {ev.input_weight:.6g}"
            )
            for i, p in enumerate(ev.particles):
                flag = "*" if p.primary_vertex else " "
                print(
                    f"  {i:3d}{flag} {p.state.name:<16s} {pdg_name(p.pdg):>20s} "
                    f"({p.px: .4e}, {p.py: .4e}, {p.pz: .4e}, {p.energy: .4e})"
                )
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    from .validation import validate

    with _open(args) as handler:
        report = validate(handler, check_pdg=args.check_pdg)

    if args.as_json:
        print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    else:
        print(str(report))
    return 0 if report.is_valid else 2


def _cmd_export(args: argparse.Namespace) -> int:
    from .io.parquet import write_parquet

    with _open(args) as handler:
        n = write_parquet(
            args.output,
            handler,
            [f.normalization for f in handler.files],
            columnar=args.columnar,
        )
    print(f"Wrote {n} events to {args.output}", file=sys.stderr)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    if args.max_events is not None:
        config.set_par("MAXEVENTS", args.max_events)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": _cmd_info,
        "dump": _cmd_dump,
        "validate": _cmd_validate,
        "export": _cmd_export,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except (NuconduitError, FileNotFoundError, ImportError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
