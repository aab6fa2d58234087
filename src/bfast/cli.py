"""Command line interface for bfast."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from .api import (
    build_from_manifest,
    inspect_bfast,
    read_header_file,
    unpack_to_directory,
    validate_bfast,
)
from .logging import configure_logging, step
from .packing.errors import BFastError
from .reporting import (
    JsonLinesReporter,
    PlainReporter,
    RichReporter,
    SilentReporter,
    get_reporter,
    set_reporter,
    set_verbosity,
)
from .utils.io import DataError

_REPORTERS = ("plain", "rich", "json", "silent")


def _pack_cmd(args: argparse.Namespace) -> int:
    step(f"packing {args.manifest.name}")
    build_from_manifest(args.manifest, args.output)
    return 0


def _unpack_cmd(args: argparse.Namespace) -> int:
    step(f"unpacking {args.input.name}")
    unpack_to_directory(args.input, args.outdir)
    return 0


def _inspect_cmd(args: argparse.Namespace) -> int:
    info = inspect_bfast(args.input)
    rep = get_reporter()
    rep.flush()
    if args.json:
        print(json.dumps(info, indent=2, sort_keys=True))
    else:
        rep.section("Ranges")
        for r in info.get("ranges", []):
            rep.status(
                f"{r['index']:>4} {r['name']} @{r['begin']}+{r['count']}"
            )
        for issue in info["issues"]:
            rep.warning(issue)
        rep.summary(
            "inspect",
            file=args.input.name,
            size=info["file_size"],
            buffers=info.get("buffers", 0),
            issues=len(info["issues"]),
        )
    return 1 if info["issues"] else 0


def _validate_cmd(args: argparse.Namespace) -> int:
    issues = validate_bfast(args.input)
    rep = get_reporter()
    for issue in issues:
        rep.error(issue)
    rep.summary("validate", file=args.input.name, issues=len(issues))
    return 1 if issues else 0


def _list_cmd(args: argparse.Namespace) -> int:
    header = read_header_file(args.input)
    get_reporter().flush()
    for _, name, rng in header.entries():
        print(f"{rng.count:>12}  {name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bfast", description="Pack and unpack BFAST binary containers"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=list(_REPORTERS),
        default=None,
        help=(
            "Select reporter backend: plain (default), rich, json (JSONL "
            "events), silent. Defaults to $BFAST_REPORTER when set."
        ),
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    pk = sub.add_parser("pack", help="Pack buffers listed in a manifest")
    pk.add_argument("manifest", type=Path, help="JSON or YAML manifest")
    pk.add_argument("output", type=Path)
    pk.set_defaults(func=_pack_cmd)

    up = sub.add_parser("unpack", help="Extract every buffer into a directory")
    up.add_argument("input", type=Path)
    up.add_argument("outdir", type=Path)
    up.set_defaults(func=_unpack_cmd)

    i = sub.add_parser("inspect", help="Inspect a BFAST file")
    i.add_argument("input", type=Path)
    i.add_argument("--json", action="store_true", help="Emit JSON report")
    i.set_defaults(func=_inspect_cmd)

    v = sub.add_parser("validate", help="Validate a BFAST file")
    v.add_argument("input", type=Path)
    v.set_defaults(func=_validate_cmd)

    ls = sub.add_parser("list", help="List buffer names and sizes")
    ls.add_argument("input", type=Path)
    ls.set_defaults(func=_list_cmd)

    return p


def _select_reporter(requested: str | None) -> None:
    if requested is None:
        env = os.environ.get("BFAST_REPORTER", "plain").strip().lower()
        requested = env if env in _REPORTERS else "plain"
    if requested == "json":
        set_reporter(JsonLinesReporter())
    elif requested == "silent":
        set_reporter(SilentReporter())
    elif requested == "rich":
        if sys.stderr.isatty():
            set_reporter(RichReporter())
        else:
            # Fallback quietly to plain if no TTY
            set_reporter(PlainReporter())
    else:  # plain
        set_reporter(PlainReporter())


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    _select_reporter(args.reporter)
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except (BFastError, DataError, ValueError, OSError) as e:
        rep = get_reporter()
        rep.flush()
        rep.error(str(e))
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
