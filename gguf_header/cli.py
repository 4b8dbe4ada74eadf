# gguf_header/cli.py
"""
cli.py

Rich console CLI:
- show:    decode the header of a .gguf file and print version, counts and
           metadata.
- version: show the package version.
"""
from __future__ import annotations

import argparse
import os
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel

from gguf_header import __version__
from gguf_header.analysis.inspector import AVAILABLE_STAGES, HeaderInspector
from gguf_header.logging import configure_logging
from gguf_header.model_formats.gguf.gguf import MAX_DEPTH_CEILING, DecodeLimits
from gguf_header.reporting import console as console_reporter
from gguf_header.reporting.json_reporter import write_json

console = Console()


def _max_depth(text: str) -> int:
    try:
        n = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if not 1 <= n <= MAX_DEPTH_CEILING:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_DEPTH_CEILING}")
    return n


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="gguf-info",
        description="Decode and print the header of a GGUF model file.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    sub = p.add_subparsers(dest="cmd", title="Available Commands", metavar="<command>")

    sp_show = sub.add_parser("show", help="Print the header of a local .gguf file")
    sp_show.add_argument("path", help="Path to model file (.gguf)")
    sp_show.add_argument("--debug", action="store_true", help="Enable debug logging")
    sp_show.add_argument(
        "--json-out", type=str, default=None, help="Write JSON report to this path"
    )
    sp_show.add_argument(
        "--stage",
        nargs="+",
        choices=AVAILABLE_STAGES,
        metavar="STAGE",
        help=(
            f"Run only specific stages. Defaults to all stages if not provided.\n"
            f"Available stages: {', '.join(AVAILABLE_STAGES)}."
        ),
    )
    sp_show.add_argument(
        "--max-depth",
        type=_max_depth,
        default=DecodeLimits().max_depth,
        help="Maximum array nesting accepted by the decoder (default: %(default)s)",
    )
    sp_show.add_argument(
        "--full", action="store_true", help="Print metadata values without truncation"
    )

    sub.add_parser("version", help="Show the version of gguf-header")

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "version":
        console.print(f"gguf-header {__version__}")
        return 0

    if args.cmd == "show":
        configure_logging(debug=args.debug)
        path = args.path
        if not os.path.isfile(path):
            console.print(f"[red]File not found:[/red] {path}")
            return 2

        stages = args.stage or list(AVAILABLE_STAGES)
        console.print(f"[dim]Running stages: {', '.join(stages)}...[/dim]")

        inspector = HeaderInspector(path, limits=DecodeLimits(max_depth=args.max_depth))
        rep = inspector.run(stages)

        console.print(
            Panel(
                f"[bold]Result:[/bold] {'[green]OK[/green]' if rep.ok else '[red]FAILED[/red]'}",
                style="bold cyan",
            )
        )
        console_reporter.render_report(rep, full=args.full)

        if args.json_out:
            write_json(rep, args.json_out)
            console.print(f"[dim]Wrote JSON report → {args.json_out}[/dim]")

        return 0 if rep.ok else 1

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
