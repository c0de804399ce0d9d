# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command-line entry point for converting and joining tiny mappings."""

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

from tinymap import (
    MappingError,
    MappingTable,
    TinyFormat,
    join,
    migrate,
    read_mappings,
    write_mappings,
)

logger = logging.getLogger(__name__)

_INPUT_FORMATS = tuple(kind.value for kind in TinyFormat)
_OUTPUT_FORMATS = (TinyFormat.TINY.value, TinyFormat.TINY_2.value)


@dataclass(frozen=True)
class CommandSummary:
    """Represent counters reported after a successful command."""

    classes: int
    records_written: int
    elapsed_ms: int


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="tinymap")
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser("convert")
    convert_parser.add_argument("--input", required=True, help="Input mapping file.")
    convert_parser.add_argument("--from", dest="from_ns", help="Obfuscated namespace.")
    convert_parser.add_argument("--to", dest="to_ns", help="Deobfuscated namespace.")
    _add_common_arguments(convert_parser)

    join_parser = subparsers.add_parser("join")
    join_parser.add_argument("--a", required=True, help="Mapping file A (source side).")
    join_parser.add_argument("--b", required=True, help="Mapping file B (target side).")
    join_parser.add_argument("--from", dest="from_ns", required=True, help="Namespace of A.")
    join_parser.add_argument("--to", dest="to_ns", required=True, help="Namespace of B.")
    join_parser.add_argument(
        "--match-a", required=True, help="Namespace of B matched against A."
    )
    join_parser.add_argument(
        "--match-b", help="Namespace of A used for lookups; defaults to --match-a."
    )
    _add_common_arguments(join_parser)

    migrate_parser = subparsers.add_parser("migrate")
    migrate_parser.add_argument("--source", required=True, help="Older mapping file.")
    migrate_parser.add_argument("--target", required=True, help="Newer mapping file.")
    migrate_parser.add_argument(
        "--from", dest="from_ns", required=True, help="Stable matching namespace."
    )
    migrate_parser.add_argument(
        "--to", dest="to_ns", required=True, help="Namespace being migrated."
    )
    _add_common_arguments(migrate_parser)
    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--output", required=True, help="Output mapping file.")
    parser.add_argument(
        "--input-format",
        choices=_INPUT_FORMATS,
        default=TinyFormat.DETECT.value,
        help="Input format.",
    )
    parser.add_argument(
        "--output-format",
        choices=_OUTPUT_FORMATS,
        default=TinyFormat.TINY_2.value,
        help="Output format.",
    )
    parser.add_argument("--from-label", help="Output header label of the first column.")
    parser.add_argument("--to-label", help="Output header label of the second column.")


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    try:
        if args.command == "convert":
            summary = _run_convert(args=args, console=console)
        elif args.command == "join":
            summary = _run_join(args=args, console=console)
        else:
            summary = _run_migrate(args=args, console=console)
    except ValidationError as exc:
        logger.warning("Validation failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    except (MappingError, OSError, UnicodeDecodeError) as exc:
        logger.warning("Command failed (command=%s error=%s)", args.command, exc)
        stderr.write(f"{args.command} failed: {exc}\n")
        return 2

    _emit_summary(
        console=console,
        summary={
            "classes": summary.classes,
            "records_written": summary.records_written,
            "elapsed_ms": summary.elapsed_ms,
        },
    )
    console.print("status=success")
    return 0


def _run_convert(args: argparse.Namespace, console: Console) -> CommandSummary:
    started = time.monotonic()
    if (args.from_ns is None) != (args.to_ns is None):
        raise ValidationError("--from and --to must be given together")

    _emit_marker(console=console, phase="decode", state="start")
    table = read_mappings(
        Path(args.input),
        TinyFormat(args.input_format),
        from_ns=args.from_ns,
        to_ns=args.to_ns,
    )
    _emit_marker(console=console, phase="decode", state="done")

    if args.from_ns is None:
        default_labels = (table.source_namespace, table.target_namespace)
    else:
        default_labels = (args.from_ns, args.to_ns)
    return _write_output(
        args=args,
        console=console,
        table=table,
        labels=default_labels,
        started=started,
    )


def _run_join(args: argparse.Namespace, console: Console) -> CommandSummary:
    started = time.monotonic()
    input_format = TinyFormat(args.input_format)
    _emit_marker(console=console, phase="decode", state="start")
    tree_a = read_mappings(Path(args.a), input_format)
    tree_b = read_mappings(Path(args.b), input_format)
    _emit_marker(console=console, phase="decode", state="done")

    _emit_marker(console=console, phase="join", state="start")
    table = join(tree_a, args.from_ns, args.match_a, tree_b, args.to_ns, args.match_b)
    _emit_marker(console=console, phase="join", state="done")
    return _write_output(
        args=args,
        console=console,
        table=table,
        labels=(args.from_ns, args.to_ns),
        started=started,
    )


def _run_migrate(args: argparse.Namespace, console: Console) -> CommandSummary:
    started = time.monotonic()
    input_format = TinyFormat(args.input_format)
    _emit_marker(console=console, phase="decode", state="start")
    source = read_mappings(Path(args.source), input_format)
    target = read_mappings(Path(args.target), input_format)
    _emit_marker(console=console, phase="decode", state="done")

    _emit_marker(console=console, phase="migrate", state="start")
    table = migrate(source, target, args.from_ns, args.to_ns)
    _emit_marker(console=console, phase="migrate", state="done")
    return _write_output(
        args=args,
        console=console,
        table=table,
        labels=(args.to_ns, args.to_ns),
        started=started,
    )


def _write_output(
    args: argparse.Namespace,
    console: Console,
    table: MappingTable,
    labels: tuple[str, str],
    started: float,
) -> CommandSummary:
    """Encode the resulting table into the requested output file.

    Args:
        args: Parsed CLI arguments.
        console: Console for phase markers.
        table: Table to encode.
        labels: Header labels used when no explicit label is given.
        started: Monotonic start time of the command.

    Returns:
        Command summary counters.
    """
    from_label = args.from_label or labels[0]
    to_label = args.to_label or labels[1]
    _emit_marker(console=console, phase="encode", state="start")
    records = write_mappings(
        table,
        Path(args.output),
        TinyFormat(args.output_format),
        from_label,
        to_label,
    )
    _emit_marker(console=console, phase="encode", state="done")
    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    return CommandSummary(
        classes=len(table), records_written=records, elapsed_ms=elapsed_ms
    )


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"{phase}:{state}")


def _emit_summary(console: Console, summary: dict[str, int]) -> None:
    fields = " ".join(f"{key}={value}" for key, value in summary.items())
    console.print(fields)


def main() -> None:
    """Run tinymap CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
