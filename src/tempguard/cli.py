"""CLI for tempguard."""

from __future__ import annotations

import argparse
import sys
import time
from importlib.metadata import version
from pathlib import Path

import questionary
from rich.console import Console

from . import config as cfg
from . import fs
from .errors import DeleteFailed, TempGuardError
from .handle import UniqueHandle
from .logging_setup import configure

console = Console(stderr=True)


class _NoTTYError(SystemExit):
    def __init__(self, flag: str) -> None:
        super().__init__(f"No TTY detected. Use {flag} to run non-interactively.")


def _is_tty() -> bool:
    return sys.stdin.isatty()


def _require_tty(flag: str) -> None:
    if not _is_tty():
        raise _NoTTYError(flag)


def _confirm(message: str, *, default: bool = False) -> bool:
    _require_tty("--yes")
    result = questionary.confirm(message, default=default).ask()
    if result is None:
        raise SystemExit(1)
    return result


def find_orphans(directory: Path, older_than_s: float, *, now: float | None = None) -> list[Path]:
    """Regular files named like tempguard temp files and untouched for *older_than_s*."""
    cutoff = (time.time() if now is None else now) - older_than_s
    found: list[Path] = []
    for path in sorted(directory.glob(f"{fs.NAME_PREFIX}*")):
        if not fs.is_regular_file(path):
            continue
        try:
            mtime = path.lstat().st_mtime
        except FileNotFoundError:
            continue
        if mtime <= cutoff:
            found.append(path)
    return found


def cmd_new(args: argparse.Namespace) -> int:
    handle = UniqueHandle(args.dir)
    try:
        handle.secure_create_file()
    except TempGuardError as e:
        # Whatever sits at the path now is not ours to delete.
        handle.disconnect()
        console.print(f"[red]{e}[/red]")
        return 1
    print(handle.disconnect())
    return 0


def cmd_sweep(args: argparse.Namespace) -> int:
    settings = cfg.current()
    directory = Path(args.dir) if args.dir else fs.temp_directory()
    older_than = args.older_than if args.older_than is not None else float(settings["sweep_age_s"])

    orphans = find_orphans(directory, older_than)
    if not orphans:
        console.print(f"[dim]No orphaned temp files in {directory}.[/dim]")
        return 0

    console.print(f"[yellow]Found {len(orphans)} orphaned temp file(s) in {directory}:[/yellow]")
    for path in orphans:
        console.print(f"  - {path.name}")
    if args.dry_run:
        return 0
    if not args.yes and not _confirm(f"Delete {len(orphans)} file(s)?"):
        return 1

    rc = 0
    removed = 0
    for path in orphans:
        try:
            UniqueHandle(path).remove()
            removed += 1
        except DeleteFailed as e:
            console.print(f"[yellow]Warning:[/yellow] {e}")
            rc = 1
    console.print(f"[green]Removed {removed} file(s).[/green]")
    return rc


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="tempguard",
        description="Secure temp files and orphan cleanup",
    )
    sub = parser.add_subparsers(dest="command")

    p_new = sub.add_parser("new", help="Securely create a temp file and print its path")
    p_new.add_argument("--dir", help="Directory to create the file in (default: temp dir)")

    p_sweep = sub.add_parser("sweep", help="Delete orphaned tempguard temp files")
    p_sweep.add_argument("--dir", help="Directory to scan (default: temp dir)")
    p_sweep.add_argument("--older-than", type=float, metavar="SECONDS",
                         help="Only files not modified for this long (default: sweep_age_s)")
    p_sweep.add_argument("--dry-run", action="store_true",
                         help="List orphans without deleting")
    p_sweep.add_argument("--yes", "-y", action="store_true",
                         help="Delete without confirmation")

    sub.add_parser("version", help="Show version")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(0)

    settings = cfg.current()
    configure(Path(settings["log_file"]).expanduser(), debug=bool(settings["debug"]))

    commands = {
        "new": cmd_new,
        "sweep": cmd_sweep,
        "version": lambda _: console.print(version("tempguard")) or 0,
    }
    sys.exit(commands[args.command](args))


if __name__ == "__main__":
    main()
