"""CLI module for dumping and restoring databases.

Provides commands for profile management, dump creation, dump restore and
offline dump checking.

Usage:
    DB_PROFILE=local sqlport connect
    sqlport status
    sqlport profiles
    sqlport dump -o dumps/shop.sql --tables users,orders
    sqlport restore dumps/shop.sql --exit-on-error --yes
    sqlport check dumps/shop.sql --strict

Commands:
    connect   - Connect to the database and remember the profile
    status    - Show current connection status
    profiles  - List available profiles
    dump      - Write a SQL dump of the current profile
    restore   - Replay a SQL dump against the current profile
    check     - Split a dump into statements without a database
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from sqlport.adapters.base import ConnectionFailedError, QueryFailedError
from sqlport.config.loader import load_db_config
from sqlport.config.models import DumpSettings
from sqlport.dump.generator import DATA, STRUCTURE, dump_database
from sqlport.dump.restore import read_dump_lines, run_restore
from sqlport.dump.splitter import StatementSplitter, UnterminatedStatementError
from sqlport.factory import (
    ProfileNotFoundError,
    create_connection,
    get_connection,
    read_profile_lock,
    resolve_profile,
    write_profile_lock,
)

console = Console()


def _dump_settings(args: argparse.Namespace) -> DumpSettings:
    """Dump defaults from db.toml, or the built-in ones without a config."""
    try:
        return load_db_config(args.config).dump
    except FileNotFoundError:
        return DumpSettings()


def _connection_error(e: Exception) -> int:
    console.print(f"[bold red]x[/bold red] {e}")
    return 1


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_connect(args: argparse.Namespace) -> int:
    """Async implementation for connect command.

    Opens and closes a connection, then writes the lock file.

    Returns:
        0 on success, 1 on failure.
    """
    previous_profile = read_profile_lock()

    try:
        profile_name, profile = resolve_profile(args.profile, args.env_prefix, args.config)
        conn = create_connection(profile)
    except (ProfileNotFoundError, FileNotFoundError, ValueError) as e:
        return _connection_error(e)

    console.print("Connecting to database...", style="dim")

    try:
        await conn.open()
        version = await conn.driver_version()
    except (ConnectionFailedError, QueryFailedError) as e:
        return _connection_error(e)
    finally:
        await conn.close()

    write_profile_lock(profile_name)

    console.print()
    console.print(
        f"[bold green]v[/bold green] Connected to profile: "
        f"[bold cyan]{profile_name}[/bold cyan]"
    )
    console.print(f"  {conn.sql_type} {version} at {conn.target}")

    if previous_profile and previous_profile != profile_name:
        console.print(
            f"\n[dim]Switched from[/dim] [bold]{previous_profile}[/bold] "
            f"[dim]to[/dim] [bold cyan]{profile_name}[/bold cyan]"
        )

    return 0


async def _async_dump(args: argparse.Namespace) -> int:
    """Async implementation for dump command.

    Returns:
        0 on success, 1 on failure.
    """
    settings = _dump_settings(args)
    if args.structure_only:
        parts = STRUCTURE
    elif args.data_only:
        parts = DATA
    else:
        parts = settings.parts

    try:
        conn = get_connection(args.profile, args.env_prefix, args.config)
    except (ProfileNotFoundError, FileNotFoundError, ValueError) as e:
        return _connection_error(e)

    try:
        path = await dump_database(
            conn,
            output_path=args.output,
            parts=parts,
            tables=args.tables,
            output_dir=settings.output_dir,
        )
    except (ConnectionFailedError, QueryFailedError, ValueError) as e:
        return _connection_error(e)

    console.print(f"[bold green]v[/bold green] Dump written to [cyan]{path}[/cyan]")
    return 0


async def _async_restore(args: argparse.Namespace) -> int:
    """Async implementation for restore command.

    Returns:
        0 when every statement succeeded, 1 otherwise.
    """
    settings = _dump_settings(args)
    exit_on_error = args.exit_on_error or settings.exit_on_error

    try:
        conn = get_connection(args.profile, args.env_prefix, args.config)
    except (ProfileNotFoundError, FileNotFoundError, ValueError) as e:
        return _connection_error(e)

    try:
        outcome = await run_restore(conn, Path(args.dump), exit_on_error=exit_on_error)
    except ConnectionFailedError as e:
        return _connection_error(e)

    if outcome.success:
        console.print(
            f"[bold green]v[/bold green] Restored {outcome.statements_executed} statement(s)"
        )
        return 0

    console.print(
        f"[bold red]x[/bold red] Restore finished with {len(outcome.errors)} error(s)"
        + (" and was rolled back" if outcome.rolled_back else "")
    )
    console.print(outcome.format_report(), markup=False, highlight=False)
    return 1


# ============================================================================
# Sync command wrappers (cmd_status, cmd_profiles, cmd_check read local files only)
# ============================================================================


def cmd_connect(args: argparse.Namespace) -> int:
    """Connect to database and remember the profile.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_connect(args))


def cmd_dump(args: argparse.Namespace) -> int:
    """Write a dump of the current profile.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_dump(args))


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore a dump into the current profile.

    Asks for confirmation unless ``--yes`` is given, then wraps the async
    implementation with ``asyncio.run()``.
    """
    if not Path(args.dump).is_file():
        console.print(f"[red]Error: Dump file not found: {args.dump}[/red]")
        return 1

    if not args.yes:
        console.print(f"[yellow]This will replay {args.dump} against the target database.[/yellow]")
        response = console.input("Continue? \\[y/N] ")
        if response.lower() not in ["y", "yes"]:
            console.print("Cancelled.")
            return 0

    return asyncio.run(_async_restore(args))


def cmd_check(args: argparse.Namespace) -> int:
    """Split a dump into statements without touching a database.

    Returns:
        0 when the dump splits cleanly, 1 on an unreadable file or (with
        ``--strict``) an unterminated statement at the end.
    """
    dump_path = Path(args.dump)
    if not dump_path.is_file():
        console.print(f"[red]Error: Dump file not found: {dump_path}[/red]")
        return 1

    lines = read_dump_lines(dump_path)
    try:
        statements = list(StatementSplitter(lines, strict=args.strict))
    except UnterminatedStatementError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    console.print(
        f"[bold green]v[/bold green] {len(statements)} statement(s) "
        f"in {len(lines)} line(s)"
    )
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show current connection status.

    Reads only local files (lock file and TOML config) -- no database calls.

    Returns:
        0 always (informational command).
    """
    profile = read_profile_lock()

    if profile:
        table = Table(title="Connection Status", show_header=False)
        table.add_column("Key", style="dim")
        table.add_column("Value")

        table.add_row("Current profile", f"[bold cyan]{profile}[/bold cyan]")
        table.add_row("Profile source", ".db-profile")

        try:
            config = load_db_config(args.config)
            if profile in config.profiles:
                p = config.profiles[profile]
                table.add_row("Provider", p.provider)
                if p.description:
                    table.add_row("Description", p.description)
        except FileNotFoundError:
            table.add_row("Warning", "[yellow]db.toml not found[/yellow]")

        console.print(table)
    else:
        console.print("[yellow]No connected profile.[/yellow]")
        console.print(
            f"[dim]Run:[/dim] [cyan]{args.env_prefix}DB_PROFILE=<name> sqlport connect[/cyan]"
        )

    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Reads only local TOML config -- no database calls.

    Returns:
        0 on success, 1 if db.toml not found.
    """
    try:
        config = load_db_config(args.config)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    current = read_profile_lock()

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        name_style = "bold cyan" if name == current else ""
        table.add_row(
            marker,
            f"[{name_style}]{name}[/{name_style}]" if name_style else name,
            profile.provider,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = current profile")

    return 0


# ============================================================================
# Main entry point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="sqlport",
        description="Portable SQL dump and restore",
    )

    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_DB_PROFILE)"
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to db.toml (default: ./db.toml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log progress to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # connect command
    p_connect = subparsers.add_parser(
        "connect",
        help="Connect to the database and remember the profile",
    )
    p_connect.add_argument("--profile", help="Profile name from db.toml")
    p_connect.set_defaults(func=cmd_connect)

    # status command
    p_status = subparsers.add_parser(
        "status",
        help="Show current connection status",
    )
    p_status.set_defaults(func=cmd_status)

    # profiles command
    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    # dump command
    p_dump = subparsers.add_parser(
        "dump",
        help="Write a SQL dump of the current profile",
    )
    p_dump.add_argument("--profile", help="Profile name from db.toml")
    p_dump.add_argument(
        "--output",
        "-o",
        help="Output file (default: ./dumps/dump-<timestamp>.sql)",
    )
    parts = p_dump.add_mutually_exclusive_group()
    parts.add_argument(
        "--structure-only",
        action="store_true",
        help="Dump table structure without rows",
    )
    parts.add_argument(
        "--data-only",
        action="store_true",
        help="Dump rows without table structure",
    )
    p_dump.add_argument(
        "--tables",
        help="Comma-separated list of tables to dump (default: all tables)",
    )
    p_dump.set_defaults(func=cmd_dump)

    # restore command
    p_restore = subparsers.add_parser(
        "restore",
        help="Replay a SQL dump against the current profile",
    )
    p_restore.add_argument("dump", help="Path to the dump file")
    p_restore.add_argument("--profile", help="Profile name from db.toml")
    p_restore.add_argument(
        "--exit-on-error",
        action="store_true",
        help="Stop at the first failing statement",
    )
    p_restore.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    p_restore.set_defaults(func=cmd_restore)

    # check command
    p_check = subparsers.add_parser(
        "check",
        help="Split a dump into statements without a database",
    )
    p_check.add_argument("dump", help="Path to the dump file")
    p_check.add_argument(
        "--strict",
        action="store_true",
        help="Fail on an unterminated statement at the end of the dump",
    )
    p_check.set_defaults(func=cmd_check)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True))],
        )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
