"""Command-line interface for the TindaTrack store.

Provides commands for setting up a store, inspecting its schema, and
creating, restoring and validating backups.

Usage:
    tindatrack --db tindatrack.db init
    tindatrack status
    tindatrack profiles
    TINDATRACK_PROFILE=local tindatrack backup --label "Monthly Backup"
    tindatrack restore backups/TindaTrack_Backup_Monthly_Backup_1767225600000.json
    tindatrack validate backups/TindaTrack_Backup_Monthly_Backup_1767225600000.json
    tindatrack history
    tindatrack auto-backup --user-id 1 --username alice --role owner

Commands:
    init         - Create missing tables and stamp the schema version
    status       - Show profile, schema check and last backup
    profiles     - List available profiles
    backup       - Create a backup file
    restore      - Restore from a backup file
    validate     - Validate a backup file offline
    history      - Show backup/restore history
    auto-backup  - Run the daily backup if due
"""

import argparse
import asyncio
import logging
import sys

from rich.logging import RichHandler
from rich.table import Table

from tindatrack.adapters.sqlite import AsyncSQLiteStore
from tindatrack.audit import AuditLog
from tindatrack.cli import backup as backup_commands
from tindatrack.cli.backup import console, load_app_config, open_from_args
from tindatrack.factory import ProfileNotFoundError, resolve_profile
from tindatrack.schema.comparator import validate_schema
from tindatrack.schema.tables import AUDIT_TABLE, SCHEMA_VERSION, expected_columns


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_init(args: argparse.Namespace) -> int:
    _, name, store = open_from_args(args)
    try:
        if not isinstance(store, AsyncSQLiteStore):
            console.print(f"[yellow]Profile '{name}' is not a database file; nothing to create.[/yellow]")
            return 0
        await store.create_schema(SCHEMA_VERSION)
    finally:
        await store.close()

    console.print(
        f"[bold green]v[/bold green] Schema version {SCHEMA_VERSION} ready for profile "
        f"[bold cyan]{name}[/bold cyan]"
    )
    return 0


async def _async_status(args: argparse.Namespace) -> int:
    config, name, store = open_from_args(args)
    profile = config.profiles[name]

    table = Table(title="Store Status", show_header=False)
    table.add_column("Key", style="dim")
    table.add_column("Value")
    table.add_row("Profile", f"[bold cyan]{name}[/bold cyan]")
    table.add_row("Provider", profile.provider)
    table.add_row("URL", profile.url)
    if profile.description:
        table.add_row("Description", profile.description)

    report = None
    try:
        version = await store.schema_version()
        table.add_row("Schema version", f"{version} (expected {SCHEMA_VERSION})")
        if isinstance(store, AsyncSQLiteStore):
            report = validate_schema(
                await store.column_names(),
                expected_columns(),
                actual_version=version,
                expected_version=SCHEMA_VERSION,
            )
            status = "[green]valid[/green]" if report.valid else "[red]drifted[/red]"
            table.add_row("Schema", status)
        if report is None or AUDIT_TABLE not in report.missing_tables:
            last = await AuditLog(store).last_backup_date()
            table.add_row("Last backup", str(last) if last else "[yellow]never[/yellow]")
    finally:
        await store.close()

    console.print(table)
    if report is not None and not report.valid:
        console.print(report.format_report())
        console.print("[dim]Run[/dim] [cyan]tindatrack init[/cyan] [dim]to create missing tables.[/dim]")
        return 1
    return 0


# ============================================================================
# Sync command wrappers
# ============================================================================


def cmd_init(args: argparse.Namespace) -> int:
    """Create missing tables and stamp the schema version."""
    return asyncio.run(_async_init(args))


def cmd_status(args: argparse.Namespace) -> int:
    """Show the active profile, schema check and last backup date.

    Returns:
        0 when the schema matches, 1 when it has drifted.
    """
    return asyncio.run(_async_status(args))


def cmd_profiles(args: argparse.Namespace) -> int:
    """List profiles from tindatrack.toml.

    Reads only local TOML config -- no store calls.
    """
    config = load_app_config(args)

    try:
        current, _ = resolve_profile(config, args.profile, args.env_prefix)
    except ProfileNotFoundError:
        current = None

    table = Table(title="Store Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Provider")
    table.add_column("URL")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        table.add_row(
            marker,
            f"[bold cyan]{name}[/bold cyan]" if name == current else name,
            profile.provider,
            profile.url,
            profile.description or "",
        )

    console.print(table)
    if current:
        console.print("\n[bold green]*[/bold green] = active profile")
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tindatrack",
        description="TindaTrack store backup and restore toolkit",
    )

    parser.add_argument("--config", "-c", default=None, help="Path to tindatrack.toml")
    parser.add_argument("--profile", "-p", default=None, help="Store profile to use")
    parser.add_argument(
        "--db",
        default=None,
        help="SQLite database path; bypasses tindatrack.toml",
    )
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_TINDATRACK_PROFILE)"
        ),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_init = subparsers.add_parser("init", help="Create missing tables and stamp the schema version")
    p_init.set_defaults(func=cmd_init)

    p_status = subparsers.add_parser("status", help="Show profile, schema check and last backup")
    p_status.set_defaults(func=cmd_status)

    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    backup_commands.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.func(args)
    except (OSError, ValueError, ProfileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
