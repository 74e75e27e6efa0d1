"""Backup and restore commands for the ``tindatrack`` CLI.

Usage:
    tindatrack backup --label "Monthly Backup" --actor-id 1 --actor-name alice
    tindatrack restore backups/TindaTrack_Backup_Monthly_Backup_1767225600000.json --yes
    tindatrack validate backups/TindaTrack_Backup_Monthly_Backup_1767225600000.json
    tindatrack history --limit 20
    tindatrack auto-backup --user-id 1 --username alice --role owner
"""

import argparse
import asyncio
from pathlib import Path

from rich.console import Console
from rich.table import Table

from tindatrack.adapters.base import DomainStore
from tindatrack.audit import AuditLog
from tindatrack.backup.engine import create_backup, restore_backup, validate_backup
from tindatrack.backup.files import read_backup_file, write_backup_file
from tindatrack.backup.scheduler import BackupUser, run_daily_backup
from tindatrack.config.loader import load_config
from tindatrack.config.models import AppConfig, StoreProfile
from tindatrack.factory import create_store, resolve_profile
from tindatrack.schema.tables import SCHEMA_VERSION

console = Console()

# Profile name used when ``--db`` is given instead of a config file.
DB_PROFILE = "cli"


def load_app_config(args: argparse.Namespace) -> AppConfig:
    """Config from ``--db`` when given, else from the TOML file."""
    db = getattr(args, "db", None)
    if db:
        return AppConfig(profiles={DB_PROFILE: StoreProfile(url=db)})
    return load_config(getattr(args, "config", None))


def open_from_args(args: argparse.Namespace) -> tuple[AppConfig, str, DomainStore]:
    config = load_app_config(args)
    profile_name = DB_PROFILE if getattr(args, "db", None) else getattr(args, "profile", None)
    name, profile = resolve_profile(
        config,
        profile_name=profile_name,
        env_prefix=getattr(args, "env_prefix", ""),
    )
    # A memory store starts empty and is gone when the command exits.
    if profile.provider == "memory":
        raise ValueError(
            f"Profile '{name}' uses the in-memory provider, which the CLI cannot use. "
            "Point it at a SQLite file instead."
        )
    return config, name, create_store(profile)


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_backup(args: argparse.Namespace) -> int:
    config, _, store = open_from_args(args)
    try:
        result = await create_backup(
            store,
            AuditLog(store),
            args.actor_id,
            args.actor_name,
            args.label,
            app_name=config.app_name,
        )
    finally:
        await store.close()

    if not result.success:
        console.print(f"[bold red]x[/bold red] Backup failed: {result.error}")
        return 1

    path = write_backup_file(result, args.output_dir or config.backup_dir)

    console.print(f"[bold green]v[/bold green] Backup created: [cyan]{path}[/cyan]")
    console.print(f"  Size: {result.size_bytes} bytes")
    console.print(f"  Checksum: [dim]{result.checksum}[/dim]")
    if result.skipped_tables:
        console.print(
            f"  [yellow]Tables backed up as empty (unreadable): "
            f"{', '.join(result.skipped_tables)}[/yellow]"
        )
    return 0


async def _async_restore(args: argparse.Namespace) -> int:
    try:
        document = read_backup_file(args.backup_path)
    except OSError as e:
        console.print(f"[bold red]x[/bold red] Cannot read backup file: {e}")
        return 1

    _, _, store = open_from_args(args)
    try:
        result = await restore_backup(
            store,
            AuditLog(store),
            document,
            args.actor_id,
            args.actor_name,
            source_name=Path(args.backup_path).name,
        )
    finally:
        await store.close()

    if not result.success:
        console.print(f"[bold red]x[/bold red] Restore failed: {result.error}")
        console.print("  [dim]Existing data was left unchanged.[/dim]")
        return 1

    table = Table(title="Restored rows", show_header=True, header_style="bold")
    table.add_column("Table")
    table.add_column("Rows", justify="right")
    for name, count in result.table_counts.items():
        table.add_row(name, str(count))
    console.print(table)
    console.print("[bold green]v[/bold green] Backup restored")
    return 0


async def _async_history(args: argparse.Namespace) -> int:
    _, _, store = open_from_args(args)
    try:
        records = await AuditLog(store).history(limit=args.limit)
    finally:
        await store.close()

    if not records:
        console.print("[yellow]No backup history yet.[/yellow]")
        return 0

    table = Table(title="Backup History", show_header=True, header_style="bold")
    table.add_column("When")
    table.add_column("Action")
    table.add_column("By")
    table.add_column("Name")
    table.add_column("File")
    table.add_column("Size", justify="right")
    for r in records:
        table.add_row(
            r.timestamp,
            r.action.value,
            r.actor_name,
            r.label or "",
            r.file_name or "",
            "" if r.file_size is None else str(r.file_size),
        )
    console.print(table)
    return 0


async def _async_auto_backup(args: argparse.Namespace) -> int:
    config, _, store = open_from_args(args)
    user = BackupUser(user_id=args.user_id, username=args.username, role=args.role)
    try:
        outcome = await run_daily_backup(
            store,
            AuditLog(store),
            user,
            args.output_dir or config.backup_dir,
            app_name=config.app_name,
        )
    finally:
        await store.close()

    if outcome.ran:
        console.print(f"[bold green]v[/bold green] Daily backup written: [cyan]{outcome.path}[/cyan]")
        return 0
    if outcome.result is not None:
        console.print(f"[bold red]x[/bold red] Daily backup failed: {outcome.reason}")
        return 1
    console.print(f"[dim]Skipped: {outcome.reason}[/dim]")
    return 0


# ============================================================================
# Sync command wrappers
# ============================================================================


def cmd_backup(args: argparse.Namespace) -> int:
    """Create a backup and write it to the backup directory."""
    return asyncio.run(_async_backup(args))


def cmd_restore(args: argparse.Namespace) -> int:
    """Restore from a backup file, replacing all store data.

    Asks for confirmation unless ``--yes`` is given.
    """
    if not args.yes:
        console.print(f"[yellow]This will replace ALL store data with:[/yellow] {args.backup_path}")
        response = console.input("Continue? [y/N] ")
        if response.strip().lower() not in ("y", "yes"):
            console.print("Cancelled.")
            return 0
    return asyncio.run(_async_restore(args))


def cmd_validate(args: argparse.Namespace) -> int:
    """Check a backup file offline (no store access)."""
    try:
        document = read_backup_file(args.backup_path)
    except OSError as e:
        console.print(f"[bold red]x[/bold red] Cannot read backup file: {e}")
        return 1

    report = validate_backup(document, args.schema_version)
    console.print(f"Validating: {args.backup_path}")

    for error in report["errors"]:
        console.print(f"  [red]- {error}[/red]")
    for warning in report["warnings"]:
        console.print(f"  [yellow]- {warning}[/yellow]")

    if report["valid"]:
        console.print("[bold green]v[/bold green] Backup is valid")
        return 0
    console.print("[bold red]x[/bold red] Backup is invalid")
    return 1


def cmd_history(args: argparse.Namespace) -> int:
    """List recent backup/restore audit records."""
    return asyncio.run(_async_history(args))


def cmd_auto_backup(args: argparse.Namespace) -> int:
    """Run the daily backup if it is due for this user."""
    return asyncio.run(_async_auto_backup(args))


def register(subparsers: argparse._SubParsersAction) -> None:
    """Add the backup commands to the main parser."""
    p_backup = subparsers.add_parser("backup", help="Create a backup file")
    p_backup.add_argument("--label", "-l", default="Manual Backup", help="Backup name")
    p_backup.add_argument("--actor-id", default="system", help="Id of the user making the backup")
    p_backup.add_argument("--actor-name", default="System", help="Name of the user making the backup")
    p_backup.add_argument("--output-dir", "-o", help="Directory for the backup file (default: config backup_dir)")
    p_backup.set_defaults(func=cmd_backup)

    p_restore = subparsers.add_parser("restore", help="Restore from a backup file")
    p_restore.add_argument("backup_path", help="Path to backup JSON file")
    p_restore.add_argument("--actor-id", default="system", help="Id of the user restoring")
    p_restore.add_argument("--actor-name", default="System", help="Name of the user restoring")
    p_restore.add_argument("--yes", "-y", action="store_true", help="Skip confirmation prompt")
    p_restore.set_defaults(func=cmd_restore)

    p_validate = subparsers.add_parser("validate", help="Validate a backup file")
    p_validate.add_argument("backup_path", help="Path to backup JSON file")
    p_validate.add_argument(
        "--schema-version",
        type=int,
        default=SCHEMA_VERSION,
        help=f"Store schema version to check against (default: {SCHEMA_VERSION})",
    )
    p_validate.set_defaults(func=cmd_validate)

    p_history = subparsers.add_parser("history", help="Show backup/restore history")
    p_history.add_argument("--limit", "-n", type=int, default=50, help="Number of records")
    p_history.set_defaults(func=cmd_history)

    p_auto = subparsers.add_parser("auto-backup", help="Run the daily backup if due")
    p_auto.add_argument("--user-id", required=True, help="Signed-in user id")
    p_auto.add_argument("--username", default=None, help="Signed-in user name")
    p_auto.add_argument("--role", default=None, help="Signed-in user role (only owners back up)")
    p_auto.add_argument("--output-dir", "-o", help="Directory for the backup file (default: config backup_dir)")
    p_auto.set_defaults(func=cmd_auto_backup)
