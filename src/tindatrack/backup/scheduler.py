"""Automatic once-a-day backup for store owners.

Call ``run_daily_backup()`` at application start-up.  It backs up only when
the signed-in user is an owner and no automatic backup file for today is
already in the backup directory.  A day only counts as done once its file
has been written, so a failed export is retried on the next start.

Usage:
    from tindatrack.backup.scheduler import BackupUser, run_daily_backup

    outcome = await run_daily_backup(
        store, audit, BackupUser(user_id=1, username="alice", role="Owner"),
        backup_dir="backups",
    )
"""

import logging
import re
from datetime import date, datetime, timezone
from pathlib import Path

from pydantic import BaseModel

from tindatrack.adapters.base import DomainStore
from tindatrack.audit import AuditLog
from tindatrack.backup.engine import DEFAULT_APP_NAME, create_backup, safe_app_name
from tindatrack.backup.files import write_backup_file
from tindatrack.backup.models import BackupResult

logger = logging.getLogger(__name__)

DAILY_BACKUP_LABEL = "Automatic Daily Backup"
OWNER_ROLE = "owner"


class BackupUser(BaseModel):
    """The signed-in user a daily backup runs on behalf of."""

    user_id: int | str
    username: str | None = None
    role: str | None = None


class DailyBackupOutcome(BaseModel):
    """What ``run_daily_backup()`` did and why."""

    ran: bool
    reason: str
    result: BackupResult | None = None
    path: str | None = None


def _daily_file_pattern(app_name: str) -> re.Pattern[str]:
    label = re.sub(r"\s+", "_", DAILY_BACKUP_LABEL)
    return re.compile(rf"^{re.escape(safe_app_name(app_name))}_Backup_{label}_(\d+)\.json$")


def last_daily_backup_date(backup_dir: str | Path, app_name: str = DEFAULT_APP_NAME) -> date | None:
    """UTC date of the newest automatic backup file in *backup_dir*."""
    directory = Path(backup_dir)
    if not directory.is_dir():
        return None

    pattern = _daily_file_pattern(app_name)
    newest: int | None = None
    for entry in directory.iterdir():
        match = pattern.match(entry.name)
        if match:
            millis = int(match.group(1))
            newest = millis if newest is None else max(newest, millis)

    if newest is None:
        return None
    return datetime.fromtimestamp(newest / 1000, tz=timezone.utc).date()


async def run_daily_backup(
    store: DomainStore,
    audit: AuditLog,
    user: BackupUser | None,
    backup_dir: str | Path,
    *,
    app_name: str = DEFAULT_APP_NAME,
    now: datetime | None = None,
) -> DailyBackupOutcome:
    """Create today's automatic backup if it is due.

    Args:
        store: Store to back up.
        audit: Audit log for the backup record.
        user: Signed-in user, or ``None`` when nobody is signed in.
        backup_dir: Directory the backup file is written to.
        app_name: Document name prefix.
        now: Current time (defaults to UTC now).

    Returns:
        ``DailyBackupOutcome``; ``ran`` is ``True`` only when a backup file
        was written.
    """
    now = now or datetime.now(timezone.utc)

    if user is None:
        logger.info("No user signed in, skipping daily backup")
        return DailyBackupOutcome(ran=False, reason="no user signed in")

    if (user.role or "").lower() != OWNER_ROLE:
        logger.info("User %s is not an owner, skipping daily backup", user.username)
        return DailyBackupOutcome(ran=False, reason="user is not an owner")

    if last_daily_backup_date(backup_dir, app_name) == now.astimezone(timezone.utc).date():
        logger.info("Already backed up today, skipping")
        return DailyBackupOutcome(ran=False, reason="already backed up today")

    logger.info("Running automatic daily backup")
    result = await create_backup(
        store,
        audit,
        user.user_id,
        user.username,
        DAILY_BACKUP_LABEL,
        app_name=app_name,
        now=now,
    )
    if not result.success:
        logger.error("Daily backup failed: %s", result.error)
        return DailyBackupOutcome(ran=False, reason=f"backup failed: {result.error}", result=result)

    try:
        path = write_backup_file(result, backup_dir)
    except OSError as e:
        logger.error("Daily backup created but could not be written: %s", e)
        return DailyBackupOutcome(ran=False, reason=f"write failed: {e}", result=result)

    logger.info("Daily backup written to %s", path)
    return DailyBackupOutcome(ran=True, reason="backup written", result=result, path=str(path))
