"""Timestamped backups of managed files.

Backups live alongside the managed file as ``<file>.backup.<YYYYMMDD-HHMMSS>``.
Two backups taken within the same second get a ``-N`` suffix so neither is
overwritten.
"""

import logging
import re
import shutil
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_KEEP = 3
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

_BACKUP_SUFFIX = re.compile(r"\.backup\.(?P<stamp>\d{8}-\d{6})(?:-(?P<seq>\d+))?$")


@dataclass(frozen=True, slots=True)
class BackupFile:
    """A timestamped snapshot of a managed file.

    Attributes:
        original: Path of the managed file the snapshot was taken from.
        path: Path of the snapshot itself.
        created: Creation time (second resolution) encoded in the name.
        sequence: Tie-breaker for backups created within the same second.
        retained: False once the rotator has purged the snapshot.
    """

    original: Path
    path: Path
    created: datetime
    sequence: int = 0
    retained: bool = True

    @property
    def sort_key(self) -> tuple[datetime, int]:
        """Ordering key, oldest first."""
        return (self.created, self.sequence)


def backup_name(original: Path, created: datetime, sequence: int = 0) -> Path:
    """Build the backup path for a file and timestamp."""
    name = f"{original.name}.backup.{created.strftime(TIMESTAMP_FORMAT)}"
    if sequence:
        name = f"{name}-{sequence}"
    return original.with_name(name)


def parse_backup(original: Path, candidate: Path) -> BackupFile | None:
    """Interpret a path as a backup of ``original``.

    Returns:
        BackupFile if the name matches the backup pattern, None otherwise.
    """
    prefix = f"{original.name}.backup."
    if not candidate.name.startswith(prefix):
        return None
    match = _BACKUP_SUFFIX.search(candidate.name[len(original.name) :])
    if match is None or match.start() != 0:
        return None
    try:
        created = datetime.strptime(match.group("stamp"), TIMESTAMP_FORMAT)
    except ValueError:
        logger.debug("Ignoring backup with invalid timestamp: %s", candidate)
        return None
    sequence = int(match.group("seq") or 0)
    return BackupFile(original=original, path=candidate, created=created, sequence=sequence)


class BackupRotator:
    """Creates backups of a managed file and keeps only the newest ones.

    Attributes:
        keep: Number of backups retained per managed path.

    Example:
        >>> rotator = BackupRotator(keep=3)
        >>> backup = rotator.create(Path.home() / ".zshrc")
        >>> purged = rotator.rotate(Path.home() / ".zshrc")
    """

    def __init__(self, keep: int = DEFAULT_KEEP) -> None:
        """Initialize the rotator.

        Args:
            keep: Number of backups to retain, at least 1.

        Raises:
            ValueError: If keep is smaller than 1.
        """
        if keep < 1:
            msg = f"Backup retention must be at least 1, got {keep}"
            raise ValueError(msg)
        self._keep = keep

    @property
    def keep(self) -> int:
        """Number of backups retained per managed path."""
        return self._keep

    def list_backups(self, original: Path) -> list[BackupFile]:
        """List existing backups of a file, newest first.

        Args:
            original: Managed file path.

        Returns:
            BackupFile entries sorted by creation time descending.
        """
        directory = original.parent
        if not directory.is_dir():
            return []
        backups: list[BackupFile] = []
        for candidate in directory.glob(f"{original.name}.backup.*"):
            if not candidate.is_file():
                continue
            backup = parse_backup(original, candidate)
            if backup is not None:
                backups.append(backup)
        backups.sort(key=lambda b: b.sort_key, reverse=True)
        return backups

    def create(self, original: Path, now: datetime | None = None) -> BackupFile:
        """Copy a file to a new timestamped backup.

        Args:
            original: Managed file to back up.
            now: Timestamp to use, defaults to the current local time.

        Returns:
            The created BackupFile.

        Raises:
            OSError: If the copy fails.
        """
        created = (now or datetime.now()).replace(microsecond=0)
        sequence = 0
        target = backup_name(original, created)
        while target.exists():
            sequence += 1
            target = backup_name(original, created, sequence)

        shutil.copy2(original, target)
        logger.info("Backed up %s to %s", original, target)
        return BackupFile(original=original, path=target, created=created, sequence=sequence)

    def rotate(self, original: Path) -> list[BackupFile]:
        """Delete all but the newest ``keep`` backups of a file.

        Safe to call with zero or few backups (no-op).

        Args:
            original: Managed file path.

        Returns:
            The purged backups, with ``retained`` set to False.
        """
        backups = self.list_backups(original)
        purged: list[BackupFile] = []
        for backup in backups[self._keep :]:
            try:
                backup.path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not remove old backup %s: %s", backup.path, e)
                continue
            purged.append(replace(backup, retained=False))

        if purged:
            logger.info("Removed %d old backup(s) of %s", len(purged), original)
        return purged
