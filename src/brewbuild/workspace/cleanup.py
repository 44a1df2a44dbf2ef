"""Best-effort recursive delete for workspace teardown.

A build step may leave behind read-only directories, dangling symlinks, or
files that vanish mid-walk. chmod_rm_rf() removes whatever it can and records
what it could not; it never raises OSError, so cleanup cannot mask the
build failure that triggered it.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# Owner bits restored on directories we own before descending
_OWNER_RWX = stat.S_IRUSR | stat.S_IWUSR | stat.S_IXUSR


@dataclass
class CleanupReport:
    """Outcome of one chmod_rm_rf() call."""

    root: Path
    removed: int = 0
    skipped: list[tuple[Path, OSError]] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.skipped and not os.path.lexists(self.root)

    def skip(self, path: Path, error: OSError) -> None:
        logger.debug("Cleanup skipped %s: %s", path, error)
        self.skipped.append((path, error))


def _ensure_owner_access(path: Path, st: os.stat_result) -> None:
    """Give the owner rwx on a directory we own so it can be listed and emptied."""
    if st.st_uid != os.geteuid():
        return
    mode = stat.S_IMODE(st.st_mode)
    if mode & _OWNER_RWX != _OWNER_RWX:
        path.chmod(mode | _OWNER_RWX)


def chmod_rm_rf(root: Path) -> CleanupReport:
    """Remove ``root`` and everything under it, skipping nodes that fail.

    Walks with an explicit stack: a directory is pushed once to be expanded
    and once more (marked) to be removed after all of its children. A node
    that errors is recorded in the report and its subtree is left alone;
    siblings are still processed.
    """
    report = CleanupReport(root=root)
    stack: list[tuple[Path, bool]] = [(root, False)]

    while stack:
        path, expanded = stack.pop()

        if expanded:
            try:
                path.rmdir()
                report.removed += 1
            except FileNotFoundError:
                pass
            except OSError as e:
                report.skip(path, e)
            continue

        try:
            st = path.lstat()
        except FileNotFoundError:
            continue
        except OSError as e:
            report.skip(path, e)
            continue

        if stat.S_ISDIR(st.st_mode):
            try:
                _ensure_owner_access(path, st)
                children = list(path.iterdir())
            except FileNotFoundError:
                continue
            except OSError as e:
                report.skip(path, e)
                continue
            stack.append((path, True))
            stack.extend((child, False) for child in children)
        else:
            # Regular file, symlink (never followed), fifo, socket...
            try:
                path.unlink(missing_ok=True)
                report.removed += 1
            except OSError as e:
                report.skip(path, e)

    return report
