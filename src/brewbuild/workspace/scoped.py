"""Scoped temporary workspace for a single build step.

Lifecycle of one ScopedWorkspace (single use):
  inert → active (directory created, cwd switched, callback running)
        → cleaned   (tree deleted; the default)
        → retained  (retain() was called; tree left on disk and reported)

Key class: ScopedWorkspace. mktemp() is a one-call convenience wrapper.
"""

from __future__ import annotations

import contextlib
import grp
import logging
import os
import re
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from ..errors import WorkspaceCreateError, WorkspaceReusedError
from ..settings import BuildSettings, load_settings
from .cleanup import CleanupReport, chmod_rm_rf
from .interrupts import ignore_interrupts

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.+\-]")


def sanitize_prefix(prefix: str) -> str:
    """Make a workspace label safe to use in a directory name.

    ``@`` (common in versioned names like ``pkg@1.2``) is spelled out as ``AT``;
    anything else outside ``[A-Za-z0-9_.+-]`` becomes ``_``.
    """
    safe = _UNSAFE_CHARS_RE.sub("_", prefix.replace("@", "AT"))
    return safe or "tmp"


def _group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def _owning_gid(settings: BuildSettings) -> int:
    """Group new workspaces should carry.

    Files created inside a directory inherit its group, so matching the
    installation's group keeps build products shareable. Only used when the
    current process is itself a member of that group.
    """
    ref = settings.group_reference
    if ref is not None:
        try:
            gid = ref.stat().st_gid
        except OSError:
            return settings.fallback_gid
        if gid == os.getegid() or gid in os.getgroups():
            return gid
    return settings.fallback_gid


class ScopedWorkspace:
    """A throwaway working directory, created and destroyed around a callback."""

    def __init__(
        self,
        prefix: str,
        *,
        retain: bool = False,
        settings: BuildSettings | None = None,
    ) -> None:
        self.prefix = prefix
        self._retain = retain
        self._quiet = False
        self._settings = settings
        self._tmpdir: Path | None = None
        self.state = "inert"  # "inert" | "active" | "cleaned" | "retained"
        self.last_cleanup: CleanupReport | None = None

    @property
    def tmpdir(self) -> Path | None:
        """Path of the workspace directory; None until run() starts."""
        return self._tmpdir

    def retain(self) -> None:
        """Keep the directory on disk after run() returns."""
        self._retain = True

    def is_retained(self) -> bool:
        return self._retain

    def quiet(self) -> None:
        """Do not report the path when the directory is retained."""
        self._quiet = True

    def run(self, callback: Callable[[ScopedWorkspace], T]) -> T:
        """Create the directory, run ``callback(self)`` inside it, then clean up.

        The working directory is switched to the workspace for the duration of
        the callback and restored afterwards on every exit path. Cleanup runs
        whether the callback returns or raises, and SIGINT/SIGTERM are held
        back until the delete finishes.

        Returns:
            Whatever the callback returns.

        Raises:
            WorkspaceReusedError: run() was already called on this instance.
            WorkspaceCreateError: The directory could not be created.
        """
        if self.state != "inert":
            raise WorkspaceReusedError(
                f"Workspace {self.prefix!r} is single-use (state: {self.state})"
            )
        self.state = "active"
        settings = self._settings or load_settings()

        try:
            self._tmpdir = self._create(settings)
            try:
                self._apply_group(settings)
                with contextlib.chdir(self._tmpdir):
                    return callback(self)
            finally:
                if not self._retain:
                    with ignore_interrupts():
                        self.last_cleanup = chmod_rm_rf(self._tmpdir)
                        self.state = "cleaned"
        finally:
            if self._retain and self._tmpdir is not None:
                self.state = "retained"
                if not self._quiet:
                    logger.info("Temporary files retained at: %s", self._tmpdir)

    def _create(self, settings: BuildSettings) -> Path:
        try:
            settings.temp_root.mkdir(parents=True, exist_ok=True)
            path = tempfile.mkdtemp(
                prefix=f"{sanitize_prefix(self.prefix)}-",
                dir=settings.temp_root,
            )
        except OSError as e:
            self.state = "cleaned"
            raise WorkspaceCreateError(
                f"Cannot create workspace under {settings.temp_root}: {e}"
            ) from e
        logger.debug("Created workspace %s", path)
        return Path(path)

    def _apply_group(self, settings: BuildSettings) -> None:
        assert self._tmpdir is not None
        gid = _owning_gid(settings)
        try:
            os.chown(self._tmpdir, -1, gid)
        except PermissionError:
            logger.warning(
                'Failed setting group "%s" on %s', _group_name(gid), self._tmpdir
            )

    def __repr__(self) -> str:
        return (
            f"<ScopedWorkspace tmpdir={self._tmpdir} "
            f"retain={self._retain} quiet={self._quiet}>"
        )


def mktemp(
    prefix: str,
    callback: Callable[[ScopedWorkspace], T],
    *,
    retain: bool = False,
    settings: BuildSettings | None = None,
) -> T:
    """Run ``callback`` inside a fresh ScopedWorkspace and return its result."""
    return ScopedWorkspace(prefix, retain=retain, settings=settings).run(callback)
