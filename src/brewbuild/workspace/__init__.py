"""Scoped build workspaces - creation, group ownership, and safe teardown.

Provides ScopedWorkspace (and the mktemp() shortcut) for running one build
step inside a throwaway directory, and chmod_rm_rf() for the best-effort
recursive delete used at teardown.
"""

from .cleanup import CleanupReport, chmod_rm_rf
from .interrupts import ignore_interrupts
from .scoped import ScopedWorkspace, mktemp, sanitize_prefix

__all__ = [
    "CleanupReport",
    "ScopedWorkspace",
    "chmod_rm_rf",
    "ignore_interrupts",
    "mktemp",
    "sanitize_prefix",
]
