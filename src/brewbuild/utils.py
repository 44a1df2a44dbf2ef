"""Shared helpers - config directory resolution."""

import os
from pathlib import Path

BREWBUILD_DIR_ENV = "BREWBUILD_DIR"


def brewbuild_dir() -> Path:
    """Return the brewbuild config directory.

    ``$BREWBUILD_DIR`` wins when set; otherwise ``~/.brewbuild``.
    """
    raw = os.environ.get(BREWBUILD_DIR_ENV, "")
    if raw:
        return Path(os.path.expanduser(raw))
    return Path.home() / ".brewbuild"
