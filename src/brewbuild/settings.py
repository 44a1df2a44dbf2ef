"""Build settings — reads settings.toml + .env to produce BuildSettings.

Resolves where scoped workspaces live and which group they should inherit.
Precedence: environment variables > settings.toml ``[workspace]`` > defaults.
A missing settings.toml is fine; everything has a default.

Key entities:
  - BuildSettings: frozen dataclass with all resolved workspace config.
  - load_settings(): parse .env + settings.toml → BuildSettings.
"""

from __future__ import annotations

import logging
import os
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .utils import brewbuild_dir

logger = logging.getLogger(__name__)

TEMP_ROOT_ENV = "BREWBUILD_TEMP"
GROUP_REFERENCE_ENV = "BREWBUILD_GROUP_REFERENCE"
FALLBACK_GID_ENV = "BREWBUILD_FALLBACK_GID"

# ---------------------------------------------------------------------------
# BuildSettings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BuildSettings:
    """Resolved configuration for scoped workspaces.

    All paths are pre-resolved; no further env lookups needed.
    """

    # Root under which every temporary workspace is created
    temp_root: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))

    # Canonical installation file; new workspaces take its group when the
    # current process belongs to that group
    group_reference: Path | None = None

    # Group used when group_reference is unset or not ours
    fallback_gid: int = field(default_factory=os.getgid)

    config_dir: Path = field(default_factory=lambda: brewbuild_dir())

    @property
    def settings_file(self) -> Path:
        return self.config_dir / "settings.toml"


# ---------------------------------------------------------------------------
# load_settings
# ---------------------------------------------------------------------------


def load_settings(config_dir: Path | None = None) -> BuildSettings:
    """Read .env + settings.toml and return BuildSettings.

    Args:
        config_dir: Override for the base config directory.
                    Defaults to ``brewbuild_dir()``.

    Raises:
        ValueError: settings.toml is not valid TOML, or a gid is not an integer.
    """
    if config_dir is None:
        config_dir = brewbuild_dir()

    # Load .env files (local cwd first, then config_dir)
    local_env = Path(".env")
    global_env = config_dir / ".env"
    if local_env.is_file():
        load_dotenv(local_env)
    if global_env.is_file():
        load_dotenv(global_env)

    section: dict = {}
    toml_path = config_dir / "settings.toml"
    if toml_path.is_file():
        try:
            with open(toml_path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid settings file {toml_path}: {e}") from e
        section = raw.get("workspace", {})
        logger.debug("Loaded workspace settings from %s", toml_path)

    def _get(env_key: str, key: str):
        """Env var > settings.toml > None."""
        value = os.getenv(env_key, "")
        if value:
            return value
        return section.get(key)

    temp_root = _get(TEMP_ROOT_ENV, "temp_root")
    group_reference = _get(GROUP_REFERENCE_ENV, "group_reference")
    fallback_gid = _get(FALLBACK_GID_ENV, "fallback_gid")

    kwargs: dict = {"config_dir": config_dir}
    if temp_root:
        kwargs["temp_root"] = Path(os.path.expanduser(str(temp_root)))
    if group_reference:
        kwargs["group_reference"] = Path(os.path.expanduser(str(group_reference)))
    if fallback_gid is not None and fallback_gid != "":
        try:
            kwargs["fallback_gid"] = int(fallback_gid)
        except (TypeError, ValueError) as e:
            raise ValueError(f"fallback_gid must be an integer, got {fallback_gid!r}") from e

    return BuildSettings(**kwargs)
