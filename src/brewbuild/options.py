"""Build option resolution — decides whether a build capability is enabled.

A package declares the toggles it exposes (``with-foo`` / ``without-bar``,
plus sentinels such as ``HEAD``); the user supplies flags (``--with-foo``).
BuildOptions combines the two:

  - declared ``with-X``    → enabled only if ``--with-X`` was passed
  - declared ``without-X`` → enabled unless ``--without-X`` was passed
  - undeclared X           → never enabled

When both polarities are declared for the same token the ``with-`` rule wins.

Key entities:
  - Option / Options: option names and immutable sets of them.
  - Token / Dependable: capability descriptors carrying alias names.
  - BuildOptions: the read-only query API used during build planning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# "--name" / "--name=value" → "name" / "name="
_FLAG_RE = re.compile(r"^--([^=]+=?)(.+)?$")

# ---------------------------------------------------------------------------
# Option / Options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Option:
    """A single named build option, e.g. ``with-foo``."""

    name: str

    @property
    def flag(self) -> str:
        return f"--{self.name}"

    def __str__(self) -> str:
        return self.name


def _option_name(value: str) -> str:
    m = _FLAG_RE.match(value)
    return m.group(1) if m else value


def _to_option(value: str | Option) -> Option:
    if isinstance(value, Option):
        return value
    return Option(_option_name(value))


class Options:
    """Immutable set of Option values.

    Membership accepts an Option, a bare name, or a ``--flag`` string.
    """

    __slots__ = ("_options",)

    def __init__(self, options: Iterable[Option] = ()) -> None:
        self._options: frozenset[Option] = frozenset(options)

    @classmethod
    def create(cls, values: Iterable[str | Option] | Options | None) -> Options:
        """Build an Options set from raw strings, flags, or Option values."""
        if isinstance(values, Options):
            return values
        return cls(_to_option(v) for v in values or ())

    def names(self) -> frozenset[str]:
        return frozenset(o.name for o in self._options)

    def as_flags(self) -> list[str]:
        return sorted(o.flag for o in self._options)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            item = Option(_option_name(item))
        return item in self._options

    def __iter__(self) -> Iterator[Option]:
        return iter(sorted(self._options, key=lambda o: o.name))

    def __len__(self) -> int:
        return len(self._options)

    def __bool__(self) -> bool:
        return bool(self._options)

    def __and__(self, other: Options) -> Options:
        return Options(self._options & other._options)

    def __sub__(self, other: Options) -> Options:
        return Options(self._options - other._options)

    def __or__(self, other: Options) -> Options:
        return Options(self._options | other._options)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Options):
            return NotImplemented
        return self._options == other._options

    def __hash__(self) -> int:
        return hash(self._options)

    def __repr__(self) -> str:
        return f"Options({self.as_flags()!r})"


# ---------------------------------------------------------------------------
# Capability descriptors
# ---------------------------------------------------------------------------


@runtime_checkable
class Capability(Protocol):
    """Anything that can be toggled under one or more option names."""

    @property
    def option_names(self) -> Sequence[str]: ...


@dataclass(frozen=True)
class Token:
    """A plain option token — a single-alias capability."""

    name: str

    @property
    def option_names(self) -> tuple[str, ...]:
        return (self.name,)


@dataclass(frozen=True)
class Dependable:
    """A build dependency that may be toggled under its name or any alias."""

    name: str
    aliases: tuple[str, ...] = ()

    @property
    def option_names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


def as_capability(value: str | Capability) -> Capability:
    """Lift a bare token string into a Token; pass descriptors through."""
    if isinstance(value, str):
        return Token(value)
    return value


# ---------------------------------------------------------------------------
# BuildOptions
# ---------------------------------------------------------------------------


class BuildOptions:
    """Options for one package build.

    Holds the supplied flags (``args``) and the package's declared options
    (``options``). Both are immutable; every query is a pure function of them,
    so instances can be shared freely across threads.

    Example::

        build = BuildOptions(["--with-qt"], ["with-qt", "without-docs"])
        if build.with_("qt"):
            args.append("--qt-gui")
        if build.without("docs"):
            args.append("--disable-docs")
    """

    def __init__(
        self,
        args: Iterable[str | Option] | Options | None,
        options: Iterable[str | Option] | Options | None,
    ) -> None:
        self._args = Options.create(args)
        self._options = Options.create(options)

    @property
    def args(self) -> Options:
        return self._args

    @property
    def options(self) -> Options:
        return self._options

    def with_(self, capability: str | Capability) -> bool:
        """True if the build is enabled for any of the capability's names."""
        return any(
            self._with_name(name) for name in as_capability(capability).option_names
        )

    def without(self, capability: str | Capability) -> bool:
        """Exact complement of :meth:`with_`."""
        return not self.with_(capability)

    def is_bottle(self) -> bool:
        """True when building a bottle (prebuilt binary package)."""
        return self._include("build-bottle")

    def is_head(self) -> bool:
        """True when building from the latest source rather than a release."""
        return self._include("HEAD")

    def is_stable(self) -> bool:
        return not self.is_head()

    def any_args_or_options(self) -> bool:
        return bool(self._args) or bool(self._options)

    @property
    def used_options(self) -> Options:
        """Declared options the user actually passed."""
        return self._options & self._args

    @property
    def unused_options(self) -> Options:
        """Declared options the user did not pass."""
        return self._options - self._args

    def describe(self, capabilities: Iterable[str | Capability]) -> dict[str, bool]:
        """Map each capability's primary name to its ``with_`` result."""
        out: dict[str, bool] = {}
        for cap in capabilities:
            descriptor = as_capability(cap)
            names = list(descriptor.option_names)
            if names:
                out[names[0]] = self.with_(descriptor)
        return out

    def __repr__(self) -> str:
        return (
            f"BuildOptions(args={self._args.as_flags()!r}, "
            f"options={sorted(self._options.names())!r})"
        )

    # --- internals ---

    def _with_name(self, name: str) -> bool:
        if self._defined(f"with-{name}"):
            return self._include(f"with-{name}")
        if self._defined(f"without-{name}"):
            return not self._include(f"without-{name}")
        return False

    def _include(self, name: str) -> bool:
        return Option(name) in self._args

    def _defined(self, name: str) -> bool:
        return Option(name) in self._options
