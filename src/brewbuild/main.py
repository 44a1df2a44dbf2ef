"""Application entry point — CLI dispatcher.

Handles three subcommands:
  1. `brewbuild options --declared with-foo,without-bar [--with-foo ...]` —
     reports how the supplied flags resolve against the declared options.
  2. `brewbuild settings` — prints the resolved workspace settings.
  3. `brewbuild mktemp PREFIX [--retain]` — creates a scoped workspace, prints
     its path, then cleans it up (or keeps it with --retain).

A leading `-v` / `--verbose` turns on DEBUG logging for the brewbuild logger.
"""

import logging
import sys

USAGE = """\
Usage:
  brewbuild [-v] options --declared OPT[,OPT...] [FLAG ...]
  brewbuild [-v] settings
  brewbuild [-v] mktemp PREFIX [--retain]
"""


def _usage_error(message: str) -> int:
    print(f"Error: {message}\n", file=sys.stderr)
    print(USAGE, file=sys.stderr)
    return 2


def _split_declared(argv: list[str]) -> tuple[list[str], list[str]]:
    """Pull ``--declared a,b`` / ``--declared=a,b`` out of argv.

    Returns (declared options, remaining flags). May be repeated.
    """
    declared: list[str] = []
    flags: list[str] = []
    it = iter(argv)
    for arg in it:
        if arg == "--declared":
            value = next(it, "")
        elif arg.startswith("--declared="):
            value = arg.split("=", 1)[1]
        else:
            flags.append(arg)
            continue
        declared.extend(v.strip() for v in value.split(",") if v.strip())
    return declared, flags


def _cmd_options(argv: list[str]) -> int:
    from .options import BuildOptions

    declared, flags = _split_declared(argv)
    build = BuildOptions(flags, declared)

    print(f"head: {build.is_head()}  stable: {build.is_stable()}  bottle: {build.is_bottle()}")
    print(f"used: {' '.join(o.name for o in build.used_options) or '-'}")
    print(f"unused: {' '.join(o.name for o in build.unused_options) or '-'}")

    tokens: list[str] = []
    for name in sorted(build.options.names()):
        for polarity in ("with-", "without-"):
            if name.startswith(polarity):
                token = name.removeprefix(polarity)
                if token not in tokens:
                    tokens.append(token)
    for token, enabled in build.describe(tokens).items():
        print(f"  {token}: {'with' if enabled else 'without'}")
    return 0


def _cmd_settings() -> int:
    from .settings import load_settings

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"config_dir: {settings.config_dir}")
    print(f"temp_root: {settings.temp_root}")
    print(f"group_reference: {settings.group_reference or '-'}")
    print(f"fallback_gid: {settings.fallback_gid}")
    return 0


def _cmd_mktemp(argv: list[str]) -> int:
    from .errors import WorkspaceError
    from .settings import load_settings
    from .workspace import ScopedWorkspace

    retain = "--retain" in argv
    positional = [a for a in argv if a != "--retain"]
    if len(positional) != 1:
        return _usage_error("mktemp takes exactly one PREFIX")

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    ws = ScopedWorkspace(positional[0], retain=retain, settings=settings)
    try:
        ws.run(lambda w: print(w.tmpdir))
    except WorkspaceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]

    verbose = False
    if argv and argv[0] in ("-v", "--verbose"):
        verbose = True
        argv = argv[1:]

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )
    logging.getLogger("brewbuild").setLevel(logging.DEBUG if verbose else logging.INFO)

    if not argv or argv[0] in ("-h", "--help", "help"):
        print(USAGE)
        return 0 if argv else 2

    command, rest = argv[0], argv[1:]
    if command == "options":
        return _cmd_options(rest)
    if command == "settings":
        return _cmd_settings()
    if command == "mktemp":
        return _cmd_mktemp(rest)
    return _usage_error(f"unknown command {command!r}")


if __name__ == "__main__":
    sys.exit(main())
