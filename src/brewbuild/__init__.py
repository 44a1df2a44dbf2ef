"""brewbuild - build-configuration resolver and scoped build workspaces.

Two independent pieces used by a package-build orchestrator:
  - BuildOptions answers "is this capability enabled?" from the options a
    package declares and the flags the user passed.
  - ScopedWorkspace creates a throwaway working directory for one build step
    and tears it down afterwards, even when the step fails.

Package entry point. Exports the version string only; the CLI lives in main.py.
"""

__version__ = "0.1.0"
