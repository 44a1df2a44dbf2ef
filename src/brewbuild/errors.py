"""Exception hierarchy for brewbuild."""


class BrewBuildError(Exception):
    """Base class for all brewbuild errors."""


class WorkspaceError(BrewBuildError):
    """Problem with a scoped build workspace."""


class WorkspaceCreateError(RuntimeError, WorkspaceError):
    """The workspace directory could not be created."""


class WorkspaceReusedError(RuntimeError, WorkspaceError):
    """A single-use workspace was run a second time."""
