"""Exception types raised across netfrix."""


class NetfrixError(Exception):
    """Base class for all netfrix errors."""


class ConfigError(NetfrixError):
    """A required config field is missing or malformed."""


class MissingDependencyError(NetfrixError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing dependencies: {' '.join(self.missing)}")


class RemoteConnectionError(NetfrixError):
    """The SSH channel could not be established or verified."""


class RemoteExecError(NetfrixError):
    """A remote command failed or a stream broke mid-flight."""

    def __init__(self, message, returncode=None, stderr=""):
        self.returncode = returncode
        self.stderr = stderr or ""
        detail = message
        shown = self.stderr.encode("utf-8", "surrogateescape").decode("utf-8", "replace").strip()
        if shown:
            detail += f": {shown}"
        super().__init__(detail)


class NoMatchError(NetfrixError):
    def __init__(self, pattern):
        self.pattern = pattern
        super().__init__(f"No matches found for '{pattern}'.")


class InvalidQueryError(NetfrixError):
    """Empty search pattern, or a regex that does not compile."""


class InvalidSelectionError(NetfrixError):
    """User-supplied ID is blank, non-numeric or out of range."""
