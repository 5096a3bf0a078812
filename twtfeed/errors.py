"""Errors raised while retrieving feeds."""


class FetchError(Exception):
    """A feed could not be retrieved.

    Fatal to that feed's refresh only; callers display it and may retry.
    """

    def __init__(self, source: str, message: str | None = None):
        self.source = source
        super().__init__(message or f"Failed to fetch {source}")


class NetworkUnavailable(FetchError):
    """The remote host could not be reached."""


class HttpStatus(FetchError):
    """The server answered with an error status."""

    def __init__(self, source: str, code: int):
        self.code = code
        super().__init__(source, f"HTTP {code} while fetching {source}")


class NotFound(FetchError):
    """A local feed file does not exist or cannot be read."""


class FetchTimeout(FetchError):
    """The request did not complete in time."""
