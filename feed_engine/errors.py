"""
Typed failures of a single feed fetch.
"""


class FetchError(Exception):
    """Base class for errors raised while fetching one feed source."""

    kind = "fetch_error"

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"{self.kind}: {url}" + (f" ({reason})" if reason else ""))


class InvalidURL(FetchError):
    """The source URL is not a usable http(s) URL. Raised before any I/O."""

    kind = "invalid_url"


class NetworkError(FetchError):
    """Transport-level failure or non-success HTTP status."""

    kind = "network_error"


class ParseFailure(FetchError):
    """The document is not a supported RSS, Atom or JSON Feed document."""

    kind = "parse_failure"


class FetchTimeout(FetchError):
    """The fetch did not settle within its time budget."""

    kind = "timeout"
