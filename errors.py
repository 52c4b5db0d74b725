"""Error types shared by the catalog client, the store and the HTTP layer.

NotFound and NetworkUnavailable are kept distinct so a failed search can
offer "did you mean" suggestions in one case and a retry in the other.
PersistenceFailure is raised by the document store and is caught by the
recency cache and the achievement engine, which degrade to empty results.
"""


class NotFound(LookupError):
    """Catalog lookup for an unknown name or id."""

    def __init__(self, term, message=None):
        self.term = term
        super().__init__(message or 'Pokemon not found')


class NetworkUnavailable(ConnectionError):
    """The catalog service could not be reached."""

    def __init__(self, message=None):
        super().__init__(message or 'Check your internet connection')


class CatalogError(RuntimeError):
    """The catalog service answered with an unexpected status."""

    def __init__(self, status_code, reason=''):
        self.status_code = status_code
        super().__init__(f'Failed to fetch Pokemon: {status_code} {reason}'.strip())


class PersistenceFailure(RuntimeError):
    """A read or write against the document store failed."""


class ValidationFailure(ValueError):
    """Input rejected before any I/O; the message is meant for the user."""
