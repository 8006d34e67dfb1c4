"""Error taxonomy for the fetch layer."""


class TrackerError(Exception):
    """Base class for tracker errors."""


class TransientNetworkError(TrackerError):
    """Upstream request failed after every retry.

    :param message: Human readable description.
    :param url: The URL that was requested.
    :param status: Last HTTP status seen, if any.
    :param attempts: Number of attempts made.
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        status: int | None = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.attempts = attempts


class MalformedResponseError(TrackerError):
    """Upstream payload did not have the expected shape."""


class FetchCancelled(TrackerError):
    """A fetch was abandoned because its token was cancelled.

    Not a failure: callers discard the outcome without reporting it.
    """
