"""Exception hierarchy shared by the service and the client."""


class AuroraError(Exception):
    """Base class for all Aurora errors."""


class UploadValidationError(AuroraError):
    """An uploaded file was rejected before anything was stored or sent."""


class ContentValidationError(AuroraError):
    """A text request (scan content, voice query) was rejected before any model call."""


class RecordNotFoundError(AuroraError):
    """The record does not exist or belongs to another user."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class UpstreamError(AuroraError):
    """The model provider call failed.

    The message follows the ``[Code: <status>] <body>`` form whenever a status
    code is known so that it can be shown to the user verbatim.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        retryable: bool | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self._retryable = retryable
        if status_code is not None:
            message = f"[Code: {status_code}] {body or message}"
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Rate limits, timeouts, connection drops and 5xx responses get another attempt."""
        if self._retryable is not None:
            return self._retryable
        if self.status_code is None:
            return False
        return self.status_code in (408, 409, 429) or self.status_code >= 500


class ApiError(AuroraError):
    """The Aurora API answered with an error (raised by the client)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        if status_code is not None:
            message = f"[Code: {status_code}] {message}"
        super().__init__(message)
        self.status_code = status_code


class InvalidTransition(AuroraError):
    """The client state machine was asked to make an impossible move."""

    def __init__(self, state: str, event: str) -> None:
        super().__init__(f"Cannot apply '{event}' while in state '{state}'")
        self.state = state
        self.event = event
