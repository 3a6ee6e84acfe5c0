from __future__ import annotations


class RelayError(Exception):
    """Base error rendered as `{"error": {"message", "type"}}` at the edge."""

    status_code: int = 500
    error_type: str | None = None

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_type: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_type is not None:
            self.error_type = error_type


class InvalidRequestError(RelayError):
    """Raised when the caller's request fails local validation (never reaches upstream)."""

    status_code = 400
    error_type = "invalid_request_error"


class UpstreamRejectedError(RelayError):
    """Raised when the upstream answers with a non-success status; that status is forwarded."""

    error_type = "api_error"


class RelayServerError(RelayError):
    """Raised for any unexpected local failure. Details stay in the logs."""

    status_code = 500
    error_type = "server_error"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
