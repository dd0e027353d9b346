"""Exceptions raised by the Moodle client."""


class MoodleAPIError(Exception):
    """Base exception for Moodle API errors."""

    def __init__(self, message: str, error_code: str | None = None, debug_info: str | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.debug_info = debug_info


class MoodleAuthError(MoodleAPIError):
    """Authentication or authorization error."""

    pass


class MoodleNotFoundError(MoodleAPIError):
    """Resource not found error."""

    pass


class MoodleValidationError(MoodleAPIError):
    """Invalid parameters or validation error."""

    pass


class MoodleNetworkError(MoodleAPIError):
    """The Moodle site could not be reached."""

    pass


# Moodle error codes mapped to the exception raised for them
ERROR_CODE_MAP: dict[str, type[MoodleAPIError]] = {
    "invalidtoken": MoodleAuthError,
    "accessexception": MoodleAuthError,
    "requireloginerror": MoodleAuthError,
    "invalidrecord": MoodleNotFoundError,
    "cannotfindrecord": MoodleNotFoundError,
    "invalidparameter": MoodleValidationError,
    "invalidargument": MoodleValidationError,
}


def error_from_payload(data: dict) -> MoodleAPIError:
    """Build the exception for a Moodle error payload.

    The exception message is the payload's ``message`` field verbatim.
    """
    error_code = data.get("errorcode", "unknown")
    message = data.get("message") or data.get("error") or "Moodle API Error"
    debug_info = data.get("debuginfo")
    error_cls = ERROR_CODE_MAP.get(error_code, MoodleAPIError)
    return error_cls(message, error_code, debug_info)
