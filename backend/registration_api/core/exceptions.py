"""Core application exception classes.

All registration-specific errors inherit from RegistrationError so the HTTP
layer can render them with a single handler.

Exception Hierarchy:
    RegistrationError (base)
    +-- ConfigurationError (missing/invalid province or credential settings)
    +-- ValidationError (caller input violates a precondition)
    |   +-- FileTooLargeError
    +-- NotFoundError (named remote resource absent)
    |   +-- ListNotFoundError (defined in core/sharepoint/exceptions.py)
    +-- ExternalServiceError (remote API failures)
        +-- SharePointError (defined in core/sharepoint/exceptions.py)
"""


class RegistrationError(Exception):
    """Base exception for all registration backend errors.

    Example:
        try:
            await service.submit(form, files)
        except RegistrationError as e:
            logger.error("submission_failed", error=str(e), exc_info=True)
            raise
    """

    pass


class ConfigurationError(RegistrationError):
    """Exception for missing or invalid configuration.

    Raised when:
    - A province name is not one of the nine recognised provinces
    - A recognised province has no site URL or list name configured

    Fatal to the triggering request, never to the process.
    """

    pass


class ValidationError(RegistrationError):
    """Exception for submissions that violate an input precondition.

    Raised before any network call or reference allocation, e.g. when the
    province is missing or more files than allowed are attached.
    """

    pass


class FileTooLargeError(ValidationError):
    """Raised when an attachment exceeds the configured byte limit."""

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(message)
        self.filename = filename


class NotFoundError(RegistrationError):
    """Exception for a named remote resource that does not exist."""

    pass


class ExternalServiceError(RegistrationError):
    """Base exception for external service/API failures."""

    pass
