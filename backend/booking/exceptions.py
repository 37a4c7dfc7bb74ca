"""
Unified exception hierarchy.

Every business exception derives from BaseAppException and carries:
- type:        error category (validation_error / precondition / block / ...)
- code:        machine-readable reason (NIK_MISSING / DUPLICATE_REGISTRATION / ...)
- message:     human-readable description, shown to the admin as-is
- detail:      optional extra payload (dict / list / None)
- http_status: HTTP status code

Services only raise; exception_handler formats the response.
"""


class BaseAppException(Exception):
    """Base class for all business exceptions."""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)


class ValidationError(BaseAppException):
    """Malformed input. Raised by intake parsing, 400."""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class PreconditionError(BaseAppException):
    """The booking is not in a state that allows the operation, 400."""

    type = 'precondition'
    code = 'PRECONDITION_FAILED'
    http_status = 400


class BlockError(BaseAppException):
    """A business rule stops the operation, 409."""

    type = 'block'
    code = 'BUSINESS_BLOCK'
    http_status = 409


class AllocationError(BaseAppException):
    """
    The registry holds an identifier we cannot continue from.

    Fatal: allocation never falls back to 1, that would re-issue a used number.
    """

    type = 'allocation'
    code = 'MALFORMED_SEQUENCE'
    http_status = 500


class RegistryUnavailable(BaseAppException):
    """Registry database or lock server could not be reached, 503."""

    type = 'infrastructure'
    code = 'REGISTRY_UNAVAILABLE'
    http_status = 503


class ReconciliationRequired(BaseAppException):
    """
    The registry row was written but the booking could not be updated.

    The registration is NOT rolled back. A reconciliation job has been queued;
    detail carries the no_rawat that the booking must end up with.
    """

    type = 'reconciliation'
    code = 'BOOKING_UPDATE_FAILED'
    http_status = 502
