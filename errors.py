"""Failure kinds of the admission form service.

Every error carries the message shown to the client and the HTTP status it
maps to. Routes catch the kinds their operation can raise; the rest reach the
error handlers registered in :mod:`app`.
"""


class PortalError(Exception):
    status = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class MissingField(PortalError):
    """A required form field is absent or empty."""

    status = 400

    def __init__(self, field):
        super().__init__(f'Missing required field: {field}')
        self.field = field


class InvalidFormat(PortalError):
    """A form field is present but malformed."""

    status = 400

    MESSAGES = {
        'cnic': 'CNIC must be 13 digits without spaces or dashes',
    }

    def __init__(self, field):
        super().__init__(self.MESSAGES.get(field, f'Invalid format: {field}'))
        self.field = field


class DecodeFailure(PortalError):
    """The multipart body holds an attachment we refuse to decode."""

    status = 500


class UploadLimitExceeded(DecodeFailure):
    """An upload limit was hit: file too large, or unexpected file field."""

    status = 400

    def __init__(self, reason):
        super().__init__(f'File upload error: {reason}')
        self.reason = reason


class NotFound(PortalError):
    status = 404


class StoreFailure(PortalError):
    """A call to the blob store failed (network error or rejection)."""

    status = 500

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause
