"""
Error taxonomy shared by the extraction and chat handlers.

Services raise these; the app-level exception handler renders them as
`{error, errorCode?, details?}` with the matching HTTP status.
"""
from typing import Any, Dict, Optional


class ExamPrepError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500
    error_code: Optional[str] = None

    def __init__(self, message: str, details: Optional[str] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if error_code is not None:
            self.error_code = error_code

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.error_code:
            payload["errorCode"] = self.error_code
        if self.details is not None:
            payload["details"] = self.details
        return payload


class BadRequestError(ExamPrepError):
    status_code = 400


class NotFoundError(ExamPrepError):
    status_code = 404


class ConfigurationError(ExamPrepError):
    status_code = 500


class ServiceUnavailableError(ExamPrepError):
    """Missing credentials, upstream network failure or unknown model"""

    status_code = 503
    error_code = "NETWORK_ERROR"


class RateLimitedError(ExamPrepError):
    status_code = 429
    error_code = "QUOTA_EXCEEDED"


class UnknownServiceError(ExamPrepError):
    status_code = 500
    error_code = "UNKNOWN_ERROR"


class StorageError(Exception):
    """Object store download failed"""


class PdfExtractionError(Exception):
    """Bytes could not be parsed as a PDF"""
