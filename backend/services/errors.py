from typing import Optional


class AnalyzerError(Exception):
    """Base for failures that map onto an error envelope with a known status."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthError(AnalyzerError):
    status_code = 401


class ValidationError(AnalyzerError):
    """Bad method (405), missing file (400) or oversized upload (413)."""

    status_code = 400


class ConfigError(AnalyzerError):
    status_code = 500


class ModelError(AnalyzerError):
    """The OpenAI call failed. `status` is the upstream HTTP status, if any."""

    status_code = 500

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ParseError(ValueError):
    """No parseable JSON object in a completion. Absorbed by the normalizer."""
