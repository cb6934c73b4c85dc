import hmac
from typing import Optional

from starlette.datastructures import UploadFile

from config import AnalyzerSettings
from services.errors import AuthError, ConfigError, ValidationError
from services.upload import UPLOAD_FIELD

ALLOWED_METHODS = {"POST"}
PREFLIGHT_METHOD = "OPTIONS"


def is_preflight(method: str) -> bool:
    return method.upper() == PREFLIGHT_METHOD


def require_method(method: str) -> None:
    if method.upper() not in ALLOWED_METHODS:
        raise ValidationError("Method not allowed", status_code=405)


def verify_api_key(provided: Optional[str], settings: AnalyzerSettings) -> None:
    """Compare the X-API-Key header against the configured shared secret."""
    if not settings.shared_secret:
        raise ConfigError("API_KEY not configured")
    if not provided or not hmac.compare_digest(provided.encode(), settings.shared_secret.encode()):
        raise AuthError("Invalid API key")


def require_upload(form) -> UploadFile:
    """Return the uploaded policy file from a parsed multipart form."""
    upload = form.get(UPLOAD_FIELD)
    # A plain text field under the same name doesn't count
    if not isinstance(upload, UploadFile):
        raise ValidationError("No file uploaded", status_code=400)
    return upload
