import time
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from config import AnalyzerSettings
from schemas.insurance_policy import AnalysisEnvelope, AnalysisMetadata, ErrorEnvelope, UploadedDocument


def new_analysis_id() -> str:
    """wc_<epoch ms>_<random hex>; the uuid4 part keeps concurrent requests apart."""
    return f"wc_{time.time_ns() // 1_000_000}_{uuid.uuid4().hex[:12]}"


def build_success_envelope(result: dict[str, Any], document: UploadedDocument, model_used: str) -> AnalysisEnvelope:
    return AnalysisEnvelope(
        analysis_id=new_analysis_id(),
        data=result,
        metadata=AnalysisMetadata(
            file_name=document.filename,
            file_type=document.extension,
            processed_at=datetime.now(timezone.utc).isoformat(),
            model_used=model_used,
        ),
    )


def build_error_envelope(message: str, exc: Optional[BaseException], settings: AnalyzerSettings) -> ErrorEnvelope:
    details = None
    # Stack traces only leave the process outside production
    if exc is not None and not settings.is_production:
        details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return ErrorEnvelope(error=message or "Failed to analyze policy", details=details)
