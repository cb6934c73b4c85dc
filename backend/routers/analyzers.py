import asyncio
import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.responses import JSONResponse
from openai import OpenAI
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import AnalyzerSettings, get_settings
from prompts.insurance_policy import build_analysis_prompt
from schemas.insurance_policy import AnalysisEnvelope
from services.assembler import build_error_envelope, build_success_envelope
from services.errors import AnalyzerError
from services.llm import get_client, invoke_model
from services.mock.insurance_policy import mock_policy_completion
from services.normalizer import normalize_analysis
from services.upload import check_content_length, read_upload
from services.validation import is_preflight, require_method, require_upload, verify_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analyzers"])

MOCK_MODEL_NAME = "mock"


def get_client_factory() -> Callable[[AnalyzerSettings], OpenAI]:
    """Overridable in tests; the client is only built once the request has passed validation."""
    return get_client


def error_response(status_code: int, message: str, settings: AnalyzerSettings, exc: Optional[BaseException] = None) -> JSONResponse:
    envelope = build_error_envelope(message, exc, settings)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


# ============== WORKERS' COMP POLICY ANALYSIS ==============

@router.post("/analyze-policy", response_model=AnalysisEnvelope)
async def analyze_policy(
    request: Request,
    x_api_key: Optional[str] = Header(None),
    settings: AnalyzerSettings = Depends(get_settings),
    client_factory: Callable[[AnalyzerSettings], OpenAI] = Depends(get_client_factory),
):
    """Analyze an uploaded Workers' Compensation policy (PDF or image)"""
    try:
        # Credentials are checked before the multipart body is touched
        verify_api_key(x_api_key, settings)
        check_content_length(request.headers.get("content-length"), settings.max_upload_bytes)

        async with request.form(max_files=1) as form:
            upload = require_upload(form)
            document = read_upload(upload, settings.max_upload_bytes)

        prompt = build_analysis_prompt(document.filename)

        if settings.mock_mode:
            response_text = mock_policy_completion(document)
            model_used = MOCK_MODEL_NAME
        else:
            client = client_factory(settings)
            # Sync SDK call; keep it off the event loop
            response_text = await asyncio.to_thread(invoke_model, client, prompt, document, settings)
            model_used = settings.model

        result = normalize_analysis(response_text)
        return build_success_envelope(result, document, model_used)

    except AnalyzerError as e:
        if e.status_code >= 500:
            logger.error("Error processing policy: %s", e.message)
            return error_response(e.status_code, e.message, settings, e)
        logger.warning("Rejected policy request (%s): %s", e.status_code, e.message)
        return error_response(e.status_code, e.message, settings)
    except StarletteHTTPException as e:
        # Malformed multipart bodies surface from request.form() as 400s
        return error_response(e.status_code, str(e.detail), settings)
    except Exception as e:
        logger.exception("Error processing policy")
        return error_response(500, str(e), settings, e)


@router.api_route(
    "/analyze-policy",
    methods=["GET", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def analyze_policy_other_methods(request: Request, settings: AnalyzerSettings = Depends(get_settings)):
    """Pre-flight gets an empty 200; every other verb is rejected"""
    if is_preflight(request.method):
        return Response(status_code=200)
    try:
        require_method(request.method)
    except AnalyzerError as e:
        return error_response(e.status_code, e.message, settings)
    return error_response(405, "Method not allowed", settings)
