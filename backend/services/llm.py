import base64
import logging
from functools import lru_cache

from openai import OpenAI, APIConnectionError, APIStatusError, APITimeoutError

from config import AnalyzerSettings
from prompts.insurance_policy import UNRENDERED_DOCUMENT_NOTE
from schemas.insurance_policy import AnalysisPrompt, UploadedDocument
from services.errors import ConfigError, ModelError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png"}


@lru_cache(maxsize=4)
def _build_client(api_key: str, timeout: float) -> OpenAI:
    # No retries anywhere in the pipeline
    return OpenAI(api_key=api_key, timeout=timeout, max_retries=0)


def get_client(settings: AnalyzerSettings) -> OpenAI:
    if not settings.openai_api_key:
        raise ConfigError(
            "OPENAI_API_KEY not configured. Set it in environment, .env file, or ~/.openai/api_key"
        )
    return _build_client(settings.openai_api_key, settings.request_timeout)


def image_mime_type(extension: str) -> str:
    return "image/png" if extension == "png" else "image/jpeg"


def build_user_content(prompt: AnalysisPrompt, document: UploadedDocument) -> list[dict]:
    """Images go to the vision model inline; everything else (PDFs included) is text only."""
    if document.extension in IMAGE_EXTENSIONS:
        img_base64 = base64.b64encode(document.content).decode("utf-8")
        data_url = f"data:{image_mime_type(document.extension)};base64,{img_base64}"
        return [
            {
                "type": "text",
                "text": prompt.user_instruction
            },
            {
                "type": "image_url",
                "image_url": {
                    "url": data_url,
                    "detail": "high"
                }
            }
        ]

    # PDF text extraction is left to the model
    return [
        {
            "type": "text",
            "text": f"{prompt.user_instruction}\n\n{UNRENDERED_DOCUMENT_NOTE}"
        }
    ]


def build_chat_request(prompt: AnalysisPrompt, document: UploadedDocument, settings: AnalyzerSettings) -> dict:
    return {
        "model": settings.model,
        "max_completion_tokens": settings.max_output_tokens,
        "temperature": settings.temperature,
        "messages": [
            {"role": "system", "content": prompt.system_instruction},
            {"role": "user", "content": build_user_content(prompt, document)},
        ],
    }


def invoke_model(client: OpenAI, prompt: AnalysisPrompt, document: UploadedDocument, settings: AnalyzerSettings) -> str:
    """Send one chat completion request and return the raw reply text."""
    request = build_chat_request(prompt, document, settings)
    try:
        response = client.chat.completions.create(**request)
    except APIStatusError as e:
        logger.error("OpenAI API error (%s): %s", e.status_code, e.response.text)
        raise ModelError(f"OpenAI API error: {e.status_code}", status=e.status_code) from e
    except APITimeoutError as e:
        logger.error("OpenAI API timed out after %ss", settings.request_timeout)
        raise ModelError("OpenAI API request timed out") from e
    except APIConnectionError as e:
        logger.error("OpenAI API unreachable: %s", e)
        raise ModelError("OpenAI API connection failed") from e

    response_text = response.choices[0].message.content or ""
    logger.info("OpenAI analysis received: %s", response_text[:200])
    return response_text
