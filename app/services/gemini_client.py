"""
Gemini API Client - resume writing assistant.

Stateless proxy: a prompt and an action go in, generated text comes out.

Actions:
- improve   feedback on one resume section
- generate  write new resume content from a description
- analyze   review a whole resume (sent as JSON)
- anything else: the prompt is sent as-is

Request shape:
    POST {GEMINI_BASE_URL}/models/{GEMINI_MODEL}:generateContent
    x-goog-api-key: {GEMINI_API_KEY}
    {"contents": [{"role": "user", "parts": [{"text": system + "\\n\\n" + user}]}],
     "generationConfig": {...}}
"""

import json
from typing import Any, Dict, Optional, Tuple

import httpx
import structlog

from app.core.config import get_settings
from app.core.errors import GenerationFailed, MissingCredential, UpstreamError

settings = get_settings()
logger = structlog.get_logger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.4,
    "topK": 32,
    "topP": 1,
    "maxOutputTokens": 2048,
}


def build_prompt(action: Optional[str], prompt: str, resume: Optional[Dict[str, Any]] = None) -> Tuple[str, str]:
    """Return the (system, user) prompt pair for an action."""
    if action == "improve":
        return (
            "You are an expert resume writer and career coach. Your task is to provide specific, "
            "actionable feedback to improve a resume section.",
            f"Please review and provide improvements for this resume section:\n\n{prompt}\n\n"
            "Focus on making it more impactful, professional, and tailored for job applications."
        )
    if action == "generate":
        return (
            "You are an expert resume writer. Your task is to generate professional resume content "
            "based on the prompt.",
            f"Please generate the following resume content:\n\n{prompt}\n\n"
            "Make it professional, concise, and impactful."
        )
    if action == "analyze":
        return (
            "You are an expert resume analyst. Your task is to analyze a resume and provide feedback "
            "on its strengths and weaknesses.",
            f"Please analyze this resume and provide detailed feedback:\n\n{json.dumps(resume)}\n\n"
            "Evaluate the structure, content, impact, and suggestions for improvement."
        )
    return "", prompt


def build_request_body(system_prompt: str, user_prompt: str) -> dict:
    return {
        "contents": [
            {"role": "user", "parts": [{"text": system_prompt + "\n\n" + user_prompt}]}
        ],
        "generationConfig": dict(GENERATION_CONFIG),
    }


class GeminiClient:

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.transport = transport

    async def assist(self, prompt: str, action: Optional[str] = None, resume: Optional[Dict[str, Any]] = None) -> str:
        """
        Run one generation and return the first candidate's text.

        Raises:
            MissingCredential: no API key configured
            GenerationFailed: upstream produced no candidates
            UpstreamError: transport failure
        """
        if not self.api_key:
            raise MissingCredential("Missing Gemini API key. Set GEMINI_API_KEY in the environment.")

        system_prompt, user_prompt = build_prompt(action, prompt, resume)
        url = f"{self.base_url}/models/{self.model}:generateContent"

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=settings.http_timeout_seconds) as client:
                resp = await client.post(
                    url,
                    json=build_request_body(system_prompt, user_prompt),
                    headers={"x-goog-api-key": self.api_key}
                )
            result = resp.json()
        except httpx.HTTPError as e:
            logger.error("gemini_request_failed", error=str(e))
            raise UpstreamError(f"Gemini request failed: {e}")
        except ValueError:
            logger.error("gemini_non_json_response", status=resp.status_code)
            raise GenerationFailed("No content generated")

        candidates = result.get("candidates") if isinstance(result, dict) else None
        if not candidates:
            error = result.get("error") if isinstance(result, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            logger.warning("gemini_no_candidates", status=resp.status_code, upstream_error=message)
            raise GenerationFailed(message or "No content generated")

        try:
            return candidates[0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise GenerationFailed("No content generated")


_gemini_client: GeminiClient = None


def get_gemini_client() -> GeminiClient:
    """FastAPI dependency - shared Gemini client."""
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
