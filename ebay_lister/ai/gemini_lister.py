"""
Gemini Listing Client
=====================
Calls Google Gemini over its REST API to write an eBay listing from product
photos (with Google Search grounding) and to refine an existing listing.

The client only moves text: parsing and validating the reply is left to
``response_parser`` so that every failure surfaces as a typed error.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from ..config import Config
from ..exceptions import TransportError
from ..schema.listing import GroundingSource
from .listing_requests import GenerationRequest, RefinementRequest

logger = logging.getLogger(__name__)


@dataclass
class GenerationReply:
    """Raw reply text plus the web pages Gemini cited while researching"""
    text: str
    sources: List[GroundingSource] = field(default_factory=list)


def extract_reply_text(result: Dict[str, Any]) -> str:
    """Join the text parts of the first candidate"""
    try:
        parts = result["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        feedback = result.get("promptFeedback") if isinstance(result, dict) else None
        if feedback and feedback.get("blockReason"):
            raise TransportError(
                f"Gemini blocked the request: {feedback['blockReason']}",
                error_type="blocked",
            ) from e
        raise TransportError(
            f"Unexpected Gemini response structure: {e!r}",
            error_type="bad_response",
        ) from e

    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def extract_grounding_sources(result: Dict[str, Any]) -> List[GroundingSource]:
    """
    Collect grounding citations from the first candidate.

    Chunks without both a uri and a title are dropped.
    """
    try:
        chunks = result["candidates"][0].get("groundingMetadata", {}).get("groundingChunks") or []
    except (KeyError, IndexError, AttributeError, TypeError):
        return []

    sources = []
    for chunk in chunks:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if not web:
            continue
        uri, title = web.get("uri"), web.get("title")
        if isinstance(uri, str) and uri and isinstance(title, str) and title:
            sources.append(GroundingSource(uri=uri, title=title))
    return sources


class GeminiLister:
    """
    Listing writer backed by Google Gemini.

    One request per call, no retries unless ``max_retries`` (or
    GEMINI_MAX_RETRIES) is set, in which case rate limits, server errors and
    timeouts are retried with exponential backoff.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        base_delay: float = 2.0,
    ):
        """Initialize the client; raises ValueError when no API key is configured"""
        self.api_key = api_key or Config.GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY (or GOOGLE_AI_API_KEY / API_KEY) must be set")

        self.model = model or Config.GEMINI_MODEL
        base = (api_base or Config.GEMINI_API_BASE).rstrip("/")
        self.api_url = f"{base}/models/{self.model}:generateContent"
        self.timeout = timeout if timeout is not None else Config.GEMINI_TIMEOUT
        self.max_retries = max_retries if max_retries is not None else Config.GEMINI_MAX_RETRIES
        self.base_delay = base_delay

    def _retry_or_raise(self, attempt: int, error: TransportError) -> None:
        if attempt >= self.max_retries:
            raise error
        delay = self.base_delay * (2 ** attempt)
        logger.warning("%s Retrying in %ss (attempt %d/%d)", error, delay, attempt + 1, self.max_retries + 1)
        time.sleep(delay)

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        for attempt in range(self.max_retries + 1):
            try:
                response = requests.post(
                    f"{self.api_url}?key={self.api_key}",
                    headers={"Content-Type": "application/json"},
                    json=payload,
                    timeout=self.timeout,
                )
            except requests.Timeout:
                self._retry_or_raise(attempt, TransportError(
                    "Request to Gemini API timed out. Please check your internet connection.",
                    error_type="timeout",
                ))
                continue
            except requests.RequestException as e:
                raise TransportError(f"Error communicating with Gemini API: {e}", error_type="exception") from e

            if response.status_code == 200:
                try:
                    return response.json()
                except ValueError as e:
                    raise TransportError("Gemini API returned a non-JSON response.", 200, "bad_response") from e

            error_msg = response.text[:500]
            if response.status_code == 429:
                self._retry_or_raise(attempt, TransportError(
                    "Gemini API is currently overloaded. Please wait a minute and try again.",
                    429, "rate_limit",
                ))
            elif response.status_code >= 500:
                self._retry_or_raise(attempt, TransportError(
                    f"Gemini API is experiencing server issues ({response.status_code}). Please try again in a few minutes.",
                    response.status_code, "server_error",
                ))
            elif response.status_code == 400:
                raise TransportError(
                    f"Invalid request to Gemini API. Please check your photos are valid images. {error_msg}",
                    400, "bad_request",
                )
            elif response.status_code in (401, 403):
                raise TransportError(
                    "Gemini API key is invalid or doesn't have access. Please check GEMINI_API_KEY.",
                    response.status_code, "auth_error",
                )
            else:
                raise TransportError(
                    f"Gemini API error ({response.status_code}): {error_msg}",
                    response.status_code, "unknown",
                )

        raise TransportError("Failed after maximum retries", error_type="max_retries_exceeded")

    def generate_listing(self, request: GenerationRequest) -> GenerationReply:
        """Send a listing generation request; returns reply text and citations"""
        logger.info("Generating listing from %d image(s) with %s", len(request.images), self.model)
        result = self._post(request.to_payload())
        reply = GenerationReply(text=extract_reply_text(result), sources=extract_grounding_sources(result))
        logger.info("Gemini replied with %d characters and %d source(s)", len(reply.text), len(reply.sources))
        return reply

    def refine_listing(self, request: RefinementRequest) -> str:
        """Send a refinement request; only the reply text matters"""
        logger.info("Refining listing with %s", self.model)
        result = self._post(request.to_payload())
        return extract_reply_text(result)

    @classmethod
    def from_env(cls) -> "GeminiLister":
        """Create client from environment variables"""
        return cls()
