"""Gemini prompts, request builders, client and reply parsing"""

from .gemini_lister import GeminiLister, GenerationReply
from .listing_requests import (
    ALLOWED_IMAGE_TYPES,
    GenerationRequest,
    ImageBlob,
    RefinementRequest,
    build_generation_request,
    build_refinement_request,
)
from .response_parser import extract_json_text, listing_from_reply, parse_reply, truncate_title

__all__ = [
    "ALLOWED_IMAGE_TYPES",
    "GeminiLister",
    "GenerationReply",
    "GenerationRequest",
    "ImageBlob",
    "RefinementRequest",
    "build_generation_request",
    "build_refinement_request",
    "extract_json_text",
    "listing_from_reply",
    "parse_reply",
    "truncate_title",
]
