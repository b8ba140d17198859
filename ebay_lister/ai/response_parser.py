"""
AI Reply Parsing
================
Pull the JSON payload out of a Gemini reply, repair an over-long title, and
validate the result against the listing schema.
"""

import json
import logging
import re
from typing import Any

from ..exceptions import ListingParseError
from ..schema.listing import TITLE_MAX_LENGTH, ListingData, validate_listing

logger = logging.getLogger(__name__)

JSON_FENCE_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)


def extract_json_text(raw_text: str) -> str:
    """Interior of the first ```json fence, or the whole text if there is none"""
    match = JSON_FENCE_RE.search(raw_text)
    return match.group(1) if match else raw_text


def parse_reply(raw_text: str) -> Any:
    """
    Parse the JSON candidate out of a reply.

    Raises:
        ListingParseError: the candidate is not valid JSON
    """
    content_text = extract_json_text(raw_text or "")
    try:
        return json.loads(content_text)
    except json.JSONDecodeError as e:
        raise ListingParseError(str(e), raw_text=raw_text) from e


def truncate_title(candidate: Any) -> Any:
    """Cut a string title longer than the eBay limit down to its first 80 characters"""
    if isinstance(candidate, dict):
        title = candidate.get("title")
        if isinstance(title, str) and len(title) > TITLE_MAX_LENGTH:
            logger.info("Truncating %d-character title to %d", len(title), TITLE_MAX_LENGTH)
            candidate["title"] = title[:TITLE_MAX_LENGTH]
    return candidate


def listing_from_reply(raw_text: str) -> ListingData:
    """
    Parse, repair and validate a Gemini reply.

    Raises:
        ListingParseError: no parseable JSON payload
        ListingValidationError: the payload does not match the schema
    """
    candidate = truncate_title(parse_reply(raw_text))
    return validate_listing(candidate)
