"""
Listing Pipeline Errors
=======================
Every failure of an analyze or refine cycle is raised as one of these.
None of them are retried automatically.
"""

from typing import List, Optional


class ListingError(Exception):
    """Base class for all listing pipeline errors"""


class InputError(ListingError):
    """Bad or missing input, rejected before any AI call is made"""


class SessionBusyError(ListingError):
    """An analyze or refine call is already in flight for this session"""


class TransportError(ListingError):
    """The Gemini call itself failed (network, HTTP status, response shape)"""

    def __init__(self, message: str, status_code: Optional[int] = None, error_type: str = "unknown"):
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type


class ListingParseError(ListingError):
    """The AI reply did not contain a parseable JSON payload"""

    def __init__(self, detail: str, raw_text: str = ""):
        super().__init__(f"Could not parse AI response as JSON: {detail}")
        self.detail = detail
        self.raw_text = raw_text


class ListingValidationError(ListingError):
    """
    The parsed payload does not match the listing schema.

    ``issues`` holds one "Field '<path>': <reason>" entry per violation;
    ``str(error)`` is ``context`` followed by those entries joined with "; ".
    """

    def __init__(self, issues: List[str], context: str = ""):
        super().__init__(context + "; ".join(issues))
        self.issues = list(issues)
        self.context = context
