"""
eBay Listing Assistant
======================
Turns product photos into a structured eBay listing with Google Gemini, then
lets you hand-edit it or refine it with plain-language instructions.

Main components:
- schema: Listing schema and validator
- import_export: eBay category CSV import
- ai: Gemini prompts, request builders, client and reply parsing
- storage: Persisted listing history
- session: Listing state machine (analyze / refine / edit / history)
- web: Flask JSON API
"""

from .exceptions import (
    InputError,
    ListingError,
    ListingParseError,
    ListingValidationError,
    SessionBusyError,
    TransportError,
)
from .schema import Listing, ListingData, validate_listing

# Session, client and web app imported on-demand:
# from ebay_lister.session import ListingSession
# from ebay_lister.ai import GeminiLister
# from ebay_lister.web import create_app

__version__ = "1.0.0"

__all__ = [
    "InputError",
    "ListingError",
    "ListingParseError",
    "ListingValidationError",
    "SessionBusyError",
    "TransportError",
    "Listing",
    "ListingData",
    "validate_listing",
]
