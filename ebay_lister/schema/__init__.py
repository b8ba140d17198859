"""Listing schema and validator"""

from .listing import (
    CONDITIONS,
    TITLE_MAX_LENGTH,
    GroundingSource,
    ItemSpecific,
    Listing,
    ListingData,
    PriceRecommendation,
    ShippingRecommendation,
    format_validation_issues,
    validate_listing,
)

__all__ = [
    "CONDITIONS",
    "TITLE_MAX_LENGTH",
    "GroundingSource",
    "ItemSpecific",
    "Listing",
    "ListingData",
    "PriceRecommendation",
    "ShippingRecommendation",
    "format_validation_issues",
    "validate_listing",
]
