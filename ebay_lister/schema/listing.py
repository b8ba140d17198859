"""
Listing Schema
==============
The canonical structured eBay listing and the validator that turns an
untrusted, freshly parsed AI payload into one.

Nothing that has not passed through ``validate_listing`` should ever be
stored as the active listing or written to history.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, StrictFloat, StrictStr, ValidationError

from ..exceptions import ListingValidationError

TITLE_MAX_LENGTH = 80

CONDITIONS = ("New", "Used", "For parts or not working")

ListingConditionLiteral = Literal["New", "Used", "For parts or not working"]


class ItemSpecific(BaseModel):
    """One name/value pair, e.g. Color: Black (empty values are allowed)"""
    name: StrictStr
    value: StrictStr


class PriceRecommendation(BaseModel):
    price: StrictFloat = Field(allow_inf_nan=False)
    justification: StrictStr


class ShippingRecommendation(BaseModel):
    est_weight: StrictStr
    est_dimensions: StrictStr
    rec_service: StrictStr


class GroundingSource(BaseModel):
    """A web page Gemini consulted through Google Search"""
    uri: StrictStr
    title: StrictStr


class ListingData(BaseModel):
    """
    The listing fields the model is asked to produce.

    Unknown keys in the input are dropped, so only recognized fields make
    it past validation.
    """

    title: StrictStr = Field(max_length=TITLE_MAX_LENGTH)
    category_suggestion: StrictStr = Field(min_length=1)
    condition: ListingConditionLiteral
    description: StrictStr = Field(min_length=1)
    item_specifics: List[ItemSpecific]
    price_recommendation: PriceRecommendation
    shipping_recommendation: ShippingRecommendation

    def to_prompt_dict(self) -> Dict[str, Any]:
        """Model-facing fields only (no id, no sources)"""
        return self.model_dump(include=set(ListingData.model_fields))


class Listing(ListingData):
    """
    A committed listing: validated data plus runtime-only fields.

    ``id`` is assigned at commit time and ``sources`` come from the
    generation call's grounding metadata. Neither is ever sent to or
    expected from the model.
    """

    id: StrictStr
    sources: List[GroundingSource] = Field(default_factory=list)

    @classmethod
    def from_data(cls, data: ListingData, listing_id: str,
                  sources: Optional[List[GroundingSource]] = None) -> "Listing":
        return cls(**data.model_dump(), id=listing_id, sources=list(sources or []))

    def item_specifics_text(self) -> str:
        return "\n".join(f"{spec.name}: {spec.value}" for spec in self.item_specifics)

    def export_blocks(self) -> Dict[str, str]:
        """Plain-text blocks ready to paste into the eBay listing form"""
        return {
            "title": self.title,
            "category": self.category_suggestion,
            "condition": self.condition,
            "item_specifics": self.item_specifics_text(),
            "description": self.description,
            "price": f"${self.price_recommendation.price:.2f}",
            "shipping": (
                f"Weight: {self.shipping_recommendation.est_weight}\n"
                f"Dimensions: {self.shipping_recommendation.est_dimensions}\n"
                f"Service: {self.shipping_recommendation.rec_service}"
            ),
        }


def format_validation_issues(error: ValidationError) -> List[str]:
    """Turn pydantic errors into "Field '<dotted path>': <reason>" lines"""
    issues = []
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"])
        issues.append(f"Field '{path}': {item['msg']}")
    return issues


def validate_listing(candidate: Any) -> ListingData:
    """
    Validate a parsed AI payload against the listing schema.

    Args:
        candidate: Whatever json.loads produced from the AI reply

    Returns:
        ListingData with only the recognized fields

    Raises:
        ListingValidationError: one issue per violated field
    """
    try:
        return ListingData.model_validate(candidate)
    except ValidationError as e:
        raise ListingValidationError(format_validation_issues(e)) from e
