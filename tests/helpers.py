import copy
import json

from ebay_lister.ai.gemini_lister import GenerationReply
from ebay_lister.schema.listing import GroundingSource

CLOSING = "I ship super fast and super safe\nDon't hesitate to message me with any questions or offers!"

SAMPLE_PAYLOAD = {
    "title": "Canon EF 50mm f/1.8 STM Prime Lens Black Full Frame Autofocus DSLR Used",
    "category_suggestion": "Cameras & Photo > Lenses & Filters > Lenses",
    "condition": "Used",
    "description": "Canon EF 50mm f/1.8 STM lens.\n\n* Stepping motor autofocus\n* 49mm filter thread\n\n" + CLOSING,
    "item_specifics": [
        {"name": "Focal Length", "value": "50mm"},
        {"name": "Mount", "value": "Canon EF"},
    ],
    "price_recommendation": {
        "price": 89.99,
        "justification": "Used copies sold for $85-$95 on eBay in the last 30 days.",
    },
    "shipping_recommendation": {
        "est_weight": "1 lb",
        "est_dimensions": "6 x 4 x 4 in",
        "rec_service": "USPS Ground Advantage",
    },
}

SAMPLE_SOURCES = [
    GroundingSource(uri="https://www.ebay.com/sch/i.html?_nkw=canon+50mm", title="eBay sold listings"),
    GroundingSource(uri="https://www.canon.com/ef-50mm", title="Canon EF 50mm f/1.8 STM"),
]


def make_payload(**overrides):
    payload = copy.deepcopy(SAMPLE_PAYLOAD)
    payload.update(overrides)
    return payload


def fenced(payload, prefix="Here is your listing:\n", suffix="\nGood luck!"):
    return f"{prefix}```json\n{json.dumps(payload, indent=2)}\n```{suffix}"


class FakeLister:
    """Stands in for GeminiLister; replies are queued, exceptions are raised"""

    model = "fake-gemini"

    def __init__(self, generation_replies=None, refinement_replies=None):
        self.generation_replies = list(generation_replies or [])
        self.refinement_replies = list(refinement_replies or [])
        self.generate_calls = []
        self.refine_calls = []
        self.during_call = None

    def _next(self, queue):
        if self.during_call is not None:
            self.during_call()
        reply = queue.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def generate_listing(self, request):
        self.generate_calls.append(request)
        reply = self._next(self.generation_replies)
        if isinstance(reply, str):
            return GenerationReply(text=reply, sources=list(SAMPLE_SOURCES))
        return reply

    def refine_listing(self, request):
        self.refine_calls.append(request)
        return self._next(self.refinement_replies)
