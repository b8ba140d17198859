"""
Listing Session
===============
Owns the active listing, the working inputs and the listing history, and
runs the analyze / refine cycles against them.

State machine::

    idle/ready/error --analyze--> loading --ok--> ready
                                          --fail--> error (listing cleared)
    ready/error ------refine----> refining --ok--> ready
                                           --fail--> error (listing kept)
    any --clear--> idle

Only one analyze or refine call may be in flight at a time. The Gemini call
runs outside the lock; every call is tagged with the session epoch it was
issued in, and its result is dropped if the session moved on meanwhile
(clear, a history load, or new images).
"""

import logging
import math
import threading
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..ai.gemini_lister import GeminiLister
from ..ai.listing_requests import (
    ImageBlob,
    build_generation_request,
    build_refinement_request,
    check_image_type,
)
from ..ai.response_parser import listing_from_reply
from ..exceptions import InputError, ListingError, ListingValidationError, SessionBusyError
from ..import_export.category_csv import CategoryFile, load_category_vocabulary
from ..schema.listing import (
    ItemSpecific,
    Listing,
    ListingData,
    PriceRecommendation,
    ShippingRecommendation,
)
from ..storage.history_store import HISTORY_LIMIT, HistoryStore

logger = logging.getLogger(__name__)

ANALYZE_VALIDATION_CONTEXT = "AI response failed validation. Details: "
REFINE_VALIDATION_CONTEXT = "Refined AI response failed validation. Details: "

EDITABLE_FIELDS = tuple(ListingData.model_fields)
TEXT_FIELDS = ("title", "category_suggestion", "condition", "description")


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    REFINING = "refining"
    ERROR = "error"


def _nested_edit(model, name: str, value: Any):
    if isinstance(value, model):
        return value
    if not isinstance(value, dict):
        raise InputError(f"'{name}' must be an object")
    missing = [field for field in model.model_fields if field not in value]
    if missing:
        raise InputError(f"'{name}' is missing: {', '.join(missing)}")
    return model.model_construct(**{field: value[field] for field in model.model_fields})


def _apply_edit(name: str, value: Any) -> Any:
    """
    Give an edit its model type without validating it.

    Only the shape is checked (strings stay strings, nested objects carry
    their keys, the price is a finite number); lengths, enum membership
    and emptiness are left to the user.
    """
    if name in TEXT_FIELDS:
        if not isinstance(value, str):
            raise InputError(f"'{name}' must be text")
        return value
    if name == "item_specifics":
        if not isinstance(value, list):
            raise InputError("'item_specifics' must be a list of name/value objects")
        return [_nested_edit(ItemSpecific, f"item_specifics.{i}", spec) for i, spec in enumerate(value)]
    if name == "price_recommendation":
        edit = _nested_edit(PriceRecommendation, name, value)
        price = edit.price
        if isinstance(price, bool) or not isinstance(price, (int, float)) or not math.isfinite(price):
            raise InputError("'price_recommendation.price' must be a number")
        return edit
    if name == "shipping_recommendation":
        return _nested_edit(ShippingRecommendation, name, value)
    return value


class ListingSession:
    """
    One user's listing workspace.

    Args:
        lister: Gemini client used for both calls
        history_store: Where history is loaded from and saved to
        clock: Seconds since the epoch, used to derive listing ids
    """

    def __init__(self, lister: GeminiLister, history_store: Optional[HistoryStore] = None,
                 clock: Callable[[], float] = time.time):
        self.lister = lister
        self.history_store = history_store or HistoryStore()
        self.clock = clock

        self._lock = threading.RLock()
        self._in_flight = False
        self._epoch = 0
        self._last_id_ms = 0

        self.state = SessionState.IDLE
        self.listing: Optional[Listing] = None
        self.error: Optional[str] = None
        self.images: List[ImageBlob] = []
        self.category_files: List[str] = []
        self.categories: List[str] = []
        self.history: List[Listing] = self.history_store.load()
        logger.info("Session started with %d listing(s) in history", len(self.history))

    # ------------------------------------------------------------------
    # Working inputs
    # ------------------------------------------------------------------

    def set_images(self, images: Sequence[ImageBlob]) -> None:
        """Replace the product photos; the current listing and error go away"""
        with self._lock:
            self._ensure_idle_call()
            for image in images:
                check_image_type(image)
            self.images = list(images)
            self.listing = None
            self.error = None
            self._epoch += 1
            self.state = SessionState.IDLE

    def load_category_files(self, files: Sequence[Tuple[str, CategoryFile]]) -> List[str]:
        """
        Load one upload batch of category files, replacing the vocabulary.

        Args:
            files: (filename, content) pairs

        Returns:
            The extracted category paths
        """
        categories = load_category_vocabulary([content for _, content in files])
        with self._lock:
            self.category_files = [name for name, _ in files]
            self.categories = categories
            self.error = None
            if self.state == SessionState.ERROR:
                self.state = SessionState.READY if self.listing else SessionState.IDLE
        return categories

    # ------------------------------------------------------------------
    # Analyze / refine
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._in_flight

    def _ensure_idle_call(self) -> None:
        if self._in_flight:
            raise SessionBusyError("A listing is already being generated. Please wait for it to finish.")

    def _next_id(self) -> str:
        ms = int(self.clock() * 1000)
        if ms <= self._last_id_ms:
            ms = self._last_id_ms + 1
        self._last_id_ms = ms
        return f"listing-{ms}"

    def _commit(self, epoch: int, data: ListingData, sources) -> Optional[Listing]:
        with self._lock:
            self._in_flight = False
            if epoch != self._epoch:
                logger.info("Discarding stale result from session epoch %d", epoch)
                return None
            listing = Listing.from_data(data, self._next_id(), sources)
            self.listing = listing
            self.error = None
            self.state = SessionState.READY
            self.history = [listing, *self.history][:HISTORY_LIMIT]
            self.history_store.save(self.history)
            logger.info("Committed %s (%d in history)", listing.id, len(self.history))
            return listing

    def _fail(self, epoch: int, message: str, clear_listing: bool) -> None:
        with self._lock:
            self._in_flight = False
            if epoch != self._epoch:
                logger.info("Ignoring stale failure from session epoch %d: %s", epoch, message)
                return
            self.error = message
            self.state = SessionState.ERROR
            if clear_listing:
                self.listing = None

    def analyze(self) -> Optional[Listing]:
        """
        Generate a new listing from the working photos and categories.

        The active listing is cleared when the call starts and stays cleared
        if it fails. History is only touched on success.

        Returns:
            The committed listing, or None if the result went stale

        Raises:
            InputError, SessionBusyError before any call is made;
            TransportError, ListingParseError, ListingValidationError after
        """
        with self._lock:
            self._ensure_idle_call()
            if not self.category_files:
                raise InputError("Please upload 1 or 2 eBay category CSV files.")
            request = build_generation_request(self.images, self.categories)
            self._epoch += 1
            epoch = self._epoch
            self._in_flight = True
            self.state = SessionState.LOADING
            self.listing = None
            self.error = None

        try:
            reply = self.lister.generate_listing(request)
            data = listing_from_reply(reply.text)
        except ListingValidationError as e:
            error = ListingValidationError(e.issues, context=ANALYZE_VALIDATION_CONTEXT)
            self._fail(epoch, str(error), clear_listing=True)
            raise error from e
        except ListingError as e:
            self._fail(epoch, str(e), clear_listing=True)
            raise
        except Exception as e:
            logger.exception("Unexpected error while generating listing")
            self._fail(epoch, str(e) or "An unknown error occurred.", clear_listing=True)
            raise

        return self._commit(epoch, data, reply.sources)

    def refine(self, instruction: str) -> Optional[Listing]:
        """
        Apply a natural-language change to the active listing.

        On success the replacement keeps the previous listing's sources. On
        failure the previous listing stays active, unchanged.

        Returns:
            The committed listing, or None if the result went stale
        """
        with self._lock:
            self._ensure_idle_call()
            base = self.listing
            request = build_refinement_request(base, instruction)
            epoch = self._epoch
            self._in_flight = True
            self.state = SessionState.REFINING
            self.error = None

        try:
            reply_text = self.lister.refine_listing(request)
            data = listing_from_reply(reply_text)
        except ListingValidationError as e:
            error = ListingValidationError(e.issues, context=REFINE_VALIDATION_CONTEXT)
            self._fail(epoch, str(error), clear_listing=False)
            raise error from e
        except ListingError as e:
            self._fail(epoch, str(e), clear_listing=False)
            raise
        except Exception as e:
            logger.exception("Unexpected error while refining listing")
            self._fail(epoch, str(e) or "An unknown error occurred during refinement.", clear_listing=False)
            raise

        return self._commit(epoch, data, base.sources)

    # ------------------------------------------------------------------
    # Local actions
    # ------------------------------------------------------------------

    def update_listing(self, changes: Dict[str, Any]) -> Listing:
        """
        Apply manual field edits to the active listing.

        Edits are trusted: they are not re-validated and not pushed to
        history.
        """
        with self._lock:
            if self.listing is None:
                raise InputError("There is no listing to edit.")
            unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
            if unknown:
                raise InputError(f"Unknown listing field(s): {', '.join(unknown)}")
            update = {name: _apply_edit(name, value) for name, value in changes.items()}
            self.listing = self.listing.model_copy(update=update)
            return self.listing

    def clear(self) -> None:
        """Drop working inputs, the active listing and the error (history stays)"""
        with self._lock:
            self._epoch += 1
            self.images = []
            self.category_files = []
            self.categories = []
            self.listing = None
            self.error = None
            self.state = SessionState.IDLE

    def clear_history(self) -> None:
        with self._lock:
            self.history = []
            self.history_store.save(self.history)

    def load_from_history(self, listing_id: str) -> Optional[Listing]:
        """Make a history entry the active listing; unknown ids are ignored"""
        with self._lock:
            listing = next((item for item in self.history if item.id == listing_id), None)
            if listing is None:
                return None
            self._epoch += 1
            self.listing = listing
            self.error = None
            self.state = SessionState.READY
            return listing

    def snapshot(self) -> Dict[str, Any]:
        """Plain view of the session for clients"""
        with self._lock:
            if self.state in (SessionState.LOADING, SessionState.REFINING) and self.listing is None:
                display = "loading"
            elif self.error:
                display = "error"
            elif self.listing is not None:
                display = "listing"
            else:
                display = "empty"

            return {
                "state": self.state.value,
                "display": display,
                "busy": self._in_flight,
                "error": self.error,
                "listing": self.listing.model_dump(mode="json", warnings=False) if self.listing else None,
                "image_count": len(self.images),
                "category_files": list(self.category_files),
                "category_count": len(self.categories),
                "can_analyze": bool(self.images) and bool(self.category_files) and not self._in_flight,
                "can_refine": self.listing is not None and not self._in_flight,
                "history": [
                    {"id": item.id, "title": item.title} for item in self.history
                ],
            }
