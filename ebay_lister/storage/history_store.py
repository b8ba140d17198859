"""
Listing History Storage
=======================
Keeps the last few committed listings in a small JSON file so they survive
restarts. The whole history lives under a single key of that document.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from ..config import Config
from ..schema.listing import Listing

logger = logging.getLogger(__name__)

HISTORY_KEY = "ebayListingHistory"
HISTORY_LIMIT = 10


class HistoryStore:
    """JSON-file history of committed listings, most recent first"""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or Config.LISTING_HISTORY_PATH)

    def load(self) -> List[Listing]:
        """
        Read saved history.

        A missing file means no history. Unreadable or invalid content is
        deleted and treated as empty instead of being raised.
        """
        if not self.path.exists():
            return []

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            entries = document[HISTORY_KEY]
            if not isinstance(entries, list):
                raise TypeError(f"{HISTORY_KEY} is not a list")
            listings = [Listing.model_validate(entry) for entry in entries]
        except (OSError, ValueError, KeyError, TypeError, ValidationError) as e:
            logger.warning("Failed to load listing history from %s, resetting it: %s", self.path, e)
            self._discard()
            return []

        return listings[:HISTORY_LIMIT]

    def save(self, listings: List[Listing]) -> None:
        """Write history, keeping at most HISTORY_LIMIT entries"""
        document = {HISTORY_KEY: [listing.model_dump(mode="json") for listing in listings[:HISTORY_LIMIT]]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to save listing history to %s: %s", self.path, e)

    def _discard(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Could not remove corrupt history file %s: %s", self.path, e)
